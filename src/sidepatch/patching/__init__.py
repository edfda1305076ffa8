"""
Patching package: text-level source patches for third-party checkouts.

Locates functions by declaration pattern and name, matches their braces
with a string- and comment-aware scanner, and splices new text in.
"""

from .facade import PatchFacade
from .scanner import BraceScanner, ScanState, find_matching_brace
from .locator import FunctionLocator
from .rewriter import BodyRewriter
from .guard import GuardInserter
from .probe import ProbeSynthesizer
from .editor import SourceEditor
from .fixups import comment_out, pin_package, substitute
from .config import PATCH_CONFIG

__all__ = [
    # Main facade
    "PatchFacade",

    # Components
    "BraceScanner",
    "ScanState",
    "find_matching_brace",
    "FunctionLocator",
    "BodyRewriter",
    "GuardInserter",
    "ProbeSynthesizer",
    "SourceEditor",
    "comment_out",
    "pin_package",
    "substitute",

    # Configuration
    "PATCH_CONFIG",
]
