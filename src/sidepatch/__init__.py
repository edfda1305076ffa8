"""
sidepatch - Source patch engine for sideload builds

Locates functions in C-family and Swift sources and rewrites them with
idempotent, atomic text splices.
"""

__version__ = "1.0.0"

from sidepatch.schemas import (
    PatchOutcome,
    PatchResult,
    PatchTarget,
    GuardInsertion,
    CallSiteGuard,
    ProbeDefinition,
    Recipe,
)
from sidepatch.patching import PatchFacade, BraceScanner, find_matching_brace
from sidepatch.recipes import BUILTIN_RECIPES, load_recipe

__all__ = [
    "__version__",
    "PatchOutcome",
    "PatchResult",
    "PatchTarget",
    "GuardInsertion",
    "CallSiteGuard",
    "ProbeDefinition",
    "Recipe",
    "PatchFacade",
    "BraceScanner",
    "find_matching_brace",
    "BUILTIN_RECIPES",
    "load_recipe",
]
