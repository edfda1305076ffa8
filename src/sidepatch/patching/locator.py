"""
FunctionLocator: Map function names to declaration and body offsets.

Text-level counterpart of a symbol locator: a declaration pattern followed
by the exact name, then the first '{' after it.
"""

import re
from typing import Optional, Tuple

from sidepatch.logging_config import logger
from sidepatch.exceptions import ConfigError
from sidepatch.schemas import FunctionLocation
from .scanner import BraceScanner
from .config import PATCH_CONFIG

INDENT_RE = re.compile(r"[ \t]*")


def line_ending_at(text: str, index: int) -> str:
    """
    Newline style of the line holding index.

    Falls back to the previous line when index sits on an unterminated last
    line, and to LF when the document has no newline at all.
    """
    end = text.find("\n", index)
    if end == -1:
        end = text.rfind("\n", 0, index)
    if end > 0 and text[end - 1] == "\r":
        return "\r\n"
    return "\n"


def line_number(text: str, offset: int) -> int:
    """1-based line number of an offset."""
    return text.count("\n", 0, offset) + 1


class FunctionLocator:
    """
    Locate function declarations by name in a source document.

    Matching is read-only. A missing declaration is a normal result (None),
    not an error, so callers can skip patches that no longer apply upstream.
    """

    def __init__(self, default_declaration: Optional[str] = None):
        self.default_declaration = default_declaration or PATCH_CONFIG["default_declaration"]

    def pattern_for(self, function_name: str, declaration: Optional[str] = None) -> "re.Pattern[str]":
        """
        Build the declaration regex for a function name.

        The fragment may not start in the middle of a word, so `public func`
        does not match `nonpublic func`.

        Raises:
            ConfigError: If the declaration fragment is not a valid regex
        """
        decl = declaration or self.default_declaration
        try:
            return re.compile(rf"(?<!\w){decl}[ \t]+{re.escape(function_name)}\b")
        except re.error as e:
            raise ConfigError(f"Invalid declaration pattern {decl!r}: {e}") from e

    def locate(
        self,
        text: str,
        function_name: str,
        declaration: Optional[str] = None
    ) -> Optional[FunctionLocation]:
        """
        Find a function's declaration line and opening brace.

        Args:
            text: Full document text
            function_name: Exact function identifier
            declaration: Optional regex fragment preceding the name

        Returns:
            FunctionLocation (without brace_close) or None if not found
        """
        pattern = self.pattern_for(function_name, declaration)
        matches = list(pattern.finditer(text))
        if not matches:
            logger.debug(f"No declaration of '{function_name}' matched {pattern.pattern!r}")
            return None
        if len(matches) > 1:
            logger.warning(
                f"'{function_name}' is declared {len(matches)} times, patching the first"
            )
        m = matches[0]

        line_start = text.rfind("\n", 0, m.start()) + 1
        indent = INDENT_RE.match(text, line_start).group(0)

        brace_open = text.find("{", m.end())
        if brace_open == -1:
            logger.debug(f"Declaration of '{function_name}' has no body")
            return None

        return FunctionLocation(
            function_name=function_name,
            line_start=line_start,
            brace_open=brace_open,
            indent=indent,
        )

    def locate_body(
        self,
        text: str,
        function_name: str,
        declaration: Optional[str] = None
    ) -> Tuple[Optional[FunctionLocation], bool]:
        """
        Locate a function and match its closing brace.

        Returns:
            (location, malformed). location is None when the function is absent
            or its body never closes; malformed distinguishes the two.
        """
        location = self.locate(text, function_name, declaration)
        if location is None:
            return None, False

        brace_close = BraceScanner(text).match(location.brace_open)
        if brace_close is None:
            logger.warning(
                f"Body of '{function_name}' opened at offset {location.brace_open} never closes"
            )
            return None, True

        location.brace_close = brace_close
        return location, False

    def find_line(self, text: str, needle: str) -> Optional[Tuple[int, int]]:
        """
        Find the first line containing a literal needle.

        Returns:
            (line_start, line_end) offsets, line_end excluding the newline
        """
        idx = text.find(needle)
        if idx == -1:
            return None
        line_start = text.rfind("\n", 0, idx) + 1
        line_end = text.find("\n", idx)
        if line_end == -1:
            line_end = len(text)
        return line_start, line_end
