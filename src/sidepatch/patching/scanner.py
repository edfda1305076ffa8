"""
BraceScanner: brace matching that ignores strings and comments.

A minimal lexer for C-family and Swift-like source. It only knows enough
to tell structural braces apart from braces inside literals and comments.
"""

from enum import Enum
from typing import Optional

from sidepatch.logging_config import logger


class ScanState(Enum):
    NORMAL = "normal"
    LINE_COMMENT = "line_comment"
    BLOCK_COMMENT = "block_comment"
    STRING = "string"


class BraceScanner:
    """
    Find the brace that closes a block, one character at a time.

    States are mutually exclusive. From NORMAL, `//`, `/*` and `"` enter
    LINE_COMMENT, BLOCK_COMMENT and STRING. A newline, `*/` and an unescaped
    `"` respectively return to NORMAL. Inside STRING a backslash consumes
    the following character with it.
    """

    def __init__(self, text: str):
        self.text = text

    def match(self, open_index: int) -> Optional[int]:
        """
        Return the index of the brace matching the one at open_index.

        Args:
            open_index: Offset of an opening '{'

        Returns:
            Offset of the matching '}' or None if input ends first
        """
        text = self.text
        length = len(text)
        if open_index < 0 or open_index >= length or text[open_index] != "{":
            raise ValueError(f"No opening brace at offset {open_index}")

        state = ScanState.NORMAL
        depth = 0
        i = open_index

        while i < length:
            ch = text[i]
            nxt = text[i + 1] if i + 1 < length else ""

            if state is ScanState.LINE_COMMENT:
                if ch == "\n":
                    state = ScanState.NORMAL
                i += 1
                continue

            if state is ScanState.BLOCK_COMMENT:
                if ch == "*" and nxt == "/":
                    state = ScanState.NORMAL
                    i += 2
                    continue
                i += 1
                continue

            if state is ScanState.STRING:
                if ch == "\\":
                    i += 2
                    continue
                if ch == "\"":
                    state = ScanState.NORMAL
                i += 1
                continue

            # NORMAL
            if ch == "/" and nxt == "/":
                state = ScanState.LINE_COMMENT
                i += 2
                continue
            if ch == "/" and nxt == "*":
                state = ScanState.BLOCK_COMMENT
                i += 2
                continue
            if ch == "\"":
                state = ScanState.STRING
                i += 1
                continue

            if ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return i
            i += 1

        logger.debug(f"Reached end of input in state {state.value} at depth {depth}")
        return None


def find_matching_brace(text: str, open_index: int) -> Optional[int]:
    """Convenience wrapper around BraceScanner.match."""
    return BraceScanner(text).match(open_index)
