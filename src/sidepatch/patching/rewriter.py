"""
BodyRewriter: Replace a function body in place.

The rewrite is a text splice between the matched braces. The idempotency
marker is written as the first line of the new body.
"""

from typing import Optional, Tuple

from sidepatch.logging_config import logger
from sidepatch.schemas import PatchTarget, PatchResult, PatchOutcome
from .locator import FunctionLocator, line_ending_at, line_number
from .config import PATCH_CONFIG


class BodyRewriter:
    """Rewrite function bodies by name."""

    OPERATION = "replace_body"

    def __init__(self, locator: Optional[FunctionLocator] = None, config: Optional[dict] = None):
        self.config = {**PATCH_CONFIG, **(config or {})}
        self.locator = locator or FunctionLocator(self.config["default_declaration"])

    def marker_line(self, target: PatchTarget) -> str:
        marker = target.idempotency_marker or self.config["default_marker"]
        return f"// {marker}"

    def render_body(self, target: PatchTarget, indent: str, newline: str = "\n") -> str:
        """Indent the marker and replacement lines one unit past the declaration."""
        unit = target.indent_unit if target.indent_unit is not None else self.config["indent_unit"]
        inner_indent = indent + unit
        lines = [self.marker_line(target)] + list(target.replacement_body)
        return newline.join(inner_indent + line for line in lines)

    def rewrite(self, text: str, target: PatchTarget) -> Tuple[str, PatchResult]:
        """
        Apply one PatchTarget to a document.

        The marker is looked for inside the located body only, not anywhere in
        the document, so several functions in one file can share a marker.
        Inserted lines take the newline style of the line holding the opening
        brace; text outside the braces is left byte for byte.

        Args:
            text: Current document text
            target: Body replacement descriptor

        Returns:
            (new_text, result). new_text is text itself unless outcome is APPLIED.
        """
        name = target.function_name
        location, malformed = self.locator.locate_body(text, name, target.declaration)

        if malformed:
            return text, self._result(
                target, PatchOutcome.MALFORMED, f"Unbalanced braces in body of '{name}'"
            )
        if location is None:
            return text, self._result(target, PatchOutcome.NOT_FOUND, f"Function '{name}' not found")

        marker = target.idempotency_marker or self.config["default_marker"]
        body = text[location.brace_open + 1:location.brace_close]
        if marker in body:
            logger.debug(f"'{name}' already carries marker {marker}")
            return text, self._result(target, PatchOutcome.ALREADY_APPLIED)

        newline = line_ending_at(text, location.brace_open)
        new_text = (
            text[:location.brace_open + 1]
            + newline
            + self.render_body(target, location.indent, newline)
            + newline
            + location.indent
            + "}"
            + text[location.brace_close + 1:]
        )
        logger.info(f"Replaced body of '{name}' at line {line_number(text, location.line_start)}")
        return new_text, self._result(target, PatchOutcome.APPLIED)

    def _result(self, target: PatchTarget, outcome: PatchOutcome, message: Optional[str] = None) -> PatchResult:
        return PatchResult(
            operation=self.OPERATION,
            target=target.function_name,
            outcome=outcome,
            message=message,
        )
