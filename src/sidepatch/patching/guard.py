"""
GuardInserter: Early-return guards and guarded call sites.

Two related splices:
- insert_guard puts "if the condition is false, return" right after a
  function's opening brace.
- wrap_call_site replaces one statement line with a 3-line if block.
"""

from typing import List, Optional, Tuple

from sidepatch.logging_config import logger
from sidepatch.schemas import GuardInsertion, CallSiteGuard, PatchResult, PatchOutcome
from .locator import FunctionLocator, INDENT_RE, line_ending_at, line_number
from .config import PATCH_CONFIG


class GuardInserter:
    """Insert condition guards into source documents."""

    def __init__(self, locator: Optional[FunctionLocator] = None, config: Optional[dict] = None):
        self.config = {**PATCH_CONFIG, **(config or {})}
        self.locator = locator or FunctionLocator(self.config["default_declaration"])

    def _unit(self, indent_unit: Optional[str]) -> str:
        return indent_unit if indent_unit is not None else self.config["indent_unit"]

    def guard_signature(self, guard: GuardInsertion) -> str:
        """The opening line of a guard, used to detect a previous insertion."""
        if guard.style == "c":
            return f"if (!({guard.condition_expression})) {{"
        return f"guard {guard.condition_expression} else {{"

    def render_guard(self, guard: GuardInsertion, inner_indent: str) -> List[str]:
        unit = self._unit(guard.indent_unit)
        if guard.style == "c":
            ret = f"return {guard.return_value};" if guard.return_value else "return;"
        else:
            ret = f"return {guard.return_value}" if guard.return_value else "return"
        return [
            inner_indent + self.guard_signature(guard),
            inner_indent + unit + ret,
            inner_indent + "}",
        ]

    def insert_guard(self, text: str, guard: GuardInsertion) -> Tuple[str, PatchResult]:
        """
        Insert an early-return guard at the top of a function body.

        Args:
            text: Current document text
            guard: Guard descriptor

        Returns:
            (new_text, result)
        """
        name = guard.function_name
        signature = self.guard_signature(guard)
        if signature in text:
            logger.debug(f"Guard '{signature}' already present")
            return text, self._result("insert_guard", name, PatchOutcome.ALREADY_APPLIED)

        location, malformed = self.locator.locate_body(text, name, guard.declaration)
        if malformed:
            return text, self._result(
                "insert_guard", name, PatchOutcome.MALFORMED, f"Unbalanced braces in body of '{name}'"
            )
        if location is None:
            return text, self._result(
                "insert_guard", name, PatchOutcome.NOT_FOUND, f"Function '{name}' not found"
            )

        inner_indent = location.indent + self._unit(guard.indent_unit)
        newline = line_ending_at(text, location.brace_open)
        block = newline + "".join(line + newline for line in self.render_guard(guard, inner_indent))
        insert_at = location.brace_open + 1
        new_text = text[:insert_at] + block + text[insert_at:]
        logger.info(f"Inserted guard on '{name}' at line {line_number(text, location.line_start)}")
        return new_text, self._result("insert_guard", name, PatchOutcome.APPLIED)

    def wrap_signature(self, site: CallSiteGuard) -> str:
        return f"if ({site.condition_expression})"

    def wrap_call_site(self, text: str, site: CallSiteGuard) -> Tuple[str, PatchResult]:
        """
        Replace the first line containing a call site with a guarded block.

        Args:
            text: Current document text
            site: Call-site descriptor

        Returns:
            (new_text, result)
        """
        if self.wrap_signature(site) in text:
            return text, self._result("wrap_call_site", site.call_site, PatchOutcome.ALREADY_APPLIED)

        span = self.locator.find_line(text, site.call_site)
        if span is None:
            return text, self._result(
                "wrap_call_site", site.call_site, PatchOutcome.NOT_FOUND,
                f"Call site '{site.call_site}' not found"
            )

        line_start, line_end = span
        line = text[line_start:line_end]
        eol = "\r" if line.endswith("\r") else ""
        line = line.rstrip("\r")
        indent = INDENT_RE.match(line).group(0)
        unit = self._unit(site.indent_unit)

        block = (
            f"{indent}{self.wrap_signature(site)} {{{eol}\n"
            f"{indent}{unit}{line.strip()}{eol}\n"
            f"{indent}}}{eol}"
        )
        new_text = text[:line_start] + block + text[line_end:]
        logger.info(f"Wrapped call site '{site.call_site}'")
        return new_text, self._result("wrap_call_site", site.call_site, PatchOutcome.APPLIED)

    def _result(
        self,
        operation: str,
        target: str,
        outcome: PatchOutcome,
        message: Optional[str] = None
    ) -> PatchResult:
        return PatchResult(operation=operation, target=target, outcome=outcome, message=message)
