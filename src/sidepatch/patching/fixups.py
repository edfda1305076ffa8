"""
Build-tree fix-ups that are not tied to a function body.

Disabling a statement, pinning a Swift package in project.pbxproj and
literal text substitution. All of them are safe to run repeatedly.
"""

import re
from typing import Tuple

from sidepatch.logging_config import logger
from sidepatch.schemas import (
    LineComment,
    PackagePin,
    TextSubstitution,
    PatchResult,
    PatchOutcome,
)


def comment_out(text: str, op: LineComment) -> Tuple[str, PatchResult]:
    """
    Comment out every line that starts with the statement.

    A line already reading `// <statement>` counts as done.
    """
    live = re.compile(rf"^([ \t]*){re.escape(op.statement)}", re.M)
    disabled = re.compile(rf"^[ \t]*//[ \t]*{re.escape(op.statement)}", re.M)
    suffix = f" // {op.note}" if op.note else ""

    new_text, count = live.subn(lambda m: f"{m.group(1)}// {op.statement}{suffix}", text)
    if count:
        logger.info(f"Commented out {count} occurrence(s) of '{op.statement}'")
        return new_text, _result("comment_out", op.statement, PatchOutcome.APPLIED)

    if disabled.search(text):
        return text, _result("comment_out", op.statement, PatchOutcome.ALREADY_APPLIED)

    return text, _result(
        "comment_out", op.statement, PatchOutcome.NOT_FOUND, f"Statement '{op.statement}' not found"
    )


_BRANCH_RE = re.compile(r"branch = [^;]*;")
_KIND_BRANCH_RE = re.compile(r"kind = branch;")
_MIN_VERSION_RE = re.compile(r"minimumVersion = [0-9.][0-9.]*;")


def _pin_line(line: str, version: str) -> str:
    line = _BRANCH_RE.sub("kind = upToNextMajorVersion;", line)
    line = _KIND_BRANCH_RE.sub(f"minimumVersion = {version};", line)
    line = _MIN_VERSION_RE.sub(f"minimumVersion = {version};", line)
    return line


def pin_package(text: str, op: PackagePin) -> Tuple[str, PatchResult]:
    """
    Replace branch tracking with a version requirement for one package.

    Each line naming the package reference opens a range that ends at the
    next line containing `};`. Lines in the range are rewritten.
    """
    reference = f'XCRemoteSwiftPackageReference "{op.package}"'
    if reference not in text:
        return text, _result(
            "pin_package", op.package, PatchOutcome.NOT_FOUND, f"No package reference '{op.package}'"
        )

    lines = text.splitlines(keepends=True)
    i = 0
    while i < len(lines):
        if reference not in lines[i]:
            i += 1
            continue
        lines[i] = _pin_line(lines[i], op.minimum_version)
        i += 1
        while i < len(lines):
            lines[i] = _pin_line(lines[i], op.minimum_version)
            closed = "};" in lines[i]
            i += 1
            if closed:
                break

    new_text = "".join(lines)
    if new_text == text:
        return text, _result("pin_package", op.package, PatchOutcome.ALREADY_APPLIED)

    logger.info(f"Pinned {op.package} to {op.minimum_version} (up to next major)")
    return new_text, _result("pin_package", op.package, PatchOutcome.APPLIED)


def substitute(text: str, op: TextSubstitution) -> Tuple[str, PatchResult]:
    """Replace every occurrence of a literal string."""
    already = op.new in text and (op.old in op.new or op.old not in text)
    if already:
        return text, _result("substitute", op.old, PatchOutcome.ALREADY_APPLIED)
    if op.old in text:
        logger.info(f"Substituted {text.count(op.old)} occurrence(s)")
        return text.replace(op.old, op.new), _result("substitute", op.old, PatchOutcome.APPLIED)
    return text, _result("substitute", op.old, PatchOutcome.NOT_FOUND, "Text not found")


def _result(operation: str, target: str, outcome: PatchOutcome, message: str = None) -> PatchResult:
    return PatchResult(operation=operation, target=target, outcome=outcome, message=message)
