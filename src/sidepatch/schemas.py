from enum import Enum
from pydantic import BaseModel, Field
from typing import Annotated, List, Optional, Literal, Union


DEFAULT_EXTENSION_POINTS = [
    "com.apple.fileprovider-nonui",
    "com.apple.fileprovider",
    "com.apple.fileprovider-replicated",
]


class PatchOutcome(str, Enum):
    """Outcome of a single patch operation on one document."""
    APPLIED = "applied"
    ALREADY_APPLIED = "already_applied"
    NOT_FOUND = "not_found"
    MALFORMED = "malformed"
    IO_ERROR = "io_error"

    @property
    def status(self) -> str:
        """Collapse the outcome into the applied / skipped / failed tri-state."""
        if self is PatchOutcome.APPLIED:
            return "applied"
        if self in (PatchOutcome.ALREADY_APPLIED, PatchOutcome.NOT_FOUND):
            return "skipped"
        return "failed"

    @property
    def fatal(self) -> bool:
        return self is PatchOutcome.IO_ERROR


class FunctionLocation(BaseModel):
    """
    Where a function declaration and its body live in a document.
    Offsets are character offsets into the in-memory text.
    """
    function_name: str
    line_start: int  # Offset of the first character of the declaration line
    brace_open: int  # Offset of the '{' opening the body
    indent: str  # Leading whitespace of the declaration line
    brace_close: Optional[int] = None  # Filled in once braces are matched


class PatchResult(BaseModel):
    """Result of applying one operation to one document."""
    operation: str
    target: str
    outcome: PatchOutcome
    message: Optional[str] = None

    @property
    def status(self) -> str:
        return self.outcome.status

    @property
    def changed(self) -> bool:
        return self.outcome is PatchOutcome.APPLIED


# Patch operations. Each carries a `kind` discriminator so recipes can be
# stored as plain JSON and validated on load.

class PatchTarget(BaseModel):
    """Replace the body of a named function."""
    kind: Literal["replace_body"] = "replace_body"
    function_name: str
    replacement_body: List[str]
    idempotency_marker: Optional[str] = None  # Defaults to PATCH_CONFIG["default_marker"]
    declaration: Optional[str] = None  # Regex fragment preceding the name
    indent_unit: Optional[str] = None

    @property
    def target(self) -> str:
        return self.function_name


class GuardInsertion(BaseModel):
    """Insert an early return at the top of a named function."""
    kind: Literal["insert_guard"] = "insert_guard"
    function_name: str
    condition_expression: str
    declaration: Optional[str] = None
    style: Literal["swift", "c"] = "swift"
    return_value: Optional[str] = None
    indent_unit: Optional[str] = None

    @property
    def target(self) -> str:
        return self.function_name


class CallSiteGuard(BaseModel):
    """Wrap a single call-site line in an if block."""
    kind: Literal["wrap_call_site"] = "wrap_call_site"
    call_site: str
    condition_expression: str
    indent_unit: Optional[str] = None

    @property
    def target(self) -> str:
        return self.call_site


class ProbeDefinition(BaseModel):
    """Append a capability probe class to the end of a document."""
    kind: Literal["append_probe"] = "append_probe"
    class_name: str = "FileProviderAvailability"
    property_name: str = "isAvailable"
    extension_points: List[str] = Field(default_factory=lambda: list(DEFAULT_EXTENSION_POINTS), min_length=1)

    @property
    def target(self) -> str:
        return self.class_name


class LineComment(BaseModel):
    """Disable a statement by commenting out every line that starts with it."""
    kind: Literal["comment_out"] = "comment_out"
    statement: str
    note: Optional[str] = None

    @property
    def target(self) -> str:
        return self.statement


class PackagePin(BaseModel):
    """Pin a branch-tracking Swift package reference in project.pbxproj."""
    kind: Literal["pin_package"] = "pin_package"
    package: str
    minimum_version: str

    @property
    def target(self) -> str:
        return self.package


class TextSubstitution(BaseModel):
    """Replace a literal piece of text."""
    kind: Literal["substitute"] = "substitute"
    old: str
    new: str

    @property
    def target(self) -> str:
        return self.old


PatchOperation = Annotated[
    Union[
        PatchTarget,
        GuardInsertion,
        CallSiteGuard,
        ProbeDefinition,
        LineComment,
        PackagePin,
        TextSubstitution,
    ],
    Field(discriminator="kind"),
]


class FilePatch(BaseModel):
    """Ordered operations against one file, relative to a source root."""
    path: str
    operations: List[PatchOperation]
    description: Optional[str] = None


class Recipe(BaseModel):
    """A named, ordered set of file patches applied to a checkout."""
    name: str
    description: Optional[str] = None
    files: List[FilePatch]


class FilePatchReport(BaseModel):
    """Everything that happened to one file during a patch run."""
    file_path: str
    results: List[PatchResult] = Field(default_factory=list)
    written: bool = False
    dry_run: bool = False
    discarded: bool = False  # Changes dropped because an operation hit malformed input
    backup_path: Optional[str] = None
    diff: Optional[str] = None

    @property
    def changed(self) -> bool:
        return any(r.changed for r in self.results)


class RecipeReport(BaseModel):
    """Result of applying a whole recipe to a source root."""
    recipe: str
    root: str
    files: List[FilePatchReport] = Field(default_factory=list)

    def count(self, outcome: PatchOutcome) -> int:
        return sum(1 for f in self.files for r in f.results if r.outcome is outcome)
