"""
PatchFacade: Orchestrate patch operations over files and checkouts.

Main entry point used by the CLI and by wrapper scripts.
"""

from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from sidepatch.logging_config import logger
from sidepatch.schemas import (
    FilePatchReport,
    PatchOperation,
    PatchOutcome,
    PatchResult,
    Recipe,
    RecipeReport,
)

from .locator import FunctionLocator
from .rewriter import BodyRewriter
from .guard import GuardInserter
from .probe import ProbeSynthesizer
from .editor import SourceEditor
from .fixups import comment_out, pin_package, substitute
from .config import PATCH_CONFIG

Handler = Callable[[str, PatchOperation], Tuple[str, PatchResult]]


class PatchFacade:
    """
    Main facade for source patching.

    Per file, the pipeline is:
    1. Read the document once (SourceEditor)
    2. Run each operation on the in-memory text, in order
    3. Back up the original if requested (SourceEditor)
    4. Write once, atomically, if any operation applied (SourceEditor)
    """

    def __init__(self, config: Optional[dict] = None):
        """
        Initialize patch facade.

        Args:
            config: Optional config overrides
        """
        self.config = {**PATCH_CONFIG, **(config or {})}

        locator = FunctionLocator(self.config["default_declaration"])
        self.editor = SourceEditor(self.config)
        self.rewriter = BodyRewriter(locator, self.config)
        self.guard = GuardInserter(locator, self.config)
        self.probe = ProbeSynthesizer()

        self._handlers: Dict[str, Handler] = {
            "replace_body": self.rewriter.rewrite,
            "insert_guard": self.guard.insert_guard,
            "wrap_call_site": self.guard.wrap_call_site,
            "append_probe": self.probe.append,
            "comment_out": comment_out,
            "pin_package": pin_package,
            "substitute": substitute,
        }

        logger.debug("PatchFacade initialized")

    def apply_text(
        self,
        text: str,
        operations: Sequence[PatchOperation]
    ) -> Tuple[str, List[PatchResult]]:
        """
        Apply operations to in-memory text, cumulatively and in order.

        Returns:
            (final_text, results) with one result per operation
        """
        results = []
        for op in operations:
            text, result = self._handlers[op.kind](text, op)
            if result.outcome is PatchOutcome.MALFORMED:
                logger.warning(f"{result.operation} on '{result.target}': {result.message}")
            elif result.outcome is PatchOutcome.NOT_FOUND:
                logger.warning(f"{result.operation} skipped: {result.message}")
            results.append(result)
        return text, results

    def apply_file(
        self,
        file_path: str,
        operations: Sequence[PatchOperation],
        dry_run: bool = False,
        backup: Optional[bool] = None
    ) -> FilePatchReport:
        """
        Apply operations to one file with a single read and at most one write.

        If any operation hits malformed input the whole file is left
        untouched, so a document is never partially patched.

        Args:
            file_path: Path to source file
            operations: Operations to apply in order
            dry_run: If True, compute results and diff but don't write
            backup: Override config["backup_enabled"]

        Returns:
            FilePatchReport

        Raises:
            PatchIOError: If the file cannot be read, backed up or written
        """
        logger.info(f"Patching {file_path} ({len(operations)} operation(s))")
        original = self.editor.read(file_path)
        patched, results = self.apply_text(original, operations)

        report = FilePatchReport(file_path=file_path, results=results, dry_run=dry_run)
        if patched == original:
            return report

        if any(r.outcome is PatchOutcome.MALFORMED for r in results):
            logger.warning(f"Malformed input in {file_path}, leaving the file untouched")
            report.discarded = True
            return report

        if self.config["diff_enabled"]:
            report.diff = self.editor.generate_unified_diff(file_path, original, patched)

        if dry_run:
            logger.info(f"Dry run: {file_path} not written")
            return report

        if self.config["backup_enabled"] if backup is None else backup:
            report.backup_path = self.editor.create_backup(file_path)

        self.editor.write(file_path, patched)
        report.written = True
        return report

    def apply_recipe(
        self,
        root: str,
        recipe: Recipe,
        dry_run: bool = False,
        backup: Optional[bool] = None
    ) -> RecipeReport:
        """
        Apply every file patch of a recipe under a source root.

        Files that do not exist are reported as not_found and skipped.
        I/O errors on existing files propagate and stop the run.
        """
        root_path = Path(root)
        report = RecipeReport(recipe=recipe.name, root=str(root_path))
        logger.info(f"Applying recipe '{recipe.name}' to {root_path}")

        for file_patch in recipe.files:
            path = root_path / file_patch.path
            if not path.is_file():
                logger.warning(f"{file_patch.path} not found, skipping {len(file_patch.operations)} operation(s)")
                report.files.append(FilePatchReport(
                    file_path=str(path),
                    dry_run=dry_run,
                    results=[
                        PatchResult(
                            operation=op.kind,
                            target=op.target,
                            outcome=PatchOutcome.NOT_FOUND,
                            message=f"File {file_patch.path} not found",
                        )
                        for op in file_patch.operations
                    ],
                ))
                continue

            report.files.append(
                self.apply_file(str(path), file_patch.operations, dry_run=dry_run, backup=backup)
            )

        logger.info(
            f"Recipe '{recipe.name}': {report.count(PatchOutcome.APPLIED)} applied, "
            f"{report.count(PatchOutcome.ALREADY_APPLIED)} already applied, "
            f"{report.count(PatchOutcome.NOT_FOUND)} not found, "
            f"{report.count(PatchOutcome.MALFORMED)} malformed"
        )
        return report
