"""
Patch recipes: named sets of file patches for a checkout.

Recipes are plain JSON validated against sidepatch.schemas.Recipe. The
built-in registry carries the sideload patch set for Blink Shell.
"""

from pathlib import Path
from typing import Dict, List, Optional

from pydantic import ValidationError

from sidepatch.logging_config import logger
from sidepatch.exceptions import RecipeError
from sidepatch.schemas import (
    CallSiteGuard,
    FilePatch,
    GuardInsertion,
    LineComment,
    PackagePin,
    PatchTarget,
    ProbeDefinition,
    Recipe,
    TextSubstitution,
)

BLINK_MARKER = "BLINK_WRAPPER_PATCH"
FILE_PROVIDER_CHECK = "FileProviderAvailability.isAvailable"

BLINK_SIDELOAD = Recipe(
    name="blink-sideload",
    description="Blink Shell GPL sideload build: paywall removal, package pins, FileProvider guards",
    files=[
        FilePatch(
            path="Blink.xcodeproj/project.pbxproj",
            description="Pin packages whose tracked branches have broken manifests",
            operations=[
                PackagePin(package="swiftui-cached-async-image", minimum_version="1.9.0"),
                PackagePin(package="SwiftCBOR", minimum_version="0.4.0"),
            ],
        ),
        FilePatch(
            path="get_resources.sh",
            description="Allow the resource bootstrap to run more than once",
            operations=[
                TextSubstitution(
                    old="unzip runtime.zip && mv runtime/* ./ && rm runtime.zip",
                    new="unzip -q -o runtime.zip && cp -rf runtime/* ./ && rm -rf runtime runtime.zip",
                ),
            ],
        ),
        FilePatch(
            path="Blink/Subscriptions/EntitlementsManager.swift",
            description="Remove the paywall",
            operations=[
                PatchTarget(
                    function_name="currentPlanName",
                    replacement_body=['return "GPL Sideload Build"'],
                    idempotency_marker=BLINK_MARKER,
                ),
                PatchTarget(
                    function_name="customerTier",
                    replacement_body=["return CustomerTier.Classic"],
                    idempotency_marker=BLINK_MARKER,
                ),
                PatchTarget(
                    function_name="hasActiveSubscriptions",
                    replacement_body=["return true"],
                    idempotency_marker=BLINK_MARKER,
                ),
            ],
        ),
        FilePatch(
            path="Settings/Model/FileProviderDomain.swift",
            description="Skip FileProvider sync when no extension is bundled",
            operations=[
                GuardInsertion(
                    function_name="syncWithBKHosts",
                    declaration=r"@objc static func",
                    condition_expression=FILE_PROVIDER_CHECK,
                ),
                ProbeDefinition(),
            ],
        ),
        FilePatch(
            path="Blink/Migrator/1810Migration.swift",
            operations=[
                GuardInsertion(
                    function_name="deleteFileProviderStorage",
                    declaration=r"private func",
                    condition_expression=FILE_PROVIDER_CHECK,
                ),
            ],
        ),
        FilePatch(
            path="Blink/AppDelegate.m",
            operations=[
                LineComment(
                    statement="[Migrator perform];",
                    note="Disabled for sideload - uses FileProvider APIs",
                ),
                CallSiteGuard(
                    call_site="[_NSFileProviderManager syncWithBKHosts];",
                    condition_expression="[FileProviderAvailability isAvailable]",
                ),
            ],
        ),
    ],
)

BUILTIN_RECIPES: Dict[str, Recipe] = {
    BLINK_SIDELOAD.name: BLINK_SIDELOAD,
}


def load_recipe(path: str) -> Recipe:
    """
    Load and validate a recipe from a JSON file.

    Raises:
        RecipeError: If the file is unreadable or fails validation
    """
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise RecipeError(path, str(e)) from e

    try:
        recipe = Recipe.model_validate_json(raw)
    except ValidationError as e:
        raise RecipeError(path, f"{e.error_count()} validation error(s): {e}") from e

    logger.debug(f"Loaded recipe '{recipe.name}' from {path}")
    return recipe


def get_builtin(name: str) -> Recipe:
    """Look up a built-in recipe by name."""
    try:
        return BUILTIN_RECIPES[name]
    except KeyError:
        known = ", ".join(sorted(BUILTIN_RECIPES))
        raise RecipeError(name, f"unknown built-in recipe (available: {known})") from None


def resolve_recipe(path: Optional[str] = None, name: Optional[str] = None) -> Recipe:
    """A recipe file wins over a built-in name; default is blink-sideload."""
    if path:
        return load_recipe(path)
    return get_builtin(name or BLINK_SIDELOAD.name)


def with_extension_points(recipe: Recipe, extension_points: List[str]) -> Recipe:
    """
    Return a copy of the recipe whose probes use the given allow-list.

    Raises:
        RecipeError: If the allow-list is empty
    """
    if not extension_points:
        raise RecipeError(recipe.name, "extension point allow-list is empty")

    files = []
    for file_patch in recipe.files:
        operations = [
            op.model_copy(update={"extension_points": list(extension_points)})
            if isinstance(op, ProbeDefinition) else op
            for op in file_patch.operations
        ]
        files.append(file_patch.model_copy(update={"operations": operations}))
    return recipe.model_copy(update={"files": files})
