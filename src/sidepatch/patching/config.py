"""
Configuration for source patching.

Contains default indentation, declaration pattern, marker and backup settings.
"""

from sidepatch.paths import get_paths


def get_patch_config():
    """
    Get patch configuration with dynamic paths.

    Paths are resolved at runtime to support the .sidepatch/ directory structure.
    """
    paths = get_paths()
    return {
        "backup_enabled": False,
        "backup_dir": str(paths.backups_dir),
        "indent_unit": "  ",
        "default_declaration": r"public func",
        "default_marker": "SIDEPATCH_WRAPPER_PATCH",
        "diff_enabled": True,
        "max_diff_lines": 200,
    }


PATCH_CONFIG = get_patch_config()
