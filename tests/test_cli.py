import json

import pytest
from typer.testing import CliRunner

from sidepatch import __version__
from sidepatch.main import app

from conftest import APP_DELEGATE, ENTITLEMENTS_MANAGER, MIGRATION_1810

pytestmark = pytest.mark.cli

runner = CliRunner()


@pytest.fixture
def entitlements(tmp_path):
    path = tmp_path / "EntitlementsManager.swift"
    path.write_text(ENTITLEMENTS_MANAGER, encoding="utf-8")
    return path


def outcomes(payload):
    return [r["outcome"] for r in payload["results"]]


def test_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert f"sidepatch v{__version__}" in result.stdout


def test_replace_body_json(entitlements):
    result = runner.invoke(app, [
        "patch", "replace-body", str(entitlements),
        "--function", "currentPlanName",
        "--function", "hasActiveSubscriptions",
        "--line", "return true",
        "--marker", "BLINK_WRAPPER_PATCH",
        "--json",
    ])
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert outcomes(payload) == ["applied", "applied"]
    assert payload["written"] is True
    assert entitlements.read_text(encoding="utf-8").count("// BLINK_WRAPPER_PATCH") == 2

    again = runner.invoke(app, [
        "patch", "replace-body", str(entitlements),
        "-f", "currentPlanName", "-l", "return true", "-m", "BLINK_WRAPPER_PATCH", "--json",
    ])
    assert again.exit_code == 0
    assert outcomes(json.loads(again.stdout)) == ["already_applied"]


def test_replace_body_missing_function_is_not_an_error(entitlements):
    result = runner.invoke(app, [
        "patch", "replace-body", str(entitlements), "-f", "restorePurchases", "-l", "return", "--json",
    ])
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert outcomes(payload) == ["not_found"]
    assert payload["written"] is False


def test_guard_dry_run(tmp_path):
    path = tmp_path / "1810Migration.swift"
    path.write_text(MIGRATION_1810, encoding="utf-8")

    result = runner.invoke(app, [
        "patch", "guard", str(path),
        "--function", "deleteFileProviderStorage",
        "--declaration", "private func",
        "--condition", "FileProviderAvailability.isAvailable",
        "--dry-run", "--json",
    ])
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert outcomes(payload) == ["applied"]
    assert payload["dry_run"] is True
    assert "+    guard FileProviderAvailability.isAvailable else {" in payload["diff"]
    assert path.read_text(encoding="utf-8") == MIGRATION_1810


def test_guard_rejects_unknown_style(tmp_path):
    path = tmp_path / "a.swift"
    path.write_text(MIGRATION_1810, encoding="utf-8")

    result = runner.invoke(app, [
        "patch", "guard", str(path), "-f", "execute", "-c", "ok", "--style", "rust", "--json",
    ])
    assert result.exit_code == 1
    assert json.loads(result.stdout)["code"] == "INVALID_ARGUMENT"


def test_wrap_call_and_comment_out(tmp_path):
    path = tmp_path / "AppDelegate.m"
    path.write_text(APP_DELEGATE, encoding="utf-8")

    wrapped = runner.invoke(app, [
        "patch", "wrap-call", str(path),
        "--call-site", "[_NSFileProviderManager syncWithBKHosts];",
        "--condition", "[FileProviderAvailability isAvailable]",
        "--json",
    ])
    commented = runner.invoke(app, [
        "patch", "comment-out", str(path), "--statement", "[Migrator perform];", "--json",
    ])

    assert wrapped.exit_code == 0 and commented.exit_code == 0
    content = path.read_text(encoding="utf-8")
    assert "  if ([FileProviderAvailability isAvailable]) {\n" in content
    assert "  // [Migrator perform];\n" in content


def test_add_probe_custom_allow_list(tmp_path):
    path = tmp_path / "Domain.swift"
    path.write_text("import Foundation\n", encoding="utf-8")

    result = runner.invoke(app, [
        "patch", "add-probe", str(path), "-e", "com.example.files", "--json",
    ])
    assert result.exit_code == 0
    content = path.read_text(encoding="utf-8")
    assert 'pointIdentifier == "com.example.files" {' in content
    assert "com.apple.fileprovider" not in content


def test_io_error_exits_one(entitlements, monkeypatch):
    def failing_replace(src, dst):
        raise OSError("read-only file system")

    monkeypatch.setattr("sidepatch.patching.editor.os.replace", failing_replace)

    result = runner.invoke(app, [
        "patch", "replace-body", str(entitlements), "-f", "customerTier", "-l", "return .Classic", "--json",
    ])
    assert result.exit_code == 1
    payload = json.loads(result.stdout)
    assert outcomes(payload) == ["io_error"]
    assert entitlements.read_text(encoding="utf-8") == ENTITLEMENTS_MANAGER


def test_recipe_apply_json(blink_checkout):
    result = runner.invoke(app, ["recipe", "apply", str(blink_checkout), "--json"])
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["recipe"] == "blink-sideload"
    statuses = {r["outcome"] for f in payload["files"] for r in f["results"]}
    assert statuses == {"applied"}

    again = runner.invoke(app, ["recipe", "apply", str(blink_checkout), "--json"])
    statuses = {r["outcome"] for f in json.loads(again.stdout)["files"] for r in f["results"]}
    assert statuses == {"already_applied"}


def test_recipe_apply_invalid_recipe(blink_checkout, tmp_path):
    recipe_file = tmp_path / "broken.json"
    recipe_file.write_text('{"name": "broken"}')

    result = runner.invoke(app, [
        "recipe", "apply", str(blink_checkout), "--recipe", str(recipe_file), "--json",
    ])
    assert result.exit_code == 1
    payload = json.loads(result.stdout)
    assert payload["status"] == "error"
    assert payload["code"] == "INVALID_RECIPE"


def test_recipe_apply_unknown_builtin(blink_checkout):
    result = runner.invoke(app, ["recipe", "apply", str(blink_checkout), "--name", "nope", "--json"])
    assert result.exit_code == 1


def test_recipe_list_json():
    result = runner.invoke(app, ["recipe", "list", "--json"])
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload[0]["name"] == "blink-sideload"
    assert payload[0]["files"] == 6


def test_recipe_show():
    result = runner.invoke(app, ["recipe", "show", "blink-sideload"])
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    kinds = [op["kind"] for f in payload["files"] for op in f["operations"]]
    assert "append_probe" in kinds
    assert "pin_package" in kinds


def test_human_output(entitlements):
    result = runner.invoke(app, [
        "patch", "replace-body", str(entitlements), "-f", "customerTier", "-l", "return .Classic",
    ], env={"SIDEPATCH_MACHINE_MODE": "0"})
    assert result.exit_code == 0
    assert "applied" in result.stdout
    assert "customerTier" in result.stdout


def test_invalid_declaration_exits_one(entitlements):
    result = runner.invoke(app, [
        "patch", "guard", str(entitlements), "-f", "customerTier", "-c", "ok", "-d", "(unclosed", "--json",
    ])
    assert result.exit_code == 1
    assert json.loads(result.stdout)["code"] == "INVALID_ARGUMENT"
    assert entitlements.read_text(encoding="utf-8") == ENTITLEMENTS_MANAGER
