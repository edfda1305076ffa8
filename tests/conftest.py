"""
Pytest configuration for the sidepatch test suite.

This conftest.py provides:
- Machine-mode logging (suppresses console output)
- Temporary directories and a miniature Blink-style checkout
"""

import os
import tempfile
import shutil
from pathlib import Path

import pytest

from sidepatch.logging_config import setup_logging
from sidepatch.cli.config import CLIConfig
from sidepatch.paths import reset_paths


# ============================================================================
# GLOBAL CONFIGURATION
# ============================================================================

def pytest_configure(config):
    """Keep console logging out of test output."""
    os.environ.setdefault("SIDEPATCH_MACHINE_MODE", "1")


# ============================================================================
# LOGGING FIXTURES
# ============================================================================

@pytest.fixture(autouse=True)
def setup_test_logging():
    """
    Machine mode by default - suppress console logs for clean test output.
    """
    setup_logging(level="DEBUG", suppress_console=True, force=True)
    yield
    CLIConfig.reset()
    reset_paths()


# ============================================================================
# TEMPORARY DIRECTORY FIXTURES
# ============================================================================

@pytest.fixture
def temp_dir():
    """Create a temporary directory that's cleaned up after the test."""
    tmp = Path(tempfile.mkdtemp(prefix="sidepatch_test_"))
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


ENTITLEMENTS_MANAGER = '''import Foundation

public class EntitlementsManager: ObservableObject {
  public static let shared = EntitlementsManager()

  public func currentPlanName() -> String {
    if let plan = activePlan {
      return plan.name // "}" is not a delimiter here
    }
    return "Free"
  }

  public func customerTier() -> CustomerTier {
    /* legacy tiers closed with } */
    return activeTier ?? .Free
  }

  public func hasActiveSubscriptions() -> Bool {
    return !subscriptions.filter { $0.isActive }.isEmpty
  }
}
'''

FILE_PROVIDER_DOMAIN = '''import FileProvider

class FileProviderDomain: NSObject {
  @objc static func syncWithBKHosts() {
    let hosts = BKHosts.allHosts()
    register(hosts)
  }
}
'''

MIGRATION_1810 = '''struct Migration1810: MigrationStep {
  func execute() throws {
    deleteFileProviderStorage()
  }

  private func deleteFileProviderStorage() {
    try? FileManager.default.removeItem(at: storageURL)
  }
}
'''

APP_DELEGATE = '''@implementation AppDelegate

- (BOOL)application:(UIApplication *)application didFinishLaunchingWithOptions:(NSDictionary *)launchOptions {
  [Migrator perform];
  [_NSFileProviderManager syncWithBKHosts];
  return YES;
}

@end
'''

PBXPROJ = '''/* Begin XCRemoteSwiftPackageReference section */
		D1 /* XCRemoteSwiftPackageReference "swiftui-cached-async-image" */ = {
			isa = XCRemoteSwiftPackageReference;
			repositoryURL = "https://github.com/lorenzofiamingo/swiftui-cached-async-image";
			requirement = {
				branch = main;
				kind = branch;
			};
		};
		D2 /* XCRemoteSwiftPackageReference "SwiftCBOR" */ = {
			isa = XCRemoteSwiftPackageReference;
			repositoryURL = "https://github.com/valpackett/SwiftCBOR";
			requirement = {
				branch = master;
				kind = branch;
			};
		};
/* End XCRemoteSwiftPackageReference section */
'''

GET_RESOURCES = '''#!/bin/bash
curl -L -o runtime.zip "$RUNTIME_URL"
unzip runtime.zip && mv runtime/* ./ && rm runtime.zip
'''


@pytest.fixture
def blink_checkout(temp_dir):
    """
    Create a miniature checkout laid out like the Blink Shell repository.

    Returns:
        Path to the checkout root.
    """
    files = {
        "Blink/Subscriptions/EntitlementsManager.swift": ENTITLEMENTS_MANAGER,
        "Settings/Model/FileProviderDomain.swift": FILE_PROVIDER_DOMAIN,
        "Blink/Migrator/1810Migration.swift": MIGRATION_1810,
        "Blink/AppDelegate.m": APP_DELEGATE,
        "Blink.xcodeproj/project.pbxproj": PBXPROJ,
        "get_resources.sh": GET_RESOURCES,
    }
    root = temp_dir / "blink-src"
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    yield root
