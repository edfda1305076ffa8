"""
ProbeSynthesizer: Append a plug-in capability probe to a Swift file.

The probe answers "is an app extension for one of these extension points
bundled with the app". Sideloaded builds often ship without them.
"""

import json
import re
from typing import Optional, Tuple

from sidepatch.logging_config import logger
from sidepatch.schemas import ProbeDefinition, PatchResult, PatchOutcome
from .locator import line_ending_at


class ProbeSynthesizer:
    """Render and append availability probes."""

    OPERATION = "append_probe"

    def existing_pattern(self, probe: ProbeDefinition) -> "re.Pattern[str]":
        """Matches a class of exactly this name, not one it is a prefix of."""
        return re.compile(rf"\bfinal class {re.escape(probe.class_name)}\b")

    def render(self, probe: ProbeDefinition) -> str:
        """Render the probe class, including its two leading newlines."""
        checks = [
            f"pointIdentifier == {json.dumps(identifier, ensure_ascii=False)}"
            for identifier in probe.extension_points
        ]
        condition = " ||\n         ".join(checks)

        return (
            "\n\n"
            f"@objc final class {probe.class_name}: NSObject {{\n"
            f"  @objc static let {probe.property_name}: Bool = {{\n"
            "    guard let pluginsURL = Bundle.main.builtInPlugInsURL else {\n"
            "      return false\n"
            "    }\n"
            "    guard let pluginURLs = try? FileManager.default.contentsOfDirectory(at: pluginsURL, includingPropertiesForKeys: nil) else {\n"
            "      return false\n"
            "    }\n\n"
            "    for url in pluginURLs where url.pathExtension == \"appex\" {\n"
            "      guard\n"
            "        let bundle = Bundle(url: url),\n"
            "        let extensionInfo = bundle.infoDictionary?[\"NSExtension\"] as? [String: Any],\n"
            "        let pointIdentifier = extensionInfo[\"NSExtensionPointIdentifier\"] as? String\n"
            "      else {\n"
            "        continue\n"
            "      }\n\n"
            f"      if {condition} {{\n"
            "        return true\n"
            "      }\n"
            "    }\n\n"
            "    return false\n"
            "  }()\n"
            "}\n"
        )

    def append(self, text: str, probe: ProbeDefinition) -> Tuple[str, PatchResult]:
        """
        Append the probe unless a class of that name already exists.

        Args:
            text: Current document text
            probe: Probe descriptor

        Returns:
            (new_text, result)
        """
        if self.existing_pattern(probe).search(text):
            logger.debug(f"Probe {probe.class_name} already defined")
            return text, self._result(probe, PatchOutcome.ALREADY_APPLIED)

        head = text.rstrip()
        rendered = self.render(probe).replace("\n", line_ending_at(text, len(head)))
        new_text = head + rendered
        logger.info(
            f"Appended probe {probe.class_name} for {len(probe.extension_points)} extension point(s)"
        )
        return new_text, self._result(probe, PatchOutcome.APPLIED)

    def _result(self, probe: ProbeDefinition, outcome: PatchOutcome, message: Optional[str] = None) -> PatchResult:
        return PatchResult(operation=self.OPERATION, target=probe.class_name, outcome=outcome, message=message)
