"""JSON output formatter."""

import json
import logging
from pathlib import Path

from upgrade_risk.analyzer import UpgradeEvaluation

logger = logging.getLogger(__name__)


class JSONReporter:
    """Generates JSON format reports."""

    def generate_report(
        self,
        evaluation: UpgradeEvaluation,
        output_file: Path | None = None,
    ) -> str:
        """Generate JSON report.

        Args:
            evaluation: Upgrade evaluation
            output_file: Optional path to save report

        Returns:
            JSON string
        """
        json_str = json.dumps(evaluation.to_dict(), indent=2)

        if output_file:
            output_file.write_text(json_str, encoding="utf-8")
            logger.debug(f"Wrote JSON report to {output_file}")

        return json_str
