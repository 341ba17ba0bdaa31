"""Reporters package."""

from upgrade_risk.reporters.json_format import JSONReporter
from upgrade_risk.reporters.terminal import TerminalReporter

__all__ = [
    "TerminalReporter",
    "JSONReporter",
]
