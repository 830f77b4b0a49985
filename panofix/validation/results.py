"""Validation result data structures.

These classes capture the output of GPano validation rules and aggregate
them into a verdict for CLI display, JSON export and triage.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from panofix.gpano import GPanoField


class Severity(Enum):
    """Severity level for a validation finding.

    ERROR: The file is not accepted as a panorama.
    WARNING: Worth showing, but the file stays valid.
    """

    ERROR = "error"
    WARNING = "warning"


class RuleOutcome(Enum):
    """What the runner does after a rule has been evaluated.

    CONTINUE: Evaluate the next rule.
    STOP: End evaluation; auto-fix eligibility depends on missing fields.
    REJECT: End evaluation; the file cannot be fixed automatically.
    """

    CONTINUE = "continue"
    STOP = "stop"
    REJECT = "reject"


@dataclass(frozen=True)
class Finding:
    """A single message produced by a validation rule.

    Attributes:
        rule_name: Identifier of the rule that produced this finding.
        severity: ERROR or WARNING.
        message: Human-readable text, shown to users verbatim.
    """

    rule_name: str
    severity: Severity
    message: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "rule_name": self.rule_name,
            "severity": self.severity.value,
            "message": self.message,
        }


@dataclass(frozen=True)
class ValidationVerdict:
    """Outcome of validating one GPano record against one image.

    Attributes:
        findings: Errors and warnings in the order they were produced.
        missing_fields: Required fields absent from the record.
        can_auto_fix: True only when every error stems from absent fields
            that default metadata can supply.
    """

    findings: tuple[Finding, ...] = ()
    missing_fields: tuple[GPanoField, ...] = ()
    can_auto_fix: bool = False

    @property
    def errors(self) -> tuple[str, ...]:
        """Error messages, in order."""
        return tuple(f.message for f in self.findings if f.severity == Severity.ERROR)

    @property
    def warnings(self) -> tuple[str, ...]:
        """Warning messages, in order."""
        return tuple(f.message for f in self.findings if f.severity == Severity.WARNING)

    @property
    def is_valid(self) -> bool:
        """True if no error was found."""
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict for --format json output."""
        return {
            "is_valid": self.is_valid,
            "can_auto_fix": self.can_auto_fix,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "missing_fields": [f.qualified_name for f in self.missing_fields],
        }


@dataclass
class VerdictBuilder:
    """Accumulator the rules write into while a record is evaluated."""

    findings: list[Finding] = field(default_factory=list)
    missing_fields: tuple[GPanoField, ...] = ()

    def error(self, rule_name: str, message: str) -> None:
        self.findings.append(Finding(rule_name, Severity.ERROR, message))

    def warning(self, rule_name: str, message: str) -> None:
        self.findings.append(Finding(rule_name, Severity.WARNING, message))

    def build(self, *, can_auto_fix: bool) -> ValidationVerdict:
        return ValidationVerdict(
            findings=tuple(self.findings),
            missing_fields=self.missing_fields,
            can_auto_fix=can_auto_fix,
        )
