"""GPano validation for Street View panoramas.

This module provides the public API for validating GPano metadata:
- validate(): Run the ordered rule list against a record
- ValidationVerdict: Errors, warnings, missing fields and auto-fix flag
- ValidationRule: Base class for custom rules
"""

from panofix.validation.results import (
    Finding,
    RuleOutcome,
    Severity,
    ValidationVerdict,
)
from panofix.validation.rules import ValidationContext, ValidationRule
from panofix.validation.runner import DEFAULT_RULES, validate

__all__ = [
    "DEFAULT_RULES",
    "Finding",
    "RuleOutcome",
    "Severity",
    "ValidationContext",
    "ValidationRule",
    "ValidationVerdict",
    "validate",
]
