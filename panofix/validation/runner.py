"""Validation runner that evaluates the GPano rules against one record."""

from __future__ import annotations

from collections.abc import Sequence

from panofix.gpano import GPanoRecord
from panofix.jpeg.scanner import ImageDimensions
from panofix.validation.results import RuleOutcome, ValidationVerdict, VerdictBuilder
from panofix.validation.rules import (
    FullPanoHeightRule,
    FullPanoWidthRule,
    MetadataPresentRule,
    ProjectionTypeRule,
    RequiredFieldsRule,
    UsePanoramaViewerRule,
    ValidationContext,
    ValidationRule,
)

# Evaluation order matters: rejecting rules end the run early
DEFAULT_RULES: tuple[ValidationRule, ...] = (
    MetadataPresentRule(),
    RequiredFieldsRule(),
    ProjectionTypeRule(),
    UsePanoramaViewerRule(),
    FullPanoWidthRule(),
    FullPanoHeightRule(),
)

DIMENSIONS_UNKNOWN = "dimensions_unknown"


def validate(
    record: GPanoRecord | None,
    dimensions: ImageDimensions | None,
    *,
    rules: Sequence[ValidationRule] | None = None,
) -> ValidationVerdict:
    """Validate a GPano record against the image it belongs to.

    Rules run top to bottom. A REJECT outcome ends the run and rules out
    auto-fixing; a STOP outcome ends it without that penalty. A verdict
    is auto-fixable when fields are missing, no rule rejected the record,
    and the image dimensions are known (defaults are derived from them).

    Args:
        record: Extracted GPano record, or None if the file has none.
        dimensions: Frame size from SOF, or None if it could not be read.
        rules: Optional rule sequence. Defaults to DEFAULT_RULES.

    Returns:
        ValidationVerdict with findings in evaluation order.
    """
    if rules is None:
        rules = DEFAULT_RULES

    context = ValidationContext(record=record, dimensions=dimensions)
    verdict = VerdictBuilder()
    rejected = False

    for rule in rules:
        outcome = rule.evaluate(context, verdict)
        if outcome is RuleOutcome.REJECT:
            rejected = True
            break
        if outcome is RuleOutcome.STOP:
            break

    if dimensions is None:
        verdict.error(
            DIMENSIONS_UNKNOWN,
            "Could not read JPEG dimensions, so the GPano panorama size cannot be verified. "
            "Is the file corrupted?",
        )

    can_auto_fix = bool(verdict.missing_fields) and not rejected and dimensions is not None
    return verdict.build(can_auto_fix=can_auto_fix)
