"""GPano validation rules.

Each rule checks one aspect of the Street View metadata contract. Rules
are evaluated in a fixed order by the runner; a rule may add findings and
then either let evaluation continue or end it.

Reference: https://developers.google.com/streetview/spherical-metadata
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal

from panofix.gpano import EQUIRECTANGULAR, REQUIRED_FIELDS, GPanoField, GPanoRecord
from panofix.jpeg.scanner import ImageDimensions
from panofix.validation.results import RuleOutcome, VerdictBuilder

# Plain decimal notation only: no digit separators, no inf or nan
_PIXEL_COUNT = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


@dataclass(frozen=True)
class ValidationContext:
    """Inputs shared by all rules.

    Attributes:
        record: Extracted GPano record, or None if the file has none.
        dimensions: Frame size from SOF, or None if it could not be read.
    """

    record: GPanoRecord | None
    dimensions: ImageDimensions | None


class ValidationRule(ABC):
    """Base class for all GPano validation rules.

    Subclasses must define:
        name: Unique identifier for the rule
        description: Human-readable explanation for --verbose

    Subclasses must implement:
        evaluate(): Add findings and return the outcome
    """

    name: str
    description: str

    @abstractmethod
    def evaluate(self, context: ValidationContext, verdict: VerdictBuilder) -> RuleOutcome:
        """Run this rule.

        Args:
            context: Record and image dimensions under validation.
            verdict: Accumulator for findings and missing fields.

        Returns:
            Whether the runner should continue, stop or reject.
        """
        ...


class MetadataPresentRule(ValidationRule):
    """A file without any GPano data is missing every required field.

    That case is fully auto-fixable, so evaluation stops here.
    """

    name = "metadata_present"
    description = "Check that the file carries GPano XMP metadata"

    def evaluate(self, context: ValidationContext, verdict: VerdictBuilder) -> RuleOutcome:
        if context.record is not None:
            return RuleOutcome.CONTINUE

        verdict.missing_fields = REQUIRED_FIELDS
        verdict.error(
            self.name,
            "Missing Google Photo Sphere (GPano) XMP metadata. "
            "The Street View API requires specific XMP fields to recognize this as a 360° photo.",
        )
        return RuleOutcome.STOP


class RecordRule(ValidationRule):
    """A rule that only applies once a GPano record exists."""

    def evaluate(self, context: ValidationContext, verdict: VerdictBuilder) -> RuleOutcome:
        if context.record is None:
            return RuleOutcome.CONTINUE
        return self.check_record(context.record, context.dimensions, verdict)

    @abstractmethod
    def check_record(
        self,
        record: GPanoRecord,
        dimensions: ImageDimensions | None,
        verdict: VerdictBuilder,
    ) -> RuleOutcome:
        """Run this rule against a record that is known to exist."""
        ...


class RequiredFieldsRule(RecordRule):
    """Report all absent required fields in one aggregate error."""

    name = "required_fields"
    description = "Check that every required GPano field is present"

    def check_record(
        self,
        record: GPanoRecord,
        dimensions: ImageDimensions | None,
        verdict: VerdictBuilder,
    ) -> RuleOutcome:
        missing = record.missing_required()
        if missing:
            verdict.missing_fields = missing
            names = ", ".join(f.qualified_name for f in missing)
            verdict.error(
                self.name,
                f"Missing required GPano XMP fields: {names}. "
                "These are required by the Google Street View API.",
            )
        return RuleOutcome.CONTINUE


class ProjectionTypeRule(RecordRule):
    """ProjectionType must be exactly "equirectangular".

    Any other projection may describe the image truthfully, so it is
    never overwritten automatically.
    """

    name = "projection_type"
    description = 'Check that GPano:ProjectionType is "equirectangular"'

    def check_record(
        self,
        record: GPanoRecord,
        dimensions: ImageDimensions | None,
        verdict: VerdictBuilder,
    ) -> RuleOutcome:
        value = record.get(GPanoField.PROJECTION_TYPE)
        if value is None or value == EQUIRECTANGULAR:
            return RuleOutcome.CONTINUE

        verdict.error(
            self.name,
            f'GPano:ProjectionType must be "{EQUIRECTANGULAR}" (found: "{value}").',
        )
        return RuleOutcome.REJECT


class UsePanoramaViewerRule(RecordRule):
    """UsePanoramaViewer other than "True" only earns a warning."""

    name = "use_panorama_viewer"
    description = 'Check that GPano:UsePanoramaViewer is "True"'

    def check_record(
        self,
        record: GPanoRecord,
        dimensions: ImageDimensions | None,
        verdict: VerdictBuilder,
    ) -> RuleOutcome:
        value = record.get(GPanoField.USE_PANORAMA_VIEWER)
        if value is not None and value != "True":
            verdict.warning(
                self.name,
                f'GPano:UsePanoramaViewer should be "True" (found: "{value}").',
            )
        return RuleOutcome.CONTINUE


class FullPanoDimensionRule(RecordRule):
    """A claimed full panorama size must match the SOF frame size.

    Skipped when the frame size is unknown; the runner reports that case.
    """

    field: GPanoField
    axis: str

    def check_record(
        self,
        record: GPanoRecord,
        dimensions: ImageDimensions | None,
        verdict: VerdictBuilder,
    ) -> RuleOutcome:
        value = record.get(self.field)
        if value is None or dimensions is None:
            return RuleOutcome.CONTINUE

        actual = getattr(dimensions, self.axis)
        text = value.strip()
        if not _PIXEL_COUNT.fullmatch(text):
            verdict.error(
                self.name,
                f"{self.field.qualified_name} ({value}) is not a number.",
            )
            return RuleOutcome.REJECT

        if Decimal(text) != actual:
            verdict.error(
                self.name,
                f"{self.field.qualified_name} ({value}) doesn't match actual image "
                f"{self.axis} ({actual}).",
            )
            return RuleOutcome.REJECT
        return RuleOutcome.CONTINUE


class FullPanoWidthRule(FullPanoDimensionRule):
    name = "full_pano_width"
    description = "Check that GPano:FullPanoWidthPixels equals the image width"
    field = GPanoField.FULL_PANO_WIDTH_PIXELS
    axis = "width"


class FullPanoHeightRule(FullPanoDimensionRule):
    name = "full_pano_height"
    description = "Check that GPano:FullPanoHeightPixels equals the image height"
    field = GPanoField.FULL_PANO_HEIGHT_PIXELS
    axis = "height"
