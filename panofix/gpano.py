"""GPano field vocabulary and metadata record.

Google's Photo Sphere schema (namespace
``http://ns.google.com/photos/1.0/panorama/``) describes the geometry of a
360° image. Street View only accepts a photo as a panorama when the
required fields below are present and agree with the image itself.

The vocabulary is closed: a GPanoRecord can only hold known fields, so a
typo or a foreign key can never slip past validation unnoticed.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from enum import Enum
from types import MappingProxyType
from typing import Any

from panofix.errors import UnknownFieldError


class GPanoField(str, Enum):
    """Known GPano property names."""

    PROJECTION_TYPE = "ProjectionType"
    USE_PANORAMA_VIEWER = "UsePanoramaViewer"
    FULL_PANO_WIDTH_PIXELS = "FullPanoWidthPixels"
    FULL_PANO_HEIGHT_PIXELS = "FullPanoHeightPixels"
    CROPPED_AREA_IMAGE_WIDTH_PIXELS = "CroppedAreaImageWidthPixels"
    CROPPED_AREA_IMAGE_HEIGHT_PIXELS = "CroppedAreaImageHeightPixels"
    CROPPED_AREA_LEFT_PIXELS = "CroppedAreaLeftPixels"
    CROPPED_AREA_TOP_PIXELS = "CroppedAreaTopPixels"
    INITIAL_VIEW_HEADING_DEGREES = "InitialViewHeadingDegrees"
    INITIAL_VIEW_PITCH_DEGREES = "InitialViewPitchDegrees"
    INITIAL_VIEW_ROLL_DEGREES = "InitialViewRollDegrees"

    @classmethod
    def parse(cls, name: str | GPanoField) -> GPanoField:
        """Resolve a property name, with or without the ``GPano:`` prefix.

        Raises:
            UnknownFieldError: If the name is not in the vocabulary.
        """
        if isinstance(name, GPanoField):
            return name
        bare = name[len("GPano:") :] if name.startswith("GPano:") else name
        try:
            return cls(bare)
        except ValueError:
            raise UnknownFieldError(name) from None

    @property
    def qualified_name(self) -> str:
        """Name as it appears in XMP, e.g. ``GPano:ProjectionType``."""
        return f"GPano:{self.value}"

    def __str__(self) -> str:
        return self.value


REQUIRED_FIELDS: tuple[GPanoField, ...] = (
    GPanoField.PROJECTION_TYPE,
    GPanoField.USE_PANORAMA_VIEWER,
    GPanoField.FULL_PANO_WIDTH_PIXELS,
    GPanoField.FULL_PANO_HEIGHT_PIXELS,
    GPanoField.CROPPED_AREA_IMAGE_WIDTH_PIXELS,
    GPanoField.CROPPED_AREA_IMAGE_HEIGHT_PIXELS,
    GPanoField.CROPPED_AREA_LEFT_PIXELS,
    GPanoField.CROPPED_AREA_TOP_PIXELS,
)

OPTIONAL_FIELDS: tuple[GPanoField, ...] = (
    GPanoField.INITIAL_VIEW_HEADING_DEGREES,
    GPanoField.INITIAL_VIEW_PITCH_DEGREES,
    GPanoField.INITIAL_VIEW_ROLL_DEGREES,
)

EQUIRECTANGULAR = "equirectangular"


class GPanoRecord(Mapping[GPanoField, str]):
    """Immutable mapping of GPano fields to their string values.

    Keys may be given as GPanoField members or plain names; both resolve
    to the same field. Iteration follows insertion order, which is also
    the order the packet builder writes attributes in. Equality ignores
    order.

    Example:
        >>> record = GPanoRecord({"ProjectionType": "equirectangular"})
        >>> record["ProjectionType"]
        'equirectangular'
        >>> GPanoField.USE_PANORAMA_VIEWER in record
        False
    """

    __slots__ = ("_values",)

    def __init__(
        self,
        values: Mapping[str, str] | Mapping[GPanoField, str] | Iterable[tuple[Any, str]] = (),
    ) -> None:
        items = values.items() if isinstance(values, Mapping) else values
        resolved: dict[GPanoField, str] = {}
        for name, value in items:
            field = GPanoField.parse(name)
            if not isinstance(value, str):
                raise TypeError(
                    f"GPano values must be strings, got {type(value).__name__} for {field.value}"
                )
            resolved[field] = value
        self._values = MappingProxyType(resolved)

    def __getitem__(self, key: str | GPanoField) -> str:
        try:
            field = GPanoField.parse(key)
        except UnknownFieldError:
            raise KeyError(key) from None
        return self._values[field]

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        try:
            return GPanoField.parse(key) in self._values
        except UnknownFieldError:
            return False

    def __iter__(self) -> Iterator[GPanoField]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"GPanoRecord({self.to_dict()!r})"

    def merged_over(self, other: GPanoRecord) -> GPanoRecord:
        """Return a record with this record's values taking precedence.

        Fields only present in ``other`` keep their position first, then
        this record's fields follow.
        """
        merged: dict[GPanoField, str] = dict(other._values)
        merged.update(self._values)
        return GPanoRecord(merged)

    def missing_required(self) -> tuple[GPanoField, ...]:
        """Required fields absent from this record, in vocabulary order."""
        return tuple(f for f in REQUIRED_FIELDS if f not in self._values)

    def to_dict(self) -> dict[str, str]:
        """Convert to a plain ``{name: value}`` dict."""
        return {field.value: value for field, value in self._values.items()}


def generate_defaults(width: int, height: int) -> GPanoRecord:
    """Build the GPano record of a full-frame equirectangular panorama.

    The whole image is the panorama: full and cropped sizes both equal
    the image size, the crop sits at the origin, and the initial view
    looks straight ahead.

    Args:
        width: Image width in pixels, from the SOF segment.
        height: Image height in pixels, from the SOF segment.

    Returns:
        A record with every required and optional field set.

    Raises:
        ValueError: If width or height is not positive.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")

    return GPanoRecord(
        (
            (GPanoField.PROJECTION_TYPE, EQUIRECTANGULAR),
            (GPanoField.USE_PANORAMA_VIEWER, "True"),
            (GPanoField.FULL_PANO_WIDTH_PIXELS, str(width)),
            (GPanoField.FULL_PANO_HEIGHT_PIXELS, str(height)),
            (GPanoField.CROPPED_AREA_IMAGE_WIDTH_PIXELS, str(width)),
            (GPanoField.CROPPED_AREA_IMAGE_HEIGHT_PIXELS, str(height)),
            (GPanoField.CROPPED_AREA_LEFT_PIXELS, "0"),
            (GPanoField.CROPPED_AREA_TOP_PIXELS, "0"),
            (GPanoField.INITIAL_VIEW_HEADING_DEGREES, "0"),
            (GPanoField.INITIAL_VIEW_PITCH_DEGREES, "0"),
            (GPanoField.INITIAL_VIEW_ROLL_DEGREES, "0"),
        )
    )
