"""Version identifiers: parsing, canonical text form, and ordering.

WHY: Version tags arrive as JSON strings ("3") or numbers (3), and
converters branch on "version <= 2" style comparisons. The engine needs
one canonical text form so "03", " 3" and 3 all compare equal, and one
ordering that all components agree on.

HOW: parse_version() validates and canonicalizes a raw tag into text.
Ordering and equality are numeric on the integer value of that text.

RULES:
- A VersionId is plain text, always integer-parseable
- Accepted raw inputs: str (surrounding whitespace stripped) and int
- bool, float, None, and non-integer text raise MalformedVersionError
- Canonical text is str(int(value)), so leading zeros are dropped
- Ordering is numeric, never lexicographic ("10" > "9")
"""

from __future__ import annotations

from typing import Any, Optional

from model_versioning.core.errors import MalformedVersionError

VersionId = str
"""Canonical text of a model version, e.g. ``"3"``."""


def parse_version(value: Any, property_name: Optional[str] = None) -> VersionId:
    """Parse a raw version tag into its canonical VersionId text.

    Args:
        value: Raw tag value read from a document or configuration.
        property_name: Name of the field the value came from, used only
                       in the error message.

    Returns:
        The canonical version text.

    Raises:
        MalformedVersionError: If the value is not an integer or an
            integer-parseable string.
    """
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise MalformedVersionError(value, property_name)
    if isinstance(value, int):
        return str(value)

    text = value.strip()
    try:
        return str(int(text, 10))
    except ValueError:
        raise MalformedVersionError(value, property_name) from None


def version_number(version: VersionId) -> int:
    """Integer value of a version, for converters that branch on ranges."""
    return int(parse_version(version))


def compare_versions(left: VersionId, right: VersionId) -> int:
    """Three-way numeric comparison: negative, zero, or positive."""
    a = version_number(left)
    b = version_number(right)
    return (a > b) - (a < b)


def versions_equal(left: VersionId, right: VersionId) -> bool:
    return compare_versions(left, right) == 0
