"""Version range parsing and membership checks for OCP version labels.

Ranges follow the ``com.redhat.openshift.versions`` label syntax:

- ``v4.6``       : v4.6 or any later version
- ``=v4.7``      : only v4.7
- ``v4.6-v4.8``  : v4.6 up to and including v4.8
- ``v4.5,v4.6``  : legacy list form, read as ``v4.5`` or later

Range tokens are major.minor only. A token carrying a patch component
fails to parse, it is never truncated.
"""

from __future__ import annotations

from typing import Literal, Optional

import semver
from pydantic import BaseModel, ConfigDict

# Legacy bundles shipped the label as a two-element list. Only this exact
# pair is accepted; drop it once those bundles are gone from the catalogs.
LEGACY_COMMA_RANGES = frozenset({"v4.5,v4.6", "v4.6,v4.5", "4.5,4.6", "4.6,4.5"})
LEGACY_COMMA_MINIMUM = "4.5"


class VersionParseError(ValueError):
    """Raised when a single version value cannot be parsed."""


class RangeParseError(ValueError):
    """Raised when a range expression or a target version cannot be parsed."""


class VersionRange(BaseModel):
    """Canonical form of a label range over major.minor versions."""
    kind: Literal["exact", "minimum", "closed"]
    minimum: semver.Version
    maximum: Optional[semver.Version] = None  # Only set for "closed"

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    def contains(self, version: semver.Version) -> bool:
        """Return True when version lies in the range (bounds inclusive)."""
        if self.kind == "exact":
            return version == self.minimum
        if self.kind == "minimum":
            return version >= self.minimum
        return self.minimum <= version <= self.maximum


def _strip_v(value: str) -> str:
    return value[1:] if value.startswith("v") else value


def _strip_quotes(value: str) -> str:
    return value.strip("'\"").strip()


def _parse_token(token: str, raw: str) -> semver.Version:
    """Parse a major.minor range token as major.minor.0."""
    try:
        return semver.Version.parse(f"{token}.0")
    except (ValueError, TypeError) as e:
        raise RangeParseError(f"invalid range {raw!r}: unable to parse {token!r}: {e}") from e


def parse_range(raw: str) -> VersionRange:
    """
    Parse a label range expression into a VersionRange.

    Args:
        raw: Range as found in the label (e.g. "v4.6-v4.8", "=v4.7", "v4.6")

    Returns:
        VersionRange

    Raises:
        RangeParseError: If the expression is empty, has more than one '-',
                         uses '=' inside a two-bound range, or has a token
                         that is not a major.minor version
    """
    if raw is None or not raw.strip():
        raise RangeParseError("range is empty")
    value = _strip_quotes(raw.strip())
    if not value:
        raise RangeParseError(f"invalid range {raw!r}: range is empty")

    if value in LEGACY_COMMA_RANGES:
        return VersionRange(kind="minimum", minimum=_parse_token(LEGACY_COMMA_MINIMUM, raw))

    bounds = value.split("-")
    if len(bounds) == 1:
        if value.startswith("="):
            return VersionRange(kind="exact", minimum=_parse_token(_strip_v(value[1:]), raw))
        return VersionRange(kind="minimum", minimum=_parse_token(_strip_v(value), raw))

    if len(bounds) == 2:
        low, high = bounds
        if low.startswith("=") or high.startswith("="):
            raise RangeParseError(f"invalid range {raw!r}: cannot use equal prefix with range")
        return VersionRange(
            kind="closed",
            minimum=_parse_token(_strip_v(low), raw),
            maximum=_parse_token(_strip_v(high), raw),
        )

    raise RangeParseError(f"invalid range {raw!r}: only one '-' is allowed")


def _strip_leading_zeros(value: str) -> str:
    """Drop leading zeros from the numeric major.minor.patch components ("4.08" -> "4.8")."""
    cut = min((i for i in (value.find("-"), value.find("+")) if i != -1), default=len(value))
    core, suffix = value[:cut], value[cut:]
    parts = [(part.lstrip("0") or "0") if part.isdigit() else part for part in core.split(".")]
    return ".".join(parts) + suffix


def parse_tolerant(raw: str) -> semver.Version:
    """
    Parse a single version leniently (leading 'v', leading zeros, missing
    minor/patch allowed).

    Used for olm.maxOpenShiftVersion values, where "4.8" means 4.8.0 and
    build metadata ("4.8.0+build") is kept but ignored in comparisons.
    """
    value = _strip_leading_zeros(_strip_v((raw or "").strip()))
    try:
        return semver.Version.parse(value, optional_minor_and_patch=True)
    except (ValueError, TypeError) as e:
        raise VersionParseError(str(e)) from e


def truncate(version: semver.Version) -> semver.Version:
    """Drop everything below major.minor."""
    return semver.Version(major=version.major, minor=version.minor)


def _parse_target(target: str, tolerant: bool) -> semver.Version:
    trimmed = _strip_v(target)
    try:
        return semver.Version.parse(f"{trimmed}.0")
    except (ValueError, TypeError) as e:
        if not tolerant:
            raise RangeParseError(f"invalid version {trimmed!r}: {e}") from e

    parts = trimmed.split(".")
    if len(parts) < 2:
        raise RangeParseError(f"invalid truncated version {trimmed!r}: expected major.minor")
    truncated = f"{parts[0]}.{parts[1]}.0"
    try:
        return semver.Version.parse(truncated)
    except ValueError as e:
        raise RangeParseError(f"invalid truncated version {truncated!r}: {e}") from e


def range_contains_version(range_value: str, target: str, tolerant: bool = False) -> bool:
    """
    Check whether target falls in the label range.

    Args:
        range_value: Label range expression (see parse_range)
        target: Version to look up, e.g. "4.9" or "v4.8"
        tolerant: When True, a target that is not a plain major.minor
                  (e.g. "4.8.1") is truncated to major.minor instead of failing

    Raises:
        RangeParseError: If either value is empty or cannot be parsed
    """
    if not range_value:
        raise RangeParseError("range is empty")
    if not target:
        raise RangeParseError("version is empty")

    version = _parse_target(target, tolerant)
    return parse_range(range_value).contains(version)
