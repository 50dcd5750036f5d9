"""
Timezone resolution for routine scheduling.

Converts UTC instants into local calendar components using the IANA
database (via ``zoneinfo`` and the ``tzdata`` package), and builds the
catalogue of selectable zones shown on configuration surfaces.
"""

import zoneinfo
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DEFAULT_TIMEZONE = "America/New_York"

# Legacy link names and fixed-offset families kept out of the catalogue
_EXCLUDED_PREFIXES = (
    "Etc/",
    "SystemV/",
    "US/",
    "Canada/",
    "Brazil/",
    "Mexico/",
    "Chile/",
    "posix/",
    "right/",
)

_GROUP_NAMES = {
    "America": "Americas",
    "Pacific": "Australia & Pacific",
    "Australia": "Australia & Pacific",
    "Atlantic": "Other",
    "Indian": "Other",
}


class TimezoneConfigError(ValueError):
    """Raised when a zone identifier is not in the timezone database."""

    def __init__(self, zone: str):
        self.zone = zone
        self.message = f"Unknown timezone '{zone}'"
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": "INVALID_TIMEZONE",
            "timezone": self.zone,
            "message": self.message,
        }


@dataclass(frozen=True)
class LocalTime:
    """Wall-clock components of an instant in one zone (0=Sunday)."""

    day_of_week: int
    hour: int
    minute: int

    @property
    def minute_of_day(self) -> int:
        return self.hour * 60 + self.minute


@dataclass(frozen=True)
class TimezoneOption:
    value: str
    label: str
    group: str

    def to_dict(self) -> Dict[str, str]:
        return {"value": self.value, "label": self.label, "group": self.group}


def get_zone(zone: str) -> ZoneInfo:
    """Return the ZoneInfo for ``zone`` or raise TimezoneConfigError."""
    try:
        return ZoneInfo(zone)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        raise TimezoneConfigError(zone) from None


def validate_timezone(zone: str) -> str:
    """Validate a zone identifier, returning it unchanged."""
    get_zone(zone)
    return zone


def localize(instant: datetime, zone: str) -> LocalTime:
    """Convert a UTC instant to local weekday/hour/minute in ``zone``.

    Naive datetimes are taken to be UTC. DST transitions follow the zone's
    rules, not a fixed offset.
    """
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    local = instant.astimezone(get_zone(zone))
    # isoweekday: Monday=1 .. Sunday=7
    return LocalTime(
        day_of_week=local.isoweekday() % 7,
        hour=local.hour,
        minute=local.minute,
    )


def _group_for(zone: str) -> str:
    region = zone.split("/")[0]
    return _GROUP_NAMES.get(region, region)


def _label_for(zone: str) -> str:
    return zone.split("/")[-1].replace("_", " ")


def _is_canonical(zone: str) -> bool:
    return (
        "/" in zone
        and "GMT" not in zone
        and not zone.startswith(_EXCLUDED_PREFIXES)
    )


@lru_cache(maxsize=1)
def _timezone_options() -> tuple:
    options = [
        TimezoneOption(value=zone, label=_label_for(zone), group=_group_for(zone))
        for zone in zoneinfo.available_timezones()
        if _is_canonical(zone)
    ]
    options.sort(key=lambda o: (o.group, o.label, o.value))
    return tuple(options)


def get_timezone_options(group: Optional[str] = None) -> List[TimezoneOption]:
    """List selectable zones sorted by group then label."""
    options = _timezone_options()
    if group:
        return [o for o in options if o.group == group]
    return list(options)
