"""Dutch postal code helpers: province lookup from the two-digit prefix."""

import re

from app.schemas.outage import Location

# (lowest prefix, highest prefix, province), inclusive
PROVINCE_RANGES: list[tuple[int, int, str]] = [
    (10, 20, "Noord-Holland"),
    (21, 29, "Zuid-Holland"),
    (30, 39, "Utrecht"),
    (40, 46, "Zeeland"),
    (47, 59, "Noord-Brabant"),
    (60, 65, "Limburg"),
    (66, 76, "Gelderland"),
    (77, 84, "Overijssel"),
    (85, 86, "Flevoland"),
    (87, 95, "Friesland"),
    (96, 99, "Groningen"),
]

_NON_DIGIT = re.compile(r"\D")


def get_province(postcode: str | None) -> str | None:
    """Province for a postal code such as "4321AB" or "4321", or None."""
    if not postcode:
        return None
    digits = _NON_DIGIT.sub("", str(postcode))[:2]
    if len(digits) < 2:
        return None
    prefix = int(digits)
    for low, high, province in PROVINCE_RANGES:
        if low <= prefix <= high:
            return province
    return None


def parse_postcodes(value) -> list[str]:
    """Split "4321AB;4321AC" (or an already split list) into clean codes."""
    if not value:
        return []
    if isinstance(value, str):
        value = value.split(";")
    return [str(pc).strip() for pc in value if str(pc).strip()]


def province_for_location(location: Location) -> str | None:
    if not location.postal_codes:
        return None
    return get_province(location.postal_codes[0])
