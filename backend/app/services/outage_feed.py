"""Outage feed client.

Fetches the current disruption list over HTTP and normalises each entry into
a RawIncident. Returns None when the fetch fails so callers can skip the
cycle; an empty list means "no outages right now".
"""

import hashlib
import logging

import httpx
from pydantic import ValidationError

from app.config import settings
from app.schemas.outage import Location, Period, RawIncident
from app.services.postcode import parse_postcodes

logger = logging.getLogger(__name__)


async def fetch_outages() -> list[RawIncident] | None:
    """Fetch and normalise current disruptions, or None on failure."""
    try:
        async with httpx.AsyncClient(timeout=settings.outage_feed_timeout) as client:
            resp = await client.get(settings.outage_feed_url, headers={"Accept": "application/json"})
            resp.raise_for_status()
            data = resp.json()
    except Exception as e:
        logger.warning("Outage feed fetch failed: %s", e)
        return None

    if isinstance(data, list):
        items = data
    elif isinstance(data, dict) and ("disruptions" in data or "data" in data):
        items = data["disruptions"] if "disruptions" in data else data["data"]
    else:
        logger.warning("Outage feed returned unexpected payload: %.200r", data)
        return None

    if not isinstance(items, list):
        logger.warning("Outage feed disruption list is %s, not a list", type(items).__name__)
        return None

    incidents = [normalize(item, index) for index, item in enumerate(items)]
    logger.info("Outage feed: fetched %d disruptions", len(incidents))
    return incidents


def normalize(item, index: int = 0) -> RawIncident:
    """Map one feed entry (nested or flat shape) onto a RawIncident.

    Malformed entries still produce an incident with zero impact and an
    empty location rather than failing the whole batch.
    """
    try:
        return _normalize(item, index)
    except (ValidationError, TypeError, ValueError) as e:
        logger.warning("Outage feed entry %d could not be normalised, using defaults: %s", index, e)
        upstream_id = item.get("id") if isinstance(item, dict) else None
        return RawIncident(id=upstream_id or _fallback_id(repr(item), index))


def _normalize(item, index: int) -> RawIncident:
    if not isinstance(item, dict):
        logger.warning("Outage feed entry %d is not an object, using defaults", index)
        return RawIncident(id=_fallback_id(str(item), index))

    props = _dig(item, "location", "features", "properties") or {}
    postal = props.get("postalCode") or item.get("postcode") or item.get("postalCode")
    street = props.get("street") or item.get("straat") or item.get("street")
    location = Location(
        city=str(props.get("city") or item.get("stad") or item.get("city") or ""),
        postal_codes=parse_postcodes(postal),
        streets=[s.strip() for s in str(street).split(";") if s.strip()] if street else [],
    )

    period_raw = item.get("period") if isinstance(item.get("period"), dict) else {}
    period = Period(
        begin=period_raw.get("begin") or item.get("startTime") or item.get("begin"),
        end=period_raw.get("end") or item.get("endTime") or item.get("end"),
        expected_end=period_raw.get("expectedEnd") or item.get("expectedEnd"),
    )

    incident_id = item.get("id") or item.get("_id") or _fallback_id(
        f"{location.city}|{';'.join(location.postal_codes)}|{period.begin}",
    )

    return RawIncident(
        id=incident_id,
        network_type=_dig(item, "network", "type") or item.get("energieType") or "electricity",
        impact_households=(
            _dig(item, "impact", "households") or item.get("aantalGetroffen") or item.get("households") or 0
        ),
        location=location,
        period=period,
        status=item.get("status"),
    )


def _dig(data: dict, *keys):
    for key in keys:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def _fallback_id(seed: str, index: int | None = None) -> str:
    """Stable id for entries the feed didn't identify, so they don't churn between polls.

    Identified by content only; the list position is mixed in just for
    entries with no usable content.
    """
    if index is not None:
        seed = f"{seed}|{index}"
    digest = hashlib.sha1(seed.encode()).hexdigest()[:12]
    return f"generated-{digest}"
