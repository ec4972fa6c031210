"""Severity classification for outages.

Households affected -> tier -> default campaign parameters:
  critical: households >= critical threshold (3000)
  major:    households >= major threshold (configurable, default 1000)
  minor:    everything below

Budgets in the table are per-platform daily budgets (EUR) and act as caps;
cap_budgets() clamps them further to the configured per-campaign maxima.
"""

from app.config import settings
from app.schemas.outage import Severity, SeverityLevel


# level -> (google budget, meta budget, radius km, label)
SEVERITY_TABLE: dict[SeverityLevel, dict] = {
    SeverityLevel.MINOR: {
        "google_budget": 15.0,
        "meta_budget": 12.0,
        "radius_km": 5,
        "label": "Klein",
    },
    SeverityLevel.MAJOR: {
        "google_budget": 35.0,
        "meta_budget": 30.0,
        "radius_km": 10,
        "label": "Groot",
    },
    SeverityLevel.CRITICAL: {
        "google_budget": 60.0,
        "meta_budget": 50.0,
        "radius_km": 15,
        "label": "Kritiek",
    },
}


def classify_level(
    households: int,
    major_threshold: int | None = None,
    critical_threshold: int | None = None,
) -> SeverityLevel:
    if major_threshold is None:
        major_threshold = settings.major_severity_threshold
    if critical_threshold is None:
        critical_threshold = settings.critical_severity_threshold

    if households >= critical_threshold:
        return SeverityLevel.CRITICAL
    if households >= major_threshold:
        return SeverityLevel.MAJOR
    return SeverityLevel.MINOR


def classify(
    households: int,
    major_threshold: int | None = None,
    critical_threshold: int | None = None,
) -> Severity:
    """Map households affected to a severity with uncapped table values."""
    level = classify_level(max(0, households), major_threshold, critical_threshold)
    return Severity(level=level, **SEVERITY_TABLE[level])


def cap_budgets(severity: Severity) -> Severity:
    return severity.model_copy(update={
        "google_budget": min(severity.google_budget, settings.max_daily_budget_google),
        "meta_budget": min(severity.meta_budget, settings.max_daily_budget_meta),
    })


def classify_capped(households: int) -> Severity:
    return cap_budgets(classify(households))
