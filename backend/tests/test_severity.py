"""Tests for severity classification, budget caps, postcode lookup and enrichment."""

from datetime import datetime, timedelta, timezone

from app.config import settings
from app.schemas.outage import Location, RawIncident, SeverityLevel
from app.services import severity
from app.services.enricher import enrich, merge_update
from app.services.postcode import get_province, parse_postcodes

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def _make_raw(**kwargs) -> RawIncident:
    defaults = {"id": "A", "impact_households": 50, "status": "active"}
    defaults.update(kwargs)
    return RawIncident(**defaults)


# --- Classification ---

def test_classify_boundaries_default_threshold():
    assert settings.major_severity_threshold == 1000
    assert severity.classify(0).level == SeverityLevel.MINOR
    assert severity.classify(999).level == SeverityLevel.MINOR
    assert severity.classify(1000).level == SeverityLevel.MAJOR
    assert severity.classify(2999).level == SeverityLevel.MAJOR
    assert severity.classify(3000).level == SeverityLevel.CRITICAL


def test_classify_low_major_threshold():
    assert severity.classify(49, major_threshold=50).level == SeverityLevel.MINOR
    assert severity.classify(50, major_threshold=50).level == SeverityLevel.MAJOR
    assert severity.classify(3000, major_threshold=50).level == SeverityLevel.CRITICAL


def test_classify_reads_configured_threshold(monkeypatch):
    monkeypatch.setattr(settings, "major_severity_threshold", 50)
    assert severity.classify(50).level == SeverityLevel.MAJOR


def test_classify_table_values():
    s = severity.classify(3500)
    assert s.label == "Kritiek"
    assert s.google_budget == 60
    assert s.meta_budget == 50
    assert s.radius_km == 15

    s = severity.classify(10)
    assert (s.label, s.google_budget, s.meta_budget, s.radius_km) == ("Klein", 15, 12, 5)


def test_classify_is_deterministic():
    assert severity.classify(1500) == severity.classify(1500)


def test_cap_budgets_clamps_to_max(monkeypatch):
    monkeypatch.setattr(settings, "max_daily_budget_google", 40.0)
    monkeypatch.setattr(settings, "max_daily_budget_meta", 20.0)
    capped = severity.cap_budgets(severity.classify(5000))
    assert capped.google_budget == 40.0
    assert capped.meta_budget == 20.0
    # Below the cap nothing changes
    assert severity.cap_budgets(severity.classify(10)).google_budget == 15


# --- Postcodes ---

def test_get_province():
    assert get_province("1012AB") == "Noord-Holland"
    assert get_province("3511") == "Utrecht"
    assert get_province("9711 AA") == "Groningen"
    assert get_province("0912") is None
    assert get_province("") is None
    assert get_province("AB") is None


def test_parse_postcodes():
    assert parse_postcodes("4321AB; 4321AC;;4322BA") == ["4321AB", "4321AC", "4322BA"]
    assert parse_postcodes(None) == []


# --- Enrichment ---

def test_enrich_sets_derived_fields():
    raw = _make_raw(
        impact_households=1200,
        location=Location(city="Utrecht", postal_codes=["3511AB", "1012AB"]),
    )
    record = enrich(raw, NOW)
    assert record.severity.level == SeverityLevel.MAJOR
    assert record.location.province == "Utrecht"
    assert record.first_seen == NOW
    assert record.last_updated == NOW
    assert record.resolved_at is None
    assert record.campaign_end_time == NOW + timedelta(hours=settings.campaign_duration_hours)


def test_enrich_caps_budget(monkeypatch):
    monkeypatch.setattr(settings, "max_daily_budget_google", 25.0)
    record = enrich(_make_raw(impact_households=4000), NOW)
    assert record.severity.google_budget == 25.0
    assert record.severity.meta_budget == 50


def test_merge_update_preserves_first_seen_and_recomputes_severity():
    original = enrich(_make_raw(impact_households=50, status="active"), NOW)
    later = NOW + timedelta(minutes=15)
    merged = merge_update(
        original,
        _make_raw(impact_households=3200, status="repair", location=Location(city="Zwolle", postal_codes=["8011"])),
        later,
    )
    assert merged.first_seen == NOW
    assert merged.campaign_end_time == original.campaign_end_time
    assert merged.last_updated == later
    assert merged.status == "repair"
    assert merged.severity.level == SeverityLevel.CRITICAL
    assert merged.location.province == "Overijssel"


def test_malformed_input_falls_back_to_defaults():
    raw = RawIncident(id=42, impact_households="lots", network_type="water", location=None, status=None)
    assert raw.id == "42"
    assert raw.impact_households == 0
    assert raw.network_type.value == "other"
    assert raw.location.city == ""
    assert raw.status == "unknown"
    record = enrich(raw, NOW)
    assert record.severity.level == SeverityLevel.MINOR
    assert record.city == "Onbekend"


def test_negative_households_coerced_to_zero():
    assert RawIncident(id="x", impact_households=-5).impact_households == 0
