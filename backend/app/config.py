from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # Database (persisted engine state)
    database_url: str = Field(default="sqlite:///./outage_campaigns.db")

    # Outage feed (already-normalised disruption list)
    outage_feed_url: str = Field(default="https://www.stroomstoring.nl/api/disruptions")
    outage_feed_timeout: float = Field(default=15.0)  # seconds

    # Scheduler
    poll_interval_minutes: int = Field(default=15)
    cleanup_hour: int = Field(default=3)  # daily expired-campaign sweep, local hour

    # Campaign lifetime (hours), one global policy for every campaign
    campaign_duration_hours: int = Field(default=72)

    # Per-campaign daily budget caps (EUR), applied after severity lookup
    max_daily_budget_google: float = Field(default=150.0)
    max_daily_budget_meta: float = Field(default=150.0)

    # Rolling 24h spend ceilings per platform (EUR)
    total_max_daily_budget_google: float = Field(default=500.0)
    total_max_daily_budget_meta: float = Field(default=500.0)

    # Severity thresholds (households). The major threshold has been run
    # at 50 in some deployments; 1000 is the documented default.
    major_severity_threshold: int = Field(default=1000)
    critical_severity_threshold: int = Field(default=3000)

    # Resolved incidents stay visible this long before being purged
    resolved_retention_hours: int = Field(default=24)

    # Rolling event log size
    event_log_limit: int = Field(default=200)

    # Ad platforms. Simulation returns fake campaign handles instead of
    # calling the remote APIs.
    simulation_mode: bool = Field(default=True)
    google_ads_enabled: bool = Field(default=True)
    meta_ads_enabled: bool = Field(default=True)
    auto_create_campaigns: bool = Field(default=False)
    landing_page_url: str = Field(default="https://offgridcentrum.nl/thuisbatterij")

    # CORS
    cors_origins: str = Field(default="http://localhost:5173,http://localhost:3000")

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",")]


settings = Settings()
