"""Settings for the bookgroup backend."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env_field(default, *env_names: str):
    if env_names:
        alias = AliasChoices(*env_names) if len(env_names) > 1 else env_names[0]
        return Field(default=default, validation_alias=alias)
    return Field(default=default)


class Settings(BaseSettings):
    # GitHub repository holding the JSON documents
    github_repo: Optional[str] = _env_field(None, "GITHUB_REPO")
    github_branch: str = _env_field("main", "GITHUB_BRANCH")
    github_token: Optional[str] = _env_field(None, "GITHUB_TOKEN")
    github_api_base: str = _env_field("https://api.github.com", "GITHUB_API_BASE")
    books_path: str = _env_field("data/books.json", "BOOKS_PATH")
    members_path: str = _env_field("data/members.json", "MEMBERS_PATH")

    # Meeting schedule
    reference_timezone: str = _env_field("Pacific/Auckland", "REFERENCE_TIMEZONE")
    meeting_hour: int = _env_field(19, "MEETING_HOUR")
    meeting_minute: int = _env_field(30, "MEETING_MINUTE")
    meeting_duration_hours: int = _env_field(3, "MEETING_DURATION_HOURS")

    # Group identity used in emails and the calendar feed
    group_name: str = _env_field("Fireside Bookgroup", "GROUP_NAME")
    group_location: str = _env_field("Puhoi, New Zealand", "GROUP_LOCATION")
    site_url: str = _env_field("https://bookgroup.hiko.co.nz", "SITE_URL")
    webmaster_email: Optional[str] = _env_field(None, "WEBMASTER_EMAIL")

    # Email Settings (Resend SMTP relay in production)
    smtp_host: Optional[str] = _env_field(None, "SMTP_HOST")
    smtp_port: int = _env_field(587, "SMTP_PORT")
    smtp_user: Optional[str] = _env_field(None, "SMTP_USER")
    smtp_password: Optional[str] = _env_field(None, "SMTP_PASSWORD", "RESEND_API_KEY")
    smtp_tls: bool = _env_field(True, "SMTP_TLS")
    email_from: Optional[str] = _env_field(None, "EMAIL_FROM")

    # Published Google Sheet used by the bulk import script
    sheet_csv_url: Optional[str] = _env_field(None, "SHEET_CSV_URL")

    # Local development login
    dev_user_email: Optional[str] = _env_field(None, "DEV_USER_EMAIL")

    environment: str = _env_field("production", "ENV", "APP_ENV", "ENVIRONMENT")
    obs_enabled: bool = _env_field(True, "OBS_ENABLED")
    obs_metrics_public: bool = _env_field(False, "OBS_METRICS_PUBLIC")
    obs_log_level: str = _env_field("INFO", "LOG_LEVEL")
    obs_log_sampling_rate_info: float = _env_field(1.0, "LOG_SAMPLING_RATE_INFO")
    obs_admin_token: Optional[str] = _env_field(None, "OBS_ADMIN_TOKEN")
    service_name: str = _env_field("bookgroup-api", "SERVICE_NAME")
    git_commit: str = _env_field("unknown", "GIT_COMMIT", "COMMIT_SHA", "CF_PAGES_COMMIT_SHA")
    cors_allow_origins: Any = _env_field((), "CORS_ALLOW_ORIGINS")

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("cors_allow_origins", mode="before")
    def _split_cors(cls, value):  # type: ignore[override]
        if value in (None, ""):
            return ()
        if isinstance(value, str):
            return tuple(part.strip() for part in value.split(",") if part.strip())
        if isinstance(value, (list, tuple, set)):
            return tuple(str(item).strip() for item in value if str(item).strip())
        return ()

    # Environment helpers
    def is_prod(self) -> bool:
        return self.environment.lower() in ("prod", "production", "live")

    def is_dev(self) -> bool:
        return self.environment.lower() in ("dev", "development")


def _normalise_level(level: str) -> str:
    return level.upper()


settings = Settings()
settings.obs_log_level = _normalise_level(settings.obs_log_level)
