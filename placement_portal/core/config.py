"""
Configuration module - loads all env vars using pydantic-settings.
This is the SINGLE SOURCE OF TRUTH for all config values.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # MongoDB
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_db: str = "placement_portal"

    # JWT Auth (tokens are issued elsewhere, we only verify them)
    jwt_secret_key: str = "change-this-secret"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 1440

    # SMTP (empty host = log emails instead of sending)
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    smtp_from: str = "noreply@placementapp.com"
    smtp_from_name: str = "Placement Management System"
    smtp_use_tls: bool = True
    smtp_timeout_seconds: int = 12

    # OTP verification
    otp_ttl_seconds: int = 120
    otp_max_attempts: int = 3
    otp_max_resends: int = 3
    otp_resend_cooldown_seconds: int = 30

    # Drive rules
    upgrade_ctc_threshold: float = 10.0  # LPA, placed students may apply above this
    default_deadline_lead_hours: int = 24

    # Signature uploads
    signature_upload_dir: str = "uploads/signatures"
    signature_max_size_mb: int = 2

    # App
    debug: bool = False
    log_level: str = "INFO"

    @property
    def smtp_enabled(self) -> bool:
        """SMTP delivery is on only when a host and credentials are set"""
        return bool(self.smtp_host and self.smtp_username and self.smtp_password)

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
