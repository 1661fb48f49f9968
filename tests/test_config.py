"""Tests for settings loading."""

from placement_portal.core.config import Settings


class TestSettings:
    def test_defaults(self):
        settings = Settings(_env_file=None)
        assert settings.otp_ttl_seconds == 120
        assert settings.otp_max_attempts == 3
        assert settings.otp_max_resends == 3
        assert settings.otp_resend_cooldown_seconds == 30
        assert settings.upgrade_ctc_threshold == 10.0
        assert settings.mongodb_db == "placement_portal"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("OTP_MAX_ATTEMPTS", "5")
        monkeypatch.setenv("UPGRADE_CTC_THRESHOLD", "12.5")
        settings = Settings(_env_file=None)
        assert settings.otp_max_attempts == 5
        assert settings.upgrade_ctc_threshold == 12.5

    def test_smtp_disabled_without_credentials(self):
        assert not Settings(_env_file=None, smtp_host="smtp.example.com").smtp_enabled
        assert Settings(_env_file=None, smtp_host="smtp.example.com",
                        smtp_username="u", smtp_password="p").smtp_enabled
