"""All settings, loaded from the environment and the .env file."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

APP_VERSION = "1.0.0"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # App
    app_url: str = "http://localhost:8000"
    secret_key: str = "change-me"
    database_url: str = "sqlite:///./crm.db"
    log_level: str = "INFO"
    log_file: str = ""  # optional rotating JSON log, e.g. /var/log/crm/crm.log
    testing: bool = False

    # Seed admin (created on first boot when the users table is empty)
    admin_username: str = "admin"
    admin_password: str = ""
    admin_email: str = "admin@localhost"

    # Human verification (Google reCAPTCHA v2 siteverify)
    recaptcha_enabled: bool = True
    recaptcha_secret: str = ""
    recaptcha_verify_url: str = "https://www.google.com/recaptcha/api/siteverify"
    recaptcha_timeout_seconds: float = 10

    # Outbound mail
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    smtp_secure: bool = False
    smtp_from_address: str = ""
    smtp_timeout_seconds: float = 15

    # Search
    search_result_limit: int = 20
    search_min_query_length: int = 2

    # Notifications kept per user before read ones are pruned
    notification_retention_limit: int = 200

    # Rate limiting
    rate_limit_enabled: bool = True
    rate_limit_default: str = "120/minute"
    rate_limit_login: str = "10/minute"

    @property
    def is_production(self) -> bool:
        return not self.app_url.startswith(("http://localhost", "http://127.0.0.1"))

    @property
    def smtp_configured(self) -> bool:
        return bool(self.smtp_host and self.smtp_port and self.smtp_user and self.smtp_password)


settings = Settings(testing=bool(os.environ.get("TESTING")))
