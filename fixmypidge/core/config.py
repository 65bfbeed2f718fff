"""Application configuration with environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Environment
    ENV: str = "dev"

    # App Version (format: a.bc.de - major.feature.patch)
    VERSION: str = "0.01.00"

    # Sent as X-Source on every outbound automation call
    APP_SOURCE_ID: str = "fixmypidge"

    # Database
    DATABASE_URL: str = "sqlite:///./fixmypidge.db"

    # Session Token (supports key rotation)
    JWT_SECRET: str = "change-this-in-production"
    JWT_SECRET_PREVIOUS: str = ""  # Set during rotation, clear after
    JWT_EXPIRES_HOURS: int = 24

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000"

    # Automation pipeline (shared secret is used in both directions)
    WEBHOOK_SECRET: str = ""
    AUTOMATION_WEBHOOK_URL: str = ""
    AUTOMATION_TIMEOUT_SECONDS: float = 10.0
    WEBHOOK_MAX_PAYLOAD_BYTES: int = 100000  # 100KB limit
    WEBHOOK_DEDUPE_WINDOW_SECONDS: int = 300

    # Reverse geocoding (Mapbox); empty token falls back to raw coordinates
    GEOCODING_API_TOKEN: str = ""
    GEOCODING_TIMEOUT_SECONDS: float = 5.0

    # Photo storage
    STORAGE_BACKEND: str = "local"  # local | s3
    LOCAL_STORAGE_PATH: str = "/tmp/fixmypidge-photos"
    PUBLIC_STORAGE_BASE_URL: str = "http://localhost:8000/media"
    MAX_PHOTO_BYTES: int = 10 * 1024 * 1024  # 10 MB
    S3_BUCKET: str = "case-photos"
    S3_REGION: str = "us-east-1"
    S3_ENDPOINT_URL: str = ""
    AWS_ACCESS_KEY_ID: str = ""
    AWS_SECRET_ACCESS_KEY: str = ""

    # Error Tracking (optional, set in production)
    SENTRY_DSN: str = ""

    # Rate Limiting (requests per minute)
    RATE_LIMIT_WEBHOOK: int = 100  # Automation webhooks
    RATE_LIMIT_API: int = 60  # General API

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS_ORIGINS into a list."""
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def jwt_secrets(self) -> list[str]:
        """Returns list of valid secrets (current first, then previous if set)."""
        secrets = [self.JWT_SECRET]
        if self.JWT_SECRET_PREVIOUS:
            secrets.append(self.JWT_SECRET_PREVIOUS)
        return secrets

    @property
    def automation_enabled(self) -> bool:
        return bool(self.AUTOMATION_WEBHOOK_URL)


settings = Settings()
