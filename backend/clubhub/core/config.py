"""Application configuration loaded from environment variables.

Settings for the database, CORS, the identity provider, the temporary-key
cookie and rate limiting. Uses pydantic-settings for validation and .env
file support.
"""

from pathlib import Path
from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Known insecure default password that must not be used in production
_INSECURE_DEFAULT_PASSWORD = "clubhub_dev_password"  # nosec B105

# One day: how long an unclaimed site stays editable with its temporary key
_DEFAULT_MAX_TEMP_KEY_SECONDS = 86400


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Database
    database_host: str = "localhost"
    database_port: int = 5432
    database_name: str = "clubhub"
    database_user: str = "clubhub_user"
    database_password: str = _INSECURE_DEFAULT_PASSWORD

    # API
    api_host: str = "0.0.0.0"  # nosec B104
    api_port: int = 8000

    # CORS: every club subhost talks to the same API with cookies
    allowed_origins: list[str] = ["http://localhost:8080"]

    # Application
    environment: str = "development"
    log_level: str = "INFO"

    # Identity provider (Google ID tokens)
    identity_provider: str = "google"
    google_client_id: str = ""
    google_certs_url: str = "https://www.googleapis.com/oauth2/v3/certs"
    google_certs_cache_seconds: int = 3600
    auth_cookie_name: str = "authorization"

    # Temporary edit keys for sites created without an account
    temp_key_cookie_name: str = "Temporary-Key"
    temp_key_cookie_secure: bool = False
    temp_key_cookie_httponly: bool = True
    temp_key_cookie_samesite: Literal["lax", "strict", "none"] = "lax"
    cookie_domain: str = ""
    max_temp_key_seconds: int = _DEFAULT_MAX_TEMP_KEY_SECONDS

    # Off: any verified identity may overwrite a site it can name.
    # On: an authenticated save needs a permission row on the site.
    enforce_owner_on_write: bool = False

    # Club subhosts served by this deployment, e.g. myclub.uvic.club
    subhosts: list[str] = ["uvic.club"]

    # Built front-end bundle (index.html + assets/)
    static_dir: Path = Path("dist")

    # Rate limiting. The enable flag is read per app; limits are per process.
    rate_limit_newsite: str = "10/hour"
    rate_limit_newuser: str = "30/hour"
    rate_limit_enabled: bool = True

    @property
    def database_url(self) -> str:
        """Async database URL for SQLAlchemy."""
        return (
            f"postgresql+asyncpg://{self.database_user}:{self.database_password}"
            f"@{self.database_host}:{self.database_port}/{self.database_name}"
        )

    @property
    def default_subhost(self) -> str:
        """Subhost assigned to new sites that do not name one."""
        return self.subhosts[0]

    @model_validator(mode="after")
    def check_production_security(self) -> "Settings":
        """Validate configuration invariants.

        Checks:
        - At least one subhost is configured
        - The temporary key lifetime is positive
        - CORS must not use wildcard origin (incompatible with credentials)
        - SameSite=None requires Secure flag (browser requirement)
        - Production must not use the default database password
        - Production must configure a Google client id
        """
        if not self.subhosts:
            raise ValueError("SUBHOSTS must list at least one subhost.")

        if self.max_temp_key_seconds <= 0:
            msg = (
                "MAX_TEMP_KEY_SECONDS must be positive. "
                f"Got: {self.max_temp_key_seconds}"
            )
            raise ValueError(msg)

        if self.temp_key_cookie_samesite == "none" and not self.temp_key_cookie_secure:
            msg = (
                "TEMP_KEY_COOKIE_SECURE must be true when "
                "TEMP_KEY_COOKIE_SAMESITE=none. Browsers reject SameSite=None "
                "cookies without the Secure flag."
            )
            raise ValueError(msg)

        if "*" in self.allowed_origins:
            msg = (
                "ALLOWED_ORIGINS must not contain '*' (wildcard). "
                "This application uses credentials (cookies) which are "
                "incompatible with wildcard CORS origins."
            )
            raise ValueError(msg)

        if self.environment == "production":
            if self.database_password == _INSECURE_DEFAULT_PASSWORD:
                msg = (
                    "Cannot use default database password in production. "
                    "Set DATABASE_PASSWORD environment variable to a secure value."
                )
                raise ValueError(msg)

            if not self.google_client_id:
                raise ValueError(
                    "GOOGLE_CLIENT_ID must be set in production; without it "
                    "every request is treated as anonymous."
                )

        return self


settings = Settings()
