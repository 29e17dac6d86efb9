from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:3001",
    "http://localhost:4173",
    "http://localhost:4174",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:3001",
    "http://127.0.0.1:4173",
    "http://127.0.0.1:4174",
]


class Settings(BaseSettings):
    """Application configuration settings with environment variable integration.

    Attributes
    ----------
    app_name: str, default="notification-relay"
        Service name, also used as the name of the Firebase app handle.
    environment: str, default="development"
        Application environment: "development", "production", etc.
    debug: bool, default=False
        Enable/disable auto-reload for the development server.
    host: str, default="0.0.0.0"
        Interface the HTTP server binds to.
    port: int, default=3001
        Port the HTTP server listens on.
    logging_level: str, default="INFO"
        Logging verbosity: e.g., "INFO", "DEBUG".
    log_to_file: bool, default=True
        Enable/disable the rotating file sinks.
    base_dir: Path, default=auto-detected
        Project base directory.
    logs_dir: Path, derived from base_dir
        Directory for log files.
    log_file: Path, derived from logs_dir
        Main log file path.
    broadcast_topic: str, default="all-users"
        Messaging topic every installed client subscribes to.
    notification_provider: str, default="firebase"
        Delivery backend: "firebase" sends through FCM, "log" only logs.
    firebase_service_account_b64: str | None, optional
        Base64-encoded service account JSON.
    google_application_credentials: Path | None, optional
        Path to a service account JSON file.
    firebase_project_id: str | None, optional
        Project id used together with Application Default Credentials.
        Read from FIREBASE_PROJECT_ID, GOOGLE_CLOUD_PROJECT or GCLOUD_PROJECT.
    cors_allowed_origins: List[str], default=admin panel dev origins
        Origins allowed to call the API from a browser.
    admin_api_key: str | None, optional
        When set, broadcast endpoints require a matching `X-API-Key` header.

    Notes
    -----
    Paths are resolved relative to the project root.
    Service account material should always be provided via environment
    variables or mounted secrets, never committed to version control.
    """

    app_name: str = "notification-relay"
    environment: str = "development"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 3001
    logging_level: str = "INFO"
    log_to_file: bool = True
    base_dir: Path = Path(__file__).resolve().parent.parent
    logs_dir: Path = base_dir / "logs"
    log_file: Path = logs_dir / "relay.log"
    broadcast_topic: str = "all-users"
    notification_provider: str = "firebase"
    firebase_service_account_b64: str | None = None
    google_application_credentials: Path | None = None
    firebase_project_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "firebase_project_id",
            "FIREBASE_PROJECT_ID",
            "GOOGLE_CLOUD_PROJECT",
            "GCLOUD_PROJECT",
        ),
    )
    cors_allowed_origins: List[str] = Field(
        default_factory=lambda: list(DEFAULT_CORS_ORIGINS)
    )
    admin_api_key: str | None = None

    model_config = SettingsConfigDict(
        env_file=".env", env_ignore_empty=True, extra="ignore", populate_by_name=True
    )

    @property
    def is_development(self) -> bool:
        return self.environment.lower() in ["dev", "development", "local"]


@lru_cache
def get_settings() -> Settings:
    """Create and cache singleton Settings instance for application use.

    Returns
    -------
    Settings
        Cached singleton instance of application settings with all
        configuration values loaded and validated.
    """
    return Settings()
