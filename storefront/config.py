from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import List, Optional


class Settings(BaseSettings):
    """
    Application configuration loaded from environment variables.
    Uses pydantic for validation and type safety.
    """
    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"
    log_file: Optional[str] = None
    # create_app installs log handlers in whichever process builds the app
    configure_logging: bool = True
    host: str = "0.0.0.0"
    port: int = 5000

    # In-memory SQLite by default: one private database per store instance.
    # Point this at a file or server database for durable storage.
    database_url: str = "sqlite://"

    # Seed administrator created on startup
    admin_username: str = "admin"
    admin_password: str = "password"

    # Absolute session lifetime in hours, regardless of activity
    session_expire_hours: int = 24
    session_prune_interval_seconds: float = 24 * 3600

    # Cookie security settings
    # secure is forced on in production, see cookie_is_secure
    session_cookie_name: str = "sf.session"
    cookie_secure: bool = False
    cookie_httponly: bool = True
    cookie_samesite: str = "strict"

    # Product response cache
    cache_ttl_seconds: int = 300

    # Uploaded and sample product images, served under /generated_images
    image_dir: str = "attached_assets/generated_images"
    max_upload_bytes: int = 5 * 1024 * 1024

    # Simulated latency on contact and quote submissions
    submission_delay_seconds: float = 0.5

    cors_origins: List[str] = ["*"]

    class Config:
        env_file = ".env"
        case_sensitive = False

    @property
    def cookie_is_secure(self) -> bool:
        return self.cookie_secure or self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings instance. Load once, reuse throughout application lifecycle.
    """
    return Settings()
