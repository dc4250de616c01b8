"""Application configuration using pydantic-settings."""

from functools import cached_property, lru_cache
from pathlib import Path
from typing import Self

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_API_DIR = Path(__file__).resolve().parent.parent

DEFAULT_ALLOWED_ORIGINS = (
    "http://localhost:5174",
    "http://localhost:5173",
    "http://localhost:3000",
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    host: str = "0.0.0.0"
    port: int = 3001

    certificate_template_path: Path = _API_DIR / "templates" / "template.html"
    # Directory expected to contain bg.svg and logo.svg
    certificate_assets_path: Path = _API_DIR / "assets"

    # Comma-separated list of allowed CORS origins
    # Example: "https://app.example.com,https://staging.example.com"
    allowed_origins: str = ",".join(DEFAULT_ALLOWED_ORIGINS)

    # "development" grants CORS to any origin not in the allow-list
    environment: str = "production"

    verification_base_url: str = "https://example.com/verify"

    # Empty means Playwright's bundled Chromium
    browser_executable_path: str = ""
    render_timeout_seconds: float = 30.0
    image_settle_timeout_seconds: float = 10.0

    @model_validator(mode="after")
    def validate_config(self) -> Self:
        if self.render_timeout_seconds <= 0:
            raise ValueError("RENDER_TIMEOUT_SECONDS must be positive.")
        if self.image_settle_timeout_seconds <= 0:
            raise ValueError("IMAGE_SETTLE_TIMEOUT_SECONDS must be positive.")
        return self

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"

    @cached_property
    def allowed_origin_list(self) -> tuple[str, ...]:
        """Parsed allow-list, blanks dropped, order preserved."""
        origins: list[str] = []
        for origin in self.allowed_origins.split(","):
            origin = origin.strip()
            if origin and origin not in origins:
                origins.append(origin)
        return tuple(origins)

    @property
    def background_image_path(self) -> Path:
        return Path(self.certificate_assets_path) / "bg.svg"

    @property
    def logo_image_path(self) -> Path:
        return Path(self.certificate_assets_path) / "logo.svg"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Call this in tests to reset settings between test cases.
    After clearing, the next get_settings() call will create
    a fresh Settings instance with current environment variables.

    Example:
        def test_something(monkeypatch):
            monkeypatch.setenv("PORT", "8080")
            clear_settings_cache()
            settings = get_settings()  # Fresh instance
    """
    get_settings.cache_clear()
