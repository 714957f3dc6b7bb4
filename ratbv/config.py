"""Application configuration management."""

import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables from project-level .env if available
PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(dotenv_path=PROJECT_ROOT / ".env")


class Settings:
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = os.getenv("APP_NAME", "RATBV Bus Times")
    app_version: str = os.getenv("APP_VERSION", "1.0.0")
    environment: str = os.getenv("ENVIRONMENT", "development")
    debug: bool = os.getenv("DEBUG", "False") == "True"

    # Server
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "6942"))
    reload: bool = os.getenv("RELOAD", "False") == "True"

    # Route registry (flat JSON file)
    routes_file: str = os.getenv("ROUTES_FILE", str(PROJECT_ROOT / "routes.json"))

    # Target site
    ratbv_base_url: str = os.getenv("RATBV_BASE_URL", "https://www.ratbv.ro/afisaje/")
    timezone: str = os.getenv("TIMEZONE", "Europe/Bucharest")

    # Browser
    browser_executable_path: str = os.getenv("BROWSER_EXECUTABLE_PATH", "").strip()
    element_wait_seconds: float = float(os.getenv("ELEMENT_WAIT_SECONDS", "5"))
    navigation_timeout_seconds: float = float(os.getenv("NAVIGATION_TIMEOUT_SECONDS", "30"))

    # Timetable cache
    cache_ttl_seconds: int = int(os.getenv("CACHE_TTL_SECONDS", "300"))

    # CORS
    cors_origins: List[str] = [
        origin.strip()
        for origin in os.getenv(
            "CORS_ALLOW_ORIGINS",
            "http://localhost:6942,http://127.0.0.1:6942",
        ).split(",")
        if origin.strip()
    ]
    cors_allow_credentials: bool = True

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_format: str = os.getenv("LOG_FORMAT", "json")

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment.lower() == "development"

    @property
    def executable_path(self) -> Optional[str]:
        """Chromium binary to launch, or None for the Playwright-managed one."""
        return self.browser_executable_path or None


# Global settings instance
settings = Settings()
