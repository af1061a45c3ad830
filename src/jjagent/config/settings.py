from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Google Gemini API Configuration
    GOOGLE_API_KEY: str = ""

    # Workspace
    WORKSPACE_ROOT: str = "."
    JJ_BINARY: str = "jj"
    JJ_TIMEOUT_S: int = Field(default=60, ge=1)

    # Context budget
    MAX_CONTEXT_FILES: int = Field(default=50, ge=0)
    MAX_CONTEXT_TOKENS: int = Field(default=32000, ge=0)
    RELATED_FILES_SCAN_LIMIT: int = Field(default=2000, ge=0)

    # Planner call
    PLANNER_TEMPERATURE: float = Field(default=0.7, ge=0.0, le=2.0)
    PLANNER_MAX_OUTPUT_TOKENS: int = Field(default=4000, ge=1)

    # Review thresholds (multiples of the plan's estimated duration)
    DURATION_LIMIT_FACTOR: float = Field(default=2.0, gt=0.0)
    OPTIMIZE_SUGGESTION_FACTOR: float = Field(default=1.5, gt=0.0)

    # Watcher
    WATCH_ENABLED: bool = True
    WATCH_DEBOUNCE_MS: int = Field(default=1000, ge=0)
    WATCH_POLL_INTERVAL_MS: int = Field(default=500, ge=10)

    # Output
    VERBOSE: bool = False
    LOG_FILE: str | None = None

    def masked(self) -> dict[str, object]:
        """Settings as a dict with secrets hidden, for display."""
        values = self.model_dump()
        if values.get("GOOGLE_API_KEY"):
            values["GOOGLE_API_KEY"] = "****" + str(values["GOOGLE_API_KEY"])[-4:]
        return values


@lru_cache
def get_settings() -> Settings:
    """Return cached settings loaded from environment/.env.

    Use refresh_settings() to clear the cache if the environment changes at runtime.
    """
    return Settings()


def refresh_settings() -> None:
    """Clear cached settings so the next get_settings() reloads from env/.env."""
    get_settings.cache_clear()
