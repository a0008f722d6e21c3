import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

load_dotenv()


class Settings(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Backend API
    api_url: str = Field(default="http://localhost:3000", alias="API_URL")
    api_timeout: float = Field(default=30.0, alias="API_TIMEOUT")
    api_token: str = Field(default="", alias="API_TOKEN")

    # Cache behaviour
    coalesce_requests: bool = Field(default=False, alias="COALESCE_REQUESTS")
    contact_search_debounce_ms: int = Field(
        default=300, alias="CONTACT_SEARCH_DEBOUNCE_MS"
    )

    # Circuit breaker
    circuit_breaker_enabled: bool = Field(default=False, alias="CIRCUIT_BREAKER_ENABLED")
    circuit_breaker_threshold: int = Field(default=3, alias="CIRCUIT_BREAKER_THRESHOLD")
    circuit_breaker_reset_seconds: float = Field(
        default=30.0, alias="CIRCUIT_BREAKER_RESET_SECONDS"
    )

    # Logging
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        """Read every aliased field present in ``environ`` (default: os.environ)."""
        env = os.environ if environ is None else environ
        aliases = {field.alias for field in cls.model_fields.values() if field.alias}
        return cls.model_validate({k: v for k, v in env.items() if k in aliases})


global_settings = Settings.from_env()
