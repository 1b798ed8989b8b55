from functools import lru_cache
from typing import List, Optional

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from webhook_signature.freshness import DEFAULT_VALIDITY_WINDOW
from webhook_signature.validator import Validator


class Settings(BaseSettings):
    """
    Receiver settings loaded from environment variables.
    Follows 12-factor app configuration principles.
    """

    # env_file is only used as fallback, env vars take precedence
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_ignore_empty=True,
    )

    # Shared secret provided by the sender - required
    SIGNING_KEY: SecretStr

    # Acceptance window in seconds; zero or negative disables the freshness check
    VALIDITY_WINDOW: float = DEFAULT_VALIDITY_WINDOW

    LOG_LEVEL: str = "INFO"

    # Path prefixes guarded by the signature middleware
    PROTECTED_PATHS: List[str] = ["/webhook"]

    @property
    def validity_window(self) -> Optional[float]:
        if self.VALIDITY_WINDOW <= 0:
            return None
        return self.VALIDITY_WINDOW

    def build_validator(self) -> Validator:
        """Create a Validator from the configured key and window."""
        return Validator(
            self.SIGNING_KEY.get_secret_value(),
            window=self.validity_window,
        )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Uses lru_cache to avoid reading .env file on every request.
    """
    return Settings()
