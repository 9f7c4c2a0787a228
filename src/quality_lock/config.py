"""Quality Lock configuration.

Loads settings from a .env file with QUALITY_LOCK_ prefix.
The similarity floor is the single explicit accept/reject boundary used by
the auto-fix orchestrator; it is deployment-tunable but never inferred.
"""

from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings

from quality_lock.exceptions import ConfigurationError


class Settings(BaseSettings):
    """Quality Lock settings.

    All settings are loaded from environment variables with QUALITY_LOCK_
    prefix, or from a .env file in the working directory.
    """

    similarity_floor: float = Field(default=0.70, ge=0.0, le=1.0)
    max_attempts: int = Field(default=2, ge=1, le=3)
    generator_timeout_seconds: float = Field(default=60.0, gt=0.0)
    default_language: Literal["vi", "en"] = "vi"
    debug: bool = False

    model_config = {
        "env_file": ".env",
        "env_prefix": "QUALITY_LOCK_",
    }

    @model_validator(mode="after")
    def validate_similarity_floor(self) -> "Settings":
        """Reject floors that would accept 'very different' candidates."""
        if self.similarity_floor < 0.50:
            raise ValueError(
                "similarity_floor must be at least 0.50; lower values accept "
                "candidates in the '<0.50' (very different) bucket."
            )
        return self


def get_settings() -> Settings:
    """Create and return a Settings instance.

    Raises ConfigurationError with guidance when a QUALITY_LOCK_* variable
    is malformed.
    """
    try:
        return Settings()
    except Exception as e:
        raise ConfigurationError(
            detail=f"Failed to load Quality Lock settings: {e}",
        ) from e
