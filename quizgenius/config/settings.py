"""Application settings and configuration."""

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings

# Load .env file if present
load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API CONFIG
    anthropic_api_key: str = Field(
        ...,
        description="Anthropic API key",
        validation_alias="ANTHROPIC_API_KEY",
    )

    # Model Configuration
    model_name: str = Field(
        default="claude-3-7-sonnet-latest",
        description="Claude model used for generation and grading",
        validation_alias="MODEL_NAME",
    )

    # Generation Settings
    generation_temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Temperature for question generation",
        validation_alias="GENERATION_TEMPERATURE",
    )

    grading_temperature: float = Field(
        default=0.2,  # grading should be close to deterministic
        ge=0.0,
        le=1.0,
        description="Temperature for answer grading",
        validation_alias="GRADING_TEMPERATURE",
    )

    # Upload Settings
    max_document_mb: float = Field(
        default=20.0,
        gt=0.0,
        description="Largest accepted lesson document, in megabytes",
        validation_alias="MAX_DOCUMENT_MB",
    )

    # Quiz Defaults
    default_question_count: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Question count used when none is given",
        validation_alias="DEFAULT_QUESTION_COUNT",
    )

    default_time_limit: int = Field(
        default=0,
        ge=0,
        description="Time limit in seconds used when none is given (0 = unlimited)",
        validation_alias="DEFAULT_TIME_LIMIT",
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "protected_namespaces": (),
    }


# This is loaded the first time and then cached for further use by the agents
@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings object with loaded configuration
    """
    return Settings()
