"""Library configuration using Pydantic Settings.

Configuration is loaded from environment variables prefixed with
`MYCOASSERT_`. Nothing here is required; every field has a default.
"""

import re

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Generated validator names are `<prefix><snake_case_schema_name>`
_IDENTIFIER_PREFIX = re.compile(r"^[a-z_][a-z0-9_]*$")


class Settings(BaseSettings):
    """
    Library settings with type validation.

    Read once at import time; loaders and the compiler accept explicit
    overrides per call.
    """

    model_config = SettingsConfigDict(env_prefix="MYCOASSERT_", extra="ignore")

    # Logging
    app_log_level: str = "INFO"
    structured_logs: bool = True

    # Schema documents
    optional_marker: str = "?"

    # Compiler
    validator_prefix: str = "validate_"
    metrics_enabled: bool = True

    @field_validator("app_log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and validate the log level name."""
        level = v.strip().upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"app_log_level must be a logging level name, got '{v}'")
        return level

    @field_validator("optional_marker")
    @classmethod
    def validate_optional_marker(cls, v: str) -> str:
        """The marker must be a single character that cannot start an identifier."""
        if len(v) != 1 or v.isalnum() or v == "_":
            raise ValueError(
                f"optional_marker must be one non-alphanumeric character, got '{v}'"
            )
        return v

    @field_validator("validator_prefix")
    @classmethod
    def validate_validator_prefix(cls, v: str) -> str:
        """Prefix must keep generated function names valid identifiers."""
        if not _IDENTIFIER_PREFIX.match(v):
            raise ValueError(
                f"validator_prefix must be a lowercase identifier prefix, got '{v}'"
            )
        return v


settings = Settings()
