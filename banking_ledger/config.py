"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("json", "text")


class LedgerConfig(BaseSettings):
    """Banking ledger configuration"""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        case_sensitive=False,
    )

    # Logging configuration
    log_level: str = "WARNING"
    log_format: str = "json"  # json or text
    log_file: Optional[str] = None  # If None, logs to stderr

    # Credential hashing configuration
    password_hasher: str = "scrypt"  # scrypt or sha256
    scrypt_n: int = 16384
    scrypt_r: int = 8
    scrypt_p: int = 1
    salt_bytes: int = 16
    case_insensitive_hash_compare: bool = True  # Legacy digest comparison

    # Console configuration
    currency_symbol: str = "$"
    max_login_attempts: int = 3
    require_password_confirmation: bool = True

    # Feature flags
    enable_audit_logging: bool = True

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, value):
        level = str(value).strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level

    @field_validator("log_format", mode="before")
    @classmethod
    def validate_log_format(cls, value):
        log_format = str(value).strip().lower()
        if log_format not in LOG_FORMATS:
            raise ValueError(f"log_format must be one of {', '.join(LOG_FORMATS)}")
        return log_format


# Global configuration instance
config = LedgerConfig()


def get_config() -> LedgerConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> LedgerConfig:
    """Reload configuration from environment"""
    global config
    config = LedgerConfig()
    return config
