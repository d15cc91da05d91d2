"""
API configuration settings.
"""

from pathlib import Path
from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings


class APIConfig(BaseSettings):
    """API configuration settings."""

    # API Settings
    api_title: str = "Bookstore Catalog API"
    api_version: str = "1.0.0"

    # Server Settings
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False

    # Database Settings
    database_url: str = "sqlite+aiosqlite:///./bookstore.db"
    database_echo: bool = False

    # Security Settings
    jwt_key: str = "change-this-signing-key-in-production"
    jwt_issuer: str = "bookstore-api"
    jwt_algorithm: str = "HS256"
    token_expire_hours: int = 24

    # Seeded administrator account (skipped when either value is empty)
    admin_email: str = ""
    admin_password: str = ""

    # CORS Settings
    cors_origins: List[str] = ["*"]  # Configure appropriately for production
    cors_allow_credentials: bool = True
    cors_allow_methods: List[str] = ["*"]
    cors_allow_headers: List[str] = ["*"]

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"
    log_file: Optional[str] = None

    model_config = {
        "env_file": ".env",
        "extra": "ignore"  # Ignore extra fields from .env
    }

    @field_validator('jwt_key')
    @classmethod
    def validate_jwt_key(cls, v):
        """HS256 keys shorter than 16 characters are rejected."""
        if len(v) < 16:
            raise ValueError('jwt_key must be at least 16 characters long')
        return v

    @field_validator('token_expire_hours')
    @classmethod
    def validate_token_expiry(cls, v):
        if v < 1:
            raise ValueError('token_expire_hours must be at least 1')
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        """Ensure log level is valid."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'log_level must be one of: {valid_levels}')
        return v.upper()

    @field_validator('log_format')
    @classmethod
    def validate_log_format(cls, v):
        """Ensure log format is valid."""
        valid_formats = ['json', 'console']
        if v.lower() not in valid_formats:
            raise ValueError(f'log_format must be one of: {valid_formats}')
        return v.lower()

    def get_log_file_path(self) -> Optional[Path]:
        """Get log file path as Path object."""
        if self.log_file:
            return Path(self.log_file)
        return None

    def has_admin_seed(self) -> bool:
        return bool(self.admin_email and self.admin_password)


# Global config instance
config = APIConfig()
