"""
Application configuration management.

This module handles configuration from environment variables using Pydantic Settings.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application configuration from environment variables.

    All settings can be overridden via environment variables with the same name.
    """

    # API settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # Input handling
    read_chunk_size: int = 64 * 1024  # Bytes per read from files and uploads
    max_upload_size_mb: int = 50

    # Decoding
    binary_as_8bit: bool = False  # Register the identity decoder for "binary"
    qp_newline: str = "\n"  # Appended to quoted-printable lines without a soft break

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }


# Global settings instance
settings = Settings()
