"""
Configuration settings for network capture
"""
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings"""

    # Kernel-Image CDP Connection
    kernel_cdp_host: str = "localhost"
    kernel_cdp_port: int = 9222
    cdp_timeout: int = 30000  # milliseconds, discovery request and CDP commands

    # Network log output
    network_log_dir: Path = Path("logs")
    network_log_sink: Literal["file", "console"] = "file"
    network_capture_all: bool = False  # capture every test, not only marked ones

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra fields from env vars that aren't defined
    )

    @property
    def cdp_http_url(self) -> str:
        return f"http://{self.kernel_cdp_host}:{self.kernel_cdp_port}"


settings = Settings()
