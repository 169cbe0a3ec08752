"""Configuration management for the QA harness."""

import os
from typing import Optional

import yaml
from pydantic import BaseModel, Field


class ReportSettings(BaseModel):
    """HTML report rendering settings."""
    verify_totals: bool = Field(default=False, description="Warn when total != passed + failed + skipped")


class QAConfig(BaseModel):
    """Main configuration for the QA harness."""

    # Target site
    base_url: str = Field(default="https://halopowered.com", description="Site under test")
    log_level: str = Field(default="INFO", description="Logging level")
    user_agent: str = Field(
        default="Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
        description="User agent for HTTP checks and browser sessions",
    )

    # HTTP checks
    http_timeout_seconds: float = Field(default=15.0, description="Per-request timeout for content checks")

    # Browser scenarios
    browser_headless: bool = Field(default=False, description="Run browser in headless mode")
    window_width: int = Field(default=1366, description="Browser viewport width")
    window_height: int = Field(default=900, description="Browser viewport height")
    step_timeout_seconds: float = Field(default=60.0, description="Timeout for a single scenario step")
    wait_timeout_seconds: float = Field(default=10.0, description="Default wait for navigation and selectors")
    connection_retry_count: int = Field(default=3, description="Browser launch attempts")
    connection_retry_timeout_seconds: float = Field(default=120.0, description="Timeout for one browser launch")
    features_directory: str = Field(default="features", description="Directory holding .feature files")

    # Output settings
    reports_directory: str = Field(default="report", description="Directory for results and HTML reports")
    report: ReportSettings = Field(default_factory=ReportSettings)


def load_config(config_path: Optional[str] = None) -> QAConfig:
    """Load configuration from file or environment variables."""
    if config_path is None:
        config_path = os.getenv("SITE_QA_CONFIG", "config/site_qa.yaml")

    config_data = {}

    if os.path.exists(config_path):
        with open(config_path, 'r') as f:
            config_data = yaml.safe_load(f) or {}

    env_overrides = {
        "base_url": os.getenv("SITE_QA_BASE_URL"),
        "log_level": os.getenv("LOG_LEVEL"),
        "browser_headless": os.getenv("BROWSER_HEADLESS"),
        "step_timeout_seconds": os.getenv("STEP_TIMEOUT"),
    }

    for key, value in env_overrides.items():
        if value is not None:
            if key in ["step_timeout_seconds"]:
                value = float(value)
            elif key in ["browser_headless"]:
                value = value.lower() in ("true", "1", "yes")
            config_data[key] = value

    return QAConfig(**config_data)


def get_config() -> QAConfig:
    """Get the global configuration instance."""
    return load_config()
