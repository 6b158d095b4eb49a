"""
Application Settings
===================

Main application settings and environment configuration using Pydantic Settings.
Supports development, testing, and production environments.
"""

from typing import Optional, List, Union
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import json
from pathlib import Path


class Settings(BaseSettings):
    """Main application settings with environment variable support."""

    # Application Configuration
    app_name: str = Field(default="markdown-pdf-converter", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(
        default="development", description="Environment: development, testing, production"
    )
    debug: bool = Field(default=False, description="Debug mode")

    # Server Configuration
    host: str = Field(default="127.0.0.1", description="Server host")
    http_port: int = Field(default=3000, description="Streamable HTTP transport port")
    sse_port: int = Field(default=3001, description="SSE transport port")

    # PDF Defaults
    default_page_format: str = Field(default="A4", description="Default PDF page format")
    default_margin: str = Field(default="0.5in", description="Default margin for all four sides")
    display_header_footer: bool = Field(default=False, description="Print header and footer")
    print_background: bool = Field(default=True, description="Print background graphics")

    # Browser Configuration
    playwright_headless: bool = Field(default=True, description="Run browser in headless mode")
    browser_args: List[str] = Field(
        default=["--no-sandbox", "--disable-setuid-sandbox", "--font-render-hinting=none"],
        description="Chromium launch arguments",
    )
    viewport_width: int = Field(default=1200, description="Viewport width in pixels")
    viewport_height: int = Field(default=1600, description="Viewport height in pixels")
    device_scale_factor: float = Field(default=2.0, description="Device pixel ratio")
    max_concurrent_runtimes: int = Field(
        default=4, description="Maximum browser runtimes alive at the same time"
    )

    # Readiness Configuration (seconds)
    navigation_timeout: float = Field(default=30.0, description="Document load timeout")
    load_wait_until: str = Field(
        default="networkidle", description="Playwright load state awaited after set_content"
    )
    font_timeout: float = Field(default=5.0, description="Font loading wait")
    script_settle_delay: float = Field(
        default=1.0, description="Delay for on-load scripts to start their work"
    )
    readiness_timeout: float = Field(
        default=10.0, description="Overall diagram/chart readiness poll timeout"
    )
    readiness_poll_interval: float = Field(default=0.1, description="Readiness poll interval")
    final_settle_delay: float = Field(
        default=0.25, description="Delay before capture for transitions to finish"
    )
    quiesce_timeout: float = Field(
        default=2.0, description="Bound on the animation quiesce script"
    )
    capture_timeout: float = Field(default=60.0, description="Bound on printing the page to PDF")

    # Document Assets (empty string disables the asset)
    mermaid_script_url: str = Field(
        default="https://cdn.jsdelivr.net/npm/mermaid@10.6.1/dist/mermaid.min.js",
        description="Mermaid script URL",
    )
    apexcharts_script_url: str = Field(
        default="https://cdn.jsdelivr.net/npm/apexcharts@3.44.0/dist/apexcharts.min.js",
        description="ApexCharts script URL",
    )
    font_stylesheet_url: str = Field(
        default=(
            "https://fonts.googleapis.com/css2?family=Inter:wght@300;400;500;600;700;800"
            "&family=JetBrains+Mono:wght@400;500;600&display=swap"
        ),
        description="Web font stylesheet URL",
    )

    # Content Resolution
    fetch_timeout: float = Field(default=30.0, description="Network fetch timeout in seconds")
    s3_endpoint_template: str = Field(
        default="https://{bucket}.s3.amazonaws.com/{key}", description="S3 object URL template"
    )
    gcs_endpoint_template: str = Field(
        default="https://storage.googleapis.com/{bucket}/{key}",
        description="Google Cloud Storage object URL template",
    )

    # Security Configuration
    dns_rebinding_protection: bool = Field(
        default=True, description="Validate Host header on the Streamable HTTP endpoint"
    )
    allowed_hosts: List[str] = Field(
        default=["127.0.0.1", "localhost"], description="Hosts accepted by the MCP endpoint"
    )
    cors_origins: List[str] = Field(default=["*"], description="Allowed CORS origins")

    # SSE Configuration
    sse_heartbeat_interval: float = Field(
        default=15.0, description="SSE keep-alive interval in seconds"
    )

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_dir: Optional[Path] = Field(default=None, description="Directory for rotating log files")

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        allowed = {"development", "testing", "production"}
        if v not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()

    @field_validator("load_wait_until")
    @classmethod
    def validate_load_wait_until(cls, v: str) -> str:
        """Validate Playwright load state."""
        allowed = {"commit", "domcontentloaded", "load", "networkidle"}
        if v not in allowed:
            raise ValueError(f"Load state must be one of: {allowed}")
        return v

    @field_validator("allowed_hosts", "cors_origins", "browser_args", mode="before")
    @classmethod
    def parse_list(cls, v: Union[str, List[str]]) -> List[str]:
        """Parse list values from string or list."""
        if isinstance(v, str):
            # Handle JSON-like string: ["*"] or ["host1", "host2"]
            v = v.strip()
            if v.startswith("[") and v.endswith("]"):
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    pass
            # Handle comma-separated string: "*" or "host1,host2"
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, env_prefix="MD2PDF_"
    )


# Global settings instance - will be initialized when needed
settings = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global settings
    if settings is None:
        settings = Settings()
    return settings


def reload_settings() -> Settings:
    """Reload settings from environment."""
    global settings
    settings = Settings()
    return settings
