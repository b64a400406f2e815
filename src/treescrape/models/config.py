"""Pydantic configuration models for treescrape."""

from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field

DEFAULT_HOST = "linktr.ee"

# The gate endpoint rejects requests that do not look like they come from a browser
BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.77 Safari/537.36"
)


def build_profile_url(host: str, username: str) -> str:
    """Public profile URL for ``username`` on ``host``."""
    return f"https://{host}/{username}"


class NetworkConfig(BaseModel):
    """Configuration for HTTP client and network behavior."""

    proxy: Optional[str] = Field(None, description="HTTP/HTTPS proxy URL")
    user_agent: Optional[str] = Field(None, description="Custom User-Agent header for page fetches")
    max_retries: int = Field(2, ge=0, description="Maximum retry attempts for failed requests")
    retry_base_delay: float = Field(1.0, ge=0, description="Base delay for exponential backoff (seconds)")
    timeout: float = Field(30.0, gt=0, description="Default request timeout in seconds")
    max_content_size: int = Field(
        10 * 1024 * 1024,
        ge=1024,
        description="Maximum response size in bytes",
    )

    model_config = {"extra": "forbid"}


class GateConfig(BaseModel):
    """Configuration for the sensitive-content gate unlock call."""

    path: str = Field(
        "/api/profiles/validation/gates",
        description="Path of the gate-unlock endpoint on the profile host",
    )
    user_agent: str = Field(BROWSER_USER_AGENT, description="User-Agent sent with the unlock call")

    model_config = {"extra": "forbid"}


class ScraperConfig(BaseModel):
    """
    Root configuration model for treescrape.

    Example:
        config = ScraperConfig(network={"proxy": "http://proxy:8080", "timeout": 10})

    YAML format:
        host: linktr.ee
        network:
          proxy: http://proxy:8080
          timeout: 10
        log_level: DEBUG
    """

    host: str = Field(DEFAULT_HOST, min_length=1, description="Profile host name")
    network: NetworkConfig = Field(default_factory=NetworkConfig)
    gate: GateConfig = Field(default_factory=GateConfig)

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        "WARNING",
        description="Logging level",
    )
    log_file: Optional[Path] = Field(None, description="Log file path")

    model_config = {"extra": "forbid"}

    @property
    def base_url(self) -> str:
        """Origin of the profile host, e.g. ``https://linktr.ee``."""
        return f"https://{self.host}"

    @property
    def gate_url(self) -> str:
        """Absolute URL of the gate-unlock endpoint."""
        return self.base_url + self.gate.path

    def profile_url(self, username: str) -> str:
        """Public profile URL for a username."""
        return build_profile_url(self.host, username)

    def gate_headers(self) -> dict[str, str]:
        """Headers the gate endpoint requires on every unlock request."""
        return {
            "origin": self.base_url,
            "referer": self.base_url,
            "user-agent": self.gate.user_agent,
        }

    def to_yaml(self) -> str:
        """Serialize config to YAML string."""
        import yaml

        return yaml.dump(self.model_dump(mode="json", exclude_none=True), default_flow_style=False)

    @classmethod
    def from_yaml(cls, yaml_str: str) -> "ScraperConfig":
        """Load config from YAML string."""
        import yaml

        data = yaml.safe_load(yaml_str) or {}
        return cls.model_validate(data)

    @classmethod
    def from_yaml_file(cls, path: Path) -> "ScraperConfig":
        """Load config from YAML file."""
        return cls.from_yaml(path.read_text())
