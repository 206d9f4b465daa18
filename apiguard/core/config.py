"""
Configuration module for apiguard.

Values are read once, when a client is constructed. Timeouts and intervals
are stored in milliseconds to match the environment variables; the
``*_seconds`` properties give the values asyncio and aiohttp expect.
"""

from dataclasses import dataclass, field, fields
from typing import Any, Dict, List
from urllib.parse import urlparse

from ..util.config import get_config_value, get_int_config, get_list_config, load_config_file

DEFAULT_API_BASE_URL = "http://localhost:7003"
DEFAULT_API_TIMEOUT_MS = 10_000
DEFAULT_POLL_INTERVAL_MS = 30_000
DEFAULT_HEALTH_CHECK_TIMEOUT_MS = 5_000
DEFAULT_HEALTH_CHECK_PATH = "/health"


@dataclass
class Config:
    """Configuration for the API clients and the health monitor"""
    api_base_url: str = DEFAULT_API_BASE_URL
    api_timeout_ms: int = DEFAULT_API_TIMEOUT_MS
    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS
    health_check_timeout_ms: int = DEFAULT_HEALTH_CHECK_TIMEOUT_MS
    health_check_path: str = DEFAULT_HEALTH_CHECK_PATH
    auth_exempt_paths: List[str] = field(default_factory=list)

    @property
    def health_check_url(self) -> str:
        path = self.health_check_path
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{self.api_base_url.rstrip('/')}{path}"

    @property
    def api_timeout_seconds(self) -> float:
        return self.api_timeout_ms / 1000

    @property
    def poll_interval_seconds(self) -> float:
        return self.poll_interval_ms / 1000

    @property
    def health_check_timeout_seconds(self) -> float:
        return self.health_check_timeout_ms / 1000

    @classmethod
    def from_env(cls) -> "Config":
        """Create configuration from environment variables"""
        return cls(
            api_base_url=get_config_value("API_BASE_URL", DEFAULT_API_BASE_URL),
            api_timeout_ms=get_int_config("API_TIMEOUT_MS", DEFAULT_API_TIMEOUT_MS),
            poll_interval_ms=get_int_config("HEALTH_POLL_INTERVAL_MS", DEFAULT_POLL_INTERVAL_MS),
            health_check_timeout_ms=get_int_config(
                "HEALTH_CHECK_TIMEOUT_MS", DEFAULT_HEALTH_CHECK_TIMEOUT_MS
            ),
            health_check_path=get_config_value("HEALTH_CHECK_PATH", DEFAULT_HEALTH_CHECK_PATH),
            auth_exempt_paths=get_list_config("AUTH_EXEMPT_PATHS"),
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Create configuration from a mapping, ignoring unknown keys"""
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        if isinstance(values.get("auth_exempt_paths"), str):
            values["auth_exempt_paths"] = [
                p.strip() for p in values["auth_exempt_paths"].split(",") if p.strip()
            ]
        return cls(**values)

    @classmethod
    def from_file(cls, file_path: str) -> "Config":
        """Create configuration from a JSON or YAML file"""
        return cls.from_dict(load_config_file(file_path))

    def validate(self) -> bool:
        """Validate the configuration"""
        if not self.api_base_url:
            raise ValueError("api_base_url is required")
        if urlparse(self.api_base_url).scheme not in ("http", "https"):
            raise ValueError(f"api_base_url must be an http(s) URL: {self.api_base_url}")
        if self.api_timeout_ms <= 0:
            raise ValueError("api_timeout_ms must be positive")
        if self.poll_interval_ms <= 0:
            raise ValueError("poll_interval_ms must be positive")
        if self.health_check_timeout_ms <= 0:
            raise ValueError("health_check_timeout_ms must be positive")
        return True
