"""Application-wide configuration defaults and helpers."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

DEFAULT_BASE_URL = "https://api.poe.com/v1"
DEFAULT_MODEL = "gemini-2.5-flash"


def _to_bool(value: Optional[str], default: bool = False) -> bool:
    """Parse truthy environment values like '1' or 'true'."""
    if value is None:
        return default
    if not isinstance(value, str):
        value = str(value)
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _to_int(value: Optional[str]) -> Optional[int]:
    """Safely parse an integer env var, returning None on failure."""
    if value is None:
        return None
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def _to_float(value: Optional[str], default: float) -> float:
    if value is None:
        return default
    try:
        return float(str(value).strip())
    except (TypeError, ValueError):
        return default


@dataclass
class Config:
    """Runtime configuration loaded from environment variables."""

    debug: bool = False
    poe_api_key: Optional[str] = None
    llm_base_url: str = DEFAULT_BASE_URL
    proxy_url: Optional[str] = None
    gemini_model: str = DEFAULT_MODEL
    web_search: bool = True
    thinking_budget: Optional[int] = None
    request_timeout: float = 120.0
    output_dir: Path = field(default_factory=lambda: Path.cwd() / "dashboards")

    @classmethod
    def from_env(cls) -> "Config":
        """Build a configuration instance using environment overrides."""
        return cls(
            debug=_to_bool(os.getenv("APP_DEBUG")),
            poe_api_key=os.getenv("POE_API_KEY") or None,
            llm_base_url=os.getenv("LLM_BASE_URL", DEFAULT_BASE_URL),
            proxy_url=os.getenv("PROXY_URL") or None,
            gemini_model=os.getenv("GEMINI_MODEL", DEFAULT_MODEL),
            web_search=_to_bool(os.getenv("POE_WEB_SEARCH"), default=True),
            thinking_budget=_to_int(os.getenv("POE_THINKING_BUDGET")),
            request_timeout=_to_float(os.getenv("LLM_TIMEOUT"), 120.0),
            output_dir=Path(os.getenv("OUTPUT_DIR", Path.cwd() / "dashboards")),
        )

    def ensure_directories(self) -> None:
        """Create directories needed for runtime artifacts."""
        self.output_dir.mkdir(parents=True, exist_ok=True)
