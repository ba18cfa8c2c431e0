"""
infrastructure.config - Typed, injectable configuration.

A frozen dataclass that can be constructed from environment (after
loading a .env file) or passed explicitly in tests.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

_TRUE = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """Centralized configuration for the GreenHero client.

    No module-level globals; construct via from_env() or pass explicitly
    in tests.
    """
    # Backend origin; every relative API path is joined onto it
    api_base_url: str = "http://localhost:5000"

    # ── External AI service ─────────────────────────────────────
    # Chat:       <ai_base_url>/chat/<ai_agent>
    # Classifier: <ai_base_url>/waste/classify/<ai_agent>
    ai_base_url: str = "http://localhost:8000/api"
    ai_agent: str = "adam"

    # Seconds before connect/read gives up with RequestTimeoutError
    request_timeout: float = 15.0

    # Dev tunnels (ngrok) serve an HTML interstitial unless this header is sent
    skip_tunnel_warning: bool = True

    # Credential storage
    credential_dir: Path = Path.home() / ".greenhero"

    log_level: str = "WARNING"

    @property
    def credential_file(self) -> Path:
        return self.credential_dir / "credentials.json"

    @property
    def chat_url(self) -> str:
        return f"{self.ai_base_url.rstrip('/')}/chat/{self.ai_agent}"

    @property
    def classifier_url(self) -> str:
        return f"{self.ai_base_url.rstrip('/')}/waste/classify/{self.ai_agent}"

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None) -> Settings:
        """Build Settings from the process environment and an optional .env file."""
        from dotenv import load_dotenv
        load_dotenv(dotenv_path=env_file)

        home = os.getenv("GREENHERO_HOME")

        return cls(
            api_base_url=os.getenv("GREENHERO_API_URL", "http://localhost:5000"),
            ai_base_url=os.getenv("GREENHERO_AI_URL", "http://localhost:8000/api"),
            ai_agent=os.getenv("GREENHERO_AI_AGENT", "adam"),
            request_timeout=float(os.getenv("GREENHERO_REQUEST_TIMEOUT", "15")),
            skip_tunnel_warning=(
                os.getenv("GREENHERO_SKIP_TUNNEL_WARNING", "true").strip().lower() in _TRUE
            ),
            credential_dir=Path(home).expanduser() if home else Path.home() / ".greenhero",
            log_level=os.getenv("GREENHERO_LOG_LEVEL", "WARNING").upper(),
        )
