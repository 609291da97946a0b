"""Environment-based token discovery.

Looks for a GitHub token in the process environment, optionally after
loading a ``.env`` file. There is no interactive or OAuth flow here; a run
without a token simply talks to the API anonymously.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .logging import get_logger

ALTERNATIVE_TOKEN_VARS = ("GH_TOKEN", "GITHUB_ACCESS_TOKEN", "GH_ACCESS_TOKEN", "GITHUB_PAT")
DOTENV_LOCATIONS = (".env", ".env.local")


@dataclass
class EnvAuthConfig:
    load_dotenv: bool = True
    dotenv_path: str | None = None
    github_token_var: str = "GITHUB_TOKEN"


class EnvironmentAuthManager:
    def __init__(self, config: EnvAuthConfig):
        self.config = config
        self.logger = get_logger()
        self.dotenv_loaded: Path | None = None
        if config.load_dotenv:
            self._load_dotenv()

    def _load_dotenv(self) -> None:
        candidates = [self.config.dotenv_path] if self.config.dotenv_path else list(DOTENV_LOCATIONS)
        for location in candidates:
            env_path = Path(location)
            if env_path.exists():
                load_dotenv(str(env_path))
                self.dotenv_loaded = env_path
                self.logger.debug(f"Loaded environment variables from {env_path}")
                return

    def get_github_token(self) -> str | None:
        """Get GitHub token from environment variables."""
        token = os.getenv(self.config.github_token_var)
        if token:
            self.logger.debug(f"Found GitHub token in {self.config.github_token_var}")
            return token
        for alt_var in ALTERNATIVE_TOKEN_VARS:
            token = os.getenv(alt_var)
            if token:
                self.logger.debug(f"Found GitHub token in {alt_var}")
                return token
        return None


def resolve_token(explicit: str | None, config: EnvAuthConfig) -> str | None:
    """Prefer an explicitly configured token, then the environment."""
    if explicit:
        return explicit
    return EnvironmentAuthManager(config).get_github_token()


__all__ = ["EnvAuthConfig", "EnvironmentAuthManager", "resolve_token"]
