"""Global configuration management (~/.codelab_py.global)."""

import json
from pathlib import Path
from typing import Optional
from dataclasses import dataclass

DEFAULT_PATH = Path.home() / ".codelab_py.global"


@dataclass
class GlobalConfig:
    """
    Global configuration storing the API location and the session token.
    Stored at ~/.codelab_py.global
    """

    base_url: str = "http://localhost:4000/api/v1"
    token: str = ""
    email: str = ""
    timeout: float = 30.0

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "GlobalConfig":
        """Load global config from file."""
        if path is None:
            path = DEFAULT_PATH

        config = cls()
        if path.exists():
            try:
                with open(path, "r", encoding="utf-8") as f:
                    data = json.load(f)
                config = cls(
                    base_url=data.get("base_url", config.base_url),
                    token=data.get("token", ""),
                    email=data.get("email", ""),
                    timeout=float(data.get("timeout", config.timeout)),
                )
            except (json.JSONDecodeError, IOError, TypeError, ValueError, AttributeError):
                config = cls()

        return config

    def save(self, path: Optional[Path] = None) -> None:
        """Save global config to file."""
        if path is None:
            path = DEFAULT_PATH

        data = {
            "base_url": self.base_url,
            "token": self.token,
            "email": self.email,
            "timeout": self.timeout,
        }
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
