"""Local configuration management (.codelab_py.local)."""

import json
from pathlib import Path
from typing import Optional
from dataclasses import dataclass

FILENAME = ".codelab_py.local"


@dataclass
class LocalConfig:
    """
    Local configuration for project-specific settings.
    Stored at .codelab_py.local in the project directory.
    """

    default_language: str = "python"
    lesson_id: Optional[str] = None

    @classmethod
    def load(cls, path: Optional[Path] = None) -> Optional["LocalConfig"]:
        """
        Load local config from file.
        If path is not specified, searches upward from current directory.
        """
        if path is None:
            path = cls.find_config()

        if path is None or not path.exists():
            return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
                return cls(
                    default_language=data.get("default_language", "python"),
                    lesson_id=data.get("lesson_id"),
                )
        except (json.JSONDecodeError, IOError, TypeError, AttributeError):
            return None

    def save(self, path: Optional[Path] = None) -> None:
        """Save local config to file."""
        if path is None:
            path = self.find_config() or Path.cwd() / FILENAME

        data = {"default_language": self.default_language, "lesson_id": self.lesson_id}

        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    @staticmethod
    def find_config() -> Optional[Path]:
        """
        Search for .codelab_py.local starting from current directory,
        walking up to root.
        """
        current = Path.cwd()

        while True:
            config_path = current / FILENAME
            if config_path.exists():
                return config_path

            # Check if we've reached the root
            if current == current.parent:
                return None

            current = current.parent
