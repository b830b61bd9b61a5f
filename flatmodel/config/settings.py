"""
Environment-driven settings for flatmodel.

**Conceptual**: This module provides a strongly-typed settings object loaded
from environment variables (via .env files). It supplies defaults that apply to
every store in a process: the base directory that relative store paths are
resolved against, the default CSV dialect, and the log level. Settings are
validated when they are built, so a bad value fails at startup rather than on
the first flush.

**Environment variables**:
  - FLATMODEL_BASE_DIR: directory relative store paths resolve against
    (default: current working directory).
  - FLATMODEL_DELIMITER / FLATMODEL_ENCLOSURE / FLATMODEL_ESCAPE: default
    dialect characters (default: `,` `"` `\\`).
  - FLATMODEL_LOG_LEVEL: logging level name (default: WARNING).

This module uses python-dotenv to load .env files and dataclasses for type safety.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env from project root (dev/local environments)
env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(dotenv_path=env_path)


@dataclass(frozen=True)
class Settings:
    """
    Process-wide defaults for stores.

    Attributes:
        base_dir: Directory that relative store paths are resolved against.
        delimiter: Default field delimiter.
        enclosure: Default field enclosure (quote) character.
        escape: Default escape character; empty string disables escaping.
        log_level: Logging level name (DEBUG, INFO, WARNING, ...).
    """
    base_dir: Path
    delimiter: str = ","
    enclosure: str = '"'
    escape: str = "\\"
    log_level: str = "WARNING"

    def __post_init__(self):
        """Validate settings after initialization."""
        if len(self.delimiter) != 1:
            raise ValueError(
                f"FLATMODEL_DELIMITER must be a single character, got: {self.delimiter!r}"
            )
        if len(self.enclosure) != 1:
            raise ValueError(
                f"FLATMODEL_ENCLOSURE must be a single character, got: {self.enclosure!r}"
            )
        if len(self.escape) > 1:
            raise ValueError(
                f"FLATMODEL_ESCAPE must be empty or a single character, got: {self.escape!r}"
            )
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(
                f"FLATMODEL_LOG_LEVEL must be a logging level name, got: {self.log_level!r}"
            )

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.log_level.upper())

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Load settings from environment variables.

        Returns:
            Settings object with values loaded from environment.

        Raises:
            ValueError: If any variable holds an invalid value.

        Usage example:
            >>> # In .env file:
            >>> # FLATMODEL_BASE_DIR=/srv/data
            >>> # FLATMODEL_DELIMITER=;
            >>>
            >>> settings = Settings.from_env()
            >>> settings.delimiter
            ';'
        """
        base_dir = os.getenv("FLATMODEL_BASE_DIR", "")

        return cls(
            base_dir=Path(base_dir) if base_dir else Path.cwd(),
            delimiter=os.getenv("FLATMODEL_DELIMITER", ","),
            enclosure=os.getenv("FLATMODEL_ENCLOSURE", '"'),
            escape=os.getenv("FLATMODEL_ESCAPE", "\\"),
            log_level=os.getenv("FLATMODEL_LOG_LEVEL", "WARNING"),
        )


# Lazily-loaded singleton; tests can construct Settings(...) directly instead.
_default_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get the global settings singleton.

    Settings are loaded from environment on first call, then cached for reuse.

    Returns:
        Global Settings singleton.

    Raises:
        ValueError: If the environment holds invalid values.
    """
    global _default_settings

    if _default_settings is None:
        _default_settings = Settings.from_env()

    return _default_settings


def reset_settings():
    """
    Reset the global settings singleton (for testing).

    **Testing pattern**:
      ```python
      def test_something(monkeypatch):
          reset_settings()
          monkeypatch.setenv("FLATMODEL_DELIMITER", ";")
          assert get_settings().delimiter == ";"
      ```
    """
    global _default_settings
    _default_settings = None
