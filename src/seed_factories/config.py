"""
Configuration management for seed-factories.

Settings come from SEED_FACTORIES_* environment variables or from a TOML file
(``seed-factories.toml`` or the ``[tool.seed-factories]`` table of a
``pyproject.toml``), validated with Pydantic.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

CONFIG_FILENAME = "seed-factories.toml"
PYPROJECT_TABLE = "seed-factories"


class FactorySettings(BaseSettings):
    """Settings shared by factories, persisters and the pytest plugin."""

    model_config = SettingsConfigDict(env_prefix="SEED_FACTORIES_")

    faker_locale: str = Field(default="en_US", description="Locale for the shared Faker instance")
    faker_seed: Optional[int] = Field(
        default=None, description="Seed applied to Faker before each test (None = random)"
    )
    database_url: str = Field(
        default="sqlite://",
        description="SQLAlchemy URL used by test sessions (e.g. postgresql+psycopg://...)",
    )
    commit_on_save: bool = Field(
        default=False, description="Commit on every save instead of flushing"
    )

    @classmethod
    def from_toml(cls, path: Path | str) -> FactorySettings:
        """
        Load settings from a TOML file.

        A ``pyproject.toml`` is read from its ``[tool.seed-factories]`` table;
        any other file is read as a flat table.

        Args:
            path: Path to seed-factories.toml or pyproject.toml

        Returns:
            FactorySettings instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config file is invalid
        """
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, "rb") as f:
            data = tomllib.load(f)

        if config_path.name == "pyproject.toml":
            data = data.get("tool", {}).get(PYPROJECT_TABLE, {})

        return cls(**data)

    @classmethod
    def find_and_load(cls, start_dir: Optional[Path] = None) -> FactorySettings:
        """
        Find and load settings from seed-factories.toml.

        Searches start_dir and its parents until a file is found or the
        filesystem root is reached.

        Raises:
            FileNotFoundError: If no config file found
        """
        if start_dir is None:
            start_dir = Path.cwd()

        current = Path(start_dir).resolve()

        while True:
            config_path = current / CONFIG_FILENAME
            if config_path.exists():
                return cls.from_toml(config_path)

            parent = current.parent
            if parent == current:
                break
            current = parent

        raise FileNotFoundError(
            f"No {CONFIG_FILENAME} found in {start_dir} or parent directories."
        )
