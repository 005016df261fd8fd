"""
Repository configuration.

The repository home is resolved from an explicit value, then the
``GLOSSA_HOME`` environment variable, then ``~/.glossa``. An optional YAML
file at ``<home>/config`` supplies lookup defaults:

    glossary: manual
    source_language: en
    target_language: ja
    annotations: [wip, fuzzy]
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import List, Optional, Union

import yaml

from glossa.core.glossary import SUPPORTED_ANNOTATIONS
from glossa.errors import GlossaError

logger = logging.getLogger(__name__)

HOME_ENV = "GLOSSA_HOME"
DEFAULT_HOME = "~/.glossa"
CONFIG_FILE = "config"


@dataclass
class RepositoryConfig:
    """Defaults read from the repository config file."""

    glossary: Optional[str] = None
    source_language: Optional[str] = None
    target_language: Optional[str] = None
    annotations: List[str] = field(default_factory=lambda: list(SUPPORTED_ANNOTATIONS))

    @classmethod
    def load(cls, path: Optional[Path]) -> "RepositoryConfig":
        """
        Load configuration from ``path``.

        A missing path yields the defaults. Unknown keys are ignored.

        Raises:
            GlossaError: If the file is not a YAML mapping
        """
        if path is None or not path.exists():
            return cls()

        with open(path, encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as exc:
                raise GlossaError(f"Invalid config file {path}: {exc}") from exc

        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise GlossaError(f"Config file {path} must contain a mapping")

        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            logger.warning(f"Ignoring unknown config keys in {path}: {sorted(unknown)}")

        config = cls(**{key: value for key, value in data.items() if key in known})
        if config.annotations is None:
            config.annotations = list(SUPPORTED_ANNOTATIONS)
        elif isinstance(config.annotations, str):
            config.annotations = [config.annotations]
        return config


def resolve_home(home: Optional[Union[str, Path]] = None) -> Path:
    """Resolve the repository home directory."""
    value = home or os.environ.get(HOME_ENV) or DEFAULT_HOME
    return Path(value).expanduser().resolve()


__all__ = ["RepositoryConfig", "resolve_home", "HOME_ENV", "DEFAULT_HOME", "CONFIG_FILE"]
