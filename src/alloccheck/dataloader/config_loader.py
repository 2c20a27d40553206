# src/alloccheck/dataloader/config_loader.py
from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from alloccheck.errors import ConfigError
from alloccheck.schemas.models import Config

logger = logging.getLogger(__name__)

YAML_SUFFIXES = frozenset({".yaml", ".yml"})


def _config_error(message: str, source: str, action: str) -> ConfigError:
    return ConfigError(message=message, source=f"ConfigLoader.{source}", suggested_action=action)


class ConfigLoader:
    """
    @brief
    YAML → Config.

    @details
    Input table paths, normalizer defaults and report policy all come from one
    YAML document. An empty document is a valid config made of defaults; any
    other problem (path, syntax, structure, schema) is a ConfigError.
    """

    def load(self, path: Path) -> Config:
        """
        @brief
        Read and validate the configuration file at `path`.

        @raises
            ConfigError
                Missing or unreadable file, bad YAML, non-mapping root, or a
                document the Config schema rejects (unknown keys included).
        """
        return self._validate(self._read_yaml(path))

    def load_or_default(self, path: Path) -> Config:
        """Like load(), but a file that does not exist yields Config()."""
        if isinstance(path, Path) and not path.exists():
            logger.info("Config %s not found; using defaults", path)
            return Config()
        logger.info("Loading config: %s", path)
        return self.load(path)

    def _read_yaml(self, path: Path) -> dict[str, Any]:
        if not isinstance(path, Path):
            raise _config_error(
                f"Invalid path type: expected pathlib.Path, got {type(path).__name__}",
                "_read_yaml",
                "Pass a pathlib.Path pointing to config.yaml.",
            )
        if not path.exists():
            raise _config_error(
                f"Configuration file not found: {path}",
                "_read_yaml",
                "Create config.yaml or pass --config with an existing file.",
            )
        if path.suffix.lower() not in YAML_SUFFIXES:
            raise _config_error(
                f"Invalid configuration file extension: {path.suffix}",
                "_read_yaml",
                "Use a .yaml or .yml file.",
            )

        try:
            with path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise _config_error(
                f"YAML parsing failed: {e}", "_read_yaml", "Fix YAML syntax/indentation."
            ) from e
        except OSError as e:
            raise _config_error(
                f"Unable to read configuration file: {e}",
                "_read_yaml",
                "Check file permissions.",
            ) from e

        # empty document → all defaults
        if data is None:
            return {}
        if not isinstance(data, Mapping):
            raise _config_error(
                "Configuration root must be a mapping (key: value pairs).",
                "_read_yaml",
                "Put settings under top-level keys such as normalizer: and validation:.",
            )
        return dict(data)

    def _validate(self, data: dict[str, Any]) -> Config:
        try:
            return Config(**data)
        except ValidationError as e:
            raise _config_error(
                f"Invalid configuration structure: {e}",
                "_validate",
                "Check keys and value bounds against config/config.yaml; unknown keys are rejected.",
            ) from e


__all__ = ["ConfigLoader"]
