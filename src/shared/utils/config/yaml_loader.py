"""YAML file loader."""
import logging
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from src.shared.exceptions.config import ConfigNotFoundError, ConfigParseError


logger = logging.getLogger(__name__)


class YAMLLoader:
    """Loads YAML files into Python dictionaries."""

    def load(self, path: Union[str, Path]) -> Dict[str, Any]:
        """Load YAML file into dictionary.

        Args:
            path: Path to YAML file

        Returns:
            Parsed YAML as dictionary (empty for an empty file)

        Raises:
            ConfigNotFoundError: If the file does not exist
            ConfigParseError: If YAML syntax is invalid or the top level is not a mapping
        """
        path = Path(path)
        if not path.is_file():
            raise ConfigNotFoundError(
                message=f"Configuration file not found: {path}",
                config_file=str(path),
            )

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            mark = getattr(e, "problem_mark", None)
            raise ConfigParseError(
                message=f"Failed to parse YAML file: {e}",
                config_file=str(path),
                line_number=mark.line + 1 if mark else None,
                column_number=mark.column + 1 if mark else None,
                original=e,
            ) from e

        if data is None:
            logger.debug(f"YAML file is empty: {path}")
            return {}

        if not isinstance(data, dict):
            raise ConfigParseError(
                message=f"YAML must contain dictionary, got {type(data).__name__}",
                config_file=str(path),
            )

        logger.info(f"YAML file loaded: {path}", extra={"path": str(path), "keys": list(data.keys())})
        return data
