"""Reading the YAML configuration document."""

import os
from typing import Any

import yaml
from pydantic import ValidationError

from filestat.core.config import NO_CONFIG_FILE
from filestat.core.logging_config import get_logger

from .errors import ConfigError
from .models import ConfigContent

logger = get_logger(__name__)


def parse_config(data: Any) -> ConfigContent:
    """Validate a decoded document, rejecting unknown keys.

    Args:
        data: Result of YAML decoding; None stands for an empty document

    Raises:
        ConfigError: If the document does not match the expected schema
    """
    if data is None:
        return ConfigContent()
    try:
        return ConfigContent.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def read_config_file(path: str) -> ConfigContent:
    """Load the configuration file at ``path``.

    A missing file (or a directory) yields an empty configuration so the
    exporter can run from command line patterns alone. ``"none"`` disables
    loading altogether.

    Raises:
        ConfigError: If the file cannot be read or decoded
    """
    if path == NO_CONFIG_FILE:
        return ConfigContent()

    if not os.path.isfile(path):
        logger.info(f"Could not read config file {path}")
        return ConfigContent()

    logger.info(f"Reading config file {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Cannot open config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Cannot decode config file {path}: {e}") from e

    return parse_config(data)
