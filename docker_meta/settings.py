import os
import tempfile
from pathlib import Path
from typing import Mapping

from docker_meta.const import (
    APP_NAME,
    ANNOTATIONS_LEVELS_ENV_VAR,
    DEFAULT_ANNOTATIONS_LEVELS,
    DEFAULT_SHORT_SHA_LENGTH,
    SHORT_SHA_LENGTH_ENV_VAR,
)
from docker_meta.error import ConfigError


def parse_short_sha_length(value: str | None) -> int:
    """Validate a short SHA length override.

    :param value: The raw override value, or None if unset.

    :return: The short SHA length to use.

    :raises ConfigError: If the value is not a non-negative integer.
    """
    if value is None or value == "":
        return DEFAULT_SHORT_SHA_LENGTH
    try:
        length = int(value)
    except ValueError:
        raise ConfigError(f"{SHORT_SHA_LENGTH_ENV_VAR} is not a valid number: {value}", value=value)
    if length < 0:
        raise ConfigError(f"{SHORT_SHA_LENGTH_ENV_VAR} must not be negative: {value}", value=value)
    return length


def parse_annotations_levels(value: str | None) -> list[str]:
    """Split a comma separated list of annotation levels."""
    if not value:
        value = DEFAULT_ANNOTATIONS_LEVELS
    return [level.strip() for level in value.split(",") if level.strip()]


class Settings:
    """Application settings read once from the environment."""

    def __init__(self, environ: Mapping[str, str] | None = None):
        if environ is None:
            environ = os.environ
        self.app_name = APP_NAME
        self.temporary_storage: Path = Path(tempfile.gettempdir())
        self.short_sha_length: int = parse_short_sha_length(environ.get(SHORT_SHA_LENGTH_ENV_VAR))
        self.annotations_levels: list[str] = parse_annotations_levels(environ.get(ANNOTATIONS_LEVELS_ENV_VAR))
