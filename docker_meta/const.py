from enum import Enum

APP_NAME = "docker-meta"


class RefPrefix(str, Enum):
    """Prefixes of the symbolic git references understood by tag rules."""

    BRANCH = "refs/heads/"
    TAG = "refs/tags/"
    PULL_REQUEST = "refs/pull/"


OCI_LABEL_PREFIX = "org.opencontainers.image"

# Characters that are not allowed in an image tag.
REGEX_IMAGE_TAG_INVALID_CHARACTERS_PATTERN = r"[^a-zA-Z0-9._-]+"

DEFAULT_SHORT_SHA_LENGTH = 7
DEFAULT_ANNOTATIONS_LEVELS = "manifest"
DEFAULT_BAKE_TARGET = "docker-metadata-action"
DEFAULT_EVENT_NAME = "push"
SCHEDULE_EVENT_NAME = "schedule"

SHORT_SHA_LENGTH_ENV_VAR = "DOCKER_METADATA_SHORT_SHA_LENGTH"
ANNOTATIONS_LEVELS_ENV_VAR = "DOCKER_METADATA_ANNOTATIONS_LEVELS"

BAKE_ARG_IMAGES = "DOCKER_META_IMAGES"
BAKE_ARG_VERSION = "DOCKER_META_VERSION"
