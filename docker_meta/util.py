import re

from docker_meta.const import DEFAULT_SHORT_SHA_LENGTH, REGEX_IMAGE_TAG_INVALID_CHARACTERS_PATTERN


def sanitize_tag(tag: str) -> str:
    """Replace every run of characters not allowed in an image tag with a single hyphen.

    :param tag: The tag to sanitize.

    :return: The sanitized tag.
    """
    return re.sub(REGEX_IMAGE_TAG_INVALID_CHARACTERS_PATTERN, "-", tag)


def sanitize_image_name(name: str) -> str:
    return name.lower()


def short_sha(sha: str, length: int = DEFAULT_SHORT_SHA_LENGTH) -> str:
    """Truncate a commit SHA.

    :param sha: The full commit SHA.
    :param length: The number of characters to keep.

    :return: The truncated SHA, or the full SHA if it is not longer than length.
    """
    if length >= len(sha):
        return sha
    return sha[:length]


def split_key_value(entry: str) -> tuple[str, str] | None:
    """Split a 'key=value' entry on its first '='.

    :return: A (key, value) tuple, or None if the entry has no '='.
    """
    key, sep, value = entry.partition("=")
    if not sep:
        return None
    return key, value
