import csv

from pydantic import BaseModel, ConfigDict, ValidationError


class DockerMetaModel(BaseModel):
    """Base model for docker-meta input models."""

    model_config = ConfigDict(validate_assignment=True)


def validation_error_message(error: ValidationError) -> str:
    """Condense a pydantic validation error into a single line message.

    :param error: The validation error to condense.

    :return: A message listing each failing location and reason.
    """
    messages = []
    for e in error.errors():
        loc = ".".join(str(part) for part in e["loc"])
        if loc:
            messages.append(f"{loc}: {e['msg']}")
        else:
            messages.append(e["msg"])
    return "; ".join(messages)


def split_fields(definition: str) -> list[str]:
    """Split a comma separated definition into fields, honoring double quoted fields.

    :param definition: A definition such as 'type=semver,"pattern={{major}}.{{minor}}"'.

    :return: The list of fields, trimmed.
    """
    rows = list(csv.reader([definition], skipinitialspace=True))
    if not rows:
        return []
    return [field.strip() for field in rows[0]]


def split_attribute(field: str) -> tuple[str | None, str]:
    """Split a 'key=value' field on its first '='.

    :return: A (lower-cased key, value) tuple, or (None, field) if the field has no key.
    """
    key, sep, value = field.partition("=")
    if not sep or not key.strip():
        return None, field.strip()
    return key.strip().lower(), value.strip()


def parse_input_list(text: str | None, ignore_comma: bool = True, comment: str | None = "#") -> list[str]:
    """Split a multi-line input into a list of entries.

    Empty lines and lines starting with the comment prefix are dropped.

    :param text: The raw input.
    :param ignore_comma: If False, each line is also split on commas.
    :param comment: The comment prefix, or None to keep every line.

    :return: The list of entries.
    """
    if not text:
        return []

    items = []
    for line in text.splitlines():
        trimmed = line.strip()
        if not trimmed:
            continue
        if comment and trimmed.startswith(comment):
            continue
        if ignore_comma:
            items.append(trimmed)
        else:
            items.extend(item.strip() for item in trimmed.split(",") if item.strip())
    return items
