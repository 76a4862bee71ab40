from typing import Annotated

from pydantic import Field

from docker_meta.config.shared import DockerMetaModel, split_attribute, split_fields
from docker_meta.error import ConfigError


class Image(DockerMetaModel):
    """An image reference tags are generated for."""

    name: Annotated[str, Field(min_length=1, examples=["ghcr.io/owner/app", "name=owner/app,enable=false"])]
    enable: Annotated[bool, Field(default=True, description="Disabled images are not tagged.")]


def parse_image(definition: str) -> Image:
    """Parse an image definition such as 'name=owner/app,enable=false' or a bare image name.

    :param definition: The image definition.

    :return: The parsed image.

    :raises ConfigError: If the name is empty or an attribute is unknown or invalid.
    """
    name = ""
    enable = True
    for field in split_fields(definition):
        key, value = split_attribute(field)
        if key is None or key == "name":
            name = value
        elif key == "enable":
            if value not in ("true", "false"):
                raise ConfigError(f"Invalid enable attribute for image: {definition}", value=definition)
            enable = value == "true"
        else:
            raise ConfigError(f"Unknown image attribute: {key}", value=definition)

    if not name:
        raise ConfigError(f"Image name attribute empty: {definition}", value=definition)
    return Image(name=name, enable=enable)


def parse_images(definitions: list[str]) -> list[Image]:
    return [parse_image(d) for d in definitions]
