from enum import Enum
from typing import Annotated

from pydantic import Field

from docker_meta.config.shared import DockerMetaModel, split_attribute, split_fields
from docker_meta.error import ConfigError


class FlavorLatest(str, Enum):
    """Enum of the global latest tag policies."""

    AUTO = "auto"  # Each rule decides whether its value is the latest.
    TRUE = "true"  # Always tag latest.
    FALSE = "false"  # Never tag latest.


class Flavor(DockerMetaModel):
    """Global decoration applied to every rendered tag."""

    latest: Annotated[FlavorLatest, Field(default=FlavorLatest.AUTO, description="Latest tag policy.")]
    prefix: Annotated[str, Field(default="", description="Prefix for every tag. May be an expression.")]
    prefix_latest: Annotated[bool, Field(default=False, description="Also prefix the latest tag.")]
    suffix: Annotated[str, Field(default="", description="Suffix for every tag. May be an expression.")]
    suffix_latest: Annotated[bool, Field(default=False, description="Also suffix the latest tag.")]

    def resolve_latest(self, default: bool) -> bool:
        """Return the latest decision for a rule.

        :param default: The decision of the rule when the policy is 'auto'.
        """
        if self.latest == FlavorLatest.AUTO:
            return default
        return self.latest == FlavorLatest.TRUE


def _parse_bool(value: str, entry: str) -> bool:
    if value not in ("true", "false"):
        raise ConfigError(f"Invalid value '{value}' for onlatest attribute", value=entry)
    return value == "true"


def parse_flavor(entries: list[str]) -> Flavor:
    """Parse flavor entries such as 'latest=auto' or 'prefix=foo-,onlatest=true'.

    :param entries: The flavor entries.

    :return: The parsed flavor.

    :raises ConfigError: If an entry is malformed or unknown.
    """
    flavor = Flavor()
    for entry in entries:
        onlatest_for = None
        for field in split_fields(entry):
            key, value = split_attribute(field)
            if key is None:
                raise ConfigError(f"Invalid flavor entry: {entry}", value=entry)
            if key == "latest":
                if value not in [f.value for f in FlavorLatest]:
                    raise ConfigError(f"Invalid latest flavor entry: {entry}", value=entry)
                flavor.latest = FlavorLatest(value)
            elif key in ("prefix", "suffix"):
                setattr(flavor, key, value)
                onlatest_for = key
            elif key == "onlatest":
                if onlatest_for is None:
                    raise ConfigError(f"onlatest must follow a prefix or suffix: {entry}", value=entry)
                setattr(flavor, f"{onlatest_for}_latest", _parse_bool(value, entry))
            else:
                raise ConfigError(f"Unknown flavor entry: {entry}", value=entry)
    return flavor
