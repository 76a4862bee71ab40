import logging
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import ConfigDict, Field, TypeAdapter, ValidationError, model_validator

from docker_meta.config.shared import DockerMetaModel, split_attribute, split_fields, validation_error_message
from docker_meta.error import ConfigError

log = logging.getLogger(__name__)


class TagType(str, Enum):
    """Enum of the supported tag rule types."""

    SCHEDULE = "schedule"
    SEMVER = "semver"
    PEP440 = "pep440"
    MATCH = "match"
    EDGE = "edge"
    REF = "ref"
    RAW = "raw"
    SHA = "sha"


class RefEvent(str, Enum):
    """Enum of the git reference classes a ref rule can follow."""

    BRANCH = "branch"
    TAG = "tag"
    PR = "pr"


class ShaFormat(str, Enum):
    SHORT = "short"
    LONG = "long"


class TagRuleBase(DockerMetaModel):
    """Attributes shared by every tag rule."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    priority: Annotated[int, Field(description="Rules with a higher priority are resolved first.")]
    enable: Annotated[
        str,
        Field(
            default="true",
            description="Expression that must evaluate to 'true' or 'false'. Disabled rules are skipped.",
            examples=["true", "{{is_default_branch}}"],
        ),
    ]
    prefix: Annotated[
        str | None,
        Field(default=None, description="Prefix for the rendered value. Overrides the flavor prefix when set."),
    ]
    suffix: Annotated[
        str | None,
        Field(default=None, description="Suffix for the rendered value. Overrides the flavor suffix when set."),
    ]


class ScheduleRule(TagRuleBase):
    """Tag rendered from a date pattern on scheduled runs."""

    type: Literal["schedule"] = "schedule"
    priority: int = 1000
    pattern: Annotated[str, Field(default="nightly", examples=["nightly", "{{date 'YYYYMMDD'}}"])]


class SemverRule(TagRuleBase):
    """Tag rendered from a semantic version."""

    type: Literal["semver"] = "semver"
    priority: int = 900
    pattern: Annotated[str, Field(examples=["{{version}}", "{{major}}.{{minor}}"])]
    value: Annotated[str, Field(default="", description="Version to use instead of the git tag.")]
    match: Annotated[str, Field(default="", description="Regex whose first group extracts the version.")]


class Pep440Rule(TagRuleBase):
    """Tag rendered from a PEP 440 version."""

    type: Literal["pep440"] = "pep440"
    priority: int = 900
    pattern: Annotated[str, Field(examples=["{{version}}", "{{major}}.{{minor}}"])]
    value: Annotated[str, Field(default="", description="Version to use instead of the git tag.")]
    match: Annotated[str, Field(default="", description="Regex whose first group extracts the version.")]


class MatchRule(TagRuleBase):
    """Tag rendered from a regex group."""

    type: Literal["match"] = "match"
    priority: int = 800
    pattern: Annotated[str, Field(description="Regex, or '/regex/flags' literal.", examples=[r"\d.\d.\d", "/v(.*)/i"])]
    group: Annotated[int, Field(default=0, ge=0, description="Index of the group to use.")]
    value: Annotated[str, Field(default="", description="Value to match instead of the git tag.")]


class EdgeRule(TagRuleBase):
    """'edge' tag for the latest commit of a branch."""

    type: Literal["edge"] = "edge"
    priority: int = 700
    branch: Annotated[str, Field(default="", description="Branch to follow. Defaults to the default branch.")]


class RefRule(TagRuleBase):
    """Tag rendered from the branch, tag or pull request reference."""

    type: Literal["ref"] = "ref"
    priority: int = 600
    event: RefEvent

    @model_validator(mode="before")
    @classmethod
    def default_pull_request_prefix(cls, data: Any) -> Any:
        """Default the prefix of pull request rules to 'pr-'."""
        if isinstance(data, dict) and data.get("event") == RefEvent.PR.value and data.get("prefix") is None:
            data = {**data, "prefix": "pr-"}
        return data


class RawRule(TagRuleBase):
    """Tag rendered from an arbitrary expression."""

    type: Literal["raw"] = "raw"
    priority: int = 200
    value: Annotated[str, Field(examples=["latest", "{{branch}}-{{sha}}"])]


class ShaRule(TagRuleBase):
    """Tag rendered from the commit SHA."""

    type: Literal["sha"] = "sha"
    priority: int = 100
    prefix: str | None = "sha-"
    format: ShaFormat = ShaFormat.SHORT


TagRuleTypes = Union[ScheduleRule, SemverRule, Pep440Rule, MatchRule, EdgeRule, RefRule, RawRule, ShaRule]
TagRule = Annotated[TagRuleTypes, Field(discriminator="type")]

tag_rule_adapter: TypeAdapter[TagRuleTypes] = TypeAdapter(TagRule)


def default_tag_definitions() -> list[str]:
    """Return the tag definitions used when none are given."""
    return [
        "type=schedule",
        f"type=ref,event={RefEvent.BRANCH.value}",
        f"type=ref,event={RefEvent.TAG.value}",
        f"type=ref,event={RefEvent.PR.value}",
    ]


def parse_tag(definition: str) -> TagRuleTypes:
    """Parse a tag definition such as 'type=semver,pattern={{version}}' into a tag rule.

    A field without a key is used as the rule value, and the type defaults to 'raw'.

    :param definition: The tag definition to parse.

    :return: The typed tag rule.

    :raises ConfigError: If the type is unknown or the attributes are invalid for the type.
    """
    attrs: dict[str, str] = {}
    for field in split_fields(definition):
        key, value = split_attribute(field)
        attrs[key or "value"] = value

    attrs.setdefault("type", TagType.RAW.value)
    if attrs["type"] not in [t.value for t in TagType]:
        raise ConfigError(f"Unknown tag type attribute: {attrs['type']}", value=definition)

    try:
        return tag_rule_adapter.validate_python(attrs)
    except ValidationError as e:
        raise ConfigError(f"Invalid tag definition '{definition}': {validation_error_message(e)}", value=definition)


def parse_tags(definitions: list[str]) -> list[TagRuleTypes]:
    """Parse tag definitions and order them by descending priority.

    Rules of equal priority keep their declaration order.

    :param definitions: The tag definitions. The default definitions are used if empty.

    :return: The ordered tag rules.
    """
    if not definitions:
        log.debug("No tag definitions given, using defaults")
        definitions = default_tag_definitions()
    rules = [parse_tag(d) for d in definitions]
    return sorted(rules, key=lambda rule: rule.priority, reverse=True)
