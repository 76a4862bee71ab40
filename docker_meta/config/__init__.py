from docker_meta.config.flavor import Flavor, FlavorLatest, parse_flavor
from docker_meta.config.image import Image, parse_image, parse_images
from docker_meta.config.inputs import Inputs
from docker_meta.config.shared import parse_input_list
from docker_meta.config.tag import (
    EdgeRule,
    MatchRule,
    Pep440Rule,
    RawRule,
    RefEvent,
    RefRule,
    ScheduleRule,
    SemverRule,
    ShaFormat,
    ShaRule,
    TagRule,
    TagRuleTypes,
    TagType,
    parse_tag,
    parse_tags,
)

__all__ = [
    "EdgeRule",
    "Flavor",
    "FlavorLatest",
    "Image",
    "Inputs",
    "MatchRule",
    "Pep440Rule",
    "RawRule",
    "RefEvent",
    "RefRule",
    "ScheduleRule",
    "SemverRule",
    "ShaFormat",
    "ShaRule",
    "TagRule",
    "TagRuleTypes",
    "TagType",
    "parse_flavor",
    "parse_image",
    "parse_images",
    "parse_input_list",
    "parse_tag",
    "parse_tags",
]
