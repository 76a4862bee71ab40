import logging

from docker_meta.config.flavor import Flavor
from docker_meta.config.tag import TagRuleTypes
from docker_meta.context import ResolutionContext
from docker_meta.error import ConfigError
from docker_meta.resolve.processors import process_rule
from docker_meta.resolve.version import Version
from docker_meta.templating import render_global

log = logging.getLogger(__name__)


def is_enabled(rule: TagRuleTypes, ctx: ResolutionContext) -> bool:
    """Evaluate the enable attribute of a tag rule.

    :param rule: The tag rule.
    :param ctx: The resolution context.

    :return: True if the rule is enabled.

    :raises ConfigError: If the enable attribute does not evaluate to 'true' or 'false'.
    """
    enabled = render_global(rule.enable, ctx)
    if enabled not in ("true", "false"):
        raise ConfigError(f"Invalid value for enable attribute: {enabled}", value=rule.enable)
    return enabled == "true"


def resolve_version(rules: list[TagRuleTypes], ctx: ResolutionContext, flavor: Flavor) -> Version:
    """Resolve the image version from tag rules, in order.

    :param rules: The ordered tag rules.
    :param ctx: The resolution context.
    :param flavor: The flavor.

    :return: The resolved version. Its main version is None if no rule produced a value.
    """
    version = Version()
    for rule in rules:
        if not is_enabled(rule, ctx):
            log.debug(f"Skipping disabled {rule.type} rule")
            continue
        version = process_rule(version, rule, ctx, flavor)
    return version.finalize()
