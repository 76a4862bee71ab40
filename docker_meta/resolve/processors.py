"""Tag rule processors.

Each processor takes the accumulated Version, one enabled tag rule, the resolution context and the flavor, and
returns the Version with the rule's rendered value accepted, or the Version unchanged if the rule does not apply.
"""

import logging
import re
from typing import Callable

import semver
from packaging.version import InvalidVersion, Version as Pep440Version

from docker_meta.config.flavor import Flavor
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
    TagRuleTypes,
    TagType,
)
from docker_meta.const import SCHEDULE_EVENT_NAME
from docker_meta.context import ResolutionContext
from docker_meta.error import ConfigError
from docker_meta.resolve.version import Version
from docker_meta.templating import date_functions, is_raw_statement, render_expression, render_global
from docker_meta.util import short_sha

log = logging.getLogger(__name__)

Processor = Callable[[Version, TagRuleTypes, ResolutionContext, Flavor], Version]

REGEX_LITERAL_PATTERN = re.compile(r"^/(.+)/(.*)$")
REGEX_JS_NAMED_GROUP = re.compile(r"\(\?<(?![=!])")
REGEX_FLAGS = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    # Global, unicode, sticky and indices flags have no effect on a single search.
    "g": 0,
    "u": 0,
    "y": 0,
    "d": 0,
}


def compile_regex(pattern: str, allow_literal: bool = False) -> re.Pattern:
    """Compile a regex, accepting JavaScript style named groups.

    :param pattern: The regex.
    :param allow_literal: Accept '/regex/flags' literals.

    :return: The compiled regex.

    :raises ConfigError: If the regex or its flags are invalid.
    """
    flags = 0
    literal = REGEX_LITERAL_PATTERN.match(pattern) if allow_literal else None
    if literal:
        pattern = literal.group(1)
        for flag in literal.group(2):
            if flag not in REGEX_FLAGS:
                raise ConfigError(f"Invalid regular expression flag '{flag}'", value=literal.group(0))
            flags |= REGEX_FLAGS[flag]
    try:
        return re.compile(REGEX_JS_NAMED_GROUP.sub("(?P<", pattern), flags)
    except re.error as e:
        raise ConfigError(f"Invalid regular expression '{pattern}': {e}", value=pattern)


def set_value(value: str, rule: TagRuleTypes, ctx: ResolutionContext, flavor: Flavor) -> str:
    """Decorate a rendered value with the rule prefix and suffix, or the flavor ones if the rule declares none.

    :param value: The rendered value.
    :param rule: The tag rule.
    :param ctx: The resolution context used to evaluate prefix and suffix expressions.
    :param flavor: The flavor.

    :return: The decorated value.
    """
    if rule.prefix is not None:
        value = render_global(rule.prefix, ctx) + value
    elif flavor.prefix:
        value = render_global(flavor.prefix, ctx) + value
    if rule.suffix is not None:
        value = value + render_global(rule.suffix, ctx)
    elif flavor.suffix:
        value = value + render_global(flavor.suffix, ctx)
    return value


def source_value(rule: SemverRule | Pep440Rule | MatchRule, ctx: ResolutionContext) -> str | None:
    """Return the value a version rule is derived from.

    :return: The evaluated value attribute, the tag name, or None if the rule has no value and the ref is not a tag.
    """
    if rule.value:
        return render_global(rule.value, ctx)
    if ctx.is_tag:
        return ctx.tag
    return None


def extract_match(value: str, match: str) -> str:
    """Extract the first group of a regex from a value.

    The whole match is used if the regex has no group. The value is returned unchanged if the regex does not match.
    """
    if not match:
        return value
    m = compile_regex(match).search(value)
    if m is None:
        log.warning(f"{match} does not match {value}.")
        return value
    if m.re.groups:
        return m.group(1) or ""
    return m.group(0)


def parse_semver(value: str) -> semver.Version | None:
    """Parse a semantic version, accepting a single leading 'v'.

    :return: The parsed version, or None if the value is not a valid semantic version.
    """
    candidate = value.strip().removeprefix("v")
    try:
        return semver.Version.parse(candidate)
    except ValueError:
        return None


def process_schedule(version: Version, rule: ScheduleRule, ctx: ResolutionContext, flavor: Flavor) -> Version:
    if ctx.event_name != SCHEDULE_EVENT_NAME:
        return version

    value = set_value(render_expression(rule.pattern, date_functions(ctx)), rule, ctx, flavor)
    return version.accept(value, flavor.resolve_latest(False))


def process_semver(version: Version, rule: SemverRule, ctx: ResolutionContext, flavor: Flavor) -> Version:
    raw = source_value(rule, ctx)
    if raw is None:
        return version
    raw = extract_match(raw, rule.match).replace("/", "-")

    parsed = parse_semver(raw)
    if parsed is None:
        log.warning(f"{raw} is not a valid semver. More info: https://semver.org/")
        return version

    bare = f"{parsed.major}.{parsed.minor}.{parsed.patch}"
    if parsed.prerelease:
        bare += f"-{parsed.prerelease}"
    values = {
        "raw": raw.strip(),
        "version": bare,
        "major": parsed.major,
        "minor": parsed.minor,
        "patch": parsed.patch,
        "prerelease": parsed.prerelease or "",
        "build": parsed.build or "",
    }

    if parsed.prerelease:
        pattern = rule.pattern if is_raw_statement(rule.pattern) else "{{version}}"
        latest = False
    else:
        pattern = rule.pattern
        latest = True

    value = set_value(render_expression(pattern, values), rule, ctx, flavor)
    return version.accept(value, flavor.resolve_latest(latest))


def process_pep440(version: Version, rule: Pep440Rule, ctx: ResolutionContext, flavor: Flavor) -> Version:
    raw = source_value(rule, ctx)
    if raw is None:
        return version
    raw = extract_match(raw, rule.match).replace("/", "-")

    try:
        parsed = Pep440Version(raw)
    except InvalidVersion:
        log.warning(f"{raw} does not conform to PEP 440. More info: https://www.python.org/dev/peps/pep-0440")
        return version

    if parsed.is_prerelease or parsed.is_postrelease or parsed.is_devrelease:
        rendered = raw if is_raw_statement(rule.pattern) else str(parsed)
        latest = False
    else:
        rendered = render_expression(
            rule.pattern,
            {
                "raw": raw,
                "version": str(parsed),
                "major": parsed.major,
                "minor": parsed.minor,
                "patch": parsed.micro,
            },
        )
        latest = True

    value = set_value(rendered, rule, ctx, flavor)
    return version.accept(value, flavor.resolve_latest(latest))


def process_match(version: Version, rule: MatchRule, ctx: ResolutionContext, flavor: Flavor) -> Version:
    raw = source_value(rule, ctx)
    if raw is None:
        return version

    m = compile_regex(rule.pattern, allow_literal=True).search(raw)
    if m is None:
        log.warning(f"{rule.pattern} does not match {raw}.")
        return version
    if rule.group > m.re.groups or m.group(rule.group) is None:
        log.warning(f"Group {rule.group} does not exist for {rule.pattern} pattern.")
        return version

    value = set_value(m.group(rule.group), rule, ctx, flavor)
    return version.accept(value, flavor.resolve_latest(True))


def process_ref_branch(version: Version, rule: RefRule, ctx: ResolutionContext, flavor: Flavor) -> Version:
    if not ctx.is_branch:
        return version
    value = set_value(ctx.branch, rule, ctx, flavor)
    return version.accept(value, flavor.resolve_latest(False))


def process_ref_tag(version: Version, rule: RefRule, ctx: ResolutionContext, flavor: Flavor) -> Version:
    if not ctx.is_tag:
        return version
    value = set_value(ctx.tag, rule, ctx, flavor)
    return version.accept(value, flavor.resolve_latest(True))


def process_ref_pr(version: Version, rule: RefRule, ctx: ResolutionContext, flavor: Flavor) -> Version:
    if not ctx.is_pull_request:
        return version
    value = set_value(ctx.pull_request, rule, ctx, flavor)
    return version.accept(value, flavor.resolve_latest(False))


REF_PROCESSORS: dict[RefEvent, Processor] = {
    RefEvent.BRANCH: process_ref_branch,
    RefEvent.TAG: process_ref_tag,
    RefEvent.PR: process_ref_pr,
}


def process_ref(version: Version, rule: RefRule, ctx: ResolutionContext, flavor: Flavor) -> Version:
    return REF_PROCESSORS[rule.event](version, rule, ctx, flavor)


def process_edge(version: Version, rule: EdgeRule, ctx: ResolutionContext, flavor: Flavor) -> Version:
    if not ctx.is_branch:
        return version
    branch = rule.branch or ctx.default_branch
    if ctx.branch != branch:
        return version
    value = set_value("edge", rule, ctx, flavor)
    return version.accept(value, flavor.resolve_latest(False))


def process_raw(version: Version, rule: RawRule, ctx: ResolutionContext, flavor: Flavor) -> Version:
    value = set_value(render_global(rule.value, ctx), rule, ctx, flavor)
    return version.accept(value, flavor.resolve_latest(False))


def process_sha(version: Version, rule: ShaRule, ctx: ResolutionContext, flavor: Flavor) -> Version:
    if not ctx.sha:
        return version
    sha = ctx.sha
    if rule.format == ShaFormat.SHORT:
        sha = short_sha(sha, ctx.short_sha_length)
    value = set_value(sha, rule, ctx, flavor)
    return version.accept(value, flavor.resolve_latest(False))


PROCESSORS: dict[TagType, Processor] = {
    TagType.SCHEDULE: process_schedule,
    TagType.SEMVER: process_semver,
    TagType.PEP440: process_pep440,
    TagType.MATCH: process_match,
    TagType.EDGE: process_edge,
    TagType.REF: process_ref,
    TagType.RAW: process_raw,
    TagType.SHA: process_sha,
}


def process_rule(version: Version, rule: TagRuleTypes, ctx: ResolutionContext, flavor: Flavor) -> Version:
    """Dispatch a tag rule to the processor of its type."""
    return PROCESSORS[TagType(rule.type)](version, rule, ctx, flavor)
