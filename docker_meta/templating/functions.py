from datetime import datetime
from functools import partial
from typing import Any, Callable

import pendulum

from docker_meta.context import ResolutionContext
from docker_meta.error import EvaluationError
from docker_meta.templating.expression import render_expression
from docker_meta.util import short_sha

# moment.js default format
DEFAULT_DATE_FORMAT = "YYYY-MM-DDTHH:mm:ssZ"


def format_datetime(value: datetime, fmt: str | None = None, **options: Any) -> str:
    """Format a timestamp with a moment.js style format string.

    :param value: The timestamp to format.
    :param fmt: The format string, e.g. 'YYYYMMDD' or 'YYYY-MM-DDTHH:mm:ss.SSS[Z]'.
    :param options: Named options. Only 'tz' (an IANA timezone name, default 'UTC') is accepted.

    :return: The formatted timestamp.

    :raises EvaluationError: If an unknown option or timezone is given.
    """
    tz = "UTC"
    for key, option in options.items():
        if key == "tz":
            tz = str(option)
        else:
            raise EvaluationError(f"Unknown {key} attribute")
    if fmt is None:
        fmt = DEFAULT_DATE_FORMAT

    try:
        converted = pendulum.instance(value).in_timezone(tz)
    except ValueError as e:
        raise EvaluationError(f"Unknown timezone '{tz}'", cause=e)
    return converted.format(str(fmt))


def date_functions(ctx: ResolutionContext) -> dict[str, Callable[..., str]]:
    """Return the date functions bound to a resolution context."""
    return {
        "date": partial(format_datetime, ctx.now),
        "commit_date": partial(format_datetime, ctx.commit_date),
    }


def global_functions(ctx: ResolutionContext) -> dict[str, Callable[..., str]]:
    """Return the functions available to every rule expression, bound to a resolution context.

    :param ctx: The resolution context to bind.

    :return: A mapping of function names to functions.
    """

    def is_default_branch() -> str:
        return "true" if ctx.is_default_branch else "false"

    def is_not_default_branch() -> str:
        return "false" if ctx.is_default_branch else "true"

    functions = {
        "branch": lambda: ctx.branch,
        "tag": lambda: ctx.tag,
        "sha": lambda: short_sha(ctx.sha, ctx.short_sha_length),
        # No pull request base ref is available from a git checkout.
        "base_ref": lambda: "",
        "is_default_branch": is_default_branch,
        "is_not_default_branch": is_not_default_branch,
    }
    functions.update(date_functions(ctx))
    return functions


def render_global(pattern: str, ctx: ResolutionContext) -> str:
    """Render a pattern with the global functions bound to a resolution context."""
    return render_expression(pattern, global_functions(ctx))
