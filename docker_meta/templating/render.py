from typing import Any

import jinja2

from docker_meta.error import EvaluationError


def format_value(value: Any) -> Any:
    """Formats a substituted value the way handlebars prints it

    None renders empty, booleans render lowercase and integral floats render without a fractional part.

    :param value: The value produced by a template expression.
    :return: The value to write to the template output.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return value


def jinja2_env(**kwargs) -> jinja2.Environment:
    """Creates a Jinja2 environment for rendering rule expressions

    Output is never HTML escaped and trailing newlines are kept, so a rendered expression is exactly the substituted
    pattern. Undefined names, including attributes of undefined names, render empty.

    :param kwargs: Additional keyword arguments to pass to the Jinja2 Environment constructor.
    :return: A Jinja2 Environment instance.
    """
    kwargs.setdefault("autoescape", False)
    kwargs.setdefault("keep_trailing_newline", True)
    kwargs.setdefault("undefined", jinja2.ChainableUndefined)
    kwargs.setdefault("finalize", format_value)
    return jinja2.Environment(**kwargs)


def render_template(template: str, **kwargs) -> str:
    """Renders a Jinja2 template with the provided keyword arguments

    :param template: The Jinja2 template string to render.
    :param kwargs: Additional values to pass to the template for rendering.
    :return: The rendered template as a string.
    """
    try:
        compiled = jinja2_env().from_string(template)
        return compiled.render(**kwargs)
    except EvaluationError:
        raise
    except (jinja2.TemplateError, TypeError, ValueError) as e:
        raise EvaluationError(str(e), pattern=template, cause=e)
