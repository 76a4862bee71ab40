from docker_meta.templating.expression import is_raw_statement, parse_expression, render_expression
from docker_meta.templating.functions import date_functions, format_datetime, global_functions, render_global

__all__ = [
    "date_functions",
    "format_datetime",
    "global_functions",
    "is_raw_statement",
    "parse_expression",
    "render_expression",
    "render_global",
]
