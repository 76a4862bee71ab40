"""Handlebars-style rule expressions.

Rule patterns use mustache substitutions such as ``{{version}}``, ``{{branch}}`` or
``{{date 'YYYYMMDD' tz='Europe/Paris'}}``. Only single substitutions are supported: a name, optionally followed by
positional arguments and ``key=value`` options. Patterns are parsed into nodes, compiled into a Jinja2 template and
rendered against a mapping of values and functions.
"""

import json
import re
from typing import Any, Callable, Mapping, NamedTuple

from docker_meta.error import EvaluationError
from docker_meta.templating.render import render_template

REGEX_PATH = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$")
REGEX_NUMBER = re.compile(r"^-?\d+(\.\d+)?$")
REGEX_TOKEN = re.compile(
    r"""
    (?P<string>"(?:[^"\\]|\\.)*"|'(?:[^'\\]|\\.)*')
    |(?P<equals>=)
    |(?P<word>[^\s"'=}~]+)
    """,
    re.VERBOSE,
)
UNSUPPORTED_STATEMENT_PREFIXES = ("#", "/", "^", ">", "*")
LITERAL_NAMES = ("true", "false", "null", "undefined")


class Path(NamedTuple):
    """Reference to a named value or function."""

    name: str


class TextNode(NamedTuple):
    text: str


class CommentNode(NamedTuple):
    text: str


class MustacheNode(NamedTuple):
    name: str
    params: tuple[Any, ...] = ()
    options: tuple[tuple[str, Any], ...] = ()


class LiteralNode(NamedTuple):
    """Substitution of a literal such as ``{{true}}`` or ``{{42}}``."""

    value: Any


Node = TextNode | CommentNode | MustacheNode | LiteralNode


def _parse_value(token: str, pattern: str) -> Any:
    if token[0] in "\"'":
        return re.sub(r"\\(.)", r"\1", token[1:-1])
    if token == "true":
        return True
    if token == "false":
        return False
    if token in ("null", "undefined"):
        return None
    if REGEX_NUMBER.match(token):
        return float(token) if "." in token else int(token)
    if not REGEX_PATH.match(token):
        raise EvaluationError(f"Invalid identifier '{token}'", pattern=pattern)
    return Path(token)


def _parse_mustache(pattern: str, start: int, close: str) -> tuple[MustacheNode | LiteralNode, int]:
    """Parse the body of a mustache starting after its opening delimiter.

    :return: The parsed node and the position following the closing delimiter.
    """
    tokens: list[tuple[str, str]] = []
    pos = start
    if pattern.startswith("~", pos):
        pos += 1
    while True:
        while pos < len(pattern) and pattern[pos].isspace():
            pos += 1
        if pos >= len(pattern):
            raise EvaluationError("Unterminated expression, expected '" + close + "'", pattern=pattern)
        if pattern.startswith(close, pos):
            pos += len(close)
            break
        if pattern.startswith("~" + close, pos):
            pos += len(close) + 1
            break
        m = REGEX_TOKEN.match(pattern, pos)
        if m is None:
            raise EvaluationError(f"Unexpected character '{pattern[pos]}' at position {pos}", pattern=pattern)
        tokens.append((m.lastgroup, m.group()))
        pos = m.end()

    if not tokens:
        raise EvaluationError("Empty expression", pattern=pattern)

    kind, head = tokens[0]
    if kind != "word":
        raise EvaluationError(f"Expected a name, got {head}", pattern=pattern)
    if head.startswith("&"):
        head = head[1:]
    if head.startswith(UNSUPPORTED_STATEMENT_PREFIXES) or head == "else":
        raise EvaluationError(f"Unsupported statement '{head}'", pattern=pattern)
    if head in LITERAL_NAMES or REGEX_NUMBER.match(head):
        if len(tokens) > 1:
            raise EvaluationError(f'Missing helper: "{head}"', pattern=pattern)
        return LiteralNode(_parse_value(head, pattern)), pos
    if not REGEX_PATH.match(head):
        raise EvaluationError(f"Invalid identifier '{head}'", pattern=pattern)

    params = []
    options = []
    i = 1
    while i < len(tokens):
        kind, token = tokens[i]
        if i + 1 < len(tokens) and tokens[i + 1][0] == "equals":
            if kind != "word" or i + 2 >= len(tokens) or tokens[i + 2][0] == "equals":
                raise EvaluationError(f"Invalid option '{token}='", pattern=pattern)
            options.append((token, _parse_value(tokens[i + 2][1], pattern)))
            i += 3
            continue
        if kind == "equals":
            raise EvaluationError("Unexpected '='", pattern=pattern)
        if options:
            raise EvaluationError(f"Positional argument '{token}' follows an option", pattern=pattern)
        params.append(_parse_value(token, pattern))
        i += 1

    return MustacheNode(head, tuple(params), tuple(options)), pos


def parse_expression(pattern: str) -> list[Node]:
    """Parse a pattern into text, comment and mustache nodes.

    :param pattern: The pattern to parse.

    :return: The list of nodes in order of appearance.

    :raises EvaluationError: If the pattern is malformed or uses unsupported statements.
    """
    nodes: list[Node] = []
    text: list[str] = []
    pos = 0

    def flush():
        if text:
            nodes.append(TextNode("".join(text)))
            text.clear()

    while pos < len(pattern):
        if pattern.startswith("\\{{", pos):
            text.append("{{")
            pos += 3
        elif pattern.startswith("{{!--", pos):
            flush()
            end = pattern.find("--}}", pos + 5)
            if end < 0:
                raise EvaluationError("Unterminated comment", pattern=pattern)
            nodes.append(CommentNode(pattern[pos + 5 : end]))
            pos = end + 4
        elif pattern.startswith("{{!", pos):
            flush()
            end = pattern.find("}}", pos + 3)
            if end < 0:
                raise EvaluationError("Unterminated comment", pattern=pattern)
            nodes.append(CommentNode(pattern[pos + 3 : end]))
            pos = end + 2
        elif pattern.startswith("{{{", pos):
            flush()
            node, pos = _parse_mustache(pattern, pos + 3, "}}}")
            nodes.append(node)
        elif pattern.startswith("{{", pos):
            flush()
            node, pos = _parse_mustache(pattern, pos + 2, "}}")
            nodes.append(node)
        else:
            text.append(pattern[pos])
            pos += 1
    flush()

    return nodes


def is_raw_statement(pattern: str) -> bool:
    """Check whether a pattern is exactly one substitution of the 'raw' value.

    :param pattern: The pattern to check.

    :return: True if the pattern consists solely of a '{{raw}}' substitution.
    """
    try:
        nodes = parse_expression(pattern)
    except EvaluationError:
        return False
    return len(nodes) == 1 and isinstance(nodes[0], MustacheNode) and nodes[0].name == "raw"


def _jinja_value(value: Any) -> str:
    if isinstance(value, Path):
        return value.name
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "none"
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    return repr(value)


def _jinja_text(text: str) -> str:
    if any(c in text for c in "{}%#"):
        return "{{ " + _jinja_value(text) + " }}"
    return text


def compile_expression(nodes: list[Node], values: Mapping[str, Any]) -> str:
    """Compile parsed nodes into Jinja2 template source.

    Names bound to callables are invoked, other names are substituted as values.

    :param nodes: The parsed nodes.
    :param values: The values and functions available to the expression.

    :return: The Jinja2 template source.
    """
    source = []
    for node in nodes:
        if isinstance(node, TextNode):
            source.append(_jinja_text(node.text))
        elif isinstance(node, MustacheNode):
            is_function = callable(values.get(node.name))
            if not is_function and (node.params or node.options):
                raise EvaluationError(f'Missing helper: "{node.name}"')
            if is_function:
                args = [_jinja_value(p) for p in node.params]
                args.extend(f"{key}={_jinja_value(value)}" for key, value in node.options)
                source.append("{{ " + node.name + "(" + ", ".join(args) + ") }}")
            else:
                source.append("{{ " + node.name + " }}")
        elif isinstance(node, LiteralNode):
            source.append("{{ " + _jinja_value(node.value) + " }}")
    return "".join(source)


def render_expression(pattern: str, values: Mapping[str, Any | Callable[..., Any]]) -> str:
    """Render a pattern against a mapping of values and functions.

    :param pattern: The pattern to render.
    :param values: The values and functions available to the expression.

    :return: The rendered string.

    :raises EvaluationError: If the pattern is malformed or a function fails.
    """
    try:
        source = compile_expression(parse_expression(pattern), values)
        return render_template(source, **values)
    except EvaluationError as e:
        e.pattern = pattern
        raise
