import pytest

from docker_meta.error import EvaluationError
from docker_meta.templating.expression import (
    CommentNode,
    LiteralNode,
    MustacheNode,
    Path,
    TextNode,
    compile_expression,
    is_raw_statement,
    parse_expression,
    render_expression,
)

pytestmark = [pytest.mark.unit]


class TestParseExpression:
    def test_plain_text(self):
        assert parse_expression("nightly") == [TextNode("nightly")]

    def test_empty(self):
        assert parse_expression("") == []

    def test_substitutions(self):
        assert parse_expression("v{{major}}.{{ minor }}") == [
            TextNode("v"),
            MustacheNode("major"),
            TextNode("."),
            MustacheNode("minor"),
        ]

    def test_arguments_and_options(self):
        assert parse_expression("{{date 'YYYYMMDD' tz=\"Europe/Paris\"}}") == [
            MustacheNode("date", ("YYYYMMDD",), (("tz", "Europe/Paris"),))
        ]

    def test_literal_values(self):
        assert parse_expression("{{fn 1 2.5 true false null other.name}}") == [
            MustacheNode("fn", (1, 2.5, True, False, None, Path("other.name")))
        ]

    def test_triple_stash(self):
        assert parse_expression("{{{version}}}") == [MustacheNode("version")]

    def test_whitespace_control(self):
        assert parse_expression("{{~version~}}") == [MustacheNode("version")]

    def test_comments(self):
        assert parse_expression("a{{! short }}b{{!-- long }} --}}c") == [
            TextNode("a"),
            CommentNode(" short "),
            TextNode("b"),
            CommentNode(" long }} "),
            TextNode("c"),
        ]

    @pytest.mark.parametrize(
        "pattern,value",
        [("{{true}}", True), ("{{ false }}", False), ("{{null}}", None), ("{{42}}", 42), ("{{-1.5}}", -1.5)],
    )
    def test_literal_heads(self, pattern, value):
        assert parse_expression(pattern) == [LiteralNode(value)]

    def test_literal_head_with_arguments(self):
        with pytest.raises(EvaluationError, match='Missing helper: "true"'):
            parse_expression("{{true 'x'}}")

    def test_escaped_mustache(self):
        assert parse_expression("\\{{version}}") == [TextNode("{{version}}")]

    @pytest.mark.parametrize(
        "pattern",
        [
            "{{#if version}}{{version}}{{/if}}",
            "{{> partial}}",
            "{{^version}}",
            "{{else}}",
        ],
    )
    def test_unsupported_statements(self, pattern):
        with pytest.raises(EvaluationError, match="Unsupported statement"):
            parse_expression(pattern)

    @pytest.mark.parametrize(
        "pattern,message",
        [
            ("{{version", "Unterminated expression"),
            ("{{}}", "Empty expression"),
            ("{{ver-sion}}", "Invalid identifier"),
            ("{{! comment", "Unterminated comment"),
            ("{{fn tz='x' 'y'}}", "follows an option"),
        ],
    )
    def test_malformed(self, pattern, message):
        with pytest.raises(EvaluationError, match=message):
            parse_expression(pattern)


class TestIsRawStatement:
    @pytest.mark.parametrize("pattern", ["{{raw}}", "{{ raw }}", "{{{raw}}}"])
    def test_raw(self, pattern):
        assert is_raw_statement(pattern)

    @pytest.mark.parametrize("pattern", ["v{{raw}}", "{{version}}", "{{raw}}{{raw}}", "raw", "{{#raw}}"])
    def test_not_raw(self, pattern):
        assert not is_raw_statement(pattern)


class TestCompileExpression:
    def test_value_and_function(self):
        nodes = parse_expression("{{version}}-{{date 'YYYY' tz='UTC'}}")
        source = compile_expression(nodes, {"version": "1.0.0", "date": lambda *a, **kw: ""})
        assert source == '{{ version }}-{{ date("YYYY", tz="UTC") }}'

    def test_text_with_jinja_syntax_is_a_string_literal(self):
        assert compile_expression([TextNode('{% x %}"')], {}) == '{{ "{% x %}\\"" }}'

    def test_literal(self):
        assert compile_expression([LiteralNode(True), LiteralNode(None), LiteralNode(1.5)], {}) == (
            "{{ true }}{{ none }}{{ 1.5 }}"
        )

    def test_comments_are_dropped(self):
        assert compile_expression([TextNode("a"), CommentNode("b")], {}) == "a"

    def test_missing_helper(self):
        with pytest.raises(EvaluationError, match='Missing helper: "version"'):
            compile_expression([MustacheNode("version", ("x",))], {"version": "1.0.0"})


class TestRenderExpression:
    def test_values(self):
        assert render_expression("{{major}}.{{minor}}", {"major": 1, "minor": 2}) == "1.2"

    def test_functions(self):
        values = {"greet": lambda name, punct="": f"hi-{name}{punct}"}
        assert render_expression("{{greet 'bob' punct='!'}}", values) == "hi-bob!"

    def test_missing_value_renders_empty(self):
        assert render_expression("a{{missing}}b", {}) == "ab"

    def test_no_html_escaping(self):
        assert render_expression("{{value}}", {"value": "a&b<c>"}) == "a&b<c>"

    def test_literal_jinja_text(self):
        assert render_expression("100%-{% raw %}-{{v}}", {"v": "x"}) == "100%-{% raw %}-x"

    @pytest.mark.parametrize(
        "pattern,expected",
        [
            ("a{% endraw %}b", "a{% endraw %}b"),
            ("a{% raw %}b{{v}}", "a{% raw %}bx"),
            ("{#x#}", "{#x#}"),
            ("}}{{v}}{", "}}x{"),
            ("\"quoted\" \\ {%", "\"quoted\" \\ {%"),
        ],
    )
    def test_text_is_kept_verbatim(self, pattern, expected):
        assert render_expression(pattern, {"v": "x"}) == expected

    def test_unicode_text(self):
        assert render_expression("caf\u00e9-{%}-\U0001f433", {}) == "caf\u00e9-{%}-\U0001f433"

    def test_missing_dotted_name_renders_empty(self):
        assert render_expression("x{{foo.bar}}y", {}) == "xy"

    @pytest.mark.parametrize(
        "pattern,expected",
        [
            ("{{true}}", "true"),
            ("{{false}}", "false"),
            ("a{{null}}b", "ab"),
            ("{{undefined}}", ""),
            ("{{42}}", "42"),
            ("{{1.0}}", "1"),
            ("{{2.5}}", "2.5"),
        ],
    )
    def test_literals(self, pattern, expected):
        assert render_expression(pattern, {}) == expected

    def test_value_formatting(self):
        values = {"yes": True, "nothing": None}
        assert render_expression("{{yes}}-{{nothing}}", values) == "true-"

    def test_escaped_mustache(self):
        assert render_expression("\\{{version}}", {"version": "1.0.0"}) == "{{version}}"

    def test_comment(self):
        assert render_expression("nightly{{! build }}", {}) == "nightly"

    def test_error_has_pattern(self):
        with pytest.raises(EvaluationError) as exc_info:
            render_expression("{{version 'x'}}", {"version": "1.0.0"})
        assert exc_info.value.pattern == "{{version 'x'}}"
        assert "{{version 'x'}}" in str(exc_info.value)

    def test_function_error(self):
        def fail():
            raise ValueError("boom")

        with pytest.raises(EvaluationError, match="boom"):
            render_expression("{{fail}}", {"fail": fail})
