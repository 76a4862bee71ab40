"""Tests for docker_meta.error module.

These tests cover the exception classes and their string representations.
"""

import pytest
from jinja2 import TemplateSyntaxError

from docker_meta.error import ConfigError, DockerMetaError, EvaluationError, GitContextError

pytestmark = [pytest.mark.unit]


class TestDockerMetaError:
    def test_base_exception(self):
        """Test that DockerMetaError can be instantiated and raised."""
        err = DockerMetaError("Test error message")
        assert str(err) == "Test error message"
        assert isinstance(err, Exception)

    def test_raise_and_catch(self):
        """Test that subclasses can be caught as DockerMetaError."""
        with pytest.raises(DockerMetaError, match="Bad tag"):
            raise ConfigError("Bad tag")


class TestConfigError:
    def test_message(self):
        err = ConfigError("Unknown tag type attribute: foo")
        assert str(err) == "Unknown tag type attribute: foo"
        assert err.value is None
        assert not getattr(err, "__notes__", [])

    def test_offending_value_note(self):
        """Test that the offending value is attached as a note."""
        err = ConfigError("Unknown tag type attribute: foo", value="type=foo")
        assert err.value == "type=foo"
        assert err.__notes__ == ["Offending value: 'type=foo'"]


class TestEvaluationError:
    def test_without_pattern(self):
        err = EvaluationError("Unknown foo attribute")
        assert str(err) == "Error evaluating expression: Unknown foo attribute"

    def test_with_pattern(self):
        err = EvaluationError('Missing helper: "version"', pattern="{{version 'x'}}")
        assert str(err) == "Error evaluating expression '{{version 'x'}}': Missing helper: \"version\""

    def test_with_template_error_cause(self):
        """Test that the line number of a Jinja2 error is included."""
        cause = TemplateSyntaxError("unexpected end of template", lineno=1)
        err = EvaluationError("unexpected end of template", pattern="{{ foo", cause=cause)
        assert err.__cause__ is cause
        assert str(err) == "Error evaluating expression '{{ foo', line 1: unexpected end of template"


class TestGitContextError:
    def test_with_path(self):
        err = GitContextError("Failed to get git context", path="/tmp/repo")
        assert str(err) == "Failed to get git context\n  - Repository path: /tmp/repo"

    def test_without_path(self):
        err = GitContextError("Failed to get git context")
        assert str(err) == "Failed to get git context"
