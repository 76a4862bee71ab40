import datetime

import pytest

from docker_meta.config import parse_flavor, parse_images, parse_tags
from docker_meta.context import Repo, ResolutionContext
from docker_meta.meta import Meta

CONST_DATETIME_NOW = datetime.datetime(2020, 1, 10, 0, 30, 0, tzinfo=datetime.UTC)
CONST_COMMIT_DATE = datetime.datetime(2024, 11, 13, 13, 42, 28, tzinfo=datetime.UTC)
CONST_SHA = "860c1904a1ce19322e91ac35af1ab07466440c37"


@pytest.fixture
def datetime_now_value():
    """Return a fixed process start time for testing."""
    return CONST_DATETIME_NOW


@pytest.fixture
def commit_date_value():
    """Return a fixed commit date for testing."""
    return CONST_COMMIT_DATE


@pytest.fixture
def sha_value():
    """Return a fixed commit SHA for testing."""
    return CONST_SHA


@pytest.fixture
def repo():
    """Return a repository descriptor for testing."""
    return Repo(
        name="Hello-World",
        description="This your first repo!",
        url="https://github.com/octocat/Hello-World",
        default_branch="master",
        license="MIT",
    )


@pytest.fixture
def make_context(repo, datetime_now_value, commit_date_value, sha_value):
    """Return a factory for resolution contexts on top of fixed test values."""

    def _make_context(ref: str = "refs/heads/dev", **kwargs) -> ResolutionContext:
        values = {
            "sha": sha_value,
            "ref": ref,
            "commit_date": commit_date_value,
            "event_name": "push",
            "now": datetime_now_value,
            "repo": repo,
        }
        values.update(kwargs)
        return ResolutionContext(**values)

    return _make_context


@pytest.fixture
def make_meta(make_context):
    """Return a factory building Meta from raw definitions."""

    def _make_meta(
        tags: list[str],
        images: list[str] | None = None,
        flavor: list[str] | None = None,
        labels: list[str] | None = None,
        annotations: list[str] | None = None,
        bake_target: str = "docker-metadata-action",
        **context_kwargs,
    ) -> Meta:
        return Meta(
            ctx=make_context(**context_kwargs),
            rules=parse_tags(tags),
            images=parse_images(images or []),
            flavor=parse_flavor(flavor or []),
            labels=labels,
            annotations=annotations,
            bake_target=bake_target,
        )

    return _make_meta
