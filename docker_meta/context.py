from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from docker_meta.const import DEFAULT_EVENT_NAME, DEFAULT_SHORT_SHA_LENGTH, RefPrefix


class Repo(BaseModel):
    """Descriptive metadata of the repository images are built from."""

    model_config = ConfigDict(frozen=True)

    name: Annotated[str, Field(default="", description="Name of the repository.")]
    description: Annotated[str, Field(default="", description="Description of the repository.")]
    url: Annotated[str, Field(default="", description="Browsable URL of the repository.")]
    default_branch: Annotated[str, Field(default="", description="Default branch of the repository.")]
    license: Annotated[str, Field(default="", description="SPDX license expression of the repository.")]


class ResolutionContext(BaseModel):
    """Immutable snapshot used to resolve tag rules.

    The snapshot is captured once per run so that date and SHA expressions evaluate identically every time they are
    referenced.
    """

    model_config = ConfigDict(frozen=True)

    sha: Annotated[str, Field(default="", description="Full commit SHA.")]
    ref: Annotated[str, Field(default="", description="Symbolic git reference, e.g. 'refs/heads/main'.")]
    commit_date: Annotated[datetime, Field(description="Timestamp of the commit.")]
    event_name: Annotated[str, Field(default=DEFAULT_EVENT_NAME, description="Name of the triggering event.")]
    now: Annotated[datetime, Field(description="Timestamp captured at process start.")]
    repo: Annotated[Repo, Field(default_factory=Repo, description="Repository descriptor.")]
    short_sha_length: Annotated[
        int, Field(default=DEFAULT_SHORT_SHA_LENGTH, ge=0, description="Number of characters of a short SHA.")
    ]

    @property
    def default_branch(self) -> str:
        return self.repo.default_branch

    @property
    def is_branch(self) -> bool:
        return self.ref.startswith(RefPrefix.BRANCH.value)

    @property
    def is_tag(self) -> bool:
        return self.ref.startswith(RefPrefix.TAG.value)

    @property
    def is_pull_request(self) -> bool:
        return self.ref.startswith(RefPrefix.PULL_REQUEST.value)

    @property
    def branch(self) -> str:
        """Return the branch name, or an empty string if the ref is not a branch."""
        if not self.is_branch:
            return ""
        return self.ref.removeprefix(RefPrefix.BRANCH.value)

    @property
    def tag(self) -> str:
        """Return the tag name, or an empty string if the ref is not a tag."""
        if not self.is_tag:
            return ""
        return self.ref.removeprefix(RefPrefix.TAG.value)

    @property
    def pull_request(self) -> str:
        """Return the pull request number, or an empty string if the ref is not a pull request."""
        if not self.is_pull_request:
            return ""
        return self.ref.removeprefix(RefPrefix.PULL_REQUEST.value).removesuffix("/merge")

    @property
    def is_default_branch(self) -> bool:
        branch = self.branch
        return branch != "" and branch == self.default_branch
