import logging
import os
import re
from datetime import datetime
from pathlib import Path
from typing import Annotated, Union

import git
from pydantic import BaseModel, ConfigDict, Field

from docker_meta.const import RefPrefix
from docker_meta.context import Repo
from docker_meta.error import GitContextError

log = logging.getLogger(__name__)

REGEX_SSH_REMOTE_URL = re.compile(r"git@([^:]+):([^/]+)/(.+?)(?:\.git)?$")
REGEX_HTTPS_REMOTE_URL = re.compile(r"https?://([^/]+)/([^/]+)/(.+?)(?:\.git)?$")
REMOTE_HEAD_PREFIX = "refs/remotes/origin/"
FALLBACK_DEFAULT_BRANCHES = ["main", "master"]


class GitContext(BaseModel):
    """Snapshot of a git checkout."""

    model_config = ConfigDict(frozen=True)

    sha: Annotated[str, Field(description="Full SHA of the HEAD commit.")]
    ref: Annotated[str, Field(description="Symbolic reference of HEAD, e.g. 'refs/heads/main'.")]
    commit_date: Annotated[datetime, Field(description="Committer date of the HEAD commit.")]
    remote_url: Annotated[str, Field(default="", description="URL of the 'origin' remote.")]
    default_branch: Annotated[str, Field(default="main", description="Default branch of the 'origin' remote.")]


def _head_ref(repo: git.Repo) -> str:
    """Return the symbolic branch ref of HEAD, the ref of a tag pointing at HEAD, or 'HEAD'."""
    if not repo.head.is_detached:
        return f"{RefPrefix.BRANCH.value}{repo.active_branch.name}"
    head_sha = repo.head.commit.hexsha
    for tag in repo.tags:
        if tag.commit.hexsha == head_sha:
            return f"{RefPrefix.TAG.value}{tag.name}"
    return "HEAD"


def _remote_url(repo: git.Repo) -> str:
    try:
        return repo.remote("origin").url
    except ValueError:
        log.debug("No 'origin' remote configured")
        return ""


def _default_branch(repo: git.Repo) -> str:
    """Return the default branch of the 'origin' remote, falling back to 'main' or 'master'."""
    try:
        remote_head = git.SymbolicReference(repo, f"{REMOTE_HEAD_PREFIX}HEAD")
        return remote_head.reference.path.removeprefix(REMOTE_HEAD_PREFIX)
    except (ValueError, TypeError, OSError) as e:
        log.debug(f"Unable to resolve the remote HEAD: {e}")

    remote_branches = [
        ref.path.removeprefix(REMOTE_HEAD_PREFIX) for ref in repo.references if ref.path.startswith(REMOTE_HEAD_PREFIX)
    ]
    for branch in FALLBACK_DEFAULT_BRANCHES:
        if branch in remote_branches:
            return branch
    return FALLBACK_DEFAULT_BRANCHES[0]


def get_git_context(path: Union[str, bytes, os.PathLike]) -> GitContext:
    """Collect a snapshot of the git checkout containing a path.

    :param path: A path inside the git checkout.

    :return: The git snapshot.

    :raises GitContextError: If the path is not inside a git checkout or HEAD has no commit.
    """
    try:
        repo = git.Repo(path, search_parent_directories=True)
        commit = repo.head.commit
        return GitContext(
            sha=commit.hexsha,
            ref=_head_ref(repo),
            commit_date=commit.committed_datetime,
            remote_url=_remote_url(repo),
            default_branch=_default_branch(repo),
        )
    except (git.InvalidGitRepositoryError, git.NoSuchPathError, ValueError) as e:
        raise GitContextError(f"Failed to get git context: {e}", path=str(Path(path)))


def parse_repo_from_remote_url(remote_url: str, default_branch: str) -> Repo:
    """Build a repository descriptor from a remote URL.

    SSH and HTTPS remotes are converted to 'https://<host>/<owner>/<repo>'. Other URLs are kept as is, named after
    their last path segment.

    :param remote_url: The remote URL.
    :param default_branch: The default branch of the repository.

    :return: The repository descriptor.
    """
    name = ""
    url = ""
    if remote_url:
        m = REGEX_SSH_REMOTE_URL.search(remote_url) or REGEX_HTTPS_REMOTE_URL.search(remote_url)
        if m:
            host, owner, name = m.groups()
            url = f"https://{host}/{owner}/{name}"
        else:
            name = remote_url.rstrip("/").split("/")[-1].removesuffix(".git")
            url = remote_url

    return Repo(name=name, url=url, default_branch=default_branch)
