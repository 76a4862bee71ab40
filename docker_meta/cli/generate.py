import logging
from datetime import datetime, UTC
from pathlib import Path
from typing import Annotated, Optional

import typer

from docker_meta.config import Inputs
from docker_meta.cli.common import auto_path, with_verbosity_flags
from docker_meta.const import DEFAULT_BAKE_TARGET, DEFAULT_EVENT_NAME
from docker_meta.context import ResolutionContext
from docker_meta.error import DockerMetaError
from docker_meta.git import get_git_context, parse_repo_from_remote_url
from docker_meta.log import log_group, stdout_console
from docker_meta.meta import Meta
from docker_meta.outputs import generate_outputs, write_github_output
from docker_meta.settings import Settings

log = logging.getLogger(__name__)


@with_verbosity_flags
def generate(
    context: Annotated[
        Path,
        typer.Option(
            exists=True,
            file_okay=False,
            dir_okay=True,
            readable=True,
            resolve_path=True,
            help="A path inside the git checkout. Defaults to the current working directory where invoked.",
        ),
    ] = auto_path(),
    images: Annotated[
        Optional[str],
        typer.Option(
            envvar="INPUT_IMAGES",
            show_default=False,
            help="New line separated images, e.g. 'ghcr.io/owner/app' or 'name=owner/app,enable=false'.",
            rich_help_panel="Inputs",
        ),
    ] = None,
    tags: Annotated[
        Optional[str],
        typer.Option(
            envvar="INPUT_TAGS",
            show_default=False,
            help="New line separated tag rules, e.g. 'type=semver,pattern={{version}}'.",
            rich_help_panel="Inputs",
        ),
    ] = None,
    flavor: Annotated[
        Optional[str],
        typer.Option(
            envvar="INPUT_FLAVOR",
            show_default=False,
            help="New line separated flavor entries, e.g. 'latest=auto' or 'prefix=foo-,onlatest=true'.",
            rich_help_panel="Inputs",
        ),
    ] = None,
    labels: Annotated[
        Optional[str],
        typer.Option(
            envvar="INPUT_LABELS",
            show_default=False,
            help="New line separated 'key=value' labels.",
            rich_help_panel="Inputs",
        ),
    ] = None,
    annotations: Annotated[
        Optional[str],
        typer.Option(
            envvar="INPUT_ANNOTATIONS",
            show_default=False,
            help="New line separated 'key=value' annotations.",
            rich_help_panel="Inputs",
        ),
    ] = None,
    sep_tags: Annotated[
        Optional[str],
        typer.Option(envvar="INPUT_SEP-TAGS", help="Separator of the tags output.", rich_help_panel="Outputs"),
    ] = "\n",
    sep_labels: Annotated[
        Optional[str],
        typer.Option(envvar="INPUT_SEP-LABELS", help="Separator of the labels output.", rich_help_panel="Outputs"),
    ] = "\n",
    sep_annotations: Annotated[
        Optional[str],
        typer.Option(
            envvar="INPUT_SEP-ANNOTATIONS", help="Separator of the annotations output.", rich_help_panel="Outputs"
        ),
    ] = "\n",
    bake_target: Annotated[
        Optional[str],
        typer.Option(envvar="INPUT_BAKE-TARGET", help="Name of the bake target.", rich_help_panel="Outputs"),
    ] = DEFAULT_BAKE_TARGET,
    bake_dir: Annotated[
        Optional[Path],
        typer.Option(
            file_okay=False,
            dir_okay=True,
            show_default=False,
            help="Directory bake files are written to. Defaults to the temporary directory.",
            rich_help_panel="Outputs",
        ),
    ] = None,
    github_output: Annotated[
        Optional[Path],
        typer.Option(
            envvar="GITHUB_OUTPUT",
            dir_okay=False,
            show_default=False,
            help="File outputs are appended to, in the GitHub Actions output format.",
            rich_help_panel="Outputs",
        ),
    ] = None,
    ref: Annotated[
        Optional[str],
        typer.Option(
            envvar="GITHUB_REF",
            show_default=False,
            help="Git reference to use instead of the checkout HEAD, e.g. 'refs/pull/1/merge'.",
            rich_help_panel="Git Context",
        ),
    ] = None,
    sha: Annotated[
        Optional[str],
        typer.Option(
            envvar="GITHUB_SHA",
            show_default=False,
            help="Commit SHA to use instead of the checkout HEAD.",
            rich_help_panel="Git Context",
        ),
    ] = None,
    event_name: Annotated[
        Optional[str],
        typer.Option(envvar="GITHUB_EVENT_NAME", help="Name of the triggering event.", rich_help_panel="Git Context"),
    ] = DEFAULT_EVENT_NAME,
) -> None:
    """Generates image tags, labels, annotations and bake files from git context

    Outputs are logged, the JSON output is printed to stdout, and bake files are written for tags, labels,
    annotations, and tags and labels combined.
    """
    try:
        settings = Settings()
        inputs = Inputs.from_text(
            images=images,
            tags=tags,
            flavor=flavor,
            labels=labels,
            annotations=annotations,
            sep_tags=sep_tags,
            sep_labels=sep_labels,
            sep_annotations=sep_annotations,
            bake_target=bake_target,
        )

        git_context = get_git_context(context)
        repo = parse_repo_from_remote_url(git_context.remote_url, git_context.default_branch)
        ctx = ResolutionContext(
            sha=sha or git_context.sha,
            ref=ref or git_context.ref,
            commit_date=git_context.commit_date,
            event_name=event_name or DEFAULT_EVENT_NAME,
            now=datetime.now(UTC),
            repo=repo,
            short_sha_length=settings.short_sha_length,
        )
        log_group(
            log,
            "Context info",
            [f"sha: {ctx.sha}", f"ref: {ctx.ref}", f"commitDate: {ctx.commit_date.isoformat()}"],
        )

        meta = Meta.from_inputs(inputs, ctx)
        outputs = generate_outputs(meta, inputs, settings.annotations_levels, bake_dir or settings.temporary_storage)
    except DockerMetaError as e:
        log.error(str(e))
        raise typer.Exit(code=1)

    if github_output is not None:
        write_github_output(github_output, outputs)
        log.debug(f"Wrote outputs to {github_output}")
    stdout_console.print(outputs["json"], markup=False, emoji=False, highlight=False, soft_wrap=True)
