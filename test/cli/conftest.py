from pathlib import Path
from typing import List

import pytest
from pytest_bdd import given, when, then, parsers
from typer.testing import CliRunner, Result

from docker_meta.cli.main import app
from docker_meta.git import GitContext

runner = CliRunner()

CLEARED_ENV_VARS = [
    "GITHUB_EVENT_NAME",
    "GITHUB_OUTPUT",
    "GITHUB_REF",
    "GITHUB_SHA",
    "INPUT_IMAGES",
    "INPUT_TAGS",
    "INPUT_FLAVOR",
    "INPUT_LABELS",
    "INPUT_ANNOTATIONS",
    "INPUT_SEP-TAGS",
    "INPUT_SEP-LABELS",
    "INPUT_SEP-ANNOTATIONS",
    "INPUT_BAKE-TARGET",
    "DOCKER_METADATA_SHORT_SHA_LENGTH",
    "DOCKER_METADATA_ANNOTATIONS_LEVELS",
]


def read_github_output(path: Path) -> dict[str, str]:
    """Parse a GitHub Actions output file, including heredoc values."""
    outputs = {}
    lines = iter(path.read_text().splitlines())
    for line in lines:
        if "<<" in line and "=" not in line:
            name, delimiter = line.split("<<", 1)
            value = []
            for value_line in lines:
                if value_line == delimiter:
                    break
                value.append(value_line)
            outputs[name] = "\n".join(value)
        else:
            name, value = line.split("=", 1)
            outputs[name] = value
    return outputs


class DockerMetaCommand:
    """Class representing a docker-meta command"""

    def __init__(self):
        self.reset()

    def __str__(self):
        return "docker-meta " + " ".join(self.clirunner_args)

    def reset(self):
        self.args: List[str] = []
        self.subcommand: List[str] = []
        self.result: Result | None = None
        self.env: dict[str, str | None] = {"TERM": "dumb", "NO_COLOR": "true"}
        self.env.update({name: None for name in CLEARED_ENV_VARS})

    @property
    def clirunner_args(self) -> List[str]:
        return self.subcommand + self.args

    def add_args(self, args: List[str]):
        # Filter out empty strings
        args = [a for a in args if a]
        self.args.extend(args)

    def run(self):
        self.result = runner.invoke(app, self.clirunner_args, catch_exceptions=True, env=self.env)


@pytest.fixture
def docker_meta_command():
    return DockerMetaCommand()


@pytest.fixture
def github_output_file(tmp_path) -> Path:
    return tmp_path / "github_output"


@pytest.fixture
def bake_dir(tmp_path) -> Path:
    directory = tmp_path / "bake"
    directory.mkdir()
    return directory


# Construct the docker-meta command and all arguments
@given("I call docker-meta")
def bare_command(docker_meta_command):
    docker_meta_command.reset()


@given(parsers.parse('I call docker-meta "{command}"'))
def sub_command(docker_meta_command, command):
    docker_meta_command.reset()
    docker_meta_command.subcommand = command.split()


@given(parsers.parse('in a git checkout on "{ref}"'))
def git_checkout(docker_meta_command, mocker, tmp_path, github_output_file, bake_dir, ref, sha_value, commit_date_value):
    mocker.patch(
        "docker_meta.cli.generate.get_git_context",
        return_value=GitContext(
            sha=sha_value,
            ref="refs/heads/main",
            commit_date=commit_date_value,
            remote_url="git@github.com:octocat/Hello-World.git",
            default_branch="main",
        ),
    )
    docker_meta_command.add_args(
        [
            "--context",
            str(tmp_path),
            "--ref",
            ref,
            "--bake-dir",
            str(bake_dir),
            "--github-output",
            str(github_output_file),
        ]
    )


@given("with the arguments:")
def add_args_table(docker_meta_command, datatable):
    for row in datatable:
        docker_meta_command.add_args(row)


@given("with the environment:")
def add_env_table(docker_meta_command, datatable):
    for name, value in datatable:
        docker_meta_command.env[name] = value


# Run the command
@when("I execute the command")
def run(docker_meta_command):
    docker_meta_command.run()


# Check the results of the command
@then("The command succeeds")
def check_success(docker_meta_command):
    assert docker_meta_command.result.exit_code == 0, docker_meta_command.result.output


@then(parsers.parse("The command exits with code {exit_code:d}"))
def check_exit_code(docker_meta_command, exit_code: int):
    assert docker_meta_command.result.exit_code == exit_code


@then("help is shown")
def check_help(docker_meta_command):
    assert "Usage:" in docker_meta_command.result.stdout
    assert "Options" in docker_meta_command.result.stdout


@then("the stdout output includes:")
def check_stdout(docker_meta_command, datatable):
    for row in datatable:
        assert row[0] in docker_meta_command.result.stdout


@then("the outputs include:")
def check_outputs(github_output_file, datatable):
    outputs = read_github_output(github_output_file)
    for name, value in datatable:
        assert outputs[name] == value


@then("the tags output is:")
def check_tags_output(github_output_file, datatable):
    outputs = read_github_output(github_output_file)
    assert outputs["tags"].split("\n") == [row[0] for row in datatable]


@then("the bake files exist:")
def check_bake_files(bake_dir, datatable):
    for row in datatable:
        assert (bake_dir / row[0]).is_file()
