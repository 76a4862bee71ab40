import re

from pytest_bdd import scenarios, then

scenarios(
    "cli/docker_meta.feature",
    "cli/generate.feature",
)


VERSION_OUTPUT_REGEX = re.compile(r"^docker-meta v\d+(\.\d+)+\S*$")


@then("the version is shown")
def check_version(docker_meta_command):
    assert VERSION_OUTPUT_REGEX.match(docker_meta_command.result.stdout.strip()) is not None
