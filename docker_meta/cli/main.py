import typer

from docker_meta.cli import generate, version
from docker_meta.const import APP_NAME

app = typer.Typer(
    name=APP_NAME,
    no_args_is_help=True,
    rich_markup_mode="markdown",
    help="A tool for generating container image tags, labels and bake files from git context",
)

# Since "generate" is a single command, we import the function directly rather than adding it as a typer subgroup
app.command(
    name="generate",
    help="Generate image metadata from tag rules and git context (aliases: gen)",
)(generate.generate)
app.command(name="gen", hidden=True)(generate.generate)

# Import the "version" subcommand
app.command(name="version", help="Show the docker-meta version")(version.version)
