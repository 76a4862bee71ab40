import typer

from docker_meta import __version__
from docker_meta.log import stdout_console


def version():
    """Display the version of docker-meta"""
    stdout_console.print(f"docker-meta v{__version__}", highlight=False)
    raise typer.Exit()
