import functools
import inspect
import logging
import os
from pathlib import Path
from typing import Annotated, Optional

import typer

from docker_meta.log import init_logging


def with_verbosity_flags(fn):
    @functools.wraps(fn)
    def wrapper(
        *args,
        verbose: Annotated[Optional[bool], typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
        quiet: Annotated[
            Optional[bool], typer.Option("--quiet", "-q", help="Supress all output except errors")
        ] = False,
        **kwargs,
    ):
        if verbose and quiet:
            raise typer.BadParameter("Cannot set both --verbose and --quiet flags.")

        log_level: str | int = logging.INFO
        if verbose:
            log_level = logging.DEBUG
        elif quiet:
            log_level = logging.ERROR

        init_logging(log_level)
        return fn(*args, **kwargs)

    # Update signature with verbosity flags
    sig = inspect.signature(wrapper)
    params = list(sig.parameters.values())
    params.extend(
        [
            inspect.Parameter(
                "verbose",
                inspect.Parameter.KEYWORD_ONLY,
                default=False,
                annotation=Annotated[Optional[bool], typer.Option("--verbose", "-v", help="Enable debug logging")],
            ),
            inspect.Parameter(
                "quiet",
                inspect.Parameter.KEYWORD_ONLY,
                default=False,
                annotation=Annotated[
                    Optional[bool], typer.Option("--quiet", "-q", help="Supress all output except errors")
                ],
            ),
        ]
    )
    sig = sig.replace(parameters=params)
    wrapper.__signature__ = sig

    return wrapper


def auto_path() -> Path:
    context = Path(os.getcwd())
    return context
