# src/talosplan/cli/utils.py
import logging
import traceback
from contextlib import contextmanager

import typer

from ..core.exceptions import TalosPlanError

logger = logging.getLogger(__name__)


@contextmanager
def exit_on_error(action: str):
    """
    Turns any failure inside a command into a logged error and exit code 1.

    Known errors are reported with their message only; anything else also
    logs the traceback.
    """
    try:
        yield
    except typer.Exit:
        raise
    except TalosPlanError as e:
        logger.error(f"{action} failed: {e}")
        raise typer.Exit(code=1)
    except Exception as e:
        logger.error(f"An unexpected error occurred during {action}: {e}")
        logger.error("%s", traceback.format_exc())
        raise typer.Exit(code=1)
