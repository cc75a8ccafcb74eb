"""Decorators for cfs CLI commands."""

import functools
import logging
from typing import Callable, Any

import typer
import yaml
from rich.console import Console

from cfs.resolver import PathError

logger = logging.getLogger(__name__)
console = Console()


def handle_cfs_errors(func: Callable) -> Callable:
    """
    Decorator to handle common graph operation errors.

    Centralizes error handling for:
    - FileNotFoundError: Graph file doesn't exist
    - PermissionError: No access to files
    - PathError: Invalid navigation (e.g. parent of the top node)
    - yaml.YAMLError: Malformed graph file
    - ValueError: Invalid data or arguments
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> Any:
        try:
            return func(*args, **kwargs)
        except FileNotFoundError as e:
            console.print(f"[bold red]Error:[/bold red] Graph or file not found: {e}")
            raise typer.Exit(code=1)
        except PermissionError as e:
            console.print(f"[bold red]Error:[/bold red] Permission denied: {e}")
            raise typer.Exit(code=1)
        except PathError as e:
            console.print(f"[bold red]Error:[/bold red] Invalid path: {e}")
            raise typer.Exit(code=1)
        except yaml.YAMLError as e:
            logger.debug("YAML error details:", exc_info=True)
            console.print(f"[bold red]Error:[/bold red] Malformed graph file: {e}")
            raise typer.Exit(code=1)
        except ValueError as e:
            console.print(f"[bold red]Error:[/bold red] Invalid input: {e}")
            raise typer.Exit(code=1)

    return wrapper
