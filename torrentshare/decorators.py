"""Decorators for torrentshare CLI commands."""

import functools
import logging
from typing import Callable, Any
import typer
from rich.console import Console

from torrentshare.errors import (
    CacheLoadError,
    NoSuchFileError,
    NotSupportedError,
    ShareError,
)

logger = logging.getLogger(__name__)
console = Console()


def handle_share_errors(func: Callable) -> Callable:
    """
    Decorator to handle common share operation errors.

    Centralizes error handling for:
    - CacheLoadError: Cache store missing or corrupt
    - NoSuchFileError: Path has no backing file
    - NotSupportedError: Mutating operation on the read-only tree
    - ShareError / OSError: Other share and filesystem failures
    - General exceptions: Unexpected errors
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> Any:
        try:
            return func(*args, **kwargs)
        except typer.Exit:
            raise
        except CacheLoadError as e:
            console.print(f"[bold red]Error:[/bold red] {e}")
            console.print("[yellow]Tip: Create an empty store with 'torrentshare init'[/yellow]")
            raise typer.Exit(code=1)
        except NoSuchFileError as e:
            console.print(f"[bold red]Error:[/bold red] {e}")
            console.print("[yellow]Tip: List the Files folder first so its files are registered[/yellow]")
            raise typer.Exit(code=1)
        except NotSupportedError as e:
            console.print(f"[bold red]Error:[/bold red] {e} (the share is read-only)")
            raise typer.Exit(code=1)
        except (ShareError, OSError) as e:
            console.print(f"[bold red]Error:[/bold red] {e}")
            raise typer.Exit(code=1)
        except KeyboardInterrupt:
            console.print("\n[yellow]Operation cancelled by user[/yellow]")
            raise typer.Exit(code=130)
        except Exception as e:
            logger.error(f"Unexpected error in {func.__name__}: {e}", exc_info=True)
            console.print(f"[bold red]Unexpected error:[/bold red] {e}")
            raise typer.Exit(code=1)

    return wrapper
