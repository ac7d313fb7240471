"""
Command-line interface using Typer with Rich integration.
"""

import asyncio
import signal
import sys
import threading
from pathlib import Path
from typing import Optional
import typer
from pydantic import ValidationError
from rich.console import Console
from loguru import logger

from .core import CommitOrchestrator, DevPilotError
from .config.settings import Settings
from .git_ops.repository import GitRepositoryError
from .ai_backends.factory import BackendFactory
from .scaffold.vite import ViteScaffolder, ScaffoldError
from .ui.console import DevPilotConsole


app = typer.Typer(
    name="devpilot",
    help="Commit with an AI-generated message, and scaffold frontend projects",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=False
)

console = Console()


def setup_logging(log_level: str = "WARNING", log_file: Optional[Path] = None):
    """Setup logging configuration."""
    logger.remove()

    logger.add(
        sys.stderr,
        level=log_level,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        colorize=True
    )

    if log_file:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning(f"Log file disabled: {e}")
            return
        logger.add(
            log_file,
            level="DEBUG",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
            rotation="1 MB",
            retention="7 days"
        )


def load_settings(config_file: Optional[Path]) -> Settings:
    """Load settings, exiting with status 1 on invalid configuration."""
    try:
        if config_file:
            return Settings.from_file(config_file)
        return Settings()
    except (ValidationError, ValueError, OSError) as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(1)


def _restore_default_sigint():
    """Make Ctrl-C raise KeyboardInterrupt inside blocking prompts.

    asyncio.run() replaces the SIGINT handler with one that only cancels the
    main task, which a synchronous prompt never notices.
    """
    if threading.current_thread() is threading.main_thread():
        signal.signal(signal.SIGINT, signal.default_int_handler)


def _log_level(settings: Settings, verbose: bool, debug: bool) -> str:
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    return settings.ui.log_level


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    config_file: Optional[Path] = typer.Option(
        None, "--config", "-c",
        help="Path to configuration file"
    ),
    repo_path: Optional[Path] = typer.Option(
        None, "--repo", "-r",
        help="Git repository path (default: current directory)"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v",
        help="Enable verbose logging"
    ),
    debug: bool = typer.Option(
        False, "--debug", "-d",
        help="Enable debug logging (includes verbose)"
    ),
    version: bool = typer.Option(
        False, "--version",
        help="Show version information"
    )
):
    """
    Stage, commit and push with an AI-generated commit message.

    [bold blue]Examples:[/bold blue]

    [green]devpilot[/green]                      # Interactive add / commit / push
    [green]devpilot --repo ../other[/green]      # Run against another repository
    [green]devpilot config --show[/green]        # Show configuration
    [green]devpilot test[/green]                 # Check the message generator
    [green]devpilot scaffold my-app[/green]      # New React + Vite project
    """
    if version:
        from . import __version__
        console.print(f"[bold blue]devpilot[/bold blue] version [green]{__version__}[/green]")
        return

    ctx.obj = {"config_file": config_file, "verbose": verbose, "debug": debug}

    if ctx.invoked_subcommand is None:
        try:
            exit_code = asyncio.run(_run_commit(config_file, repo_path, verbose, debug))
        except KeyboardInterrupt:
            # Ctrl-C while the event loop itself was waiting (e.g. on the generator)
            console.print("\n[yellow]Operation cancelled by user[/yellow]")
            exit_code = 130
        if exit_code:
            raise typer.Exit(exit_code)


async def _run_commit(
    config_file: Optional[Path],
    repo_path: Optional[Path],
    verbose: bool,
    debug: bool,
) -> int:
    """Run the commit workflow and return the process exit status."""
    _restore_default_sigint()
    settings = load_settings(config_file)
    setup_logging(_log_level(settings, verbose, debug), settings.log_file)

    try:
        orchestrator = CommitOrchestrator(settings, repo_path)
        result = await orchestrator.run()
        return result.exit_code
    except (DevPilotError, GitRepositoryError) as e:
        logger.error(f"{type(e).__name__}: {e}")
        console.print(f"[red]Error:[/red] {e}")
        return e.exit_code
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        return 130
    except Exception as e:
        logger.exception("Unexpected error occurred")
        console.print(f"[red]Unexpected error:[/red] {e}")
        return 1


@app.command()
def config(
    ctx: typer.Context,
    show: bool = typer.Option(
        False, "--show", "-s",
        help="Show current configuration"
    ),
    save: bool = typer.Option(
        False, "--save",
        help="Write the effective configuration to the user config file"
    )
):
    """
    Show or save devpilot configuration.

    [bold blue]Examples:[/bold blue]

    [green]devpilot config --show[/green]
    [green]DEVPILOT_GENERATOR__TIMEOUT=30 devpilot config --save[/green]
    """
    settings = load_settings((ctx.obj or {}).get("config_file"))

    if show:
        _show_configuration(settings)

    if save:
        config_path = settings.config_dir / "config.json"
        settings.save_to_file(config_path)
        console.print(f"[green]Configuration saved to:[/green] {config_path}")

    if not show and not save:
        console.print("[yellow]Nothing to do[/yellow]")
        console.print("Use [green]--show[/green] to see current configuration")


def _show_configuration(settings: Settings) -> None:
    gen = settings.generator
    console.print("[bold blue]devpilot configuration[/bold blue]")
    console.print()
    console.print("[bold]Generator:[/bold]")
    console.print(f"  Backend: {gen.backend_type}")
    if gen.backend_type == "cli":
        console.print(f"  Command: {' '.join(gen.command)}", markup=False)
    else:
        console.print(f"  URL: {gen.api_url}")
        console.print(f"  Model: {gen.model}")
    console.print(f"  Timeout: {gen.timeout:g}s")
    console.print()
    console.print("[bold]Git:[/bold]")
    console.print(f"  Remote: {settings.git.remote}")
    console.print()
    console.print("[bold]UI:[/bold]")
    console.print(f"  Editor fallback: {settings.ui.editor}")
    console.print(f"  Log level: {settings.ui.log_level}")
    console.print()
    console.print("[bold]Scaffold:[/bold]")
    console.print(f"  Template: {settings.scaffold.template}")
    console.print(f"  Editor: {settings.scaffold.editor_command}")
    console.print(f"  Dev URL: {settings.scaffold.dev_url}")


@app.command()
def test(ctx: typer.Context):
    """Check that the configured message generator is reachable."""
    settings = load_settings((ctx.obj or {}).get("config_file"))

    try:
        backend = BackendFactory.create_backend(settings)
    except ValueError as e:
        console.print(f"[red]Test failed:[/red] {e}")
        raise typer.Exit(1)

    ok = asyncio.run(backend.health_check())
    if ok:
        console.print(f"[green]✓ {backend.backend_type} generator available:[/green] {backend.target}")
    else:
        console.print(f"[red]✗ {backend.backend_type} generator unavailable:[/red] {backend.target}")
        raise typer.Exit(1)


@app.command()
def scaffold(
    ctx: typer.Context,
    name: Optional[str] = typer.Argument(None, help="Project name (prompted when omitted)"),
    template: Optional[str] = typer.Option(None, "--template", "-t", help="Vite template"),
    no_editor: bool = typer.Option(False, "--no-editor", help="Don't open the project in the editor"),
    no_browser: bool = typer.Option(False, "--no-browser", help="Don't open the dev server URL"),
    no_dev: bool = typer.Option(False, "--no-dev", help="Don't start the dev server"),
):
    """
    Scaffold a React project with Vite, install it, and start the dev server.
    """
    opts = ctx.obj or {}
    settings = load_settings(opts.get("config_file"))
    setup_logging(_log_level(settings, opts.get("verbose", False), opts.get("debug", False)), settings.log_file)

    scaffolder = ViteScaffolder(settings, DevPilotConsole(settings))
    try:
        scaffolder.run(
            name=name,
            template=template,
            open_editor=not no_editor,
            open_browser=False if no_browser else None,
            start_dev=not no_dev,
        )
    except ScaffoldError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(e.exit_code)


def main():
    """Main entry point for the CLI."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(130)


if __name__ == "__main__":
    main()
