"""
Rich console interface: output helpers and the workflow's decision prompts.
"""

import os
import sys
from enum import Enum
from typing import List, Optional, TextIO

import click
from loguru import logger
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt, Confirm
from rich.theme import Theme

from ..config.settings import Settings


EMPTY_MESSAGE_PLACEHOLDER = "[generator returned an empty message]"


class ReviewChoice(str, Enum):
    """Answer to the approve / edit / cancel prompt."""

    APPROVE = "approve"
    EDIT = "edit"
    CANCEL = "cancel"
    INVALID = "invalid"

    @classmethod
    def parse(cls, raw: str) -> "ReviewChoice":
        return {
            "a": cls.APPROVE,
            "e": cls.EDIT,
            "c": cls.CANCEL,
        }.get(raw.strip().lower(), cls.INVALID)


class DevPilotConsole:
    """Console interface for devpilot.

    ``stream`` replaces stdin for every prompt when given.
    """

    def __init__(self, settings: Settings, console: Optional[Console] = None, stream: Optional[TextIO] = None):
        self.settings = settings
        self.stream = stream
        self._setup_styles()
        self.console = console or Console(
            color_system="auto" if settings.ui.use_colors else None,
            theme=self.theme
        )
        if console is not None:
            self.console.push_theme(self.theme)

    def _setup_styles(self) -> None:
        """Setup custom styles for consistent theming."""
        self.styles = {
            "title": "bold blue",
            "success": "bold green",
            "warning": "bold yellow",
            "error": "bold red",
            "info": "blue",
            "muted": "dim",
            "commit_type": "bold magenta",
        }
        self.theme = Theme(self.styles)

    def print(self, *args, **kwargs) -> None:
        self.console.print(*args, **kwargs)

    def print_banner(self, title: str) -> None:
        self.console.print(f"[title]=== {title} ===[/title]")
        self.console.print()

    def print_status(self, short_status: str) -> None:
        """Print the files about to be staged."""
        self.console.print("[bold]Files to be staged:[/bold]")
        self.console.print(short_status, markup=False, highlight=False)
        self.console.print()

    def show_commit_message(self, message: str, title: str = "Generated commit message") -> None:
        """Show a commit message, or a placeholder when it is blank."""
        if not message.strip():
            body = f"[muted]{escape(EMPTY_MESSAGE_PLACEHOLDER)}[/muted]"
        else:
            first, _, rest = message.partition('\n')
            if ':' in first:
                prefix, _, description = first.partition(':')
                body = f"[commit_type]{escape(prefix)}[/commit_type]:{escape(description)}"
            else:
                body = escape(first)
            if rest:
                body += '\n' + escape(rest)

        self.console.print(Panel(body, title=title, box=box.ROUNDED, style="green"))
        self.console.print()

    def show_generation_failure(self, lines: List[str]) -> None:
        """Show the diagnostic for a failed generation call."""
        if not lines:
            return
        headline, details = lines[0], lines[1:]
        self.print_error(headline)
        for line in details:
            self.console.print(f"  {line}", markup=False, highlight=False)
        self.console.print()

    def confirm_action(self, message: str, default: bool = True) -> bool:
        """Get user confirmation for an action.

        Input that ends before an answer (stdin already consumed by manual
        entry, or a closed pipe) takes the default, as an empty answer would.
        """
        try:
            return Confirm.ask(message, default=default, console=self.console, stream=self.stream)
        except EOFError:
            answer = "yes" if default else "no"
            logger.debug(f"End of input at {message!r}; using default {answer}")
            self.console.print(f"\n[warning]No input left, answering {answer}[/warning]")
            return default

    def prompt_review_choice(self) -> ReviewChoice:
        """Ask whether to approve, edit or cancel the message."""
        raw = Prompt.ask(
            "Do you want to (a)pprove, (e)dit, or (c)ancel? \\[a/e/c]",
            console=self.console,
            stream=self.stream,
            default="",
            show_default=False,
        )
        choice = ReviewChoice.parse(raw)
        logger.debug(f"Review choice {raw!r} -> {choice.value}")
        return choice

    def prompt_text(self, message: str) -> str:
        return Prompt.ask(message, console=self.console, stream=self.stream, default="", show_default=False)

    def read_manual_message(self) -> str:
        """Read a multi-line message until end-of-input."""
        eof_key = "Ctrl-Z then Enter" if os.name == "nt" else "Ctrl-D"
        self.console.print(f"[info]Enter the commit message. Finish with {eof_key} on an empty line.[/info]")
        stream = self.stream or sys.stdin
        try:
            return stream.read()
        except KeyboardInterrupt:
            return ""

    def edit_file(self, path: str) -> bool:
        """Open ``path`` in the user's editor and wait for it to exit."""
        editor = os.environ.get("EDITOR") or self.settings.ui.editor
        logger.debug(f"Opening {path} with {editor}")
        try:
            click.edit(filename=path, editor=editor)
        except click.ClickException as e:
            logger.error(f"Editor failed: {e.format_message()}")
            return False
        return True

    def show_progress_spinner(self, description: str):
        """Create a progress spinner context manager."""
        return self.console.status(f"[blue]{description}...[/blue]", spinner="dots")

    def print_success(self, message: str) -> None:
        self.console.print(f"[success]✓ {escape(message)}[/success]")

    def print_error(self, message: str) -> None:
        self.console.print(f"[error]✗ {escape(message)}[/error]")

    def print_info(self, message: str) -> None:
        self.console.print(f"[info]ℹ {escape(message)}[/info]")
