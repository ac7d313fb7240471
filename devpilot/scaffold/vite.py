"""
Scaffold a Vite frontend project, open it, and start the dev server.
"""

import subprocess
from pathlib import Path
from typing import Callable, List, Optional

import click
from loguru import logger

from ..config.settings import Settings
from ..ui.console import DevPilotConsole


class ScaffoldError(Exception):
    """A scaffolding step failed; ``exit_code`` is the tool's own status."""

    def __init__(self, message: str, exit_code: int = 1):
        super().__init__(message)
        self.exit_code = exit_code


class ViteScaffolder:
    """Runs ``npm create vite``, ``npm install``, the editor and ``npm run dev`` in order."""

    def __init__(
        self,
        settings: Settings,
        console: DevPilotConsole,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
        launcher: Callable[[str], int] = click.launch,
        base_dir: Optional[Path] = None,
    ):
        self.settings = settings
        self.console = console
        self.runner = runner
        self.launcher = launcher
        self.base_dir = base_dir or Path.cwd()

    def run(
        self,
        name: Optional[str] = None,
        template: Optional[str] = None,
        open_editor: bool = True,
        open_browser: Optional[bool] = None,
        start_dev: bool = True,
    ) -> Path:
        """Create the project and return its directory."""
        cfg = self.settings.scaffold
        template = template or cfg.template
        if open_browser is None:
            open_browser = cfg.open_browser

        name = (name or self.console.prompt_text("Enter your project name")).strip()
        if not name:
            raise ScaffoldError("A project name is required")

        project_dir = self.base_dir / name
        logger.info(f"Scaffolding {template} project {name} in {self.base_dir}")

        self._step("Creating Vite project", ["npm", "create", "vite@latest", name, "--", "--template", template],
                   cwd=self.base_dir)
        self._step("Installing dependencies", ["npm", "install"], cwd=project_dir)

        if open_editor:
            self._step(f"Opening project in {cfg.editor_command}", [cfg.editor_command, name], cwd=self.base_dir)

        if open_browser:
            self.console.print_info(f"Opening {cfg.dev_url}")
            self.launcher(cfg.dev_url)

        if start_dev:
            self._step("Starting dev server", ["npm", "run", "dev"], cwd=project_dir)

        self.console.print_success(f"Project ready in {project_dir}")
        return project_dir

    def _step(self, description: str, argv: List[str], cwd: Path) -> None:
        self.console.print_info(description)
        logger.debug(f"Running {' '.join(argv)} in {cwd}")
        try:
            self.runner(argv, cwd=cwd, check=True)
        except FileNotFoundError:
            raise ScaffoldError(f"{argv[0]} not found on PATH", exit_code=127)
        except subprocess.CalledProcessError as e:
            raise ScaffoldError(f"{' '.join(argv)} failed with exit status {e.returncode}", exit_code=e.returncode)
