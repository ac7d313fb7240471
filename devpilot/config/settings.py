"""
Configuration management with Pydantic validation and environment variable support.
"""

import json
import os
import platform
from pathlib import Path
from typing import List, Literal
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings


DEFAULT_INSTRUCTION = (
    "Based on the git diff I'm providing, write a concise and descriptive commit "
    "message following conventional commit format. Only output the commit message, "
    "nothing else."
)


class GeneratorSettings(BaseModel):
    """Commit message generator configuration."""

    backend_type: Literal["cli", "ollama"] = Field(
        default="cli",
        description="Generator backend type"
    )
    command: List[str] = Field(
        default_factory=lambda: ["gemini"],
        description="AI CLI command; the instruction is appended as the last argument"
    )
    instruction: str = Field(
        default=DEFAULT_INSTRUCTION,
        description="Instruction sent along with the staged diff"
    )
    timeout: float = Field(
        default=60,
        gt=0,
        le=600,
        description="Hard ceiling for a generation call in seconds"
    )
    api_url: str = Field(
        default="http://localhost:11434",
        description="Ollama server endpoint"
    )
    model: str = Field(
        default="qwen3:8b",
        description="Ollama model to use"
    )

    @field_validator("command")
    @classmethod
    def command_not_empty(cls, v):
        if not v or not v[0].strip():
            raise ValueError("generator command must name an executable")
        return v


class GitSettings(BaseModel):
    """Git operation configuration."""

    remote: str = Field(
        default="origin",
        description="Remote used when the current branch has no upstream"
    )


class UISettings(BaseModel):
    """User interface configuration."""

    use_colors: bool = Field(
        default=True,
        description="Use colored output"
    )
    editor: str = Field(
        default="nano",
        description="Editor used when $EDITOR is not set"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging level"
    )


class ScaffoldSettings(BaseModel):
    """Frontend scaffolding configuration."""

    template: str = Field(
        default="react",
        description="Vite template name"
    )
    editor_command: str = Field(
        default="code",
        description="Editor binary that opens the new project"
    )
    dev_url: str = Field(
        default="http://localhost:5173",
        description="Dev server URL opened in the browser"
    )
    open_browser: bool = Field(
        default=True,
        description="Open the dev server URL after installing"
    )


class Settings(BaseSettings):
    """Main application settings with environment variable support."""

    generator: GeneratorSettings = Field(default_factory=GeneratorSettings)
    git: GitSettings = Field(default_factory=GitSettings)
    ui: UISettings = Field(default_factory=UISettings)
    scaffold: ScaffoldSettings = Field(default_factory=ScaffoldSettings)

    model_config = {
        "env_prefix": "DEVPILOT_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
        "env_file": ".env",
        "extra": "ignore",
    }

    def __init__(self, **kwargs):
        # The user config file only applies when nothing was passed explicitly
        if not kwargs:
            config_path = self._get_default_config_path()
            if config_path.exists():
                try:
                    with open(config_path) as f:
                        kwargs = json.load(f)
                except (json.JSONDecodeError, OSError):
                    pass  # Fall back to defaults

        super().__init__(**kwargs)

    @staticmethod
    def _get_default_config_path() -> Path:
        """Get the default config file path."""
        return _config_base() / "devpilot" / "config.json"

    @classmethod
    def from_file(cls, config_path: Path) -> "Settings":
        """Load settings from a configuration file."""
        if config_path.exists():
            with open(config_path) as f:
                config_data = json.load(f)
            return cls(**config_data)
        return cls()

    def save_to_file(self, config_path: Path) -> None:
        """Save current settings to a configuration file."""
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, 'w') as f:
            json.dump(self.model_dump(), f, indent=2)

    @property
    def config_dir(self) -> Path:
        """Get the configuration directory."""
        return (_config_base() / "devpilot").expanduser()

    @property
    def cache_dir(self) -> Path:
        """Get the cache directory."""
        if platform.system() == "Windows":
            base = Path(os.environ.get("LOCALAPPDATA", "~"))
        else:
            base = Path(os.environ.get("XDG_CACHE_HOME", "~/.cache"))

        return (base / "devpilot").expanduser()

    @property
    def log_file(self) -> Path:
        """Get the log file path."""
        return self.cache_dir / "devpilot.log"


def _config_base() -> Path:
    if platform.system() == "Windows":
        return Path(os.environ.get("APPDATA", "~")).expanduser()
    return Path(os.environ.get("XDG_CONFIG_HOME", "~/.config")).expanduser()
