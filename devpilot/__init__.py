"""
devpilot - interactive git add/commit/push with AI-generated commit messages.

Stages pending changes, asks an external AI tool for a conventional commit
message, lets you approve, edit or cancel it, then commits and pushes. Also
scaffolds React + Vite projects.
"""

__version__ = "1.0.0"

from devpilot.core import CommitOrchestrator, WorkflowResult
from devpilot.config.settings import Settings

__all__ = ["CommitOrchestrator", "WorkflowResult", "Settings"]
