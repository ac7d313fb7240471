"""
Commit orchestrator: stage, generate, review, commit and push.

The workflow is a state machine. Each handler performs one step and returns
the next state; a benign stop (nothing to do, user said no) raises
``WorkflowAborted`` and ends the run with exit status 0, while tool failures
raise ``DevPilotError`` or ``GitRepositoryError`` to the caller.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Awaitable, Callable, Dict, Optional
from loguru import logger

from .config.settings import Settings
from .git_ops.repository import GitRepository
from .ai_backends.base import MessageGenerator, GenerationFailure
from .ai_backends.factory import BackendFactory
from .ui.console import DevPilotConsole, ReviewChoice
from .utils.diagnostics import describe_failure
from .utils.message_buffer import MessageBuffer


class WorkflowState(str, Enum):
    IDLE = "idle"
    CHECKED = "checked"
    STAGED = "staged"
    DIFF_CAPTURED = "diff_captured"
    GENERATING = "generating"
    GENERATED = "generated"
    FAILED = "failed"
    MANUAL_ENTRY = "manual_entry"
    REVIEWED = "reviewed"
    COMMITTED = "committed"
    PUSHED = "pushed"
    PUSH_SKIPPED = "push_skipped"
    ABORTED = "aborted"


TERMINAL_STATES = {WorkflowState.PUSHED, WorkflowState.PUSH_SKIPPED, WorkflowState.ABORTED}


class AbortReason(str, Enum):
    NO_CHANGES = "no_changes"
    STAGING_DECLINED = "staging_declined"
    NO_STAGED_CHANGES = "no_staged_changes"
    NO_MESSAGE_PROVIDED = "no_message_provided"
    CANCELLED = "cancelled"
    EMPTY_MESSAGE = "empty_message"


@dataclass
class WorkflowResult:
    state: WorkflowState
    exit_code: int = 0
    reason: Optional[AbortReason] = None
    commit_sha: Optional[str] = None


class CommitOrchestrator:
    """Interactive add / commit / push cycle with a generated message."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        repo_path: Optional[Path] = None,
        console: Optional[DevPilotConsole] = None,
        generator: Optional[MessageGenerator] = None,
    ):
        self.settings = settings or Settings()
        self.repo_path = repo_path
        self.console = console or DevPilotConsole(self.settings)
        self.generator = generator or BackendFactory.create_backend(self.settings)

        self.state = WorkflowState.IDLE
        self.git_repo: Optional[GitRepository] = None
        self.buffer: Optional[MessageBuffer] = None
        self.diff = ""
        self.failure: Optional[GenerationFailure] = None
        self.commit_sha: Optional[str] = None

        self._handlers: Dict[WorkflowState, Callable[[], Awaitable[WorkflowState]]] = {
            WorkflowState.IDLE: self._check_repository,
            WorkflowState.CHECKED: self._stage_changes,
            WorkflowState.STAGED: self._capture_diff,
            WorkflowState.DIFF_CAPTURED: self._announce_generation,
            WorkflowState.GENERATING: self._generate_message,
            WorkflowState.GENERATED: self._review_message,
            WorkflowState.FAILED: self._offer_manual_entry,
            WorkflowState.MANUAL_ENTRY: self._accept_manual_message,
            WorkflowState.REVIEWED: self._commit,
            WorkflowState.COMMITTED: self._push,
        }

    async def run(self) -> WorkflowResult:
        """Drive the workflow from IDLE to a terminal state."""
        logger.info("Starting commit workflow")
        self.console.print_banner("Git commit with AI-generated message")

        with MessageBuffer() as buffer:
            self.buffer = buffer
            try:
                while self.state not in TERMINAL_STATES:
                    handler = self._handlers[self.state]
                    next_state = await handler()
                    logger.debug(f"Workflow {self.state.value} -> {next_state.value}")
                    self.state = next_state
            except WorkflowAborted as e:
                logger.info(f"Workflow aborted in {self.state.value}: {e.reason.value}")
                self.console.print_info(e.message)
                self.state = WorkflowState.ABORTED
                return WorkflowResult(state=self.state, reason=e.reason)
            finally:
                self.buffer = None

        return WorkflowResult(state=self.state, commit_sha=self.commit_sha)

    async def _check_repository(self) -> WorkflowState:
        self.git_repo = GitRepository(self.repo_path)
        return WorkflowState.CHECKED

    async def _stage_changes(self) -> WorkflowState:
        if not self.git_repo.has_changes():
            raise WorkflowAborted(AbortReason.NO_CHANGES, "No changes to commit")

        self.console.print_status(self.git_repo.short_status())

        if not self.console.confirm_action("Stage all changes?", default=True):
            raise WorkflowAborted(
                AbortReason.STAGING_DECLINED,
                "Staging cancelled. You can stage files manually and run this command again."
            )

        self.git_repo.stage_all()
        self.console.print_success("Changes staged")
        return WorkflowState.STAGED

    async def _capture_diff(self) -> WorkflowState:
        self.diff = self.git_repo.staged_diff()
        if not self.diff.strip():
            raise WorkflowAborted(AbortReason.NO_STAGED_CHANGES, "No staged changes found")
        logger.debug(f"Captured staged diff ({len(self.diff)} characters)")
        return WorkflowState.DIFF_CAPTURED

    async def _announce_generation(self) -> WorkflowState:
        self.console.print_info(f"Requesting commit message from {self.generator.target}")
        return WorkflowState.GENERATING

    async def _generate_message(self) -> WorkflowState:
        with self.console.show_progress_spinner("Generating commit message"):
            result = await self.generator.generate(self.diff)

        if not result.ok:
            self.failure = result.failure
            return WorkflowState.FAILED

        self.buffer.write(result.content)
        return WorkflowState.GENERATED

    async def _offer_manual_entry(self) -> WorkflowState:
        lines = describe_failure(self.failure, self.diff, self.generator.target)
        self.console.show_generation_failure(lines)

        if not self.console.confirm_action("Write the commit message manually?", default=False):
            raise GenerationDeclinedError(
                f"Commit message generation failed ({self.failure.kind.value}); no commit created"
            )

        message = self.console.read_manual_message()
        if not message.strip():
            raise WorkflowAborted(AbortReason.NO_MESSAGE_PROVIDED, "No message provided. Commit cancelled.")

        self.buffer.write(message)
        return WorkflowState.MANUAL_ENTRY

    async def _accept_manual_message(self) -> WorkflowState:
        # Typed by the user, so it counts as reviewed
        return WorkflowState.REVIEWED

    async def _review_message(self) -> WorkflowState:
        self.console.show_commit_message(self.buffer.read())
        choice = self.console.prompt_review_choice()

        if choice == ReviewChoice.APPROVE:
            self.console.print_info("Proceeding with commit...")
            return WorkflowState.REVIEWED

        if choice == ReviewChoice.EDIT:
            if not self.console.edit_file(str(self.buffer.path)):
                raise EditorError("The editor exited with an error; commit cancelled")
            self.console.show_commit_message(self.buffer.read(), title="Updated commit message")
            if not self.console.confirm_action("Proceed with this message?", default=False):
                raise WorkflowAborted(AbortReason.CANCELLED, "Commit cancelled")
            return WorkflowState.REVIEWED

        if choice == ReviewChoice.CANCEL:
            raise WorkflowAborted(AbortReason.CANCELLED, "Commit cancelled")

        raise InvalidReviewChoiceError("Invalid choice. Commit cancelled")

    async def _commit(self) -> WorkflowState:
        if self.buffer.is_blank():
            raise WorkflowAborted(AbortReason.EMPTY_MESSAGE, "Commit message is empty. Commit cancelled.")

        with self.console.show_progress_spinner("Committing changes"):
            self.commit_sha = self.git_repo.commit_from_file(self.buffer.path)
        self.console.print_success(f"Changes committed ({self.commit_sha[:8]})")
        return WorkflowState.COMMITTED

    async def _push(self) -> WorkflowState:
        if not self.console.confirm_action("Push to remote?", default=True):
            self.console.print_info("Push skipped. Run 'git push' manually when ready.")
            return WorkflowState.PUSH_SKIPPED

        with self.console.show_progress_spinner("Pushing to remote"):
            self.git_repo.push(self.settings.git.remote)
        self.console.print_success("Changes pushed successfully")
        return WorkflowState.PUSHED


class WorkflowAborted(Exception):
    """Benign stop: the run ends with exit status 0 and no further side effects."""

    def __init__(self, reason: AbortReason, message: str):
        super().__init__(message)
        self.reason = reason
        self.message = message


class DevPilotError(Exception):
    """Fatal workflow error carrying the process exit status."""

    exit_code = 1


class GenerationDeclinedError(DevPilotError):
    """Generation failed and the user declined to write the message."""


class InvalidReviewChoiceError(DevPilotError):
    """The review prompt got an answer other than approve, edit or cancel."""


class EditorError(DevPilotError):
    """The external editor could not be run."""
