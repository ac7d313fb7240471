"""
Git repository operations used by the commit workflow.
"""

from pathlib import Path
from typing import List, Optional
from git import Repo, InvalidGitRepositoryError, NoSuchPathError, GitCommandError
from loguru import logger


class GitRepository:
    """Thin interface over the version-control operations the workflow needs."""

    def __init__(self, repo_path: Optional[Path] = None):
        """Open the repository containing ``repo_path`` (default: cwd)."""
        self.repo_path = Path(repo_path) if repo_path else Path.cwd()
        try:
            self.repo = Repo(self.repo_path, search_parent_directories=True)
        except (InvalidGitRepositoryError, NoSuchPathError):
            raise NotARepositoryError(f"Not a git repository: {self.repo_path}")
        if self.repo.bare:
            raise NotARepositoryError(f"Bare repository has no working tree: {self.repo_path}")
        logger.debug(f"Opened Git repository at {self.repo.working_dir}")

    def status_entries(self) -> List[str]:
        """Porcelain status lines for modified, staged and untracked files."""
        output = self.repo.git.status('--porcelain')
        return [line for line in output.split('\n') if line.strip()]

    def has_changes(self) -> bool:
        return bool(self.status_entries())

    def short_status(self) -> str:
        return self.repo.git.status('--short')

    def stage_all(self) -> None:
        """Stage every change in the working tree, untracked files included."""
        try:
            self.repo.git.add('--all')
            logger.info("Staged all changes")
        except GitCommandError as e:
            raise GitRepositoryError(f"Failed to stage files: {e}", exit_code=e.status)

    def staged_diff(self) -> str:
        """Diff of the index against HEAD."""
        return self.repo.git.diff('--cached')

    def commit_from_file(self, message_file: Path) -> str:
        """Commit the staged set with the message stored in ``message_file``."""
        try:
            self.repo.git.commit('-F', str(message_file))
        except GitCommandError as e:
            raise CommitFailedError(f"Failed to create commit: {e.stderr.strip() or e}", exit_code=e.status)

        sha = self.repo.head.commit.hexsha
        logger.info(f"Created commit {sha[:8]}")
        return sha

    def push(self, remote: str = "origin") -> None:
        """Push the current branch, creating the upstream when it has none."""
        try:
            branch = self.repo.active_branch
            if branch.tracking_branch() is not None:
                self.repo.git.push()
                logger.info(f"Pushed {branch.name} to its upstream")
            else:
                self.repo.git.push('--set-upstream', remote, branch.name)
                logger.info(f"Created upstream branch {remote}/{branch.name}")
        except GitCommandError as e:
            raise PushFailedError(f"Failed to push: {e.stderr.strip() or e}", exit_code=e.status)
        except TypeError as e:
            # active_branch raises TypeError on a detached HEAD
            raise PushFailedError(f"Failed to push: {e}")


class GitRepositoryError(Exception):
    """Custom exception for Git repository operations."""

    def __init__(self, message: str, exit_code: Optional[int] = 1):
        super().__init__(message)
        # GitCommandError.status can be None or a string when git never ran
        self.exit_code = exit_code if isinstance(exit_code, int) and exit_code else 1


class NotARepositoryError(GitRepositoryError):
    """The working directory is not inside a git repository."""


class CommitFailedError(GitRepositoryError):
    """``git commit`` exited non-zero."""


class PushFailedError(GitRepositoryError):
    """``git push`` exited non-zero; ``exit_code`` is git's own status."""
