"""
Temporary file backing the commit message while it is reviewed and edited.
"""

import os
import tempfile
from pathlib import Path
from typing import Optional
from loguru import logger


class MessageBuffer:
    """Commit message stored in a temp file that lives only inside a ``with`` block.

    The file exists so that an external editor can open it and ``git commit -F``
    can read it verbatim. It is removed when the block exits, however it exits.
    """

    def __init__(self, prefix: str = "devpilot-msg-", suffix: str = ".txt"):
        self.prefix = prefix
        self.suffix = suffix
        self.path: Optional[Path] = None

    def __enter__(self) -> "MessageBuffer":
        fd, name = tempfile.mkstemp(prefix=self.prefix, suffix=self.suffix)
        os.close(fd)
        self.path = Path(name)
        logger.debug(f"Created message buffer {self.path}")
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self.path is not None:
            self.path.unlink(missing_ok=True)
            logger.debug(f"Removed message buffer {self.path}")

    def write(self, text: str) -> None:
        self._require_open().write_text(text, encoding="utf-8")

    def read(self) -> str:
        return self._require_open().read_text(encoding="utf-8")

    def is_blank(self) -> bool:
        return not self.read().strip()

    def _require_open(self) -> Path:
        if self.path is None:
            raise RuntimeError("MessageBuffer used outside of its with-block")
        return self.path
