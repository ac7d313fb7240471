"""
Abstract base class for commit message generators.

A generator makes the single external call of the commit workflow. Backends
signal failures by raising :class:`GenerationError`; :meth:`MessageGenerator.generate`
enforces the timeout and folds every outcome into a :class:`GenerationResult`,
so callers never see an exception from the generation step.
"""

import asyncio
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional
from loguru import logger


class FailureKind(str, Enum):
    """Why a generation call did not produce a message."""

    TIMEOUT = "timeout"
    AUTH = "auth"
    RATE_LIMITED = "rate_limited"
    NETWORK = "network"
    TOOL_MISSING = "tool_missing"
    UNKNOWN = "unknown"


@dataclass
class GenerationFailure:
    """Structured failure returned by a generator."""

    kind: FailureKind
    detail: str = ""
    exit_code: Optional[int] = None


@dataclass
class GenerationResult:
    """Outcome of one generation call."""

    content: str = ""
    failure: Optional[GenerationFailure] = None
    backend_type: Optional[str] = None
    response_time: Optional[float] = None

    @property
    def ok(self) -> bool:
        return self.failure is None


class GenerationError(Exception):
    """Raised by backends; never escapes :meth:`MessageGenerator.generate`."""

    def __init__(self, kind: FailureKind, detail: str = "", exit_code: Optional[int] = None):
        super().__init__(detail or kind.value)
        self.kind = kind
        self.detail = detail
        self.exit_code = exit_code


class MessageGenerator(ABC):
    """Abstract base class for generator backends."""

    def __init__(self, instruction: str, timeout: float = 60):
        self.instruction = instruction
        self.timeout = timeout
        self.backend_type = self.__class__.__name__.lower().replace('backend', '')

    @abstractmethod
    async def call_api(self, diff: str) -> str:
        """Produce a message for ``diff``. Raise GenerationError on failure."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check whether the generator can be reached."""
        pass

    @property
    @abstractmethod
    def target(self) -> str:
        """Human readable description of what gets called."""
        pass

    async def generate(self, diff: str) -> GenerationResult:
        """Call the backend under a hard timeout; no partial result survives it."""
        self._log_request(diff)
        start_time = time.time()

        try:
            content = await asyncio.wait_for(self.call_api(diff), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"{self.backend_type} generation timed out after {self.timeout}s")
            return self._failed(FailureKind.TIMEOUT, f"No response within {self.timeout:g}s", start_time)
        except GenerationError as e:
            logger.warning(f"{self.backend_type} generation failed ({e.kind.value}): {e.detail[:200]}")
            return self._failed(e.kind, e.detail, start_time, e.exit_code)

        result = GenerationResult(
            content=content,
            backend_type=self.backend_type,
            response_time=time.time() - start_time,
        )
        self._log_response(result)
        return result

    def _failed(
        self,
        kind: FailureKind,
        detail: str,
        start_time: float,
        exit_code: Optional[int] = None,
    ) -> GenerationResult:
        return GenerationResult(
            failure=GenerationFailure(kind=kind, detail=detail, exit_code=exit_code),
            backend_type=self.backend_type,
            response_time=time.time() - start_time,
        )

    def _log_request(self, diff: str) -> None:
        logger.debug(f"Generation request to {self.backend_type} ({self.target})")
        logger.debug(f"Diff length: {len(diff)} characters")
        logger.debug(f"Timeout: {self.timeout}s")

    def _log_response(self, result: GenerationResult) -> None:
        logger.debug(f"Generation response from {self.backend_type}")
        logger.debug(f"Response length: {len(result.content)} characters")
        if result.response_time:
            logger.debug(f"Response time: {result.response_time:.2f}s")
