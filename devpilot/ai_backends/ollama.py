"""
Ollama generator backend.
"""

import asyncio
import aiohttp
from loguru import logger

from .base import MessageGenerator, GenerationError, FailureKind


def classify_http_status(status: int) -> FailureKind:
    """Map an HTTP error status to a failure class."""
    if status in (401, 403):
        return FailureKind.AUTH
    if status == 429:
        return FailureKind.RATE_LIMITED
    if status in (502, 503, 504):
        return FailureKind.NETWORK
    return FailureKind.UNKNOWN


class OllamaBackend(MessageGenerator):
    """Ollama HTTP backend implementation."""

    def __init__(self, api_url: str, model: str, instruction: str, timeout: float = 60):
        super().__init__(instruction=instruction, timeout=timeout)
        self.api_url = api_url.rstrip('/')
        self.model = model

    @property
    def target(self) -> str:
        return f"Ollama {self.model} @ {self.api_url}"

    async def call_api(self, diff: str) -> str:
        """Call the Ollama generate API."""
        payload = {
            "model": self.model,
            "prompt": f"{self.instruction}\n\n{diff}",
            "stream": False,
            "options": {
                "temperature": 0.1,
                "top_p": 0.9,
            }
        }

        async with aiohttp.ClientSession() as session:
            try:
                async with session.post(
                    f"{self.api_url}/api/generate",
                    json=payload,
                    timeout=aiohttp.ClientTimeout(total=self.timeout)
                ) as response:
                    if response.status >= 400:
                        body = await response.text()
                        logger.error(f"Ollama API error {response.status}: {body[:200]}")
                        raise GenerationError(
                            classify_http_status(response.status),
                            f"HTTP {response.status}: {body}",
                        )
                    data = await response.json()
                    return data.get("response", "").strip()

            except asyncio.TimeoutError:
                logger.error(f"Ollama API timeout after {self.timeout}s")
                raise GenerationError(FailureKind.TIMEOUT, f"No response within {self.timeout:g}s")
            except aiohttp.ClientConnectionError as e:
                logger.error(f"Ollama connection error: {e}")
                raise GenerationError(FailureKind.NETWORK, str(e))
            except aiohttp.ClientError as e:
                logger.error(f"Ollama API error: {e}")
                raise GenerationError(FailureKind.UNKNOWN, str(e))

    async def health_check(self) -> bool:
        """Check if Ollama is healthy."""
        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(
                    f"{self.api_url}/api/tags",
                    timeout=aiohttp.ClientTimeout(total=5)
                ) as response:
                    return response.status == 200
        except Exception as e:
            logger.debug(f"Ollama health check failed: {e}")
            return False
