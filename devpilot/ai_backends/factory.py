"""
Generator backend factory.
"""

from loguru import logger

from .base import MessageGenerator
from .cli_tool import CliToolBackend
from .ollama import OllamaBackend
from ..config.settings import Settings


class BackendFactory:
    """Factory for creating generator backends from settings."""

    _backends = {
        "cli": CliToolBackend,
        "ollama": OllamaBackend,
    }

    @classmethod
    def create_backend(cls, settings: Settings) -> MessageGenerator:
        """Create the backend named by ``generator.backend_type``."""
        gen = settings.generator
        backend_type = gen.backend_type

        if backend_type not in cls._backends:
            raise ValueError(
                f"Unknown backend type: {backend_type} "
                f"(supported: {', '.join(cls.list_supported_backends())})"
            )

        if backend_type == "ollama":
            backend = OllamaBackend(
                api_url=gen.api_url,
                model=gen.model,
                instruction=gen.instruction,
                timeout=gen.timeout,
            )
        else:
            backend = CliToolBackend(
                command=gen.command,
                instruction=gen.instruction,
                timeout=gen.timeout,
            )

        logger.debug(f"Created {backend_type} generator backend ({backend.target})")
        return backend

    @classmethod
    def list_supported_backends(cls) -> list[str]:
        """List all supported backend types."""
        return list(cls._backends.keys())
