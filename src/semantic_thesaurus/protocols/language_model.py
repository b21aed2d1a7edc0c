"""Language model client protocol.

The core never interprets prompts; it renders an instruction, hands it to
the client and treats the returned string as untrusted raw text.
"""

from typing import Protocol, TypedDict, runtime_checkable

from semantic_thesaurus.entities import EmbeddingResultEntity


class GenerationOptions(TypedDict, total=False):
    """Sampling options forwarded to the model."""

    temperature: float
    top_p: float
    max_tokens: int


@runtime_checkable
class LanguageModelClient(Protocol):
    """Protocol for text generation + embedding backends."""

    async def generate(self, prompt: str, options: GenerationOptions | None = None) -> str:
        """Run the model on ``prompt`` and return the raw completion.

        Raises:
            ProviderUnavailable: On transport failure or timeout
        """
        ...

    async def embed(self, text: str, model: str | None = None) -> EmbeddingResultEntity:
        """Embed ``text`` with ``model`` (client default when omitted).

        Raises:
            ProviderUnavailable: On transport failure or timeout
        """
        ...

    async def is_available(self) -> bool:
        """Check whether the model server is reachable."""
        ...
