"""Ollama-based language model client.

Uses Ollama's local HTTP API for both text generation and embeddings.
Satisfies the LanguageModelClient protocol.

Requirements:
    - Ollama installed: https://ollama.com
    - Models pulled: `ollama pull qwen2.5:14b` and `ollama pull nomic-embed-text`
    - Ollama running: `ollama serve` (usually runs automatically)
"""

import logging

import httpx

from semantic_thesaurus.config import settings
from semantic_thesaurus.entities import EmbeddingResultEntity
from semantic_thesaurus.errors import ProviderUnavailable
from semantic_thesaurus.protocols import GenerationOptions

logger = logging.getLogger(__name__)


class OllamaClient:
    """Ollama implementation of the LanguageModelClient protocol.

    Example:
        ```python
        client = OllamaClient.create(model_name="qwen2.5:14b")
        text = await client.generate("Define 'happy'.", {"temperature": 0.2})
        embedding = await client.embed("happy", model="nomic-embed-text")
        print(embedding.dimension)  # 768
        ```
    """

    # Known embedding dimensions (for common models)
    MODEL_DIMENSIONS = {
        "nomic-embed-text": 768,
        "embeddinggemma": 768,
        "embeddinggemma:300m": 768,
        "mxbai-embed-large": 1024,
        "all-minilm": 384,
        "all-minilm:l6-v2": 384,
    }

    def __init__(
        self,
        model_name: str | None = None,
        embedding_model: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the Ollama client.

        Args:
            model_name: Generation model. Defaults to settings.ollama_model.
            embedding_model: Default embedding model. Defaults to settings.ollama_embedding_model.
            base_url: Ollama API base URL. Defaults to settings.ollama_base_url.
            timeout: Request timeout in seconds. Defaults to settings.ollama_timeout.
            http_client: Preconfigured client (tests inject a MockTransport here).
        """
        self._model_name = model_name or settings.ollama_model
        self._embedding_model = embedding_model or settings.ollama_embedding_model
        self._base_url = (base_url or settings.ollama_base_url).rstrip("/")
        self._timeout = timeout or settings.ollama_timeout
        self._client = http_client

    @classmethod
    def create(
        cls,
        model_name: str | None = None,
        embedding_model: str | None = None,
        base_url: str | None = None,
    ) -> "OllamaClient":
        """Factory method to create OllamaClient with defaults.

        Args:
            model_name: Generation model. If None, uses settings.
            embedding_model: Embedding model. If None, uses settings.
            base_url: Ollama API URL. If None, uses settings.

        Returns:
            Configured OllamaClient
        """
        return cls(model_name=model_name, embedding_model=embedding_model, base_url=base_url)

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
            )
        return self._client

    @property
    def model_name(self) -> str:
        return self._model_name

    @property
    def embedding_model(self) -> str:
        return self._embedding_model

    async def generate(self, prompt: str, options: GenerationOptions | None = None) -> str:
        """Run the generation model on ``prompt``.

        Args:
            prompt: The fully rendered instruction
            options: temperature / top_p / max_tokens

        Returns:
            The raw completion text

        Raises:
            ProviderUnavailable: If the Ollama API request fails
        """
        payload = {
            "model": self._model_name,
            "prompt": prompt,
            "stream": False,
            "options": self._sampling_options(options or {}),
        }
        data = await self._post("/api/generate", payload, self._model_name)

        response = data.get("response")
        if not isinstance(response, str):
            raise ProviderUnavailable(f"Unexpected generate response format: {data}")
        return response

    async def embed(self, text: str, model: str | None = None) -> EmbeddingResultEntity:
        """Generate an embedding vector with the Ollama embed endpoint.

        Args:
            text: The text to encode
            model: Embedding model. Defaults to the client's embedding model.

        Returns:
            EmbeddingResultEntity with vector, dimension and model

        Raises:
            ProviderUnavailable: If the request fails or the payload is malformed
        """
        model = model or self._embedding_model
        data = await self._post("/api/embed", {"model": model, "input": text}, model)

        # Ollama returns {"embeddings": [[...]]} for single input
        if data.get("embeddings"):
            vector = data["embeddings"][0]
        # Fallback: older servers answer {"embedding": [...]}
        elif "embedding" in data:
            vector = data["embedding"]
        else:
            raise ProviderUnavailable(f"Unexpected embed response format: {data}")

        vector = [float(v) for v in vector]
        return EmbeddingResultEntity(vector=vector, dimension=len(vector), model=model)

    async def list_models(self) -> list[str]:
        """Names of the models the server has pulled.

        Raises:
            ProviderUnavailable: If Ollama cannot be reached
        """
        try:
            response = await self.client.get(f"{self._base_url}/api/tags")
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise ProviderUnavailable(self._describe(e, self._model_name)) from e
        return [m.get("name", "") for m in response.json().get("models", [])]

    async def is_available(self) -> bool:
        """Check if Ollama is running.

        Returns:
            True if the server answers, False otherwise
        """
        try:
            await self.list_models()
            return True
        except ProviderUnavailable as e:
            logger.warning("Ollama is not available: %s", e)
            return False

    async def close(self) -> None:
        """Close the async HTTP client.

        Should be called when shutting down the application.
        """
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _post(self, path: str, payload: dict, model: str) -> dict:
        try:
            response = await self.client.post(f"{self._base_url}{path}", json=payload)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as e:
            raise ProviderUnavailable(self._describe(e, model)) from e
        except ValueError as e:
            raise ProviderUnavailable(f"Ollama returned a non-JSON body: {e}") from e

    @staticmethod
    def _sampling_options(options: GenerationOptions) -> dict:
        mapped: dict = {}
        if "temperature" in options:
            mapped["temperature"] = options["temperature"]
        if "top_p" in options:
            mapped["top_p"] = options["top_p"]
        if "max_tokens" in options:
            mapped["num_predict"] = options["max_tokens"]
        return mapped

    @staticmethod
    def _describe(error: httpx.HTTPError, model: str) -> str:
        error_msg = f"Ollama API error: {error!r}"
        text = str(error).lower()
        if isinstance(error, httpx.TimeoutException):
            error_msg += "\n  → Request timed out. Is the model still loading?"
        elif "connection refused" in text or isinstance(error, httpx.ConnectError):
            error_msg += "\n  → Is Ollama running? Try: ollama serve"
        elif "not found" in text:
            error_msg += f"\n  → Model not found. Try: ollama pull {model}"
        return error_msg
