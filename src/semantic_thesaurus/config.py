import logging
import os
from dataclasses import dataclass
from functools import lru_cache

import redis
from dotenv import load_dotenv

load_dotenv()


def _env_list(name: str, default: str) -> tuple[str, ...]:
    raw = os.getenv(name, default)
    return tuple(item.strip() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Ollama
    ollama_base_url: str = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
    ollama_model: str = os.getenv("OLLAMA_MODEL", "qwen2.5:14b")
    ollama_embedding_model: str = os.getenv("OLLAMA_EMBEDDING_MODEL", "nomic-embed-text")
    ollama_timeout: float = float(os.getenv("OLLAMA_TIMEOUT", "60"))

    # Redis (embedding persistence + vector index)
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    redis_password: str | None = os.getenv("REDIS_PASSWORD")
    vector_index_prefix: str = os.getenv("VECTOR_INDEX_PREFIX", "thesaurus_embeddings")

    # In-process cache
    cache_ttl: int = int(os.getenv("CACHE_TTL_SECONDS", "3600"))
    cache_max_keys: int = int(os.getenv("CACHE_MAX_KEYS", "10000"))
    cache_check_period: int = int(os.getenv("CACHE_CHECK_PERIOD", "600"))

    # Per-operation TTLs (seconds)
    ttl_synonyms: int = int(os.getenv("TTL_SYNONYMS", "1800"))
    ttl_antonyms: int = int(os.getenv("TTL_ANTONYMS", "1800"))
    ttl_definition: int = int(os.getenv("TTL_DEFINITION", "7200"))
    ttl_context: int = int(os.getenv("TTL_CONTEXT", "2400"))
    ttl_analysis: int = int(os.getenv("TTL_ANALYSIS", "1800"))
    ttl_degraded_analysis: int = int(os.getenv("TTL_DEGRADED_ANALYSIS", "60"))
    ttl_embedding: int = int(os.getenv("TTL_EMBEDDING", "14400"))  # 4 hours
    ttl_semantic_search: int = int(os.getenv("TTL_SEMANTIC_SEARCH", "1800"))

    # Semantic search
    semantic_search_threshold: float = float(os.getenv("SEMANTIC_SEARCH_THRESHOLD", "0.7"))
    semantic_search_limit: int = int(os.getenv("SEMANTIC_SEARCH_LIMIT", "10"))
    semantic_cache_threshold: float = float(os.getenv("SEMANTIC_CACHE_THRESHOLD", "0.8"))
    fallback_scan_cap: int = int(os.getenv("FALLBACK_SCAN_CAP", "1000"))

    # Local static vector table (word2vec format)
    local_vector_dimension: int = int(os.getenv("LOCAL_VECTOR_DIMENSION", "300"))
    local_vector_model_path: str | None = os.getenv("LOCAL_VECTOR_MODEL_PATH")

    # Keys and batching
    max_key_context_length: int = int(os.getenv("MAX_KEY_CONTEXT_LENGTH", "64"))
    batch_max_words: int = int(os.getenv("BATCH_MAX_WORDS", "50"))

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    api_reload: bool = os.getenv("API_RELOAD", "true").lower() == "true"
    cors_origins: tuple[str, ...] = _env_list(
        "CORS_ORIGINS", "http://localhost:3000,http://localhost:3001"
    )

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        for name in ("semantic_search_threshold", "semantic_cache_threshold"):
            value = getattr(self, name)
            if not 0 <= value <= 1:
                raise ValueError(f"{name.upper()} must be between 0 and 1, got {value}")

        ttl_fields = [
            "cache_ttl",
            "ttl_synonyms",
            "ttl_antonyms",
            "ttl_definition",
            "ttl_context",
            "ttl_analysis",
            "ttl_degraded_analysis",
            "ttl_embedding",
            "ttl_semantic_search",
        ]
        for name in ttl_fields:
            if getattr(self, name) <= 0:
                raise ValueError(f"{name.upper()} must be a positive number of seconds")

        if self.cache_max_keys <= 0:
            raise ValueError("CACHE_MAX_KEYS must be positive")

        if self.fallback_scan_cap <= 0:
            raise ValueError("FALLBACK_SCAN_CAP must be positive")

        if self.local_vector_dimension <= 0:
            raise ValueError("LOCAL_VECTOR_DIMENSION must be positive")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


def get_redis_client() -> redis.Redis:
    """Create a Redis client instance."""
    return redis.from_url(
        settings.redis_url,
        password=settings.redis_password,
        decode_responses=False,
    )


def configure_logging(level: str | None = None) -> None:
    """Install a single timestamped stream handler on the root logger."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        force=True,
    )
