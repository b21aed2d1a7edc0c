"""Cache key construction and approximate key lookup.

Keys read as ``operation:subject[:qualifier]*``. Every component is
percent-escaped so a ``:`` inside a word or context can never shift a field
boundary, which keeps distinct parameter tuples on distinct keys.

Context handling: a missing context becomes the token ``noctx``. A present
context becomes ``ctx=<text>`` when short and ``ctxh=<hash>`` when longer
than ``max_context_length``. The hash is a 64-bit BLAKE2b digest; two long
contexts with the same digest share cache entries, an accepted
approximation.

Model handling follows the same pattern: an unspecified embedding model
becomes ``nomodel`` and an explicit one ``model=<name>``.
"""

import hashlib
from urllib.parse import quote

from semantic_thesaurus.config import settings
from semantic_thesaurus.protocols import CacheStore

NO_CONTEXT = "noctx"
ANY_PART_OF_SPEECH = "any"
NO_MODEL = "nomodel"


def hash_text(text: str) -> str:
    """Condense arbitrary text into a fixed-width hex digest."""
    return hashlib.blake2b(text.encode("utf-8"), digest_size=8).hexdigest()


def levenshtein_distance(a: str, b: str) -> int:
    """Minimum number of single-character edits turning ``a`` into ``b``."""
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            current.append(
                min(
                    previous[j] + 1,  # deletion
                    current[j - 1] + 1,  # insertion
                    previous[j - 1] + (char_a != char_b),  # substitution
                )
            )
        previous = current
    return previous[-1]


def string_similarity(a: str, b: str) -> float:
    """``(maxLen - editDistance) / maxLen``, 1.0 for two empty strings."""
    max_len = max(len(a), len(b))
    if max_len == 0:
        return 1.0
    return (max_len - levenshtein_distance(a, b)) / max_len


def normalize_word(word: str) -> str:
    return word.strip().lower()


class CacheKeyPolicy:
    """Builds deterministic cache keys for every cached operation.

    Example:
        ```python
        keys = CacheKeyPolicy()
        keys.analysis("Brilliant", "academic performance")
        # -> "analysis:brilliant:ctx=academic performance"
        keys.analysis("brilliant", None)
        # -> "analysis:brilliant:noctx"
        ```
    """

    def __init__(self, max_context_length: int | None = None) -> None:
        """Initialize the key policy.

        Args:
            max_context_length: Contexts longer than this are hashed.
                Defaults to settings.max_key_context_length.
        """
        self._max_context_length = (
            settings.max_key_context_length if max_context_length is None else max_context_length
        )

    @staticmethod
    def build(operation: str, *parts: str) -> str:
        escaped = [quote(str(part), safe=" =") for part in parts]
        return ":".join([operation, *escaped])

    def context_token(self, context: str | None) -> str:
        if context is None:
            return NO_CONTEXT
        if len(context) <= self._max_context_length:
            return f"ctx={context}"
        return f"ctxh={hash_text(context)}"

    @staticmethod
    def model_token(model: str | None) -> str:
        return f"model={model}" if model else NO_MODEL

    def analysis(self, word: str, context: str | None) -> str:
        return self.build("analysis", normalize_word(word), self.context_token(context))

    def synonyms(self, word: str, context: str | None) -> str:
        return self.build("synonyms", normalize_word(word), self.context_token(context))

    def antonyms(self, word: str, context: str | None) -> str:
        return self.build("antonyms", normalize_word(word), self.context_token(context))

    def context(self, word: str, context: str) -> str:
        return self.build("context", normalize_word(word), self.context_token(context))

    def definition(self, word: str, part_of_speech: str | None) -> str:
        pos = normalize_word(part_of_speech) if part_of_speech else ANY_PART_OF_SPEECH
        return self.build("definition", normalize_word(word), f"pos={pos}")

    def embedding(self, model: str, text: str) -> str:
        return self.build("embedding", model, text)

    def semantic_search(
        self,
        query: str,
        limit: int,
        threshold: float,
        provider: str,
        model: str | None,
    ) -> str:
        return self.build(
            "semantic_search",
            query,
            str(int(limit)),
            repr(float(threshold)),
            provider,
            self.model_token(model),
        )

    @staticmethod
    def find_similar_keys(cache: CacheStore, key: str, threshold: float) -> list[str]:
        """Find live keys that nearly match ``key`` within the same operation.

        Only an auxiliary lookup aid: exact keys are always checked first.

        Args:
            cache: The store whose keys are scanned
            key: The candidate key
            threshold: Minimum similarity in [0, 1]

        Returns:
            Matching keys, most similar first
        """
        operation = key.split(":", 1)[0]
        prefix = f"{operation}:"

        scored = []
        for cached_key in cache.keys():
            if cached_key == key or not cached_key.startswith(prefix):
                continue
            similarity = string_similarity(key, cached_key)
            if similarity >= threshold:
                scored.append((similarity, cached_key))

        scored.sort(key=lambda item: (-item[0], item[1]))
        return [cached_key for _, cached_key in scored]
