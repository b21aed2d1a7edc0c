"""Word analysis orchestration.

Per request: check the exact analysis key; on a miss, run the synonym,
antonym and definition lookups (plus the contextual-meaning lookup when a
context is given) concurrently, wait for all of them to settle, aggregate,
cache and return.

A sub-lookup whose model call fails contributes an empty result. Only when
every issued sub-lookup fails does ``analyze`` raise ``AnalysisFailed``.
Degraded aggregates are cached with the short ``ttl_degraded_analysis``
so a recovered model server is picked up quickly.

Concurrent requests for the same cache key share one in-flight
computation, so a burst of identical requests costs one set of model calls.
"""

import asyncio
import logging
from dataclasses import replace

from semantic_thesaurus.config import settings
from semantic_thesaurus.entities import AnalysisResult, ContextualMeaning, RelatedWord
from semantic_thesaurus.errors import AnalysisFailed, InvalidInput, ProviderUnavailable, ThesaurusError
from semantic_thesaurus.protocols import CacheStore, GenerationOptions, LanguageModelClient
from semantic_thesaurus.services import prompts
from semantic_thesaurus.services.cache_keys import CacheKeyPolicy, normalize_word
from semantic_thesaurus.services.in_flight import InFlightCalls
from semantic_thesaurus.services.response_parser import (
    extract_part_of_speech,
    parse_contextual_meanings,
    parse_definition,
    parse_related_words,
)

logger = logging.getLogger(__name__)


def _require_word(word: str) -> str:
    if not isinstance(word, str) or not word.strip():
        raise InvalidInput("Word is required")
    return word.strip()


def _optional_context(context: str | None) -> str | None:
    if context is None or not context.strip():
        return None
    return context.strip()


class AnalysisService:
    """Produces AnalysisResult objects from language model lookups.

    This service depends on PROTOCOLS only:
    - LanguageModelClient: Ollama today, any text generator tomorrow
    - CacheStore: the in-process TTL store or anything shaped like it

    Example:
        ```python
        service = AnalysisService.create(client=OllamaClient.create(), cache=TTLCacheStore.create())
        result = await service.analyze("brilliant", context="academic performance")
        print(result.synonyms[0].word, result.confidence)
        ```
    """

    def __init__(
        self,
        client: LanguageModelClient,
        cache: CacheStore,
        keys: CacheKeyPolicy | None = None,
    ) -> None:
        """Initialize the analysis service.

        Args:
            client: Language model client (required).
            cache: Cache store for sub-results and aggregates (required).
            keys: Key policy. Defaults to a fresh CacheKeyPolicy.
        """
        self._client = client
        self._cache = cache
        self._keys = keys or CacheKeyPolicy()
        self._inflight = InFlightCalls()

    @classmethod
    def create(
        cls,
        client: LanguageModelClient,
        cache: CacheStore,
        keys: CacheKeyPolicy | None = None,
    ) -> "AnalysisService":
        """Factory method to create AnalysisService with a default key policy."""
        return cls(client=client, cache=cache, keys=keys)

    async def find_synonyms(
        self,
        word: str,
        context: str | None = None,
        limit: int | None = None,
    ) -> list[RelatedWord]:
        """Synonyms for ``word``, best first.

        Raises:
            InvalidInput: If ``word`` is blank
            ProviderUnavailable: If the model call fails
        """
        word, context = _require_word(word), _optional_context(context)
        words = await self._related(
            self._keys.synonyms(word, context),
            prompts.synonym_prompt(word, context),
            prompts.SYNONYM_OPTIONS,
            settings.ttl_synonyms,
            context,
        )
        return words[:limit] if limit else words

    async def find_antonyms(
        self,
        word: str,
        context: str | None = None,
        limit: int | None = None,
    ) -> list[RelatedWord]:
        """Antonyms for ``word``, best first.

        Raises:
            InvalidInput: If ``word`` is blank
            ProviderUnavailable: If the model call fails
        """
        word, context = _require_word(word), _optional_context(context)
        words = await self._related(
            self._keys.antonyms(word, context),
            prompts.antonym_prompt(word, context),
            prompts.ANTONYM_OPTIONS,
            settings.ttl_antonyms,
            context,
        )
        return words[:limit] if limit else words

    async def get_definition(self, word: str, part_of_speech: str | None = None) -> str:
        """One-line definition of ``word``.

        Raises:
            InvalidInput: If ``word`` is blank
            ProviderUnavailable: If the model call fails
        """
        word = _require_word(word)
        part_of_speech = _optional_context(part_of_speech)
        cache_key = self._keys.definition(word, part_of_speech)
        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.debug("Cache hit for definition: %s", word)
            return cached

        async def compute() -> str:
            response = await self._client.generate(
                prompts.definition_prompt(word, part_of_speech), prompts.DEFINITION_OPTIONS
            )
            definition = parse_definition(response)
            self._cache.set(cache_key, definition, settings.ttl_definition)
            return definition

        return await self._inflight.run(cache_key, compute)

    async def analyze_context(self, word: str, context: str) -> list[ContextualMeaning]:
        """Meanings of ``word`` inside ``context``.

        Raises:
            InvalidInput: If ``word`` or ``context`` is blank
            ProviderUnavailable: If the model call fails
        """
        word = _require_word(word)
        context = _optional_context(context)
        if context is None:
            raise InvalidInput("Context is required")

        cache_key = self._keys.context(word, context)
        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.debug("Cache hit for context: %s", word)
            return cached

        async def compute() -> list[ContextualMeaning]:
            response = await self._client.generate(prompts.context_prompt(word, context), prompts.CONTEXT_OPTIONS)
            meanings = parse_contextual_meanings(response, context)
            self._cache.set(cache_key, meanings, settings.ttl_context)
            return meanings

        return await self._inflight.run(cache_key, compute)

    async def analyze(self, word: str, context: str | None = None) -> AnalysisResult:
        """Full analysis of ``word``, optionally within ``context``.

        Raises:
            InvalidInput: If ``word`` is blank
            AnalysisFailed: If every sub-lookup failed
        """
        word, context = _require_word(word), _optional_context(context)

        cache_key = self._keys.analysis(word, context)
        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.debug("Cache hit for analysis: %s", word)
            return cached

        return await self._inflight.run(cache_key, lambda: self._aggregate(cache_key, word, context))

    async def _aggregate(self, cache_key: str, word: str, context: str | None) -> AnalysisResult:
        lookups = [
            self.find_synonyms(word, context),
            self.find_antonyms(word, context),
            self.get_definition(word),
        ]
        if context is not None:
            lookups.append(self.analyze_context(word, context))

        outcomes = await asyncio.gather(*lookups, return_exceptions=True)

        failures: list[BaseException] = []
        settled = []
        for outcome in outcomes:
            if isinstance(outcome, ProviderUnavailable):
                logger.warning("Analysis sub-lookup for %r failed: %s", word, outcome)
                failures.append(outcome)
                settled.append(None)
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                settled.append(outcome)

        if len(failures) == len(lookups):
            raise AnalysisFailed(word, failures)

        synonyms, antonyms, definition = settled[0] or [], settled[1] or [], settled[2] or ""
        contexts = (settled[3] or []) if context is not None else []

        result = AnalysisResult.build(
            word=normalize_word(word),
            definition=definition,
            part_of_speech=extract_part_of_speech(definition),
            synonyms=synonyms,
            antonyms=antonyms,
            contexts=contexts,
            degraded=bool(failures),
        )

        ttl = settings.ttl_degraded_analysis if failures else settings.ttl_analysis
        self._cache.set(cache_key, result, ttl)
        logger.info(
            "Analyzed %r: %d synonyms, %d antonyms, confidence %.2f%s",
            word,
            len(result.synonyms),
            len(result.antonyms),
            result.confidence,
            " (degraded)" if failures else "",
        )
        return result

    async def analyze_batch(
        self,
        words: list[str],
        context: str | None = None,
    ) -> tuple[list[AnalysisResult], int]:
        """Analyze several words concurrently.

        Returns:
            The successful analyses (input order) and the number that failed

        Raises:
            InvalidInput: If ``words`` is empty or longer than settings.batch_max_words
        """
        if not words:
            raise InvalidInput("Words array is required")
        if len(words) > settings.batch_max_words:
            raise InvalidInput(f"Maximum {settings.batch_max_words} words allowed per batch")

        outcomes = await asyncio.gather(
            *(self.analyze(word, context) for word in words), return_exceptions=True
        )

        results = []
        failed = 0
        for word, outcome in zip(words, outcomes):
            if isinstance(outcome, ThesaurusError):
                logger.warning("Batch analysis failed for %r: %s", word, outcome)
                failed += 1
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                results.append(outcome)
        return results, failed

    async def _related(
        self,
        cache_key: str,
        prompt: str,
        options: GenerationOptions,
        ttl: int,
        context: str | None,
    ) -> list[RelatedWord]:
        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.debug("Cache hit: %s", cache_key)
            return cached

        async def compute() -> list[RelatedWord]:
            response = await self._client.generate(prompt, options)
            words = parse_related_words(response)
            if context is not None:
                words = [replace(w, context=context) for w in words]
            self._cache.set(cache_key, words, ttl)
            return words

        return await self._inflight.run(cache_key, compute)
