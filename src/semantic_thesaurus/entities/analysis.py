"""Word analysis entities."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class RelatedWord:
    """A synonym or antonym with the model's confidence in it."""

    word: str
    confidence: float
    context: str | None = None
    similarity: float | None = None


@dataclass(frozen=True)
class ContextualMeaning:
    """What a word means inside one specific context."""

    context: str
    meaning: str
    domain: str | None = None
    sentiment: float | None = None
    examples: tuple[str, ...] = ()


@dataclass(frozen=True)
class AnalysisResult:
    """Aggregate of all sub-analyses for one (word, context) pair.

    ``confidence`` is derived from the related words, never set directly;
    build instances through :meth:`build`.
    """

    word: str
    definition: str
    part_of_speech: str
    synonyms: tuple[RelatedWord, ...] = ()
    antonyms: tuple[RelatedWord, ...] = ()
    contexts: tuple[ContextualMeaning, ...] = ()
    confidence: float = 0.0
    degraded: bool = field(default=False, compare=False)

    @classmethod
    def build(
        cls,
        word: str,
        definition: str,
        part_of_speech: str,
        synonyms: list[RelatedWord],
        antonyms: list[RelatedWord],
        contexts: list[ContextualMeaning],
        degraded: bool = False,
    ) -> "AnalysisResult":
        return cls(
            word=word,
            definition=definition,
            part_of_speech=part_of_speech,
            synonyms=tuple(synonyms),
            antonyms=tuple(antonyms),
            contexts=tuple(contexts),
            confidence=overall_confidence(synonyms, antonyms),
            degraded=degraded,
        )


def overall_confidence(synonyms: list[RelatedWord], antonyms: list[RelatedWord]) -> float:
    """Average confidence over synonyms and antonyms, two decimals, 0 when empty."""
    related = [*synonyms, *antonyms]
    if not related:
        return 0.0
    return round(sum(w.confidence for w in related) / len(related), 2)
