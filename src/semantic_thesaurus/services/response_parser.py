"""Parsing of untrusted language model output.

Parsing runs in two stages. ``parse_structured`` looks for a JSON array and
returns ``Structured(data)``; anything else comes back as
``Fallback(raw_text)``. The typed parsers below branch on that tag and,
for fallbacks, apply a permissive heuristic instead of failing.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from semantic_thesaurus.entities import ContextualMeaning, RelatedWord

logger = logging.getLogger(__name__)

STRUCTURED_DEFAULT_CONFIDENCE = 0.5
FALLBACK_CONFIDENCE = 0.6
FALLBACK_MAX_WORDS = 10

_JSON_ARRAY = re.compile(r"\[[\s\S]*\]")
_LIST_MARKER = re.compile(r"^\s*(?:[-*•]|\d+[.)])\s*")
_BARE_WORD = re.compile(r"^[A-Za-z][A-Za-z\s-]*$")
_DEFINITION_LABEL = re.compile(r"^\s*definition\s*:\s*", re.IGNORECASE)
_PART_OF_SPEECH = re.compile(
    r"\b(noun|verb|adjective|adverb|pronoun|preposition|conjunction|interjection)\b",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class Structured:
    """The response contained a well-formed JSON array."""

    data: list[Any]


@dataclass(frozen=True)
class Fallback:
    """No usable structure; carries the raw text for heuristic parsing."""

    raw_text: str


ParseResult = Structured | Fallback


class RelatedWordItem(BaseModel):
    """One synonym/antonym object as the model is asked to emit it."""

    model_config = ConfigDict(extra="ignore")

    word: str = Field(..., min_length=1)
    confidence: float = STRUCTURED_DEFAULT_CONFIDENCE

    @field_validator("word")
    @classmethod
    def strip_word(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("word is blank")
        return value

    @field_validator("confidence", mode="before")
    @classmethod
    def clamp_confidence(cls, value: Any) -> float:
        if isinstance(value, bool) or not isinstance(value, int | float):
            return STRUCTURED_DEFAULT_CONFIDENCE
        return min(1.0, max(0.0, float(value)))


class ContextItem(BaseModel):
    """One contextual meaning object as the model is asked to emit it."""

    model_config = ConfigDict(extra="ignore")

    context: str | None = None
    meaning: str = Field(..., min_length=1)
    domain: str | None = None
    sentiment: float | None = None
    examples: list[str] = Field(default_factory=list)

    @field_validator("sentiment", mode="before")
    @classmethod
    def clamp_sentiment(cls, value: Any) -> float | None:
        if isinstance(value, bool) or not isinstance(value, int | float):
            return None
        return min(1.0, max(-1.0, float(value)))

    @field_validator("examples", mode="before")
    @classmethod
    def keep_string_examples(cls, value: Any) -> list[str]:
        if not isinstance(value, list):
            return []
        return [str(v) for v in value if isinstance(v, str | int | float)]


def parse_structured(response: str) -> ParseResult:
    """Extract the outermost JSON array from a model response."""
    match = _JSON_ARRAY.search(response)
    if match is None:
        return Fallback(response)
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError:
        return Fallback(response)
    if not isinstance(data, list):
        return Fallback(response)
    return Structured(data)


def fallback_parse_words(response: str) -> list[RelatedWord]:
    """Pull bare words out of free text split on commas, semicolons and newlines."""
    words: list[str] = []
    for chunk in re.split(r"[,;\n]", response):
        candidate = _LIST_MARKER.sub("", chunk).strip().strip("\"'.").strip()
        if not candidate or not _BARE_WORD.match(candidate):
            continue
        candidate = candidate.lower()
        if candidate not in words:
            words.append(candidate)
        if len(words) == FALLBACK_MAX_WORDS:
            break
    return [RelatedWord(word=w, confidence=FALLBACK_CONFIDENCE) for w in words]


def parse_related_words(response: str) -> list[RelatedWord]:
    """Parse a synonym/antonym response, never raising."""
    result = parse_structured(response)

    if isinstance(result, Structured):
        words = []
        for item in result.data:
            if isinstance(item, str):
                item = {"word": item}
            try:
                parsed = RelatedWordItem.model_validate(item)
            except ValidationError:
                continue
            words.append(RelatedWord(word=parsed.word, confidence=parsed.confidence))
        if words or not result.data:
            return words
        result = Fallback(response)

    logger.info("ParseFallback: related-word response was not structured, using word split")
    return fallback_parse_words(result.raw_text)


def parse_contextual_meanings(response: str, context: str) -> list[ContextualMeaning]:
    """Parse a contextual-meaning response, never raising."""
    result = parse_structured(response)

    if isinstance(result, Structured):
        meanings = []
        for item in result.data:
            try:
                parsed = ContextItem.model_validate(item)
            except ValidationError:
                continue
            meanings.append(
                ContextualMeaning(
                    context=parsed.context or context,
                    meaning=parsed.meaning.strip(),
                    domain=parsed.domain,
                    sentiment=parsed.sentiment,
                    examples=tuple(parsed.examples),
                )
            )
        if meanings or not result.data:
            return meanings
        result = Fallback(response)

    logger.info("ParseFallback: context response was not structured, using first line")
    for line in result.raw_text.splitlines():
        line = line.strip().strip("[]{}").strip()
        if line:
            return [ContextualMeaning(context=context, meaning=line)]
    return []


def parse_definition(response: str) -> str:
    """First line of the response with any leading ``Definition:`` label removed."""
    text = _DEFINITION_LABEL.sub("", response.strip())
    return text.split("\n", 1)[0].strip()


def extract_part_of_speech(definition: str) -> str:
    match = _PART_OF_SPEECH.search(definition)
    return match.group(1).lower() if match else "unknown"
