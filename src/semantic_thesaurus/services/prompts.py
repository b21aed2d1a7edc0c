"""Instructions sent to the language model, one builder per sub-analysis."""

from semantic_thesaurus.protocols import GenerationOptions

SYNONYM_OPTIONS: GenerationOptions = {"temperature": 0.3, "top_p": 0.9, "max_tokens": 500}
ANTONYM_OPTIONS: GenerationOptions = {"temperature": 0.3, "top_p": 0.9, "max_tokens": 500}
CONTEXT_OPTIONS: GenerationOptions = {"temperature": 0.4, "top_p": 0.8, "max_tokens": 800}
DEFINITION_OPTIONS: GenerationOptions = {"temperature": 0.2, "top_p": 0.7, "max_tokens": 200}

_RELATED_FORMAT = (
    'Respond with a JSON array only, for example: [{"word": "example", "confidence": 0.9}]. '
    "Confidence is a number between 0 and 1. Return at most 10 entries."
)


def _context_clause(context: str | None) -> str:
    return f' as used in the context "{context}"' if context else ""


def synonym_prompt(word: str, context: str | None = None) -> str:
    return (
        f'List synonyms for the word "{word}"{_context_clause(context)}. '
        f"Order them from closest to loosest meaning. {_RELATED_FORMAT}"
    )


def antonym_prompt(word: str, context: str | None = None) -> str:
    return (
        f'List antonyms for the word "{word}"{_context_clause(context)}. '
        f"Prefer direct opposites over loose contrasts. {_RELATED_FORMAT}"
    )


def context_prompt(word: str, context: str) -> str:
    return (
        f'Explain what the word "{word}" means in this context: "{context}". '
        "Respond with a JSON array only, each object shaped as "
        '{"context": "...", "meaning": "...", "domain": "...", '
        '"sentiment": <number between -1 and 1>, "examples": ["..."]}.'
    )


def definition_prompt(word: str, part_of_speech: str | None = None) -> str:
    qualifier = f" (as a {part_of_speech})" if part_of_speech else ""
    return (
        f'Give a concise dictionary definition of "{word}"{qualifier}. '
        "Start with the part of speech, then the definition, on a single line."
    )
