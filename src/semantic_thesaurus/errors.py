"""Error taxonomy for the thesaurus core.

Every failure that can reach a caller is one of these types. Transport
exceptions (httpx, redis) are translated at the repository boundary.
"""


class ThesaurusError(Exception):
    """Base class for all thesaurus errors."""


class CacheUnavailable(ThesaurusError):
    """A cache store operation failed.

    Callers treat this as a miss or a no-op, never as a functional failure.
    """


class ProviderUnavailable(ThesaurusError):
    """The language model or embedding backend could not be reached."""


class ModelNotLoaded(ThesaurusError):
    """The local vector table was used before a model was loaded."""


class DimensionMismatch(ThesaurusError):
    """Two vectors (or a vector and a declared dimension) differ in length."""

    def __init__(self, expected: int, actual: int, message: str | None = None) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(message or f"Expected dimension {expected}, got {actual}")


class InvalidInput(ThesaurusError):
    """Missing or malformed request parameters."""


class UnsupportedProvider(InvalidInput):
    """The requested embedding provider is not known."""


class AnalysisFailed(ThesaurusError):
    """Every sub-operation of a word analysis failed."""

    def __init__(self, word: str, causes: list[BaseException] | None = None) -> None:
        self.word = word
        self.causes = causes or []
        super().__init__(f"All analysis sub-operations failed for '{word}'")


class StoreUnavailable(ThesaurusError):
    """The persistent embedding store could not be reached."""


class SearchBackendUnavailable(StoreUnavailable):
    """Neither the native nor the brute-force similarity backend could run."""
