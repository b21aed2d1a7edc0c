"""Local static-vector embedding provider.

Serves word vectors from a table loaded into memory from a word2vec file.
Nothing is available before ``load_model`` runs; afterwards a lookup is a
dictionary hit on the first whitespace-delimited token of the input.
A reload swaps the word index, matrix and source path as one tuple, so a
lookup never pairs an index from one file with rows from another.

Supported files:
- text (``.txt``, ``.vec``): optional ``<count> <dim>`` header, then
  ``word v1 v2 ... vN`` per line
- binary (``.bin``): ``<count> <dim>\\n`` header, then ``word<space>`` followed
  by N little-endian float32 values per entry
"""

import logging
import threading
from collections.abc import Mapping, Sequence
from pathlib import Path

import numpy as np

from semantic_thesaurus.config import settings
from semantic_thesaurus.entities import EmbeddingResultEntity
from semantic_thesaurus.errors import DimensionMismatch, ModelNotLoaded

logger = logging.getLogger(__name__)

BINARY_SUFFIXES = {".bin"}


class LocalVectorTableProvider:
    """Static vector table implementation of the EmbeddingProvider protocol.

    Out-of-vocabulary words map to an all-zero vector of the configured
    dimension rather than an error, so unknown words rank as dissimilar to
    everything.

    Example:
        ```python
        provider = LocalVectorTableProvider.create(dimension=300)
        provider.load_model("GoogleNews-vectors-negative300.bin")
        result = await provider.generate_embedding("happy days")  # looks up "happy"
        ```
    """

    PROVIDER = "word2vec"

    def __init__(self, dimension: int | None = None, model_name: str | None = None) -> None:
        """Initialize an empty provider.

        Args:
            dimension: Vector dimension every loaded file must match.
                Defaults to settings.local_vector_dimension.
            model_name: Identifier stored with the vectors. Defaults to "word2vec".
        """
        self._dimension = dimension or settings.local_vector_dimension
        self._model_name = model_name or self.PROVIDER
        self._table: tuple[dict[str, int], np.ndarray, str] | None = None
        self._load_lock = threading.Lock()

    @classmethod
    def create(cls, dimension: int | None = None) -> "LocalVectorTableProvider":
        """Factory method to create an unloaded provider with defaults."""
        return cls(dimension=dimension)

    @property
    def name(self) -> str:
        return self.PROVIDER

    @property
    def model_name(self) -> str:
        return self._model_name

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def is_loaded(self) -> bool:
        return self._table is not None

    @property
    def vocabulary_size(self) -> int:
        table = self._table
        return len(table[0]) if table else 0

    @property
    def source(self) -> str | None:
        """Path of the currently loaded file, if any."""
        table = self._table
        return table[2] if table else None

    def load_model(self, path: str | Path) -> int:
        """Load a word2vec file, replacing any previous table.

        Args:
            path: Text or binary word2vec file

        Returns:
            Number of words loaded

        Raises:
            FileNotFoundError: The file does not exist
            DimensionMismatch: The file's vectors differ from the configured dimension
            ValueError: The file is malformed or empty
        """
        path = Path(path)
        logger.info("Loading word vectors from: %s", path)

        if path.suffix.lower() in BINARY_SUFFIXES:
            words, matrix = self._read_binary(path)
        else:
            words, matrix = self._read_text(path)

        self._install(words, matrix, str(path))
        logger.info("Loaded %d word vectors (dim %d)", len(words), self._dimension)
        return len(words)

    def load_vectors(self, vocabulary: Mapping[str, Sequence[float]]) -> int:
        """Load a table from an in-memory mapping of word -> vector."""
        if not vocabulary:
            raise ValueError("Vocabulary is empty")
        words = [word.lower() for word in vocabulary]
        matrix = np.asarray([list(v) for v in vocabulary.values()], dtype=np.float32)
        self._install(words, matrix, "<memory>")
        return len(words)

    async def generate_embedding(self, text: str) -> EmbeddingResultEntity:
        table = self._table
        if table is None:
            raise ModelNotLoaded("Word vector model not loaded. Load a model file first.")
        index, matrix, _ = table

        tokens = text.lower().split()
        row = index.get(tokens[0]) if tokens else None
        if row is None:
            logger.debug("Word %r not in vocabulary, returning zero vector", tokens[:1])
            vector = [0.0] * self._dimension
        else:
            vector = matrix[row].tolist()

        return EmbeddingResultEntity(vector=vector, dimension=len(vector), model=self._model_name)

    async def is_available(self) -> bool:
        return self.is_loaded

    def _install(self, words: list[str], matrix: np.ndarray, source: str) -> None:
        if matrix.ndim != 2 or matrix.shape[0] == 0:
            raise ValueError("No vectors found")
        if matrix.shape[1] != self._dimension:
            raise DimensionMismatch(self._dimension, matrix.shape[1])

        index = {}
        for row, word in enumerate(words):
            index.setdefault(word, row)

        with self._load_lock:
            self._table = (index, matrix, source)

    def _read_text(self, path: Path) -> tuple[list[str], np.ndarray]:
        words: list[str] = []
        rows: list[list[float]] = []
        skipped = 0
        dimension: int | None = None

        with path.open("r", encoding="utf-8", errors="replace") as f:
            for line_no, line in enumerate(f):
                parts = line.rstrip().split(" ")
                if line_no == 0 and len(parts) == 2 and all(p.isdigit() for p in parts):
                    dimension = int(parts[1])
                    continue
                if len(parts) < 2:
                    continue
                if dimension is None:
                    dimension = len(parts) - 1
                if len(parts) < dimension + 1:
                    skipped += 1
                    continue
                try:
                    rows.append([float(v) for v in parts[-dimension:]])
                except ValueError:
                    skipped += 1
                    continue
                words.append(" ".join(parts[:-dimension]).lower())

        if skipped:
            logger.warning("Skipped %d malformed lines in %s", skipped, path)
        if dimension is not None and dimension != self._dimension:
            raise DimensionMismatch(self._dimension, dimension)
        return words, np.asarray(rows, dtype=np.float32)

    def _read_binary(self, path: Path) -> tuple[list[str], np.ndarray]:
        with path.open("rb") as f:
            header = f.readline().split()
            if len(header) != 2:
                raise ValueError(f"Malformed word2vec header in {path}")
            count, dimension = int(header[0]), int(header[1])
            if dimension != self._dimension:
                raise DimensionMismatch(self._dimension, dimension)

            row_bytes = dimension * np.dtype(np.float32).itemsize
            words: list[str] = []
            matrix = np.empty((count, dimension), dtype=np.float32)
            for row in range(count):
                word = bytearray()
                while True:
                    ch = f.read(1)
                    if ch in (b" ", b""):
                        break
                    if ch != b"\n":
                        word.extend(ch)
                data = f.read(row_bytes)
                if len(data) != row_bytes:
                    raise ValueError(f"Truncated word2vec file {path} at entry {row}")
                matrix[row] = np.frombuffer(data, dtype="<f4")
                words.append(word.decode("utf-8", errors="replace").lower())

        return words, matrix
