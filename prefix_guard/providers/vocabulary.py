"""
Vocabulary-backed token providers.

These providers draw tokens from a fixed list of (value, logprob) entries
instead of a neural model. They are used by the CLI demos, the benchmarks,
and the test suite.

Providers:
    - StaticVocabularyProvider: always returns the first entry (deterministic)
    - RandomVocabularyProvider: draws entries ∝ exp(logprob / temperature),
      honouring top_k and top_p from the sampler config

Both attach two metadata pairs to every token:
    - position: number of tokens already accepted (len(context))
    - is_first: "true" when the context is empty, else "false"

Usage:
    ```python
    from prefix_guard.providers import StaticVocabularyProvider

    provider = StaticVocabularyProvider([("def", -1.0), ("(", -1.0)])
    provider.sample_next_token([])  # Token("def", -1.0, ...)
    ```
"""

import logging
import math
import random
from typing import Any, Dict, List, Optional, Sequence, Tuple

from prefix_guard.errors import ProviderError
from prefix_guard.providers.base import TokenProvider
from prefix_guard.types import SamplerConfig, Token

logger = logging.getLogger(__name__)

VocabularyEntry = Tuple[str, float]

# Small code-flavoured vocabulary used when no vocabulary file is given
DEFAULT_VOCABULARY: List[VocabularyEntry] = [
    ("def", -1.0),
    ("defun", -1.0),
    ("define", -1.0),
    ("class", -1.0),
    ("foo", -1.0),
    ("bar", -1.0),
    ("(", -1.0),
    (")", -1.0),
    (":", -1.0),
    (" ", -1.0),
]


def normalize_vocabulary(vocabulary: Sequence[Any]) -> List[VocabularyEntry]:
    """
    Convert vocabulary entries to (value, logprob) tuples.

    Entries may be (value, logprob) pairs, bare strings (logprob 0.0) or
    Token instances.

    Raises:
        ValueError: If an entry has an unsupported shape
    """
    entries = []
    for entry in vocabulary:
        if isinstance(entry, Token):
            entries.append((entry.value, float(entry.logprob)))
        elif isinstance(entry, str):
            entries.append((entry, 0.0))
        elif isinstance(entry, (list, tuple)) and len(entry) == 2:
            entries.append((str(entry[0]), float(entry[1])))
        else:
            raise ValueError(f"Invalid vocabulary entry: {entry!r}")
    return entries


def _position_metadata(context: Sequence[Token]) -> Tuple[Tuple[str, str], ...]:
    return (
        ("position", str(len(context))),
        ("is_first", "true" if len(context) == 0 else "false"),
    )


class StaticVocabularyProvider(TokenProvider):
    """
    Deterministic provider that always proposes the first vocabulary entry.

    Attributes:
        vocabulary: Ordered (value, logprob) entries
    """

    def __init__(self, vocabulary: Sequence[Any]):
        self.vocabulary = normalize_vocabulary(vocabulary)

    def set_vocabulary(self, vocabulary: Sequence[Any]) -> None:
        self.vocabulary = normalize_vocabulary(vocabulary)
        logger.debug(f"Vocabulary replaced ({len(self.vocabulary)} entries)")

    def sample_next_token(self, context: Sequence[Token]) -> Token:
        if not self.vocabulary:
            raise ProviderError("vocabulary is empty")

        value, logprob = self.vocabulary[0]
        return Token(value, logprob, _position_metadata(context))

    def get_provider_info(self) -> Dict[str, Any]:
        return {
            "provider": "static",
            "vocab_size": len(self.vocabulary),
        }


class RandomVocabularyProvider(TokenProvider):
    """
    Provider that samples vocabulary entries by their log-probabilities.

    The entry weights are exp(logprob / temperature). top_k keeps only the k
    highest-weighted entries; top_p keeps the smallest high-weight set whose
    normalized mass reaches p.

    Attributes:
        vocabulary: Ordered (value, logprob) entries
        temperature: Sampling temperature
        top_k: Optional top-k cutoff
        top_p: Optional nucleus cutoff
    """

    def __init__(
        self,
        vocabulary: Sequence[Any],
        seed: Optional[int] = None,
        temperature: float = 1.0,
        top_p: Optional[float] = None,
        top_k: Optional[int] = None
    ):
        self.vocabulary = normalize_vocabulary(vocabulary)
        self.seed = seed
        self.temperature = temperature
        self.top_p = top_p
        self.top_k = top_k
        self._rng = random.Random(seed)

    def configure(self, config: SamplerConfig) -> None:
        self.temperature = config.temperature
        self.top_p = config.top_p
        self.top_k = config.top_k
        logger.debug(
            f"RandomVocabularyProvider configured: temperature={self.temperature}, "
            f"top_p={self.top_p}, top_k={self.top_k}"
        )

    def set_vocabulary(self, vocabulary: Sequence[Any]) -> None:
        self.vocabulary = normalize_vocabulary(vocabulary)

    def reseed(self, seed: Optional[int] = None) -> None:
        """Reset the random generator, making the next draws reproducible."""
        self.seed = seed
        self._rng = random.Random(seed)

    def _candidate_weights(self) -> List[Tuple[VocabularyEntry, float]]:
        if self.temperature <= 0:
            raise ProviderError(f"temperature must be positive, got {self.temperature}")

        # Subtract the max before exponentiating to keep weights finite
        scaled = [logprob / self.temperature for _, logprob in self.vocabulary]
        peak = max(scaled)
        weighted = [
            (entry, math.exp(score - peak))
            for entry, score in zip(self.vocabulary, scaled)
        ]
        weighted.sort(key=lambda item: item[1], reverse=True)

        if self.top_k is not None and self.top_k > 0:
            weighted = weighted[:self.top_k]

        if self.top_p is not None and 0 < self.top_p < 1:
            total = sum(w for _, w in weighted)
            kept = []
            mass = 0.0
            for entry, w in weighted:
                kept.append((entry, w))
                mass += w / total
                if mass >= self.top_p:
                    break
            weighted = kept

        return weighted

    def sample_next_token(self, context: Sequence[Token]) -> Token:
        if not self.vocabulary:
            raise ProviderError("vocabulary is empty")

        weighted = self._candidate_weights()
        entries = [entry for entry, _ in weighted]
        weights = [w for _, w in weighted]

        value, logprob = self._rng.choices(entries, weights=weights, k=1)[0]
        return Token(value, logprob, _position_metadata(context))

    def get_provider_info(self) -> Dict[str, Any]:
        return {
            "provider": "random",
            "vocab_size": len(self.vocabulary),
            "seed": self.seed,
            "temperature": self.temperature,
            "top_p": self.top_p,
            "top_k": self.top_k,
        }
