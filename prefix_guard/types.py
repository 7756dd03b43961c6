"""
Core value types for prefix-constrained sampling.

These are plain, immutable containers. They carry no sampling behavior of
their own; the decoding modules and the generator operate on them.

Types:
    - Token: one fragment of model output with its log-probability and metadata
    - SamplerConfig: retry budget plus opaque provider knobs
    - GenerationParams: per-call generation parameters
    - RemainingPrefix: how much of the target prefix is still unmatched

Usage:
    ```python
    from prefix_guard.types import Token, SamplerConfig

    token = Token("def", -0.5, (("position", "0"),))
    token.get("position")  # "0"

    config = SamplerConfig.create(max_attempts=50, temperature=0.8)
    ```
"""

from dataclasses import asdict, dataclass, field, replace
from typing import Any, Dict, FrozenSet, Iterable, Optional, Tuple

Metadata = Tuple[Tuple[str, str], ...]


@dataclass(frozen=True)
class Token:
    """
    A single token produced by a token provider.

    Attributes:
        value: Text fragment of the token
        logprob: Log-probability score (scale defined by the provider)
        metadata: Ordered (key, value) pairs; duplicate keys are allowed
    """
    value: str
    logprob: float = 0.0
    metadata: Metadata = ()

    def __post_init__(self):
        # Accept any iterable of pairs and normalize to a tuple of str pairs
        object.__setattr__(
            self, "metadata", tuple((str(k), str(v)) for k, v in self.metadata)
        )

    def get(self, key: str) -> Optional[str]:
        """Return the first metadata value bound to ``key``, or None."""
        for k, v in self.metadata:
            if k == key:
                return v
        return None

    def get_all(self, key: str) -> Tuple[str, ...]:
        """Return every metadata value bound to ``key`` in insertion order."""
        return tuple(v for k, v in self.metadata if k == key)


@dataclass(frozen=True)
class SamplerConfig:
    """
    Sampler configuration.

    Only ``max_attempts`` is read by the sampling core. The remaining fields
    are handed to the token provider untouched.

    Attributes:
        max_attempts: Retry budget per generation step (default 1000)
        temperature: Sampling temperature for the provider (default 1.0)
        top_p: Nucleus sampling cutoff in (0, 1], or None
        top_k: Top-k cutoff, or None
    """
    max_attempts: int = 1000
    temperature: float = 1.0
    top_p: Optional[float] = None
    top_k: Optional[int] = None

    def __post_init__(self):
        if not isinstance(self.max_attempts, int) or self.max_attempts < 1:
            raise ValueError(
                f"max_attempts must be a positive integer, got {self.max_attempts!r}"
            )

    @classmethod
    def create(cls, **overrides: Any) -> "SamplerConfig":
        """
        Build a configuration by merging overrides onto the defaults.

        Keys whose value is None are ignored, so callers can pass optional
        CLI flags straight through.

        Raises:
            ValueError: If an unknown field is given or max_attempts is invalid
        """
        known = set(cls.__dataclass_fields__)
        unknown = set(overrides) - known
        if unknown:
            raise ValueError(f"Unknown config fields: {', '.join(sorted(unknown))}")

        values = {k: v for k, v in overrides.items() if v is not None}
        return cls(**values)

    def with_overrides(self, **overrides: Any) -> "SamplerConfig":
        """Return a copy with non-None overrides applied."""
        values = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **values)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class GenerationParams:
    """
    Per-call generation parameters.

    Attributes:
        prefix: Required leading text of the output
        max_tokens: Upper bound on generated tokens (default 100)
        min_tokens: Tokens required before stop rules apply (default 1)
        stop_tokens: Token values that end generation once accepted
    """
    prefix: str
    max_tokens: int = 100
    min_tokens: int = 1
    stop_tokens: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def build(
        cls,
        prefix: str,
        max_tokens: int = 100,
        stop_tokens: Optional[Iterable[str]] = None,
        min_tokens: int = 1,
    ) -> "GenerationParams":
        return cls(
            prefix=prefix,
            max_tokens=max_tokens,
            min_tokens=min_tokens,
            stop_tokens=frozenset(stop_tokens or ()),
        )


@dataclass(frozen=True)
class RemainingPrefix:
    """
    Unmatched tail of the target prefix.

    ``suffix is None`` means the prefix is satisfied; otherwise ``suffix`` is
    the text still required.
    """
    suffix: Optional[str] = None

    @classmethod
    def satisfied(cls) -> "RemainingPrefix":
        return cls(None)

    @classmethod
    def pending(cls, suffix: str) -> "RemainingPrefix":
        return cls(suffix)

    @property
    def is_satisfied(self) -> bool:
        return self.suffix is None

    def __repr__(self) -> str:
        if self.is_satisfied:
            return "RemainingPrefix(satisfied)"
        return f"RemainingPrefix(pending={self.suffix!r})"
