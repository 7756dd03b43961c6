"""
Token provider module.

Providers supply candidate tokens to the prefix-constrained sampler. The
sampler only depends on the TokenProvider interface, so any model runtime
can be plugged in.

Components:
    - base: TokenProvider ABC and ProviderFactory
    - vocabulary: Static and random vocabulary providers (no model needed)
    - transformers_provider: HuggingFace causal LM provider

Example:
    ```python
    from prefix_guard.providers import ProviderFactory

    provider = ProviderFactory.create(
        "random",
        vocabulary=[("def", -0.5), ("class", -1.5), (":", -2.0)],
        seed=0
    )
    ```

The transformers provider is imported lazily through ProviderFactory so that
torch is only required when it is actually used.
"""

from prefix_guard.providers.base import TokenProvider, ProviderFactory
from prefix_guard.providers.vocabulary import (
    StaticVocabularyProvider,
    RandomVocabularyProvider,
    normalize_vocabulary,
    DEFAULT_VOCABULARY,
)

__all__ = [
    "TokenProvider",
    "ProviderFactory",
    "StaticVocabularyProvider",
    "RandomVocabularyProvider",
    "normalize_vocabulary",
    "DEFAULT_VOCABULARY",
]
