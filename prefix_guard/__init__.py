"""
PrefixGuard: Character-Prefix Constrained Sampling for Token-Level LLMs

PrefixGuard samples tokens from an autoregressive model so that the generated
text begins with a given character-level prefix, even when that prefix ends
in the middle of a token (e.g. a code-completion cursor after "de").

Key Features:
    - Rejection sampling against the remaining prefix, with a per-step retry budget
    - Stop tokens, min/max length and whitespace termination
    - Pluggable token providers (HuggingFace transformers, fixed vocabularies)
    - Structured errors and a non-raising GenerationResult API

Quick Start:
    ```python
    from prefix_guard import PrefixConstrainedSampler, SamplerConfig
    from prefix_guard.providers import ProviderFactory

    provider = ProviderFactory.create("transformers", model_id="gpt2", device="cpu")
    sampler = PrefixConstrainedSampler(
        provider,
        SamplerConfig.create(max_attempts=1000, temperature=0.8, top_k=50)
    )

    tokens = sampler.sample_sequence("def fi", max_tokens=20, stop_tokens=[":"])
    print(sampler.get_text(tokens))
    ```

Architecture:
    1. Prefix Tracker: How much of the prefix is still unmatched
    2. Acceptance Test: Is a candidate token compatible with that remainder
    3. Rejection Sampler: Draw candidates until one is accepted
    4. Generator: Length, stop-token and whitespace policy around the loop
"""

__version__ = "0.1.0"

from prefix_guard.api import (  # noqa: F401
    PrefixConstrainedSampler,
    GenerationResult,
    SamplerConfig,
    Token,
)
from prefix_guard.errors import (  # noqa: F401
    PrefixSamplingError,
    EmptyPrefix,
    MaxAttemptsExceeded,
    InvalidPrefix,
    TokenizerError,
)

__all__ = [
    "PrefixConstrainedSampler",
    "GenerationResult",
    "SamplerConfig",
    "Token",
    "PrefixSamplingError",
    "EmptyPrefix",
    "MaxAttemptsExceeded",
    "InvalidPrefix",
    "TokenizerError",
]
