"""
Prefix-constrained sequence generator.

This is the core class that ties all components together. For each output
position it:
    1. Stops if max_tokens is reached
    2. Stops if a stop token was accepted and min_tokens is met
    3. Tracks the remaining prefix
    4. Rejection-samples one compatible token from the provider
    5. Stops after appending a whitespace-only token once the prefix is
       satisfied and min_tokens is met
    6. Otherwise appends the token and continues

Usage:
    ```python
    from prefix_guard import PrefixConstrainedSampler, SamplerConfig
    from prefix_guard.providers import ProviderFactory

    provider = ProviderFactory.create("transformers", model_id="gpt2")
    sampler = PrefixConstrainedSampler(provider, SamplerConfig.create(max_attempts=200))

    # Raises PrefixSamplingError subclasses on failure
    tokens = sampler.sample_sequence("def fib", max_tokens=30, stop_tokens=[":"])

    # Or get a result object that never raises for sampling failures
    result = sampler.generate("def fib", max_tokens=30, stop_tokens=[":"])
    print(result.text if result.is_success else result.error)
    ```
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from prefix_guard.decoding import RejectionSampler, get_remaining_prefix
from prefix_guard.errors import PrefixSamplingError
from prefix_guard.providers.base import TokenProvider
from prefix_guard.results import get_logprob, get_metadata, get_text, get_token_count
from prefix_guard.types import GenerationParams, SamplerConfig, Token
from prefix_guard.utils import measure_time

logger = logging.getLogger(__name__)

STOP_MAX_TOKENS = "max_tokens"
STOP_TOKEN = "stop_token"
STOP_WHITESPACE = "whitespace"


@dataclass
class GenerationResult:
    """
    Result of a generation call.

    Attributes:
        tokens: Accepted tokens (empty on failure)
        is_success: Whether generation completed
        error: The sampling error, if generation failed
        stop_reason: "max_tokens", "stop_token" or "whitespace" on success
        provider_calls: Total candidates requested from the provider
        latency_ms: Wall-clock time in milliseconds
    """
    tokens: Tuple[Token, ...]
    is_success: bool
    error: Optional[PrefixSamplingError]
    stop_reason: Optional[str]
    provider_calls: int
    latency_ms: float

    @property
    def text(self) -> str:
        return get_text(self.tokens)

    @property
    def logprob(self) -> float:
        return get_logprob(self.tokens)

    @property
    def token_count(self) -> int:
        return get_token_count(self.tokens)


class PrefixConstrainedSampler:
    """
    Sample token sequences whose text starts with a character-level prefix.

    The sampler is generic over its TokenProvider and keeps no state between
    calls other than usage counters.

    Attributes:
        provider: Injected token provider
        config: Sampler configuration
        provider_calls: Provider calls made by the most recent generation
    """

    def __init__(
        self,
        provider: TokenProvider,
        config: Optional[SamplerConfig] = None
    ):
        """
        Initialize the sampler.

        Args:
            provider: Token provider to draw candidates from
            config: Sampler configuration (defaults to SamplerConfig())

        Example:
            ```python
            sampler = PrefixConstrainedSampler(
                provider,
                SamplerConfig.create(max_attempts=1000, temperature=0.8, top_p=0.9, top_k=50)
            )
            ```
        """
        self.provider = provider
        self.config = config if config is not None else SamplerConfig()
        self.provider_calls = 0

        # Hand the opaque sampling knobs to the provider
        self.provider.configure(self.config)

        logger.info(
            f"Initializing PrefixConstrainedSampler: provider={provider.__class__.__name__}, "
            f"max_attempts={self.config.max_attempts}"
        )

    def sample_sequence(
        self,
        prefix: str,
        max_tokens: int = 100,
        stop_tokens: Optional[Iterable[str]] = None,
        min_tokens: int = 1
    ) -> Tuple[Token, ...]:
        """
        Generate tokens whose concatenated text starts with ``prefix``.

        Args:
            prefix: Required leading text (non-empty)
            max_tokens: Maximum number of tokens to generate
            stop_tokens: Token values that end generation once accepted
            min_tokens: Tokens required before stop rules apply

        Returns:
            Tuple of accepted tokens in generation order

        Raises:
            EmptyPrefix: If prefix is empty
            MaxAttemptsExceeded: If a step exhausts the retry budget
            InvalidPrefix: If accepted text diverged from the prefix
            TokenizerError: If the provider fails
        """
        tokens, _ = self.sample_sequence_with_reason(
            prefix,
            max_tokens=max_tokens,
            stop_tokens=stop_tokens,
            min_tokens=min_tokens
        )
        return tokens

    def sample_sequence_with_reason(
        self,
        prefix: str,
        max_tokens: int = 100,
        stop_tokens: Optional[Iterable[str]] = None,
        min_tokens: int = 1
    ) -> Tuple[Tuple[Token, ...], str]:
        """
        Same as sample_sequence, also returning why generation stopped.

        Returns:
            (tokens, stop_reason) where stop_reason is one of
            "max_tokens", "stop_token" or "whitespace"
        """
        params = GenerationParams.build(
            prefix,
            max_tokens=max_tokens,
            stop_tokens=stop_tokens,
            min_tokens=min_tokens
        )
        rejection = RejectionSampler(self.provider, self.config.max_attempts)
        self.provider_calls = 0

        accepted: List[Token] = []
        count = 0

        while True:
            if count >= params.max_tokens:
                return self._finish(accepted, STOP_MAX_TOKENS)

            if count >= params.min_tokens and any(
                token.value in params.stop_tokens for token in accepted
            ):
                return self._finish(accepted, STOP_TOKEN)

            remaining = get_remaining_prefix(params.prefix, accepted)

            try:
                token = rejection.attempt_sample(accepted, remaining)
            finally:
                self.provider_calls += rejection.last_attempts_used

            if (
                remaining.is_satisfied
                and count >= params.min_tokens
                and token.value.strip() == ""
            ):
                accepted.append(token)
                return self._finish(accepted, STOP_WHITESPACE)

            accepted.append(token)
            count += 1

    def _finish(self, accepted: List[Token], reason: str) -> Tuple[Tuple[Token, ...], str]:
        logger.info(
            f"Generation finished ({reason}): {len(accepted)} tokens, "
            f"{self.provider_calls} provider calls"
        )
        return tuple(accepted), reason

    def generate(
        self,
        prefix: str,
        max_tokens: int = 100,
        stop_tokens: Optional[Iterable[str]] = None,
        min_tokens: int = 1
    ) -> GenerationResult:
        """
        Generate and report the outcome as a GenerationResult.

        Sampling errors are captured in ``result.error`` instead of being
        raised. Any other exception propagates.

        Example:
            ```python
            result = sampler.generate("de", max_tokens=10)
            if result.is_success:
                print(f"{result.text!r} ({result.stop_reason})")
            else:
                print(f"Failed: {result.error}")
            ```
        """
        with measure_time() as timer:
            try:
                tokens, reason = self.sample_sequence_with_reason(
                    prefix,
                    max_tokens=max_tokens,
                    stop_tokens=stop_tokens,
                    min_tokens=min_tokens
                )
            except PrefixSamplingError as e:
                logger.error(f"Generation failed: {e}")
                return GenerationResult(
                    tokens=(),
                    is_success=False,
                    error=e,
                    stop_reason=None,
                    provider_calls=self.provider_calls,
                    latency_ms=timer.elapsed_ms
                )

        return GenerationResult(
            tokens=tokens,
            is_success=True,
            error=None,
            stop_reason=reason,
            provider_calls=self.provider_calls,
            latency_ms=timer.elapsed_ms
        )

    # Accessors kept on the sampler for convenience
    get_text = staticmethod(get_text)
    get_logprob = staticmethod(get_logprob)
    get_token_count = staticmethod(get_token_count)
    get_metadata = staticmethod(get_metadata)

    def get_info(self) -> Dict[str, Any]:
        """Get sampler information."""
        info = {"sampler": self.__class__.__name__}
        info.update(self.config.to_dict())
        info.update(self.provider.get_provider_info())
        return info

    def __repr__(self) -> str:
        return (
            f"PrefixConstrainedSampler(provider={self.provider.__class__.__name__}, "
            f"max_attempts={self.config.max_attempts})"
        )
