"""
Token provider abstraction - the model side of prefix-constrained sampling.

The sampler never talks to a model directly. It asks a TokenProvider for
"the next token given these accepted tokens" and applies its own acceptance
rule to the answer. Everything model-specific (vocabulary, logits,
temperature/top-p/top-k shaping, randomness) lives behind this interface.

Provider Protocol:
    - sample_next_token(context): Produce one candidate token
    - get_error_message(error): Render a provider failure as text
    - configure(config): Receive the sampler's opaque sampling knobs
    - get_provider_info(): Describe the provider

Usage:
    ```python
    from prefix_guard.providers import ProviderFactory

    # Deterministic vocabulary, handy for tests and demos
    provider = ProviderFactory.create(
        "static", vocabulary=[("def", -1.0), ("(", -1.0)]
    )

    # A real HuggingFace model
    provider = ProviderFactory.create("transformers", model_id="gpt2")

    token = provider.sample_next_token([])
    ```
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from prefix_guard.types import SamplerConfig, Token

logger = logging.getLogger(__name__)


class TokenProvider(ABC):
    """
    Abstract base class for token providers.

    A provider signals failure by raising. The sampler converts any exception
    escaping sample_next_token into a TokenizerError carrying
    ``get_error_message(exc)``.
    """

    @abstractmethod
    def sample_next_token(self, context: Sequence[Token]) -> Token:
        """
        Produce the next candidate token.

        Args:
            context: Tokens accepted so far, in generation order

        Returns:
            Token: A candidate. The sampler may reject it and ask again.

        Raises:
            Exception: Any provider-specific failure
        """
        pass

    def get_error_message(self, error: BaseException) -> str:
        """
        Render a provider failure as a human-readable message.

        Args:
            error: Exception raised by sample_next_token

        Returns:
            str: Message used for the resulting TokenizerError
        """
        return str(error)

    def configure(self, config: SamplerConfig) -> None:
        """
        Receive the sampler configuration.

        Called once when a sampler is built around this provider. Providers
        that shape their distribution read temperature, top_p and top_k here.
        """
        pass

    def get_provider_info(self) -> Dict[str, Any]:
        return {"provider": self.__class__.__name__}

    def __repr__(self) -> str:
        info = self.get_provider_info()
        details = ", ".join(f"{k}={v}" for k, v in info.items() if k != "provider")
        return f"{self.__class__.__name__}({details})"


class ProviderFactory:
    """
    Factory for creating token providers by name.

    Usage:
        ```python
        provider = ProviderFactory.create("static", vocabulary=[("def", -1.0)])
        provider = ProviderFactory.create("random", vocabulary=vocab, seed=7)
        provider = ProviderFactory.create("transformers", model_id="gpt2", device="cpu")
        ```
    """

    @staticmethod
    def create(
        provider_type: str,
        vocabulary: Optional[Sequence[Any]] = None,
        model_id: Optional[str] = None,
        **kwargs
    ) -> TokenProvider:
        """
        Create a provider.

        Args:
            provider_type: "static", "random" or "transformers"
            vocabulary: (value, logprob) entries for the vocabulary providers
            model_id: HuggingFace model identifier for "transformers"
            **kwargs: Provider-specific options

        Returns:
            TokenProvider: Initialized provider

        Raises:
            ValueError: If the type is unknown or a required argument is missing
        """
        if provider_type == "static":
            from prefix_guard.providers.vocabulary import StaticVocabularyProvider
            return StaticVocabularyProvider(vocabulary or [], **kwargs)

        elif provider_type == "random":
            from prefix_guard.providers.vocabulary import RandomVocabularyProvider
            return RandomVocabularyProvider(vocabulary or [], **kwargs)

        elif provider_type == "transformers":
            if not model_id:
                raise ValueError("model_id is required for the transformers provider")
            from prefix_guard.providers.transformers_provider import TransformersProvider
            return TransformersProvider(model_id, **kwargs)

        else:
            raise ValueError(f"Unsupported provider type: {provider_type}")

    @staticmethod
    def list_available_providers() -> List[str]:
        """
        List providers usable on this system.

        The vocabulary providers are always available; "transformers" is
        listed only when torch and transformers can be imported.
        """
        available = ["static", "random"]

        try:
            import torch  # noqa: F401
            import transformers  # noqa: F401
            available.append("transformers")
        except ImportError:
            logger.debug("transformers provider unavailable (torch/transformers missing)")

        return available
