"""
Rejection sampler - draw candidates until one passes the acceptance test.

For every generation step the sampler gets a fresh retry budget of
``max_attempts`` provider calls:

    1. Ask the provider for a candidate given the accepted context
    2. Provider failed     → raise TokenizerError (no retry)
    3. Candidate accepted  → return it
    4. Candidate rejected  → discard it, spend one attempt, go to 1
    5. Budget exhausted    → raise MaxAttemptsExceeded(max_attempts)

Retries are memoryless: rejected candidates are not remembered, and the
provider sees the same context on every retry.

Usage:
    ```python
    from prefix_guard.decoding import RejectionSampler

    sampler = RejectionSampler(provider, max_attempts=1000)
    token = sampler.attempt_sample(context=[], remaining=RemainingPrefix.pending("def"))
    ```
"""

import logging
from typing import Sequence

from prefix_guard.decoding.acceptance import is_valid_next_token
from prefix_guard.errors import MaxAttemptsExceeded, TokenizerError
from prefix_guard.providers.base import TokenProvider
from prefix_guard.types import RemainingPrefix, Token

logger = logging.getLogger(__name__)


class RejectionSampler:
    """
    Bounded-retry rejection sampling over a token provider.

    Attributes:
        provider: Source of candidate tokens
        max_attempts: Retry budget per call to attempt_sample
        last_attempts_used: Provider calls made by the most recent step
    """

    def __init__(self, provider: TokenProvider, max_attempts: int):
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be positive, got {max_attempts}")

        self.provider = provider
        self.max_attempts = max_attempts
        self.last_attempts_used = 0

    def attempt_sample(
        self,
        context: Sequence[Token],
        remaining: RemainingPrefix
    ) -> Token:
        """
        Sample one token compatible with ``remaining``.

        Args:
            context: Tokens accepted so far (passed to the provider)
            remaining: Current remaining-prefix value

        Returns:
            Token: The first accepted candidate

        Raises:
            TokenizerError: If the provider raises
            MaxAttemptsExceeded: If every attempt is rejected
        """
        is_first = len(context) == 0
        attempts_left = self.max_attempts
        self.last_attempts_used = 0

        while attempts_left > 0:
            self.last_attempts_used += 1

            try:
                candidate = self.provider.sample_next_token(context)
            except Exception as e:
                message = self.provider.get_error_message(e)
                logger.error(f"Token provider failed: {message}")
                raise TokenizerError(message) from e

            if is_valid_next_token(candidate, remaining, is_first):
                logger.debug(
                    f"Accepted {candidate.value!r} after {self.last_attempts_used} "
                    f"attempt(s) ({remaining})"
                )
                return candidate

            logger.debug(f"Rejected {candidate.value!r} ({remaining})")
            attempts_left -= 1

        logger.warning(
            f"No acceptable token after {self.max_attempts} attempts ({remaining})"
        )
        raise MaxAttemptsExceeded(attempts=self.max_attempts)

    def __repr__(self) -> str:
        return f"RejectionSampler(max_attempts={self.max_attempts})"
