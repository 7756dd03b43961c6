"""
Prefix Tracker - how much of the target prefix is still unmatched.

Before every generation step the generator asks the tracker where the
accepted text stands relative to the target prefix:

    generated = "de",   prefix = "def"  →  pending("f")
    generated = "def",  prefix = "def"  →  satisfied
    generated = "defi", prefix = "def"  →  satisfied
    generated = "da",   prefix = "def"  →  InvalidPrefix

The value is recomputed from the full token list every step rather than
maintained incrementally. Cost is linear in the generated length, which is
bounded by max_tokens.

Usage:
    ```python
    from prefix_guard.decoding import get_remaining_prefix

    remaining = get_remaining_prefix("def", accepted_tokens)
    if remaining.is_satisfied:
        print("Prefix complete")
    else:
        print(f"Still need: {remaining.suffix!r}")
    ```
"""

import logging
from typing import Sequence

from prefix_guard.errors import EmptyPrefix, InvalidPrefix
from prefix_guard.types import RemainingPrefix, Token

logger = logging.getLogger(__name__)


def get_remaining_prefix(prefix: str, tokens: Sequence[Token]) -> RemainingPrefix:
    """
    Compute the unmatched tail of ``prefix`` given the accepted tokens.

    Args:
        prefix: Target prefix (must be non-empty)
        tokens: Tokens accepted so far, in generation order

    Returns:
        RemainingPrefix: satisfied, or pending with the missing suffix

    Raises:
        EmptyPrefix: If prefix is the empty string
        InvalidPrefix: If the accepted text diverged from the prefix. This
            only happens when a token slipped past the acceptance test.
    """
    if len(prefix) == 0:
        raise EmptyPrefix()

    generated = "".join(token.value for token in tokens)

    if generated.startswith(prefix):
        return RemainingPrefix.satisfied()

    if prefix.startswith(generated):
        return RemainingPrefix.pending(prefix[len(generated):])

    logger.error(f"Generated text {generated!r} diverged from prefix {prefix!r}")
    raise InvalidPrefix(generated=generated, prefix=prefix)
