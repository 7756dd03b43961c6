"""
Derived views over a finished token sequence.

All functions are pure and accept any sequence of tokens.

Example:
    ```python
    from prefix_guard.results import get_text, get_logprob, get_metadata

    tokens = sampler.sample_sequence("def")
    print(get_text(tokens))                 # "def foo():"
    print(get_logprob(tokens))              # -4.0
    print(get_metadata(tokens, "position")) # ["0", "1", "2", "3"]
    ```
"""

from typing import List, Sequence

from prefix_guard.types import Token


def get_text(tokens: Sequence[Token]) -> str:
    """Concatenate token values in order."""
    return "".join(token.value for token in tokens)


def get_logprob(tokens: Sequence[Token]) -> float:
    """Sum of token log-probabilities (0.0 for an empty sequence)."""
    return sum((token.logprob for token in tokens), 0.0)


def get_token_count(tokens: Sequence[Token]) -> int:
    return len(tokens)


def get_metadata(tokens: Sequence[Token], key: str) -> List[str]:
    """
    Project one metadata key across a sequence.

    For each token in order, takes the first value bound to ``key``; tokens
    without the key are skipped.

    Args:
        tokens: Token sequence
        key: Metadata key

    Returns:
        List of values, at most one per token
    """
    values = []
    for token in tokens:
        value = token.get(key)
        if value is not None:
            values.append(value)
    return values
