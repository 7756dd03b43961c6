"""
Acceptance test for candidate tokens.

Decides whether one freshly sampled token is compatible with the remaining
prefix:

    remaining   | position   | accept iff
    ------------+------------+---------------------------------------------
    satisfied   | any        | always
    pending(s)  | first      | value starts with s, or s starts with value
    pending(s)  | subsequent | value starts with s

The first token may consume the prefix partially. Once a token has been
accepted while the prefix is still pending, the next token must cover the
whole remainder on its own.
"""

from prefix_guard.types import RemainingPrefix, Token


def is_valid_next_token(
    candidate: Token,
    remaining: RemainingPrefix,
    is_first: bool
) -> bool:
    """
    Check whether ``candidate`` may be appended to the output.

    Args:
        candidate: Token proposed by the provider
        remaining: Current remaining-prefix value
        is_first: True if no token has been accepted yet in this call

    Returns:
        bool: True if the candidate is accepted

    Example:
        ```python
        pending = RemainingPrefix.pending("def")
        is_valid_next_token(Token("de"), pending, is_first=True)    # True
        is_valid_next_token(Token("de"), pending, is_first=False)   # False
        is_valid_next_token(Token("define"), pending, is_first=False)  # True
        ```
    """
    if remaining.is_satisfied:
        return True

    suffix = remaining.suffix
    text = candidate.value

    # Overshoot or exact match
    if text.startswith(suffix):
        return True

    # Partial consumption is only allowed for the first token
    if is_first and suffix.startswith(text):
        return True

    return False
