"""
Constrained decoding module.

This module holds the three pieces of prefix-constrained sampling that sit
below the generation loop.

Components:
    - prefix_tracker: Compute the unmatched tail of the target prefix
    - acceptance: Decide whether a candidate token fits that tail
    - rejection: Draw candidates from a provider until one is accepted

Decoding Flow (one generation step):
    1. get_remaining_prefix(prefix, accepted) → satisfied | pending(suffix)
    2. RejectionSampler.attempt_sample(accepted, remaining)
       a. provider.sample_next_token(accepted)
       b. is_valid_next_token(candidate, remaining, is_first)
       c. retry until accepted or the budget is spent

Example:
    ```python
    from prefix_guard.decoding import RejectionSampler, get_remaining_prefix

    remaining = get_remaining_prefix("def", accepted)
    token = RejectionSampler(provider, max_attempts=100).attempt_sample(accepted, remaining)
    ```
"""

from prefix_guard.decoding.prefix_tracker import get_remaining_prefix
from prefix_guard.decoding.acceptance import is_valid_next_token
from prefix_guard.decoding.rejection import RejectionSampler

__all__ = [
    "get_remaining_prefix",
    "is_valid_next_token",
    "RejectionSampler",
]
