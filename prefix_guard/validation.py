"""
Post-generation verification of sampled sequences.

The sampler guarantees its invariants by construction; this module checks
them from the outside on a finished result. The CLI uses it to flag bad
results from custom providers, and benchmarks use it to count violations.

Checks:
    - prefix: the output text starts with the prefix
    - max_tokens: the output is not longer than max_tokens
    - max_tokens_exact: stopping on max_tokens yields exactly max_tokens tokens
    - stop_token: stopping on a stop token ends the output right after the
      first stop token, or at min_tokens if that comes later

Usage:
    ```python
    from prefix_guard.validation import verify_result

    tokens, reason = sampler.sample_sequence_with_reason("def", stop_tokens=[":"])
    result = verify_result(tokens, "def", stop_tokens=[":"], stop_reason=reason)
    if not result.is_valid:
        print(format_verification_errors(result.errors))
    ```
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Sequence

from prefix_guard.results import get_text
from prefix_guard.types import Token

logger = logging.getLogger(__name__)


@dataclass
class VerificationError:
    """
    A single violated check.

    Attributes:
        check: Name of the failed check
        message: Human-readable description
        expected: What was expected
        actual: What was found
    """
    check: str
    message: str
    expected: Any
    actual: Any


@dataclass
class VerificationResult:
    """
    Outcome of verifying one result.

    Attributes:
        is_valid: Whether every check passed
        errors: Failed checks (empty if valid)
        text: Concatenated token text
    """
    is_valid: bool
    errors: List[VerificationError]
    text: str


def verify_result(
    tokens: Sequence[Token],
    prefix: str,
    max_tokens: int = 100,
    min_tokens: int = 1,
    stop_tokens: Optional[Iterable[str]] = None,
    stop_reason: Optional[str] = None
) -> VerificationResult:
    """
    Verify a finished token sequence against its generation parameters.

    Args:
        tokens: Generated tokens
        prefix: Requested prefix
        max_tokens: max_tokens used for the call
        min_tokens: min_tokens used for the call
        stop_tokens: stop_tokens used for the call
        stop_reason: Stop reason reported by the sampler, if known

    Returns:
        VerificationResult with every failed check
    """
    stop_set = frozenset(stop_tokens or ())
    text = get_text(tokens)
    errors = []

    if not text.startswith(prefix):
        errors.append(VerificationError(
            check="prefix",
            message="Output does not start with the prefix",
            expected=prefix,
            actual=text[:len(prefix)]
        ))

    if len(tokens) > max_tokens:
        errors.append(VerificationError(
            check="max_tokens",
            message="Output is longer than max_tokens",
            expected=f"<= {max_tokens}",
            actual=len(tokens)
        ))

    if stop_reason == "max_tokens" and len(tokens) != max_tokens:
        errors.append(VerificationError(
            check="max_tokens_exact",
            message="Stopped on max_tokens with a different length",
            expected=max_tokens,
            actual=len(tokens)
        ))

    if stop_reason == "stop_token":
        stop_positions = [i for i, token in enumerate(tokens) if token.value in stop_set]
        if not stop_positions:
            errors.append(VerificationError(
                check="stop_token",
                message="Stopped on a stop token but none was generated",
                expected=sorted(stop_set),
                actual=None
            ))
        else:
            # Generation ends on the step after the first stop token once
            # min_tokens is met, so the length is fully determined
            expected_length = max(stop_positions[0] + 1, min_tokens)
            if len(tokens) != expected_length:
                errors.append(VerificationError(
                    check="stop_token",
                    message="Generation continued past the stop token",
                    expected=expected_length,
                    actual=len(tokens)
                ))

    if errors:
        logger.warning(f"Verification failed with {len(errors)} error(s)")

    return VerificationResult(is_valid=not errors, errors=errors, text=text)


def format_verification_errors(errors: List[VerificationError]) -> str:
    """
    Format verification errors as a human-readable string.

    Example:
        ```python
        print(format_verification_errors(result.errors))
        # Verification failed with 1 error(s):
        #
        #   1. [prefix] Output does not start with the prefix
        #      Expected: 'def'
        #      Got: 'xyz'
        ```
    """
    if not errors:
        return "No verification errors"

    lines = [f"Verification failed with {len(errors)} error(s):"]

    for i, error in enumerate(errors, 1):
        lines.append(f"\n  {i}. [{error.check}] {error.message}")
        lines.append(f"     Expected: {error.expected!r}")
        lines.append(f"     Got: {error.actual!r}")

    return "\n".join(lines)
