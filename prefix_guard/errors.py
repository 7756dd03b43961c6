"""
Error types raised by prefix-constrained sampling.

Every failure of a generation call is one of the PrefixSamplingError
subclasses below. ``str(error)`` renders a diagnostic message.

Errors:
    - EmptyPrefix: the requested prefix is the empty string
    - MaxAttemptsExceeded: no acceptable candidate within the retry budget
    - InvalidPrefix: accepted text diverged from the prefix
    - TokenizerError: the token provider failed

ProviderError and ConfigError are raised outside the sampling core, by the
bundled providers and the config loader respectively.
"""

from typing import List, Optional


class PrefixSamplingError(Exception):
    """Base class for all generation-call failures."""


class EmptyPrefix(PrefixSamplingError):
    def __init__(self):
        super().__init__("prefix cannot be empty")


class MaxAttemptsExceeded(PrefixSamplingError):
    """
    Raised when a generation step exhausts its retry budget.

    Attributes:
        attempts: The configured budget (never the remaining count)
    """

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(f"failed to find valid token after {attempts} attempts")


class InvalidPrefix(PrefixSamplingError):
    """
    Raised when accepted text neither extends nor is extended by the prefix.

    Attributes:
        generated: Concatenated text accepted so far
        prefix: The target prefix
    """

    def __init__(self, generated: str, prefix: str):
        self.generated = generated
        self.prefix = prefix
        super().__init__(
            f"generated text '{generated}' doesn't match prefix '{prefix}'"
        )


class TokenizerError(PrefixSamplingError):
    """
    Raised when the token provider fails to produce a candidate.

    Attributes:
        message: Provider-rendered description of the failure
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ProviderError(Exception):
    """Failure inside one of the bundled token providers."""


class ConfigError(ValueError):
    """
    Invalid configuration or vocabulary file.

    Attributes:
        errors: Every validation message collected for the file
    """

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        self.errors = errors or []
        super().__init__(message)
