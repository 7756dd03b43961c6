"""
Shared fixtures for PrefixGuard tests.
"""

from typing import Callable, List, Optional, Sequence

import pytest

from prefix_guard.providers import StaticVocabularyProvider, TokenProvider
from prefix_guard.types import SamplerConfig, Token

# Same vocabulary as the built-in default, matching tokens first
CODE_VOCABULARY = [
    ("def", -1.0),
    ("defun", -1.0),
    ("define", -1.0),
    ("class", -1.0),
    ("foo", -1.0),
    ("bar", -1.0),
    ("(", -1.0),
    (")", -1.0),
    (":", -1.0),
    (" ", -1.0),
]


class ScriptedProvider(TokenProvider):
    """
    Provider returning a fixed script of token values in order.

    When the script runs out, ``fallback`` (if given) is returned forever.
    Every call and the context it received are recorded.
    """

    def __init__(self, values: Sequence[str], fallback: Optional[str] = None, logprob: float = -1.0):
        self.values = list(values)
        self.fallback = fallback
        self.logprob = logprob
        self.calls = 0
        self.contexts: List[List[str]] = []
        self.configured: Optional[SamplerConfig] = None

    def sample_next_token(self, context: Sequence[Token]) -> Token:
        self.contexts.append([t.value for t in context])
        index = self.calls
        self.calls += 1

        if index < len(self.values):
            value = self.values[index]
        elif self.fallback is not None:
            value = self.fallback
        else:
            raise RuntimeError("script exhausted")

        return Token(value, self.logprob, (("call", str(index)),))

    def configure(self, config: SamplerConfig) -> None:
        self.configured = config


class ContextProvider(TokenProvider):
    """Deterministic provider whose answer depends only on the context."""

    def __init__(self, choose: Callable[[Sequence[Token]], str]):
        self.choose = choose

    def sample_next_token(self, context: Sequence[Token]) -> Token:
        value = self.choose(context)
        return Token(value, -0.5, (("position", str(len(context))),))


class ProviderFailure(Exception):
    def __init__(self, code: int):
        self.code = code
        super().__init__(f"failure {code}")


class FailingProvider(TokenProvider):
    """Provider that raises on every call after ``succeed_first`` tokens."""

    def __init__(self, succeed_first: int = 0, value: str = "def"):
        self.succeed_first = succeed_first
        self.value = value
        self.calls = 0

    def sample_next_token(self, context: Sequence[Token]) -> Token:
        self.calls += 1
        if self.calls > self.succeed_first:
            raise ProviderFailure(503)
        return Token(self.value, -1.0)

    def get_error_message(self, error: BaseException) -> str:
        return f"model backend unavailable ({error.code})"


@pytest.fixture
def code_provider():
    """Static provider over the code vocabulary (always proposes 'def')."""
    return StaticVocabularyProvider(CODE_VOCABULARY)


@pytest.fixture
def config():
    return SamplerConfig.create(max_attempts=1000, temperature=0.8, top_p=0.9, top_k=50)


@pytest.fixture
def scripted_provider():
    """Factory for ScriptedProvider instances."""
    return ScriptedProvider


@pytest.fixture
def context_provider():
    """Factory for ContextProvider instances."""
    return ContextProvider


@pytest.fixture
def failing_provider():
    """Factory for FailingProvider instances."""
    return FailingProvider
