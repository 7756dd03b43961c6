"""
Unit tests for the rejection sampler.
"""

import pytest

from prefix_guard.decoding import RejectionSampler
from prefix_guard.errors import MaxAttemptsExceeded, TokenizerError
from prefix_guard.types import RemainingPrefix, Token


class TestRejectionSampler:
    """Test bounded-retry rejection sampling."""

    def test_returns_first_accepted_candidate(self, scripted_provider):
        """Rejected candidates are skipped until one fits."""
        provider = scripted_provider(["xyz", "abc", "de", "def"])
        sampler = RejectionSampler(provider, max_attempts=10)

        token = sampler.attempt_sample([], RemainingPrefix.pending("def"))

        assert token.value == "de"
        assert provider.calls == 3
        assert sampler.last_attempts_used == 3

    def test_satisfied_accepts_first_candidate(self, scripted_provider):
        provider = scripted_provider(["anything"])
        sampler = RejectionSampler(provider, max_attempts=10)

        token = sampler.attempt_sample([Token("def")], RemainingPrefix.satisfied())

        assert token.value == "anything"
        assert provider.calls == 1

    def test_exhaustion_reports_configured_budget(self, scripted_provider):
        """MaxAttemptsExceeded carries the configured budget, not zero."""
        provider = scripted_provider([], fallback="xyz")
        sampler = RejectionSampler(provider, max_attempts=5)

        with pytest.raises(MaxAttemptsExceeded) as exc_info:
            sampler.attempt_sample([], RemainingPrefix.pending("abc"))

        assert exc_info.value.attempts == 5
        assert str(exc_info.value) == "failed to find valid token after 5 attempts"
        assert provider.calls == 5

    def test_budget_resets_per_call(self, scripted_provider):
        """Each call gets the full budget."""
        provider = scripted_provider(["x", "def", "x", "def"])
        sampler = RejectionSampler(provider, max_attempts=2)

        assert sampler.attempt_sample([], RemainingPrefix.pending("def")).value == "def"
        assert sampler.attempt_sample([], RemainingPrefix.pending("def")).value == "def"
        assert provider.calls == 4

    def test_retries_use_same_context(self, scripted_provider):
        """Retries are memoryless: the provider sees identical context."""
        provider = scripted_provider(["x", "y", "fine"])
        sampler = RejectionSampler(provider, max_attempts=10)

        sampler.attempt_sample([Token("de")], RemainingPrefix.pending("fine"))

        assert provider.contexts == [["de"], ["de"], ["de"]]

    def test_subsequent_partial_candidate_rejected(self, scripted_provider):
        """With context present, partial consumption is not accepted."""
        provider = scripted_provider([], fallback="fi")
        sampler = RejectionSampler(provider, max_attempts=3)

        with pytest.raises(MaxAttemptsExceeded):
            sampler.attempt_sample([Token("de")], RemainingPrefix.pending("fine"))

    def test_provider_failure_not_retried(self, failing_provider):
        """Provider exceptions become TokenizerError immediately."""
        provider = failing_provider()
        sampler = RejectionSampler(provider, max_attempts=100)

        with pytest.raises(TokenizerError) as exc_info:
            sampler.attempt_sample([], RemainingPrefix.pending("def"))

        assert exc_info.value.message == "model backend unavailable (503)"
        assert str(exc_info.value) == "model backend unavailable (503)"
        assert exc_info.value.__cause__ is not None
        assert provider.calls == 1

    def test_default_error_message(self, scripted_provider):
        """Without a custom renderer the exception text is used."""
        provider = scripted_provider([])
        sampler = RejectionSampler(provider, max_attempts=3)

        with pytest.raises(TokenizerError, match="script exhausted"):
            sampler.attempt_sample([], RemainingPrefix.pending("def"))

    def test_invalid_budget(self, scripted_provider):
        with pytest.raises(ValueError):
            RejectionSampler(scripted_provider([]), max_attempts=0)
