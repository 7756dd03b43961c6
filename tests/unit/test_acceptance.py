"""
Unit tests for the acceptance test.
"""

import pytest

from prefix_guard.decoding import is_valid_next_token
from prefix_guard.types import RemainingPrefix, Token


SATISFIED = RemainingPrefix.satisfied()


class TestSatisfiedPrefix:
    """Once the prefix is satisfied every candidate is accepted."""

    @pytest.mark.parametrize("value", ["def", " ", "", "anything at all"])
    @pytest.mark.parametrize("is_first", [True, False])
    def test_always_accepts(self, value, is_first):
        assert is_valid_next_token(Token(value), SATISFIED, is_first) is True


class TestFirstToken:
    """First token may match exactly, overshoot, or partially consume."""

    def test_exact_match(self):
        assert is_valid_next_token(Token("def"), RemainingPrefix.pending("def"), True)

    def test_overshoot(self):
        """Candidate longer than the prefix and starting with it."""
        assert is_valid_next_token(Token("def"), RemainingPrefix.pending("de"), True)

    def test_partial_consumption(self):
        """Candidate that is itself a prefix of the remaining text."""
        assert is_valid_next_token(Token("de"), RemainingPrefix.pending("define"), True)

    def test_incompatible_rejected(self):
        assert not is_valid_next_token(Token("xyz"), RemainingPrefix.pending("abc"), True)

    def test_diverging_after_shared_start_rejected(self):
        """Sharing a first character is not enough."""
        assert not is_valid_next_token(Token("dx"), RemainingPrefix.pending("def"), True)

    def test_empty_value_accepted(self):
        """An empty value is trivially a prefix of the remaining text."""
        assert is_valid_next_token(Token(""), RemainingPrefix.pending("def"), True)


class TestSubsequentToken:
    """Later tokens must cover the whole remaining prefix in one step."""

    def test_exact_completion(self):
        assert is_valid_next_token(Token("fine"), RemainingPrefix.pending("fine"), False)

    def test_overshoot_completion(self):
        assert is_valid_next_token(Token("fine("), RemainingPrefix.pending("fine"), False)

    def test_partial_consumption_rejected(self):
        """A candidate covering only part of the remainder is rejected."""
        assert not is_valid_next_token(Token("fi"), RemainingPrefix.pending("fine"), False)

    def test_incompatible_rejected(self):
        assert not is_valid_next_token(Token("x"), RemainingPrefix.pending("fine"), False)

    def test_empty_value_rejected(self):
        assert not is_valid_next_token(Token(""), RemainingPrefix.pending("f"), False)
