"""
Unit tests for token providers and the provider factory.
"""

import sys

import pytest

from prefix_guard import PrefixConstrainedSampler, SamplerConfig, TokenizerError
from prefix_guard.errors import ProviderError
from prefix_guard.providers import (
    DEFAULT_VOCABULARY,
    ProviderFactory,
    RandomVocabularyProvider,
    StaticVocabularyProvider,
    normalize_vocabulary,
)
from prefix_guard.providers.transformers_provider import TransformersProvider
from prefix_guard.types import Token


class TestNormalizeVocabulary:
    """Test vocabulary entry normalization."""

    def test_supported_shapes(self):
        entries = normalize_vocabulary([
            ("def", -1.0),
            ["class", -2],
            "foo",
            Token("bar", -0.5),
        ])

        assert entries == [
            ("def", -1.0),
            ("class", -2.0),
            ("foo", 0.0),
            ("bar", -0.5),
        ]

    @pytest.mark.parametrize("entry", [42, ("a", -1.0, "extra"), None])
    def test_invalid_entry(self, entry):
        with pytest.raises(ValueError, match="Invalid vocabulary entry"):
            normalize_vocabulary([entry])


class TestStaticVocabularyProvider:
    """Test the deterministic provider."""

    def test_always_first_entry(self, code_provider):
        for context in ([], [Token("def")], [Token("def"), Token("(")]):
            assert code_provider.sample_next_token(context).value == "def"

    def test_position_metadata(self, code_provider):
        first = code_provider.sample_next_token([])
        third = code_provider.sample_next_token([Token("a"), Token("b")])

        assert first.get("position") == "0"
        assert first.get("is_first") == "true"
        assert third.get("position") == "2"
        assert third.get("is_first") == "false"

    def test_empty_vocabulary(self):
        provider = StaticVocabularyProvider([])

        with pytest.raises(ProviderError, match="vocabulary is empty"):
            provider.sample_next_token([])

    def test_empty_vocabulary_through_sampler(self):
        """Provider failures reach callers as TokenizerError."""
        sampler = PrefixConstrainedSampler(StaticVocabularyProvider([]))

        with pytest.raises(TokenizerError, match="vocabulary is empty"):
            sampler.sample_sequence("def")

    def test_set_vocabulary(self, code_provider):
        code_provider.set_vocabulary([("class", -0.1)])

        assert code_provider.sample_next_token([]).value == "class"
        assert code_provider.get_provider_info() == {"provider": "static", "vocab_size": 1}


class TestRandomVocabularyProvider:
    """Test the sampling provider."""

    def draw(self, provider, n=20):
        return [provider.sample_next_token([]).value for _ in range(n)]

    def test_seed_is_reproducible(self):
        first = RandomVocabularyProvider(DEFAULT_VOCABULARY, seed=7)
        second = RandomVocabularyProvider(DEFAULT_VOCABULARY, seed=7)

        assert self.draw(first) == self.draw(second)

    def test_reseed(self):
        provider = RandomVocabularyProvider(DEFAULT_VOCABULARY, seed=3)
        before = self.draw(provider)

        provider.reseed(3)

        assert self.draw(provider) == before

    def test_draws_from_vocabulary(self):
        provider = RandomVocabularyProvider(DEFAULT_VOCABULARY, seed=1)
        values = {value for value, _ in DEFAULT_VOCABULARY}

        assert set(self.draw(provider, 50)) <= values

    def test_top_k_one_is_greedy(self):
        provider = RandomVocabularyProvider(
            [("low", -5.0), ("high", -0.1), ("mid", -1.0)], seed=0, top_k=1
        )

        assert set(self.draw(provider)) == {"high"}

    def test_top_p_cuts_tail(self):
        provider = RandomVocabularyProvider(
            [("rare", -20.0), ("common", 0.0)], seed=0, top_p=0.5
        )

        assert set(self.draw(provider)) == {"common"}

    def test_configure_from_sampler_config(self):
        provider = RandomVocabularyProvider(
            [("low", -5.0), ("high", -0.1)], seed=0
        )

        PrefixConstrainedSampler(provider, SamplerConfig.create(temperature=0.5, top_k=1))

        assert provider.temperature == 0.5
        assert provider.top_k == 1
        assert provider.top_p is None
        assert set(self.draw(provider)) == {"high"}

    def test_non_positive_temperature(self):
        provider = RandomVocabularyProvider(DEFAULT_VOCABULARY, temperature=0.0)

        with pytest.raises(ProviderError, match="temperature must be positive"):
            provider.sample_next_token([])

    def test_empty_vocabulary(self):
        with pytest.raises(ProviderError):
            RandomVocabularyProvider([]).sample_next_token([])

    def test_prefix_sampling(self):
        """Random provider drives the sampler to a prefix-satisfying output."""
        provider = RandomVocabularyProvider(DEFAULT_VOCABULARY, seed=11)
        sampler = PrefixConstrainedSampler(provider)

        tokens = sampler.sample_sequence("de", max_tokens=10)

        assert sampler.get_text(tokens).startswith("de")
        assert 1 <= len(tokens) <= 10


class TestProviderFactory:
    """Test ProviderFactory."""

    def test_create_static(self):
        provider = ProviderFactory.create("static", vocabulary=[("def", -1.0)])

        assert isinstance(provider, StaticVocabularyProvider)

    def test_create_random_with_options(self):
        provider = ProviderFactory.create("random", vocabulary=DEFAULT_VOCABULARY, seed=5)

        assert isinstance(provider, RandomVocabularyProvider)
        assert provider.seed == 5

    def test_unsupported_type(self):
        with pytest.raises(ValueError, match="Unsupported provider type: llama"):
            ProviderFactory.create("llama")

    def test_transformers_requires_model_id(self):
        with pytest.raises(ValueError, match="model_id is required"):
            ProviderFactory.create("transformers")

    def test_list_available(self):
        available = ProviderFactory.list_available_providers()

        assert available[:2] == ["static", "random"]

    def test_repr(self):
        provider = ProviderFactory.create("static", vocabulary=DEFAULT_VOCABULARY)

        assert repr(provider) == "StaticVocabularyProvider(vocab_size=10)"


class TestTransformersProviderSetup:
    """Construction checks that run without loading a model."""

    def test_missing_dependencies(self, monkeypatch):
        """A missing torch install yields an actionable ImportError."""
        monkeypatch.setitem(sys.modules, "torch", None)

        with pytest.raises(ImportError, match=r"pip install 'prefix-guard\[transformers\]'"):
            TransformersProvider("gpt2")

    def test_missing_dependencies_through_factory(self, monkeypatch):
        monkeypatch.setitem(sys.modules, "transformers", None)

        with pytest.raises(ImportError, match="transformers and torch are required"):
            ProviderFactory.create("transformers", model_id="gpt2")

    def test_unknown_device(self):
        with pytest.raises(ValueError, match="Unknown device: tpu"):
            TransformersProvider._resolve_device("tpu")

    def test_cpu_needs_no_detection(self):
        assert TransformersProvider._resolve_device("cpu") == "cpu"

    def test_auto_detected_device(self):
        pytest.importorskip("torch")

        assert TransformersProvider._resolve_device(None) in ("mps", "cuda", "cpu")

    def test_unavailable_gpu_falls_back_to_cpu(self, monkeypatch):
        torch = pytest.importorskip("torch")
        monkeypatch.setattr(torch.cuda, "is_available", lambda: False)

        assert TransformersProvider._resolve_device("cuda") == "cpu"
