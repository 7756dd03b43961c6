#!/usr/bin/env python3
"""
Demo: Code completion from a partially typed identifier.

The user has typed "de" and the cursor sits mid-token. The sampler must
produce output whose text starts with "de" even though no vocabulary entry
is exactly "de":
- "def", "defun" and "define" overshoot the prefix and are accepted
- everything else is rejected until one of them is drawn
- generation then runs freely until ":" is produced

Pass a HuggingFace model id as the first argument to sample from a real
model instead of the toy vocabulary, e.g.:

    python examples/demo_code_completion.py gpt2
"""

import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from prefix_guard import PrefixConstrainedSampler, SamplerConfig, PrefixSamplingError
from prefix_guard.providers import DEFAULT_VOCABULARY, ProviderFactory


def main():
    print("=" * 60)
    print("PrefixGuard Demo: Completing a Partial Identifier")
    print("=" * 60)

    if len(sys.argv) > 1:
        model_id = sys.argv[1]
        print(f"\nLoading model {model_id}...")
        provider = ProviderFactory.create(
            "transformers",
            model_id=model_id,
            prompt="# Python\n",
            seed=0
        )
    else:
        print("\nVocabulary:")
        for value, logprob in DEFAULT_VOCABULARY:
            print(f"  {value!r:10} {logprob:.2f}")
        provider = ProviderFactory.create("random", vocabulary=DEFAULT_VOCABULARY, seed=0)

    print(f"✓ Provider ready: {provider!r}")

    sampler = PrefixConstrainedSampler(
        provider,
        SamplerConfig.create(max_attempts=1000, temperature=0.8, top_k=50)
    )

    prefixes = ["de", "cla", "foo("]

    for i, prefix in enumerate(prefixes, 1):
        print("\n" + "=" * 60)
        print(f"Test {i}/{len(prefixes)}")
        print("=" * 60)
        print(f"Prefix: {prefix!r}")

        result = sampler.generate(prefix, max_tokens=12, stop_tokens=[":"])

        print(f"Success: {'✓' if result.is_success else '✗'} {result.is_success}")
        print(f"Provider calls: {result.provider_calls}")
        print(f"Latency: {result.latency_ms:.1f}ms")

        if not result.is_success:
            print(f"Error: {result.error}")
            continue

        print(f"Stop reason: {result.stop_reason}")
        print(f"Tokens: {[t.value for t in result.tokens]}")
        print(f"Text: {result.text!r}")
        print(f"Logprob: {result.logprob:.3f}")

    # The raising API reports the same failures as exceptions
    print("\n" + "=" * 60)
    print("Raising API")
    print("=" * 60)
    try:
        sampler.sample_sequence("")
    except PrefixSamplingError as e:
        print(f"{type(e).__name__}: {e}")


if __name__ == "__main__":
    main()
