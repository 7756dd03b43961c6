"""
Command-line interface module.

This module provides a rich terminal interface for PrefixGuard using Typer and Rich.

Commands:
    - sample: Generate one sequence constrained to start with a prefix
    - check: Inspect the remaining prefix and the acceptance decision for a candidate
    - benchmark: Repeat sampling and report success rate and provider calls

Example Usage:
    ```bash
    # Sample from the built-in vocabulary
    prefix-guard sample --prefix "de" --seed 0 --stop ":"

    # Sample from a HuggingFace model
    prefix-guard sample \\
        --prefix "def fib" \\
        --provider transformers \\
        --model gpt2 \\
        --prompt "# Python\\n" \\
        --temperature 0.8 --top-k 50 \\
        --max-tokens 30

    # Would "fine" be accepted after "de" for prefix "define"?
    prefix-guard check --prefix define --token de --candidate fine

    # Benchmark
    prefix-guard benchmark -p de -p cla --iterations 10 --seed 1
    ```
"""

from .main import app

__all__ = ["app"]
