"""
CLI command implementations.

This module contains the business logic for each CLI command:
- sample: Generate one prefix-constrained sequence
- check: Inspect the prefix tracker and acceptance test on given strings
- benchmark: Repeat sampling and report success rates
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich.markup import escape

from prefix_guard.config import load_config_file, load_vocabulary_file
from prefix_guard.decoding import get_remaining_prefix, is_valid_next_token
from prefix_guard.errors import PrefixSamplingError
from prefix_guard.generator import PrefixConstrainedSampler
from prefix_guard.providers import DEFAULT_VOCABULARY, ProviderFactory, TokenProvider
from prefix_guard.types import SamplerConfig, Token
from prefix_guard.validation import format_verification_errors, verify_result

from .display import (
    console,
    create_progress_spinner,
    print_benchmark_results,
    print_check_result,
    print_error,
    print_generated_text,
    print_header,
    print_info,
    print_json,
    print_result_stats,
    print_separator,
    print_success,
    print_tokens,
    print_warning,
)


def build_config(
    config_path: Optional[Path] = None,
    max_attempts: Optional[int] = None,
    temperature: Optional[float] = None,
    top_p: Optional[float] = None,
    top_k: Optional[int] = None
) -> SamplerConfig:
    """
    Build a SamplerConfig from an optional file plus CLI overrides.

    Args:
        config_path: Optional JSON config file
        max_attempts, temperature, top_p, top_k: Overrides (None keeps file/default)

    Returns:
        SamplerConfig

    Raises:
        ConfigError: If the config file is invalid
    """
    overrides = {
        "max_attempts": max_attempts,
        "temperature": temperature,
        "top_p": top_p,
        "top_k": top_k,
    }

    if config_path is not None:
        return load_config_file(config_path, **overrides)

    return SamplerConfig.create(**overrides)


def build_provider(
    provider_type: str,
    vocab_path: Optional[Path] = None,
    model: Optional[str] = None,
    device: Optional[str] = None,
    prompt: str = "",
    seed: Optional[int] = None
) -> TokenProvider:
    """
    Create the token provider selected on the command line.

    Vocabulary providers use ``vocab_path`` or the built-in default
    vocabulary; the transformers provider requires ``model``.
    """
    if provider_type == "transformers":
        return ProviderFactory.create(
            "transformers",
            model_id=model,
            device=device,
            prompt=prompt,
            seed=seed
        )

    vocabulary = load_vocabulary_file(vocab_path) if vocab_path else DEFAULT_VOCABULARY

    if provider_type == "random":
        return ProviderFactory.create("random", vocabulary=vocabulary, seed=seed)

    return ProviderFactory.create(provider_type, vocabulary=vocabulary)


def tokens_to_json(tokens: List[Token]) -> List[Dict[str, Any]]:
    """Serialize tokens for the --output file."""
    return [
        {
            "value": token.value,
            "logprob": token.logprob,
            "metadata": [list(pair) for pair in token.metadata],
        }
        for token in tokens
    ]


def sample_command(
    prefix: str,
    provider_type: str,
    vocab_path: Optional[Path],
    model: Optional[str],
    device: Optional[str],
    prompt: str,
    config_path: Optional[Path],
    max_attempts: Optional[int],
    temperature: Optional[float],
    top_p: Optional[float],
    top_k: Optional[int],
    max_tokens: int,
    min_tokens: int,
    stop_tokens: Optional[List[str]],
    seed: Optional[int],
    output_path: Optional[Path],
    show_tokens: bool
) -> bool:
    """
    Execute the sample command.

    Returns:
        bool: True if generation succeeded
    """
    print_header("PrefixGuard - Constrained Sampling")

    config = build_config(config_path, max_attempts, temperature, top_p, top_k)

    print_separator()
    print_info(f"Prefix: [bold]{escape(repr(prefix))}[/bold]")
    print_info(f"Provider: [bold]{escape(provider_type)}[/bold]")
    if model:
        print_info(f"Model: [bold]{escape(model)}[/bold]")
    print_info(f"Max Attempts: [bold]{config.max_attempts}[/bold]")
    print_info(f"Max Tokens: [bold]{max_tokens}[/bold]  Min Tokens: [bold]{min_tokens}[/bold]")
    if stop_tokens:
        print_info(f"Stop Tokens: [bold]{escape(', '.join(repr(s) for s in stop_tokens))}[/bold]")
    print_separator()

    with create_progress_spinner() as progress:
        progress.add_task(description="Loading provider...", total=None)
        provider = build_provider(provider_type, vocab_path, model, device, prompt, seed)

    print_success(f"Provider ready: {provider!r}")

    sampler = PrefixConstrainedSampler(provider, config)

    console.print()
    with create_progress_spinner() as progress:
        progress.add_task(description="Sampling...", total=None)
        result = sampler.generate(
            prefix,
            max_tokens=max_tokens,
            stop_tokens=stop_tokens,
            min_tokens=min_tokens
        )

    console.print()
    print_separator()

    if result.is_success:
        print_success("Generation successful!")
        print_generated_text(result.text, prefix)
        if show_tokens:
            print_tokens(result.tokens)

        verification = verify_result(
            result.tokens,
            prefix,
            max_tokens=max_tokens,
            min_tokens=min_tokens,
            stop_tokens=stop_tokens,
            stop_reason=result.stop_reason
        )
        if not verification.is_valid:
            print_warning(format_verification_errors(verification.errors))
    else:
        print_error(f"Generation failed: {result.error}")

    print_result_stats(
        is_success=result.is_success,
        token_count=result.token_count,
        logprob=result.logprob,
        provider_calls=result.provider_calls,
        latency_ms=result.latency_ms,
        stop_reason=result.stop_reason
    )

    if output_path and result.is_success:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "prefix": prefix,
            "text": result.text,
            "logprob": result.logprob,
            "stop_reason": result.stop_reason,
            "tokens": tokens_to_json(list(result.tokens)),
        }
        with open(output_path, "w") as f:
            json.dump(payload, f, indent=2)
        print_success(f"Output saved to: {output_path}")

    return result.is_success


def check_command(prefix: str, generated: List[str], candidate: Optional[str]) -> bool:
    """
    Execute the check command.

    Runs the prefix tracker on the given accepted token values and, if a
    candidate is supplied, the acceptance test on it.

    Returns:
        bool: True if the state is consistent and the candidate (if any) is accepted
    """
    print_header("PrefixGuard - Prefix Check")

    tokens = [Token(value) for value in generated]

    try:
        remaining = get_remaining_prefix(prefix, tokens)
    except PrefixSamplingError as e:
        print_error(str(e))
        return False

    accepted = None
    if candidate is not None:
        accepted = is_valid_next_token(Token(candidate), remaining, is_first=len(tokens) == 0)

    print_check_result(
        prefix=prefix,
        generated="".join(generated),
        remaining=remaining.suffix,
        candidate=candidate,
        accepted=accepted
    )

    return accepted is not False


def benchmark_command(
    prefixes: List[str],
    provider_type: str,
    vocab_path: Optional[Path],
    model: Optional[str],
    device: Optional[str],
    prompt: str,
    config_path: Optional[Path],
    max_attempts: Optional[int],
    temperature: Optional[float],
    max_tokens: int,
    min_tokens: int,
    stop_tokens: Optional[List[str]],
    iterations: int,
    seed: Optional[int],
    show_outputs: bool
) -> List[Dict[str, Any]]:
    """
    Execute the benchmark command.

    Returns:
        List of per-run result rows
    """
    print_header("PrefixGuard - Benchmark")

    config = build_config(config_path, max_attempts, temperature)

    print_separator()
    print_info(f"Provider: [bold]{escape(provider_type)}[/bold]")
    print_info(f"Prefixes: [bold]{len(prefixes)}[/bold]")
    print_info(f"Iterations: [bold]{iterations}[/bold]")
    print_info(f"Total runs: [bold]{len(prefixes) * iterations}[/bold]")
    print_separator()

    with create_progress_spinner() as progress:
        progress.add_task(description="Loading provider...", total=None)
        provider = build_provider(provider_type, vocab_path, model, device, prompt, seed)

    sampler = PrefixConstrainedSampler(provider, config)

    results: List[Dict[str, Any]] = []

    for iteration in range(iterations):
        console.print(f"\n[bold cyan]Iteration {iteration + 1}/{iterations}[/bold cyan]\n")

        for prefix in prefixes:
            result = sampler.generate(
                prefix,
                max_tokens=max_tokens,
                stop_tokens=stop_tokens,
                min_tokens=min_tokens
            )

            results.append({
                "prefix": prefix,
                "is_success": result.is_success,
                "error_type": type(result.error).__name__ if result.error else None,
                "token_count": result.token_count,
                "provider_calls": result.provider_calls,
                "latency_ms": result.latency_ms,
                "text": result.text,
            })

            status = "[green]✓[/green]" if result.is_success else "[red]✗[/red]"
            console.print(
                f"  {status} {escape(repr(prefix))}: {result.token_count} tokens, "
                f"{result.provider_calls} calls, {result.latency_ms:.1f}ms"
            )

            if show_outputs and result.is_success:
                print_json({"prefix": prefix, "text": result.text})

    print_separator()
    print_benchmark_results(results)

    return results
