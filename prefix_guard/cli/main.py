"""
Main CLI entry point using Typer.

This module defines the command-line interface for PrefixGuard using Typer.
It provides three commands: sample, check, and benchmark.
"""

from pathlib import Path
from typing import List, Optional

import typer
from typing_extensions import Annotated

from prefix_guard.utils import setup_logging

from .commands import benchmark_command, check_command, sample_command
from .display import print_error


app = typer.Typer(
    name="prefix-guard",
    help="PrefixGuard - Character-prefix constrained sampling for LLMs",
    add_completion=False,
    rich_markup_mode="rich"
)

PROVIDER_HELP = "Token provider: static, random or transformers"


@app.command("sample")
def sample(
    prefix: Annotated[
        str,
        typer.Option("--prefix", "-p", help="Required leading text of the output")
    ],
    provider: Annotated[
        str,
        typer.Option("--provider", "-P", help=PROVIDER_HELP)
    ] = "random",
    vocab: Annotated[
        Optional[Path],
        typer.Option("--vocab", "-V", help="Vocabulary JSON file for static/random providers", exists=True, file_okay=True, dir_okay=False)
    ] = None,
    model: Annotated[
        Optional[str],
        typer.Option("--model", "-m", help="HuggingFace model ID for the transformers provider")
    ] = None,
    device: Annotated[
        Optional[str],
        typer.Option("--device", "-d", help="Device: cpu, cuda, mps, or None for auto-detect")
    ] = None,
    prompt: Annotated[
        str,
        typer.Option("--prompt", help="Conditioning text for the transformers provider")
    ] = "",
    config: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Sampler config JSON file", exists=True, file_okay=True, dir_okay=False)
    ] = None,
    max_attempts: Annotated[
        Optional[int],
        typer.Option("--max-attempts", help="Retry budget per token (default 1000)")
    ] = None,
    temperature: Annotated[
        Optional[float],
        typer.Option("--temperature", "-t", help="Sampling temperature")
    ] = None,
    top_p: Annotated[
        Optional[float],
        typer.Option("--top-p", help="Nucleus sampling cutoff in (0, 1]")
    ] = None,
    top_k: Annotated[
        Optional[int],
        typer.Option("--top-k", help="Top-k sampling cutoff")
    ] = None,
    max_tokens: Annotated[
        int,
        typer.Option("--max-tokens", help="Maximum tokens to generate")
    ] = 100,
    min_tokens: Annotated[
        int,
        typer.Option("--min-tokens", help="Tokens required before stop rules apply")
    ] = 1,
    stop: Annotated[
        Optional[List[str]],
        typer.Option("--stop", "-s", help="Stop token (can be used multiple times)")
    ] = None,
    seed: Annotated[
        Optional[int],
        typer.Option("--seed", help="Random seed for the provider")
    ] = None,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Path to save the result as JSON")
    ] = None,
    show_tokens: Annotated[
        bool,
        typer.Option("--show-tokens", help="Display a table of generated tokens")
    ] = False,
) -> None:
    """
    Sample a token sequence whose text starts with PREFIX.

    Example:
        prefix-guard sample --prefix "de" --provider random --seed 0 --stop ":"
    """
    try:
        succeeded = sample_command(
            prefix=prefix,
            provider_type=provider,
            vocab_path=vocab,
            model=model,
            device=device,
            prompt=prompt,
            config_path=config,
            max_attempts=max_attempts,
            temperature=temperature,
            top_p=top_p,
            top_k=top_k,
            max_tokens=max_tokens,
            min_tokens=min_tokens,
            stop_tokens=stop,
            seed=seed,
            output_path=output,
            show_tokens=show_tokens
        )
    except Exception as e:
        print_error(f"Command failed: {e}")
        raise typer.Exit(code=1)

    if not succeeded:
        raise typer.Exit(code=1)


@app.command("check")
def check(
    prefix: Annotated[
        str,
        typer.Option("--prefix", "-p", help="Target prefix")
    ],
    token: Annotated[
        Optional[List[str]],
        typer.Option("--token", "-T", help="Already accepted token value (repeatable, in order)")
    ] = None,
    candidate: Annotated[
        Optional[str],
        typer.Option("--candidate", "-C", help="Candidate token to run the acceptance test on")
    ] = None,
) -> None:
    """
    Show the remaining prefix and whether a candidate token would be accepted.

    Example:
        prefix-guard check --prefix "define" --token "de" --candidate "fine"
    """
    try:
        ok = check_command(prefix=prefix, generated=token or [], candidate=candidate)
    except Exception as e:
        print_error(f"Command failed: {e}")
        raise typer.Exit(code=1)

    if not ok:
        raise typer.Exit(code=1)


@app.command("benchmark")
def benchmark(
    prefix: Annotated[
        List[str],
        typer.Option("--prefix", "-p", help="Prefix to sample (can be used multiple times)")
    ],
    provider: Annotated[
        str,
        typer.Option("--provider", "-P", help=PROVIDER_HELP)
    ] = "random",
    vocab: Annotated[
        Optional[Path],
        typer.Option("--vocab", "-V", help="Vocabulary JSON file", exists=True, file_okay=True, dir_okay=False)
    ] = None,
    model: Annotated[
        Optional[str],
        typer.Option("--model", "-m", help="HuggingFace model ID")
    ] = None,
    device: Annotated[
        Optional[str],
        typer.Option("--device", "-d", help="Device: cpu, cuda, mps, or None for auto")
    ] = None,
    prompt: Annotated[
        str,
        typer.Option("--prompt", help="Conditioning text for the transformers provider")
    ] = "",
    config: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Sampler config JSON file", exists=True, file_okay=True, dir_okay=False)
    ] = None,
    max_attempts: Annotated[
        Optional[int],
        typer.Option("--max-attempts", help="Retry budget per token")
    ] = None,
    temperature: Annotated[
        Optional[float],
        typer.Option("--temperature", "-t", help="Sampling temperature")
    ] = None,
    max_tokens: Annotated[
        int,
        typer.Option("--max-tokens", help="Maximum tokens to generate")
    ] = 20,
    min_tokens: Annotated[
        int,
        typer.Option("--min-tokens", help="Tokens required before stop rules apply")
    ] = 1,
    stop: Annotated[
        Optional[List[str]],
        typer.Option("--stop", "-s", help="Stop token (can be used multiple times)")
    ] = None,
    iterations: Annotated[
        int,
        typer.Option("--iterations", "-i", help="Number of iterations per prefix")
    ] = 1,
    seed: Annotated[
        Optional[int],
        typer.Option("--seed", help="Random seed for the provider")
    ] = None,
    show_outputs: Annotated[
        bool,
        typer.Option("--show-outputs", help="Display generated outputs")
    ] = False,
) -> None:
    """
    Run repeated sampling to measure success rate and provider calls.

    Example:
        prefix-guard benchmark -p de -p cla -p "foo(" --iterations 5 --seed 1
    """
    try:
        benchmark_command(
            prefixes=prefix,
            provider_type=provider,
            vocab_path=vocab,
            model=model,
            device=device,
            prompt=prompt,
            config_path=config,
            max_attempts=max_attempts,
            temperature=temperature,
            max_tokens=max_tokens,
            min_tokens=min_tokens,
            stop_tokens=stop,
            iterations=iterations,
            seed=seed,
            show_outputs=show_outputs
        )
    except Exception as e:
        print_error(f"Command failed: {e}")
        raise typer.Exit(code=1)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option("--version", "-v", help="Show version and exit")
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Enable debug logging")
    ] = False,
    log_file: Annotated[
        Optional[Path],
        typer.Option("--log-file", help="Also write logs to this file")
    ] = None,
) -> None:
    """
    PrefixGuard - Character-prefix constrained sampling for LLMs.

    Generates token sequences whose text is guaranteed to start with a given
    character prefix, even when it ends mid-token.
    """
    if version:
        from prefix_guard import __version__
        typer.echo(f"PrefixGuard version {__version__}")
        raise typer.Exit()

    setup_logging(level="DEBUG" if verbose else "WARNING", log_file=log_file)

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def cli() -> None:
    """CLI entry point for the console script."""
    app()


if __name__ == "__main__":
    cli()
