"""
High-level Python API for PrefixGuard.

This module provides the main user-facing API for prefix-constrained sampling.
"""

from prefix_guard.generator import GenerationResult, PrefixConstrainedSampler
from prefix_guard.types import SamplerConfig, Token

# Re-export for convenience
__all__ = ["PrefixConstrainedSampler", "GenerationResult", "SamplerConfig", "Token"]
