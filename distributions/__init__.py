"""
Distributions package — blend scenarios and sample randomized trials from them.

  1. blender.py — probability-weighted aggregate + ScenarioSpread per parameter
  2. sampler.py — Box–Muller RandomSampler and the per-trial TrialGenerator
"""

from .blender import AggregateParameters, blend_scenarios
from .sampler import RandomSampler, SampledTrials, TrialGenerator, TrialParameters

__all__ = [
    "AggregateParameters",
    "blend_scenarios",
    "RandomSampler",
    "SampledTrials",
    "TrialGenerator",
    "TrialParameters",
]
