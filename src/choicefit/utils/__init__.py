"""
choicefit.utils
===============

Helpers shared across subpackages.

    from choicefit.utils import make_key, subject_key, uniform_starts
"""

from .rng import make_key, subject_key, uniform_starts

__all__ = ["make_key", "subject_key", "uniform_starts"]
