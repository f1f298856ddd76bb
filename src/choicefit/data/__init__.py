"""
choicefit.data
==============

Trial data containers consumed by the objective function.

    from choicefit.data import TrialData
"""

from .dataset import Trial, TrialData

__all__ = ["Trial", "TrialData"]
