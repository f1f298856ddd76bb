"""
likelihood.py
-------------

Negative log-likelihood scoring with explicit missing values.

``neg_loglik`` turns a series of per-trial likelihoods into per-trial NLLs.
Before taking the log each entry is checked:

1. NaN                -> missing, "nan_likelihood" diagnostic
2. log is infinite    -> missing, "zero_likelihood" diagnostic
3. everything missing -> "all_missing" diagnostic (usually tau near zero)
4. a surviving value <= 0 or > 1 -> LikelihoodRangeError

Missing entries are never zero-filled. Summing a series that contains one
gives a missing total (``None``), and the optimizer treats that evaluation
as failed.

Scoring runs host-side on NumPy arrays so diagnostics can be collected.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass, field

import numpy as np

from choicefit.errors import Diagnostic, LikelihoodRangeError


def poisoned_sum(values: Iterable[float | None]) -> float | None:
    """
    Sum that returns None as soon as any term is missing.

    NaN terms count as missing.

    Examples
    --------
    >>> poisoned_sum([1.0, 2.0])
    3.0
    >>> poisoned_sum([1.0, None]) is None
    True
    """
    total = 0.0
    for v in values:
        if v is None or math.isnan(v):
            return None
        total += v
    return total


@dataclass(frozen=True)
class NLLSeries:
    """
    Per-trial negative log-likelihoods.

    Attributes
    ----------
    values : np.ndarray
        -ln(L) per entry; NaN where ``missing`` is True.
    missing : np.ndarray
        Boolean mask of excluded entries.
    diagnostics : tuple[Diagnostic, ...]
    """

    values: np.ndarray
    missing: np.ndarray
    diagnostics: tuple[Diagnostic, ...] = field(default_factory=tuple)

    @property
    def n_missing(self) -> int:
        return int(self.missing.sum())

    def total(self) -> float | None:
        """Sum of the series, or None if any entry is missing."""
        if self.missing.any():
            return None
        return float(np.sum(self.values))

    def __len__(self) -> int:
        return len(self.values)


def neg_loglik(likelihood) -> NLLSeries:
    """
    Score a likelihood series.

    Parameters
    ----------
    likelihood : array-like
        Per-trial likelihoods, expected in (0, 1].

    Returns
    -------
    NLLSeries

    Raises
    ------
    LikelihoodRangeError
        If a non-missing likelihood is <= 0 or > 1.
    """
    lik = np.array(likelihood, dtype=float, ndmin=1)
    missing = np.zeros(lik.shape, dtype=bool)
    diagnostics: list[Diagnostic] = []

    nan = np.isnan(lik)
    if nan.any():
        diagnostics.append(
            Diagnostic(
                "nan_likelihood",
                "Some likelihoods originally NaN, returning missing",
                tuple(np.flatnonzero(nan).tolist()),
            )
        )
        missing |= nan

    with np.errstate(divide="ignore", invalid="ignore"):
        logs = np.log(lik)
    infinite = np.isinf(logs) & ~missing
    if infinite.any():
        diagnostics.append(
            Diagnostic(
                "zero_likelihood",
                "Some likelihoods are too close to 0, returning missing",
                tuple(np.flatnonzero(infinite).tolist()),
            )
        )
        missing |= infinite

    if missing.all():
        diagnostics.append(
            Diagnostic(
                "all_missing",
                "All likelihoods missing. Likely, the softmax temp is near-zero.",
            )
        )
    else:
        kept = lik[~missing]
        if np.any((kept <= 0) | (kept > 1)):
            bad = np.flatnonzero(~missing & ((lik <= 0) | (lik > 1)))
            raise LikelihoodRangeError(
                "Some likelihoods out of range (0, 1]: entries "
                f"{bad.tolist()} = {lik[bad].tolist()}"
            )

    values = np.where(missing, np.nan, -logs)
    return NLLSeries(values=values, missing=missing, diagnostics=tuple(diagnostics))
