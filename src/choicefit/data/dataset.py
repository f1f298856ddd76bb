"""
dataset.py
-----------

Core data container for choicefit.

defines:
- Trial: one observed decision with its covariates
- TrialData: ordered trial sequence for one subject/condition

Notes
-----
- Trial order is the time axis for learning models; it is never re-sorted.
- Data is stored in Python lists while it is being assembled.
- Convert to jax.numpy (jnp) arrays only when binding the data to an
  objective (see ``TrialData.to_jax``); the objective treats them as
  read-only for the whole optimization.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

import jax.numpy as jnp
import numpy as np


@dataclass(frozen=True)
class Trial:
    """
    One observation unit.

    Attributes
    ----------
    index : int
        1-based position in the sequence.
    choice : int
        0-based index of the option that was chosen.
    covariates : dict
        Model-specific observables (e.g. ``reward`` or ``win_prob``).
    """

    index: int
    choice: int
    covariates: Mapping[str, float]


class TrialData:
    """
    Container for one subject's ordered choice data.

    Attributes
    ----------
    subject : Any
        Subject identifier carried into fit results for reporting.
    choices : list[int]
        Observed choices, one per trial.
    covariate_names : tuple[str, ...]
        Names of the per-trial covariates, fixed by the first trial added.
    """

    def __init__(self, subject: Any = None) -> None:
        self.subject = subject
        self.choices: list[int] = []
        self._covariates: dict[str, list[float]] = {}

    def add_trial(self, choice: int, **covariates: float) -> None:
        """
        append a single trial.

        Parameters
        ----------
        choice : int
            0-based index of the chosen option.
        **covariates : float
            Trial observables. Every trial must carry the same names.
        """
        if isinstance(choice, bool) or int(choice) != choice:
            raise ValueError(f"choice must be an integer option index, got {choice!r}")
        if len(self) == 0 and not self._covariates:
            self._covariates = {name: [] for name in covariates}
        elif set(covariates) != set(self._covariates):
            raise ValueError(
                f"trial covariates {sorted(covariates)} do not match "
                f"{sorted(self._covariates)}"
            )
        self.choices.append(int(choice))
        for name, value in covariates.items():
            self._covariates[name].append(float(value))

    @property
    def covariate_names(self) -> tuple[str, ...]:
        return tuple(self._covariates)

    def covariate(self, name: str) -> np.ndarray:
        """Return one covariate column as a float array."""
        try:
            return np.asarray(self._covariates[name], dtype=float)
        except KeyError:
            raise KeyError(
                f"covariate {name!r} not present; have {list(self._covariates)}"
            ) from None

    @property
    def indices(self) -> np.ndarray:
        """1-based trial indices."""
        return np.arange(1, len(self) + 1)

    @property
    def trials(self) -> list[Trial]:
        """
        Return the sequence as Trial records.

        Returns
        -------
        list[Trial]
        """
        return [
            Trial(
                index=i + 1,
                choice=c,
                covariates={k: v[i] for k, v in self._covariates.items()},
            )
            for i, c in enumerate(self.choices)
        ]

    def to_jax(self, names: Iterable[str]) -> dict[str, jnp.ndarray]:
        """
        Convert choices and the requested covariates to JAX arrays.

        Parameters
        ----------
        names : iterable of str
            Covariates required by a behavioral model.

        Returns
        -------
        dict
            ``{"choice": int array, <name>: float array, ...}``
        """
        arrays = {"choice": jnp.asarray(self.choices, dtype=jnp.int32)}
        for name in names:
            arrays[name] = jnp.asarray(self.covariate(name))
        return arrays

    def __len__(self) -> int:
        """Return number of trials."""
        return len(self.choices)

    def __repr__(self) -> str:
        return (
            f"TrialData(subject={self.subject!r}, n_trials={len(self)}, "
            f"covariates={list(self._covariates)})"
        )

    @classmethod
    def from_arrays(
        cls,
        choices: Iterable[int] | np.ndarray | jnp.ndarray,
        *,
        subject: Any = None,
        **covariates: Iterable[float] | np.ndarray | jnp.ndarray,
    ) -> TrialData:
        """
        Construct TrialData from column arrays.

        Parameters
        ----------
        choices : array-like, shape (n_trials,)
            Observed choices.
        subject : Any, optional
            Subject identifier.
        **covariates : array-like, shape (n_trials,)
            Covariate columns.

        Examples
        --------
        >>> data = TrialData.from_arrays([0, 1, 1], reward=[1.0, 0.0, 1.0])
        >>> len(data)
        3
        """
        choices = np.asarray(choices)
        columns = {k: np.asarray(v, dtype=float) for k, v in covariates.items()}
        for name, col in columns.items():
            if col.shape != choices.shape:
                raise ValueError(
                    f"covariate {name!r} has shape {col.shape}, "
                    f"expected {choices.shape}"
                )
        data = cls(subject=subject)
        for i, c in enumerate(choices.tolist()):
            data.add_trial(c, **{k: col[i] for k, col in columns.items()})
        return data

    @classmethod
    def from_records(
        cls,
        records: Iterable[Mapping[str, Any]],
        *,
        choice_key: str = "choice",
        subject: Any = None,
    ) -> TrialData:
        """
        Construct TrialData from row mappings (e.g. ``DataFrame.to_dict("records")``).

        Every key other than ``choice_key`` becomes a covariate.
        """
        data = cls(subject=subject)
        for row in records:
            row = dict(row)
            choice = row.pop(choice_key)
            data.add_trial(choice, **row)
        return data
