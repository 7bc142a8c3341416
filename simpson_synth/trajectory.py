from __future__ import annotations
from typing import List, Sequence
import numpy as np
import pandas as pd
import statsmodels.api as sm

from .errors import FitError

Array = np.ndarray

def fit_coefficients(data: pd.DataFrame, outcome: str, predictors: Sequence[str]) -> pd.Series:
    """OLS of `outcome` on an intercept plus `predictors`; returns the slope per predictor.

    Raises FitError for a missing column, non-finite values, too few rows, or a rank
    deficient design. statsmodels falls back to a pseudo-inverse on singular designs,
    so rank is checked before fitting.
    """
    predictors = list(predictors)
    missing = [c for c in [outcome, *predictors] if c not in data.columns]
    if missing:
        raise FitError(f"columns not in dataset: {missing}")
    if outcome in predictors:
        raise FitError(f"outcome {outcome!r} listed as a predictor")
    if len(set(predictors)) != len(predictors):
        raise FitError(f"repeated predictor in {predictors}")

    y = data[outcome].to_numpy(dtype=float)
    X = data[predictors].to_numpy(dtype=float).reshape(len(data), len(predictors))
    if not (np.isfinite(y).all() and np.isfinite(X).all()):
        raise FitError("dataset contains non-finite values")

    exog = sm.add_constant(X, has_constant="add")
    n, k = exog.shape
    if n <= k:
        raise FitError(f"under-determined fit: {n} rows for {k} parameters")
    rank = int(np.linalg.matrix_rank(exog))
    if rank < k:
        raise FitError(f"singular design for {predictors}: rank {rank} < {k}")

    res = sm.OLS(y, exog).fit()
    params = np.asarray(res.params, dtype=float)[1:]
    if not np.isfinite(params).all():
        raise FitError(f"non-finite coefficients for {predictors}")
    return pd.Series(params, index=predictors)

def coefficient_trajectory(
    data: pd.DataFrame,
    focal: str,
    outcome: str,
    covariate_sets: Sequence[Sequence[str]],
) -> Array:
    """Coefficient of `focal` in outcome ~ focal + covariates, one entry per covariate set."""
    out: List[float] = []
    for covs in covariate_sets:
        covs = list(covs)
        if focal in covs:
            raise FitError(f"focal variable {focal!r} also listed as a covariate")
        coefs = fit_coefficients(data, outcome, [focal, *covs])
        out.append(float(coefs[focal]))
    return np.array(out, dtype=float)
