# pylint: disable=too-many-locals

import json
from pathlib import Path
from typing import List, Optional, Tuple, Union

import numpy as np
from numba import jit


def acf_1d(x: np.ndarray, max_lag: int = 100):
    """
    Compute autocorrelation function for a 1D time series.

    Uses FFT to compute the autocorrelation function efficiently. A constant
    series has autocorrelation 1 at lag 0 and 0 elsewhere.

    Args:
        x: Input time series.
        max_lag: Maximum lag to compute autocorrelation for.

    Returns:
        Autocorrelation values from lag 0 to min(max_lag, len(x) - 1).
    """
    n = len(x)
    max_lag = min(max_lag, n - 1)
    x = x - x.mean()
    n_fft = 2 ** int(np.ceil(np.log2(2 * n - 1)))
    x_padded = np.zeros(n_fft)
    x_padded[:n] = x

    X = np.fft.fft(x_padded)
    ac = np.fft.ifft(X * np.conj(X)).real[: max_lag + 1]

    if ac[0] <= 0:
        ac = np.zeros(max_lag + 1)
        ac[0] = 1.0
        return ac
    return ac / ac[0]


def ess_multichain(chains: List[np.ndarray], max_lag: int = 100):
    """
    Compute effective sample size for multiple chains.

    Uses the autocorrelation function to estimate the effective
    sample size accounting for serial correlation across multiple chains.

    Args:
        chains: List of MCMC chains for the same parameter.
        max_lag: Maximum lag to use in autocorrelation computation.

    Returns:
        Effective sample size.
    """
    m = len(chains)
    n = min(len(c) for c in chains)
    chains_array = np.array([c[:n] for c in chains])

    acf_chains = np.array([acf_1d(c, max_lag) for c in chains_array])
    mean_acf = acf_chains.mean(axis=0)

    rho_sum = 0.0
    for k in range(1, len(mean_acf) - 1, 2):
        pair = mean_acf[k] + mean_acf[k + 1]
        if pair < 0:
            break
        rho_sum += pair

    ess = m * n / (1 + 2 * rho_sum)
    ess = min(ess, m * n)
    return ess


@jit(nopython=True)
def rhat_scalar_numba(chains_array: np.ndarray):
    """
    Compute R-hat convergence diagnostic using Numba optimization.

    Args:
        chains_array: 2D array where each row is a chain.

    Returns:
        R-hat value.
    """
    m, n = chains_array.shape
    chain_means = np.zeros(m)
    for i in range(m):
        chain_means[i] = np.mean(chains_array[i])

    W = 0.0
    for i in range(m):
        chain_var = 0.0
        for j in range(n):
            chain_var += (chains_array[i, j] - chain_means[i]) ** 2
        W += chain_var / (n - 1)
    W /= m

    overall_mean = np.mean(chain_means)
    B = 0.0
    for i in range(m):
        B += (chain_means[i] - overall_mean) ** 2
    B = n * B / (m - 1)

    var_hat = (n - 1) / n * W + B / n
    return np.sqrt(var_hat / W)


def rhat_scalar(chains: List[np.ndarray]):
    """
    Compute R-hat convergence diagnostic for multiple chains.

    Values close to 1 indicate good convergence. Fewer than two chains, fewer
    than two samples or zero within-chain variance give NaN.

    Args:
        chains: List of chains for the same parameter.

    Returns:
        R-hat value.
    """
    n = min(len(c) for c in chains)
    if len(chains) < 2 or n < 2:
        return float("nan")
    chains_array = np.array([c[:n] for c in chains], dtype=np.float64)
    if np.all(chains_array.var(axis=1) == 0):
        return float("nan")

    return float(rhat_scalar_numba(chains_array))


def compute_credible_intervals(pooled: np.ndarray, alpha: float = 0.05):
    """
    Compute equal-tailed credible intervals from posterior samples.

    Args:
        pooled: Pooled posterior samples.
        alpha: Significance level (default 0.05 for 95% CI).

    Returns:
        Tuple of (lower, upper) bounds of the credible interval.
    """
    lower_percentile = 100 * alpha / 2
    upper_percentile = 100 * (1 - alpha / 2)

    percentiles = np.percentile(pooled, [lower_percentile, upper_percentile], axis=0)

    return percentiles[0], percentiles[1]


def create_metrics(
    chains: List[np.ndarray],
    param_name: str = "prior",
    metrics_file: Optional[Union[str, Path]] = None,
    runtimes: Optional[List[float]] = None,
) -> Tuple[np.ndarray, List[float], List[float], np.ndarray, np.ndarray]:
    """
    Create convergence and posterior metrics from MCMC chains.

    Computes posterior mean, R-hat, effective sample size and credible
    intervals for every column of the chains. When ``metrics_file`` is given
    the metrics are merged into that JSON file.

    Args:
        chains: List of MCMC chains, each of shape (n_samples, K).
        param_name: Name of the parameter, used as the key prefix.
        metrics_file: Optional JSON file to update.
        runtimes: List of runtime values for each chain (optional).

    Returns:
        Tuple containing:
        - param_mean: Posterior mean for each column
        - rhat: R-hat convergence diagnostic for each column
        - ess: Effective sample size for each column
        - ci_lower: Lower bounds of 95% credible intervals
        - ci_upper: Upper bounds of 95% credible intervals
    """
    K = chains[0].shape[1]
    pooled = np.vstack(chains)
    param_mean = pooled.mean(axis=0)

    ci_lower, ci_upper = compute_credible_intervals(pooled)

    rhat = [rhat_scalar([c[:, k] for c in chains]) for k in range(K)]
    ess = [ess_multichain([c[:, k] for c in chains]) for k in range(K)]

    if metrics_file is not None:
        metrics_file = Path(metrics_file)
        try:
            with open(metrics_file, encoding="utf-8") as f:
                metrics_dict = json.load(f)
        except FileNotFoundError:
            metrics_dict = {}

        metrics_dict[f"{param_name}_mean"] = param_mean.tolist()
        metrics_dict[f"{param_name}_rhat"] = rhat
        metrics_dict[f"{param_name}_ess"] = ess
        metrics_dict[f"{param_name}_ci_lower"] = ci_lower.tolist()
        metrics_dict[f"{param_name}_ci_upper"] = ci_upper.tolist()

        if runtimes is not None:
            metrics_dict["runtimes"] = runtimes
            metrics_dict["mean_runtime"] = float(np.mean(runtimes))
            metrics_dict["std_runtime"] = float(np.std(runtimes))

        metrics_file.parent.mkdir(parents=True, exist_ok=True)
        with open(metrics_file, "w", encoding="utf-8") as f:
            json.dump(metrics_dict, f, indent=2)

    return param_mean, rhat, ess, ci_lower, ci_upper
