# pylint: disable=too-many-locals

from pathlib import Path
from typing import List, Optional, Union

import numpy as np
import plotly.graph_objects as go
import plotly.subplots as sp

from classifier_consensus.metrics import acf_1d


def setup_plot_colors_and_positions(K: int, n_chains: int):
    """Set up colors and subplot positions for diagnostic plots.

    Args:
        K: Number of plotted columns (domains).
        n_chains: Number of chains.

    Returns:
        Tuple of (param_colors, positions) where param_colors maps
        column indices to colors and positions contains subplot
        coordinates for each chain.
    """
    colors = [
        "blue",
        "red",
        "green",
        "orange",
        "purple",
        "brown",
        "pink",
        "gray",
        "olive",
        "cyan",
    ]
    param_colors = {k: colors[k % len(colors)] for k in range(K)}

    cols = min(2, n_chains)
    positions = []
    for i in range(n_chains):
        row = (i // cols) + 1
        col = (i % cols) + 1
        positions.append((row, col))

    return param_colors, positions


def get_param_label(param_name: str, k: Optional[int] = None) -> str:
    """Get parameter label for plots."""
    if param_name == "prior":
        return f"\\pi_{{{k}}}" if k is not None else "\\pi"
    if param_name == "clusters":
        return f"K_{{{k}}}" if k is not None else "K"

    return f"{param_name}_{{{k}}}" if k is not None else param_name


def _chain_subplots(n_chains: int, positions):
    n_rows = max(positions, key=lambda x: x[0])[0]
    n_cols = max(positions, key=lambda x: x[1])[1]
    return sp.make_subplots(
        rows=n_rows,
        cols=n_cols,
        subplot_titles=[f"Chain {c + 1}" for c in range(n_chains)],
    )


def _finish_layout(fig: go.Figure, title: str, param_name: str, **layout):
    fig.update_layout(
        height=600,
        width=1000,
        title_text=f"$\\text{{{title} - Parameter }}{get_param_label(param_name)}$",
        plot_bgcolor="white",
        paper_bgcolor="white",
        **layout,
    )
    fig.update_xaxes(gridcolor="lightgray")
    fig.update_yaxes(gridcolor="lightgray")
    return fig


def create_trace_plots(chains: List[np.ndarray], param_name: str = "prior") -> go.Figure:
    """Create trace plots for all chains and domains.

    Each domain is displayed with a different color and each chain gets its
    own subplot.

    Args:
        chains: List of sample arrays of shape (n_samples, n_domains), one per chain.
        param_name: Name of the traced quantity ("prior" or "clusters").

    Returns:
        The plotly figure.
    """
    n_chains = len(chains)
    K = chains[0].shape[1]
    param_colors, positions = setup_plot_colors_and_positions(K, n_chains)
    fig = _chain_subplots(n_chains, positions)

    for c, (row, col) in enumerate(positions):
        for k in range(K):
            fig.add_trace(
                go.Scatter(
                    y=chains[c][:, k],
                    mode="lines",
                    line={"width": 0.8, "color": param_colors[k]},
                    name=f"${get_param_label(param_name, k)}$",
                    showlegend=(c == 0),
                ),
                row=row,
                col=col,
            )

    return _finish_layout(fig, "Trace Plots by Chain", param_name)


def create_acf_plots(chains: List[np.ndarray], param_name: str = "prior") -> go.Figure:
    """Create autocorrelation function plots for all chains and domains.

    Args:
        chains: List of sample arrays of shape (n_samples, n_domains), one per chain.
        param_name: Name of the traced quantity.

    Returns:
        The plotly figure.
    """
    n_chains = len(chains)
    K = chains[0].shape[1]
    param_colors, positions = setup_plot_colors_and_positions(K, n_chains)
    fig = _chain_subplots(n_chains, positions)

    for c, (row, col) in enumerate(positions):
        for k in range(K):
            acf_vals = acf_1d(np.asarray(chains[c][:, k], dtype=float))
            fig.add_trace(
                go.Scatter(
                    x=list(range(len(acf_vals))),
                    y=acf_vals,
                    mode="markers+lines",
                    line={"color": param_colors[k]},
                    marker={"color": param_colors[k]},
                    name=f"${get_param_label(param_name, k)}$",
                    showlegend=(c == 0),
                ),
                row=row,
                col=col,
            )

    return _finish_layout(fig, "ACF Plots by Chain", param_name)


def create_diagnostic_plots(
    chains: List[np.ndarray],
    figure_dir: Union[str, Path],
    param_name: str = "prior",
):
    """Write trace and ACF plots of the chains as PNG files.

    Args:
        chains: List of sample arrays of shape (n_samples, n_domains), one per chain.
        figure_dir: Directory the PNGs are written to.
        param_name: Name of the traced quantity.
    """
    figure_dir = Path(figure_dir)
    figure_dir.mkdir(parents=True, exist_ok=True)
    create_trace_plots(chains, param_name).write_image(
        figure_dir / f"gibbs_trace_{param_name}.png"
    )
    create_acf_plots(chains, param_name).write_image(
        figure_dir / f"gibbs_acf_{param_name}.png"
    )
