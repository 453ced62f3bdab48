from typing import Optional

import numpy as np
import pylab as plt

from lhcube.internals.types import LatinHypercubeSample

__all__ = ['plot_samples']

# Stratum grid lines are only drawn when there are few enough to see.
MAX_GRID_LINES = 50


def plot_samples(sample: LatinHypercubeSample, save_name: Optional[str] = None, show: bool = True):
    """
    Plots a sample as a grid: histograms with one bar per stratum on the diagonal, pairwise scatter plots below it.

    For a valid Latin Hypercube every diagonal bar has height one.

    Args:
        sample: LatinHypercubeSample
        save_name: file to save figure to.
        show: whether to call `plt.show()`.

    Returns:
        the figure
    """
    points = np.asarray(sample.points)
    num_points, ndims = points.shape
    lower = np.asarray(sample.lower)
    upper = np.asarray(sample.upper)
    figsize = min(20, max(4, int(2 * ndims)))
    fig, axs = plt.subplots(ndims, ndims, figsize=(figsize, figsize), squeeze=False)
    for row in range(ndims):
        for col in range(ndims):
            ax = axs[row][col]
            if col > row:
                ax.set_axis_off()
                continue
            if row == col:
                if upper[col] > lower[col]:
                    ax.hist(points[:, col], bins=num_points, range=(lower[col], upper[col]), fc='None',
                            edgecolor='black')
                    ax.set_xlim(lower[col], upper[col])
                else:
                    ax.axvline(lower[col], color='black')
                ax.set_title(sample.headings[col])
                continue
            ax.scatter(points[:, col], points[:, row], s=4, c='black')
            if num_points <= MAX_GRID_LINES:
                for edge in np.linspace(lower[col], upper[col], num_points + 1):
                    ax.axvline(edge, color='grey', lw=0.5, alpha=0.5)
                for edge in np.linspace(lower[row], upper[row], num_points + 1):
                    ax.axhline(edge, color='grey', lw=0.5, alpha=0.5)
            if upper[col] > lower[col]:
                ax.set_xlim(lower[col], upper[col])
            if upper[row] > lower[row]:
                ax.set_ylim(lower[row], upper[row])
            if col == 0:
                ax.set_ylabel(sample.headings[row])
            if row == ndims - 1:
                ax.set_xlabel(sample.headings[col])
    if save_name is not None:
        fig.savefig(save_name, bbox_inches='tight', dpi=300, pad_inches=0.0)
    if show:
        plt.show()
    return fig
