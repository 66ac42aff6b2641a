# 4. visualize.py

import logging
import math

import matplotlib.pyplot as plt
import seaborn as sns

logger = logging.getLogger(__name__)


def _finish(fig, save_path):
    fig.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150)
        plt.close(fig)
        logger.info(f"Plot saved to: {save_path}")
    else:
        plt.show()
    return fig


def plot_portfolio(df, x='age', y='sum_assured', by=None, facet=False, save_path=None):
    """
    Scatter plot of the portfolio.

    Parameters:
        df (pd.DataFrame): Policies to plot.
        x, y (str): Columns on the horizontal and vertical axis.
        by (str): Optional column used for colouring, or for the panels when `facet` is set.
        facet (bool): Draw one panel per value of `by` with shared axes.
        save_path (str): Optional path to save the plot. If None, displays the plot.
    """
    if facet and by:
        groups = list(df[by].unique())
        fig, axes = plt.subplots(1, len(groups), figsize=(6 * len(groups), 5), sharex=True, sharey=True,
                                 squeeze=False)
        for ax, group in zip(axes[0], groups):
            sns.scatterplot(data=df[df[by] == group], x=x, y=y, ax=ax, s=15)
            ax.set_title(f"{by} = {group}")
    else:
        fig, ax = plt.subplots(figsize=(8, 6))
        sns.scatterplot(data=df, x=x, y=y, hue=by, ax=ax, s=15)
        ax.set_title('Insurance portfolio')
    return _finish(fig, save_path)


def plot_clusters(df, result, ax, x=None, y=None, title=None):
    x = x or result.features[0]
    y = y or result.features[1]
    data = df.loc[result.index, [x, y]].assign(cluster=result.labels.astype(str))
    sns.scatterplot(data=data, x=x, y=y, hue='cluster', palette='Set2', s=15, ax=ax, legend=False)

    centers = result.centers_frame()
    # filled diamonds
    ax.scatter(centers[x], centers[y], c='black', marker='D', s=40)
    ax.set_title(title or f"k = {result.k}")
    return ax


def plot_cluster_grid(df, results, ncols=2, titles=None, save_path=None):
    """One panel per clustering result, points coloured by cluster and centers as black diamonds."""
    nrows = math.ceil(len(results) / ncols)
    fig, axes = plt.subplots(nrows, ncols, figsize=(6 * ncols, 4.5 * nrows), squeeze=False)
    flat = axes.ravel()
    for i, result in enumerate(results):
        title = titles[i] if titles else None
        plot_clusters(df, result, flat[i], title=title)
    for ax in flat[len(results):]:
        ax.set_visible(False)
    return _finish(fig, save_path)
