# 3. cluster.py

import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd
from joblib import Parallel, delayed
from sklearn.metrics import silhouette_score

from errors import (
    ConvergenceError,
    DegenerateInputError,
    InputValidationError,
    InvalidClusterCountError,
    SchemaError,
)

logger = logging.getLogger(__name__)

N_RESTARTS = 50
MAX_ITER = 100
MAX_RESEEDS = 10


@dataclass(frozen=True, eq=False)
class ClusteringResult:
    """Outcome of one k-means run.

    ``labels`` holds the cluster (1..k) of every input row in input order,
    ``centers`` the k cluster means in feature space and ``inertia`` the
    within-cluster sum of squared distances.
    """

    labels: np.ndarray
    centers: np.ndarray
    inertia: float
    features: tuple
    index: pd.Index
    n_iter: int = 0
    restart: int = 0

    def __post_init__(self):
        self.labels.setflags(write=False)
        self.centers.setflags(write=False)

    @property
    def k(self):
        return self.centers.shape[0]

    @property
    def assignments(self):
        return pd.Series(self.labels, index=self.index, name='cluster')

    def centers_frame(self):
        return pd.DataFrame(self.centers, columns=list(self.features),
                            index=pd.RangeIndex(1, self.k + 1, name='cluster'))


def _feature_matrix(data, features=None):
    if isinstance(data, pd.DataFrame):
        features = list(features) if features is not None else list(data.columns)
        missing = [col for col in features if col not in data.columns]
        if missing:
            raise SchemaError(f"Missing feature columns: {missing}")
        non_numeric = [col for col in features if not pd.api.types.is_numeric_dtype(data[col])]
        if non_numeric:
            raise SchemaError(f"Non-numeric feature columns: {non_numeric}")
        X = data[features].to_numpy(dtype='float64', na_value=np.nan)
        index = data.index
    else:
        X = np.asarray(data, dtype='float64')
        if X.ndim == 1:
            X = X.reshape(-1, 1)
        if X.ndim != 2:
            raise InputValidationError(f"Expected a 2-D feature matrix, got {X.ndim} dimensions")
        if features is None:
            features = [f"x{i}" for i in range(X.shape[1])]
        index = pd.RangeIndex(len(X))

    if len(features) != X.shape[1]:
        raise InputValidationError(f"{len(features)} feature names for {X.shape[1]} columns")
    if not np.isfinite(X).all():
        raise DegenerateInputError("Feature values contain NaN or infinite entries")
    return X, tuple(features), index


def _squared_distances(X, centers):
    dist = ((X[:, np.newaxis, :] - centers[np.newaxis, :, :]) ** 2).sum(axis=2)
    if not np.isfinite(dist).all():
        raise DegenerateInputError("Distances to cluster centers are not finite")
    return dist


def _assign(X, centers):
    # argmin picks the lowest cluster index on ties
    return _squared_distances(X, centers).argmin(axis=1)


def _fill_empty_clusters(X, centers, labels, rng, max_reseeds):
    k = len(centers)
    for attempt in range(max_reseeds + 1):
        empty = np.flatnonzero(np.bincount(labels, minlength=k) == 0)
        if empty.size == 0:
            return centers, labels
        if attempt == max_reseeds:
            break
        for j in empty:
            is_center = (X[:, np.newaxis, :] == centers[np.newaxis, :, :]).all(axis=2).any(axis=1)
            candidates = np.flatnonzero(~is_center)
            if candidates.size == 0:
                raise ConvergenceError(f"Fewer than {k} distinct points, cannot fill empty cluster {j + 1}")
            centers[j] = X[rng.choice(candidates)]
        labels = _assign(X, centers)
    raise ConvergenceError(f"Empty clusters remain after {max_reseeds} reseeding attempts")


def _centroids(X, labels, k):
    return np.array([X[labels == j].mean(axis=0) for j in range(k)])


def _inertia(X, centers, labels):
    inertia = float(((X - centers[labels]) ** 2).sum())
    if not np.isfinite(inertia):
        raise DegenerateInputError("Inertia is not finite")
    return inertia


def single_run(X, k, seed_seq, max_iter=MAX_ITER, max_reseeds=MAX_RESEEDS,
               features=None, index=None, restart=0):
    """One Lloyd refinement from k distinct random rows of X."""
    rng = np.random.default_rng(seed_seq)
    centers = X[rng.choice(len(X), size=k, replace=False)].copy()

    labels = None
    for n_iter in range(1, max_iter + 1):
        new_labels = _assign(X, centers)
        centers, new_labels = _fill_empty_clusters(X, centers, new_labels, rng, max_reseeds)
        converged = labels is not None and np.array_equal(labels, new_labels)
        labels = new_labels
        centers = _centroids(X, labels, k)
        if converged:
            break

    if features is None:
        features = tuple(f"x{i}" for i in range(X.shape[1]))
    if index is None:
        index = pd.RangeIndex(len(X))
    return ClusteringResult(
        labels=labels + 1,
        centers=centers,
        inertia=_inertia(X, centers, labels),
        features=tuple(features),
        index=index,
        n_iter=n_iter,
        restart=restart,
    )


def _validate(n, k, n_restarts, max_iter, max_reseeds):
    if isinstance(k, bool) or not isinstance(k, (int, np.integer)):
        raise InvalidClusterCountError(f"Cluster count must be an integer, got {k!r}")
    if not 1 <= k <= n:
        raise InvalidClusterCountError(f"Cluster count must be between 1 and {n}, got {k}")
    if n_restarts < 1:
        raise InputValidationError(f"n_restarts must be at least 1, got {n_restarts}")
    if max_iter < 1:
        raise InputValidationError(f"max_iter must be at least 1, got {max_iter}")
    if max_reseeds < 0:
        raise InputValidationError(f"max_reseeds must not be negative, got {max_reseeds}")


def iter_restarts(data, k, features=None, n_restarts=N_RESTARTS, max_iter=MAX_ITER,
                  seed=None, n_jobs=1, max_reseeds=MAX_RESEEDS):
    """
    Run k-means `n_restarts` times and return the results in restart order.

    Restart r always draws from the r-th child of ``SeedSequence(seed)``, so the
    results are identical whether restarts run sequentially or through joblib.

    Parameters:
        data (pd.DataFrame or np.ndarray): Observations, one per row.
        k (int): Number of clusters, 1 <= k <= number of rows.
        features (list[str]): Columns of `data` spanning the feature space.
        n_restarts (int): Number of independent random initialisations.
        max_iter (int): Maximum refinement iterations per restart.
        seed (int): Root seed for all restarts.
        n_jobs (int): joblib workers; 1 runs lazily in the calling thread.
        max_reseeds (int): Reseeding attempts allowed per iteration for empty clusters.

    Returns:
        Iterator[ClusteringResult]
    """
    X, features, index = _feature_matrix(data, features)
    _validate(len(X), k, n_restarts, max_iter, max_reseeds)
    seeds = np.random.SeedSequence(seed).spawn(n_restarts)
    kwargs = dict(max_iter=max_iter, max_reseeds=max_reseeds, features=features, index=index)

    if n_jobs == 1:
        return (single_run(X, k, ss, restart=r, **kwargs) for r, ss in enumerate(seeds))
    return iter(Parallel(n_jobs=n_jobs, prefer="threads")(
        delayed(single_run)(X, k, ss, restart=r, **kwargs) for r, ss in enumerate(seeds)
    ))


def select_best(results):
    """Minimum-inertia result; the earliest restart wins ties."""
    best = None
    for result in results:
        if best is None or result.inertia < best.inertia:
            best = result
    if best is None:
        raise InputValidationError("No restart results to select from")
    return best


def kmeans(data, k, features=None, n_restarts=N_RESTARTS, max_iter=MAX_ITER,
           seed=None, n_jobs=1, max_reseeds=MAX_RESEEDS):
    best = select_best(iter_restarts(data, k, features=features, n_restarts=n_restarts,
                                     max_iter=max_iter, seed=seed, n_jobs=n_jobs,
                                     max_reseeds=max_reseeds))
    logger.debug(f"k={k}: restart {best.restart} selected, inertia {best.inertia:.4f} after {best.n_iter} iterations")
    return best


def cluster_by_group(df, group_col, features, k, groups=None, **kwargs):
    if group_col not in df.columns:
        raise SchemaError(f"Missing group column: {group_col}")
    if groups is None:
        groups = list(pd.unique(df[group_col]))
    results = {}
    for group in groups:
        subset = df[df[group_col] == group]
        results[group] = kmeans(subset, k, features=features, **kwargs)
        logger.info(f"{group_col}={group}: {k} clusters, inertia {results[group].inertia:.2f}")
    return results


def inertia_table(results):
    return pd.DataFrame({'k': [r.k for r in results], 'inertia': [r.inertia for r in results]})


def elbow_curve(df, features, k_values, **kwargs):
    return inertia_table([kmeans(df, k, features=features, **kwargs) for k in k_values])


def silhouette(data, result):
    X, _, _ = _feature_matrix(data, result.features if isinstance(data, pd.DataFrame) else None)
    if not 2 <= result.k <= len(X) - 1:
        raise InvalidClusterCountError(f"Silhouette needs 2 <= k <= {len(X) - 1}, got {result.k}")
    return float(silhouette_score(X, result.labels))


def summarize_clusters(df, result):
    features = list(result.features)
    frame = df.loc[result.index, features].copy()
    frame['cluster'] = result.labels
    grouped = frame.groupby('cluster')
    summary = grouped[features].mean()
    summary['policies'] = grouped.size()
    return summary.reset_index()
