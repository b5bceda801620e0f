"""
K-means clustering engine (Lloyd's algorithm).

Centroids live in a storage dtype; per-iteration sums are kept in a wider
accumulator dtype and narrowed back with a saturating cast, so integer or
single-precision data can be clustered without overflow in the update step.
"""

import dataclasses
import logging
import time
from typing import Optional, Tuple, Union

import numpy as np
from sklearn.utils import check_random_state

from .config import STABLE_ITERATIONS, InitMode, KMeansConfig
from .utils import (
    DTypeLike,
    default_accumulator,
    euclidean_distances,
    mean_in_accumulator,
    resolve_dtype,
    saturate_cast,
)

logger = logging.getLogger(__name__)


class KMeans:
    """
    K-means clustering over a fixed number of dimensions and clusters.

    Features:
    - Random (per-interval) or Uniform (evenly spaced) seeding, or manual centroids
    - Separate storage and accumulator dtypes with a saturating narrowing cast
    - Cost-based stopping after repeated small relative cost changes
    - Empty clusters keep their previous centroid

    Example:
        >>> engine = KMeans(dim_num=1, cluster_num=2,
        ...                 config=KMeansConfig(init_mode="uniform"))
        >>> engine.cluster(np.array([1., 2., 3., 10., 11., 12.]))
        array([0, 0, 0, 1, 1, 1])
    """

    def __init__(
        self,
        dim_num: int = 1,
        cluster_num: int = 1,
        dtype: DTypeLike = np.float64,
        accum_dtype: Optional[DTypeLike] = None,
        config: Optional[KMeansConfig] = None,
        random_state=None
    ):
        """
        Initialize the engine with all centroids at zero.

        Args:
            dim_num: Number of components per point (D)
            cluster_num: Number of clusters (K)
            dtype: Storage dtype of points and centroids
            accum_dtype: Dtype used to sum points; defaults to the widest
                dtype of the same family as `dtype`
            config: Iteration parameters. If None, uses defaults.
            random_state: Seed or `numpy.random.RandomState` for Random
                seeding. If None, every `init` call reseeds from the clock.
        """
        if dim_num < 1:
            raise ValueError(f"dim_num must be >= 1, got {dim_num}")
        if cluster_num < 1:
            raise ValueError(f"cluster_num must be >= 1, got {cluster_num}")

        self.dim_num = int(dim_num)
        self.cluster_num = int(cluster_num)
        self.dtype = resolve_dtype(dtype)
        self.accum_dtype = (
            resolve_dtype(accum_dtype) if accum_dtype is not None
            else default_accumulator(self.dtype)
        )
        self.config = config or KMeansConfig()
        self.random_state = random_state

        self._means = np.zeros((self.cluster_num, self.dim_num), dtype=self.dtype)

        # Results
        self.labels_ = None
        self.cost_ = None
        self.n_iter_ = None

    # ------------------------------------------------------------------
    # Configuration and centroid access
    # ------------------------------------------------------------------

    def set_mean(self, i: int, u) -> None:
        """Overwrite centroid `i` with a vector of `dim_num` values."""
        self._means[i] = self._to_storage(u).reshape(self.dim_num)

    def get_mean(self, i: int) -> np.ndarray:
        """Read-only view of centroid `i`; it follows later updates."""
        view = self._means[i].view()
        view.flags.writeable = False
        return view

    @property
    def means(self) -> np.ndarray:
        """Read-only view of all centroids, shape (cluster_num, dim_num)."""
        view = self._means.view()
        view.flags.writeable = False
        return view

    @property
    def cluster_centers_(self) -> np.ndarray:
        return self._means.copy()

    def set_init_mode(self, mode: Union[InitMode, str]) -> None:
        self.config = dataclasses.replace(self.config, init_mode=mode)

    def set_max_iterations(self, n: int) -> None:
        self.config = dataclasses.replace(self.config, max_iterations=n)

    def set_end_error(self, eps: float) -> None:
        self.config = dataclasses.replace(self.config, end_error=eps)

    def get_init_mode(self) -> InitMode:
        return self.config.init_mode

    def get_max_iterations(self) -> int:
        return self.config.max_iterations

    def get_end_error(self) -> float:
        return self.config.end_error

    # ------------------------------------------------------------------
    # Algorithm
    # ------------------------------------------------------------------

    def _to_storage(self, data) -> np.ndarray:
        """Convert `data` to the storage dtype, saturating values outside its range."""
        arr = np.asarray(data)
        if arr.dtype != self.dtype:
            arr = saturate_cast(arr, self.dtype)
        return arr

    def _as_points(self, data, n: Optional[int] = None) -> np.ndarray:
        """View `data` as (n_samples, dim_num), flat or 2D input alike."""
        arr = self._to_storage(data)
        if arr.ndim == 2:
            if arr.shape[1] != self.dim_num:
                raise ValueError(
                    f"Data must have {self.dim_num} features, got shape {arr.shape}"
                )
            points = arr
        else:
            flat = arr.reshape(-1)
            if flat.size % self.dim_num:
                raise ValueError(
                    f"Buffer of {flat.size} values is not a whole number of "
                    f"{self.dim_num}-dimensional points"
                )
            points = flat.reshape(-1, self.dim_num)

        if n is not None:
            if n < 0 or n > len(points):
                raise ValueError(f"n must be in [0, {len(points)}], got {n}")
            points = points[:n]
        return points

    def _random_source(self) -> np.random.RandomState:
        if self.random_state is None:
            return check_random_state(time.time_ns() % 2**32)
        return check_random_state(self.random_state)

    def init(self, data, n: Optional[int] = None) -> None:
        """
        Seed the centroids from points of `data`.

        Random mode splits the points into `cluster_num` runs of
        `n // cluster_num` points and copies a random point of run i into
        centroid i. Uniform mode copies point `i * n // cluster_num`.
        Manual mode leaves the centroids as set with `set_mean`.

        Args:
            data: Flat buffer of n * dim_num values or array (n, dim_num)
            n: Number of points to use; defaults to all of `data`
        """
        mode = self.config.init_mode
        if mode is InitMode.MANUAL:
            return

        points = self._as_points(data, n)
        size = len(points)
        if size == 0:
            raise ValueError("Cannot initialize centroids from an empty dataset")

        if mode is InitMode.RANDOM:
            rng = self._random_source()
            interval = max(size // self.cluster_num, 1)
            for i in range(self.cluster_num):
                start = min(interval * i, size - 1)
                stop = min(start + interval, size)
                select = start + rng.randint(stop - start)
                self._means[i] = points[select]
        else:
            for i in range(self.cluster_num):
                self._means[i] = points[i * size // self.cluster_num]

        logger.debug("Initialized %d centroids (%s)", self.cluster_num, mode.value)

    def _assign(self, points: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """Nearest centroid and its distance for every point."""
        distances = euclidean_distances(points, self._means)
        # argmin keeps the first minimum, so ties go to the lowest index
        labels = np.argmin(distances, axis=1)
        return labels, distances[np.arange(len(points)), labels]

    def get_label(self, sample) -> Tuple[int, float]:
        """
        Nearest centroid to a single point.

        Args:
            sample: Vector of `dim_num` values

        Returns:
            (label, Euclidean distance to that centroid)
        """
        point = self._to_storage(sample).reshape(1, self.dim_num)
        labels, distances = self._assign(point)
        return int(labels[0]), float(distances[0])

    def cluster(self, data, n: Optional[int] = None, labels=None) -> np.ndarray:
        """
        Run Lloyd's algorithm on `data` and label every point.

        Args:
            data: Flat buffer of n * dim_num values or array (n, dim_num)
            n: Number of points to use; defaults to all of `data`
            labels: Optional buffer of at least n entries that receives the
                final labels

        Returns:
            Final labels, shape (n,)

        Raises:
            ValueError: If there are fewer points than clusters
        """
        points = self._as_points(data, n)
        size = len(points)
        k = self.cluster_num
        if size < k:
            raise ValueError(f"Need at least {k} points to form {k} clusters, got {size}")
        if labels is not None and len(labels) < size:
            raise ValueError(f"Label buffer holds {len(labels)} entries, need {size}")

        self.init(points)

        cfg = self.config
        acc = self.accum_dtype
        summands = points.astype(acc)
        iter_num = 0
        last_cost = 0.0
        curr_cost = 0.0
        unchanged = 0

        while True:
            last_cost = curr_cost

            # Classification
            assigned, distances = self._assign(points)
            counts = np.bincount(assigned, minlength=k)
            sums = np.zeros((k, self.dim_num), dtype=acc)
            np.add.at(sums, assigned, summands)
            curr_cost = float(distances.sum()) / size

            # Reestimation; empty clusters keep their centroid
            filled = counts > 0
            means = mean_in_accumulator(sums[filled], counts[filled], acc)
            self._means[filled] = saturate_cast(means, self.dtype)

            iter_num += 1
            if abs(last_cost - curr_cost) < cfg.end_error * last_cost:
                unchanged += 1
            elif cfg.consecutive_stability:
                unchanged = 0

            logger.debug(
                "Iteration %d, cost: %.6g, stable iterations: %d",
                iter_num, curr_cost, unchanged
            )

            if curr_cost == 0.0:
                reason = "exact fit"
                break
            if iter_num >= cfg.max_iterations:
                reason = "iteration limit"
                break
            if unchanged >= STABLE_ITERATIONS:
                reason = "converged"
                break

        final, _ = self._assign(points)
        empty = np.flatnonzero(np.bincount(final, minlength=k) == 0)
        if empty.size:
            logger.warning("Clusters with no points after clustering: %s", empty.tolist())

        if labels is not None:
            labels[:size] = final

        self.labels_ = final
        self.cost_ = curr_cost
        self.n_iter_ = iter_num
        logger.info(
            "Clustering stopped after %d iterations (%s), cost: %.6g",
            iter_num, reason, curr_cost
        )
        return final

    # ------------------------------------------------------------------
    # Estimator-style interface
    # ------------------------------------------------------------------

    def fit(self, X) -> 'KMeans':
        """
        Cluster X and keep the results on the engine.

        Args:
            X: Input data of shape (n_samples, dim_num) or a flat buffer

        Returns:
            self
        """
        self.cluster(X)
        return self

    def predict(self, X) -> np.ndarray:
        """
        Label points against the current centroids without updating them.

        Args:
            X: Input data of shape (n_samples, dim_num) or a flat buffer

        Returns:
            Cluster labels
        """
        labels, _ = self._assign(self._as_points(X))
        return labels

    def fit_predict(self, X) -> np.ndarray:
        return self.fit(X).labels_

    def get_cluster_info(self) -> dict:
        """Get information about the last clustering run."""
        if self.labels_ is None:
            raise ValueError("Model must be fitted first")

        cluster_sizes = np.bincount(self.labels_, minlength=self.cluster_num)

        return {
            'n_clusters': self.cluster_num,
            'cost': self.cost_,
            'n_iterations': self.n_iter_,
            'cluster_sizes': dict(enumerate(cluster_sizes.tolist())),
            'empty_clusters': np.flatnonzero(cluster_sizes == 0).tolist(),
            'min_cluster_size': int(cluster_sizes.min()),
            'max_cluster_size': int(cluster_sizes.max())
        }
