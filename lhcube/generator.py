import time
from typing import Optional, Tuple

import jax
import numpy as np
from jax import random, numpy as jnp

from lhcube.errors import GenerationError
from lhcube.internals.logging import logger
from lhcube.internals.random import unique_permutation, range_sequence
from lhcube.internals.types import GenerationConfig, LatinHypercubeSample, PRNGKey, FloatArray, IntArray, \
    BoolArray, float_type
from lhcube.jitter import jitter_offsets

__all__ = [
    'SampleGenerator',
    'generate',
    'clock_seed'
]


def clock_seed() -> int:
    """
    A seed taken from the high resolution clock, used when no seed is given. Only the low 32 bits of the clock are
    kept, so clock seeds lie in [0, 2**32), a subrange of the seeds accepted by configuration.
    """
    return time.time_ns() & 0xFFFFFFFF


class SampleGenerator:
    """
    Builds a Latin Hypercube sample from a validated configuration.

    Every dimension receives its own PRNGKey, split from the root key, so dimensions are independent streams and are
    sampled together with `jax.vmap`. Each column of the coordinate matrix is written by exactly one dimension.
    """

    def __init__(self, config: GenerationConfig):
        self.config = config
        self.point_count = config.point_count
        self.dimension_count = config.dimension_count
        self.permutation_method = config.permutation_method
        self.lower = jnp.asarray([dim.lower for dim in config.dimensions], float_type)
        self.upper = jnp.asarray([dim.upper for dim in config.dimensions], float_type)
        self.widths = jnp.asarray([dim.width for dim in config.dimensions], float_type)
        self.jitter = jnp.asarray([dim.jitter for dim in config.dimensions], jnp.bool_)
        self._sample_jit = jax.jit(self._sample)

    def _sample_dimension(self, key: PRNGKey, lower: FloatArray, upper: FloatArray, width: FloatArray,
                          jitter: BoolArray) -> Tuple[IntArray, FloatArray]:
        permutation_key, jitter_key = random.split(key, 2)
        bins = unique_permutation(permutation_key, self.point_count, method=self.permutation_method)
        offsets = jitter_offsets(jitter_key, self.point_count, jitter)
        coordinates = (bins.astype(float_type) + offsets) * width + lower
        # Rounding may land the last stratum on upper when the width is near the spacing of the bounds.
        coordinates = jnp.minimum(coordinates, jnp.nextafter(upper, lower))
        return bins, coordinates

    def _sample(self, key: PRNGKey) -> Tuple[IntArray, FloatArray]:
        keys = random.split(key, self.dimension_count)
        bins, coordinates = jax.vmap(self._sample_dimension)(keys, self.lower, self.upper, self.widths, self.jitter)
        # [D, N] -> [N, D]
        return bins.T, coordinates.T

    def _check(self, bins: np.ndarray, points: np.ndarray):
        expected = np.asarray(range_sequence(self.point_count))
        sorted_bins = np.sort(bins, axis=0)
        for dim in range(self.dimension_count):
            if not np.array_equal(sorted_bins[:, dim], expected):
                raise GenerationError(f"Stratum assignment of dimension {dim} is not a permutation.")
        if not np.all(np.isfinite(points)):
            raise GenerationError("Generated coordinates are not all finite.")

    def __call__(self, key: PRNGKey) -> LatinHypercubeSample:
        """
        Generates the sample.

        Args:
            key: PRNGKey

        Returns:
            LatinHypercubeSample

        Raises:
            GenerationError: if an arithmetic error occurs or the stratification invariant is violated.
        """
        try:
            bins, points = self._sample_jit(key)
            bins = np.asarray(bins)
            points = np.asarray(points)
        except ArithmeticError as e:
            raise GenerationError(f"Failed to generate {self.point_count} x {self.dimension_count} sample.") from e
        self._check(bins, points)
        return LatinHypercubeSample(
            points=points,
            bins=bins,
            precisions=tuple(dim.precision for dim in self.config.dimensions),
            headings=tuple(self.config.headings),
            lower=np.asarray(self.lower),
            upper=np.asarray(self.upper),
            widths=np.asarray(self.widths),
            jitter=np.asarray(self.jitter)
        )


def generate(config: GenerationConfig, key: Optional[PRNGKey] = None) -> LatinHypercubeSample:
    """
    Generates a Latin Hypercube sample.

    Args:
        config: validated configuration, see `lhcube.config.build_config`
        key: optional PRNGKey. If None, `config.seed` is used, or the clock if there is no seed.

    Returns:
        LatinHypercubeSample

    Raises:
        GenerationError: if generation fails. No partial sample is returned.
    """
    if key is None:
        seed = config.seed
        if seed is None:
            seed = clock_seed()
            logger.info(f"Seeding from clock with seed {seed}.")
        key = random.PRNGKey(seed)
    logger.info(f"Generating {config.point_count} points in {config.dimension_count} dimensions "
                f"using {config.permutation_method} permutations.")
    return SampleGenerator(config)(key)
