from typing import NamedTuple, Optional, Tuple

import chex

from lhcube.internals.mixed_precision import float_type, int_type

__all__ = [
    'Dimension',
    'GenerationConfig',
    'LatinHypercubeSample',
    'DimensionStatistics',
    'PRNGKey',
    'IntArray',
    'FloatArray',
    'BoolArray',
    'float_type',
    'int_type'
]

PRNGKey = chex.PRNGKey
FloatArray = chex.Array
IntArray = chex.Array
BoolArray = chex.Array


class Dimension(NamedTuple):
    """
    A single axis of the hypercube.

    Args:
        index: position of the dimension, in [0, D).
        lower: lower bound of the dimension.
        upper: upper bound of the dimension, lower <= upper.
        jitter: whether points get a random sub-stratum offset along this dimension.
        width: stratum width, (upper - lower) / N.
        precision: number of decimals used when serialising coordinates of this dimension.
    """
    index: int
    lower: float
    upper: float
    jitter: bool
    width: float
    precision: int


class GenerationConfig(NamedTuple):
    """
    A validated sampling configuration. Build with `lhcube.config.build_config`.

    Args:
        point_count: number of points N (also the number of strata per dimension).
        dimensions: one `Dimension` per axis.
        headings: one column heading per dimension.
        seed: optional seed for the root PRNGKey. If None the generator is seeded from the clock.
        permutation_method: 'shuffle' or 'rejection'.
        output: optional output path, checked to be writable.
    """
    point_count: int
    dimensions: Tuple[Dimension, ...]
    headings: Tuple[str, ...]
    seed: Optional[int] = None
    permutation_method: str = 'shuffle'
    output: Optional[str] = None

    @property
    def dimension_count(self) -> int:
        return len(self.dimensions)


class LatinHypercubeSample(NamedTuple):
    """
    Result of a generation run.

    Args:
        points: [N, D] coordinates.
        bins: [N, D] stratum index of each coordinate; every column is a permutation of 0..N-1.
        precisions: [D] decimals per dimension.
        headings: [D] column headings.
        lower: [D] lower bounds.
        upper: [D] upper bounds.
        widths: [D] stratum widths.
        jitter: [D] whether a dimension was jittered.
    """
    points: FloatArray
    bins: IntArray
    precisions: Tuple[int, ...]
    headings: Tuple[str, ...]
    lower: FloatArray
    upper: FloatArray
    widths: FloatArray
    jitter: BoolArray

    @property
    def point_count(self) -> int:
        return int(self.points.shape[0])

    @property
    def dimension_count(self) -> int:
        return int(self.points.shape[1])


class DimensionStatistics(NamedTuple):
    """
    Descriptive statistics of one column of a sample.
    """
    heading: str
    mean: float
    variance: float
    std: float
    minimum: float
    maximum: float
