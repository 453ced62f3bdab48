import io
import os
from pathlib import Path
from typing import Optional, Union

from lhcube.config import build_config
from lhcube.formatting import format_table, write_table
from lhcube.generator import SampleGenerator, generate
from lhcube.internals.types import GenerationConfig, LatinHypercubeSample, PRNGKey
from lhcube.plotting import plot_samples
from lhcube.utils import summary, save_sample, load_sample, dimension_statistics

__all__ = [
    'LatinHypercubeSampler'
]


class LatinHypercubeSampler:
    """
    Latin Hypercube sampler over a box. A convenience wrapper around `build_config`, `generate` and `format_table`.

    Example:

        sampler = LatinHypercubeSampler(point_count=10, dimension_count=2, scale=(0., 1.), jitter=True)
        sample = sampler(random.PRNGKey(42))
        print(sampler.to_table(sample).getvalue())
    """

    def __init__(self, point_count: Optional[int] = None, dimension_count: Optional[int] = None,
                 config: Optional[GenerationConfig] = None, **kwargs):
        """
        Initialises the sampler.

        Args:
            point_count: number of points N
            dimension_count: number of dimensions D
            config: an already validated configuration, used instead of the other arguments
            **kwargs: further settings passed to `build_config`, e.g. scale, overrides, jitter, headings, seed,
                permutation_method.

        Raises:
            ConfigurationError: if the settings are invalid.
        """
        if config is None:
            if point_count is None or dimension_count is None:
                raise ValueError("Need point_count and dimension_count if config is not given.")
            config = build_config(point_count=point_count, dimension_count=dimension_count, **kwargs)
        elif point_count is not None or dimension_count is not None or len(kwargs) > 0:
            raise ValueError("Give either a config, or the settings to build one, not both.")
        self._config = config
        self._generator = SampleGenerator(config)

        # Post-analysis utilities
        self.summary = summary
        self.statistics = dimension_statistics
        self.plot_samples = plot_samples
        self.save_sample = save_sample
        self.load_sample = load_sample

    def __repr__(self):
        return (f"LatinHypercubeSampler(point_count={self._config.point_count}, "
                f"dimension_count={self._config.dimension_count}, method={self._config.permutation_method})")

    @property
    def config(self) -> GenerationConfig:
        return self._config

    def __call__(self, key: Optional[PRNGKey] = None) -> LatinHypercubeSample:
        """
        Draws a sample.

        Args:
            key: PRNGKey. If None, the configured seed or the clock is used.

        Returns:
            LatinHypercubeSample
        """
        if key is None:
            return generate(self._config)
        return self._generator(key)

    @staticmethod
    def to_table(sample: LatinHypercubeSample) -> io.StringIO:
        return format_table(sample.points, sample.headings, sample.precisions)

    def write(self, sample: LatinHypercubeSample, path: Optional[Union[str, os.PathLike]] = None) -> Path:
        """
        Writes a sample to `path`, or to the configured output.
        """
        if path is None:
            path = self._config.output
        if path is None:
            raise ValueError("No output path given or configured.")
        return write_table(path, sample)
