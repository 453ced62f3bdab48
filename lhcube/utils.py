import io
from typing import List, Optional, TextIO, Union

import numpy as np

from lhcube.internals.logging import logger
from lhcube.internals.types import LatinHypercubeSample, DimensionStatistics

__all__ = [
    'dimension_statistics',
    'summary',
    'save_sample',
    'load_sample'
]


def dimension_statistics(sample: LatinHypercubeSample) -> List[DimensionStatistics]:
    """
    Mean, sample variance (ddof=1), standard deviation and range of each dimension.

    With a single point the variance is undefined and reported as NaN.

    Args:
        sample: LatinHypercubeSample

    Returns:
        one DimensionStatistics per dimension
    """
    points = np.asarray(sample.points)
    num_points = points.shape[0]
    stats = []
    for dim, heading in enumerate(sample.headings):
        column = points[:, dim]
        mean = float(np.mean(column))
        if num_points > 1:
            variance = float(np.var(column, ddof=1))
        else:
            variance = float('nan')
        stats.append(DimensionStatistics(heading=heading,
                                         mean=mean,
                                         variance=variance,
                                         std=float(np.sqrt(variance)),
                                         minimum=float(np.min(column)),
                                         maximum=float(np.max(column))))
    return stats


def summary(sample: LatinHypercubeSample, f_obj: Optional[Union[str, TextIO]] = None):
    """
    Gives a summary of a sample.

    Args:
        sample: LatinHypercubeSample
        f_obj: optional file name or text stream to also write the summary to
    """
    main_s = []

    def _print(s):
        print(s)
        main_s.append(s)

    _print("--------")
    _print(f"points: {sample.point_count}")
    _print(f"dimensions: {sample.dimension_count}")
    _print(f"jittered dimensions: {[h for h, j in zip(sample.headings, sample.jitter) if j]}")
    for stats, lower, upper, precision in zip(dimension_statistics(sample), sample.lower, sample.upper,
                                              sample.precisions):
        _print("--------")
        _print(f"{stats.heading}: bounds [{float(lower)}, {float(upper)}] | precision {precision}")
        _print(f"mean: {stats.mean:.{precision}f}")
        _print(f"variance: {stats.variance:.{precision}f}")
        _print(f"std. dev.: {stats.std:.{precision}f}")
        _print(f"min / max: {stats.minimum:.{precision}f} / {stats.maximum:.{precision}f}")
    _print("--------")
    if f_obj is not None:
        out = "\n".join(main_s)
        if isinstance(f_obj, str):
            with open(f_obj, 'w') as f:
                f.write(out)
        elif isinstance(f_obj, io.TextIOBase):
            f_obj.write(out)
        else:
            raise TypeError(f"Invalid f_obj: {type(f_obj)}")


def save_sample(sample: LatinHypercubeSample, save_file: str):
    """
    Saves a sample in a npz file.

    Args:
        sample: LatinHypercubeSample
        save_file: filename
    """
    data_dict = {k: np.asarray(v) for k, v in sample._asdict().items()}
    np.savez(save_file, **data_dict)
    logger.info(f"Saved sample to {save_file}.")


def load_sample(save_file: str) -> LatinHypercubeSample:
    """
    Loads a sample saved with `save_sample`.

    Args:
        save_file: filename

    Returns:
        LatinHypercubeSample
    """
    with np.load(save_file) as data:
        return LatinHypercubeSample(
            points=data['points'],
            bins=data['bins'],
            precisions=tuple(int(p) for p in data['precisions']),
            headings=tuple(str(h) for h in data['headings']),
            lower=data['lower'],
            upper=data['upper'],
            widths=data['widths'],
            jitter=data['jitter']
        )
