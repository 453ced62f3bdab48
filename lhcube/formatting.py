import io
import os
import tempfile
from pathlib import Path
from typing import Sequence, Union

import numpy as np

from lhcube.internals.logging import logger
from lhcube.internals.types import FloatArray, LatinHypercubeSample

__all__ = [
    'escape_heading',
    'format_value',
    'format_table',
    'write_table'
]

DELIMITER = ','
LINE_TERMINATOR = '\n'


def escape_heading(heading: str) -> str:
    """
    Quotes a heading if it contains the delimiter, a quote or a newline, doubling internal quotes.
    """
    if any(c in heading for c in (DELIMITER, '"', '\n', '\r')):
        return '"' + heading.replace('"', '""') + '"'
    return heading


def format_value(value: float, precision: int) -> str:
    return f"{float(value):.{int(precision)}f}"


def format_table(points: FloatArray, headings: Sequence[str], precisions: Sequence[int]) -> io.StringIO:
    """
    Renders a coordinate matrix as delimited text.

    The first row holds the headings, then one row per point with each value at its dimension's fixed precision.
    Every row ends with a newline.

    Args:
        points: [N, D] coordinates
        headings: [D] headings
        precisions: [D] decimals per dimension

    Returns:
        text stream, positioned at the start

    Raises:
        ValueError: if headings or precisions do not match the number of columns.
    """
    points = np.asarray(points)
    if points.ndim != 2:
        raise ValueError(f"Expected points of shape [N, D], got {points.shape}.")
    num_dims = points.shape[1]
    if len(headings) != num_dims:
        raise ValueError(f"Expected {num_dims} headings, got {len(headings)}.")
    if len(precisions) != num_dims:
        raise ValueError(f"Expected {num_dims} precisions, got {len(precisions)}.")
    stream = io.StringIO()
    stream.write(DELIMITER.join(escape_heading(heading) for heading in headings))
    stream.write(LINE_TERMINATOR)
    for row in points:
        stream.write(DELIMITER.join(format_value(v, p) for v, p in zip(row, precisions)))
        stream.write(LINE_TERMINATOR)
    stream.seek(0)
    return stream


def write_table(path: Union[str, os.PathLike], sample: LatinHypercubeSample) -> Path:
    """
    Writes a sample to a delimited text file.

    The table is rendered into a temporary file next to `path`, which then replaces `path`. If anything fails the
    temporary file is removed, so `path` is never left half-written.

    Args:
        path: output file
        sample: the sample to write

    Returns:
        the output path
    """
    path = Path(path).expanduser()
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix='.tmp', dir=path.parent)
    try:
        with os.fdopen(fd, 'w', newline='') as f:
            stream = format_table(sample.points, sample.headings, sample.precisions)
            f.write(stream.getvalue())
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.remove(tmp_name)
        raise
    logger.info(f"Wrote {sample.point_count} points to {path}.")
    return path
