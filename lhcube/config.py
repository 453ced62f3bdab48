import math
import os
import re
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, Union

try:  # Python >= 3.11
    import tomllib
except ModuleNotFoundError:  # Python <= 3.10
    import tomli as tomllib

from lhcube.errors import ConfigurationError, GenerationError
from lhcube.internals.logging import logger
from lhcube.internals.mixed_precision import MAX_POINT_COUNT
from lhcube.internals.random import PERMUTATION_METHODS
from lhcube.internals.types import Dimension, GenerationConfig
from lhcube.jitter import parse_jitter_selector, JitterSelector
from lhcube.precision import estimate_precision

__all__ = [
    'build_config',
    'load_config',
    'parse_bounds',
    'parse_override',
    'sanitize_heading',
    'default_headings',
    'validate_output_path',
    'LARGE_WORKLOAD_CELLS'
]

# Above this many coordinates a warning is logged before sampling.
LARGE_WORKLOAD_CELLS = 10 ** 7

CONFIG_TABLE = 'lhcube'

BoundsType = Union[str, Sequence[float]]
OverrideType = Union[str, Sequence[Union[int, float]]]

_HEADING_ALLOWED = re.compile(r'[^A-Za-z0-9_ ]')


def _as_count(value, name: str) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}.")
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError as e:
            raise ConfigurationError(f"{name} must be an integer, got {value!r}.") from e
    if not hasattr(value, '__index__'):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}.")
    return int(value)


def _as_bound(value, name: str) -> float:
    try:
        bound = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{name} must be a real number, got {value!r}.") from e
    if not math.isfinite(bound):
        raise ConfigurationError(f"{name} must be finite, got {value!r}.")
    return bound


def parse_bounds(bounds: BoundsType) -> Tuple[float, float]:
    """
    Parses a (lower, upper) pair, either as a sequence or as a 'lower:upper' string.

    Raises:
        ConfigurationError: if the bounds are malformed, not finite, or lower > upper.
    """
    if isinstance(bounds, str):
        parts = bounds.split(':')
    else:
        parts = list(bounds)
    if len(parts) != 2:
        raise ConfigurationError(f"Bounds must be 'lower:upper', got {bounds!r}.")
    lower = _as_bound(parts[0], 'lower bound')
    upper = _as_bound(parts[1], 'upper bound')
    if lower > upper:
        raise ConfigurationError(f"Lower bound {lower} is greater than upper bound {upper}.")
    return lower, upper


def parse_override(override: OverrideType) -> Tuple[int, float, float]:
    """
    Parses a per-dimension bounds override, either as (index, lower, upper) or as an 'index:lower:upper' string.

    Raises:
        ConfigurationError: if the override is malformed.
    """
    if isinstance(override, str):
        parts = override.split(':')
    else:
        parts = list(override)
    if len(parts) != 3:
        raise ConfigurationError(f"Override must be 'index:lower:upper', got {override!r}.")
    index = _as_count(parts[0], 'override index')
    lower, upper = parse_bounds(parts[1:])
    return index, lower, upper


def sanitize_heading(heading: str) -> str:
    """
    Keeps only letters, digits, underscores and spaces, and strips surrounding whitespace.
    """
    return _HEADING_ALLOWED.sub('', str(heading)).strip()


def default_headings(dimension_count: int) -> Tuple[str, ...]:
    return tuple(f"dim{index}" for index in range(dimension_count))


def _build_headings(headings: Union[str, Iterable[str], None], dimension_count: int) -> Tuple[str, ...]:
    if headings is None:
        return default_headings(dimension_count)
    if isinstance(headings, str):
        headings = headings.split(',')
    headings = list(headings)
    if len(headings) != dimension_count:
        raise ConfigurationError(f"Expected {dimension_count} headings, got {len(headings)}.")
    sanitized = []
    for index, heading in enumerate(headings):
        clean = sanitize_heading(heading)
        if clean == '':
            raise ConfigurationError(f"Heading {index} ({heading!r}) is empty after sanitisation.")
        sanitized.append(clean)
    return tuple(sanitized)


def validate_output_path(output: Union[str, os.PathLike]) -> str:
    """
    Checks that an output file can be created at `output`, without creating it.

    Returns:
        the expanded path as a string

    Raises:
        ConfigurationError: if the path is a directory, its parent does not exist, or it is not writable.
    """
    path = Path(output).expanduser()
    if path.is_dir():
        raise ConfigurationError(f"Output path {path} is a directory.")
    parent = path.parent if str(path.parent) != '' else Path('.')
    if not parent.is_dir():
        raise ConfigurationError(f"Output directory {parent} does not exist.")
    if not os.access(parent, os.W_OK):
        raise ConfigurationError(f"Output directory {parent} is not writable.")
    if path.exists() and not os.access(path, os.W_OK):
        raise ConfigurationError(f"Output file {path} is not writable.")
    return str(path)


def build_config(point_count: int,
                 dimension_count: int,
                 scale: Optional[BoundsType] = None,
                 overrides: Iterable[OverrideType] = (),
                 jitter: JitterSelector = False,
                 headings: Union[str, Iterable[str], None] = None,
                 seed: Optional[int] = None,
                 permutation_method: str = 'shuffle',
                 output: Optional[Union[str, os.PathLike]] = None) -> GenerationConfig:
    """
    Validates user settings into a `GenerationConfig`. Has no side effects besides logging.

    Args:
        point_count: number of points N, 1 <= N <= MAX_POINT_COUNT
        dimension_count: number of dimensions D >= 1
        scale: base bounds of every dimension, default (0, N)
        overrides: per-dimension bounds, as (index, lower, upper) or 'index:lower:upper'
        jitter: jitter selector, see `parse_jitter_selector`
        headings: D headings (sequence or comma separated string), default dim0..dim{D-1}
        seed: optional seed, None means clock seeded
        permutation_method: 'shuffle' or 'rejection'
        output: optional output file, checked for writability but not created

    Returns:
        GenerationConfig

    Raises:
        ConfigurationError: on any invalid setting.
    """
    point_count = _as_count(point_count, 'point count')
    if not (1 <= point_count <= MAX_POINT_COUNT):
        raise ConfigurationError(f"Point count must be in [1, {MAX_POINT_COUNT}], got {point_count}.")
    dimension_count = _as_count(dimension_count, 'dimension count')
    if dimension_count < 1:
        raise ConfigurationError(f"Dimension count must be at least 1, got {dimension_count}.")

    if scale is None:
        base_lower, base_upper = 0., float(point_count)
    else:
        base_lower, base_upper = parse_bounds(scale)
    bounds: List[Tuple[float, float]] = [(base_lower, base_upper)] * dimension_count

    overridden = set()
    for override in overrides:
        index, lower, upper = parse_override(override)
        if not (0 <= index < dimension_count):
            raise ConfigurationError(f"Override index {index} out of range [0, {dimension_count}).")
        if index in overridden:
            raise ConfigurationError(f"Dimension {index} overridden more than once.")
        overridden.add(index)
        bounds[index] = (lower, upper)

    jitter_policy = parse_jitter_selector(jitter).validate(dimension_count)
    headings = _build_headings(headings, dimension_count)

    if permutation_method not in PERMUTATION_METHODS:
        raise ConfigurationError(
            f"Unknown permutation method {permutation_method!r}, expected one of {PERMUTATION_METHODS}."
        )
    if seed is not None:
        seed = _as_count(seed, 'seed')
        if not (0 <= seed < 2 ** 63):
            raise ConfigurationError(f"Seed must be in [0, 2**63), got {seed}.")
    if output is not None:
        output = validate_output_path(output)

    dimensions = []
    for index, (lower, upper) in enumerate(bounds):
        width = (upper - lower) / point_count
        if not math.isfinite(width):
            raise ConfigurationError(f"Bounds of dimension {index} ({lower}, {upper}) are too wide.")
        try:
            precision = estimate_precision(width)
        except GenerationError as e:
            raise ConfigurationError(f"Bounds of dimension {index} ({lower}, {upper}) are too narrow.") from e
        dimensions.append(Dimension(index=index, lower=lower, upper=upper, jitter=jitter_policy.applies(index),
                                    width=width, precision=precision))

    if point_count * dimension_count > LARGE_WORKLOAD_CELLS:
        logger.warning(f"Generating {point_count} x {dimension_count} coordinates, this may be slow and use a lot "
                       f"of memory.")

    return GenerationConfig(point_count=point_count,
                            dimensions=tuple(dimensions),
                            headings=headings,
                            seed=seed,
                            permutation_method=permutation_method,
                            output=output)


def load_config(path: Union[str, os.PathLike], **updates) -> GenerationConfig:
    """
    Reads settings from a TOML file and validates them.

    The settings live in a [lhcube] table (or at the top level) with keys `points`, `dimensions`, `scale`,
    `overrides`, `jitter`, `headings`, `output`, `seed` and `method`. Keyword arguments that are not None take
    precedence over the file.

    Example:

        [lhcube]
        points = 10
        dimensions = 2
        scale = "0:1"
        overrides = ["1:10:20"]
        jitter = [0]

    Returns:
        GenerationConfig

    Raises:
        ConfigurationError: if the file is missing, malformed, or holds invalid settings.
    """
    file = Path(path).expanduser()
    if not file.is_file():
        raise ConfigurationError(f"Config file {file} not found.")
    with file.open("rb") as fh:  # tomllib needs binary mode
        try:
            data = tomllib.load(fh)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Config file {file} is not valid TOML: {e}") from e
    table = data.get(CONFIG_TABLE, data)
    if not isinstance(table, dict):
        raise ConfigurationError(f"[{CONFIG_TABLE}] in {file} must be a table.")

    settings = dict(
        point_count=table.get('points'),
        dimension_count=table.get('dimensions'),
        scale=table.get('scale'),
        overrides=table.get('overrides', ()),
        jitter=table.get('jitter', False),
        headings=table.get('headings'),
        seed=table.get('seed'),
        permutation_method=table.get('method', 'shuffle'),
        output=table.get('output')
    )
    settings.update({key: value for key, value in updates.items() if value is not None})
    for key in ('point_count', 'dimension_count'):
        if settings[key] is None:
            raise ConfigurationError(f"Config file {file} is missing '{key.split('_')[0]}s'.")
    logger.info(f"Loaded configuration from {file}.")
    return build_config(**settings)
