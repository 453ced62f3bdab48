from typing import Iterable, Optional, Tuple, Union

from jax import numpy as jnp

from lhcube.errors import ConfigurationError
from lhcube.internals.random import quantized_offsets
from lhcube.internals.types import PRNGKey, FloatArray, BoolArray

__all__ = [
    'JitterPolicy',
    'parse_jitter_selector',
    'jitter_offsets'
]

JitterSelector = Union[str, bool, Iterable[int], None]

_NONE_WORDS = ('false', '0', 'none', 'no', 'off')
_ALL_WORDS = ('true', '1', 'all', 'yes', 'on')


def jitter_offsets(key: PRNGKey, n: int, enabled: BoolArray) -> FloatArray:
    """
    Sub-stratum offsets for one dimension. The offsets are always drawn, and zeroed when jitter is disabled, so that
    the amount of randomness consumed does not depend on the selector.

    Args:
        key: PRNGKey
        n: number of points
        enabled: scalar bool, whether the dimension is jittered

    Returns:
        [n] offsets in [0, 1), in units of the stratum width
    """
    offsets = quantized_offsets(key, n)
    return jnp.where(enabled, offsets, jnp.zeros_like(offsets))


class JitterPolicy:
    """
    Decides which dimensions receive jitter.

    The selector is one of 'none' (no dimension), 'all' (every dimension), or an explicit tuple of dimension indices.
    A policy must be validated against the dimension count before it can be evaluated.
    """

    def __init__(self, mode: str, indices: Tuple[int, ...] = ()):
        if mode not in ('none', 'all', 'subset'):
            raise ConfigurationError(f"Invalid jitter mode {mode!r}.")
        if mode != 'subset' and len(indices) > 0:
            raise ConfigurationError(f"Jitter mode {mode!r} takes no indices, got {indices}.")
        self.mode = mode
        self.indices = tuple(indices)
        self._dimension_count: Optional[int] = None

    def __repr__(self):
        if self.mode == 'subset':
            return f"JitterPolicy(subset={list(self.indices)})"
        return f"JitterPolicy({self.mode})"

    def __eq__(self, other):
        if not isinstance(other, JitterPolicy):
            return NotImplemented
        return self.mode == other.mode and set(self.indices) == set(other.indices)

    def validate(self, dimension_count: int) -> 'JitterPolicy':
        """
        Checks the selector against the number of dimensions.

        Args:
            dimension_count: number of dimensions D

        Returns:
            self, marked as validated

        Raises:
            ConfigurationError: if there are more indices than dimensions, an index is out of range, or an index repeats.
        """
        if self.mode == 'subset':
            if len(self.indices) > dimension_count:
                raise ConfigurationError(
                    f"Jitter selector lists {len(self.indices)} dimensions, but there are only {dimension_count}."
                )
            seen = set()
            for index in self.indices:
                if not (0 <= index < dimension_count):
                    raise ConfigurationError(
                        f"Jitter selector index {index} out of range [0, {dimension_count})."
                    )
                if index in seen:
                    raise ConfigurationError(f"Jitter selector index {index} given more than once.")
                seen.add(index)
        self._dimension_count = dimension_count
        return self

    @property
    def validated(self) -> bool:
        return self._dimension_count is not None

    def applies(self, index: int) -> bool:
        """
        Whether dimension `index` is jittered.

        Raises:
            ConfigurationError: if the policy was not validated, or the index is outside the validated range.
        """
        if self._dimension_count is None:
            raise ConfigurationError("Jitter policy evaluated before validation.")
        if not (0 <= index < self._dimension_count):
            raise ConfigurationError(f"Dimension {index} out of range [0, {self._dimension_count}).")
        if self.mode == 'all':
            return True
        if self.mode == 'none':
            return False
        return index in self.indices

    def mask(self) -> Tuple[bool, ...]:
        """
        Jitter flag of every dimension.
        """
        if self._dimension_count is None:
            raise ConfigurationError("Jitter policy evaluated before validation.")
        return tuple(self.applies(index) for index in range(self._dimension_count))

    def offsets(self, key: PRNGKey, index: int, n: int) -> FloatArray:
        """
        Offsets of dimension `index`, zeros if it is not jittered.

        Args:
            key: PRNGKey
            index: dimension index
            n: number of points

        Returns:
            [n] offsets in [0, 1)
        """
        return jitter_offsets(key, n, jnp.asarray(self.applies(index)))


def parse_jitter_selector(selector: JitterSelector) -> JitterPolicy:
    """
    Builds an (unvalidated) jitter policy.

    Accepts booleans, the words 'true'/'1'/'all' and 'false'/'0'/'none' (any case), a comma separated string of
    dimension indices, or an iterable of integers. A single index must carry a trailing comma ('0,') to be read as
    an index rather than as a word.

    Args:
        selector: the user selector, None means no jitter.

    Returns:
        JitterPolicy

    Raises:
        ConfigurationError: if the selector cannot be parsed.
    """
    if selector is None or selector is False:
        return JitterPolicy('none')
    if selector is True:
        return JitterPolicy('all')
    if isinstance(selector, str):
        word = selector.strip().lower()
        if word in _NONE_WORDS:
            return JitterPolicy('none')
        if word in _ALL_WORDS:
            return JitterPolicy('all')
        items = [item.strip() for item in word.split(',') if item.strip() != '']
        try:
            indices = tuple(int(item) for item in items)
        except ValueError as e:
            raise ConfigurationError(f"Invalid jitter selector {selector!r}, expected 'true', 'false' or a comma "
                                     f"separated list of dimension indices.") from e
        return JitterPolicy('subset', indices)
    try:
        items = list(selector)
    except TypeError as e:
        raise ConfigurationError(f"Invalid jitter selector {selector!r}.") from e
    indices = []
    for item in items:
        if isinstance(item, (bool, str, float)) or not hasattr(item, '__index__'):
            raise ConfigurationError(f"Invalid jitter selector index {item!r}.")
        indices.append(int(item))
    return JitterPolicy('subset', tuple(indices))
