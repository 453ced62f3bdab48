from jax import random, numpy as jnp, lax

from lhcube.errors import ConfigurationError
from lhcube.internals.types import IntArray, PRNGKey, FloatArray, int_type, float_type

__all__ = ['range_sequence',
           'shuffle_permutation',
           'rejection_permutation',
           'unique_permutation',
           'quantized_offsets',
           'PERMUTATION_METHODS']

PERMUTATION_METHODS = ('shuffle', 'rejection')

# Jitter is drawn as an integer number of hundredths of a stratum.
JITTER_STEPS = 100


def range_sequence(n: int) -> IntArray:
    """
    The bin indices of one dimension, i.e. [0, 1, ..., n-1].

    Args:
        n: number of strata

    Returns:
        [n] int array
    """
    return jnp.arange(n, dtype=int_type)


def shuffle_permutation(key: PRNGKey, n: int) -> IntArray:
    """
    Uniformly random bijection from point index to bin index, by shuffling the bin indices.

    Args:
        key: PRNGKey
        n: number of strata

    Returns:
        [n] int array, where element i is the bin of point i.
    """
    return random.permutation(key, range_sequence(n))


def rejection_permutation(key: PRNGKey, n: int) -> IntArray:
    """
    Uniformly random bijection from point index to bin index, by rejection sampling.

    For each point in order a candidate bin is drawn uniformly from [0, n), and redrawn while that bin is already
    taken. Costs O(n log n) draws on average, with a long tail as the pool of free bins empties.

    Args:
        key: PRNGKey
        n: number of strata

    Returns:
        [n] int array, where element i is the bin of point i.
    """

    def _draw(key):
        return random.randint(key, (), minval=0, maxval=n, dtype=int_type)

    def body(i, carry):
        (key, consumed, assignment) = carry

        def redraw(state):
            (key, _) = state
            key, draw_key = random.split(key, 2)
            return (key, _draw(draw_key))

        key, draw_key = random.split(key, 2)
        (key, candidate) = lax.while_loop(lambda state: consumed[state[1]],
                                          redraw,
                                          (key, _draw(draw_key)))
        consumed = consumed.at[candidate].set(True)
        assignment = assignment.at[i].set(candidate)
        return (key, consumed, assignment)

    init = (key, jnp.zeros((n,), jnp.bool_), jnp.zeros((n,), int_type))
    (_, _, assignment) = lax.fori_loop(0, n, body, init)
    return assignment


def unique_permutation(key: PRNGKey, n: int, method: str = 'shuffle') -> IntArray:
    """
    Draws the stratum assignment of one dimension.

    Args:
        key: PRNGKey
        n: number of strata
        method: 'shuffle' (O(n)) or 'rejection' (reference rejection sampler)

    Returns:
        [n] int array that is a permutation of 0..n-1

    Raises:
        ConfigurationError: if the method is unknown.
    """
    if method == 'shuffle':
        return shuffle_permutation(key, n)
    if method == 'rejection':
        return rejection_permutation(key, n)
    raise ConfigurationError(f"Unknown permutation method {method!r}, expected one of {PERMUTATION_METHODS}.")


def quantized_offsets(key: PRNGKey, n: int) -> FloatArray:
    """
    Uniform offsets in [0, 1), quantized to hundredths.

    Args:
        key: PRNGKey
        n: number of offsets

    Returns:
        [n] float array
    """
    steps = random.randint(key, (n,), minval=0, maxval=JITTER_STEPS, dtype=int_type)
    return steps.astype(float_type) / JITTER_STEPS
