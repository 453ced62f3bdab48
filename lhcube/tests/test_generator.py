import numpy as np
import pytest
from jax import random, numpy as jnp

import lhcube.generator
from lhcube.config import build_config
from lhcube.errors import GenerationError
from lhcube.generator import SampleGenerator, generate, clock_seed


def _unjittered(sample):
    return sample.lower[None, :] + sample.bins * sample.widths[None, :]


@pytest.mark.parametrize('method', ['shuffle', 'rejection'])
@pytest.mark.parametrize('point_count, dimension_count', [(1, 1), (2, 3), (10, 4), (257, 2)])
def test_stratification(method, point_count, dimension_count):
    config = build_config(point_count=point_count, dimension_count=dimension_count, jitter=True,
                          permutation_method=method)
    sample = generate(config, key=random.PRNGKey(point_count))
    assert sample.points.shape == (point_count, dimension_count)
    assert sample.bins.shape == (point_count, dimension_count)
    for dim in range(dimension_count):
        np.testing.assert_array_equal(np.sort(sample.bins[:, dim]), np.arange(point_count))
        # Every point sits in its assigned stratum
        strata = np.floor((sample.points[:, dim] - sample.lower[dim]) / sample.widths[dim] + 1e-9)
        np.testing.assert_array_equal(strata, sample.bins[:, dim])


def test_bounds_containment(basic_sample, override_sample):
    for sample in [basic_sample, override_sample]:
        assert np.all(sample.points >= sample.lower[None, :])
        assert np.all(sample.points < sample.upper[None, :])


@pytest.mark.parametrize('seed', range(8))
def test_bounds_containment_near_float_spacing(seed):
    # A stratum only a few ulps wide, where (bin + offset) * width + lower can round onto upper
    config = build_config(point_count=1, dimension_count=1, scale=(1e10, 1e10 + 4e-6), jitter=True)
    sample = generate(config, key=random.PRNGKey(seed))
    assert np.all(sample.points >= sample.lower[None, :])
    assert np.all(sample.points < sample.upper[None, :])
    np.testing.assert_array_equal(sample.bins, [[0]])


def test_jitter_suppression():
    config = build_config(point_count=50, dimension_count=3, scale='-1:1', jitter='false')
    sample = generate(config, key=random.PRNGKey(1))
    np.testing.assert_allclose(sample.points, _unjittered(sample), rtol=0., atol=1e-12)


def test_jitter_selectivity(basic_sample):
    # Only dimension 1 is jittered
    unjittered = _unjittered(basic_sample)
    np.testing.assert_allclose(basic_sample.points[:, 0], unjittered[:, 0], rtol=0., atol=1e-12)
    np.testing.assert_allclose(basic_sample.points[:, 2], unjittered[:, 2], rtol=0., atol=1e-12)
    offsets = (basic_sample.points[:, 1] - unjittered[:, 1]) / basic_sample.widths[1]
    assert np.all(offsets >= -1e-9)
    assert np.all(offsets < 1.)
    np.testing.assert_array_equal(basic_sample.jitter, [False, True, False])


def test_jitter_is_applied():
    config = build_config(point_count=50, dimension_count=1, scale='0:1', jitter=True)
    sample = generate(config, key=random.PRNGKey(2))
    offsets = (sample.points[:, 0] - _unjittered(sample)[:, 0]) / sample.widths[0]
    assert np.any(offsets > 0.005)
    # hundredths of a stratum
    np.testing.assert_allclose(offsets * 100, np.round(offsets * 100), atol=1e-6)


def test_five_points_unit_interval():
    config = build_config(point_count=5, dimension_count=1, scale='0:1', jitter='false')
    sample = generate(config, key=random.PRNGKey(5))
    np.testing.assert_allclose(np.sort(sample.points[:, 0]), [0., 0.2, 0.4, 0.6, 0.8], atol=1e-12)
    assert sample.precisions == (3,)


def test_single_point():
    config = build_config(point_count=1, dimension_count=1, scale='3:7')
    sample = generate(config, key=random.PRNGKey(0))
    assert sample.points.shape == (1, 1)
    assert sample.points[0, 0] == 3.
    jittered = generate(build_config(point_count=1, dimension_count=1, scale='3:7', jitter=True),
                        key=random.PRNGKey(0))
    assert 3. <= jittered.points[0, 0] < 7.


def test_per_dimension_overrides(override_sample):
    assert np.all(override_sample.points[:, 0] >= 0.)
    assert np.all(override_sample.points[:, 0] < 1.)
    assert np.all(override_sample.points[:, 1] >= 10.)
    assert np.all(override_sample.points[:, 1] < 20.)


def test_zero_width_dimension():
    config = build_config(point_count=4, dimension_count=2, overrides=['1:2.5:2.5'], jitter=True)
    sample = generate(config, key=random.PRNGKey(0))
    np.testing.assert_array_equal(sample.points[:, 1], 2.5)
    np.testing.assert_array_equal(np.sort(sample.bins[:, 1]), np.arange(4))


@pytest.mark.parametrize('method', ['shuffle', 'rejection'])
def test_same_key_same_sample(method):
    config = build_config(point_count=30, dimension_count=3, jitter=True, permutation_method=method)
    sample1 = generate(config, key=random.PRNGKey(11))
    sample2 = SampleGenerator(config)(random.PRNGKey(11))
    np.testing.assert_array_equal(sample1.points, sample2.points)
    np.testing.assert_array_equal(sample1.bins, sample2.bins)
    sample3 = generate(config, key=random.PRNGKey(12))
    assert not np.array_equal(sample1.bins, sample3.bins)


def test_seeded_config_is_reproducible():
    config = build_config(point_count=30, dimension_count=2, jitter=True, seed=123)
    np.testing.assert_array_equal(generate(config).points, generate(config).points)


def test_clock_seed_range():
    seed = clock_seed()
    assert 0 <= seed < 2 ** 32
    assert build_config(point_count=2, dimension_count=1, seed=seed).seed == seed


def test_clock_seeded_generation():
    config = build_config(point_count=30, dimension_count=2)
    sample = generate(config)
    for dim in range(2):
        np.testing.assert_array_equal(np.sort(sample.bins[:, dim]), np.arange(30))


def test_dimensions_are_independent():
    config = build_config(point_count=100, dimension_count=2)
    sample = generate(config, key=random.PRNGKey(0))
    assert not np.array_equal(sample.bins[:, 0], sample.bins[:, 1])


def test_sample_metadata(basic_config, basic_sample):
    assert basic_sample.point_count == 10
    assert basic_sample.dimension_count == 3
    assert basic_sample.headings == basic_config.headings
    assert basic_sample.precisions == tuple(d.precision for d in basic_config.dimensions)
    np.testing.assert_allclose(basic_sample.widths, 0.1)


def test_non_permutation_raises(monkeypatch):
    monkeypatch.setattr(lhcube.generator, 'unique_permutation',
                        lambda key, n, method: jnp.zeros((n,), jnp.int64))
    config = build_config(point_count=3, dimension_count=2)
    with pytest.raises(GenerationError):
        generate(config, key=random.PRNGKey(0))


def test_arithmetic_error_raises(monkeypatch):
    def _fail(key, n, method):
        raise FloatingPointError("overflow")

    monkeypatch.setattr(lhcube.generator, 'unique_permutation', _fail)
    config = build_config(point_count=3, dimension_count=2)
    with pytest.raises(GenerationError):
        generate(config, key=random.PRNGKey(0))
