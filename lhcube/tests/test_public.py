import numpy as np
import pytest
from jax import random

from lhcube import LatinHypercubeSampler, build_config, ConfigurationError


def test_latin_hypercube_sampler(tmp_path):
    output = tmp_path / 'out.csv'
    sampler = LatinHypercubeSampler(point_count=8, dimension_count=2, scale=(0., 1.), jitter=True, output=output)
    assert repr(sampler) == "LatinHypercubeSampler(point_count=8, dimension_count=2, method=shuffle)"
    sample = sampler(random.PRNGKey(42))
    for dim in range(2):
        np.testing.assert_array_equal(np.sort(sample.bins[:, dim]), np.arange(8))
    table = sampler.to_table(sample).getvalue()
    assert table.startswith('dim0,dim1\n')
    assert len(table.splitlines()) == 9
    assert sampler.write(sample) == output
    assert output.read_text() == table
    stats = sampler.statistics(sample)
    assert len(stats) == 2


def test_latin_hypercube_sampler_from_config():
    config = build_config(point_count=5, dimension_count=1, seed=3)
    sampler = LatinHypercubeSampler(config=config)
    assert sampler.config is config
    np.testing.assert_array_equal(sampler().points, sampler().points)


def test_latin_hypercube_sampler_invalid():
    with pytest.raises(ValueError):
        LatinHypercubeSampler(point_count=5)
    with pytest.raises(ValueError):
        LatinHypercubeSampler(point_count=5, dimension_count=1,
                              config=build_config(point_count=5, dimension_count=1))
    with pytest.raises(ConfigurationError):
        LatinHypercubeSampler(point_count=5, dimension_count=1, jitter=[3])
    sampler = LatinHypercubeSampler(point_count=5, dimension_count=1)
    with pytest.raises(ValueError):
        sampler.write(sampler(random.PRNGKey(0)))
