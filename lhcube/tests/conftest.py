import matplotlib

matplotlib.use('Agg')

import pytest
from jax import random

from lhcube.config import build_config
from lhcube.generator import generate


@pytest.fixture(scope='package')
def basic_config():
    return build_config(point_count=10, dimension_count=3, scale='0:1', jitter=[1], seed=42)


@pytest.fixture(scope='package')
def basic_sample(basic_config):
    return generate(basic_config, key=random.PRNGKey(42))


@pytest.fixture(scope='package')
def override_sample():
    config = build_config(point_count=20, dimension_count=2, scale=(0., 1.), overrides=['1:10:20'], jitter=True)
    return generate(config, key=random.PRNGKey(0))
