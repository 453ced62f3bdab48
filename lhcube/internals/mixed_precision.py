import warnings

import jax
import numpy as np
from jax import numpy as jnp

# Coordinates and stratum widths are computed in double precision, so that the printed precision is not limited by
# float32 rounding.
if not jax.config.read('jax_enable_x64'):
    warnings.warn("JAX x64 is not enabled. Setting it now. Check for errors.")
    jax.config.update('jax_enable_x64', True)

# Create a float scalar to lock in dtype choices.
if jnp.array(1., jnp.float64).dtype != jnp.float64:
    raise RuntimeError("Failed to set float64 as default dtype.")

float_type = jnp.result_type(float)
int_type = jnp.result_type(int)

# Permutation candidates are drawn in the int32 range, which caps the number of strata per dimension.
MAX_POINT_COUNT = int(np.iinfo(np.int32).max)
