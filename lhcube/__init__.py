"""Latin Hypercube sampling with JAX."""
from lhcube.config import *
from lhcube.errors import *
from lhcube.formatting import *
from lhcube.generator import *
from lhcube.jitter import *
from lhcube.plotting import *
from lhcube.precision import *
from lhcube.public import *
from lhcube.utils import *
