__version__ = "0.1.0"
__license__ = "MIT"

from .errors import BayesTreeError, MissingParentValueError, UnsupportedArityError
from .factor import DiscreteKey, Assignment, cartesian_product, TabularFactor
from .conditional import Signature, DiscreteConditional
from .tree import Clique, BayesTree
from .rng import reseed

__all__ = [
    "BayesTreeError",
    "MissingParentValueError",
    "UnsupportedArityError",
    "DiscreteKey",
    "Assignment",
    "cartesian_product",
    "TabularFactor",
    "Signature",
    "DiscreteConditional",
    "Clique",
    "BayesTree",
    "reseed",
]
