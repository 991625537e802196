from .assignment import DiscreteKey, Assignment, cartesian_product
from .factor import TabularFactor

__all__ = [
    "DiscreteKey",
    "Assignment",
    "cartesian_product",
    "TabularFactor",
]
