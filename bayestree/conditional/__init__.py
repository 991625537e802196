from .signature import Signature
from .conditional import DiscreteConditional

__all__ = [
    "Signature",
    "DiscreteConditional",
]
