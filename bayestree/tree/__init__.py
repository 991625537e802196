from .traversal import preorder, postorder, depth
from .clique import Clique
from .bayes_tree import BayesTree

__all__ = [
    "preorder",
    "postorder",
    "depth",
    "Clique",
    "BayesTree",
]
