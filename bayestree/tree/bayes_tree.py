import functools
import logging

from bayestree.config import EQUALITY_TOL
from bayestree.factor import DiscreteKey, Assignment, TabularFactor, cartesian_product
from bayestree.tree.clique import Clique
from bayestree.tree.traversal import preorder, check_is_forest

logger = logging.getLogger(__name__)


class BayesTree:
    """
    The result of eliminating a discrete factor graph: a forest of cliques whose conditionals
    multiply to the joint distribution
        P(X) = prod_{cliques c} P(F_c | S_c)

    The tree owns its cliques, each clique has exactly one parent (or is a root),
    and nothing is modified after construction, so any number of threads can query it.
    """

    def __init__(self, roots=()):
        """
        roots: an iterable of Clique objects, the roots of the forest (in order)
        """
        self.roots = tuple(roots)
        for root in self.roots:
            if not isinstance(root, Clique):
                raise ValueError(f"Roots must be cliques, got {type(root).__name__}")
        check_is_forest(self.roots)

    def cliques(self):
        """Iterate over all cliques, root-to-leaf (a clique comes before its children)"""
        return preorder(self.roots)

    def __iter__(self):
        return self.cliques()

    def __len__(self):
        """Number of cliques"""
        return sum(1 for _ in self.cliques())

    def conditionals(self):
        """Iterate over the conditionals of all cliques, root-to-leaf"""
        return (clique.conditional for clique in self.cliques())

    def discrete_keys(self) -> list:
        """All variables in the tree (as DiscreteKey objects), in the order cliques define them"""
        cardinalities = dict()
        for conditional in self.conditionals():
            for key in conditional.scope:
                cardinalities.setdefault(key, conditional.cardinality(key))
        return [DiscreteKey(key, card) for key, card in cardinalities.items()]

    def keys(self) -> tuple:
        return tuple(dk.key for dk in self.discrete_keys())

    def evaluate(self, values: dict) -> float:
        """
        Joint probability of a full assignment: the product of each root's subtree evaluation.
        values: must assign every variable in the tree (extra keys are ignored)
        """
        result = 1.0
        for root in self.roots:
            result *= root.evaluate(values)
        return result

    def __call__(self, values: dict) -> float:
        return self.evaluate(values)

    def enumerate_joint_assignments(self):
        """All joint assignments of the variables in the tree"""
        return cartesian_product(self.discrete_keys())

    def to_factor(self) -> TabularFactor:
        """The full joint table, as the product of all conditionals (exponential in the number of variables)"""
        return functools.reduce(lambda a, b: a.product(b), self.conditionals(), TabularFactor([], 1.0))

    def equals(self, other, tol=EQUALITY_TOL) -> bool:
        """Same number of roots and pairwise equal subtrees (conditional tables compared up to tol)"""
        if not isinstance(other, BayesTree):
            return False
        if len(self.roots) != len(other.roots):
            return False
        return all(a.equals(b, tol) for a, b in zip(self.roots, other.roots))

    def _top_down(self, evidence, step) -> Assignment:
        """
        Visit cliques root-to-leaf, and call step(conditional, values) on each clique whose frontals
        are not clamped by evidence; by then values holds every parent value the conditional needs.

        A clamped clique is skipped. That is exact only if all of its ancestors are clamped too,
        otherwise the ancestors would be solved/sampled ignoring evidence below them,
        so we raise ValueError in that case (and when a clique is only partially clamped).
        """
        values = Assignment(evidence) if evidence is not None else Assignment()
        clamped_keys = set(values)
        # (clique, whether some ancestor has free frontals)
        stack = [(root, False) for root in reversed(self.roots)]
        while stack:
            clique, free_above = stack.pop()
            clamped = [key for key in clique.frontals if key in clamped_keys]
            if clamped:
                if len(clamped) != len(clique.frontals):
                    raise ValueError(
                        f"Evidence must assign all or none of the frontals {clique.frontals}, got {clamped}")
                if free_above:
                    raise ValueError(
                        f"Evidence on {clamped} is below free variables; "
                        "it can only be used if every ancestor clique is observed too")
            else:
                step(clique.conditional, values)
                free_above = True
            for child in reversed(clique.children):
                stack.append((child, free_above))
        return values

    def optimize(self, evidence=None) -> Assignment:
        """
        Return an assignment of every variable, solving each clique's conditional top-down
        for its most probable frontal values given the values already fixed above it.

        evidence: optional dict of observed values (see _top_down for where evidence may sit)
        """
        logger.debug("optimize: %d roots, evidence %s", len(self.roots), evidence)
        return self._top_down(evidence, lambda conditional, values: conditional.solve_in_place(values))

    def sample(self, evidence=None, rng=None) -> Assignment:
        """
        Draw an exact sample of every variable given the evidence, sampling each clique's
        conditional top-down given the values already sampled above it.

        evidence: optional dict of observed values (see _top_down for where evidence may sit)
        rng: a numpy random number generator; if None, the shared seeded generator is used
        """
        logger.debug("sample: %d roots, evidence %s", len(self.roots), evidence)
        return self._top_down(evidence, lambda conditional, values: conditional.sample_in_place(values, rng=rng))

    def display(self, formatter=str):
        return "\n".join(root.display(formatter) for root in self.roots)

    def __str__(self):
        return self.display()

    def __repr__(self):
        return f"BayesTree(roots={len(self.roots)}, cliques={len(self)})"
