import logging
import numpy as np
from tabulate import tabulate

from bayestree.config import EQUALITY_TOL, NORMALIZATION_TOL
from bayestree.errors import MissingParentValueError, UnsupportedArityError
from bayestree.factor import DiscreteKey, TabularFactor, cartesian_product
from bayestree.conditional.signature import Signature
from bayestree.rng import draw_categorical

logger = logging.getLogger(__name__)


class DiscreteConditional(TabularFactor):
    """
    A conditional distribution P(F | S) over frontal variables F given parent variables S,
    stored as a TabularFactor whose scope lists the frontals first and the parents after them.

    For every joint assignment of the parents, the table sums to 1.0 over the frontals
    (or to 0.0, for parent assignments that had no mass in the joint it was built from).

    Conditionals are built once and never modified, so they can be shared freely.
    Queries given parent values (choose, solve, sample, choose_as_factor) all go through
    the same restriction step, which fixes the parents one at a time.
    solve and sample only handle a single frontal variable.
    """

    def __init__(self, nr_frontals: int, joint: TabularFactor, normalize=True):
        """
        nr_frontals: how many of the joint's leading keys are frontal variables
        joint: a factor over (frontals..., parents...)
        normalize: if True, the joint is divided by its marginal over the parents;
            pass False when the table already is a conditional
        """
        if not 0 < nr_frontals <= joint.size():
            raise ValueError(f"I need between 1 and {joint.size()} frontals, got {nr_frontals}")
        table = joint.divide(joint.sum(nr_frontals)) if normalize else joint
        super().__init__(table.discrete_keys(), table.values)
        self.nr_frontals = nr_frontals
        logger.debug("built %r", self)

    @classmethod
    def from_marginal(cls, joint: TabularFactor, marginal: TabularFactor, ordering=None) -> 'DiscreteConditional':
        """
        Build P(F | S) = P(F, S) / P(S).

        joint: a factor over F and S
        marginal: a factor over S (a strict subset of the joint's scope, F must not be empty)
        ordering: optionally, an ordering of all keys in the joint used to re-key the stored order;
            frontals are kept ahead of parents, each group sorted by its position in the ordering.
            This only affects iteration and printing, not the distribution.
        """
        frontals = [key for key in joint.scope if key not in marginal]
        parents = [key for key in marginal.scope]
        if not frontals:
            raise ValueError(f"I need between 1 and {joint.size()} frontals, got 0")
        conditional = joint.divide(marginal)
        if ordering is not None:
            ordering = list(ordering)
            if sorted(ordering) != sorted(joint.scope):
                raise ValueError(f"I need an ordering of the keys {joint.scope}, got {ordering}")
            position = {key: i for i, key in enumerate(ordering)}
            frontals.sort(key=position.get)
            parents.sort(key=position.get)
        return cls(len(frontals), conditional.transpose(frontals + parents), normalize=False)

    @classmethod
    def from_signature(cls, signature: Signature) -> 'DiscreteConditional':
        """Build a conditional with a single frontal variable from an explicit Signature"""
        return cls(1, TabularFactor(signature.discrete_keys(), signature.cpt()), normalize=False)

    @property
    def frontals(self) -> tuple:
        return self.scope[:self.nr_frontals]

    @property
    def parents(self) -> tuple:
        return self.scope[self.nr_frontals:]

    @property
    def nr_parents(self) -> int:
        return len(self.scope) - self.nr_frontals

    def first_frontal_key(self):
        return self.scope[0]

    def frontal_keys(self) -> list:
        """The frontal variables as DiscreteKey objects"""
        return [DiscreteKey(key, self.cardinalities[key]) for key in self.frontals]

    def is_normalized(self, tol=NORMALIZATION_TOL) -> bool:
        """
        Check the table sums to 1.0 over the frontals for every parent assignment
        (parent assignments without any mass, which sum to 0.0, are accepted too).
        """
        totals = np.sum(self.values, axis=tuple(range(self.nr_frontals)))
        return bool(np.all((np.abs(totals - 1.0) <= tol) | (totals == 0)))

    def _restrict_parents(self, parents_values: dict) -> TabularFactor:
        """
        Go down the table one parent at a time, fixing it to its value in parents_values.
        The result is a factor over the frontals only.
        """
        # the table keeps getting smaller
        restricted = TabularFactor(self.discrete_keys(), self.values)
        for key in self.parents:
            if key not in parents_values:
                logger.debug("choose: key %s missing from parents values %s", key, dict(parents_values))
                raise MissingParentValueError(key, parents_values)
            restricted = restricted.restrict(key, parents_values[key])
        return restricted

    def _check_single_frontal(self, operation: str):
        if self.nr_frontals != 1:
            raise UnsupportedArityError(operation, self.nr_frontals)

    def choose(self, parents_values: dict) -> TabularFactor:
        """
        Return the factor P(F | S=parents_values) over the frontals.

        parents_values: must assign every parent (irrelevant keys are ignored),
            otherwise MissingParentValueError is raised
        """
        return self._restrict_parents(parents_values)

    def choose_as_factor(self, parents_values: dict) -> TabularFactor:
        """
        Like choose, but only for a single frontal variable: the result is an ordinary
        factor keyed by that frontal variable, to be used as an unconditioned table.
        """
        self._check_single_frontal("choose_as_factor")
        return self._restrict_parents(parents_values)

    def _frontal_probabilities(self, parents_values: dict):
        """Values of P(F=value | S=parents_values) for value = 0, 1, ... (single frontal only)"""
        restricted = self._restrict_parents(parents_values)
        key = self.first_frontal_key()
        return [restricted.evaluate({key: value}) for value in range(self.cardinalities[key])]

    def solve(self, parents_values: dict) -> int:
        """
        Return the value of the (single) frontal variable with maximum probability given the parents.
        Values are visited in increasing order and only a strictly better value replaces the
        current best, so ties go to the lowest value, and an all-zero table returns 0.
        """
        self._check_single_frontal("solve")
        mpe = 0
        max_p = 0.0
        for value, p in enumerate(self._frontal_probabilities(parents_values)):
            # update the solution if strictly better
            if p > max_p:
                max_p = p
                mpe = value
        return mpe

    def sample(self, parents_values: dict, rng=None) -> int:
        """
        Sample a value of the (single) frontal variable from P(F | S=parents_values).

        If some value has probability exactly 1.0 it is returned straight away,
        without drawing from the generator.

        rng: a numpy random number generator;
            if None, the shared generator (seeded with a fixed seed on first use) is used
        """
        self._check_single_frontal("sample")
        key = self.first_frontal_key()
        restricted = self._restrict_parents(parents_values)
        p = np.zeros(self.cardinalities[key])
        for value in range(len(p)):
            p[value] = restricted.evaluate({key: value})
            if p[value] == 1.0:
                return value  # shortcut exit
        return draw_categorical(p, rng=rng)

    def solve_in_place(self, values: dict):
        """
        Read the parents from values, and write into values the joint assignment of the frontals
        with maximum probability. All frontal configurations are enumerated (first frontal varying
        fastest) and only a strictly better one replaces the current best, so this also works for
        several frontals; if all configurations have probability 0, all frontals are set to 0.
        """
        restricted = self._restrict_parents(values)
        mpe = None
        max_p = 0.0
        for frontal_values in cartesian_product(self.frontal_keys()):
            p = restricted.evaluate(frontal_values)
            if p > max_p:
                max_p = p
                mpe = frontal_values
        for key in self.frontals:
            values[key] = mpe[key] if mpe is not None else 0

    def sample_in_place(self, values: dict, rng=None):
        """Read the parents from values, sample the (single) frontal variable and store it in values"""
        self._check_single_frontal("sample_in_place")
        values[self.first_frontal_key()] = self.sample(values, rng=rng)

    def equals(self, other, tol=EQUALITY_TOL) -> bool:
        """
        Table equality with tolerance. Anything that is not a table compares unequal;
        when the other object is a conditional its frontals must match too.
        """
        if not isinstance(other, TabularFactor):
            return False
        if isinstance(other, DiscreteConditional) and set(other.frontals) != set(self.frontals):
            return False
        return super().equals(other, tol)

    def display(self, formatter=str, tablefmt="simple"):
        """
        Render the conditional for visualisation using tabulate:
        a 'P( F | S )' header and, for a single frontal, one row per joint assignment
        of the parents with the distribution of the frontal variable across columns.
        """
        frontals = " ".join(formatter(key) for key in self.frontals)
        if self.parents:
            header = f"P( {frontals} | {' '.join(formatter(key) for key in self.parents)} )"
        else:
            header = f"P( {frontals} )"
        if self.nr_frontals != 1:
            return header + "\n" + super().display(formatter, tablefmt, factor_name="P")
        key = self.first_frontal_key()
        card = self.cardinalities[key]
        par_names = [formatter(p) for p in self.parents]
        columns = [f"{formatter(key)}={value}" for value in range(card)]
        # move the frontal axis last, so each row of the reshaped table is one distribution
        rows = np.moveaxis(self.values, 0, -1).reshape(-1, card)
        parent_keys = [DiscreteKey(p, self.cardinalities[p]) for p in self.parents]
        # C order enumerates parent assignments with the last parent varying fastest
        contexts = [[a[p] for p in self.parents] for a in cartesian_product(parent_keys[::-1])]
        data = [ctxt + row.tolist() for ctxt, row in zip(contexts, rows)]
        return header + "\n" + tabulate(data, headers=par_names + columns, tablefmt=tablefmt)

    def __repr__(self):
        return f"DiscreteConditional(frontals={self.frontals}, parents={self.parents})"
