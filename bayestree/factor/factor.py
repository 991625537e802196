from collections import OrderedDict
import string
import numpy as np
from tabulate import tabulate

from bayestree.config import EQUALITY_TOL
from bayestree.factor.assignment import DiscreteKey, cartesian_product


def _align(values, scope: tuple, target_scope: tuple):
    """
    Return a view of `values` (whose axes follow `scope`) that broadcasts against
    a tensor whose axes follow `target_scope`.
    Every key in scope must be in target_scope; missing keys become singleton axes.
    """
    if scope == target_scope:
        return values
    pos = {key: axis for axis, key in enumerate(scope)}
    # move existing axes into the order in which they appear in the target
    perm = [pos[key] for key in target_scope if key in pos]
    transposed = np.transpose(values, axes=perm) if perm else values
    # then insert singleton axes for the keys this tensor does not have
    shape = [values.shape[pos[key]] if key in pos else 1 for key in target_scope]
    return transposed.reshape(tuple(shape))


class TabularFactor:
    """
    A non-negative function of a set of discrete variables stored as a dense numpy array.

    Each variable in `scope` takes integer values starting from 0, and the array
    has one axis per variable (in scope order) whose size is the variable's cardinality.

    Factors are never modified in place: restrict, product, divide and the summations
    return new factors, so the same array can be shared by any number of factors.
    """

    def __init__(self, discrete_keys: list, values):
        """
        discrete_keys: list of DiscreteKey objects
            the axes of the values tensor are aligned with the variables in the same
            order as they appear in this list
        values: array-like with shape matching the cardinalities of the variables
            (a flat array with the right number of entries is reshaped)
        """
        discrete_keys = list(discrete_keys)
        scope = tuple(dk.key for dk in discrete_keys)
        if len(scope) != len(set(scope)):
            raise ValueError(f"No repetitions allowed in scope, got {scope}")
        # while the scope is treated as a set, it has to be treated as a sequence for the axes
        self.scope = scope
        self.cardinalities = OrderedDict((dk.key, dk.cardinality) for dk in discrete_keys)
        self.key2axis = {key: axis for axis, key in enumerate(scope)}
        shape = tuple(self.cardinalities.values())
        values = np.asarray(values, dtype=float)
        if values.shape != shape:
            if values.size != int(np.prod(shape, dtype=int)):
                raise ValueError(f"I need a table of shape {shape} but got {values.shape}")
            values = values.reshape(shape)
        self.values = values

    def __contains__(self, key):
        return key in self.key2axis

    def __iter__(self):
        return iter(self.scope)

    def keys(self) -> tuple:
        """The keys in scope, in axis order"""
        return self.scope

    def discrete_keys(self) -> list:
        """The variables in scope as DiscreteKey objects, in axis order"""
        return [DiscreteKey(key, card) for key, card in self.cardinalities.items()]

    def cardinality(self, key) -> int:
        return self.cardinalities[key]

    def size(self) -> int:
        """Number of variables in scope"""
        return len(self.scope)

    def evaluate(self, assignment: dict) -> float:
        """
        Evaluate the factor given values for all variables in its scope.
        Variables outside the scope are ignored; a missing variable raises KeyError.
        """
        # this operation is only possible if the assignment is complete,
        # otherwise the user should be using restrict (which returns a factor)
        idx = tuple(self._check_value(key, assignment[key]) for key in self.scope)
        return float(self.values[idx])

    def __call__(self, assignment: dict) -> float:
        return self.evaluate(assignment)

    def _check_value(self, key, value) -> int:
        if not 0 <= value < self.cardinalities[key]:
            raise ValueError(
                f"Value {value} out of range for key {key} with cardinality {self.cardinalities[key]}")
        return int(value)

    def restrict(self, key, value) -> 'TabularFactor':
        """
        Fix one variable to a value, returning a new TabularFactor without that variable.
        If the variable is not in scope, we simply return the factor itself.

        Example:
            φ(A, B, C)  --restrict B=1-->  φ'(A, C) = φ(A, B=1, C)
        """
        if key not in self:
            return self
        axis = self.key2axis[key]
        new_values = np.take(self.values, self._check_value(key, value), axis=axis)
        remaining = [dk for dk in self.discrete_keys() if dk.key != key]
        return TabularFactor(remaining, new_values)

    def marginalize(self, keys_to_sum_out) -> 'TabularFactor':
        """
        Sum out (marginalize) the given variables from this factor,
        returning a new TabularFactor over the remaining variables.
        Variables not in scope are ignored.
        """
        keys_to_sum_out = set(keys_to_sum_out) & set(self.scope)
        if not keys_to_sum_out:
            return self
        axes = tuple(self.key2axis[key] for key in keys_to_sum_out)
        new_values = np.sum(self.values, axis=axes)
        remaining = [dk for dk in self.discrete_keys() if dk.key not in keys_to_sum_out]
        return TabularFactor(remaining, new_values)

    def sum_out(self, key) -> 'TabularFactor':
        """Sum out a single variable"""
        return self.marginalize({key})

    def sum(self, nr_keys: int) -> 'TabularFactor':
        """
        Sum out the first nr_keys variables of the scope.
        For a joint over (frontals..., parents...) this yields the marginal over the parents.
        """
        return self.marginalize(self.scope[:nr_keys])

    def product(self, other: 'TabularFactor') -> 'TabularFactor':
        """
        Multiply two tabular factors returning a new TabularFactor object with
        a new scope. When factors' scopes overlap, the shared axes are aligned.

        Example:
            φ1(A, B) × φ2(B, C)  →  φ3(A, B, C)
            Einsum pattern: 'ab,bc->abc'
        """
        # combined scope, in order of first appearance
        cardinalities = OrderedDict(self.cardinalities)
        for key, card in other.cardinalities.items():
            if key in cardinalities and cardinalities[key] != card:
                raise ValueError(f"Cardinality mismatch for key {key}: {cardinalities[key]} vs {card}")
            cardinalities[key] = card
        all_keys = list(cardinalities)
        if len(all_keys) > len(string.ascii_letters):
            # einsum runs out of labels, broadcasting does the same job
            new_values = _align(self.values, self.scope, tuple(all_keys)) * \
                _align(other.values, other.scope, tuple(all_keys))
        else:
            # each variable (axis) gets a unique letter label
            key_to_letter = {key: string.ascii_letters[i] for i, key in enumerate(all_keys)}
            idx_self = ''.join(key_to_letter[key] for key in self.scope)
            idx_other = ''.join(key_to_letter[key] for key in other.scope)
            idx_out = ''.join(key_to_letter[key] for key in all_keys)
            # every label appears in the output, so einsum only multiplies (nothing is summed)
            new_values = np.einsum(f"{idx_self},{idx_other}->{idx_out}", self.values, other.values)
        return TabularFactor([DiscreteKey(key, card) for key, card in cardinalities.items()], new_values)

    def __mul__(self, other: 'TabularFactor') -> 'TabularFactor':
        return self.product(other)

    def divide(self, other: 'TabularFactor') -> 'TabularFactor':
        """
        Divide this factor by another whose scope is a subset of this one's,
        returning a new factor over this factor's scope.
        Entries whose denominator is 0 are set to 0.

        Example:
            φ(A, B) / ψ(B)  →  φ'(A, B) = φ(A, B) / ψ(B)
        """
        if not set(other.scope) <= set(self.scope):
            raise ValueError(f"I can only divide by a factor over a subset of {self.scope}, got {other.scope}")
        for key in other.scope:
            if other.cardinalities[key] != self.cardinalities[key]:
                raise ValueError(f"Cardinality mismatch for key {key}")
        denominator = np.broadcast_to(_align(other.values, other.scope, self.scope), self.values.shape)
        new_values = np.divide(
            self.values, denominator, out=np.zeros(self.values.shape), where=denominator != 0)
        return TabularFactor(self.discrete_keys(), new_values)

    def __truediv__(self, other: 'TabularFactor') -> 'TabularFactor':
        return self.divide(other)

    def transpose(self, keys) -> 'TabularFactor':
        """Return the same factor with its axes in the order given by keys (a permutation of the scope)"""
        keys = tuple(keys)
        if sorted(keys) != sorted(self.scope):
            raise ValueError(f"I need a permutation of {self.scope}, got {keys}")
        perm = [self.key2axis[key] for key in keys]
        return TabularFactor(
            [DiscreteKey(key, self.cardinalities[key]) for key in keys], np.transpose(self.values, perm))

    def equals(self, other, tol=EQUALITY_TOL) -> bool:
        """
        Return True if other is a TabularFactor over the same variables (in any axis order)
        whose values differ from ours by at most tol.
        Anything that is not a TabularFactor compares unequal.
        """
        if not isinstance(other, TabularFactor):
            return False
        if set(self.scope) != set(other.scope):
            return False
        if any(self.cardinalities[key] != other.cardinalities[key] for key in self.scope):
            return False
        other_values = _align(other.values, other.scope, self.scope)
        return bool(np.all(np.abs(self.values - other_values) <= tol))

    def display(self, formatter=str, tablefmt="simple", factor_name="Value"):
        """Render the TabularFactor as a string for visualisation using tabulate"""
        data = []
        headers = [formatter(key) for key in self.scope]
        for assignment in cartesian_product(self.discrete_keys()):
            data.append([assignment[key] for key in self.scope] + [self.evaluate(assignment)])
        return tabulate(data, headers=headers + [factor_name], tablefmt=tablefmt)

    def __str__(self):
        return self.display()

    def __repr__(self):
        return f"TabularFactor(scope={self.scope}, shape={self.values.shape})"
