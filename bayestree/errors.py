"""
Exceptions raised by queries on conditionals and trees.

Both concrete errors also derive from the builtin exception a caller would
expect (KeyError for a missing value, ValueError for a bad arity), so generic
handlers keep working.
"""


class BayesTreeError(Exception):
    """Base class for errors raised by bayestree queries."""


class MissingParentValueError(BayesTreeError, KeyError):
    """A conditional was queried with evidence that does not assign one of its parents."""

    def __init__(self, key, parents_values=None):
        self.key = key
        self.parents_values = dict(parents_values) if parents_values is not None else None
        super().__init__(key)

    def __str__(self):
        return f"parent value missing for key {self.key} (evidence: {self.parents_values})"


class UnsupportedArityError(BayesTreeError, ValueError):
    """The operation only supports conditionals with exactly one frontal variable."""

    def __init__(self, operation: str, nr_frontals: int):
        self.operation = operation
        self.nr_frontals = nr_frontals
        super().__init__(
            f"{operation} expects exactly one frontal variable, got {nr_frontals}"
        )
