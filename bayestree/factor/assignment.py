import itertools
from tabulate import tabulate


class DiscreteKey:
    """
    A discrete random variable: an integer key and the number of values it can take.

    Values are 0-based ids, so the outcome space of a variable with cardinality k is range(k).
    Dense tables use these ids directly as indices along the axis associated with the variable.
    """

    def __init__(self, key: int, cardinality: int):
        """
        key: an integer naming the variable
        cardinality: the number of values the variable can take (at least 1)
        """
        if cardinality < 1:
            raise ValueError(f"I need a positive cardinality for key {key}, got {cardinality}")
        self.key = int(key)
        self.cardinality = int(cardinality)

    def __len__(self):
        """Return the number of values"""
        return self.cardinality

    def __iter__(self):
        """Iterate over values"""
        return iter(range(self.cardinality))

    def __contains__(self, value):
        """Check if a value is in range for this variable"""
        return 0 <= value < self.cardinality

    def __eq__(self, other):
        if not isinstance(other, DiscreteKey):
            return NotImplemented
        return self.key == other.key and self.cardinality == other.cardinality

    def __hash__(self):
        return hash((self.key, self.cardinality))

    def __repr__(self):
        return f"DiscreteKey({self.key}, {self.cardinality})"


class Assignment(dict):
    """
    A mapping from variable keys to value ids.

    It may hold a full joint instantiation, partial evidence, or the partial solution
    built by a top-down pass over a Bayes tree. Values are not range-checked here,
    lookups into tables fail if a value is out of range.
    """

    def restricted_to(self, keys) -> 'Assignment':
        """Return a new Assignment holding only the given keys (those present)"""
        return Assignment((key, self[key]) for key in keys if key in self)

    def display(self, formatter=str, tablefmt="simple"):
        """Render the assignment as a two-column table using tabulate"""
        rows = [[formatter(key), value] for key, value in sorted(self.items())]
        return tabulate(rows, headers=["key", "value"], tablefmt=tablefmt)

    def __repr__(self):
        return f"Assignment({dict.__repr__(self)})"


def cartesian_product(discrete_keys) -> list:
    """
    Return all joint assignments of the given variables, as a list of Assignment objects.

    The first key varies fastest:
        cartesian_product([DiscreteKey(0, 2), DiscreteKey(1, 2)])
        -> {0: 0, 1: 0}, {0: 1, 1: 0}, {0: 0, 1: 1}, {0: 1, 1: 1}
    """
    discrete_keys = list(discrete_keys)
    # itertools.product varies the last iterable fastest, so we feed keys in reverse
    reversed_keys = discrete_keys[::-1]
    assignments = []
    for values in itertools.product(*(range(dk.cardinality) for dk in reversed_keys)):
        assignments.append(Assignment((dk.key, v) for dk, v in zip(reversed_keys, values)))
    return assignments
