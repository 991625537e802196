import numpy as np

from bayestree.factor import DiscreteKey


class Signature:
    """
    An explicit specification of a conditional with a single frontal variable:
    the frontal variable, its parents, and a conditional probability table.

    The table is laid out as in most textbooks: its shape is given by the cardinalities
    of the parents (in order), followed by the cardinality of the frontal variable.
    So each "row" table[parent values] holds the distribution of the frontal variable
    for one joint assignment of the parents. Rows are normalized on construction.
    """

    def __init__(self, key: DiscreteKey, parents: list, table):
        """
        key: the frontal variable
        parents: list of DiscreteKey objects, no duplicates
            the order of parents tells which axis of the table is associated with which variable
        table: array-like of non-negative numbers, shape (*parent cardinalities, key cardinality)
            (a flat array or a list of rows with the right number of entries is reshaped)
        """
        self.key = key
        self.parents = tuple(parents)
        keys = [key.key] + [p.key for p in self.parents]
        if len(keys) != len(set(keys)):
            raise ValueError(f"No repetitions allowed among frontal and parents, got {keys}")
        shape = tuple(p.cardinality for p in self.parents) + (key.cardinality,)
        table = np.asarray(table, dtype=float)
        if table.size != int(np.prod(shape, dtype=int)):
            raise ValueError(f"I need a table of shape {shape} but got {table.shape}")
        table = table.reshape(shape)
        if np.any(table < 0):
            raise ValueError("Probability tables must be non-negative")
        totals = np.sum(table, axis=-1, keepdims=True)
        if np.any(totals == 0):
            raise ValueError("Every row of the table needs some positive mass")
        self.table = table / totals

    def discrete_keys(self) -> list:
        """Frontal variable first, then parents"""
        return [self.key] + list(self.parents)

    def cpt(self):
        """
        The table with the frontal axis first and parent axes after it,
        the layout a DiscreteConditional stores.
        """
        return np.moveaxis(self.table, -1, 0)

    def __repr__(self):
        parents = " ".join(str(p.key) for p in self.parents)
        return f"Signature({self.key.key} | {parents})" if parents else f"Signature({self.key.key})"
