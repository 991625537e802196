import pandas as pd
import numpy as np
from tabulate import tabulate

from bayestree.factor import TabularFactor
from bayestree.tree import BayesTree


def display_full_table(tree: BayesTree, keys=None, formatter=str, tablefmt='simple'):
    """
    Return a tabulate-formatted string that can be printed to display the whole joint table.

    tree: a BayesTree
    keys: optionally specify the order in which to list variables in the table
    """
    if keys is None:
        keys = tree.keys()
    keys = list(keys)
    table = []
    for assignment in tree.enumerate_joint_assignments():
        table.append([assignment[key] for key in keys] + [tree.evaluate(assignment)])
    return tabulate(table, headers=[formatter(key) for key in keys] + ['P'], tablefmt=tablefmt)


def tree_to_df(tree: BayesTree, keys=None, value_col="Value"):
    """
    Return a pandas DataFrame containing a complete table-view of the joint distribution
    represented by a Bayes tree, one row per joint assignment.

    tree: a BayesTree
    keys: optionally specify the order in which to list variables (columns)
    """
    if keys is None:
        keys = tree.keys()
    keys = list(keys)
    table = []
    for assignment in tree.enumerate_joint_assignments():
        table.append([assignment[key] for key in keys] + [tree.evaluate(assignment)])
    return pd.DataFrame(table, columns=keys + [value_col])


def make_samples_df(samples: list, count_col="Count", prob_col="Value"):
    """
    Return a pandas DataFrame with one row per distinct sampled assignment:
    the variables (one column per key, sorted), how many times it was drawn, and its relative frequency.

    samples: a list of assignments (each a dict), e.g. from BayesTree.sample
    """
    samples_df = pd.DataFrame(samples)
    keys = sorted(samples_df.columns)
    counts = samples_df.groupby(keys).size().reset_index(name=count_col)
    counts[prob_col] = counts[count_col] / len(samples_df)
    return counts


def tvd(p, q, prob_col="Value", count_col="Count"):
    """
    The total variation distance (TVD) between two discrete distributions P and Q over the same variables X:
        1/2 \\sum_{x\\in Val(X)} |P(X=x) - Q(X=x)|

    p and q can be
    - two np.ndarray objects
    - two normalised TabularFactor objects
    - two pd.DataFrame objects, as returned by tree_to_df or make_samples_df (in any combination);
      every column other than prob_col and count_col names a variable,
      and assignments missing from one side have probability 0 there
    """
    if isinstance(p, np.ndarray) and isinstance(q, np.ndarray):
        return 0.5 * np.abs(p - q).sum()
    elif isinstance(p, TabularFactor) and isinstance(q, TabularFactor):
        perm = [q.scope.index(key) for key in p.scope]
        return 0.5 * np.abs(p.values - q.values.transpose(perm)).sum()
    elif isinstance(p, pd.DataFrame) and isinstance(q, pd.DataFrame):
        keys = [c for c in p.columns if c not in (prob_col, count_col)]
        if set(keys) != {c for c in q.columns if c not in (prob_col, count_col)}:
            raise ValueError("Both tables must be over the same variables")
        # P(x) - Q(x), aligned on the assignment x
        diff = p.groupby(keys)[prob_col].sum().sub(q.groupby(keys)[prob_col].sum(), fill_value=0.0)
        return 0.5 * float(diff.abs().sum())
    else:
        raise NotImplementedError("I need np.ndarray objects, or TabularFactor objects, or pd.DataFrame objects")
