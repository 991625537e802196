"""
Traversals over a forest of cliques.

Cliques only know their children, so every traversal starts from the roots.
Iterative versions are used to avoid Python's recursion limit on deep trees.
"""
from collections import deque


def preorder(roots):
    """
    Yield cliques in root-to-leaf order: a clique always comes before its children,
    and roots (and siblings) are visited in the order given.
    """
    stack = list(reversed(list(roots)))
    while stack:
        clique = stack.pop()
        yield clique
        # push children reversed, so the first child is popped first
        stack.extend(reversed(clique.children))


def postorder(roots):
    """Yield cliques in leaf-to-root order: a clique always comes after all of its children"""
    return reversed(list(_reverse_postorder(roots)))


def _reverse_postorder(roots):
    # a preorder that visits the last child first, reversed, is a postorder
    stack = list(roots)
    while stack:
        clique = stack.pop()
        yield clique
        stack.extend(clique.children)


def depth(roots) -> int:
    """Number of cliques on the longest root-to-leaf path (0 for an empty forest)"""
    deepest = 0
    queue = deque((root, 1) for root in roots)
    while queue:
        clique, d = queue.popleft()
        deepest = max(deepest, d)
        for child in clique.children:
            queue.append((child, d + 1))
    return deepest


def check_is_forest(roots):
    """
    Raise ValueError if some clique is reachable twice from the roots
    (a clique shared between two parents, or listed as a root and as a child).
    """
    seen = set()
    for clique in preorder(roots):
        if id(clique) in seen:
            raise ValueError(f"Clique {clique!r} is reachable more than once, cliques must form a forest")
        seen.add(id(clique))
