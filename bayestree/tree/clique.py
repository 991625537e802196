from bayestree.config import EQUALITY_TOL
from bayestree.conditional import DiscreteConditional


class Clique:
    """
    A node of a Bayes tree: the conditional P(F | S) produced by one elimination step,
    and the cliques eliminated before it that are conditioned on its variables (its children).

    The parents S of the conditional (the separator) are frontal variables of ancestor cliques.
    Children are fixed at construction; a clique is never modified afterwards.
    """

    def __init__(self, conditional: DiscreteConditional, children=()):
        """
        conditional: the DiscreteConditional of this clique
        children: an iterable of Clique objects (each must belong to this clique only)
        """
        if not isinstance(conditional, DiscreteConditional):
            raise ValueError(f"A clique needs a DiscreteConditional, got {type(conditional).__name__}")
        self.conditional = conditional
        self.children = tuple(children)
        for child in self.children:
            if not isinstance(child, Clique):
                raise ValueError(f"Children must be cliques, got {type(child).__name__}")

    @property
    def frontals(self) -> tuple:
        return self.conditional.frontals

    @property
    def separator(self) -> tuple:
        return self.conditional.parents

    def evaluate(self, values: dict) -> float:
        """
        Probability contributed by the subtree rooted here: this clique's conditional evaluated
        at values, times the evaluation of each child's subtree at the same values.
        values: a full assignment (of at least every variable in the subtree)
        """
        result = self.conditional.evaluate(values)
        for child in self.children:
            result *= child.evaluate(values)
        return result

    def __call__(self, values: dict) -> float:
        return self.evaluate(values)

    def equals(self, other, tol=EQUALITY_TOL) -> bool:
        """Same conditional (up to tol) and equal children, in the same order"""
        if not isinstance(other, Clique):
            return False
        if len(self.children) != len(other.children):
            return False
        if not self.conditional.equals(other.conditional, tol):
            return False
        return all(a.equals(b, tol) for a, b in zip(self.children, other.children))

    def display(self, formatter=str, indent=""):
        """One line per clique of the subtree, children indented under their parent"""
        frontals = " ".join(formatter(key) for key in self.frontals)
        line = f"{indent}P( {frontals} | {' '.join(formatter(key) for key in self.separator)} )" \
            if self.separator else f"{indent}P( {frontals} )"
        lines = [line]
        for child in self.children:
            lines.append(child.display(formatter, indent + "  "))
        return "\n".join(lines)

    def __str__(self):
        return self.display()

    def __repr__(self):
        return f"Clique(frontals={self.frontals}, separator={self.separator}, children={len(self.children)})"
