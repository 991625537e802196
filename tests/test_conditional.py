"""
Tests for Signature and DiscreteConditional.
"""

import collections

import numpy as np
import pytest

import bayestree
from bayestree import (
    DiscreteKey,
    TabularFactor,
    Signature,
    DiscreteConditional,
    MissingParentValueError,
    UnsupportedArityError,
)


X = DiscreteKey(0, 2)
Y = DiscreteKey(1, 2)
Z = DiscreteKey(2, 3)


def p_x():
    return DiscreteConditional.from_signature(Signature(X, [], [0.3, 0.7]))


def p_y_given_x():
    return DiscreteConditional.from_signature(Signature(Y, [X], [[0.9, 0.1], [0.2, 0.8]]))


def p_z_given_xy():
    table = [
        [[0.2, 0.3, 0.5], [1.0, 0.0, 0.0]],
        [[0.4, 0.4, 0.2], [0.0, 0.5, 0.5]],
    ]
    return DiscreteConditional.from_signature(Signature(Z, [X, Y], table))


class TestSignature:
    def test_rows_normalized(self):
        sig = Signature(Y, [X], [[1, 3], [2, 2]])
        np.testing.assert_allclose(sig.table, [[0.25, 0.75], [0.5, 0.5]])

    def test_cpt_frontal_axis_first(self):
        sig = Signature(Y, [X], [[0.9, 0.1], [0.2, 0.8]])
        cpt = sig.cpt()
        assert cpt[1, 0] == pytest.approx(0.1)

    def test_wrong_size_raises(self):
        with pytest.raises(ValueError):
            Signature(Y, [X], [0.5, 0.5])

    def test_negative_raises(self):
        with pytest.raises(ValueError):
            Signature(X, [], [-0.5, 1.5])

    def test_zero_row_raises(self):
        with pytest.raises(ValueError):
            Signature(Y, [X], [[0.0, 0.0], [0.5, 0.5]])

    def test_duplicate_key_raises(self):
        with pytest.raises(ValueError):
            Signature(Y, [Y], [[0.5, 0.5], [0.5, 0.5]])


class TestConstruction:
    def test_keys(self):
        c = p_z_given_xy()
        assert c.frontals == (2,)
        assert c.parents == (0, 1)
        assert c.nr_parents == 2
        assert c.first_frontal_key() == 2

    def test_from_joint_normalizes(self):
        # joint over (Y, X), Y frontal
        joint = TabularFactor([Y, X], [[9.0, 2.0], [1.0, 8.0]])
        c = DiscreteConditional(1, joint)
        assert c.is_normalized()
        assert c.evaluate({0: 0, 1: 1}) == pytest.approx(0.1)
        assert c.evaluate({0: 1, 1: 0}) == pytest.approx(0.2)

    def test_from_joint_bad_nr_frontals(self):
        with pytest.raises(ValueError):
            DiscreteConditional(0, TabularFactor([X], [1.0, 1.0]))

    def test_from_marginal(self):
        joint = TabularFactor([X, Y], [[0.27, 0.03], [0.14, 0.56]])
        c = DiscreteConditional.from_marginal(joint, joint.sum_out(1))
        assert c.frontals == (1,)
        assert c.parents == (0,)
        assert c.equals(p_y_given_x(), tol=1e-9)

    def test_from_marginal_ordering(self):
        joint = TabularFactor([X, Y, Z], np.arange(1.0, 13.0).reshape(2, 2, 3))
        marginal = joint.marginalize({0, 1})
        c = DiscreteConditional.from_marginal(joint, marginal, ordering=[1, 2, 0])
        assert c.nr_frontals == 2
        assert c.frontals == (1, 0)
        assert c.parents == (2,)
        plain = DiscreteConditional.from_marginal(joint, marginal)
        assert c.equals(plain)

    def test_from_marginal_needs_a_frontal(self):
        joint = TabularFactor([X], [0.3, 0.7])
        with pytest.raises(ValueError):
            DiscreteConditional.from_marginal(joint, joint)

    def test_table_already_conditional(self):
        table = TabularFactor([Y, X], [[0.9, 0.2], [0.1, 0.8]])
        c = DiscreteConditional(1, table, normalize=False)
        assert c.values is table.values
        assert c.equals(p_y_given_x())

    def test_without_normalizing_keeps_values(self):
        table = TabularFactor([Y, X], [[2.0, 1.0], [2.0, 1.0]])
        assert not DiscreteConditional(1, table, normalize=False).is_normalized()
        assert DiscreteConditional(1, table).is_normalized()

    def test_from_marginal_bad_ordering(self):
        joint = TabularFactor([X, Y], np.ones((2, 2)))
        with pytest.raises(ValueError):
            DiscreteConditional.from_marginal(joint, joint.sum_out(1), ordering=[0, 5])


class TestChoose:
    def test_concrete_scenario(self):
        c = p_y_given_x()
        assert c.choose({0: 0})({1: 1}) == pytest.approx(0.1)
        assert c.choose({0: 1})({1: 1}) == pytest.approx(0.8)

    def test_missing_parent(self):
        with pytest.raises(MissingParentValueError) as info:
            p_y_given_x().choose({})
        assert info.value.key == 0

    def test_missing_parent_is_key_error(self):
        with pytest.raises(KeyError):
            p_z_given_xy().choose({0: 1})

    def test_normalization(self):
        c = p_z_given_xy()
        for x in range(2):
            for y in range(2):
                restricted = c.choose({0: x, 1: y, 42: 0})
                assert restricted.scope == (2,)
                total = sum(restricted({2: z}) for z in range(3))
                assert total == pytest.approx(1.0)

    def test_choose_without_parents(self):
        restricted = p_x().choose({})
        assert restricted({0: 1}) == pytest.approx(0.7)

    def test_choose_as_factor(self):
        f = p_y_given_x().choose_as_factor({0: 1})
        assert isinstance(f, TabularFactor)
        assert f.scope == (1,)
        np.testing.assert_allclose(f.values, [0.2, 0.8])

    def test_evaluate_full_assignment(self):
        c = p_z_given_xy()
        assert c({0: 1, 1: 1, 2: 2}) == pytest.approx(0.5)


def two_frontal_conditional():
    joint = TabularFactor([X, Y, Z], np.arange(1.0, 13.0).reshape(2, 2, 3))
    return DiscreteConditional(2, joint)


class TestArity:
    def test_solve(self):
        with pytest.raises(UnsupportedArityError) as info:
            two_frontal_conditional().solve({2: 0})
        assert info.value.nr_frontals == 2

    def test_sample(self):
        with pytest.raises(UnsupportedArityError):
            two_frontal_conditional().sample({2: 0})

    def test_sample_in_place(self):
        with pytest.raises(UnsupportedArityError):
            two_frontal_conditional().sample_in_place({2: 0})

    def test_choose_as_factor(self):
        with pytest.raises(ValueError):
            two_frontal_conditional().choose_as_factor({2: 0})

    def test_choose_still_works(self):
        restricted = two_frontal_conditional().choose({2: 1})
        assert set(restricted.scope) == {0, 1}


class TestSolve:
    def test_concrete_scenario(self):
        assert p_x().solve({}) == 1

    def test_optimal(self):
        c = p_z_given_xy()
        for x in range(2):
            for y in range(2):
                evidence = {0: x, 1: y}
                best = c.solve(evidence)
                restricted = c.choose(evidence)
                assert all(restricted({2: best}) >= restricted({2: z}) for z in range(3))

    def test_ties_go_to_lowest_value(self):
        c = p_z_given_xy()
        assert c.solve({0: 1, 1: 0}) == 0
        assert c.solve({0: 1, 1: 1}) == 1

    def test_all_zero_returns_zero(self):
        joint = TabularFactor([Y, X], [[0.0, 0.5], [0.0, 0.5]])
        c = DiscreteConditional(1, joint)
        # no mass at all for X=0
        assert c.solve({0: 0}) == 0

    def test_solve_in_place(self):
        values = {0: 1}
        p_y_given_x().solve_in_place(values)
        assert values == {0: 1, 1: 1}

    def test_solve_in_place_multiple_frontals(self):
        c = two_frontal_conditional()
        values = {2: 0}
        c.solve_in_place(values)
        # the largest entry for Z=0 is phi(X=1, Y=1, Z=0) = 10
        assert values == {0: 1, 1: 1, 2: 0}

    def test_solve_in_place_missing_parent(self):
        with pytest.raises(MissingParentValueError):
            p_y_given_x().solve_in_place({})


class TestSample:
    def test_frequency_concrete_scenario(self):
        rng = np.random.default_rng(0)
        c = p_x()
        n = 100_000
        ones = sum(c.sample({}, rng=rng) for _ in range(n))
        assert abs(ones / n - 0.7) < 0.01

    def test_converges_to_restricted_table(self):
        rng = np.random.default_rng(1)
        c = p_z_given_xy()
        n = 20_000
        counts = collections.Counter(c.sample({0: 0, 1: 0}, rng=rng) for _ in range(n))
        for z, p in enumerate([0.2, 0.3, 0.5]):
            assert abs(counts[z] / n - p) < 0.02

    def test_never_samples_zero_probability(self):
        rng = np.random.default_rng(2)
        c = p_z_given_xy()
        samples = {c.sample({0: 1, 1: 1}, rng=rng) for _ in range(2_000)}
        assert samples == {1, 2}

    def test_degenerate_shortcut(self):
        class ExplodingGenerator:
            def choice(self, *args, **kwargs):
                raise AssertionError("the generator should not be consulted")

        c = p_z_given_xy()
        assert c.sample({0: 0, 1: 1}, rng=ExplodingGenerator()) == 0

    def test_deterministic_with_shared_generator(self):
        c = p_z_given_xy()
        bayestree.reseed()
        first = [c.sample({0: 0, 1: 0}) for _ in range(50)]
        bayestree.reseed()
        second = [c.sample({0: 0, 1: 0}) for _ in range(50)]
        assert first == second

    def test_sample_in_place(self):
        values = {0: 1}
        p_y_given_x().sample_in_place(values, rng=np.random.default_rng(3))
        assert set(values) == {0, 1}
        assert values[1] in (0, 1)

    def test_all_zero_raises(self):
        joint = TabularFactor([Y, X], [[0.0, 0.5], [0.0, 0.5]])
        c = DiscreteConditional(1, joint)
        with pytest.raises(ValueError):
            c.sample({0: 0}, rng=np.random.default_rng(0))


class TestEquality:
    def test_equals_itself(self):
        assert p_y_given_x().equals(p_y_given_x())

    def test_not_equal_to_other_types(self):
        assert not p_y_given_x().equals(object())
        assert not p_y_given_x().equals([0.9, 0.1, 0.2, 0.8])

    def test_different_frontals(self):
        joint = TabularFactor([X, Y], np.ones((2, 2)))
        assert not DiscreteConditional(1, joint).equals(DiscreteConditional(2, joint))

    def test_display(self):
        text = p_y_given_x().display(formatter=lambda key: "XY"[key])
        assert text.startswith("P( Y | X )")
        assert "Y=1" in text
