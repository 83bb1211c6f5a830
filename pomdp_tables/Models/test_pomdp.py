"""Tests for TabularPOMDP construction from dict models."""

import warnings

import pytest
import numpy as np

from .pomdp import TabularPOMDP, tabular_pomdp_from_dicts


STATES = ["left", "right"]
ACTIONS = ["listen", "open"]
OBSERVATIONS = ["hear_left", "hear_right"]


def tiger_dicts():
    """Two-state listening problem in dict-of-dicts form."""
    T = {
        ("left", "listen"): {"left": 1.0},
        ("right", "listen"): {"right": 1.0},
        ("left", "open"): {"left": 0.5, "right": 0.5},
        ("right", "open"): {"left": 0.5, "right": 0.5},
    }
    P = {
        "left": {"hear_left": 0.85, "hear_right": 0.15},
        "right": {"hear_left": 0.15, "hear_right": 0.85},
    }
    R = {
        ("left", "listen"): -1.0,
        ("right", "listen"): -1.0,
        ("left", "open"): 10.0,
        ("right", "open"): -100.0,
    }
    return T, P, R


@pytest.fixture
def tiger() -> TabularPOMDP:
    T, P, R = tiger_dicts()
    return tabular_pomdp_from_dicts(STATES, ACTIONS, OBSERVATIONS, T, P, R)


class TestTabularPOMDP:
    """Tests for the dict -> table conversion."""

    def test_table_shapes(self, tiger):
        """T, O and R get (|S|,|A|,|S|), (|A|,|S|,|O|) and (|S|,|A|)."""
        assert tiger.T.dims == (2, 2, 2)
        assert tiger.O.dims == (2, 2, 2)
        assert tiger.R.dims == (2, 2)

    def test_transition_entries(self, tiger):
        """Deterministic rows keep a single entry."""
        assert tiger.T.value_at(0, 0, 0) == 1.0
        assert tiger.T.value_at(0, 0, 1) == 0.0
        assert tiger.T.count_non_zero_entries(0, 0) == 1
        assert tiger.T.count_entries() == 6

    def test_observation_repeated_per_action(self, tiger):
        """The action-independent perception model fills every action."""
        for ai in range(len(ACTIONS)):
            assert tiger.O.value_at(ai, 1, 1) == 0.85
            assert tiger.O.value_at(ai, 1, 0) == 0.15

    def test_successors(self, tiger):
        """successors yields labelled next states."""
        assert dict(tiger.successors("left", "open")) == {"left": 0.5, "right": 0.5}
        assert list(tiger.successors("right", "listen")) == [("right", 1.0)]

    def test_observation_likelihoods(self, tiger):
        likelihoods = dict(tiger.observation_likelihoods("listen", "left"))
        assert likelihoods == {"hear_left": 0.85, "hear_right": 0.15}

    def test_reward(self, tiger):
        assert tiger.reward("right", "open") == -100.0
        assert tiger.R.min_value == -100.0
        assert tiger.R.max_value == 10.0

    def test_no_reward(self):
        """Without R the reward is zero everywhere."""
        T, P, _ = tiger_dicts()
        model = tabular_pomdp_from_dicts(STATES, ACTIONS, OBSERVATIONS, T, P)
        assert model.R is None
        assert model.reward("left", "open") == 0.0

    def test_index_maps(self, tiger):
        assert tiger.state_index() == {"left": 0, "right": 1}
        assert tiger.action_index() == {"listen": 0, "open": 1}
        assert tiger.observation_index() == {"hear_left": 0, "hear_right": 1}

    def test_transition_matrix_per_action(self, tiger):
        """slice_matrix on T gives the per-action transition matrix."""
        Tmat = tiger.T.slice_matrix(tiger.action_index()["open"]).toarray()
        assert np.allclose(Tmat, np.full((2, 2), 0.5))
        assert np.allclose(Tmat.sum(axis=1), 1.0)

    def test_unknown_label(self, tiger):
        """Labels outside the declared sets raise ValueError."""
        T, P, _ = tiger_dicts()
        T[("left", "jump")] = {"left": 1.0}
        with pytest.raises(ValueError, match="Unknown action 'jump'"):
            tabular_pomdp_from_dicts(STATES, ACTIONS, OBSERVATIONS, T, P)

        with pytest.raises(ValueError, match="Unknown state 'middle'"):
            list(tiger.successors("middle", "open"))

        P["left"] = {"hear_nothing": 1.0}
        del T[("left", "jump")]
        with pytest.raises(ValueError, match="Unknown observation"):
            tabular_pomdp_from_dicts(STATES, ACTIONS, OBSERVATIONS, T, P)

    def test_valid_model_does_not_warn(self):
        T, P, R = tiger_dicts()
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            tabular_pomdp_from_dicts(STATES, ACTIONS, OBSERVATIONS, T, P, R)

    def test_non_stochastic_rows_warn(self):
        """Rows of T that do not sum to one produce a RuntimeWarning."""
        T, P, _ = tiger_dicts()
        T[("left", "open")] = {"left": 0.5, "right": 0.4}
        with pytest.warns(RuntimeWarning, match="row\\(s\\) of T"):
            tabular_pomdp_from_dicts(STATES, ACTIONS, OBSERVATIONS, T, P)

    def test_validation_can_be_disabled(self):
        T, P, _ = tiger_dicts()
        P["left"] = {"hear_left": 0.2}
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            model = tabular_pomdp_from_dicts(
                STATES, ACTIONS, OBSERVATIONS, T, P, validate=False
            )
        assert model.O.row_sum(0, 0) == 0.2

    def test_zero_probabilities_dropped(self):
        """Explicit zero probabilities are not stored."""
        T, P, _ = tiger_dicts()
        T[("left", "listen")] = {"left": 1.0, "right": 0.0}
        model = tabular_pomdp_from_dicts(STATES, ACTIONS, OBSERVATIONS, T, P)
        assert model.T.count_non_zero_entries(0, 0) == 1
        assert model.T.min_value == 0.0
