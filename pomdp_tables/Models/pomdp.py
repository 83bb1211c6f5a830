"""POMDP whose numeric functions are stored in sparse index-keyed tables."""

import warnings
from dataclasses import dataclass, field
from typing import Dict, Tuple, List, Hashable, Iterator, Optional, Mapping

from ..Functions import SparseBinaryFunction, SparseTernaryFunction

State = Hashable
Action = Hashable
Observation = Hashable


@dataclass
class TabularPOMDP:
    """
    Partially Observable Markov Decision Process over indexed tables.

    states       : list of states, state i is states[i]
    actions      : list of actions
    observations : list of observations
    T            : T(s, a, s') = P(s' | s, a),  dims (|S|, |A|, |S|)
    O            : O(a, s', o) = P(o | s', a),  dims (|A|, |S|, |O|)
    R            : R(s, a), dims (|S|, |A|), or None when there is no reward
    """
    states: List[State]
    actions: List[Action]
    observations: List[Observation]
    T: SparseTernaryFunction
    O: SparseTernaryFunction
    R: Optional[SparseBinaryFunction] = None

    _state_idx: Dict[State, int] = field(init=False, repr=False)
    _action_idx: Dict[Action, int] = field(init=False, repr=False)
    _obs_idx: Dict[Observation, int] = field(init=False, repr=False)

    def __post_init__(self):
        self._state_idx = {s: i for i, s in enumerate(self.states)}
        self._action_idx = {a: i for i, a in enumerate(self.actions)}
        self._obs_idx = {o: i for i, o in enumerate(self.observations)}

    def state_index(self) -> Dict[State, int]:
        """Return mapping from state to index."""
        return dict(self._state_idx)

    def action_index(self) -> Dict[Action, int]:
        return dict(self._action_idx)

    def observation_index(self) -> Dict[Observation, int]:
        return dict(self._obs_idx)

    def successors(self, state: State, action: Action) -> Iterator[Tuple[State, float]]:
        """Yield (s', P(s' | s, a)) for every reachable s'."""
        si = _lookup(self._state_idx, state, "state")
        ai = _lookup(self._action_idx, action, "action")
        for k, p in self.T.get_non_zero_entries(si, ai):
            yield self.states[k], p

    def observation_likelihoods(
        self, action: Action, next_state: State
    ) -> Iterator[Tuple[Observation, float]]:
        """Yield (o, P(o | s', a)) for every observation with non-zero probability."""
        ai = _lookup(self._action_idx, action, "action")
        si = _lookup(self._state_idx, next_state, "state")
        for k, p in self.O.get_non_zero_entries(ai, si):
            yield self.observations[k], p

    def reward(self, state: State, action: Action) -> float:
        if self.R is None:
            return 0.0
        return self.R.value_at(
            _lookup(self._state_idx, state, "state"),
            _lookup(self._action_idx, action, "action"),
        )


def _lookup(index: Dict[Hashable, int], label: Hashable, kind: str) -> int:
    try:
        return index[label]
    except KeyError:
        raise ValueError(f"Unknown {kind} {label!r}") from None


def _warn_non_stochastic(name: str, violations, first_labels, second_labels) -> None:
    i, j, total = violations[0]
    warnings.warn(
        f"{len(violations)} row(s) of {name} do not sum to 1 "
        f"(first: ({first_labels[i]!r}, {second_labels[j]!r}) sums to {total:.6g})",
        RuntimeWarning,
    )


def tabular_pomdp_from_dicts(
    states: List[State],
    actions: List[Action],
    observations: List[Observation],
    T: Mapping[Tuple[State, Action], Mapping[State, float]],
    P: Mapping[State, Mapping[Observation, float]],
    R: Optional[Mapping[Tuple[State, Action], float]] = None,
    validate: bool = True,
    tol: float = 1e-9,
) -> TabularPOMDP:
    """
    Build a TabularPOMDP from a dict-of-dicts model.

    Parameters
    ----------
    states, actions, observations : list
        Label sets; list position becomes the table index.
    T : dict
        (s, a) -> {s' -> P(s' | s, a)}
    P : dict
        s' -> {o -> P(o | s')}. The perception model does not depend on the
        action, so O(a, s', o) repeats it for every action.
    R : dict, optional
        (s, a) -> reward.
    validate : bool
        Warn (RuntimeWarning) when rows of T or O are not distributions.
    tol : float
        Tolerance used by validation.

    Returns
    -------
    TabularPOMDP
    """
    states = list(states)
    actions = list(actions)
    observations = list(observations)
    state_idx = {s: i for i, s in enumerate(states)}
    action_idx = {a: i for i, a in enumerate(actions)}
    obs_idx = {o: i for i, o in enumerate(observations)}

    n_s, n_a, n_o = len(states), len(actions), len(observations)

    trans = SparseTernaryFunction((n_s, n_a, n_s))
    for (s, a), row in T.items():
        si = _lookup(state_idx, s, "state")
        ai = _lookup(action_idx, a, "action")
        for s_next, p in row.items():
            trans.set_value(si, ai, _lookup(state_idx, s_next, "state"), p)

    obs = SparseTernaryFunction((n_a, n_s, n_o))
    for s_next, row in P.items():
        si = _lookup(state_idx, s_next, "state")
        for o, p in row.items():
            oi = _lookup(obs_idx, o, "observation")
            for ai in range(n_a):
                obs.set_value(ai, si, oi, p)

    reward = None
    if R is not None:
        reward = SparseBinaryFunction((n_s, n_a))
        for (s, a), r in R.items():
            reward.set_value(
                _lookup(state_idx, s, "state"),
                _lookup(action_idx, a, "action"),
                r,
            )

    if validate:
        violations = trans.stochastic_violations(tol=tol)
        if violations:
            _warn_non_stochastic("T", violations, states, actions)
        violations = obs.stochastic_violations(tol=tol)
        if violations:
            _warn_non_stochastic("O", violations, actions, states)

    return TabularPOMDP(states, actions, observations, trans, obs, reward)
