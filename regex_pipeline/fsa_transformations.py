import logging
from collections import deque
from typing import Dict, FrozenSet, Iterable, Optional, Union
from .automaton import Automaton, State, EPSILON
from .errors import AutomatonTooLargeError

logger = logging.getLogger(__name__)

StateSet = FrozenSet[int]


def _as_state_set(states: Union[int, Iterable[int]]) -> StateSet:
    if isinstance(states, int):
        return frozenset((states,))
    return frozenset(states)


def epsilon_closure(automaton: Automaton, states: Union[int, Iterable[int]]) -> StateSet:
    """
    Compute the epsilon closure of a state or a set of states.

    Args:
        automaton: The automaton whose epsilon edges are followed
        states: A state id or an iterable of state ids

    Returns:
        The smallest set containing ``states`` that is closed under epsilon edges
    """
    closure = set(_as_state_set(states))
    stack = list(closure)

    while stack:
        current = stack.pop()
        for target in automaton.targets(current, EPSILON):
            if target not in closure:
                closure.add(target)
                stack.append(target)

    return frozenset(closure)


def move(automaton: Automaton, states: Union[int, Iterable[int]], symbol: str) -> StateSet:
    """Compute all states reachable from the given states on one ``symbol`` edge."""
    result = set()
    for state in _as_state_set(states):
        result.update(automaton.targets(state, symbol))
    return frozenset(result)


def remove_epsilons(enfa: Automaton) -> Automaton:
    """
    Convert an epsilon-NFA into an equivalent NFA without epsilon transitions.

    For every state q and symbol a the new transitions are
    closure(move(closure(q), a)), and q accepts iff closure(q) contains an
    accepting state. State ids and the start state are carried over; the
    returned automaton owns fresh State objects.
    """
    nfa = Automaton()
    closures = {state_id: epsilon_closure(enfa, state_id) for state_id in sorted(enfa.states)}
    enfa_accepting = enfa.accept_states

    for state_id, closure in closures.items():
        old = enfa.state(state_id)
        nfa.add_state(State(state_id, old.label, bool(closure & enfa_accepting)))

    nfa.set_start(enfa.start_state)
    alphabet = enfa.sorted_alphabet()

    for state_id, closure in closures.items():
        for symbol in alphabet:
            targets = epsilon_closure(enfa, move(enfa, closure, symbol))
            for target in sorted(targets):
                nfa.add_transition(state_id, symbol, target)

    nfa.alphabet = set(enfa.alphabet)
    logger.debug("Removed epsilon transitions: %d -> %d transitions",
                 len(enfa.transitions), len(nfa.transitions))
    return nfa.freeze()


def _subset_label(state_set: StateSet) -> str:
    return '{' + ','.join(str(s) for s in sorted(state_set)) + '}'


def nfa_to_dfa(nfa: Automaton, max_states: Optional[int] = None) -> Automaton:
    """
    Converts an NFA to a DFA using the subset construction algorithm.

    Each DFA state stands for a distinct, non-empty set of NFA states.
    Closures are taken of the start set and of every move result, so an
    automaton that still has epsilon transitions is handled as well. No
    trap state is created: a missing transition means reject.

    Args:
        nfa: The automaton to determinise
        max_states: Upper bound on the number of DFA states, or None for no bound

    Returns:
        A new DFA. Each state's ``subset`` holds its NFA state ids and its
        label is the subset written as ``{0,2,5}`` until ``name_states`` runs.

    Raises:
        AutomatonTooLargeError: If more than ``max_states`` DFA states are needed
    """
    dfa = Automaton()
    nfa_accepting = nfa.accept_states
    alphabet = nfa.sorted_alphabet()

    dfa_state_map: Dict[StateSet, int] = {}

    def add_subset(state_set: StateSet) -> int:
        if max_states is not None and len(dfa.states) >= max_states:
            raise AutomatonTooLargeError(f"DFA would need more than {max_states} states")
        state = dfa.new_state(_subset_label(state_set), bool(state_set & nfa_accepting))
        state.subset = state_set
        dfa_state_map[state_set] = state.id
        queue.append(state_set)
        return state.id

    queue = deque()
    start_set = epsilon_closure(nfa, nfa.start_state)
    dfa.set_start(add_subset(start_set))

    while queue:
        current = queue.popleft()
        current_id = dfa_state_map[current]

        for symbol in alphabet:
            moved = move(nfa, current, symbol)
            if not moved:
                continue
            target_set = epsilon_closure(nfa, moved)

            if target_set not in dfa_state_map:
                add_subset(target_set)
            dfa.add_transition(current_id, symbol, dfa_state_map[target_set])

    dfa.alphabet = set(nfa.alphabet)
    logger.debug("Subset construction: %d NFA states -> %d DFA states", len(nfa), len(dfa))
    return dfa.freeze()


def name_states(dfa: Automaton, prefix: str = 'D') -> Automaton:
    """
    Give every DFA state a stable display label.

    Labels are handed out breadth-first from the start state, following
    symbols in sorted order, so structurally identical automata always get
    identical labels. States unreachable from the start are labelled last
    in id order. Only labels change.
    """
    order = []
    seen = set()
    queue = deque([dfa.start_state])
    seen.add(dfa.start_state)

    while queue:
        current = queue.popleft()
        order.append(current)
        for symbol in dfa.sorted_alphabet():
            for target in dfa.targets(current, symbol):
                if target not in seen:
                    seen.add(target)
                    queue.append(target)

    order.extend(state_id for state_id in sorted(dfa.states) if state_id not in seen)

    for index, state_id in enumerate(order):
        dfa.state(state_id).label = f"{prefix}{index}"

    return dfa
