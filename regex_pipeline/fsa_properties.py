from collections import deque
from typing import Dict, Set
from .automaton import Automaton, EPSILON


def has_epsilon_transitions(automaton: Automaton) -> bool:
    return any(transition.is_epsilon for transition in automaton.transitions)


def is_deterministic(automaton: Automaton) -> bool:
    """
    Checks if the automaton is deterministic.

    An automaton is deterministic if:
    1. It has no epsilon transitions
    2. For each state and each symbol, there is at most one transition

    Missing transitions are allowed; they mean implicit rejection.
    """
    if has_epsilon_transitions(automaton):
        return False

    seen = set()
    for transition in automaton.transitions:
        key = (transition.from_state, transition.symbol)
        if key in seen:
            return False
        seen.add(key)

    return True


def reachable_states(automaton: Automaton) -> Set[int]:
    """All states reachable from the start state, epsilon edges included."""
    if automaton.start_state is None:
        return set()

    visited = {automaton.start_state}
    queue = deque([automaton.start_state])

    while queue:
        current = queue.popleft()
        for transition in automaton.outgoing(current):
            if transition.to_state not in visited:
                visited.add(transition.to_state)
                queue.append(transition.to_state)

    return visited


def validate_automaton_structure(automaton: Automaton) -> Dict:
    """
    Validates the structural invariants every pipeline stage guarantees.

    Args:
        automaton: The automaton to validate

    Returns:
        Dict: Validation result with 'valid' boolean and optional 'error' message
    """
    if not isinstance(automaton, Automaton):
        return {'valid': False, 'error': 'Expected an Automaton'}

    if automaton.start_state is None:
        return {'valid': False, 'error': 'Automaton has no start state'}

    if automaton.start_state not in automaton.states:
        return {'valid': False, 'error': 'Start state not in states'}

    for state_id in automaton.accept_states:
        if state_id not in automaton.states:
            return {'valid': False, 'error': f'Accepting state {state_id} not in states'}

    for transition in automaton.transitions:
        if transition.from_state not in automaton.states or transition.to_state not in automaton.states:
            return {'valid': False, 'error': f'Transition {transition} references an unknown state'}
        if transition.symbol != EPSILON and transition.symbol not in automaton.alphabet:
            return {'valid': False, 'error': f"Symbol '{transition.symbol}' not in alphabet"}

    if EPSILON in automaton.alphabet:
        return {'valid': False, 'error': 'Alphabet must not contain epsilon'}

    return {'valid': True}


def automaton_statistics(automaton: Automaton) -> Dict:
    """Summary counts used in API responses."""
    return {
        'states_count': len(automaton.states),
        'reachable_states_count': len(reachable_states(automaton)),
        'alphabet_size': len(automaton.alphabet),
        'transitions_count': len(automaton.transitions),
        'accepting_states_count': len(automaton.accept_states),
        'has_epsilon_transitions': has_epsilon_transitions(automaton),
        'is_deterministic': is_deterministic(automaton),
    }
