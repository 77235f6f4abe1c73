from collections import defaultdict
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterator, List, NamedTuple, Optional, Set

EPSILON = ''
EPSILON_DISPLAY = 'ε'


class State:
    """A single automaton state, addressed by its id within one Automaton."""

    __slots__ = ('id', 'label', 'is_accepting', 'subset', '_frozen')

    def __init__(self, state_id: int, label: Optional[str] = None, is_accepting: bool = False,
                 subset: FrozenSet[int] = frozenset()):
        self.id = state_id
        self.label = label if label is not None else f"q{state_id}"
        self.is_accepting = is_accepting
        # NFA state ids a DFA state stands for; empty for other stages
        self.subset = subset
        self._frozen = False

    def __setattr__(self, name, value):
        # Only the display label may change once the owning automaton is frozen
        if name != 'label' and getattr(self, '_frozen', False):
            raise RuntimeError(f"State {self.id} is frozen; cannot set {name}")
        object.__setattr__(self, name, value)

    def freeze(self):
        self._frozen = True

    def __repr__(self):
        return f"State({self.id}, {self.label!r}, is_accepting={self.is_accepting})"


class Transition(NamedTuple):
    from_state: int
    symbol: str
    to_state: int

    @property
    def is_epsilon(self) -> bool:
        return self.symbol == EPSILON


class Automaton:
    """
    States, transitions, a start state and accepting states.

    States live in a flat id-addressed table and transitions refer to them
    by id, so cycles in the graph never become reference cycles. Each
    pipeline stage builds a new Automaton and calls ``freeze`` once it is
    assembled; after that only state labels may change.
    """

    def __init__(self):
        self.states: Dict[int, State] = {}
        self.transitions: List[Transition] = []
        self.alphabet: Set[str] = set()
        self.start_state: Optional[int] = None
        self._next_id = 0
        self._moves = defaultdict(lambda: defaultdict(list))
        self._frozen = False

    def __setattr__(self, name, value):
        if getattr(self, '_frozen', False):
            raise RuntimeError("Automaton is frozen and can no longer be modified")
        object.__setattr__(self, name, value)

    def _check_mutable(self):
        if self._frozen:
            raise RuntimeError("Automaton is frozen and can no longer be modified")

    def new_state(self, label: Optional[str] = None, is_accepting: bool = False) -> State:
        """Create a state with the next free id."""
        return self.add_state(State(self._next_id, label, is_accepting))

    def add_state(self, state: State) -> State:
        self._check_mutable()
        if state.id in self.states:
            raise ValueError(f"Duplicate state id {state.id}")
        self.states[state.id] = state
        self._next_id = max(self._next_id, state.id + 1)
        return state

    def add_transition(self, from_state: int, symbol: str, to_state: int) -> Transition:
        self._check_mutable()
        if from_state not in self.states or to_state not in self.states:
            raise ValueError(f"Transition {from_state} -{symbol!r}-> {to_state} references an unknown state")
        transition = Transition(from_state, symbol, to_state)
        self.transitions.append(transition)
        self._moves[from_state][symbol].append(to_state)
        if symbol != EPSILON:
            self.alphabet.add(symbol)
        return transition

    def set_start(self, state_id: int):
        self._check_mutable()
        if state_id not in self.states:
            raise ValueError(f"Start state {state_id} is not part of the automaton")
        self.start_state = state_id

    def mark_accepting(self, state_id: int, accepting: bool = True):
        self._check_mutable()
        self.states[state_id].is_accepting = accepting

    def freeze(self) -> 'Automaton':
        if self._frozen:
            return self
        for state in self.states.values():
            state.freeze()
        self.states = MappingProxyType(self.states)
        self.transitions = tuple(self.transitions)
        self.alphabet = frozenset(self.alphabet)
        self._moves = {
            state_id: {symbol: tuple(targets) for symbol, targets in moves.items()}
            for state_id, moves in self._moves.items()
        }
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def accept_states(self) -> FrozenSet[int]:
        return frozenset(s.id for s in self.states.values() if s.is_accepting)

    @property
    def start(self) -> State:
        return self.states[self.start_state]

    def state(self, state_id: int) -> State:
        return self.states[state_id]

    def targets(self, state_id: int, symbol: str) -> List[int]:
        """All states reachable from ``state_id`` by one ``symbol`` edge."""
        if state_id not in self._moves or symbol not in self._moves[state_id]:
            return []
        return list(self._moves[state_id][symbol])

    def next_state(self, state_id: int, symbol: str) -> Optional[int]:
        """Deterministic lookup; None means implicit reject."""
        targets = self.targets(state_id, symbol)
        return targets[0] if targets else None

    def outgoing(self, state_id: int) -> Iterator[Transition]:
        for symbol, targets in self._moves.get(state_id, {}).items():
            for target in targets:
                yield Transition(state_id, symbol, target)

    def sorted_alphabet(self) -> List[str]:
        return sorted(self.alphabet)

    def to_dict(self) -> Dict:
        """
        Render in the FSA dictionary format consumed by the HTTP layer.

        States are keyed by label, so labels must be unique. Epsilon edges
        use the '' symbol.
        """
        labels = {state_id: state.label for state_id, state in self.states.items()}
        if len(set(labels.values())) != len(labels):
            raise ValueError("State labels must be unique to export the automaton")

        transitions = {label: {} for label in labels.values()}
        for transition in self.transitions:
            symbol_map = transitions[labels[transition.from_state]]
            symbol_map.setdefault(transition.symbol, []).append(labels[transition.to_state])

        return {
            'states': [labels[state_id] for state_id in sorted(self.states)],
            'alphabet': self.sorted_alphabet(),
            'transitions': transitions,
            'startingState': labels[self.start_state] if self.start_state is not None else None,
            'acceptingStates': [labels[state_id] for state_id in sorted(self.accept_states)],
        }

    def __len__(self):
        return len(self.states)

    def __repr__(self):
        return (f"Automaton(states={len(self.states)}, transitions={len(self.transitions)}, "
                f"alphabet={self.sorted_alphabet()})")
