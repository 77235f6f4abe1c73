from enum import Enum
from typing import Dict, Iterable, List, NamedTuple, Optional, Tuple
from .automaton import Automaton


class SimulationStatus(Enum):
    RUNNING = 'running'
    ACCEPTED = 'accepted'
    REJECTED = 'rejected'


class StepResult(NamedTuple):
    done: bool
    accepted: Optional[bool] = None


class DFASimulator:
    """
    Steps an input string through a DFA one character at a time.

    The caller drives the loop::

        simulator = DFASimulator(dfa)
        result = simulator.step(text)
        while not result.done:
            result = simulator.step(text)

    Once a verdict is reached further calls to ``step`` return it again
    without touching the simulator. ``reset`` makes it reusable.
    """

    def __init__(self, dfa: Automaton):
        self.dfa = dfa
        self.reset()

    def reset(self):
        self.current_state = self.dfa.start_state
        self.position = 0
        self.status = SimulationStatus.RUNNING
        self.path: List[Tuple[str, str, str]] = []
        self.rejection_reason: Optional[str] = None

    @property
    def done(self) -> bool:
        return self.status != SimulationStatus.RUNNING

    def _result(self) -> StepResult:
        if self.status == SimulationStatus.RUNNING:
            return StepResult(False)
        return StepResult(True, self.status == SimulationStatus.ACCEPTED)

    def _finish(self) -> StepResult:
        state = self.dfa.state(self.current_state)
        if state.is_accepting:
            self.status = SimulationStatus.ACCEPTED
        else:
            self.status = SimulationStatus.REJECTED
            self.rejection_reason = f"Final state '{state.label}' is not an accepting state"
        return self._result()

    def step(self, input_string: str) -> StepResult:
        """Consume the character at the current position."""
        if self.done:
            return self._result()

        if self.position >= len(input_string):
            return self._finish()

        symbol = input_string[self.position]
        next_state = self.dfa.next_state(self.current_state, symbol)

        if next_state is None:
            label = self.dfa.state(self.current_state).label
            self.status = SimulationStatus.REJECTED
            self.rejection_reason = f"No transition defined for symbol '{symbol}' from state '{label}'"
            return self._result()

        self.path.append((self.dfa.state(self.current_state).label, symbol, self.dfa.state(next_state).label))
        self.current_state = next_state
        self.position += 1

        if self.position == len(input_string):
            return self._finish()
        return self._result()

    def run(self, input_string: str) -> StepResult:
        """Reset, then step until a verdict is reached."""
        self.reset()
        result = self.step(input_string)
        while not result.done:
            result = self.step(input_string)
        return result


def simulate_dfa(dfa: Automaton, input_string: str) -> Dict:
    """
    Simulates a DFA with the given input string.

    Returns:
        A dictionary with:
        {
            'accepted': bool,
            'path': [(current_state, symbol, next_state), ...],
            'rejection_reason': str or None,
            'rejection_position': int or None  # position where rejection occurred
        }
    """
    simulator = DFASimulator(dfa)
    result = simulator.run(input_string)
    return {
        'accepted': result.accepted,
        'path': simulator.path,
        'rejection_reason': simulator.rejection_reason,
        'rejection_position': None if result.accepted else simulator.position,
    }


def batch_test(dfa: Automaton, strings: Iterable[str]) -> List[Dict]:
    """Run several strings through one simulator, reset between inputs."""
    simulator = DFASimulator(dfa)
    results = []
    for input_string in strings:
        result = simulator.run(input_string)
        results.append({
            'input': input_string,
            'accepted': result.accepted,
            'steps': len(simulator.path),
            'rejection_reason': simulator.rejection_reason,
        })
    return results
