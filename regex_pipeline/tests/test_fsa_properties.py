from django.test import TestCase
from regex_pipeline.automaton import Automaton, EPSILON
from regex_pipeline.fsa_properties import (
    is_deterministic, has_epsilon_transitions, reachable_states,
    validate_automaton_structure, automaton_statistics
)
from regex_pipeline.pipeline import compile_regex


class TestFsaProperties(TestCase):

    def setUp(self):
        self.automaton = Automaton()
        for _ in range(3):
            self.automaton.new_state()
        self.automaton.set_start(0)
        self.automaton.mark_accepting(1)

    def test_deterministic_partial_function(self):
        """Missing transitions do not break determinism"""
        self.automaton.add_transition(0, 'a', 1)
        self.assertTrue(is_deterministic(self.automaton))

    def test_two_targets_not_deterministic(self):
        self.automaton.add_transition(0, 'a', 1)
        self.automaton.add_transition(0, 'a', 2)
        self.assertFalse(is_deterministic(self.automaton))

    def test_epsilon_not_deterministic(self):
        self.automaton.add_transition(0, EPSILON, 1)
        self.assertTrue(has_epsilon_transitions(self.automaton))
        self.assertFalse(is_deterministic(self.automaton))

    def test_reachable_states(self):
        self.automaton.add_transition(0, EPSILON, 1)
        self.assertEqual(reachable_states(self.automaton), {0, 1})
        self.assertEqual(reachable_states(Automaton()), set())

    def test_validate_missing_start(self):
        result = validate_automaton_structure(Automaton())
        self.assertFalse(result['valid'])
        self.assertEqual(result['error'], 'Automaton has no start state')

    def test_validate_epsilon_in_alphabet(self):
        self.automaton.alphabet.add(EPSILON)
        self.assertFalse(validate_automaton_structure(self.automaton)['valid'])

    def test_validate_symbol_outside_alphabet(self):
        self.automaton.add_transition(0, 'a', 1)
        self.automaton.alphabet = {'b'}
        result = validate_automaton_structure(self.automaton)
        self.assertEqual(result, {'valid': False, 'error': "Symbol 'a' not in alphabet"})

    def test_validate_not_an_automaton(self):
        self.assertFalse(validate_automaton_structure({'states': []})['valid'])

    def test_statistics(self):
        stats = automaton_statistics(compile_regex('ab').dfa)
        self.assertEqual(stats, {
            'states_count': 3,
            'reachable_states_count': 3,
            'alphabet_size': 2,
            'transitions_count': 2,
            'accepting_states_count': 1,
            'has_epsilon_transitions': False,
            'is_deterministic': True,
        })

    def test_nfa_keeps_unreachable_states(self):
        nfa = compile_regex('a|b').nfa
        stats = automaton_statistics(nfa)
        self.assertEqual(stats['states_count'], 6)
        self.assertEqual(stats['reachable_states_count'], 4)
        self.assertLess(stats['reachable_states_count'], stats['states_count'])
