from django.test import TestCase
from regex_pipeline.automaton import EPSILON
from regex_pipeline.errors import BuildError
from regex_pipeline.fsa_properties import validate_automaton_structure
from regex_pipeline.regex_parsing import Token, TokenKind, tokenize
from regex_pipeline.thompson import build_epsilon_nfa, regex_to_epsilon_nfa


def literal(value, position=0):
    return Token(TokenKind.LITERAL, value, position)


def operator(kind, value, position=0):
    return Token(kind, value, position)


class TestThompsonConstruction(TestCase):

    def epsilon_edges(self, nfa):
        return {(t.from_state, t.to_state) for t in nfa.transitions if t.is_epsilon}

    def test_single_character(self):
        """A literal becomes two states joined by one transition"""
        nfa = regex_to_epsilon_nfa('a')
        self.assertEqual(len(nfa.states), 2)
        self.assertEqual(nfa.alphabet, {'a'})
        self.assertEqual(nfa.start_state, 0)
        self.assertEqual(nfa.accept_states, frozenset({1}))
        self.assertEqual(nfa.targets(0, 'a'), [1])
        self.assertTrue(nfa.frozen)

    def test_concatenation(self):
        nfa = regex_to_epsilon_nfa('ab')
        self.assertEqual(len(nfa.states), 4)
        self.assertEqual(nfa.start_state, 0)
        self.assertEqual(nfa.accept_states, frozenset({3}))
        self.assertEqual(self.epsilon_edges(nfa), {(1, 2)})

    def test_union(self):
        nfa = regex_to_epsilon_nfa('a|b')
        self.assertEqual(len(nfa.states), 6)
        self.assertEqual(nfa.start_state, 4)
        self.assertEqual(nfa.accept_states, frozenset({5}))
        self.assertEqual(self.epsilon_edges(nfa), {(4, 0), (4, 2), (1, 5), (3, 5)})

    def test_star(self):
        nfa = regex_to_epsilon_nfa('a*')
        self.assertEqual(len(nfa.states), 4)
        self.assertEqual(nfa.start_state, 2)
        self.assertEqual(nfa.accept_states, frozenset({3}))
        self.assertEqual(self.epsilon_edges(nfa), {(2, 0), (2, 3), (1, 0), (1, 3)})

    def test_plus_has_no_bypass(self):
        nfa = regex_to_epsilon_nfa('a+')
        self.assertEqual(self.epsilon_edges(nfa), {(2, 0), (1, 0), (1, 3)})

    def test_optional(self):
        """Optional is a union with an empty fragment"""
        nfa = regex_to_epsilon_nfa('a?')
        self.assertEqual(len(nfa.states), 6)
        self.assertEqual(nfa.start_state, 4)
        self.assertEqual(nfa.accept_states, frozenset({5}))
        self.assertEqual(self.epsilon_edges(nfa), {(2, 3), (4, 0), (4, 2), (1, 5), (3, 5)})

    def test_alphabet_excludes_epsilon(self):
        nfa = regex_to_epsilon_nfa('(a|b)*c?')
        self.assertEqual(nfa.alphabet, {'a', 'b', 'c'})
        self.assertNotIn(EPSILON, nfa.alphabet)

    def test_structure_is_valid(self):
        for pattern in ['a', 'ab', 'a|b', 'a*', 'a+', 'a?', '(a|b)*abb', '((ab)*|c+)?d']:
            nfa = regex_to_epsilon_nfa(pattern)
            self.assertEqual(validate_automaton_structure(nfa), {'valid': True}, pattern)
            self.assertEqual(len(nfa.accept_states), 1)

    def test_stack_underflow(self):
        with self.assertRaises(BuildError):
            build_epsilon_nfa([literal('a'), operator(TokenKind.CONCAT, '.')])
        with self.assertRaises(BuildError):
            build_epsilon_nfa([operator(TokenKind.STAR, '*')])

    def test_leftover_fragments(self):
        with self.assertRaises(BuildError) as ctx:
            build_epsilon_nfa([literal('a'), literal('b', 1)])
        self.assertIn('2 unconnected fragments', str(ctx.exception))

    def test_empty_postfix(self):
        with self.assertRaises(BuildError):
            build_epsilon_nfa([])

    def test_group_token_in_postfix(self):
        with self.assertRaises(BuildError):
            build_epsilon_nfa([operator(TokenKind.OPEN_GROUP, '('), literal('a', 1)])

    def test_independent_builds(self):
        """Separate builds never share state objects"""
        first = regex_to_epsilon_nfa('ab')
        second = regex_to_epsilon_nfa('ab')
        self.assertIsNot(first.state(0), second.state(0))
        self.assertEqual(first.to_dict(), second.to_dict())

    def test_build_from_tokens(self):
        postfix = [literal(t.value, t.position) for t in tokenize('ab')] + [operator(TokenKind.CONCAT, '.', 1)]
        nfa = build_epsilon_nfa(postfix)
        self.assertEqual(nfa.accept_states, frozenset({3}))
