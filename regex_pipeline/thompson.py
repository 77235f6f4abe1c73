from typing import List, NamedTuple
from .automaton import Automaton, EPSILON
from .errors import BuildError
from .regex_parsing import Token, TokenKind, tokenize, validate, to_postfix


class Fragment(NamedTuple):
    """A partial automaton with a single entry and a single exit state."""
    start: int
    accept: int


class ThompsonBuilder:
    """Evaluates a postfix token sequence into an epsilon-NFA."""

    def __init__(self):
        self.automaton = Automaton()
        self.stack: List[Fragment] = []
        self.handlers = {
            TokenKind.LITERAL: self.build_literal,
            TokenKind.CONCAT: self.build_concat,
            TokenKind.UNION: self.build_union,
            TokenKind.STAR: self.build_star,
            TokenKind.PLUS: self.build_plus,
            TokenKind.OPTIONAL: self.build_optional,
        }

    def new_state(self) -> int:
        return self.automaton.new_state().id

    def epsilon(self, from_state: int, to_state: int):
        self.automaton.add_transition(from_state, EPSILON, to_state)

    def pop(self, token: Token) -> Fragment:
        if not self.stack:
            raise BuildError(f"Operator '{token.value}' is missing an operand", token.position)
        return self.stack.pop()

    def build(self, postfix: List[Token]) -> Automaton:
        for token in postfix:
            handler = self.handlers.get(token.kind)
            if handler is None:
                raise BuildError(f"Unexpected token '{token.value}' in postfix sequence", token.position)
            self.stack.append(handler(token))

        if not self.stack:
            raise BuildError("Postfix sequence produced no automaton")
        if len(self.stack) > 1:
            raise BuildError(f"Postfix sequence left {len(self.stack)} unconnected fragments")

        fragment = self.stack.pop()
        self.automaton.set_start(fragment.start)
        self.automaton.mark_accepting(fragment.accept)
        return self.automaton.freeze()

    def build_literal(self, token: Token) -> Fragment:
        start = self.new_state()
        accept = self.new_state()
        self.automaton.add_transition(start, token.value, accept)
        return Fragment(start, accept)

    def build_concat(self, token: Token) -> Fragment:
        second = self.pop(token)
        first = self.pop(token)
        self.epsilon(first.accept, second.start)
        return Fragment(first.start, second.accept)

    def build_union(self, token: Token) -> Fragment:
        right = self.pop(token)
        left = self.pop(token)
        return self._join(left, right)

    def build_star(self, token: Token) -> Fragment:
        inner = self.pop(token)
        start = self.new_state()
        accept = self.new_state()
        self.epsilon(start, inner.start)  # enter
        self.epsilon(start, accept)  # bypass
        self.epsilon(inner.accept, inner.start)  # loop
        self.epsilon(inner.accept, accept)  # exit
        return Fragment(start, accept)

    def build_plus(self, token: Token) -> Fragment:
        inner = self.pop(token)
        start = self.new_state()
        accept = self.new_state()
        self.epsilon(start, inner.start)
        self.epsilon(inner.accept, inner.start)
        self.epsilon(inner.accept, accept)
        return Fragment(start, accept)

    def build_optional(self, token: Token) -> Fragment:
        inner = self.pop(token)
        empty_start = self.new_state()
        empty_accept = self.new_state()
        self.epsilon(empty_start, empty_accept)
        return self._join(inner, Fragment(empty_start, empty_accept))

    def _join(self, left: Fragment, right: Fragment) -> Fragment:
        start = self.new_state()
        accept = self.new_state()
        self.epsilon(start, left.start)
        self.epsilon(start, right.start)
        self.epsilon(left.accept, accept)
        self.epsilon(right.accept, accept)
        return Fragment(start, accept)


def build_epsilon_nfa(postfix: List[Token]) -> Automaton:
    """
    Build an epsilon-NFA from a postfix token sequence using Thompson's construction.

    Raises:
        BuildError: If the sequence is malformed (operand stack underflow or
            leftover fragments).
    """
    return ThompsonBuilder().build(postfix)


def regex_to_epsilon_nfa(regex: str) -> Automaton:
    """
    Convert a regular expression to an epsilon-NFA.

    Supports literals, union ``|``, implicit concatenation, ``*``, ``+``,
    ``?`` and parentheses.

    Examples:
        regex_to_epsilon_nfa("a?")     # Zero or one 'a'
        regex_to_epsilon_nfa("(ab)+")  # One or more "ab" sequences
    """
    return build_epsilon_nfa(to_postfix(validate(tokenize(regex))))
