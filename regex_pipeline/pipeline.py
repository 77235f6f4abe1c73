import logging
from typing import List, NamedTuple, Optional
from .automaton import Automaton
from .fsa_transformations import remove_epsilons, nfa_to_dfa, name_states
from .regex_parsing import Token, TokenKind, tokenize, validate, to_postfix
from .thompson import build_epsilon_nfa

logger = logging.getLogger(__name__)

STAR_WARNING = "Kleene star (*) detected; the automata may have many states"


class CompiledRegex(NamedTuple):
    pattern: str
    tokens: List[Token]
    postfix: List[Token]
    enfa: Automaton
    nfa: Automaton
    dfa: Automaton
    warnings: List[str]


def compile_regex(pattern: str, max_dfa_states: Optional[int] = None) -> CompiledRegex:
    """
    Run the whole pipeline: tokens, postfix, epsilon-NFA, NFA and named DFA.

    Every stage returns a new automaton, so the three results never share
    State objects. The first error stops the pipeline and propagates.
    ``max_dfa_states`` bounds subset construction, which is exponential in
    the worst case.

    Raises:
        LexError, StructuralError, BuildError, AutomatonTooLargeError:
            See ``regex_pipeline.errors``.
    """
    tokens = tokenize(pattern)
    warnings = []
    if any(token.kind == TokenKind.STAR for token in tokens):
        logger.warning("%s: %r", STAR_WARNING, pattern)
        warnings.append(STAR_WARNING)

    validate(tokens)
    postfix = to_postfix(tokens)

    enfa = build_epsilon_nfa(postfix)
    nfa = remove_epsilons(enfa)
    dfa = name_states(nfa_to_dfa(nfa, max_dfa_states))

    logger.debug("Compiled %r: eNFA %d states, NFA %d states, DFA %d states",
                 pattern, len(enfa), len(nfa), len(dfa))

    return CompiledRegex(pattern, tokens, postfix, enfa, nfa, dfa, warnings)
