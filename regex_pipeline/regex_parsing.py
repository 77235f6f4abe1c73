from enum import Enum
from typing import List, NamedTuple, Optional
from .errors import LexError, StructuralError


class TokenKind(Enum):
    LITERAL = 'literal'
    UNION = 'union'
    STAR = 'star'
    PLUS = 'plus'
    OPTIONAL = 'optional'
    OPEN_GROUP = 'open-group'
    CLOSE_GROUP = 'close-group'
    CONCAT = 'concat'


class Token(NamedTuple):
    kind: TokenKind
    value: str
    position: int


ESCAPE = '\\'

OPERATORS = {
    '|': TokenKind.UNION,
    '*': TokenKind.STAR,
    '+': TokenKind.PLUS,
    '?': TokenKind.OPTIONAL,
    '(': TokenKind.OPEN_GROUP,
    ')': TokenKind.CLOSE_GROUP,
}

UNARY_OPERATORS = {TokenKind.STAR, TokenKind.PLUS, TokenKind.OPTIONAL}
BINARY_OPERATORS = {TokenKind.UNION, TokenKind.CONCAT}

# Tokens after which an operand has just been completed
ENDS_OPERAND = {TokenKind.LITERAL, TokenKind.CLOSE_GROUP} | UNARY_OPERATORS
# Tokens that can open a new operand
STARTS_OPERAND = {TokenKind.LITERAL, TokenKind.OPEN_GROUP}

PRECEDENCE = {
    TokenKind.STAR: 3,
    TokenKind.PLUS: 3,
    TokenKind.OPTIONAL: 3,
    TokenKind.CONCAT: 2,
    TokenKind.UNION: 1,
}

CONCAT_SYMBOL = '.'


def tokenize(pattern: str) -> List[Token]:
    """
    Split a pattern into tokens.

    Every character that is not one of ``| * + ? ( )`` is a literal. A
    backslash makes the following reserved character (or a backslash) a
    literal. Concatenation is not marked here; adjacency is enough.

    Raises:
        LexError: On an unknown escape sequence or a dangling backslash.
    """
    tokens = []
    pos = 0

    while pos < len(pattern):
        char = pattern[pos]

        if char == ESCAPE:
            if pos + 1 >= len(pattern):
                raise LexError("Dangling escape character '\\'", pos)
            escaped = pattern[pos + 1]
            if escaped not in OPERATORS and escaped != ESCAPE:
                raise LexError(f"Unrecognized escape sequence '\\{escaped}'", pos)
            tokens.append(Token(TokenKind.LITERAL, escaped, pos))
            pos += 2
            continue

        kind = OPERATORS.get(char, TokenKind.LITERAL)
        tokens.append(Token(kind, char, pos))
        pos += 1

    return tokens


def validate(tokens: List[Token]) -> List[Token]:
    """
    Check that a token sequence is a well formed expression.

    Returns the same list so calls can be chained into ``to_postfix``.

    Raises:
        StructuralError: For an empty pattern, an empty group, unbalanced
            parentheses or an operator without its operand(s).
    """
    if not tokens:
        raise StructuralError("Empty pattern")

    open_groups: List[Token] = []
    previous: Optional[Token] = None

    for token in tokens:
        prev_kind = previous.kind if previous else None

        if token.kind == TokenKind.OPEN_GROUP:
            open_groups.append(token)

        elif token.kind == TokenKind.CLOSE_GROUP:
            if not open_groups:
                raise StructuralError("Unmatched ')'", token.position)
            if prev_kind == TokenKind.OPEN_GROUP:
                raise StructuralError("Empty group '()'", previous.position)
            if prev_kind == TokenKind.UNION:
                raise StructuralError("Operator '|' is missing its right operand", previous.position)
            open_groups.pop()

        elif token.kind == TokenKind.UNION:
            if prev_kind is None or prev_kind in (TokenKind.UNION, TokenKind.OPEN_GROUP):
                raise StructuralError("Operator '|' is missing its left operand", token.position)

        elif token.kind in UNARY_OPERATORS:
            if prev_kind is None or prev_kind in (TokenKind.UNION, TokenKind.OPEN_GROUP):
                raise StructuralError(
                    f"Operator '{token.value}' has no preceding operand", token.position)

        elif token.kind == TokenKind.CONCAT:
            raise StructuralError("Unexpected concatenation marker in infix input", token.position)

        previous = token

    if open_groups:
        raise StructuralError("Unbalanced '(' is never closed", open_groups[-1].position)

    if previous.kind == TokenKind.UNION:
        raise StructuralError("Operator '|' is missing its right operand", previous.position)

    return tokens


def insert_concatenation(tokens: List[Token]) -> List[Token]:
    """Make implicit concatenation explicit with synthetic CONCAT tokens."""
    result = []
    for i, token in enumerate(tokens):
        if i > 0 and tokens[i - 1].kind in ENDS_OPERAND and token.kind in STARTS_OPERAND:
            result.append(Token(TokenKind.CONCAT, CONCAT_SYMBOL, token.position))
        result.append(token)
    return result


def to_postfix(tokens: List[Token]) -> List[Token]:
    """
    Rewrite a validated infix token sequence into postfix order.

    Shunting-yard over PRECEDENCE. Union and concatenation are left
    associative; unary operators bind to the operand already emitted so
    they go straight to the output.
    """
    output: List[Token] = []
    stack: List[Token] = []

    for token in insert_concatenation(tokens):
        if token.kind == TokenKind.LITERAL:
            output.append(token)

        elif token.kind in UNARY_OPERATORS:
            output.append(token)

        elif token.kind in BINARY_OPERATORS:
            while (stack and stack[-1].kind != TokenKind.OPEN_GROUP and
                   PRECEDENCE[stack[-1].kind] >= PRECEDENCE[token.kind]):
                output.append(stack.pop())
            stack.append(token)

        elif token.kind == TokenKind.OPEN_GROUP:
            stack.append(token)

        elif token.kind == TokenKind.CLOSE_GROUP:
            while stack and stack[-1].kind != TokenKind.OPEN_GROUP:
                output.append(stack.pop())
            if not stack:
                raise StructuralError("Unmatched ')'", token.position)
            stack.pop()  # discard '('

    while stack:
        token = stack.pop()
        if token.kind == TokenKind.OPEN_GROUP:
            raise StructuralError("Unbalanced '(' is never closed", token.position)
        output.append(token)

    return output


def postfix_to_string(tokens: List[Token]) -> str:
    """Render a postfix sequence for display, e.g. ``ab.c|``."""
    parts = []
    for token in tokens:
        if token.kind == TokenKind.LITERAL and (token.value in OPERATORS or token.value in (ESCAPE, CONCAT_SYMBOL)):
            parts.append(ESCAPE + token.value)
        else:
            parts.append(token.value)
    return ''.join(parts)
