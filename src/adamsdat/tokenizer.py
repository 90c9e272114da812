"""
Tokenizer for Scott Adams adventure files in the ScottFree text layout.

A game file is a sequence of ASCII integers (optionally signed, surrounded by
whitespace) and double-quoted strings, which may span several lines.
Each byte is treated as one character, the format predates any multi-byte
encoding.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, TypeAlias

if TYPE_CHECKING:
    from collections.abc import Iterator

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1

WHITESPACE = frozenset(' \t\n\r\f')
DIGITS = frozenset('0123456789')

TEXT_ENCODING = 'latin-1'


@dataclass(frozen=True)
class Location:
    line: int
    column: int

    def __str__(self) -> str:
        return f'{self.line}:{self.column}'


@dataclass(frozen=True)
class IntToken:
    value: int
    loc: Location


@dataclass(frozen=True)
class TextToken:
    value: str
    loc: Location


Token: TypeAlias = IntToken | TextToken


class TokenError(ValueError):
    message: str
    loc: Location | None

    def __init__(self, message: str, loc: Location | None = None) -> None:
        super().__init__(message, loc)
        self.message = message
        self.loc = loc

    def __str__(self) -> str:
        if self.loc is None:
            return self.message
        return f'{self.loc}: {self.message}'


class UnexpectedCharacterError(TokenError):
    def __init__(self, char: str, loc: Location, context: str = '') -> None:
        where = f' in {context}' if context else ''
        super().__init__(f'unexpected character {char!r}{where}', loc)
        self.char = char


class MalformedIntegerError(TokenError):
    def __init__(self, literal: str, loc: Location) -> None:
        super().__init__(
            f'integer {literal} does not fit in 32 bits',
            loc,
        )
        self.literal = literal


class UnterminatedTokenError(TokenError):
    def __init__(self, kind: str, loc: Location) -> None:
        super().__init__(f'end of input inside {kind}', loc)
        self.kind = kind


class TokenState(Enum):
    INIT = auto()  # between tokens
    SIGN = auto()  # read the leading '-' of a negative integer
    NUM = auto()  # inside an integer
    QUOTE = auto()  # inside a string
    ESCAPE = auto()  # read a '\' inside a string


UNTERMINATED_KIND = {
    TokenState.SIGN: 'integer',
    TokenState.NUM: 'integer',
    TokenState.QUOTE: 'string',
    TokenState.ESCAPE: 'string',
}


def locate(text: str) -> 'Iterator[tuple[str, Location]]':
    line = column = 1
    for char in text:
        yield char, Location(line, column)
        if char == '\n':
            line += 1
            column = 1
        else:
            column += 1


def parse_int32(literal: str, loc: Location) -> int:
    value = int(literal)
    if not INT32_MIN <= value <= INT32_MAX:
        raise MalformedIntegerError(literal, loc)
    return value


def tokenize(data: bytes) -> list[Token]:
    """
    Split raw game data into integer and string tokens.

    The whole buffer is processed up front; game files are a few tens of
    kilobytes and are never read partially.
    """
    tokens: list[Token] = []
    state = TokenState.INIT
    acc: list[str] = []
    token_loc = Location(1, 1)

    for char, loc in locate(data.decode(TEXT_ENCODING)):
        if state == TokenState.INIT:
            if char in WHITESPACE:
                continue
            token_loc = loc
            if char == '-':
                acc.append(char)
                state = TokenState.SIGN
            elif char in DIGITS:
                acc.append(char)
                state = TokenState.NUM
            elif char == '"':
                state = TokenState.QUOTE
            else:
                raise UnexpectedCharacterError(char, loc)

        elif state == TokenState.SIGN:
            if char not in DIGITS:
                raise UnexpectedCharacterError(char, loc, 'integer')
            acc.append(char)
            state = TokenState.NUM

        elif state == TokenState.NUM:
            if char in WHITESPACE:
                literal = ''.join(acc)
                tokens.append(IntToken(parse_int32(literal, token_loc), token_loc))
                acc.clear()
                state = TokenState.INIT
            elif char in DIGITS:
                acc.append(char)
            else:
                raise UnexpectedCharacterError(char, loc, 'integer')

        elif state == TokenState.QUOTE:
            if char == '\\':
                state = TokenState.ESCAPE
            elif char == '"':
                tokens.append(TextToken(''.join(acc), token_loc))
                acc.clear()
                state = TokenState.INIT
            else:
                acc.append(char)

        elif state == TokenState.ESCAPE:
            acc.append(char)
            state = TokenState.QUOTE

    if state != TokenState.INIT:
        raise UnterminatedTokenError(UNTERMINATED_KIND[state], token_loc)

    return tokens


def detect_newline(data: bytes) -> str:
    # the header comes first and holds only integers, so the first line
    # terminator is never inside a string
    pos = data.find(b'\n')
    if pos > 0 and data[pos - 1 : pos] == b'\r':
        return '\r\n'
    return '\n'
