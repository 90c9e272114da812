import os
from collections import deque
from typing import TYPE_CHECKING, TypeAlias

from adamsdat.tokenizer import (
    INT32_MAX,
    INT32_MIN,
    IntToken,
    Location,
    TextToken,
    TokenError,
    detect_newline,
    tokenize,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from adamsdat.tokenizer import Token

FilePath: TypeAlias = str | os.PathLike[str]

STAR = '*'


class TypeMismatchError(TokenError):
    def __init__(self, expected: str, found: str, loc: Location) -> None:
        super().__init__(f'expected {expected}, found {found}', loc)
        self.expected = expected
        self.found = found


class UnexpectedEndError(TokenError):
    def __init__(self, loc: Location | None) -> None:
        super().__init__('unexpected end of stream', loc)


class EncodeError(ValueError):
    pass


def end_location(data: bytes) -> Location:
    last_line = data.rfind(b'\n') + 1
    return Location(data.count(b'\n') + 1, len(data) - last_line + 1)


class TokenStream:
    """
    Consuming cursor over tokens, in file order.

    Every pull removes the token, also when it turns out to be of the wrong
    type: malformed files are rejected, never resynchronized.
    """

    def __init__(
        self,
        tokens: 'Iterable[Token]',
        *,
        newline: str = '\n',
        end: Location | None = None,
    ) -> None:
        self._tokens = deque(tokens)
        self.newline = newline
        self.end = end

    @classmethod
    def from_bytes(cls, data: bytes) -> 'TokenStream':
        return cls(
            tokenize(data),
            newline=detect_newline(data),
            end=end_location(data),
        )

    def __len__(self) -> int:
        return len(self._tokens)

    def done(self) -> bool:
        return not self._tokens

    def next_token(self) -> 'Token | None':
        if not self._tokens:
            return None
        return self._tokens.popleft()

    def next_int(self) -> int:
        token = self.next_token()
        if token is None:
            raise UnexpectedEndError(self.end)
        if isinstance(token, TextToken):
            raise TypeMismatchError('an integer', 'a string', token.loc)
        return token.value

    def next_str(self) -> str:
        token = self.next_token()
        if token is None:
            raise UnexpectedEndError(self.end)
        if isinstance(token, IntToken):
            raise TypeMismatchError('a string', 'an integer', token.loc)
        return token.value

    def peek_location(self) -> Location | None:
        if not self._tokens:
            return self.end
        return self._tokens[0].loc


def read_starred(stream: TokenStream) -> tuple[str, bool]:
    text = stream.next_str()
    if text.startswith(STAR):
        return text.removeprefix(STAR), True
    return text, False


def escape(text: str) -> str:
    return text.replace('\\', '\\\\').replace('"', '\\"')


def write_int(num: int) -> str:
    if not INT32_MIN <= num <= INT32_MAX:
        raise EncodeError(f'{num} does not fit in a 32 bit integer')
    return f' {num} '


def write_str(text: str) -> str:
    return f'"{escape(text)}"'


def write_starred(text: str, starred: bool) -> str:  # noqa: FBT001
    return write_str(STAR + text if starred else text)
