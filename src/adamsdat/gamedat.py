import sys
from collections import Counter
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import IO, TYPE_CHECKING, Any, TypeVar

from adamsdat.parser.entities import (
    ADJUSTED_COUNTS,
    INVENTORY,
    Action,
    Footer,
    Header,
    Item,
    Room,
    Word,
    group_synonyms,
)
from adamsdat.parser.opcodes import UnknownOpcode
from adamsdat.stream import EncodeError, TokenStream, write_str
from adamsdat.tokenizer import TEXT_ENCODING, TokenError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Sequence

    from adamsdat.stream import FilePath
    from adamsdat.tokenizer import Location

Entity = TypeVar('Entity')


@dataclass(frozen=True)
class Game:
    header: Header
    actions: 'Sequence[Action]'
    verbs: 'Sequence[Word]'
    nouns: 'Sequence[Word]'
    rooms: 'Sequence[Room]'
    messages: 'Sequence[str]'
    items: 'Sequence[Item]'
    footer: Footer
    newline: str = '\n'

    def verb_groups(self) -> list[list[str]]:
        return group_synonyms(self.verbs)

    def noun_groups(self) -> list[list[str]]:
        return group_synonyms(self.nouns)

    def normalize_word(self, text: str) -> str:
        """Converts the word to the game's word length, and uppercase."""
        return text[: self.header.word_length].upper()


class ParseError(ValueError):
    message: str
    section: str | None
    index: int | None
    loc: 'Location | None'

    def __init__(
        self,
        message: str,
        section: str | None = None,
        index: int | None = None,
        loc: 'Location | None' = None,
        *rest: Any,
    ) -> None:
        super().__init__(message, section, index, loc, *rest)
        self.message = message
        self.section = section
        self.index = index
        self.loc = loc

    @property
    def context(self) -> str:
        if self.section is None:
            return ''
        if self.index is None:
            return self.section
        return f'{self.section} {self.index}'

    def __str__(self) -> str:
        where = f'{self.loc}: ' if self.loc is not None else ''
        context = f' (reading {self.context})' if self.context else ''
        return f'{where}{self.message}{context}'

    def show(self, filename: str) -> None:
        stream = sys.stderr
        print('ERROR: Cannot parse game file at', file=stream)
        print(
            '\n'.join(
                [
                    f'  FILE: {filename}',
                    f'  SECTION: {self.context or "-"}',
                    f'  LOCATION: {self.loc or "-"}',
                ],
            ),
            file=stream,
        )
        print(self.message, file=stream)


class GameFileError(ValueError):
    def __init__(self, path: 'FilePath', reason: str) -> None:
        super().__init__(f'{path}: {reason}')
        self.path = path
        self.reason = reason


@contextmanager
def reading(section: str, index: int | None = None) -> 'Iterator[None]':
    try:
        yield
    except TokenError as exc:
        raise ParseError(exc.message, section, index, exc.loc) from exc


def read_entries(
    stream: TokenStream,
    section: str,
    count: int,
    read: 'Callable[[TokenStream], Entity]',
) -> 'list[Entity]':
    entries = []
    for idx in range(count):
        with reading(section, idx):
            entries.append(read(stream))
    return entries


def parse_header(stream: TokenStream) -> Header:
    loc = stream.peek_location()
    with reading('header'):
        header = Header.from_stream(stream)
    for name in sorted(ADJUSTED_COUNTS):
        if getattr(header, name) < 0:
            raise ParseError(
                f'{name} is negative: {getattr(header, name)}',
                'header',
                loc=loc,
            )
    return header


def parse_game(stream: TokenStream) -> Game:
    header = parse_header(stream)
    actions = read_entries(stream, 'action', header.num_actions, Action.from_stream)

    verbs: list[Word] = []
    nouns: list[Word] = []
    for idx in range(header.num_words):
        with reading('verb', idx):
            verbs.append(Word.from_stream(stream))
        with reading('noun', idx):
            nouns.append(Word.from_stream(stream))

    rooms = read_entries(stream, 'room', header.num_rooms, Room.from_stream)
    messages = read_entries(
        stream,
        'message',
        header.num_messages,
        TokenStream.next_str,
    )
    items = read_entries(stream, 'item', header.num_items, Item.from_stream)
    comments = read_entries(
        stream,
        'comment',
        header.num_actions,
        TokenStream.next_str,
    )
    with reading('footer'):
        footer = Footer.from_stream(stream)

    if not stream.done():
        raise ParseError(
            f'{len(stream)} unexpected tokens after the footer',
            'footer',
            loc=stream.peek_location(),
        )

    return Game(
        header=header,
        actions=[
            action.with_comment(comment)
            for action, comment in zip(actions, comments, strict=True)
        ],
        verbs=verbs,
        nouns=nouns,
        rooms=rooms,
        messages=messages,
        items=items,
        footer=footer,
        newline=stream.newline,
    )


def read_game(data: bytes) -> Game:
    return parse_game(TokenStream.from_bytes(data))


def load_game(path: 'FilePath') -> Game:
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise GameFileError(path, exc.strerror or str(exc)) from exc
    try:
        return read_game(data)
    except (TokenError, ParseError) as exc:
        raise GameFileError(path, str(exc)) from exc


def validate_counts(game: Game) -> None:
    sections = {
        'num_actions': ('actions', game.actions),
        'num_words': ('verbs', game.verbs),
        'num_rooms': ('rooms', game.rooms),
        'num_messages': ('messages', game.messages),
        'num_items': ('items', game.items),
    }
    if len(game.verbs) != len(game.nouns):
        raise EncodeError(
            f'{len(game.verbs)} verbs but {len(game.nouns)} nouns,'
            ' they are stored in pairs',
        )
    for name, (section, entries) in sections.items():
        expected = getattr(game.header, name)
        if len(entries) != expected:
            raise EncodeError(
                f'header {name} is {expected} but the game has'
                f' {len(entries)} {section}',
            )


def iter_lines(game: Game) -> 'Iterator[str]':
    yield from game.header.to_lines()
    for action in game.actions:
        yield from action.to_lines()
    for verb, noun in zip(game.verbs, game.nouns, strict=True):
        yield from verb.to_lines()
        yield from noun.to_lines()
    for room in game.rooms:
        yield from room.to_lines()
    for message in game.messages:
        yield write_str(message)
    for item in game.items:
        yield from item.to_lines()
    for action in game.actions:
        yield write_str(action.comment or '')
    yield from game.footer.to_lines()


def game_to_bytes(game: Game) -> bytes:
    validate_counts(game)
    text = ''.join(line + game.newline for line in iter_lines(game))
    try:
        return text.encode(TEXT_ENCODING)
    except UnicodeEncodeError as exc:
        raise EncodeError(
            f'character {exc.object[exc.start]!r} cannot be stored in a game file',
        ) from exc


def write_game(output: IO[bytes], game: Game) -> None:
    output.write(game_to_bytes(game))


def save_game(path: 'FilePath', game: Game) -> None:
    # encode first, so a failure leaves no partial file behind
    content = game_to_bytes(game)
    Path(path).write_bytes(content)


def dump_sections(game: Game) -> dict[str, list[str]]:
    word_length = game.header.word_length

    def dump_words(kind: str, words: 'Sequence[Word]') -> 'Iterator[str]':
        for idx, word in enumerate(words):
            yield f'== {kind} {idx} {word} // {word.truncate(word_length)}'

    def dump_actions() -> 'Iterator[str]':
        for idx, action in enumerate(game.actions):
            yield f'== ACTION {idx}'
            yield from action.resolve(game.messages)

    def dump_rooms() -> 'Iterator[str]':
        for idx, room in enumerate(game.rooms):
            yield f'== ROOM {idx}'
            yield f'\tDESCRIPTION {room.description!r}'
            if room.is_literal:
                yield '\tLITERAL'
            for direction, exit_to in room.exit_map().items():
                yield f'\tEXIT {direction} {exit_to}'

    def dump_messages() -> 'Iterator[str]':
        for idx, message in enumerate(game.messages):
            yield f'== MESSAGE {idx} {message!r}'

    def dump_items() -> 'Iterator[str]':
        for idx, item in enumerate(game.items):
            yield f'== ITEM {idx}'
            yield f'\tDESCRIPTION {item.description!r}'
            location = 'INVENTORY' if item.location == INVENTORY else item.location
            yield f'\tLOCATION {location}'
            if item.autograb is not None:
                yield f'\tAUTOGRAB {item.autograb!r}'
            if item.is_treasure:
                yield '\tTREASURE'

    footer = game.footer
    return {
        'Header': ['== HEADER', *game.header.describe()],
        'Actions': list(dump_actions()),
        'Verbs': list(dump_words('VERB', game.verbs)),
        'Nouns': list(dump_words('NOUN', game.nouns)),
        'Rooms': list(dump_rooms()),
        'Messages': list(dump_messages()),
        'Items': list(dump_items()),
        'Footer': [
            '== FOOTER',
            f'\tVERSION {footer.version}',
            f'\tADVENTURE {footer.adventure}',
            f'\tMAGIC {footer.magic}',
        ],
    }


def dump_game(game: Game) -> 'Iterator[str]':
    for lines in dump_sections(game).values():
        yield from lines


def unknown_opcodes(game: Game) -> Counter[int]:
    return Counter(
        int(action)
        for entry in game.actions
        for action in entry.actions
        if isinstance(action, UnknownOpcode)
    )
