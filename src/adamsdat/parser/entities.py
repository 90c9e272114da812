import re
from dataclasses import dataclass, fields, replace
from typing import TYPE_CHECKING

from adamsdat.parser.conditions import Condition, join_number, split_number
from adamsdat.parser.opcodes import ACTION_BASE, decode_pair, encode_pair
from adamsdat.stream import (
    STAR,
    EncodeError,
    read_starred,
    write_int,
    write_starred,
    write_str,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Sequence
    from typing import Self

    from adamsdat.parser.opcodes import ActionType
    from adamsdat.stream import TokenStream

ETERNAL_LIGHT = -1
INVENTORY = -1

CONDITION_COUNT = 5
ACTION_TYPE_COUNT = 4
EXIT_COUNT = 6
DIRECTIONS = ('NORTH', 'SOUTH', 'EAST', 'WEST', 'UP', 'DOWN')

# fields stored as count - 1 ("option base 0")
ADJUSTED_COUNTS = frozenset(
    {'num_items', 'num_actions', 'num_words', 'num_rooms', 'num_messages'},
)

AUTOGRAB_PATTERN = re.compile(r'(?P<description>.*)/(?P<autograb>.*)/', re.DOTALL)


@dataclass(frozen=True)
class Header:
    unknown0: int
    num_items: int
    num_actions: int
    num_words: int
    num_rooms: int
    max_inventory: int
    starting_room: int
    num_treasures: int
    word_length: int
    light_duration: int
    num_messages: int
    treasure_room: int

    @classmethod
    def from_stream(cls, stream: 'TokenStream') -> 'Self':
        values = {}
        for field in fields(cls):
            num = stream.next_int()
            values[field.name] = num + 1 if field.name in ADJUSTED_COUNTS else num
        return cls(**values)

    def stored_values(self) -> 'Iterator[tuple[str, int]]':
        for field in fields(self):
            num = getattr(self, field.name)
            yield field.name, num - 1 if field.name in ADJUSTED_COUNTS else num

    def to_lines(self) -> 'Iterator[str]':
        for _, num in self.stored_values():
            yield write_int(num)

    @property
    def has_eternal_light(self) -> bool:
        return self.light_duration == ETERNAL_LIGHT

    def describe(self) -> 'Iterator[str]':
        for field in fields(self):
            yield f'\t{field.name.upper()} {getattr(self, field.name)}'


@dataclass(frozen=True)
class Action:
    verb_index: int
    noun_index: int
    conditions: 'tuple[Condition, ...]'
    actions: 'tuple[ActionType, ...]'
    comment: str | None = None

    def __post_init__(self) -> None:
        if len(self.conditions) != CONDITION_COUNT:
            raise ValueError(
                f'an action has {CONDITION_COUNT} conditions,'
                f' got {len(self.conditions)}',
            )
        if len(self.actions) != ACTION_TYPE_COUNT:
            raise ValueError(
                f'an action has {ACTION_TYPE_COUNT} sub-actions,'
                f' got {len(self.actions)}',
            )

    @classmethod
    def from_stream(cls, stream: 'TokenStream') -> 'Self':
        verb_index, noun_index = split_number(stream.next_int(), ACTION_BASE)
        conditions = tuple(
            Condition.from_int(stream.next_int()) for _ in range(CONDITION_COUNT)
        )
        actions = tuple(
            action
            for _ in range(ACTION_TYPE_COUNT // 2)
            for action in decode_pair(stream.next_int())
        )
        # comments live in their own block after the items
        return cls(verb_index, noun_index, conditions, actions)

    def with_comment(self, comment: str) -> 'Self':
        return replace(self, comment=comment or None)

    def to_lines(self) -> 'Iterator[str]':
        yield write_int(join_number(self.verb_index, self.noun_index, ACTION_BASE))
        for condition in self.conditions:
            yield write_int(int(condition))
        pairs = zip(self.actions[::2], self.actions[1::2], strict=True)
        for first, second in pairs:
            yield write_int(encode_pair(first, second))

    @property
    def is_occurrence(self) -> bool:
        return self.verb_index == 0

    def resolve(self, messages: 'Sequence[str]') -> 'Iterator[str]':
        yield f'\tWORDS {self.verb_index} {self.noun_index}'
        for condition in self.conditions:
            yield f'\tIF {condition}'
        for action in self.actions:
            yield f'\tDO {action.resolve(messages)}'
        if self.comment is not None:
            yield f'\tCOMMENT {self.comment!r}'


@dataclass(frozen=True)
class Word:
    text: str
    is_synonym: bool = False

    @classmethod
    def from_stream(cls, stream: 'TokenStream') -> 'Self':
        return cls(*read_starred(stream))

    def to_lines(self) -> 'Iterator[str]':
        yield write_starred(self.text, self.is_synonym)

    def truncate(self, word_length: int) -> str:
        return self.text[:word_length]

    def __str__(self) -> str:
        return STAR + self.text if self.is_synonym else self.text


def group_synonyms(words: 'Iterable[Word]') -> list[list[str]]:
    """
    Groups each word with the synonyms following it.

    Empty words and the '.' padding are skipped.
    """
    grouped: list[list[str]] = []
    for word in words:
        if not word.text or word.text == '.':
            continue
        if word.is_synonym and grouped:
            grouped[-1].append(word.text)
        else:
            grouped.append([word.text])
    return grouped


@dataclass(frozen=True)
class Room:
    exits: 'tuple[int, ...]'
    description: str
    is_literal: bool = False

    def __post_init__(self) -> None:
        if len(self.exits) != EXIT_COUNT:
            raise ValueError(
                f'a room has {EXIT_COUNT} exits, got {len(self.exits)}',
            )

    @classmethod
    def from_stream(cls, stream: 'TokenStream') -> 'Self':
        exits = tuple(stream.next_int() for _ in range(EXIT_COUNT))
        description, is_literal = read_starred(stream)
        return cls(exits, description, is_literal)

    def to_lines(self) -> 'Iterator[str]':
        for exit_to in self.exits:
            yield write_int(exit_to)
        yield write_starred(self.description, self.is_literal)

    def exit_map(self) -> dict[str, int]:
        return {
            direction: exit_to
            for direction, exit_to in zip(DIRECTIONS, self.exits, strict=True)
            if exit_to != 0
        }


@dataclass(frozen=True)
class Item:
    description: str
    location: int
    autograb: str | None = None

    @classmethod
    def from_stream(cls, stream: 'TokenStream') -> 'Self':
        description = stream.next_str()
        location = stream.next_int()
        matched = AUTOGRAB_PATTERN.fullmatch(description)
        if matched is None:
            return cls(description, location)
        return cls(matched['description'], location, matched['autograb'])

    def to_lines(self) -> 'Iterator[str]':
        text = self.description
        if self.autograb is not None:
            text += f'/{self.autograb}/'
        elif AUTOGRAB_PATTERN.fullmatch(text):
            raise EncodeError(
                f'item description {text!r} would be read back with an autograb word',
            )
        # the location shares the line with the description
        yield write_str(text) + write_int(self.location)

    @property
    def is_treasure(self) -> bool:
        return self.description.startswith(STAR)

    @property
    def is_carried(self) -> bool:
        return self.location == INVENTORY


@dataclass(frozen=True)
class Footer:
    version: int
    adventure: int
    magic: int

    @classmethod
    def from_stream(cls, stream: 'TokenStream') -> 'Self':
        return cls(stream.next_int(), stream.next_int(), stream.next_int())

    def to_lines(self) -> 'Iterator[str]':
        yield write_int(self.version)
        yield write_int(self.adventure)
        yield write_int(self.magic)
