from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING, override

from adamsdat.parser.conditions import join_number, split_number
from adamsdat.stream import EncodeError

if TYPE_CHECKING:
    from collections.abc import Sequence

ACTION_BASE = 150

NOOP = 0

# raw values that print a message, the upper range is offset by 51
LOW_MESSAGES = range(1, 52)
HIGH_MESSAGES = range(102, 151)
HIGH_MESSAGE_OFFSET = 51
MAX_MESSAGE = 99


class Opcode(IntEnum):
    GET_ITEM = 52
    DROP_ITEM = 53
    MOVE_PLAYER = 54
    REMOVE_ITEM = 55
    SET_DARKNESS = 56
    CLEAR_DARKNESS = 57
    SET_BIT = 58
    REMOVE_ITEM2 = 59  # same behaviour as REMOVE_ITEM
    CLEAR_BIT = 60
    DEATH = 61
    PUT_ITEM = 62
    GAME_OVER = 63
    DESCRIBE_ROOM = 64
    SCORE = 65
    INVENTORY = 66
    SET_BIT0 = 67
    CLEAR_BIT0 = 68
    REFILL_LIGHT = 69
    CLEAR_SCREEN = 70
    SAVE_GAME = 71
    SWAP_ITEMS = 72
    CONTINUE = 73
    TAKE_ITEM = 74
    MOVE_ITEM_TO_ITEM = 75
    DESCRIBE_ROOM2 = 76  # same behaviour as DESCRIBE_ROOM
    DECREMENT_COUNTER = 77
    PRINT_COUNTER = 78
    SET_COUNTER = 79
    SWAP_LOCATION = 80
    SELECT_COUNTER = 81
    ADD_TO_COUNTER = 82
    SUB_FROM_COUNTER = 83
    ECHO_NOUN = 84
    ECHO_NOUN_CR = 85
    ECHO_CR = 86
    SWAP_LOCATION_N = 87
    DELAY = 88
    DRAW_PICTURE = 89


class MessageIndexError(EncodeError):
    def __init__(self, message: int) -> None:
        super().__init__(
            f'message {message} cannot be referenced by an action,'
            f' valid messages are 0..{MAX_MESSAGE}',
        )
        self.message = message


@dataclass(frozen=True)
class ActionType:
    """A single sub-action; four of them make up the effects of an Action."""

    @classmethod
    def from_int(cls, num: int) -> 'ActionType':
        if num == NOOP:
            return NoOp()
        if num in LOW_MESSAGES:
            return PrintMessage(num - LOW_MESSAGES.start)
        if num in HIGH_MESSAGES:
            return PrintMessage(num - HIGH_MESSAGE_OFFSET)
        try:
            return Builtin(Opcode(num))
        except ValueError:
            return UnknownOpcode(num)

    def __int__(self) -> int:
        raise NotImplementedError

    def resolve(self, messages: 'Sequence[str]') -> str:
        return str(self)


@dataclass(frozen=True)
class NoOp(ActionType):
    @override
    def __int__(self) -> int:
        return NOOP

    def __str__(self) -> str:
        return 'NOTHING'


@dataclass(frozen=True)
class PrintMessage(ActionType):
    message: int

    @override
    def __int__(self) -> int:
        if 0 <= self.message < len(LOW_MESSAGES):
            return self.message + LOW_MESSAGES.start
        if len(LOW_MESSAGES) <= self.message <= MAX_MESSAGE:
            return self.message + HIGH_MESSAGE_OFFSET
        raise MessageIndexError(self.message)

    def __str__(self) -> str:
        return f'PRINT_MESSAGE {self.message}'

    @override
    def resolve(self, messages: 'Sequence[str]') -> str:
        text = (
            messages[self.message]
            if 0 <= self.message < len(messages)
            else 'MISSING MESSAGE'
        )
        return f'{self} // {{{text}}}'


@dataclass(frozen=True)
class Builtin(ActionType):
    opcode: Opcode

    @override
    def __int__(self) -> int:
        return int(self.opcode)

    def __str__(self) -> str:
        return self.opcode.name


@dataclass(frozen=True)
class UnknownOpcode(ActionType):
    raw: int

    @override
    def __int__(self) -> int:
        return self.raw

    def __str__(self) -> str:
        return f'UNKNOWN_OP {self.raw}'


def decode_pair(num: int) -> tuple[ActionType, ActionType]:
    first, second = split_number(num, ACTION_BASE)
    return ActionType.from_int(first), ActionType.from_int(second)


def encode_pair(first: ActionType, second: ActionType) -> int:
    low = int(second)
    if not 0 <= low < ACTION_BASE:
        raise EncodeError(f'{second} cannot be stored as the second of a pair')
    return join_number(int(first), low, ACTION_BASE)
