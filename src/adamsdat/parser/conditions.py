from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Self

CONDITION_BASE = 20


class ConditionType(IntEnum):
    PARAMETER = 0  # not a predicate, passes its value to the sub-actions
    ITEM_CARRIED = 1
    ITEM_IN_ROOM = 2
    ITEM_PRESENT = 3
    PLAYER_IN_ROOM = 4
    ITEM_NOT_IN_ROOM = 5
    ITEM_NOT_CARRIED = 6
    PLAYER_NOT_IN_ROOM = 7
    BIT_SET = 8
    BIT_CLEAR = 9
    INVENTORY_NOT_EMPTY = 10
    INVENTORY_EMPTY = 11
    ITEM_NOT_PRESENT = 12
    ITEM_IN_GAME = 13
    ITEM_NOT_IN_GAME = 14
    COUNTER_LE = 15
    COUNTER_GE = 16
    ITEM_MOVED = 17
    ITEM_NOT_MOVED = 18
    COUNTER_EQ = 19


def split_number(number: int, multiplier: int) -> tuple[int, int]:
    """
    Decodes a number packed as high * multiplier + low into (high, low).

    Floor division keeps low in [0, multiplier) for negative numbers too,
    so join_number always restores the original.
    """
    return divmod(number, multiplier)


def join_number(high: int, low: int, multiplier: int) -> int:
    return high * multiplier + low


@dataclass(frozen=True)
class Condition:
    ctype: ConditionType
    parameter: int = 0

    @classmethod
    def from_int(cls, num: int) -> 'Self':
        parameter, ctype = split_number(num, CONDITION_BASE)
        return cls(ConditionType(ctype), parameter)

    def __int__(self) -> int:
        return join_number(self.parameter, self.ctype, CONDITION_BASE)

    def __str__(self) -> str:
        return f'{self.ctype.name} {self.parameter}'

    @property
    def is_parameter(self) -> bool:
        return self.ctype == ConditionType.PARAMETER
