import pytest
from hypothesis import given
from hypothesis import strategies as st

from adamsdat.parser.conditions import (
    Condition,
    ConditionType,
    join_number,
    split_number,
)
from adamsdat.parser.opcodes import (
    ActionType,
    Builtin,
    MessageIndexError,
    NoOp,
    Opcode,
    PrintMessage,
    UnknownOpcode,
    decode_pair,
    encode_pair,
)
from adamsdat.stream import EncodeError

int32 = st.integers(min_value=-(2**31), max_value=2**31 - 1)


@given(int32, st.sampled_from([20, 150]))
def test_split_join_inverse(number: int, multiplier: int) -> None:
    """
    Given any 32 bit number and a packing base,
    When it is split and joined again,
    Then the original number should come back and the low part stay in range.
    """
    high, low = split_number(number, multiplier)

    assert 0 <= low < multiplier
    assert join_number(high, low, multiplier) == number


@given(int32)
def test_condition_round_trip(number: int) -> None:
    assert int(Condition.from_int(number)) == number


@given(int32)
def test_action_type_round_trip(number: int) -> None:
    assert int(ActionType.from_int(number)) == number


@given(int32)
def test_action_pair_round_trip(number: int) -> None:
    assert encode_pair(*decode_pair(number)) == number


@pytest.mark.parametrize(
    ('number', 'expected'),
    [
        (23, Condition(ConditionType.ITEM_PRESENT, 1)),
        (60, Condition(ConditionType.PARAMETER, 3)),
        (0, Condition(ConditionType.PARAMETER, 0)),
        (19, Condition(ConditionType.COUNTER_EQ, 0)),
        (-1, Condition(ConditionType.COUNTER_EQ, -1)),
    ],
    ids=['item_present', 'parameter', 'zero', 'last_type', 'negative'],
)
def test_condition_decoding(number: int, expected: Condition) -> None:
    assert Condition.from_int(number) == expected


def test_condition_str() -> None:
    condition = Condition.from_int(23)

    assert str(condition) == 'ITEM_PRESENT 1'
    assert not condition.is_parameter
    assert Condition.from_int(60).is_parameter


@pytest.mark.parametrize(
    ('number', 'expected'),
    [
        (0, NoOp()),
        (1, PrintMessage(0)),
        (51, PrintMessage(50)),
        (52, Builtin(Opcode.GET_ITEM)),
        (89, Builtin(Opcode.DRAW_PICTURE)),
        (90, UnknownOpcode(90)),
        (101, UnknownOpcode(101)),
        (102, PrintMessage(51)),
        (150, PrintMessage(99)),
        (151, UnknownOpcode(151)),
        (-3, UnknownOpcode(-3)),
    ],
    ids=[
        'noop',
        'first_message',
        'last_low_message',
        'first_opcode',
        'last_opcode',
        'gap_start',
        'gap_end',
        'first_high_message',
        'last_high_message',
        'past_messages',
        'negative',
    ],
)
def test_action_type_decoding(number: int, expected: ActionType) -> None:
    assert ActionType.from_int(number) == expected


@pytest.mark.parametrize(
    ('opcode', 'twin'),
    [
        (Opcode.REMOVE_ITEM2, Opcode.REMOVE_ITEM),
        (Opcode.DESCRIBE_ROOM2, Opcode.DESCRIBE_ROOM),
    ],
    ids=['remove_item', 'describe_room'],
)
def test_duplicate_opcodes_keep_their_values(opcode: Opcode, twin: Opcode) -> None:
    """
    Given an opcode that behaves like another one,
    When it is decoded and encoded,
    Then it should stay distinct from its twin.
    """
    decoded = ActionType.from_int(int(opcode))

    assert decoded == Builtin(opcode)
    assert decoded != Builtin(twin)
    assert str(decoded) == opcode.name
    assert int(decoded) == int(opcode)


def test_action_pair_decoding() -> None:
    assert decode_pair(7876) == (
        Builtin(Opcode.GET_ITEM),
        Builtin(Opcode.DESCRIBE_ROOM2),
    )
    assert decode_pair(14250) == (UnknownOpcode(95), NoOp())
    assert decode_pair(150) == (PrintMessage(0), NoOp())


@pytest.mark.parametrize(
    'message',
    [100, -1],
    ids=['too_high', 'negative'],
)
def test_unencodable_message(message: int) -> None:
    with pytest.raises(MessageIndexError):
        int(PrintMessage(message))


def test_second_of_pair_out_of_range() -> None:
    """
    Given a sub-action that does not fit in the low part of a pair,
    When it is encoded as the second of a pair,
    Then an encode error should be raised instead of corrupting the first.
    """
    with pytest.raises(EncodeError):
        encode_pair(NoOp(), UnknownOpcode(200))
    with pytest.raises(EncodeError):
        encode_pair(NoOp(), UnknownOpcode(-1))

    assert encode_pair(UnknownOpcode(200), NoOp()) == 30000


def test_resolve_messages() -> None:
    messages = ['', 'The lamp flickers.']

    assert PrintMessage(1).resolve(messages) == (
        'PRINT_MESSAGE 1 // {The lamp flickers.}'
    )
    assert PrintMessage(0).resolve(messages) == 'PRINT_MESSAGE 0 // {}'
    assert PrintMessage(60).resolve(messages) == (
        'PRINT_MESSAGE 60 // {MISSING MESSAGE}'
    )
    assert Builtin(Opcode.SCORE).resolve(messages) == 'SCORE'
    assert NoOp().resolve(messages) == 'NOTHING'
    assert UnknownOpcode(95).resolve(messages) == 'UNKNOWN_OP 95'
