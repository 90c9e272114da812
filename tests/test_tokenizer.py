import pytest

from adamsdat.tokenizer import (
    IntToken,
    Location,
    MalformedIntegerError,
    TextToken,
    TokenError,
    UnexpectedCharacterError,
    UnterminatedTokenError,
    detect_newline,
    tokenize,
)


def test_integer_and_string_tokens() -> None:
    """
    Given a negative integer followed by a string with an escaped quote,
    When the data is tokenized,
    Then both tokens should be produced with the escape removed.
    """
    tokens = tokenize(b'-5 "hi\\"there"')

    assert tokens == [
        IntToken(-5, Location(1, 1)),
        TextToken('hi"there', Location(1, 4)),
    ]


def test_token_locations_span_lines() -> None:
    """
    Given tokens spread over several lines, one of them a multi-line string,
    When the data is tokenized,
    Then each token should carry the line and column of its first character.
    """
    tokens = tokenize(b' 12 \n  "a\nb" 7\n')

    assert tokens == [
        IntToken(12, Location(1, 2)),
        TextToken('a\nb', Location(2, 3)),
        IntToken(7, Location(3, 4)),
    ]


@pytest.mark.parametrize(
    ('data', 'expected'),
    [
        (b'"a\\nb"', 'anb'),
        (b'"back\\\\slash"', 'back\\slash'),
        (b'""', ''),
        (b'"caf\xe9"', 'caf\xe9'),
        (b'"two\r\nlines"', 'two\r\nlines'),
    ],
    ids=['unknown_escape', 'escaped_backslash', 'empty', 'latin1', 'crlf_inside'],
)
def test_string_contents(data: bytes, expected: str) -> None:
    """
    Given a single string token,
    When the data is tokenized,
    Then the text should keep every character except escaping backslashes.
    """
    assert tokenize(data) == [TextToken(expected, Location(1, 1))]


@pytest.mark.parametrize(
    ('data', 'value'),
    [
        (b'2147483647 ', 2**31 - 1),
        (b'-2147483648 ', -(2**31)),
        (b'0\t', 0),
        (b'007\n', 7),
    ],
    ids=['int32_max', 'int32_min', 'zero_tab', 'leading_zeros'],
)
def test_integer_bounds(data: bytes, value: int) -> None:
    """
    Given an integer inside the signed 32 bit range,
    When the data is tokenized,
    Then its value should be returned.
    """
    assert tokenize(data) == [IntToken(value, Location(1, 1))]


@pytest.mark.parametrize(
    ('data', 'error', 'message'),
    [
        (b' 1 \n x', UnexpectedCharacterError, "2:2: unexpected character 'x'"),
        (
            b'12a ',
            UnexpectedCharacterError,
            "1:3: unexpected character 'a' in integer",
        ),
        (
            b'- 5 ',
            UnexpectedCharacterError,
            "1:2: unexpected character ' ' in integer",
        ),
        (
            b'12"x" ',
            UnexpectedCharacterError,
            "1:3: unexpected character '\"' in integer",
        ),
        (
            b'2147483648 ',
            MalformedIntegerError,
            '1:1: integer 2147483648 does not fit in 32 bits',
        ),
        (
            b'1 "abc',
            UnterminatedTokenError,
            '1:3: end of input inside string',
        ),
        (
            b'"ends with escape\\',
            UnterminatedTokenError,
            '1:1: end of input inside string',
        ),
        (
            b' 1 \x0b 2 ',
            UnexpectedCharacterError,
            "1:4: unexpected character '\\x0b'",
        ),
        (b' 5', UnterminatedTokenError, '1:2: end of input inside integer'),
        (b'-', UnterminatedTokenError, '1:1: end of input inside integer'),
    ],
    ids=[
        'stray_character',
        'letter_in_integer',
        'lonely_sign',
        'quote_in_integer',
        'overflow',
        'unterminated_string',
        'unterminated_escape',
        'vertical_tab',
        'integer_at_eof',
        'sign_at_eof',
    ],
)
def test_tokenizer_errors(
    data: bytes,
    error: type[TokenError],
    message: str,
) -> None:
    """
    Given malformed game data,
    When the data is tokenized,
    Then a located error should be raised.
    """
    with pytest.raises(error) as excinfo:
        tokenize(data)

    assert str(excinfo.value) == message
    assert isinstance(excinfo.value, ValueError)


def test_empty_input() -> None:
    assert tokenize(b'') == []
    assert tokenize(b' \r\n\t ') == []


@pytest.mark.parametrize(
    ('data', 'newline'),
    [
        (b' 1 \n 2 \n', '\n'),
        (b' 1 \r\n 2 \r\n', '\r\n'),
        (b' 1 ', '\n'),
        (b'\n', '\n'),
    ],
    ids=['unix', 'dos', 'no_newline', 'only_newline'],
)
def test_detect_newline(data: bytes, newline: str) -> None:
    assert detect_newline(data) == newline
