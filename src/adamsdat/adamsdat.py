import argparse
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import IO, TYPE_CHECKING, Any

from adamsdat.gamedat import (
    GameFileError,
    ParseError,
    dump_game,
    game_to_bytes,
    load_game,
    save_game,
    unknown_opcodes,
)
from adamsdat.stream import EncodeError

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from adamsdat.gamedat import Game
    from adamsdat.stream import FilePath


def write_lines(lines: 'Iterable[str]', output: IO[str]) -> None:
    for line in lines:
        print(line, file=output)


def write_dump(game: 'Game', output: 'FilePath') -> None:
    output = Path(output)
    with output.open('w', encoding='utf-8') as output_file:
        write_lines(dump_game(game), output_file)


def first_difference(got: bytes, want: bytes) -> int | None:
    for offset, (left, right) in enumerate(zip(got, want)):
        if left != right:
            return offset
    if len(got) != len(want):
        return min(len(got), len(want))
    return None


def check_round_trip(game: 'Game', original: bytes) -> str | None:
    """
    Re-encodes the game and compares it with the bytes it was read from.

    Returns a description of the first mismatch, or None when identical.
    """
    encoded = game_to_bytes(game)
    offset = first_difference(encoded, original)
    if offset is None:
        return None
    line = original.count(b'\n', 0, offset) + 1
    return (
        f'rebuilt file differs at byte {offset} (line {line}):'
        f' expected {original[offset : offset + 16]!r},'
        f' got {encoded[offset : offset + 16]!r}'
    )


@dataclass
class CLIParams:
    path: Path
    dump: Path | None
    rebuild: Path | None
    check: bool


class OptionalFileAction(argparse.Action):
    def __init__(
        self,
        option_strings: 'Sequence[str]',
        dest: str,
        default_path: Path,
        **kwargs: Any,
    ) -> None:
        self.default_path = default_path
        super().__init__(option_strings, dest, **kwargs)

    def __call__(
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: 'str | Sequence[Any] | None',
        option_string: str | None = None,
    ) -> None:
        if values is None:
            setattr(namespace, self.dest, self.default_path)
        else:
            setattr(namespace, self.dest, values)


def add_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        '--dump',
        '-d',
        nargs='?',
        type=Path,
        action=OptionalFileAction,
        default=None,
        default_path=Path('game.txt'),
        help='File to output a readable dump of the game to (default: game.txt)',
    )
    parser.add_argument(
        '--rebuild',
        '-r',
        nargs='?',
        type=Path,
        action=OptionalFileAction,
        default=None,
        default_path=Path('rebuilt.dat'),
        help='File to write the re-encoded game to (default: rebuilt.dat)',
    )
    parser.add_argument(
        '--check',
        '-c',
        action='store_true',
        required=False,
        help='Verify that re-encoding reproduces the game file byte for byte',
    )


def menu(args: 'Sequence[str] | None' = None) -> CLIParams:
    parser = argparse.ArgumentParser(
        description='Read and rewrite Scott Adams adventure data files.',
    )
    parser.add_argument(
        'path',
        type=Path,
        help='Path to the game file (.dat)',
    )
    add_arguments(parser)
    return CLIParams(**vars(parser.parse_args(args)))


def main(args: CLIParams) -> bool:  # noqa: PLR0911
    error_stream = sys.stderr

    path = Path(args.path)
    if not path.exists():
        print(f"ERROR: Given path '{path}' does not exists.", file=error_stream)
        return True

    if not path.is_file():
        print(f"ERROR: Given path '{path}' is not a file.", file=error_stream)
        return True

    try:
        game = load_game(path)
    except GameFileError as exc:
        if isinstance(exc.__cause__, ParseError):
            exc.__cause__.show(str(path))
        else:
            print(f'ERROR: {exc}', file=error_stream)
        return True

    header = game.header
    print(
        f'Loaded adventure {game.footer.adventure} version {game.footer.version}:'
        f' {header.num_rooms} rooms, {header.num_items} items,'
        f' {header.num_actions} actions, {header.num_words} words,'
        f' {header.num_messages} messages',
        file=error_stream,
    )

    try:
        if args.dump is not None:
            write_dump(game, args.dump)
        if args.rebuild is not None:
            save_game(args.rebuild, game)
        if args.check:
            mismatch = check_round_trip(game, path.read_bytes())
            if mismatch is not None:
                print(f'ERROR: {mismatch}', file=error_stream)
                return True
            print('Round trip OK', file=error_stream)
        if args.dump is None and args.rebuild is None and not args.check:
            write_lines(dump_game(game), sys.stdout)
    except EncodeError as exc:
        print(f'ERROR: Cannot encode game: {exc}', file=error_stream)
        return True
    except OSError as exc:
        print(f'ERROR: {exc}', file=error_stream)
        return True

    for opcode, occurences in sorted(unknown_opcodes(game).items()):
        print(
            f'WARNING: Unknown action opcode {opcode} appears {occurences} times',
            file=error_stream,
        )
    return False


if __name__ == '__main__':
    sys.exit(main(menu()))
