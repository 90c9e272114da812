import argparse
import io
import sys
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import IO, TYPE_CHECKING, Any

import tomli
import tomli_w
import urwid  # type: ignore[import-untyped]

from adamsdat.adamsdat import CLIParams, add_arguments
from adamsdat.adamsdat import main as adamsdat_main
from adamsdat.gamedat import GameFileError, dump_sections, load_game
from adamsdat.interactive.files import GameFileSelector
from adamsdat.interactive.widgets import OutputPathsWidget, SectionListWidget

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

CONFIG_NAME = 'adamsdat.toml'

SECTIONS = (
    'Header',
    'Actions',
    'Verbs',
    'Nouns',
    'Rooms',
    'Messages',
    'Items',
    'Footer',
)

CONFIG_KEYS = ('selected_section', 'dump_output', 'rebuild_output')

DEFAULT_STATE: dict[str, Any] = {
    'selected_section': 'Header',
    'dump_output': 'game.txt',
    'rebuild_output': 'rebuilt.dat',
}


@dataclass
class InteractiveCLIParams(CLIParams):
    non_interactive: bool = False


@contextmanager
def redirect_stdout_stderr(file: 'IO[str]') -> 'Iterator[None]':
    old_stdout, old_stderr = sys.stdout, sys.stderr
    sys.stdout = sys.stderr = file
    try:
        yield
    finally:
        sys.stdout, sys.stderr = old_stdout, old_stderr


def validate_config(config: 'dict[str, Any]') -> None:
    section = config.get('selected_section', DEFAULT_STATE['selected_section'])
    if section not in SECTIONS:
        raise ValueError(f'unknown section {section!r}')
    for key in ('dump_output', 'rebuild_output'):
        if not isinstance(config.get(key, ''), str):
            raise TypeError(f'{key} should be a path')


def load_directory_config(directory: Path) -> 'dict[str, Any]':
    """Load the state from a configuration file in the directory."""
    config_path = directory / CONFIG_NAME
    error_stream = sys.stderr
    if not config_path.exists():
        return {}
    try:
        with config_path.open('rb') as config_file:
            config_data = tomli.load(config_file)
        validate_config(config_data)
    except Exception as e:  # noqa: BLE001
        print(
            'WARNING: Could not load configuration file:',
            e,
            file=error_stream,
        )
        return {}
    return {key: config_data[key] for key in CONFIG_KEYS if key in config_data}


def save_directory_config(directory: Path, state: 'dict[str, Any]') -> None:
    """Save relevant state to a configuration file in the directory."""
    config_path = directory / CONFIG_NAME
    config_data = {key: state[key] for key in CONFIG_KEYS if key in state}
    with config_path.open('wb') as config_file:
        tomli_w.dump(config_data, config_file)


def run_adamsdat(game_file: Path, state: 'dict[str, Any]', action: str) -> bool:
    return adamsdat_main(
        CLIParams(
            path=game_file,
            dump=Path(state['dump_output']) if action == 'Dump' else None,
            rebuild=Path(state['rebuild_output']) if action == 'Rebuild' else None,
            check=action == 'Check',
        )
    )


class InteractiveBrowser:
    def __init__(self, initial_state: dict[str, Any] | None = None) -> None:
        self.state_tracker: dict[str, Any] = {
            **DEFAULT_STATE,
            'selected_directory': Path.cwd(),
            'selected_file': None,
        }
        if initial_state:
            if initial_state.get('selected_file') is not None:
                self.configure_file(initial_state['selected_file'])
            self.state_tracker.update(
                {key: val for key, val in initial_state.items() if val is not None}
            )

        self.sections: dict[str, list[str]] = {}
        self.output_content = None
        self.output_content_box = None
        self.program_output = ''

        self.palette = [
            ('reversed', 'standout', ''),
            ('bold', 'default,bold', ''),
        ]

    def run(self) -> None:
        self.loop = urwid.MainLoop(
            None,
            palette=self.palette,
            unhandled_input=self.unhandled_input,
        )
        if self.state_tracker['selected_file'] is None:
            self.show_file_selection_screen()
        else:
            self.show_main_screen()
        self.loop.run()

    def configure_file(self, path: str | Path) -> None:
        """Select the game file and load the configuration next to it."""
        game_file = Path(path)
        self.state_tracker['selected_file'] = game_file
        self.state_tracker['selected_directory'] = game_file.parent
        self.state_tracker.update(load_directory_config(game_file.parent))

    def load_sections(self) -> str:
        try:
            game = load_game(self.state_tracker['selected_file'])
        except GameFileError as exc:
            self.sections = {}
            return f'ERROR: {exc}'
        self.sections = dump_sections(game)
        return f'Loaded {self.state_tracker["selected_file"]}'

    def on_exit(self, button: urwid.Button) -> None:
        raise urwid.ExitMainLoop

    def update_output_content(self, text: str) -> None:
        lines = text.splitlines()
        assert self.output_content is not None
        self.output_content.body = urwid.SimpleFocusListWalker(
            [urwid.Text(line) for line in lines]
        )

    def on_section_selected(self, section: str) -> None:
        assert self.output_content_box is not None
        if not self.sections:
            self.update_output_content(self.program_output)
            return
        self.update_output_content('\n'.join(self.sections[section]).expandtabs(4))
        self.output_content_box.set_title(f' {section} ')

    def show_main_screen(self) -> None:
        self.program_output = self.load_sections()
        paths_widget = OutputPathsWidget(self.state_tracker)

        self.output_content = urwid.ListBox(
            urwid.SimpleFocusListWalker([urwid.Text(self.program_output)])
        )
        self.output_content_box = urwid.LineBox(
            urwid.BoxAdapter(urwid.ScrollBar(self.output_content), height=16),
            ' Program Output ',
            'left',
        )
        section_list = SectionListWidget(
            SECTIONS,
            self.state_tracker,
            self.on_section_selected,
        )

        def on_action(button: urwid.Button, button_label: str) -> None:
            assert self.output_content_box is not None
            paths_widget.update_inner_state()
            game_file = self.state_tracker['selected_file']

            self.update_output_content('...Running...')
            self.output_content_box.set_title(' Program Output ')
            self.loop.draw_screen()

            try:
                with io.StringIO() as file, redirect_stdout_stderr(file):
                    exit_with_error = run_adamsdat(
                        game_file,
                        self.state_tracker,
                        button_label,
                    )
                    self.program_output = file.getvalue().expandtabs()
                    self.update_output_content(self.program_output)

            except Exception as e:  # noqa: BLE001
                self.update_output_content(f'ERROR: {e!r}')
            else:
                # Save configuration only after successful action
                if not exit_with_error:
                    save_directory_config(
                        self.state_tracker['selected_directory'],
                        self.state_tracker,
                    )

        exit_button = urwid.Button('Exit', on_press=self.on_exit)
        action_buttons = [
            urwid.Button(label, on_press=on_action, user_data=label)
            for label in ('Dump', 'Rebuild', 'Check')
        ]

        buttons = urwid.Columns(
            [
                urwid.Columns([('fixed', 20, exit_button), urwid.Text('')]),
                urwid.Columns(action_buttons, dividechars=5),
            ],
            dividechars=1,
        )

        change_file_button = urwid.Button(
            'Change',
            on_press=self.show_file_selection_screen,
        )
        file_section = urwid.LineBox(
            urwid.Columns(
                [
                    ('fixed', 20, change_file_button),
                    urwid.Text(str(self.state_tracker['selected_file'])),
                ],
                dividechars=5,
            ),
            ' Game File ',
            'left',
        )

        top_widgets = urwid.LineBox(
            urwid.Pile(
                [
                    file_section,
                    urwid.LineBox(paths_widget, ' Outputs ', 'left'),
                ],
                focus_item=1,
            )
        )

        browser = urwid.Columns(
            [
                (
                    'fixed',
                    20,
                    urwid.LineBox(section_list, ' Sections ', 'left'),
                ),
                self.output_content_box,
            ],
        )

        main_layout = urwid.Pile(
            [
                top_widgets,
                urwid.LineBox(buttons, ' Actions ', 'left'),
                browser,
            ]
        )

        self.loop.widget = urwid.Filler(main_layout, valign='top')
        if self.sections:
            self.on_section_selected(self.state_tracker['selected_section'])

    def on_file_selected(self, path: Path) -> None:
        self.configure_file(path)
        self.show_main_screen()

    def show_file_selection_screen(self, button: urwid.Button | None = None) -> None:
        selector = GameFileSelector(self.state_tracker['selected_directory'])
        urwid.connect_signal(selector, 'selected', self.on_file_selected)
        self.loop.widget = urwid.LineBox(selector)

    def unhandled_input(self, key: str) -> None:
        if key == 'ctrl d':
            raise urwid.ExitMainLoop


def menu(args: 'Sequence[str] | None' = None) -> InteractiveCLIParams:
    parser = argparse.ArgumentParser(description='adamsdat')
    parser.add_argument(
        'path',
        nargs='?',
        default=Path.cwd(),
        type=Path,
        help='Game file to open, or a directory to browse',
    )
    parser.add_argument(
        '--non-interactive',
        '-n',
        action='store_true',
        help='Run in non-interactive mode',
    )
    add_arguments(parser)
    return InteractiveCLIParams(**vars(parser.parse_args(args)))


def main() -> None:
    args = menu()

    non_interactive_mode = (
        args.non_interactive
        or args.dump is not None
        or args.rebuild is not None
        or args.check
    )

    if non_interactive_mode:
        sys.exit(adamsdat_main(args))

    initial_state: dict[str, Any] = {}
    if args.path.is_file():
        initial_state['selected_file'] = args.path
    else:
        initial_state['selected_directory'] = args.path
    InteractiveBrowser(initial_state).run()


if __name__ == '__main__':
    main()
