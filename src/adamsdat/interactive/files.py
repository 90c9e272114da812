import os
from collections.abc import Sequence
from pathlib import Path
from typing import Any, ClassVar

import urwid  # type: ignore[import-untyped]

EMOJI = os.environ.get('ADAMSDAT_EMOJI_SUPPORT')
CLOSED_DIR_ICON = '📁' if EMOJI else ''
OPEN_DIR_ICON = '📂' if EMOJI else ''
FILE_ICON = '📄' if EMOJI else ''
BLOCKED_ICON = '🚫' if EMOJI else ''

GAME_FILE_PATTERNS = ('*.dat', '*.DAT')

EDIT_MODE_INSTRUCTIONS = "Type the path. Press 'Esc' to exit."
SELECTION_MODE_INSTRUCTIONS = (
    "Press 'Enter' on a directory to open it or on a game file to load it, "
    "'Backspace' to go up, 'T' to type path, 'Ctrl+D' to quit"
)


class IconButton(urwid.Button):  # type: ignore[misc]
    button_left: urwid.Widget = urwid.Text('>')
    button_right: urwid.Widget = urwid.Text('')

    def __init__(
        self, label: str, *args: Any, icon: str = OPEN_DIR_ICON, **kwargs: Any
    ) -> None:
        self.icon = icon
        super().__init__(f'{self.icon} {label}', *args, **kwargs)

    def get_label(self) -> str:
        label = super().get_label()
        assert isinstance(label, str)
        return label.removeprefix(f'{self.icon} ')


def list_game_files(directory: Path) -> list[Path]:
    found = {
        entry
        for pattern in GAME_FILE_PATTERNS
        for entry in directory.glob(pattern)
        if entry.is_file()
    }
    return sorted(found)


class GameFileSelector(urwid.WidgetWrap):  # type: ignore[misc]
    signals: ClassVar[Sequence[str]] = ['selected']

    def __init__(self, initial_dir: Path | None = None) -> None:
        self.current_dir = initial_dir or Path.cwd()
        self.typing_mode = False
        self.walker = urwid.SimpleFocusListWalker(self.get_directory_items())
        self.listbox = urwid.ScrollBar(urwid.ListBox(self.walker))
        self.file_walker = urwid.SimpleFocusListWalker(self.get_file_items())
        self.file_listbox = urwid.ScrollBar(urwid.ListBox(self.file_walker))
        self.header = urwid.Edit(edit_text=str(self.current_dir))
        self.footer = urwid.Text(SELECTION_MODE_INSTRUCTIONS)

        self.view = urwid.Frame(
            urwid.Columns(
                [
                    urwid.LineBox(self.listbox, ' Directories ', 'left'),
                    urwid.LineBox(self.file_listbox, ' Game Files ', 'left'),
                ],
            ),
            header=urwid.LineBox(self.header, ' Location ', 'left'),
            footer=self.footer,
        )
        urwid.connect_signal(self.header, 'postchange', self.on_path_change)
        super().__init__(self.view)

    def on_path_change(self, _edit: urwid.Edit, new_edit_text: str) -> None:
        self.handle_path_input()

    def get_directory_items(self) -> list[urwid.AttrMap]:
        items = []
        if str(self.current_dir) != self.current_dir.root:
            item = IconButton('..', self.change_directory)
            items.append(urwid.AttrMap(item, None, focus_map='reversed'))
        for entry in sorted(self.current_dir.iterdir()):
            if not entry.is_dir():
                continue
            if os.access(entry, os.R_OK):
                item = IconButton(
                    entry.name,
                    self.change_directory,
                    icon=CLOSED_DIR_ICON,
                )
                items.append(urwid.AttrMap(item, None, focus_map='reversed'))
            else:
                text = urwid.Text(f'- {BLOCKED_ICON} {entry.name} (no access)')
                items.append(urwid.AttrMap(text, None, focus_map='reversed'))
        return items

    def get_file_items(self) -> list[urwid.AttrMap]:
        return [
            urwid.AttrMap(
                IconButton(entry.name, self.select_file, icon=FILE_ICON),
                None,
                focus_map='reversed',
            )
            for entry in list_game_files(self.current_dir)
        ]

    def refresh(self) -> None:
        self.walker[:] = self.get_directory_items()
        self.file_walker[:] = self.get_file_items()

    def change_directory(self, button: urwid.Button) -> None:
        selected_dir = button.get_label()
        if selected_dir == '..':
            self.current_dir = self.current_dir.parent
        else:
            self.current_dir = self.current_dir / selected_dir
        self.header.set_edit_text(str(self.current_dir))
        self.refresh()
        self.exit_path_mode()

    def select_file(self, button: urwid.Button) -> None:
        urwid.emit_signal(self, 'selected', self.current_dir / button.get_label())

    def enter_path_mode(self) -> None:
        self.typing_mode = True
        self.header.set_edit_text(str(self.current_dir))
        self.header.set_edit_pos(len(self.header.get_edit_text()))
        self.footer.set_text(EDIT_MODE_INSTRUCTIONS)
        self.view.set_focus('header')

    def exit_path_mode(self) -> None:
        self.typing_mode = False
        self.footer.set_text(SELECTION_MODE_INSTRUCTIONS)
        self.header.set_edit_pos(len(self.header.get_edit_text()))
        self.view.set_focus('body')

    def handle_path_input(self) -> None:
        if not self.typing_mode:
            self.typing_mode = True
            self.footer.set_text(EDIT_MODE_INSTRUCTIONS)
            self.view.set_focus('header')
        path = Path(self.header.get_edit_text())
        if path.is_dir():
            self.current_dir = path
            self.refresh()

    def keypress(self, size: tuple[int, int], key: str) -> str | None:
        key = super().keypress(size, key)
        if self.typing_mode:
            if key == 'esc':
                self.exit_path_mode()
                return None
            return key

        if key == 'backspace':
            self.change_directory(IconButton('..'))
            return None
        if isinstance(key, str) and key.lower() == 't':
            self.enter_path_mode()
            return None

        return key
