from collections.abc import Callable, Sequence
from typing import Any

import urwid  # type: ignore[import-untyped]


class SectionListWidget(urwid.WidgetWrap):  # type: ignore[misc]
    def __init__(
        self,
        sections: Sequence[str],
        state_tracker: dict[str, Any],
        on_section_selected: Callable[[str], None],
    ) -> None:
        self.sections = sections
        self.state_tracker = state_tracker
        self.on_section_selected = on_section_selected
        self.widget = self.create_widget()
        super().__init__(self.widget)

    def create_widget(self) -> urwid.Widget:
        radio_button_group: list[urwid.RadioButton] = []
        selected = self.state_tracker.get('selected_section')
        radio_buttons = [
            urwid.AttrMap(
                urwid.RadioButton(
                    radio_button_group,
                    section,
                    state=(section == selected),
                    on_state_change=self.on_radio_change,
                    user_data=section,
                ),
                None,
                focus_map='reversed',
            )
            for section in self.sections
        ]
        return urwid.BoxAdapter(
            urwid.ListBox(urwid.SimpleFocusListWalker(radio_buttons)),
            height=len(radio_buttons),
        )

    def on_radio_change(
        self,
        radio_button: urwid.RadioButton,
        state: bool,  # noqa: FBT001
        user_data: str,
    ) -> None:
        if state:
            self.state_tracker['selected_section'] = user_data
            self.on_section_selected(user_data)


class OutputPathsWidget(urwid.WidgetWrap):  # type: ignore[misc]
    labels = {
        'dump_output': 'Dump Output:',
        'rebuild_output': 'Rebuild Output:',
    }

    def __init__(self, state_tracker: dict[str, Any]) -> None:
        self.state_tracker = state_tracker
        self.edits = {}
        rows = []
        for key, label in self.labels.items():
            edit = urwid.Edit(edit_text=str(state_tracker[key]))
            urwid.connect_signal(edit, 'change', self.on_text_change, user_args=[key])
            self.edits[key] = edit
            rows.append(
                urwid.Columns(
                    [('fixed', 16, urwid.Text(label)), edit],
                    dividechars=2,
                ),
            )
        super().__init__(urwid.Pile(rows))

    def on_text_change(self, key: str, edit: urwid.Edit, new_text: str) -> None:
        self.state_tracker[key] = new_text

    def update_inner_state(self) -> None:
        for key, edit in self.edits.items():
            self.state_tracker[key] = edit.edit_text
