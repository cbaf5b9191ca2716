import logging
from typing import Any, Dict, List

from prompt_toolkit import Application
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.key_binding.key_processor import KeyPressEvent
from prompt_toolkit.layout import Layout
from prompt_toolkit.layout.containers import HSplit
from prompt_toolkit.patch_stdout import patch_stdout
from prompt_toolkit.styles import Style
from prompt_toolkit.widgets import TextArea

from globalstream.dto.channel import ChannelRecord
from globalstream.enum.channel_status import ChannelStatus
from globalstream.players.base import BasePlayer
from globalstream.services.projection import project_channels, summarize
from globalstream.services.session import ChannelSession
from globalstream.services.verification import Snapshot

logger = logging.getLogger(__name__)

STATUS_MARKERS: Dict[ChannelStatus, str] = {
    ChannelStatus.ONLINE: "[+]",
    ChannelStatus.OFFLINE: "[-]",
    ChannelStatus.UNKNOWN: "[?]",
}


def format_channel_line(channel: ChannelRecord, selected: bool) -> str:
    prefix = ">>" if selected else "  "
    category = channel.categories[0] if channel.categories else ""
    return f"{prefix} {STATUS_MARKERS[channel.status]} {channel.name:<40} | {category}"


class CLIService:
    def __init__(
        self,
        session: ChannelSession,
        player: BasePlayer,
        hide_offline: bool = True,
    ) -> None:
        self.session: ChannelSession = session
        self.player: BasePlayer = player
        self.hide_offline: bool = hide_offline

        self.current_matches: List[ChannelRecord] = []
        self.selected_index: int = 0
        self.view_start_index: int = 0
        self.max_visible_rows: int = 30
        self.last_query: str = ""

        self.output_field: TextArea = TextArea(
            style="class:output",
            scrollbar=True,
            focusable=False,
            wrap_lines=False,
        )

        self.help_bar: TextArea = TextArea(
            style="class:help",
            height=1,
            focusable=False,
        )

        self.input_field: TextArea = TextArea(
            height=1,
            prompt="Filter: ",
            style="class:input",
            multiline=False,
            wrap_lines=False,
        )

        self.input_field.buffer.on_text_changed += self.on_text_change

        self.container: HSplit = HSplit(
            [
                self.output_field,
                self.help_bar,
                self.input_field,
            ],
            padding=0,
        )

        self.kb: KeyBindings = KeyBindings()
        self.kb.add("c-c")(self.exit_app)
        self.kb.add("up")(self.move_up)
        self.kb.add("down")(self.move_down)
        self.kb.add("enter")(self.play_selected)
        self.kb.add("c-o")(self.toggle_offline)
        self.kb.add("c-r")(self.reverify)

        self.application: Application[Any] = Application(
            layout=Layout(self.container),
            key_bindings=self.kb,
            full_screen=True,
            mouse_support=False,
            style=Style.from_dict(
                {
                    "output": "bg:#000000 #ffffff",
                    "input": "bg:#1a1a1a #ffffff",
                    "help": "bg:#333333 #aaaaaa",
                }
            ),
        )

        self._unsubscribe = self.session.subscribe(self.on_snapshot)
        self.update_output()

    def exit_app(self, event: KeyPressEvent) -> None:
        event.app.exit()

    def on_text_change(self, _: Any) -> None:
        self.update_output()

    def on_start(self) -> None:
        # Runs once the event loop exists, so no published snapshot is missed.
        self.update_output()
        self.session.start_verification()

    def on_snapshot(self, _: Snapshot) -> None:
        # Published from the verification thread.
        loop = self.application.loop
        if loop is not None and self.application.is_running:
            loop.call_soon_threadsafe(self.update_output)

    def move_up(self, event: KeyPressEvent) -> None:
        self.select(self.selected_index - 1)
        self.update_output()

    def move_down(self, event: KeyPressEvent) -> None:
        self.select(self.selected_index + 1)
        self.update_output()

    def select(self, index: int) -> None:
        """Clamp ``index`` into the current matches and keep it inside the window."""
        last = len(self.current_matches) - 1
        self.selected_index = max(0, min(index, last))
        top = self.view_start_index
        bottom = top + self.max_visible_rows - 1
        if self.selected_index < top:
            self.view_start_index = self.selected_index
        elif self.selected_index > bottom:
            self.view_start_index = self.selected_index - self.max_visible_rows + 1

    def toggle_offline(self, event: KeyPressEvent) -> None:
        self.hide_offline = not self.hide_offline
        self.update_output()

    def reverify(self, event: KeyPressEvent) -> None:
        logger.info("Restarting channel verification")
        self.session.start_verification()

    def play_selected(self, event: KeyPressEvent) -> None:
        if 0 <= self.selected_index < len(self.current_matches):
            selected_channel: ChannelRecord = self.current_matches[self.selected_index]
            logger.info(f"Playing channel: {selected_channel.name}")
            self.player.play(selected_channel.stream_url)

    def update_output(self) -> None:
        query: str = self.input_field.text.strip()
        snapshot: Snapshot = self.session.snapshot
        self.current_matches = project_channels(
            snapshot, query=query, hide_offline=self.hide_offline
        )

        if query != self.last_query:
            self.selected_index = 0
            self.view_start_index = 0
            self.last_query = query

        self.select(self.selected_index)

        lines: List[str] = [
            f"{len(self.current_matches)} streams found ({summarize(snapshot)})",
            f"{'':<3}{'-' * 30}",
        ]

        visible_items = self.current_matches[
            self.view_start_index : self.view_start_index + self.max_visible_rows
        ]

        for i, ch in enumerate(visible_items):
            actual_index = self.view_start_index + i
            lines.append(format_channel_line(ch, actual_index == self.selected_index))

        self.output_field.text = "\n".join(lines)
        offline_hint = "show offline" if self.hide_offline else "hide offline"
        self.help_bar.text = (
            f"Up/Down to navigate  |  ENTER to play  |  Ctrl+O to {offline_hint}"
            "  |  Ctrl+R to re-verify  |  Ctrl+C to quit"
        )

    def run(self) -> None:
        logger.info("Starting interactive CLI UI")
        try:
            with patch_stdout():
                self.application.run(pre_run=self.on_start)
        finally:
            self._unsubscribe()
            self.session.cancel()
            self.player.stop()
