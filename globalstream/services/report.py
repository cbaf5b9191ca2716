import logging
import threading
from typing import Dict, Optional

from rich.console import Console
from rich.live import Live
from rich.table import Table
from rich.text import Text

from globalstream.enum.channel_status import ChannelStatus
from globalstream.services.projection import project_channels, summarize
from globalstream.services.session import ChannelSession
from globalstream.services.verification import Snapshot

logger = logging.getLogger(__name__)

STATUS_STYLES: Dict[ChannelStatus, str] = {
    ChannelStatus.ONLINE: "green",
    ChannelStatus.OFFLINE: "red",
    ChannelStatus.UNKNOWN: "grey50",
}


def build_table(snapshot: Snapshot, hide_offline: bool = False) -> Table:
    table = Table(title=f"Channels ({summarize(snapshot)})", expand=True)
    table.add_column("Status", no_wrap=True)
    table.add_column("Name")
    table.add_column("Category")
    table.add_column("Stream URL", overflow="fold")

    for channel in project_channels(snapshot, hide_offline=hide_offline):
        table.add_row(
            Text(channel.status.value, style=STATUS_STYLES[channel.status]),
            Text(channel.name),
            Text(", ".join(channel.categories)),
            Text(channel.stream_url),
        )
    return table


class ReportService:
    """Non-interactive view: verifies every channel and re-renders a table per batch."""

    def __init__(
        self,
        session: ChannelSession,
        console: Optional[Console] = None,
        hide_offline: bool = False,
    ) -> None:
        self.session: ChannelSession = session
        self.console: Console = console or Console()
        self.hide_offline: bool = hide_offline
        self._render_lock = threading.Lock()

    def run(self) -> Snapshot:
        logger.info("Starting channel report")
        with Live(
            build_table(self.session.snapshot, self.hide_offline),
            console=self.console,
            auto_refresh=False,
        ) as live:

            def render(snapshot: Snapshot) -> None:
                with self._render_lock:
                    live.update(build_table(snapshot, self.hide_offline), refresh=True)

            unsubscribe = self.session.subscribe(render)
            try:
                final = self.session.verify()
            finally:
                unsubscribe()

        self.console.print(summarize(final))
        return final
