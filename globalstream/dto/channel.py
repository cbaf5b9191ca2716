import dataclasses
from typing import Optional, Tuple

from globalstream.enum.channel_status import ChannelStatus


@dataclasses.dataclass(frozen=True)
class ChannelRecord:
    id: str
    name: str
    stream_url: str
    logo_url: Optional[str] = None
    categories: Tuple[str, ...] = ()
    status: ChannelStatus = ChannelStatus.UNKNOWN

    def with_status(self, status: ChannelStatus) -> "ChannelRecord":
        return dataclasses.replace(self, status=status)
