import dataclasses
from typing import Tuple

from globalstream.dto.channel import ChannelRecord
from globalstream.enum.channel_status import ChannelStatus


@dataclasses.dataclass(frozen=True)
class VerificationBatch:
    """Consecutive slice of records probed together before the next slice starts."""

    index: int
    records: Tuple[ChannelRecord, ...]


@dataclasses.dataclass(frozen=True)
class ProbeResult:
    channel_id: str
    status: ChannelStatus
