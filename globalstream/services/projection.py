from typing import Iterable, List

from globalstream.dto.channel import ChannelRecord
from globalstream.enum.channel_status import ChannelStatus


def matches_query(channel: ChannelRecord, query: str) -> bool:
    needle = query.lower()
    return needle in channel.name.lower() or any(
        needle in category.lower() for category in channel.categories
    )


def project_channels(
    channels: Iterable[ChannelRecord], query: str = "", hide_offline: bool = False
) -> List[ChannelRecord]:
    """Filter by text and status, then move online channels to the front.

    ``sorted`` is stable, so relative order inside each group is kept.
    """
    visible = [
        ch
        for ch in channels
        if matches_query(ch, query)
        and not (hide_offline and ch.status is ChannelStatus.OFFLINE)
    ]
    return sorted(visible, key=lambda ch: ch.status is not ChannelStatus.ONLINE)


def summarize(channels: Iterable[ChannelRecord]) -> str:
    counts = {status: 0 for status in ChannelStatus}
    for ch in channels:
        counts[ch.status] += 1
    return (
        f"{counts[ChannelStatus.ONLINE]} online, "
        f"{counts[ChannelStatus.OFFLINE]} offline, "
        f"{counts[ChannelStatus.UNKNOWN]} pending"
    )
