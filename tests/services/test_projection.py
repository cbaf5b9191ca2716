import unittest

from globalstream.dto.channel import ChannelRecord
from globalstream.enum.channel_status import ChannelStatus
from globalstream.services.projection import project_channels, summarize

ONLINE = ChannelStatus.ONLINE
OFFLINE = ChannelStatus.OFFLINE
UNKNOWN = ChannelStatus.UNKNOWN


def channel(channel_id: str, status: ChannelStatus, name: str = "", *categories: str):
    return ChannelRecord(
        id=channel_id,
        name=name or channel_id,
        stream_url=f"https://streams.test/{channel_id}.m3u8",
        categories=tuple(categories),
        status=status,
    )


class TestProjectChannels(unittest.TestCase):
    def setUp(self):
        self.channels = [
            channel("a", UNKNOWN),
            channel("b", OFFLINE),
            channel("c", ONLINE),
            channel("d", UNKNOWN),
            channel("e", ONLINE),
            channel("f", OFFLINE),
        ]

    def test_online_first_stable_partition(self):
        result = project_channels(self.channels)
        self.assertEqual([ch.id for ch in result], ["c", "e", "a", "b", "d", "f"])

    def test_hide_offline_excludes_exactly_offline(self):
        result = project_channels(self.channels, hide_offline=True)
        self.assertEqual([ch.id for ch in result], ["c", "e", "a", "d"])
        self.assertNotIn(OFFLINE, {ch.status for ch in result})

    def test_text_filter_matches_name_or_category(self):
        channels = [
            channel("1", UNKNOWN, "Euronews"),
            channel("2", ONLINE, "Cartoon Hub", "Kids"),
            channel("3", ONLINE, "Sky Sports", "Sports"),
            channel("4", OFFLINE, "Weather One", "NEWS"),
        ]
        result = project_channels(channels, query="news")
        self.assertEqual([ch.id for ch in result], ["1", "4"])

        result = project_channels(channels, query="KID")
        self.assertEqual([ch.id for ch in result], ["2"])

    def test_empty_query_matches_everything(self):
        self.assertEqual(len(project_channels(self.channels, query="")), 6)

    def test_input_untouched(self):
        before = list(self.channels)
        project_channels(self.channels, query="a", hide_offline=True)
        self.assertEqual(self.channels, before)


class TestSummarize(unittest.TestCase):
    def test_counts(self):
        channels = [channel("a", ONLINE), channel("b", OFFLINE), channel("c", UNKNOWN)]
        self.assertEqual(summarize(channels), "1 online, 1 offline, 1 pending")

    def test_empty(self):
        self.assertEqual(summarize([]), "0 online, 0 offline, 0 pending")
