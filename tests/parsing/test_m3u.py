import itertools
import unittest

from globalstream.enum.channel_status import ChannelStatus
from globalstream.parsing.m3u import (
    UNKNOWN_CHANNEL_NAME,
    derive_name,
    extract_attribute,
    parse_playlist,
    random_channel_id,
)


def counting_ids():
    counter = itertools.count(1)
    return lambda: f"ch-{next(counter)}"


class TestParsePlaylist(unittest.TestCase):
    def test_extracts_name_logo_and_group(self):
        text = (
            "#EXTM3U\n"
            '#EXTINF:-1 tvg-logo="x.png" group-title="News",ABC [HD]\n'
            "http://x/y.m3u8\n"
        )
        channels = parse_playlist(text, secure_context=False)

        self.assertEqual(len(channels), 1)
        ch = channels[0]
        self.assertEqual(ch.name, "ABC")
        self.assertEqual(ch.logo_url, "x.png")
        self.assertEqual(ch.categories, ("News",))
        self.assertEqual(ch.stream_url, "http://x/y.m3u8")
        self.assertEqual(ch.status, ChannelStatus.UNKNOWN)

    def test_empty_input_yields_no_channels(self):
        self.assertEqual(parse_playlist(""), [])
        self.assertEqual(parse_playlist("#EXTM3U\n"), [])

    def test_none_input_fails_fast(self):
        with self.assertRaises(TypeError):
            parse_playlist(None)

    def test_metadata_without_url_is_dropped(self):
        text = (
            "#EXTINF:-1,First\n"
            "https://a/one.m3u8\n"
            "#EXTINF:-1,Dangling\n"
            "#EXTVLCOPT:http-user-agent=Foo\n"
            "\n"
        )
        channels = parse_playlist(text)
        self.assertEqual([ch.name for ch in channels], ["First"])

    def test_skips_comments_and_blank_lines_before_url(self):
        text = (
            "#EXTINF:-1,Opted\n"
            "\n"
            "#EXTVLCOPT:http-referrer=https://example.com\n"
            "https://a/opted.m3u8\n"
        )
        channels = parse_playlist(text)
        self.assertEqual(len(channels), 1)
        self.assertEqual(channels[0].stream_url, "https://a/opted.m3u8")

    def test_header_without_url_is_absorbed_by_previous_header(self):
        text = (
            "#EXTINF:-1,Outer\n"
            "#EXTINF:-1,Inner\n"
            "https://a/shared.m3u8\n"
            "#EXTINF:-1,Next\n"
            "https://a/next.m3u8\n"
        )
        channels = parse_playlist(text)
        self.assertEqual([ch.name for ch in channels], ["Outer", "Next"])
        self.assertEqual(channels[0].stream_url, "https://a/shared.m3u8")

    def test_handles_crlf_and_surrounding_whitespace(self):
        text = "#EXTM3U\r\n  #EXTINF:-1,Spaced  \r\n  https://a/s.mp4  \r\n"
        channels = parse_playlist(text)
        self.assertEqual(len(channels), 1)
        self.assertEqual(channels[0].name, "Spaced")
        self.assertEqual(channels[0].stream_url, "https://a/s.mp4")

    def test_format_filter_keeps_only_hls_and_mp4(self):
        text = (
            "#EXTINF:-1,Hls\nhttps://a/live.M3U8?token=1\n"
            "#EXTINF:-1,Ts\nhttps://a/live.ts\n"
            "#EXTINF:-1,Mp4\nhttps://a/movie.mp4\n"
            "#EXTINF:-1,Rtmp\nrtmp://a/live\n"
            "#EXTINF:-1,Mkv\nhttps://a/movie.mkv\n"
        )
        channels = parse_playlist(text)
        self.assertEqual([ch.name for ch in channels], ["Hls", "Mp4"])
        for ch in channels:
            lowered = ch.stream_url.lower()
            self.assertTrue(".m3u8" in lowered or ".mp4" in lowered)

    def test_secure_context_drops_plaintext_urls(self):
        text = (
            "#EXTINF:-1,Plain\nhttp://a/plain.m3u8\n"
            "#EXTINF:-1,Upper\nHTTP://a/upper.m3u8\n"
            "#EXTINF:-1,Secure\nhttps://a/secure.m3u8\n"
        )
        secure = parse_playlist(text, secure_context=True)
        self.assertEqual([ch.name for ch in secure], ["Secure"])
        for ch in secure:
            self.assertFalse(ch.stream_url.lower().startswith("http:"))

        insecure = parse_playlist(text, secure_context=False)
        self.assertEqual([ch.name for ch in insecure], ["Plain", "Upper", "Secure"])

    def test_preserves_order_and_keeps_duplicate_urls(self):
        text = (
            "#EXTINF:-1,Charlie\nhttps://a/same.m3u8\n"
            "#EXTINF:-1,Alpha\nhttps://a/skip.ts\n"
            "#EXTINF:-1,Bravo\nhttps://a/same.m3u8\n"
            "#EXTINF:-1,Delta\nhttps://a/other.mp4\n"
        )
        channels = parse_playlist(text, id_factory=counting_ids())
        self.assertEqual([ch.name for ch in channels], ["Charlie", "Bravo", "Delta"])
        self.assertEqual([ch.id for ch in channels], ["ch-1", "ch-2", "ch-3"])

    def test_ids_are_unique_even_when_factory_repeats(self):
        values = iter(["dup", "dup", "dup", "other"])
        text = "#EXTINF:-1,A\nhttps://a/1.m3u8\n#EXTINF:-1,B\nhttps://a/2.m3u8\n"
        channels = parse_playlist(text, id_factory=lambda: next(values))
        self.assertEqual([ch.id for ch in channels], ["dup", "other"])

    def test_default_ids_are_unique_within_result(self):
        text = "".join(f"#EXTINF:-1,C{i}\nhttps://a/{i}.m3u8\n" for i in range(200))
        channels = parse_playlist(text)
        self.assertEqual(len({ch.id for ch in channels}), 200)

    def test_missing_attributes_are_unset(self):
        channels = parse_playlist("#EXTINF:-1,Bare\nhttps://a/b.m3u8\n")
        self.assertIsNone(channels[0].logo_url)
        self.assertEqual(channels[0].categories, ())

    def test_empty_group_is_not_a_category(self):
        channels = parse_playlist('#EXTINF:-1 group-title="",X\nhttps://a/x.m3u8\n')
        self.assertEqual(channels[0].categories, ())


class TestExtractAttribute(unittest.TestCase):
    def test_quoted_value(self):
        line = '#EXTINF:-1 tvg-id="abc.us" tvg-logo="https://l/a b.png",Name'
        self.assertEqual(extract_attribute(line, "tvg-logo"), "https://l/a b.png")

    def test_quoted_value_may_contain_commas(self):
        line = '#EXTINF:-1 group-title="News, Weather",Name'
        self.assertEqual(extract_attribute(line, "group-title"), "News, Weather")

    def test_bareword_value_stops_at_whitespace_or_comma(self):
        line = "#EXTINF:-1 tvg-logo=http://l/x.png group-title=Sports,Name"
        self.assertEqual(extract_attribute(line, "tvg-logo"), "http://l/x.png")
        self.assertEqual(extract_attribute(line, "group-title"), "Sports")

    def test_key_is_case_insensitive(self):
        line = '#EXTINF:-1 Group-Title="Kids",Name'
        self.assertEqual(extract_attribute(line, "group-title"), "Kids")

    def test_prefers_quoted_occurrence(self):
        line = '#EXTINF:-1 group-title=first group-title="second",Name'
        self.assertEqual(extract_attribute(line, "group-title"), "second")

    def test_absent(self):
        self.assertIsNone(extract_attribute("#EXTINF:-1,Name", "tvg-logo"))


class TestDeriveName(unittest.TestCase):
    def test_uses_text_after_last_comma(self):
        line = '#EXTINF:-1 tvg-name="A, B" group-title="C",Real Name'
        self.assertEqual(derive_name(line), "Real Name")

    def test_placeholder_without_comma(self):
        self.assertEqual(derive_name("#EXTINF:-1"), UNKNOWN_CHANNEL_NAME)

    def test_strips_every_bracket_and_parenthesis_span(self):
        line = "#EXTINF:-1,Sport One (1080p) [Geo-blocked] [Not 24/7]"
        self.assertEqual(derive_name(line), "Sport One")

    def test_falls_back_when_stripping_empties_name(self):
        self.assertEqual(derive_name("#EXTINF:-1,[HD] (Backup)"), "[HD] (Backup)")

    def test_unclosed_bracket_is_kept(self):
        self.assertEqual(derive_name("#EXTINF:-1,News [HD"), "News [HD")


class TestRandomChannelId(unittest.TestCase):
    def test_shape(self):
        channel_id = random_channel_id()
        self.assertEqual(len(channel_id), 9)
        self.assertTrue(channel_id.isalnum())
