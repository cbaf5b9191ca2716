import logging
import random
import re
import string
from typing import Callable, List, Optional, Set, Tuple

from globalstream.dto.channel import ChannelRecord
from globalstream.enum.channel_status import ChannelStatus

logger = logging.getLogger(__name__)

EXTINF_MARKER = "#EXTINF:"
COMMENT_MARKER = "#"
PLAINTEXT_SCHEME = "http:"
PLAYABLE_FORMATS: Tuple[str, ...] = (".m3u8", ".mp4")
UNKNOWN_CHANNEL_NAME = "Unknown Channel"

_ID_ALPHABET = string.ascii_lowercase + string.digits
_ID_LENGTH = 9

IdFactory = Callable[[], str]


def random_channel_id() -> str:
    return "".join(random.choices(_ID_ALPHABET, k=_ID_LENGTH))


def extract_attribute(line: str, name: str) -> Optional[str]:
    """Return the value of ``name=`` on an #EXTINF line.

    The quoted form ``name="value"`` wins over the bareword form
    ``name=value``, which ends at whitespace or a comma. Empty values are
    reported as unset.
    """
    key = re.compile(re.escape(name) + "=", re.IGNORECASE)
    positions: List[int] = [m.end() for m in key.finditer(line)]

    for start in positions:
        if line[start : start + 1] != '"':
            continue
        end = line.find('"', start + 1)
        if end != -1:
            return line[start + 1 : end] or None

    if not positions:
        return None
    start = end = positions[0]
    while end < len(line) and not line[end].isspace() and line[end] != ",":
        end += 1
    return line[start:end] or None


def _strip_delimited(text: str, opening: str, closing: str) -> str:
    """Remove every ``opening...closing`` span, shortest match first."""
    parts: List[str] = []
    position = 0
    while True:
        start = text.find(opening, position)
        if start == -1:
            break
        end = text.find(closing, start + 1)
        if end == -1:
            break
        parts.append(text[position:start])
        position = end + 1
    parts.append(text[position:])
    return "".join(parts)


def derive_name(extinf: str) -> str:
    raw_name = extinf.rsplit(",", 1)[1].strip() if "," in extinf else UNKNOWN_CHANNEL_NAME
    cleaned = _strip_delimited(raw_name, "[", "]")
    cleaned = _strip_delimited(cleaned, "(", ")").strip()
    return cleaned or raw_name


def is_playable_format(url: str) -> bool:
    lowered = url.lower()
    return any(marker in lowered for marker in PLAYABLE_FORMATS)


def is_blocked_transport(url: str, secure_context: bool) -> bool:
    return secure_context and url.lower().startswith(PLAINTEXT_SCHEME)


def _find_stream_url(lines: List[str], start: int) -> Tuple[Optional[str], int]:
    for index in range(start, len(lines)):
        candidate = lines[index]
        if candidate and not candidate.startswith(COMMENT_MARKER):
            return candidate, index
    return None, start


def _unique_id(id_factory: IdFactory, taken: Set[str]) -> str:
    channel_id = id_factory()
    while channel_id in taken:
        channel_id = id_factory()
    taken.add(channel_id)
    return channel_id


def parse_playlist(
    raw_text: str,
    secure_context: bool = False,
    id_factory: Optional[IdFactory] = None,
) -> List[ChannelRecord]:
    """Parse M3U text into channel records playable by a web-style client.

    Entries without a stream URL, with a plaintext URL under a secure
    context, or with a format other than HLS/MP4 are dropped silently.
    """
    if raw_text is None:
        raise TypeError("raw_text must be a string, got None")

    make_id: IdFactory = id_factory or random_channel_id
    lines: List[str] = [line.strip() for line in raw_text.splitlines()]
    channels: List[ChannelRecord] = []
    taken: Set[str] = set()
    dropped = 0

    index = 0
    while index < len(lines):
        line = lines[index]
        index += 1
        if not line.startswith(EXTINF_MARKER):
            continue

        url, url_index = _find_stream_url(lines, index)
        if url is None:
            dropped += 1
            continue
        index = url_index + 1

        if is_blocked_transport(url, secure_context) or not is_playable_format(url):
            dropped += 1
            continue

        group: Optional[str] = extract_attribute(line, "group-title")
        channels.append(
            ChannelRecord(
                id=_unique_id(make_id, taken),
                name=derive_name(line),
                stream_url=url,
                logo_url=extract_attribute(line, "tvg-logo"),
                categories=(group,) if group else (),
                status=ChannelStatus.UNKNOWN,
            )
        )

    logger.debug(f"Parsed {len(channels)} channels, dropped {dropped} entries")
    return channels
