import dataclasses
import os
from typing import Mapping, Optional

from globalstream.dao.channel_retreival.iptv_org import DEFAULT_BASE_URL
from globalstream.services.verification import DEFAULT_BATCH_SIZE, DEFAULT_PROBE_TIMEOUT

MODES = ("interactive", "report")
_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean, got {value!r}")


def _parse_number(name: str, value: str, kind: type):
    try:
        number = kind(value)
    except ValueError:
        raise ValueError(f"{name} must be a {kind.__name__}, got {value!r}") from None
    if number <= 0:
        raise ValueError(f"{name} must be positive, got {value!r}")
    return number


@dataclasses.dataclass(frozen=True)
class AppConfig:
    country: str
    base_url: str = DEFAULT_BASE_URL
    secure_context: bool = False
    batch_size: int = DEFAULT_BATCH_SIZE
    probe_timeout: float = DEFAULT_PROBE_TIMEOUT
    vlc_path: str = "/usr/bin/cvlc"
    mode: str = "interactive"
    log_file: str = "globalstream.log"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AppConfig":
        env = os.environ if environ is None else environ

        country = env.get("GLOBALSTREAM_COUNTRY", "").strip()
        if not country:
            raise ValueError("GLOBALSTREAM_COUNTRY must be set in environment variables.")

        mode = env.get("GLOBALSTREAM_MODE", "interactive").strip().lower()
        if mode not in MODES:
            raise ValueError(f"GLOBALSTREAM_MODE must be one of {MODES}, got {mode!r}")

        return cls(
            country=country,
            base_url=env.get("GLOBALSTREAM_BASE_URL", DEFAULT_BASE_URL),
            secure_context=_parse_bool(
                "GLOBALSTREAM_SECURE_CONTEXT", env.get("GLOBALSTREAM_SECURE_CONTEXT", "")
            ),
            batch_size=_parse_number(
                "GLOBALSTREAM_BATCH_SIZE",
                env.get("GLOBALSTREAM_BATCH_SIZE", str(DEFAULT_BATCH_SIZE)),
                int,
            ),
            probe_timeout=_parse_number(
                "GLOBALSTREAM_PROBE_TIMEOUT",
                env.get("GLOBALSTREAM_PROBE_TIMEOUT", str(DEFAULT_PROBE_TIMEOUT)),
                float,
            ),
            vlc_path=env.get("GLOBALSTREAM_VLC_PATH", "/usr/bin/cvlc"),
            mode=mode,
            log_file=env.get("GLOBALSTREAM_LOG_FILE", "globalstream.log"),
        )
