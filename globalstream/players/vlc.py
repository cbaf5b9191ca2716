import logging
import subprocess
from typing import List, Optional

from globalstream.players.base import BasePlayer

logger = logging.getLogger(__name__)


class VLCPlayer(BasePlayer):
    """Plays one stream at a time in an external VLC process."""

    def __init__(
        self, vlc_path: str = "/usr/bin/cvlc", extra_args: Optional[List[str]] = None
    ) -> None:
        self.vlc_path = vlc_path
        self.extra_args: List[str] = list(extra_args or [])
        self.current_process: Optional[subprocess.Popen] = None

    def play(self, url: str) -> None:
        self.stop()
        try:
            self.current_process = subprocess.Popen(
                [self.vlc_path, *self.extra_args, url],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
            logger.info(f"Started VLC (pid {self.current_process.pid}) for {url}")
        except OSError as e:
            logger.error(f"Failed to play URL {url} with VLC: {e}")
            self.current_process = None

    def stop(self) -> None:
        process, self.current_process = self.current_process, None
        if process is None or process.poll() is not None:
            return
        process.terminate()
        try:
            process.wait(timeout=2)
        except subprocess.TimeoutExpired:
            logger.debug(f"VLC pid {process.pid} ignored SIGTERM, killing")
            process.kill()
