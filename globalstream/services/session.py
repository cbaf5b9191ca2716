import logging
import threading
from typing import Callable, Iterable, List, Optional, Tuple

from globalstream.dto.channel import ChannelRecord
from globalstream.enum.channel_status import ChannelStatus
from globalstream.services.verification import Snapshot, VerificationPipeline

logger = logging.getLogger(__name__)

Subscriber = Callable[[Snapshot], None]


class ChannelSession:
    """Holds the current channel snapshot and publishes every replacement.

    The session is the only writer of channel state. Snapshots are immutable
    tuples, so subscribers may keep or read them from any thread.
    """

    def __init__(self, pipeline: VerificationPipeline) -> None:
        self.pipeline: VerificationPipeline = pipeline
        self._lock = threading.Lock()
        # Held across callbacks so deliveries never interleave; reentrant for
        # subscribers that call back into the session.
        self._delivery_lock = threading.RLock()
        self._snapshot: Snapshot = ()
        self._subscribers: List[Subscriber] = []
        self._generation: int = 0
        self._cancel_event: threading.Event = threading.Event()
        self._worker: Optional[threading.Thread] = None

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def _publish(self, snapshot: Snapshot, generation: int) -> bool:
        with self._delivery_lock:
            with self._lock:
                if generation != self._generation:
                    return False
                self._snapshot = snapshot
                subscribers = list(self._subscribers)

            for callback in subscribers:
                if self._generation != generation:
                    break
                try:
                    callback(snapshot)
                except Exception:
                    logger.exception("Channel subscriber failed")
        return True

    def _next_generation(self) -> Tuple[int, threading.Event, Snapshot]:
        # Invalidates whatever pass is running; it stops at its next batch boundary.
        with self._lock:
            self._cancel_event.set()
            self._generation += 1
            self._cancel_event = threading.Event()
            return self._generation, self._cancel_event, self._snapshot

    def load(self, records: Iterable[ChannelRecord]) -> None:
        """Replace the whole channel set, cancelling any running verification."""
        if records is None:
            raise TypeError("records must be iterable, got None")
        generation, _, _ = self._next_generation()
        self._publish(tuple(records), generation)

    def cancel(self) -> None:
        """Stop the running verification at its next batch boundary."""
        generation, _, _ = self._next_generation()
        logger.debug(f"Verification cancelled (generation {generation})")

    def _run(
        self, generation: int, cancel_event: threading.Event, records: Snapshot
    ) -> Snapshot:
        reset = tuple(r.with_status(ChannelStatus.UNKNOWN) for r in records)
        if not self._publish(reset, generation):
            return self._snapshot
        for snapshot in self.pipeline.verify(records, cancel_event):
            if not self._publish(snapshot, generation):
                break
        return self._snapshot

    def verify(self) -> Snapshot:
        """Run a verification pass over the current snapshot on the calling thread."""
        return self._run(*self._next_generation())

    def start_verification(self) -> threading.Thread:
        """Run a verification pass on a daemon thread and return the thread."""
        worker = threading.Thread(
            target=self._run,
            args=self._next_generation(),
            name="channel-verification",
            daemon=True,
        )
        self._worker = worker
        worker.start()
        return worker

    def wait(self, timeout: Optional[float] = None) -> None:
        if self._worker is not None:
            self._worker.join(timeout)
