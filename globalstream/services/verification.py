import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Dict, Generator, Iterable, List, Optional, Sequence, Tuple

from globalstream.dao.probe.base import BaseProbe
from globalstream.dto.channel import ChannelRecord
from globalstream.dto.verification import ProbeResult, VerificationBatch
from globalstream.enum.channel_status import ChannelStatus

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 5
DEFAULT_PROBE_TIMEOUT = 3.0

Snapshot = Tuple[ChannelRecord, ...]


def partition_batches(
    records: Sequence[ChannelRecord], batch_size: int
) -> List[VerificationBatch]:
    if batch_size < 1:
        raise ValueError(f"batch_size must be at least 1, got {batch_size}")
    return [
        VerificationBatch(index=n, records=tuple(records[i : i + batch_size]))
        for n, i in enumerate(range(0, len(records), batch_size))
    ]


def merge_statuses(
    records: Sequence[ChannelRecord], results: Iterable[ProbeResult]
) -> Snapshot:
    """Return a new snapshot with only the statuses named in ``results`` changed.

    Record order and every other field are preserved; unknown ids are ignored.
    """
    updates: Dict[str, ChannelStatus] = {r.channel_id: r.status for r in results}
    return tuple(
        record.with_status(updates[record.id]) if record.id in updates else record
        for record in records
    )


class VerificationPipeline:
    def __init__(
        self,
        probe: BaseProbe,
        batch_size: int = DEFAULT_BATCH_SIZE,
        timeout: float = DEFAULT_PROBE_TIMEOUT,
    ) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {batch_size}")
        if timeout <= 0:
            raise ValueError(f"timeout must be positive, got {timeout}")
        self.probe: BaseProbe = probe
        self.batch_size: int = batch_size
        self.timeout: float = timeout

    def _probe_one(self, record: ChannelRecord) -> ProbeResult:
        try:
            ok = self.probe.probe(record.stream_url, self.timeout)
        except Exception:
            logger.exception(f"Probe raised for channel {record.id}")
            ok = False
        status = ChannelStatus.ONLINE if ok else ChannelStatus.OFFLINE
        return ProbeResult(channel_id=record.id, status=status)

    def _probe_batch(self, batch: VerificationBatch) -> List[ProbeResult]:
        # The batch gets one shared deadline; probes still running when it
        # passes count as offline and are left to finish on their own.
        executor = ThreadPoolExecutor(
            max_workers=len(batch.records), thread_name_prefix="probe"
        )
        try:
            futures: Dict[Future, ChannelRecord] = {
                executor.submit(self._probe_one, record): record
                for record in batch.records
            }
            done, not_done = wait(futures, timeout=self.timeout)
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        for future in not_done:
            logger.debug(
                f"Probe of channel {futures[future].id} exceeded {self.timeout}s"
            )
        return [
            f.result()
            if f in done
            else ProbeResult(channel_id=record.id, status=ChannelStatus.OFFLINE)
            for f, record in futures.items()
        ]

    def verify(
        self,
        records: Sequence[ChannelRecord],
        cancel_event: Optional[threading.Event] = None,
    ) -> Generator[Snapshot, None, None]:
        """Probe ``records`` batch by batch, yielding the merged snapshot after each batch.

        Batches run strictly one after another; members of a batch are probed
        concurrently and the batch resolves within ``timeout`` seconds. The
        cancel event is checked before each batch and after it resolves; once
        set, nothing more is merged or yielded.
        """
        if records is None:
            raise TypeError("records must be a sequence, got None")
        return self._run_batches(tuple(records), cancel_event)

    def _run_batches(
        self, records: Snapshot, cancel_event: Optional[threading.Event]
    ) -> Generator[Snapshot, None, None]:
        state: Snapshot = tuple(r.with_status(ChannelStatus.UNKNOWN) for r in records)
        batches = partition_batches(state, self.batch_size)
        logger.info(
            f"Verifying {len(state)} channels in {len(batches)} batches of {self.batch_size}"
        )

        for batch in batches:
            if cancel_event is not None and cancel_event.is_set():
                logger.info(f"Verification cancelled before batch {batch.index}")
                return

            results = self._probe_batch(batch)

            if cancel_event is not None and cancel_event.is_set():
                logger.info(f"Verification cancelled, discarding batch {batch.index}")
                return

            state = merge_statuses(state, results)
            online = sum(1 for r in results if r.status is ChannelStatus.ONLINE)
            logger.debug(f"Batch {batch.index}: {online}/{len(results)} channels online")
            yield state

        logger.info("Verification finished")
