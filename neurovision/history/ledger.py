import itertools
import logging
import random
import threading
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Union

from neurovision.errors import EntryNotFound
from neurovision.models.detection import DetectionLabel, DetectionOutcome
from neurovision.models.history_entry import HistoryEntry
from neurovision.models.scan import ScanSubmission

logger = logging.getLogger("neurovision.history")

RESULT_FILTERS = ("all", "positive", "negative")
SORT_ORDERS = ("newest", "oldest")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class HistoryLedger:
    """
    Append-only, in-memory record of past submissions.

    Lives as long as the process. Appends are serialized with a lock that is
    held only for the insert itself; reads work on a copy.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._rng = rng if rng is not None else random.Random()
        self._clock = clock or _utc_now
        self._entries: List[HistoryEntry] = []
        self._by_id: Dict[str, HistoryEntry] = {}
        self._sequence = itertools.count(1)
        self._lock = threading.Lock()

    def _new_patient_id(self) -> str:
        # Synthetic, no uniqueness guarantee and no link to a real patient record
        return f"P-{self._rng.randint(10000, 99999)}"

    def append(
        self,
        submission: ScanSubmission,
        outcome: DetectionOutcome,
        timestamp: Optional[datetime] = None,
        patient_id: Optional[str] = None,
    ) -> HistoryEntry:
        if timestamp is None:
            timestamp = self._clock()
        if timestamp.tzinfo is None:
            # Naive timestamps are read as UTC
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        if patient_id is None:
            patient_id = self._new_patient_id()

        with self._lock:
            seq = next(self._sequence)
            entry = HistoryEntry(
                id=str(seq),
                patient_id=patient_id,
                scan_name=submission.file_name,
                timestamp=timestamp,
                outcome=outcome,
                sequence=seq,
            )
            self._entries.append(entry)
            self._by_id[entry.id] = entry

        logger.info(f"HISTORY_APPEND id={entry.id} result={entry.result.value}")
        return entry

    def snapshot(self) -> List[HistoryEntry]:
        with self._lock:
            return list(self._entries)

    def list(
        self,
        result: Union[str, DetectionLabel] = "all",
        sort: str = "newest",
    ) -> List[HistoryEntry]:
        result = result.value if isinstance(result, DetectionLabel) else result
        if result not in RESULT_FILTERS:
            raise ValueError(f"result must be one of {RESULT_FILTERS}, got {result!r}")
        if sort not in SORT_ORDERS:
            raise ValueError(f"sort must be one of {SORT_ORDERS}, got {sort!r}")

        entries = self.snapshot()
        if result != "all":
            entries = [e for e in entries if e.result.value == result]

        return sorted(
            entries,
            key=lambda e: (e.timestamp, e.sequence),
            reverse=(sort == "newest"),
        )

    def get(self, entry_id: str) -> HistoryEntry:
        with self._lock:
            entry = self._by_id.get(str(entry_id))
        if entry is None:
            raise EntryNotFound(f"No detection with id {entry_id}")
        return entry

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
