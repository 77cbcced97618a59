"""
This module drives a whole batch of dependencies through the resolution engine.

Records are resolved and handed to the sink one at a time, strictly in input
order. The entire loop (including reading the input) runs under the global
timeout; when it expires the run is aborted and nothing more is emitted.
"""

import threading
from dataclasses import dataclass
from typing import Callable, Iterable

from license_finder.core.config import FinderConfig
from license_finder.core.exceptions import GlobalTimeoutError, RecordError
from license_finder.models.schemas import DependencyRecord
from license_finder.services.deadline import DeadlineExceeded, run_with_deadline
from license_finder.services.resolution_engine import ResolutionEngine
from license_finder.utility.durations import format_duration
from license_finder.utility.log import get_logger

log = get_logger(__name__)

RecordSink = Callable[[DependencyRecord], None]


@dataclass
class BatchSummary:
    processed: int = 0
    with_errors: int = 0


class BatchOrchestrator:
    """
    Runs the resolution engine over a record stream.

    Args:
        config (FinderConfig): Run policy (global timeout, error-is-fatal).
        engine (ResolutionEngine): Engine used for each dependency.
        sink (Callable): Receives each resolved record, e.g. to print it.
    """

    def __init__(self, config: FinderConfig, engine: ResolutionEngine, sink: RecordSink):
        self.config = config
        self.engine = engine
        self.sink = sink

    def run(self, records: Iterable[DependencyRecord]) -> BatchSummary:
        """
        Resolves every record and returns a summary of the run.

        Raises:
            GlobalTimeoutError: If the batch exceeded the global timeout.
            RecordError: If a record has an error and error-is-fatal is set.
            LicenseFinderError: Any other fatal error from decoding, the
                engine or the sink.
        """
        abandoned = threading.Event()
        emitting = threading.Lock()
        timeout = self.config.global_timeout
        try:
            return run_with_deadline(
                lambda: self._drive(records, abandoned, emitting),
                timeout,
                name="license-batch",
            )
        except DeadlineExceeded:
            # a record being written is finished first, none is started after
            with emitting:
                abandoned.set()
            raise GlobalTimeoutError(
                f"Global timeout elapsed after {format_duration(timeout)} trying to get the licenses"
            ) from None

    def _drive(
        self,
        records: Iterable[DependencyRecord],
        abandoned: threading.Event,
        emitting: threading.Lock,
    ) -> BatchSummary:
        summary = BatchSummary()

        for record in records:
            if abandoned.is_set():
                break

            log.info("Finding license for %s@%s", record.path, record.version)
            verdict = self.engine.resolve(record)
            resolved = record.model_copy(update={"license": verdict})

            with emitting:
                if abandoned.is_set():
                    break
                self.sink(resolved)

            summary.processed += 1
            if verdict.error:
                summary.with_errors += 1
                if self.config.error_is_fatal:
                    raise RecordError(f'Fatal error for "{record.path}": {verdict.error}')

        log.info("Resolved %d dependencies, %d with errors", summary.processed, summary.with_errors)
        return summary
