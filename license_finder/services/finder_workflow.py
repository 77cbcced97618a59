"""
This module wires configuration, override registry, analyzer, engine and
orchestrator together for the CLI and the HTTP API.
"""

from typing import Iterable, Optional, TextIO

from license_finder.core.config import FinderConfig
from license_finder.models.schemas import DependencyRecord
from license_finder.services.batch_orchestrator import BatchOrchestrator, BatchSummary, RecordSink
from license_finder.services.json_stream import iter_dependency_records
from license_finder.services.known_licenses import registry_from_config
from license_finder.services.resolution_engine import Analyzer, ResolutionEngine
from license_finder.services.scancode_service import ScanCodeAnalyzer


def build_analyzer(config: FinderConfig) -> Analyzer:
    """Default analyzer: ScanCode with the configured binary and output dir."""
    return ScanCodeAnalyzer(scancode_bin=config.scancode_bin, output_dir=config.output_dir)


def build_engine(config: FinderConfig, analyzer: Optional[Analyzer] = None) -> ResolutionEngine:
    """
    Creates a ResolutionEngine for `config`.

    The known licenses file, if any, is loaded here, once, so a broken
    config fails the run before the first dependency is looked at.

    Raises:
        KnownLicensesError: If the configured known licenses file is invalid.
    """
    registry = registry_from_config(config)
    if analyzer is None:
        analyzer = build_analyzer(config)
    return ResolutionEngine(config, analyzer, registry)


def perform_resolution(
    config: FinderConfig,
    records: Iterable[DependencyRecord],
    sink: RecordSink,
    analyzer: Optional[Analyzer] = None,
) -> BatchSummary:
    """Resolves already decoded records and hands each result to `sink`."""
    engine = build_engine(config, analyzer)
    return BatchOrchestrator(config, engine, sink).run(records)


def perform_stream_resolution(
    config: FinderConfig,
    stream: TextIO,
    sink: RecordSink,
    analyzer: Optional[Analyzer] = None,
) -> BatchSummary:
    """
    Resolves every dependency read from a JSON stream.

    Decoding happens lazily inside the batch, so a malformed value stops the
    run only once it is reached, after the previous records were emitted.
    """
    return perform_resolution(config, iter_dependency_records(stream), sink, analyzer)
