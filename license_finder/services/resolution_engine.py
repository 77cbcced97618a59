"""
This module decides the license of a single dependency.

For every DependencyRecord the engine:
1. looks for an operator override in the known licenses registry
   (`path@version`, then `path`), and otherwise asks the analyzer to scan
   the dependency's source directory; both steps run as one unit of work
   raced against the dependency timeout,
2. merges the outcome into a LicenseVerdict (an override path is kept as-is,
   an analyzer path is relative to `Dir` and gets joined with it),
3. optionally loads the text of the license file.

Failures that must stop the run are raised (see core.exceptions); a license
that cannot be found or read is reported in the verdict's `error`.
"""

import os
from typing import List, Optional, Protocol

from license_finder.core.config import FinderConfig
from license_finder.core.exceptions import AnalyzerContractError, DependencyTimeoutError
from license_finder.models.schemas import (
    AnalysisResult,
    DependencyRecord,
    LicenseMatch,
    LicenseVerdict,
    ResolutionOutcome,
)
from license_finder.services.deadline import DeadlineExceeded, run_with_deadline
from license_finder.services.known_licenses import KnownLicenseRegistry
from license_finder.utility.durations import format_duration
from license_finder.utility.log import get_logger

log = get_logger(__name__)


class Analyzer(Protocol):
    """Anything that can propose ranked license matches for directories."""

    def analyze(self, *directories: str) -> List[AnalysisResult]:
        ...


def read_license_file(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()


def join_license_path(source_dir: str, file: str) -> str:
    """Places an analyzer-relative file under the module directory, cleaned."""
    return os.path.normpath(os.path.join(source_dir, file.lstrip("/")))


class ResolutionEngine:
    """Resolves DependencyRecords into LicenseVerdicts under a fixed policy."""

    def __init__(
        self,
        config: FinderConfig,
        analyzer: Analyzer,
        registry: Optional[KnownLicenseRegistry] = None,
    ):
        self.config = config
        self.analyzer = analyzer
        self.registry = registry

    def resolve(self, record: DependencyRecord) -> LicenseVerdict:
        """
        Produces the license verdict for one dependency.

        Raises:
            DependencyTimeoutError: If the override check and analysis did not
                finish within the dependency timeout (timeout policy "fail").
            AnalyzerContractError: If the analyzer broke its result contract.
        """
        timeout = self.config.dependency_timeout
        try:
            outcome = run_with_deadline(
                lambda: self.find_license(record),
                timeout,
                name=f"resolve:{record.path}",
            )
        except DeadlineExceeded:
            message = f"Timed out after {format_duration(timeout)} trying to get the license for: '{record.path}'"
            if self.config.timeout_policy == "record":
                log.warning("%s", message)
                return LicenseVerdict(error=message)
            raise DependencyTimeoutError(message) from None

        return self.build_verdict(record, outcome)

    def find_license(self, record: DependencyRecord) -> ResolutionOutcome:
        """Override lookup first, analyzer second. Runs on the worker thread."""
        if self.registry is not None:
            known = self.registry.lookup(record.path, record.version)
            if known is not None:
                # The config provides the license path, it must not be touched.
                return ResolutionOutcome(
                    result=AnalysisResult(
                        arg=record.source_dir,
                        matches=[LicenseMatch(license=known.name, file=known.path, confidence=1.0)],
                    ),
                    leave_path_untouched=True,
                )

        results = self.analyzer.analyze(record.source_dir)

        # A single directory was passed, so exactly one result is expected
        if len(results) != 1:
            raise AnalyzerContractError(
                f"Expected a single result for {record.source_dir} but got {len(results)}"
            )

        return ResolutionOutcome(result=results[0], leave_path_untouched=False)

    def build_verdict(self, record: DependencyRecord, outcome: ResolutionOutcome) -> LicenseVerdict:
        """Merges the outcome into a verdict and applies the contents policy."""
        result = outcome.result
        if not result.matches:
            return LicenseVerdict(error=result.error)

        match = result.matches[0]
        license_path = match.file
        if not outcome.leave_path_untouched:
            license_path = join_license_path(record.source_dir, match.file)

        verdict = LicenseVerdict(name=match.license, path=license_path, confidence=match.confidence)

        if self.config.include_license_contents:
            verdict = self._with_contents(verdict)
        return verdict

    def _with_contents(self, verdict: LicenseVerdict) -> LicenseVerdict:
        try:
            raw = read_license_file(verdict.path)
        except OSError as e:
            # The license is still identified, only its text is missing
            return verdict.model_copy(update={"error": f"Failed to open license file: {e}"})
        return verdict.model_copy(update={"contents": raw.decode("utf-8", errors="replace")})
