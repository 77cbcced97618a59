import threading
from typing import Dict, List, Optional

import pytest

from license_finder.core.config import FinderConfig
from license_finder.models.schemas import AnalysisResult, LicenseMatch


class FakeAnalyzer:
    """
    In-memory analyzer: returns a canned result per directory and records
    every call. Unknown directories get a "no license" result.
    """

    def __init__(self, results: Optional[Dict[str, AnalysisResult]] = None, result_count: int = 1):
        self.results = results or {}
        self.result_count = result_count
        self.calls: List[str] = []

    def analyze(self, *directories: str) -> List[AnalysisResult]:
        self.calls.extend(directories)
        out = []
        for directory in directories:
            result = self.results.get(directory, AnalysisResult(arg=directory, error="no license file was found"))
            out.extend([result] * self.result_count)
        return out


class HangingAnalyzer:
    """Analyzer that never answers until `release` is set."""

    def __init__(self):
        self.release = threading.Event()
        self.calls: List[str] = []

    def analyze(self, *directories: str) -> List[AnalysisResult]:
        self.calls.extend(directories)
        self.release.wait(timeout=30)
        return [AnalysisResult(arg=d) for d in directories]


def make_match(license_name: str, file: str, confidence: float) -> AnalysisResult:
    return AnalysisResult(arg="", matches=[LicenseMatch(license=license_name, file=file, confidence=confidence)])


@pytest.fixture
def config():
    """Config with contents disabled so tests do not need real license files."""
    return FinderConfig(include_license_contents=False, dependency_timeout=2.0, global_timeout=10.0)


@pytest.fixture
def fake_analyzer():
    return FakeAnalyzer()


@pytest.fixture
def hanging_analyzer():
    analyzer = HangingAnalyzer()
    yield analyzer
    analyzer.release.set()


@pytest.fixture
def known_licenses_file(tmp_path):
    """Known licenses config with one exact and one version agnostic entry."""
    path = tmp_path / "known.yaml"
    path.write_text(
        "licenses:\n"
        "  acme/widgets@1.2.0:\n"
        "    Name: MIT\n"
        "    Path: /opt/licenses/MIT.txt\n"
        "  acme/widgets:\n"
        "    Name: BSD-3-Clause\n"
        "    Path: /opt/licenses/BSD.txt\n"
        "  acme/gadgets:\n"
        "    Name: Apache-2.0\n"
        "    Path: licenses/APACHE\n",
        encoding="utf-8",
    )
    return str(path)
