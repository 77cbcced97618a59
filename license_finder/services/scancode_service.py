"""
This module runs the ScanCode Toolkit CLI on a dependency's source directory
and turns its JSON output into analyzer results for the resolution engine.

ScanCode problems (binary missing, fatal exit code, unreadable output) do not
raise: they are reported as the `error` of the AnalysisResult for that
directory, the same way a directory without any license is reported.
"""

import json
import os
import subprocess
import tempfile
from typing import List, Optional

from license_finder.core.config import OUTPUT_BASE_DIR, SCANCODE_BIN
from license_finder.models.schemas import AnalysisResult
from license_finder.services.scanner.main_spdx_utilities import rank_license_matches
from license_finder.utility.log import get_logger

log = get_logger(__name__)

NO_LICENSE_FOUND = "no license file was found"


class ScanCodeError(RuntimeError):
    """ScanCode could not produce a usable result for a directory."""


#  ------------ MAIN FUNCTION TO EXECUTE SCANCODE -----------------

def run_scancode(repo_path: str, scancode_bin: str = SCANCODE_BIN, output_dir: Optional[str] = OUTPUT_BASE_DIR) -> dict:
    """
    Executes ScanCode on a directory and parses the JSON output.

    Args:
        repo_path (str): The directory to scan.
        scancode_bin (str): ScanCode executable.
        output_dir (Optional[str]): Where to keep the JSON output. When None
            the output is written to a temporary directory and discarded.

    Returns:
        dict: The parsed ScanCode JSON, paths relative to `repo_path`.

    Raises:
        ScanCodeError: If ScanCode cannot be started, exits with a fatal
            code, or leaves no valid JSON behind.
    """
    if output_dir is None:
        with tempfile.TemporaryDirectory(prefix="license-finder-") as tmp_dir:
            return _run_scancode(repo_path, scancode_bin, tmp_dir)

    os.makedirs(output_dir, exist_ok=True)
    return _run_scancode(repo_path, scancode_bin, output_dir)


def _run_scancode(repo_path: str, scancode_bin: str, output_dir: str) -> dict:
    repo_name = os.path.basename(os.path.normpath(repo_path)) or "root"
    output_file = os.path.join(output_dir, f"{repo_name}_scancode_output.json")

    cmd = [
        scancode_bin,
        "--license",
        "--strip-root",
        "--quiet",
        "--json", output_file,
        repo_path,
    ]
    log.debug("Running %s", " ".join(cmd))

    try:
        process = subprocess.Popen(cmd, stdout=subprocess.DEVNULL, stderr=subprocess.PIPE, text=True)
    except OSError as e:
        raise ScanCodeError(f"Failed to run ScanCode ({scancode_bin}): {e}") from e

    _, stderr = process.communicate()
    returncode = process.returncode

    # ScanCode: 0 ok, 1 completed with non fatal errors, > 1 failure
    if returncode > 1:
        detail = (stderr or "").strip().splitlines()
        raise ScanCodeError(f"ScanCode failed (exit {returncode})" + (f": {detail[-1]}" if detail else ""))

    if returncode == 1:
        log.warning("ScanCode completed with non fatal errors for %s", repo_path)

    if not os.path.exists(output_file):
        raise ScanCodeError("ScanCode did not write its JSON output")

    try:
        with open(output_file, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ScanCodeError(f"Invalid ScanCode output: {e}") from e


#  ------------ ANALYZER -----------------

class ScanCodeAnalyzer:
    """Analyzer that detects licenses with ScanCode, one scan per directory."""

    def __init__(self, scancode_bin: str = SCANCODE_BIN, output_dir: Optional[str] = OUTPUT_BASE_DIR):
        self.scancode_bin = scancode_bin
        self.output_dir = output_dir

    def analyze(self, *directories: str) -> List[AnalysisResult]:
        """Returns one AnalysisResult per given directory, in the same order."""
        return [self._analyze_one(directory) for directory in directories]

    def _analyze_one(self, directory: str) -> AnalysisResult:
        if not directory or not os.path.isdir(directory):
            return AnalysisResult(arg=directory, error=f"directory does not exist: {directory!r}")

        try:
            data = run_scancode(directory, self.scancode_bin, self.output_dir)
        except ScanCodeError as e:
            log.warning("%s", e)
            return AnalysisResult(arg=directory, error=str(e))

        matches = rank_license_matches(data)
        if not matches:
            return AnalysisResult(arg=directory, error=NO_LICENSE_FOUND)

        log.debug("ScanCode found %d license candidates in %s", len(matches), directory)
        return AnalysisResult(arg=directory, matches=matches)
