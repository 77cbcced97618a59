"""
SPDX utilities for ScanCode output.

Turns the JSON produced by ScanCode Toolkit for one directory into an ordered
list of license candidates. Files that look like license files (LICENSE,
LICENCE, COPYING) come first, files closer to the root before nested ones,
so the first candidate is the one that governs the directory.
"""

import os
from typing import Any, Dict, List, Optional, Tuple

from license_finder.models.schemas import LicenseMatch

_LICENSE_PREFIXES = ("license", "licence")
_COPYING_PREFIXES = ("copying",)
_IGNORED_PREFIXES = ("notice", "copyright")


def _is_valid(value: Optional[str]) -> bool:
    """True if the value is a usable SPDX expression (not None, empty or UNKNOWN)."""
    return bool(value) and value != "UNKNOWN"


def _as_confidence(score: Any) -> Optional[float]:
    """ScanCode scores are percentages; clamp them into [0.0, 1.0]."""
    try:
        value = float(score) / 100.0
    except (TypeError, ValueError):
        return None
    return min(max(value, 0.0), 1.0)


def _best_score(entry: Dict[str, Any]) -> float:
    """
    Confidence for a file entry: the best match score of its detections,
    falling back to the share of license text in the file.
    """
    scores = []
    for detection in entry.get("license_detections", []) or []:
        for match in detection.get("matches", []) or []:
            score = _as_confidence(match.get("score"))
            if score is not None:
                scores.append(score)
    # older ScanCode releases put the score on each 'licenses' item
    for lic in entry.get("licenses", []) or []:
        score = _as_confidence(lic.get("score"))
        if score is not None:
            scores.append(score)

    if scores:
        return max(scores)

    share = _as_confidence(entry.get("percentage_of_license_text"))
    return share if share is not None else 0.0


def _extract_first_valid_spdx(entry: Dict[str, Any]) -> Optional[Tuple[str, str]]:
    """
    Returns (spdx_expression, path) for the first valid SPDX found in a
    ScanCode file entry, or None.

    Lookup order:
    1. detected_license_expression_spdx
    2. license_detections[].license_expression_spdx
    3. licenses[].spdx_license_key
    """
    if not isinstance(entry, dict):
        return None

    path = entry.get("path") or ""

    spdx = entry.get("detected_license_expression_spdx")
    if _is_valid(spdx):
        return spdx, path

    for detection in entry.get("license_detections", []) or []:
        det_spdx = detection.get("license_expression_spdx")
        if _is_valid(det_spdx):
            return det_spdx, path

    for lic in entry.get("licenses", []) or []:
        spdx_key = lic.get("spdx_license_key")
        if _is_valid(spdx_key):
            return spdx_key, path

    return None


def _by_depth(entries: List[Any]) -> List[Dict[str, Any]]:
    # Fewer slashes means closer to the root (./LICENSE before ./vendor/x/LICENSE)
    valid_entries = [e for e in entries if isinstance(e, dict)]
    return sorted(valid_entries, key=lambda e: (e.get("path", "") or "").count("/"))


def rank_license_matches(data: Dict[str, Any]) -> List[LicenseMatch]:
    """
    Builds the ranked candidate list for a ScanCode result.

    Args:
        data (dict): Parsed ScanCode JSON for a single scanned directory,
            produced with --strip-root so paths are relative to it.

    Returns:
        List[LicenseMatch]: Candidates ordered best first. Empty when no
        license-like file carries a valid SPDX expression.
    """
    license_candidates = []
    copying_candidates = []
    other_candidates = []

    for entry in data.get("files", []) or []:
        if not isinstance(entry, dict) or entry.get("type") == "directory":
            continue

        path = entry.get("path") or ""
        if not path:
            continue

        lower = path.lower()
        basename = os.path.basename(lower)

        if basename.startswith(_IGNORED_PREFIXES):
            continue

        if basename.startswith(_LICENSE_PREFIXES):
            license_candidates.append(entry)
        elif basename.startswith(_COPYING_PREFIXES):
            copying_candidates.append(entry)
        elif "license" in lower or "licence" in lower or "copying" in lower:
            other_candidates.append(entry)

    matches: List[LicenseMatch] = []
    for group in (license_candidates, copying_candidates, other_candidates):
        for entry in _by_depth(group):
            found = _extract_first_valid_spdx(entry)
            if found is None:
                continue
            spdx, path = found
            matches.append(LicenseMatch(license=spdx, file=path, confidence=_best_score(entry)))

    return matches
