"""
This module loads the known licenses config file and answers override lookups.

The config is a YAML (or JSON) document with a top-level `licenses` mapping:

    licenses:
      github.com/acme/widgets@v1.2.0:
        Name: MIT
        Path: /opt/licenses/MIT.txt
      github.com/acme/gadgets:
        Name: Apache-2.0
        Path: /opt/licenses/Apache-2.0.txt

Keys are either `<module path>@<version>` or a bare `<module path>` that
applies to every version. The `Path` of an entry is used as-is.
"""

from typing import Dict, Optional

import yaml
from pydantic import ValidationError

from license_finder.core.config import FinderConfig
from license_finder.core.exceptions import KnownLicensesError
from license_finder.models.schemas import KnownLicense, KnownLicensesDocument
from license_finder.utility.log import get_logger

log = get_logger(__name__)


def load_known_licenses(path: str) -> Dict[str, KnownLicense]:
    """
    Reads and validates the known licenses config file.

    Args:
        path (str): Path to the YAML/JSON config file.

    Returns:
        Dict[str, KnownLicense]: Override key -> license declaration.

    Raises:
        KnownLicensesError: If the file cannot be read or parsed, or if it
            contains no licenses.
    """
    log.info("Opening config file for known licenses: %s", path)

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except OSError as e:
        raise KnownLicensesError(f"Failed to read known license config file: {e}") from e
    except yaml.YAMLError as e:
        raise KnownLicensesError(f"Failed to parse known license config file {path}: {e}") from e

    if not isinstance(raw, dict):
        raw = {}

    try:
        document = KnownLicensesDocument.model_validate(raw)
    except ValidationError as e:
        raise KnownLicensesError(f"Invalid known license config file {path}: {e}") from e

    if not document.licenses:
        raise KnownLicensesError(
            f'{path} contained no licenses! Did you put them under "licenses:"?'
        )

    for key in document.licenses:
        log.debug("Known license entry: %s", key)

    return dict(document.licenses)


class KnownLicenseRegistry:
    """
    Read-only override table consulted before any analysis.

    By default the entries are fixed at construction. With `live_reload`
    the backing file is read again on every lookup, so edits made while a
    long batch is running are picked up.
    """

    def __init__(
        self,
        licenses: Dict[str, KnownLicense],
        source_path: Optional[str] = None,
        live_reload: bool = False,
    ):
        if live_reload and not source_path:
            raise ValueError("live_reload requires a source_path")
        self._licenses = dict(licenses)
        self.source_path = source_path
        self.live_reload = live_reload

    @classmethod
    def from_path(cls, path: str, live_reload: bool = False) -> "KnownLicenseRegistry":
        return cls(load_known_licenses(path), source_path=path, live_reload=live_reload)

    def __len__(self) -> int:
        return len(self._licenses)

    def lookup(self, path: str, version: str) -> Optional[KnownLicense]:
        """Returns the entry for `path@version`, else for `path`, else None."""
        licenses = load_known_licenses(self.source_path) if self.live_reload else self._licenses

        for key in (f"{path}@{version}", path):
            log.debug("Looking for known license %s", key)
            known = licenses.get(key)
            if known is not None:
                log.info("Found known license entry for %s", key)
                return known
        return None


def registry_from_config(config: FinderConfig) -> Optional[KnownLicenseRegistry]:
    """Loads the registry configured in `config`, or None when no file is set."""
    if not config.known_licenses_path:
        return None
    return KnownLicenseRegistry.from_path(
        config.known_licenses_path,
        live_reload=config.live_reload_known_licenses,
    )
