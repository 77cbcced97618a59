import os
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

from license_finder.utility.durations import parse_duration

load_dotenv()

# scancode
SCANCODE_BIN = os.getenv("SCANCODE_BIN", "scancode")
# Directory where ScanCode JSON output is kept; a temporary dir is used when unset
OUTPUT_BASE_DIR = os.getenv("OUTPUT_BASE_DIR")

# resolution defaults, overridable from the command line
DEPENDENCY_TIMEOUT = os.getenv("LICENSE_FINDER_DEPENDENCY_TIMEOUT", "5s")
GLOBAL_TIMEOUT = os.getenv("LICENSE_FINDER_TIMEOUT", "5m")
KNOWN_LICENSES_PATH = os.getenv("LICENSE_FINDER_KNOWN_LICENSES")
TIMEOUT_POLICY = os.getenv("LICENSE_FINDER_TIMEOUT_POLICY", "fail")


def env_flag(name: str, default: bool) -> bool:
    """Reads a boolean environment variable ("1", "true", "yes", "on")."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


VERBOSE = env_flag("LICENSE_FINDER_VERBOSE", False)
ERROR_IS_FATAL = env_flag("LICENSE_FINDER_ERROR_IS_FATAL", False)
INCLUDE_LICENSE_CONTENTS = env_flag("LICENSE_FINDER_INCLUDE_CONTENTS", True)


class FinderConfig(BaseModel):
    """
    Immutable policy for one license finder run.

    Built once at the top (CLI or HTTP request) and handed to the resolution
    engine and the batch orchestrator; nothing below reads the environment.
    Timeouts are expressed in seconds.
    """

    model_config = ConfigDict(frozen=True)

    dependency_timeout: float = Field(default=5.0, gt=0)
    global_timeout: float = Field(default=300.0, gt=0)
    error_is_fatal: bool = False
    include_license_contents: bool = True
    known_licenses_path: Optional[str] = None
    live_reload_known_licenses: bool = False
    timeout_policy: Literal["fail", "record"] = "fail"
    scancode_bin: str = "scancode"
    output_dir: Optional[str] = None
    verbose: bool = False

    @classmethod
    def from_env(cls) -> "FinderConfig":
        """Builds the configuration from the environment (and `.env`) only."""
        return cls(
            dependency_timeout=parse_duration(DEPENDENCY_TIMEOUT),
            global_timeout=parse_duration(GLOBAL_TIMEOUT),
            error_is_fatal=ERROR_IS_FATAL,
            include_license_contents=INCLUDE_LICENSE_CONTENTS,
            known_licenses_path=KNOWN_LICENSES_PATH or None,
            timeout_policy=TIMEOUT_POLICY,
            scancode_bin=SCANCODE_BIN,
            output_dir=OUTPUT_BASE_DIR,
            verbose=VERBOSE,
        )
