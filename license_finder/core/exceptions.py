"""
Errors that terminate a license finder run.

Each category carries its own process exit code. Per-dependency problems that
do not stop the run (license not found, unreadable license file) are never
raised, they are stored in the `Error` field of the emitted license instead.
"""


class LicenseFinderError(Exception):
    """Base class for run-terminating failures."""

    exit_code = 1


class RecordError(LicenseFinderError):
    """A dependency was resolved with an error while error-is-fatal is enabled."""

    exit_code = 1


class InputDecodeError(LicenseFinderError):
    """The input stream holds a value that is not a valid dependency record."""

    exit_code = 2


class OutputEncodeError(LicenseFinderError):
    """A resolved dependency could not be serialized to JSON."""

    exit_code = 3


class AnalyzerContractError(LicenseFinderError):
    """The analyzer returned other than exactly one result for one directory."""

    exit_code = 4


class InputFileError(LicenseFinderError):
    """The input file could not be opened."""

    exit_code = 5


class DependencyTimeoutError(LicenseFinderError):
    """Resolving a single dependency took longer than the dependency timeout."""

    exit_code = 6


class GlobalTimeoutError(LicenseFinderError):
    """The whole batch took longer than the global timeout."""

    exit_code = 7


class KnownLicensesError(LicenseFinderError):
    """The known licenses config file is missing, unparsable or empty."""

    exit_code = 8
