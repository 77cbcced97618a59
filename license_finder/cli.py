"""
Command line entry point: `license-finder`.

Reads `go list -m -u -json` output from a file or stdin and prints every
dependency back as one JSON line with its `License` filled in.
"""

import logging
import sys
from typing import Optional

import click

from license_finder.core import config as settings
from license_finder.core.config import FinderConfig
from license_finder.core.exceptions import InputFileError, LicenseFinderError
from license_finder.models.schemas import DependencyRecord
from license_finder.services.finder_workflow import perform_stream_resolution
from license_finder.services.json_stream import encode_record
from license_finder.utility.durations import parse_duration
from license_finder.utility.log import configure_logging, get_logger

log = get_logger(__name__)

EXAMPLE_INPUT = """{
    "Path": "gopkg.in/yaml.v2",
    "Version": "v2.2.2",
    "Time": "2018-11-15T11:05:04Z",
    "Update": {
        "Path": "gopkg.in/yaml.v2",
        "Version": "v2.3.0",
        "Time": "2020-05-06T23:08:38Z"
    },
    "Dir": "/home/js/go/pkg/mod/gopkg.in/yaml.v2@v2.2.2",
    "GoMod": "/home/js/go/pkg/mod/cache/download/gopkg.in/yaml.v2/@v/v2.2.2.mod"
}"""

HELP = f"""License finder

Finds the license of one or more given dependencies. The input format
expected is the output of:

    go list -m -u -json <path to dependency>

\b
Example:
{EXAMPLE_INPUT}

If no input file is specified the JSON is read from stdin. Multiple JSON
objects are allowed, no special delimiter is required as long as the input
is valid JSON.
"""


class Duration(click.ParamType):
    """Go style duration ("300ms", "5s", "1m30s") converted to seconds."""

    name = "duration"

    def convert(self, value, param, ctx):
        if isinstance(value, (int, float)):
            return float(value)
        try:
            return parse_duration(value)
        except ValueError as e:
            self.fail(str(e), param, ctx)


DURATION = Duration()


@click.command(help=HELP, context_settings={"help_option_names": ["-h", "--help"]})
@click.option("-i", "--input-file", type=click.Path(dir_okay=False), default=None,
              help="Input filename containing JSON to read. Defaults to stdin.")
@click.option("-v", "--verbose", is_flag=True, default=settings.VERBOSE,
              help="Adds extra log messages.")
@click.option("--dependency-timeout", type=DURATION, default=settings.DEPENDENCY_TIMEOUT, show_default=True,
              help="Timeout for finding the license of each dependency.")
@click.option("--timeout", "global_timeout", type=DURATION, default=settings.GLOBAL_TIMEOUT, show_default=True,
              help="Global timeout for finding the licenses of all dependencies.")
@click.option("-e", "--error-is-fatal", is_flag=True, default=settings.ERROR_IS_FATAL,
              help="Exit on any error, for example when the license of a dependency is not found. "
                   "By default the error is only stored in the output.")
@click.option("--include-license-contents/--exclude-license-contents", default=settings.INCLUDE_LICENSE_CONTENTS,
              show_default=True, help="Whether to include the contents of the license file.")
@click.option("-k", "--known-licenses-config", type=click.Path(dir_okay=False),
              default=settings.KNOWN_LICENSES_PATH,
              help="YAML/JSON file mapping Path@Version (or Path) to a known license. "
                   "Checked before searching for the license.")
@click.option("--reload-known-licenses", is_flag=True, default=False,
              help="Re-read the known licenses file for every dependency.")
@click.option("--timeout-policy", type=click.Choice(["fail", "record"]), default=settings.TIMEOUT_POLICY,
              show_default=True,
              help="What a dependency timeout does: stop the run, or record the error and continue.")
@click.option("--scancode-bin", default=settings.SCANCODE_BIN, show_default=True,
              help="ScanCode executable used to detect licenses.")
@click.pass_context
def main(
    ctx: click.Context,
    input_file: Optional[str],
    verbose: bool,
    dependency_timeout: float,
    global_timeout: float,
    error_is_fatal: bool,
    include_license_contents: bool,
    known_licenses_config: Optional[str],
    reload_known_licenses: bool,
    timeout_policy: str,
    scancode_bin: str,
) -> None:
    configure_logging(level=logging.DEBUG if verbose else logging.WARNING)

    config = FinderConfig(
        dependency_timeout=dependency_timeout,
        global_timeout=global_timeout,
        error_is_fatal=error_is_fatal,
        include_license_contents=include_license_contents,
        known_licenses_path=known_licenses_config or None,
        live_reload_known_licenses=reload_known_licenses,
        timeout_policy=timeout_policy,
        scancode_bin=scancode_bin,
        output_dir=settings.OUTPUT_BASE_DIR,
        verbose=verbose,
    )

    try:
        summary = run(config, input_file)
    except LicenseFinderError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(e.exit_code)

    log.info("Done: %d dependencies, %d with errors", summary.processed, summary.with_errors)


def _print_record(record: DependencyRecord) -> None:
    click.echo(encode_record(record))


def run(config: FinderConfig, input_file: Optional[str] = None):
    """Resolves the dependencies read from `input_file` (or stdin) and prints them."""
    if not input_file:
        log.debug("Reading from stdin...")
        return perform_stream_resolution(config, sys.stdin, _print_record)

    log.debug("Reading from file %s...", input_file)
    try:
        stream = open(input_file, "r", encoding="utf-8")
    except OSError as e:
        raise InputFileError(f"Failed to open input file {input_file}: {e}") from e

    with stream:
        return perform_stream_resolution(config, stream, _print_record)


if __name__ == "__main__":
    main()
