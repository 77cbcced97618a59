"""
Input and output adapters.

The input is a stream of JSON objects following each other with no special
delimiter (what `go list -m -u -json` prints). Each object is validated into
a DependencyRecord. Every resolved record is written back as one JSON line.
"""

import json
from typing import Any, Iterator, TextIO

from pydantic import ValidationError

from license_finder.core.exceptions import InputDecodeError, OutputEncodeError
from license_finder.models.schemas import DependencyRecord
from license_finder.utility.log import get_logger

log = get_logger(__name__)

_CHUNK_SIZE = 64 * 1024
# longest tail a decode error can leave when a chunk ends inside a token
_PARTIAL_TOKEN_MAX = 16


def iter_json_values(stream: TextIO) -> Iterator[Any]:
    """
    Yields the JSON values of a stream of concatenated JSON documents.

    The stream is read in chunks; a value split across chunks is completed
    by reading more before decoding is retried.

    Raises:
        InputDecodeError: As soon as the buffered data cannot be the start of
            valid JSON, or if the data left at end of stream is not valid JSON.
    """
    decoder = json.JSONDecoder()
    buffer = ""
    eof = False

    while True:
        buffer = buffer.lstrip()
        if buffer:
            try:
                value, end = decoder.raw_decode(buffer)
            except json.JSONDecodeError as e:
                if eof or _is_malformed(e, buffer):
                    raise InputDecodeError(f"Invalid JSON input: {e}") from e
            else:
                buffer = buffer[end:]
                yield value
                continue
        elif eof:
            return

        chunk = stream.read(_CHUNK_SIZE)
        if chunk:
            buffer += chunk
        else:
            eof = True


def _is_malformed(error: json.JSONDecodeError, buffer: str) -> bool:
    """
    Tells a syntax error apart from a value cut short by the end of the buffer.

    A cut value fails at most a token's length before the end of the buffer.
    An unterminated string may go on in the next chunk, so it is only an
    error at end of stream.
    """
    if error.msg.startswith("Unterminated string"):
        return False
    return len(buffer) - error.pos > _PARTIAL_TOKEN_MAX


def iter_dependency_records(stream: TextIO) -> Iterator[DependencyRecord]:
    """
    Decodes the input stream into DependencyRecords, in input order.

    Raises:
        InputDecodeError: On malformed JSON or a value that is not a valid
            dependency object.
    """
    count = 0
    for value in iter_json_values(stream):
        if not isinstance(value, dict):
            raise InputDecodeError(
                f"Expected a JSON object for dependency #{count + 1}, got {type(value).__name__}"
            )
        try:
            record = DependencyRecord.model_validate(value)
        except ValidationError as e:
            raise InputDecodeError(f"Invalid dependency #{count + 1}: {e}") from e
        count += 1
        yield record

    log.debug("EOF after %d dependencies", count)


def record_to_dict(record: DependencyRecord) -> dict:
    """
    Output shape of a resolved record: every modelled field (null or empty
    when the input lacked it), every other input key as it was read, and
    the full `License` object.
    """
    payload = record.model_dump(by_alias=True, exclude={"license"})
    # unmodelled keys are written back as they were read
    payload.update(record.model_extra or {})
    verdict = record.license
    payload["License"] = verdict.model_dump(by_alias=True) if verdict is not None else None
    return payload


def encode_record(record: DependencyRecord) -> str:
    """
    Serializes a resolved record to a single JSON line (no trailing newline).

    Raises:
        OutputEncodeError: If the record cannot be serialized.
    """
    try:
        return json.dumps(record_to_dict(record), ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise OutputEncodeError(f"Failed to marshal JSON for {record.path}: {e}") from e
