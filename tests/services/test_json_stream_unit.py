"""
test: services/json_stream.py

Decoding concatenated JSON objects and encoding resolved records.
"""

import io
import json
from unittest.mock import patch

import pytest

from license_finder.core.exceptions import InputDecodeError, OutputEncodeError
from license_finder.models.schemas import DependencyRecord, LicenseVerdict
from license_finder.services import json_stream
from license_finder.services.json_stream import (
    encode_record,
    iter_dependency_records,
    iter_json_values,
)

GO_LIST_OUTPUT = """{
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
}
{
	"Path": "github.com/spf13/pflag",
	"Version": "v1.0.5",
	"Dir": "/home/js/go/pkg/mod/github.com/spf13/pflag@v1.0.5"
}
"""


class _EndlessStream:
    """Serves `head` once, then whitespace forever."""

    def __init__(self, head):
        self.head = head
        self.reads = 0

    def read(self, size):
        self.reads += 1
        if self.reads > 100:
            raise AssertionError("kept reading past a syntax error")
        chunk, self.head = self.head, ""
        return chunk or " " * size


class TestIterJsonValues:

    def test_concatenated_objects_without_delimiter(self):
        values = list(iter_json_values(io.StringIO('{"a": 1}{"b": 2}  \n{"c": [3]}')))
        assert values == [{"a": 1}, {"b": 2}, {"c": [3]}]

    def test_empty_input(self):
        assert list(iter_json_values(io.StringIO(""))) == []
        assert list(iter_json_values(io.StringIO(" \n\t"))) == []

    def test_values_split_across_chunks(self, monkeypatch):
        monkeypatch.setattr(json_stream, "_CHUNK_SIZE", 3)
        text = '{"Path": "a/b", "Version": "v1"}\n{"Path": "c"}'

        assert list(iter_json_values(io.StringIO(text))) == [
            {"Path": "a/b", "Version": "v1"},
            {"Path": "c"},
        ]

    def test_syntax_error_fails_without_reading_the_rest(self):
        stream = _EndlessStream('{"a": 1}\n{"b": nope}\n')
        values = iter_json_values(stream)

        assert next(values) == {"a": 1}
        with pytest.raises(InputDecodeError, match="Invalid JSON input"):
            next(values)
        assert stream.reads < 5

    def test_long_string_split_across_chunks(self, monkeypatch):
        monkeypatch.setattr(json_stream, "_CHUNK_SIZE", 8)
        text = json.dumps({"Path": "x" * 100, "Version": "v1"})

        assert list(iter_json_values(io.StringIO(text))) == [{"Path": "x" * 100, "Version": "v1"}]

    def test_truncated_input_fails(self):
        stream = iter_json_values(io.StringIO('{"a": 1}{"b": '))

        assert next(stream) == {"a": 1}
        with pytest.raises(InputDecodeError, match="Invalid JSON input"):
            next(stream)


class TestIterDependencyRecords:

    def test_go_list_output(self):
        records = list(iter_dependency_records(io.StringIO(GO_LIST_OUTPUT)))

        assert [r.path for r in records] == ["gopkg.in/yaml.v2", "github.com/spf13/pflag"]
        assert records[0].update.version == "v2.3.0"
        assert records[0].source_dir == "/home/js/go/pkg/mod/gopkg.in/yaml.v2@v2.2.2"
        assert records[1].update is None

    @pytest.mark.parametrize("text", ['["not", "an", "object"]', '{"Version": "v1"}', '{"Path": ""}', '{"Path": 12}'])
    def test_invalid_records(self, text):
        with pytest.raises(InputDecodeError):
            list(iter_dependency_records(io.StringIO(text)))


class TestEncodeRecord:

    def test_round_trip_keeps_input_fields(self):
        original = json.loads(GO_LIST_OUTPUT.split("\n}\n")[0] + "\n}")
        original["Indirect"] = True
        record = DependencyRecord.model_validate(original)
        resolved = record.model_copy(update={"license": LicenseVerdict(Name="Apache-2.0", Path="/x/LICENSE", Confidence=0.92)})

        encoded = json.loads(encode_record(resolved))

        verdict = encoded.pop("License")
        assert encoded == original
        assert verdict == {"Name": "Apache-2.0", "Path": "/x/LICENSE", "Contents": "", "Confidence": 0.92, "Error": ""}

    def test_missing_fields_are_written_with_empty_values(self):
        record = DependencyRecord.model_validate({"Path": "github.com/spf13/pflag", "Indirect": True})
        resolved = record.model_copy(update={"license": LicenseVerdict(Error="no license file found")})

        encoded = json.loads(encode_record(resolved))

        assert list(encoded) == ["Path", "Version", "Time", "Update", "Dir", "GoMod", "Indirect", "License"]
        assert encoded["Version"] == ""
        assert encoded["Time"] is None
        assert encoded["Update"] is None
        assert encoded["Dir"] == ""
        assert encoded["GoMod"] == ""
        assert encoded["Indirect"] is True

    def test_single_line(self):
        record = DependencyRecord(Path="a", Version="v1", Dir="/src/a", License=LicenseVerdict(Contents="line1\nline2"))

        line = encode_record(record)

        assert "\n" not in line
        assert json.loads(line)["License"]["Contents"] == "line1\nline2"

    def test_incoming_license_is_replaced(self):
        record = DependencyRecord.model_validate({"Path": "a", "License": {"Name": "stale"}})
        resolved = record.model_copy(update={"license": LicenseVerdict(Name="MIT")})

        assert json.loads(encode_record(resolved))["License"]["Name"] == "MIT"

    def test_unserializable_record(self):
        record = DependencyRecord.model_validate({"Path": "a"})

        with patch("license_finder.services.json_stream.record_to_dict", return_value={"Broken": object()}):
            with pytest.raises(OutputEncodeError, match="Failed to marshal JSON for a"):
                encode_record(record)
