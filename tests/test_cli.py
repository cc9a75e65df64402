"""
Tests for the estab command line interface.
"""

import json
import os
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from estab import __version__
from estab.cli import main

TEST_DATA = os.path.join(os.path.dirname(__file__), "test_data")
HITS_FILE = os.path.join(TEST_DATA, "hits.jsonl")


@pytest.fixture
def runner():
    return CliRunner()


class TestCliWithInputFile:
    """Tests running the CLI against a JSON Lines file"""

    def test_export(self, runner):
        result = runner.invoke(main, ["--input", HITS_FILE, "-f", "_id name tags"])
        assert result.exit_code == 0, result.output
        assert result.output.splitlines() == [
            "1\tAlice\tadmin|user",
            "2\tBob\t",
            "3\tNA\tx;y|z",
            "4\tNA\tNA",
            "5\t\tNA",
        ]

    def test_header_and_options(self, runner):
        result = runner.invoke(
            main,
            [
                "--input", HITS_FILE,
                "-f", "name address.city",
                "--header",
                "--delimiter", ",",
                "--null", "-",
                "--zero-as-null",
                "--skip-empty",
            ],
        )
        assert result.exit_code == 0, result.output
        assert result.output.splitlines() == [
            "name,address.city",
            "Alice,NYC",
            "Bob,LA",
            "-,Austin",
        ]

    def test_raw(self, runner):
        result = runner.invoke(main, ["--input", HITS_FILE, "-f", "name", "--raw"])
        assert result.exit_code == 0, result.output
        records = [json.loads(line) for line in result.output.splitlines()]
        assert len(records) == 5
        assert records[0]["address"] == {"city": "NYC", "zip": "10001"}

    def test_single_value(self, runner):
        result = runner.invoke(main, ["--input", HITS_FILE, "-f", "tags", "-1", "--skip-empty"])
        assert result.exit_code == 0, result.output
        assert result.output.splitlines() == ["admin", "user", "x", "y|z"]

    def test_out_file(self, runner, tmp_path):
        out_path = tmp_path / "out.tsv"
        result = runner.invoke(main, ["--input", HITS_FILE, "-f", "_id", "--out", str(out_path)])
        assert result.exit_code == 0, result.output
        assert out_path.read_text(encoding="utf-8").splitlines() == ["1", "2", "3", "4", "5"]

    def test_malformed_input(self, runner, tmp_path):
        bad_file = tmp_path / "bad.jsonl"
        bad_file.write_text('{"name": "Alice"}\n{invalid}\n', encoding="utf-8")
        result = runner.invoke(main, ["--input", str(bad_file), "-f", "name"])
        assert result.exit_code == 1
        assert "Line 2: Malformed JSON" in result.output

    def test_malformed_value(self, runner):
        result = runner.invoke(main, ["--input", HITS_FILE, "-f", "address"])
        assert result.exit_code == 1
        assert "Field 'address' has unsupported value" in result.output


class TestCliValidation:
    """Tests for option validation"""

    def test_fields_required(self, runner):
        result = runner.invoke(main, ["--input", HITS_FILE])
        assert result.exit_code == 2

    def test_single_value_with_many_fields(self, runner):
        result = runner.invoke(main, ["--input", HITS_FILE, "-f", "a b", "-1"])
        assert result.exit_code == 2
        assert "single field" in result.output

    def test_identical_separators(self, runner):
        result = runner.invoke(main, ["--input", HITS_FILE, "-f", "a", "--secondary-separator", "|"])
        assert result.exit_code == 2
        assert "must differ" in result.output

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestCliWithElasticsearch:
    """Tests running the CLI against a mocked Elasticsearch client"""

    def test_scroll_export(self, runner):
        client = MagicMock()
        client.search.return_value = {
            "_scroll_id": "s1",
            "hits": {
                "total": {"value": 2, "relation": "eq"},
                "hits": [
                    {"_id": "a", "_index": "people", "_score": 1.0, "_source": {"name": "Alice", "n": 1.5}},
                    {"_id": "b", "_index": "people", "_score": 1.0, "_source": {"name": "Bob", "n": 2}},
                ],
            },
        }
        client.scroll.return_value = {"_scroll_id": "s1", "hits": {"hits": []}}

        with patch("estab.cli._open_elasticsearch", return_value=client) as open_client:
            result = runner.invoke(
                main,
                ["--indices", "people", "-f", "_id name n", "--query", '{"query": {"term": {"active": true}}}'],
            )

        assert result.exit_code == 0, result.output
        assert result.output.splitlines() == ["a\tAlice\t1.5", "b\tBob\t2"]
        open_client.assert_called_once_with("http://localhost", "9200")
        _, kwargs = client.search.call_args
        assert kwargs["index"] == "people"
        assert kwargs["query"] == {"term": {"active": True}}
        assert kwargs["source_includes"] == ["name", "n"]
        client.clear_scroll.assert_called_once_with(scroll_id="s1")

    def test_invalid_query(self, runner):
        with patch("estab.cli._open_elasticsearch", return_value=MagicMock()):
            result = runner.invoke(main, ["-f", "name", "--query", "{not json"])
        assert result.exit_code == 2
        assert "--query" in result.output

    def test_search_failure(self, runner):
        client = MagicMock()
        client.search.side_effect = ConnectionError("connection refused")
        with patch("estab.cli._open_elasticsearch", return_value=client):
            result = runner.invoke(main, ["-f", "name"])
        assert result.exit_code == 1
        assert "connection refused" in result.output
