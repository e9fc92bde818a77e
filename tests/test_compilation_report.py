"""Tests for compilation report loading."""

import json
import os

import pytest

from compilation.report import load_report, parse_report
from packer.errors import ReportContractError
from packer.externals import get_external_modules
from packer.models import ExternalRef

REPORT = {
    "results": [
        {
            "outputPath": ".webpack/fn1",
            "modules": [
                {"identifier": "/app/fn1.js", "rawRequest": "./fn1.js", "issuer": None},
                {"identifier": "/app/node_modules/express/index.js", "rawRequest": "express", "issuer": "/app/fn1.js"},
                {"identifier": "external \"debug\"", "rawRequest": "debug",
                 "issuer": "/app/node_modules/express/index.js"},
                {"identifier": "external \"@aws-sdk/client-s3\"", "rawRequest": "@aws-sdk/client-s3",
                 "issuer": "/app/fn1.js"},
            ],
            "chunks": [
                {"name": "fn1", "modules": [
                    "/app/fn1.js",
                    "/app/node_modules/express/index.js",
                    "external \"debug\"",
                    "external \"@aws-sdk/client-s3\"",
                ]}
            ],
        }
    ]
}


class TestParseReport:
    """Linking and validation of report data."""

    def test_links_issuers_and_resolves_output_path(self, tmp_path):
        report = parse_report(REPORT, str(tmp_path))

        result = report.results[0]
        assert result.output_path == os.path.join(str(tmp_path), ".webpack", "fn1")
        debug = result.chunks[0].modules[2]
        assert debug.issuer.raw_request == "express"
        assert debug.issuer.issuer.identifier == "/app/fn1.js"

    def test_feeds_extraction(self, tmp_path):
        result = parse_report(REPORT, str(tmp_path)).results[0]
        assert get_external_modules(result) == [
            ExternalRef(external="debug", origin="express"),
            ExternalRef(external="@aws-sdk/client-s3", origin=None),
        ]

    def test_absolute_output_path_kept(self, tmp_path):
        data = {"results": [{"outputPath": str(tmp_path / "abs"), "modules": [], "chunks": []}]}
        assert parse_report(data, "/elsewhere").results[0].output_path == str(tmp_path / "abs")

    def test_schema_violation(self):
        with pytest.raises(ReportContractError) as exc_info:
            parse_report({"results": [{"outputPath": "x", "modules": [{}], "chunks": []}]}, "/")
        assert "identifier" in str(exc_info.value)

    def test_unknown_issuer(self):
        data = {"results": [{
            "outputPath": "x",
            "modules": [{"identifier": "a", "issuer": "ghost"}],
            "chunks": [],
        }]}
        with pytest.raises(ReportContractError):
            parse_report(data, "/")

    def test_unknown_chunk_member(self):
        data = {"results": [{"outputPath": "x", "modules": [], "chunks": [{"name": "c", "modules": ["ghost"]}]}]}
        with pytest.raises(ReportContractError):
            parse_report(data, "/")


class TestLoadReport:
    """File loading."""

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "report.json"
        path.write_text(json.dumps(REPORT))
        report = load_report(str(path), str(tmp_path))
        assert len(report.results) == 1

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "report.json"
        path.write_text("{")
        with pytest.raises(json.JSONDecodeError):
            load_report(str(path), str(tmp_path))
