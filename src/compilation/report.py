"""Loader for compilation reports written by the bundler integration.

The report is JSON of the form::

    {"results": [{"outputPath": "dist/fn1",
                  "modules": [{"identifier": "...", "rawRequest": "...", "issuer": null}],
                  "chunks": [{"name": "main", "modules": ["<identifier>", ...]}]}]}

Issuers and chunk members reference modules by identifier within the same
result.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, List

from jsonschema import Draft7Validator

from compilation.models import Chunk, CompilationReport, CompileResult, ModuleDescriptor
from packer.errors import ReportContractError

logger = logging.getLogger(__name__)

REPORT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["results"],
    "properties": {
        "results": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["outputPath", "modules", "chunks"],
                "properties": {
                    "outputPath": {"type": "string", "minLength": 1},
                    "modules": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "required": ["identifier"],
                            "properties": {
                                "identifier": {"type": "string"},
                                "rawRequest": {"type": ["string", "null"]},
                                "issuer": {"type": ["string", "null"]},
                            },
                        },
                    },
                    "chunks": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "required": ["modules"],
                            "properties": {
                                "name": {"type": ["string", "null"]},
                                "modules": {"type": "array", "items": {"type": "string"}},
                            },
                        },
                    },
                },
            },
        },
    },
}


def validate_report(data: Dict[str, Any]) -> None:
    """Validate raw report data; raise ReportContractError on the first problem."""
    validator = Draft7Validator(REPORT_SCHEMA)
    errs = sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.path])
    if errs:
        first = errs[0]
        path = "/".join([str(p) for p in first.path])
        raise ReportContractError(f"Invalid compilation report at '{path}': {first.message}")


def _build_result(raw: Dict[str, Any], base_dir: str) -> CompileResult:
    output_path = raw["outputPath"]
    if not os.path.isabs(output_path):
        output_path = os.path.normpath(os.path.join(base_dir, output_path))

    index: Dict[str, ModuleDescriptor] = {}
    for entry in raw["modules"]:
        index[entry["identifier"]] = ModuleDescriptor(
            identifier=entry["identifier"],
            raw_request=entry.get("rawRequest"),
        )

    # Link issuers once every descriptor exists
    for entry in raw["modules"]:
        issuer_id = entry.get("issuer")
        if issuer_id is None:
            continue
        issuer = index.get(issuer_id)
        if issuer is None:
            raise ReportContractError(
                f"Module '{entry['identifier']}' in '{raw['outputPath']}' references unknown issuer '{issuer_id}'"
            )
        index[entry["identifier"]].issuer = issuer

    chunks: List[Chunk] = []
    for raw_chunk in raw["chunks"]:
        members = []
        for identifier in raw_chunk["modules"]:
            module = index.get(identifier)
            if module is None:
                raise ReportContractError(
                    f"Chunk '{raw_chunk.get('name')}' in '{raw['outputPath']}' lists unknown module '{identifier}'"
                )
            members.append(module)
        chunks.append(Chunk(name=raw_chunk.get("name"), modules=members))

    return CompileResult(output_path=output_path, chunks=chunks)


def parse_report(data: Dict[str, Any], base_dir: str) -> CompilationReport:
    """Build a CompilationReport from already-decoded JSON data.

    Args:
        data: Decoded report JSON.
        base_dir: Directory relative output paths are resolved against.
    """
    validate_report(data)
    return CompilationReport(results=[_build_result(raw, base_dir) for raw in data["results"]])


def load_report(path: str, base_dir: str) -> CompilationReport:
    """Read, validate and link a compilation report file.

    Raises:
        OSError: If the file cannot be read.
        json.JSONDecodeError: If the file is not valid JSON.
        ReportContractError: If the report violates the expected structure.
    """
    with open(path, "r", encoding="utf-8") as file:
        data = json.load(file)
    report = parse_report(data, base_dir)
    logger.debug("Loaded compilation report %s with %d result(s)", path, len(report.results))
    return report
