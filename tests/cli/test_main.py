# Copyright 2026 APIModel Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the APIModel CLI entry point."""

import sys
from pathlib import Path

import pytest

from apimodel.cli.main import main

# ###############
# Helpers
# ###############

_OPENAPI = """\
openapi: 3.0.3
info:
  title: Library API
servers:
- url: https://library.example.com
paths:
  /v1/books:
    get:
      operationId: ListBooks
      parameters:
      - name: pageSize
        in: query
        schema:
          type: integer
          format: int32
      - name: pageToken
        in: query
        schema:
          type: string
      responses:
        default:
          content:
            application/json:
              schema:
                $ref: '#/components/schemas/ListBooksResponse'
  /v1/books/{book}:
    get:
      operationId: GetBook
      parameters:
      - name: book
        in: path
        required: true
        schema:
          type: string
      responses:
        default:
          content:
            application/json:
              schema:
                $ref: '#/components/schemas/Book'
components:
  schemas:
    Book:
      type: object
      properties:
        title:
          type: string
    ListBooksResponse:
      type: object
      properties:
        books:
          type: array
          items:
            $ref: '#/components/schemas/Book'
        nextPageToken:
          type: string
"""


def _workspace(tmp_path: Path, document: str = _OPENAPI) -> Path:
    """Write an OpenAPI document and an options file; return the options file."""
    (tmp_path / "library.yaml").write_text(document, encoding="utf-8")
    options = tmp_path / ".apimodel.yaml"
    options.write_text("specification-format: openapi\nspecification-source: library.yaml\n", encoding="utf-8")
    return options


def _run(monkeypatch: pytest.MonkeyPatch, *args: str) -> int:
    monkeypatch.setattr(sys, "argv", ["apimodel", *args])
    with pytest.raises(SystemExit) as exc_info:
        main()
    return exc_info.value.code


# ###############
# Public Interface
# ###############


def test_main_no_args_prints_help_and_exits(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture) -> None:
    """main() with no subcommand prints help and exits with code 0."""
    assert _run(monkeypatch) == 0
    assert "usage: apimodel" in capsys.readouterr().out


# -------- check tests --------


def test_check_reports_model_size(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
) -> None:
    """check exits with code 0 and summarizes the model."""
    assert _run(monkeypatch, "check", str(_workspace(tmp_path))) == 0
    out = capsys.readouterr().out
    assert "No issues found" in out
    assert "1 service(s), 2 method(s)" in out


def test_check_uses_default_options_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
) -> None:
    """check without an argument reads .apimodel.yaml from the working directory."""
    _workspace(tmp_path)
    monkeypatch.chdir(tmp_path)
    assert _run(monkeypatch, "check") == 0
    assert "No issues found" in capsys.readouterr().out


def test_check_missing_options_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
) -> None:
    """check exits with code 1 when the options file does not exist."""
    assert _run(monkeypatch, "check", str(tmp_path / "missing.yaml")) == 1
    err = capsys.readouterr().err
    assert "Error:" in err
    assert "Options file not found" in err


def test_check_invalid_document(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
) -> None:
    """check exits with code 1 when the OpenAPI document cannot be ingested."""
    options = _workspace(tmp_path, _OPENAPI.replace("operationId: GetBook", "summary: Get a book"))
    assert _run(monkeypatch, "check", str(options)) == 1
    assert "Missing operationId" in capsys.readouterr().err


def test_check_verbose_flag(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """The global --verbose flag is accepted before the subcommand."""
    assert _run(monkeypatch, "--verbose", "check", str(_workspace(tmp_path))) == 0


# -------- describe tests --------


def test_describe_lists_services_and_bindings(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
) -> None:
    """describe prints each service with its methods and HTTP bindings."""
    assert _run(monkeypatch, "describe", str(_workspace(tmp_path))) == 0
    lines = capsys.readouterr().out.splitlines()
    assert "Library API" in lines[0]
    assert lines[1:] == [
        "  service Service (library.example.com)",
        "    ListBooks [paginated]",
        "      GET /v1/books",
        "    GetBook",
        "      GET /v1/books/{book}",
    ]


def test_describe_missing_options_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """describe exits with code 1 when the options file does not exist."""
    assert _run(monkeypatch, "describe", str(tmp_path / "missing.yaml")) == 1
