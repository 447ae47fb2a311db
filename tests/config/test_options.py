# Copyright 2026 APIModel Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the generator options file."""

from pathlib import Path

import pytest

from apimodel.config import GeneratorOptions, OptionsError, SpecificationFormat, load_options

# ###############
# Helpers
# ###############


def _write_options(tmp_path: Path, content: str) -> Path:
    """Write an options file and return its path."""
    options_file = tmp_path / ".apimodel.yaml"
    options_file.write_text(content, encoding="utf-8")
    return options_file


# ###############
# Normal Cases
# ###############


def test_minimal_options(tmp_path: Path) -> None:
    """Format and source are enough; everything else has defaults."""
    options = load_options(
        _write_options(tmp_path, "specification-format: protobuf\nspecification-source: api.pb\n")
    )

    assert isinstance(options, GeneratorOptions)
    assert options.specification_format == SpecificationFormat.PROTOBUF
    assert options.specification_source == tmp_path / "api.pb"
    assert options.service_config is None
    assert options.files_to_generate == []
    assert options.include_longrunning is False
    assert options.skipped_ids == []
    assert options.included_ids == []


def test_full_options(tmp_path: Path) -> None:
    """All keys are parsed, and paths are resolved against the options file."""
    content = """\
specification-format: openapi
specification-source: specs/openapi.json
service-config: config/secretmanager_v1.yaml
files-to-generate:
  - google/cloud/secretmanager/v1/service.proto
include-longrunning: true
skipped-ids:
  - .google.cloud.secretmanager.v1.SecretManagerService.DeleteSecret
included-ids:
  - .google.cloud.secretmanager.v1.SecretManagerService
"""
    options = load_options(_write_options(tmp_path, content))

    assert options.specification_format == SpecificationFormat.OPENAPI
    assert options.specification_source == tmp_path / "specs" / "openapi.json"
    assert options.service_config == tmp_path / "config" / "secretmanager_v1.yaml"
    assert options.files_to_generate == ["google/cloud/secretmanager/v1/service.proto"]
    assert options.include_longrunning is True
    assert options.skipped_ids == [".google.cloud.secretmanager.v1.SecretManagerService.DeleteSecret"]
    assert options.included_ids == [".google.cloud.secretmanager.v1.SecretManagerService"]


# ###############
# Error Cases
# ###############


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(OptionsError, match="not found"):
        load_options(tmp_path / "missing.yaml")


@pytest.mark.parametrize(
    "content,message",
    [
        ("specification-format: [unclosed\n", "Invalid YAML"),
        ("- a\n- b\n", "mapping"),
        ("specification-source: api.pb\n", "specification-format"),
        ("specification-format: protobuf\n", "specification-source"),
        ("specification-format: graphql\nspecification-source: a\n", "unknown specification-format"),
        ("specification-format: protobuf\nspecification-source: ''\n", "non-empty string"),
        (
            "specification-format: protobuf\nspecification-source: a\nfiles-to-generate: a.proto\n",
            "files-to-generate",
        ),
        (
            "specification-format: protobuf\nspecification-source: a\ninclude-longrunning: 'yes'\n",
            "include-longrunning",
        ),
        (
            "specification-format: protobuf\nspecification-source: a\nskipped-ids: .pkg.Book\n",
            "skipped-ids",
        ),
        (
            "specification-format: protobuf\nspecification-source: a\nincluded-ids: [1, 2]\n",
            "included-ids",
        ),
    ],
)
def test_invalid_options(tmp_path: Path, content: str, message: str) -> None:
    """Invalid options raise OptionsError naming the problem and the file."""
    with pytest.raises(OptionsError, match=message) as exc_info:
        load_options(_write_options(tmp_path, content))
    assert ".apimodel.yaml" in str(exc_info.value)
