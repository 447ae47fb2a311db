# Copyright 2026 APIModel Contributors
# SPDX-License-Identifier: Apache-2.0

"""Data model and YAML parser for the ``.apimodel.yaml`` generator options file."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path

import yaml

# ###############
# Public Interface
# ###############

OPTIONS_FILE_NAME = ".apimodel.yaml"


class OptionsError(Exception):
    """Raised when a generator options file is invalid or cannot be loaded."""


class SpecificationFormat(enum.Enum):
    """The two supported service description formats."""

    PROTOBUF = "protobuf"
    OPENAPI = "openapi"


@dataclass
class GeneratorOptions:
    """The parsed options of one model-construction run.

    Attributes:
        specification_format: Which ingestor reads the specification source.
        specification_source: A binary FileDescriptorSet or an OpenAPI v3 document.
        service_config: Optional ``google.api.Service`` YAML file.
        files_to_generate: Descriptor file names whose elements form the API.
            When empty, the files are chosen from the service configuration.
        include_longrunning: Force-enable the long-running operations mixin.
        skipped_ids: IDs of services, methods, messages and enums left out of
            the generated API.
        included_ids: When not empty, only these elements and their
            dependencies are generated.
    """

    specification_format: SpecificationFormat
    specification_source: Path
    service_config: Path | None = None
    files_to_generate: list[str] = field(default_factory=list)
    include_longrunning: bool = False
    skipped_ids: list[str] = field(default_factory=list)
    included_ids: list[str] = field(default_factory=list)


def load_options(path: Path) -> GeneratorOptions:
    """Load and parse a generator options file.

    Relative paths in the file are resolved against the file's directory.

    Args:
        path: Path to the options file.

    Returns:
        A GeneratorOptions instance populated from the file.

    Raises:
        OptionsError: If the file cannot be read or the options are invalid.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise OptionsError(f"Options file not found: {path}") from None
    except OSError as exc:
        raise OptionsError(f"Cannot read options file: {exc}") from exc

    return _parse_options(text, base_dir=path.parent, source_label=str(path))


# ################
# Implementation
# ################


def _parse_options(text: str, base_dir: Path, source_label: str = "<string>") -> GeneratorOptions:
    """Parse options YAML text into GeneratorOptions.

    Raises:
        OptionsError: If the YAML is invalid or required fields are missing.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise OptionsError(f"Invalid YAML in {source_label}: {exc}") from exc

    if not isinstance(data, dict):
        raise OptionsError(f"{source_label}: options must be a YAML mapping")

    raw_format = _require_string(data, "specification-format", source_label)
    try:
        specification_format = SpecificationFormat(raw_format)
    except ValueError:
        choices = ", ".join(f"'{f.value}'" for f in SpecificationFormat)
        raise OptionsError(
            f"{source_label}: unknown specification-format '{raw_format}' (expected one of {choices})"
        ) from None

    source = base_dir / _require_string(data, "specification-source", source_label)

    service_config: Path | None = None
    if "service-config" in data:
        service_config = base_dir / _require_string(data, "service-config", source_label)

    files_to_generate = _optional_string_list(data, "files-to-generate", source_label)

    include_longrunning = data.get("include-longrunning", False)
    if not isinstance(include_longrunning, bool):
        raise OptionsError(f"{source_label}: 'include-longrunning' must be a boolean")

    return GeneratorOptions(
        specification_format=specification_format,
        specification_source=source,
        service_config=service_config,
        files_to_generate=files_to_generate,
        include_longrunning=include_longrunning,
        skipped_ids=_optional_string_list(data, "skipped-ids", source_label),
        included_ids=_optional_string_list(data, "included-ids", source_label),
    )


def _require_string(mapping: dict[str, object], key: str, source_label: str) -> str:
    """Extract a required string field from a mapping, raising OptionsError if missing."""
    if key not in mapping:
        raise OptionsError(f"{source_label}: missing required field '{key}'")
    value = mapping[key]
    if not isinstance(value, str) or not value:
        raise OptionsError(f"{source_label}: '{key}' must be a non-empty string")
    return value


def _optional_string_list(mapping: dict[str, object], key: str, source_label: str) -> list[str]:
    """Extract an optional list of strings, defaulting to an empty list."""
    value = mapping.get(key, [])
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise OptionsError(f"{source_label}: '{key}' must be a list of strings")
    return list(value)
