# Copyright 2026 APIModel Contributors
# SPDX-License-Identifier: Apache-2.0

"""Loader for service configuration documents (``google.api.Service`` YAML)."""

from __future__ import annotations

from pathlib import Path

import yaml
from google.api import service_pb2
from google.protobuf import json_format

# ###############
# Public Interface
# ###############


class ServiceConfigError(Exception):
    """Raised when a service configuration file is invalid or cannot be loaded."""


def load_service_config(path: Path) -> service_pb2.Service:
    """Load and parse a service configuration YAML file.

    Args:
        path: Path to the service configuration, e.g. ``secretmanager_v1.yaml``.

    Returns:
        The configuration as a ``google.api.Service`` message.

    Raises:
        ServiceConfigError: If the file cannot be read or does not describe a valid service.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ServiceConfigError(f"Service config file not found: {path}") from None
    except OSError as exc:
        raise ServiceConfigError(f"Cannot read service config file: {exc}") from exc

    return parse_service_config(text, source_label=str(path))


def parse_service_config(text: str, source_label: str = "<string>") -> service_pb2.Service:
    """Parse service configuration YAML text.

    Keys that are not part of ``google.api.Service`` (such as the ``type``
    header of the YAML form) are ignored.

    Args:
        text: Raw YAML content.
        source_label: Human-readable label used in error messages (e.g. the file path).

    Returns:
        The configuration as a ``google.api.Service`` message.

    Raises:
        ServiceConfigError: If the YAML is invalid or does not match the schema.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ServiceConfigError(f"Invalid YAML in {source_label}: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ServiceConfigError(f"{source_label}: service config must be a YAML mapping")

    service = service_pb2.Service()
    try:
        json_format.ParseDict(data, service, ignore_unknown_fields=True)
    except json_format.ParseError as exc:
        raise ServiceConfigError(f"{source_label}: {exc}") from exc
    return service


def split_api_name(name: str) -> tuple[str, str]:
    """Split a fully-qualified API name into its package and service name.

    >>> split_api_name("google.cloud.location.Locations")
    ('google.cloud.location', 'Locations')
    """
    package, _, service = name.rpartition(".")
    return package, service
