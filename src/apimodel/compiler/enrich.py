# Copyright 2026 APIModel Contributors
# SPDX-License-Identifier: Apache-2.0

"""Derived-field enrichment of an assembled API model.

Enrichment runs once, after ingestion and mixin composition, and flags:

- paginated list methods (AIP-4233),
- request fields the client library fills in automatically (AIP-4235),
- the metadata type of long-running operations.
"""

from __future__ import annotations

import logging

from google.api import service_pb2

from apimodel.model.entities import API, Field, Message, Method, PaginationInfo
from apimodel.model.types import INTEGER_TYPES, FieldBehavior, Typez

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############

EMPTY_TYPE_ID = ".google.protobuf.Empty"


def enrich(api: API, service_config: service_pb2.Service | None) -> None:
    """Populate the derived pagination, auto-population and operation fields of *api*.

    Args:
        api: The assembled API; modified in place.
        service_config: The service configuration. When present, its
            per-method ``auto_populated_fields`` lists are the final say on
            which request fields each method auto-populates.
    """
    allow_lists = _auto_populated_allow_lists(service_config)
    for service in api.services:
        for method in service.methods:
            request = api.state.message_by_id.get(method.input_type_id)
            response = api.state.message_by_id.get(method.output_type_id)
            if request is not None and response is not None:
                update_pagination(method, request, response)
            if request is not None:
                allowed = None if allow_lists is None else allow_lists.get(method.id[1:], set())
                update_auto_populated(method, request, allowed)
            if method.operation_info is not None:
                _update_operation_info(api, method)


def update_pagination(method: Method, request: Message, response: Message) -> bool:
    """Mark *method* as pageable if its messages follow the AIP-4233 shape.

    Returns:
        True if the method is pageable.
    """
    page_size = _find_field(request, ("pageSize", "maxResults"))
    page_token = _find_field(request, ("pageToken",))
    if page_size is None or page_size.repeated or page_size.typez not in INTEGER_TYPES:
        return False
    if page_token is None or not _is_singular_string(page_token):
        return False

    next_page_token = _find_field(response, ("nextPageToken",))
    if next_page_token is None or not _is_singular_string(next_page_token):
        return False
    pageable_item = next(
        (f for f in response.fields if f.repeated and not f.map and f.typez == Typez.MESSAGE),
        None,
    )
    if pageable_item is None:
        return False

    method.pagination = page_token
    response.pagination = PaginationInfo(next_page_token=next_page_token, pageable_item=pageable_item)
    return True


def is_auto_populated_candidate(field: Field) -> bool:
    """Return True if *field* is structurally eligible for auto-population."""
    return (
        _is_singular_string(field)
        and field.format is not None
        and field.format.upper() == "UUID4"
        and FieldBehavior.REQUIRED not in field.behavior
    )


def update_auto_populated(method: Method, request: Message, allowed: set[str] | None) -> None:
    """Flag the auto-populated request fields of a method.

    Eligible fields are flagged on the request message. The fields *method*
    fills in are recorded on the method, so methods sharing a request message
    keep their own lists.

    Args:
        method: The method; its ``auto_populated`` list is replaced.
        request: The request message of the method.
        allowed: Names of the fields the configuration lists for the method,
            or None when there is no configuration to consult.
    """
    method.auto_populated = []
    for field in request.fields:
        if not is_auto_populated_candidate(field):
            continue
        field.auto_populated = True
        if allowed is not None and field.name not in allowed:
            logger.debug("Field %s is not auto-populated by %s", field.id, method.id)
            continue
        method.auto_populated.append(field)


# ################
# Implementation
# ################


def _find_field(message: Message, json_names: tuple[str, ...]) -> Field | None:
    for field in message.fields:
        if (field.json_name or field.name) in json_names:
            return field
    return None


def _is_singular_string(field: Field) -> bool:
    return field.typez == Typez.STRING and not field.repeated


def _auto_populated_allow_lists(service_config: service_pb2.Service | None) -> dict[str, set[str]] | None:
    """Map method selectors to their ``auto_populated_fields``; None without configuration."""
    if service_config is None:
        return None
    allow_lists: dict[str, set[str]] = {}
    for settings in service_config.publishing.method_settings:
        allow_lists.setdefault(settings.selector.lstrip("."), set()).update(settings.auto_populated_fields)
    return allow_lists


def _update_operation_info(api: API, method: Method) -> None:
    info = method.operation_info
    if not info.metadata_type_id:
        info.metadata_type_id = EMPTY_TYPE_ID
    for type_id in (info.response_type_id, info.metadata_type_id):
        if type_id != EMPTY_TYPE_ID and type_id not in api.state.message_by_id:
            logger.warning("Long-running operation type %s of %s is not defined", type_id, method.id)
