# Copyright 2026 APIModel Contributors
# SPDX-License-Identifier: Apache-2.0

"""Reachability over the API model, and pruning of the generated elements."""

from __future__ import annotations

from collections.abc import Callable, Iterable

from apimodel.model.entities import API, Enum, Message
from apimodel.model.types import Typez

# ###############
# Public Interface
# ###############


class DependencyError(Exception):
    """Raised when a dependency walk reaches an ID missing from the symbol table."""


def find_dependencies(api: API, ids: Iterable[str]) -> set[str]:
    """Return *ids* together with every element they need.

    Services bring in their methods; methods bring in their request, response
    and long-running operation types; messages bring in the messages and enums
    their fields refer to. Finally every element brings in its container: a
    method its service, a nested message or enum its parent message.

    Args:
        api: The API whose symbol table is searched.
        ids: Fully-qualified IDs of services, methods, messages or enums.

    Returns:
        The IDs of the closure.

    Raises:
        DependencyError: If an ID is not registered.
    """
    state = api.state
    included: set[str] = set()
    candidates: list[str] = []

    def add(element_id: str) -> None:
        if element_id and element_id not in included:
            included.add(element_id)
            candidates.append(element_id)

    for element_id in ids:
        add(element_id)

    while candidates:
        element_id = candidates.pop()
        if (service := state.service_by_id.get(element_id)) is not None:
            for method in service.methods:
                add(method.id)
        elif (method := state.method_by_id.get(element_id)) is not None:
            add(method.input_type_id)
            add(method.output_type_id)
            if method.operation_info is not None:
                add(method.operation_info.response_type_id)
                add(method.operation_info.metadata_type_id)
        elif (message := state.message_by_id.get(element_id)) is not None:
            _add_field_types(message, add)
        elif element_id not in state.enum_by_id:
            raise DependencyError(f"Dependency walk reached unknown ID '{element_id}'")

    # Containers are added without fanning out into their other children, but
    # a message added here still needs the types of all its fields.
    candidates = list(included)
    while candidates:
        element_id = candidates.pop()
        if (method := state.method_by_id.get(element_id)) is not None:
            add(method.service_id)
        elif (message := state.message_by_id.get(element_id)) is not None:
            add(message.parent_id)
            _add_field_types(message, add)
        elif (enum := state.enum_by_id.get(element_id)) is not None:
            add(enum.parent_id)
    return included


def skip_model_elements(api: API, skipped_ids: Iterable[str] = (), included_ids: Iterable[str] = ()) -> None:
    """Remove services, methods, messages and enums from the generated API.

    With *included_ids*, only those elements and their dependencies (see
    :func:`find_dependencies`) are kept. Elements in *skipped_ids* are then
    removed, nested ones included. The symbol table is left untouched, so
    references to pruned elements still resolve.

    Raises:
        DependencyError: If an included ID is not registered.
    """
    skipped = set(skipped_ids)
    included = list(included_ids)
    kept = find_dependencies(api, included) if included else None

    def keep(element_id: str) -> bool:
        return element_id not in skipped and (kept is None or element_id in kept)

    api.services = [s for s in api.services if keep(s.id)]
    for service in api.services:
        service.methods = [m for m in service.methods if keep(m.id)]
    api.messages = _prune_messages(api.messages, keep)
    api.enums = _prune_enums(api.enums, keep)


# ################
# Implementation
# ################


def _add_field_types(message: Message, add: Callable[[str], None]) -> None:
    for field in message.fields:
        if field.typez in (Typez.MESSAGE, Typez.ENUM):
            add(field.typez_id)


def _prune_messages(messages: list[Message], keep: Callable[[str], bool]) -> list[Message]:
    result: list[Message] = []
    for message in messages:
        if not keep(message.id):
            continue
        message.messages = _prune_messages(message.messages, keep)
        message.enums = _prune_enums(message.enums, keep)
        result.append(message)
    return result


def _prune_enums(enums: list[Enum], keep: Callable[[str], bool]) -> list[Enum]:
    return [e for e in enums if keep(e.id)]
