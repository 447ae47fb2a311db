# Copyright 2026 APIModel Contributors
# SPDX-License-Identifier: Apache-2.0

"""Detection of message fields that lead back to their own message."""

from __future__ import annotations

from collections.abc import Mapping

from apimodel.model.entities import API, Message
from apimodel.model.types import Typez

# ###############
# Public Interface
# ###############


def label_recursive_fields(api: API) -> None:
    """Set ``Field.recursive`` on every message-typed field that closes a cycle.

    A field is recursive when its owning message can be reached again by
    following message-typed fields from the field's type. Map-entry messages
    take part in the walk like any other message. References to IDs missing
    from the symbol table end the walk.

    Args:
        api: The API whose registered messages are labelled.
    """
    messages = api.state.message_by_id
    for message in messages.values():
        for field in message.fields:
            if field.typez == Typez.MESSAGE:
                field.recursive = _reaches(messages, field.typez_id, message.id)


# ################
# Implementation
# ################


def _reaches(messages: Mapping[str, Message], start_id: str, target_id: str) -> bool:
    """Return True if *target_id* is reachable from *start_id* through message fields."""
    visited: set[str] = set()
    pending = [start_id]
    while pending:
        message_id = pending.pop()
        if message_id == target_id:
            return True
        if message_id in visited:
            continue
        visited.add(message_id)
        message = messages.get(message_id)
        if message is None:
            continue
        pending.extend(f.typez_id for f in message.fields if f.typez == Typez.MESSAGE)
    return False
