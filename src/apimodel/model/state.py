# Copyright 2026 APIModel Contributors
# SPDX-License-Identifier: Apache-2.0

"""Symbol table of one model-construction run.

The table is append-only while the model is being built and read-only once
:meth:`APIState.freeze` has been called. Each run owns its own instance.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from apimodel.model.entities import Enum, Message, Method, Service

# ###############
# Public Interface
# ###############


class SymbolTableFrozenError(Exception):
    """Raised when registering an entity after the symbol table was frozen."""


class APIState:
    """Lookup of messages, enums, services and methods by fully-qualified ID."""

    def __init__(self) -> None:
        self._messages: dict[str, Message] = {}
        self._enums: dict[str, Enum] = {}
        self._services: dict[str, Service] = {}
        self._methods: dict[str, Method] = {}
        self._frozen = False

    @property
    def message_by_id(self) -> Mapping[str, Message]:
        return MappingProxyType(self._messages)

    @property
    def enum_by_id(self) -> Mapping[str, Enum]:
        return MappingProxyType(self._enums)

    @property
    def service_by_id(self) -> Mapping[str, Service]:
        return MappingProxyType(self._services)

    @property
    def method_by_id(self) -> Mapping[str, Method]:
        return MappingProxyType(self._methods)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def register_message(self, message: Message) -> None:
        """Register *message* under its ID, replacing any earlier entry."""
        self._check_mutable(message.id)
        self._messages[message.id] = message

    def register_enum(self, enum: Enum) -> None:
        self._check_mutable(enum.id)
        self._enums[enum.id] = enum

    def register_service(self, service: Service) -> None:
        self._check_mutable(service.id)
        self._services[service.id] = service

    def register_method(self, method: Method) -> None:
        self._check_mutable(method.id)
        self._methods[method.id] = method

    def freeze(self) -> None:
        """Make the table read-only. Freezing twice is harmless."""
        self._frozen = True

    def __repr__(self) -> str:
        return (
            f"APIState(messages={len(self._messages)}, enums={len(self._enums)}, "
            f"services={len(self._services)}, methods={len(self._methods)}, frozen={self._frozen})"
        )

    def _check_mutable(self, entity_id: str) -> None:
        if self._frozen:
            raise SymbolTableFrozenError(f"Cannot register '{entity_id}': the symbol table is frozen")
