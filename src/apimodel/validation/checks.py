# Copyright 2026 APIModel Contributors
# SPDX-License-Identifier: Apache-2.0

"""Cross-reference validation of a built API model.

The checks run after enrichment and only use the symbol table lookups, the
same extension point that code generators rely on.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from apimodel.model.entities import API, Message
from apimodel.model.types import MAP_KEY_FIELD, MAP_VALUE_FIELD, Typez

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class ValidationWarning:
    """A non-fatal issue detected during validation.

    Attributes:
        message: Human-readable description of the warning.
    """

    message: str


@dataclass(frozen=True)
class ValidationError:
    """A fatal issue; code generators cannot consume the model.

    Attributes:
        message: Human-readable description of the error.
    """

    message: str


@dataclass
class ValidationResult:
    """Result of running the validation checks.

    Attributes:
        warnings: Non-fatal issues found during validation.
        errors: Fatal errors that indicate an inconsistent model.
    """

    warnings: list[ValidationWarning] = field(default_factory=list)
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Return True if any fatal validation errors were found."""
        return len(self.errors) > 0


def validate(api: API) -> ValidationResult:
    """Run all validation checks on an enriched API.

    Checks performed:

    1. **Field references** (error): every MESSAGE or ENUM field of a
       registered message refers to a registered message or enum.

    2. **Method references** (error): the input and output types of every
       method are registered messages.

    3. **Map entries** (error): fields flagged as maps refer to a map-entry
       message with exactly a ``key`` and a ``value`` field.

    4. **HTTP bindings** (warning): methods without HTTP bindings cannot be
       called over REST.

    5. **Operation types** (warning): the response and metadata types of
       long-running operations are registered messages.

    Args:
        api: The API to validate.

    Returns:
        A :class:`ValidationResult`; an empty result indicates a consistent model.
    """
    warnings: list[ValidationWarning] = []
    errors: list[ValidationError] = []

    errors.extend(_check_field_references(api))
    errors.extend(_check_method_references(api))
    errors.extend(_check_map_entries(api))
    warnings.extend(_check_http_bindings(api))
    warnings.extend(_check_operation_types(api))

    return ValidationResult(warnings=warnings, errors=errors)


# ################
# Implementation
# ################

_WELL_KNOWN_EMPTY = ".google.protobuf.Empty"


def _check_field_references(api: API) -> Iterator[ValidationError]:
    state = api.state
    for message in state.message_by_id.values():
        for f in message.fields:
            if f.typez in (Typez.MESSAGE, Typez.GROUP) and f.typez_id not in state.message_by_id:
                yield ValidationError(message=f"Field '{f.id}' refers to undefined message '{f.typez_id}'")
            elif f.typez == Typez.ENUM and f.typez_id not in state.enum_by_id:
                yield ValidationError(message=f"Field '{f.id}' refers to undefined enum '{f.typez_id}'")


def _check_method_references(api: API) -> Iterator[ValidationError]:
    state = api.state
    for service in api.services:
        for method in service.methods:
            for role, type_id in (("input", method.input_type_id), ("output", method.output_type_id)):
                if type_id == _WELL_KNOWN_EMPTY or type_id in state.message_by_id:
                    continue
                yield ValidationError(message=f"Method '{method.id}' has undefined {role} type '{type_id}'")


def _is_map_entry(message: Message) -> bool:
    names = [f.name for f in message.fields]
    return message.is_map and names == [MAP_KEY_FIELD, MAP_VALUE_FIELD]


def _check_map_entries(api: API) -> Iterator[ValidationError]:
    state = api.state
    for message in state.message_by_id.values():
        for f in message.fields:
            if not f.map:
                continue
            entry = state.message_by_id.get(f.typez_id)
            if entry is not None and not _is_map_entry(entry):
                yield ValidationError(message=f"Map field '{f.id}' refers to '{f.typez_id}', which is not a map entry")


def _check_http_bindings(api: API) -> Iterator[ValidationWarning]:
    for service in api.services:
        for method in service.methods:
            if method.path_info is None or not method.path_info.bindings:
                yield ValidationWarning(message=f"Method '{method.id}' has no HTTP binding")


def _check_operation_types(api: API) -> Iterator[ValidationWarning]:
    state = api.state
    for service in api.services:
        for method in service.methods:
            info = method.operation_info
            if info is None:
                continue
            for type_id in (info.response_type_id, info.metadata_type_id):
                if type_id and type_id != _WELL_KNOWN_EMPTY and type_id not in state.message_by_id:
                    yield ValidationWarning(
                        message=f"Long-running method '{method.id}' refers to undefined type '{type_id}'"
                    )
