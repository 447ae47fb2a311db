# Copyright 2026 APIModel Contributors
# SPDX-License-Identifier: Apache-2.0

"""Type tags and annotation enums shared by the API model."""

from __future__ import annotations

from enum import Enum

# ###############
# Public Interface
# ###############


class Typez(Enum):
    """Type tag of a field.

    The numeric values match ``google.protobuf.FieldDescriptorProto.Type`` so
    descriptor types convert with ``Typez(field.type)``.
    """

    UNDEFINED = 0
    DOUBLE = 1
    FLOAT = 2
    INT64 = 3
    UINT64 = 4
    INT32 = 5
    FIXED64 = 6
    FIXED32 = 7
    BOOL = 8
    STRING = 9
    GROUP = 10
    MESSAGE = 11
    BYTES = 12
    UINT32 = 13
    ENUM = 14
    SFIXED32 = 15
    SFIXED64 = 16
    SINT32 = 17
    SINT64 = 18


class FieldBehavior(Enum):
    """Field behavior annotations (``google.api.field_behavior``)."""

    UNSPECIFIED = 0
    OPTIONAL = 1
    REQUIRED = 2
    OUTPUT_ONLY = 3
    INPUT_ONLY = 4
    IMMUTABLE = 5
    UNORDERED_LIST = 6
    NON_EMPTY_DEFAULT = 7
    IDENTIFIER = 8


# Type tags whose fields reference another entity by ID.
REFERENCE_TYPES: frozenset[Typez] = frozenset({Typez.MESSAGE, Typez.ENUM, Typez.GROUP})

INTEGER_TYPES: frozenset[Typez] = frozenset(
    {
        Typez.INT32,
        Typez.INT64,
        Typez.UINT32,
        Typez.UINT64,
        Typez.FIXED32,
        Typez.FIXED64,
        Typez.SFIXED32,
        Typez.SFIXED64,
        Typez.SINT32,
        Typez.SINT64,
    }
)

# Names of the fields of a synthetic map-entry message.
MAP_KEY_FIELD = "key"
MAP_VALUE_FIELD = "value"

# Value of ``Field.format`` for string fields annotated as UUID4 request IDs.
UUID4_FORMAT = "UUID4"
