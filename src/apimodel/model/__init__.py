# Copyright 2026 APIModel Contributors
# SPDX-License-Identifier: Apache-2.0

"""Language-neutral API model (services, methods, messages, enums)."""

from apimodel.model.dependencies import DependencyError, find_dependencies, skip_model_elements
from apimodel.model.entities import (
    API,
    Enum,
    EnumValue,
    Field,
    LiteralSegment,
    Message,
    Method,
    OneOf,
    OperationInfo,
    PaginationInfo,
    PathBinding,
    PathInfo,
    PathSegment,
    PathTemplate,
    RoutingInfo,
    RoutingInfoVariant,
    RoutingPathSpec,
    Service,
    VariableSegment,
    VerbSegment,
)
from apimodel.model.recursive import label_recursive_fields
from apimodel.model.state import APIState, SymbolTableFrozenError
from apimodel.model.types import FieldBehavior, Typez

__all__ = [
    # Type tags
    "Typez",
    "FieldBehavior",
    # Symbol table
    "APIState",
    "SymbolTableFrozenError",
    # Path and routing metadata
    "LiteralSegment",
    "VariableSegment",
    "VerbSegment",
    "PathSegment",
    "PathTemplate",
    "PathBinding",
    "PathInfo",
    "RoutingPathSpec",
    "RoutingInfoVariant",
    "RoutingInfo",
    # Entities
    "Field",
    "OneOf",
    "PaginationInfo",
    "EnumValue",
    "Enum",
    "Message",
    "OperationInfo",
    "Method",
    "Service",
    "API",
    # Model passes
    "DependencyError",
    "find_dependencies",
    "skip_model_elements",
    "label_recursive_fields",
]
