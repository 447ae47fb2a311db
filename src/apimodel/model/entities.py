# Copyright 2026 APIModel Contributors
# SPDX-License-Identifier: Apache-2.0

"""Core entities of the language-neutral API model.

Every entity carries a fully-qualified ID (a dotted path with a leading dot,
e.g. ``.google.cloud.secretmanager.v1.SecretManagerService.GetSecret``).
Back-references (parent message, owning service) are kept as IDs so that the
model graph stays acyclic and deep copies never drag the whole model along.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict
from pydantic import Field as _Field

from apimodel.model.state import APIState
from apimodel.model.types import FieldBehavior, Typez

# ###############
# Public Interface
# ###############

# ------------------------------------------------------------------
# HTTP path templates
# ------------------------------------------------------------------


class LiteralSegment(BaseModel):
    """A literal path segment, e.g. ``v1`` or ``projects``."""

    kind: Literal["literal"] = "literal"
    value: str


class VariableSegment(BaseModel):
    """A ``{field.path=pattern}`` variable bound to a request field.

    Attributes:
        field_path: The dotted field path split into its components.
        segments: The pattern the variable matches: literals, ``*`` or ``**``.
    """

    kind: Literal["variable"] = "variable"
    field_path: list[str]
    segments: list[str] = _Field(default_factory=lambda: ["*"])

    def render(self) -> str:
        """Return the variable in template syntax."""
        name = ".".join(self.field_path)
        if self.segments == ["*"]:
            return "{" + name + "}"
        return "{" + name + "=" + "/".join(self.segments) + "}"


class VerbSegment(BaseModel):
    """The trailing ``:customVerb`` suffix of a path template."""

    kind: Literal["verb"] = "verb"
    value: str


# A path segment; the `kind` discriminator keeps (de)serialization unambiguous.
PathSegment = Annotated[LiteralSegment | VariableSegment | VerbSegment, _Field(discriminator="kind")]


class PathTemplate(BaseModel):
    """An ordered sequence of path segments parsed from an AIP-127 template."""

    segments: list[PathSegment] = _Field(default_factory=list)

    @property
    def verb(self) -> str | None:
        """Return the custom verb, if the template ends with one."""
        if self.segments and isinstance(self.segments[-1], VerbSegment):
            return self.segments[-1].value
        return None

    @property
    def variables(self) -> list[VariableSegment]:
        """Return the variable segments in template order."""
        return [s for s in self.segments if isinstance(s, VariableSegment)]

    def field_paths(self) -> list[str]:
        """Return the dotted field paths bound by the template's variables."""
        return [".".join(v.field_path) for v in self.variables]

    def render(self) -> str:
        """Serialize the template back to its textual form."""
        parts: list[str] = []
        for segment in self.segments:
            if isinstance(segment, LiteralSegment):
                parts.append(segment.value)
            elif isinstance(segment, VariableSegment):
                parts.append(segment.render())
        text = "/" + "/".join(parts)
        if self.verb is not None:
            text += ":" + self.verb
        return text


class PathBinding(BaseModel):
    """One HTTP binding of a method.

    Attributes:
        verb: The HTTP verb (``GET``, ``POST``, ...).
        path_template: The parsed URL path template.
        query_parameters: Names of the top-level request fields sent as query parameters.
    """

    verb: str
    path_template: PathTemplate
    query_parameters: set[str] = _Field(default_factory=set)


class PathInfo(BaseModel):
    """All HTTP bindings of a method plus the shared request body field path."""

    bindings: list[PathBinding] = _Field(default_factory=list)
    body_field_path: str = ""


# ------------------------------------------------------------------
# Routing headers
# ------------------------------------------------------------------


class RoutingPathSpec(BaseModel):
    """A sequence of routing path segments: literals, ``*`` or ``**``."""

    segments: list[str] = _Field(default_factory=list)


class RoutingInfoVariant(BaseModel):
    """One way of extracting a routing header value from a request field."""

    field_path: list[str] = _Field(default_factory=list)
    prefix: RoutingPathSpec = _Field(default_factory=RoutingPathSpec)
    matching: RoutingPathSpec = _Field(default_factory=RoutingPathSpec)
    suffix: RoutingPathSpec = _Field(default_factory=RoutingPathSpec)


class RoutingInfo(BaseModel):
    """A routing header key and its variants, tried in order; the first match wins."""

    name: str
    variants: list[RoutingInfoVariant] = _Field(default_factory=list)


# ------------------------------------------------------------------
# Messages, fields and enums
# ------------------------------------------------------------------


class Field(BaseModel):
    """A field of a message.

    Attributes:
        typez: The type tag.
        typez_id: For MESSAGE and ENUM fields, the ID of the referenced entity;
            for scalars, the scalar's name.
        optional: Whether the field has explicit presence.
        map: Whether the field references a synthetic map-entry message.
        is_oneof: Whether the field belongs to a (non-synthetic) oneof group.
        synthetic: Whether the field was fabricated during ingestion, e.g. a
            path parameter of an OpenAPI operation.
        auto_populated: Whether the field is eligible for auto-population (AIP-4235).
        recursive: Whether the field leads back to its own message through
            message-typed fields.
        format: The string format annotation (``UUID4`` for request IDs).
    """

    name: str
    id: str
    json_name: str = ""
    documentation: str = ""
    typez: Typez
    typez_id: str = ""
    repeated: bool = False
    optional: bool = False
    map: bool = False
    is_oneof: bool = False
    synthetic: bool = False
    auto_populated: bool = False
    recursive: bool = False
    deprecated: bool = False
    behavior: list[FieldBehavior] = _Field(default_factory=list)
    format: str | None = None


class OneOf(BaseModel):
    """A group of mutually exclusive fields."""

    name: str
    id: str
    documentation: str = ""
    fields: list[Field] = _Field(default_factory=list)


class PaginationInfo(BaseModel):
    """Pagination details recorded on a pageable response message."""

    next_page_token: Field
    pageable_item: Field


class EnumValue(BaseModel):
    name: str
    id: str
    number: int
    documentation: str = ""
    parent_id: str = ""
    deprecated: bool = False


class Enum(BaseModel):
    """An enumeration."""

    name: str
    id: str
    package: str = ""
    documentation: str = ""
    parent_id: str = ""
    values: list[EnumValue] = _Field(default_factory=list)
    deprecated: bool = False

    @property
    def unique_number_values(self) -> list[EnumValue]:
        """Return the values with aliases collapsed; the first value per number wins."""
        seen: set[int] = set()
        unique: list[EnumValue] = []
        for value in self.values:
            if value.number not in seen:
                seen.add(value.number)
                unique.append(value)
        return unique


class Message(BaseModel):
    """A message (record) type.

    Attributes:
        parent_id: The ID of the enclosing message, empty for top-level messages.
        is_map: Whether this is a synthetic key/value map-entry message.
        pagination: Set by enrichment when the message is a paginated response.
    """

    name: str
    id: str
    package: str = ""
    documentation: str = ""
    parent_id: str = ""
    fields: list[Field] = _Field(default_factory=list)
    messages: list[Message] = _Field(default_factory=list)
    enums: list[Enum] = _Field(default_factory=list)
    one_ofs: list[OneOf] = _Field(default_factory=list)
    is_map: bool = False
    deprecated: bool = False
    pagination: PaginationInfo | None = None

    @property
    def is_pageable_response(self) -> bool:
        return self.pagination is not None

    def field_by_name(self, name: str) -> Field | None:
        """Return the field called *name*, or None."""
        for f in self.fields:
            if f.name == name:
                return f
        return None


# ------------------------------------------------------------------
# Services and methods
# ------------------------------------------------------------------


class OperationInfo(BaseModel):
    """Response and metadata types of a long-running operation."""

    response_type_id: str
    metadata_type_id: str


class Method(BaseModel):
    """An RPC method.

    Attributes:
        service_id: The ID of the owning service.
        path_info: The HTTP bindings, None for methods without HTTP annotations.
        routing: Explicit routing header rules, in declaration order.
        operation_info: Set for long-running operations.
        pagination: The request's page-token field, set by enrichment.
        auto_populated: The request fields the client fills in for this method,
            set by enrichment.
    """

    name: str
    id: str
    service_id: str = ""
    documentation: str = ""
    input_type_id: str
    output_type_id: str
    returns_empty: bool = False
    client_side_streaming: bool = False
    server_side_streaming: bool = False
    path_info: PathInfo | None = None
    routing: list[RoutingInfo] = _Field(default_factory=list)
    operation_info: OperationInfo | None = None
    pagination: Field | None = None
    auto_populated: list[Field] = _Field(default_factory=list)
    deprecated: bool = False


class Service(BaseModel):
    """An RPC service."""

    name: str
    id: str
    package: str = ""
    documentation: str = ""
    default_host: str = ""
    methods: list[Method] = _Field(default_factory=list)
    deprecated: bool = False

    def method_by_name(self, name: str) -> Method | None:
        for m in self.methods:
            if m.name == name:
                return m
        return None


class API(BaseModel):
    """The complete model produced by one ingestion run.

    Attributes:
        messages: Top-level messages of the files targeted for generation.
        state: The symbol table holding every registered entity, including
            those from imported files and mixins.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str = ""
    title: str = ""
    description: str = ""
    package_name: str = ""
    services: list[Service] = _Field(default_factory=list)
    messages: list[Message] = _Field(default_factory=list)
    enums: list[Enum] = _Field(default_factory=list)
    state: APIState = _Field(default_factory=APIState, exclude=True, repr=False)


# Resolve forward references in self-referential models.
Message.model_rebuild()
