# Copyright 2026 APIModel Contributors
# SPDX-License-Identifier: Apache-2.0

"""Ingestion of OpenAPI v3 documents into the API model.

Component schemas become messages. Every operation becomes a method of a
single service, with a request message synthesized from the operation's
parameters and body. OpenAPI has no forward-reference problem, so schemas are
converted in one pass; references are recorded as IDs and checked once the
model is complete.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from google.api import service_pb2

from apimodel.compiler.mixin import is_well_known_mixin
from apimodel.config.service_config import split_api_name
from apimodel.model.entities import API, Field, Message, Method, PathBinding, PathInfo, PathTemplate, Service
from apimodel.model.state import APIState
from apimodel.model.types import MAP_KEY_FIELD, MAP_VALUE_FIELD, UUID4_FORMAT, FieldBehavior, Typez
from apimodel.parser.path_template import PathTemplateError, parse_path_template

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############

SCHEMA_REF_PREFIX = "#/components/schemas/"
PARAMETER_REF_PREFIX = "#/components/parameters/"

WELL_KNOWN_TYPES = (
    ".google.protobuf.Any",
    ".google.protobuf.Duration",
    ".google.protobuf.Empty",
    ".google.protobuf.FieldMask",
    ".google.protobuf.Timestamp",
)


class OpenAPIError(Exception):
    """Raised when an OpenAPI document cannot be converted into the API model."""


def load_openapi_document(path: Path) -> dict[str, Any]:
    """Load an OpenAPI v3 document in JSON or YAML form.

    Raises:
        OpenAPIError: If the file cannot be read or is not an OpenAPI v3 document.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise OpenAPIError(f"Cannot read OpenAPI document: {exc}") from exc
    try:
        document = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise OpenAPIError(f"Invalid OpenAPI document {path}: {exc}") from exc
    if not isinstance(document, dict) or not str(document.get("openapi", "")).startswith("3"):
        raise OpenAPIError(f"{path}: not an OpenAPI v3 document")
    return document


def make_api_for_openapi(service_config: service_pb2.Service | None, document: dict[str, Any]) -> API:
    """Build the API model from a parsed OpenAPI v3 document.

    OpenAPI has no notion of services; all operations become methods of one
    service, named after the configuration's primary API or ``Service``.

    Args:
        service_config: The service configuration, if any.
        document: The parsed document.

    Returns:
        The API, before enrichment and validation.

    Raises:
        OpenAPIError: If a schema cannot be converted or an operation lacks a
            usable request or response message.
    """
    info = document.get("info", {})
    state = APIState()
    api = API(title=info.get("title", ""), description=info.get("description", ""), state=state)

    service_name = "Service"
    package = ""
    if service_config is not None:
        api.name = service_config.name.removesuffix(".googleapis.com")
        api.title = service_config.title or api.title
        api.description = service_config.documentation.summary or api.description
        for declared in service_config.apis:
            package, service_name = split_api_name(declared.name)
            if not is_well_known_mixin(declared.name):
                break
        api.package_name = package

    for type_id in WELL_KNOWN_TYPES:
        state.register_message(Message(name=type_id.rsplit(".", 1)[1], id=type_id, package="google.protobuf"))

    converter = _Converter(api, document, package)
    for name, schema in document.get("components", {}).get("schemas", {}).items():
        message = Message(
            name=name,
            id=_qualify(package, name),
            package=package,
            documentation=schema.get("description", ""),
            deprecated=schema.get("deprecated", False),
        )
        message.fields = converter.message_fields(message, schema)
        api.messages.append(message)
        state.register_message(message)

    converter.make_service(service_name)
    return api


# ################
# Implementation
# ################

_OPERATION_VERBS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")
_BODY_FIELD_NAMES = ("requestBody", "openapiRequestBody")
_JSON = "application/json"


def _qualify(package: str, name: str) -> str:
    return f".{package}.{name}" if package else f".{name}"


def _schema_type(schema: dict[str, Any]) -> str | None:
    """Return the schema's type; OpenAPI 3.1 lists like ``[string, "null"]`` are reduced."""
    raw = schema.get("type")
    if isinstance(raw, list):
        types = [t for t in raw if t != "null"]
        return types[0] if types else None
    return raw


class _Converter:
    """Conversion state shared by the schemas and operations of one document."""

    def __init__(self, api: API, document: dict[str, Any], package: str) -> None:
        self._api = api
        self._state: APIState = api.state
        self._document = document
        self._package = package

    # ------------------------------------------------------------------
    # Schemas
    # ------------------------------------------------------------------

    def message_fields(self, message: Message, schema: dict[str, Any]) -> list[Field]:
        required = set(schema.get("required", []))
        return [
            self._make_field(message, name, name not in required, prop)
            for name, prop in schema.get("properties", {}).items()
        ]

    def _reference_id(self, ref: str) -> str:
        return _qualify(self._package, ref.removeprefix(SCHEMA_REF_PREFIX))

    def _make_field(self, message: Message, name: str, optional: bool, schema: dict[str, Any]) -> Field:
        base = {
            "name": name,
            "id": f"{message.id}.{name}",
            # OpenAPI property names are already camelCase.
            "json_name": name,
            "documentation": schema.get("description", ""),
            "deprecated": schema.get("deprecated", False),
        }
        if schema.get("allOf"):
            ref = schema["allOf"][0].get("$ref")
            if not ref:
                raise OpenAPIError(f"Cannot build any allOf schema for field {message.name}.{name}")
            return Field(**base, typez=Typez.MESSAGE, typez_id=self._reference_id(ref), optional=True)
        if "$ref" in schema:
            return Field(**base, typez=Typez.MESSAGE, typez_id=self._reference_id(schema["$ref"]), optional=True)

        kind = _schema_type(schema)
        if kind is None:
            raise OpenAPIError(f"Missing field type for field {message.name}.{name}")
        if kind in ("boolean", "integer", "number", "string"):
            typez, typez_id = _scalar_type(message.name, name, schema)
            return Field(
                **base,
                typez=typez,
                typez_id=typez_id,
                optional=optional or typez == Typez.MESSAGE,
                format=_uuid_format(typez, schema),
            )
        if kind == "object":
            return self._object_field(message, name, schema, base)
        if kind == "array":
            return self._array_field(message, name, schema, base)
        raise OpenAPIError(f"Unknown type '{kind}' for field {message.name}.{name}")

    def _object_field(self, message: Message, name: str, schema: dict[str, Any], base: dict[str, Any]) -> Field:
        values = schema.get("additionalProperties")
        if values is True or (isinstance(values, dict) and "$ref" not in values and _schema_type(values) is None):
            # Maps with untyped values are arbitrary JSON objects.
            return Field(**base, typez=Typez.MESSAGE, typez_id=".google.protobuf.Any", optional=True)
        if isinstance(values, dict):
            if "$ref" in values:
                value_typez, value_id = Typez.MESSAGE, self._reference_id(values["$ref"])
            else:
                value_typez, value_id = _scalar_type(message.name, name, values)
            entry = self._map_message(value_typez, value_id)
            return Field(**base, typez=Typez.MESSAGE, typez_id=entry.id, map=True)
        items = schema.get("items")
        if isinstance(items, dict) and "$ref" in items:
            return Field(**base, typez=Typez.MESSAGE, typez_id=self._reference_id(items["$ref"]), optional=True)
        raise OpenAPIError(f"Unknown object field type for field {message.name}.{name}")

    def _array_field(self, message: Message, name: str, schema: dict[str, Any], base: dict[str, Any]) -> Field:
        items = schema.get("items")
        if not isinstance(items, dict):
            raise OpenAPIError(f"Cannot handle arrays without an 'items' schema for {message.name}.{name}")
        if "$ref" in items:
            field = Field(**base, typez=Typez.MESSAGE, typez_id=self._reference_id(items["$ref"]))
        else:
            kind = _schema_type(items)
            if kind in ("boolean", "integer", "number", "string"):
                typez, typez_id = _scalar_type(message.name, name, items)
                field = Field(**base, typez=typez, typez_id=typez_id)
            elif kind == "object":
                field = self._object_field(message, name, items, base)
            else:
                raise OpenAPIError(f"Unknown array item type '{kind}' for {message.name}.{name}")
        field.repeated = True
        field.map = False
        field.optional = False
        return field

    def _map_message(self, value_typez: Typez, value_id: str) -> Message:
        """Return the map-entry message for the value type, creating it on first use."""
        entry_id = f"$map<string, {value_id}>"
        existing = self._state.message_by_id.get(entry_id)
        if existing is not None:
            return existing
        key = Field(name=MAP_KEY_FIELD, id=f"{entry_id}.{MAP_KEY_FIELD}", typez=Typez.STRING, typez_id="string")
        value = Field(name=MAP_VALUE_FIELD, id=f"{entry_id}.{MAP_VALUE_FIELD}", typez=value_typez, typez_id=value_id)
        entry = Message(
            name=entry_id,
            id=entry_id,
            package="$",
            documentation=entry_id,
            is_map=True,
            fields=[key, value],
        )
        self._state.register_message(entry)
        return entry

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def make_service(self, service_name: str) -> None:
        service_id = _qualify(self._package, service_name)
        methods: list[Method] = []
        for pattern, item in self._document.get("paths", {}).items():
            try:
                template = parse_path_template(pattern)
            except PathTemplateError as exc:
                logger.warning("Dropping operations of path %s: %s", pattern, exc)
                continue
            for verb in _OPERATION_VERBS:
                operation = item.get(verb)
                if operation is None:
                    continue
                methods.append(self._make_method(service_id, verb.upper(), pattern, template, operation))
        if not methods:
            return
        service = Service(
            name=service_name,
            id=service_id,
            package=self._package,
            documentation=self._api.description,
            default_host=self._default_host(),
            methods=methods,
        )
        self._api.services.append(service)
        self._state.register_service(service)

    def _default_host(self) -> str:
        """Return the shortest server URL, without the ``https://`` scheme."""
        urls = [server["url"] for server in self._document.get("servers", []) if server.get("url")]
        if not urls:
            return ""
        return min(urls, key=len).removeprefix("https://")

    def _make_method(
        self,
        service_id: str,
        verb: str,
        pattern: str,
        template: PathTemplate,
        operation: dict[str, Any],
    ) -> Method:
        operation_id = operation.get("operationId")
        if not operation_id:
            raise OpenAPIError(f"Missing operationId for {verb} {pattern}")
        parameters = [self._resolve_parameter(p) for p in operation.get("parameters", [])]
        request, body = self._request_message(operation_id, operation, parameters, pattern)
        response_id = self._response_type_id(operation_id, operation)
        binding = PathBinding(
            verb=verb,
            path_template=template,
            query_parameters={p["name"] for p in parameters if p.get("in") == "query"},
        )
        method = Method(
            name=operation_id,
            id=f"{service_id}.{operation_id}",
            service_id=service_id,
            documentation=operation.get("description", ""),
            deprecated=operation.get("deprecated", False),
            input_type_id=request.id,
            output_type_id=response_id,
            returns_empty=response_id == ".google.protobuf.Empty",
            path_info=PathInfo(bindings=[binding], body_field_path=body),
        )
        self._state.register_method(method)
        return method

    def _resolve_parameter(self, parameter: dict[str, Any]) -> dict[str, Any]:
        ref = parameter.get("$ref")
        if ref is None:
            return parameter
        name = ref.removeprefix(PARAMETER_REF_PREFIX)
        resolved = self._document.get("components", {}).get("parameters", {}).get(name)
        if resolved is None:
            raise OpenAPIError(f"Cannot find referenced parameter {ref}")
        return resolved

    def _content_reference(self, content: dict[str, Any], operation_id: str) -> str:
        media = content.get(_JSON)
        if media is None:
            raise OpenAPIError(f"Cannot find an {_JSON} content type in operation {operation_id}")
        ref = media.get("schema", {}).get("$ref")
        if not ref:
            raise OpenAPIError(f"The {_JSON} content of operation {operation_id} is not a schema reference")
        return ref

    def _request_message(
        self,
        operation_id: str,
        operation: dict[str, Any],
        parameters: list[dict[str, Any]],
        pattern: str,
    ) -> tuple[Message, str]:
        """Return the request message of an operation and its body field path."""
        name = f"{operation_id}Request"
        message = Message(
            name=name,
            id=_qualify(self._package, name),
            package=self._package,
            documentation=f"The request message for {operation_id}.",
        )
        body = ""
        request_body = operation.get("requestBody")
        if request_body is not None:
            ref = self._content_reference(request_body.get("content", {}), operation_id)
            body_id = self._reference_id(ref)
            if body_id not in self._state.message_by_id:
                raise OpenAPIError(f"Cannot find referenced type ({ref}) in API messages")
            if ref.endswith("Request"):
                # The document already has a request message; parameters are added to it.
                message = self._state.message_by_id[body_id]
                body = "*"
            else:
                for field_name in _BODY_FIELD_NAMES:
                    field = Field(
                        name=field_name,
                        id=f"{message.id}.{field_name}",
                        json_name=field_name,
                        documentation="The request body.",
                        typez=Typez.MESSAGE,
                        typez_id=body_id,
                        optional=True,
                    )
                    if _add_field_if_new(message, field):
                        body = field_name
                        break
                if not body:
                    raise OpenAPIError(f"Cannot insert the request body into message {message.name}")
        if body != "*":
            self._api.messages.append(message)
            self._state.register_message(message)

        for parameter in parameters:
            _add_field_if_new(message, self._parameter_field(message, parameter, pattern))
        return message, body

    def _parameter_field(self, message: Message, parameter: dict[str, Any], pattern: str) -> Field:
        name = parameter["name"]
        schema = self._parameter_schema(parameter.get("schema", {}))
        repeated = _schema_type(schema) == "array"
        if repeated:
            items = schema.get("items")
            if not isinstance(items, dict):
                raise OpenAPIError(f"Cannot handle arrays without an 'items' schema for {message.name}.{name}")
            schema = self._parameter_schema(items)
        typez, typez_id = _scalar_type(message.name, name, schema)
        documentation = parameter.get("description", "")
        if not documentation:
            documentation = (
                f"The `{{{name}}}` component of the target path.\n"
                "\n"
                f"The full target path will be in the form `{pattern}`."
            )
        required = parameter.get("required", False)
        return Field(
            name=name,
            id=f"{message.id}.{name}",
            json_name=name,
            documentation=documentation,
            deprecated=parameter.get("deprecated", False),
            optional=not required and not repeated,
            repeated=repeated,
            typez=typez,
            typez_id=typez_id,
            synthetic=True,
            behavior=[FieldBehavior.REQUIRED] if required else [],
            format=_uuid_format(typez, schema),
        )

    def _parameter_schema(self, schema: dict[str, Any]) -> dict[str, Any]:
        """Resolve a ``$ref`` to a component schema; parameters only accept scalar targets."""
        ref = schema.get("$ref")
        if ref is None:
            return schema
        resolved = self._document.get("components", {}).get("schemas", {}).get(ref.removeprefix(SCHEMA_REF_PREFIX))
        if resolved is None:
            raise OpenAPIError(f"Cannot find referenced parameter schema {ref}")
        return resolved

    def _response_type_id(self, operation_id: str, operation: dict[str, Any]) -> str:
        default = operation.get("responses", {}).get("default")
        if default is None:
            raise OpenAPIError(f"Expected a default response for operation {operation_id}")
        content = default.get("content")
        if not content:
            return ".google.protobuf.Empty"
        ref = self._content_reference(content, operation_id)
        response_id = self._reference_id(ref)
        if response_id not in self._state.message_by_id:
            raise OpenAPIError(f"Cannot find response message ref={ref}")
        return response_id


def _add_field_if_new(message: Message, field: Field) -> bool:
    """Append *field* unless a field of that name exists; an identical field counts as added."""
    existing = message.field_by_name(field.name)
    if existing is not None:
        return existing == field
    message.fields.append(field)
    return True


def _uuid_format(typez: Typez, schema: dict[str, Any]) -> str | None:
    if typez == Typez.STRING and schema.get("format") == "uuid":
        return UUID4_FORMAT
    return None


def _scalar_type(message_name: str, name: str, schema: dict[str, Any]) -> tuple[Typez, str]:
    """Map a scalar schema to its type tag and type ID."""
    kind = _schema_type(schema)
    fmt = schema.get("format", "")
    unsigned = schema.get("minimum") == 0
    if kind == "boolean":
        return Typez.BOOL, "bool"
    if kind in ("integer", "string") and fmt == "int32":
        return (Typez.UINT32, "uint32") if unsigned else (Typez.INT32, "int32")
    if kind in ("integer", "string") and fmt == "int64":
        return (Typez.UINT64, "uint64") if unsigned else (Typez.INT64, "int64")
    if kind == "integer":
        raise OpenAPIError(f"Unknown integer format ({fmt}) for field {message_name}.{name}")
    if kind == "number":
        if fmt == "float":
            return Typez.FLOAT, "float"
        if fmt == "double":
            return Typez.DOUBLE, "double"
        raise OpenAPIError(f"Unknown number format ({fmt}) for field {message_name}.{name}")
    if kind == "string":
        if fmt in ("", "uuid"):
            return Typez.STRING, "string"
        if fmt == "byte":
            return Typez.BYTES, "bytes"
        if fmt in _STRING_MESSAGE_FORMATS:
            return Typez.MESSAGE, _STRING_MESSAGE_FORMATS[fmt]
        raise OpenAPIError(f"Unknown string format ({fmt}) for field {message_name}.{name}")
    raise OpenAPIError(f"Expected a scalar type for field {message_name}.{name}")


_STRING_MESSAGE_FORMATS: dict[str, str] = {
    "google-duration": ".google.protobuf.Duration",
    "date-time": ".google.protobuf.Timestamp",
    "google-fieldmask": ".google.protobuf.FieldMask",
}
