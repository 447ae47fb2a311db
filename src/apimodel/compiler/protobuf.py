# Copyright 2026 APIModel Contributors
# SPDX-License-Identifier: Apache-2.0

"""Ingestion of compiled protobuf descriptor sets into the API model.

Ingestion runs in two passes over every file, including imported files that
are not generated and the canonical files of enabled mixins:

1. :func:`_register_file` registers every message and enum, nested ones
   included, so that any field may refer to them.
2. :func:`_resolve_file` resolves the fields and oneofs of those messages.

The files targeted for generation then contribute their messages, enums,
services and documentation to the API.
"""

from __future__ import annotations

import logging
from pathlib import Path

from google.api import service_pb2
from google.protobuf import descriptor_pb2
from google.protobuf.message import DecodeError

from apimodel.compiler.annotations import (
    SymbolLookupError,
    field_behaviors,
    field_format,
    parse_default_host,
    parse_operation_info,
    parse_path_info,
    parse_routing,
)
from apimodel.compiler.mixin import compose_mixins, load_mixins, primary_package
from apimodel.model.entities import API, Enum, EnumValue, Field, Message, Method, OneOf, Service
from apimodel.model.state import APIState
from apimodel.model.types import REFERENCE_TYPES, Typez
from apimodel.parser.path_template import PathTemplateError
from apimodel.parser.routing import RoutingTemplateError

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


class DescriptorSetError(Exception):
    """Raised when a descriptor set cannot be read or does not contain the requested files."""


def load_descriptor_set(path: Path) -> descriptor_pb2.FileDescriptorSet:
    """Read a binary ``FileDescriptorSet``.

    The set is expected to come from ``protoc --include_imports
    --include_source_info --descriptor_set_out``.

    Raises:
        DescriptorSetError: If the file cannot be read or parsed.
    """
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise DescriptorSetError(f"Cannot read descriptor set: {exc}") from exc
    descriptor_set = descriptor_pb2.FileDescriptorSet()
    try:
        descriptor_set.ParseFromString(data)
    except DecodeError as exc:
        raise DescriptorSetError(f"{path}: not a valid FileDescriptorSet: {exc}") from exc
    return descriptor_set


def make_api_for_protobuf(
    service_config: service_pb2.Service | None,
    files: list[descriptor_pb2.FileDescriptorProto],
    files_to_generate: list[str] | None = None,
    include_longrunning: bool = False,
) -> API:
    """Build the API model from descriptor files.

    Args:
        service_config: The service configuration, if any.
        files: All files of the descriptor set, dependencies included.
        files_to_generate: Names of the files whose elements form the API. If
            empty, the files of the configuration's primary package are used,
            or the last file of the set when that selects nothing.
        include_longrunning: Force-enable the long-running operations mixin.

    Returns:
        The API, before enrichment and validation.

    Raises:
        DescriptorSetError: If a requested file is not part of the set.
    """
    state = APIState()
    api = API(state=state)
    if service_config is not None:
        api.title = service_config.title
        api.description = service_config.documentation.summary
        api.package_name = primary_package(service_config)

    plan = load_mixins(service_config, include_longrunning)
    all_files = {f.name: f for f in files}
    for mixin_file in plan.files:
        all_files.setdefault(mixin_file.name, mixin_file)

    for f in all_files.values():
        _register_file(state, f)
    for f in all_files.values():
        _resolve_file(state, f)

    for f in _select_targets(files, files_to_generate or [], api.package_name):
        prefix = _package_prefix(f.package)
        api.messages.extend(state.message_by_id[f"{prefix}.{m.name}"] for m in f.message_type)
        api.enums.extend(state.enum_by_id[f"{prefix}.{e.name}"] for e in f.enum_type)
        for s in f.service:
            api.services.append(_process_service(state, s, f"{prefix}.{s.name}", f.package))
        _add_file_documentation(state, f)

    mixins: list[Service] = []
    for f in all_files.values():
        for s in f.service:
            service_id = f"{_package_prefix(f.package)}.{s.name}"
            if service_id not in plan.services:
                continue
            existing = state.service_by_id.get(service_id)
            mixins.append(existing if existing is not None else _process_service(state, s, service_id, f.package))
    compose_mixins(api, mixins, plan, service_config)

    if service_config is not None and not api.name:
        api.name = service_config.name.removesuffix(".googleapis.com")
    return api


# ################
# Implementation
# ################

# Field numbers used in SourceCodeInfo location paths.
_FILE_MESSAGE_TYPE = 4
_FILE_ENUM_TYPE = 5
_FILE_SERVICE = 6
_FILE_EXTENSION = 7
_FILE_OPTIONS = 8
_SERVICE_METHOD = 2
_SERVICE_OPTIONS = 3
_MESSAGE_FIELD = 2
_MESSAGE_NESTED_TYPE = 3
_MESSAGE_ENUM_TYPE = 4
_MESSAGE_ONEOF = 8
_ENUM_VALUE = 2

_EMPTY_ID = ".google.protobuf.Empty"


def _package_prefix(package: str) -> str:
    return f".{package}" if package else ""


def _select_targets(
    files: list[descriptor_pb2.FileDescriptorProto],
    files_to_generate: list[str],
    package: str,
) -> list[descriptor_pb2.FileDescriptorProto]:
    if files_to_generate:
        targets = []
        for name in files_to_generate:
            matches = [f for f in files if f.name == name or name.endswith("/" + f.name)]
            if not matches:
                raise DescriptorSetError(f"File '{name}' is not part of the descriptor set")
            targets.extend(m for m in matches if m not in targets)
        return targets
    if package:
        targets = [f for f in files if f.package == package]
        if targets:
            return targets
    return files[-1:]


# ------------------------------------------------------------------
# Pass 1: registration
# ------------------------------------------------------------------


def _register_file(state: APIState, f: descriptor_pb2.FileDescriptorProto) -> None:
    prefix = _package_prefix(f.package)
    for m in f.message_type:
        _register_message(state, m, f"{prefix}.{m.name}", f.package, "")
    for e in f.enum_type:
        _register_enum(state, e, f"{prefix}.{e.name}", f.package, "")


def _register_message(
    state: APIState,
    proto: descriptor_pb2.DescriptorProto,
    message_id: str,
    package: str,
    parent_id: str,
) -> Message:
    message = Message(
        name=proto.name,
        id=message_id,
        package=package,
        parent_id=parent_id,
        is_map=proto.options.map_entry,
        deprecated=proto.options.deprecated,
    )
    state.register_message(message)
    for nested in proto.nested_type:
        message.messages.append(_register_message(state, nested, f"{message_id}.{nested.name}", package, message_id))
    for e in proto.enum_type:
        message.enums.append(_register_enum(state, e, f"{message_id}.{e.name}", package, message_id))
    return message


def _register_enum(
    state: APIState,
    proto: descriptor_pb2.EnumDescriptorProto,
    enum_id: str,
    package: str,
    parent_id: str,
) -> Enum:
    enum = Enum(
        name=proto.name,
        id=enum_id,
        package=package,
        parent_id=parent_id,
        deprecated=proto.options.deprecated,
    )
    for value in proto.value:
        enum.values.append(
            EnumValue(
                name=value.name,
                id=f"{enum_id}.{value.name}",
                number=value.number,
                parent_id=enum_id,
                deprecated=value.options.deprecated,
            )
        )
    state.register_enum(enum)
    return enum


# ------------------------------------------------------------------
# Pass 2: field resolution
# ------------------------------------------------------------------


def _resolve_file(state: APIState, f: descriptor_pb2.FileDescriptorProto) -> None:
    prefix = _package_prefix(f.package)
    for m in f.message_type:
        _resolve_message(state, m, f"{prefix}.{m.name}")


def _resolve_message(state: APIState, proto: descriptor_pb2.DescriptorProto, message_id: str) -> None:
    message = state.message_by_id[message_id]
    for nested in proto.nested_type:
        _resolve_message(state, nested, f"{message_id}.{nested.name}")

    one_ofs = [OneOf(name=o.name, id=f"{message_id}.{o.name}") for o in proto.oneof_decl]
    for field_proto in proto.field:
        field = _make_field(state, field_proto, message_id)
        message.fields.append(field)
        if field.is_oneof:
            one_ofs[field_proto.oneof_index].fields.append(field)
    # Synthetic oneofs of proto3 `optional` fields end up empty.
    message.one_ofs = [o for o in one_ofs if o.fields]


def _make_field(state: APIState, proto: descriptor_pb2.FieldDescriptorProto, message_id: str) -> Field:
    repeated = proto.label == descriptor_pb2.FieldDescriptorProto.LABEL_REPEATED
    field = Field(
        name=proto.name,
        id=f"{message_id}.{proto.name}",
        json_name=proto.json_name or _json_name(proto.name),
        typez=Typez(proto.type),
        optional=proto.proto3_optional,
        repeated=repeated,
        is_oneof=proto.HasField("oneof_index") and not proto.proto3_optional,
        deprecated=proto.options.deprecated,
        behavior=field_behaviors(proto),
        format=field_format(proto),
    )
    if field.typez in REFERENCE_TYPES:
        field.typez_id = proto.type_name
    else:
        field.typez_id = field.typez.name.lower()
    if field.typez == Typez.MESSAGE:
        # Repeated fields always have presence; singular messages are optional.
        field.optional = not repeated
        target = state.message_by_id.get(proto.type_name)
        if target is not None and target.is_map:
            field.map = True
            field.repeated = False
    elif field.typez == Typez.UNDEFINED:
        logger.warning("Field %s has an undefined type", field.id)
    return field


def _json_name(name: str) -> str:
    """Compute the JSON name protoc would assign to a field called *name*."""
    parts = name.split("_")
    return parts[0] + "".join(p[:1].upper() + p[1:] for p in parts[1:])


# ------------------------------------------------------------------
# Services and methods
# ------------------------------------------------------------------


def _process_service(
    state: APIState,
    proto: descriptor_pb2.ServiceDescriptorProto,
    service_id: str,
    package: str,
) -> Service:
    service = Service(
        name=proto.name,
        id=service_id,
        package=package,
        default_host=parse_default_host(service_id, proto.options),
        deprecated=proto.options.deprecated,
    )
    state.register_service(service)
    for m in proto.method:
        method = _process_method(state, m, f"{service_id}.{m.name}", package, service_id)
        if method is not None:
            service.methods.append(method)
    return service


def _process_method(
    state: APIState,
    proto: descriptor_pb2.MethodDescriptorProto,
    method_id: str,
    package: str,
    service_id: str,
) -> Method | None:
    """Build a method, or return None if its annotations cannot be processed."""
    try:
        path_info = parse_path_info(proto, state)
        routing = parse_routing(method_id, proto)
    except (PathTemplateError, RoutingTemplateError, SymbolLookupError) as exc:
        logger.warning("Dropping method %s: %s", method_id, exc)
        return None
    method = Method(
        name=proto.name,
        id=method_id,
        service_id=service_id,
        input_type_id=proto.input_type,
        output_type_id=proto.output_type,
        returns_empty=proto.output_type == _EMPTY_ID,
        client_side_streaming=proto.client_streaming,
        server_side_streaming=proto.server_streaming,
        path_info=path_info,
        routing=routing,
        operation_info=parse_operation_info(package, proto),
        deprecated=proto.options.deprecated,
    )
    state.register_method(method)
    return method


# ------------------------------------------------------------------
# Documentation
# ------------------------------------------------------------------


def _add_file_documentation(state: APIState, f: descriptor_pb2.FileDescriptorProto) -> None:
    """Attach source comments to the element each location path points at."""
    prefix = _package_prefix(f.package)
    for location in f.source_code_info.location:
        doc = location.leading_comments or location.trailing_comments
        path = list(location.path)
        if not doc or len(path) < 2:
            continue
        doc = _trim_documentation(doc)
        kind, index, rest = path[0], path[1], path[2:]
        if kind == _FILE_MESSAGE_TYPE:
            m = f.message_type[index]
            _add_message_documentation(state, m, rest, doc, f"{prefix}.{m.name}")
        elif kind == _FILE_ENUM_TYPE:
            _add_enum_documentation(state, rest, doc, f"{prefix}.{f.enum_type[index].name}")
        elif kind == _FILE_SERVICE:
            s = f.service[index]
            _add_service_documentation(state, s, rest, doc, f"{prefix}.{s.name}")
        elif kind in (_FILE_EXTENSION, _FILE_OPTIONS):
            pass
        else:
            logger.debug("Dropped documentation at %s in %s", path, f.name)


def _add_message_documentation(
    state: APIState,
    proto: descriptor_pb2.DescriptorProto,
    path: list[int],
    doc: str,
    message_id: str,
) -> None:
    message = state.message_by_id[message_id]
    if not path:
        message.documentation = doc
    elif path[0] == _MESSAGE_NESTED_TYPE and len(path) >= 2:
        nested = proto.nested_type[path[1]]
        _add_message_documentation(state, nested, path[2:], doc, f"{message_id}.{nested.name}")
    elif path[0] == _MESSAGE_FIELD and len(path) == 2:
        message.fields[path[1]].documentation = doc
    elif path[0] == _MESSAGE_ENUM_TYPE and len(path) >= 2:
        _add_enum_documentation(state, path[2:], doc, f"{message_id}.{proto.enum_type[path[1]].name}")
    elif path[0] == _MESSAGE_ONEOF and len(path) == 2:
        one_of_id = f"{message_id}.{proto.oneof_decl[path[1]].name}"
        for one_of in message.one_ofs:
            if one_of.id == one_of_id:
                one_of.documentation = doc
    else:
        logger.debug("Dropped documentation at %s in message %s", path, message_id)


def _add_enum_documentation(state: APIState, path: list[int], doc: str, enum_id: str) -> None:
    enum = state.enum_by_id[enum_id]
    if not path:
        enum.documentation = doc
    elif path[0] == _ENUM_VALUE and len(path) == 2:
        enum.values[path[1]].documentation = doc
    else:
        logger.debug("Dropped documentation at %s in enum %s", path, enum_id)


def _add_service_documentation(
    state: APIState,
    proto: descriptor_pb2.ServiceDescriptorProto,
    path: list[int],
    doc: str,
    service_id: str,
) -> None:
    if not path:
        state.service_by_id[service_id].documentation = doc
    elif path[0] == _SERVICE_METHOD and len(path) == 2:
        # Dropped methods have no entry.
        method = state.method_by_id.get(f"{service_id}.{proto.method[path[1]].name}")
        if method is not None:
            method.documentation = doc
    elif path[0] in (_SERVICE_METHOD, _SERVICE_OPTIONS):
        pass
    else:
        logger.debug("Dropped documentation at %s in service %s", path, service_id)


def _trim_documentation(doc: str) -> str:
    """Remove the single space protoc keeps after ``//`` and the final newline."""
    lines = [line.removeprefix(" ") for line in doc.split("\n")]
    return "\n".join(lines).removesuffix("\n")
