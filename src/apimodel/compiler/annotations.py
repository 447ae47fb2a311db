# Copyright 2026 APIModel Contributors
# SPDX-License-Identifier: Apache-2.0

"""Decoding of the ``google.api`` and ``google.longrunning`` descriptor annotations.

Importing this module registers the annotation extensions with the default
protobuf descriptor pool, so descriptor sets parsed afterwards expose them
through ``options.Extensions``.
"""

from __future__ import annotations

import logging

from google.api import annotations_pb2, client_pb2, field_behavior_pb2, field_info_pb2, http_pb2, routing_pb2
from google.longrunning import operations_proto_pb2
from google.protobuf import descriptor_pb2

from apimodel.model.entities import Message, OperationInfo, PathBinding, PathInfo, PathTemplate, RoutingInfo
from apimodel.model.state import APIState
from apimodel.model.types import UUID4_FORMAT, FieldBehavior
from apimodel.parser.path_template import parse_path_template
from apimodel.parser.routing import parse_routing_rule

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


class SymbolLookupError(Exception):
    """Raised when an annotation refers to a type missing from the symbol table."""


def normalize_type_id(package: str, type_id: str) -> str:
    """Return *type_id* as a fully-qualified ID.

    Annotation values may omit the leading dot (``google.protobuf.Empty``) or
    the package altogether (``OperationMetadata``).

    >>> normalize_type_id("google.cloud.foo.v1", "OperationMetadata")
    '.google.cloud.foo.v1.OperationMetadata'
    """
    if type_id.startswith("."):
        return type_id
    if "." in type_id:
        return "." + type_id
    return f".{package}.{type_id}"


def parse_operation_info(package: str, method: descriptor_pb2.MethodDescriptorProto) -> OperationInfo | None:
    """Decode the ``google.longrunning.operation_info`` annotation of a method, if any."""
    if not method.options.HasExtension(operations_proto_pb2.operation_info):
        return None
    info = method.options.Extensions[operations_proto_pb2.operation_info]
    return OperationInfo(
        metadata_type_id=normalize_type_id(package, info.metadata_type) if info.metadata_type else "",
        response_type_id=normalize_type_id(package, info.response_type),
    )


def parse_path_info(method: descriptor_pb2.MethodDescriptorProto, state: APIState) -> PathInfo | None:
    """Decode the ``google.api.http`` annotation of a method.

    Returns:
        The method's PathInfo, or None if the method has no HTTP annotation.

    Raises:
        PathTemplateError: If a path template is malformed.
        SymbolLookupError: If the method's input message is not registered.
    """
    if not method.options.HasExtension(annotations_pb2.http):
        return None
    rule = method.options.Extensions[annotations_pb2.http]
    return process_http_rule(rule, state, method.input_type)


def process_http_rule(rule: http_pb2.HttpRule, state: APIState, input_type_id: str) -> PathInfo:
    """Convert an HttpRule and its additional bindings into a PathInfo.

    The body of the top-level rule is the body of the PathInfo. Additional
    bindings with a different body are kept, with a warning.

    Raises:
        PathTemplateError: If a path template is malformed.
        SymbolLookupError: If the input message is not registered.
    """
    binding = _process_rule_shallow(rule, state, input_type_id)
    if binding is None:
        return PathInfo()
    path_info = PathInfo(bindings=[binding], body_field_path=rule.body)
    for additional in rule.additional_bindings:
        extra = _process_rule_shallow(additional, state, input_type_id)
        if path_info.body_field_path and additional.body and additional.body != path_info.body_field_path:
            logger.warning(
                "Mismatched body in additional binding of %s: '%s' vs '%s' (see AIP-127)",
                input_type_id,
                path_info.body_field_path,
                additional.body,
            )
        if extra is None:
            logger.warning("Additional binding without a pattern for %s", input_type_id)
            continue
        path_info.bindings.append(extra)
    return path_info


def query_parameters(message: Message, template: PathTemplate, body: str) -> set[str]:
    """Infer the query parameters of a binding.

    All top-level fields of the request are query parameters, except those
    bound by a path variable and the body field. A ``*`` body leaves none.
    """
    if body == "*":
        return set()
    params = {f.name for f in message.fields}
    for field_path in template.field_paths():
        params.discard(field_path)
    if body:
        params.discard(body)
    return params


def parse_routing(method_id: str, method: descriptor_pb2.MethodDescriptorProto) -> list[RoutingInfo]:
    """Decode the ``google.api.routing`` annotation of a method.

    Raises:
        RoutingTemplateError: Listing every malformed routing parameter.
    """
    if not method.options.HasExtension(routing_pb2.routing):
        return []
    rule = method.options.Extensions[routing_pb2.routing]
    return parse_routing_rule(method_id, [(p.field, p.path_template) for p in rule.routing_parameters])


def parse_default_host(service_id: str, options: descriptor_pb2.ServiceOptions) -> str:
    """Return the ``google.api.default_host`` of a service, warning when it is missing."""
    default_host = options.Extensions[client_pb2.default_host]
    if not default_host:
        logger.warning("Missing default host for service %s", service_id)
    return default_host


def field_behaviors(field: descriptor_pb2.FieldDescriptorProto) -> list[FieldBehavior]:
    """Return the ``google.api.field_behavior`` annotations of a field."""
    return [FieldBehavior(b) for b in field.options.Extensions[field_behavior_pb2.field_behavior]]


def field_format(field: descriptor_pb2.FieldDescriptorProto) -> str | None:
    """Return ``UUID4`` if the field carries a ``google.api.field_info`` UUID4 format."""
    if field.type != descriptor_pb2.FieldDescriptorProto.TYPE_STRING:
        return None
    if not field.options.HasExtension(field_info_pb2.field_info):
        return None
    info = field.options.Extensions[field_info_pb2.field_info]
    if info.format == field_info_pb2.FieldInfo.UUID4:
        return UUID4_FORMAT
    return None


# ################
# Implementation
# ################

_PATTERN_VERBS: dict[str, str] = {
    "get": "GET",
    "put": "PUT",
    "post": "POST",
    "delete": "DELETE",
    "patch": "PATCH",
}


def _process_rule_shallow(rule: http_pb2.HttpRule, state: APIState, input_type_id: str) -> PathBinding | None:
    """Convert one HttpRule, ignoring its additional bindings.

    Returns None for rules without a pattern; streaming methods and some
    services have no HTTP binding at all.
    """
    pattern = rule.WhichOneof("pattern")
    if pattern is None:
        return None
    if pattern == "custom":
        verb = rule.custom.kind.upper()
        raw_path = rule.custom.path
    else:
        verb = _PATTERN_VERBS[pattern]
        raw_path = getattr(rule, pattern)
    template = parse_path_template(raw_path)
    message = state.message_by_id.get(input_type_id)
    if message is None:
        raise SymbolLookupError(f"Unable to look up request message {input_type_id}")
    return PathBinding(
        verb=verb,
        path_template=template,
        query_parameters=query_parameters(message, template, rule.body),
    )
