# Copyright 2026 APIModel Contributors
# SPDX-License-Identifier: Apache-2.0

"""Descriptor fixtures shared by the compiler tests.

The fixtures mimic ``protoc --include_imports --include_source_info`` output
for a small secret manager API, built in code with ``descriptor_pb2``.
"""

import pytest
from google.api import annotations_pb2, client_pb2, field_behavior_pb2, field_info_pb2, routing_pb2
from google.longrunning import operations_proto_pb2
from google.protobuf import descriptor, descriptor_pb2

PACKAGE = "google.cloud.secretmanager.v1"
FILE_NAME = "google/cloud/secretmanager/v1/service.proto"
SERVICE_ID = f".{PACKAGE}.SecretManagerService"

_FDP = descriptor_pb2.FieldDescriptorProto

# ###############
# Builders
# ###############


def _make_field(
    name: str,
    number: int,
    type_: int = _FDP.TYPE_STRING,
    type_name: str = "",
    repeated: bool = False,
    json_name: str | None = None,
) -> descriptor_pb2.FieldDescriptorProto:
    """Build a field the way protoc does, with its JSON name filled in."""
    field = _FDP(
        name=name,
        number=number,
        type=type_,
        label=_FDP.LABEL_REPEATED if repeated else _FDP.LABEL_OPTIONAL,
    )
    if type_name:
        field.type_name = type_name
    if json_name is not None:
        field.json_name = json_name
    return field


def _make_message(name: str, *fields: descriptor_pb2.FieldDescriptorProto) -> descriptor_pb2.DescriptorProto:
    message = descriptor_pb2.DescriptorProto(name=name)
    message.field.extend(fields)
    return message


def _add_method(
    service: descriptor_pb2.ServiceDescriptorProto,
    name: str,
    input_type: str,
    output_type: str,
) -> descriptor_pb2.MethodDescriptorProto:
    return service.method.add(name=name, input_type=input_type, output_type=output_type)


def _with_imports(*files: descriptor.FileDescriptor) -> list[descriptor_pb2.FileDescriptorProto]:
    """Return the given generated files and their dependencies, dependencies first."""
    collected: dict[str, descriptor_pb2.FileDescriptorProto] = {}

    def _add(f: descriptor.FileDescriptor) -> None:
        if f.name in collected:
            return
        for dependency in f.dependencies:
            _add(dependency)
        proto = descriptor_pb2.FileDescriptorProto()
        f.CopyToProto(proto)
        collected[f.name] = proto

    for f in files:
        _add(f)
    return list(collected.values())


def _secretmanager_file() -> descriptor_pb2.FileDescriptorProto:
    """Build the secret manager service file."""
    p = f".{PACKAGE}"
    f = descriptor_pb2.FileDescriptorProto(name=FILE_NAME, package=PACKAGE, syntax="proto3")
    f.dependency.extend(["google/longrunning/operations.proto", "google/protobuf/empty.proto"])

    # Secret, with a map, a nested enum and a oneof.
    secret = _make_message(
        "Secret",
        _make_field("name", 1, json_name="name"),
        _make_field("labels", 2, _FDP.TYPE_MESSAGE, f"{p}.Secret.LabelsEntry", repeated=True, json_name="labels"),
        _make_field("state", 3, _FDP.TYPE_ENUM, f"{p}.Secret.State", json_name="state"),
        _make_field("expire_time", 4, json_name="expireTime"),
        _make_field("ttl", 5, json_name="ttl"),
        _make_field("etag", 6, json_name="etag"),
    )
    secret.field[3].oneof_index = 0
    secret.field[4].oneof_index = 0
    secret.oneof_decl.add(name="expiration")
    entry = secret.nested_type.add(name="LabelsEntry")
    entry.field.extend([_make_field("key", 1, json_name="key"), _make_field("value", 2, json_name="value")])
    entry.options.map_entry = True
    state = secret.enum_type.add(name="State")
    state.value.add(name="STATE_UNSPECIFIED", number=0)
    state.value.add(name="ENABLED", number=1)
    etag = secret.field[5]
    etag.proto3_optional = True
    etag.oneof_index = 1
    secret.oneof_decl.add(name="_etag")
    f.message_type.append(secret)

    list_request = _make_message(
        "ListSecretsRequest",
        _make_field("parent", 1),
        _make_field("page_size", 2, _FDP.TYPE_INT32),
        _make_field("page_token", 3),
        _make_field("filter", 4),
    )
    list_request.field[0].options.Extensions[field_behavior_pb2.field_behavior].append(field_behavior_pb2.REQUIRED)
    f.message_type.append(list_request)
    f.message_type.append(
        _make_message(
            "ListSecretsResponse",
            _make_field("secrets", 1, _FDP.TYPE_MESSAGE, f"{p}.Secret", repeated=True, json_name="secrets"),
            _make_field("next_page_token", 2, json_name="nextPageToken"),
            _make_field("total_size", 3, _FDP.TYPE_INT32, json_name="totalSize"),
        )
    )
    f.message_type.append(_make_message("GetSecretRequest", _make_field("name", 1, json_name="name")))
    create_request = _make_message(
        "CreateSecretRequest",
        _make_field("parent", 1, json_name="parent"),
        _make_field("secret_id", 2, json_name="secretId"),
        _make_field("secret", 3, _FDP.TYPE_MESSAGE, f"{p}.Secret", json_name="secret"),
        _make_field("request_id", 4, json_name="requestId"),
    )
    create_request.field[3].options.Extensions[field_info_pb2.field_info].format = field_info_pb2.FieldInfo.UUID4
    f.message_type.append(create_request)
    f.message_type.append(_make_message("DeleteSecretRequest", _make_field("name", 1, json_name="name")))
    f.message_type.append(_make_message("OperationMetadata", _make_field("create_time", 1, json_name="createTime")))

    service = f.service.add(name="SecretManagerService")
    service.options.Extensions[client_pb2.default_host] = "secretmanager.googleapis.com"

    m = _add_method(service, "ListSecrets", f"{p}.ListSecretsRequest", f"{p}.ListSecretsResponse")
    m.options.Extensions[annotations_pb2.http].get = "/v1/{parent=projects/*}/secrets"

    m = _add_method(service, "GetSecret", f"{p}.GetSecretRequest", f"{p}.Secret")
    rule = m.options.Extensions[annotations_pb2.http]
    rule.get = "/v1/{name=projects/*/secrets/*}"
    rule.additional_bindings.add(get="/v1/{name=projects/*/locations/*/secrets/*}")
    routing = m.options.Extensions[routing_pb2.routing]
    routing.routing_parameters.add(field="name", path_template="{project=projects/*}/**")
    routing.routing_parameters.add(field="name", path_template="{project=projects/*/locations/*}/**")

    m = _add_method(service, "CreateSecret", f"{p}.CreateSecretRequest", ".google.longrunning.Operation")
    rule = m.options.Extensions[annotations_pb2.http]
    rule.post = "/v1/{parent=projects/*}/secrets"
    rule.body = "secret"
    info = m.options.Extensions[operations_proto_pb2.operation_info]
    info.response_type = "Secret"
    info.metadata_type = "OperationMetadata"

    m = _add_method(service, "DeleteSecret", f"{p}.DeleteSecretRequest", ".google.protobuf.Empty")
    m.options.Extensions[annotations_pb2.http].delete = "/v1/{name=projects/*/secrets/*}"

    m = _add_method(service, "BrokenSecret", f"{p}.GetSecretRequest", f"{p}.Secret")
    m.options.Extensions[annotations_pb2.http].get = "/v1/{name=projects/**/secrets}"

    # Documentation, as recorded by --include_source_info.
    docs = f.source_code_info
    docs.location.add(path=[4, 0], leading_comments=" A secret.\n Holds versions.\n")
    docs.location.add(path=[4, 0, 2, 0], trailing_comments=" The resource name.\n")
    docs.location.add(path=[4, 0, 3, 0], leading_comments=" Labels entry.\n")
    docs.location.add(path=[4, 0, 4, 0], leading_comments=" The state.\n")
    docs.location.add(path=[4, 0, 4, 0, 2, 1], leading_comments=" Enabled.\n")
    docs.location.add(path=[4, 0, 8, 0], leading_comments=" When it expires.\n")
    docs.location.add(path=[6, 0], leading_comments=" Manages secrets.\n")
    docs.location.add(path=[6, 0, 2, 1], leading_comments=" Gets a secret.\n")
    docs.location.add(path=[6, 0, 2, 4], leading_comments=" Dropped.\n")
    docs.location.add(path=[6, 0, 2, 3], leading_comments=" Deletes a secret.\n")
    return f


# ###############
# Fixtures
# ###############


@pytest.fixture
def secret_file() -> descriptor_pb2.FileDescriptorProto:
    """The secret manager service file; tests may modify it before ingestion."""
    return _secretmanager_file()


@pytest.fixture
def descriptor_files(secret_file: descriptor_pb2.FileDescriptorProto) -> list[descriptor_pb2.FileDescriptorProto]:
    """The secret manager file preceded by its imports."""
    return [*_with_imports(operations_proto_pb2.DESCRIPTOR), secret_file]


@pytest.fixture
def service_config_text() -> str:
    """A service configuration declaring the secret manager and the locations mixin."""
    return """\
type: google.api.Service
name: secretmanager.googleapis.com
title: Secret Manager API
apis:
- name: google.cloud.location.Locations
- name: google.cloud.secretmanager.v1.SecretManagerService
documentation:
  summary: Stores sensitive data.
  rules:
  - selector: google.cloud.location.Locations.ListLocations
    description: Lists the supported locations.
http:
  rules:
  - selector: google.cloud.location.Locations.GetLocation
    get: '/v1/{name=projects/*/locations/*}'
  - selector: google.cloud.location.Locations.ListLocations
    get: '/v1/{name=projects/*}/locations'
publishing:
  method_settings:
  - selector: google.cloud.secretmanager.v1.SecretManagerService.CreateSecret
    auto_populated_fields:
    - request_id
"""
