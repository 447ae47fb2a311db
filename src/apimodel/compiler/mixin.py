# Copyright 2026 APIModel Contributors
# SPDX-License-Identifier: Apache-2.0

"""Composition of well-known mixin services into the primary services of an API.

A service configuration that lists, say, ``google.cloud.location.Locations``
next to the primary service makes the ``Locations`` methods callable on the
primary service's host. Each enabled mixin method is copied into every primary
service, re-parented, and updated with the configuration's HTTP and
documentation rules.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from google.api import service_pb2
from google.cloud.location import locations_pb2
from google.iam.v1 import iam_policy_pb2
from google.longrunning import operations_proto_pb2
from google.protobuf import descriptor, descriptor_pb2

from apimodel.compiler.annotations import SymbolLookupError, process_http_rule
from apimodel.config.service_config import split_api_name
from apimodel.model.entities import API, Method, Service
from apimodel.parser.path_template import PathTemplateError

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############

LOCATION_SERVICE = ".google.cloud.location.Locations"
IAM_SERVICE = ".google.iam.v1.IAMPolicy"
LONGRUNNING_SERVICE = ".google.longrunning.Operations"
LONGRUNNING_GET_OPERATION = LONGRUNNING_SERVICE + ".GetOperation"


@dataclass
class MixinPlan:
    """The mixins enabled for one run.

    Attributes:
        files: Canonical descriptor files of the enabled mixins and their
            transitive dependencies, dependencies first, one per file name.
        services: Fully-qualified IDs of the enabled mixin services.
        enabled_methods: Fully-qualified IDs of the mixin methods to compose.
    """

    files: list[descriptor_pb2.FileDescriptorProto] = field(default_factory=list)
    services: list[str] = field(default_factory=list)
    enabled_methods: set[str] = field(default_factory=set)


def is_well_known_mixin(api_name: str) -> bool:
    """Return True if *api_name* names one of the well-known mixin services."""
    return _with_leading_dot(api_name) in _MIXIN_DESCRIPTORS


def primary_package(service_config: service_pb2.Service) -> str:
    """Return the package of the first API in the configuration that is not a mixin."""
    package = ""
    for api in service_config.apis:
        package, _ = split_api_name(api.name)
        if not is_well_known_mixin(api.name):
            break
    return package


def load_mixins(service_config: service_pb2.Service | None, include_longrunning: bool = False) -> MixinPlan:
    """Decide which mixins apply and load their canonical descriptors.

    Mixins compose only when the configuration declares at least one mixin
    next to a primary (non-mixin) API, or when long-running operation support
    is force-enabled. The enabled methods are those selected by the
    configuration's HTTP rules; forcing long-running support also enables
    ``google.longrunning.Operations.GetOperation``.

    Args:
        service_config: The service configuration, if any.
        include_longrunning: Force-enable the long-running operations mixin.

    Returns:
        The MixinPlan; empty when no mixin applies.
    """
    plan = MixinPlan()
    declared: list[str] = []
    if service_config is not None:
        names = [_with_leading_dot(api.name) for api in service_config.apis]
        has_primary = any(name not in _MIXIN_DESCRIPTORS for name in names)
        if has_primary:
            declared = [name for name in names if name in _MIXIN_DESCRIPTORS]
    if include_longrunning:
        declared.append(LONGRUNNING_SERVICE)
        plan.enabled_methods.add(LONGRUNNING_GET_OPERATION)
    if declared and service_config is not None:
        plan.enabled_methods.update(_with_leading_dot(rule.selector) for rule in service_config.http.rules)

    files: dict[str, descriptor_pb2.FileDescriptorProto] = {}
    for name in declared:
        if name in plan.services:
            continue
        plan.services.append(name)
        _add_file_with_dependencies(_MIXIN_DESCRIPTORS[name], files)
    plan.files = list(files.values())
    if plan.services:
        logger.debug("Enabled mixins: %s", ", ".join(plan.services))
    return plan


def compose_mixins(
    api: API,
    mixins: list[Service],
    plan: MixinPlan,
    service_config: service_pb2.Service | None,
) -> None:
    """Copy the enabled methods of *mixins* into every primary service of *api*.

    A service that already has a method of the same name, or that belongs to
    the mixin's own package, is left unchanged for that method.

    Args:
        api: The API under construction; its services are modified in place.
        mixins: The mixin services, with methods registered under their own IDs.
        plan: The enabled mixin methods.
        service_config: Supplies HTTP rule and documentation overrides.
    """
    for service in api.services:
        for mixin in mixins:
            if service.package == mixin.package:
                continue
            for method in mixin.methods:
                if method.id not in plan.enabled_methods:
                    continue
                if service.method_by_name(method.name) is not None:
                    logger.debug("Service %s already has a %s method", service.id, method.name)
                    continue
                copy = method.model_copy(deep=True)
                copy.id = f"{service.id}.{method.name}"
                copy.service_id = service.id
                _apply_overrides(api, copy, method.id, mixin, service_config)
                service.methods.append(copy)
                api.state.register_method(copy)


# ################
# Implementation
# ################

_MIXIN_DESCRIPTORS: dict[str, descriptor.FileDescriptor] = {
    LOCATION_SERVICE: locations_pb2.DESCRIPTOR,
    IAM_SERVICE: iam_policy_pb2.DESCRIPTOR,
    LONGRUNNING_SERVICE: operations_proto_pb2.DESCRIPTOR,
}


def _with_leading_dot(name: str) -> str:
    return name if name.startswith(".") else "." + name


def _add_file_with_dependencies(
    file: descriptor.FileDescriptor,
    files: dict[str, descriptor_pb2.FileDescriptorProto],
) -> None:
    """Add *file* and everything it imports to *files*, dependencies first."""
    if file.name in files:
        return
    for dependency in file.dependencies:
        _add_file_with_dependencies(dependency, files)
    proto = descriptor_pb2.FileDescriptorProto()
    file.CopyToProto(proto)
    files[file.name] = proto


def _apply_overrides(
    api: API,
    method: Method,
    original_id: str,
    mixin: Service,
    service_config: service_pb2.Service | None,
) -> None:
    """Apply the configuration's HTTP and documentation rules for *original_id*."""
    method.documentation = ""
    if service_config is not None:
        for rule in service_config.http.rules:
            if _with_leading_dot(rule.selector) != original_id:
                continue
            try:
                method.path_info = process_http_rule(rule, api.state, method.input_type_id)
            except (PathTemplateError, SymbolLookupError) as exc:
                logger.warning("Ignoring HTTP rule for %s: %s", original_id, exc)
        for doc_rule in service_config.documentation.rules:
            if _with_leading_dot(doc_rule.selector) == original_id:
                method.documentation = doc_rule.description
    if not method.documentation:
        method.documentation = (
            f"Provides the [{mixin.name}][{mixin.id[1:]}] service functionality in this service."
        )
