# Copyright 2026 APIModel Contributors
# SPDX-License-Identifier: Apache-2.0

"""Single-run driver: from generator options to a validated, frozen API model.

One run loads the inputs and ingests them with the ingestor selected by the
specification format. It then prunes skipped elements, enriches the assembled
model and labels recursive fields. Finally it validates the cross references
and freezes the symbol table.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from google.api import service_pb2

from apimodel.compiler.enrich import enrich
from apimodel.compiler.openapi import OpenAPIError, load_openapi_document, make_api_for_openapi
from apimodel.compiler.protobuf import DescriptorSetError, load_descriptor_set, make_api_for_protobuf
from apimodel.config.options import GeneratorOptions, SpecificationFormat
from apimodel.config.service_config import ServiceConfigError, load_service_config
from apimodel.model.dependencies import DependencyError, skip_model_elements
from apimodel.model.entities import API
from apimodel.model.recursive import label_recursive_fields
from apimodel.validation.checks import validate

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


class CompilerError(Exception):
    """Raised when an API model cannot be built.

    Covers unreadable inputs, malformed OpenAPI documents and service
    configurations, and models that fail cross-reference validation.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)


def build_api(options: GeneratorOptions) -> API:
    """Build the API model described by *options*.

    Args:
        options: The generator options of this run.

    Returns:
        The enriched API; its symbol table is frozen.

    Raises:
        CompilerError: If an input cannot be loaded or ingested, or if the
            model fails validation. Validation errors are reported together.
    """
    service_config: service_pb2.Service | None = None
    if options.service_config is not None:
        try:
            service_config = load_service_config(options.service_config)
        except ServiceConfigError as exc:
            raise CompilerError(str(exc)) from exc

    ingest = _INGESTORS[options.specification_format]
    try:
        api = ingest(options, service_config)
    except (DescriptorSetError, OpenAPIError) as exc:
        raise CompilerError(f"Cannot ingest '{options.specification_source}': {exc}") from exc

    try:
        skip_model_elements(api, options.skipped_ids, options.included_ids)
    except DependencyError as exc:
        raise CompilerError(f"Cannot select elements of '{options.specification_source}': {exc}") from exc

    enrich(api, service_config)
    label_recursive_fields(api)

    result = validate(api)
    for warning in result.warnings:
        logger.warning(warning.message)
    if result.has_errors:
        error_lines = "\n".join(f"  {e.message}" for e in result.errors)
        raise CompilerError(f"Validation errors in '{options.specification_source}':\n{error_lines}")

    api.state.freeze()
    logger.debug("Built %s: %d service(s), %d message(s)", api.name, len(api.services), len(api.messages))
    return api


# ################
# Implementation
# ################


def _ingest_protobuf(options: GeneratorOptions, service_config: service_pb2.Service | None) -> API:
    descriptor_set = load_descriptor_set(options.specification_source)
    return make_api_for_protobuf(
        service_config,
        list(descriptor_set.file),
        files_to_generate=options.files_to_generate,
        include_longrunning=options.include_longrunning,
    )


def _ingest_openapi(options: GeneratorOptions, service_config: service_pb2.Service | None) -> API:
    document = load_openapi_document(options.specification_source)
    return make_api_for_openapi(service_config, document)


_INGESTORS: dict[SpecificationFormat, Callable[[GeneratorOptions, service_pb2.Service | None], API]] = {
    SpecificationFormat.PROTOBUF: _ingest_protobuf,
    SpecificationFormat.OPENAPI: _ingest_openapi,
}
