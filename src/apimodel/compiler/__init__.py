# Copyright 2026 APIModel Contributors
# SPDX-License-Identifier: Apache-2.0

"""Ingestion, mixin composition and enrichment of API models."""

from apimodel.compiler.annotations import SymbolLookupError
from apimodel.compiler.build import CompilerError, build_api
from apimodel.compiler.enrich import enrich
from apimodel.compiler.mixin import MixinPlan, compose_mixins, load_mixins
from apimodel.compiler.openapi import OpenAPIError, load_openapi_document, make_api_for_openapi
from apimodel.compiler.protobuf import DescriptorSetError, load_descriptor_set, make_api_for_protobuf

__all__ = [
    "make_api_for_protobuf",
    "load_descriptor_set",
    "DescriptorSetError",
    "make_api_for_openapi",
    "load_openapi_document",
    "OpenAPIError",
    "SymbolLookupError",
    "MixinPlan",
    "load_mixins",
    "compose_mixins",
    "enrich",
    "build_api",
    "CompilerError",
]
