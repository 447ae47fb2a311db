# Copyright 2026 APIModel Contributors
# SPDX-License-Identifier: Apache-2.0

"""Parsers for HTTP path templates and routing header templates."""

from apimodel.parser.path_template import PathTemplateError, parse_path_template
from apimodel.parser.routing import RoutingTemplateError, parse_routing_path_template, parse_routing_rule

__all__ = [
    "parse_path_template",
    "PathTemplateError",
    "parse_routing_path_template",
    "parse_routing_rule",
    "RoutingTemplateError",
]
