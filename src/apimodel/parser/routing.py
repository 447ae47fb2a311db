# Copyright 2026 APIModel Contributors
# SPDX-License-Identifier: Apache-2.0

"""Parser for dynamic routing header templates (AIP-4222).

A routing template has an optional literal prefix, one ``{...}`` variable and
an optional ``/``-separated suffix, e.g. ``projects/*/{location=locations/*}/**``.
Each helper takes the remaining template text and returns the parsed value
together with the number of characters it consumed.
"""

from __future__ import annotations

from collections.abc import Iterable

from apimodel.model.entities import RoutingInfo, RoutingInfoVariant, RoutingPathSpec

# ###############
# Public Interface
# ###############

SINGLE_SEGMENT_WILDCARD = "*"
MULTI_SEGMENT_WILDCARD = "**"


class RoutingTemplateError(Exception):
    """Raised when one or more routing templates are invalid."""


def parse_routing_path_template(field_name: str, path_template: str) -> RoutingInfo:
    """Parse a single routing parameter into a one-variant RoutingInfo.

    An empty field name together with an empty template is the explicit
    "no routing header" rule. An empty template matches the whole field.

    Args:
        field_name: The dotted request field the header value is read from.
        path_template: The template, possibly empty.

    Returns:
        A RoutingInfo named after the header key with exactly one variant.

    Raises:
        RoutingTemplateError: If the template is malformed.
    """
    if not field_name and not path_template:
        return RoutingInfo(name="", variants=[RoutingInfoVariant()])
    field_path = field_name.split(".")
    if not path_template:
        variant = RoutingInfoVariant(
            field_path=field_path,
            matching=RoutingPathSpec(segments=[MULTI_SEGMENT_WILDCARD]),
        )
        return RoutingInfo(name=field_name, variants=[variant])
    if path_template.count(MULTI_SEGMENT_WILDCARD) > 1:
        raise RoutingTemplateError(f"Too many '**' matchers in path template '{path_template}'")

    pos = 0
    prefix, width = _parse_path_spec(path_template)
    pos += width
    if not path_template.startswith("{", pos):
        raise RoutingTemplateError(f"Expected '{{' in path template '{path_template}', found '{path_template[pos:]}'")
    pos += 1
    name, matching, width = _parse_variable(field_name, path_template, path_template[pos:])
    pos += width
    if not path_template.startswith("}", pos):
        raise RoutingTemplateError(f"Expected '}}' in path template '{path_template}', found '{path_template[pos:]}'")
    pos += 1
    suffix: list[str] = []
    if path_template.startswith("/", pos):
        pos += 1
        suffix, width = _parse_path_spec(path_template[pos:])
        pos += width

    if MULTI_SEGMENT_WILDCARD in prefix:
        raise RoutingTemplateError(f"'**' may not appear in the prefix of path template '{path_template}'")
    for segments in (matching, suffix):
        if MULTI_SEGMENT_WILDCARD in segments[:-1]:
            raise RoutingTemplateError(f"'**' may only appear at the end of path template '{path_template}'")
    if pos != len(path_template):
        raise RoutingTemplateError(f"Unexpected trailer '{path_template[pos:]}' in path template '{path_template}'")

    variant = RoutingInfoVariant(
        field_path=field_path,
        prefix=RoutingPathSpec(segments=prefix),
        matching=RoutingPathSpec(segments=matching),
        suffix=RoutingPathSpec(segments=suffix),
    )
    return RoutingInfo(name=name, variants=[variant])


def parse_routing_rule(method_id: str, parameters: Iterable[tuple[str, str]]) -> list[RoutingInfo]:
    """Parse all routing parameters of a method.

    Parameters naming the same header are merged into one RoutingInfo; its
    variants keep the order in which the parameters were declared. The
    routing infos are sorted by header name.

    Args:
        method_id: The method's fully-qualified ID, used in error messages.
        parameters: ``(field, path_template)`` pairs in declaration order.

    Returns:
        The routing infos of the method, sorted by header name.

    Raises:
        RoutingTemplateError: Listing every malformed parameter, not just the first.
    """
    errors: list[str] = []
    collected: dict[str, RoutingInfo] = {}
    for field_name, path_template in parameters:
        try:
            info = parse_routing_path_template(field_name, path_template)
        except RoutingTemplateError as exc:
            errors.append(f"  {exc}, method={method_id}")
            continue
        current = collected.get(info.name)
        if current is None:
            collected[info.name] = info
        else:
            current.variants.extend(info.variants)
    if errors:
        raise RoutingTemplateError("Invalid routing annotations:\n" + "\n".join(errors))
    return [collected[name] for name in sorted(collected)]


# ################
# Implementation
# ################


def _is_wildcard(segment: str) -> bool:
    return segment in (SINGLE_SEGMENT_WILDCARD, MULTI_SEGMENT_WILDCARD)


def _parse_variable(default_name: str, path_template: str, text: str) -> tuple[str, list[str], int]:
    """Parse the inside of ``{...}`` into (header name, matching spec, width)."""
    spec, width = _parse_path_spec(text)
    if text.startswith("=", width):
        pos = width + 1
        if len(spec) != 1 or _is_wildcard(spec[0]):
            raise RoutingTemplateError(
                f"Expected name=pattern in path template '{path_template}', but the name {spec} is invalid"
            )
        matching, width = _parse_path_spec(text[pos:])
        return spec[0], matching, pos + width
    if len(spec) == 1 and not _is_wildcard(spec[0]):
        # `{parent}` is shorthand for `{parent=*}`.
        return spec[0], [SINGLE_SEGMENT_WILDCARD], width
    return default_name, spec, width


def _parse_path_spec(text: str) -> tuple[list[str], int]:
    """Parse ``/``-separated segments until a character that ends the path spec."""
    segment, width = _parse_segment(text)
    if not segment:
        return [], width
    if not text.startswith("/", width):
        return [segment], width
    pos = width + 1
    rest, width = _parse_path_spec(text[pos:])
    return [segment, *rest], pos + width


def _parse_segment(text: str) -> tuple[str, int]:
    if text.startswith(MULTI_SEGMENT_WILDCARD):
        return MULTI_SEGMENT_WILDCARD, len(MULTI_SEGMENT_WILDCARD)
    if text.startswith(SINGLE_SEGMENT_WILDCARD):
        return SINGLE_SEGMENT_WILDCARD, len(SINGLE_SEGMENT_WILDCARD)
    for index, ch in enumerate(text):
        if ch in "=/{}":
            return text[:index], index
    return text, len(text)
