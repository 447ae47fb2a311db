# Copyright 2026 APIModel Contributors
# SPDX-License-Identifier: Apache-2.0

"""Entry point for the APIModel command-line interface."""

import argparse
import logging
import sys
from pathlib import Path

from yachalk import chalk

from apimodel.compiler.build import CompilerError, build_api
from apimodel.config.options import OPTIONS_FILE_NAME, OptionsError, load_options
from apimodel.model.entities import API, Method

# ###############
# Public Interface
# ###############


def main() -> None:
    """Run the APIModel CLI."""
    parser = argparse.ArgumentParser(
        prog="apimodel",
        description="APIModel: build a language-neutral model of an API from protobuf or OpenAPI sources",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log debug messages",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    # check subcommand
    check_parser = subparsers.add_parser(
        "check",
        help="Build the API model and report problems",
        description="Build the API model and report warnings and errors.",
    )
    check_parser.add_argument(
        "config",
        nargs="?",
        default=OPTIONS_FILE_NAME,
        help=f"Generator options file (default: {OPTIONS_FILE_NAME})",
    )

    # describe subcommand
    describe_parser = subparsers.add_parser(
        "describe",
        help="Print the services and methods of the API model",
        description="Build the API model and print its services, methods and HTTP bindings.",
    )
    describe_parser.add_argument(
        "config",
        nargs="?",
        default=OPTIONS_FILE_NAME,
        help=f"Generator options file (default: {OPTIONS_FILE_NAME})",
    )

    args = parser.parse_args()
    if args.command is None:
        parser.print_help()
        sys.exit(0)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )
    sys.exit(_dispatch(args))


# ################
# Implementation
# ################


def _dispatch(args: argparse.Namespace) -> int:
    """Dispatch to the appropriate subcommand handler."""
    if args.command == "check":
        return _cmd_check(args)
    if args.command == "describe":
        return _cmd_describe(args)
    return 0


def _print_error(message: str) -> None:
    print(f"{chalk.red('Error:')} {message}", file=sys.stderr)


def _build(config: str) -> API | None:
    """Load the options file and build the model; report failures and return None."""
    path = Path(config)
    try:
        options = load_options(path)
        return build_api(options)
    except (OptionsError, CompilerError) as exc:
        _print_error(str(exc))
        return None


def _cmd_check(args: argparse.Namespace) -> int:
    """Handle the check subcommand."""
    api = _build(args.config)
    if api is None:
        return 1
    method_count = sum(len(s.methods) for s in api.services)
    print(
        chalk.green(
            f"No issues found: {len(api.services)} service(s), {method_count} method(s), "
            f"{len(api.state.message_by_id)} message(s)."
        )
    )
    return 0


def _cmd_describe(args: argparse.Namespace) -> int:
    """Handle the describe subcommand."""
    api = _build(args.config)
    if api is None:
        return 1
    print(chalk.bold(api.title or api.name or "(untitled API)"))
    for service in api.services:
        host = f" ({service.default_host})" if service.default_host else ""
        print(f"  service {service.id[1:]}{host}")
        for method in service.methods:
            print(f"    {method.name}{_method_markers(method)}")
            if method.path_info is None:
                continue
            for binding in method.path_info.bindings:
                print(f"      {binding.verb} {binding.path_template.render()}")
    return 0


def _method_markers(method: Method) -> str:
    markers = []
    if method.pagination is not None:
        markers.append("paginated")
    if method.operation_info is not None:
        markers.append("long-running")
    if method.client_side_streaming or method.server_side_streaming:
        markers.append("streaming")
    return f" [{', '.join(markers)}]" if markers else ""
