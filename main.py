#!/usr/bin/env python3
"""
apidocs CLI: inspect the documentation metadata of an application's APIs.

Commands:
  list:  List documented API modules and their versions
  show:  Print the services of one API version (or a single service)
  serve: Start the JSON documentation API
"""

import argparse
import contextlib
import json
import logging
import os
import subprocess
import sys
from pathlib import Path

from api_factory import ApiFactory
from config import config
from loader import ApplicationConfigError, load_application
from models import Api, Service

# Constants for output formatting
MAX_DESCRIPTION_CHARS = 100


def _shorten(text: str, limit: int = MAX_DESCRIPTION_CHARS) -> str:
    text = " ".join(text.split())
    return text if len(text) <= limit else text[: limit - 3] + "..."


def _build_factory(args: argparse.Namespace) -> ApiFactory:
    """Load the application named by --app (or APP_CONFIG_PATH) and wrap it in a factory."""
    app_path = getattr(args, "app", None)
    application = load_application(app_path.resolve() if app_path else None)
    return ApiFactory(application.module_manager, application.config, application.module_utils)


def print_service(service: Service) -> None:
    """Pretty-print one service to stdout.

    Args:
        service: Service documentation to print
    """
    print(f"{service.name}  {service.route or '(no route)'}")
    if service.description:
        print(f"    {_shorten(service.description)}")

    for label, operations in (("collection", service.operations), ("entity", service.entity_operations)):
        if operations is None:
            continue
        for op in operations:
            line = f"    [{label}] {op.http_method:7}"
            if op.description:
                line += f" {_shorten(op.description)}"
            print(line)

    for field in service.fields:
        flag = "required" if field.required else "optional"
        line = f"    field {field.name} ({flag})"
        if field.description:
            line += f": {_shorten(field.description)}"
        print(line)

    if service.request_accept_types:
        print(f"    accept: {', '.join(service.request_accept_types)}")
    if service.request_content_types:
        print(f"    content-type: {', '.join(service.request_content_types)}")


def print_api(api: Api) -> None:
    print(f"{api.name} v{api.version}: {len(api.services)} services\n")
    for service in api.services:
        print_service(service)
        print()


def cmd_list(args: argparse.Namespace) -> int:
    """List command: documented modules with their versions.

    Args:
        args: Parsed arguments with app and json

    Returns:
        Exit code (0 on success, non-zero on failure)
    """
    try:
        factory = _build_factory(args)
    except ApplicationConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    entries = factory.create_api_list()

    if args.json:
        print(json.dumps([entry.model_dump() for entry in entries], indent=2))
    elif not entries:
        print("No documented APIs.")
    else:
        for entry in entries:
            versions = ", ".join(f"v{v}" for v in entry.versions) or "(no versions)"
            print(f"{entry.name}: {versions}")

    return 0


def cmd_show(args: argparse.Namespace) -> int:
    """Show command: print one API version, or one of its services.

    Args:
        args: Parsed arguments with name, version, service, app and json

    Returns:
        Exit code (0 on success, 1 when the service is not found, 2 on bad application config)
    """
    try:
        factory = _build_factory(args)
        api = factory.create_api(args.name, args.version)
        if args.service:
            service = factory.create_service(api, args.service)
        else:
            service = None
    except ApplicationConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    if args.service:
        if service is None:
            print(f"Service '{args.service}' not found in {api.name} v{api.version}", file=sys.stderr)
            return 1
        if args.json:
            print(service.model_dump_json(indent=2))
        else:
            print_service(service)
        return 0

    if args.json:
        print(api.model_dump_json(indent=2))
    else:
        print_api(api)

    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    """Serve command: run the documentation API under uvicorn.

    Args:
        args: Parsed arguments with host, port, reload and app

    Returns:
        Exit code (0 on success, non-zero on failure)
    """
    cmd = [
        sys.executable,
        "-m",
        "uvicorn",
        "api.app:app",
        "--host",
        args.host,
        "--port",
        str(args.port),
    ]
    if args.reload:
        cmd.append("--reload")

    env = None
    if args.app:
        env = dict(os.environ, APP_CONFIG_PATH=str(args.app.resolve()))

    print(f"Serving API docs at http://{args.host}:{args.port}/api/v1/apis (Ctrl+C to stop)")

    try:
        proc = subprocess.Popen(cmd, cwd=str(Path(__file__).parent), env=env)
        try:
            proc.wait()
        except KeyboardInterrupt:
            print("\nShutting down server...")
            proc.terminate()
            with contextlib.suppress(KeyboardInterrupt):
                proc.wait()
    except OSError as e:
        print(f"Failed to start server: {e}", file=sys.stderr)
        return 1

    return proc.returncode or 0


def build_parser() -> argparse.ArgumentParser:
    """Build argument parser with subcommands.

    Returns:
        Configured ArgumentParser
    """
    parser = argparse.ArgumentParser(
        prog="apidocs",
        description="apidocs CLI: list, show, serve",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    app_help = "Application file (overrides APP_CONFIG_PATH from config)."

    # list subcommand
    list_parser = subparsers.add_parser("list", help="List documented API modules and versions")
    list_parser.add_argument("--app", type=Path, default=None, help=app_help)
    list_parser.add_argument("--json", action="store_true", help="Output raw JSON")

    # show subcommand
    show_parser = subparsers.add_parser("show", help="Print documentation for one API version")
    show_parser.add_argument("name", type=str, help="API module name, e.g. 'Shop'")
    show_parser.add_argument(
        "--version",
        type=str,
        default=config.DEFAULT_API_VERSION,
        help=f"API version (default: {config.DEFAULT_API_VERSION})",
    )
    show_parser.add_argument("--service", type=str, default=None, help="Only print this service")
    show_parser.add_argument("--app", type=Path, default=None, help=app_help)
    show_parser.add_argument("--json", action="store_true", help="Output raw JSON")
    show_parser.epilog = (
        "Examples:\n"
        "  apidocs show Shop\n"
        "  apidocs show Shop --version 2 --service order --json\n"
    )

    # serve subcommand
    serve_parser = subparsers.add_parser("serve", help="Start the JSON documentation API")
    serve_parser.add_argument("--host", type=str, default="127.0.0.1", help="Interface to bind (default: 127.0.0.1)")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on (default: 8000)")
    serve_parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    serve_parser.add_argument("--app", type=Path, default=None, help=app_help)

    return parser


def main() -> None:
    """Main entry point for CLI."""
    parser = build_parser()
    args = parser.parse_args()

    logging.basicConfig(level=config.log_level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    if args.command == "list":
        rc = cmd_list(args)
    elif args.command == "show":
        rc = cmd_show(args)
    elif args.command == "serve":
        rc = cmd_serve(args)
    else:
        parser.print_help()
        rc = 2

    sys.exit(rc)


if __name__ == "__main__":
    main()
