"""Command-line interface for the user registry service."""

from __future__ import annotations
import argparse
import logging
import sys
from typing import Sequence

try:
    import httpx
except ImportError as exc:  # pragma: no cover - exercised in environments missing deps
    raise SystemExit(
        "The 'httpx' package is required. Execute `pip install -e .` to install dependencies."
    ) from exc

from registry.config import ServiceSettings, load_settings

logger = logging.getLogger("userregistry.main")

_DEFAULT_SERVICE_URL = "http://localhost:8080"


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="User registry service utilities")
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve")

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP registry service")
    serve_parser.add_argument(
        "--host",
        default=None,
        help="Bind address (default: REGISTRY_HOST or 0.0.0.0)",
    )
    serve_parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Listening port (default: REGISTRY_PORT or 8080)",
    )
    serve_parser.add_argument(
        "--log-level",
        default=None,
        choices=["critical", "error", "warning", "info", "debug", "trace"],
        help="Log level for the service and uvicorn (default: REGISTRY_LOG_LEVEL or info)",
    )
    serve_parser.add_argument(
        "--uniform-not-found",
        action="store_true",
        default=None,
        help="Answer 404 for missing users on PATCH and DELETE as well as GET",
    )

    list_parser = subparsers.add_parser(
        "list-users", help="Print the users held by a running registry service"
    )
    list_parser.add_argument(
        "--service-url",
        default=_DEFAULT_SERVICE_URL,
        help=f"Base URL of the registry service (default: {_DEFAULT_SERVICE_URL})",
    )

    args_list = list(argv) if argv is not None else sys.argv[1:]
    known_commands = {"serve", "list-users"}

    if not args_list:
        args_list = ["serve"]
    else:
        first = args_list[0]
        if first in ("-h", "--help"):
            return parser.parse_args(args_list)
        if first not in known_commands:
            args_list = ["serve", *args_list]

    return parser.parse_args(args_list)


def _resolve_settings(args: argparse.Namespace, base: ServiceSettings) -> ServiceSettings:
    return ServiceSettings(
        host=args.host or base.host,
        port=args.port if args.port is not None else base.port,
        log_level=args.log_level or base.log_level,
        uniform_not_found=(
            args.uniform_not_found if args.uniform_not_found is not None else base.uniform_not_found
        ),
    )


def _serve(settings: ServiceSettings) -> None:
    from registry.api import create_app
    from registry.store import UserStore
    import uvicorn

    logger.info("Starting user registry on http://%s:%s", settings.host, settings.port)
    if settings.uniform_not_found:
        logger.info("Missing users are reported as 404 for every operation")

    app = create_app(store=UserStore(), uniform_not_found=settings.uniform_not_found)
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
    )


def _list_users(service_url: str) -> int:
    endpoint = service_url.rstrip("/") + "/users"

    try:
        response = httpx.get(endpoint, timeout=10.0)
    except httpx.HTTPError as exc:
        print(f"Failed to contact registry service: {exc}")
        return 1

    if response.status_code != 200:
        print(f"Service responded with {response.status_code}: {response.text.strip()}")
        return 1

    try:
        users = response.json()
    except ValueError:
        print("Service returned an unexpected response format.")
        return 1

    if not users:
        print("No users are currently registered.")
        return 0

    print(f"{len(users)} user(s) found:")
    print(f"{'ID':>6}  {'Name':<24}  Lastname")
    print("-" * 60)
    for user in users:
        print(f"{user.get('id', '?'):>6}  {user.get('name', ''):<24}  {user.get('lastname', '')}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for CLI usage."""

    args = _parse_args(argv)

    if args.command == "list-users":
        logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")
        return _list_users(args.service_url)

    try:
        settings = _resolve_settings(args, load_settings())
    except ValueError as exc:
        raise SystemExit(f"Invalid configuration: {exc}") from exc

    level_name = "DEBUG" if settings.log_level == "trace" else settings.log_level.upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
    )
    _serve(settings)
    return 0


if __name__ == "__main__":
    sys.exit(main())
