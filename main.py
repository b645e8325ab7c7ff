"""Command-line interface for the complaint desk service."""

from __future__ import annotations
import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Sequence

try:
    import httpx
except ImportError as exc:  # pragma: no cover - exercised in environments missing deps
    raise SystemExit(
        "The 'httpx' package is required. Execute `pip install -e .` to install dependencies."
    ) from exc

from complaintdesk.config import ServiceConfig, load_config_from_env, load_service_config
from complaintdesk.security import SECRET_HEADER

logger = logging.getLogger("complaintdesk.main")

_DEFAULT_SERVICE_URL = "http://localhost:8080"


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Complaint desk service utilities")
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve")

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP complaint service")
    serve_parser.add_argument("--host", default=None, help="Bind address (default: from config, 0.0.0.0)")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port for the HTTP API (default: from config, 8080)",
    )
    serve_parser.add_argument(
        "--config",
        default=None,
        help="Path to a YAML configuration file (overrides COMPLAINTDESK_CONFIG)",
    )

    admin_parser = subparsers.add_parser(
        "admin", help="Launch the interactive administration console"
    )
    admin_parser.add_argument(
        "--service-url",
        default=None,
        help=f"Base URL of a running complaint service (default: {_DEFAULT_SERVICE_URL})",
    )
    admin_parser.add_argument(
        "--admin-secret",
        default=None,
        help="Admin secret code. Defaults to the COMPLAINTDESK_ADMIN_SECRET environment variable.",
    )

    args_list = list(argv) if argv is not None else sys.argv[1:]
    known_commands = {"serve", "admin"}

    if not args_list:
        args_list = ["serve"]
    else:
        first = args_list[0]
        if first in ("-h", "--help"):
            return parser.parse_args(args_list)
        if first not in known_commands:
            if any(flag in args_list for flag in ("-h", "--help")):
                return parser.parse_args(args_list)
            args_list = ["serve", *args_list]

    return parser.parse_args(args_list)


def _load_config(config_path: str | None) -> ServiceConfig:
    if config_path:
        return load_service_config(Path(config_path).expanduser())
    return load_config_from_env()


def _serve(*, config: ServiceConfig, host: str | None, port: int | None) -> None:
    from complaintdesk.service import create_app
    import uvicorn

    bind_host = host or config.host
    bind_port = port or config.port
    logger.info("Starting complaint API on http://%s:%s", bind_host, bind_port)

    app = create_app(config=config)
    uvicorn.run(app, host=bind_host, port=bind_port, log_level=config.log_level)


def _run_admin_cli(client: httpx.Client) -> None:
    """Provide an interactive console for reviewing and resolving complaints."""

    print("Complaint Desk Administration Console")
    print("Press Ctrl+C at any time to exit.\n")

    try:
        while True:
            print("Select an option:")
            print("  1) List all complaints")
            print("  2) Resolve a complaint")
            print("  3) Show service health")
            print("  4) Exit")

            choice = input("Enter choice [1-4]: ").strip()

            if choice == "1":
                _list_complaints(client)
            elif choice == "2":
                complaint_id = input("Complaint ID: ").strip()
                if complaint_id:
                    _resolve_complaint(client, complaint_id)
                else:
                    print("No complaint ID entered.")
            elif choice == "3":
                _show_health(client)
            elif choice == "4":
                print("Goodbye!")
                return
            else:
                print("Invalid selection. Please choose a number from the menu.\n")

            print()
    except KeyboardInterrupt:
        print("\nExiting administration console.")


def _list_complaints(client: httpx.Client) -> None:
    try:
        response = client.get("/getAllComplaintsForAdmin")
    except httpx.HTTPError as exc:
        print(f"Failed to contact complaint service: {exc}")
        return

    if response.status_code in (401, 403):
        print("The service rejected the admin secret. Verify the configured credentials.")
        return
    if response.status_code != 200:
        print(f"Service responded with {response.status_code}: {response.text.strip()}")
        return

    complaints = response.json().get("complaints", [])
    if not complaints:
        print("No complaints have been submitted.")
        return

    complaints.sort(key=lambda item: item.get("date", ""))
    print(f"{len(complaints)} complaint(s) found:")
    print(f"{'ID':<32}  {'Rating':>6}  {'Status':<8}  Title")
    print("-" * 80)
    for complaint in complaints:
        state = "resolved" if complaint.get("resolved") else "open"
        print(
            f"{complaint.get('id', '?'):<32}  {complaint.get('rating', '?'):>6}  "
            f"{state:<8}  {complaint.get('title', '')}"
        )


def _resolve_complaint(client: httpx.Client, complaint_id: str) -> None:
    try:
        response = client.post("/resolveComplaint", json={"complaint_id": complaint_id})
    except httpx.HTTPError as exc:
        print(f"Failed to contact complaint service: {exc}")
        return

    if response.status_code == 404:
        print(f"Complaint {complaint_id} does not exist.")
        return
    if response.status_code != 200:
        print(f"Service responded with {response.status_code}: {response.text.strip()}")
        return

    print(f"Complaint {complaint_id} marked as resolved.")


def _show_health(client: httpx.Client) -> None:
    try:
        response = client.get("/healthz")
    except httpx.HTTPError as exc:
        print(f"Failed to contact complaint service: {exc}")
        return

    if response.status_code != 200:
        print(f"Service responded with {response.status_code}: {response.text.strip()}")
        return

    payload = response.json()
    print(
        f"Service is {payload.get('status', 'unknown')}: "
        f"{payload.get('users', 0)} user(s), {payload.get('complaints', 0)} complaint(s)."
    )


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for CLI usage."""

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")

    args = _parse_args(argv)

    if args.command == "serve":
        _serve(config=_load_config(args.config), host=args.host, port=args.port)
    elif args.command == "admin":
        secret = args.admin_secret or os.getenv("COMPLAINTDESK_ADMIN_SECRET")
        if not secret:
            raise SystemExit(
                "No admin secret configured. Pass --admin-secret or set COMPLAINTDESK_ADMIN_SECRET."
            )
        base_url = (args.service_url or _DEFAULT_SERVICE_URL).rstrip("/")
        with httpx.Client(base_url=base_url, headers={SECRET_HEADER: secret}, timeout=10.0) as client:
            _run_admin_cli(client)


if __name__ == "__main__":
    main()
