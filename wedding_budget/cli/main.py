"""Command-line interface for the wedding budget service."""

from __future__ import annotations

import argparse
import os

from wedding_budget import __version__
from wedding_budget.logging import configure_cli_logging
from wedding_budget.settings import CONFIG_ENV_FLAG, ConfigError, Settings, load_settings

DESCRIPTION = "Wedding budget expense service"


def _add_serve_subparser(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
) -> None:
    serve = subparsers.add_parser("serve", help="Run the HTTP API with uvicorn")
    serve.add_argument("--host", help="Interface to bind (default from settings)")
    serve.add_argument("--port", type=int, help="Port to bind (default from settings)")
    serve.add_argument("--reload", action="store_true", help="Reload on source changes")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="wedding-budget", description=DESCRIPTION)
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--json-logs",
        action=argparse.BooleanOptionalAction,
        default=False,
        help="Mirror logs to artifacts/logs/wedding_budget.log in JSON format",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default INFO)")
    parser.add_argument("--config", help="YAML settings file")
    sub = parser.add_subparsers(dest="cmd", required=True)
    _add_serve_subparser(sub)
    sub.add_parser("init-db", help="Create the database tables")
    sub.add_parser("total", help="Print the sum of all expense amounts")
    sub.add_parser("summary", help="Print expense aggregates per payment status")
    return parser


def _handle_serve(args: argparse.Namespace, settings: Settings) -> None:
    import uvicorn

    uvicorn.run(
        "wedding_budget.server:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        reload=bool(args.reload),
    )


def _handle_init_db() -> None:
    from wedding_budget import database

    database.init_db()
    print(f"[wedding-budget] init-db url={database.engine.url.render_as_string(hide_password=True)}")


def _handle_total() -> None:
    from wedding_budget import crud, database

    database.init_db()
    with database.session_scope() as session:
        total = crud.total_amount(session)
    print(f"[wedding-budget] total={total}")


def _handle_summary() -> None:
    from wedding_budget import crud, database

    database.init_db()
    with database.session_scope() as session:
        rows = crud.status_summary(session)
    for row in rows:
        print(
            f"[wedding-budget] status={row.payment_status.value!r} count={row.count} "
            f"amount={row.total_amount} paid={row.total_paid} remaining={row.remaining_amount}"
        )


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_cli_logging(json_logs=bool(args.json_logs), level=args.log_level)
    if args.config:
        # The database module reads settings at import time.
        os.environ[CONFIG_ENV_FLAG] = args.config
    try:
        settings = load_settings()
    except ConfigError as exc:
        raise SystemExit(f"[wedding-budget] invalid configuration: {exc}") from exc

    if args.cmd == "serve":
        _handle_serve(args, settings)
    elif args.cmd == "init-db":
        _handle_init_db()
    elif args.cmd == "total":
        _handle_total()
    elif args.cmd == "summary":
        _handle_summary()
    else:
        print(f"[wedding-budget] command = {args.cmd}")


if __name__ == "__main__":
    main()
