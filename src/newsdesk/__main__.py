# ABOUTME: CLI entry point for the newsdesk publishing service.
# ABOUTME: Provides subcommands: serve, init-db, ai-status.

import argparse
import asyncio
import json
import logging
import sys

import structlog

from newsdesk.config import get_settings


def configure_logging() -> None:
    """Configure structlog for console or JSON output."""
    settings = get_settings()

    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    if settings.log_format == "json":
        structlog.configure(
            processors=[
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.add_log_level,
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(log_level),
        )
    else:
        structlog.configure(
            processors=[
                structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
                structlog.processors.add_log_level,
                structlog.dev.ConsoleRenderer(colors=True),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(log_level),
        )


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the HTTP API under uvicorn."""
    import uvicorn

    settings = get_settings()
    log = structlog.get_logger()
    host = args.host or settings.app_host
    port = args.port or settings.app_port
    log.info("cmd_serve_start", host=host, port=port)

    uvicorn.run("newsdesk.web.app:app", host=host, port=port, reload=args.reload)
    return 0


def cmd_init_db(_args: argparse.Namespace) -> int:
    """Create all tables that do not exist yet."""
    from newsdesk.db.session import close_db, init_db

    log = structlog.get_logger()
    log.info("cmd_init_db_start")

    async def _run() -> None:
        try:
            await init_db()
        finally:
            await close_db()

    try:
        asyncio.run(_run())
    except Exception:
        log.exception("cmd_init_db_failed")
        return 1

    log.info("cmd_init_db_complete")
    return 0


def cmd_ai_status(args: argparse.Namespace) -> int:
    """Print the AI pipeline status of a base article as JSON.

    Runs with super-admin visibility: operators use it across tenants.
    """
    from newsdesk.db.repository import ArticleRepository, NewspaperArticleRepository
    from newsdesk.db.session import close_db, get_session
    from newsdesk.errors import NotFoundError
    from newsdesk.models import Principal, RoleName
    from newsdesk.publishing.articles import NewspaperArticleService

    log = structlog.get_logger()
    operator = Principal(user_id="cli", role=RoleName.SUPER_ADMIN.value)

    async def _run() -> dict:
        try:
            async with get_session() as session:
                service = NewspaperArticleService(
                    NewspaperArticleRepository(session), ArticleRepository(session)
                )
                return await service.ai_status(operator, args.article_id)
        finally:
            await close_db()

    try:
        status = asyncio.run(_run())
    except NotFoundError:
        log.error("cmd_ai_status_not_found", article_id=args.article_id)
        return 1
    except Exception:
        log.exception("cmd_ai_status_failed", article_id=args.article_id)
        return 1

    print(json.dumps(status, indent=2, ensure_ascii=False))
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="newsdesk",
        description="Multi-tenant newspaper publishing service",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default=None, help="Bind address (default: APP_HOST)")
    serve_parser.add_argument(
        "--port", type=int, default=None, help="Bind port (default: APP_PORT)"
    )
    serve_parser.add_argument("--reload", action="store_true", help="Reload on code changes")

    subparsers.add_parser("init-db", help="Create database tables")

    status_parser = subparsers.add_parser(
        "ai-status",
        help="Show AI pipeline status for a base article",
    )
    status_parser.add_argument("article_id", help="Base article ID")

    return parser


def main() -> int:
    """Main entry point."""
    configure_logging()

    parser = create_parser()
    args = parser.parse_args()

    commands = {
        "serve": cmd_serve,
        "init-db": cmd_init_db,
        "ai-status": cmd_ai_status,
    }

    handler = commands.get(args.command)
    if handler:
        return handler(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
