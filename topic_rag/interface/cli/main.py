"""`topic-rag` command line entry point."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Callable

from topic_rag.config.composition import Container, build_container
from topic_rag.config.logging_setup import configure_logging
from topic_rag.config.settings import AppSettings
from topic_rag.domain.errors import DomainError
from topic_rag.interface.cli.admin import cmd_init_collections, cmd_stats, cmd_topics
from topic_rag.interface.cli.ingest import cmd_ingest
from topic_rag.interface.cli.query import cmd_cross, cmd_query

Handler = Callable[[argparse.Namespace, Container], int]

_HANDLERS: dict[str, Handler] = {
    "init-collections": cmd_init_collections,
    "stats": cmd_stats,
    "topics": cmd_topics,
    "ingest": cmd_ingest,
    "query": cmd_query,
    "cross": cmd_cross,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="topic-rag",
        description="Topic-isolated document ingestion and RAG queries",
    )
    sub = parser.add_subparsers(dest="command", help="Commands")

    p_serve = sub.add_parser("serve", help="Run the HTTP API")
    p_serve.add_argument("--host", default="0.0.0.0")
    p_serve.add_argument("--port", type=int, default=8080)
    p_serve.add_argument("--reload", action="store_true")

    sub.add_parser("init-collections", help="Create missing topic collections")
    sub.add_parser("stats", help="Vector counts per topic")
    sub.add_parser("topics", help="List configured topics")

    p_ingest = sub.add_parser("ingest", help="Upload one document into a topic")
    p_ingest.add_argument("--topic", required=True)
    p_ingest.add_argument("--path", required=True)
    p_ingest.add_argument(
        "--type", choices=["pdf", "markdown"], help="Default: derived from the file suffix"
    )

    p_query = sub.add_parser("query", help="Ask one topic")
    p_query.add_argument("--topic", required=True)
    p_query.add_argument("--question", required=True)
    p_query.add_argument("--k", type=int, default=0, help="Chunks to retrieve (default: 5)")

    p_cross = sub.add_parser("cross", help="Ask several topics at once")
    p_cross.add_argument("--topics", required=True, help="Comma-separated topic ids")
    p_cross.add_argument("--question", required=True)

    return parser


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run(
        "topic_rag.interface.http.api:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
    )
    return 0


def main(argv: list[str] | None = None, container: Container | None = None) -> int:
    """Main CLI entry point.

    Returns:
        Exit code (0=success, 1=failure)
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    settings = container.settings if container is not None else AppSettings()
    configure_logging(settings.log_level)

    if args.command == "serve":
        return _serve(args)

    if container is None:
        try:
            container = build_container(settings)
        except DomainError as ex:
            print(f"✗ Startup failed: {ex}")
            return 1

    return _HANDLERS[args.command](args, container)


if __name__ == "__main__":
    sys.exit(main())
