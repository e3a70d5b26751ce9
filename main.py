"""CLI entrypoint: fetch sources, list the registry, serve the API."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from typing import Dict, List

from rich.table import Table

from core import FetchResult
from sources import group_by_column
from utils.exceptions import UnknownSourceError
from utils.logger import configure_pipeline_logging, console
from webapp.runtime import get_orchestrator


def _print_table(results: Dict[str, FetchResult], limit: int) -> None:
    for source_id, result in results.items():
        if not result.ok:
            console.print(
                f"[bold red]{source_id}[/bold red] unavailable "
                f"({result.error_kind.value if result.error_kind else 'error'}): {result.message}"
            )
            continue
        table = Table(title=f"{source_id} ({len(result.items)} items)")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Title", style="bold")
        table.add_column("Info")
        table.add_column("URL", style="cyan", overflow="fold")
        for idx, item in enumerate(result.items[:limit], start=1):
            info = item.extra.info if item.extra and item.extra.info else ""
            table.add_row(str(idx), item.title, info, item.url)
        console.print(table)


async def _fetch(ids: List[str]) -> Dict[str, FetchResult]:
    return await get_orchestrator().fetch_many(ids)


def main() -> None:
    parser = argparse.ArgumentParser(description="Hot-list aggregator CLI")
    parser.add_argument("--verbose", "-v", action="store_true")
    parser.add_argument("--log-file", default=None, help="also write logs to logs/<name>")
    sub = parser.add_subparsers(dest="command", required=True)

    fetch = sub.add_parser("fetch")
    fetch.add_argument("ids", nargs="+")
    fetch.add_argument("--table", action="store_true", help="render as rich tables")
    fetch.add_argument("--limit", type=int, default=15)

    sub.add_parser("sources")

    serve = sub.add_parser("serve")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--reload", action="store_true")

    args = parser.parse_args()
    configure_pipeline_logging(
        level=logging.DEBUG if args.verbose else logging.INFO,
        log_file=args.log_file,
    )

    if args.command == "fetch":
        try:
            results = asyncio.run(_fetch(args.ids))
        except UnknownSourceError as exc:
            parser.error(str(exc))
        if args.table:
            _print_table(results, max(1, int(args.limit)))
        else:
            payload = {source_id: result.to_payload() for source_id, result in results.items()}
            print(json.dumps(payload, ensure_ascii=False, indent=2))
        return

    if args.command == "sources":
        registry = get_orchestrator().registry
        for label, entries in group_by_column(registry.list_visible()):
            table = Table(title=label)
            table.add_column("ID", style="cyan")
            table.add_column("Name")
            table.add_column("Title")
            table.add_column("Aliases", style="dim")
            for key, meta in entries:
                table.add_row(key, meta.name, meta.title or "", ", ".join(registry.aliases_of(key)))
            console.print(table)
        return

    if args.command == "serve":
        import uvicorn

        uvicorn.run("webapp.app:app", host=args.host, port=args.port, reload=args.reload)
        return

    parser.error(f"unknown command: {args.command}")


if __name__ == "__main__":
    main()
