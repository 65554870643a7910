"""Website Brief Pipeline — Entry Point.

Usage:
    # Analyze a site and store the brief
    python main.py analyze https://example.com --max-pages 8

    # Analyze without storing, writing the brief to a file instead
    python main.py analyze https://example.com --no-save --output brief.json

    # Show a stored brief
    python main.py show https://example.com

    # List stored briefs / recent runs
    python main.py list
    python main.py runs
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

import config
from pipeline import storage
from pipeline.errors import BriefPipelineError
from pipeline.llm import get_usage_summary, reset_usage
from pipeline.service import analyze_and_record
from schemas.brief import Brief

console = Console()


def setup_logging():
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
        format="%(message)s",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def print_brief(brief: dict):
    """Render the headline parts of a brief."""
    summary = brief.get("brand_summary") or {}
    meta = brief.get("metadata") or {}
    ready = brief.get("ready_for_generation")

    console.print(
        Panel(
            f"[bold]{summary.get('company_name') or 'Unknown company'}[/bold]\n"
            f"{summary.get('one_liner') or ''}\n\n"
            f"Industry: {summary.get('industry') or '-'}\n"
            f"Pages analyzed: {meta.get('pages_analyzed', 0)}  "
            f"Analyzed at: {meta.get('analyzed_at') or '-'}",
            title=meta.get("website_url") or "Brief",
            border_style="green" if ready else "yellow",
        )
    )

    pillars = brief.get("messaging_pillars") or []
    if pillars:
        table = Table(title="Messaging Pillars")
        table.add_column("Pillar", style="cyan")
        table.add_column("Emotional hook")
        table.add_column("Proof points", style="dim")
        for p in pillars:
            table.add_row(
                p.get("pillar") or "",
                p.get("emotional_hook") or "",
                "; ".join(p.get("proof_points") or []),
            )
        console.print(table)

    if ready:
        console.print("[green]Ready for asset generation[/green]")
    else:
        console.print("[yellow]Not ready for generation: missing company name or messaging pillars[/yellow]")


def cmd_analyze(args: argparse.Namespace) -> int:
    storage.init_db()
    reset_usage()
    console.print(
        Panel(
            f"[bold cyan]WEBSITE ANALYSIS[/bold cyan]\n{args.url}\nmax pages: {args.max_pages}",
            border_style="bright_blue",
        )
    )

    try:
        brief: Brief = analyze_and_record(args.url, max_pages=args.max_pages, save=not args.no_save)
    except BriefPipelineError as exc:
        console.print(f"[red]Analysis failed ({type(exc).__name__}): {exc}[/red]")
        return 1

    payload = brief.model_dump(mode="json")
    print_brief(payload)

    if args.output:
        output_path = Path(args.output)
        output_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        console.print(f"  [green]Brief written:[/green] {output_path}")

    usage = get_usage_summary()
    console.print(
        f"[dim]{usage['calls']} AI calls, {usage['total_tokens']} tokens "
        f"({usage['total_input_tokens']} in / {usage['total_output_tokens']} out)[/dim]"
    )
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    storage.init_db()
    brief = storage.get_brief(args.url)
    if brief is None:
        console.print(f"[red]No brief stored for {args.url}[/red]")
        return 1
    if args.json:
        console.print_json(json.dumps(brief))
    else:
        print_brief(brief)
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    storage.init_db()
    table = Table(title="Stored Briefs")
    table.add_column("Website", style="cyan")
    table.add_column("Company")
    table.add_column("Ready", style="bold")
    table.add_column("Updated", style="dim")
    for row in storage.list_briefs(limit=args.limit):
        table.add_row(
            row["website_url"],
            row["company_name"] or "-",
            "[green]yes[/green]" if row["ready_for_generation"] else "[yellow]no[/yellow]",
            row["updated_at"],
        )
    console.print(table)
    return 0


def cmd_runs(args: argparse.Namespace) -> int:
    storage.init_db()
    table = Table(title="Analysis Runs")
    table.add_column("#", style="dim")
    table.add_column("Website", style="cyan")
    table.add_column("Status", style="bold")
    table.add_column("Pages")
    table.add_column("Time", style="green")
    for run in storage.list_runs(website_url=args.url, limit=args.limit):
        status = run["status"]
        if status == "failed":
            status = f"[red]failed: {(run['error_message'] or '')[:50]}[/red]"
        elapsed = run["elapsed_seconds"]
        table.add_row(
            str(run["id"]),
            run["website_url"],
            status,
            str(run["pages_analyzed"] if run["pages_analyzed"] is not None else "-"),
            f"{elapsed:.1f}s" if elapsed is not None else "-",
        )
    console.print(table)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Build a marketing brief from a website.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_analyze = sub.add_parser("analyze", help="Discover, analyze and synthesize a site")
    p_analyze.add_argument("url", help="Seed page URL")
    p_analyze.add_argument("--max-pages", type=int, default=config.MAX_PAGES)
    p_analyze.add_argument("--no-save", action="store_true", help="Don't store the brief")
    p_analyze.add_argument("--output", "-o", help="Also write the brief JSON to this file")
    p_analyze.set_defaults(func=cmd_analyze)

    p_show = sub.add_parser("show", help="Show a stored brief")
    p_show.add_argument("url")
    p_show.add_argument("--json", action="store_true", help="Print raw JSON")
    p_show.set_defaults(func=cmd_show)

    p_list = sub.add_parser("list", help="List stored briefs")
    p_list.add_argument("--limit", type=int, default=50)
    p_list.set_defaults(func=cmd_list)

    p_runs = sub.add_parser("runs", help="List recent analysis runs")
    p_runs.add_argument("--url", default=None)
    p_runs.add_argument("--limit", type=int, default=20)
    p_runs.set_defaults(func=cmd_runs)

    return parser


def main(argv: list[str] | None = None) -> int:
    setup_logging()
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
