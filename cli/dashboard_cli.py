#!/usr/bin/env python3
"""Creative Usage Dashboard CLI

Command-line tool for the multi-project creative dashboard:
- Aggregate local CSV exports
- Configure the Google Sheets feeding each project
- Refresh the dashboard from Google Sheets
- Keep refreshing on a timer

Usage:
    python cli/dashboard_cli.py aggregate <csv_file>... [--project NAME ...] [--json]
    python cli/dashboard_cli.py configure <project> --url URL --gid GID
    python cli/dashboard_cli.py remove <project>
    python cli/dashboard_cli.py show-config
    python cli/dashboard_cli.py refresh [--json]
    python cli/dashboard_cli.py watch [--interval SECONDS]

Examples:
    python cli/dashboard_cli.py aggregate ~/downloads/snellcoin.csv --project SnellCoin
    python cli/dashboard_cli.py configure EarnTube --url 1AbC...xyz --gid 123456
    python cli/dashboard_cli.py refresh --status active --performance high
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import Dict, List, Optional

sys.path.insert(0, str(Path(__file__).parent.parent))

from analytics.dashboard_models import CreativeAnalytics, DashboardView
from analytics.filters import PERFORMANCE_TIERS, STATUSES, filter_creatives
from collectors.sheets_client import SheetFetchError
from config.config_manager import ConfigError, ConfigManager, DashboardConfig
from services.dashboard_service import DashboardService, build_dashboard, describe_error
from sheets.parser import SheetError

PERFORMANCE_ICONS = {"high": "▲", "medium": "■", "low": "▼"}


# ============================================================================
# RENDERING
# ============================================================================

def format_creative_table(creatives: List[CreativeAnalytics], limit: Optional[int] = None) -> str:
    """Plain-text table of creatives."""
    lines = [
        f"{'Creative':<32} {'Project':<12} {'Status':<7} {'Perf':<7} "
        f"{'Current':>8} {'Total':>8} {'Days':>5} {'Avg/day':>8}  Accounts",
        "-" * 110,
    ]
    shown = creatives[:limit] if limit else creatives
    for c in shown:
        if c.status == "active":
            accounts = ", ".join(f"{a.account} ({a.users})" for a in c.current_accounts)
        else:
            accounts = ", ".join(c.accounts)
        lines.append(
            f"{c.creative[:32]:<32} {c.project[:12]:<12} {c.status:<7} "
            f"{PERFORMANCE_ICONS[c.performance]} {c.performance:<5} "
            f"{c.current_users:>8,} {c.total_users:>8,} {c.days_active:>5} "
            f"{c.avg_users_per_day:>8.1f}  {accounts}"
        )
    if limit and len(creatives) > limit:
        lines.append(f"... and {len(creatives) - limit} more")
    return "\n".join(lines)


def format_dashboard(
    view: DashboardView,
    creatives: Optional[List[CreativeAnalytics]] = None,
    config: Optional[DashboardConfig] = None,
    limit: Optional[int] = None,
) -> str:
    """Plain-text dashboard: summary, per-project cards and the creative table."""
    summary = view.summary
    creatives = view.creative_analytics if creatives is None else creatives

    lines = [
        "=" * 60,
        "CREATIVE USAGE DASHBOARD",
        "=" * 60,
        f"  Latest date:        {view.latest_date or 'n/a'}",
        f"  Creatives:          {summary.total_creatives:,} "
        f"({summary.active_creatives:,} active, {summary.free_creatives:,} free)",
        f"  Accounts:           {summary.total_accounts:,} ({summary.account_columns} account columns)",
        f"  Users (all time):   {summary.total_users_all_time:,}",
        f"  Users (current):    {summary.total_current_users:,}",
        f"  Avg per creative:   {summary.avg_users_per_creative:.1f}",
        "",
    ]

    for key, stats in view.project_stats.items():
        label = key
        if config is not None and key in config.projects:
            project = config.projects[key]
            label = f"{project.emoji} {project.name}".strip()
        lines.append(
            f"  {label}: {stats.total_creatives} creatives, {stats.active_creatives} active, "
            f"{stats.current_users:,} current / {stats.total_users:,} total users, "
            f"{stats.total_accounts} accounts"
        )

    lines.append("")
    lines.append(format_creative_table(creatives, limit=limit))
    return "\n".join(lines)


def _selected_creatives(view: DashboardView, args) -> List[CreativeAnalytics]:
    return filter_creatives(
        view,
        search=args.search,
        status=args.status,
        project=args.filter_project,
        performance=args.performance,
    )


def _print_view(view: DashboardView, args, config: Optional[DashboardConfig] = None) -> None:
    creatives = _selected_creatives(view, args)
    if args.json:
        payload = view.to_dict()
        payload["creativeAnalytics"] = [c.to_dict() for c in creatives]
        print(json.dumps(payload, indent=2, ensure_ascii=False))
    else:
        print(format_dashboard(view, creatives, config=config, limit=args.limit))


# ============================================================================
# COMMANDS
# ============================================================================

def _project_names(files: List[str], names: Optional[List[str]]) -> List[str]:
    if names:
        if len(names) != len(files):
            print("❌ --project must be given once per file")
            sys.exit(1)
    else:
        names = [Path(f).stem for f in files]

    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        print(f"❌ Duplicate project names: {', '.join(duplicates)} (use --project to name each file)")
        sys.exit(1)
    return names


def cmd_aggregate(args):
    """Aggregate local CSV exports."""
    projects = _project_names(args.files, args.project)
    csv_texts: Dict[str, str] = {}

    for project, csv_path in zip(projects, args.files):
        if not os.path.exists(csv_path):
            print(f"❌ File not found: {csv_path}")
            sys.exit(1)
        csv_texts[project] = Path(csv_path).read_text(encoding="utf-8-sig")

    try:
        view = build_dashboard(csv_texts)
    except SheetError as e:
        print(f"❌ AGGREGATION FAILED: {e}")
        sys.exit(1)

    _print_view(view, args)


def cmd_configure(args):
    """Add or update a project."""
    manager = ConfigManager(args.config_dir)
    try:
        project = manager.update_project(
            args.name_key,
            url=args.url,
            gid=args.gid,
            name=args.display_name,
            emoji=args.emoji,
        )
    except ConfigError as e:
        print(f"❌ {e}")
        sys.exit(1)

    print(f"✓ Saved {args.name_key}: {project.emoji} {project.name}")
    if project.is_configured:
        print(f"  CSV URL: {project.csv_url}")
    else:
        print("  ⚠ URL or GID still missing")


def cmd_remove(args):
    """Remove a project."""
    manager = ConfigManager(args.config_dir)
    try:
        manager.remove_project(args.name_key)
    except ConfigError as e:
        print(f"❌ {e}")
        sys.exit(1)
    print(f"✓ Removed {args.name_key}")


def cmd_show_config(args):
    """Show configured projects."""
    manager = ConfigManager(args.config_dir)
    try:
        config = manager.get_config()
    except ConfigError as e:
        print(f"❌ {e}")
        sys.exit(1)

    print(f"Config file: {manager.config_path}")
    print(f"Refresh interval: {config.refresh_interval_seconds}s")
    for key, project in config.projects.items():
        state = "✓" if project.is_configured else "✗"
        print(f"  {state} {key}: {project.emoji} {project.name}")
        print(f"      url: {project.url or '-'}")
        print(f"      gid: {project.gid or '-'}")
    if not config.is_configured:
        print("\n⚠ Some projects are not configured yet")


def _load_config(args) -> DashboardConfig:
    try:
        config = ConfigManager(args.config_dir).get_config()
    except ConfigError as e:
        print(f"❌ {e}")
        sys.exit(1)
    if not args.verbose:
        logging.getLogger().setLevel(config.log_level.upper())
    return config


def cmd_refresh(args):
    """Fetch every configured sheet once and print the dashboard."""
    config = _load_config(args)
    service = DashboardService(config)

    try:
        view = asyncio.run(service.refresh())
    except (ConfigError, SheetFetchError, SheetError) as e:
        print(f"❌ {describe_error(e)}")
        sys.exit(1)

    _print_view(view, args, config=config)


def cmd_watch(args):
    """Refresh on a timer and print the dashboard after each refresh."""
    config = _load_config(args)
    if not config.is_configured:
        print("❌ Please configure your Google Sheets URLs first")
        sys.exit(1)

    service = DashboardService(config)

    def _on_refresh(svc: DashboardService) -> None:
        if svc.last_error:
            print(f"❌ {svc.last_error}")
            return
        print(f"\nLast update: {svc.last_update:%Y-%m-%d %H:%M:%S}")
        _print_view(svc.view, args, config=config)

    try:
        asyncio.run(service.run_forever(args.interval, on_refresh=_on_refresh))
    except KeyboardInterrupt:
        print("\nStopped")


# ============================================================================
# ENTRYPOINT
# ============================================================================

def _add_view_options(parser):
    parser.add_argument("--json", action="store_true", help="Print the dashboard as JSON")
    parser.add_argument("--search", help="Filter by creative or account name")
    parser.add_argument("--status", choices=STATUSES, help="Filter by status")
    parser.add_argument("--performance", choices=PERFORMANCE_TIERS, help="Filter by performance tier")
    parser.add_argument("--filter-project", dest="filter_project", help="Filter by project key")
    parser.add_argument("--limit", type=int, default=None, help="Max table rows to print")


def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(
        description="Multi-project creative usage dashboard",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s aggregate sheet.csv --project SnellCoin   Aggregate a local export
  %(prog)s configure EarnTube --url <id> --gid 0     Configure a project
  %(prog)s show-config                               Show configured projects
  %(prog)s refresh --status active                   Fetch sheets and print dashboard
  %(prog)s watch --interval 300                      Refresh every 5 minutes
        """
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--config-dir", type=Path, default=None, help="Configuration directory")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Aggregate command
    aggregate_parser = subparsers.add_parser("aggregate", help="Aggregate local CSV exports")
    aggregate_parser.add_argument("files", nargs="+", help="Path to CSV file(s)")
    aggregate_parser.add_argument(
        "--project", action="append", help="Project key for each file (default: file name)"
    )
    _add_view_options(aggregate_parser)
    aggregate_parser.set_defaults(func=cmd_aggregate)

    # Configure command
    configure_parser = subparsers.add_parser("configure", help="Add or update a project")
    configure_parser.add_argument("name_key", metavar="project", help="Project key")
    configure_parser.add_argument("--url", help="Spreadsheet URL or ID")
    configure_parser.add_argument("--gid", help="Sheet tab GID")
    configure_parser.add_argument("--name", dest="display_name", help="Display name")
    configure_parser.add_argument("--emoji", help="Display emoji")
    configure_parser.set_defaults(func=cmd_configure)

    # Remove command
    remove_parser = subparsers.add_parser("remove", help="Remove a project")
    remove_parser.add_argument("name_key", metavar="project", help="Project key")
    remove_parser.set_defaults(func=cmd_remove)

    # Show config command
    show_parser = subparsers.add_parser("show-config", help="Show configured projects")
    show_parser.set_defaults(func=cmd_show_config)

    # Refresh command
    refresh_parser = subparsers.add_parser("refresh", help="Fetch sheets and print the dashboard")
    _add_view_options(refresh_parser)
    refresh_parser.set_defaults(func=cmd_refresh)

    # Watch command
    watch_parser = subparsers.add_parser("watch", help="Refresh the dashboard on a timer")
    watch_parser.add_argument("--interval", type=int, default=None, help="Seconds between refreshes")
    _add_view_options(watch_parser)
    watch_parser.set_defaults(func=cmd_watch)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    args.func(args)


if __name__ == "__main__":
    main()
