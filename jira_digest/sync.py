#!/usr/bin/env python3
"""
Jira Sync - pull assigned issues into today's TODO list

This script:
1. Lists the open issues assigned to the current Jira user
2. Prints them and writes daily/YYYY-MM-DD.md
3. Posts a summary to Slack (SLACK_WEBHOOK_URL) unless --no-slack
4. Once per ISO week, writes weekly/YYYY-Www.md for the trailing 7 days

Usage:
  jira-sync
  jira-sync --no-slack
  jira-sync --weekly      # rewrite this week's summary
  jira-sync --dry-run
"""

import argparse
import logging
import os
import sys
from collections import Counter, OrderedDict
from datetime import date, timedelta
from typing import Dict, List, Optional

from . import commands, console
from .config import Settings, load_settings
from .errors import CommandError, DigestError, ToolMissingError
from .files import atomic_write
from .jira_cli import Issue, JiraCLI
from .slack import SlackNotifier, build_todo_message

logger = logging.getLogger(__name__)

WEEKLY_WINDOW = "-7d"


def daily_path(settings: Settings, day: date) -> str:
    return os.path.join(settings.daily_dir, f"{day.isoformat()}.md")


def weekly_path(settings: Settings, day: date) -> str:
    iso_year, iso_week, _ = day.isocalendar()
    return os.path.join(settings.weekly_dir, f"{iso_year}-W{iso_week:02d}.md")


def render_daily(day: date, issues: List[Issue]) -> str:
    lines = [f"# TODO {day.isoformat()}", ""]
    lines.extend(issue.todo_line() for issue in issues)
    return "\n".join(lines) + "\n"


def group_by_status(issues: List[Issue]) -> Dict[str, List[Issue]]:
    """Group issues by status, keeping the order statuses first appear in"""
    groups: Dict[str, List[Issue]] = OrderedDict()
    for issue in issues:
        groups.setdefault(issue.status, []).append(issue)
    return groups


def render_weekly(day: date, issues: List[Issue]) -> str:
    """Weekly summary: counts by status and priority, then issues grouped by status"""
    iso_year, iso_week, _ = day.isocalendar()
    start = day - timedelta(days=6)
    lines = [
        f"Week {iso_year}-W{iso_week:02d} ({start.isoformat()} to {day.isoformat()})",
        f"Issues updated in the last 7 days: {len(issues)}",
        "",
        "By status:",
    ]
    for status, n in sorted(Counter(i.status for i in issues).items(), key=lambda kv: (-kv[1], kv[0])):
        lines.append(f"- {status}: {n}")
    lines.append("")
    lines.append("By priority:")
    for priority, n in sorted(Counter(i.priority or "None" for i in issues).items(),
                              key=lambda kv: (-kv[1], kv[0])):
        lines.append(f"- {priority}: {n}")
    for status, group in group_by_status(issues).items():
        lines.append("")
        lines.append(f"{status}:")
        lines.extend(f"- {i.key}: {' '.join(i.summary.split())}" for i in group)
    return "\n".join(lines) + "\n"


def print_issues(issues: List[Issue]) -> None:
    console.echo(f"📋 {len(issues)} open issues assigned to you", 'bold')
    for issue in issues:
        status = console.colorize(f"[{issue.status}]", console.status_color(issue.status))
        console.echo(f"  {issue.key:<12} {issue.summary} {status}")


def run_sync(
    settings: Settings,
    jira: JiraCLI,
    notifier: SlackNotifier,
    today: Optional[date] = None,
    slack: bool = True,
    weekly: bool = False,
    dry_run: bool = False,
) -> int:
    today = today or date.today()

    issues = jira.list_my_issues()
    print_issues(issues)

    if dry_run:
        console.echo("Dry run: no files written, nothing posted", 'grey')
        return 0

    path = atomic_write(daily_path(settings, today), render_daily(today, issues))
    console.success(f"Wrote {path}")

    if slack:
        if notifier.enabled:
            msg = build_todo_message(issues, settings.browse_url)
            if notifier.send(msg["title"], msg["message"], fields=msg["fields"]):
                console.success("Posted summary to Slack")
            else:
                console.warn("Slack notification failed; continuing")
        else:
            console.warn("SLACK_WEBHOOK_URL not set; skipping Slack notification")

    week_file = weekly_path(settings, today)
    if weekly or not os.path.exists(week_file):
        recent = jira.list_my_issues(updated=WEEKLY_WINDOW, include_done=True)
        atomic_write(week_file, render_weekly(today, recent))
        console.success(f"Wrote weekly summary {week_file}")
    else:
        logger.debug("Weekly summary already exists: %s", week_file)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Pull assigned Jira issues into today's TODO list",
    )
    parser.add_argument('--no-slack', action='store_true', help='Do not post to Slack')
    parser.add_argument('--weekly', action='store_true', help="Rewrite this week's summary even if it exists")
    parser.add_argument('--dry-run', action='store_true', help='Print issues only')
    parser.add_argument('--verbose', '-v', action='store_true', help='Verbose logging')
    args = parser.parse_args(argv)

    console.setup_logging(args.verbose)
    settings = load_settings()

    try:
        commands.require_tool("jira")
        jira = JiraCLI(project=settings.jira_project)
        return run_sync(
            settings,
            jira,
            SlackNotifier(settings.webhook_url),
            slack=not args.no_slack,
            weekly=args.weekly,
            dry_run=args.dry_run,
        )
    except ToolMissingError as e:
        console.fail(str(e))
        return 3
    except CommandError as e:
        console.fail(f"Jira query failed: {e}")
        return 1
    except DigestError as e:
        console.fail(str(e))
        return 1
    except OSError as e:
        console.fail(f"Could not write output: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
