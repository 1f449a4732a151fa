#!/usr/bin/env python3
"""
Quarterly Report - roll daily TODO files up into one report per quarter

Scans daily/YYYY-MM-DD.md for every day of the quarter, counts issue
mentions by status, ISO week and issue key, appends the year's weekly
summaries and writes quarterly/YYYY-QN.md.

Usage:
  jira-quarterly            # quarter containing today
  jira-quarterly 2025-Q1
"""

import argparse
import calendar
import logging
import os
import re
import sys
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from . import console
from .config import Settings, load_settings
from .errors import FormatError
from .files import atomic_write

logger = logging.getLogger(__name__)

QUARTER_RE = re.compile(r'^(\d{4})-Q([1-4])$')
RECORD_RE = re.compile(
    r'^\s*- \[ \] (?P<key>[A-Z][A-Z0-9_]*-\d+):\s*(?P<summary>.*?)\s*\[(?P<status>[^\[\]]+)\]\s*$'
)
UNCHECKED_RE = re.compile(r'^\s*- \[ \] ')

BAR_WIDTH = 50
BAR_CHAR = '█'
WATCHED_STATUSES = ("New", "In Progress", "Review")


@dataclass(frozen=True)
class Quarter:
    year: int
    number: int

    @property
    def label(self) -> str:
        return f"{self.year}-Q{self.number}"

    @property
    def months(self) -> Tuple[int, int, int]:
        first = (self.number - 1) * 3 + 1
        return (first, first + 1, first + 2)

    @property
    def first_day(self) -> date:
        return date(self.year, self.months[0], 1)

    @property
    def last_day(self) -> date:
        month = self.months[-1]
        return date(self.year, month, calendar.monthrange(self.year, month)[1])

    def days(self) -> Iterator[date]:
        """Every real calendar day of the quarter, in order"""
        for month in self.months:
            for day in range(1, calendar.monthrange(self.year, month)[1] + 1):
                yield date(self.year, month, day)


def resolve_quarter(label: Optional[str] = None, today: Optional[date] = None) -> Quarter:
    """Parse a YYYY-QN label, or pick the quarter containing today"""
    if label is None:
        today = today or date.today()
        return Quarter(today.year, (today.month - 1) // 3 + 1)
    match = QUARTER_RE.match(label.strip())
    if not match:
        raise FormatError(f"Invalid quarter '{label}': expected YYYY-QN with N in 1-4, e.g. 2025-Q1")
    return Quarter(int(match.group(1)), int(match.group(2)))


@dataclass
class AggregateState:
    total: int = 0
    by_status: Counter = field(default_factory=Counter)
    by_week: Counter = field(default_factory=Counter)
    # dict keys keep first-seen order and never duplicate
    unique_issues: Dict[str, None] = field(default_factory=dict)
    days_with_data: int = 0
    files_scanned: int = 0
    unparsed_lines: int = 0

    def add(self, key: str, status: str, week: Tuple[int, int]) -> None:
        self.total += 1
        self.by_status[status] += 1
        self.by_week[week] += 1
        self.unique_issues.setdefault(key, None)


def parse_record(line: str) -> Optional[Tuple[str, str]]:
    """(issue key, status) for an unchecked TODO line, else None"""
    match = RECORD_RE.match(line)
    if not match:
        return None
    return match.group('key'), match.group('status').strip()


def read_text(path: Path) -> str:
    """Read a UTF-8 input file; undecodable bytes are an I/O failure for that file"""
    with open(path, encoding='utf-8') as f:
        try:
            return f.read()
        except UnicodeDecodeError as e:
            raise OSError(f"{path}: not valid UTF-8 ({e})") from e


def week_label(week: Tuple[int, int]) -> str:
    """ISO year and week, e.g. 2025-W01 (Dec 29-31 can fall in the next ISO year)"""
    return f"{week[0]}-W{week[1]:02d}"


def scan_file(path: Path, day: date, state: AggregateState) -> int:
    """Add every record in one daily file to state; returns records matched"""
    iso_year, iso_week, _ = day.isocalendar()
    week = (iso_year, iso_week)
    matched = 0
    for lineno, line in enumerate(read_text(path).splitlines(), 1):
        record = parse_record(line)
        if record is None:
            if UNCHECKED_RE.match(line):
                state.unparsed_lines += 1
                logger.debug("%s:%d: unparsed TODO line: %s", path.name, lineno, line)
            continue
        state.add(record[0], record[1], week)
        matched += 1
    state.files_scanned += 1
    if matched:
        state.days_with_data += 1
    return matched


def scan_quarter(daily_dir: str, quarter: Quarter) -> AggregateState:
    """Single forward scan over the quarter's daily files, oldest first"""
    state = AggregateState()
    base = Path(daily_dir)
    for day in quarter.days():
        path = base / f"{day.isoformat()}.md"
        if not path.is_file():
            continue
        scan_file(path, day, state)
    logger.info("Scanned %d daily files for %s: %d mentions, %d unique issues",
                state.files_scanned, quarter.label, state.total, len(state.unique_issues))
    return state


def status_share(count: int, total: int) -> Tuple[float, int]:
    """(percentage to one decimal, bar length); both 0 when total is 0"""
    if total <= 0:
        return 0.0, 0
    return round(count / total * 100, 1), round(count / total * BAR_WIDTH)


def busiest_week(by_week: Dict[Tuple[int, int], int]) -> Optional[Tuple[Tuple[int, int], int]]:
    """(week, count) with the most mentions; earliest week wins ties"""
    if not by_week:
        return None
    week = min(by_week, key=lambda w: (-by_week[w], w))
    return week, by_week[week]


def average_per_week(state: AggregateState) -> Optional[float]:
    weeks = len(state.by_week)
    if weeks == 0:
        return None
    return state.total / weeks


def issue_sort_key(key: str) -> Tuple[str, int]:
    project, _, number = key.rpartition('-')
    return project, int(number)


def render_metrics(state: AggregateState) -> List[str]:
    return [
        "## Key Metrics",
        "",
        "| Metric | Value |",
        "|--------|-------|",
        f"| Total mentions | {state.total} |",
        f"| Unique issues | {len(state.unique_issues)} |",
        f"| Days with data | {state.days_with_data} |",
        f"| Weeks with data | {len(state.by_week)} |",
        f"| Unparsed lines | {state.unparsed_lines} |",
    ]


def render_status_distribution(state: AggregateState) -> List[str]:
    lines = ["## Status Distribution", ""]
    if not state.by_status:
        return lines + ["No data."]
    for status, count in sorted(state.by_status.items(), key=lambda kv: (-kv[1], kv[0])):
        percent, bar = status_share(count, state.total)
        lines.append(f"- {status}: {count} ({percent:.1f}%) `{BAR_CHAR * bar}`")
    return lines


def render_weekly_breakdown(state: AggregateState) -> List[str]:
    lines = ["## Weekly Breakdown", ""]
    if not state.by_week:
        return lines + ["No data."]
    for week in sorted(state.by_week):
        lines.append(f"- Week {week_label(week)}: {state.by_week[week]} mentions")
    return lines


def render_unique_issues(state: AggregateState, browse_url: Callable[[str], str]) -> List[str]:
    lines = ["## Unique Issues", ""]
    if not state.unique_issues:
        return lines + ["No data."]
    for key in sorted(state.unique_issues, key=issue_sort_key):
        lines.append(f"- [{key}]({browse_url(key)})")
    return lines


def render_weekly_summaries(weekly_dir: str, year: int) -> List[str]:
    """Every weekly summary of the year, appended verbatim in filename order"""
    lines = ["## Weekly Summaries", ""]
    base = Path(weekly_dir)
    files = sorted(base.glob(f"{year}-*.md")) if base.is_dir() else []
    if not files:
        return lines + ["No weekly summaries."]
    for path in files:
        lines.append(f"### {path.stem}")
        lines.append("")
        lines.append(read_text(path).rstrip('\n'))
        lines.append("")
    return lines[:-1]


def render_insights(state: AggregateState) -> List[str]:
    lines = ["## Insights", ""]
    peak = busiest_week(state.by_week)
    average = average_per_week(state)
    if peak is None or average is None:
        lines.append("- Busiest week: no data")
        lines.append("- Average mentions per week: no data")
    else:
        lines.append(f"- Busiest week: Week {week_label(peak[0])} ({peak[1]} mentions)")
        lines.append(f"- Average mentions per week: {average:.1f}")

    new, in_progress, review = (state.by_status.get(s, 0) for s in WATCHED_STATUSES)
    lines.extend(["", "### Recommendations", ""])
    lines.append(f"- New: {new} mentions. Triage or schedule issues that stay New.")
    lines.append(f"- In Progress: {in_progress} mentions. Long-running work may need splitting.")
    lines.append(f"- Review: {review} mentions. Chase reviewers for issues parked in Review.")
    return lines


def compose_report(
    quarter: Quarter,
    state: AggregateState,
    settings: Settings,
    generated: Optional[datetime] = None,
) -> str:
    generated = generated or datetime.now()
    period = (f"{calendar.month_name[quarter.months[0]]} - "
              f"{calendar.month_name[quarter.months[-1]]} {quarter.year}")
    sections = [
        [
            f"# Quarterly Jira Report: {quarter.label}",
            "",
            f"Generated: {generated.strftime('%Y-%m-%d %H:%M:%S')}",
            f"Period: {period} ({quarter.first_day.isoformat()} to {quarter.last_day.isoformat()})",
        ],
        render_metrics(state),
        render_status_distribution(state),
        render_weekly_breakdown(state),
        render_unique_issues(state, settings.browse_url),
        render_weekly_summaries(settings.weekly_dir, quarter.year),
        render_insights(state),
    ]
    return "\n\n".join("\n".join(section) for section in sections) + "\n"


def report_path(settings: Settings, quarter: Quarter) -> str:
    return os.path.join(settings.quarterly_dir, f"{quarter.label}.md")


def generate_report(settings: Settings, quarter: Quarter,
                    generated: Optional[datetime] = None) -> Path:
    """Scan, render and write the quarter's report, replacing any previous one"""
    state = scan_quarter(settings.daily_dir, quarter)
    content = compose_report(quarter, state, settings, generated)
    return atomic_write(report_path(settings, quarter), content)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Generate a quarterly report from daily Jira TODO files")
    parser.add_argument('quarter', nargs='?', help='Quarter label YYYY-QN (default: current quarter)')
    args = parser.parse_args(argv)

    console.setup_logging()
    settings = load_settings()

    try:
        quarter = resolve_quarter(args.quarter)
        os.makedirs(settings.quarterly_dir, exist_ok=True)
        path = generate_report(settings, quarter)
    except FormatError as e:
        console.fail(str(e))
        return 2
    except OSError as e:
        console.fail(f"Report generation failed: {e}")
        return 1

    console.success(f"Wrote {quarter.label} report: {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
