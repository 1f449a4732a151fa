#!/usr/bin/env python3
"""
PR to Jira - track a merged pull request as a Jira issue

This script:
1. Reads the PR's metadata with `gh pr view`
2. Estimates effort from lines changed and files changed
3. Creates a Jira issue with default fields (fatal if this fails)
4. Moves it to Done, adds it to the active sprint and comments the link
   back on the PR (each step only warns on failure)
5. Appends an audit line to pr-issues.log

Usage:
  jira-pr-issue 123
  jira-pr-issue 123 --repo owner/name --update-description
  jira-pr-issue 123 --force   # allow PRs that are not merged yet
"""

import argparse
import logging
import re
import sys
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from . import commands, console
from .config import Settings, load_settings
from .errors import CommandError, DigestError, ToolMissingError
from .github_cli import GitHubCLI, PullRequest
from .jira_cli import JiraCLI

logger = logging.getLogger(__name__)

DEFAULT_ISSUE_TYPE = "Task"
DEFAULT_PRIORITY = "Medium"
DEFAULT_LABELS = ["from-pr"]
DONE_STATE = "Done"

# (bucket, max lines changed, max files changed, story points, original estimate)
EFFORT_BUCKETS = [
    ("XS", 10, 2, 1, "1h"),
    ("S", 50, 5, 2, "2h"),
    ("M", 200, 10, 3, "4h"),
    ("L", 500, 20, 5, "1d"),
]
LARGEST_BUCKET = ("XL", None, None, 8, "2d")

PR_URL_RE = re.compile(r'github\.com/([^/]+/[^/]+)/pull/\d+')


@dataclass
class Effort:
    bucket: str
    points: int
    estimate: str


def _bucket_index(value: int, position: int) -> int:
    for i, bucket in enumerate(EFFORT_BUCKETS):
        if value <= bucket[position]:
            return i
    return len(EFFORT_BUCKETS)


def estimate_effort(lines_changed: int, files_changed: int) -> Effort:
    """Coarse effort bucket: the larger of the line-based and file-based buckets"""
    index = max(_bucket_index(lines_changed, 1), _bucket_index(files_changed, 2))
    name, _, _, points, estimate = (EFFORT_BUCKETS + [LARGEST_BUCKET])[index]
    return Effort(bucket=name, points=points, estimate=estimate)


def repo_from_url(url: str) -> str:
    match = PR_URL_RE.search(url or "")
    return match.group(1) if match else "unknown"


def issue_body(pr: PullRequest, effort: Effort) -> str:
    lines = [
        f"Merged pull request: {pr.url}",
        f"Author: {pr.author or 'unknown'}  Branch: {pr.branch or 'unknown'}",
        f"Effort: {effort.bucket} ({effort.points} pts, {effort.estimate}) "
        f"from {pr.lines_changed} lines in {pr.changed_files} files",
    ]
    if pr.body.strip():
        lines.extend(["", pr.body.strip()])
    return "\n".join(lines)


def audit_line(when: datetime, repo: str, pr: PullRequest, key: str, effort: Effort) -> str:
    return "\t".join([
        when.isoformat(timespec="seconds"),
        f"{repo}#{pr.number}",
        key,
        effort.bucket,
        str(effort.points),
    ])


def append_audit(path: str, line: str) -> None:
    log_path = Path(path)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    with open(log_path, 'a', encoding='utf-8') as f:
        f.write(line + '\n')


def _best_effort(description: str, func, *args) -> bool:
    """Run a non-critical step, turning CommandError into a warning"""
    try:
        func(*args)
        return True
    except CommandError as e:
        logger.debug("%s failed", description, exc_info=True)
        console.warn(f"{description} failed: {e}")
        return False


def convert_pr(
    settings: Settings,
    github: GitHubCLI,
    jira: JiraCLI,
    number: int,
    force: bool = False,
    update_description: bool = False,
    now: Optional[datetime] = None,
) -> str:
    """Create the Jira issue for a PR and return its key"""
    pr = github.view_pr(number)
    if not pr.merged and not force:
        raise DigestError(f"PR #{pr.number} is {pr.state or 'not merged'}; use --force to convert it anyway")

    effort = estimate_effort(pr.lines_changed, pr.changed_files)
    console.echo(f"🔍 PR #{pr.number}: {pr.title}", 'bold')
    console.echo(f"   {pr.lines_changed} lines, {pr.changed_files} files -> {effort.bucket} "
                 f"({effort.points} pts, {effort.estimate})")

    key = jira.create_issue(
        summary=pr.title,
        body=issue_body(pr, effort),
        issue_type=DEFAULT_ISSUE_TYPE,
        priority=DEFAULT_PRIORITY,
        labels=DEFAULT_LABELS + [f"effort-{effort.bucket.lower()}"],
        assignee=jira.me(),
        original_estimate=effort.estimate,
    )
    console.success(f"Created {key}: {settings.browse_url(key)}")

    if pr.merged:
        _best_effort(f"Transition {key} to {DONE_STATE}", jira.transition, key, DONE_STATE)

    try:
        sprint_id = jira.active_sprint_id()
    except CommandError as e:
        console.warn(f"Sprint lookup failed: {e}")
        sprint_id = None
    if sprint_id:
        _best_effort(f"Adding {key} to sprint {sprint_id}", jira.add_to_sprint, sprint_id, key)
    else:
        logger.info("No active sprint; %s left in backlog", key)

    link = f"Tracked in Jira: [{key}]({settings.browse_url(key)})"
    _best_effort(f"Commenting on PR #{pr.number}", github.comment, pr.number, link)
    if update_description:
        new_body = f"{pr.body.rstrip()}\n\nJira: {key}".lstrip()
        _best_effort(f"Updating PR #{pr.number} description", github.set_body, pr.number, new_body)

    repo = github.repo or repo_from_url(pr.url)
    append_audit(settings.audit_log, audit_line(now or datetime.now(), repo, pr, key, effort))
    return key


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Create a Jira issue from a merged pull request")
    parser.add_argument('pr', type=int, help='Pull request number')
    parser.add_argument('--repo', help='owner/name (defaults to the current git repository)')
    parser.add_argument('--project', help='Jira project key (defaults to JIRA_PROJECT)')
    parser.add_argument('--force', action='store_true', help='Convert even if the PR is not merged')
    parser.add_argument('--update-description', action='store_true',
                        help='Append the Jira key to the PR description')
    parser.add_argument('--verbose', '-v', action='store_true', help='Verbose logging')
    args = parser.parse_args(argv)

    console.setup_logging(args.verbose)
    settings = load_settings()

    try:
        commands.require_tool("gh")
        commands.require_tool("jira")
        convert_pr(
            settings,
            GitHubCLI(repo=args.repo),
            JiraCLI(project=args.project or settings.jira_project),
            args.pr,
            force=args.force,
            update_description=args.update_description,
        )
    except ToolMissingError as e:
        console.fail(str(e))
        return 3
    except CommandError as e:
        console.fail(str(e))
        return 1
    except DigestError as e:
        console.fail(str(e))
        return 1
    except OSError as e:
        console.fail(f"Could not write audit log: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
