"""
Jira command-line wrapper
Issue listing, creation, transitions and sprint membership via jira-cli
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Optional

from . import commands
from .errors import CommandError

logger = logging.getLogger(__name__)

ISSUE_KEY_RE = re.compile(r'\b([A-Z][A-Z0-9_]*-\d+)\b')
LIST_COLUMNS = "key,summary,status,priority"


@dataclass
class Issue:
    key: str
    summary: str
    status: str
    priority: str = ""

    def todo_line(self) -> str:
        """Daily file representation, e.g. '- [ ] ACM-1: fix bug [In Progress]'"""
        summary = " ".join(self.summary.split())
        return f"- [ ] {self.key}: {summary} [{self.status}]"


def parse_issue_list(output: str) -> List[Issue]:
    """Parse `jira issue list --plain --no-headers` output (tab separated)"""
    issues: List[Issue] = []
    for line in output.splitlines():
        if not line.strip():
            continue
        cols = [c.strip() for c in re.split(r'\t+', line.strip())]
        if len(cols) < 3 or not ISSUE_KEY_RE.fullmatch(cols[0]):
            logger.debug("Skipping unexpected issue list line: %r", line)
            continue
        priority = cols[3] if len(cols) > 3 else ""
        issues.append(Issue(key=cols[0], summary=cols[1], status=cols[2], priority=priority))
    return issues


def parse_created_key(output: str) -> Optional[str]:
    """The created issue key is the last key printed (usually in the browse URL)"""
    keys = ISSUE_KEY_RE.findall(output)
    return keys[-1] if keys else None


class JiraCLI:
    """Calls the `jira` binary; `runner` is swappable for tests"""

    def __init__(self, project: Optional[str] = None,
                 runner: Callable[..., str] = commands.run):
        self.project = project
        self.runner = runner
        self._me: Optional[str] = None

    def _cmd(self, *args: str) -> List[str]:
        cmd = ["jira", *args]
        if self.project:
            cmd.extend(["-p", self.project])
        return cmd

    def me(self) -> str:
        if self._me is None:
            self._me = self.runner(["jira", "me"]).strip()
        return self._me

    def list_my_issues(self, updated: Optional[str] = None, include_done: bool = False) -> List[Issue]:
        args = ["issue", "list", f"-a{self.me()}"]
        if not include_done:
            args.append("-s~Done")
        if updated:
            args.extend(["--updated", updated])
        args.extend(["--plain", "--no-headers", "--columns", LIST_COLUMNS])
        return parse_issue_list(self.runner(self._cmd(*args)))

    def create_issue(
        self,
        summary: str,
        body: str,
        issue_type: str = "Task",
        priority: str = "Medium",
        labels: Optional[List[str]] = None,
        assignee: Optional[str] = None,
        original_estimate: Optional[str] = None,
    ) -> str:
        args = ["issue", "create", f"-t{issue_type}", f"-s{summary}", f"-b{body}", f"-y{priority}"]
        for label in labels or []:
            args.append(f"-l{label}")
        if assignee:
            args.append(f"-a{assignee}")
        if original_estimate:
            args.extend(["--original-estimate", original_estimate])
        args.append("--no-input")
        cmd = self._cmd(*args)
        output = self.runner(cmd)
        key = parse_created_key(output)
        if not key:
            raise CommandError(cmd, 0, f"could not find issue key in output: {output.strip()}")
        return key

    def transition(self, key: str, state: str) -> None:
        self.runner(["jira", "issue", "move", key, state])

    def active_sprint_id(self) -> Optional[str]:
        output = self.runner(self._cmd("sprint", "list", "--state", "active",
                                       "--table", "--plain", "--no-headers", "--columns", "id"))
        for line in output.splitlines():
            if line.strip().isdigit():
                return line.strip()
        return None

    def add_to_sprint(self, sprint_id: str, key: str) -> None:
        self.runner(["jira", "sprint", "add", sprint_id, key])
