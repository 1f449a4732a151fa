"""
GitHub command-line wrapper
Pull request metadata, comments and description updates via gh
"""

import json
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from . import commands

PR_FIELDS = "number,title,body,url,state,additions,deletions,changedFiles,author,headRefName"


@dataclass
class PullRequest:
    number: int
    title: str
    url: str
    state: str
    additions: int = 0
    deletions: int = 0
    changed_files: int = 0
    body: str = ""
    author: str = ""
    branch: str = ""

    @property
    def merged(self) -> bool:
        return self.state.upper() == "MERGED"

    @property
    def lines_changed(self) -> int:
        return self.additions + self.deletions

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "PullRequest":
        return cls(
            number=int(data["number"]),
            title=data.get("title") or "",
            url=data.get("url") or "",
            state=data.get("state") or "",
            additions=int(data.get("additions") or 0),
            deletions=int(data.get("deletions") or 0),
            changed_files=int(data.get("changedFiles") or 0),
            body=data.get("body") or "",
            author=(data.get("author") or {}).get("login", ""),
            branch=data.get("headRefName") or "",
        )


class GitHubCLI:
    def __init__(self, repo: Optional[str] = None,
                 runner: Callable[..., str] = commands.run):
        self.repo = repo
        self.runner = runner

    def _cmd(self, *args: str) -> List[str]:
        cmd = ["gh", *args]
        if self.repo:
            cmd.extend(["--repo", self.repo])
        return cmd

    def view_pr(self, number: int) -> PullRequest:
        output = self.runner(self._cmd("pr", "view", str(number), "--json", PR_FIELDS))
        return PullRequest.from_json(json.loads(output))

    def comment(self, number: int, body: str) -> None:
        self.runner(self._cmd("pr", "comment", str(number), "--body", body))

    def set_body(self, number: int, body: str) -> None:
        self.runner(self._cmd("pr", "edit", str(number), "--body", body))
