"""
Configuration loading

Reads Jira config from ~/.config/jira/config (KEY=value lines) and lets the
environment override it. The Slack webhook only comes from the environment.
"""

import os
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

CONFIG_PATH = os.path.expanduser("~/.config/jira/config")
DEFAULT_DIGEST_DIR = os.path.expanduser("~/jira-digest")
DEFAULT_JIRA_URL = "https://jira.atlassian.net"
WEBHOOK_ENV = "SLACK_WEBHOOK_URL"


def load_config_file(path: str = CONFIG_PATH) -> Dict[str, str]:
    """Parse a KEY=value config file, returning {} when it does not exist"""
    cfg: Dict[str, str] = {}
    if not os.path.exists(path):
        return cfg
    with open(path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            k, v = line.split("=", 1)
            cfg[k.strip()] = v.strip().strip('"')
    return cfg


@dataclass
class Settings:
    digest_dir: str = DEFAULT_DIGEST_DIR
    jira_url: str = DEFAULT_JIRA_URL
    jira_project: Optional[str] = None
    webhook_url: Optional[str] = None

    @property
    def daily_dir(self) -> str:
        return os.path.join(self.digest_dir, "daily")

    @property
    def weekly_dir(self) -> str:
        return os.path.join(self.digest_dir, "weekly")

    @property
    def quarterly_dir(self) -> str:
        return os.path.join(self.digest_dir, "quarterly")

    @property
    def audit_log(self) -> str:
        return os.path.join(self.digest_dir, "pr-issues.log")

    def browse_url(self, key: str) -> str:
        return f"{self.jira_url.rstrip('/')}/browse/{key}"


def load_settings(config_path: str = CONFIG_PATH,
                  environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from the config file, then environment overrides"""
    env = os.environ if environ is None else environ
    cfg = load_config_file(config_path)

    digest_dir = env.get("JIRA_DIGEST_DIR") or cfg.get("DIGEST_DIR") or DEFAULT_DIGEST_DIR
    return Settings(
        digest_dir=os.path.expanduser(digest_dir),
        jira_url=env.get("JIRA_URL") or cfg.get("JIRA_URL") or DEFAULT_JIRA_URL,
        jira_project=env.get("JIRA_PROJECT") or cfg.get("JIRA_PROJECT"),
        webhook_url=env.get(WEBHOOK_ENV) or None,
    )
