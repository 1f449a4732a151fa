"""
Slack webhook notifier
Best-effort delivery: failures are logged, never raised
"""

import logging
from collections import Counter
from datetime import datetime
from typing import Dict, List, Optional

import requests

logger = logging.getLogger(__name__)

MAX_LISTED_ISSUES = 10

SEVERITY_COLORS = {
    "critical": "#f85149",
    "warning": "#d29922",
    "info": "#58a6ff",
    "success": "#3fb950",
}


class SlackNotifier:
    """Send messages to a Slack incoming webhook"""

    def __init__(self, webhook_url: Optional[str], timeout: int = 10):
        self.webhook_url = webhook_url
        self.timeout = timeout

    @property
    def enabled(self) -> bool:
        return bool(self.webhook_url)

    def send(
        self,
        title: str,
        message: str,
        severity: str = "info",
        fields: List[Dict] = None
    ) -> bool:
        """Post an attachment; returns False instead of raising on any failure"""
        if not self.enabled:
            logger.warning("Slack webhook not configured; skipping notification")
            return False

        payload = {
            "attachments": [{
                "color": SEVERITY_COLORS.get(severity, "#8b949e"),
                "title": title,
                "text": message,
                "fields": fields or [],
                "footer": "jira-digest",
                "ts": int(datetime.now().timestamp())
            }]
        }

        try:
            response = requests.post(self.webhook_url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning("Slack webhook error: %s", e)
            return False
        if response.status_code != 200:
            logger.warning("Slack webhook returned %s: %s", response.status_code, response.text)
            return False
        return True


def build_todo_message(issues, browse_url) -> Dict:
    """Title, text and fields summarizing a TODO list for Slack"""
    counts = Counter(i.status for i in issues)
    lines = [f"• <{browse_url(i.key)}|{i.key}> {i.summary} [{i.status}]"
             for i in issues[:MAX_LISTED_ISSUES]]
    if len(issues) > MAX_LISTED_ISSUES:
        lines.append(f"…and {len(issues) - MAX_LISTED_ISSUES} more")
    fields = [{"title": status, "value": str(n), "short": True}
              for status, n in sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))]
    return {
        "title": f"TODO {datetime.now().strftime('%Y-%m-%d')}: {len(issues)} open issues",
        "message": "\n".join(lines) if lines else "Nothing assigned 🎉",
        "fields": fields,
    }
