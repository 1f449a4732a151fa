"""
External command runner
Thin wrapper around subprocess for the jira and gh command-line tools
"""

import logging
import platform
import shutil
import subprocess
from typing import List, Optional

from .errors import CommandError, ToolMissingError

logger = logging.getLogger(__name__)

INSTALL_HINTS = {
    "jira": {
        "Darwin": "brew install ankitpokhrel/jira-cli/jira-cli",
        "Linux": "See: https://github.com/ankitpokhrel/jira-cli/wiki/Installation",
        "Windows": "scoop install jira-cli OR download from https://github.com/ankitpokhrel/jira-cli/releases",
    },
    "gh": {
        "Darwin": "brew install gh",
        "Linux": "See: https://github.com/cli/cli/blob/trunk/docs/install_linux.md",
        "Windows": "winget install --id GitHub.cli OR download from https://cli.github.com/",
    },
}


def install_instructions(tool: str) -> str:
    """OS-specific install hint for a supported tool"""
    hints = INSTALL_HINTS.get(tool, {})
    return hints.get(platform.system(), f"Install '{tool}' and make sure it is on PATH")


def require_tool(tool: str) -> str:
    """Return the tool's path or raise ToolMissingError with install guidance"""
    path = shutil.which(tool)
    if not path:
        raise ToolMissingError(tool, install_instructions(tool))
    return path


def run(cmd: List[str], input_text: Optional[str] = None, timeout: int = 60) -> str:
    """Run a command and return its stdout, raising CommandError on failure"""
    logger.debug("Running: %s", " ".join(cmd))
    try:
        result = subprocess.run(
            cmd,
            input=input_text,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        raise CommandError(cmd, -1, f"timed out after {timeout}s")
    except OSError as e:
        raise CommandError(cmd, -1, f"could not start: {e}")
    if result.returncode != 0:
        raise CommandError(cmd, result.returncode, result.stderr)
    return result.stdout
