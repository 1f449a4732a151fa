"""
Error types shared by the jira-digest tools
"""

from typing import List, Optional


class DigestError(Exception):
    """Base class for jira-digest failures"""


class ToolMissingError(DigestError):
    """A required command-line tool is not installed"""

    def __init__(self, tool: str, instructions: str):
        self.tool = tool
        self.instructions = instructions
        super().__init__(f"'{tool}' not found on PATH. Install: {instructions}")


class CommandError(DigestError):
    """An external command exited with a non-zero status"""

    def __init__(self, cmd: List[str], returncode: int, stderr: Optional[str] = None):
        self.cmd = cmd
        self.returncode = returncode
        self.stderr = (stderr or "").strip()
        message = f"{' '.join(cmd[:3])} failed [{returncode}]"
        if self.stderr:
            message += f": {self.stderr}"
        super().__init__(message)


class FormatError(DigestError, ValueError):
    """Malformed user input such as a quarter label"""
