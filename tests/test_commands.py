import subprocess
import unittest
from unittest.mock import Mock, patch

from jira_digest.commands import install_instructions, require_tool, run
from jira_digest.errors import CommandError, ToolMissingError


class CommandTests(unittest.TestCase):
    @patch("jira_digest.commands.shutil.which", return_value=None)
    @patch("jira_digest.commands.platform.system", return_value="Darwin")
    def test_missing_tool_carries_install_hint(self, mock_system, mock_which):
        with self.assertRaises(ToolMissingError) as ctx:
            require_tool("gh")
        self.assertEqual(ctx.exception.instructions, "brew install gh")
        self.assertIn("brew install gh", str(ctx.exception))

    @patch("jira_digest.commands.shutil.which", return_value="/usr/local/bin/jira")
    def test_present_tool_returns_path(self, mock_which):
        self.assertEqual(require_tool("jira"), "/usr/local/bin/jira")

    def test_unknown_tool_has_generic_hint(self):
        self.assertIn("PATH", install_instructions("nope"))

    @patch("jira_digest.commands.subprocess.run", return_value=Mock(returncode=0, stdout="ok\n", stderr=""))
    def test_run_returns_stdout(self, mock_run):
        self.assertEqual(run(["jira", "me"]), "ok\n")
        self.assertTrue(mock_run.call_args.kwargs["capture_output"])

    @patch("jira_digest.commands.subprocess.run",
           return_value=Mock(returncode=1, stdout="", stderr="unauthorized\n"))
    def test_run_raises_on_failure(self, mock_run):
        with self.assertRaises(CommandError) as ctx:
            run(["jira", "issue", "list"])
        self.assertEqual(ctx.exception.returncode, 1)
        self.assertEqual(ctx.exception.stderr, "unauthorized")

    @patch("jira_digest.commands.subprocess.run", side_effect=subprocess.TimeoutExpired(["gh"], 60))
    def test_timeout_becomes_command_error(self, mock_run):
        with self.assertRaises(CommandError) as ctx:
            run(["gh", "pr", "view", "1"])
        self.assertIn("timed out", str(ctx.exception))

    @patch("jira_digest.commands.subprocess.run", side_effect=PermissionError(13, "Permission denied"))
    def test_spawn_failure_becomes_command_error(self, mock_run):
        with self.assertRaises(CommandError) as ctx:
            run(["gh", "pr", "view", "1"])
        self.assertIn("could not start", str(ctx.exception))

    @patch("jira_digest.commands.subprocess.run", side_effect=FileNotFoundError(2, "No such file", "jira"))
    def test_missing_binary_at_spawn_becomes_command_error(self, mock_run):
        with self.assertRaises(CommandError):
            run(["jira", "me"])


if __name__ == "__main__":
    unittest.main()
