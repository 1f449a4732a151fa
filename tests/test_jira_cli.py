import unittest
from unittest.mock import Mock

from jira_digest.errors import CommandError
from jira_digest.jira_cli import Issue, JiraCLI, parse_created_key, parse_issue_list


class FakeRunner:
    """Records commands and answers from a prefix -> output table"""

    def __init__(self, responses):
        self.responses = responses
        self.calls = []

    def __call__(self, cmd, **kwargs):
        self.calls.append(cmd)
        for prefix, output in self.responses.items():
            if tuple(cmd[:len(prefix)]) == prefix:
                if isinstance(output, Exception):
                    raise output
                return output
        return ""


class ParsingTests(unittest.TestCase):
    def test_parse_issue_list_splits_tab_columns(self):
        output = (
            "ACM-1\tFix login bug\tIn Progress\tHigh\n"
            "ACM-22\t\tAdd tests\t\tNew\t\tMedium\n"
            "\n"
            "not an issue line\n"
        )
        issues = parse_issue_list(output)
        self.assertEqual(issues, [
            Issue("ACM-1", "Fix login bug", "In Progress", "High"),
            Issue("ACM-22", "Add tests", "New", "Medium"),
        ])

    def test_parse_created_key_uses_last_key(self):
        output = "✓ Issue created\nhttps://example.atlassian.net/browse/ACM-321\n"
        self.assertEqual(parse_created_key(output), "ACM-321")
        self.assertIsNone(parse_created_key("nothing here"))

    def test_todo_line_collapses_whitespace(self):
        issue = Issue("ACM-1", "Fix\n  login   bug", "Review")
        self.assertEqual(issue.todo_line(), "- [ ] ACM-1: Fix login bug [Review]")


class JiraCLITests(unittest.TestCase):
    def test_list_my_issues_builds_query(self):
        runner = FakeRunner({
            ("jira", "me"): "me@example.com\n",
            ("jira", "issue", "list"): "ACM-1\tFix\tNew\tLow\n",
        })
        jira = JiraCLI(project="ACM", runner=runner)

        issues = jira.list_my_issues()

        self.assertEqual([i.key for i in issues], ["ACM-1"])
        cmd = runner.calls[-1]
        self.assertIn("-ame@example.com", cmd)
        self.assertIn("-s~Done", cmd)
        self.assertEqual(cmd[-2:], ["-p", "ACM"])

    def test_weekly_query_includes_done_and_window(self):
        runner = FakeRunner({("jira", "me"): "me", ("jira", "issue", "list"): ""})
        JiraCLI(runner=runner).list_my_issues(updated="-7d", include_done=True)
        cmd = runner.calls[-1]
        self.assertNotIn("-s~Done", cmd)
        self.assertIn("--updated", cmd)
        self.assertIn("-7d", cmd)

    def test_me_is_cached(self):
        runner = FakeRunner({("jira", "me"): "me"})
        jira = JiraCLI(runner=runner)
        jira.me()
        jira.me()
        self.assertEqual(runner.calls, [["jira", "me"]])

    def test_create_issue_returns_key(self):
        runner = FakeRunner({("jira", "issue", "create"): "https://x/browse/ACM-9\n"})
        jira = JiraCLI(project="ACM", runner=runner)

        key = jira.create_issue("Title", "Body", labels=["from-pr", "effort-m"],
                                assignee="me", original_estimate="4h")

        self.assertEqual(key, "ACM-9")
        cmd = runner.calls[0]
        for expected in ["-tTask", "-sTitle", "-bBody", "-yMedium", "-lfrom-pr", "-leffort-m",
                         "-ame", "--original-estimate", "4h", "--no-input"]:
            self.assertIn(expected, cmd)

    def test_create_issue_without_key_in_output_fails(self):
        jira = JiraCLI(runner=Mock(return_value="something odd"))
        with self.assertRaises(CommandError):
            jira.create_issue("Title", "Body")

    def test_active_sprint_id(self):
        runner = FakeRunner({("jira", "sprint", "list"): "\n  42  \n"})
        self.assertEqual(JiraCLI(runner=runner).active_sprint_id(), "42")
        runner = FakeRunner({("jira", "sprint", "list"): ""})
        self.assertIsNone(JiraCLI(runner=runner).active_sprint_id())

    def test_transition_and_sprint_add(self):
        runner = FakeRunner({})
        jira = JiraCLI(runner=runner)
        jira.transition("ACM-1", "Done")
        jira.add_to_sprint("42", "ACM-1")
        self.assertEqual(runner.calls, [
            ["jira", "issue", "move", "ACM-1", "Done"],
            ["jira", "sprint", "add", "42", "ACM-1"],
        ])


if __name__ == "__main__":
    unittest.main()
