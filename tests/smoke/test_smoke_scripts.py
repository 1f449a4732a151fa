import subprocess
import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
MODULES = ['jira_digest.sync', 'jira_digest.pr_issue', 'jira_digest.quarterly']


def run(*args):
    return subprocess.run([sys.executable, *args], cwd=ROOT,
                          stdout=subprocess.PIPE, stderr=subprocess.PIPE, text=True)


class ScriptSmokeTests(unittest.TestCase):
    def test_py_compile_modules(self):
        for module in MODULES:
            path = module.replace('.', '/') + '.py'
            with self.subTest(path=path):
                r = run('-m', 'py_compile', path)
                self.assertEqual(r.returncode, 0, f"py_compile failed for {path}: {r.stderr}")

    def test_help_exits_zero(self):
        for module in MODULES:
            with self.subTest(module=module):
                r = run('-m', module, '--help')
                self.assertEqual(r.returncode, 0, r.stderr)
                self.assertIn('usage', (r.stdout + r.stderr).lower())

    def test_quarterly_rejects_bad_label(self):
        r = run('-m', 'jira_digest.quarterly', '2025-Q7')
        self.assertEqual(r.returncode, 2)
        self.assertIn('YYYY-QN', r.stderr)


if __name__ == '__main__':
    unittest.main()
