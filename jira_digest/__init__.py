"""
Jira Digest - daily TODO sync, PR-to-issue conversion and quarterly reports
"""

__version__ = "1.0.0"
