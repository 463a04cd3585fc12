"""PullPanda - pull request activity for GitHub handles.

A Python-based CLI tool that counts the pull requests authored by a list of
GitHub handles, optionally scoped to organizations or repositories, and
renders the totals as a table.
"""

__version__ = "0.1.0"
