"""Task Manager — personal task tracking API.

Users sign up, log in with bearer tokens, keep a profile and avatar,
and manage their own tasks. Every task is scoped to the user who
created it.
"""

__version__ = "0.1.0"
