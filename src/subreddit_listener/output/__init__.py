"""Output formatters for Subreddit Listener."""

from subreddit_listener.output.console import Console
from subreddit_listener.output.json_writer import build_report, write_json_report

__all__ = [
    "Console",
    "build_report",
    "write_json_report",
]
