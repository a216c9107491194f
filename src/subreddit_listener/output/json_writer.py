"""JSON output writer for ranked post reports."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from subreddit_listener.models.post import Listing, Post, UserPosts


def build_report(
    subreddit: str,
    posts: Listing[Post],
    users: Listing[UserPosts],
) -> dict[str, Any]:
    """Build the ranked view of a subreddit.

    Args:
        subreddit: Subreddit name
        posts: Posts ranked by upvotes
        users: Authors ranked by post count

    Returns:
        Dictionary ready for JSON serialization
    """
    return {
        "subreddit": subreddit,
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "posts": posts.model_dump(mode="json"),
        "users": users.model_dump(mode="json"),
    }


def write_json_report(
    report: dict[str, Any],
    output_path: Optional[Path] = None,
) -> Path:
    """Write a report to a JSON file.

    Args:
        report: Report dictionary
        output_path: Output file path (defaults to output/<subreddit>_<timestamp>.json)

    Returns:
        Path to written file
    """
    if output_path is None:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        subreddit = report.get("subreddit") or "unknown"
        output_path = Path("output") / f"{subreddit}_{timestamp}.json"

    # Ensure parent directory exists
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(report, f, indent=2, ensure_ascii=False, default=str)

    return output_path
