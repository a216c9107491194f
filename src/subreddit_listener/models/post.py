"""Post and ranking data models."""

from datetime import datetime, timezone
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, computed_field

T = TypeVar("T")


class Post(BaseModel):
    """A subreddit post as seen at the time it was fetched."""

    model_config = ConfigDict(frozen=True)

    name: str
    subreddit: str
    title: str
    author: str
    permalink: str
    created_at: datetime
    upvotes: int = 0

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Post":
        """Create from the `data` object of a Reddit listing child."""
        return cls(
            name=data["name"],
            subreddit=data["subreddit"],
            title=data["title"],
            author=data["author"],
            permalink=data["permalink"],
            created_at=datetime.fromtimestamp(int(data["created_utc"]), tz=timezone.utc),
            upvotes=score(data["ups"], data["upvote_ratio"]),
        )

    @property
    def url(self) -> str:
        """Absolute link to the post."""
        return f"https://www.reddit.com{self.permalink}"


def score(ups: int, upvote_ratio: float) -> int:
    """Display score for a post.

    Reddit does not expose downvotes, so this is an estimate rather than a
    tally. A negative ratio produces a negative score.
    """
    return round(ups * upvote_ratio)


class UserPosts(BaseModel):
    """Posts grouped by their author."""

    author: str
    posts: list[Post] = Field(default_factory=list)

    @computed_field
    @property
    def post_count(self) -> int:
        return len(self.posts)


class Listing(BaseModel, Generic[T]):
    """A ranked list of items, as republished by the listener."""

    data: list[T] = Field(default_factory=list)

    @computed_field
    @property
    def count(self) -> int:
        return len(self.data)
