"""Reddit API payload models.

Only the fields this package consumes are declared; pydantic ignores the
rest of the (large) Reddit payloads.
"""

from pydantic import BaseModel

from subreddit_listener.models.post import Post


class AccessTokenResponse(BaseModel):
    """Body of a successful /api/v1/access_token response."""

    access_token: str
    expires_in: int


class ListingPostData(BaseModel):
    name: str
    subreddit: str
    title: str
    author: str
    permalink: str
    created_utc: float
    ups: int
    upvote_ratio: float

    def to_post(self) -> Post:
        return Post.from_api(self.model_dump())


class ListingChild(BaseModel):
    data: ListingPostData


class ListingData(BaseModel):
    after: str | None = None
    children: list[ListingChild]


class ListingResponse(BaseModel):
    """Body of a /r/{subreddit}/new response."""

    data: ListingData
