"""Configuration models for the feed engine.

Examples:
    ```yaml
    page_limit: 40
    poll_interval: 30
    add_future_posts_directly: false
    ```
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Self

from pydantic import BaseModel, Field

from nostrfeed.core.yaml import load_yaml


class FeedConfig(BaseModel):
    """Paging, polling and merge policy of a [FeedManager][nostrfeed.feed.manager.FeedManager]."""

    page_limit: int = Field(default=40, ge=1, le=500, description="Entries per page request")
    future_limit: int = Field(default=40, ge=1, le=500, description="Entries per live poll")
    thread_limit: int = Field(default=100, ge=1, le=1000, description="Entries per thread request")
    poll_interval: float = Field(default=30.0, gt=0, description="Seconds between live polls")
    initial_poll_delay: float = Field(
        default=3.0, ge=0, description="Seconds before the first live poll"
    )
    request_timeout: float | None = Field(
        default=30.0, gt=0, description="Deadline per request in seconds (None = no deadline)"
    )
    add_future_posts_directly: bool = Field(
        default=True,
        description="Splice polled posts into the timeline head instead of buffering them",
    )

    @classmethod
    def from_yaml(cls, config_path: str | Path) -> Self:
        return cls.from_dict(load_yaml(config_path))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        return cls.model_validate(data)
