"""Data models for newsdash."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class Source:
    """Represents a polled RSS/Atom feed."""

    id: Optional[int]
    name: str
    url: str
    category: str = "Other"
    active: bool = True
    last_fetched: Optional[datetime] = None


@dataclass
class Article:
    """Represents an article stored from a feed item and its page."""

    id: Optional[int]
    title: str
    url: str
    content: str
    summary: Optional[str]
    source: str
    author: Optional[str] = None
    published_date: Optional[datetime] = None
    read_time: int = 0
    is_read: bool = False
    is_saved: bool = False
    score: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
