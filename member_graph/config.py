"""Configuration module for the member relationship graph."""

import os
from dataclasses import dataclass, field
from typing import Optional
from dotenv import load_dotenv

load_dotenv()


@dataclass
class RepositoryConfig:
    """Association API (members, relations, patrons) access."""
    base_url: str = field(default_factory=lambda: os.getenv("ASSOCIATION_API_URL", "http://localhost:3000"))
    token: Optional[str] = field(default_factory=lambda: os.getenv("ASSOCIATION_API_TOKEN") or None)
    timeout_seconds: float = field(default_factory=lambda: float(os.getenv("ASSOCIATION_API_TIMEOUT", "30")))

    # Patrons are listed with an explicit page size
    patrons_limit: int = field(default_factory=lambda: int(os.getenv("PATRONS_LIMIT", "1000")))


@dataclass
class GraphConfig:
    """Graph construction options."""
    include_patrons: bool = field(default_factory=lambda: os.getenv("GRAPH_INCLUDE_PATRONS", "true").lower() == "true")

    # Background snapshot refresh, 0 disables it
    refresh_interval_minutes: int = field(default_factory=lambda: int(os.getenv("GRAPH_REFRESH_MINUTES", "15")))


@dataclass
class Config:
    """Main configuration container."""
    repository: RepositoryConfig = field(default_factory=RepositoryConfig)
    graph: GraphConfig = field(default_factory=GraphConfig)


def load_config() -> Config:
    """Load configuration from environment variables."""
    return Config()
