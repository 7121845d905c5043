"""
Base service classes and shared context.

The ServiceContext holds the configuration and the association API client
that services share, so the HTTP API and scripts use the same logic.
"""

import logging
from typing import Optional
from dataclasses import dataclass

from ..config import Config, load_config
from ..repository import AssociationAPI

logger = logging.getLogger(__name__)


@dataclass
class ServiceContext:
    """
    Shared context for all services.

    All services receive this context and use it to access shared resources.
    """
    config: Config
    api: Optional[AssociationAPI] = None

    @classmethod
    def create(cls, config: Optional[Config] = None) -> "ServiceContext":
        """
        Factory method to create a ServiceContext with all dependencies.

        Args:
            config: Optional config (loads from env if not provided)

        Returns:
            Configured ServiceContext
        """
        cfg = config or load_config()
        api = AssociationAPI(cfg.repository)
        logger.info(f"Association API client ready for {cfg.repository.base_url}")
        return cls(config=cfg, api=api)

    def close(self):
        """Clean up resources."""
        if self.api:
            self.api.close()


class BaseService:
    """
    Base class for all services.

    Each service receives the shared context and provides focused functionality.
    """

    def __init__(self, context: ServiceContext):
        self.context = context

    @property
    def config(self) -> Config:
        return self.context.config

    @property
    def api(self) -> AssociationAPI:
        if not self.context.api:
            raise RuntimeError("Association API not initialized.")
        return self.context.api
