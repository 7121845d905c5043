"""
API dependencies.

Provides dependency injection for services.
"""

import logging
from typing import Optional, Annotated
from dataclasses import dataclass

from fastapi import Depends

from member_graph.config import load_config, Config
from member_graph.services import ServiceContext, RelationGraphService

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Container for all services."""
    config: Config
    context: ServiceContext
    graph: RelationGraphService


# Global services instance (singleton)
_services: Optional[Services] = None


def get_services() -> Services:
    """
    Get or create the services singleton.

    This initializes all services on first call.
    """
    global _services

    if _services is None:
        logger.info("Initializing services...")

        config = load_config()
        context = ServiceContext.create(config=config)
        graph = RelationGraphService(context)

        _services = Services(
            config=config,
            context=context,
            graph=graph
        )

        logger.info("Services initialized successfully")

    return _services


def close_services():
    """Close and cleanup services."""
    global _services
    if _services:
        _services.context.close()
        _services = None
        logger.info("Services closed")


# Dependency for getting services
def services_dep() -> Services:
    """FastAPI dependency for services."""
    return get_services()


ServicesDep = Annotated[Services, Depends(services_dep)]
