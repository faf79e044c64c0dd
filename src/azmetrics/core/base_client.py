"""Base client interface for clients backed by an external command-line tool."""

from abc import ABC, abstractmethod
from typing import Dict, Any, Optional
import structlog

logger = structlog.get_logger(__name__)


class BaseClient(ABC):
    """Abstract base class for all external service clients."""

    def __init__(self, config: Optional[Dict[str, Any]] = None, name: Optional[str] = None):
        self.config = config or {}
        self.name = name or self.__class__.__name__
        self._connected = False
        self.logger = logger.bind(client=self.name)

    @abstractmethod
    async def connect(self) -> None:
        """Make sure the external tool is reachable."""

    async def disconnect(self) -> None:
        """Release the client. Subprocess clients hold no open handles."""
        self._connected = False

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the external tool answers."""

    @property
    def is_connected(self) -> bool:
        return self._connected

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()
