"""Network module."""

from .network_service import INetworkService, NetworkService

__all__ = ["INetworkService", "NetworkService"]
