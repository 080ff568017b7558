"""Authoritative in-process Python API for channel resolution."""

from __future__ import annotations

from abc import ABC, abstractmethod

from packages.router_shared.errors import Result
from services.action.channel_router.domain import ChannelDecision


class ChannelRouterService(ABC):
    """Decide whether a client follows the testing or the release channel."""

    @abstractmethod
    def resolve_channel(
        self, *, module_name: str | None, account_number: str | None
    ) -> Result[ChannelDecision]:
        """Resolve one channel; only a missing module name fails."""
