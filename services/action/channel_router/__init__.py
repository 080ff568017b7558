"""Channel router native package exports."""

from services.action.channel_router.domain import (
    RELEASE_CHANNEL,
    TESTING_CHANNEL,
    ChannelDecision,
    DecisionSource,
)
from services.action.channel_router.implementation import DefaultChannelRouterService
from services.action.channel_router.service import ChannelRouterService

__all__ = [
    "ChannelDecision",
    "ChannelRouterService",
    "DecisionSource",
    "DefaultChannelRouterService",
    "RELEASE_CHANNEL",
    "TESTING_CHANNEL",
]
