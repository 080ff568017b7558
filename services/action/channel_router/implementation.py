"""Concrete channel router implementation."""

from __future__ import annotations

from packages.router_shared.errors import (
    Result,
    codes,
    failure,
    success,
    validation_error,
)
from packages.router_shared.logging import get_logger
from packages.router_shared.metrics import RouterMetrics, router_metrics
from resources.substrates.database import QueryError, normalize_database_error
from services.action.channel_router.domain import (
    RELEASE_CHANNEL,
    TESTING_CHANNEL,
    ChannelDecision,
    DecisionSource,
)
from services.action.channel_router.service import ChannelRouterService
from services.state.update_store import UpdateStore

_LOGGER = get_logger(__name__)


class DefaultChannelRouterService(ChannelRouterService):
    """Membership-backed resolver that falls back to release on lookup errors."""

    def __init__(
        self, *, store: UpdateStore, metrics: RouterMetrics | None = None
    ) -> None:
        self._store = store
        self._metrics = metrics or router_metrics()

    def resolve_channel(
        self, *, module_name: str | None, account_number: str | None
    ) -> Result[ChannelDecision]:
        """Resolve one channel for ``module_name`` and the caller's account."""
        self._metrics.requests.add(1, attributes={"endpoint": "channel"})
        if module_name is None or module_name == "":
            return failure(
                validation_error(
                    "missing required parameter: 'module'",
                    code=codes.MISSING_REQUIRED_PARAMETER,
                    metadata={"parameter": "module"},
                )
            )

        account = account_number or ""
        try:
            count = self._store.count(module_name, account)
        except QueryError as exc:
            error = normalize_database_error(exc)
            self._metrics.channel_lookup_failures_total.add(
                1, attributes={"module": module_name}
            )
            _LOGGER.error(
                "channel lookup failed; defaulting to release",
                extra={
                    "module_name": module_name,
                    "account_number": account,
                    "error": error.message,
                    "code": error.code,
                    "retryable": error.retryable,
                },
            )
            return success(
                ChannelDecision(url=RELEASE_CHANNEL, source=DecisionSource.LOOKUP_FAILED)
            )

        if count > 0:
            return success(
                ChannelDecision(url=TESTING_CHANNEL, source=DecisionSource.MEMBERSHIP)
            )
        return success(ChannelDecision(url=RELEASE_CHANNEL, source=DecisionSource.DEFAULT))
