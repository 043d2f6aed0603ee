"""Dependency injection provider for the event system."""

import logging
from typing import Any, NewType

from apscheduler.triggers.cron import CronTrigger
from dishka import AsyncContainer, provide

from placement.config import Config
from placement.domain.company.handler import (
    ReconcileCompany,
    ReconcileOnStartup,
    SyncMirrorProjection,
)
from placement.domain.company.schedule import FullReconciliation
from placement.domain.shared.error import ConfigurationError
from placement.domain.shared.event import EventHandler
from placement.domain.shared.model.subscription_registry import SubscriptionRegistry
from placement.domain.shared.outbox import Outbox
from placement.domain.shared.port.event_repository import EventRepository
from placement.infrastructure.event.worker import ScheduleConfig, ScheduleConfigs, WorkerPool
from placement.util.di.base import Provider
from placement.util.di.scope import Scope

logger = logging.getLogger(__name__)


HandlerTypes = NewType("HandlerTypes", list[type[EventHandler[Any]]])

# All event handlers for WorkerPool registration
HANDLERS: HandlerTypes = HandlerTypes(
    [
        ReconcileCompany,
        SyncMirrorProjection,
        ReconcileOnStartup,
    ]
)


def build_subscription_registry(handlers: HandlerTypes) -> SubscriptionRegistry:
    """Map each handler's event type name to the handler names consuming it."""
    registry: dict[str, set[str]] = {}
    for handler in handlers:
        registry.setdefault(handler.__event_type__.__name__, set()).add(handler.__name__)
    return SubscriptionRegistry(registry)


def build_schedules(config: Config) -> ScheduleConfigs:
    cron = config.lifecycle.reconcile_cron
    try:
        CronTrigger.from_crontab(cron)
    except ValueError as e:
        raise ConfigurationError(
            f"lifecycle.reconcile_cron is not a valid crontab expression: {cron!r}"
        ) from e

    return ScheduleConfigs(
        [
            ScheduleConfig(
                schedule_type=FullReconciliation,
                cron=cron,
                id="full-reconciliation",
            )
        ]
    )


class EventProvider(Provider):
    """Provides event system components.

    Handlers, schedules and the Outbox are UOW-scoped (fresh per unit of
    work). WorkerPool and SubscriptionRegistry are APP-scoped singletons.
    """

    @provide(scope=Scope.UOW)
    def get_outbox(self, repo: EventRepository, registry: SubscriptionRegistry) -> Outbox:
        return Outbox(repo, registry)

    for _handler_type in HANDLERS:
        locals()[_handler_type.__name__] = provide(_handler_type, scope=Scope.UOW)

    full_reconciliation = provide(FullReconciliation, scope=Scope.UOW)

    @provide(scope=Scope.APP)
    def get_handler_types(self) -> HandlerTypes:
        return HANDLERS

    @provide(scope=Scope.APP)
    def get_subscription_registry(self, handler_types: HandlerTypes) -> SubscriptionRegistry:
        registry = build_subscription_registry(handler_types)
        logger.info(
            f"Built subscription registry: {len(registry)} event types, "
            f"{sum(len(v) for v in registry.values())} consumer groups"
        )
        return registry

    @provide(scope=Scope.APP)
    def get_worker_pool(
        self,
        container: AsyncContainer,
        handler_types: HandlerTypes,
        config: Config,
    ) -> WorkerPool:
        pool = WorkerPool(
            container=container,
            stale_claim_interval=config.worker.stale_claim_interval,
            schedules=build_schedules(config),
        )
        for handler_type in handler_types:
            max_retries = config.mirror.max_retries if handler_type is SyncMirrorProjection else None
            pool.register(
                handler_type,
                max_retries=max_retries,
                poll_interval=config.worker.poll_interval,
            )

        logger.info(f"WorkerPool created with {len(pool.workers)} workers")
        return pool
