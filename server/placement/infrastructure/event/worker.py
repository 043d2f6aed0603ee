"""Worker and WorkerPool for pull-based event processing."""

import asyncio
import logging
from contextlib import AsyncExitStack
from dataclasses import dataclass, field
from typing import Any, NewType
from uuid import uuid4

from apscheduler import AsyncScheduler
from apscheduler.triggers.cron import CronTrigger
from dishka import AsyncContainer

from placement.application.event import ServerStarted
from placement.domain.shared.event import (
    EventHandler,
    EventId,
    Schedule,
    WorkerConfig,
    WorkerState,
    WorkerStatus,
)
from placement.domain.shared.outbox import Outbox
from placement.util.di.scope import Scope

logger = logging.getLogger(__name__)


@dataclass
class ScheduleConfig:
    """Configuration for a scheduled task."""

    schedule_type: type[Schedule]
    cron: str
    id: str
    params: dict[str, Any] = field(default_factory=dict)


ScheduleConfigs = NewType("ScheduleConfigs", list[ScheduleConfig])


class Worker:
    """Pull-based event worker that delegates to an EventHandler.

    Each poll claims a batch of deliveries for the handler's consumer group
    (the handler class name), runs the handler, and marks each delivery
    delivered or failed, all inside one unit of work. A failed delivery is
    retried with backoff until ``max_retries`` attempts, then dead-lettered.

    Configuration is read from the handler's class variables
    (``__batch_size__``, ``__poll_interval__``, ``__max_retries__``,
    ``__claim_timeout__``); ``max_retries`` and ``poll_interval`` may be
    overridden per worker.
    """

    def __init__(
        self,
        handler_type: type[EventHandler[Any]],
        max_retries: int | None = None,
        poll_interval: float | None = None,
    ) -> None:
        self._handler_type = handler_type
        self._event_type = handler_type.__event_type__
        self._batch_size = handler_type.__batch_size__
        self._poll_interval = poll_interval or handler_type.__poll_interval__
        self._max_retries = max_retries or handler_type.__max_retries__

        self._config = WorkerConfig(
            name=handler_type.__name__,
            event_types=(self._event_type,),
            batch_size=self._batch_size,
            poll_interval=self._poll_interval,
            max_retries=self._max_retries,
            claim_timeout=handler_type.__claim_timeout__,
        )
        self._state = WorkerState(config=self._config)
        self._shutdown = False
        self._task: asyncio.Task | None = None
        self._container: AsyncContainer | None = None

    @property
    def name(self) -> str:
        """Worker name, which is also its consumer group."""
        return self._handler_type.__name__

    @property
    def handler_type(self) -> type[EventHandler[Any]]:
        return self._handler_type

    @property
    def config(self) -> WorkerConfig:
        return self._config

    @property
    def state(self) -> WorkerState:
        return self._state

    def set_container(self, container: AsyncContainer) -> None:
        self._container = container

    def start(self) -> asyncio.Task:
        if self._container is None:
            raise RuntimeError("Container not set. Call set_container() first.")

        self._shutdown = False
        self._task = asyncio.create_task(self._run(), name=f"worker-{self.name}")
        logger.info(f"Worker '{self.name}' started")
        return self._task

    def stop(self) -> None:
        """Signal the worker to stop after its current batch."""
        self._shutdown = True
        self._state.status = WorkerStatus.STOPPING
        logger.info(f"Worker '{self.name}' stopping...")

    async def _run(self) -> None:
        try:
            while not self._shutdown:
                try:
                    had_events = await self._poll_once()
                except asyncio.CancelledError:
                    raise
                except Exception as e:
                    # Storage outages must not kill the worker; the next poll retries
                    logger.error(f"Worker '{self.name}' poll failed: {e}")
                    self._state.error = e
                    had_events = False
                if not had_events:
                    await asyncio.sleep(self._poll_interval)
        except asyncio.CancelledError:
            logger.info(f"Worker '{self.name}' cancelled")
            raise
        finally:
            logger.info(f"Worker '{self.name}' stopped")

    async def _poll_once(self) -> bool:
        """Claim and process one batch within a UOW scope.

        Returns:
            True if events were processed, False if idle.
        """
        if self._container is None:
            raise RuntimeError("Container not set")

        self._state.status = WorkerStatus.CLAIMING

        async with self._container(scope=Scope.UOW) as scope:
            outbox = await scope.get(Outbox)
            result = await outbox.claim(
                event_types=[self._event_type],
                limit=self._batch_size,
                consumer_group=self.name,
            )

            if not result.events:
                self._state.status = WorkerStatus.IDLE
                return False

            self._state.status = WorkerStatus.PROCESSING
            self._state.current_batch = result.events
            self._state.last_claim_at = result.claimed_at

            try:
                handler = await scope.get(self._handler_type)
                if self._batch_size > 1:
                    await handler.handle_batch(result.events)
                else:
                    await handler.handle(result.events[0])

                for event in result.events:
                    await outbox.mark_delivered(event.delivery_id)
                self._state.processed_count += len(result.events)

            except Exception as e:
                self._state.failed_count += len(result.events)
                self._state.error = e
                logger.error(f"Worker '{self.name}' batch failed: {e}")
                for event in result.events:
                    dead = await outbox.mark_failed_with_retry(
                        event.delivery_id, str(e), max_retries=self._max_retries
                    )
                    if dead:
                        logger.error(
                            f"Worker '{self.name}' dead-lettered {type(event).__name__} "
                            f"{event.id} after {self._max_retries} attempts: {e}"
                        )

            finally:
                self._state.current_batch = []
                self._state.status = WorkerStatus.IDLE

        return True


class WorkerPool:
    """Runs the workers, the cron schedules and the stale-claim sweeper.

    Usage:
        pool = WorkerPool(container, schedules=schedules)
        pool.register(SyncMirrorProjection, max_retries=5)

        async with pool:
            ...  # workers are running
    """

    def __init__(
        self,
        container: AsyncContainer | None = None,
        stale_claim_interval: float = 60.0,
        schedules: ScheduleConfigs | None = None,
    ) -> None:
        self._container = container
        self._workers: list[Worker] = []
        self._stale_claim_interval = stale_claim_interval
        self._stale_claim_task: asyncio.Task | None = None
        self._shutdown = False
        self._schedules = schedules or ScheduleConfigs([])
        self._scheduler: AsyncScheduler | None = None
        self._exit_stack: AsyncExitStack | None = None
        self._schedule_failures: dict[str, int] = {}

    def set_container(self, container: AsyncContainer) -> None:
        self._container = container
        for worker in self._workers:
            worker.set_container(container)

    @property
    def workers(self) -> list[Worker]:
        return self._workers

    @property
    def schedules(self) -> list[ScheduleConfig]:
        return list(self._schedules)

    def register(
        self,
        handler_type: type[EventHandler[Any]],
        max_retries: int | None = None,
        poll_interval: float | None = None,
    ) -> Worker:
        """Create a Worker for an EventHandler type."""
        worker = Worker(handler_type, max_retries=max_retries, poll_interval=poll_interval)
        if self._container is not None:
            worker.set_container(self._container)
        self._workers.append(worker)
        logger.debug(f"Registered handler '{handler_type.__name__}' as worker")
        return worker

    def get_worker(self, name: str) -> Worker | None:
        for worker in self._workers:
            if worker.name == name:
                return worker
        return None

    async def start(self) -> None:
        if self._container is None:
            raise RuntimeError("Container not set. Call set_container() first.")

        self._shutdown = False
        for worker in self._workers:
            if worker._container is None:
                worker.set_container(self._container)

        self._exit_stack = AsyncExitStack()
        await self._exit_stack.__aenter__()

        self._scheduler = AsyncScheduler()
        await self._exit_stack.enter_async_context(self._scheduler)

        for config in self._schedules:
            await self._scheduler.add_schedule(
                self._run_schedule,
                CronTrigger.from_crontab(config.cron),
                id=config.id,
                kwargs={"config": config},
            )
            logger.debug(f"Registered schedule {config.id} (cron={config.cron})")

        await self._scheduler.start_in_background()

        await self._emit_server_started()

        for worker in self._workers:
            worker.start()

        if self._stale_claim_interval > 0:
            self._stale_claim_task = asyncio.create_task(
                self._run_stale_claim_cleanup(), name="stale-claim-cleanup"
            )

        logger.info(
            f"WorkerPool started with {len(self._workers)} workers, "
            f"{len(self._schedules)} schedules"
        )

    async def _emit_server_started(self) -> None:
        """Emit ServerStarted so startup handlers run once per boot."""
        if self._container is None:
            return

        async with self._container(scope=Scope.UOW) as scope:
            outbox = await scope.get(Outbox)
            await outbox.append(ServerStarted(id=EventId(uuid4())))
        logger.info("ServerStarted event emitted")

    async def stop(self, timeout: float = 30.0) -> None:
        """Stop all workers, waiting up to ``timeout`` seconds for in-flight batches."""
        self._shutdown = True

        for worker in self._workers:
            worker.stop()

        if self._stale_claim_task and not self._stale_claim_task.done():
            self._stale_claim_task.cancel()
            try:
                await self._stale_claim_task
            except asyncio.CancelledError:
                pass

        tasks = [w._task for w in self._workers if w._task and not w._task.done()]
        if tasks:
            _, pending = await asyncio.wait(tasks, timeout=timeout)
            for task in pending:
                task.cancel()

        if self._exit_stack:
            await self._exit_stack.__aexit__(None, None, None)
            self._exit_stack = None

        logger.info("WorkerPool stopped")

    async def _run_schedule(self, config: ScheduleConfig) -> None:
        """Cron task: run a scheduled task in UOW scope."""
        if self._container is None:
            return

        try:
            async with self._container(scope=Scope.UOW) as scope:
                schedule = await scope.get(config.schedule_type)
                await schedule.run(**config.params)

            self._schedule_failures.pop(config.id, None)
            logger.debug(f"Ran schedule {config.id}")

        except (asyncio.CancelledError, SystemExit, KeyboardInterrupt):
            raise
        except Exception as e:
            failures = self._schedule_failures.get(config.id, 0) + 1
            self._schedule_failures[config.id] = failures
            logger.error(f"Failed to run schedule {config.id} (failures: {failures}): {e}")
            if failures >= 5:
                logger.critical(f"Schedule {config.id} has failed {failures} consecutive times")

    async def __aenter__(self) -> "WorkerPool":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        await self.stop()

    async def _run_stale_claim_cleanup(self) -> None:
        """Periodically return abandoned claims to pending."""
        while not self._shutdown:
            try:
                await asyncio.sleep(self._stale_claim_interval)
                if self._shutdown or self._container is None or not self._workers:
                    break

                max_timeout = max(w.config.claim_timeout for w in self._workers)
                async with self._container(scope=Scope.UOW) as scope:
                    outbox = await scope.get(Outbox)
                    count = await outbox.reset_stale_claims(max_timeout)
                    if count > 0:
                        logger.info(f"Reset {count} stale claims")

            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Stale claim cleanup failed: {e}")
