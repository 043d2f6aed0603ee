"""Event handler metadata, worker configuration and claim results."""

from datetime import UTC, datetime
from typing import ClassVar
from uuid import uuid4

import pytest

from placement.domain.company.event import CompanyChanged
from placement.domain.company.handler import SyncMirrorProjection
from placement.domain.shared.event import (
    ClaimResult,
    EventHandler,
    EventId,
    WorkerConfig,
    WorkerState,
    WorkerStatus,
)


class Plain(EventHandler[CompanyChanged]):
    async def handle(self, event: CompanyChanged) -> None:
        pass


class Tuned(EventHandler[CompanyChanged]):
    __batch_size__: ClassVar[int] = 25
    __max_retries__: ClassVar[int] = 8

    seen: list[str]


class TestEventHandler:
    def test_event_type_from_generic_parameter(self):
        assert Plain.__event_type__ is CompanyChanged

    def test_defaults(self):
        assert (Plain.__batch_size__, Plain.__max_retries__, Plain.__claim_timeout__) == (
            1,
            3,
            300.0,
        )

    def test_class_overrides_and_dataclass_fields(self):
        handler = Tuned(seen=[])

        assert Tuned.__batch_size__ == 25
        assert Tuned.__max_retries__ == 8
        assert handler.seen == []

    def test_mirror_sync_retries_more(self):
        assert SyncMirrorProjection.__max_retries__ == 5

    async def test_handle_must_be_implemented(self):
        event = CompanyChanged(id=EventId(uuid4()), company_id="co-1", reason="created")

        with pytest.raises(NotImplementedError, match="Tuned"):
            await Tuned(seen=[]).handle(event)


class TestWorkerConfig:
    def test_valid(self):
        config = WorkerConfig(name="w", event_types=(CompanyChanged,))

        assert config.batch_size == 1
        assert WorkerState(config=config).status is WorkerStatus.IDLE

    @pytest.mark.parametrize(
        "overrides,message",
        [
            ({"event_types": ()}, "event_types"),
            ({"batch_size": 0}, "batch_size"),
            ({"poll_interval": 0}, "poll_interval"),
            ({"max_retries": -1}, "max_retries"),
            ({"claim_timeout": 0}, "claim_timeout"),
        ],
    )
    def test_rejects_invalid(self, overrides, message):
        fields = {"name": "w", "event_types": (CompanyChanged,), **overrides}

        with pytest.raises(ValueError, match=message):
            WorkerConfig(**fields)


class TestClaimResult:
    def test_empty_is_falsy(self):
        result = ClaimResult(events=[], claimed_at=datetime.now(UTC))

        assert not result
        assert len(result) == 0

    def test_iterates_events(self):
        event = CompanyChanged(id=EventId(uuid4()), company_id="co-1", reason="created")
        result = ClaimResult(events=[event], claimed_at=datetime.now(UTC))

        assert result
        assert list(result) == [event]
