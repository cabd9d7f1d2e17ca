"""
Tests for the dramatiq-backed event bus.
"""

import dramatiq
import pytest
import redis
from unittest.mock import MagicMock
from dramatiq.brokers.stub import StubBroker

from raseed.errors import TransientIO, ValidationError
from raseed.events.bus import DramatiqEventBus


@pytest.fixture
def stub_broker():
    broker = StubBroker()
    broker.emit_after("process_boot")
    yield broker
    broker.flush_all()
    broker.close()


class TestPublish:

    @pytest.mark.asyncio
    async def test_enqueues_payload_for_topic_owner(self, stub_broker):
        bus = DramatiqEventBus(stub_broker)
        payload = {"user_id": "u1", "type": "stock_expiry", "title": "Item Expiry Alert", "message": "Milk is expired"}

        message_id = await bus.publish("notification-events", payload)

        queue = stub_broker.queues["notification-events"]
        assert queue.qsize() == 1
        message = dramatiq.Message.decode(queue.get())
        assert message.message_id == message_id
        assert message.actor_name == "deliver_notification"
        assert list(message.args) == [payload]

    @pytest.mark.asyncio
    async def test_unknown_topic_is_rejected(self, stub_broker):
        bus = DramatiqEventBus(stub_broker)

        with pytest.raises(ValidationError):
            await bus.publish("wallet-pass-creation", {"pass_id": "receipt_r1"})

    @pytest.mark.asyncio
    async def test_broker_connection_failure_is_transient(self):
        broker = MagicMock()
        broker.enqueue.side_effect = redis.ConnectionError("redis is down")
        bus = DramatiqEventBus(broker)

        with pytest.raises(TransientIO):
            await bus.publish("notification-events", {"user_id": "u1"})
