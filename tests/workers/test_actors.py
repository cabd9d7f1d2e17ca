"""
Tests for actor registration, retry policy and broker setup, run against
dramatiq's StubBroker and an in-process Worker.
"""

import asyncio

import pytest
from unittest.mock import patch
from dramatiq import Message, Worker
from dramatiq.brokers.stub import StubBroker
from dramatiq.middleware import AgeLimit, Retries, ShutdownNotifications, TimeLimit

from raseed.config import Settings
from raseed.errors import MalformedModelOutput, NotFound, TransientIO
from raseed.events.bus import DramatiqEventBus
from raseed.workers.actors import make_retry_policy, register_actors
from raseed.workers.broker import configure_broker, configure_publisher
from raseed.workers.dependencies import build_dependencies

RECEIPT_REPLY = '{"store_name": "Pizza Palace", "total_amount": 45.99, "items": []}'


@pytest.fixture
def worker_settings():
    settings = Settings()
    settings.WORKER_MAX_RETRIES = 0
    settings.WORKER_TIME_LIMIT_MS = 10000
    return settings


@pytest.fixture
def stub_broker():
    broker = StubBroker()
    broker.emit_after("process_boot")
    yield broker
    broker.flush_all()
    broker.close()


@pytest.fixture
def actors(stub_broker, deps, worker_settings):
    return register_actors(stub_broker, deps, worker_settings)


@pytest.fixture
def stub_worker(stub_broker, actors):
    worker = Worker(stub_broker, worker_timeout=100)
    worker.start()
    yield worker
    worker.stop()


@pytest.fixture
def publisher():
    broker = StubBroker()
    yield broker
    broker.flush_all()
    broker.close()


def drain(broker, worker, queue_name):
    broker.join(queue_name, fail_fast=False)
    worker.join()


class TestRetryPolicy:

    def test_only_transient_errors_are_retried(self):
        should_retry = make_retry_policy(max_retries=3)

        assert should_retry(0, TransientIO("down")) is True
        assert should_retry(2, TransientIO("down")) is True
        assert should_retry(3, TransientIO("down")) is False
        assert should_retry(0, MalformedModelOutput("bad", raw_text="x")) is False
        assert should_retry(0, NotFound("receipts", "r1")) is False
        assert should_retry(0, RuntimeError("bug")) is False


class TestRegisterActors:

    def test_one_actor_per_consumed_topic(self, actors, stub_broker):
        assert {topic: actor.actor_name for topic, actor in actors.items()} == {
            "receipt-processing": "process_receipt",
            "query-processing": "process_query",
            "stock-management": "process_stock_management",
            "third-party-integration": "process_third_party_integration",
        }
        for topic, actor in actors.items():
            assert actor.queue_name == topic
            assert actor.options["time_limit"] == 10000

    def test_published_receipt_event_is_processed(self, stub_broker, stub_worker, store, extractor):
        store.seed("receipts", {"id": "r1", "user_id": "u1", "image_url": "https://x/r1.jpg"})
        extractor.replies.append(RECEIPT_REPLY)
        bus = DramatiqEventBus(stub_broker)

        asyncio.run(
            bus.publish(
                "receipt-processing",
                {"receipt_id": "r1", "user_id": "u1", "image_url": "https://x/r1.jpg"},
            )
        )
        drain(stub_broker, stub_worker, "receipt-processing")

        assert store.all("receipts")["r1"]["processing_status"] == "finalized"
        assert "receipt_r1" in store.all("wallet_passes")
        assert stub_broker.dead_letters == []

    def test_malformed_output_is_acknowledged(self, stub_broker, stub_worker, actors, store, extractor):
        store.seed("receipts", {"id": "r1", "user_id": "u1", "image_url": "https://x/r1.jpg"})
        extractor.replies.append("no receipt here")

        actors["receipt-processing"].send({"receipt_id": "r1", "user_id": "u1", "image_url": "https://x/r1.jpg"})
        drain(stub_broker, stub_worker, "receipt-processing")

        assert stub_broker.dead_letters == []
        assert len(extractor.calls) == 1
        assert store.all("wallet_passes") == {}

    def test_exhausted_transient_failure_is_dead_lettered(self, stub_broker, stub_worker, actors, store):
        store.failures[("delete", "wallet_passes")] = TransientIO("store down")

        actors["stock-management"].send({"item_id": "s1", "user_id": "u1", "action": "deleted"})
        drain(stub_broker, stub_worker, "stock-management")

        assert len(stub_broker.dead_letters) == 1

    def test_expiry_notification_is_left_for_its_consumer(
        self, stub_broker, stub_worker, actors, publisher, deps, store
    ):
        deps.bus = DramatiqEventBus(publisher)
        store.seed(
            "stock_items",
            {
                "id": "s1",
                "user_id": "u1",
                "name": "Milk",
                "category": "dairy",
                "quantity": 2,
                "unit": "l",
                "expiry_date": "2025-07-19T12:00:00+00:00",
                "status": "expired",
            },
        )

        actors["stock-management"].send({"item_id": "s1", "user_id": "u1", "action": "created"})
        drain(stub_broker, stub_worker, "stock-management")

        assert "stock_s1" in store.all("wallet_passes")
        assert stub_broker.dead_letters == []
        assert "notification-events" not in stub_broker.queues
        assert publisher.queues["notification-events"].qsize() == 1
        notification = Message.decode(publisher.queues["notification-events"].get())
        assert notification.actor_name == "deliver_notification"
        assert notification.args[0]["type"] == "stock_expiry"

    def test_unexpected_error_is_not_retried(self, stub_broker, stub_worker, actors, store, image_loader):
        store.seed("receipts", {"id": "r1", "user_id": "u1", "image_url": "https://x/r1.jpg"})
        image_loader.error = RuntimeError("bug")

        actors["receipt-processing"].send({"receipt_id": "r1", "user_id": "u1", "image_url": "https://x/r1.jpg"})
        drain(stub_broker, stub_worker, "receipt-processing")

        assert len(image_loader.loaded) == 1
        assert len(stub_broker.dead_letters) == 1


class TestConfigureBroker:

    def test_installs_required_middleware_and_sets_global_broker(self, worker_settings):
        broker = StubBroker(middleware=[])

        with patch("raseed.workers.broker.RedisBroker", return_value=broker) as redis_broker, \
                patch("raseed.workers.broker.dramatiq.set_broker") as set_broker:
            configured = configure_broker(worker_settings)

        assert configured is broker
        redis_broker.assert_called_once_with(url=worker_settings.DRAMATIQ_BROKER_URL)
        set_broker.assert_called_once_with(broker)
        for middleware_cls in (AgeLimit, TimeLimit, ShutdownNotifications, Retries):
            assert sum(isinstance(m, middleware_cls) for m in broker.middleware) == 1

    def test_publisher_is_not_the_global_broker(self, worker_settings):
        broker = StubBroker(middleware=[])

        with patch("raseed.workers.broker.RedisBroker", return_value=broker) as redis_broker, \
                patch("raseed.workers.broker.dramatiq.set_broker") as set_broker:
            publisher = configure_publisher(worker_settings)

        assert publisher is broker
        redis_broker.assert_called_once_with(url=worker_settings.DRAMATIQ_BROKER_URL)
        set_broker.assert_not_called()


class TestBuildDependencies:

    def test_missing_google_key_is_rejected(self, worker_settings, stub_broker):
        worker_settings.GOOGLE_API_KEY = ""

        with pytest.raises(ValueError):
            build_dependencies(worker_settings, stub_broker)

    def test_wires_production_adapters(self, worker_settings, stub_broker):
        worker_settings.GOOGLE_API_KEY = "test-google-api-key"

        with patch("raseed.workers.dependencies.get_service_role_client") as get_client, \
                patch("raseed.workers.dependencies.genai.Client") as genai_client:
            deps = build_dependencies(worker_settings, stub_broker)

        get_client.assert_called_once_with(worker_settings)
        genai_client.assert_called_once_with(api_key="test-google-api-key")
        assert isinstance(deps.bus, DramatiqEventBus)
