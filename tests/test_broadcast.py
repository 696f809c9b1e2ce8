"""Tests for the broadcast medium."""
import asyncio

import pytest

from nexus_relay.broadcast import BroadcastClosed, BroadcastMedium, Lagged


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        BroadcastMedium(capacity=0)


def test_publish_without_subscribers_is_a_noop():
    medium = BroadcastMedium()
    assert medium.publish("nobody listens") == 0


@pytest.mark.asyncio
async def test_subscriber_receives_in_publish_order(medium):
    with medium.subscribe() as subscription:
        for i in range(5):
            assert medium.publish(f"m{i}") == 1
        received = [await subscription.receive() for _ in range(5)]
    assert received == ["m0", "m1", "m2", "m3", "m4"]


@pytest.mark.asyncio
async def test_no_replay_for_late_subscribers(medium):
    medium.publish("before")
    with medium.subscribe() as subscription:
        medium.publish("after")
        assert await subscription.receive() == "after"
        assert subscription.pending == 0


@pytest.mark.asyncio
async def test_every_subscriber_sees_every_message(medium):
    with medium.subscribe() as first, medium.subscribe() as second:
        assert medium.publish("hello") == 2
        assert medium.publish("world") == 2
        assert [await first.receive(), await first.receive()] == ["hello", "world"]
        assert [await second.receive(), await second.receive()] == ["hello", "world"]


@pytest.mark.asyncio
async def test_receive_waits_for_publish(medium):
    with medium.subscribe() as subscription:
        waiter = asyncio.create_task(subscription.receive())
        await asyncio.sleep(0)
        assert not waiter.done()
        medium.publish("late")
        assert await asyncio.wait_for(waiter, 1.0) == "late"


@pytest.mark.asyncio
async def test_lagging_subscriber_drops_oldest():
    medium = BroadcastMedium(capacity=2)
    with medium.subscribe() as slow:
        for i in range(5):
            medium.publish(f"m{i}")

        with pytest.raises(Lagged) as exc_info:
            await slow.receive()
        assert exc_info.value.missed == 3

        # continues with the oldest retained message
        assert await slow.receive() == "m3"
        assert await slow.receive() == "m4"


@pytest.mark.asyncio
async def test_lagging_subscriber_does_not_block_others():
    medium = BroadcastMedium(capacity=2)
    with medium.subscribe() as slow, medium.subscribe() as fast:
        received = []
        for i in range(10):
            assert medium.publish(f"m{i}") == 2
            received.append(await fast.receive())
        assert received == [f"m{i}" for i in range(10)]

        with pytest.raises(Lagged) as exc_info:
            await slow.receive()
        assert exc_info.value.missed == 8
        assert await slow.receive() == "m8"


@pytest.mark.asyncio
async def test_closing_subscription_unsubscribes(medium):
    with medium.subscribe() as subscription:
        assert medium.subscriber_count == 1
    assert medium.subscriber_count == 0
    assert subscription.closed
    assert medium.publish("gone") == 0
    with pytest.raises(BroadcastClosed):
        await subscription.receive()
    # idempotent
    subscription.close()


@pytest.mark.asyncio
async def test_close_wakes_waiting_subscribers():
    medium = BroadcastMedium()
    subscription = medium.subscribe()
    waiter = asyncio.create_task(subscription.receive())
    await asyncio.sleep(0)

    medium.close()

    with pytest.raises(BroadcastClosed):
        await asyncio.wait_for(waiter, 1.0)
    assert medium.subscriber_count == 0


@pytest.mark.asyncio
async def test_close_drains_buffer_first():
    medium = BroadcastMedium()
    subscription = medium.subscribe()
    medium.publish("last words")
    medium.close()

    assert await subscription.receive() == "last words"
    with pytest.raises(BroadcastClosed):
        await subscription.receive()


@pytest.mark.asyncio
async def test_closed_medium_rejects_new_traffic():
    medium = BroadcastMedium()
    medium.close()
    medium.close()

    assert medium.closed
    assert medium.publish("ignored") == 0
    subscription = medium.subscribe()
    with pytest.raises(BroadcastClosed):
        await subscription.receive()
