import pytest

from sessionstash.modules.sequence import LocalSequence, RedisSequence


@pytest.mark.asyncio
async def test_redis_sequence(mock_redis_with_data):
    sequence = RedisSequence(mock_redis_with_data)

    assert [await sequence.next() for _ in range(3)] == [1, 2, 3]


@pytest.mark.asyncio
async def test_redis_sequence_key(mock_redis):
    mock_redis.incr.return_value = "41"
    sequence = RedisSequence(mock_redis, name="orders")

    assert await sequence.next() == 41
    mock_redis.incr.assert_called_once_with("seq:orders")


@pytest.mark.asyncio
async def test_named_sequences_are_independent(mock_redis_with_data):
    first = RedisSequence(mock_redis_with_data, name="a")
    second = RedisSequence(mock_redis_with_data, name="b")

    assert await first.next() == 1
    assert await first.next() == 2
    assert await second.next() == 1


@pytest.mark.asyncio
async def test_local_sequence():
    sequence = LocalSequence(start=10)

    assert await sequence.next() == 10
    assert await sequence.next() == 11


@pytest.mark.asyncio
async def test_local_sequence_seeded_from_clock():
    sequence = LocalSequence()

    first = await sequence.next()
    second = await sequence.next()

    assert first > 0
    assert second == first + 1
