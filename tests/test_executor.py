import asyncio

import pytest

from core.executor import error_status, execute, is_retryable, retry_delay_ms
from fakes import FakeAPIError


def scripted(*outcomes):
    """Returns (call, attempts) where call pops the next outcome on every attempt."""
    queue = list(outcomes)
    attempts = []

    async def call():
        attempts.append(1)
        outcome = queue.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    return call, attempts


@pytest.mark.asyncio
async def test_rate_limited_twice_then_succeeds(sleeps):
    call, attempts = scripted(FakeAPIError(429), FakeAPIError(429), "ok")

    assert await execute(call) == "ok"
    assert len(attempts) == 3
    # 3 retries remaining -> 2000/3 ms, then 2 remaining -> 1000 ms.
    assert sleeps == pytest.approx([2000 / 3 / 1000, 1.0])


@pytest.mark.asyncio
async def test_not_found_propagates_without_retry(sleeps):
    error = FakeAPIError(404)
    call, attempts = scripted(error)

    with pytest.raises(FakeAPIError) as info:
        await execute(call)

    assert info.value is error
    assert len(attempts) == 1
    assert sleeps == []


@pytest.mark.asyncio
async def test_server_faults_exhaust_retries_and_raise_last_error(sleeps):
    errors = [FakeAPIError(500), FakeAPIError(502), FakeAPIError(503), FakeAPIError(500, "final")]
    call, attempts = scripted(*errors)

    with pytest.raises(FakeAPIError) as info:
        await execute(call, max_retries=3)

    assert info.value is errors[-1]
    assert len(attempts) == 4
    assert len(sleeps) == 3


@pytest.mark.asyncio
async def test_wait_is_base_delay_divided_by_remaining_retries(sleeps):
    # Not exponential backoff: the divisor is the retries still left, so waits grow 667 -> 1000 -> 2000 ms.
    call, _ = scripted(FakeAPIError(503), FakeAPIError(503), FakeAPIError(503), "ok")

    await execute(call)

    assert sleeps == pytest.approx([2000 / 3 / 1000, 2000 / 2 / 1000, 2000 / 1 / 1000])
    assert [retry_delay_ms(r) for r in (3, 2, 1)] == pytest.approx([666.666, 1000, 2000], rel=1e-3)


@pytest.mark.asyncio
async def test_errors_without_status_are_permanent(sleeps):
    call, attempts = scripted(ValueError("attachment rejected"))

    with pytest.raises(ValueError):
        await execute(call)

    assert len(attempts) == 1
    assert sleeps == []


@pytest.mark.asyncio
async def test_zero_retries_makes_a_single_attempt(sleeps):
    call, attempts = scripted(FakeAPIError(429))

    with pytest.raises(FakeAPIError):
        await execute(call, max_retries=0)

    assert len(attempts) == 1


@pytest.mark.asyncio
async def test_concurrent_callers_keep_their_own_retry_budget(sleeps):
    first, first_attempts = scripted(FakeAPIError(429), "a")
    second, second_attempts = scripted(FakeAPIError(500), FakeAPIError(500), "b")

    results = await asyncio.gather(execute(first), execute(second))

    assert results == ["a", "b"]
    assert len(first_attempts) == 2
    assert len(second_attempts) == 3


def test_status_classification():
    class WithStatusCode(Exception):
        status_code = 503

    assert error_status(FakeAPIError(429)) == 429
    assert error_status(WithStatusCode()) == 503
    assert error_status(RuntimeError()) is None
    assert is_retryable(FakeAPIError(429))
    assert is_retryable(FakeAPIError(500))
    assert not is_retryable(FakeAPIError(400))
    assert not is_retryable(FakeAPIError(403))
