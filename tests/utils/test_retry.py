# ABOUTME: Tests for the transport retry policy built on tenacity
# ABOUTME: Validates linear backoff, the retry budget and non-retryable short-circuiting

from unittest.mock import AsyncMock

import pytest

from wechat2md.errors import ContentNotFoundError, NetworkError, NetworkErrorKind
from wechat2md.utils.retry import RetryState, call_with_retry, is_retryable


def _timeout() -> NetworkError:
    return NetworkError(NetworkErrorKind.TIMEOUT, "timed out", url="https://mp.weixin.qq.com/s?__biz=x")


class TestIsRetryable:
    """Test which failures qualify for another attempt."""

    @pytest.mark.parametrize(
        "kind",
        [
            NetworkErrorKind.TIMEOUT,
            NetworkErrorKind.CONNECTION_RESET,
            NetworkErrorKind.DNS_FAILURE,
            NetworkErrorKind.CONNECTION_ABORTED,
        ],
    )
    def test_transport_kinds_are_retryable(self, kind):
        assert is_retryable(NetworkError(kind, "boom"))

    @pytest.mark.parametrize("kind", [NetworkErrorKind.HTTP_STATUS, NetworkErrorKind.OTHER])
    def test_other_kinds_are_not_retryable(self, kind):
        assert not is_retryable(NetworkError(kind, "boom"))

    def test_non_network_errors_are_not_retryable(self):
        assert not is_retryable(ContentNotFoundError("no body"))
        assert not is_retryable(ValueError("bad"))


class TestCallWithRetry:
    """Test the retry loop with an injected sleep."""

    @pytest.mark.asyncio
    async def test_success_first_try_does_not_sleep(self):
        sleep = AsyncMock()
        func = AsyncMock(return_value="<html/>")

        result = await call_with_retry(func, "url", max_retries=3, base_delay=1.0, sleep=sleep)

        assert result == "<html/>"
        func.assert_awaited_once_with("url")
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_backoff_is_attempt_times_base(self):
        sleep = AsyncMock()
        func = AsyncMock(side_effect=[_timeout(), _timeout(), _timeout(), "ok"])
        state = RetryState(max_attempts=4)

        result = await call_with_retry(func, max_retries=3, base_delay=1.0, sleep=sleep, state=state)

        assert result == "ok"
        assert [call.args[0] for call in sleep.await_args_list] == [1.0, 2.0, 3.0]
        assert state.attempts_made == 4
        assert state.last_error_kind == NetworkErrorKind.TIMEOUT

    @pytest.mark.asyncio
    async def test_exhausted_retries_reraise_last_error(self):
        sleep = AsyncMock()
        func = AsyncMock(side_effect=[_timeout() for _ in range(4)])

        with pytest.raises(NetworkError) as exc_info:
            await call_with_retry(func, max_retries=3, base_delay=0.5, sleep=sleep)

        assert exc_info.value.error_kind == NetworkErrorKind.TIMEOUT
        assert func.await_count == 4
        assert [call.args[0] for call in sleep.await_args_list] == [0.5, 1.0, 1.5]

    @pytest.mark.asyncio
    async def test_non_retryable_error_raised_immediately(self):
        sleep = AsyncMock()
        error = NetworkError(NetworkErrorKind.HTTP_STATUS, "HTTP 404", status_code=404)
        func = AsyncMock(side_effect=error)
        state = RetryState(max_attempts=4)

        with pytest.raises(NetworkError) as exc_info:
            await call_with_retry(func, max_retries=3, base_delay=1.0, sleep=sleep, state=state)

        assert exc_info.value is error
        func.assert_awaited_once()
        sleep.assert_not_awaited()
        assert state.attempts_made == 1

    @pytest.mark.asyncio
    async def test_zero_retries_means_single_attempt(self):
        func = AsyncMock(side_effect=_timeout())

        with pytest.raises(NetworkError):
            await call_with_retry(func, max_retries=0, base_delay=1.0, sleep=AsyncMock())

        func.assert_awaited_once()
