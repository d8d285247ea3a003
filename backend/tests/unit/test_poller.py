"""
长任务轮询单元测试
"""

import httpx
import pytest
from unittest.mock import AsyncMock

from app.core.ai.exceptions import (
    MissingArtifactError,
    OperationFailedError,
    OperationTimeoutError,
)
from app.core.ai.models import OperationHandle
from app.core.ai.poller import AsyncOperationPoller
from tests.utils.mock_utils import MockBuilder

NAME = "operations/video-1"
URI = "https://files/video-1"


def pending() -> OperationHandle:
    return OperationHandle(name=NAME)


def finished(uri=URI, error=None) -> OperationHandle:
    return OperationHandle(name=NAME, done=True, artifact_uri=uri, error=error)


class FakeClock:
    """每次读取前进固定秒数的时钟"""

    def __init__(self, step: float):
        self.now = 0.0
        self.step = step

    def __call__(self) -> float:
        value = self.now
        self.now += self.step
        return value


@pytest.mark.unit
@pytest.mark.poller
class TestAsyncOperationPoller:
    """视频任务轮询测试"""

    @pytest.mark.asyncio
    async def test_polls_until_done(self, fast_retry, sleep_recorder):
        poller = AsyncOperationPoller(fast_retry, poll_interval=5.0, sleep=sleep_recorder)
        submit = AsyncMock(return_value=pending())
        refresh = AsyncMock(side_effect=[pending(), pending(), finished()])

        handle = await poller.wait(submit, refresh)

        assert handle.artifact_uri == URI
        assert submit.await_count == 1
        assert refresh.await_count == 3
        assert sleep_recorder.delays == [5.0, 5.0, 5.0]

    @pytest.mark.asyncio
    async def test_immediately_done_operation_is_not_polled(self, fast_retry, sleep_recorder):
        poller = AsyncOperationPoller(fast_retry, poll_interval=5.0, sleep=sleep_recorder)
        refresh = AsyncMock()

        handle = await poller.wait(AsyncMock(return_value=finished()), refresh)

        assert handle.done
        refresh.assert_not_awaited()
        assert sleep_recorder.delays == []

    @pytest.mark.asyncio
    async def test_refresh_receives_latest_handle(self, fast_retry, sleep_recorder):
        poller = AsyncOperationPoller(fast_retry, poll_interval=1.0, sleep=sleep_recorder)
        first = pending()
        second = OperationHandle(name=NAME, raw="second")
        refresh = AsyncMock(side_effect=[second, finished()])

        await poller.wait(AsyncMock(return_value=first), refresh)

        assert refresh.await_args_list[0].args[0] is first
        assert refresh.await_args_list[1].args[0] is second

    @pytest.mark.asyncio
    async def test_missing_uri_is_fatal_and_not_retried(self, fast_retry, sleep_recorder):
        poller = AsyncOperationPoller(fast_retry, poll_interval=5.0, sleep=sleep_recorder)
        refresh = AsyncMock(side_effect=[finished(uri=None)])

        with pytest.raises(MissingArtifactError):
            await poller.wait(AsyncMock(return_value=pending()), refresh)

        assert refresh.await_count == 1
        assert sleep_recorder.delays == [5.0]

    @pytest.mark.asyncio
    async def test_server_failure_raises(self, fast_retry, sleep_recorder):
        poller = AsyncOperationPoller(fast_retry, poll_interval=5.0, sleep=sleep_recorder)
        refresh = AsyncMock(side_effect=[finished(uri=None, error={"message": "safety filter"})])

        with pytest.raises(OperationFailedError) as exc_info:
            await poller.wait(AsyncMock(return_value=pending()), refresh)

        assert "safety filter" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_timeout(self, fast_retry, sleep_recorder):
        poller = AsyncOperationPoller(
            fast_retry, poll_interval=5.0, timeout=12.0, sleep=sleep_recorder, clock=FakeClock(5.0)
        )
        refresh = AsyncMock(return_value=pending())

        with pytest.raises(OperationTimeoutError) as exc_info:
            await poller.wait(AsyncMock(return_value=pending()), refresh)

        assert exc_info.value.details["operation_name"] == NAME
        assert refresh.await_count == exc_info.value.details["poll_count"]

    @pytest.mark.asyncio
    async def test_transient_errors_are_retried(self, fast_retry, sleep_recorder):
        poller = AsyncOperationPoller(fast_retry, poll_interval=5.0, sleep=sleep_recorder)
        submit = AsyncMock(side_effect=[MockBuilder.create_api_error(429, "quota"), pending()])
        refresh = AsyncMock(side_effect=[MockBuilder.create_api_error(503, "unavailable"), finished()])

        handle = await poller.wait(submit, refresh)

        assert handle.done
        assert submit.await_count == 2
        assert refresh.await_count == 2
        # 重试退避与轮询间隔交替出现
        assert sleep_recorder.delays == [1.0, 5.0, 1.0]

    @pytest.mark.asyncio
    async def test_network_failure_during_polling_does_not_abort(self, fast_retry, sleep_recorder):
        """测试状态查询时的断连与超时被重试，任务继续轮询至完成"""
        poller = AsyncOperationPoller(fast_retry, poll_interval=5.0, sleep=sleep_recorder)
        refresh = AsyncMock(side_effect=[
            httpx.ConnectError("connection reset"),
            pending(),
            httpx.ReadTimeout("read timed out"),
            finished(),
        ])

        handle = await poller.wait(AsyncMock(return_value=pending()), refresh)

        assert handle.done
        assert handle.artifact_uri == URI
        assert refresh.await_count == 4
        assert sleep_recorder.delays == [5.0, 1.0, 5.0, 1.0]

    @pytest.mark.asyncio
    async def test_fatal_refresh_error_propagates(self, fast_retry, sleep_recorder):
        poller = AsyncOperationPoller(fast_retry, poll_interval=5.0, sleep=sleep_recorder)
        error = MockBuilder.create_api_error(404, "operation not found", "NOT_FOUND")

        with pytest.raises(type(error)) as exc_info:
            await poller.wait(AsyncMock(return_value=pending()), AsyncMock(side_effect=error))

        assert exc_info.value is error

    @pytest.mark.asyncio
    async def test_run_downloads_artifact(self, fast_retry, sleep_recorder):
        poller = AsyncOperationPoller(fast_retry, poll_interval=5.0, sleep=sleep_recorder)
        download = AsyncMock(return_value=b"mp4")

        uri, data = await poller.run(
            AsyncMock(return_value=pending()),
            AsyncMock(return_value=finished()),
            download,
        )

        assert (uri, data) == (URI, b"mp4")
        download.assert_awaited_once_with(URI)

    @pytest.mark.asyncio
    async def test_run_does_not_download_on_failure(self, fast_retry, sleep_recorder):
        poller = AsyncOperationPoller(fast_retry, poll_interval=5.0, sleep=sleep_recorder)
        download = AsyncMock()

        with pytest.raises(MissingArtifactError):
            await poller.run(AsyncMock(return_value=finished(uri=None)), AsyncMock(), download)

        download.assert_not_awaited()

    def test_defaults_come_from_settings(self, fast_retry):
        poller = AsyncOperationPoller(fast_retry)

        assert poller.poll_interval == 5.0
        assert poller.timeout is None
