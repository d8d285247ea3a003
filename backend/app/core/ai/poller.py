"""
长任务轮询
提交视频生成任务后轮询至完成，并下载最终产物
"""

import asyncio
from typing import Awaitable, Callable, Optional, Tuple

from app.core.config import settings
from app.core.log_messages import log_messages
from app.core.log_utils import get_logger
from .exceptions import MissingArtifactError, OperationFailedError, OperationTimeoutError
from .models import OperationHandle, OperationState
from .retry import RetryOrchestrator, SleepFunc

logger = get_logger(__name__)

SubmitFunc = Callable[[], Awaitable[OperationHandle]]
RefreshFunc = Callable[[OperationHandle], Awaitable[OperationHandle]]
DownloadFunc = Callable[[str], Awaitable[bytes]]


class AsyncOperationPoller:
    """
    异步任务轮询器

    状态流转: submitted -> polling -> done | failed
    提交与每次状态查询都经过重试编排器；完成但缺少产物URI属于致命错误，不会重试。
    """

    def __init__(
        self,
        retry: RetryOrchestrator,
        poll_interval: Optional[float] = None,
        timeout: Optional[float] = None,
        sleep: SleepFunc = asyncio.sleep,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.retry = retry
        self.poll_interval = settings.video_poll_interval if poll_interval is None else poll_interval
        self.timeout = settings.video_poll_timeout if timeout is None else timeout
        self._sleep = sleep
        self._clock = clock

    def _now(self) -> float:
        if self._clock is not None:
            return self._clock()
        return asyncio.get_running_loop().time()

    async def wait(self, submit: SubmitFunc, refresh: RefreshFunc) -> OperationHandle:
        """
        提交任务并轮询直到完成

        Args:
            submit: 提交任务，返回任务句柄
            refresh: 根据句柄查询最新状态

        Returns:
            OperationHandle: 已完成且带有产物URI的句柄

        Raises:
            OperationFailedError: 服务端报告任务失败
            MissingArtifactError: 任务完成但没有产物URI
            OperationTimeoutError: 超过配置的整体轮询时限
        """
        handle = await self.retry.with_retry(submit)
        state = OperationState.SUBMITTED
        started_at = self._now()
        poll_count = 0
        logger.info(
            log_messages.VIDEO_OPERATION_SUBMITTED,
            operation="video_operation",
            operation_name=handle.name,
            state=state.value
        )

        while not handle.done:
            if self.timeout is not None and self._now() - started_at >= self.timeout:
                logger.error(
                    log_messages.VIDEO_OPERATION_FAILED,
                    operation="video_operation",
                    operation_name=handle.name,
                    reason="timeout",
                    poll_count=poll_count
                )
                raise OperationTimeoutError(
                    f"视频任务轮询超时（{self.timeout}秒）",
                    details={"operation_name": handle.name, "poll_count": poll_count}
                )

            poll_count += 1
            log = logger.info if state == OperationState.SUBMITTED else logger.debug
            state = OperationState.POLLING
            log(
                log_messages.VIDEO_OPERATION_POLLING,
                operation="video_operation",
                operation_name=handle.name,
                state=state.value,
                poll_count=poll_count
            )
            await self._sleep(self.poll_interval)
            current = handle
            handle = await self.retry.with_retry(lambda: refresh(current))

        if handle.error:
            logger.error(
                log_messages.VIDEO_OPERATION_FAILED,
                operation="video_operation",
                operation_name=handle.name,
                state=OperationState.FAILED.value,
                error=str(handle.error)
            )
            raise OperationFailedError(
                f"视频生成任务失败: {handle.error}",
                details={"operation_name": handle.name}
            )

        if not handle.artifact_uri:
            logger.error(
                log_messages.VIDEO_OPERATION_FAILED,
                operation="video_operation",
                operation_name=handle.name,
                state=OperationState.FAILED.value,
                reason="missing_uri"
            )
            raise MissingArtifactError(
                "视频生成完成但没有返回视频URI",
                details={"operation_name": handle.name}
            )

        logger.info(
            log_messages.VIDEO_OPERATION_DONE,
            operation="video_operation",
            operation_name=handle.name,
            state=OperationState.DONE.value,
            poll_count=poll_count
        )
        return handle

    async def run(
        self,
        submit: SubmitFunc,
        refresh: RefreshFunc,
        download: DownloadFunc,
    ) -> Tuple[str, bytes]:
        """
        提交、轮询并下载产物

        Returns:
            (产物URI, 产物字节)
        """
        handle = await self.wait(submit, refresh)
        data = await download(handle.artifact_uri)
        logger.info(
            log_messages.VIDEO_DOWNLOAD_SUCCESS,
            operation="video_download",
            size=len(data)
        )
        return handle.artifact_uri, data
