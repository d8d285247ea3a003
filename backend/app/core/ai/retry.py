"""
Provider调用重试编排
对限流/过载类错误与网络抖动按指数退避重试，其余错误立即抛出
"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterable, Optional, TypeVar

import httpx

from app.core.config import settings
from app.core.log_messages import log_messages
from app.core.log_utils import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

RetryPredicate = Callable[[BaseException], bool]
SleepFunc = Callable[[float], Awaitable[None]]

RETRYABLE_STATUS_CODES = frozenset({429, 503})

# google-genai 底层使用 httpx，轮询期间的断连与超时以这些类型抛出
TRANSIENT_NETWORK_ERRORS = (httpx.TransportError, ConnectionError, TimeoutError)


@dataclass(frozen=True)
class RetryPolicy:
    """重试策略"""
    max_retries: int = 20
    initial_delay: float = 1.0
    backoff_factor: float = 1.5
    max_delay: float = 10.0

    @classmethod
    def from_settings(cls) -> "RetryPolicy":
        """从应用配置构建"""
        return cls(
            max_retries=settings.retry_max_retries,
            initial_delay=settings.retry_initial_delay,
            backoff_factor=settings.retry_backoff_factor,
            max_delay=settings.retry_max_delay,
        )

    def next_delay(self, delay: float) -> float:
        """计算下一次等待时间"""
        return min(delay * self.backoff_factor, self.max_delay)


def _extract_status_code(error: BaseException) -> Optional[int]:
    """从不同来源的异常中提取HTTP状态码"""
    # google.genai.errors.APIError 使用 code 字段
    for attr in ("code", "status_code"):
        value = getattr(error, attr, None)
        if isinstance(value, int):
            return value

    response = getattr(error, "response", None)
    value = getattr(response, "status_code", None)
    if isinstance(value, int):
        return value
    return None


def make_retry_predicate(markers: Optional[Iterable[str]] = None) -> RetryPredicate:
    """
    构建可重试错误判定函数

    判定顺序:
        1. 连接中断、读超时等传输层错误可重试
        2. 429/503 可重试，其余明确的4xx（请求本身有误）不重试
        3. 其余错误按消息与status中的关键字判定

    Args:
        markers: 错误消息中代表限流/不可用的关键字，默认取配置

    Returns:
        判定函数，返回True表示该错误可以重试
    """
    marker_list = tuple(markers if markers is not None else settings.retry_error_markers)

    def is_retryable(error: BaseException) -> bool:
        if isinstance(error, TRANSIENT_NETWORK_ERRORS):
            return True

        code = _extract_status_code(error)
        if code in RETRYABLE_STATUS_CODES:
            return True
        if code is not None and 400 <= code < 500:
            return False

        status = getattr(error, "status", None)
        texts = [str(error)]
        if isinstance(status, str):
            texts.append(status)
        return any(marker in text for marker in marker_list for text in texts)

    return is_retryable


class RetryOrchestrator:
    """
    Provider调用重试编排器

    每次失败后根据判定函数区分可重试与致命错误：
    可重试错误等待后再次调用，等待时间按倍数增长并有上限；
    致命错误立即抛出；重试次数耗尽时原样抛出最后一次的错误。
    """

    def __init__(
        self,
        policy: Optional[RetryPolicy] = None,
        is_retryable: Optional[RetryPredicate] = None,
        sleep: SleepFunc = asyncio.sleep,
    ):
        self.policy = policy or RetryPolicy.from_settings()
        self.is_retryable = is_retryable or make_retry_predicate()
        self._sleep = sleep

    async def with_retry(
        self,
        operation: Callable[[], Awaitable[T]],
        max_retries: Optional[int] = None,
        initial_delay: Optional[float] = None,
    ) -> T:
        """
        执行操作，对可重试错误进行退避重试

        Args:
            operation: 无参异步可调用对象，每次重试都会重新调用
            max_retries: 最大重试次数，默认取策略配置
            initial_delay: 首次等待秒数，默认取策略配置

        Returns:
            操作的返回值
        """
        attempts_left = self.policy.max_retries if max_retries is None else max_retries
        delay = self.policy.initial_delay if initial_delay is None else initial_delay
        attempts = 0

        while True:
            attempts += 1
            try:
                return await operation()
            except Exception as e:
                if not self.is_retryable(e):
                    logger.debug(
                        log_messages.RETRY_FATAL,
                        operation="retry_fatal",
                        error=str(e)
                    )
                    raise
                if attempts_left <= 0:
                    logger.warning(
                        log_messages.RETRY_EXHAUSTED,
                        operation="retry_exhausted",
                        attempts=attempts
                    )
                    raise

                logger.warning(
                    log_messages.RETRY_SCHEDULED,
                    operation="retry_scheduled",
                    delay=delay,
                    attempts_left=attempts_left,
                    attempt=attempts
                )
                await self._sleep(delay)
                attempts_left -= 1
                delay = self.policy.next_delay(delay)
