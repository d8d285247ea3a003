"""
统一日志管理模块

业务代码通过 get_logger(__name__) 获取 UnifiedLogger，传入 log_messages 中的模板和
结构化字段。字段既用于格式化消息，也原样写入 LogRecord 的 extra，
便于在日志文件中按 operation / capability / attempt 等字段检索。
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Dict, Any

from app.core.config import settings
from app.core.log_messages import log_messages
from app.utils.config_utils import ensure_directory_exists

# LogRecord 自带的属性名，extra 中出现同名字段会导致 logging 抛出 KeyError
_RESERVED_RECORD_FIELDS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime"}


class UnifiedLogger:
    """结构化业务日志记录器"""

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)
        self.name = name

    def _extra(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        data = log_messages.get_structured_data(log_module=self.name)
        for key, value in fields.items():
            data[f"field_{key}" if key in _RESERVED_RECORD_FIELDS else key] = value
        return data

    @staticmethod
    def _render(template: str, fields: Dict[str, Any]) -> str:
        # 没有字段时视为已格式化的消息，消息本身可能含有花括号
        if not fields:
            return template
        try:
            return log_messages.format_message(template, **fields)
        except (KeyError, ValueError, IndexError):
            return template

    def _emit(self, level: int, template: str, fields: Dict[str, Any], **log_kwargs: Any) -> None:
        method = getattr(self.logger, logging.getLevelName(level).lower())
        method(self._render(template, fields), extra=self._extra(fields), **log_kwargs)

    def info(self, message_template: str, **kwargs: Any) -> None:
        """
        记录信息级别日志

        示例:
            logger.info(log_messages.VIDEO_OPERATION_SUBMITTED,
                        operation="video_operation", operation_name=name)
        """
        self._emit(logging.INFO, message_template, kwargs)

    def warning(self, message_template: str, **kwargs: Any) -> None:
        self._emit(logging.WARNING, message_template, kwargs)

    def error(self, message_template: str, exception: Optional[BaseException] = None, **kwargs: Any) -> None:
        """
        记录错误级别日志

        Args:
            message_template: 日志模板或已格式化的消息
            exception: 触发错误的异常，提供时附带异常类型、消息与堆栈
            **kwargs: 结构化字段
        """
        if exception is None:
            self._emit(logging.ERROR, message_template, kwargs)
            return
        fields = dict(kwargs)
        message = self._render(message_template, fields)
        extra = self._extra(fields)
        extra["exception_type"] = type(exception).__name__
        extra["exception_message"] = str(exception)
        self.logger.error(message, extra=extra, exc_info=exception)

    def debug(self, message_template: str, **kwargs: Any) -> None:
        """调试日志，仅在 app_debug 开启时输出（轮询进度等高频日志走这里）"""
        if settings.app_debug:
            self._emit(logging.DEBUG, message_template, kwargs)

    def critical(self, message_template: str, **kwargs: Any) -> None:
        self._emit(logging.CRITICAL, message_template, kwargs)


_loggers_cache: Dict[str, UnifiedLogger] = {}


def get_logger(name: str = __name__) -> UnifiedLogger:
    """按名称返回缓存的 UnifiedLogger"""
    if name not in _loggers_cache:
        _loggers_cache[name] = UnifiedLogger(name)
    return _loggers_cache[name]


def _build_handlers(level: int) -> list:
    formatter = logging.Formatter(settings.log_format)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    handlers = [console_handler]

    if settings.log_to_file:
        log_file_path = Path(settings.absolute_log_file)
        ensure_directory_exists(log_file_path.parent)
        file_handler = logging.FileHandler(log_file_path, encoding="utf-8")
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    return handlers


def setup_logging() -> None:
    """配置根日志器：控制台输出，按配置追加文件输出，并压低SDK与HTTP库的日志级别"""
    level = logging.DEBUG if settings.app_debug else getattr(
        logging, settings.log_level.upper(), logging.INFO
    )
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    for handler in _build_handlers(level):
        root_logger.addHandler(handler)

    for noisy in ("uvicorn", "httpx", "httpcore", "google_genai"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    get_logger(__name__).info(log_messages.OPERATION_SUCCESS, operation_name="日志系统配置")
