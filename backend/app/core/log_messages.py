"""
日志消息模板模块
生成流程各阶段的日志模板集中在这里，字段名与 UnifiedLogger 的结构化字段一致
"""

from typing import Dict, Any


class LogMessages:
    """日志消息模板类"""

    # ==================== 通用 ====================
    OPERATION_SUCCESS = "操作成功完成: {operation_name}"
    OPERATION_FAILED = "操作执行失败: {operation_name}"

    # ==================== 重试 ====================
    RETRY_SCHEDULED = "Provider调用受限，{delay}秒后重试（剩余重试次数: {attempts_left}）"
    RETRY_EXHAUSTED = "Provider调用重试次数耗尽（共尝试{attempts}次）"
    RETRY_FATAL = "Provider调用失败，错误不可重试"

    # ==================== 视频长任务 ====================
    VIDEO_OPERATION_SUBMITTED = "视频生成任务已提交: {operation_name}"
    VIDEO_OPERATION_POLLING = "视频生成任务处理中: {operation_name}（第{poll_count}次轮询）"
    VIDEO_OPERATION_DONE = "视频生成任务完成: {operation_name}"
    VIDEO_OPERATION_FAILED = "视频生成任务失败: {operation_name}"
    VIDEO_DOWNLOAD_SUCCESS = "视频下载成功，大小: {size}字节"

    # ==================== 结构化输出 ====================
    STRUCTURED_OUTPUT_FALLBACK = "结构化输出解析失败，使用默认值: {task}"

    # ==================== 生成 ====================
    GENERATION_START = "开始生成: {capability}"
    GENERATION_SUCCESS = "生成成功: {capability}"
    GENERATION_FAILED = "生成失败: {capability}"

    # ==================== 角色库 ====================
    PERSONA_SAVED = "角色已保存: {persona_id}"
    PERSONA_DELETED = "角色已删除: {persona_id}"

    @classmethod
    def format_message(cls, message_template: str, **kwargs: Any) -> str:
        return message_template.format(**kwargs)

    @classmethod
    def get_structured_data(cls, **kwargs: Any) -> Dict[str, Any]:
        return dict(kwargs)


log_messages = LogMessages()
