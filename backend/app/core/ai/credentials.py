"""
Provider凭证管理
凭证在每次调用时重新读取，保证密钥轮换后立即生效
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional

from app.core.config import Settings, get_settings
from app.core.log_utils import get_logger
from .exceptions import CredentialNotSelectedError

logger = get_logger(__name__)


class CredentialBroker(ABC):
    """凭证提供者接口"""

    @abstractmethod
    def has_selected_credential(self) -> bool:
        """是否已有可用凭证"""

    @abstractmethod
    def prompt_for_selection(self) -> None:
        """要求外部流程提供凭证"""

    @abstractmethod
    def get_api_key(self) -> str:
        """
        返回当前凭证

        Raises:
            CredentialNotSelectedError: 没有可用凭证
        """

    def get_base_url(self) -> Optional[str]:
        """返回自定义的API地址，默认不使用"""
        return None


class SettingsCredentialBroker(CredentialBroker):
    """从应用配置读取凭证，每次调用都重新加载配置"""

    def __init__(self, settings_loader: Callable[[], Settings] = get_settings):
        self._settings_loader = settings_loader

    def _key(self) -> Optional[str]:
        key = self._settings_loader().gemini_api_key
        return key.strip() if key and key.strip() else None

    def has_selected_credential(self) -> bool:
        return self._key() is not None

    def prompt_for_selection(self) -> None:
        # 凭证由部署环境注入，这里只能提示调用方
        logger.warning(
            "未找到Gemini API密钥，请设置 GEMINI_API_KEY 环境变量",
            operation="credential_missing"
        )
        raise CredentialNotSelectedError()

    def get_api_key(self) -> str:
        key = self._key()
        if key is None:
            self.prompt_for_selection()
        return key

    def get_base_url(self) -> Optional[str]:
        return self._settings_loader().gemini_base_url or None
