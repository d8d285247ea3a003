"""
Google GenAI 客户端工厂
每次调用创建新的客户端，凭证在创建时读取
"""

from typing import Optional

from google import genai

from app.core.ai.credentials import CredentialBroker, SettingsCredentialBroker
from app.core.log_utils import get_logger

logger = get_logger(__name__)


class GenAIClientFactory:
    """GenAI SDK客户端工厂"""

    def __init__(self, credentials: Optional[CredentialBroker] = None):
        self.credentials = credentials or SettingsCredentialBroker()

    def api_key(self) -> str:
        """当前凭证，视频下载时复用"""
        return self.credentials.get_api_key()

    def create(self) -> genai.Client:
        """
        创建新的客户端

        Raises:
            CredentialNotSelectedError: 没有可用凭证
        """
        api_base = self.credentials.get_base_url()
        http_options = {"base_url": api_base} if api_base else None

        logger.debug(
            "创建GenAI客户端",
            operation="genai_client_create",
            has_api_base=bool(api_base)
        )
        return genai.Client(api_key=self.api_key(), http_options=http_options)
