"""
本文件用于封装与外部 AI 服务（OpenAI 兼容接口）的交互。
主要类/对象:
- `AIService`: 单次对话补全调用封装（配置校验、异常归类、调试日志）
- `ai_service`: 全局服务单例
"""

import logging
from typing import Optional

from openai import APIStatusError, AsyncOpenAI

from app.core.config import get_settings
from app.core.exceptions import ConfigurationError, UpstreamUnavailable
from app.core.logger import setup_logger

settings = get_settings()
logger = setup_logger("AIService")


class AIService:
    """
    输入:
    - AI 配置（API Key、Base URL、模型、输出 token 上限、超时）

    输出:
    - 模型返回的文本

    作用:
    - 封装与外部 AI 服务的交互；每次请求只调用一次，不做重试
    """

    def is_configured(self) -> bool:
        return bool((settings.AI_API_KEY or "").strip()) and bool((settings.AI_MODEL or "").strip())

    def _build_client(self) -> AsyncOpenAI:
        base_url = (settings.AI_BASE_URL or "").strip() or None
        return AsyncOpenAI(api_key=str(settings.AI_API_KEY), base_url=base_url)

    async def complete(self, user_prompt: str, system_prompt: str = "", max_tokens: Optional[int] = None) -> str:
        """
        输入:
        - `user_prompt`: 用户提示词
        - `system_prompt`: 系统提示词
        - `max_tokens`: 输出 token 上限（缺省使用配置 `AI_MAX_TOKENS`）

        输出:
        - 模型回复文本

        作用:
        - 执行一次对话补全；未配置凭据时在调用前抛出 `ConfigurationError`，
          调用异常或返回为空时抛出 `UpstreamUnavailable`
        """

        if not self.is_configured():
            logger.error("❌ 未配置 AI_API_KEY / AI_MODEL，无法发起分析")
            raise ConfigurationError()

        model = str(settings.AI_MODEL)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"🔵 [LLM 请求] 模型: {model}\n系统提示词: {system_prompt}\n用户提示词: {user_prompt[:2000]}...")

        try:
            async with self._build_client() as client:
                response = await client.chat.completions.create(
                    model=model,
                    messages=[
                        {"role": "system", "content": system_prompt},
                        {"role": "user", "content": user_prompt},
                    ],
                    max_tokens=max_tokens or settings.AI_MAX_TOKENS,
                    temperature=settings.AI_TEMPERATURE,
                    timeout=settings.AI_TIMEOUT_SECONDS,
                )
        except APIStatusError as e:
            if e.status_code == 401:
                logger.error(f"❌ AI 认证失败 (401) - API Key 无效 ({model}): {e}")
            else:
                logger.error(f"❌ AI 服务返回错误 ({model}): {e}")
            raise UpstreamUnavailable() from e
        except Exception as e:
            logger.error(f"❌ AI 调用异常 ({model}): {e}")
            raise UpstreamUnavailable() from e

        content = response.choices[0].message.content if response.choices else None
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"🟢 [LLM 响应] 模型: {model}\n内容: {(content or '')[:2000]}...")

        if not content:
            logger.warning(f"⚠️ AI 返回内容为空 ({model})")
            raise UpstreamUnavailable()
        return content


ai_service = AIService()
