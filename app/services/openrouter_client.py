"""
OpenRouter API Client
Uses the OpenAI SDK against OpenRouter; acts as the relevance scorer for matching
"""
import time
import httpx
from typing import List, Dict, Optional
from openai import AsyncOpenAI
from app.core.config import settings
from app.utils.logger import logger
from app.utils.exceptions import OpenAIException


class OpenRouterService:
    def __init__(
        self,
        apiKey: Optional[str] = None,
        model: Optional[str] = None,
        baseUrl: Optional[str] = None,
        maxTokens: Optional[int] = None
    ):
        """
        Initialize OpenRouter service
        - Persistent HTTP client (connection reuse)
        - No SDK retries: the matcher allows one attempt inside its own timeout
        """
        self.api_key = apiKey if apiKey is not None else settings.OPENROUTER_API_KEY
        self.model = model or settings.MATCHING_MODEL
        self.base_url = baseUrl or settings.OPENROUTER_BASE_URL
        self.max_tokens = maxTokens or settings.MATCHING_MAX_TOKENS

        if not self.api_key:
            logger.warning("⚠️  OpenRouter API key not configured")
            self.client = None
        else:
            self.client = AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=httpx.Timeout(
                    connect=5.0,     # 5s to connect
                    read=30.0,       # 30s to read
                    write=10.0,      # 10s to write
                    pool=5.0         # 5s to get connection from pool
                ),
                max_retries=0,
                http_client=httpx.AsyncClient(
                    limits=httpx.Limits(
                        max_connections=20,
                        max_keepalive_connections=10,
                        keepalive_expiry=60  # Keep connections alive 60s
                    )
                )
            )

    @property
    def isConfigured(self) -> bool:
        return self.client is not None

    async def chat(
        self,
        messages: List[Dict[str, str]],
        temperature: float = 0.2,
        maxTokens: Optional[int] = None,
        model: Optional[str] = None,
        jsonMode: bool = False
    ) -> Dict:

        if not self.client:
            raise OpenAIException("OpenRouter API key not configured")

        selected_model = model or self.model
        start_time = time.time()

        extra = {}
        if jsonMode:
            extra["response_format"] = {"type": "json_object"}

        try:
            response = await self.client.chat.completions.create(
                model=selected_model,
                messages=messages,
                temperature=temperature,
                max_tokens=maxTokens or self.max_tokens,
                extra_headers={
                    "X-Title": "Moments"
                },
                **extra
            )

            response_time = int((time.time() - start_time) * 1000)

            content = response.choices[0].message.content or ""
            prompt_tokens = response.usage.prompt_tokens if response.usage else 0
            completion_tokens = response.usage.completion_tokens if response.usage else 0

            logger.info(
                f"✅ OpenRouter Complete: {response_time}ms, "
                f"{completion_tokens}tok, {len(content)}chars"
            )

            if response_time > settings.MATCHING_TIMEOUT_MS:
                logger.warning(f"⚠️  Slow response: {response_time}ms")

            return {
                "content": content,
                "model": selected_model,
                "promptTokens": prompt_tokens,
                "completionTokens": completion_tokens,
                "responseTimeMs": response_time
            }

        except Exception as e:
            logger.error(f"❌ OpenRouter Failed: {e}")
            self._handle_error(e)

    async def completeJson(self, prompt: str) -> str:
        """
        Single prompt -> raw JSON text

        This is the scorer interface the matcher depends on.
        """
        result = await self.chat(
            messages=[
                {"role": "system", "content": "You are a relevance scorer. Return only JSON."},
                {"role": "user", "content": prompt}
            ],
            temperature=0.2,
            jsonMode=True
        )
        return result["content"]

    async def close(self):
        if self.client:
            await self.client.close()

    def _handle_error(self, e: Exception):
        """Centralized error handling"""
        error_msg = str(e)
        if "401" in error_msg or "Unauthorized" in error_msg:
            raise OpenAIException("Invalid OpenRouter API key")
        elif "429" in error_msg or "Rate limit" in error_msg:
            raise OpenAIException("OpenRouter rate limit exceeded")
        elif "timeout" in error_msg.lower():
            raise OpenAIException("OpenRouter request timed out")
        else:
            raise OpenAIException(f"OpenRouter error: {error_msg}")


# Configured once at process start, see getOpenRouterService()
_openRouterService: Optional[OpenRouterService] = None


def getOpenRouterService() -> OpenRouterService:
    """Process-wide scorer built from settings (created on first use)"""
    global _openRouterService

    if _openRouterService is None:
        _openRouterService = OpenRouterService()

    return _openRouterService
