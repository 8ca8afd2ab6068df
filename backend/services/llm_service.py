"""
LLM Service - Handles interactions with the configured model provider
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from typing import Any

import aiohttp

logger = logging.getLogger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"
OPENAI_URL = "https://api.openai.com/v1/chat/completions"

RETRYABLE_STATUSES = (429, 503)


class LLMServiceError(Exception):
    """Provider call failed"""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status

    @property
    def retryable(self) -> bool:
        return self.status in RETRYABLE_STATUSES


def parse_json_from_response(response: str) -> dict:
    """Parse JSON from LLM response, handling code blocks and surrounding prose"""
    json_match = re.search(r"```(?:json)?\s*([\s\S]*?)```", response)
    json_str = json_match.group(1).strip() if json_match else response.strip()

    try:
        return json.loads(json_str)
    except json.JSONDecodeError as e:
        brace_start = json_str.find("{")
        brace_end = json_str.rfind("}") + 1
        if brace_start >= 0 and brace_end > brace_start:
            try:
                return json.loads(json_str[brace_start:brace_end])
            except json.JSONDecodeError:
                pass
        raise LLMServiceError(f"Failed to parse JSON from model response: {e}") from e


class LLMService:
    """Service for interacting with the Gemini and OpenAI chat APIs"""

    # Multiplier on backoff waits; tests set it to 0
    retry_delay_scale = 1.0

    def __init__(self, config: dict[str, Any]):
        self.config = config
        self.provider = config.get("provider", "gemini")

    # ========== Config Helpers ==========

    def _get_gemini_config(self) -> tuple[str, str, str]:
        """Get Gemini config: (api_key, model, base_url). Raises if api_key missing."""
        cfg = self.config.get("gemini", {})
        api_key = cfg.get("apiKey")
        if not api_key:
            raise ValueError("Gemini API key not configured")
        model = cfg.get("model", "gemini-2.5-flash")
        return api_key, model, f"{GEMINI_BASE_URL}/{model}"

    def _get_openai_config(self) -> tuple[str, dict[str, str]]:
        """Get OpenAI config: (model, headers). Raises if api_key missing."""
        cfg = self.config.get("openai", {})
        api_key = cfg.get("apiKey")
        if not api_key:
            raise ValueError("OpenAI API key not configured")
        headers = {"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"}
        return cfg.get("model", "gpt-4o-mini"), headers

    # ========== Payload Builders ==========

    def _build_gemini_payload(
        self,
        prompt: str,
        system_instruction: str | None = None,
        response_schema: dict[str, Any] | None = None,
        max_output_tokens: int = 32768,
    ) -> dict[str, Any]:
        """Build Gemini generateContent payload"""
        cfg = self.config.get("gemini", {})
        generation_config: dict[str, Any] = {
            "temperature": cfg.get("temperature", 0.2),
            "topP": 0.95,
            "maxOutputTokens": max_output_tokens,
        }
        if response_schema is not None:
            generation_config["responseMimeType"] = "application/json"
            generation_config["responseSchema"] = response_schema

        payload: dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": generation_config,
        }
        if system_instruction:
            payload["systemInstruction"] = {"parts": [{"text": system_instruction}]}
        return payload

    def _build_openai_payload(
        self,
        model: str,
        prompt: str,
        system_instruction: str | None = None,
        json_mode: bool = False,
    ) -> dict[str, Any]:
        """Build OpenAI chat completions payload"""
        messages = []
        if system_instruction:
            messages.append({"role": "system", "content": system_instruction})
        messages.append({"role": "user", "content": prompt})

        payload: dict[str, Any] = {
            "model": model,
            "messages": messages,
            "temperature": self.config.get("openai", {}).get("temperature", 0.2),
        }
        if json_mode:
            payload["response_format"] = {"type": "json_object"}
        return payload

    # ========== Transport ==========

    async def _retry_with_backoff(self, operation, max_retries: int = 3, provider: str = "API"):
        """Execute operation with exponential backoff on timeouts, 429 and 503"""
        for attempt in range(max_retries):
            last_attempt = attempt == max_retries - 1
            try:
                return await operation()
            except asyncio.TimeoutError as e:
                if last_attempt:
                    raise LLMServiceError(
                        f"{provider} request timeout after {max_retries} attempts"
                    ) from e
                wait_time = (2**attempt) * 3
                reason = "Request timeout"
            except LLMServiceError as e:
                if not e.retryable or last_attempt:
                    raise
                if e.status == 429:
                    wait_time = 40 + (attempt * 20)
                    reason = "Rate limit hit"
                else:
                    wait_time = (2**attempt) * 5
                    reason = "Server overloaded"
            except aiohttp.ClientError as e:
                if last_attempt:
                    raise LLMServiceError(f"{provider} network error: {e}") from e
                wait_time = (2**attempt) * 2
                reason = f"Network error: {e}"

            logger.warning(
                "[LLMService] %s (%s). Retrying in %ss... (attempt %d/%d)",
                reason, provider, wait_time, attempt + 1, max_retries,
            )
            await asyncio.sleep(wait_time * self.retry_delay_scale)

    async def _post_json(
        self,
        url: str,
        payload: dict[str, Any],
        headers: dict[str, str] | None = None,
        timeout_seconds: int = 120,
        provider: str = "API",
    ) -> dict[str, Any]:
        """POST a JSON payload and return the decoded JSON response"""
        timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.post(url, json=payload, headers=headers) as response:
                if response.status != 200:
                    error_text = await response.text()
                    logger.error("[LLMService] %s API error (%d): %s", provider, response.status, error_text)
                    raise LLMServiceError(
                        f"{provider} API error ({response.status}): {error_text}",
                        status=response.status,
                    )
                return await response.json()

    # ========== Response Parsers ==========

    def _parse_gemini_response(self, data: dict[str, Any]) -> str:
        """Extract text from Gemini response data"""
        candidates = data.get("candidates") or []
        if candidates:
            parts = candidates[0].get("content", {}).get("parts") or []
            text = "".join(part.get("text", "") for part in parts)
            if text:
                return text
        raise LLMServiceError("No valid response from Gemini API")

    def _parse_openai_response(self, data: dict[str, Any]) -> str:
        """Parse OpenAI-compatible response format"""
        choices = data.get("choices") or []
        if choices:
            content = choices[0].get("message", {}).get("content")
            if content:
                return content
        raise LLMServiceError("No valid response from OpenAI API")

    # ========== Public API ==========

    async def generate_response(
        self,
        prompt: str,
        system_instruction: str | None = None,
        response_schema: dict[str, Any] | None = None,
    ) -> str:
        """Generate a text response from the configured provider"""
        if self.provider == "gemini":
            return await self._call_gemini(prompt, system_instruction, response_schema)
        elif self.provider == "openai":
            return await self._call_openai(prompt, system_instruction, json_mode=response_schema is not None)
        else:
            raise ValueError(f"Unsupported provider: {self.provider}")

    async def generate_json(
        self,
        prompt: str,
        system_instruction: str | None = None,
        response_schema: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Generate a structured JSON response"""
        text = await self.generate_response(prompt, system_instruction, response_schema or {"type": "OBJECT"})
        return parse_json_from_response(text)

    async def _call_gemini(
        self,
        prompt: str,
        system_instruction: str | None = None,
        response_schema: dict[str, Any] | None = None,
        max_retries: int = 3,
    ) -> str:
        """Call Google Gemini API with retry logic"""
        api_key, model, base_url = self._get_gemini_config()
        logger.info("[LLMService] Calling Gemini API with model: %s", model)

        url = f"{base_url}:generateContent?key={api_key}"
        payload = self._build_gemini_payload(prompt, system_instruction, response_schema)

        data = await self._retry_with_backoff(
            lambda: self._post_json(url, payload, provider="Gemini"),
            max_retries,
            "Gemini",
        )
        text = self._parse_gemini_response(data)
        logger.info("[LLMService] Received response from %s (length: %d chars)", model, len(text))
        return text

    async def _call_openai(
        self,
        prompt: str,
        system_instruction: str | None = None,
        json_mode: bool = False,
        max_retries: int = 3,
    ) -> str:
        """Call OpenAI API with retry logic"""
        model, headers = self._get_openai_config()
        logger.info("[LLMService] Calling OpenAI API with model: %s", model)
        payload = self._build_openai_payload(model, prompt, system_instruction, json_mode)

        data = await self._retry_with_backoff(
            lambda: self._post_json(OPENAI_URL, payload, headers, provider="OpenAI"),
            max_retries,
            "OpenAI",
        )
        return self._parse_openai_response(data)

