"""Configuration API endpoints"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import aiohttp
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from services.config_manager import ConfigManager
from services.llm_service import GEMINI_BASE_URL, LLMService

logger = logging.getLogger(__name__)

router = APIRouter()

PROVIDERS = ("gemini", "openai")


class ConfigUpdateRequest(BaseModel):
    """Request to update configuration"""

    provider: str | None = None
    gemini: dict | None = None
    openai: dict | None = None


class ConfigResponse(BaseModel):
    """Configuration response"""

    provider: str
    gemini: dict
    openai: dict


class ValidateResponse(BaseModel):
    """Validation response"""

    valid: bool
    message: str
    provider: str


def mask_key(key: str) -> str:
    """Mask all but the first and last four characters"""
    if not key:
        return ""
    if len(key) <= 8:
        return "*" * len(key)
    return key[:4] + "*" * (len(key) - 8) + key[-4:]


@router.get("", response_model=ConfigResponse)
async def get_config() -> ConfigResponse:
    """Get current configuration with API keys masked"""
    config = ConfigManager.get_instance().get_config()

    gemini = dict(config.get("gemini", {}))
    openai = dict(config.get("openai", {}))
    gemini["apiKey"] = mask_key(gemini.get("apiKey", ""))
    openai["apiKey"] = mask_key(openai.get("apiKey", ""))

    return ConfigResponse(
        provider=config.get("provider", "gemini"),
        gemini=gemini,
        openai=openai,
    )


@router.put("")
async def update_config(request: ConfigUpdateRequest) -> dict[str, Any]:
    """Update configuration"""
    if request.provider and request.provider not in PROVIDERS:
        raise HTTPException(status_code=400, detail=f"Unsupported provider: {request.provider}")

    config_manager = ConfigManager.get_instance()
    current_config = config_manager.get_stored_config()

    # Update only provided fields
    if request.provider:
        current_config["provider"] = request.provider
    if request.gemini:
        current_config["gemini"] = {**current_config.get("gemini", {}), **request.gemini}
    if request.openai:
        current_config["openai"] = {**current_config.get("openai", {}), **request.openai}

    try:
        config_manager.save_config(current_config)
    except RuntimeError as e:
        raise HTTPException(status_code=500, detail=str(e))

    logger.info("[Config] Configuration updated (provider: %s)", current_config.get("provider"))
    return {"status": "success", "message": "Configuration updated"}


async def check_gemini_api_key(api_key: str) -> tuple[bool, str]:
    """Check a Gemini API key by listing models. Returns (success, message)."""
    url = f"{GEMINI_BASE_URL}?key={api_key}"

    try:
        async with aiohttp.ClientSession() as session:
            async with session.get(url, timeout=aiohttp.ClientTimeout(total=10)) as response:
                if response.status == 200:
                    return True, "API key is valid"
                elif response.status == 400:
                    error_data = await response.json()
                    error_msg = error_data.get("error", {}).get("message", "Invalid API key")
                    return False, f"Invalid API key: {error_msg}"
                elif response.status == 403:
                    return False, "API key is forbidden or disabled"
                else:
                    return False, f"API validation failed (HTTP {response.status})"
    except aiohttp.ClientError as e:
        return False, f"Network error: {e}"
    except asyncio.TimeoutError:
        return False, "Validation error: request timed out"
    except Exception as e:
        return False, f"Validation error: {e}"


@router.post("/validate", response_model=ValidateResponse)
async def validate_config() -> ValidateResponse:
    """Validate current configuration against the provider"""
    config = ConfigManager.get_instance().get_config()
    provider = config.get("provider", "gemini")

    if provider == "gemini":
        api_key = config.get("gemini", {}).get("apiKey")
        if not api_key:
            return ValidateResponse(valid=False, message="Gemini API key not configured", provider=provider)
        valid, message = await check_gemini_api_key(api_key)
        return ValidateResponse(valid=valid, message=message, provider=provider)

    try:
        response = await LLMService(config).generate_response("Say 'OK' if you can hear me.")
    except Exception as e:
        return ValidateResponse(valid=False, message=f"Connection failed: {e}", provider=provider)

    if not response:
        return ValidateResponse(valid=False, message="Received empty response from LLM", provider=provider)
    return ValidateResponse(valid=True, message=f"Successfully connected to {provider}", provider=provider)
