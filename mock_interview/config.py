"""
Runtime configuration for the Mock Interview service.

All settings come from environment variables (optionally via a ``.env`` file
at the project root). Values are validated strictly; misconfiguration raises
RuntimeError at load time rather than failing later mid-interview.

Last Grunted: 10/19/2026
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


# Load environment variables from .env file
_env_path = Path(__file__).parent.parent / ".env"
load_dotenv(_env_path)

logger = logging.getLogger(__name__)


PROJECT_ROOT = Path(__file__).parent.parent

# Value shipped in .env.example; treated the same as no key at all
API_KEY_PLACEHOLDER = "your_openai_api_key_here"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _parse_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise RuntimeError(f"{name} must be a boolean (true/false). Got: {raw}")


@dataclass(frozen=True)
class LLMSettings:
    """Resolved LLM provider settings."""

    provider: str  # "openai", "azure" or "none"
    model: str
    api_key: Optional[str] = None
    azure_endpoint: Optional[str] = None
    azure_api_version: Optional[str] = None

    @property
    def configured(self) -> bool:
        return self.provider != "none"


def load_llm_settings() -> LLMSettings:
    """
    Determine LLM configuration based on environment variables.

    Azure OpenAI requires:
        - AZURE_OPENAI_ENDPOINT: The endpoint URL
        - AZURE_OPENAI_KEY: The API key
        - AZURE_OPENAI_DEPLOYMENT: The deployment name (used as model)

    Standard OpenAI requires:
        - OPENAI_API_KEY: The API key
        - OPENAI_MODEL (optional): Model name, defaults to gpt-4o-mini

    Returns provider "none" when no usable credentials are present.

    Raises:
        RuntimeError: If Azure is requested but only partially configured.
    """
    azure_endpoint = os.environ.get("AZURE_OPENAI_ENDPOINT")
    azure_key = os.environ.get("AZURE_OPENAI_KEY")
    azure_deployment = os.environ.get("AZURE_OPENAI_DEPLOYMENT")
    api_type = os.environ.get("OPENAI_API_TYPE", "").strip().lower()

    if api_type == "azure" or (azure_endpoint and azure_key and azure_deployment):
        if not all([azure_endpoint, azure_key, azure_deployment]):
            raise RuntimeError(
                "Azure OpenAI requires AZURE_OPENAI_ENDPOINT, AZURE_OPENAI_KEY, "
                "and AZURE_OPENAI_DEPLOYMENT environment variables"
            )
        return LLMSettings(
            provider="azure",
            model=azure_deployment,
            api_key=azure_key,
            azure_endpoint=azure_endpoint,
            azure_api_version=os.environ.get("AZURE_OPENAI_API_VERSION", "2024-08-01-preview"),
        )

    model = os.environ.get("OPENAI_MODEL", "gpt-4o-mini")
    api_key = (os.environ.get("OPENAI_API_KEY") or "").strip()
    if not api_key or api_key == API_KEY_PLACEHOLDER:
        return LLMSettings(provider="none", model=model)
    return LLMSettings(provider="openai", model=model, api_key=api_key)


@dataclass(frozen=True)
class RuntimeConfig:
    """Runtime config for the interview service."""

    host: str
    port: int
    output_dir: Path
    recording_dir: Path
    demo_mode: bool
    voice_enabled: bool
    connection_timeout: float
    max_finished_interviews: int
    llm: LLMSettings

    @property
    def llm_enabled(self) -> bool:
        """True when interview turns should go to the LLM."""
        return self.llm.configured and not self.demo_mode


def load_runtime_config() -> RuntimeConfig:
    """Load runtime config from environment with strict validation."""
    host = (os.environ.get("INTERVIEW_HOST", "0.0.0.0") or "").strip()
    if not host:
        raise RuntimeError("INTERVIEW_HOST resolved to empty value.")

    port_raw = (os.environ.get("INTERVIEW_PORT", "8765") or "").strip()
    if not port_raw:
        raise RuntimeError("INTERVIEW_PORT resolved to empty value.")
    try:
        port = int(port_raw)
    except ValueError as exc:
        raise RuntimeError(f"INTERVIEW_PORT must be an integer. Got: {port_raw}") from exc
    if port < 1 or port > 65535:
        raise RuntimeError(f"INTERVIEW_PORT must be in range 1-65535. Got: {port}.")

    output_override = os.environ.get("OUTPUT_DIR")
    output_dir = (
        Path(output_override).expanduser() if output_override else PROJECT_ROOT / "output"
    )

    recording_override = os.environ.get("RECORDING_DIR")
    recording_dir = (
        Path(recording_override).expanduser()
        if recording_override
        else output_dir / "recordings"
    )

    timeout_raw = (os.environ.get("LLM_CONNECTION_TIMEOUT", "10") or "").strip()
    try:
        connection_timeout = float(timeout_raw)
    except ValueError as exc:
        raise RuntimeError(
            f"LLM_CONNECTION_TIMEOUT must be a number of seconds. Got: {timeout_raw}"
        ) from exc
    if connection_timeout <= 0:
        raise RuntimeError(
            f"LLM_CONNECTION_TIMEOUT must be positive. Got: {connection_timeout}."
        )

    max_finished_raw = (os.environ.get("MAX_FINISHED_INTERVIEWS", "50") or "").strip()
    try:
        max_finished = int(max_finished_raw)
    except ValueError as exc:
        raise RuntimeError(
            f"MAX_FINISHED_INTERVIEWS must be an integer. Got: {max_finished_raw}"
        ) from exc
    if max_finished < 0:
        raise RuntimeError(
            f"MAX_FINISHED_INTERVIEWS must not be negative. Got: {max_finished}."
        )

    return RuntimeConfig(
        host=host,
        port=port,
        output_dir=output_dir,
        recording_dir=recording_dir,
        demo_mode=_parse_bool("INTERVIEW_DEMO_MODE", False),
        voice_enabled=_parse_bool("VOICE_ENABLED", True),
        connection_timeout=connection_timeout,
        max_finished_interviews=max_finished,
        llm=load_llm_settings(),
    )
