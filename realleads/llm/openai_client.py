# realleads/llm/openai_client.py
"""
OpenAI collaborator
----------------------------------------------------------
- complete(): chat completion used by the orchestrator (JSON mode) and by
  the follow-up drafter (plain text)
- transcribe(): Whisper speech-to-text for voice-note commands

Any transport/quota/timeout problem is raised as ProviderError, which the
orchestrator never retries. Parse problems are not this module's concern.
"""
from __future__ import annotations

import logging
import time
from typing import Optional

import openai
from openai import AsyncOpenAI

from realleads.common.errors import ProviderError
from realleads.config import Settings

logger = logging.getLogger("realleads.llm")


class OpenAIClient:
    def __init__(
        self,
        api_key: str,
        *,
        model: str = "gpt-4o",
        transcription_model: str = "whisper-1",
        timeout: float = 60.0,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        if client is None and not api_key:
            raise RuntimeError("OPENAI_API_KEY is not set")
        self.model = model
        self.transcription_model = transcription_model
        self._client = client or AsyncOpenAI(api_key=api_key, timeout=timeout)
        logger.info("OpenAIClientInitialized", extra={"model": model})

    @classmethod
    def from_settings(cls, settings: Settings) -> "OpenAIClient":
        return cls(
            settings.OPENAI_API_KEY,
            model=settings.ORCHESTRATOR_MODEL,
            transcription_model=settings.TRANSCRIPTION_MODEL,
            timeout=settings.LLM_TIMEOUT_SECONDS,
        )

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        *,
        json_mode: bool = True,
    ) -> str:
        start = time.monotonic()
        kwargs = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            resp = await self._client.chat.completions.create(
                model=self.model,
                temperature=temperature,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                **kwargs,
            )
        except openai.APIError as e:
            logger.error(
                "OpenAICompletionFailed",
                extra={"model": self.model, "error": str(e), "duration_ms": _ms(start)},
            )
            raise ProviderError(f"OpenAI completion failed: {e}", provider="openai") from e

        text = (resp.choices[0].message.content or "").strip() if resp.choices else ""
        if not text:
            raise ProviderError("Empty response from OpenAI", provider="openai")

        usage = getattr(resp, "usage", None)
        logger.info(
            "OpenAICompletionDone",
            extra={
                "model": self.model,
                "duration_ms": _ms(start),
                "input_tokens": getattr(usage, "prompt_tokens", None),
                "output_tokens": getattr(usage, "completion_tokens", None),
                "response_length": len(text),
            },
        )
        return text

    async def transcribe(self, audio: bytes, filename: str) -> str:
        start = time.monotonic()
        try:
            transcript = await self._client.audio.transcriptions.create(
                model=self.transcription_model,
                file=(filename, audio),
                response_format="text",
            )
        except openai.APIError as e:
            logger.error("TranscriptionFailed", extra={"file_name": filename, "error": str(e)})
            raise ProviderError(f"Audio transcription failed: {e}", provider="openai") from e

        # response_format="text" returns a plain string; older clients wrap it
        text = transcript if isinstance(transcript, str) else getattr(transcript, "text", "")
        logger.info(
            "TranscriptionDone",
            extra={"file_name": filename, "duration_ms": _ms(start), "transcript_length": len(text)},
        )
        return text.strip()


def _ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)
