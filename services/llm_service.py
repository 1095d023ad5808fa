"""
LLM Service - Completion provider backed by the OpenAI chat API
"""

import asyncio
import logging
from typing import Iterable, List, Union

from openai import AsyncOpenAI, OpenAIError

import config
from core.exceptions import ProviderFailure
from models.schemas import GenerationRequest

CompletionOutput = Union[str, List[str]]

def join_completion_output(output: Union[str, Iterable[str], None]) -> str:
    """Concatenate a completion delivered as a string or as ordered chunks."""
    if output is None:
        return ""
    if isinstance(output, str):
        return output
    return "".join(chunk for chunk in output if chunk)

class LLMService:
    """Service for OpenAI LLM interactions."""

    def __init__(self, client: AsyncOpenAI = None, model: str = None, stream: bool = None):
        self.client = client or AsyncOpenAI(
            api_key=config.OPENAI_API_KEY or None,
            timeout=config.LLM_TIMEOUT_SECONDS,
        )
        self.model = model or config.LLM_MODEL_NAME
        self.stream = config.LLM_STREAMING if stream is None else stream

    async def complete(self, request: GenerationRequest) -> CompletionOutput:
        """Run one generation request.

        Returns the full text, or the ordered text chunks when streaming.
        Raises ProviderFailure on any API error or timeout.
        """
        messages = [
            {"role": "system", "content": request.system_persona},
            {"role": "user", "content": request.prompt_text},
        ]

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                max_tokens=request.max_output_tokens,
                temperature=request.temperature,
                stream=self.stream,
            )
            if not self.stream:
                return response.choices[0].message.content or ""

            chunks: List[str] = []
            async for chunk in response:
                if chunk.choices and chunk.choices[0].delta.content:
                    chunks.append(chunk.choices[0].delta.content)
            return chunks

        except (OpenAIError, asyncio.TimeoutError) as e:
            logging.error(f"Error getting completion from {self.model}: {e}")
            raise ProviderFailure(f"Completion request failed: {e}") from e
