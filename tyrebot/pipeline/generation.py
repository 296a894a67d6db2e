"""
Generation service: system prompt + ordered history in, reply text out.

``ChatModelGenerationService`` adapts a LangChain chat model. ``ChatOpenAI`` is
used in production; any ``BaseChatModel`` (including LangChain's fake chat
models) can be injected instead.

Every attempt is bounded by an explicit deadline. Provider failures are mapped
onto the pipeline's ``ServiceError`` subclasses. By default a call is made at
most once; timeouts and quota errors may be retried a bounded number of times
with exponential backoff when ``max_retries`` is set.
"""

import asyncio
import logging
from typing import Protocol, Sequence

import openai
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from tyrebot.database.config.config import Settings
from tyrebot.pipeline.errors import GenerationTimeout, MalformedRequest, QuotaExceeded, ServiceError

logger = logging.getLogger(__name__)

ROLE_MESSAGES = {
    "user": HumanMessage,
    "assistant": AIMessage,
}


class GenerationService(Protocol):
    async def generate(self, system_prompt: str, messages: Sequence[dict], max_tokens: int) -> str:
        ...


def lc_text_from_content(content) -> str:
    """Normalize LangChain message content (str or list of parts) to plain text."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(part.get("text", ""))
        return "".join(parts)
    return str(content)


def to_langchain_messages(system_prompt: str, messages: Sequence[dict]) -> list[BaseMessage]:
    """
    Convert role/content pairs into LangChain messages, preserving order.

    Raises
    ------
    MalformedRequest
        If a message carries a role other than ``user`` or ``assistant``.
    """
    converted: list[BaseMessage] = [SystemMessage(content=system_prompt)]
    for message in messages:
        message_class = ROLE_MESSAGES.get(message.get("role"))
        if message_class is None:
            raise MalformedRequest(f"Unsupported message role: {message.get('role')!r}")
        converted.append(message_class(content=message.get("content", "")))
    return converted


class ChatModelGenerationService:
    """
    GenerationService backed by a LangChain chat model.

    Parameters
    ----------
    chat_model : BaseChatModel
        The model to invoke.
    timeout : float | None
        Deadline in seconds for each attempt; None disables the deadline.
    max_retries : int
        Extra attempts after a timeout or quota error.
    retry_backoff : float
        Base delay in seconds; attempt ``n`` waits ``retry_backoff * 2**n``.
    """

    def __init__(
        self,
        chat_model: BaseChatModel,
        timeout: float | None = 30.0,
        max_retries: int = 0,
        retry_backoff: float = 0.5,
    ):
        self.chat_model = chat_model
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_backoff = retry_backoff

    @classmethod
    def from_settings(cls, settings: Settings) -> "ChatModelGenerationService":
        chat_model = ChatOpenAI(
            model=settings.OPEN_AI_MODEL,
            api_key=settings.API_KEY,
            temperature=0.7,
            max_retries=0,
        )
        return cls(
            chat_model,
            timeout=settings.GENERATION_TIMEOUT_SECONDS,
            max_retries=settings.GENERATION_MAX_RETRIES,
            retry_backoff=settings.GENERATION_RETRY_BACKOFF_SECONDS,
        )

    async def generate(self, system_prompt: str, messages: Sequence[dict], max_tokens: int) -> str:
        prompt = to_langchain_messages(system_prompt, messages)
        model = self.chat_model.bind(max_tokens=max_tokens)

        attempt = 0
        while True:
            try:
                return await self._attempt(model, prompt)
            except (GenerationTimeout, QuotaExceeded) as error:
                if attempt >= self.max_retries:
                    raise
                delay = self.retry_backoff * (2 ** attempt)
                attempt += 1
                logger.warning(
                    "Generation attempt %d failed (%s); retrying in %.2fs",
                    attempt, type(error).__name__, delay,
                )
                await asyncio.sleep(delay)

    async def _attempt(self, model, prompt: list[BaseMessage]) -> str:
        try:
            response = await asyncio.wait_for(model.ainvoke(prompt), timeout=self.timeout)
        except asyncio.TimeoutError as error:
            raise GenerationTimeout(f"Generation exceeded {self.timeout}s") from error
        except openai.APITimeoutError as error:
            raise GenerationTimeout(str(error)) from error
        except openai.RateLimitError as error:
            raise QuotaExceeded(str(error)) from error
        except (openai.BadRequestError, openai.UnprocessableEntityError) as error:
            raise MalformedRequest(str(error)) from error
        except Exception as error:
            raise ServiceError(f"Generation failed: {error}") from error

        text = lc_text_from_content(response.content).strip()
        if not text:
            raise ServiceError("Generation returned an empty reply")
        return text
