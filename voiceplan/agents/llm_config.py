"""
LLM provider configuration with fallback support.

This module manages the chat models behind every pipeline step (OpenAI
GPT-4o-mini and AWS Bedrock Nova Pro) and exposes them through the two
capabilities the agents depend on: structured generation and audio
transcription. One provider is created at process start and handed to each
agent; nothing here builds a model at import time.
"""

from langchain_aws import ChatBedrock
from langchain_core.messages import SystemMessage, HumanMessage
from langchain_openai import ChatOpenAI
from pydantic import BaseModel
from typing import Optional, Protocol, Type, TypeVar
import boto3
import logging

from voiceplan.schemas.audio import AudioPayload
from voiceplan.utils.config import Settings, get_settings
from voiceplan.utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

# Errors that mean Bedrock is not usable for this account, not that the
# request itself was bad.
BEDROCK_ACCESS_ERRORS = (
    "ResourceNotFoundException",
    "AccessDeniedException",
    "ValidationException",
    "use case details",
    "not been submitted",
)


class ModelInvoker(Protocol):
    """The model capabilities the pipeline agents are written against."""

    async def generate(
        self, system_prompt: str, user_prompt: str, schema: Type[T]
    ) -> Optional[T]:
        """Return an instance of ``schema`` or None when the model gave no output."""
        ...

    async def transcribe(self, audio: AudioPayload, prompt: str) -> Optional[str]:
        """Return the transcription text or None when the model gave no output."""
        ...


class LLMProvider:
    """
    Manages LLM providers with fallback logic.

    Primary: OpenAI GPT-4o-mini (unless USE_OPENAI_PRIMARY=false)
    Fallback: AWS Bedrock Nova Pro
    """

    def __init__(self, settings: Optional[Settings] = None):
        """Initialize LLM providers."""
        self.settings = settings or get_settings()
        self.openai_model = None
        self.bedrock_model = None
        self.transcription_model = None
        self._initialize_models()

    def _initialize_models(self):
        """Initialize OpenAI and Bedrock models."""
        settings = self.settings

        try:
            if settings.openai_api_key:
                self.openai_model = ChatOpenAI(
                    model=settings.openai_model,
                    temperature=settings.temperature,
                    max_tokens=settings.max_tokens,
                    api_key=settings.openai_api_key,
                )
                self.transcription_model = ChatOpenAI(
                    model=settings.transcription_model,
                    temperature=0,
                    api_key=settings.openai_api_key,
                )
                logger.info(f"Initialized OpenAI {settings.openai_model}")
            else:
                logger.warning("OPENAI_API_KEY not found, OpenAI unavailable")
        except Exception as e:
            logger.warning(f"Failed to initialize OpenAI: {e}")

        try:
            bedrock_kwargs = {
                "model_id": settings.bedrock_model_id,
                "region_name": settings.aws_region,
                "model_kwargs": {
                    "temperature": settings.temperature,
                    "max_tokens": settings.max_tokens,
                },
            }

            # Named AWS profile (SSO or multiple accounts)
            if settings.aws_profile:
                logger.info(f"Creating boto3 session with profile: {settings.aws_profile}")
                session = boto3.Session(profile_name=settings.aws_profile)
                if session.get_credentials():
                    bedrock_kwargs["client"] = session.client(
                        service_name="bedrock-runtime",
                        region_name=settings.aws_region,
                    )
                else:
                    logger.warning(f"No credentials found for profile: {settings.aws_profile}")
                    bedrock_kwargs["credentials_profile_name"] = settings.aws_profile

            self.bedrock_model = ChatBedrock(**bedrock_kwargs)
            logger.info("Initialized AWS Bedrock")
        except Exception as e:
            logger.warning(f"Failed to initialize Bedrock: {e}")

    def _ordered_models(self):
        """Return the available chat models, preferred one first."""
        if self.settings.use_openai_primary:
            order = [self.openai_model, self.bedrock_model]
        else:
            order = [self.bedrock_model, self.openai_model]
        models = [model for model in order if model is not None]
        if not models:
            raise ConfigurationError("No LLM provider available")
        return models

    def get_model(self):
        """
        Get the preferred chat model.

        Raises:
            ConfigurationError: If no LLM provider is available
        """
        return self._ordered_models()[0]

    async def ainvoke_with_fallback(self, build_runnable, messages):
        """
        Invoke the preferred model, switching once to the other provider
        when Bedrock reports an access problem.

        Args:
            build_runnable: Callable turning a chat model into the runnable to invoke
            messages: List of messages to send to the LLM

        Returns:
            Runnable output
        """
        models = self._ordered_models()
        try:
            return await build_runnable(models[0]).ainvoke(messages)
        except Exception as e:
            error_str = str(e)
            logger.error(f"Primary LLM failed: {error_str}")

            is_bedrock_access_error = any(keyword in error_str for keyword in BEDROCK_ACCESS_ERRORS)
            if len(models) > 1 and is_bedrock_access_error:
                logger.warning("Bedrock access issue detected, switching provider")
                return await build_runnable(models[1]).ainvoke(messages)
            raise

    async def generate(
        self, system_prompt: str, user_prompt: str, schema: Type[T]
    ) -> Optional[T]:
        """
        Structured generation: ask the model for an instance of ``schema``.

        Returns:
            Parsed schema instance, or None when the model produced no output
        """
        messages = [
            SystemMessage(content=system_prompt),
            HumanMessage(content=user_prompt),
        ]
        return await self.ainvoke_with_fallback(
            lambda model: model.with_structured_output(schema), messages
        )

    async def transcribe(self, audio: AudioPayload, prompt: str) -> Optional[str]:
        """
        Transcribe an audio clip with the multimodal transcription model.

        Returns:
            Transcribed text, or None when the model produced no output
        """
        if self.transcription_model is None:
            raise ConfigurationError("No transcription model available (OPENAI_API_KEY not set)")

        message = HumanMessage(content=[
            {"type": "text", "text": prompt},
            {
                "type": "audio",
                "source_type": "base64",
                "data": audio.data,
                "mime_type": audio.mime_type,
            },
        ])
        response = await self.transcription_model.ainvoke([message])
        content = getattr(response, "content", None)
        if isinstance(content, list):
            content = "".join(
                part.get("text", "") if isinstance(part, dict) else str(part)
                for part in content
            )
        return content or None


def get_llm_provider(settings: Optional[Settings] = None) -> LLMProvider:
    """Create the provider shared by all agents of one process."""
    return LLMProvider(settings)
