"""
LLM client selection for query expansion and provider calls.

Providers are looked up in a dispatch table mapping the provider name to a
factory that returns a LangChain chat model (possibly bound to
provider-specific call options such as JSON output). Adding a provider
means adding one factory and one table entry.
"""

import logging
from typing import Callable, Dict, List, Optional

from langchain_core.language_models import LanguageModelInput
from langchain_core.messages import BaseMessage
from langchain_core.runnables import Runnable

from config.settings import settings
from utils.retry import retry_with_backoff

logger = logging.getLogger(__name__)

# Chat models, or chat models bound to provider-specific call options
ChatRunnable = Runnable[LanguageModelInput, BaseMessage]

JSON_RESPONSE_FORMAT = {"type": "json_object"}

XAI_API_BASE = "https://api.x.ai/v1"
PERPLEXITY_API_BASE = "https://api.perplexity.ai"


def _openai_llm() -> Optional[ChatRunnable]:
    if not settings.OPENAI_API_KEY:
        logger.error("OpenAI API key not configured")
        return None
    from langchain_openai import ChatOpenAI
    return ChatOpenAI(
        model=settings.EXPANSION_OPENAI_MODEL,
        api_key=settings.OPENAI_API_KEY,
        temperature=settings.EXPANSION_TEMPERATURE,
        max_tokens=settings.EXPANSION_MAX_TOKENS,
        timeout=settings.LLM_TIMEOUT
    ).bind(response_format=JSON_RESPONSE_FORMAT)


def _claude_llm() -> Optional[ChatRunnable]:
    if not settings.ANTHROPIC_API_KEY:
        logger.error("Anthropic API key not configured")
        return None
    from langchain_anthropic import ChatAnthropic
    return ChatAnthropic(
        model=settings.EXPANSION_CLAUDE_MODEL,
        anthropic_api_key=settings.ANTHROPIC_API_KEY,
        temperature=settings.EXPANSION_TEMPERATURE,
        max_tokens=settings.EXPANSION_MAX_TOKENS,
        timeout=settings.LLM_TIMEOUT
    )


def _gemini_llm() -> Optional[ChatRunnable]:
    if not settings.GEMINI_API_KEY:
        logger.error("Gemini API key not configured")
        return None
    from langchain_google_genai import ChatGoogleGenerativeAI
    return ChatGoogleGenerativeAI(
        model=settings.EXPANSION_GEMINI_MODEL,
        google_api_key=settings.GEMINI_API_KEY,
        temperature=settings.EXPANSION_TEMPERATURE,
        max_output_tokens=settings.EXPANSION_MAX_TOKENS,
        response_mime_type="application/json"
    )


def _grok_llm() -> Optional[ChatRunnable]:
    if not settings.GROK_API_KEY:
        logger.error("xAI API key not configured")
        return None
    from langchain_openai import ChatOpenAI
    return ChatOpenAI(
        model=settings.EXPANSION_GROK_MODEL,
        api_key=settings.GROK_API_KEY,
        base_url=XAI_API_BASE,
        temperature=settings.EXPANSION_TEMPERATURE,
        max_tokens=settings.EXPANSION_MAX_TOKENS,
        timeout=settings.LLM_TIMEOUT
    ).bind(response_format=JSON_RESPONSE_FORMAT)


def _perplexity_llm() -> Optional[ChatRunnable]:
    if not settings.PERPLEXITY_API_KEY:
        logger.error("Perplexity API key not configured")
        return None
    from langchain_openai import ChatOpenAI
    # Perplexity rejects json_object; the expander still extracts JSON from prose
    return ChatOpenAI(
        model=settings.EXPANSION_PERPLEXITY_MODEL,
        api_key=settings.PERPLEXITY_API_KEY,
        base_url=PERPLEXITY_API_BASE,
        temperature=settings.EXPANSION_TEMPERATURE,
        max_tokens=settings.EXPANSION_MAX_TOKENS,
        timeout=settings.LLM_TIMEOUT
    )


LLM_FACTORIES: Dict[str, Callable[[], Optional[ChatRunnable]]] = {
    "openai": _openai_llm,
    "claude": _claude_llm,
    "anthropic": _claude_llm,
    "gemini": _gemini_llm,
    "grok": _grok_llm,
    "perplexity": _perplexity_llm,
}


PROVIDER_API_KEYS: Dict[str, str] = {
    "openai": "OPENAI_API_KEY",
    "claude": "ANTHROPIC_API_KEY",
    "gemini": "GEMINI_API_KEY",
    "grok": "GROK_API_KEY",
    "perplexity": "PERPLEXITY_API_KEY",
}


def configured_providers() -> List[str]:
    """Expansion providers that have an API key set."""
    return [
        provider for provider, key_name in PROVIDER_API_KEYS.items()
        if getattr(settings, key_name)
    ]


def get_chat_llm(llm_provider: Optional[str] = None) -> Optional[ChatRunnable]:
    """
    Get a LangChain chat model for the given provider.

    Args:
        llm_provider: Provider name (openai, claude, gemini, grok, perplexity).
                     If None, uses QUERY_EXPANSION_PROVIDER from settings

    Returns:
        LangChain chat model, or None if the provider is unknown,
        not configured, or fails to initialize
    """
    if llm_provider is None:
        llm_provider = settings.QUERY_EXPANSION_PROVIDER

    llm_provider = llm_provider.lower()
    factory = LLM_FACTORIES.get(llm_provider)
    if factory is None:
        logger.error(f"Unknown LLM provider: {llm_provider}")
        return None

    try:
        return factory()
    except Exception as e:
        logger.error(f"Failed to initialize {llm_provider} LLM: {str(e)}")
        return None


def complete(llm: ChatRunnable, messages: List[BaseMessage], **retry_options) -> str:
    """
    Run one chat completion with retry on transient provider errors.

    Library entry point for batch scanners that send derived queries to the
    providers and need transient failures retried. No route calls it: the
    HTTP service only scores caller-supplied results, and query expansion
    makes a single attempt and falls back to templates instead.

    Args:
        llm: LangChain chat model
        messages: Conversation to send
        **retry_options: Overrides passed to ``retry_with_backoff``

    Returns:
        Response text (empty string when the provider returned no content)
    """
    @retry_with_backoff(**retry_options)
    def _invoke() -> str:
        return message_text(llm.invoke(messages))

    return _invoke()


def message_text(message: BaseMessage) -> str:
    """
    Text of a chat model response.

    Anthropic and Gemini models may return content as a list of blocks
    instead of a string; the text of every text block is joined in order and
    other block types are skipped.
    """
    content = message.content
    if isinstance(content, str):
        return content
    if not content:
        return ""

    parts = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type", "text") == "text":
            parts.append(block.get("text") or "")
    return "".join(parts)
