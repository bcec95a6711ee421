"""LLM client for Lifemap."""

from lifemap.llm.client import LLMClient, LLMResponse
