"""
MediScan API: Abstract Health Assistant Interface
==================================================

What:  Abstract base class for the AI service that answers health queries.
How:   Concrete implementations inherit from HealthAssistant and implement
       analyze_health_query() and health_check().
Who:   Injected into the health-query route and the /health probe.
"""

from abc import ABC, abstractmethod


class HealthAssistant(ABC):
    """
    Abstract interface for AI-generated answers to patient health questions.

    Contract:
        - analyze_health_query() returns non-empty text for any valid query
        - Provider errors are wrapped in LLMServiceError
        - No retries: one provider call per query

    Implementations:
        - GeminiHealthAssistant: Google Gemini (default)
    """

    @abstractmethod
    async def analyze_health_query(self, query: str, user_id: str) -> str:
        """
        Answer a free-text health question.

        Args:
            query:   The user's question, already validated (1-1000 characters).
            user_id: Caller identity, used for log correlation only.

        Returns:
            str: Plain-text answer. Never empty.

        Raises:
            LLMServiceError: When the provider call fails.
        """
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Lightweight reachability test.

        Returns: True if the service can answer queries, False otherwise.
        """
        ...
