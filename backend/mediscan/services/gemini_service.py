"""
MediScan API: Google Gemini Health Assistant
=============================================

What:  Answers patient health questions with Google Gemini.
How:   Sends a system instruction plus the user's question to Gemini and
       returns the generated text. Without an API key, or when the model
       returns nothing, a canned fallback answer is used instead.
Who:   Constructed once in the application lifespan; called by the
       POST /api/health-query route.

Failure policy:
    A provider error is raised as LLMServiceError straight away (HTTP 500).
    There is no retry and no backoff.
"""

import logging
import time
import uuid

import google.generativeai as genai

from mediscan.exceptions import LLMServiceError
from mediscan.services.fallback_responses import fallback_health_response
from mediscan.services.llm_base import HealthAssistant
from mediscan.utils.formatting import truncate_text

logger = logging.getLogger(__name__)


class GeminiHealthAssistant(HealthAssistant):
    """
    Google Gemini implementation of the health assistant.

    Args:
        api_key:            Gemini API key. Empty = fallback answers only.
        model_name:         Gemini model, e.g. ``gemini-1.5-flash``.
        temperature:        Sampling temperature (low keeps answers conservative).
        max_output_tokens:  Upper bound on answer length.
    """

    SYSTEM_PROMPT = """You are a knowledgeable AI health assistant designed to provide helpful, accurate, and safe health information.

IMPORTANT GUIDELINES:
1. Always emphasize that your advice is for informational purposes only
2. Strongly recommend consulting healthcare professionals for medical concerns
3. Never provide specific medical diagnoses or treatment recommendations
4. Be empathetic and supportive while maintaining professional boundaries
5. If the query involves emergency symptoms, immediately recommend seeking emergency care
6. Provide evidence-based general health information when appropriate
7. Encourage healthy lifestyle choices and preventive care

EMERGENCY SYMPTOMS to watch for:
- Chest pain, difficulty breathing, severe headache
- Signs of stroke (sudden weakness, speech problems, facial drooping)
- Severe allergic reactions, poisoning, severe injuries
- Suicidal thoughts or mental health crises

For any emergency symptoms, immediately direct to emergency services.

Respond in a caring, professional manner with accurate health information while emphasizing the importance of professional medical consultation."""

    QUERY_TEMPLATE = (
        "Health Query: {query}\n\n"
        "Please provide helpful health information while emphasizing the importance "
        "of consulting healthcare professionals for medical concerns."
    )

    def __init__(
        self,
        api_key: str,
        model_name: str = "gemini-1.5-flash",
        temperature: float = 0.3,
        max_output_tokens: int = 800,
    ):
        self.configured = bool(api_key)
        self.model_name = model_name
        if self.configured:
            genai.configure(api_key=api_key)

        self.model = genai.GenerativeModel(
            model_name,
            system_instruction=self.SYSTEM_PROMPT,
        )
        self.generation_config = genai.GenerationConfig(
            temperature=temperature,
            max_output_tokens=max_output_tokens,
        )

        logger.info(
            "GeminiHealthAssistant initialized with model=%s, configured=%s",
            model_name,
            self.configured,
        )

    async def analyze_health_query(self, query: str, user_id: str) -> str:
        call_id = str(uuid.uuid4())[:8]

        if not self.configured:
            logger.info("[%s] Gemini not configured, using fallback answer", call_id)
            return fallback_health_response(query)

        logger.info(
            "[%s] Sending health query for user %s: %s",
            call_id,
            user_id,
            truncate_text(query, 100),
        )
        start_time = time.perf_counter()

        try:
            response = await self.model.generate_content_async(
                self.QUERY_TEMPLATE.format(query=query),
                generation_config=self.generation_config,
                request_options={"timeout": 60},
            )
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                "[%s] Gemini call failed after %.0fms: %s",
                call_id,
                duration_ms,
                str(e),
            )
            raise LLMServiceError(
                message="Failed to process health query",
                details=str(e) or type(e).__name__,
                context={"call_id": call_id, "error_type": type(e).__name__},
            ) from e

        duration_ms = (time.perf_counter() - start_time) * 1000

        # .text raises ValueError when the answer was blocked or empty
        try:
            text = (response.text or "").strip()
        except ValueError:
            text = ""

        if not text:
            logger.warning("[%s] Gemini returned no text, using fallback answer", call_id)
            return fallback_health_response(query)

        logger.info(
            "[%s] Gemini answer generated in %.0fms, %d chars",
            call_id,
            duration_ms,
            len(text),
        )
        return text

    async def health_check(self) -> bool:
        """
        Check if Gemini is reachable.

        How:     Lists available models (no token cost).
        Returns: False when unconfigured or unreachable.
        """
        if not self.configured:
            return False
        try:
            models = genai.list_models()
            model_names = [m.name for m in models]
            target = f"models/{self.model_name}"
            if target not in model_names:
                logger.warning("Configured model %s not found in available models", target)
            return True
        except Exception as e:
            logger.warning("Gemini health check failed: %s", str(e))
            return False
