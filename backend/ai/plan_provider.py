"""
OpenAI-backed plan provider.

Part of HYG-22: OpenAI plan provider

Implements the PlanProvider port with the OpenAI chat completions API.
Responses are parsed as JSON (markdown code fences tolerated) and validated
with the domain pydantic models; anything unusable raises PlanProviderError.
Transient API errors are retried through `call_with_retry`.

Fallbacks are not applied here: the session controller wraps this provider
in GuardedPlanProvider.
"""
import json
import logging
import re
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI
from pydantic import ValidationError

from application.exceptions import PlanProviderError
from backend.ai.prompts import (
    FEEDBACK_SYSTEM_PROMPT,
    GOAL_PROGRESS_SYSTEM_PROMPT,
    PLAN_SYSTEM_PROMPT,
    SUBSTITUTION_SYSTEM_PROMPT,
    build_feedback_prompt,
    build_goal_progress_prompt,
    build_plan_prompt,
    build_substitution_prompt,
)
from backend.ai.retry import DEFAULT_MAX_ATTEMPTS, RetryPolicy, call_with_retry
from domain.models import (
    AthleteProfile,
    Exercise,
    GoalProgressAnalysis,
    PerformanceMetric,
    WorkoutPlan,
)

logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"```(?:json)?", re.IGNORECASE)


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences sometimes wrapped around JSON answers."""
    return _CODE_FENCE.sub("", text).strip()


def parse_json_object(text: Optional[str]) -> Dict[str, Any]:
    """
    Parse an LLM answer as a JSON object.

    Raises:
        PlanProviderError: If the answer is empty, not JSON, or not an object
    """
    if not text or not text.strip():
        raise PlanProviderError("Empty response from plan provider")
    try:
        data = json.loads(strip_code_fences(text))
    except json.JSONDecodeError as e:
        raise PlanProviderError(f"Plan provider returned invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise PlanProviderError(f"Expected a JSON object, got {type(data).__name__}")
    return data


class OpenAIPlanProvider:
    """
    PlanProvider implementation using OpenAI chat completions.

    Uses gpt-4o-mini by default for cost-effective generation.
    """

    DEFAULT_MODEL = "gpt-4o-mini"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        *,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        client: Optional[AsyncOpenAI] = None,
    ):
        """
        Initialize the provider.

        Args:
            api_key: OpenAI API key (ignored when `client` is given)
            model: Chat model to use
            max_attempts: Attempts per call on transient errors
            client: Pre-built client, mainly for tests
        """
        if client is None and not api_key:
            raise ValueError("OpenAIPlanProvider requires an api_key or a client")
        self._client = client or AsyncOpenAI(api_key=api_key)
        self._model = model
        self._retry_policy = RetryPolicy(max_attempts=max_attempts)

    async def _complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        json_response: bool = True,
        temperature: float = 0.4,
    ) -> str:
        kwargs: Dict[str, Any] = {}
        if json_response:
            kwargs["response_format"] = {"type": "json_object"}

        response = await call_with_retry(
            self._client.chat.completions.create,
            model=self._model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=temperature,
            policy=self._retry_policy,
            **kwargs,
        )

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise PlanProviderError("Empty response from plan provider")
        return content

    async def generate_plan(
        self,
        profile: AthleteProfile,
        duration_minutes: int,
        focus_hint: str,
    ) -> WorkoutPlan:
        """
        Generate a session plan.

        Raises:
            PlanProviderError: If the response is not a valid plan
        """
        raw = await self._complete(
            PLAN_SYSTEM_PROMPT,
            build_plan_prompt(profile, duration_minutes, focus_hint),
        )
        data = parse_json_object(raw)
        try:
            plan = WorkoutPlan.model_validate(data)
        except ValidationError as e:
            raise PlanProviderError(f"Plan failed validation: {e}") from e
        logger.debug(f"Plan received with {plan.exercise_count} exercises")
        return plan

    async def substitute_exercise(
        self,
        profile: AthleteProfile,
        current_exercise: Exercise,
    ) -> Exercise:
        """
        Propose a replacement exercise.

        Raises:
            PlanProviderError: If the response is not a valid exercise
        """
        raw = await self._complete(
            SUBSTITUTION_SYSTEM_PROMPT,
            build_substitution_prompt(profile, current_exercise),
        )
        data = parse_json_object(raw)
        try:
            return Exercise.model_validate(data)
        except ValidationError as e:
            raise PlanProviderError(f"Replacement failed validation: {e}") from e

    async def generate_session_feedback(
        self,
        profile: AthleteProfile,
        metrics: List[PerformanceMetric],
    ) -> str:
        raw = await self._complete(
            FEEDBACK_SYSTEM_PROMPT,
            build_feedback_prompt(profile, metrics),
            json_response=False,
        )
        return raw.strip()

    async def analyze_goal_progress(
        self,
        profile: AthleteProfile,
        metrics: List[PerformanceMetric],
    ) -> GoalProgressAnalysis:
        """
        Estimate goal progress after a session.

        The completion estimate is clamped to 0..100 before validation.

        Raises:
            PlanProviderError: If the response is not a valid analysis
        """
        raw = await self._complete(
            GOAL_PROGRESS_SYSTEM_PROMPT,
            build_goal_progress_prompt(profile, metrics),
            temperature=0.2,
        )
        data = parse_json_object(raw)
        completion = data.get("current_estimated_completion")
        if isinstance(completion, (int, float)):
            data["current_estimated_completion"] = min(max(float(completion), 0.0), 100.0)
        try:
            return GoalProgressAnalysis.model_validate(data)
        except ValidationError as e:
            raise PlanProviderError(f"Goal analysis failed validation: {e}") from e
