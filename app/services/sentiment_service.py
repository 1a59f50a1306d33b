"""
Urgency scoring for maintenance descriptions via the OpenAI chat-completions API.

Both helpers degrade to a neutral answer when the API key is missing or the
call fails, so request creation never depends on the model being reachable.
"""
import json
import logging
from typing import Dict

import httpx

from app.core.config import settings

logger = logging.getLogger(__name__)

DEFAULT_SENTIMENT = {"rating": 3, "confidence": 0.5}
DEFAULT_RECOMMENDATION = "Unable to generate recommendation at this time."

SENTIMENT_PROMPT = (
    "You are a sentiment analysis expert. Analyze the severity and urgency of the "
    "maintenance request and provide a rating from 1 to 5 (1 being most urgent) and a "
    "confidence score between 0 and 1. Respond with JSON in this format: "
    "{ 'rating': number, 'confidence': number }"
)

RECOMMENDATION_PROMPT = (
    "You are a property maintenance expert. Provide a brief recommendation for "
    "handling the maintenance request."
)


async def _chat_completion(messages: list, json_mode: bool = False) -> str:
    payload = {
        "model": settings.OPENAI_MODEL,
        "messages": messages,
    }
    if json_mode:
        payload["response_format"] = {"type": "json_object"}

    async with httpx.AsyncClient() as client:
        response = await client.post(
            settings.OPENAI_API_URL,
            json=payload,
            headers={
                "Authorization": f"Bearer {settings.OPENAI_API_KEY}",
                "Content-Type": "application/json",
            },
            timeout=20.0,
        )
        response.raise_for_status()
        data = response.json()
    return data["choices"][0]["message"]["content"] or ""


async def analyze_sentiment(text: str) -> Dict[str, float]:
    """
    Rate how urgent a maintenance description sounds.

    Returns {"rating": 1..5, "confidence": 0..1}; rating 1 is the most urgent.
    """
    if not settings.OPENAI_API_KEY:
        logger.warning("[sentiment] OPENAI_API_KEY not set, using neutral rating")
        return dict(DEFAULT_SENTIMENT)

    try:
        content = await _chat_completion(
            [
                {"role": "system", "content": SENTIMENT_PROMPT},
                {"role": "user", "content": text},
            ],
            json_mode=True,
        )
        result = json.loads(content)
        return {
            "rating": max(1, min(5, round(float(result["rating"])))),
            "confidence": max(0.0, min(1.0, float(result["confidence"]))),
        }
    except Exception as e:
        logger.error(f"[sentiment] Failed to analyze sentiment: {e}")
        return dict(DEFAULT_SENTIMENT)


async def generate_maintenance_recommendation(description: str) -> str:
    if not settings.OPENAI_API_KEY:
        return DEFAULT_RECOMMENDATION

    try:
        content = await _chat_completion(
            [
                {"role": "system", "content": RECOMMENDATION_PROMPT},
                {"role": "user", "content": description},
            ]
        )
        return content or "No recommendation available."
    except Exception as e:
        logger.error(f"[sentiment] Failed to generate recommendation: {e}")
        return DEFAULT_RECOMMENDATION


def is_urgent(sentiment: Dict[str, float]) -> bool:
    return sentiment.get("rating", DEFAULT_SENTIMENT["rating"]) <= settings.URGENT_RATING_THRESHOLD
