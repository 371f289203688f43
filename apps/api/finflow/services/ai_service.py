from __future__ import annotations

import json

import openai
from openai import AsyncOpenAI

from finflow.core.errors import ConfigurationError, QuotaExceeded
from finflow.schemas.news import Article
from finflow.services.prompts import NEWS_SUMMARY_EMAIL_PROMPT, PERSONALIZED_WELCOME_EMAIL_PROMPT


def build_news_prompt(articles: list[Article]) -> str:
    news_data = json.dumps([article.model_dump() for article in articles], indent=2)
    return NEWS_SUMMARY_EMAIL_PROMPT.replace("{{newsData}}", news_data)


def build_welcome_prompt(profile: dict) -> str:
    user_profile = "\n".join(
        [
            f"- Country: {profile.get('country') or 'Not specified'}",
            f"- Investment goals: {profile.get('investment_goals') or 'Not specified'}",
            f"- Risk tolerance: {profile.get('risk_tolerance') or 'Not specified'}",
            f"- Preferred industry: {profile.get('preferred_industry') or 'Not specified'}",
        ]
    )
    return PERSONALIZED_WELCOME_EMAIL_PROMPT.replace("{{userProfile}}", user_profile)


class AIService:
    def __init__(self, api_key: str | None, model: str = "gpt-4.1-mini", client: AsyncOpenAI | None = None) -> None:
        self.model = model
        self.client = client or (AsyncOpenAI(api_key=api_key) if api_key else None)

    def require_configured(self) -> None:
        if self.client is None:
            raise ConfigurationError("OPENAI_API_KEY is not configured")

    async def close(self) -> None:
        if self.client is not None:
            await self.client.close()

    async def _complete(self, prompt: str) -> str:
        self.require_configured()
        try:
            response = await self.client.responses.create(model=self.model, input=prompt)
        except openai.RateLimitError as exc:
            raise QuotaExceeded(str(exc)) from exc

        text = (response.output_text or "").strip()
        if not text:
            raise ValueError("Empty completion")
        return text

    async def summarize_news(self, articles: list[Article]) -> str:
        return await self._complete(build_news_prompt(articles))

    async def welcome_intro(self, profile: dict) -> str:
        return await self._complete(build_welcome_prompt(profile))
