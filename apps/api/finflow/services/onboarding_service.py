from __future__ import annotations

import logging

from finflow.core.errors import ConfigurationError
from finflow.schemas.digest import WelcomeRequest
from finflow.services.ai_service import AIService
from finflow.services.mail_service import MailSink, send_welcome_email
from finflow.services.retry import RetryScheduler

logger = logging.getLogger(__name__)

DEFAULT_WELCOME_INTRO = (
    "Thanks for joining FinFlow. You now have the tools to track markets and make smarter moves."
)


class OnboardingService:
    def __init__(self, *, summarizer: AIService, mailer: MailSink, retry: RetryScheduler) -> None:
        self.summarizer = summarizer
        self.mailer = mailer
        self.retry = retry

    async def send_welcome_email(self, request: WelcomeRequest) -> bool:
        profile = request.model_dump(exclude={"email", "name"})
        if self.summarizer.client is None:
            intro = DEFAULT_WELCOME_INTRO
        else:
            intro = await self.retry.run(
                lambda: self.summarizer.welcome_intro(profile),
                DEFAULT_WELCOME_INTRO,
                label=f"generate-welcome-intro-{request.email}",
            )

        try:
            return await send_welcome_email(self.mailer, request.email, request.name, intro)
        except ConfigurationError:
            raise
        except Exception as exc:
            logger.warning("Failed to send welcome email to %s: %s", request.email, exc)
            return False
