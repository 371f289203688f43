from __future__ import annotations

from typing import Protocol

import httpx

from finflow.core.errors import ConfigurationError, SendFailure
from finflow.services.email_templates import render_news_summary_email, render_welcome_email
from finflow.utils.dates import format_date_today


class MailSink(Protocol):
    def require_configured(self) -> None: ...

    async def send(self, address: str, subject: str, html_body: str) -> bool: ...


class ResendMailer:
    """Outbound mail through the Resend HTTP API."""

    def __init__(
        self,
        api_key: str | None,
        sender: str,
        *,
        base_url: str = "https://api.resend.com",
        timeout: float = 20,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.sender = sender
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def require_configured(self) -> None:
        if not self.api_key:
            raise ConfigurationError("RESEND_API_KEY is not configured")

    async def send(self, address: str, subject: str, html_body: str) -> bool:
        self.require_configured()
        payload = {"from": self.sender, "to": [address], "subject": subject, "html": html_body}
        headers = {"Authorization": f"Bearer {self.api_key}"}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(f"{self.base_url}/emails", json=payload, headers=headers)
        except httpx.HTTPError as exc:
            raise SendFailure(address, f"{type(exc).__name__}: {exc}") from exc

        if not response.is_success:
            raise SendFailure(address, f"HTTP {response.status_code}: {response.text}")
        return True


async def send_daily_news_summary_email(mailer: MailSink, email: str, news_content: str, date: str | None = None) -> bool:
    current_date = date or format_date_today()
    html = render_news_summary_email(news_content, current_date)
    return await mailer.send(email, f"Market News Summary - {current_date}", html)


async def send_welcome_email(mailer: MailSink, email: str, name: str, intro: str) -> bool:
    html = render_welcome_email(name, intro)
    return await mailer.send(email, "Welcome to FinFlow - your stock market toolkit is ready!", html)
