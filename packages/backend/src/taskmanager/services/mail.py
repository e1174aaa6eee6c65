"""Account notification mail via the SendGrid v3 HTTP API.

Mail is fire-and-forget: routes schedule it as a FastAPI background
task after the response is built, and delivery failures are logged,
never raised. With no API key configured the mailer logs and skips,
which is the normal state in development and tests.
"""

from typing import Optional

import httpx
import structlog

from taskmanager.config import settings

logger = structlog.get_logger()


class Mailer:
    def __init__(
        self,
        api_key: str,
        api_url: str,
        sender: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.api_url = api_url
        self.sender = sender
        self.timeout = timeout
        self.transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def build_payload(self, to: str, subject: str, text: str) -> dict:
        return {
            "personalizations": [{"to": [{"email": to}]}],
            "from": {"email": self.sender},
            "subject": subject,
            "content": [{"type": "text/plain", "value": text}],
        }

    async def send(self, to: str, subject: str, text: str) -> bool:
        """Deliver one plain-text mail. Returns False instead of raising."""
        if not self.enabled:
            logger.info("mail.skipped", reason="no api key", subject=subject)
            return False

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                r = await client.post(
                    self.api_url,
                    json=self.build_payload(to, subject, text),
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
                r.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("mail.send_failed", subject=subject, error=str(e))
            return False

        logger.info("mail.sent", subject=subject)
        return True

    async def send_welcome_email(self, email: str, name: str) -> bool:
        return await self.send(
            email,
            "Thanks for joining us!",
            f"Welcome to the app, {name}. Let me know how you get along with the app.",
        )

    async def send_cancellation_email(self, email: str, name: str) -> bool:
        return await self.send(
            email,
            "We are removing your account from the task-manager application.",
            f"Thanks for using the application, {name}. "
            "Could we have done something for you to stay onboard?",
        )


def get_mailer() -> Mailer:
    """FastAPI dependency — a mailer configured from settings."""
    return Mailer(
        api_key=settings.sendgrid_api_key,
        api_url=settings.sendgrid_api_url,
        sender=settings.mail_from,
    )
