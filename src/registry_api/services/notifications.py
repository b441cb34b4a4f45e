from __future__ import annotations

import html
import logging
from dataclasses import dataclass
from typing import Protocol

import httpx

from registry_api.core.settings import Settings, get_settings
from registry_api.db.models import Institution

logger = logging.getLogger(__name__)


class NotificationError(RuntimeError):
    """Raised when the mail gateway rejects or fails to deliver a message."""


class InstitutionNotifier(Protocol):
    async def send_submission_received(self, *, name: str, email: str) -> None: ...

    async def send_approval_notice(self, institution: Institution) -> None: ...

    async def send_rejection_notice(self, institution: Institution) -> None: ...


@dataclass(frozen=True, slots=True)
class RenderedEmail:
    subject: str
    html: str
    text: str


def _wrap_html(heading: str, paragraphs: list[str]) -> str:
    body = "".join(f'<p style="margin:0 0 12px 0;">{paragraph}</p>' for paragraph in paragraphs)
    return (
        '<div style="font-family: ui-sans-serif, system-ui; line-height: 1.5;">'
        f'<h2 style="margin:0 0 12px 0;">{heading}</h2>{body}</div>'
    )


def render_submission_received(name: str) -> RenderedEmail:
    safe_name = html.escape(name)
    return RenderedEmail(
        subject="We received your registration",
        html=_wrap_html(
            "Registration received",
            [
                f"Hello <strong>{safe_name}</strong>,",
                "Thanks for registering. An administrator will review your application "
                "and you will receive an email once a decision has been made.",
            ],
        ),
        text="\n".join(
            [
                f"Hello {name},",
                "",
                "Thanks for registering. An administrator will review your application "
                "and you will receive an email once a decision has been made.",
            ]
        ),
    )


def render_approval(name: str, login_url: str | None) -> RenderedEmail:
    safe_name = html.escape(name)
    paragraphs = [
        f"Hello <strong>{safe_name}</strong>,",
        "Your institution has been approved. You can now sign in and start inviting users.",
    ]
    text_lines = [
        f"Hello {name},",
        "",
        "Your institution has been approved. You can now sign in and start inviting users.",
    ]
    if login_url:
        paragraphs.append(f'<a href="{html.escape(login_url, quote=True)}">Sign in</a>')
        text_lines += ["", f"Sign in: {login_url}"]
    return RenderedEmail(
        subject="Your institution has been approved",
        html=_wrap_html("Application approved", paragraphs),
        text="\n".join(text_lines),
    )


def render_rejection(name: str) -> RenderedEmail:
    safe_name = html.escape(name)
    return RenderedEmail(
        subject="Your institution application was not approved",
        html=_wrap_html(
            "Application not approved",
            [
                f"Hello <strong>{safe_name}</strong>,",
                "After reviewing your application we are unable to approve it at this time.",
            ],
        ),
        text="\n".join(
            [
                f"Hello {name},",
                "",
                "After reviewing your application we are unable to approve it at this time.",
            ]
        ),
    )


class EmailNotifier:
    """Deliver institution lifecycle emails through a Resend-compatible HTTP API."""

    def __init__(
        self,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._http_client = http_client

    async def send_submission_received(self, *, name: str, email: str) -> None:
        await self._send(email, render_submission_received(name), tag="submission_received")

    async def send_approval_notice(self, institution: Institution) -> None:
        login_url = f"{self._settings.web_base_url}/login" if self._settings.web_base_url else None
        await self._send(
            institution.email,
            render_approval(institution.name, login_url),
            tag="institution_approved",
        )

    async def send_rejection_notice(self, institution: Institution) -> None:
        await self._send(
            institution.email,
            render_rejection(institution.name),
            tag="institution_denied",
        )

    async def _send(self, recipient: str, email: RenderedEmail, *, tag: str) -> None:
        if not self._settings.mail_enabled:
            logger.info("Mail delivery disabled; skipping %s email to %s", tag, recipient)
            return

        payload: dict[str, object] = {
            "from": self._settings.mail_from,
            "to": [recipient],
            "subject": email.subject,
            "html": email.html,
            "text": email.text,
            "tags": [{"name": "category", "value": tag}],
        }
        if self._settings.mail_reply_to:
            payload["reply_to"] = self._settings.mail_reply_to

        if self._http_client is None:
            async with httpx.AsyncClient(timeout=self._settings.mail_timeout_seconds) as client:
                await self._post(client, payload, tag=tag)
        else:
            await self._post(self._http_client, payload, tag=tag)
        logger.info("Sent %s email to %s", tag, recipient)

    async def _post(
        self,
        client: httpx.AsyncClient,
        payload: dict[str, object],
        *,
        tag: str,
    ) -> None:
        url = f"{self._settings.mail_api_url}/emails"
        headers = {"Authorization": f"Bearer {self._settings.mail_api_key}"}
        try:
            response = await client.post(url, json=payload, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise NotificationError(
                f"Mail gateway rejected {tag} email (status {exc.response.status_code})"
            ) from exc
        except httpx.HTTPError as exc:
            raise NotificationError(f"Mail gateway unavailable for {tag} email") from exc


__all__ = [
    "EmailNotifier",
    "InstitutionNotifier",
    "NotificationError",
    "RenderedEmail",
    "render_approval",
    "render_rejection",
    "render_submission_received",
]
