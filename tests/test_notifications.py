from __future__ import annotations

import httpx
import pytest

from registry_api.core.settings import Settings
from registry_api.db.models import Institution
from registry_api.services.notifications import (
    EmailNotifier,
    NotificationError,
    render_approval,
    render_submission_received,
)


class StubMailClient:
    def __init__(self, status_code: int = 200, error: Exception | None = None) -> None:
        self.requests: list[tuple[str, dict[str, object], dict[str, str]]] = []
        self._status_code = status_code
        self._error = error

    async def post(self, url: str, json: dict[str, object], headers: dict[str, str]) -> httpx.Response:
        self.requests.append((url, json, headers))
        if self._error is not None:
            raise self._error
        return httpx.Response(self._status_code, request=httpx.Request("POST", url))


@pytest.fixture
def mail_settings(test_settings: Settings) -> Settings:
    return test_settings.model_copy(
        update={
            "mail_api_key": "re_test",
            "mail_from": "Registry <no-reply@registry.test>",
            "mail_api_url": "https://mail.test",
        }
    )


def _institution() -> Institution:
    return Institution(id="inst-1", name="Acme <Univ>", email="a@acme.edu")


async def test_submission_email_is_posted(mail_settings):
    client = StubMailClient()
    notifier = EmailNotifier(settings=mail_settings, http_client=client)

    await notifier.send_submission_received(name="Acme Univ", email="a@acme.edu")

    assert len(client.requests) == 1
    url, payload, headers = client.requests[0]
    assert url == "https://mail.test/emails"
    assert headers["Authorization"] == "Bearer re_test"
    assert payload["to"] == ["a@acme.edu"]
    assert payload["from"] == "Registry <no-reply@registry.test>"
    assert payload["tags"] == [{"name": "category", "value": "submission_received"}]
    assert "reply_to" not in payload


async def test_approval_email_links_to_login(mail_settings):
    client = StubMailClient()
    notifier = EmailNotifier(settings=mail_settings, http_client=client)

    await notifier.send_approval_notice(_institution())

    _, payload, _ = client.requests[0]
    assert payload["subject"] == "Your institution has been approved"
    assert "https://registry.test/login" in str(payload["text"])
    assert "Acme &lt;Univ&gt;" in str(payload["html"])


async def test_rejection_email(mail_settings):
    client = StubMailClient()
    notifier = EmailNotifier(settings=mail_settings, http_client=client)

    await notifier.send_rejection_notice(_institution())

    _, payload, _ = client.requests[0]
    assert payload["tags"] == [{"name": "category", "value": "institution_denied"}]


async def test_gateway_rejection_raises(mail_settings):
    notifier = EmailNotifier(settings=mail_settings, http_client=StubMailClient(status_code=422))

    with pytest.raises(NotificationError, match="status 422"):
        await notifier.send_rejection_notice(_institution())


async def test_transport_error_raises(mail_settings):
    client = StubMailClient(error=httpx.ConnectError("connection refused"))
    notifier = EmailNotifier(settings=mail_settings, http_client=client)

    with pytest.raises(NotificationError, match="unavailable"):
        await notifier.send_approval_notice(_institution())


async def test_unconfigured_mail_is_skipped(test_settings):
    client = StubMailClient()
    notifier = EmailNotifier(settings=test_settings, http_client=client)

    await notifier.send_submission_received(name="Acme Univ", email="a@acme.edu")

    assert client.requests == []


def test_templates_escape_names():
    rendered = render_submission_received("<script>")

    assert "<script>" not in rendered.html
    assert "&lt;script&gt;" in rendered.html
    assert rendered.text.startswith("Hello <script>,")


def test_approval_template_without_login_url():
    rendered = render_approval("Acme", None)

    assert "Sign in" not in rendered.text
