from __future__ import annotations

import pytest
from src.libs.resend_client import ResendAPIError, ResendClient, ResendClientError


def _client(monkeypatch: pytest.MonkeyPatch, response: object) -> tuple[ResendClient, list]:
    client = ResendClient(api_key="re_test", base_url="https://resend.test/")
    calls: list = []

    async def fake_post(path: str, payload: dict) -> object:
        calls.append((path, payload))
        return response

    monkeypatch.setattr(client, "_post", fake_post)
    return client, calls


async def test_send_email_posts_payload(monkeypatch: pytest.MonkeyPatch) -> None:
    client, calls = _client(monkeypatch, {"id": "email-42"})

    result = await client.send_email(
        from_email="MotorTrace <no-reply@motortrace.com>",
        to_emails=["driver@example.com"],
        subject="Hi",
        html="<p>Hi</p>",
    )

    assert result.id == "email-42"
    assert client.base_url == "https://resend.test"
    assert calls == [
        (
            "/emails",
            {
                "from": "MotorTrace <no-reply@motortrace.com>",
                "to": ["driver@example.com"],
                "subject": "Hi",
                "html": "<p>Hi</p>",
            },
        )
    ]


async def test_empty_body_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    client, calls = _client(monkeypatch, {"id": "email-42"})

    with pytest.raises(ResendClientError):
        await client.send_email(from_email="a@b.co", to_emails=["c@d.co"], subject="Hi")
    assert calls == []


async def test_missing_id_is_an_api_error(monkeypatch: pytest.MonkeyPatch) -> None:
    client, _ = _client(monkeypatch, {"object": "email"})

    with pytest.raises(ResendAPIError):
        await client.send_email(
            from_email="a@b.co", to_emails=["c@d.co"], subject="Hi", text="plain"
        )


async def test_missing_api_key() -> None:
    client = ResendClient(api_key="", base_url="https://resend.test")
    client.api_key = ""

    with pytest.raises(ResendClientError, match="RESEND_API_KEY"):
        await client.send_email(
            from_email="a@b.co", to_emails=["c@d.co"], subject="Hi", text="plain"
        )
