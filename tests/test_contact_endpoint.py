import aiosmtplib
import httpx

from src.common.utils import email_service
from src.modules.contact.captcha_service import RecaptchaVerifier, get_captcha_verifier
from src.main import app

CONTACT_URL = "/api/contact"


def override_captcha(handler):
    verifier = RecaptchaVerifier(secret="s3cret", transport=httpx.MockTransport(handler))
    app.dependency_overrides[get_captcha_verifier] = lambda: verifier


def test_technical_submission_is_sent_to_it(client, sent_messages, valid_form):
    response = client.post(CONTACT_URL, json=valid_form)

    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True
    assert len(sent_messages) == 1
    message = sent_messages[0]["message"]
    assert message["To"] == "it@jayprasad.com.np"
    assert message["Reply-To"] == "jane@example.com"
    assert message["From"] == "Website Contact <no-reply@jayprasad.com.np>"
    assert message["Subject"] == "[Contact Form] Server down - Jane Doe"
    assert body["messageId"] == message["Message-ID"]


def test_message_newlines_in_both_bodies(client, sent_messages, valid_form):
    valid_form["message"] = "First line\nSecond line"

    response = client.post(CONTACT_URL, json=valid_form)

    assert response.status_code == 200
    message = sent_messages[0]["message"]
    text = message.get_body(preferencelist=("plain",)).get_content()
    html = message.get_body(preferencelist=("html",)).get_content()
    assert "First line\nSecond line" in text
    assert "First line<br/>Second line" in html


def test_trailing_slash_route(client, sent_messages, valid_form):
    response = client.post(CONTACT_URL + "/", json=valid_form)

    assert response.status_code == 200


def test_form_encoded_submission(client, sent_messages, valid_form):
    valid_form["department"] = "info"

    response = client.post(CONTACT_URL, data=valid_form)

    assert response.status_code == 200
    assert sent_messages[0]["message"]["To"] == "info@jayprasad.com.np"


def test_validation_errors_list_every_field(client, sent_messages):
    response = client.post(
        CONTACT_URL,
        json={"name": " ", "email": "nope", "department": "sales", "subject": "", "message": ""},
    )

    assert response.status_code == 400
    fields = {error["field"] for error in response.json()["errors"]}
    assert fields == {"name", "email", "department", "subject", "message"}
    assert sent_messages == []


def test_address_with_empty_mailbox_is_rejected(client, sent_messages, valid_form):
    valid_form["email"] = "+promo@gmail.com"

    response = client.post(CONTACT_URL, json=valid_form)

    assert response.status_code == 400
    assert [error["field"] for error in response.json()["errors"]] == ["email"]
    assert sent_messages == []


def test_malformed_json_is_rejected(client, sent_messages):
    response = client.post(
        CONTACT_URL,
        content=b"{not json",
        headers={"content-type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["errors"][0]["type"] == "malformed_body"


def test_json_array_is_rejected(client, sent_messages):
    response = client.post(CONTACT_URL, json=["not", "an", "object"])

    assert response.status_code == 400


def test_captcha_failure_returns_generic_error(client, sent_messages, valid_form):
    override_captcha(lambda request: httpx.Response(200, json={"success": True, "score": 0.1}))
    valid_form["captchaToken"] = "token"

    response = client.post(CONTACT_URL, json=valid_form)

    assert response.status_code == 400
    assert response.json() == {"error": "Captcha verification failed"}
    assert sent_messages == []


def test_captcha_success_with_secret(client, sent_messages, valid_form):
    override_captcha(lambda request: httpx.Response(200, json={"success": True, "score": 0.5}))
    valid_form["captchaToken"] = "token"

    response = client.post(CONTACT_URL, json=valid_form)

    assert response.status_code == 200
    assert len(sent_messages) == 1


def test_captcha_provider_outage_is_internal_error(client, sent_messages, valid_form):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    override_captcha(handler)
    valid_form["captchaToken"] = "token"

    response = client.post(CONTACT_URL, json=valid_form)

    assert response.status_code == 500
    assert response.json() == {"error": "Unable to send message"}
    assert sent_messages == []


def test_send_failure_does_not_leak_details(client, monkeypatch, valid_form):
    async def broken_send(message, **kwargs):
        raise aiosmtplib.SMTPException("535 authentication failed for smtp-user")

    monkeypatch.setattr(email_service.aiosmtplib, "send", broken_send)

    response = client.post(CONTACT_URL, json=valid_form)

    assert response.status_code == 500
    assert response.json() == {"error": "Unable to send message"}
    assert "smtp-user" not in response.text


def test_eleventh_request_in_window_is_rate_limited(client, sent_messages, valid_form):
    statuses = [client.post(CONTACT_URL, json=valid_form).status_code for _ in range(11)]

    assert statuses[:10] == [200] * 10
    assert statuses[10] == 429
    assert len(sent_messages) == 10


def test_rate_limit_is_shared_with_trailing_slash_route(client, sent_messages, valid_form):
    urls = [CONTACT_URL, CONTACT_URL + "/"] * 6

    statuses = [client.post(url, json=valid_form).status_code for url in urls[:11]]

    assert statuses[:10] == [200] * 10
    assert statuses[10] == 429
    assert len(sent_messages) == 10


def test_rate_limit_applies_before_validation(client, sent_messages):
    for _ in range(10):
        assert client.post(CONTACT_URL, json={}).status_code == 400

    response = client.post(CONTACT_URL, json={})

    assert response.status_code == 429
    assert "error" in response.json()


def test_health_check(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
