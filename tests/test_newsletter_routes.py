"""
Newsletter Route Tests
======================

Form pages and JSON API on top of the subscriber registry.
Run with: pytest tests/test_newsletter_routes.py -v
"""

from unittest.mock import MagicMock

import pytest
import requests
from flask import Flask

from cloudsoft import CloudSoft
from cloudsoft.modules.newsletter import Subscriber, SubscriberRegistry, WebhookNotifier
from cloudsoft.modules.newsletter.routes import validate_email


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def registry():
    return SubscriberRegistry()


@pytest.fixture
def notifier():
    return MagicMock()


@pytest.fixture
def app(registry, notifier):
    app = Flask(__name__)
    app.config["TESTING"] = True
    app.config["SECRET_KEY"] = "test-secret"
    app.config["LOG_DB"] = None
    CloudSoft(app, registry=registry, notifier=notifier)
    return app


@pytest.fixture
def client(app):
    return app.test_client()


# ---------------------------------------------------------------------------
# Email validation
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("email", [
    "user@example.com",
    "first.last+tag@sub.example.co.uk",
    "  Upper@Example.COM ",
])
def test_validate_email_accepts(email):
    assert validate_email(email)


@pytest.mark.parametrize("email", [
    "",
    None,
    "plainaddress",
    "two..dots@example.com",
    ".leading@example.com",
    "user@nodomain",
    "a" * 250 + "@example.com",
])
def test_validate_email_rejects(email):
    assert not validate_email(email)


# ---------------------------------------------------------------------------
# Sign-up page
# ---------------------------------------------------------------------------

def test_subscribe_page_renders(client):
    response = client.get("/newsletter/subscribe")

    assert response.status_code == 200
    assert b'name="email"' in response.data
    assert b'name="name"' in response.data


def test_subscribe_form_success_redirects_with_welcome(client, registry, notifier):
    response = client.post(
        "/newsletter/subscribe",
        data={"name": "Test User", "email": "user@example.com"},
    )

    assert response.status_code == 302
    assert response.headers["Location"].endswith("/newsletter/subscribe")
    assert registry.is_active("user@example.com")
    notifier.subscriber_added.assert_called_once()
    assert notifier.subscriber_added.call_args[0][0].email == "user@example.com"

    page = client.get("/newsletter/subscribe")
    assert b"Welcome to our newsletter, Test User" in page.data
    assert b"alert-success" in page.data


def test_subscribe_form_duplicate_shows_error(client, registry, notifier):
    registry.sign_up(Subscriber(name="First", email="dup@example.com"))

    response = client.post(
        "/newsletter/subscribe",
        data={"name": "Second", "email": "DUP@example.com"},
        follow_redirects=True,
    )

    assert response.status_code == 200
    assert b"already subscribed" in response.data
    assert b"alert-error" in response.data
    assert registry.list_active()[0].name == "First"
    notifier.subscriber_added.assert_not_called()


def test_subscribe_form_invalid_email_rerenders(client, registry):
    response = client.post(
        "/newsletter/subscribe",
        data={"name": "Bad", "email": "not-an-email"},
    )

    assert response.status_code == 400
    assert b"Please enter a valid email address" in response.data
    # Submitted values are kept in the form
    assert b'value="not-an-email"' in response.data
    assert registry.count() == 0


def test_subscribe_form_missing_email(client):
    response = client.post("/newsletter/subscribe", data={"name": "No Email"})

    assert response.status_code == 400
    assert b"Email address is required" in response.data


def test_subscribe_form_name_too_long(client, registry):
    response = client.post(
        "/newsletter/subscribe",
        data={"name": "x" * 101, "email": "long@example.com"},
    )

    assert response.status_code == 400
    assert b"100 characters or fewer" in response.data
    assert registry.count() == 0


# ---------------------------------------------------------------------------
# Subscriber list and opt-out pages
# ---------------------------------------------------------------------------

def test_subscribers_page_lists_active(client, registry):
    registry.sign_up(Subscriber(name="Alice", email="alice@example.com"))
    registry.sign_up(Subscriber(name="Bob", email="bob@example.com"))

    response = client.get("/newsletter/subscribers")

    assert response.status_code == 200
    assert b"alice@example.com" in response.data
    assert b"bob@example.com" in response.data
    assert b"2 active subscribers" in response.data
    assert response.data.index(b"alice@example.com") < response.data.index(b"bob@example.com")


def test_subscribers_page_empty(client):
    response = client.get("/newsletter/subscribers")

    assert b"No one has subscribed yet" in response.data


def test_unsubscribe_page_prefills_email(client):
    response = client.get("/newsletter/unsubscribe?email=pre@example.com")

    assert response.status_code == 200
    assert b'value="pre@example.com"' in response.data


def test_unsubscribe_form_success(client, registry, notifier):
    registry.sign_up(Subscriber(name="Leaving", email="leave@example.com"))

    response = client.post("/newsletter/unsubscribe", data={"email": "leave@example.com"})

    assert response.status_code == 302
    assert response.headers["Location"].endswith("/newsletter/subscribers")
    assert not registry.is_active("leave@example.com")
    notifier.subscriber_removed.assert_called_once_with("leave@example.com")

    page = client.get("/newsletter/subscribers")
    assert b"successfully removed" in page.data


def test_unsubscribe_form_unknown_email(client, notifier):
    response = client.post(
        "/newsletter/unsubscribe",
        data={"email": "ghost@example.com"},
        follow_redirects=True,
    )

    assert response.status_code == 200
    # apostrophe is HTML-escaped in the rendered flash message
    assert b"find your subscription" in response.data
    assert b'value="ghost@example.com"' in response.data
    notifier.subscriber_removed.assert_not_called()


def test_unsubscribe_form_invalid_email(client):
    response = client.post("/newsletter/unsubscribe", data={"email": "nope"})

    assert response.status_code == 400
    assert b"Please enter a valid email address" in response.data


# ---------------------------------------------------------------------------
# JSON API
# ---------------------------------------------------------------------------

def test_api_subscribe_success(client, registry):
    response = client.post(
        "/api/newsletter/subscribe",
        json={"name": "Api User", "email": "Api@Example.com"},
    )

    assert response.status_code == 201
    data = response.get_json()
    assert "Welcome to our newsletter" in data["message"]
    assert data["subscriber"]["email"] == "api@example.com"
    assert data["subscriber"]["name"] == "Api User"
    assert registry.is_active("api@example.com")


def test_api_subscribe_root_route_accepts_form_data(client, registry):
    response = client.post("/api/newsletter", data={"email": "form@example.com"})

    assert response.status_code == 201
    assert registry.is_active("form@example.com")


def test_api_subscribe_duplicate_returns_conflict(client):
    client.post("/api/newsletter/subscribe", json={"email": "twice@example.com"})

    response = client.post("/api/newsletter/subscribe", json={"email": "twice@example.com"})

    assert response.status_code == 409
    data = response.get_json()
    assert data["code"] == "duplicate_subscription"
    assert "already subscribed" in data["error"]


def test_api_subscribe_validation(client):
    missing = client.post("/api/newsletter/subscribe", json={"name": "No Email"})
    invalid = client.post("/api/newsletter/subscribe", json={"email": "bad@"})

    assert missing.status_code == 400
    assert missing.get_json()["error"] == "Email address is required"
    assert invalid.status_code == 400
    assert "email" in invalid.get_json()["fields"]


def test_api_unsubscribe(client):
    client.post("/api/newsletter/subscribe", json={"email": "bye@example.com"})

    first = client.post("/api/newsletter/unsubscribe", json={"email": "bye@example.com"})
    second = client.post("/api/newsletter/unsubscribe", json={"email": "bye@example.com"})

    assert first.status_code == 200
    assert "successfully removed" in first.get_json()["message"]
    assert second.status_code == 404
    assert second.get_json()["code"] == "not_found"
    assert "couldn't find your subscription" in second.get_json()["error"]


def test_api_unsubscribe_requires_email(client):
    response = client.post("/api/newsletter/unsubscribe", json={})

    assert response.status_code == 400


@pytest.mark.parametrize("body", [
    {"email": 123},
    {"email": ["a@b.com"]},
    {"email": {"address": "a@b.com"}},
    {"name": 42, "email": "ok@example.com"},
    {"name": ["Ann"], "email": "ok@example.com"},
])
def test_api_subscribe_rejects_non_string_fields(client, registry, notifier, body):
    response = client.post("/api/newsletter/subscribe", json=body)

    assert response.status_code == 400
    data = response.get_json()
    assert data["error"]
    assert set(data["fields"]) <= {"name", "email"}
    assert registry.count() == 0
    notifier.subscriber_added.assert_not_called()


@pytest.mark.parametrize("email", [123, ["a@b.com"], {"address": "a@b.com"}, True])
def test_api_unsubscribe_rejects_non_string_email(client, registry, notifier, email):
    registry.sign_up(Subscriber(name="Stays", email="a@b.com"))

    response = client.post("/api/newsletter/unsubscribe", json={"email": email})

    assert response.status_code == 400
    assert response.get_json()["error"] == "Please enter a valid email address"
    assert registry.is_active("a@b.com")
    notifier.subscriber_removed.assert_not_called()


def test_api_subscribers_export(client):
    client.post("/api/newsletter/subscribe", json={"name": "One", "email": "one@example.com"})
    client.post("/api/newsletter/subscribe", json={"name": "Two", "email": "two@example.com"})

    data = client.get("/api/newsletter/subscribers").get_json()

    assert data["total_count"] == 2
    assert [s["email"] for s in data["subscribers"]] == ["one@example.com", "two@example.com"]
    assert "subscribed_at" in data["subscribers"][0]
    assert "exported_at" in data


def test_api_stats(client):
    empty = client.get("/api/newsletter/stats").get_json()
    client.post("/api/newsletter/subscribe", json={"email": "stat@example.com"})
    filled = client.get("/api/newsletter/stats").get_json()

    assert empty == {"count": 0, "last_updated": None}
    assert filled["count"] == 1
    assert filled["last_updated"] is not None


def test_api_subscribe_unexpected_error_returns_500(app, client, registry):
    registry.sign_up = MagicMock(side_effect=RuntimeError("boom"))

    response = client.post("/api/newsletter/subscribe", json={"email": "err@example.com"})

    assert response.status_code == 500
    assert response.get_json() == {"error": "An unexpected error occurred"}


# ---------------------------------------------------------------------------
# Notifiers
# ---------------------------------------------------------------------------

def test_notifier_failure_does_not_break_signup(client, registry, notifier):
    notifier.subscriber_added.side_effect = RuntimeError("notifier down")

    response = client.post("/api/newsletter/subscribe", json={"email": "safe@example.com"})

    assert response.status_code == 201
    assert registry.is_active("safe@example.com")


def test_webhook_notifier_posts_event():
    session = MagicMock()
    hook = WebhookNotifier("https://hooks.example.com/news", timeout=2, session=session)

    assert hook.subscriber_added(Subscriber(name="Hook", email="hook@example.com"))

    url = session.post.call_args[0][0]
    kwargs = session.post.call_args[1]
    assert url == "https://hooks.example.com/news"
    assert kwargs["timeout"] == 2
    assert kwargs["json"]["event"] == "subscriber.added"
    assert kwargs["json"]["email"] == "hook@example.com"
    assert kwargs["json"]["name"] == "Hook"


def test_webhook_notifier_swallows_transport_errors(app):
    session = MagicMock()
    session.post.side_effect = requests.ConnectionError("unreachable")
    hook = WebhookNotifier("https://hooks.example.com/news", session=session)

    with app.app_context():
        assert hook.subscriber_removed("gone@example.com") is False

    assert session.post.call_args[1]["json"]["event"] == "subscriber.removed"
