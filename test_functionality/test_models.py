"""
Test request validation, response message selection, entities and settings.
"""
from pathlib import Path

import pytest

from greenhero.application.dto import ProductDraft, SignupForm, parse_form
from greenhero.domain.entities import Product, User
from greenhero.domain.exceptions import InvalidRequestError
from greenhero.domain.models import ApiResponse
from greenhero.infrastructure.config import Settings

SIGNUP = {
    "first_name": "Mohamed",
    "last_name": "Rafik",
    "email": "a@b.com",
    "password": "Secret1",
}


# ---------------------------------------------------------------------------
# SignupForm
# ---------------------------------------------------------------------------

def test_signup_body_excludes_confirmation_and_empty_age():
    form = parse_form(SignupForm, dict(SIGNUP, confirm_password="Secret1"))

    assert form.to_body() == dict(SIGNUP, phone_number="")


@pytest.mark.parametrize("changes, message", [
    ({"email": "not-an-email"}, "valid email"),
    ({"password": "Sec1"}, "password"),
    ({"password": "secret1"}, "capital"),
    ({"first_name": ""}, "first_name"),
    ({"age": -1}, "age"),
    ({"confirm_password": "Other1"}, "Passwords do not match"),
])
def test_signup_rules(changes, message):
    with pytest.raises(InvalidRequestError, match=message):
        parse_form(SignupForm, dict(SIGNUP, **changes))


def test_product_draft_form_fields():
    draft = ProductDraft(name="Seeds", price=10, category="organic-seeds", unit="kg")

    assert draft.to_form() == {
        "name": "Seeds",
        "description": "",
        "price": "10",
        "category": "organic-seeds",
        "stock_quantity": "0",
        "unit": "kg",
    }


# ---------------------------------------------------------------------------
# ApiResponse.message
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("body, keys, expected", [
    ({"message": "A", "msg": "B"}, ("msg", "message"), "B"),
    ({"msg": ""}, ("msg", "message"), "Something went wrong"),
    ({"errors": [{"msg": "Bad phone"}]}, ("msg", "errors"), "Bad phone"),
    ({"errors": []}, ("errors",), "Something went wrong"),
    ([1, 2], ("message",), "Something went wrong"),
    ({"error": "E"}, (), "E"),
])
def test_response_message(body, keys, expected):
    assert ApiResponse(status=400, body=body).message(*keys) == expected


@pytest.mark.parametrize("status, ok", [(200, True), (204, True), (302, False), (401, False)])
def test_response_ok(status, ok):
    assert ApiResponse(status=status).ok is ok


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------

def test_user_round_trip_keeps_unknown_fields():
    record = {"_id": "u1", "email": "a@b.com", "age": "31", "createdAt": "2024-01-01"}

    user = User.from_dict(record)

    assert user.age == 31
    assert user.extra == {"createdAt": "2024-01-01"}
    assert user.to_dict() == {"_id": "u1", "email": "a@b.com", "age": 31, "createdAt": "2024-01-01"}
    assert user.display_name == "a@b.com"


def test_user_merged():
    user = User.from_dict({"_id": "u1", "first_name": "Amina", "bio": "old"})

    merged = user.merged({"bio": "new"})

    assert (merged.id, merged.first_name, merged.bio) == ("u1", "Amina", "new")
    assert user.bio == "old"


def test_product_seller_as_id():
    product = Product.from_dict({"_id": "p1", "seller": "u7", "product_images": "bad"})

    assert product.seller_name == "u7"
    assert product.product_images == []
    assert product.cover_image == ""


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

def test_settings_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("GREENHERO_API_URL", "https://abc.ngrok-free.app")
    monkeypatch.setenv("GREENHERO_AI_URL", "http://10.0.0.2:8000/api/")
    monkeypatch.setenv("GREENHERO_AI_AGENT", "eve")
    monkeypatch.setenv("GREENHERO_REQUEST_TIMEOUT", "4")
    monkeypatch.setenv("GREENHERO_SKIP_TUNNEL_WARNING", "no")
    monkeypatch.setenv("GREENHERO_HOME", str(tmp_path))
    monkeypatch.setenv("GREENHERO_LOG_LEVEL", "debug")

    settings = Settings.from_env(env_file=tmp_path / "missing.env")

    assert settings.api_base_url == "https://abc.ngrok-free.app"
    assert settings.chat_url == "http://10.0.0.2:8000/api/chat/eve"
    assert settings.classifier_url == "http://10.0.0.2:8000/api/waste/classify/eve"
    assert settings.request_timeout == 4.0
    assert settings.skip_tunnel_warning is False
    assert settings.credential_file == Path(tmp_path) / "credentials.json"
    assert settings.log_level == "DEBUG"


def test_settings_defaults():
    settings = Settings()

    assert settings.chat_url == "http://localhost:8000/api/chat/adam"
    assert settings.skip_tunnel_warning is True
