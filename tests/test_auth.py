from stripe_field import settings
from stripe_field.auth import (
    EDIT_POSTS,
    MANAGE_OPTIONS,
    Caller,
    caller_for_token,
    create_nonce,
    search_action,
    verify_nonce,
)

EDITOR = Caller("editor-token", frozenset({EDIT_POSTS}))
NOW = 1_700_000_000.0
HALF = settings.NONCE_LIFETIME / 2


def test_caller_for_token():
    assert caller_for_token("admin-token").can(MANAGE_OPTIONS)
    editor = caller_for_token("editor-token")
    assert editor.can(EDIT_POSTS) and not editor.can(MANAGE_OPTIONS)
    assert caller_for_token("nope") is None
    assert caller_for_token(None) is None


def test_search_action_per_kind():
    assert search_action("customer") == "acf_stripe_customer_search"
    assert search_action("product") == "acf_stripe_product_search"


def test_nonce_round_trip():
    action = search_action("customer")
    nonce = create_nonce(action, EDITOR, NOW)
    assert len(nonce) == 10
    assert verify_nonce(nonce, action, EDITOR, NOW)


def test_nonce_bound_to_action_and_caller():
    nonce = create_nonce(search_action("customer"), EDITOR, NOW)
    assert not verify_nonce(nonce, search_action("product"), EDITOR, NOW)
    other = Caller("admin-token", frozenset({EDIT_POSTS, MANAGE_OPTIONS}))
    assert not verify_nonce(nonce, search_action("customer"), other, NOW)


def test_nonce_survives_one_tick_then_expires():
    action = search_action("customer")
    nonce = create_nonce(action, EDITOR, NOW)
    assert verify_nonce(nonce, action, EDITOR, NOW + HALF)
    assert not verify_nonce(nonce, action, EDITOR, NOW + 2 * HALF + 1)


def test_blank_nonce_rejected():
    assert not verify_nonce("", search_action("customer"), EDITOR, NOW)
    assert not verify_nonce(None, search_action("customer"), EDITOR, NOW)


def test_nonce_depends_on_secret(monkeypatch):
    action = search_action("customer")
    nonce = create_nonce(action, EDITOR, NOW)
    monkeypatch.setattr(settings, "NONCE_SECRET", "rotated")
    assert not verify_nonce(nonce, action, EDITOR, NOW)
