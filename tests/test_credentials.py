from stripe_field import settings
from stripe_field.credentials import ResolvedSecret, resolve_secret_key, sanitize_text, secret_key_for
from stripe_field.repositories import update_option


def test_option_wins_over_constant():
    s = resolve_secret_key("sk_opt", "sk_const")
    assert (s.value, s.source) == ("sk_opt", "option")


def test_constant_used_when_option_blank():
    s = resolve_secret_key("  ", "sk_const")
    assert (s.value, s.source) == ("sk_const", "constant")


def test_nothing_configured():
    s = resolve_secret_key(None, None)
    assert (s.value, s.source) == ("", "none")
    assert not s.connected
    assert s.hint() == ""


def test_filter_can_replace_key():
    s = resolve_secret_key("sk_opt", None, lambda current: "sk_from_vault")
    assert (s.value, s.source) == ("sk_from_vault", "filter")


def test_filter_returning_same_value_keeps_source():
    s = resolve_secret_key(None, "sk_const", lambda current: current)
    assert s.source == "constant"


def test_filter_can_disable():
    s = resolve_secret_key("sk_opt", None, lambda current: None)
    assert (s.value, s.source) == ("", "none")


def test_hint_masks_key():
    assert ResolvedSecret("sk_live_51Habcdef4242", "option").hint() == "sk_live_…4242"
    assert ResolvedSecret("whatever1234", "filter").hint() == "…1234"


def test_secret_key_for_reads_option_table(db_session, monkeypatch):
    monkeypatch.setattr(settings, "SECRET_KEY_CONSTANT", "sk_const")
    assert secret_key_for(db_session).source == "constant"

    update_option(db_session, settings.SECRET_KEY_OPTION, "sk_saved")
    db_session.commit()
    s = secret_key_for(db_session)
    assert (s.value, s.source) == ("sk_saved", "option")


def test_sanitize_text():
    assert sanitize_text("  <b>sk_test_1</b>\n ") == "sk_test_1"
    assert sanitize_text("a\x00b   c") == "a b c"
    assert sanitize_text("&lt;script&gt;x") == "x"
    assert sanitize_text(None) == ""
