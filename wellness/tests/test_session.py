import base64
import json
import time

from wellness.app.core.session import (
    ASSISTANT_KEY,
    TOKEN_KEY,
    USER_ID_KEY,
    JsonFileStorage,
    MemoryStorage,
    SessionState,
    token_expired,
)


def make_token(claims) -> str:
    def part(obj):
        raw = json.dumps(obj).encode()
        return base64.urlsafe_b64encode(raw).decode().rstrip("=")

    return f"{part({'alg': 'HS256', 'typ': 'JWT'})}.{part(claims)}.signature"


def test_user_id_generated_once_and_persisted():
    storage = MemoryStorage()
    session = SessionState(storage)

    user_id = session.get_user_id()
    assert user_id.startswith("user_")
    assert session.get_user_id() == user_id
    assert storage.get(USER_ID_KEY) == user_id


def test_default_and_switched_assistant():
    storage = MemoryStorage()
    session = SessionState(storage)
    assert session.get_current_assistant() == "nona"

    descriptor = session.switch_assistant("chiara")
    assert descriptor.name == "Chiara"
    assert descriptor.greeting == "Welcome. Let's find some peace together."
    assert storage.get(ASSISTANT_KEY) == "chiara"
    assert SessionState(storage).get_current_assistant() == "chiara"


def test_unknown_assistant_keeps_id_as_name():
    descriptor = SessionState(MemoryStorage()).switch_assistant("marco")
    assert descriptor.name == "marco"
    assert descriptor.greeting == "Hello! How can I help you today?"


def test_token_expiry():
    assert not token_expired(make_token({"exp": time.time() + 3600}))
    assert token_expired(make_token({"exp": time.time() - 10}))
    assert token_expired(make_token({"exp": 1000}), now=2000)


def test_undecodable_token_counts_as_expired():
    assert token_expired(None)
    assert token_expired("")
    assert token_expired("not-a-jwt")
    assert token_expired("a.%%%.c")
    assert token_expired(make_token({"sub": "no-exp"}))
    assert token_expired(make_token({"exp": "soon"}))
    assert token_expired(make_token(["exp"]))
    assert token_expired(make_token({"exp": 10**400}))


def test_is_authenticated():
    storage = MemoryStorage()
    session = SessionState(storage)
    assert not session.is_authenticated()

    session.set_credentials(make_token({"exp": time.time() + 60}), "user_42", "Ada")
    assert session.is_authenticated()
    assert session.get_user_id() == "user_42"
    assert session.user_name == "Ada"

    storage.set(TOKEN_KEY, make_token({"exp": time.time() - 60}))
    assert not session.is_authenticated()


def test_logout_clears_everything_and_is_idempotent():
    storage = MemoryStorage()
    session = SessionState(storage)
    session.set_credentials(make_token({"exp": time.time() + 60}), "user_42", "Ada")
    session.switch_assistant("lina")

    session.logout()
    session.logout()

    assert storage.data == {}
    assert session.token is None
    assert session.get_current_assistant() == "nona"
    assert session.get_user_id() != "user_42"


def test_json_file_storage_round_trip(tmp_path):
    path = tmp_path / "session" / "mw.json"
    storage = JsonFileStorage(path)
    assert storage.get(TOKEN_KEY) is None

    storage.set(TOKEN_KEY, "abc")
    storage.set(ASSISTANT_KEY, "dundee")
    storage.remove(ASSISTANT_KEY)
    storage.remove("missing")

    reopened = JsonFileStorage(path)
    assert reopened.get(TOKEN_KEY) == "abc"
    assert reopened.get(ASSISTANT_KEY) is None


def test_json_file_storage_ignores_corrupt_file(tmp_path):
    path = tmp_path / "mw.json"
    path.write_text("{not json", encoding="utf-8")
    storage = JsonFileStorage(path)

    assert storage.get(TOKEN_KEY) is None
    storage.set(TOKEN_KEY, "abc")
    assert json.loads(path.read_text(encoding="utf-8")) == {TOKEN_KEY: "abc"}


def test_huge_exp_claim_is_not_authenticated():
    session = SessionState(MemoryStorage({TOKEN_KEY: make_token({"exp": 10**400})}))
    assert session.is_token_expired()
    assert not session.is_authenticated()


def test_json_file_storage_ignores_non_utf8_file(tmp_path):
    path = tmp_path / "mw.json"
    path.write_bytes(b"\xff\xfe\x00garbage")
    session = SessionState(JsonFileStorage(path))

    assert session.token is None
    session.switch_assistant("chiara")
    assert session.get_current_assistant() == "chiara"
    session.logout()
    session.logout()
    assert json.loads(path.read_text(encoding="utf-8")) == {}
