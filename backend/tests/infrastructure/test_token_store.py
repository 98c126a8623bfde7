"""Token Store — verifies persistence round trip and one notification per transition."""

from crm_client.core.domain_types import AuthToken, TOKEN_STORAGE_KEY
from crm_client.infrastructure.storage import InMemoryStorage
from crm_client.infrastructure.token_store import TokenStore


def test_set_then_get_returns_token(token_store):
    token_store.set("abc")
    assert token_store.get() == AuthToken("abc")
    assert token_store.has_token()


def test_clear_then_get_returns_none(token_store, storage):
    token_store.set("abc")
    token_store.clear()
    assert token_store.get() is None
    assert storage.get(TOKEN_STORAGE_KEY) is None


def test_one_notification_per_transition(token_store):
    events = []
    token_store.subscribe(events.append)

    token_store.set("abc")
    token_store.set("abc")      # same token: no transition
    token_store.clear()
    token_store.clear()         # already empty: no transition

    assert events == [True, False]


def test_replacing_token_notifies(token_store):
    events = []
    token_store.subscribe(events.append)
    token_store.set("one")
    token_store.set("two")
    assert events == [True, True]
    assert token_store.get().value == "two"


def test_token_survives_restart(storage):
    TokenStore(storage).set("persisted")
    assert TokenStore(storage).get() == AuthToken("persisted")


def test_unsubscribe_stops_notifications(token_store):
    events = []
    unsubscribe = token_store.subscribe(events.append)
    unsubscribe()
    token_store.set("abc")
    assert events == []


def test_reads_do_not_mutate():
    storage = InMemoryStorage({TOKEN_STORAGE_KEY: "abc"})
    store = TokenStore(storage)
    store.get()
    store.has_token()
    assert storage.get(TOKEN_STORAGE_KEY) == "abc"
