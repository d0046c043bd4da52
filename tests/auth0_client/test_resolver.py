import pytest

import auth0_client as m

AUTHORITY = "https://tenant.example.com"


def test_cached_hit_makes_no_network_call(jwks_server, http_client, jwks_doc):
    known = m.KeySet.from_dict(jwks_doc("abc"))

    record, jwks = m.resolve_key("abc", known, AUTHORITY, http_client=http_client)

    assert record is known.find("abc")
    assert jwks is known
    assert jwks_server.calls == 0


def test_miss_refreshes_once_and_returns_fresh_set(jwks_server, http_client, jwks_doc):
    known = m.KeySet.from_dict(jwks_doc("old"))
    jwks_server.serve(jwks_doc("old", "new"))

    record, jwks = m.resolve_key("new", known, AUTHORITY, http_client=http_client)

    assert record.kid == "new"
    assert jwks is not known
    assert jwks.kids == ("old", "new")
    assert jwks_server.calls == 1
    assert str(jwks_server.requests[0].url) == f"{AUTHORITY}/.well-known/jwks.json"


def test_miss_after_refresh_is_missing_key_id(jwks_server, http_client, jwks_doc):
    known = m.KeySet.from_dict(jwks_doc("old"))
    jwks_server.serve(jwks_doc("xyz"))

    with pytest.raises(m.MissingKeyId) as exc_info:
        m.resolve_key("abc", known, AUTHORITY, http_client=http_client)

    assert exc_info.value.kid == "abc"
    assert jwks_server.calls == 1


def test_no_known_set_fetches_first(jwks_server, http_client, jwks_doc):
    jwks_server.serve(jwks_doc("abc"))

    record, jwks = m.resolve_key("abc", None, AUTHORITY, http_client=http_client)

    assert record.kid == "abc"
    assert jwks.kids == ("abc",)
    assert jwks_server.calls == 1


def test_no_known_set_and_unknown_kid_fetches_twice(jwks_server, http_client, jwks_doc):
    jwks_server.serve(jwks_doc("xyz"))

    with pytest.raises(m.MissingKeyId):
        m.resolve_key("abc", None, AUTHORITY, http_client=http_client)

    assert jwks_server.calls == 2


def test_fetch_then_resolve_returns_identical_record(jwks_server, http_client, jwks_doc):
    jwks_server.serve(jwks_doc("abc", "def"))
    fetched = m.fetch_jwks(f"{AUTHORITY}/.well-known/jwks.json", http_client=http_client)

    record, jwks = m.resolve_key("def", fetched, AUTHORITY, http_client=http_client)

    assert record is fetched.find("def")
    assert jwks is fetched
    assert jwks_server.calls == 1


def test_fetch_jwks_if_needed_passes_known_set_through(jwks_server, http_client, jwks_doc):
    known = m.KeySet.from_dict(jwks_doc("abc"))

    assert m.fetch_jwks_if_needed(known, AUTHORITY, http_client=http_client) is known
    assert jwks_server.calls == 0


def test_transport_failure_during_refresh_propagates(jwks_server, http_client, jwks_doc):
    known = m.KeySet.from_dict(jwks_doc("old"))
    jwks_server.serve({})
    jwks_server.status_code = 503

    with pytest.raises(m.TransportError):
        m.resolve_key("new", known, AUTHORITY, http_client=http_client)
