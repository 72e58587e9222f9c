import pytest


def _nonce(client, headers, kind="customer"):
    r = client.get(f"/nonce/{kind}", headers=headers)
    assert r.status_code == 200, r.text
    return r.json()["nonce"]


def test_nonce_endpoint(client, editor_headers):
    r = client.get("/nonce/product", headers=editor_headers)
    assert r.status_code == 200
    body = r.json()
    assert body["action"] == "acf_stripe_product_search"
    assert len(body["nonce"]) == 10
    assert body["connected"] is False
    assert body["strings"]["error"] == "Unable to load products"
    assert body["strings"]["noResults"] == "No products found"
    assert "Settings → Stripe Field" in body["strings"]["notConnected"]


def test_nonce_requires_auth(client):
    assert client.get("/nonce/customer").status_code == 401


def test_unknown_kind_rejected(client, editor_headers):
    assert client.get("/nonce/invoice", headers=editor_headers).status_code == 422


def test_search_requires_auth(client, fake_stripe, connected):
    r = client.get("/search/customer", params={"search": "ann"})
    assert r.status_code == 401
    assert r.json()["detail"]["code"] == "unauthorized"
    assert fake_stripe.calls == []


def test_search_rejects_bad_nonce(client, editor_headers, fake_stripe, connected):
    r = client.get("/search/customer", params={"search": "ann", "nonce": "0000000000"}, headers=editor_headers)
    assert r.status_code == 403
    assert r.json()["detail"] == {"code": "unauthorized", "message": "Security check failed."}
    assert fake_stripe.calls == []


def test_search_nonce_is_per_kind(client, editor_headers, connected):
    nonce = _nonce(client, editor_headers, "product")
    r = client.get("/search/customer", params={"nonce": nonce}, headers=editor_headers)
    assert r.status_code == 403


def test_search_not_configured(client, editor_headers, fake_stripe):
    nonce = _nonce(client, editor_headers)
    r = client.get("/search/customer", params={"search": "ann", "nonce": nonce}, headers=editor_headers)
    assert r.status_code == 400
    assert r.json()["detail"] == {"code": "not_configured", "message": "Stripe secret key is missing."}
    assert fake_stripe.calls == []


def test_search_success(client, editor_headers, fake_stripe, customer_payload, connected):
    fake_stripe.add("customers/search", {"data": [customer_payload], "has_more": True})
    nonce = _nonce(client, editor_headers)
    r = client.get("/search/customer", params={"search": "ann"}, headers={**editor_headers, "X-Field-Nonce": nonce})
    assert r.status_code == 200, r.text
    assert r.json() == {
        "items": [{"id": "cus_123", "text": "Ann Lee (ann@x.com)", "name": "Ann Lee", "email": "ann@x.com"}],
        "more": True,
    }


def test_search_by_id(client, editor_headers, fake_stripe, customer_payload, connected):
    fake_stripe.add("customers/cus_123", customer_payload)
    nonce = _nonce(client, editor_headers)
    r = client.get("/search/customer", params={"search": "cus_123", "nonce": nonce}, headers=editor_headers)
    assert r.status_code == 200
    assert [i["id"] for i in r.json()["items"]] == ["cus_123"]
    assert r.json()["more"] is False
    assert fake_stripe.paths() == ["customers/cus_123"]


@pytest.mark.parametrize("search,status,code", [
    ("cus_missing", 404, "not_found"),
    ("ann", 500, "provider_error"),
])
def test_search_failures(client, editor_headers, fake_stripe, connected, search, status, code):
    fake_stripe.add("customers/search", {"error": {"message": "Something went wrong"}}, status=500)
    nonce = _nonce(client, editor_headers)
    r = client.get("/search/customer", params={"search": search, "nonce": nonce}, headers=editor_headers)
    assert r.status_code == status
    assert r.json()["detail"]["code"] == code


def test_search_builds_a_client_per_request(client, editor_headers, fake_stripe, connected):
    fake_stripe.add("products", {"data": [], "has_more": False})
    nonce = _nonce(client, editor_headers, "product")
    for _ in range(2):
        r = client.get("/search/product", params={"nonce": nonce}, headers=editor_headers)
        assert r.json() == {"items": [], "more": False}
    assert fake_stripe.clients_built == 2
