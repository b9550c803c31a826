from __future__ import annotations

from tests.factories import register_static


def test_install_provider_assigns_currencies(client):
    register_static("alpha", ["USD", "EUR", "GBP"])

    response = client.post("/providers/alpha/install")

    assert response.status_code == 201
    payload = response.get_json()
    assert payload["module"]["name"] == "alpha"
    assert payload["module"]["supported_currencies"] == ["EUR", "GBP", "USD"]
    assert payload["assignments"]["EUR"] == "alpha"
    assert payload["assignments"]["JPY"] is None


def test_install_unknown_provider_returns_404(client):
    response = client.post("/providers/ghost/install")
    assert response.status_code == 404
    assert response.get_json()["module"] == "ghost"


def test_list_and_get_providers(client):
    register_static("alpha", ["USD", "EUR"])
    register_static("beta", ["USD", "GBP"])
    client.post("/providers/alpha/install")
    client.post("/providers/beta/install")

    listing = client.get("/providers").get_json()
    item = client.get("/providers/beta")

    assert [module["name"] for module in listing] == ["alpha", "beta"]
    assert item.status_code == 200
    assert item.get_json()["supported_currencies"] == ["GBP", "USD"]
    assert client.get("/providers/ghost").status_code == 404


def test_lookup_providers(client):
    register_static("alpha", ["USD", "EUR"])
    register_static("beta", ["USD", "EUR"])
    client.post("/providers/alpha/install")
    client.post("/providers/beta/install")

    both = client.get("/providers/lookup?to=eur&from=usd").get_json()
    one = client.get("/providers/lookup?to=EUR&just_one=true").get_json()
    none = client.get("/providers/lookup?to=JPY&just_one=true").get_json()

    assert [module["name"] for module in both] == ["alpha", "beta"]
    assert [module["name"] for module in one] == ["alpha"]
    assert none == []


def test_lookup_rejects_malformed_code(client):
    response = client.get("/providers/lookup?to=EURO")
    assert response.status_code == 422
    assert response.get_json()["field"] == "to"


def test_uninstall_then_scan_reassigns(client):
    register_static("gamma", ["USD", "EUR"])
    register_static("delta", ["USD", "EUR"])
    client.post("/providers/gamma/install")
    client.post("/providers/delta/install")

    removed = client.delete("/providers/gamma")
    scanned = client.post("/providers/scan", json={})

    assert removed.status_code == 200
    assert removed.get_json()["active"] is False
    assert scanned.status_code == 200
    payload = scanned.get_json()
    assert payload["base"] == "USD"
    assert payload["assignments"]["EUR"] == "delta"


def test_scan_with_unknown_base_is_rejected(client):
    response = client.post("/providers/scan", json={"base": "XYZ"})
    assert response.status_code == 422
    assert response.get_json()["field"] == "base"


def test_uninstall_unknown_module_returns_404(client):
    assert client.delete("/providers/ghost").status_code == 404


def test_currency_provider_table(client):
    register_static("alpha", ["USD", "EUR"])
    client.post("/providers/alpha/install")

    full = client.get("/currencies/providers").get_json()
    registered = client.get("/currencies/providers?registered_only=true").get_json()

    assert full["base"] == "USD"
    assert full["assignments"] == {
        "USD": "alpha",
        "EUR": "alpha",
        "GBP": None,
        "JPY": None,
        "CHF": None,
    }
    assert registered["assignments"] == {"USD": "alpha", "EUR": "alpha"}


def test_service_options_and_set_provider(client, currency_ids):
    register_static("alpha", ["USD", "EUR"])
    register_static("beta", ["USD", "EUR"])
    client.post("/providers/alpha/install")
    beta = client.post("/providers/beta/install").get_json()["module"]

    options = client.get(f"/currencies/{currency_ids['EUR']}/services?selected=alpha").get_json()
    assert options["applicable"] is True
    assert [(item["name"], item["selected"]) for item in options["services"]] == [
        ("alpha", True),
        ("beta", False),
    ]

    response = client.put(
        f"/currencies/{currency_ids['EUR']}/provider", json={"module_id": beta["id"]}
    )
    assert response.status_code == 200
    assert response.get_json() == {
        "currency_id": currency_ids["EUR"],
        "code": "EUR",
        "module_id": beta["id"],
        "provider": "beta",
    }


def test_service_options_not_applicable_for_default_currency(client, currency_ids):
    payload = client.get(f"/currencies/{currency_ids['USD']}/services").get_json()
    assert payload == {"currency_id": currency_ids["USD"], "applicable": False, "services": []}


def test_set_provider_errors(client, currency_ids):
    unknown_module = client.put(f"/currencies/{currency_ids['EUR']}/provider", json={"module_id": 999})
    unknown_currency = client.put("/currencies/99999/provider", json={"module_id": 1})
    bad_body = client.put(f"/currencies/{currency_ids['EUR']}/provider", json={"module_id": "x"})

    assert unknown_module.status_code == 404
    assert unknown_currency.status_code == 422
    assert bad_body.status_code == 422
