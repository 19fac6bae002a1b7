"""
Integration tests for customer endpoints.
"""
import pytest


def _create(client, **fields) -> int:
    response = client.post("/api/customers", json=fields)
    assert response.status_code == 201
    return response.json()["id"]


@pytest.mark.integration
def test_create_and_get(client):
    customer_id = _create(client, name="Jane Smith", email="Jane@Example.com", tags=["repeat"])

    customer = client.get(f"/api/customers/{customer_id}").json()

    assert customer["name"] == "Jane Smith"
    assert customer["email"] == "jane@example.com"
    assert customer["tags"] == ["repeat"]


@pytest.mark.integration
def test_create_requires_name(client):
    response = client.post("/api/customers", json={"email": "jane@example.com"})

    assert response.status_code == 400


@pytest.mark.integration
def test_search_and_list(client):
    _create(client, name="Zoe Smith")
    _create(client, name="Adam Jones", email="adam@example.com")

    assert [c["name"] for c in client.get("/api/customers").json()] == ["Adam Jones", "Zoe Smith"]
    assert [c["name"] for c in client.get("/api/customers", params={"q": "smith"}).json()] == ["Zoe Smith"]


@pytest.mark.integration
def test_get_by_email(client):
    customer_id = _create(client, name="Jane", email="jane@example.com")

    response = client.get("/api/customers/by-email", params={"email": "JANE@example.com"})
    assert response.status_code == 200
    assert response.json()["id"] == customer_id

    missing = client.get("/api/customers/by-email", params={"email": "nobody@example.com"})
    assert missing.status_code == 404
    assert missing.json()["detail"] == "Customer not found"


@pytest.mark.integration
def test_patch_customer(client):
    customer_id = _create(client, name="Jane", notes="Has a dog")

    response = client.patch(
        f"/api/customers/{customer_id}",
        json={"phone": "07700 900123", "addresses": {"line1": "1 High Street"}},
    )

    assert response.status_code == 200
    customer = response.json()
    assert customer["phone"] == "07700 900123"
    assert customer["addresses"] == {"line1": "1 High Street"}
    assert customer["notes"] == "Has a dog"


@pytest.mark.integration
def test_patch_can_clear_field(client):
    customer_id = _create(client, name="Jane", notes="Has a dog")

    response = client.patch(f"/api/customers/{customer_id}", json={"notes": None})

    assert response.json()["notes"] is None


@pytest.mark.integration
def test_add_tag(client):
    customer_id = _create(client, name="Jane")

    client.post(f"/api/customers/{customer_id}/tags", json={"tag": "vip"})
    response = client.post(f"/api/customers/{customer_id}/tags", json={"tag": "vip"})

    assert response.status_code == 200
    assert response.json()["tags"] == ["vip"]


@pytest.mark.integration
def test_missing_customer_is_404(client):
    assert client.get("/api/customers/9999").status_code == 404
    assert client.patch("/api/customers/9999", json={"name": "X"}).status_code == 404
    assert client.post("/api/customers/9999/tags", json={"tag": "vip"}).status_code == 404
    assert client.delete("/api/customers/9999").status_code == 404


@pytest.mark.integration
def test_delete_customer(client):
    customer_id = _create(client, name="Jane")

    assert client.delete(f"/api/customers/{customer_id}").status_code == 204
    assert client.get(f"/api/customers/{customer_id}").status_code == 404


@pytest.mark.integration
def test_search_wildcards_are_literal(client):
    client.post("/api/customers", json={"name": "Jane Smith"})
    client.post("/api/customers", json={"name": "100% Plumbing Ltd"})

    assert [c["name"] for c in client.get("/api/customers", params={"q": "%"}).json()] == [
        "100% Plumbing Ltd"
    ]
    assert client.get("/api/customers", params={"q": "_"}).json() == []
