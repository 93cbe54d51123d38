import json


def test_shopping_list_crud(client):
    assert client.get("/api/shopping-list").json() == {"items": []}

    resp = client.post("/api/shopping-list/items", json={"name": "Bread", "quantity": 1})
    assert resp.status_code == 201
    bread = resp.json()
    assert bread["source"] == "manual"
    assert bread["checked"] is False
    milk = client.post("/api/shopping-list/items", json={"name": "Milk", "quantity": 2, "unit": "l"}).json()

    resp = client.patch(f"/api/shopping-list/items/{bread['id']}", json={"checked": True})
    assert resp.status_code == 200
    assert resp.json()["checked"] is True
    assert resp.json()["name"] == "Bread"

    resp = client.post("/api/shopping-list/clear-checked")
    assert [i["name"] for i in resp.json()["items"]] == ["Milk"]

    assert client.delete(f"/api/shopping-list/items/{milk['id']}").status_code == 200
    assert client.get("/api/shopping-list").json()["items"] == []


def test_shopping_list_unknown_item(client):
    assert client.patch("/api/shopping-list/items/nope", json={"checked": True}).status_code == 404
    assert client.delete("/api/shopping-list/items/nope").status_code == 404


def test_shopping_list_rejects_blank_name(client):
    assert client.post("/api/shopping-list/items", json={"name": ""}).status_code == 422


def test_ui_latency_metric(client, data_dir):
    resp = client.post("/api/v1/metrics/ui", json={"name": "cook_view_render", "duration_ms": 12.5})
    assert resp.json() == {"ok": True}
    assert "cook_view_render" in (data_dir / "latency_log.jsonl").read_text(encoding="utf-8")


def test_shopping_list_update_is_logged(client, data_dir):
    bread = client.post("/api/shopping-list/items", json={"name": "Bread"}).json()
    client.patch(f"/api/shopping-list/items/{bread['id']}", json={"checked": True})

    lines = [json.loads(line) for line in (data_dir / "kitchen_log.jsonl").read_text(encoding="utf-8").splitlines()]
    assert [e["payload"]["mode"] for e in lines] == ["add", "update"]
    assert lines[1]["type"] == "shopping"
    assert lines[1]["payload"] == {"mode": "update", "id": bread["id"], "changes": {"checked": True}}
