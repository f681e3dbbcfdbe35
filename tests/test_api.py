from __future__ import annotations

import pytest

pytest.importorskip("httpx")


BLUEPRINT = {
    "name": "Employment Contract",
    "description": "Standard agreement",
    "fields": [
        {"field_type": "text", "label": "Name"},
        {"field_type": "checkbox", "label": "Signed?"},
    ],
}


def _create_blueprint(client, payload=None):
    response = client.post("/api/blueprints", json=payload or BLUEPRINT)
    assert response.status_code == 201, response.text
    return response.json()


def _create_contract(client, blueprint_id, name="Jane Doe Employment", values=None):
    response = client.post(
        "/api/contracts",
        json={"name": name, "blueprint_id": blueprint_id, "initial_values": values or {}},
    )
    assert response.status_code == 201, response.text
    return response.json()


def test_health(client) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["database"] == "connected"


def test_blueprint_round_trip(client) -> None:
    created = _create_blueprint(client)

    fetched = client.get(f"/api/blueprints/{created['id']}").json()

    assert fetched["name"] == "Employment Contract"
    assert [(f["label"], f["field_type"], f["position_y"]) for f in fetched["fields"]] == [
        ("Name", "text", 0),
        ("Signed?", "checkbox", 60),
    ]
    assert fetched["created_at"].endswith("Z")
    assert [b["id"] for b in client.get("/api/blueprints").json()] == [created["id"]]


def test_blueprint_validation_errors(client) -> None:
    blank_name = client.post("/api/blueprints", json={"name": " ", "fields": []})
    blank_label = client.post("/api/blueprints", json={"name": "NDA", "fields": [{"label": ""}]})
    bad_type = client.post(
        "/api/blueprints", json={"name": "NDA", "fields": [{"label": "x", "field_type": "radio"}]}
    )

    assert blank_name.status_code == 400
    assert blank_name.json()["detail"] == "Blueprint name is required"
    assert blank_label.status_code == 400
    assert bad_type.status_code == 422
    assert client.get("/api/blueprints").json() == []


def test_blueprint_update_and_delete(client) -> None:
    created = _create_blueprint(client)

    updated = client.put(
        f"/api/blueprints/{created['id']}",
        json={"name": "Employment v2", "fields": [{"field_type": "date", "label": "Start"}]},
    )
    assert updated.status_code == 200
    assert [f["label"] for f in updated.json()["fields"]] == ["Start"]

    assert client.delete(f"/api/blueprints/{created['id']}").status_code == 204
    assert client.get(f"/api/blueprints/{created['id']}").status_code == 404
    assert client.delete(f"/api/blueprints/{created['id']}").status_code == 404


def test_contract_creation_defaults(client) -> None:
    blueprint = _create_blueprint(client)

    contract = _create_contract(client, blueprint["id"])

    ids = {f["label"]: f["id"] for f in contract["fields"]}
    assert contract["contract"]["status"] == "created"
    assert contract["blueprint_name"] == "Employment Contract"
    assert contract["values"] == {ids["Name"]: "", ids["Signed?"]: "false"}
    assert contract["is_editable"] is True
    assert contract["available_transitions"] == ["approved", "revoked"]


def test_contract_creation_requires_name_and_blueprint(client) -> None:
    blueprint = _create_blueprint(client)

    assert client.post("/api/contracts", json={"name": "", "blueprint_id": blueprint["id"]}).status_code == 400
    assert client.post("/api/contracts", json={"name": "Jane"}).status_code == 400


def test_status_workflow_over_http(client) -> None:
    blueprint = _create_blueprint(client)
    contract = _create_contract(client, blueprint["id"])
    contract_id = contract["contract"]["id"]
    name_id = contract["fields"][0]["id"]

    skipped = client.post(f"/api/contracts/{contract_id}/status", json={"status": "sent"})
    assert skipped.status_code == 409

    for target in ["approved", "sent", "signed", "locked"]:
        response = client.post(f"/api/contracts/{contract_id}/status", json={"status": target})
        assert response.status_code == 200, response.text
        assert response.json()["contract"]["status"] == target

    locked = client.get(f"/api/contracts/{contract_id}").json()
    assert locked["is_editable"] is False
    assert locked["available_transitions"] == []

    edit = client.put(f"/api/contracts/{contract_id}/fields", json={"values": {name_id: "Changed"}})
    assert edit.status_code == 409
    assert client.get(f"/api/contracts/{contract_id}").json()["values"][name_id] == ""


def test_field_value_edits(client) -> None:
    blueprint = _create_blueprint(client)
    contract = _create_contract(client, blueprint["id"])
    contract_id = contract["contract"]["id"]
    ids = {f["label"]: f["id"] for f in contract["fields"]}

    saved = client.put(
        f"/api/contracts/{contract_id}/fields",
        json={"values": {ids["Name"]: "Jane Doe", ids["Signed?"]: True}},
    )

    assert saved.status_code == 200
    assert saved.json()["values"] == {ids["Name"]: "Jane Doe", ids["Signed?"]: "true"}

    unknown = client.put(f"/api/contracts/{contract_id}/fields", json={"values": {"nope": "x"}})
    assert unknown.status_code == 400


def test_dashboard_filters_and_counts(client) -> None:
    blueprint = _create_blueprint(client)
    first = _create_contract(client, blueprint["id"], name="First")
    _create_contract(client, blueprint["id"], name="Second")
    client.post(f"/api/contracts/{first['contract']['id']}/status", json={"status": "revoked"})

    dashboard = client.get("/api/contracts/dashboard", params={"group": "active"}).json()

    assert [c["name"] for c in dashboard["contracts"]] == ["Second"]
    assert dashboard["counts"] == {"all": 2, "active": 1, "pending": 0, "signed": 0}
    assert dashboard["contracts"][0]["status_label"] == "Created"
    assert dashboard["contracts"][0]["blueprint_name"] == "Employment Contract"

    assert client.get("/api/contracts", params={"group": "bogus"}).status_code == 400


def test_deleted_blueprint_contracts(client) -> None:
    blueprint = _create_blueprint(client)
    contract = _create_contract(client, blueprint["id"])
    contract_id = contract["contract"]["id"]

    client.delete(f"/api/blueprints/{blueprint['id']}")

    assert client.get("/api/contracts").json() == []
    detail = client.get(f"/api/contracts/{contract_id}").json()
    assert detail["blueprint"] is None
    assert detail["blueprint_name"] == "Unknown blueprint"
    assert detail["contract"]["blueprint_id"] == blueprint["id"]


def test_purge_orphaned_values_endpoint(client) -> None:
    blueprint = _create_blueprint(client)
    _create_contract(client, blueprint["id"])
    client.put(f"/api/blueprints/{blueprint['id']}", json={"name": "Employment", "fields": []})

    response = client.post("/api/blueprints/maintenance/purge-orphaned-values")

    assert response.status_code == 200
    assert response.json() == {"success": True, "removed": 2}


def test_status_table_endpoint(client) -> None:
    body = client.get("/api/contracts/statuses").json()

    table = {s["status"]: s["next"] for s in body["statuses"]}
    assert table == {
        "created": ["approved", "revoked"],
        "approved": ["sent", "revoked"],
        "sent": ["signed", "revoked"],
        "signed": ["locked"],
        "locked": [],
        "revoked": [],
    }
    assert body["groups"]["active"] == ["created", "approved"]


def test_missing_contract_is_404(client) -> None:
    assert client.get("/api/contracts/missing").status_code == 404


def test_navigation_state(client) -> None:
    assert client.get("/api/navigation").json() == {
        "current_view": "dashboard",
        "selected_blueprint_id": None,
        "selected_contract_id": None,
    }

    viewed = client.post("/api/navigation", json={"view": "contract-view", "contract_id": "c-1"})
    assert viewed.json()["selected_contract_id"] == "c-1"

    missing = client.post("/api/navigation", json={"view": "blueprint-edit"})
    assert missing.status_code == 400

    back = client.post("/api/navigation", json={"view": "dashboard"})
    assert back.json() == {
        "current_view": "dashboard",
        "selected_blueprint_id": None,
        "selected_contract_id": None,
    }

    client.post("/api/navigation", json={"view": "blueprints"})
    assert client.post("/api/navigation/reset").json()["current_view"] == "dashboard"


def test_navigation_state_is_per_application(app) -> None:
    from fastapi.testclient import TestClient

    from contractflow.main import create_app

    TestClient(app).post("/api/navigation", json={"view": "blueprints"})

    other = create_app(init_database=False)
    assert TestClient(other).get("/api/navigation").json()["current_view"] == "dashboard"


def test_saving_loaded_values_after_blueprint_edit(client) -> None:
    blueprint = _create_blueprint(client)
    contract = _create_contract(client, blueprint["id"])
    contract_id = contract["contract"]["id"]
    old_ids = {f["label"]: f["id"] for f in contract["fields"]}
    client.put(
        f"/api/blueprints/{blueprint['id']}",
        json={"name": "Employment", "fields": [{"field_type": "text", "label": "Title"}]},
    )

    loaded = client.get(f"/api/contracts/{contract_id}").json()
    assert loaded["values"] == {}
    assert loaded["orphaned_values"] == {old_ids["Name"]: "", old_ids["Signed?"]: "false"}
    assert loaded["orphaned_value_count"] == 2

    values = dict(loaded["values"])
    values[loaded["fields"][0]["id"]] = "Engineer"
    saved = client.put(f"/api/contracts/{contract_id}/fields", json={"values": values})
    assert saved.status_code == 200, saved.text
    assert saved.json()["values"] == {loaded["fields"][0]["id"]: "Engineer"}

    # Sending the orphaned keys back as well is tolerated
    stale = {**saved.json()["values"], **loaded["orphaned_values"]}
    resaved = client.put(f"/api/contracts/{contract_id}/fields", json={"values": stale})
    assert resaved.status_code == 200, resaved.text
    assert resaved.json()["orphaned_values"] == loaded["orphaned_values"]


def test_boolean_for_text_field_is_rejected(client) -> None:
    blueprint = _create_blueprint(client)
    contract = _create_contract(client, blueprint["id"])
    name_id = next(f["id"] for f in contract["fields"] if f["label"] == "Name")

    response = client.put(
        f"/api/contracts/{contract['contract']['id']}/fields", json={"values": {name_id: True}}
    )

    assert response.status_code == 400
    assert client.get(f"/api/contracts/{contract['contract']['id']}").json()["values"][name_id] == ""


def test_fractional_positions_over_http(client) -> None:
    created = _create_blueprint(
        client,
        {"name": "Lease", "fields": [{"label": "Tenant", "position_x": -4.5, "position_y": 12.25}]},
    )

    field = created["fields"][0]
    assert (field["position_x"], field["position_y"]) == (-4.5, 12.25)
