import pytest


def _door(seeded, **overrides):
    configuration = {
        str(seeded["width"]): 900,
        str(seeded["height"]): 2100,
        str(seeded["material"]): "Wood",
        str(seeded["glazed"]): True,
        str(seeded["model"]): "Classic",
    }
    configuration.update(overrides)
    return configuration


def _position(seeded, configuration=None, **fields):
    position = {
        "category_id": seeded["category"],
        "supplier_category_id": seeded["supplier_category"],
        "configuration": configuration if configuration is not None else _door(seeded),
        "unit_price": 150,
        "quantity": 2,
        "discount_percent": 10,
        "vat_percent": 22,
    }
    position.update(fields)
    return position


def _proposal(seeded, groups=None, **fields):
    payload = {
        "client_name": "ACME Srl",
        "manager": "Giulia",
        "locale": "en",
        "groups": groups if groups is not None else [
            {"name": "Ground floor", "positions": [_position(seeded, notes="urgent")]},
        ],
    }
    payload.update(fields)
    return payload


def _create(client, seeded, **kwargs):
    response = client.post("/proposals", json=_proposal(seeded, **kwargs))
    assert response.status_code == 201, response.text
    return response.json()


def test_create_proposal(client, seeded):
    proposal = _create(client, seeded)

    assert proposal["number"] == "PROP-001"
    assert proposal["status"] == "draft"
    position = proposal["groups"][0]["positions"][0]
    assert position["description"] == "900x2100 | Wood | Classic | Glazed: Yes | Note: urgent"
    assert position["line_subtotal"] == pytest.approx(300)
    assert position["vat_amount"] == pytest.approx(59.4)
    assert position["total"] == pytest.approx(329.4)
    assert proposal["groups"][0]["total"] == pytest.approx(329.4)
    assert proposal["total"] == pytest.approx(329.4)


def test_numbers_are_sequential(client, seeded):
    assert _create(client, seeded)["number"] == "PROP-001"
    assert _create(client, seeded)["number"] == "PROP-002"


def test_explicit_description_and_default_vat(client, seeded):
    groups = [{"name": "Doors", "positions": [
        _position(seeded, description="Door as drawn", vat_percent=None),
    ]}]
    position = _create(client, seeded, groups=groups)["groups"][0]["positions"][0]

    assert position["description"] == "Door as drawn"
    assert position["vat_percent"] == 22.0


def test_group_vat_on_create(client, seeded):
    groups = [
        {"name": "Doors", "vat_percent": 10, "positions": [_position(seeded), _position(seeded, vat_percent=4)]},
        {"name": "Frames", "positions": [_position(seeded)]},
    ]
    proposal = _create(client, seeded, groups=groups)

    assert [p["vat_percent"] for p in proposal["groups"][0]["positions"]] == [10, 10]
    assert [p["vat_percent"] for p in proposal["groups"][1]["positions"]] == [22]
    assert proposal["vat_amount"] == pytest.approx(27 + 27 + 59.4)


def test_proposal_without_positions_is_refused(client, seeded):
    response = client.post("/proposals", json=_proposal(seeded, groups=[{"name": "Empty", "positions": []}]))
    assert response.status_code == 400
    assert client.post("/proposals", json=_proposal(seeded, groups=[])).status_code == 400


def test_invalid_positions_are_all_reported(client, seeded):
    bad_width = _door(seeded, **{str(seeded["width"]): 50})
    no_model = _door(seeded)
    del no_model[str(seeded["model"])]
    groups = [
        {"name": "A", "positions": [_position(seeded), _position(seeded, bad_width)]},
        {"name": "B", "positions": [_position(seeded, no_model)]},
    ]
    response = client.post("/proposals", json=_proposal(seeded, groups=groups))

    assert response.status_code == 422
    detail = response.json()["detail"]
    assert [(d["group"], d["position"]) for d in detail] == [(0, 1), (1, 0)]
    assert detail[0]["errors"] == {str(seeded["width"]): '"Width" cannot be less than 400mm'}
    assert list(detail[1]["errors"]) == [str(seeded["model"])]
    assert client.get("/proposals").json()["total"] == 0


def test_empty_configuration_is_rejected(client, seeded):
    groups = [{"name": "A", "positions": [_position(seeded, {})]}]
    detail = client.post("/proposals", json=_proposal(seeded, groups=groups)).json()["detail"]
    assert "_configuration" in detail[0]["errors"]


def test_supplier_category_must_match(client, seeded):
    other = client.post("/categories", json={"name": "Windows"}).json()
    groups = [{"name": "A", "positions": [_position(seeded, category_id=other["id"])]}]
    assert client.post("/proposals", json=_proposal(seeded, groups=groups)).status_code == 400

    groups = [{"name": "A", "positions": [_position(seeded, supplier_category_id=9999)]}]
    assert client.post("/proposals", json=_proposal(seeded, groups=groups)).status_code == 400


def test_request_validation(client, seeded):
    groups = [{"name": "A", "positions": [_position(seeded, discount_percent=120)]}]
    assert client.post("/proposals", json=_proposal(seeded, groups=groups)).status_code == 422
    groups = [{"name": "A", "positions": [_position(seeded, unit_price=-1)]}]
    assert client.post("/proposals", json=_proposal(seeded, groups=groups)).status_code == 422


def test_list_get_update_delete(client, seeded):
    first = _create(client, seeded)
    _create(client, seeded, client_name="Beta Spa")

    page = client.get("/proposals").json()
    assert page["total"] == 2
    assert [item["number"] for item in page["items"]] == ["PROP-002", "PROP-001"]
    assert page["items"][1]["total"] == pytest.approx(329.4)
    assert client.get("/proposals", params={"search": "beta"}).json()["total"] == 1

    updated = client.patch(f"/proposals/{first['id']}", json={"status": "sent", "notes": "Call back on Monday"})
    assert updated.status_code == 200
    assert updated.json()["status"] == "sent"
    assert client.get("/proposals", params={"status": "sent"}).json()["total"] == 1

    assert client.get(f"/proposals/{first['id']}").json()["notes"] == "Call back on Monday"
    assert client.delete(f"/proposals/{first['id']}").status_code == 200
    assert client.get(f"/proposals/{first['id']}").status_code == 404


def test_group_vat_endpoint(client, seeded):
    groups = [
        {"name": "A", "positions": [_position(seeded), _position(seeded, vat_percent=4)]},
        {"name": "B", "positions": [_position(seeded)]},
    ]
    proposal = _create(client, seeded, groups=groups)
    group_id = proposal["groups"][0]["id"]

    response = client.post(f"/proposals/{proposal['id']}/groups/{group_id}/vat", json={"vat_percent": 10})
    assert response.status_code == 200
    data = response.json()
    assert [p["vat_percent"] for p in data["groups"][0]["positions"]] == [10, 10]
    assert [p["vat_percent"] for p in data["groups"][1]["positions"]] == [22]
    assert data["vat_amount"] == pytest.approx(27 + 27 + 59.4)

    assert client.post(f"/proposals/{proposal['id']}/groups/9999/vat", json={"vat_percent": 10}).status_code == 404
    assert client.post(f"/proposals/{proposal['id']}/groups/{group_id}/vat", json={"vat_percent": 101}).status_code == 422


def test_position_reedit(client, seeded):
    proposal = _create(client, seeded)
    position = proposal["groups"][0]["positions"][0]
    url = f"/proposals/{proposal['id']}/positions/{position['id']}"

    # Price edits keep the description
    priced = client.patch(url, json={"unit_price": 200}).json()
    edited = priced["groups"][0]["positions"][0]
    assert edited["description"] == position["description"]
    assert edited["total"] == pytest.approx(200 * 2 * 0.9 * 1.22)

    # A new configuration is validated and described again
    reconfigured = client.patch(url, json={
        "configuration": _door(seeded, **{str(seeded["material"]): "MDF", str(seeded["glazed"]): False}),
        "locale": "en",
    }).json()
    assert reconfigured["groups"][0]["positions"][0]["description"] == \
        "900x2100 | MDF | Classic | Glazed: No | Note: urgent"

    invalid = client.patch(url, json={"configuration": _door(seeded, **{str(seeded["height"]): 5000})})
    assert invalid.status_code == 422
    assert str(seeded["height"]) in invalid.json()["detail"][0]["errors"]

    notes_only = client.patch(url, json={"notes": None, "locale": "en"}).json()
    assert notes_only["groups"][0]["positions"][0]["description"] == "900x2100 | MDF | Classic | Glazed: No"

    assert client.patch(f"/proposals/{proposal['id']}/positions/9999", json={"quantity": 1}).status_code == 404


def test_pdf_download(client, seeded):
    proposal = _create(client, seeded, notes="Delivery within 30 days")
    response = client.get(f"/proposals/{proposal['id']}/pdf")

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.content.startswith(b"%PDF")
    assert client.get("/proposals/9999/pdf").status_code == 404


def test_proposal_changes_are_audited(client, seeded):
    proposal = _create(client, seeded)
    client.patch(f"/proposals/{proposal['id']}", json={"status": "approved"})

    logs = client.get("/logs", params={"resource": "proposals", "resource_id": proposal["id"]}).json()
    assert {item["action"] for item in logs["items"]} == {"PROPOSAL_CREATE", "PROPOSAL_UPDATE"}

    no_model = _door(seeded)
    del no_model[str(seeded["model"])]
    client.post("/proposals", json=_proposal(seeded, groups=[{"name": "A", "positions": [_position(seeded, no_model)]}]))
    failed = client.get("/logs", params={"status": "FAIL"}).json()
    assert failed["total"] == 1
    assert failed["items"][0]["meta"]["invalid_positions"] == 1
