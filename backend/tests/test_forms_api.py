import json

import pytest

API = "/api/v1"


@pytest.fixture
def create_form(client, sample_cards):
    def _create(name="Client Intake", cards=None):
        response = client.post(f"{API}/forms", json={
            "name": name,
            "cards": cards if cards is not None else sample_cards,
            "created_by": "tester",
        })
        assert response.status_code == 201, response.text
        return response.json()
    return _create


@pytest.fixture
def short_cards():
    return [{
        "id": "card-short",
        "title": "Short",
        "order": 0,
        "fields": [
            {
                "id": "s1", "tableName": "personal_details", "columnName": "first_name",
                "displayName": "First Name", "fieldType": "TEXT", "order": 0, "isRequired": True,
            },
            {
                "id": "s2", "tableName": "personal_details", "columnName": "gender",
                "displayName": "Gender", "fieldType": "TEXT", "order": 1,
            },
        ],
    }]


# ---------- Template store ----------

def test_create_form(create_form):
    form = create_form()
    assert form["id"].startswith("form_")
    assert form["name"] == "Client Intake"
    assert form["created_by"] == "tester"
    assert form["field_count"] == 4

    cards = json.loads(form["cards"])
    assert cards[1]["cardType"] == "document"
    assert cards[0]["fields"][0]["tableName"] == "personal_details"


def test_duplicate_name_conflicts(client, create_form, sample_cards):
    create_form()
    response = client.post(f"{API}/forms", json={"name": "Client Intake", "cards": sample_cards, "created_by": "x"})
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "CONFLICT_ERROR"


def test_blank_name_is_rejected(client, sample_cards):
    response = client.post(f"{API}/forms", json={"name": "  ", "cards": sample_cards, "created_by": "x"})
    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Name, cards, and created_by are required"


def test_list_and_get(client, create_form):
    first = create_form("First")
    create_form("Second")

    forms = client.get(f"{API}/forms").json()
    assert {f["name"] for f in forms} == {"First", "Second"}
    assert all(f["field_count"] == 4 for f in forms)

    fetched = client.get(f"{API}/forms/{first['id']}").json()
    assert fetched["name"] == "First"
    assert fetched["cards"] == first["cards"]


def test_missing_form(client):
    response = client.get(f"{API}/forms/form_0_missing")
    assert response.status_code == 404
    assert response.json()["error"] == {
        "code": "NOT_FOUND_ERROR",
        "message": "Form 'form_0_missing' not found",
        "details": {"resource": "Form", "identifier": "form_0_missing"},
    }


def test_update_form(client, create_form, short_cards):
    form = create_form()

    response = client.put(f"{API}/forms/{form['id']}", json={"name": "Renamed", "cards": short_cards})
    assert response.status_code == 200
    updated = response.json()
    assert updated["name"] == "Renamed"
    assert updated["field_count"] == 2
    assert updated["created_at"] == form["created_at"]


def test_update_without_changes_is_rejected(client, create_form):
    form = create_form()
    response = client.put(f"{API}/forms/{form['id']}", json={"name": form["name"]})
    assert response.status_code == 400
    assert response.json()["error"]["message"] == "No fields to update"


def test_update_to_taken_name_conflicts(client, create_form):
    create_form("Taken")
    form = create_form("Other")
    response = client.put(f"{API}/forms/{form['id']}", json={"name": "Taken"})
    assert response.status_code == 409


def test_duplicate_form(client, create_form):
    form = create_form()
    response = client.post(f"{API}/forms/{form['id']}/duplicate", json={"name": "Copy", "created_by": "other"})
    assert response.status_code == 201
    copy = response.json()
    assert copy["id"] != form["id"]
    assert copy["created_by"] == "other"
    assert json.loads(copy["cards"]) == json.loads(form["cards"])


def test_delete_form(client, create_form):
    form = create_form()
    assert client.delete(f"{API}/forms/{form['id']}").json() == {"ok": True, "id": form["id"]}
    assert client.get(f"{API}/forms/{form['id']}").status_code == 404
    assert client.delete(f"{API}/forms/{form['id']}").status_code == 404


def test_clear_forms(client, create_form):
    create_form("A")
    create_form("B")
    assert client.delete(f"{API}/forms").json() == {"ok": True, "deleted": 2}
    assert client.get(f"{API}/forms").json() == []


# ---------- Rendering for a client ----------

def _fields(rendered):
    return {f["columnName"]: f for card in rendered["cards"] for f in card["fields"]}


def test_form_data_for_client(client, create_form):
    form = create_form()
    rendered = client.get(f"{API}/forms/{form['id']}/client/1").json()

    assert rendered["formId"] == form["id"]
    assert rendered["clientId"] == 1
    fields = _fields(rendered)
    assert fields["first_name"]["value"] == "Asha"
    assert fields["first_name"]["isAvailable"] is True
    assert fields["first_name"]["enableCopy"] is True
    assert fields["passport_photo"]["value"] == "photo_1.png"
    # documents has no document_type column
    assert fields["document_type"]["value"] == "Error loading document data"
    assert fields["document_type"]["isAvailable"] is False


def test_form_data_with_missing_values(client, create_form):
    form = create_form()
    fields = _fields(client.get(f"{API}/forms/{form['id']}/client/2").json())

    assert fields["first_name"]["value"] == "Vikram"
    assert fields["email"]["value"] is None
    assert fields["email"]["isAvailable"] is False
    assert fields["email"]["enableCopy"] is False
    assert fields["passport_photo"]["value"] == "Not available"


# ---------- Compatibility ----------

def test_form_compatible_with_client(client, create_form):
    form = create_form()
    response = client.post(f"{API}/forms/{form['id']}/compatibility", json={"clientId": 1})
    assert response.status_code == 200
    assert response.json() == {"isCompatible": True, "missingFields": []}


def test_form_missing_required_client_data(client, create_form):
    form = create_form()
    body = client.post(f"{API}/forms/{form['id']}/compatibility", json={"clientId": 2}).json()
    assert body == {"isCompatible": False, "missingFields": ["Email"]}


def test_explicit_client_data_wins(client, create_form):
    form = create_form()
    body = client.post(f"{API}/forms/{form['id']}/compatibility", json={
        "clientId": 2,
        "clientData": {"personal_details.first_name": "V", "personal_details.email": "v@example.com"},
    }).json()
    assert body["isCompatible"] is True


def test_compatibility_needs_client(client, create_form):
    form = create_form()
    response = client.post(f"{API}/forms/{form['id']}/compatibility", json={})
    assert response.status_code == 400


def test_unknown_client(client, create_form):
    form = create_form()
    response = client.post(f"{API}/forms/{form['id']}/compatibility", json={"clientId": 999})
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "FOREIGN_KEY_ERROR"


def test_compare_forms(client, create_form, short_cards):
    previous = create_form("Full")
    new = create_form("Short", short_cards)

    response = client.post(f"{API}/forms/compare", json={
        "previousFormId": previous["id"],
        "newFormId": new["id"],
        "clientId": 1,
    })
    assert response.status_code == 200
    report = response.json()

    assert report["isCompatible"] is False
    assert report["preservedFields"] == ["personal_details.first_name", "documents.document_type"]
    assert report["incompatibleFields"] == []
    assert report["missingFields"] == ["personal_details.email", "documents.passport_photo"]
    assert "Data in personal_details.email will not be visible in the new form" in report["warnings"]
    assert "Data in documents.passport_photo will not be visible in the new form" in report["warnings"]
    assert not any("document_type" in w for w in report["warnings"])
    # gender is new but client 1 already has a value
    assert not any("personal_details.gender" in w for w in report["warnings"])


def test_compare_with_missing_form(client, create_form):
    form = create_form()
    response = client.post(f"{API}/forms/compare", json={
        "previousFormId": form["id"],
        "newFormId": "form_0_missing",
        "clientData": {},
    })
    assert response.status_code == 404
