import pytest
from fastapi.testclient import TestClient

from medslot.config import Settings
from medslot.main import create_app


@pytest.fixture(params=["memory", "sqlite"])
def client(request, tmp_path):
    settings = Settings(storage=request.param, db_path=str(tmp_path / "api.db"), log_level="WARNING")
    with TestClient(create_app(settings)) as c:
        yield c


def _doctor(client, start="09:00", end="10:00"):
    res = client.post(
        "/doctors",
        json={"name": "Dr. Ana Cardoso", "specialization": "Cardiology", "workingHours": {"start": start, "end": end}},
    )
    assert res.status_code == 201, res.text
    return res.json()


def _book(client, doctor_id, date, duration=30):
    return client.post(
        "/appointments",
        json={
            "doctorId": doctor_id,
            "date": date,
            "duration": duration,
            "appointmentType": "Consultation",
            "patientName": "Joao da Silva",
            "notes": "",
        },
    )


def test_create_and_list_doctors(client):
    doctor = _doctor(client)
    assert doctor["workingHours"] == {"start": "09:00", "end": "10:00"}
    listed = client.get("/doctors").json()
    assert [d["id"] for d in listed] == [doctor["id"]]
    assert client.get(f"/doctors/{doctor['id']}").json()["name"] == "Dr. Ana Cardoso"


def test_doctor_with_bad_hours_is_rejected(client):
    res = client.post("/doctors", json={"name": "Dr. X", "workingHours": {"start": "9am", "end": "10:00"}})
    assert res.status_code == 422
    res = client.post("/doctors", json={"name": "Dr. X", "workingHours": {"start": "11:00", "end": "10:00"}})
    assert res.status_code == 400


def test_slots_endpoint(client):
    doctor = _doctor(client)
    res = client.get(f"/doctors/{doctor['id']}/slots", params={"date": "2024-05-01"})
    assert res.status_code == 200
    assert res.json() == ["2024-05-01T09:00:00.000Z", "2024-05-01T09:30:00.000Z"]


def test_slots_errors(client):
    doctor = _doctor(client)
    assert client.get("/doctors/missing/slots", params={"date": "2024-05-01"}).status_code == 404
    assert client.get(f"/doctors/{doctor['id']}/slots", params={"date": "not-a-day"}).status_code == 400


def test_booking_flow(client):
    doctor = _doctor(client)

    res = _book(client, doctor["id"], "2024-05-01T09:00:00.000Z2024-05-01T09:00:00.000Z")
    assert res.status_code == 201, res.text
    appointment = res.json()
    assert appointment["date"] == "2024-05-01T09:00:00.000Z"
    assert appointment["patientName"] == "Joao da Silva"

    assert _book(client, doctor["id"], "2024-05-01T09:00:00.000Z").status_code == 409
    assert _book(client, doctor["id"], "2024-05-01T09:15:00.000Z").status_code == 400
    assert _book(client, doctor["id"], "yesterday").status_code == 400
    assert _book(client, "missing", "2024-05-01T09:30:00.000Z").status_code == 404
    assert _book(client, doctor["id"], "2024-05-01T09:30:00.000Z", duration=0).status_code == 400

    fetched = client.get(f"/appointments/{appointment['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["doctorId"] == doctor["id"]
    assert len(client.get("/appointments", params={"doctor_id": doctor["id"]}).json()) == 1


def test_reschedule_and_delete(client):
    doctor = _doctor(client)
    appointment = _book(client, doctor["id"], "2024-05-01T09:00:00.000Z").json()

    res = client.put(f"/appointments/{appointment['id']}", json={"date": "2024-05-01T09:30:00.000Z", "duration": 30})
    assert res.status_code == 200, res.text
    assert res.json()["date"] == "2024-05-01T09:30:00.000Z"

    slots = client.get(f"/doctors/{doctor['id']}/slots", params={"date": "2024-05-01"}).json()
    assert slots == ["2024-05-01T09:00:00.000Z"]

    assert client.put("/appointments/missing", json={"date": "2024-05-01T09:00:00.000Z", "duration": 30}).status_code == 404

    assert client.delete(f"/appointments/{appointment['id']}").status_code == 204
    assert client.delete(f"/appointments/{appointment['id']}").status_code == 204
    assert client.get(f"/appointments/{appointment['id']}").status_code == 404


def test_seeded_demo_doctors():
    settings = Settings(storage="memory", seed_demo=True, log_level="WARNING")
    with TestClient(create_app(settings)) as c:
        names = [d["name"] for d in c.get("/doctors").json()]
    assert names == ["Dr. Ana Cardoso", "Dr. Bruno Silva"]


def test_module_level_app_is_built_from_environment(monkeypatch):
    from fastapi import FastAPI

    from medslot import main

    monkeypatch.setenv("MEDSLOT_STORAGE", "memory")
    monkeypatch.setenv("MEDSLOT_SEED_DEMO", "true")
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    monkeypatch.setattr(main, "_app", None)
    app = main.app
    assert isinstance(app, FastAPI)
    assert main.app is app
    assert app.state.settings.storage == "memory"
    with TestClient(app) as c:
        assert len(c.get("/doctors").json()) == 2
