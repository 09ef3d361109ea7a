from __future__ import annotations


def _create(client, ot="OT-100", **extra):
    payload = {"ot": ot, "client": "Minera Sur", "tag": "TAG-1", "description": "Bomba"}
    payload.update(extra)
    return client.post("/ots/api/", json=payload)


def test_ping_and_stages_are_public(client) -> None:
    assert client.get("/ots/api/ping").get_json() == {"ok": True, "service": "ot_api"}

    stages = client.get("/ots/api/stages").get_json()
    assert stages["INCO"][-1] == {"name": "Anticorr", "progress": 100}
    assert stages["ANTI"][-1] == {"name": "Despacho", "progress": 100}


def test_board_requires_login(client) -> None:
    resp = client.get("/ots/api/board")
    assert resp.status_code == 401
    assert resp.get_json()["ok"] is False


def test_login_session_and_logout(client, user) -> None:
    assert client.get("/auth/session").get_json()["authenticated"] is False

    bad = client.post("/auth/login", json={"usuario": "operador", "senha": "x"})
    assert bad.status_code == 401

    ok = client.post("/auth/login", json={"usuario": "operador", "senha": "clave-segura"})
    assert ok.status_code == 200
    assert ok.get_json()["user"]["username"] == "operador"
    assert client.get("/auth/session").get_json()["authenticated"] is True

    assert client.post("/auth/logout").status_code == 200
    assert client.get("/ots/api/board").status_code == 401


def test_registro(client) -> None:
    resp = client.post(
        "/auth/registro",
        json={"usuario": "nuevo", "senha": "abc123", "confirmar_senha": "abc123"},
    )
    assert resp.status_code == 201

    dup = client.post(
        "/auth/registro",
        json={"usuario": "nuevo", "senha": "abc123", "confirmar_senha": "abc123"},
    )
    assert dup.status_code == 409

    mismatch = client.post(
        "/auth/registro",
        json={"usuario": "otro", "senha": "abc123", "confirmar_senha": "zzz"},
    )
    assert mismatch.status_code == 400


def test_create_and_board(auth_client) -> None:
    resp = _create(auth_client)
    assert resp.status_code == 201
    body = resp.get_json()
    assert [o["ot"] for o in body["inco"]] == ["OT-100"]
    assert body["inco"][0]["location"] == "INCO"
    assert body["inco"][0]["delayed"] is False

    dup = _create(auth_client)
    assert dup.status_code == 409
    assert dup.get_json()["ok"] is False


def test_set_stage_date_advances_order(auth_client) -> None:
    _create(auth_client)
    resp = auth_client.post(
        "/ots/api/OT-100/dates", json={"stage": "Corte", "date": "2024-01-01"}
    )
    assert resp.status_code == 200
    order = resp.get_json()["inco"][0]
    assert (order["status"], order["progress"]) == ("Corte", 15)
    assert order["dates"] == {"Corte": "2024-01-01"}
    assert order["delayed"] is True

    resp = auth_client.post(
        "/ots/api/OT-100/dates", json={"stage": "Anticorr", "date": "2024-01-10"}
    )
    body = resp.get_json()
    assert body["inco"] == []
    assert body["anti"][0]["status"] == "Anticorr"


def test_set_stage_date_errors(auth_client) -> None:
    _create(auth_client)

    missing = auth_client.post("/ots/api/OT-404/dates", json={"stage": "Corte", "date": "2024-01-01"})
    assert missing.status_code == 404

    unknown = auth_client.post("/ots/api/OT-100/dates", json={"stage": "Embalaje", "date": "2024-01-01"})
    assert unknown.status_code == 400

    no_stage = auth_client.post("/ots/api/OT-100/dates", json={"date": "2024-01-01"})
    assert no_stage.status_code == 400


def test_archived_order_rejects_dates(auth_client) -> None:
    _create(auth_client)
    auth_client.post("/ots/api/OT-100/dates", json={"stage": "Anticorr", "date": "2024-01-10"})
    resp = auth_client.post("/ots/api/OT-100/dates", json={"stage": "Despacho", "date": "2024-01-20"})
    assert resp.get_json()["archived"][0]["progress"] == 100

    again = auth_client.post("/ots/api/OT-100/dates", json={"stage": "Despacho", "date": "2024-02-01"})
    assert again.status_code == 409


def test_board_sorted_by_progress(auth_client) -> None:
    _create(auth_client, "OT-1")
    _create(auth_client, "OT-2")
    _create(auth_client, "OT-3")
    auth_client.post("/ots/api/OT-1/dates", json={"stage": "Soldadura", "date": "2024-01-10"})

    body = auth_client.get("/ots/api/board").get_json()
    # empates mantienen el orden de carga (más recientes primero)
    assert [o["ot"] for o in body["inco"]] == ["OT-1", "OT-3", "OT-2"]


def test_edit_work_order(auth_client) -> None:
    _create(auth_client)
    resp = auth_client.patch("/ots/api/OT-100", json={"tag": "TAG-9"})
    assert resp.status_code == 200
    assert resp.get_json()["inco"][0]["tag"] == "TAG-9"

    bad = auth_client.patch("/ots/api/OT-100", json={"progress": 100})
    assert bad.status_code == 400


def test_edit_rejects_ot_in_body(auth_client) -> None:
    _create(auth_client)
    resp = auth_client.patch("/ots/api/OT-100", json={"ot": "OT-2"})
    assert resp.status_code == 400
    assert "ot" in resp.get_json()["error"]
    assert auth_client.get("/ots/api/board").get_json()["inco"][0]["ot"] == "OT-100"


def test_edit_rejects_non_object_body(auth_client) -> None:
    _create(auth_client)
    resp = auth_client.patch("/ots/api/OT-100", json=["x"])
    assert resp.status_code == 400
    assert resp.get_json()["ok"] is False


def test_non_text_fields_are_rejected(auth_client) -> None:
    created = auth_client.post("/ots/api/", json={"ot": 100})
    assert created.status_code == 400

    _create(auth_client)
    edited = auth_client.patch("/ots/api/OT-100", json={"client": 5})
    assert edited.status_code == 400

    stage = auth_client.post(
        "/ots/api/OT-100/dates", json={"stage": 5, "date": "2024-01-01"}
    )
    assert stage.status_code == 400

    order = auth_client.get("/ots/api/board").get_json()["inco"][0]
    assert (order["client"], order["dates"]) == ("Minera Sur", {})


def test_login_rejects_non_text_credentials(client, user) -> None:
    resp = client.post("/auth/login", json={"usuario": 7, "senha": "clave-segura"})
    assert resp.status_code == 400
    assert client.post("/auth/login", json=["operador"]).status_code == 400


def test_dashboard_summary_and_history(auth_client) -> None:
    _create(auth_client, "OT-1")
    _create(auth_client, "OT-2")
    auth_client.post("/ots/api/OT-1/dates", json={"stage": "Corte", "date": "2020-01-01"})

    summary = auth_client.get("/dashboard/api/summary").get_json()
    assert summary["total"] == 2
    assert summary["in_progress"] == 2
    assert summary["completed"] == 0
    assert summary["delayed"] == 1
    assert summary["delayed_orders"] == ["OT-1"]

    history = auth_client.get("/dashboard/api/history?limit=2").get_json()["history"]
    assert len(history) == 2
    assert history[0]["ot"] == "OT-1"
    assert history[0]["field"] == "Corte"
    assert history[0]["user"] == "operador@planta.example"
