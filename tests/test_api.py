from datetime import date

from models import Visit, InspectionResult, InspectionType
from scoring import calculate_score

API = "/api/v1"


def _branch(client, headers, name="Filial Centro", manager="Ana"):
    r = client.post(f"{API}/branches", json={"name": name, "manager_name": manager}, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


def _type(client, headers, description, category="Higiene", weight=1):
    r = client.post(
        f"{API}/inspection-types",
        json={"category": category, "description": description, "weight": weight},
        headers=headers,
    )
    assert r.status_code == 201, r.text
    return r.json()


def _visit(client, headers, branch_id, visit_date=None):
    body = {"branch_id": branch_id}
    if visit_date:
        body["visit_date"] = visit_date
    r = client.post(f"{API}/visits", json=body, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


def _set(client, headers, visit_id, type_id, status, observations=None):
    return client.put(
        f"{API}/visits/{visit_id}/results/{type_id}",
        json={"status": status, "observations": observations},
        headers=headers,
    )


# ---------------------------
# auth
# ---------------------------
def test_signup_login_me(client):
    r = client.post(f"{API}/auth/signup", json={
        "email": "Maria@Example.com", "password": "secret123", "full_name": "Maria",
    })
    assert r.status_code == 201, r.text
    assert r.json()["role"] == "employee"
    assert r.json()["email"] == "maria@example.com"

    r = client.post(f"{API}/auth/signup", json={"email": "maria@example.com", "password": "secret123"})
    assert r.status_code == 409

    r = client.post(f"{API}/auth/token", data={"username": "maria@example.com", "password": "wrong"})
    assert r.status_code == 400

    r = client.post(f"{API}/auth/token", data={"username": "maria@example.com", "password": "secret123"})
    assert r.status_code == 200
    token = r.json()["access_token"]

    r = client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200
    assert r.json()["full_name"] == "Maria"
    assert r.json()["is_admin"] is False


def test_signup_rejects_short_password(client):
    r = client.post(f"{API}/auth/signup", json={"email": "x@example.com", "password": "123"})
    assert r.status_code == 422


# ---------------------------
# authorization
# ---------------------------
def test_reads_need_login(client):
    assert client.get(f"{API}/branches").status_code == 401
    assert client.get(f"{API}/inspection-types").status_code == 401


def test_employee_reads_but_cannot_write(client, admin_headers, employee_headers):
    b = _branch(client, admin_headers)
    t = _type(client, admin_headers, "Piso limpo")
    v = _visit(client, admin_headers, b["id"])

    assert client.get(f"{API}/branches", headers=employee_headers).status_code == 200
    assert client.get(f"{API}/visits/{v['id']}", headers=employee_headers).status_code == 200

    assert client.post(f"{API}/branches", json={"name": "X"}, headers=employee_headers).status_code == 403
    assert client.delete(f"{API}/branches/{b['id']}", headers=employee_headers).status_code == 403
    assert _type_post_status(client, employee_headers) == 403
    assert client.post(f"{API}/visits", json={"branch_id": b["id"]}, headers=employee_headers).status_code == 403
    assert _set(client, employee_headers, v["id"], t["id"], "ok").status_code == 403


def _type_post_status(client, headers):
    r = client.post(
        f"{API}/inspection-types",
        json={"category": "A", "description": "B", "weight": 1},
        headers=headers,
    )
    return r.status_code


# ---------------------------
# branches
# ---------------------------
def test_branch_crud(client, admin_headers):
    _branch(client, admin_headers, name="Sul")
    b = _branch(client, admin_headers, name="Norte", manager=None)

    names = [x["name"] for x in client.get(f"{API}/branches", headers=admin_headers).json()]
    assert names == ["Norte", "Sul"]

    r = client.put(f"{API}/branches/{b['id']}", json={"manager_name": "Carlos"}, headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["manager_name"] == "Carlos"
    assert r.json()["name"] == "Norte"

    assert client.post(f"{API}/branches", json={"name": "   "}, headers=admin_headers).status_code == 422

    assert client.delete(f"{API}/branches/{b['id']}", headers=admin_headers).status_code == 204
    assert client.get(f"{API}/branches/{b['id']}", headers=admin_headers).status_code == 404


def test_deleting_branch_removes_its_visits(client, admin_headers, db):
    b = _branch(client, admin_headers)
    t = _type(client, admin_headers, "Piso limpo")
    v = _visit(client, admin_headers, b["id"])
    _set(client, admin_headers, v["id"], t["id"], "ok")

    assert client.delete(f"{API}/branches/{b['id']}", headers=admin_headers).status_code == 204

    assert db.get(Visit, v["id"]) is None
    assert db.query(InspectionResult).count() == 0


# ---------------------------
# inspection types
# ---------------------------
def test_type_numbers_are_sequential(client, admin_headers):
    a = _type(client, admin_headers, "Um")
    b = _type(client, admin_headers, "Dois", weight=2)
    assert (a["number"], b["number"]) == (1, 2)
    assert a["active"] is True

    r = client.put(f"{API}/inspection-types/{b['id']}", json={"number": 10}, headers=admin_headers)
    assert r.json()["number"] == 10
    assert _type(client, admin_headers, "Três")["number"] == 11


def test_type_weight_must_be_1_or_2(client, admin_headers):
    r = client.post(
        f"{API}/inspection-types",
        json={"category": "A", "description": "B", "weight": 3},
        headers=admin_headers,
    )
    assert r.status_code == 422


def test_toggle_active_and_filters(client, admin_headers):
    a = _type(client, admin_headers, "Um", category="Higiene")
    _type(client, admin_headers, "Dois", category="Estoque")

    r = client.post(f"{API}/inspection-types/{a['id']}/toggle-active", headers=admin_headers)
    assert r.json()["active"] is False

    all_types = client.get(f"{API}/inspection-types", headers=admin_headers).json()
    active = client.get(f"{API}/inspection-types", params={"active_only": True}, headers=admin_headers).json()
    assert len(all_types) == 2
    assert [t["description"] for t in active] == ["Dois"]

    cats = client.get(f"{API}/inspection-types/categories", headers=admin_headers).json()
    assert cats == ["Higiene", "Estoque"]
    cats = client.get(
        f"{API}/inspection-types/categories", params={"active_only": True}, headers=admin_headers,
    ).json()
    assert cats == ["Estoque"]


# ---------------------------
# visits + checklist
# ---------------------------
def test_new_visit_starts_with_empty_score(client, admin, admin_headers):
    b = _branch(client, admin_headers)
    _type(client, admin_headers, "Um", weight=2)

    v = _visit(client, admin_headers, b["id"])
    assert v["inspector_id"] == admin.id
    assert v["visit_date"] == date.today().isoformat()
    assert (v["total_score"], v["max_score"], v["percentage"], v["evaluation"]) == (0, 100, 0, "INSUFICIENTE")
    assert v["results"] == []


def test_visit_for_unknown_branch_is_404(client, admin_headers):
    r = client.post(f"{API}/visits", json={"branch_id": "nope"}, headers=admin_headers)
    assert r.status_code == 404


def test_checklist_updates_keep_score_in_sync(client, admin_headers, db):
    b = _branch(client, admin_headers)
    t1 = _type(client, admin_headers, "Piso limpo", weight=1)
    t2 = _type(client, admin_headers, "Geladeira a 5°C", weight=2)
    v = _visit(client, admin_headers, b["id"])

    r = _set(client, admin_headers, v["id"], t1["id"], "ok")
    assert r.status_code == 200, r.text
    assert (r.json()["total_score"], r.json()["max_score"], r.json()["percentage"]) == (50, 150, 33)

    r = _set(client, admin_headers, v["id"], t2["id"], "ok")
    assert (r.json()["total_score"], r.json()["percentage"], r.json()["evaluation"]) == (150, 100, "EXCELENTE")

    r = _set(client, admin_headers, v["id"], t2["id"], "irregular", "Temperatura 9°C")
    body = r.json()
    assert body["total_score"] == -150
    assert body["percentage"] == 0
    irregular = [x for x in body["results"] if x["inspection_type_id"] == t2["id"]]
    assert len(irregular) == 1
    assert irregular[0]["observations"] == "Temperatura 9°C"

    # one row per (visit, type)
    assert db.query(InspectionResult).filter(InspectionResult.visit_id == v["id"]).count() == 2

    # stored snapshot == fresh computation
    db.expire_all()
    visit = db.get(Visit, v["id"])
    fresh = calculate_score(
        db.query(InspectionResult).filter(InspectionResult.visit_id == v["id"]).all(),
        db.query(InspectionType).filter(InspectionType.active.is_(True)).all(),
    )
    assert (visit.total_score, visit.max_score, visit.percentage, visit.evaluation) == (
        fresh.total_score, fresh.max_score, fresh.percentage, fresh.evaluation,
    )


def test_observations_are_cleared_when_ok(client, admin_headers):
    b = _branch(client, admin_headers)
    t = _type(client, admin_headers, "Piso limpo")
    v = _visit(client, admin_headers, b["id"])

    _set(client, admin_headers, v["id"], t["id"], "irregular", "Sujo")
    r = _set(client, admin_headers, v["id"], t["id"], "ok", "ignorado")
    assert r.json()["results"][0]["observations"] in ("", None)


def test_invalid_status_is_422(client, admin_headers):
    b = _branch(client, admin_headers)
    t = _type(client, admin_headers, "Piso limpo")
    v = _visit(client, admin_headers, b["id"])
    assert _set(client, admin_headers, v["id"], t["id"], "pending").status_code == 422


def test_result_for_unknown_type_or_visit_is_404(client, admin_headers):
    b = _branch(client, admin_headers)
    t = _type(client, admin_headers, "Piso limpo")
    v = _visit(client, admin_headers, b["id"])
    assert _set(client, admin_headers, v["id"], "nope", "ok").status_code == 404
    assert _set(client, admin_headers, "nope", t["id"], "ok").status_code == 404


def test_clear_result_goes_back_to_pending(client, admin_headers):
    b = _branch(client, admin_headers)
    t = _type(client, admin_headers, "Piso limpo")
    v = _visit(client, admin_headers, b["id"])
    _set(client, admin_headers, v["id"], t["id"], "ok")

    r = client.delete(f"{API}/visits/{v['id']}/results/{t['id']}", headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["results"] == []
    assert (r.json()["total_score"], r.json()["percentage"]) == (0, 0)


def test_inactive_and_deleted_types_do_not_score(client, admin_headers):
    b = _branch(client, admin_headers)
    t1 = _type(client, admin_headers, "Um")
    t2 = _type(client, admin_headers, "Dois", weight=2)
    t3 = _type(client, admin_headers, "Três")
    v = _visit(client, admin_headers, b["id"])

    _set(client, admin_headers, v["id"], t2["id"], "irregular", "x")
    client.post(f"{API}/inspection-types/{t2['id']}/toggle-active", headers=admin_headers)
    assert client.delete(f"{API}/inspection-types/{t3['id']}", headers=admin_headers).status_code == 204

    r = _set(client, admin_headers, v["id"], t1["id"], "ok")
    body = r.json()
    assert (body["total_score"], body["max_score"], body["percentage"]) == (50, 50, 100)
    # the inactive type's result is still stored
    assert len(body["results"]) == 2


def test_current_visit_is_latest_by_date(client, admin_headers, employee_headers):
    b = _branch(client, admin_headers)
    other = _branch(client, admin_headers, name="Outra")

    r = client.get(f"{API}/visits/current", params={"branch_id": b["id"]}, headers=employee_headers)
    assert r.status_code == 200
    assert r.json() is None

    _visit(client, admin_headers, b["id"], "2025-03-01")
    latest = _visit(client, admin_headers, b["id"], "2025-05-01")
    _visit(client, admin_headers, b["id"], "2025-04-01")
    _visit(client, admin_headers, other["id"], "2025-06-01")

    r = client.get(f"{API}/visits/current", params={"branch_id": b["id"]}, headers=employee_headers)
    assert r.json()["id"] == latest["id"]

    listed = client.get(f"{API}/visits", params={"branch_id": b["id"]}, headers=employee_headers).json()
    assert [x["visit_date"] for x in listed] == ["2025-05-01", "2025-04-01", "2025-03-01"]
    assert len(client.get(f"{API}/visits", headers=employee_headers).json()) == 4


def test_update_and_delete_visit(client, admin_headers):
    b = _branch(client, admin_headers)
    v = _visit(client, admin_headers, b["id"])

    r = client.put(f"{API}/visits/{v['id']}", json={"notes": "Retorno em 30 dias"}, headers=admin_headers)
    assert r.json()["notes"] == "Retorno em 30 dias"

    assert client.delete(f"{API}/visits/{v['id']}", headers=admin_headers).status_code == 204
    assert client.get(f"{API}/visits/{v['id']}", headers=admin_headers).status_code == 404


# ---------------------------
# reports
# ---------------------------
def test_monthly_report(client, admin_headers, employee_headers):
    b = _branch(client, admin_headers)
    other = _branch(client, admin_headers, name="Outra")
    t = _type(client, admin_headers, "Um")

    v1 = _visit(client, admin_headers, b["id"], "2025-02-03")
    _set(client, admin_headers, v1["id"], t["id"], "ok")        # 100
    _visit(client, admin_headers, b["id"], "2025-02-20")        # 0
    v3 = _visit(client, admin_headers, other["id"], "2025-07-01")
    _set(client, admin_headers, v3["id"], t["id"], "ok")

    r = client.get(f"{API}/reports/monthly", params={"year": 2025, "branch_id": b["id"]}, headers=employee_headers)
    series = r.json()
    assert len(series) == 12
    assert series[1]["percentage"] == 50
    assert series[1]["visits"] == 2
    assert series[6]["has_data"] is False

    r = client.get(f"{API}/reports/monthly", params={"year": 2025}, headers=employee_headers)
    assert r.json()[6]["percentage"] == 100


def test_signup_race_on_same_email_is_409(client, monkeypatch):
    from routers.v1 import auth as auth_router

    body = {"email": "race@example.com", "password": "secret123"}
    assert client.post(f"{API}/auth/signup", json=body).status_code == 201

    # both requests passed the existence check; the unique index decides
    monkeypatch.setattr(auth_router, "email_taken", lambda db, email: False)
    r = client.post(f"{API}/auth/signup", json=body)
    assert r.status_code == 409
    assert r.json() == {"detail": "Email already exists"}
