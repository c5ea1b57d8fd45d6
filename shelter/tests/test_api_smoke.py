from shelter.db import get_conn


ANIMAL = {
    "name": "Rex",
    "specie": "dog",
    "breed": "pug",
    "sex": "male",
    "birth_month": 3,
    "birth_year": 2021,
    "neutered": True,
    "status": "available",
    "appearance": "Fawn",
    "bio": "Snores.",
}


def _request(animal_id, **kw):
    body = {
        "animal_id": animal_id,
        "username": "ann",
        "name": "Ann",
        "email": "ann@example.com",
        "num_people": 2,
        "num_children": 1,
        "country": "TH",
    }
    body.update(kw)
    return body


def test_health_and_version(client):
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/version").json().get("app") == "shelter-records-api"


def test_animal_lifecycle(client, ctx):
    res = client.post("/api/animals/create", json=ANIMAL)
    assert res.status_code == 201
    assert res.json()["id"] == "1"

    item = client.get("/api/animals/1").json()["item"]
    assert item["name"] == "Rex"
    assert item["status"] == "available"
    assert item["admission_timestamp"] > 0

    upd = dict(item, status="passed-away")
    assert client.post("/api/animals/update", json=upd).json() == {"updated": True}
    assert client.get("/api/animals/1").json()["item"]["status"] == "passed-away"

    assert client.post("/api/animals/delete", json={"animal_id": "1"}).json() == {"deleted": True}
    assert client.get("/api/animals/1").json() == {"item": None}
    assert client.post("/api/animals/update", json=upd).json() == {"updated": False}

    total = client.get("/api/logs/search", params={"action": "ANIMAL_CREATE"}).json()["total"]
    assert total == 1
    with get_conn(ctx.db_path) as conn:
        rows = conn.execute("SELECT action, result FROM operation_log ORDER BY id").fetchall()
    assert [(r["action"], r["result"]) for r in rows] == [
        ("ANIMAL_CREATE", "OK"),
        ("ANIMAL_UPDATE", "OK"),
        ("ANIMAL_DELETE", "OK"),
        ("ANIMAL_UPDATE", "NOT_FOUND"),
    ]


def test_unknown_status_is_rejected(client):
    res = client.post("/api/animals/create", json=dict(ANIMAL, status="lost"))
    assert res.status_code == 422
    assert isinstance(res.json()["detail"], str)
    assert "status" in res.json()["detail"]
    assert "unknown animal status: lost" in res.json()["detail"]


def test_missing_field_is_reported_as_text(client):
    res = client.post("/api/auth/sign-up", json={"username": "bob"})
    assert res.status_code == 422
    assert isinstance(res.json()["detail"], str)
    assert res.json()["detail"].startswith("password: ")


def test_list_with_filters(client):
    client.post("/api/animals/create", json=ANIMAL)
    client.post("/api/animals/create", json=dict(ANIMAL, name="Mia", specie="cat", breed="siamese", sex="female"))

    everything = client.post("/api/animals/list", json={}).json()["items"]
    assert [a["name"] for a in everything] == ["Rex", "Mia"]

    none = client.post("/api/animals/list", json={"filters": {"status": []}}).json()["items"]
    assert none == []

    cats = client.post(
        "/api/animals/list",
        json={"filters": {"species_and_breeds": {"cat": ["siamese"]}, "admission_date": "today", "sex": None}},
    ).json()["items"]
    assert [a["name"] for a in cats] == ["Mia"]

    bad = client.post("/api/animals/list", json={"filters": {"colour": ["red"]}})
    assert bad.status_code == 400
    assert "colour" in bad.json()["detail"]


def test_adoption_request_flow(client):
    client.post("/api/animals/create", json=ANIMAL)

    missing = client.post("/api/adoption-requests/create", json=_request("99"))
    assert missing.status_code == 409
    assert isinstance(missing.json()["detail"], str)

    res = client.post("/api/adoption-requests/create", json=_request("1"))
    assert res.status_code == 201
    rid = res.json()["id"]

    by_animal = client.get("/api/adoption-requests/by-animal/1").json()["items"]
    assert [r["id"] for r in by_animal] == [rid]
    by_user = client.get("/api/adoption-requests/by-username/ann").json()["items"]
    assert by_user[0]["status"] == "pending"

    req = client.get(f"/api/adoption-requests/{rid}").json()["item"]
    approved = dict(req, status="approved", adoption_timestamp=req["request_timestamp"])
    assert client.post("/api/adoption-requests/update", json=approved).json() == {"updated": True}

    listed = client.post("/api/adoption-requests/list", json={"filters": {"status": ["approved"]}}).json()["items"]
    assert [r["id"] for r in listed] == [rid]

    blocked = client.post("/api/animals/delete", json={"animal_id": "1"})
    assert blocked.status_code == 409

    animal = client.get("/api/animals/1").json()["item"]
    client.post("/api/animals/update", json=dict(animal, status="adopted"))
    report = client.post("/api/reports/adoptions", json={"filters": {"adoption_date": "this_year"}}).json()["items"]
    assert report[0]["animal"]["id"] == "1"
    assert report[0]["adoption"]["id"] == rid

    assert client.post("/api/adoption-requests/delete", json={"request_id": rid}).json() == {"deleted": True}
    assert client.get(f"/api/adoption-requests/{rid}").json() == {"item": None}


def test_auth_flow(client):
    short = client.post("/api/auth/sign-up", json={"username": "bob", "password": "12345"})
    assert short.status_code == 400
    assert "at least 6" in short.json()["detail"]

    ok = client.post("/api/auth/sign-up", json={"username": "bob", "password": "123456", "role": "staff"})
    assert ok.status_code == 201
    assert client.get("/api/auth/current-user").json() == {"user": {"username": "bob", "role": "staff"}}

    dup = client.post("/api/auth/sign-up", json={"username": "bob", "password": "123456"})
    assert dup.status_code == 409

    assert client.post("/api/auth/log-out").json() == {"message": "ok"}
    assert client.get("/api/auth/current-user").json() == {"user": None}

    r = client.post("/api/auth/log-in", json={"username": "bob", "password": "wrong!"})
    assert r.json() == {"result": "invalid-password"}
    r = client.post("/api/auth/log-in", json={"username": "zed", "password": "whatever"})
    assert r.json() == {"result": "user-not-found"}
    r = client.post("/api/auth/log-in", json={"username": "bob", "password": "123456"})
    assert r.json() == {"result": "success"}


def test_file_endpoints(client, ctx, tmp_path):
    src = tmp_path / "pic.png"
    src.write_bytes(b"png")
    assert client.post("/api/files/upload", json={"source_path": None}).json() == {"path": None}

    path = client.post("/api/files/upload", json={"source_path": str(src)}).json()["path"]
    assert path.endswith(".png")

    outside = client.post("/api/files/delete", json={"path": str(src)})
    assert outside.status_code == 400
    assert client.post("/api/files/delete", json={"path": path}).json() == {"message": "ok"}
