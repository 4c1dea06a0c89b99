"""
Auth flow and the admin-managed reference data: users, shift hours, event titles.
"""
from conftest import auth_headers, make_user, report_body


class TestAuth:

    def test_login_and_check_auth(self, client, db):
        make_user(db, "carol", full_name="Carol Lead", password="pw-carol")

        resp = client.post("/api/auth/login", json={"username": "carol", "password": "pw-carol"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["token_type"] == "bearer"
        assert data["user"]["username"] == "carol"

        headers = {"Authorization": f"Bearer {data['access_token']}"}
        resp = client.get("/api/auth/check-auth", headers=headers)
        assert resp.status_code == 200
        assert resp.json()["full_name"] == "Carol Lead"

    def test_bad_password(self, client, db):
        make_user(db, "carol", password="pw-carol")
        resp = client.post("/api/auth/login", json={"username": "carol", "password": "nope"})
        assert resp.status_code == 401
        assert resp.json() == {"detail": "Invalid credentials"}

    def test_unknown_user(self, client):
        resp = client.post("/api/auth/login", json={"username": "ghost", "password": "x"})
        assert resp.status_code == 401

    def test_refresh_token(self, client, db):
        make_user(db, "carol", password="pw-carol")
        tokens = client.post("/api/auth/login", json={"username": "carol", "password": "pw-carol"}).json()

        # A refresh token is not accepted as an access token
        resp = client.get("/api/auth/check-auth", headers={"Authorization": f"Bearer {tokens['refresh_token']}"})
        assert resp.status_code == 401

        resp = client.post("/api/auth/refresh", params={"token": tokens["refresh_token"]})
        assert resp.status_code == 200
        new_access = resp.json()["access_token"]
        resp = client.get("/api/auth/check-auth", headers={"Authorization": f"Bearer {new_access}"})
        assert resp.status_code == 200

    def test_access_token_cannot_refresh(self, client, alice):
        token = auth_headers(alice)["Authorization"].split(" ", 1)[1]
        resp = client.post("/api/auth/refresh", params={"token": token})
        assert resp.status_code == 400

    def test_logout(self, client):
        assert client.post("/api/auth/logout").json() == {"status": "ok"}

    def test_check_auth_without_token(self, client):
        assert client.get("/api/auth/check-auth").status_code == 401


class TestUsers:

    def test_list_ordered_by_full_name(self, client, db, admin, alice, bob):
        make_user(db, "zed", full_name="Aaron Zed")
        resp = client.get("/api/users", headers=auth_headers(bob))
        assert resp.status_code == 200
        assert [u["full_name"] for u in resp.json()] == [
            "Aaron Zed", "Ada Admin", "Alice Operator", "Bob Operator",
        ]
        assert "password_hash" not in resp.json()[0]

    def test_admin_creates_user(self, client, admin):
        body = {"username": "dave", "password": "pw", "full_name": "Dave Night", "role": "user"}
        resp = client.post("/api/users", json=body, headers=auth_headers(admin))
        assert resp.status_code == 200
        new_id = resp.json()["id"]

        resp = client.post("/api/auth/login", json={"username": "dave", "password": "pw"})
        assert resp.status_code == 200
        assert resp.json()["user"]["id"] == new_id

    def test_duplicate_username_is_409(self, client, admin, alice):
        body = {"username": "alice", "password": "pw", "full_name": "Other Alice"}
        resp = client.post("/api/users", json=body, headers=auth_headers(admin))
        assert resp.status_code == 409

    def test_non_admin_cannot_write(self, client, alice, bob):
        body = {"username": "eve", "password": "pw"}
        assert client.post("/api/users", json=body, headers=auth_headers(alice)).status_code == 403
        resp = client.put(f"/api/users/{bob.id}", json={"username": "bobby"}, headers=auth_headers(alice))
        assert resp.status_code == 403
        assert client.delete(f"/api/users/{bob.id}", headers=auth_headers(alice)).status_code == 403

    def test_update_keeps_password_unless_given(self, client, admin, bob):
        body = {"username": "bobby", "full_name": "Bob Renamed", "role": "user"}
        assert client.put(f"/api/users/{bob.id}", json=body, headers=auth_headers(admin)).status_code == 200

        resp = client.post("/api/auth/login", json={"username": "bobby", "password": "secret"})
        assert resp.status_code == 200
        assert resp.json()["user"]["full_name"] == "Bob Renamed"

        body["password"] = "changed"
        client.put(f"/api/users/{bob.id}", json=body, headers=auth_headers(admin))
        assert client.post("/api/auth/login", json={"username": "bobby", "password": "secret"}).status_code == 401
        assert client.post("/api/auth/login", json={"username": "bobby", "password": "changed"}).status_code == 200

    def test_missing_user_is_404(self, client, admin):
        resp = client.put("/api/users/999", json={"username": "x"}, headers=auth_headers(admin))
        assert resp.status_code == 404
        assert client.delete("/api/users/999", headers=auth_headers(admin)).status_code == 404

    def test_delete_user(self, client, admin, bob):
        assert client.delete(f"/api/users/{bob.id}", headers=auth_headers(admin)).status_code == 200
        names = [u["username"] for u in client.get("/api/users", headers=auth_headers(admin)).json()]
        assert names == ["admin"]

    def test_delete_report_creator_is_500(self, client, admin, alice):
        client.post("/api/reports", json=report_body(), headers=auth_headers(alice))
        resp = client.delete(f"/api/users/{alice.id}", headers=auth_headers(admin))
        assert resp.status_code == 500
        assert resp.json() == {"detail": "Error deleting user"}


class TestShiftHours:

    def test_crud(self, client, admin, alice):
        headers = auth_headers(admin)
        night = client.post(
            "/api/shift-hours", json={"name": "Night", "start_time": "22:00", "end_time": "06:00"}, headers=headers
        ).json()["id"]
        client.post("/api/shift-hours", json={"name": "Day", "start_time": "06:00", "end_time": "14:00"},
                    headers=headers)

        listed = client.get("/api/shift-hours", headers=auth_headers(alice)).json()
        assert [s["name"] for s in listed] == ["Day", "Night"]

        resp = client.put(f"/api/shift-hours/{night}", json={"name": "Late", "start_time": "23:00",
                                                              "end_time": "07:00"}, headers=headers)
        assert resp.status_code == 200
        listed = client.get("/api/shift-hours", headers=headers).json()
        assert listed[1] == {"id": night, "name": "Late", "start_time": "23:00", "end_time": "07:00"}

        assert client.delete(f"/api/shift-hours/{night}", headers=headers).status_code == 200
        assert [s["name"] for s in client.get("/api/shift-hours", headers=headers).json()] == ["Day"]

    def test_non_admin_cannot_create(self, client, alice):
        resp = client.post("/api/shift-hours", json={"name": "X"}, headers=auth_headers(alice))
        assert resp.status_code == 403

    def test_missing_is_404(self, client, admin):
        resp = client.put("/api/shift-hours/404", json={"name": "X"}, headers=auth_headers(admin))
        assert resp.status_code == 404


class TestEventTitles:

    def test_crud(self, client, admin, alice):
        headers = auth_headers(admin)
        for title in ("Water leak", "Access alarm"):
            assert client.post("/api/event-titles", json={"title": title}, headers=headers).status_code == 200

        listed = client.get("/api/event-titles", headers=auth_headers(alice)).json()
        assert [t["title"] for t in listed] == ["Access alarm", "Water leak"]

        leak = listed[1]["id"]
        client.put(f"/api/event-titles/{leak}", json={"title": "Flooding"}, headers=headers)
        assert client.delete(f"/api/event-titles/{listed[0]['id']}", headers=headers).status_code == 200
        assert client.get("/api/event-titles", headers=headers).json() == [{"id": leak, "title": "Flooding"}]

    def test_missing_is_404(self, client, admin):
        assert client.delete("/api/event-titles/404", headers=auth_headers(admin)).status_code == 404

    def test_referenced_title_cannot_be_deleted(self, client, admin, alice, titles):
        body = report_body(event_title_ids=[titles[0].id])
        assert client.post("/api/reports", json=body, headers=auth_headers(alice)).status_code == 200

        resp = client.delete(f"/api/event-titles/{titles[0].id}", headers=auth_headers(admin))
        assert resp.status_code == 500
        assert resp.json() == {"detail": "Error deleting event title"}


def test_health_and_metrics(client):
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/metrics").status_code == 200
