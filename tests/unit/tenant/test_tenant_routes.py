class TestInviteCheck:
    def test_valid_code_is_case_insensitive(self, client, make_gym):
        gym = make_gym(name="Centro", invite_code="ABC123")
        response = client.get("/api/gyms/invite/abc123")
        assert response.status_code == 200
        assert response.json() == {"gymName": "Centro", "gymId": gym.id, "isValid": True}

    def test_unknown_code(self, client):
        response = client.get("/api/gyms/invite/ABC123")
        assert response.status_code == 404
        assert "isValid" not in response.json()

    def test_inactive_gym(self, client, make_gym):
        make_gym(invite_code="OFF001", is_active=False)
        assert client.get("/api/gyms/invite/OFF001").status_code == 404


class TestGymSelection:
    def test_available_lists_memberships(self, client, store, make_user, make_gym, auth_headers):
        a = make_gym(name="A")
        b = make_gym(name="B")
        user = make_user(user_type="personal", active_gym_id=b.id)
        store.add_membership(user.id, a.id)
        store.add_membership(user.id, b.id)

        response = client.get("/api/gyms/available", headers=auth_headers(user))

        assert response.status_code == 200
        body = response.json()
        assert body["activeGymId"] == b.id
        assert {g["id"]: g["isActiveSelection"] for g in body["gyms"]} == {a.id: False, b.id: True}

    def test_set_active(self, client, store, make_user, make_gym, auth_headers):
        gym = make_gym(name="A")
        user = make_user(user_type="admin")
        store.add_membership(user.id, gym.id)

        response = client.post("/api/gyms/set-active", json={"gymId": gym.id}, headers=auth_headers(user))

        assert response.status_code == 200
        assert response.json() == {"success": True, "activeGymId": gym.id, "gymName": "A"}
        assert store.get_user(user.id).active_gym_id == gym.id

    def test_set_active_foreign_gym(self, client, make_user, make_gym, auth_headers):
        gym = make_gym()
        user = make_user(user_type="academia")
        response = client.post("/api/gyms/set-active", json={"gymId": gym.id}, headers=auth_headers(user))
        assert response.status_code == 403

    def test_requires_session(self, client):
        assert client.get("/api/gyms/available").status_code == 401


class TestScopedRoutes:
    def test_admin_with_two_gyms_must_select(self, client, store, make_user, make_gym, auth_headers):
        a = make_gym(name="A")
        b = make_gym(name="B")
        admin = make_user(user_type="admin")
        store.add_membership(admin.id, a.id)
        store.add_membership(admin.id, b.id)

        response = client.get("/api/academia/dashboard", headers=auth_headers(admin))

        assert response.status_code == 409
        body = response.json()
        assert body["code"] == "tenant_selection_required"
        assert {g["id"] for g in body["gyms"]} == {a.id, b.id}

    def test_dashboard_counts_members(self, client, store, make_user, make_gym, auth_headers):
        gym = make_gym(name="Centro", invite_code="CEN001", max_members=30)
        owner = make_user(user_type="academia", active_gym_id=gym.id)
        make_user(user_type="aluno", gym_id=gym.id)
        personal = make_user(user_type="personal")
        store.add_membership(personal.id, gym.id)

        response = client.get("/api/academia/dashboard", headers=auth_headers(owner))

        assert response.status_code == 200
        assert response.json() == {
            "gymId": gym.id,
            "gymName": "Centro",
            "totalAlunos": 1,
            "totalPersonais": 1,
            "maxMembers": 30,
            "inviteCode": "CEN001",
        }

    def test_gym_id_query_ignored_outside_hub(self, client, make_user, make_gym, auth_headers):
        mine = make_gym()
        other = make_gym()
        make_user(user_type="aluno", gym_id=other.id)
        owner = make_user(user_type="academia", active_gym_id=mine.id)

        response = client.get(
            "/api/academia/alunos", params={"gymId": other.id}, headers=auth_headers(owner)
        )

        assert response.status_code == 200
        assert response.json() == []

    def test_aluno_is_forbidden(self, client, make_user, auth_headers):
        aluno = make_user(user_type="aluno")
        response = client.get("/api/academia/dashboard", headers=auth_headers(aluno))
        assert response.status_code == 403
        assert response.json()["code"] == "forbidden"

    def test_unresolved_tenant_for_personal_on_hub(self, client, make_user, auth_headers):
        personal = make_user(user_type="personal")
        response = client.get("/api/hub-academia", headers=auth_headers(personal))
        assert response.status_code == 400
        assert response.json()["code"] == "tenant_unresolved"


class TestHub:
    def test_explicit_gym_id(self, client, store, make_user, make_gym, auth_headers):
        a = make_gym(name="A")
        b = make_gym(name="B")
        personal = make_user(user_type="personal", active_gym_id=a.id)
        store.add_membership(personal.id, a.id)
        store.add_membership(personal.id, b.id)
        aluno = make_user(user_type="aluno", gym_id=b.id)

        response = client.get("/api/hub-academia", params={"gymId": b.id}, headers=auth_headers(personal))

        assert response.status_code == 200
        body = response.json()
        assert (body["gymId"], body["source"], body["gymName"]) == (b.id, "explicit", "B")
        assert [m["id"] for m in body["alunos"]] == [aluno.id]

    def test_foreign_gym_id(self, client, make_user, make_gym, auth_headers):
        mine = make_gym()
        other = make_gym()
        owner = make_user(user_type="academia", active_gym_id=mine.id)

        response = client.get("/api/hub-academia", params={"gymId": other.id}, headers=auth_headers(owner))

        assert response.status_code == 403

    def test_without_gym_id_uses_active(self, client, make_user, make_gym, auth_headers):
        gym = make_gym()
        owner = make_user(user_type="academia", active_gym_id=gym.id)
        response = client.get("/api/hub-academia", headers=auth_headers(owner))
        assert response.json()["source"] == "active"
