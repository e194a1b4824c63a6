def _payload(**overrides):
    data = {
        "email": "novo@gymsync.com",
        "password": "treino-pesado-9",
        "userType": "aluno",
        "firstName": "Bruno",
        "lastName": "Lima",
    }
    data.update(overrides)
    return data


class TestRegister:
    def test_admin_self_registration_is_forbidden(self, client, store):
        response = client.post("/api/auth/register", json=_payload(userType="admin"))
        assert response.status_code == 403
        assert store.get_user_by_email("novo@gymsync.com") is None

    def test_aluno_requires_valid_invite(self, client, store, make_gym):
        make_gym(invite_code="OFF001", is_active=False)

        missing = client.post("/api/auth/register", json=_payload())
        unknown = client.post("/api/auth/register", json=_payload(inviteCode="NOPE99"))
        inactive = client.post("/api/auth/register", json=_payload(inviteCode="OFF001"))

        for response in (missing, unknown, inactive):
            assert response.status_code == 400
            assert response.json()["detail"] == {
                "message": "Código de convite inválido",
                "code": "invalid_invite_code",
            }
        assert store.get_user_by_email("novo@gymsync.com") is None

    def test_aluno_with_invite_joins_gym(self, client, store, make_gym):
        gym = make_gym(invite_code="ABC123")

        response = client.post("/api/auth/register", json=_payload(inviteCode="abc123"))

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Usuário criado com sucesso"
        assert body["user"]["userType"] == "aluno"

        user = store.get_user_by_email("novo@gymsync.com")
        assert user.gym_id == gym.id
        assert user.senha_hash and user.senha_hash != "treino-pesado-9"
        assert [g.id for g in store.list_user_gyms(user.id)] == [gym.id]

    def test_full_gym(self, client, store, make_gym, make_user):
        gym = make_gym(invite_code="FULL01", max_members=1)
        member = make_user()
        store.add_membership(member.id, gym.id)

        response = client.post("/api/auth/register", json=_payload(inviteCode="FULL01"))

        assert response.status_code == 409
        assert response.json()["detail"] == "Esta academia atingiu o limite de alunos"

    def test_duplicate_email(self, client, make_user):
        make_user(email="novo@gymsync.com", user_type="personal")
        response = client.post("/api/auth/register", json=_payload(userType="personal"))
        assert response.status_code == 409
        assert response.json()["detail"] == "Usuário com este email já existe"

    def test_weak_password(self, client, store):
        response = client.post(
            "/api/auth/register", json=_payload(userType="personal", password="curta")
        )
        assert response.status_code == 422
        assert store.get_user_by_email("novo@gymsync.com") is None

    def test_personal_without_invite(self, client, store):
        response = client.post("/api/auth/register", json=_payload(userType="personal"))
        assert response.status_code == 201
        user = store.get_user_by_email("novo@gymsync.com")
        assert user.user_type == "personal"
        assert user.gym_id is None

    def test_missing_fields(self, client):
        response = client.post("/api/auth/register", json={"email": "novo@gymsync.com"})
        assert response.status_code == 422

    def test_rate_limited_after_three_attempts(self, client):
        for _ in range(3):
            client.post("/api/auth/register", json=_payload(userType="admin"))

        response = client.post("/api/auth/register", json=_payload(userType="admin"))

        assert response.status_code == 429
        assert response.json()["detail"]["retryAfter"] == "60 minutos"
        assert "retry-after" in response.headers
