from datetime import datetime, timedelta, timezone

from jose import jwt
from sqlalchemy import update

from cinemax.config import ALGORITHM, JWT_SECRET
from cinemax.database import SessionLocal
from cinemax.main import app
from cinemax.models.cliente import Cliente
from cinemax.services.credential_store import CredentialStore, StoreResult, get_credential_store
from cinemax.utils.jwt_auth import create_access_token

from conftest import ANA, bearer, login, register


def token_for(client, user_type="cliente", **overrides):
    assert register(client, user_type, **overrides).status_code == 201
    creds = dict(ANA, **overrides)
    resp = login(client, creds["username"], creds["password"], user_type)
    assert resp.status_code == 200
    return resp.json()["token"]


# --- registration -----------------------------------------------------------

def test_register_then_login(client):
    resp = register(client)
    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert body["user"]["userType"] == "cliente"
    assert body["user"]["username"] == "anagp"
    assert body["user"]["correo"] == "ana@example.com"
    assert body["user"]["telefono"] is None

    resp = login(client)
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["token"]
    assert body["message"] == "¡Bienvenido Ana Gomez!"
    assert body["user"]["username"] == "anagp"
    assert body["user"]["name"] == "Ana Gomez"
    assert body["user"]["email"] == "ana@example.com"

    claims = jwt.decode(body["token"], JWT_SECRET, algorithms=[ALGORITHM])
    assert claims["id"] == body["user"]["id"]
    assert claims["username"] == "anagp"
    assert claims["userType"] == "cliente"
    assert "rol" not in claims


def test_password_never_returned(client):
    responses = [register(client, telefono="555-123-4567"), login(client)]
    token = responses[1].json()["token"]
    responses.append(client.get("/api/auth/profile", headers=bearer(token)))
    responses.append(client.get("/api/auth/verify", headers=bearer(token)))
    for resp in responses:
        assert resp.status_code in (200, 201)
        assert "password" not in resp.text
        assert ANA["password"] not in resp.text


def test_staff_role_is_forced_to_lowest(client):
    resp = register(client, "trabajador", rol="admin")
    assert resp.status_code == 201
    assert resp.json()["user"]["rol"] == "empleado"
    assert resp.json()["user"]["userType"] == "trabajador"

    resp = login(client, user_type="trabajador")
    assert resp.status_code == 200
    assert resp.json()["user"]["rol"] == "empleado"
    claims = jwt.decode(resp.json()["token"], JWT_SECRET, algorithms=[ALGORITHM])
    assert claims["rol"] == "empleado"
    assert claims["userType"] == "trabajador"


def test_duplicate_username(client):
    register(client)
    resp = register(client, correo="other@example.com")
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "message": "El username ya está en uso", "field": "username"}


def test_duplicate_correo(client):
    register(client)
    resp = register(client, username="otheruser")
    assert resp.status_code == 400
    assert resp.json()["message"] == "El correo ya está registrado"
    assert resp.json()["field"] == "correo"


def test_duplicate_in_other_class_does_not_block(client):
    assert register(client, "trabajador").status_code == 201
    assert register(client, "cliente").status_code == 201
    assert login(client, user_type="cliente").status_code == 200
    assert login(client, user_type="trabajador").status_code == 200


def test_register_validation_error(client):
    resp = register(client, username="abc")
    assert resp.status_code == 400
    assert resp.json()["message"] == "El usuario debe tener al menos 4 caracteres"

    resp = register(client, password="has a space")
    assert resp.status_code == 400


def test_register_missing_field(client):
    resp = client.post("/api/auth/register/cliente", json={"username": "anagp"})
    assert resp.status_code == 400
    assert resp.json()["message"] == "Todos los campos son requeridos"


def test_register_race_caught_by_unique_constraint(client):
    register(client)

    class StalePrecheckStore(CredentialStore):
        calls = 0

        def find_conflicts(self, user_type, username, correo):
            self.calls += 1
            if self.calls == 1:
                return StoreResult(success=True)
            return super().find_conflicts(user_type, username, correo)

    app.dependency_overrides[get_credential_store] = lambda: StalePrecheckStore(SessionLocal)
    resp = register(client, correo="other@example.com")
    assert resp.status_code == 400
    assert resp.json()["message"] == "El username ya está en uso"


# --- login ------------------------------------------------------------------

def test_login_invalid_user_type_never_reaches_store(client):
    class UntouchableStore:
        def __getattr__(self, name):
            raise AssertionError(f"store.{name} called")

    app.dependency_overrides[get_credential_store] = UntouchableStore
    resp = login(client, user_type="admin")
    assert resp.status_code == 400
    assert resp.json()["message"] == 'userType debe ser "cliente" o "trabajador"'


def test_login_unknown_user(client):
    resp = login(client)
    assert resp.status_code == 401
    assert resp.json()["message"] == "Cliente no encontrado o inactivo"

    resp = login(client, user_type="trabajador")
    assert resp.status_code == 401
    assert resp.json()["message"] == "Trabajador no encontrado o inactivo"


def test_login_wrong_password(client):
    register(client)
    resp = login(client, password="Secret124")
    assert resp.status_code == 401
    assert resp.json()["message"] == "Contraseña incorrecta"
    assert "token" not in resp.json()


def test_login_inactive_account(client):
    register(client)
    with SessionLocal() as session:
        session.execute(update(Cliente).values(activo=False))
        session.commit()
    assert login(client).status_code == 401


def test_login_input_shape(client):
    assert login(client, username="ana.gp").status_code == 400
    assert login(client, username="a" * 51).status_code == 400
    assert login(client, password="p" * 101).status_code == 400
    resp = client.post("/api/auth/login", json={"username": "anagp"})
    assert resp.status_code == 400
    resp = client.post("/api/auth/login", json={"username": 123, "password": "x", "userType": "cliente"})
    assert resp.status_code == 400
    assert resp.json()["success"] is False


def test_login_updates_last_login(client):
    token = token_for(client)
    user = client.get("/api/auth/profile", headers=bearer(token)).json()["user"]
    assert user["fecha_ultimo_login"] is not None


def test_login_survives_last_login_failure(client):
    register(client)

    class ReadOnlyStore(CredentialStore):
        def touch_last_login(self, user_type, user_id):
            return StoreResult(success=False, message="read-only")

    app.dependency_overrides[get_credential_store] = lambda: ReadOnlyStore(SessionLocal)
    resp = login(client)
    assert resp.status_code == 200
    assert resp.json()["token"]


def test_login_store_failure_is_internal_error(client):
    class DownStore(CredentialStore):
        def find_active_by_username(self, user_type, username):
            return StoreResult(success=False, message="connection refused")

    app.dependency_overrides[get_credential_store] = lambda: DownStore(SessionLocal)
    resp = login(client)
    assert resp.status_code == 500
    assert resp.json()["message"] == "Error interno del servidor"
    # detail is only exposed in development
    assert resp.json()["error"] == "connection refused"


# --- tokens -----------------------------------------------------------------

def test_verify(client):
    token = token_for(client)
    resp = client.get("/api/auth/verify", headers=bearer(token))
    assert resp.status_code == 200
    assert resp.json()["user"]["username"] == "anagp"
    assert resp.json()["user"]["userType"] == "cliente"


def test_verify_missing_token(client):
    resp = client.get("/api/auth/verify")
    assert resp.status_code == 401
    assert resp.json()["message"] == "Token no proporcionado"
    assert resp.headers["www-authenticate"] == "Bearer"


def test_forged_and_expired_tokens_fail_uniformly(client):
    claims = {"id": 1, "username": "anagp", "userType": "cliente"}
    forged = jwt.encode(
        dict(claims, exp=datetime.now(timezone.utc) + timedelta(hours=1)),
        "another-secret",
        algorithm=ALGORITHM,
    )
    expired = create_access_token(claims, expires_delta=timedelta(seconds=-10))

    bodies = []
    for token in (forged, expired, "garbage"):
        for path in ("/api/auth/verify", "/api/auth/profile"):
            resp = client.get(path, headers=bearer(token))
            assert resp.status_code == 401
            bodies.append(resp.json())
    assert all(body == {"success": False, "message": "Token inválido o expirado"} for body in bodies)


# --- profile ----------------------------------------------------------------

def test_profile_cliente(client):
    token = token_for(client, telefono="555-123-4567")
    resp = client.get("/api/auth/profile", headers=bearer(token))
    assert resp.status_code == 200
    user = resp.json()["user"]
    assert user["username"] == "anagp"
    assert user["nombre"] == "Ana Gomez"
    assert user["telefono"] == "555-123-4567"
    assert user["userType"] == "cliente"
    assert user["fecha_registro"] is not None


def test_profile_trabajador(client):
    token = token_for(client, "trabajador")
    user = client.get("/api/auth/profile", headers=bearer(token)).json()["user"]
    assert user["rol"] == "empleado"
    assert user["fecha_creacion"] is not None
    assert user["userType"] == "trabajador"


def test_profile_of_deactivated_account(client):
    token = token_for(client)
    with SessionLocal() as session:
        session.execute(update(Cliente).values(activo=False))
        session.commit()
    resp = client.get("/api/auth/profile", headers=bearer(token))
    assert resp.status_code == 404
    assert resp.json()["message"] == "Usuario no encontrado"


def test_profile_rejects_unknown_user_class(client):
    token = create_access_token({"id": 1, "username": "ghost", "userType": "admin"})
    resp = client.get("/api/auth/profile", headers=bearer(token))
    assert resp.status_code == 401


# --- ambient endpoints ------------------------------------------------------

def test_diagnostics_require_token(client):
    assert client.get("/api/auth/listar-tablas").status_code == 401
    assert client.get("/api/auth/verificar-tabla").status_code == 401


def test_diagnostics(client):
    token = token_for(client)
    resp = client.get("/api/auth/listar-tablas", headers=bearer(token))
    assert resp.status_code == 200
    names = [t["table_name"] for t in resp.json()["tables"]]
    assert {"clientes", "trabajadores"} <= set(names)

    resp = client.get("/api/auth/verificar-tabla", headers=bearer(token))
    assert resp.status_code == 200
    assert resp.json()["tableExists"] is False


def test_health_and_root(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json()["success"] is True
    assert resp.json()["database"] == "sqlite"
    assert resp.headers["x-content-type-options"] == "nosniff"

    assert client.get("/").json()["endpoints"]["login"] == "POST /api/auth/login"


def test_unknown_route(client):
    resp = client.get("/api/nope")
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "message": "Ruta no encontrada: GET /api/nope"}


def test_register_without_body_uses_required_field_check(client):
    resp = client.post("/api/auth/register/cliente")
    assert resp.status_code == 400
    assert resp.json()["message"] == "Todos los campos son requeridos"

    resp = client.post("/api/auth/register/trabajador")
    assert resp.json()["message"] == "Todos los campos son requeridos"


def test_login_without_body_uses_required_field_check(client):
    resp = client.post("/api/auth/login")
    assert resp.status_code == 400
    assert resp.json()["message"] == "Username, password y userType son requeridos"


def test_error_detail_hidden_unless_development(client, monkeypatch):
    class DownStore(CredentialStore):
        def find_active_by_username(self, user_type, username):
            return StoreResult(success=False, message="connection refused")

    monkeypatch.setattr("cinemax.main.SHOW_ERROR_DETAIL", False)
    app.dependency_overrides[get_credential_store] = lambda: DownStore(SessionLocal)
    resp = login(client)
    assert resp.status_code == 500
    assert resp.json() == {"success": False, "message": "Error interno del servidor"}
