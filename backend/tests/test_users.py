from conftest import API, ADMIN_PASSWORD, bearer, ensure_user, login

from coperex.core.config import settings
from coperex.db.session import SessionLocal
from coperex.models.user import User


def get_user_row(user_id: int) -> User:
    db = SessionLocal()
    try:
        return db.get(User, user_id)
    finally:
        db.close()


def seed_admin_id() -> int:
    db = SessionLocal()
    try:
        return db.query(User).filter(User.username == settings.seed_admin_username).one().id
    finally:
        db.close()


def test_list_users_total_ignores_pagination(client, admin_headers):
    for name in ["ana", "beto", "ciro", "dana"]:
        ensure_user(name)
    ensure_user("eliminado", status=False)

    r = client.get(f"{API}/user", params={"limite": 2, "desde": 1}, headers=admin_headers)
    assert r.status_code == 200, r.text
    body = r.json()
    # seed admin + 4 active users; the inactive one is excluded
    assert body["total"] == 5
    assert [u["username"] for u in body["users"]] == ["ana", "beto"]


def test_list_users_default_page_size_is_five(client, admin_headers):
    for i in range(7):
        ensure_user(f"user{i}")
    body = client.get(f"{API}/user", headers=admin_headers).json()
    assert body["total"] == 8
    assert len(body["users"]) == 5


def test_list_users_rejects_bad_pagination(client, admin_headers):
    r = client.get(f"{API}/user", params={"limite": 0, "desde": "x"}, headers=admin_headers)
    assert r.status_code == 400
    assert {e["field"] for e in r.json()["detail"]["errors"]} == {"limite", "desde"}


def test_user_routes_are_admin_only(client, client_headers):
    assert client.get(f"{API}/user", headers=client_headers).status_code == 403
    assert client.get(f"{API}/user/1", headers=client_headers).status_code == 403
    assert client.put(f"{API}/user/1", json={"name": "X"}, headers=client_headers).status_code == 403
    assert client.delete(f"{API}/user", headers=client_headers).status_code == 403


def test_get_user_by_id(client, admin_headers):
    uid = ensure_user("ana")
    r = client.get(f"{API}/user/{uid}", headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["user"]["email"] == "ana@example.com"

    assert client.get(f"{API}/user/9999", headers=admin_headers).status_code == 404
    assert client.get(f"{API}/user/abc", headers=admin_headers).status_code == 400


def test_admin_update_user(client, admin_headers):
    uid = ensure_user("ana")
    r = client.put(
        f"{API}/user/{uid}",
        json={"name": "  Ana Maria ", "email": "ANA.M@example.com", "role": "ADMIN"},
        headers=admin_headers,
    )
    assert r.status_code == 200, r.text
    user = r.json()["user"]
    assert user["name"] == "Ana Maria"
    assert user["email"] == "ana.m@example.com"
    assert user["role"] == "ADMIN"


def test_admin_update_keeps_own_email_and_rejects_taken_one(client, admin_headers):
    uid = ensure_user("ana")
    ensure_user("beto")
    r = client.put(f"{API}/user/{uid}", json={"email": "ana@example.com"}, headers=admin_headers)
    assert r.status_code == 200

    r2 = client.put(f"{API}/user/{uid}", json={"email": "beto@example.com", "username": "beto"}, headers=admin_headers)
    assert r2.status_code == 400
    assert {e["field"] for e in r2.json()["detail"]["errors"]} == {"email", "username"}
    assert get_user_row(uid).email == "ana@example.com"


def test_update_of_missing_user_is_404(client, admin_headers):
    r = client.put(f"{API}/user/424242", json={"name": "Nobody"}, headers=admin_headers)
    assert r.status_code == 404


def test_update_password_is_rehashed(client, admin_headers):
    uid = ensure_user("ana")
    r = client.put(f"{API}/user/{uid}", json={"password": "N3w!Password"}, headers=admin_headers)
    assert r.status_code == 200
    assert login(client, "ana", "N3w!Password")


def test_self_update_any_role(client, client_headers):
    r = client.put(f"{API}/user", json={"phone": "55559999", "surname": "Lopez"}, headers=client_headers)
    assert r.status_code == 200, r.text
    assert r.json()["user"]["phone"] == "55559999"
    assert r.json()["user"]["surname"] == "Lopez"


def test_self_update_cannot_escalate_role(client, client_headers):
    r = client.put(f"{API}/user", json={"role": "ADMIN"}, headers=client_headers)
    assert r.status_code == 400
    assert r.json()["detail"]["errors"][0]["msg"] == "Only an administrator can change roles"


def test_self_delete_is_logical(client, admin_headers):
    second_admin = ensure_user("jefa", role="ADMIN")
    headers = bearer(login(client, "jefa"))

    r = client.delete(f"{API}/user", headers=headers)
    assert r.status_code == 200, r.text
    assert r.json()["user"] == "jefa"

    row = get_user_row(second_admin)
    assert row is not None
    assert row.status is False

    # Token of a deleted user no longer authenticates
    assert client.get(f"{API}/user", headers=headers).status_code == 401
    usernames = [u["username"] for u in client.get(f"{API}/user", headers=admin_headers).json()["users"]]
    assert "jefa" not in usernames


def test_last_active_admin_cannot_delete_self(client, admin_headers):
    r = client.delete(f"{API}/user", headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["detail"]["errors"][0]["msg"] == "The last active administrator cannot be removed or demoted"

    assert get_user_row(seed_admin_id()).status is True
    assert login(client, settings.seed_admin_username, ADMIN_PASSWORD)


def test_inactive_admins_do_not_count_as_remaining(client, admin_headers):
    ensure_user("retirada", role="ADMIN", status=False)
    assert client.delete(f"{API}/user", headers=admin_headers).status_code == 400


def test_last_active_admin_cannot_be_demoted(client, admin_headers):
    r = client.put(f"{API}/user", json={"role": "CLIENT"}, headers=admin_headers)
    assert r.status_code == 400
    r = client.put(f"{API}/user/{seed_admin_id()}", json={"role": "CLIENT"}, headers=admin_headers)
    assert r.status_code == 400
    assert get_user_row(seed_admin_id()).role == "ADMIN"


def test_admin_can_be_demoted_while_another_remains(client, admin_headers):
    jefa = ensure_user("jefa", role="ADMIN")
    r = client.put(f"{API}/user/{jefa}", json={"role": "CLIENT"}, headers=admin_headers)
    assert r.status_code == 200, r.text
    assert r.json()["user"]["role"] == "CLIENT"


def test_oversized_numbers_are_rejected(client, admin_headers):
    huge = str(10**20)
    r = client.get(f"{API}/user", params={"desde": huge, "limite": 101}, headers=admin_headers)
    assert r.status_code == 400
    assert {e["field"] for e in r.json()["detail"]["errors"]} == {"desde", "limite"}
    assert client.get(f"{API}/user/{huge}", headers=admin_headers).status_code == 400
