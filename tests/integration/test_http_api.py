import httpx
import pytest

from qrwallet.core.security import create_access_token
from qrwallet.main import create_app
from qrwallet.modules.movements import ActorRole


@pytest.fixture
async def client(container):
    app = create_app(container)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def auth(container):
    def build(actor_id: str, role: ActorRole) -> dict[str, str]:
        token = create_access_token(actor_id, role, settings=container.settings)
        return {"Authorization": f"Bearer {token}"}

    return build


@pytest.fixture
def admin(auth):
    return auth("admin-1", ActorRole.ADMIN)


@pytest.fixture
def verifier(auth):
    return auth("officer-1", ActorRole.VERIFYING_OFFICER)


@pytest.fixture
def service(auth):
    return auth("officer-2", ActorRole.SERVICE_OFFICER)


async def _enroll(client, admin, account_id="acct-http") -> str:
    response = await client.post("/api/accounts", json={"account_id": account_id}, headers=admin)
    assert response.status_code == 201, response.text
    return response.json()["token"]


def _credit_body(token, amount="20.00", **extra):
    body = {"token": token, "amount": amount, "description": "Collected phones", "category": "verified_credit"}
    body.update(extra)
    return body


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


async def test_full_flow(client, admin, verifier, service):
    token = await _enroll(client, admin)

    presented = await client.post("/api/tokens/present", json={"token": token}, headers=verifier)
    assert presented.status_code == 200
    assert presented.json()["account_id"] == "acct-http"
    assert presented.json()["wallet"]["balance"] == "0.00"
    assert presented.json()["scan"]["scan_count"] == 1

    credit = await client.post("/api/transfers/credit", json=_credit_body(token), headers=verifier)
    assert credit.status_code == 200, credit.text
    assert credit.json()["balance_after"] == "20.00"
    assert credit.json()["provenance"]["unit"] == "verification"

    debit = await client.post(
        "/api/transfers/debit",
        json={"token": token, "amount_cents": 500, "description": "Bus fare", "category": "service"},
        headers=service,
    )
    assert debit.status_code == 200, debit.text
    assert debit.json()["balance_after"] == "15.00"
    assert debit.json()["provenance"] is None

    wallet = await client.get("/api/accounts/acct-http/wallet", headers=admin)
    assert wallet.json()["balance"] == "15.00"
    assert wallet.json()["movement_count"] == 2

    movements = await client.get("/api/accounts/acct-http/movements", headers=admin)
    assert [m["sequence"] for m in movements.json()["movements"]] == [2, 1]

    audit = await client.get("/api/accounts/acct-http/audit", headers=admin)
    assert audit.json()["consistent"] is True
    assert audit.json()["balance"] == "15.00"


async def test_roles_are_enforced(client, admin, service, auth):
    token = await _enroll(client, admin)

    response = await client.post("/api/transfers/credit", json=_credit_body(token), headers=service)
    assert response.status_code == 403

    participant = auth("acct-http", ActorRole.PARTICIPANT)
    response = await client.post("/api/tokens/present", json={"token": token}, headers=participant)
    assert response.status_code == 403

    response = await client.get("/api/accounts/acct-http/wallet", headers=service)
    assert response.status_code == 403

    response = await client.post("/api/accounts", json={"account_id": "x"})
    assert response.status_code in (401, 403)

    response = await client.get("/api/accounts/acct-http/wallet", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 401


async def test_ledger_errors_map_to_codes(client, admin, verifier, service):
    token = await _enroll(client, admin)

    response = await client.post("/api/transfers/credit", json=_credit_body("nope"), headers=verifier)
    assert response.status_code == 404
    assert response.json()["code"] == "invalid_token"

    response = await client.post(
        "/api/transfers/debit",
        json={"token": token, "amount": "1.00", "description": "Fare", "category": "service"},
        headers=service,
    )
    assert response.status_code == 409
    assert response.json()["code"] == "insufficient_balance"

    response = await client.post("/api/transfers/credit", json=_credit_body(token, "1000.01"), headers=verifier)
    assert response.status_code == 422
    assert response.json()["code"] == "validation_error"

    response = await client.post("/api/accounts", json={"account_id": "acct-http"}, headers=admin)
    assert response.status_code == 409
    assert response.json()["code"] == "account_exists"

    response = await client.get("/api/accounts/missing/wallet", headers=admin)
    assert response.status_code == 404
    assert response.json()["code"] == "account_not_found"

    response = await client.get("/api/admin/movements?limit=0", headers=admin)
    assert response.status_code == 422
    assert response.json()["code"] == "validation_error"


async def test_float_amounts_are_rejected(client, admin, verifier):
    token = await _enroll(client, admin)
    response = await client.post(
        "/api/transfers/credit",
        json={"token": token, "amount": 20.5, "description": "x", "category": "verified_credit"},
        headers=verifier,
    )
    assert response.status_code == 422


async def test_freeze_blocks_transfers(client, admin, verifier):
    token = await _enroll(client, admin)

    response = await client.post("/api/admin/accounts/acct-http/freeze", json={"frozen": True}, headers=admin)
    assert response.status_code == 200
    assert response.json()["frozen"] is True

    response = await client.post("/api/transfers/credit", json=_credit_body(token), headers=verifier)
    assert response.status_code == 409
    assert response.json()["code"] == "frozen"


async def test_token_lifecycle(client, admin, verifier):
    token = await _enroll(client, admin)

    response = await client.post("/api/admin/accounts/acct-http/token/deactivate", headers=admin)
    assert response.status_code == 200
    assert response.json()["active"] is False
    assert response.json()["token"] is None

    response = await client.post("/api/tokens/present", json={"token": token}, headers=verifier)
    assert response.status_code == 403
    assert response.json()["code"] == "token_inactive"

    response = await client.post("/api/admin/accounts/acct-http/token/reactivate", headers=admin)
    assert response.json()["active"] is True

    response = await client.post("/api/admin/accounts/acct-http/token/reissue", headers=admin)
    new_token = response.json()["token"]
    assert new_token and new_token != token

    response = await client.post("/api/tokens/present", json={"token": token}, headers=verifier)
    assert response.status_code == 404
    response = await client.post("/api/tokens/present", json={"token": new_token}, headers=verifier)
    assert response.status_code == 200

    status = await client.get("/api/admin/accounts/acct-http/token", headers=admin)
    assert status.json()["scan_count"] == 1


async def test_admin_adjust_and_search(client, admin):
    await _enroll(client, admin)

    response = await client.post(
        "/api/admin/accounts/acct-http/adjust",
        json={"kind": "credit", "amount": "2.505", "description": "Opening balance"},
        headers=admin,
    )
    assert response.status_code == 200, response.text
    assert response.json()["amount"] == "2.51"

    response = await client.get("/api/admin/movements?category=admin_adjustment&actor_id=admin-1", headers=admin)
    movements = response.json()["movements"]
    assert len(movements) == 1
    assert movements[0]["actor_role"] == "admin"


@pytest.fixture
def participant(auth):
    return auth("acct-http", ActorRole.PARTICIPANT)


async def test_participant_reads_own_views(client, admin, verifier, service, participant):
    token = await _enroll(client, admin)
    await client.post("/api/transfers/credit", json=_credit_body(token), headers=verifier)
    await client.post(
        "/api/transfers/debit",
        json={"token": token, "amount": "5.00", "description": "Bus fare", "category": "service"},
        headers=service,
    )

    wallet = await client.get("/api/me/wallet", headers=participant)
    assert wallet.status_code == 200, wallet.text
    assert wallet.json()["balance"] == "15.00"

    movements = (await client.get("/api/me/movements", headers=participant)).json()["movements"]
    assert [m["kind"] for m in movements] == ["debit", "credit"]

    provenance = (await client.get("/api/me/provenance", headers=participant)).json()
    assert provenance["artifact_count"] == 1
    assert provenance["total_value"] == "20.00"
    assert provenance["artifacts"][0]["unit"] == "verification"
    assert provenance["artifacts"][0]["verified_by"] == "officer-1"

    own_token = (await client.get("/api/me/token", headers=participant)).json()
    assert own_token["token"] == token
    assert own_token["scan_count"] == 2


async def test_participant_views_are_role_gated(client, admin, auth, participant, verifier):
    token = await _enroll(client, admin)

    response = await client.post("/api/transfers/credit", json=_credit_body(token), headers=participant)
    assert response.status_code == 403
    response = await client.get("/api/me/wallet", headers=verifier)
    assert response.status_code == 403

    stranger = auth("acct-unknown", ActorRole.PARTICIPANT)
    response = await client.get("/api/me/wallet", headers=stranger)
    assert response.status_code == 404
    assert response.json()["code"] == "account_not_found"


async def test_admin_movement_detail_includes_provenance(client, admin, verifier):
    token = await _enroll(client, admin)
    credit = await client.post(
        "/api/transfers/credit",
        json=_credit_body(
            token,
            "12.00",
            provenance={"item_category": "Phones", "quantity": "3", "value_per_unit_cents": 400},
        ),
        headers=verifier,
    )
    movement_id = credit.json()["movement_id"]

    detail = await client.get(f"/api/admin/movements/{movement_id}", headers=admin)
    assert detail.status_code == 200, detail.text
    body = detail.json()
    assert body["movement"]["amount"] == "12.00"
    assert body["provenance"]["movement_id"] == movement_id
    assert body["provenance"]["item_category"] == "Phones"
    assert body["provenance"]["total_value"] == "12.00"

    listing = (await client.get("/api/accounts/acct-http/provenance", headers=admin)).json()
    assert listing["artifact_count"] == 1
    assert listing["artifacts"][0]["id"] == body["provenance"]["id"]

    missing = await client.get("/api/admin/movements/no-such-movement", headers=admin)
    assert missing.status_code == 404
    assert missing.json()["code"] == "movement_not_found"
