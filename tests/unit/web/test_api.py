"""
Web API tests

Routes over an in-memory store. ASGITransport does not run the lifespan,
so services are installed directly with set_services.
"""

from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from adapters.mock.ledger_store import InMemoryLedgerStore
from adapters.mock.messenger import MockMessenger
from core.config.loader import get_settings
from core.domain.errors import (
    AlreadySeededError,
    ConstraintViolation,
    DuplicateWinnerError,
    InvariantViolation,
    NotFound,
    StoreError,
    ValidationError,
)
from core.ledger import LedgerEngine, LedgerHistory
from core.messaging import Broadcaster
from web.app import app
from web.dependencies import SchemeServices, get_app_settings, set_services
from web.errors import status_code_for

START = "september_2025"
OCTOBER = "october_2025"


@pytest_asyncio.fixture
async def client(engine: LedgerEngine, history: LedgerHistory, broadcaster: Broadcaster) -> AsyncClient:
    set_services(SchemeServices(engine=engine, history=history, broadcaster=broadcaster))
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    set_services(None)
    app.dependency_overrides.clear()


async def add(client: AsyncClient, name: str, mobile: str = "9876543210", **fields) -> dict:
    response = await client.post(
        f"/api/months/{START}/members",
        json={"full_name": name, "mobile_number": mobile, **fields},
    )
    assert response.status_code == 201, response.text
    return response.json()


class TestErrorMapping:
    """status_code_for"""

    @pytest.mark.parametrize(
        "error, status",
        [
            (ValidationError("x"), 422),
            (NotFound("x"), 404),
            (InvariantViolation("x"), 409),
            (DuplicateWinnerError("x"), 409),
            (AlreadySeededError("x"), 409),
            (StoreError("x"), 503),
            (ConstraintViolation("x"), 503),
        ],
    )
    def test_status(self, error, status: int) -> None:
        """Ledger error to HTTP status"""
        assert status_code_for(error) == status


class TestHealth:
    @pytest.mark.asyncio
    async def test_health(self, client: AsyncClient, settings_file: Path) -> None:
        """Scheme name and starting month from settings"""
        app.dependency_overrides[get_app_settings] = lambda: get_settings(settings_file)

        response = await client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["scheme"] == "TEST SCHEME"
        assert body["starting_month"] == "january_2026"

    @pytest.mark.asyncio
    async def test_services_not_ready(self) -> None:
        """503 before the lifespan installed the engine"""
        set_services(None)
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            response = await ac.get(f"/api/months/{START}/members")

        assert response.status_code == 503


class TestMemberRoutes:
    """/api/months/{month}/members"""

    @pytest.mark.asyncio
    async def test_add_and_list(self, client: AsyncClient) -> None:
        """Created members come back in name order"""
        await add(client, "bilal")
        created = await add(client, "Asha", family="Begum")

        assert created["family"] == "Begum"
        assert created["payment_status"] == "pending"
        assert created["draw_status"] == "not_drawn"

        response = await client.get(f"/api/months/{START}/members")
        assert [m["full_name"] for m in response.json()] == ["Asha", "bilal"]

    @pytest.mark.asyncio
    async def test_add_to_later_month(self, client: AsyncClient) -> None:
        """Only the starting month accepts new members"""
        response = await client.post(
            f"/api/months/{OCTOBER}/members",
            json={"full_name": "Asha", "mobile_number": "1"},
        )

        assert response.status_code == 409
        body = response.json()
        assert body["error"] == "InvariantViolation"
        assert body["month"] == OCTOBER
        assert START in body["message"]

    @pytest.mark.asyncio
    async def test_blank_name(self, client: AsyncClient) -> None:
        """Engine validation is a 422 with the field"""
        response = await client.post(
            f"/api/months/{START}/members",
            json={"full_name": "  ", "mobile_number": "1"},
        )

        assert response.status_code == 422
        assert response.json()["field"] == "full_name"

    @pytest.mark.asyncio
    async def test_unknown_month(self, client: AsyncClient) -> None:
        """Months outside the sequence"""
        response = await client.get("/api/months/june_2040/members")

        assert response.status_code == 404
        assert response.json()["error"] == "NotFound"

    @pytest.mark.asyncio
    async def test_get_update_delete(self, client: AsyncClient) -> None:
        """Member lifecycle"""
        member = await add(client, "Asha")
        url = f"/api/months/{START}/members/{member['id']}"

        response = await client.patch(url, json={"payment_status": "paid", "paid_to": "Rafi"})
        assert response.status_code == 200
        assert response.json()["payment_status"] == "paid"
        assert response.json()["paid_to"] == "Rafi"

        assert (await client.get(url)).json()["paid_to"] == "Rafi"

        assert (await client.delete(url)).status_code == 204
        assert (await client.get(url)).status_code == 404

    @pytest.mark.asyncio
    async def test_locked_payment(self, client: AsyncClient) -> None:
        """Winner payment fields are locked, notes are not"""
        member = await add(client, "Asha")
        await client.post(f"/api/months/{START}/winner", json={"member_id": member["id"]})
        url = f"/api/months/{START}/members/{member['id']}"

        locked = await client.patch(url, json={"payment_status": "paid"})
        notes = await client.patch(url, json={"additional_information": "gold coin"})

        assert locked.status_code == 409
        assert locked.json()["field"] == "payment_status"
        assert notes.status_code == 200

    @pytest.mark.asyncio
    async def test_draw_status_edits(self, client: AsyncClient) -> None:
        """Winner markers are not accepted by PATCH, a declared win cannot be undone"""
        asha = await add(client, "Asha")
        bilal = await add(client, "Bilal")
        await client.post(f"/api/months/{START}/winner", json={"member_id": asha["id"]})

        marker = await client.patch(
            f"/api/months/{START}/members/{bilal['id']}", json={"draw_status": f"winner_{START}"}
        )
        undo = await client.patch(
            f"/api/months/{START}/members/{asha['id']}", json={"draw_status": "not_drawn"}
        )

        assert marker.status_code == 422
        assert undo.status_code == 409
        assert undo.json()["field"] == "draw_status"
        assert (await client.get(f"/api/months/{START}/winner")).json()["id"] == asha["id"]

    @pytest.mark.asyncio
    async def test_families_and_unpaid(self, client: AsyncClient) -> None:
        """Family lookups and unpaid list"""
        await add(client, "Asha", family="Begum", payment_status="paid")
        await add(client, "Zara", mobile="", family="Begum", share_family_mobile=True)
        await add(client, "Ravi", mobile="9000000001")

        families = await client.get(f"/api/months/{START}/families")
        begum = await client.get(f"/api/months/{START}/families/Begum")
        unpaid = await client.get(f"/api/months/{START}/unpaid")

        assert families.json() == ["Begum"]
        assert [m["mobile_number"] for m in begum.json()] == ["9876543210", "9876543210"]
        assert [m["full_name"] for m in unpaid.json()] == ["Ravi", "Zara"]

    @pytest.mark.asyncio
    async def test_store_failure(self, client: AsyncClient, store: InMemoryLedgerStore) -> None:
        """Store errors are a 503"""
        store.failing_months.add(START)

        response = await client.get(f"/api/months/{START}/members")

        assert response.status_code == 503
        assert response.json()["error"] == "StoreError"


class TestSchemeFlow:
    """Tokens, winner, advance"""

    @pytest.mark.asyncio
    async def test_tokens(self, client: AsyncClient) -> None:
        """Assign then audit"""
        await add(client, "Charu")
        await add(client, "Asha")

        assigned = await client.post(f"/api/months/{START}/tokens")
        audit = await client.get(f"/api/months/{START}/tokens")

        assert [(m["full_name"], m["token_number"]) for m in assigned.json()] == [("Asha", 1), ("Charu", 2)]
        assert audit.json()["is_consistent"] is True

    @pytest.mark.asyncio
    async def test_tokens_empty_roster(self, client: AsyncClient) -> None:
        """Numbering an empty month is a conflict"""
        response = await client.post(f"/api/months/{START}/tokens")

        assert response.status_code == 409
        assert response.json()["error"] == "EmptyRosterError"

    @pytest.mark.asyncio
    async def test_winner(self, client: AsyncClient) -> None:
        """Declare once, second declaration conflicts"""
        asha = await add(client, "Asha")
        bilal = await add(client, "Bilal")
        url = f"/api/months/{START}/winner"

        assert (await client.get(url)).json() is None

        declared = await client.post(url, json={"member_id": asha["id"]})
        second = await client.post(url, json={"member_id": bilal["id"]})

        assert declared.status_code == 200
        assert declared.json()["draw_status"] == f"winner_{START}"
        assert second.status_code == 409
        assert second.json()["error"] == "DuplicateWinnerError"
        assert (await client.get(url)).json()["id"] == asha["id"]

    @pytest.mark.asyncio
    async def test_eligible(self, client: AsyncClient) -> None:
        """Paid and tokened only"""
        await add(client, "Asha", payment_status="paid")
        await add(client, "Bilal")
        await client.post(f"/api/months/{START}/tokens")

        response = await client.get(f"/api/months/{START}/eligible")

        assert [m["full_name"] for m in response.json()] == ["Asha"]

    @pytest.mark.asyncio
    async def test_advance(self, client: AsyncClient) -> None:
        """Advance once, second attempt conflicts"""
        asha = await add(client, "Asha")
        await add(client, "Bilal")
        await client.post(f"/api/months/{START}/winner", json={"member_id": asha["id"]})

        first = await client.post(f"/api/months/{START}/advance")
        second = await client.post(f"/api/months/{START}/advance")

        assert first.json() == {"current_month": START, "next_month": OCTOBER, "member_count": 2}
        assert second.status_code == 409
        assert second.json()["error"] == "AlreadySeededError"

        stats = (await client.get(f"/api/months/{OCTOBER}/stats")).json()
        assert stats["no_payment_required"] == 1
        assert stats["pending"] == 1
        assert stats["has_winner"] is False

    @pytest.mark.asyncio
    async def test_reconcile(self, client: AsyncClient) -> None:
        """Nothing to correct right after an advance"""
        await add(client, "Asha")
        await client.post(f"/api/months/{START}/advance")

        response = await client.post(f"/api/months/{OCTOBER}/reconcile")

        assert response.json() == {"month": OCTOBER, "corrected": []}


class TestOverviewRoutes:
    """Months, winners, history"""

    @pytest.mark.asyncio
    async def test_months(self, client: AsyncClient) -> None:
        """Sequence with member counts"""
        await add(client, "Asha")

        body = (await client.get("/api/months")).json()

        assert body["starting_month"] == START
        assert body["last_month"] == "december_2026"
        assert len(body["months"]) == 16
        assert body["months"][0] == {
            "month": START,
            "display_name": "September 2025",
            "index": 0,
            "member_count": 1,
        }
        assert body["months"][1]["member_count"] == 0

    @pytest.mark.asyncio
    async def test_winners_and_history(self, client: AsyncClient) -> None:
        """Winner board and one member across months"""
        asha = await add(client, "Asha", mobile="9000000001")
        await client.post(f"/api/months/{START}/winner", json={"member_id": asha["id"]})
        await client.post(f"/api/months/{START}/advance")

        winners = (await client.get("/api/winners")).json()
        history = (
            await client.get("/api/history", params={"name": "Asha", "mobile": "9000000001"})
        ).json()

        assert winners["total_winners"] == 1
        assert winners["winners"][0]["winner"]["full_name"] == "Asha"
        assert winners["winners"][1]["winner"] is None
        assert history["history"][0]["record"]["draw_status"] == f"winner_{START}"
        assert history["history"][1]["record"]["draw_status"] == "drawn"
        assert history["history"][2]["record"] is None


class TestMessageRoutes:
    """/api/months/{month}/messages/{kind}"""

    @pytest.mark.asyncio
    async def test_reminders(self, client: AsyncClient, messenger: MockMessenger) -> None:
        """Unpaid members only"""
        await add(client, "Asha", mobile="9000000001", payment_status="paid")
        await add(client, "Bilal", mobile="9000000002")

        response = await client.post(f"/api/months/{START}/messages/reminders")

        body = response.json()
        assert body["kind"] == "reminders"
        assert body["success"] is True
        assert body["sent"] == 1
        assert [m.mobile_number for m in messenger.messages] == ["9000000002"]

    @pytest.mark.asyncio
    async def test_receipts_report_failures(self, client: AsyncClient, messenger: MockMessenger) -> None:
        """Failed deliveries are listed"""
        await add(client, "Asha", mobile="9000000001", payment_status="paid")
        messenger.fail_numbers.add("9000000001")

        body = (await client.post(f"/api/months/{START}/messages/receipts")).json()

        assert body["success"] is False
        assert body["errors"][0]["member_name"] == "Asha"

    @pytest.mark.asyncio
    async def test_unknown_kind(self, client: AsyncClient) -> None:
        """Unknown message kind is rejected by path validation"""
        response = await client.post(f"/api/months/{START}/messages/birthday")

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_whatsapp_status_without_backend(self, client: AsyncClient) -> None:
        """Mock messenger has no backend status"""
        response = await client.get("/api/whatsapp/status")

        assert response.status_code == 503
