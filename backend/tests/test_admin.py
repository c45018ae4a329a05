import csv
import io

import pyotp
import pytest
from httpx import AsyncClient
from sqlalchemy import select, func

from seminar.models import Registration, RegistrationControl, SeminarSettings, SINGLETON_ID

ADMIN_PASSWORD = "adminpassword123"


async def _register(client: AsyncClient, payload: dict) -> dict:
    response = await client.post("/api/v1/registration", json=payload)
    assert response.status_code == 201
    return response.json()["data"]


# ==================== Auth ====================

@pytest.mark.asyncio
async def test_login_success(client: AsyncClient, admin_user):
    response = await client.post(
        "/api/v1/admin/login",
        json={"username": "seminar-admin", "password": ADMIN_PASSWORD}
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["token"]
    assert data["admin"]["username"] == "seminar-admin"
    assert data["admin"]["role"] == "admin"


@pytest.mark.asyncio
async def test_login_invalid_credentials(client: AsyncClient, admin_user):
    response = await client.post(
        "/api/v1/admin/login",
        json={"username": "seminar-admin", "password": "wrongpassword"}
    )

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid credentials"


@pytest.mark.asyncio
async def test_login_missing_fields(client: AsyncClient):
    response = await client.post("/api/v1/admin/login", json={"username": ""})

    assert response.status_code == 400
    fields = {error["field"] for error in response.json()["errors"]}
    assert fields == {"username", "password"}


@pytest.mark.asyncio
async def test_verify_token(client: AsyncClient, admin_auth_headers):
    response = await client.get("/api/v1/admin/verify", headers=admin_auth_headers)

    assert response.status_code == 200
    assert response.json()["data"]["admin"]["username"] == "seminar-admin"


@pytest.mark.asyncio
async def test_admin_routes_require_token(client: AsyncClient):
    """Missing bearer token is rejected by the security scheme"""
    response = await client.get("/api/v1/admin/registrations")

    assert response.status_code in (401, 403)


@pytest.mark.asyncio
async def test_admin_routes_reject_bad_token(client: AsyncClient):
    response = await client.get(
        "/api/v1/admin/registrations",
        headers={"Authorization": "Bearer not-a-jwt"}
    )

    assert response.status_code == 401


# ==================== Controls ====================

@pytest.mark.asyncio
async def test_registration_control_round_trip(client: AsyncClient, db_session, admin_auth_headers):
    response = await client.put(
        "/api/v1/admin/registration-control",
        json={"enabled": False, "message": "Closed for the weekend"},
        headers=admin_auth_headers
    )
    assert response.status_code == 200

    current = await client.get("/api/v1/admin/registration-control", headers=admin_auth_headers)
    data = current.json()["data"]
    assert data["enabled"] is False
    assert data["maintenance_message"] == "Closed for the weekend"

    # Toggling never creates a second row
    rows = await db_session.scalar(select(func.count()).select_from(RegistrationControl))
    assert rows == 1


@pytest.mark.asyncio
async def test_maintenance_message_passthrough(client: AsyncClient, admin_auth_headers, registration_payload):
    await client.put(
        "/api/v1/admin/registration-control",
        json={"enabled": False, "message": "Venue change, back soon"},
        headers=admin_auth_headers
    )

    response = await client.post("/api/v1/registration", json=registration_payload())

    assert response.status_code == 503
    assert response.json()["message"] == "Venue change, back soon"


@pytest.mark.asyncio
async def test_email_control_round_trip(client: AsyncClient, admin_auth_headers):
    response = await client.put(
        "/api/v1/admin/email-control",
        json={"enabled": False},
        headers=admin_auth_headers
    )

    assert response.status_code == 200
    assert response.json()["data"]["enabled"] is False


@pytest.mark.asyncio
async def test_seminar_settings_update(client: AsyncClient, admin_auth_headers):
    settings_body = {
        "title": "Intro to Prompt Engineering",
        "date": "2030-01-15",
        "time": "11:00 AM",
        "location": "Main Auditorium",
        "duration": "2 hours",
        "description": "Hands-on session",
        "instructor_name": "R. Kulkarni",
        "instructor_email": "rk@example.com",
        "max_participants": 40,
    }

    response = await client.put("/api/v1/admin/seminar-settings", json=settings_body, headers=admin_auth_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["max_participants"] == 40
    assert data["availableSlots"] == 40
    assert data["isRegistrationFull"] is False


@pytest.mark.asyncio
async def test_seminar_settings_validation(client: AsyncClient, admin_auth_headers):
    response = await client.put(
        "/api/v1/admin/seminar-settings",
        json={"title": "Hi", "date": "15/01/2030", "max_participants": 0},
        headers=admin_auth_headers
    )

    assert response.status_code == 400
    fields = {error["field"]: error["message"] for error in response.json()["errors"]}
    assert fields["title"] == "Title must be between 5 and 200 characters"
    assert fields["date"] == "Date must be in YYYY-MM-DD format"
    assert fields["max_participants"] == "Max participants must be between 1 and 1000"
    assert "location" in fields


# ==================== Registrations ====================

@pytest.mark.asyncio
async def test_list_registrations_pagination(client: AsyncClient, admin_auth_headers, registration_payload):
    for _ in range(3):
        await _register(client, registration_payload())

    response = await client.get(
        "/api/v1/admin/registrations",
        params={"page": 1, "limit": 2},
        headers=admin_auth_headers
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert len(data["registrations"]) == 2
    assert data["pagination"] == {
        "currentPage": 1,
        "totalPages": 2,
        "totalItems": 3,
        "itemsPerPage": 2,
        "hasNext": True,
        "hasPrev": False,
    }


@pytest.mark.asyncio
async def test_list_registrations_search(client: AsyncClient, admin_auth_headers, registration_payload):
    await _register(client, registration_payload(fullName="Meera Joshi"))
    await _register(client, registration_payload(fullName="Rohan Desai"))

    response = await client.get(
        "/api/v1/admin/registrations",
        params={"search": "meera"},
        headers=admin_auth_headers
    )

    registrations = response.json()["data"]["registrations"]
    assert [r["fullName"] for r in registrations] == ["Meera Joshi"]


@pytest.mark.asyncio
async def test_get_unknown_registration(client: AsyncClient, admin_auth_headers):
    response = await client.get(
        "/api/v1/admin/registrations/00000000-0000-0000-0000-000000000000",
        headers=admin_auth_headers
    )

    assert response.status_code == 404
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_stored_ip_ignores_forwarded_header(client: AsyncClient, admin_auth_headers, registration_payload):
    response = await client.post(
        "/api/v1/registration",
        json=registration_payload(),
        headers={"X-Forwarded-For": "198.51.100.23"}
    )
    created = response.json()["data"]

    detail = await client.get(f"/api/v1/admin/registrations/{created['id']}", headers=admin_auth_headers)

    assert detail.status_code == 200
    assert detail.json()["data"]["ipAddress"] == "127.0.0.1"


@pytest.mark.asyncio
async def test_update_registration(client: AsyncClient, admin_auth_headers, registration_payload):
    created = await _register(client, registration_payload())
    update = registration_payload(fullName="Asha P Patil", email=created["email"], branch="Cybersecurity")

    response = await client.put(
        f"/api/v1/admin/registrations/{created['id']}",
        json=update,
        headers=admin_auth_headers
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["fullName"] == "Asha P Patil"
    assert data["branch"] == "Cybersecurity"


@pytest.mark.asyncio
async def test_update_registration_email_conflict(client: AsyncClient, admin_auth_headers, registration_payload):
    first = await _register(client, registration_payload())
    second = await _register(client, registration_payload())

    response = await client.put(
        f"/api/v1/admin/registrations/{second['id']}",
        json=registration_payload(email=first["email"]),
        headers=admin_auth_headers
    )

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_delete_frees_seat_and_email(client: AsyncClient, db_session, admin_auth_headers, registration_payload):
    """Soft delete drops the row from counts and lets the email register again"""
    payload = registration_payload()
    created = await _register(client, payload)

    response = await client.delete(f"/api/v1/admin/registrations/{created['id']}", headers=admin_auth_headers)
    assert response.status_code == 200

    stats = await client.get("/api/v1/registration/stats")
    assert stats.json()["data"]["totalRegistrations"] == 0

    seats = await db_session.scalar(
        select(SeminarSettings.seats_taken).where(SeminarSettings.id == SINGLETON_ID)
    )
    assert seats == 0

    again = await client.post("/api/v1/registration", json=payload)
    assert again.status_code == 201

    removed = await client.get(
        "/api/v1/admin/registrations",
        params={"status": "removed"},
        headers=admin_auth_headers
    )
    assert removed.json()["data"]["pagination"]["totalItems"] == 1

    rows = await db_session.scalar(select(func.count()).select_from(Registration))
    assert rows == 2


# ==================== Reports ====================

@pytest.mark.asyncio
async def test_statistics_report(client: AsyncClient, admin_auth_headers, registration_payload):
    await _register(client, registration_payload())

    response = await client.get("/api/v1/admin/statistics", headers=admin_auth_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["basic"]["totalRegistrations"] == 1
    assert data["basic"]["emailsSent"] == 1
    assert data["branch"] == [{"branch": "IT", "count": 1}]
    assert len(data["recent"]) == 1
    assert data["generatedAt"].endswith("Z")


@pytest.mark.asyncio
async def test_export_csv(client: AsyncClient, admin_auth_headers, registration_payload):
    created = await _register(client, registration_payload(fullName="Kiran Rao"))

    response = await client.get("/api/v1/admin/export/csv", headers=admin_auth_headers)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert 'filename="registrations-' in response.headers["content-disposition"]

    rows = list(csv.reader(io.StringIO(response.text)))
    assert rows[0] == [
        "ID", "Full Name", "Email", "Phone", "Branch", "Year of Study",
        "Workshop Attendance", "GitHub Username", "Registration Date",
        "Email Sent", "IP Address",
    ]
    assert rows[1][0] == created["id"]
    assert rows[1][1] == "Kiran Rao"
    assert rows[1][9] == "Yes"


@pytest.mark.asyncio
async def test_send_reminders(client: AsyncClient, admin_auth_headers, registration_payload, notifier):
    notifier.fail = True
    await _register(client, registration_payload())
    notifier.fail = False

    await client.put(
        "/api/v1/admin/seminar-settings",
        json={
            "title": "Intro to Prompt Engineering",
            "date": "2099-01-15",
            "time": "10:00 AM",
            "location": "Main Auditorium",
            "duration": "2 hours",
            "instructor_name": "R. Kulkarni",
            "instructor_email": "rk@example.com",
            "max_participants": 40,
        },
        headers=admin_auth_headers
    )

    response = await client.post("/api/v1/admin/send-reminders", headers=admin_auth_headers)

    assert response.status_code == 200
    assert response.json()["data"]["total"] == 1
    assert response.json()["data"]["sent"] == 1
    assert len(notifier.reminders) == 1


@pytest.mark.asyncio
async def test_send_reminders_email_disabled(client: AsyncClient, admin_auth_headers):
    await client.put("/api/v1/admin/email-control", json={"enabled": False}, headers=admin_auth_headers)

    response = await client.post("/api/v1/admin/send-reminders", headers=admin_auth_headers)

    assert response.status_code == 409
    assert response.json()["message"] == "Email service is disabled"


# ==================== Profile ====================

@pytest.mark.asyncio
async def test_update_profile(client: AsyncClient, admin_auth_headers):
    response = await client.put(
        "/api/v1/admin/profile",
        json={"username": "lead-admin", "email": "lead@example.com"},
        headers=admin_auth_headers
    )

    assert response.status_code == 200
    assert response.json()["data"]["username"] == "lead-admin"


@pytest.mark.asyncio
async def test_change_password_wrong_current(client: AsyncClient, admin_auth_headers):
    response = await client.put(
        "/api/v1/admin/change-password",
        json={"currentPassword": "nope", "newPassword": "brand-new-pass"},
        headers=admin_auth_headers
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_change_password_then_login(client: AsyncClient, admin_auth_headers):
    response = await client.put(
        "/api/v1/admin/change-password",
        json={"currentPassword": ADMIN_PASSWORD, "newPassword": "brand-new-pass"},
        headers=admin_auth_headers
    )
    assert response.status_code == 200

    login = await client.post(
        "/api/v1/admin/login",
        json={"username": "seminar-admin", "password": "brand-new-pass"}
    )
    assert login.status_code == 200


# ==================== Two-factor ====================

@pytest.mark.asyncio
async def test_two_factor_enrollment_and_login(client: AsyncClient, admin_auth_headers):
    setup = await client.post("/api/v1/admin/2fa/setup", headers=admin_auth_headers)
    assert setup.status_code == 200
    setup_data = setup.json()["data"]
    assert setup_data["qrCode"].startswith("data:image/svg+xml;base64,")

    secret = setup_data["manualEntryKey"]
    confirm = await client.post(
        "/api/v1/admin/2fa/verify-setup",
        json={"token": pyotp.TOTP(secret).now()},
        headers=admin_auth_headers
    )
    assert confirm.status_code == 200
    backup_codes = confirm.json()["data"]["backupCodes"]
    assert len(backup_codes) == 10

    login = await client.post(
        "/api/v1/admin/login",
        json={"username": "seminar-admin", "password": ADMIN_PASSWORD}
    )
    assert login.json()["requires2FA"] is True
    assert "data" not in login.json()

    second_step = await client.post(
        "/api/v1/admin/2fa/verify",
        json={"username": "seminar-admin", "password": ADMIN_PASSWORD, "token": backup_codes[0].lower()}
    )
    assert second_step.status_code == 200
    assert second_step.json()["data"]["usedBackupCode"] is True
    assert second_step.json()["data"]["remainingBackupCodes"] == 9

    # Backup codes are single use
    reused = await client.post(
        "/api/v1/admin/2fa/verify",
        json={"username": "seminar-admin", "password": ADMIN_PASSWORD, "token": backup_codes[0]}
    )
    assert reused.status_code == 401

    accented = await client.post(
        "/api/v1/admin/2fa/verify",
        json={"username": "seminar-admin", "password": ADMIN_PASSWORD, "token": "ÄBCDEFGH"}
    )
    assert accented.status_code == 401
    assert accented.json()["message"] == "Invalid 2FA token"
