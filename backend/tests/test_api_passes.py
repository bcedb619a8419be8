"""
Tests d'intégration API pour la vérification des passes.
Testent GET /api/v1/passes/{token}
"""

import uuid
from datetime import datetime, timezone
from unittest.mock import patch

from app.models.enums import Role
from app.schemas.identity_pass import VerificationResult, VerifiedMember
from app.schemas.organisation import ChurchSummary


def test_verification_sans_acteur_401(client):
    response = client.get("/api/v1/passes/abc")
    assert response.status_code == 401


def test_token_inconnu(client, set_actor):
    set_actor(Role.CHURCH_ADMIN, church_id=uuid.uuid4())
    with patch("app.routers.passes.pass_service.verify_pass_token") as mock:
        mock.return_value = VerificationResult(valid=False)
        response = client.get("/api/v1/passes/inconnu")

    assert response.status_code == 200
    assert response.json()["valid"] is False
    assert response.json()["reason"] is None


def test_pass_expire(client, set_actor):
    set_actor(Role.POLICE_VERIFIER)
    with patch("app.routers.passes.pass_service.verify_pass_token") as mock:
        mock.return_value = VerificationResult(valid=False, reason="expired")
        response = client.get("/api/v1/passes/vieux")

    assert response.json() == {
        "valid": False,
        "reason": "expired",
        "pass_id": None,
        "issued_at": None,
        "session_date": None,
        "church": None,
        "member": None,
        "checked_in_attendance_id": None,
    }


def test_pass_valide_verificateur(client, set_actor):
    actor = set_actor(Role.POLICE_VERIFIER)
    attendance_id = uuid.uuid4()
    with patch("app.routers.passes.pass_service.verify_pass_token") as mock:
        mock.return_value = VerificationResult(
            valid=True,
            pass_id=uuid.uuid4(),
            issued_at=datetime(2026, 10, 1, tzinfo=timezone.utc),
            session_date=datetime(2026, 10, 18, tzinfo=timezone.utc),
            church=ChurchSummary(id=uuid.uuid4(), name="Église Remera"),
            member=VerifiedMember(id=uuid.uuid4(), first_name="Alice", last_name="Uwase", national_id="1199"),
            checked_in_attendance_id=attendance_id,
        )
        response = client.get("/api/v1/passes/tok-123")

    data = response.json()
    assert data["valid"] is True
    assert data["church"]["name"] == "Église Remera"
    assert data["member"]["first_name"] == "Alice"
    assert data["checked_in_attendance_id"] == str(attendance_id)
    mock.assert_called_once()
    assert mock.call_args.args[1] == actor
    assert mock.call_args.args[2] == "tok-123"
