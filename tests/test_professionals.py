import pytest
from fastapi import status

from app.core.errors import BackingStoreError, PreconditionError
from app.models.professional import Professional
from app.schemas.professionals import ProfessionalOut
from app.services.current_professional import resolve_current_professional
from app.services.procedures import list_professionals_admin
from app.services.rpc import unwrap


@pytest.fixture
def other_professional(db_session, test_specialty):
    professional = Professional(name="Ana Terapeuta", specialty_id=test_specialty.id, is_active=True)
    db_session.add(professional)
    db_session.commit()
    db_session.refresh(professional)
    return professional


def test_list_professionals_ordered_by_name(client, auth_headers, test_professional, other_professional):
    response = client.get("/api/v1/professionals", headers=auth_headers)
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert [p["name"] for p in data] == ["Ana Terapeuta", "Test Professional"]
    assert data[0]["specialty"] == "Fisioterapia"


def test_inactive_professionals_are_hidden_by_default(client, auth_headers, test_professional, db_session):
    inactive = Professional(name="Bruno Inativo", is_active=False)
    db_session.add(inactive)
    db_session.commit()

    names = [p["name"] for p in client.get("/api/v1/professionals", headers=auth_headers).json()]
    assert "Bruno Inativo" not in names

    names = [
        p["name"]
        for p in client.get(
            "/api/v1/professionals?include_inactive=true", headers=auth_headers
        ).json()
    ]
    assert "Bruno Inativo" in names


def test_me_for_linked_professional_uses_user_name(client, auth_headers, test_professional):
    response = client.get("/api/v1/professionals/me", headers=auth_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {
        "id": test_professional.id,
        "name": "Professional User",
        "specialty": "Fisioterapia",
    }


def test_me_falls_back_to_first_listed_professional(
    client, admin_headers, test_professional, other_professional
):
    response = client.get("/api/v1/professionals/me", headers=admin_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["id"] == other_professional.id
    assert response.json()["name"] == "Ana Terapeuta"


def test_linked_professional_without_specialty(db_session, test_professional_user):
    db_session.add(Professional(name="Sem Especialidade", user_id=test_professional_user.id))
    db_session.commit()
    with pytest.raises(PreconditionError):
        resolve_current_professional(db_session, test_professional_user)


def test_resolve_without_user():
    with pytest.raises(PreconditionError):
        resolve_current_professional(None, None)


def test_get_professional(client, auth_headers, test_professional):
    response = client.get(f"/api/v1/professionals/{test_professional.id}", headers=auth_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["user_id"] == test_professional.user_id

    response = client.get("/api/v1/professionals/999", headers=auth_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_list_specialties(client, auth_headers, test_specialty):
    response = client.get("/api/v1/specialties", headers=auth_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == [{"id": test_specialty.id, "name": "Fisioterapia"}]

    response = client.get(f"/api/v1/specialties/{test_specialty.id}", headers=auth_headers)
    assert response.json()["name"] == "Fisioterapia"


def test_procedure_contract(db_session, test_professional):
    raw = list_professionals_admin(db_session)
    assert set(raw) == {"success", "message", "data"}
    assert raw["success"] is True
    assert [p.id for p in unwrap("list_professionals_admin", raw, ProfessionalOut)] == [
        test_professional.id
    ]


@pytest.mark.parametrize(
    "raw",
    [
        {"success": False, "message": "falhou", "data": []},
        {"data": []},
        [{"id": 1}],
        None,
    ],
)
def test_unwrap_rejects_failures_and_bad_shapes(raw):
    with pytest.raises(BackingStoreError):
        unwrap("list_professionals_admin", raw, ProfessionalOut)
