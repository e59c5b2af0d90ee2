# app/api/routes/clients.py
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.logging import get_logger
from app.db import get_db
from app.deps import get_current_user
from app.models.appointment import Appointment
from app.models.client import Client
from app.models.user import User
from app.schemas.clients import ClientCreateIn, ClientOut, ClientUpdateIn
from app.utils.br_docs import format_cpf, format_phone

router = APIRouter(prefix="/clients", tags=["clients"])


def _out(c: Client) -> ClientOut:
    return ClientOut(
        id=c.id,
        created_at=c.created_at,
        cpf=c.cpf,
        cpf_formatted=format_cpf(c.cpf),
        name=c.name,
        address=c.address,
        email=c.email,
        phone=c.phone,
        phone_formatted=format_phone(c.phone),
    )


def _commit_or_conflict(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if "cpf" in str(e.orig).lower() or "unique" in str(e.orig).lower():
            raise HTTPException(
                status.HTTP_409_CONFLICT, "Já existe um cliente com este CPF"
            ) from e
        raise


@router.get("", response_model=list[ClientOut])
def list_clients(
    current_user: Annotated[User, Depends(get_current_user)],
    q: str | None = Query(None, description="Busca por nome/email/CPF (contém)"),
    db: Session = Depends(get_db),
):
    qs = db.query(Client)
    if q:
        like = f"%{q.strip()}%"
        qs = qs.filter(
            or_(Client.name.ilike(like), Client.email.ilike(like), Client.cpf.like(like))
        )
    return [_out(c) for c in qs.order_by(Client.name.asc(), Client.id.asc()).all()]


@router.post("", response_model=ClientOut, status_code=201)
def create_client(
    payload: ClientCreateIn,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Session = Depends(get_db),
):
    c = Client(
        cpf=payload.cpf,
        name=(payload.name or "").strip() or None,
        address=payload.address,
        email=str(payload.email),
        phone=payload.phone,
    )
    db.add(c)
    _commit_or_conflict(db)
    db.refresh(c)
    get_logger().info("client.create", client_id=c.id)
    return _out(c)


@router.get("/{client_id}", response_model=ClientOut)
def get_client(
    client_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Session = Depends(get_db),
):
    c = db.get(Client, client_id)
    if not c:
        raise HTTPException(404, "Cliente não encontrado")
    return _out(c)


@router.put("/{client_id}", response_model=ClientOut)
def update_client(
    client_id: int,
    payload: ClientUpdateIn,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Session = Depends(get_db),
):
    c = db.get(Client, client_id)
    if not c:
        raise HTTPException(404, "Cliente não encontrado")
    for field, value in payload.model_dump(exclude_unset=True).items():
        if field in ("cpf", "email") and value is None:
            continue
        setattr(c, field, str(value) if field == "email" else value)
    _commit_or_conflict(db)
    db.refresh(c)
    return _out(c)


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_client(
    client_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Session = Depends(get_db),
):
    c = db.get(Client, client_id)
    if not c:
        raise HTTPException(404, "Cliente não encontrado")
    in_use = db.query(Appointment.id).filter(Appointment.client_id == client_id).first()
    if in_use:
        raise HTTPException(
            status.HTTP_409_CONFLICT, "Cliente possui agendamentos e não pode ser removido"
        )
    db.delete(c)
    db.commit()
    get_logger().info("client.delete", client_id=client_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
