from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, EmailStr, constr, field_validator

from app.utils.br_docs import clean_cpf, clean_phone, validate_cpf


class ClientBase(BaseModel):
    name: constr(max_length=120) | None = None
    address: constr(max_length=255) | None = None
    phone: str | None = None

    @field_validator("phone")
    @classmethod
    def _phone_digits(cls, v: str | None) -> str | None:
        if v is None:
            return None
        digits = clean_phone(v)
        if digits and len(digits) not in (10, 11):
            raise ValueError("Telefone inválido")
        return digits or None


class ClientCreateIn(ClientBase):
    cpf: str
    email: EmailStr

    @field_validator("cpf")
    @classmethod
    def _cpf_valid(cls, v: str) -> str:
        if not validate_cpf(v):
            raise ValueError("CPF inválido")
        return clean_cpf(v)


class ClientUpdateIn(ClientBase):
    cpf: str | None = None
    email: EmailStr | None = None

    @field_validator("cpf")
    @classmethod
    def _cpf_valid(cls, v: str | None) -> str | None:
        if v is None:
            return None
        if not validate_cpf(v):
            raise ValueError("CPF inválido")
        return clean_cpf(v)


class ClientOut(BaseModel):
    id: int
    created_at: dt.datetime
    cpf: str
    cpf_formatted: str
    name: str | None = None
    address: str | None = None
    email: str
    phone: str | None = None
    phone_formatted: str | None = None
