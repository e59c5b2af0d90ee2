# scripts/seed.py
from __future__ import annotations

import os
import random
from datetime import date, timedelta

from sqlalchemy import inspect, select
from sqlalchemy.orm import Session

# --- Ajuste conforme seu projeto ---
# get_db é um generator do FastAPI; aqui usamos next(get_db()) pra obter uma Session
from app.db import get_db
from app.models.appointment import Appointment
from app.models.client import Client
from app.models.professional import Professional
from app.models.specialty import Specialty
from app.models.user import Role, User
from app.services.time_conflicts import (
    default_start_times,
    has_conflict,
    minutes_to_time,
    time_to_minutes,
)
from app.utils.br_docs import validate_cpf
from app.utils.tz import local_time, today_local
from app.utils.week import week_days

# ---------------- Configuráveis por ENV ----------------
SEED_WEEKS = int(os.getenv("SEED_WEEKS", "2"))
SEED_FILL_RATE = float(os.getenv("SEED_FILL_RATE", "0.4"))

# ---------------- Dados de Exemplo ----------------
SPECIALTIES_DATA = ["Psicopedagogia", "Fonoaudiologia", "Terapia Ocupacional"]

PROFESSIONALS_DATA = [
    {"name": "Dra. Ana Souza", "specialty": "Psicopedagogia"},
    {"name": "Dr. Bruno Lima", "specialty": "Fonoaudiologia"},
    {"name": "Dra. Carla Dias", "specialty": "Terapia Ocupacional"},
]

CLIENTS_DATA = [
    {"name": "Marcos Lima", "cpf": "52998224725", "phone": "11987654321"},
    {"name": "Patrícia Alves", "cpf": "11144477735", "phone": "1133334444"},
    {"name": "Roberta Dias", "cpf": "12345678909", "phone": "21998887777"},
    {"name": "Carlos Nogueira", "cpf": "98765432100", "phone": None},
]

COLORS = ["#3366ff", "#33aa66", "#ff9933", None]


# ---------------- Helpers ----------------
def get_session() -> Session:
    gen = get_db()
    session: Session = next(gen)
    return session


def _seed_weeks(n_weeks: int) -> list[date]:
    """Dias úteis (seg-sex) da semana atual e das seguintes."""
    today = today_local()
    days: list[date] = []
    for i in range(n_weeks):
        days.extend(d for d in week_days(today + timedelta(weeks=i)) if d.weekday() < 5)
    return days


# ---------------- Funções de Seed ----------------
def ensure_user(db: Session, *, name: str, email: str, role: Role) -> User:
    user = db.execute(select(User).where(User.email == email)).scalar_one_or_none()
    if user:
        return user

    user = User(name=name, email=email, role=role, is_active=True)
    db.add(user)
    db.commit()
    db.refresh(user)
    print(f"[Seed] User criado: {user.name} ({user.email}) - Role: {user.role.value}")
    return user


def ensure_specialties(db: Session) -> dict[str, Specialty]:
    by_name: dict[str, Specialty] = {}
    for name in SPECIALTIES_DATA:
        specialty = db.execute(
            select(Specialty).where(Specialty.name == name)
        ).scalar_one_or_none()
        if not specialty:
            specialty = Specialty(name=name)
            db.add(specialty)
            db.commit()
            db.refresh(specialty)
            print(f"[Seed] Especialidade criada: {specialty.name}")
        by_name[name] = specialty
    return by_name


def ensure_professionals(
    db: Session, specialties: dict[str, Specialty]
) -> list[tuple[Professional, User]]:
    professionals = []
    for i, prof_data in enumerate(PROFESSIONALS_DATA):
        user = ensure_user(
            db,
            name=prof_data["name"],
            email=f"prof{i + 1}@example.com",
            role=Role.PROFESSIONAL,
        )
        specialty = specialties[prof_data["specialty"]]

        professional = db.execute(
            select(Professional).where(Professional.user_id == user.id)
        ).scalar_one_or_none()

        if not professional:
            professional = Professional(
                name=prof_data["name"],
                specialty_id=specialty.id,
                user_id=user.id,
                is_active=True,
            )
            db.add(professional)
            db.commit()
            db.refresh(professional)
            print(f"[Seed] Professional criado: {professional.name}")
        elif professional.specialty_id != specialty.id:
            professional.specialty_id = specialty.id
            db.commit()
            db.refresh(professional)
            print(f"[Seed] Professional atualizado: {professional.name}")
        professionals.append((professional, user))
    return professionals


def ensure_clients(db: Session) -> list[Client]:
    clients = []
    for i, data in enumerate(CLIENTS_DATA):
        assert validate_cpf(data["cpf"]), data["cpf"]
        client = db.execute(
            select(Client).where(Client.cpf == data["cpf"])
        ).scalar_one_or_none()
        if not client:
            client = Client(
                cpf=data["cpf"],
                name=data["name"],
                email=f"cliente{i + 1}@example.com",
                phone=data["phone"],
            )
            db.add(client)
            db.commit()
            db.refresh(client)
            print(f"[Seed] Cliente criado: {client.name}")
        clients.append(client)
    return clients


def ensure_appointments(
    db: Session,
    professionals: list[tuple[Professional, User]],
    clients: list[Client],
    days: list[date],
):
    print("[Seed] Gerando agendamentos...")
    total_appointments = 0

    for prof, user in professionals:
        existing = list(
            db.scalars(
                select(Appointment).where(
                    Appointment.professional_id == prof.id,
                    Appointment.cancelled == False,  # noqa: E712
                    Appointment.date.in_(days),
                )
            )
        )
        for day in days:
            for start in default_start_times():
                if random.random() > SEED_FILL_RATE:
                    continue
                end = minutes_to_time(time_to_minutes(start) + 60)
                # mesma regra da agenda: sem sobreposição por profissional
                if has_conflict(day, start, end, existing):
                    continue

                client = random.choice(clients)
                appointment = Appointment(
                    user_id=user.id,
                    professional_id=prof.id,
                    client_id=client.id,
                    date=day,
                    start_time=local_time(day, start),
                    end_time=local_time(day, end),
                    title=f"Atendimento - {client.name}",
                    color=random.choice(COLORS),
                    cancelled=False,
                )
                db.add(appointment)
                existing.append(appointment)
                total_appointments += 1
    db.commit()
    print(f"[Seed] {total_appointments} agendamentos criados.")


def check_tables_exist(db: Session) -> bool:
    """Check if all required tables exist in the database."""
    required_tables = ["users", "specialties", "professionals", "clients", "appointments"]
    insp = inspect(db.get_bind())
    return all(insp.has_table(table) for table in required_tables)


def main():
    print("[Seed] Iniciando seed do banco de dados...")
    db = None
    try:
        db = get_session()

        if not check_tables_exist(db):
            print("[Seed] Erro: As tabelas do banco de dados ainda não foram criadas.")
            print("[Seed] Execute as migrações antes do seed:")
            print("     alembic upgrade head")
            return

        # 1. Usuário administrador (sem profissional vinculado)
        ensure_user(db, name="Administração", email="admin@example.com", role=Role.ADMIN)

        # 2. Especialidades
        specialties = ensure_specialties(db)

        # 3. Profissionais e seus usuários
        professionals = ensure_professionals(db, specialties)

        # 4. Clientes
        clients = ensure_clients(db)

        # 5. Agendamentos
        ensure_appointments(db, professionals, clients, _seed_weeks(SEED_WEEKS))

        print("\n[Seed] Concluído!")
        print("-------------------------------------------------")
        print("Usuários criados (tokens emitidos pelo provedor de identidade):")
        print("- admin@example.com (Administração)")
        for i in range(len(PROFESSIONALS_DATA)):
            print(f"- prof{i + 1}@example.com (Profissional)")
        print("-------------------------------------------------")
    except Exception as e:
        print(f"[Seed] Erro durante o seed: {e}")
        raise
    finally:
        if db:
            db.close()


if __name__ == "__main__":
    main()
