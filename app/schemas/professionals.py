from pydantic import BaseModel


class SpecialtyOut(BaseModel):
    id: int
    name: str


class ProfessionalOut(BaseModel):
    id: int
    name: str
    specialty_id: int | None = None
    specialty: str | None = None
    is_active: bool
    user_id: int | None = None


class CurrentProfessionalOut(BaseModel):
    id: int
    name: str
    specialty: str
