# Garante o registro de TODAS as models no mesmo registry
from app.db.base_class import Base # noqa
from app.models.appointment import Appointment # noqa
from app.models.client import Client # noqa
from app.models.professional import Professional # noqa
from app.models.specialty import Specialty # noqa

# IMPORTS com efeito colateral (não remova)
from app.models.user import User # noqa
