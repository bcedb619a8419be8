# Importe tous les modèles pour enregistrer leurs tables dans Base.metadata
# avant que SQLAlchemy tente de résoudre les clés étrangères inter-modèles.
# users ↔ churches forment un cycle (church_id / district_pastor_id) :
# organisation.py et user.py doivent être chargés ensemble avant les autres.

from app.models.organisation import Union, District, Church  # noqa: F401
from app.models.user import User  # noqa: F401
from app.models.umuganda_session import UmugandaSession  # noqa: F401
from app.models.attendance import AttendanceRecord  # noqa: F401
from app.models.identity_pass import Pass, MemberPass  # noqa: F401
from app.models.umuganda_event import UmugandaEvent, UmugandaEventAttendance  # noqa: F401
from app.models.password_reset import PasswordResetToken  # noqa: F401
