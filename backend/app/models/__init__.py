# Importe tous les modèles pour enregistrer leurs tables dans Base.metadata
# avant que SQLAlchemy tente de résoudre les clés étrangères inter-modèles.

from app.models.user import User  # noqa: F401  (doit précéder check_in)
from app.models.customer import Customer  # noqa: F401
from app.models.student import Student  # noqa: F401
from app.models.session_type import SessionType  # noqa: F401
from app.models.scan_code import ScanCode  # noqa: F401
from app.models.check_in import CheckIn  # noqa: F401
