# Import every model so Base.metadata knows all tables (create_all, alembic).
from registrar.db.base_class import Base  # noqa: F401
from registrar.models.contract import Contract  # noqa: F401
from registrar.models.contract_template import ContractTemplate  # noqa: F401
from registrar.models.course import Course  # noqa: F401
from registrar.models.enrollment import Enrollment  # noqa: F401
from registrar.models.student import Student  # noqa: F401
from registrar.models.user import User  # noqa: F401
