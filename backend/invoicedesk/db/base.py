# Import all the models so that Base has them before being
# imported by Alembic or used by init_db
from invoicedesk.db.base_class import Base  # noqa: F401
from invoicedesk import models  # noqa: F401
