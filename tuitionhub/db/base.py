# tuitionhub/db/base.py
# Model registry -- imports Base + every model so Alembic detects all tables.
# Do NOT import this file from model files (use tuitionhub.db.base_class instead).
# This file is imported by:
#   - alembic/env.py          (schema detection)
#   - tuitionhub/db/init_db.py (seeding)
#   - tuitionhub/main.py       (so relationships resolve before first query)

from tuitionhub.db.base_class import Base  # noqa: F401

# Order matters: parent tables before child tables (foreign key dependencies)
from tuitionhub.models.user import User                    # noqa: F401, E402
from tuitionhub.models.tuition import Tuition              # noqa: F401, E402
from tuitionhub.models.application import Application      # noqa: F401, E402
from tuitionhub.models.payment import Payment              # noqa: F401, E402
from tuitionhub.models.notification import Notification    # noqa: F401, E402
from tuitionhub.models.review import Review                # noqa: F401, E402
