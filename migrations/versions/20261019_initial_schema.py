"""
Initial schema: every table declared on the ORM models.

Later revisions alter tables explicitly; this one snapshots the models.
"""
from alembic import op

from nonprofitsuite.db.models import Base


# revision identifiers, used by Alembic.
revision = 'initial_20261019'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    Base.metadata.create_all(bind=op.get_bind())


def downgrade() -> None:
    Base.metadata.drop_all(bind=op.get_bind())
