"""add_counseling_timetables_materials

Revision ID: c52e8f1d9a34
Revises: a7d4e05b6c21
Create Date: 2026-03-16 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op

from academy.models import Base

# revision identifiers, used by Alembic.
revision: str = "c52e8f1d9a34"
down_revision: Union[str, Sequence[str], None] = "a7d4e05b6c21"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# parents before children
NEW_TABLES = [
    "counseling_slots",
    "counseling_reservations",
    "counseling_questions",
    "timetables",
    "timetable_teachers",
    "timetable_periods",
    "timetable_assignments",
    "class_material_posts",
    "class_material_print_requests",
    "class_material_print_request_items",
    "admission_material_posts",
    "admission_material_schedules",
    "lectures",
    "film_notes",
    "film_note_histories",
]


def _tables():
    return [Base.metadata.tables[name] for name in NEW_TABLES]


def upgrade() -> None:
    """Upgrade schema."""
    Base.metadata.create_all(bind=op.get_bind(), tables=_tables(), checkfirst=True)


def downgrade() -> None:
    """Downgrade schema."""
    Base.metadata.drop_all(bind=op.get_bind(), tables=_tables(), checkfirst=True)
