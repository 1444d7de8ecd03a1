"""create routine schema

Revision ID: 20261001_0001
Revises:
Create Date: 2026-10-01 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261001_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    room_type = sa.Enum("lecture", "lab", "auditorium", name="room_type")
    slot_category = sa.Enum("morning", "afternoon", "evening", name="slot_category")
    semester_group = sa.Enum("odd", "even", name="semester_group")
    class_type = sa.Enum("L", "P", "T", "BREAK", name="class_type")
    class_category = sa.Enum("CORE", "ELECTIVE", "COMMON", name="class_category")
    recurrence_type = sa.Enum("weekly", "alternate", "custom", name="recurrence_type")
    week_pattern = sa.Enum("odd", "even", name="week_pattern")

    op.create_table(
        "programs",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("code", sa.String(length=20), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("department", sa.String(length=200), nullable=False, server_default="General"),
        sa.Column("total_semesters", sa.Integer(), nullable=False, server_default="8"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_programs_code", "programs", ["code"], unique=True)

    op.create_table(
        "subjects",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("code", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("program_id", sa.String(length=36), nullable=True),
        sa.Column("semester", sa.Integer(), nullable=True),
        sa.Column("weekly_hours", sa.Integer(), nullable=False, server_default="3"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_subjects_code", "subjects", ["code"], unique=True)
    op.create_index("ix_subjects_program_id", "subjects", ["program_id"])

    op.create_table(
        "teachers",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("full_name", sa.String(length=200), nullable=False),
        sa.Column("short_name", sa.String(length=20), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("department", sa.String(length=200), nullable=False, server_default="General"),
        sa.Column("designation", sa.String(length=200), nullable=False, server_default="Lecturer"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_teachers_email", "teachers", ["email"], unique=True)

    op.create_table(
        "rooms",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("building", sa.String(length=200), nullable=False, server_default="Main"),
        sa.Column("capacity", sa.Integer(), nullable=False, server_default="48"),
        sa.Column("type", room_type, nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_rooms_name", "rooms", ["name"], unique=True)

    op.create_table(
        "academic_years",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("title", sa.String(length=100), nullable=False, unique=True),
        sa.Column("is_current", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        "time_slot_definitions",
        sa.Column("slot_index", sa.Integer(), primary_key=True, autoincrement=False, nullable=False),
        sa.Column("label", sa.String(length=50), nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_break", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("category", slot_category, nullable=False),
    )

    op.create_table(
        "activity_logs",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("actor_id", sa.String(length=36), nullable=True),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("entity_type", sa.String(length=100), nullable=True),
        sa.Column("entity_id", sa.String(length=100), nullable=True),
        sa.Column("details", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        "routine_slots",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("program_id", sa.String(length=36), nullable=False),
        sa.Column("academic_year_id", sa.String(length=36), nullable=False),
        sa.Column("semester", sa.Integer(), nullable=False),
        sa.Column("semester_group", semester_group, nullable=False),
        sa.Column("section", sa.String(length=10), nullable=False),
        sa.Column("day_index", sa.Integer(), nullable=False),
        sa.Column("slot_index", sa.Integer(), nullable=False),
        sa.Column("subject_id", sa.String(length=36), nullable=True),
        sa.Column("subject_ids", sa.JSON(), nullable=False),
        sa.Column("teacher_ids", sa.JSON(), nullable=False),
        sa.Column("room_id", sa.String(length=36), nullable=True),
        sa.Column("class_type", class_type, nullable=False),
        sa.Column("class_category", class_category, nullable=False),
        sa.Column("is_elective_class", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("lab_group_id", sa.String(length=36), nullable=True),
        sa.Column("lab_group", sa.String(length=8), nullable=True),
        sa.Column("recurrence_type", recurrence_type, nullable=False),
        sa.Column("recurrence_pattern", week_pattern, nullable=True),
        sa.Column("recurrence_custom_weeks", sa.JSON(), nullable=False),
        sa.Column("span_id", sa.String(length=36), nullable=True),
        sa.Column("span_master", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("display", sa.JSON(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("is_archived", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_by", sa.String(length=36), nullable=True),
        sa.Column("last_modified_by", sa.String(length=36), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_routine_slots_coordinate", "routine_slots", ["day_index", "slot_index"])
    op.create_index(
        "ix_routine_slots_section",
        "routine_slots",
        ["program_id", "semester", "section", "academic_year_id"],
    )
    op.create_index("ix_routine_slots_academic_year_id", "routine_slots", ["academic_year_id"])
    op.create_index("ix_routine_slots_subject_id", "routine_slots", ["subject_id"])
    op.create_index("ix_routine_slots_room_id", "routine_slots", ["room_id"])
    op.create_index("ix_routine_slots_lab_group_id", "routine_slots", ["lab_group_id"])
    op.create_index("ix_routine_slots_span_id", "routine_slots", ["span_id"])
    op.create_index(
        "uq_routine_slots_structural_key",
        "routine_slots",
        [
            "academic_year_id",
            "program_id",
            "semester",
            "section",
            "day_index",
            "slot_index",
            sa.text("coalesce(lab_group, '')"),
            "semester_group",
        ],
        unique=True,
        postgresql_where=sa.text("is_active AND NOT is_archived"),
        sqlite_where=sa.text("is_active AND NOT is_archived"),
    )


def downgrade() -> None:
    op.drop_index("uq_routine_slots_structural_key", table_name="routine_slots")
    op.drop_index("ix_routine_slots_span_id", table_name="routine_slots")
    op.drop_index("ix_routine_slots_lab_group_id", table_name="routine_slots")
    op.drop_index("ix_routine_slots_room_id", table_name="routine_slots")
    op.drop_index("ix_routine_slots_subject_id", table_name="routine_slots")
    op.drop_index("ix_routine_slots_academic_year_id", table_name="routine_slots")
    op.drop_index("ix_routine_slots_section", table_name="routine_slots")
    op.drop_index("ix_routine_slots_coordinate", table_name="routine_slots")
    op.drop_table("routine_slots")
    op.drop_table("activity_logs")
    op.drop_table("time_slot_definitions")
    op.drop_table("academic_years")
    op.drop_index("ix_rooms_name", table_name="rooms")
    op.drop_table("rooms")
    op.drop_index("ix_teachers_email", table_name="teachers")
    op.drop_table("teachers")
    op.drop_index("ix_subjects_program_id", table_name="subjects")
    op.drop_index("ix_subjects_code", table_name="subjects")
    op.drop_table("subjects")
    op.drop_index("ix_programs_code", table_name="programs")
    op.drop_table("programs")

    bind = op.get_bind()
    for enum_name in (
        "week_pattern",
        "recurrence_type",
        "class_category",
        "class_type",
        "semester_group",
        "slot_category",
        "room_type",
    ):
        sa.Enum(name=enum_name).drop(bind, checkfirst=True)
