from __future__ import annotations

import logging

from sqlalchemy import inspect, text

from app import models  # noqa: F401
from app.db.base import Base
from app.db.session import engine

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "routine_slots": {
        "id",
        "program_id",
        "academic_year_id",
        "semester",
        "semester_group",
        "section",
        "day_index",
        "slot_index",
        "teacher_ids",
        "room_id",
        "lab_group_id",
        "lab_group",
        "recurrence_type",
        "span_id",
        "span_master",
        "display",
        "is_active",
        "is_archived",
        "version",
    },
    "teachers": {"id", "full_name", "short_name", "is_active"},
    "rooms": {"id", "name", "is_active"},
    "academic_years": {"id", "title", "is_current"},
    "activity_logs": {"id", "actor_id", "action"},
}


def _ensure_routine_slot_display_column() -> None:
    with engine.begin() as connection:
        inspector = inspect(connection)
        if "routine_slots" not in set(inspector.get_table_names()):
            return
        column_names = {item["name"] for item in inspector.get_columns("routine_slots")}
        if "display" in column_names:
            return
        if connection.dialect.name == "postgresql":
            connection.execute(
                text("ALTER TABLE routine_slots ADD COLUMN display JSONB NOT NULL DEFAULT '{}'::jsonb")
            )
            return
        connection.execute(text("ALTER TABLE routine_slots ADD COLUMN display JSON NOT NULL DEFAULT '{}'"))


def _ensure_routine_slot_custom_weeks_column() -> None:
    with engine.begin() as connection:
        inspector = inspect(connection)
        if "routine_slots" not in set(inspector.get_table_names()):
            return
        column_names = {item["name"] for item in inspector.get_columns("routine_slots")}
        if "recurrence_custom_weeks" not in column_names:
            if connection.dialect.name == "postgresql":
                connection.execute(
                    text(
                        "ALTER TABLE routine_slots "
                        "ADD COLUMN recurrence_custom_weeks JSONB NOT NULL DEFAULT '[]'::jsonb"
                    )
                )
            else:
                connection.execute(
                    text("ALTER TABLE routine_slots ADD COLUMN recurrence_custom_weeks JSON NOT NULL DEFAULT '[]'")
                )


def _ensure_activity_log_actor_column() -> None:
    with engine.begin() as connection:
        inspector = inspect(connection)
        if "activity_logs" not in set(inspector.get_table_names()):
            return
        column_names = {item["name"] for item in inspector.get_columns("activity_logs")}
        if "actor_id" in column_names:
            return
        connection.execute(text("ALTER TABLE activity_logs ADD COLUMN actor_id VARCHAR(36)"))


def _assert_required_columns() -> None:
    with engine.begin() as connection:
        inspector = inspect(connection)
        table_names = set(inspector.get_table_names())
        missing_tables = [name for name in REQUIRED_COLUMNS if name not in table_names]
        if missing_tables:
            raise RuntimeError(f"Missing required tables: {', '.join(sorted(missing_tables))}")

        missing_columns: list[str] = []
        for table_name, required in REQUIRED_COLUMNS.items():
            existing = {item["name"] for item in inspector.get_columns(table_name)}
            for column_name in sorted(required - existing):
                missing_columns.append(f"{table_name}.{column_name}")
        if missing_columns:
            raise RuntimeError(f"Missing required columns: {', '.join(missing_columns)}")


def ensure_runtime_schema_compatibility() -> None:
    try:
        # Ensure missing tables are present before additive compatibility patches.
        Base.metadata.create_all(bind=engine)
        _ensure_routine_slot_display_column()
        _ensure_routine_slot_custom_weeks_column()
        _ensure_activity_log_actor_column()
        _assert_required_columns()
    except Exception as exc:  # pragma: no cover - runtime environment dependent
        logger.exception("Runtime schema compatibility bootstrap failed")
        raise RuntimeError("Runtime schema compatibility bootstrap failed") from exc
