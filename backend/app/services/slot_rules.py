from __future__ import annotations

from collections.abc import Sequence

from app.core.config import Settings
from app.models.routine_slot import ClassCategory, ClassType, LabGroup
from app.services.recurrence import RecurrenceType, WeekPattern, recurrence_errors

LAB_GROUP_VALUES = {item.value for item in LabGroup}


def _duplicates(values: Sequence[str]) -> list[str]:
    seen: set[str] = set()
    repeated: list[str] = []
    for value in values:
        if value in seen and value not in repeated:
            repeated.append(value)
        seen.add(value)
    return repeated


def slot_field_errors(
    *,
    settings: Settings,
    semester: int,
    section: str,
    day_index: int,
    slot_indexes: Sequence[int],
    class_type: ClassType,
    class_category: ClassCategory,
    is_elective_class: bool,
    subject_id: str | None,
    subject_ids: Sequence[str],
    teacher_ids: Sequence[str],
    room_id: str | None,
    lab_group: str | None,
    lab_group_id: str | None,
    recurrence_type: RecurrenceType,
    recurrence_pattern: WeekPattern | None,
    recurrence_custom_weeks: Sequence[int],
) -> list[str]:
    errors: list[str] = []

    if semester < 1 or semester > settings.max_semester:
        errors.append(f"Semester must be between 1 and {settings.max_semester}")
    if section.upper() not in settings.section_codes:
        errors.append(f"Section must be one of: {', '.join(settings.section_codes)}")
    if day_index < 0 or day_index > 6:
        errors.append("Day index must be between 0 (Sunday) and 6 (Saturday)")
    if not slot_indexes:
        errors.append("At least one slot index is required")
    if any(index < 0 for index in slot_indexes):
        errors.append("Slot index must be non-negative")
    if len(set(slot_indexes)) != len(slot_indexes):
        errors.append("Slot indexes must be unique")

    is_break = class_type == ClassType.break_
    if not is_break:
        if not teacher_ids:
            errors.append("At least one teacher must be assigned")
        if not room_id:
            errors.append("A room is required unless the class is a break")
    repeated_teachers = _duplicates(list(teacher_ids))
    if repeated_teachers:
        errors.append(f"Duplicate teachers are not allowed: {', '.join(repeated_teachers)}")

    if is_elective_class != (class_category == ClassCategory.elective):
        errors.append("is_elective_class must be true exactly when class_category is ELECTIVE")

    if subject_ids:
        if not is_elective_class:
            errors.append("Multiple subjects are only allowed for elective classes")
        if len(subject_ids) != len(teacher_ids):
            errors.append("For elective classes, the number of subjects must match the number of teachers")
        repeated_subjects = _duplicates(list(subject_ids))
        if repeated_subjects:
            errors.append("Duplicate subjects are not allowed in elective classes")
    elif not is_break and not subject_id:
        errors.append("A subject is required unless the class is a break")

    if lab_group is not None or lab_group_id is not None:
        if class_type != ClassType.practical:
            errors.append("Lab groups only apply to practical classes")
        if lab_group is not None and lab_group not in LAB_GROUP_VALUES:
            errors.append(f"Lab group must be one of: {', '.join(sorted(LAB_GROUP_VALUES))}")

    errors.extend(
        recurrence_errors(
            recurrence_type,
            recurrence_pattern,
            recurrence_custom_weeks,
            max_week_number=settings.max_week_number,
        )
    )
    return errors
