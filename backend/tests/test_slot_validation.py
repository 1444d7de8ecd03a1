import pytest
from pydantic import ValidationError

from app.models.routine_slot import ClassCategory
from app.schemas.routine_slot import LabGroupSlotsCreate, RoutineSlotCreate, SpannedSlotCreate


def _payload(**overrides):
    payload = {
        "program_id": "program-1",
        "semester": 3,
        "section": "ab",
        "day_index": 1,
        "slot_index": 3,
        "subject_id": "subject-1",
        "teacher_ids": ["teacher-1"],
        "room_id": "room-1",
    }
    payload.update(overrides)
    return payload


def test_valid_lecture_is_normalized():
    slot = RoutineSlotCreate(**_payload())
    assert slot.section == "AB"
    assert slot.is_elective_class is False
    assert slot.recurrence.type.value == "weekly"


def test_unknown_section_is_rejected():
    with pytest.raises(ValidationError, match="Section must be one of"):
        RoutineSlotCreate(**_payload(section="ZZ"))


def test_semester_above_configured_maximum_is_rejected():
    with pytest.raises(ValidationError, match="Semester must be between 1 and 8"):
        RoutineSlotCreate(**_payload(semester=9))


def test_non_break_requires_teacher_room_and_subject():
    with pytest.raises(ValidationError) as exc_info:
        RoutineSlotCreate(**_payload(teacher_ids=[], room_id=None, subject_id=None))
    message = str(exc_info.value)
    assert "At least one teacher must be assigned" in message
    assert "A room is required" in message
    assert "A subject is required" in message


def test_break_needs_no_teacher_or_room():
    slot = RoutineSlotCreate(**_payload(class_type="BREAK", teacher_ids=[], room_id=None, subject_id=None))
    assert slot.class_type.value == "BREAK"


def test_duplicate_teachers_are_rejected():
    with pytest.raises(ValidationError, match="Duplicate teachers"):
        RoutineSlotCreate(**_payload(teacher_ids=["teacher-1", "teacher-1"]))


def test_elective_subjects_must_match_teacher_count():
    with pytest.raises(ValidationError, match="number of subjects must match the number of teachers"):
        RoutineSlotCreate(
            **_payload(
                class_category="ELECTIVE",
                subject_id=None,
                subject_ids=["subject-1", "subject-2"],
                teacher_ids=["teacher-1"],
            )
        )


def test_elective_subjects_must_be_unique():
    with pytest.raises(ValidationError, match="Duplicate subjects are not allowed"):
        RoutineSlotCreate(
            **_payload(
                class_category="ELECTIVE",
                subject_id=None,
                subject_ids=["subject-1", "subject-1"],
                teacher_ids=["teacher-1", "teacher-2"],
            )
        )


def test_multiple_subjects_require_elective_category():
    with pytest.raises(ValidationError, match="Multiple subjects are only allowed for elective classes"):
        RoutineSlotCreate(
            **_payload(
                subject_id=None,
                subject_ids=["subject-1", "subject-2"],
                teacher_ids=["teacher-1", "teacher-2"],
            )
        )


def test_elective_flag_derives_from_category():
    slot = RoutineSlotCreate(
        **_payload(
            class_category="ELECTIVE",
            subject_id=None,
            subject_ids=["subject-1", "subject-2"],
            teacher_ids=["teacher-1", "teacher-2"],
        )
    )
    assert slot.class_category == ClassCategory.elective
    assert slot.is_elective_class is True

    with pytest.raises(ValidationError, match="is_elective_class must be true exactly when"):
        RoutineSlotCreate(**_payload(is_elective_class=True))


def test_lab_group_requires_practical_class():
    with pytest.raises(ValidationError, match="Lab groups only apply to practical classes"):
        RoutineSlotCreate(**_payload(lab_group="A"))
    slot = RoutineSlotCreate(**_payload(class_type="P", lab_group="A"))
    assert slot.lab_group.value == "A"


def test_span_rejects_repeated_slot_indexes():
    with pytest.raises(ValidationError, match="Slot indexes must be unique"):
        SpannedSlotCreate(**{**_payload(), "slot_indexes": [3, 3]})


def test_lab_group_request_rejects_repeated_or_all_groups():
    base = {
        "program_id": "program-1",
        "semester": 3,
        "section": "AB",
        "day_index": 2,
        "slot_indexes": [4, 5],
    }
    group_a = {"lab_group": "A", "subject_id": "subject-1", "teacher_ids": ["teacher-1"], "room_id": "room-1"}
    group_b = {"lab_group": "B", "subject_id": "subject-2", "teacher_ids": ["teacher-2"], "room_id": "room-2"}

    request = LabGroupSlotsCreate(**base, groups=[group_a, group_b])
    spans = request.as_spans("family-1")
    assert [span.lab_group.value for span in spans] == ["A", "B"]
    assert all(span.lab_group_id == "family-1" for span in spans)
    assert all(span.class_type.value == "P" for span in spans)

    with pytest.raises(ValidationError, match="Each lab group may only appear once"):
        LabGroupSlotsCreate(**base, groups=[group_a, group_a])
    with pytest.raises(ValidationError, match="Lab group ALL cannot be split"):
        LabGroupSlotsCreate(**base, groups=[group_a, {**group_b, "lab_group": "ALL"}])
