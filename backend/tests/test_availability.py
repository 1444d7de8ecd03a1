from app.schemas.routine_slot import RoutineSlotCreate
from app.services.availability import get_available_rooms, get_available_teachers
from app.services.conflict_detection import SlotProposal, check_room_availability, check_teacher_availability
from app.services.routine_slots import create_slot


def _create(db, seed, **overrides):
    payload = {
        "program_id": seed["program"],
        "semester": 3,
        "section": "AB",
        "day_index": 1,
        "slot_index": 3,
        "subject_id": seed["subjects"][0],
        "teacher_ids": [seed["teachers"][0]],
        "room_id": seed["rooms"][0],
    }
    payload.update(overrides)
    return create_slot(db, RoutineSlotCreate(**payload))


def test_busy_teachers_and_rooms_are_excluded_within_group(db_session, seeded_db):
    _create(db_session, seeded_db)
    query = {"day_index": 1, "slot_index": 3, "academic_year_id": seeded_db["year"]}

    teachers = get_available_teachers(db_session, semester=5, **query)
    assert {teacher.id for teacher in teachers} == set(seeded_db["teachers"][1:])
    rooms = get_available_rooms(db_session, semester=5, **query)
    assert {room.id for room in rooms} == {seeded_db["rooms"][1]}

    even_teachers = get_available_teachers(db_session, semester=4, **query)
    assert {teacher.id for teacher in even_teachers} == set(seeded_db["teachers"])


def test_excluded_ids_and_inactive_entities_are_dropped(db_session, seeded_db):
    from app.models.teacher import Teacher

    inactive = db_session.get(Teacher, seeded_db["teachers"][2])
    inactive.is_active = False
    db_session.commit()

    teachers = get_available_teachers(
        db_session,
        day_index=0,
        slot_index=1,
        semester=3,
        exclude_ids=[seeded_db["teachers"][0]],
        academic_year_id=seeded_db["year"],
    )
    assert [teacher.id for teacher in teachers] == [seeded_db["teachers"][1]]

    # Inactive teachers are withheld even though no booking blocks them.
    check = check_teacher_availability(
        db_session,
        SlotProposal(
            day_index=0,
            slot_index=1,
            semester=3,
            teacher_ids=(inactive.id,),
            academic_year_id=seeded_db["year"],
        ),
    )
    assert check.is_available


def test_availability_agrees_with_conflict_checks_for_active_entities(db_session, seeded_db):
    teachers = seeded_db["teachers"]
    _create(db_session, seeded_db, teacher_ids=[teachers[0]], room_id=seeded_db["rooms"][0])
    _create(
        db_session,
        seeded_db,
        semester=4,
        subject_id=seeded_db["subjects"][2],
        teacher_ids=[teachers[1]],
        room_id=seeded_db["rooms"][1],
    )

    for semester in (3, 4, 5, 6):
        query = {"day_index": 1, "slot_index": 3, "semester": semester, "academic_year_id": seeded_db["year"]}
        available_teachers = {teacher.id for teacher in get_available_teachers(db_session, **query)}
        available_rooms = {room.id for room in get_available_rooms(db_session, **query)}
        for teacher_id in teachers:
            check = check_teacher_availability(db_session, SlotProposal(teacher_ids=(teacher_id,), **query))
            assert (teacher_id in available_teachers) == check.is_available
        for room_id in seeded_db["rooms"]:
            check = check_room_availability(db_session, SlotProposal(room_id=room_id, **query))
            assert (room_id in available_rooms) == check.is_available


def test_lab_group_siblings_stay_available_to_their_family(db_session, seeded_db):
    _create(
        db_session,
        seeded_db,
        class_type="P",
        lab_group="A",
        lab_group_id="family-1",
        room_id=seeded_db["rooms"][1],
    )
    query = {"day_index": 1, "slot_index": 3, "semester": 3, "academic_year_id": seeded_db["year"]}

    family_rooms = get_available_rooms(db_session, lab_group_id="family-1", **query)
    assert seeded_db["rooms"][1] in {room.id for room in family_rooms}
    other_rooms = get_available_rooms(db_session, **query)
    assert seeded_db["rooms"][1] not in {room.id for room in other_rooms}
