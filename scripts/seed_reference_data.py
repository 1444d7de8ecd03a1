"""Seed reference data for a campus routine: one year, one program, a time grid, rooms, teachers, subjects.

Run:
  PYTHONPATH=backend python scripts/seed_reference_data.py
"""

from __future__ import annotations

import os

from sqlalchemy import func, select

from app.db.bootstrap import ensure_runtime_schema_compatibility
from app.db.session import SessionLocal
from app.models.academic_year import AcademicYear
from app.models.program import Program
from app.models.room import Room, RoomType
from app.models.subject import Subject
from app.models.teacher import Teacher
from app.models.time_slot import SlotCategory, TimeSlotDefinition

ACADEMIC_YEAR = os.getenv("SEED_ACADEMIC_YEAR", "2026-2027").strip() or "2026-2027"
MOCK_EMAIL_DOMAIN = os.getenv("SEED_MOCK_EMAIL_DOMAIN", "campus.edu").strip().lower() or "campus.edu"

PROGRAM_CODE = "BSC-CSE"
PROGRAM_NAME = "B.Sc. in Computer Science and Engineering"

# slot index, label, start, end, is_break, category
TIME_GRID = [
    (0, "1st", "08:30", "09:20", False, SlotCategory.morning),
    (1, "2nd", "09:20", "10:10", False, SlotCategory.morning),
    (2, "3rd", "10:10", "11:00", False, SlotCategory.morning),
    (3, "Break", "11:00", "11:20", True, SlotCategory.morning),
    (4, "4th", "11:20", "12:10", False, SlotCategory.afternoon),
    (5, "5th", "12:10", "13:00", False, SlotCategory.afternoon),
    (6, "6th", "14:00", "14:50", False, SlotCategory.afternoon),
    (7, "7th", "14:50", "15:40", False, SlotCategory.afternoon),
]

TEACHERS = [
    ("Dr. Farhana Akter", "FA", "Professor"),
    ("Dr. Mahbub Alam", "MA", "Associate Professor"),
    ("Nusrat Jahan", "NJ", "Assistant Professor"),
    ("Tanvir Hasan", "TH", "Lecturer"),
    ("Sadia Islam", "SI", "Lecturer"),
    ("Rafiqul Karim", "RK", "Lecturer"),
]

# code, name, semester, weekly hours
SUBJECTS = [
    ("CSE101", "Structured Programming", 1, 3),
    ("CSE102", "Structured Programming Lab", 1, 3),
    ("CSE201", "Data Structures", 2, 3),
    ("CSE202", "Data Structures Lab", 2, 3),
    ("CSE301", "Algorithms", 3, 3),
    ("CSE302", "Database Systems", 3, 3),
    ("CSE303", "Database Systems Lab", 3, 3),
    ("CSE401", "Computer Networks", 4, 3),
    ("CSE402", "Operating Systems", 4, 3),
    ("CSE501", "Machine Learning", 5, 3),
    ("CSE502", "Computer Graphics", 5, 3),
]


def upsert_academic_year(session) -> AcademicYear:
    year = session.execute(select(AcademicYear).where(AcademicYear.title == ACADEMIC_YEAR)).scalar_one_or_none()
    if year is None:
        year = AcademicYear(title=ACADEMIC_YEAR)
        session.add(year)
    for other in session.execute(select(AcademicYear).where(AcademicYear.title != ACADEMIC_YEAR)).scalars():
        other.is_current = False
    year.is_current = True
    return year


def upsert_program(session) -> Program:
    program = session.execute(select(Program).where(Program.code == PROGRAM_CODE)).scalar_one_or_none()
    if program is None:
        program = Program(code=PROGRAM_CODE, name=PROGRAM_NAME, department="CSE", total_semesters=8)
        session.add(program)
    else:
        program.name = PROGRAM_NAME
        program.department = "CSE"
    session.flush()
    return program


def upsert_time_grid(session) -> None:
    for slot_index, label, start_time, end_time, is_break, category in TIME_GRID:
        definition = session.get(TimeSlotDefinition, slot_index)
        if definition is None:
            definition = TimeSlotDefinition(slot_index=slot_index)
            session.add(definition)
        definition.label = label
        definition.start_time = start_time
        definition.end_time = end_time
        definition.sort_order = slot_index
        definition.is_break = is_break
        definition.category = category


def upsert_rooms(session) -> None:
    for floor in range(1, 4):
        for index in range(1, 4):
            room_name = f"{floor}0{index}"
            room = session.execute(select(Room).where(Room.name == room_name)).scalar_one_or_none()
            if room is None:
                room = Room(name=room_name)
                session.add(room)
            room.building = "Academic Building"
            room.capacity = 60
            room.type = RoomType.lecture

    for index in range(1, 4):
        room_name = f"LAB-{index}"
        room = session.execute(select(Room).where(Room.name == room_name)).scalar_one_or_none()
        if room is None:
            room = Room(name=room_name)
            session.add(room)
        room.building = "Laboratory Wing"
        room.capacity = 30
        room.type = RoomType.lab


def upsert_teachers(session) -> None:
    for full_name, short_name, designation in TEACHERS:
        email = f"{short_name.lower()}@{MOCK_EMAIL_DOMAIN}"
        teacher = session.execute(select(Teacher).where(Teacher.email == email)).scalar_one_or_none()
        if teacher is None:
            teacher = Teacher(email=email, full_name=full_name, short_name=short_name)
            session.add(teacher)
        teacher.full_name = full_name
        teacher.short_name = short_name
        teacher.department = "CSE"
        teacher.designation = designation


def upsert_subjects(session, program: Program) -> None:
    for code, name, semester, weekly_hours in SUBJECTS:
        subject = session.execute(select(Subject).where(Subject.code == code)).scalar_one_or_none()
        if subject is None:
            subject = Subject(code=code, name=name)
            session.add(subject)
        subject.name = name
        subject.program_id = program.id
        subject.semester = semester
        subject.weekly_hours = weekly_hours


def main() -> None:
    ensure_runtime_schema_compatibility()
    with SessionLocal() as session:
        year = upsert_academic_year(session)
        program = upsert_program(session)
        upsert_time_grid(session)
        upsert_rooms(session)
        upsert_teachers(session)
        upsert_subjects(session, program)
        session.commit()

        teacher_count = session.execute(select(func.count(Teacher.id))).scalar_one()
        room_count = session.execute(select(func.count(Room.id))).scalar_one()
        subject_count = session.execute(select(func.count(Subject.id))).scalar_one()
        period_count = session.execute(select(func.count(TimeSlotDefinition.slot_index))).scalar_one()
        year_title = year.title

    print("Reference data seeded successfully.")
    print("")
    print(f"Academic year (current): {year_title}")
    print(f"Program: {PROGRAM_NAME} ({PROGRAM_CODE})")
    print(f"Teachers: {teacher_count}")
    print(f"Rooms (classrooms + labs): {room_count}")
    print(f"Subjects: {subject_count}")
    print(f"Time grid periods: {period_count}")


if __name__ == "__main__":
    main()
