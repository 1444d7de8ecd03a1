from __future__ import annotations

from enum import Enum


class SemesterGroup(str, Enum):
    odd = "odd"
    even = "even"


def semester_group_for(semester: int) -> SemesterGroup:
    return SemesterGroup.odd if int(semester) % 2 == 1 else SemesterGroup.even


def same_group(semester_a: int, semester_b: int) -> bool:
    """Odd and even semesters are timetabled as disjoint student populations.

    Two classes at the same grid coordinate can only compete for a teacher or
    a room when their semesters fall in the same parity group.
    """
    return int(semester_a) % 2 == int(semester_b) % 2

