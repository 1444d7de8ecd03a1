def _slot_payload(seed, **overrides):
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
    return payload


def test_create_slot_returns_record_with_display_cache(client, seeded):
    response = client.post(
        "/api/routine-slots/",
        json=_slot_payload(seeded),
        headers={"X-Actor-Id": "editor-1"},
    )
    assert response.status_code == 201
    body = response.json()
    assert body["academic_year_id"] == seeded["year"]
    assert body["semester_group"] == "odd"
    assert body["recurrence"] == {"type": "weekly", "pattern": None, "custom_weeks": [], "description": "Weekly"}
    assert body["display"]["program_code"] == "BSC"
    assert body["display"]["subject_name"] == "Algorithms"
    assert body["display"]["teacher_names"] == ["Ada Rahman"]
    assert body["display"]["room_name"] == "R101"
    assert body["created_by"] == "editor-1"

    fetched = client.get(f"/api/routine-slots/{body['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["id"] == body["id"]

    logs = client.get("/api/activity/logs", params={"entity_type": "routine_slot"})
    assert logs.status_code == 200
    assert logs.json()[0]["action"] == "routine_slot.create"
    assert logs.json()[0]["actor_id"] == "editor-1"


def test_teacher_double_booking_in_same_group_is_rejected(client, seeded):
    first = client.post("/api/routine-slots/", json=_slot_payload(seeded))
    assert first.status_code == 201

    clash = client.post(
        "/api/routine-slots/",
        json=_slot_payload(
            seeded,
            semester=5,
            subject_id=seeded["subjects"][1],
            room_id=seeded["rooms"][1],
        ),
    )
    assert clash.status_code == 409
    body = clash.json()
    assert body["message"] == "Teacher or room is already booked at the requested time"
    conflicts = body["details"]["report"]["teacher_conflicts"]
    assert conflicts[0]["slot"]["slot_id"] == first.json()["id"]

    other_group = client.post(
        "/api/routine-slots/",
        json=_slot_payload(seeded, semester=4, subject_id=seeded["subjects"][2]),
    )
    assert other_group.status_code == 201


def test_structural_duplicate_is_rejected(client, seeded):
    assert client.post("/api/routine-slots/", json=_slot_payload(seeded)).status_code == 201

    duplicate = client.post(
        "/api/routine-slots/",
        json=_slot_payload(seeded, teacher_ids=[seeded["teachers"][1]], room_id=seeded["rooms"][1]),
    )
    assert duplicate.status_code == 409
    assert duplicate.json()["message"] == "This section already has a class at the requested time"


def test_unknown_references_return_not_found(client, seeded):
    response = client.post(
        "/api/routine-slots/",
        json=_slot_payload(seeded, teacher_ids=["missing-teacher"]),
    )
    assert response.status_code == 404
    assert response.json()["details"] == {"resource_type": "Teacher", "resource_id": "missing-teacher"}

    assert client.get("/api/routine-slots/missing-slot").status_code == 404


def test_elective_arity_violation_is_unprocessable(client, seeded):
    response = client.post(
        "/api/routine-slots/",
        json=_slot_payload(
            seeded,
            class_category="ELECTIVE",
            subject_id=None,
            subject_ids=seeded["subjects"][:2],
            teacher_ids=[seeded["teachers"][0]],
        ),
    )
    assert response.status_code == 422
    assert "number of subjects must match the number of teachers" in str(response.json())


def test_elective_class_books_every_teacher(client, seeded):
    teachers = seeded["teachers"]
    response = client.post(
        "/api/routine-slots/",
        json=_slot_payload(
            seeded,
            class_category="ELECTIVE",
            subject_id=None,
            subject_ids=seeded["subjects"][:2],
            teacher_ids=teachers[:2],
        ),
    )
    assert response.status_code == 201
    body = response.json()
    assert body["is_elective_class"] is True
    assert body["subject_id"] == seeded["subjects"][0]
    assert body["display"]["subject_name"] == "Algorithms / Databases"

    check = client.post(
        "/api/conflicts/check",
        json={"day_index": 1, "slot_index": 3, "semester": 7, "teacher_ids": [teachers[1]]},
    )
    assert check.status_code == 200
    assert check.json()["has_conflicts"] is True


def test_update_excludes_the_slot_from_its_own_conflict_check(client, seeded):
    created = client.post("/api/routine-slots/", json=_slot_payload(seeded)).json()

    response = client.put(f"/api/routine-slots/{created['id']}", json={"notes": "Bring laptops"})
    assert response.status_code == 200
    assert response.json()[0]["notes"] == "Bring laptops"

    moved = client.put(f"/api/routine-slots/{created['id']}", json={"slot_index": 4})
    assert moved.status_code == 200
    assert moved.json()[0]["slot_index"] == 4


def test_update_rejects_null_for_required_fields(client, seeded):
    created = client.post("/api/routine-slots/", json=_slot_payload(seeded)).json()

    for field in ("semester", "section", "day_index", "slot_index", "class_type", "recurrence"):
        response = client.put(f"/api/routine-slots/{created['id']}", json={field: None})
        assert response.status_code == 422, field

    unchanged = client.get(f"/api/routine-slots/{created['id']}").json()
    assert unchanged["semester"] == 3
    assert unchanged["section"] == "AB"
    assert unchanged["slot_index"] == 3

    cleared_notes = client.put(f"/api/routine-slots/{created['id']}", json={"notes": None})
    assert cleared_notes.status_code == 200


def test_semester_edit_rederives_semester_group(client, seeded):
    created = client.post("/api/routine-slots/", json=_slot_payload(seeded)).json()
    assert created["semester_group"] == "odd"

    response = client.put(f"/api/routine-slots/{created['id']}", json={"semester": 4})
    assert response.status_code == 200
    assert response.json()[0]["semester"] == 4
    assert response.json()[0]["semester_group"] == "even"

    fetched = client.get(f"/api/routine-slots/{created['id']}").json()
    assert fetched["semester_group"] == "even"


def test_update_into_a_conflict_is_rejected_and_rolled_back(client, seeded):
    first = client.post("/api/routine-slots/", json=_slot_payload(seeded)).json()
    second = client.post(
        "/api/routine-slots/",
        json=_slot_payload(
            seeded,
            slot_index=4,
            teacher_ids=[seeded["teachers"][1]],
            room_id=seeded["rooms"][1],
        ),
    ).json()

    response = client.put(f"/api/routine-slots/{second['id']}", json={"teacher_ids": [seeded["teachers"][0]]})
    assert response.status_code == 200

    clash = client.put(f"/api/routine-slots/{second['id']}", json={"slot_index": 3})
    assert clash.status_code == 409

    unchanged = client.get(f"/api/routine-slots/{second['id']}").json()
    assert unchanged["slot_index"] == 4
    assert client.get(f"/api/routine-slots/{first['id']}").json()["slot_index"] == 3


def test_span_is_created_and_removed_atomically(client, seeded):
    response = client.post(
        "/api/routine-slots/span",
        json={**_slot_payload(seeded, class_type="P", room_id=seeded["rooms"][1]), "slot_indexes": [5, 3, 4]},
    )
    assert response.status_code == 201
    body = response.json()
    assert [slot["slot_index"] for slot in body["slots"]] == [3, 4, 5]
    assert [slot["span_master"] for slot in body["slots"]] == [True, False, False]
    assert {slot["span_id"] for slot in body["slots"]} == {body["span_id"]}

    removed = client.delete(f"/api/routine-slots/spans/{body['span_id']}")
    assert removed.status_code == 200
    assert removed.json() == {"success": True, "removed": 3}
    assert client.get(f"/api/routine-slots/{body['slots'][0]['id']}").status_code == 404

    assert client.delete(f"/api/routine-slots/spans/{body['span_id']}").status_code == 404


def test_span_with_one_blocked_period_writes_nothing(client, seeded):
    blocker = client.post(
        "/api/routine-slots/",
        json=_slot_payload(seeded, semester=5, slot_index=4, subject_id=seeded["subjects"][1]),
    )
    assert blocker.status_code == 201

    response = client.post("/api/routine-slots/span", json={**_slot_payload(seeded), "slot_indexes": [3, 4]})
    assert response.status_code == 409

    remaining = client.get("/api/routine-slots/", params={"program_id": seeded["program"], "semester": 3})
    assert remaining.json() == []


def test_span_must_be_contiguous(client, seeded):
    response = client.post("/api/routine-slots/span", json={**_slot_payload(seeded), "slot_indexes": [1, 3]})
    assert response.status_code == 422
    assert response.json()["message"] == "Spanned periods must occupy contiguous grid columns"


def test_span_members_move_only_together(client, seeded):
    span = client.post("/api/routine-slots/span", json={**_slot_payload(seeded), "slot_indexes": [3, 4]}).json()
    master_id = span["slots"][0]["id"]

    moved = client.put(f"/api/routine-slots/{master_id}", json={"day_index": 2})
    assert moved.status_code == 422

    edited = client.put(f"/api/routine-slots/{master_id}", json={"notes": "Double period"})
    assert edited.status_code == 200
    assert [slot["notes"] for slot in edited.json()] == ["Double period", "Double period"]

    deactivated = client.delete(f"/api/routine-slots/{master_id}")
    assert deactivated.status_code == 200
    assert sorted(deactivated.json()["deactivated"]) == sorted(slot["id"] for slot in span["slots"])


def test_lab_groups_run_in_parallel(client, seeded):
    teachers = seeded["teachers"]
    response = client.post(
        "/api/routine-slots/lab-groups",
        json={
            "program_id": seeded["program"],
            "semester": 3,
            "section": "AB",
            "day_index": 2,
            "slot_indexes": [1, 2],
            "groups": [
                {
                    "lab_group": "A",
                    "subject_id": seeded["subjects"][0],
                    "teacher_ids": [teachers[0]],
                    "room_id": seeded["rooms"][0],
                },
                {
                    "lab_group": "B",
                    "subject_id": seeded["subjects"][1],
                    "teacher_ids": [teachers[1]],
                    "room_id": seeded["rooms"][1],
                },
            ],
        },
    )
    assert response.status_code == 201
    body = response.json()
    assert len(body["spans"]) == 2
    slots = [slot for span in body["spans"] for slot in span["slots"]]
    assert {slot["lab_group"] for slot in slots} == {"A", "B"}
    assert {slot["lab_group_id"] for slot in slots} == {body["lab_group_id"]}
    assert slots[0]["display"]["lab_group_label"] == "Group A"

    clash = client.post(
        "/api/routine-slots/",
        json=_slot_payload(
            seeded,
            semester=5,
            day_index=2,
            slot_index=1,
            section="CD",
            teacher_ids=[teachers[1]],
            room_id=seeded["rooms"][0],
        ),
    )
    assert clash.status_code == 409


def test_missing_current_year_is_not_found(client):
    program = client.post("/api/programs/", json={"code": "EEE", "name": "Electrical"}).json()
    response = client.post(
        "/api/routine-slots/",
        json={
            "program_id": program["id"],
            "semester": 1,
            "section": "AB",
            "day_index": 0,
            "slot_index": 0,
            "class_type": "BREAK",
        },
    )
    assert response.status_code == 404
    assert response.json()["details"]["resource_id"] == "current"


def test_list_filters_by_teacher_and_week(client, seeded):
    teachers = seeded["teachers"]
    client.post(
        "/api/routine-slots/",
        json=_slot_payload(seeded, recurrence={"type": "alternate", "pattern": "odd"}),
    )
    client.post(
        "/api/routine-slots/",
        json=_slot_payload(seeded, slot_index=4, teacher_ids=[teachers[1]], room_id=seeded["rooms"][1]),
    )

    by_teacher = client.get("/api/routine-slots/", params={"teacher_id": teachers[1]})
    assert [slot["slot_index"] for slot in by_teacher.json()] == [4]

    even_week = client.get("/api/routine-slots/", params={"week_number": 2})
    assert [slot["slot_index"] for slot in even_week.json()] == [4]
    odd_week = client.get("/api/routine-slots/", params={"week_number": 1})
    assert [slot["slot_index"] for slot in odd_week.json()] == [3, 4]
