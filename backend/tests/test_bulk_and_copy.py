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


def test_bulk_insert_reports_clashes_without_rejecting(client, seeded):
    response = client.post(
        "/api/routine-slots/bulk",
        json={
            "slots": [
                _slot_payload(seeded),
                _slot_payload(seeded, section="CD", room_id=seeded["rooms"][1]),
                _slot_payload(seeded, slot_index=4),
            ]
        },
    )
    assert response.status_code == 201
    body = response.json()
    assert body["inserted"] == 3
    assert body["sweep"]["has_conflicts"] is True
    assert [conflict["conflict_type"] for conflict in body["sweep"]["conflicts"]] == ["teacher_double_booked"]


def test_bulk_insert_rejects_duplicate_section_slots_in_batch(client, seeded):
    response = client.post(
        "/api/routine-slots/bulk",
        json={"slots": [_slot_payload(seeded), _slot_payload(seeded, teacher_ids=[seeded["teachers"][1]])]},
    )
    assert response.status_code == 409
    assert response.json()["details"]["positions"] == [0, 1]
    assert client.get("/api/routine-slots/").json() == []


def test_bulk_insert_is_all_or_nothing_against_existing_rows(client, seeded):
    assert client.post("/api/routine-slots/", json=_slot_payload(seeded)).status_code == 201

    response = client.post(
        "/api/routine-slots/bulk",
        json={
            "slots": [
                _slot_payload(seeded, slot_index=5),
                _slot_payload(seeded, teacher_ids=[seeded["teachers"][1]], room_id=seeded["rooms"][1]),
            ]
        },
    )
    assert response.status_code == 409
    assert [slot["slot_index"] for slot in client.get("/api/routine-slots/").json()] == [3]


def test_copy_routine_archives_target_and_bumps_version(client, seeded):
    next_year = client.post("/api/academic-years/", json={"title": "2026-2027"}).json()
    span = client.post("/api/routine-slots/span", json={**_slot_payload(seeded), "slot_indexes": [3, 4]})
    assert span.status_code == 201
    client.post("/api/routine-slots/", json=_slot_payload(seeded, day_index=2, slot_index=1))

    copy_request = {
        "program_id": seeded["program"],
        "semester": 3,
        "section": "ab",
        "source_academic_year_id": seeded["year"],
        "target_academic_year_id": next_year["id"],
    }
    first = client.post("/api/routine-slots/copy", json=copy_request)
    assert first.status_code == 201
    body = first.json()
    assert body["copied"] == 3
    assert body["archived"] == 0
    assert body["version"] == 1
    copied_span_ids = {slot["span_id"] for slot in body["slots"] if slot["span_id"]}
    assert len(copied_span_ids) == 1
    assert copied_span_ids != {span.json()["span_id"]}
    assert {slot["academic_year_id"] for slot in body["slots"]} == {next_year["id"]}

    second = client.post("/api/routine-slots/copy", json=copy_request)
    assert second.status_code == 201
    assert second.json()["archived"] == 3
    assert second.json()["version"] == 2

    current = client.get("/api/routine-slots/", params={"academic_year_id": next_year["id"]}).json()
    assert len(current) == 3
    assert {slot["version"] for slot in current} == {2}

    source = client.get("/api/routine-slots/", params={"academic_year_id": seeded["year"]}).json()
    assert len(source) == 3


def test_copy_routine_requires_distinct_years_and_source_rows(client, seeded):
    next_year = client.post("/api/academic-years/", json={"title": "2026-2027"}).json()
    same = client.post(
        "/api/routine-slots/copy",
        json={
            "program_id": seeded["program"],
            "semester": 3,
            "section": "AB",
            "source_academic_year_id": seeded["year"],
            "target_academic_year_id": seeded["year"],
        },
    )
    assert same.status_code == 422

    empty = client.post(
        "/api/routine-slots/copy",
        json={
            "program_id": seeded["program"],
            "semester": 3,
            "section": "AB",
            "source_academic_year_id": seeded["year"],
            "target_academic_year_id": next_year["id"],
        },
    )
    assert empty.status_code == 422
    assert empty.json()["message"] == "The source routine has no current slots to copy"
