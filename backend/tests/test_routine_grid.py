def _slot_payload(seed, **overrides):
    payload = {
        "program_id": seed["program"],
        "semester": 3,
        "section": "AB",
        "day_index": 1,
        "slot_index": 1,
        "subject_id": seed["subjects"][0],
        "teacher_ids": [seed["teachers"][0]],
        "room_id": seed["rooms"][0],
    }
    payload.update(overrides)
    return payload


def _define_time_slots(client):
    for slot_index, label, start, end, is_break in (
        (1, "Period 1", "08:00", "08:50", False),
        (2, "Period 2", "08:50", "09:40", False),
        (3, "Break", "09:40", "10:00", True),
        (4, "Period 3", "10:00", "10:50", False),
    ):
        response = client.post(
            "/api/time-slots/",
            json={
                "slot_index": slot_index,
                "label": label,
                "start_time": start,
                "end_time": end,
                "sort_order": slot_index,
                "is_break": is_break,
            },
        )
        assert response.status_code == 201


def test_time_slot_validation(client):
    response = client.post(
        "/api/time-slots/",
        json={"slot_index": 1, "label": "Bad", "start_time": "09:00", "end_time": "08:00"},
    )
    assert response.status_code == 422


def test_defined_grid_rejects_unknown_slot_indexes(client, seeded):
    _define_time_slots(client)
    response = client.post("/api/routine-slots/", json=_slot_payload(seeded, slot_index=9))
    assert response.status_code == 422
    assert "not defined in the time grid" in response.json()["message"]


def test_span_contiguity_follows_grid_order(client, seeded):
    _define_time_slots(client)
    gap = client.post("/api/routine-slots/span", json={**_slot_payload(seeded), "slot_indexes": [2, 4]})
    assert gap.status_code == 422

    contiguous = client.post("/api/routine-slots/span", json={**_slot_payload(seeded), "slot_indexes": [1, 2]})
    assert contiguous.status_code == 201
    assert contiguous.json()["slots"][1]["display"]["time_slot"] == "08:50 - 09:40"


def test_grid_places_slots_by_day_and_column(client, seeded):
    _define_time_slots(client)
    span = client.post("/api/routine-slots/span", json={**_slot_payload(seeded), "slot_indexes": [1, 2]}).json()
    client.post(
        "/api/routine-slots/",
        json=_slot_payload(seeded, day_index=3, slot_index=4, recurrence={"type": "custom", "custom_weeks": [2]}),
    )

    response = client.get(
        "/api/routine-slots/grid",
        params={"program_id": seeded["program"], "semester": 3, "section": "ab"},
    )
    assert response.status_code == 200
    grid = response.json()
    assert grid["section"] == "AB"
    assert grid["academic_year_id"] == seeded["year"]
    assert grid["total_slots"] == 3
    assert [day["day_index"] for day in grid["days"]] == [0, 1, 2, 3, 4, 5]

    monday = grid["days"][1]
    assert [cell["slot_index"] for cell in monday["cells"]] == [1, 2, 3, 4]
    assert monday["cells"][2]["is_break_period"] is True
    assert monday["cells"][0]["time_label"] == "08:00 - 08:50"
    master_id = span["slots"][0]["id"]
    assert monday["cells"][0]["span_length"] == {master_id: 2}
    assert monday["cells"][1]["span_length"] == {}

    week_one = client.get(
        "/api/routine-slots/grid",
        params={"program_id": seeded["program"], "semester": 3, "section": "AB", "week_number": 1},
    )
    assert week_one.json()["total_slots"] == 2


def test_time_change_refreshes_display_cache(client, seeded):
    _define_time_slots(client)
    created = client.post("/api/routine-slots/", json=_slot_payload(seeded)).json()
    assert created["display"]["time_slot"] == "08:00 - 08:50"

    response = client.put("/api/time-slots/1", json={"start_time": "07:55"})
    assert response.status_code == 200
    refreshed = client.get(f"/api/routine-slots/{created['id']}").json()
    assert refreshed["display"]["time_slot"] == "07:55 - 08:50"
