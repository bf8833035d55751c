# tests/test_square.py
from database.models.square_models import SquareCardPosition
from services.square_service import calculate_grid_height, free_grid_positions, generate_grid_positions, grid_columns


def test_grid_math():
    assert grid_columns() == 3
    positions = generate_grid_positions(5)
    assert [(p["x"], p["y"]) for p in positions] == [
        (40, 40), (444, 40), (848, 40),
        (40, 320), (444, 320),
    ]
    assert calculate_grid_height(0) == 80
    assert calculate_grid_height(3) == 40 + 280 + 40
    assert calculate_grid_height(4) == 40 + 2 * 280 + 40


def test_grid_positions_continue_from_start():
    assert generate_grid_positions(2, start=3) == [
        {"x": 40, "y": 320, "rotation": 0},
        {"x": 444, "y": 320, "rotation": 0},
    ]


def test_square_lists_card_holders_only(client, make_user, make_persona):
    ada = make_user("Ada Lovelace")
    make_persona(ada, avatar_color=None, academic_background_sub_bullets=["Analytical Engine"])
    guest = make_user("Guest", is_guest=True)
    make_persona(guest)
    make_user("No Card")

    r = client.get("/square")

    body = r.json()
    assert body["success"] is True
    assert [entry["userId"] for entry in body["data"]] == [ada.id]
    persona = body["data"][0]["persona"]
    assert persona["affiliation"] == "Student"
    assert persona["avatarColor"] == "#262D59"
    assert persona["academicBackgroundSubBullets"] == ["Analytical Engine"]
    assert persona["learningGoalSubBullets"] == []
    assert body["data"][0]["position"]["x"] is None
    assert body["gridHeight"] == 40 + 280 + 40


def test_initialize_places_only_new_cards(client, db, make_user, make_persona):
    first = make_user("Ada Lovelace")
    make_persona(first)

    r = client.post("/square")
    assert r.json()["data"][0]["xPosition"] == 40

    second = make_user("Grace Hopper")
    make_persona(second)
    r = client.post("/square")
    assert [p["userId"] for p in r.json()["data"]] == [second.id]
    assert r.json()["data"][0]["xPosition"] == 444

    r = client.post("/square")
    assert r.json()["message"] == "All users already have positions"
    assert db.query(SquareCardPosition).count() == 2


def test_initialize_skips_slots_held_by_stale_rows(client, db, make_user, make_persona):
    guest = make_user("Guest", is_guest=True)
    db.add(SquareCardPosition(user_id=guest.id, x_position=444, y_position=40, rotation=0, z_index=0))
    db.commit()
    ada = make_user("Ada Lovelace")
    make_persona(ada)
    grace = make_user("Grace Hopper")
    make_persona(grace)

    placed = client.post("/square").json()["data"]

    assert [(p["userId"], p["xPosition"], p["yPosition"]) for p in placed] == [
        (ada.id, 40, 40),
        (grace.id, 848, 40),
    ]


def test_free_grid_positions_skip_occupied():
    assert free_grid_positions(2, {(40, 40), (848, 40)}) == [
        {"x": 444, "y": 40, "rotation": 0},
        {"x": 40, "y": 320, "rotation": 0},
    ]


def test_reset_relays_grid(client, db, make_user, make_persona):
    users = [make_user(f"Student {i}") for i in range(4)]
    for user in users:
        make_persona(user)
    client.post("/square")
    db.query(SquareCardPosition).update({SquareCardPosition.x_position: 999})
    db.commit()

    r = client.post("/square/reset-positions")

    assert r.json()["count"] == 4
    square = client.get("/square").json()["data"]
    assert [(e["position"]["x"], e["position"]["y"]) for e in square] == [(40, 40), (444, 40), (848, 40), (40, 320)]
