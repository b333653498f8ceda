from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from edugame.models import UserProfile


def test_health(client):
	r = client.get("/health")
	assert r.status_code == 200
	assert r.json()["max_level"] == 8


def test_level_endpoint(client):
	body = client.get("/levels/150").json()
	assert body["level"] == 2
	assert body["progress_percentage"] == 50
	assert client.get("/levels/-1").status_code == 400
	assert client.get("/levels/8/style").json()["icon"] == "👑"


def test_badge_endpoints(client, catalog):
	r = client.get("/badges/by-level/1")
	assert r.status_code == 200
	assert r.json()["image_url"] == "/badges/bronze.png"

	assert client.get("/badges/by-level/0").status_code == 400
	assert [b["id"] for b in client.get("/badges/unlocked/4").json()] == [1, 2]
	assert len(client.get("/badges").json()) == 5
	assert client.get("/badges/3").json()["name"] == "Basic"
	assert client.get("/badges/42").status_code == 404


def test_badge_missing_for_level(client):
	r = client.get("/badges/by-level/3")
	assert r.status_code == 404


def test_submit_page_answer(client, page_quizzes):
	r = client.post("/quiz/submit", json={"user_id": "u1", "material_id": 1, "page_number": 1, "selected_answer": 0})
	assert r.status_code == 200
	body = r.json()
	assert body["success"] is True
	assert body["is_correct"] is False
	assert body["correct_answer"] == 1

	r = client.post("/quiz/submit", json={"user_id": "u1", "material_id": 1, "page_number": 1, "selected_answer": 1})
	assert (r.json()["total_correct"], r.json()["total_answered"]) == (1, 1)

	score = client.get("/quiz/score/u1/1/1").json()
	assert score["answered"] is True
	assert score["is_correct"] is True
	assert client.get("/quiz/score/u1/1/2").json() == {"answered": False}

	scores = client.get("/quiz/user-scores/u1").json()["scores"]
	assert scores[0]["material_id"] == 1


def test_submit_page_answer_errors(client, page_quizzes):
	r = client.post("/quiz/submit", json={"user_id": "u1", "material_id": 1, "page_number": 1})
	assert r.status_code == 400
	r = client.post("/quiz/submit", json={"user_id": "u1", "material_id": 1, "page_number": 8, "selected_answer": 1})
	assert r.status_code == 404


def test_store_failure_is_generic(client, page_quizzes):
	failure = OperationalError("UPDATE", {}, Exception("disk I/O error"))
	with patch("sqlalchemy.orm.Session.commit", side_effect=failure):
		r = client.post("/quiz/submit", json={"user_id": "u1", "material_id": 1, "page_number": 1, "selected_answer": 1})
	assert r.status_code == 500
	assert r.json()["detail"] == "database error"


def test_page_quiz_authoring(client):
	r = client.put("/quiz/3/2", json={"question": "Ibu kota Indonesia?", "options": ["Bandung", "Jakarta"], "correct_answer": 1})
	assert r.status_code == 200
	assert client.get("/quiz/3/2").json()["question"] == "Ibu kota Indonesia?"
	assert client.get("/quiz/3/5").status_code == 404
	r = client.put("/quiz/3/2", json={"question": "Q", "options": ["a"], "correct_answer": 4})
	assert r.status_code == 400


def test_quiz_game(client, game):
	body = client.get("/quiz/game/7").json()
	assert len(body["questions"]) == 3
	assert client.get("/quiz/game/8").status_code == 404

	for q in game:
		r = client.post("/quiz/game/7", json={"user_id": "u1", "question_id": q["id"], "selected_option_id": q["options"]["A"]})
		assert r.status_code == 200
	progress = r.json()["progress"]
	assert progress["is_completed"] is True
	assert progress["xp_earned"] == 15

	r = client.post("/quiz/game/7", json={"user_id": "u1", "question_id": game[0]["id"]})
	assert r.status_code == 400


def test_user_endpoints(client, catalog, game, session_factory):
	for q in game:
		client.post("/quiz/game/7", json={"user_id": "u1", "question_id": q["id"], "selected_option_id": q["options"]["A"]})

	r = client.post("/user/update-badge", json={"user_id": "u1"})
	assert r.status_code == 200
	assert r.json()["badge"]["id"] == 1
	assert r.json()["level_name"] == "Pemula"
	session = session_factory()
	try:
		assert session.get(UserProfile, "u1").badge_id == 1
	finally:
		session.close()

	stats = client.get("/user/stats", params={"user_id": "u1"}).json()
	assert stats["total_xp"] == 15
	assert stats["accuracy"] == 100

	board = client.get("/user/leaderboard").json()["leaderboard"]
	assert board[0]["user_id"] == "u1"

	assert client.post("/user/update-badge", json={}).status_code == 400
	assert client.get("/user/stats").status_code == 400


def test_update_badge_catalog_gap(client):
	r = client.post("/user/update-badge", json={"user_id": "u1"})
	assert r.status_code == 404
