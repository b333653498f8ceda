from edugame.models import UserProfile
from edugame.stats import user_stats
from edugame.xp import leaderboard, sum_xp, total_xp


def test_sum_xp_treats_missing_as_zero():
	assert sum_xp([]) == 0
	assert sum_xp([5, None, 10]) == 15


def test_total_xp_sums_all_materials(db, add_progress):
	add_progress("u1", 1, 15)
	add_progress("u1", 2, 10)
	add_progress("u1", 3, None)
	add_progress("u2", 1, 500)
	assert total_xp(db, "u1") == 25
	assert total_xp(db, "nobody") == 0


def test_leaderboard_orders_by_total_xp(db, add_progress):
	add_progress("u1", 1, 15)
	add_progress("u1", 2, 15)
	add_progress("u2", 1, 120)
	add_progress("u3", 1, None)
	db.add(UserProfile(user_id="u2", full_name="Budi"))
	db.commit()

	board = leaderboard(db, limit=10)

	assert [row["user_id"] for row in board] == ["u2", "u1", "u3"]
	assert board[0] == {
		"rank": 1,
		"user_id": "u2",
		"full_name": "Budi",
		"total_xp": 120,
		"level": 2,
		"level_name": "Pemula",
	}
	assert board[2]["total_xp"] == 0
	assert len(leaderboard(db, limit=1)) == 1


def test_user_stats(db, catalog, add_progress):
	add_progress("u1", 1, 15, correct_answers=3)
	add_progress("u1", 2, 5, correct_answers=1, is_completed=False)

	stats = user_stats(db, "u1")

	assert stats["level"] == 1
	assert stats["total_xp"] == 20
	assert stats["badge"]["id"] == 1
	assert stats["badge"]["image_url"] == "/badges/bronze.png"
	assert stats["total_quizzes"] == 2
	assert stats["completed_quizzes"] == 1
	assert stats["total_questions_answered"] == 6
	assert stats["total_correct_answers"] == 4
	assert stats["accuracy"] == 67
	assert db.get(UserProfile, "u1").badge_id == 1


def test_user_stats_without_catalog(db, add_progress):
	add_progress("u1", 1, 15)
	stats = user_stats(db, "u1")
	assert stats["badge"] is None
	assert stats["level"] == 1


def test_user_stats_for_new_user(db, catalog):
	stats = user_stats(db, "fresh")
	assert stats["total_xp"] == 0
	assert stats["accuracy"] == 0
	assert stats["badge"]["name"] == "Pemula"


def test_user_stats_accuracy_rounds_half_up(db, add_progress):
	add_progress("u1", 1, 15, correct_answers=3)
	for material_id in range(2, 9):
		add_progress("u1", material_id, 0, correct_answers=0)

	stats = user_stats(db, "u1")

	assert (stats["total_correct_answers"], stats["total_questions_answered"]) == (3, 24)
	assert stats["accuracy"] == 13
