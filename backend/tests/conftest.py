import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from edugame.db import Base, get_db
from edugame.main import app
from edugame.models import Badge, MaterialPageQuiz, QuizOption, QuizQuestion, UserMaterialQuizProgress


@pytest.fixture
def engine(tmp_path):
	engine = create_engine(
		f"sqlite:///{tmp_path / 'edugame-test.db'}",
		connect_args={"check_same_thread": False},
		future=True,
	)
	Base.metadata.create_all(bind=engine)
	yield engine
	engine.dispose()


@pytest.fixture
def session_factory(engine):
	return sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)


@pytest.fixture
def db(session_factory):
	session = session_factory()
	try:
		yield session
	finally:
		session.close()


@pytest.fixture
def client(session_factory):
	def override_get_db():
		session = session_factory()
		try:
			yield session
		finally:
			session.close()

	app.dependency_overrides[get_db] = override_get_db
	yield TestClient(app)
	app.dependency_overrides.clear()


@pytest.fixture
def catalog(db):
	rows = [
		Badge(badge_id=1, nama="Pemula", gambar="/badges/bronze.jpg", level_min=1, level_max=2),
		Badge(badge_id=2, nama="Amatir", gambar="/badges/silver.png", level_min=3, level_max=4),
		Badge(badge_id=3, nama="Basic", gambar="/badges/gold.png", level_min=5, level_max=6),
		Badge(badge_id=4, nama="Pro", gambar="/badges/platinum.jpg", level_min=7, level_max=7),
		Badge(badge_id=5, nama="Ace", gambar="/badges/ace.png", level_min=8, level_max=8),
	]
	db.add_all(rows)
	db.commit()
	return rows


@pytest.fixture
def page_quizzes(db):
	"""Material 1 with three pages; the correct answer of page n is n % 4."""
	quizzes = [
		MaterialPageQuiz(
			material_id=1,
			page_number=n,
			question=f"Question for page {n}",
			options=["A", "B", "C", "D"],
			correct_answer=n % 4,
		)
		for n in (1, 2, 3)
	]
	db.add_all(quizzes)
	db.commit()
	return quizzes


@pytest.fixture
def game(db):
	"""Material 7 with three questions; option letter A is always correct."""
	questions = []
	for number in (1, 2, 3):
		q = QuizQuestion(materials_id=7, question_number=number, question_text=f"Q{number}")
		db.add(q)
		db.flush()
		options = {}
		for letter in "ABCD":
			opt = QuizOption(question_id=q.id, option_letter=letter, option_text=f"{letter}{number}", is_correct=(letter == "A"))
			db.add(opt)
			db.flush()
			options[letter] = opt.id
		questions.append({"id": q.id, "options": options})
	db.commit()
	return questions


@pytest.fixture
def add_progress(db):
	def _add(user_id, material_id, xp, correct_answers=0, is_completed=True):
		row = UserMaterialQuizProgress(
			user_id=user_id,
			materials_id=material_id,
			questions_answered=3,
			correct_answers=correct_answers,
			total_questions=3,
			xp_earned=xp,
			is_completed=is_completed,
			completed_attempts=1 if is_completed else 0,
		)
		db.add(row)
		db.commit()
		return row

	return _add
