from __future__ import annotations
from datetime import datetime
from sqlalchemy import Boolean, Column, String, DateTime, ForeignKey, Integer, JSON, Text, UniqueConstraint
from .db import Base


class UserProfile(Base):
	__tablename__ = "user_profiles"
	user_id = Column(String(64), primary_key=True, index=True)
	full_name = Column(String(256), nullable=True)
	badge_id = Column(Integer, ForeignKey("badge.badge_id"), nullable=True)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class Badge(Base):
	__tablename__ = "badge"
	# Column names follow the existing catalog (nama = name, gambar = image reference)
	badge_id = Column(Integer, primary_key=True)
	nama = Column(String(128), nullable=False)
	gambar = Column(String(512), nullable=False)
	level_min = Column(Integer, nullable=False, index=True)
	level_max = Column(Integer, nullable=False)
	description = Column(Text, nullable=True)


class Material(Base):
	__tablename__ = "materials"
	id = Column(Integer, primary_key=True)
	title = Column(String(256), nullable=False)
	# One entry per page; only the count matters here
	pages = Column(JSON, nullable=True)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class MaterialPageQuiz(Base):
	__tablename__ = "material_page_quizzes"
	__table_args__ = (UniqueConstraint("material_id", "page_number", name="uq_page_quiz"),)
	id = Column(Integer, primary_key=True)
	material_id = Column(Integer, nullable=False, index=True)
	page_number = Column(Integer, nullable=False)
	question = Column(Text, nullable=False)
	options = Column(JSON, nullable=False)
	correct_answer = Column(Integer, nullable=False)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class UserMaterialQuizScore(Base):
	__tablename__ = "user_material_quiz_scores"
	__table_args__ = (UniqueConstraint("user_id", "material_id", name="uq_quiz_score_user_material"),)
	id = Column(Integer, primary_key=True)
	user_id = Column(String(64), nullable=False, index=True)
	material_id = Column(Integer, nullable=False)
	# page number (string) -> {result, selected_answer, answered_at}
	page_scores = Column(JSON, nullable=False, default=dict)
	total_correct = Column(Integer, default=0, nullable=False)
	total_answered = Column(Integer, default=0, nullable=False)
	version_id = Column(Integer, nullable=False)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

	__mapper_args__ = {"version_id_col": version_id}


class QuizQuestion(Base):
	__tablename__ = "quiz_questions"
	id = Column(Integer, primary_key=True)
	materials_id = Column(Integer, nullable=False, index=True)
	question_number = Column(Integer, nullable=False)
	question_text = Column(Text, nullable=False)


class QuizOption(Base):
	__tablename__ = "quiz_options"
	id = Column(Integer, primary_key=True)
	question_id = Column(Integer, ForeignKey("quiz_questions.id"), nullable=False, index=True)
	option_letter = Column(String(1), nullable=False)
	option_text = Column(Text, nullable=False)
	is_correct = Column(Boolean, default=False, nullable=False)


class UserQuizAnswer(Base):
	__tablename__ = "user_quiz_answers"
	user_id = Column(String(64), primary_key=True)
	question_id = Column(Integer, ForeignKey("quiz_questions.id"), primary_key=True)
	selected_option_id = Column(Integer, ForeignKey("quiz_options.id"), nullable=False)
	is_correct = Column(Boolean, nullable=False)
	answered_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class UserMaterialQuizProgress(Base):
	__tablename__ = "user_materials_quiz_progress"
	__table_args__ = (UniqueConstraint("user_id", "materials_id", name="uq_quiz_progress_user_material"),)
	id = Column(Integer, primary_key=True)
	user_id = Column(String(64), nullable=False, index=True)
	materials_id = Column(Integer, nullable=False)
	questions_answered = Column(Integer, default=0, nullable=False)
	correct_answers = Column(Integer, default=0, nullable=False)
	total_questions = Column(Integer, nullable=False)
	xp_earned = Column(Integer, default=0, nullable=True)
	is_completed = Column(Boolean, default=False, nullable=False)
	completed_attempts = Column(Integer, default=0, nullable=False)
	completed_at = Column(DateTime, nullable=True)
	version_id = Column(Integer, nullable=False)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

	__mapper_args__ = {"version_id_col": version_id}
