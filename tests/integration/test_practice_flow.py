"""
Integration tests for the practice flow against an in-memory database.

Covers recording answers, next-question selection, stats, and the two
cross-cutting rules: answer edits invalidate progress, deletes cascade.
"""

import json

import pytest
from sqlalchemy import select

from quizz.db.models import ProgressRecord
from quizz.practice.errors import (
    InvalidQuestionError,
    PermissionDeniedError,
    ProgressNotFoundError,
    QuestionNotFoundError,
)
from quizz.practice.models import Role
from quizz.practice.service import Caller

ADMIN = Caller(user_id=1, role=Role.ADMIN)
MODERATOR = Caller(user_id=2, role=Role.MODERATOR)
ALICE = Caller(user_id=10)
BOB = Caller(user_id=11)


class TestRecordProgress:
    def test_correct_answer_is_recorded(self, practice_service, make_question, progress_repo):
        question = make_question()
        entry = practice_service.record_progress(ALICE.user_id, question.id, "  PARIS ", time_taken_seconds=4)

        assert entry.id is not None
        assert entry.is_correct is True
        assert entry.user_answer == "  PARIS "
        assert entry.time_taken_seconds == 4
        assert entry.answered_at is not None
        assert progress_repo.get_by_id(entry.id) == entry

    def test_wrong_answer_is_recorded(self, practice_service, make_question):
        question = make_question()
        assert practice_service.record_progress(ALICE.user_id, question.id, "Lyon").is_correct is False

    def test_same_answer_twice_appends_two_entries(self, practice_service, make_question, progress_repo):
        question = make_question()
        first = practice_service.record_progress(ALICE.user_id, question.id, "Paris")
        second = practice_service.record_progress(ALICE.user_id, question.id, "Paris")

        assert first.id != second.id
        assert first.is_correct == second.is_correct
        assert len(progress_repo.list_for_user_question(ALICE.user_id, question.id)) == 2

    def test_unknown_question(self, practice_service):
        with pytest.raises(QuestionNotFoundError):
            practice_service.record_progress(ALICE.user_id, 999, "Paris")

    def test_unknown_progress_entry(self, progress_repo):
        with pytest.raises(ProgressNotFoundError):
            progress_repo.get_by_id(123)

    def test_multiple_select_motto(self, practice_service, make_question):
        question = make_question(
            question="Which words form the French motto?",
            question_type="multiple_select",
            choices=["liberté", "égalité", "fraternité", "royauté"],
            answer=["liberté", "égalité", "fraternité"],
            category="Civics",
        )
        assert json.loads(question.answer) == ["liberté", "égalité", "fraternité"]

        assert practice_service.record_progress(1, question.id, "Fraternité, liberté, ÉGALITÉ").is_correct
        assert practice_service.record_progress(1, question.id, '["égalité","fraternité","liberté"]').is_correct
        assert not practice_service.record_progress(1, question.id, "liberté, égalité").is_correct
        assert not practice_service.record_progress(1, question.id, "liberté, égalité, fraternité, royauté").is_correct


class TestNextQuestions:
    def test_default_batch_is_ten(self, practice_service, make_question):
        for i in range(15):
            make_question(question=f"Question {i}?", answer=str(i))

        batch = practice_service.next_questions(ALICE.user_id)
        assert len(batch) == 10
        assert len({q.id for q in batch}) == 10

    @pytest.mark.parametrize("requested, expected", [(0, 1), (-5, 1), (3, 3), (500, 15)])
    def test_count_clamped(self, practice_service, make_question, requested, expected):
        for i in range(15):
            make_question(question=f"Question {i}?", answer=str(i))
        assert len(practice_service.next_questions(ALICE.user_id, requested)) == expected

    def test_missed_questions_come_before_correct_ones(self, practice_service, make_question):
        first = make_question(question="First?", answer="a")
        second = make_question(question="Second?", answer="b")

        practice_service.record_progress(ALICE.user_id, first.id, "a")
        practice_service.record_progress(ALICE.user_id, second.id, "wrong")

        assert [q.id for q in practice_service.next_questions(ALICE.user_id)] == [second.id, first.id]

    def test_never_answered_first(self, practice_service, make_question):
        answered = make_question(question="Seen?", answer="a")
        fresh = make_question(question="Fresh?", answer="b")
        practice_service.record_progress(ALICE.user_id, answered.id, "wrong")

        assert practice_service.next_questions(ALICE.user_id)[0].id == fresh.id

    def test_pending_questions_not_served(self, practice_service, make_question):
        make_question(question="Pending?", role="user")
        assert practice_service.next_questions(ALICE.user_id) == []


class TestStats:
    def test_stats_after_answers(self, practice_service, make_question):
        geo = make_question()
        history = make_question(question="Year of the revolution?", answer="1789", category="History")

        practice_service.record_progress(ALICE.user_id, geo.id, "Lyon")
        practice_service.record_progress(ALICE.user_id, geo.id, "Paris")
        practice_service.record_progress(ALICE.user_id, history.id, "1789")

        stats = practice_service.user_stats(ALICE.user_id)
        assert stats.total_questions == 2
        assert stats.answered == 3
        assert stats.correct == 2
        assert stats.accuracy == pytest.approx(2 / 3)
        assert stats.streak == 2
        assert stats.categories["Geography"].to_dict() == {"answered": 2, "correct": 1}
        assert stats.categories["History"].to_dict() == {"answered": 1, "correct": 1}

    def test_fresh_user_has_zero_stats(self, practice_service, make_question):
        make_question()
        stats = practice_service.user_stats(BOB.user_id)
        assert (stats.answered, stats.correct, stats.accuracy, stats.streak) == (0, 0, 0.0, 0)


class TestAnswerEditInvalidation:
    """Changing a question's answer clears every user's progress on it, and only on it."""

    @pytest.fixture
    def scenario(self, practice_service, make_question):
        q = make_question(question="Capital of France?", answer="Paris")
        r = make_question(question="Capital of Italy?", answer="Rome")
        for caller in (ALICE, BOB):
            practice_service.record_progress(caller.user_id, q.id, "Paris")
            practice_service.record_progress(caller.user_id, r.id, "Rome")
        return q, r

    def _payload(self, source, **changes):
        payload = source.to_dict()
        payload.update(changes)
        return payload

    def test_answer_change_clears_progress(self, scenario, question_service, progress_repo, practice_service):
        q, r = scenario
        question_service.update_question(q.id, self._payload(q, answer="paris "), ADMIN)

        for caller in (ALICE, BOB):
            assert progress_repo.list_for_user_question(caller.user_id, q.id) == []
            assert len(progress_repo.list_for_user_question(caller.user_id, r.id)) == 1
            assert practice_service.user_stats(caller.user_id).answered == 1

    def test_unchanged_answer_keeps_progress(self, scenario, question_service, progress_repo):
        q, _ = scenario
        question_service.update_question(q.id, self._payload(q, question="Capital city of France?"), ADMIN)

        assert len(progress_repo.list_for_user_question(ALICE.user_id, q.id)) == 1

    def test_cleared_question_is_new_again(self, scenario, question_service, practice_service):
        q, _ = scenario
        question_service.update_question(q.id, self._payload(q, answer="Paris, France"), ADMIN)

        assert practice_service.next_questions(ALICE.user_id)[0].id == q.id

    def test_invalid_edit_keeps_progress(self, scenario, question_service, progress_repo):
        q, _ = scenario
        with pytest.raises(InvalidQuestionError):
            question_service.update_question(q.id, self._payload(q, answer="", question="x"), ADMIN)

        assert len(progress_repo.list_for_user_question(ALICE.user_id, q.id)) == 1


class TestDeleteCascade:
    def test_delete_removes_only_its_progress(self, practice_service, question_service, make_question, session_factory):
        q = make_question(question="Delete me?", answer="yes")
        r = make_question(question="Keep me?", answer="yes")
        for caller in (ALICE, BOB):
            practice_service.record_progress(caller.user_id, q.id, "yes")
            practice_service.record_progress(caller.user_id, r.id, "no")

        removed = question_service.delete_question(q.id, ADMIN)

        assert removed == 2
        with session_factory() as session:
            remaining = session.scalars(select(ProgressRecord.question_id)).all()
        assert remaining == [r.id, r.id]
        with pytest.raises(QuestionNotFoundError):
            practice_service.record_progress(ALICE.user_id, q.id, "yes")

    def test_delete_unknown_question(self, question_service):
        with pytest.raises(QuestionNotFoundError):
            question_service.delete_question(404, ADMIN)


class TestRoles:
    def test_user_submission_is_pending(self, question_service):
        question = question_service.create_question(
            {"category": "Geo", "question": "Longest river?", "answer": "Nile"}, ALICE
        )
        assert question.status == "pending"
        assert question.created_by == ALICE.user_id

    def test_user_cannot_pick_status(self, question_service):
        question = question_service.create_question(
            {"category": "Geo", "question": "Longest river?", "answer": "Nile", "status": "approved"}, ALICE
        )
        assert question.status == "pending"

    def test_admin_submission_is_approved(self, question_service):
        question = question_service.create_question(
            {"category": "Geo", "question": "Longest river?", "answer": "Nile"}, ADMIN
        )
        assert question.status == "approved"

    def test_visibility(self, question_service, make_question):
        approved = make_question(question="Public?")
        mine = make_question(question="Mine?", created_by=ALICE.user_id, role="user")
        theirs = make_question(question="Theirs?", created_by=BOB.user_id, role="user")

        assert {q.id for q in question_service.list_questions(ALICE)} == {approved.id, mine.id}
        assert {q.id for q in question_service.list_questions(MODERATOR)} == {approved.id, mine.id, theirs.id}
        with pytest.raises(QuestionNotFoundError):
            question_service.get_question(theirs.id, ALICE)

    def test_only_creator_or_staff_can_edit(self, question_service, make_question):
        question = make_question(question="Mine?", created_by=ALICE.user_id, role="user")
        payload = question.to_dict()

        with pytest.raises(PermissionDeniedError):
            question_service.update_question(question.id, payload, BOB)
        assert question_service.update_question(question.id, payload, ALICE).id == question.id
        assert question_service.update_question(question.id, payload, MODERATOR).id == question.id

    def test_moderator_cannot_delete_others_questions(self, question_service, make_question):
        question = make_question(question="Mine?", created_by=ALICE.user_id, role="user")
        with pytest.raises(PermissionDeniedError):
            question_service.delete_question(question.id, MODERATOR)

    def test_moderation(self, question_service, make_question):
        question = make_question(question="Pending?", created_by=ALICE.user_id, role="user")

        with pytest.raises(PermissionDeniedError):
            question_service.moderate(question.id, "approve", ALICE)

        approved = question_service.moderate(question.id, "approve", MODERATOR)
        assert approved.status == "approved"
        assert approved.approved_by == MODERATOR.user_id
        assert approved.approved_at is not None

    def test_moderation_requires_pending(self, question_service, make_question):
        question = make_question()
        with pytest.raises(ValueError, match="not pending"):
            question_service.moderate(question.id, "reject", ADMIN)
