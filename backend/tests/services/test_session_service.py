import pytest

from skillcheck import models
from skillcheck.errors import NotFoundError, ValidationError
from skillcheck.llm.scoring_schema import DEFAULT_DELIVERY_FEEDBACK, DEFAULT_FEEDBACK
from skillcheck.services import session_service

from helpers import GOOD_EVALUATION


def _session(db, user, **overrides):
    fields = {"skill_name": "Redis", "mode": "explain", "input_type": "text", "difficulty": "beginner"}
    fields.update(overrides)
    return session_service.create_session(db, user.id, **fields)


@pytest.mark.parametrize("skill_name,mode,input_type,difficulty", [
    ("Redis", "explain", "text", "beginner"),
    ("Load Balancing", "drill", "voice", "intermediate"),
    ("Graphs", "blind", "text", "advanced"),
])
def test_create_session_echoes_inputs(db, user, skill_name, mode, input_type, difficulty):
    s = session_service.create_session(db, user.id, skill_name, mode, input_type, difficulty)
    assert (s.skill_name, s.mode, s.input_type, s.difficulty) == (skill_name, mode, input_type, difficulty)
    assert s.user_id == user.id


@pytest.mark.parametrize("overrides,message", [
    ({"mode": "lecture"}, "mode must be one of"),
    ({"input_type": "video"}, "input_type must be one of"),
    ({"difficulty": "expert"}, "difficulty must be one of"),
    ({"skill_name": "  "}, "skill_name is required"),
])
def test_create_session_rejects_bad_choices(db, user, overrides, message):
    with pytest.raises(ValidationError, match=message):
        _session(db, user, **overrides)


def test_create_session_allows_duplicates_for_same_skill(db, user):
    a = _session(db, user)
    b = _session(db, user)
    assert a.id != b.id


def test_voice_metrics_ignored_for_text_session(db, user):
    s = _session(db, user, input_type="text")
    session_service.submit_answer(db, s.id, "answer", voice_metrics={"wpm": 130, "filler_words": 2, "long_pauses": 0})
    assert db.query(models.VoiceMetrics).count() == 0


def test_voice_metrics_stored_for_voice_session(db, user):
    s = _session(db, user, input_type="voice")
    session_service.submit_answer(
        db, s.id, "answer", transcript="answer", duration=42.0,
        voice_metrics={"wpm": 130, "filler_words": 2, "long_pauses": 1},
    )
    metrics = db.query(models.VoiceMetrics).all()
    assert len(metrics) == 1
    assert (metrics[0].wpm, metrics[0].filler_words, metrics[0].long_pauses) == (130, 2, 1)


def test_submit_answer_allows_multiple_takes(db, user):
    s = _session(db, user)
    session_service.submit_answer(db, s.id, "first take")
    session_service.submit_answer(db, s.id, "second take")
    assert db.query(models.UserAnswer).filter_by(session_id=s.id).count() == 2


def test_submit_answer_unknown_session(db):
    with pytest.raises(NotFoundError, match="Session not found"):
        session_service.submit_answer(db, 999, "answer")


def test_evaluate_twice_returns_same_judgement(db, user, llm_reply):
    s = _session(db, user)
    answer = session_service.submit_answer(db, s.id, "answer")
    first = session_service.evaluate_session(db, s.id, answer.id)
    second = session_service.evaluate_session(db, s.id, answer.id)
    assert first.id == second.id
    assert db.query(models.Judgement).count() == 1
    assert len(llm_reply.state["prompts"]) == 1


def test_evaluate_defaults_to_latest_answer(db, user, llm_reply):
    s = _session(db, user)
    session_service.submit_answer(db, s.id, "older")
    newer = session_service.submit_answer(db, s.id, "newer")
    judgement = session_service.evaluate_session(db, s.id)
    assert judgement.answer_id == newer.id
    assert judgement.status == models.STATUS_SUCCEEDED
    assert judgement.model_version == "gemini-test"


def test_evaluate_uses_voice_metrics_and_skill(db, user, llm_reply):
    s = _session(db, user, skill_name="Kafka", input_type="voice")
    session_service.submit_answer(db, s.id, "answer", voice_metrics={"wpm": 155, "filler_words": 0, "long_pauses": 0})
    session_service.evaluate_session(db, s.id)
    prompt = llm_reply.state["prompts"][0]
    assert 'skill: "Kafka"' in prompt
    assert "Words per minute (WPM): 155" in prompt


def test_evaluate_without_answers(db, user):
    s = _session(db, user)
    with pytest.raises(NotFoundError, match="No answer found for this session"):
        session_service.evaluate_session(db, s.id)


def test_evaluate_rejects_answer_from_other_session(db, user, llm_reply):
    s1 = _session(db, user)
    s2 = _session(db, user)
    other = session_service.submit_answer(db, s2.id, "answer")
    with pytest.raises(NotFoundError, match="Answer not found"):
        session_service.evaluate_session(db, s1.id, other.id)


def test_failed_evaluation_is_typed_and_retried_in_place(db, user, llm_reply):
    s = _session(db, user)
    answer = session_service.submit_answer(db, s.id, "answer")

    llm_reply(ok=False, error="HTTP 500 from Gemini")
    failed = session_service.evaluate_session(db, s.id, answer.id)
    assert failed.status == models.STATUS_FAILED
    assert failed.error == "HTTP 500 from Gemini"
    assert failed.missing_concepts == ["Evaluation failed"]

    llm_reply(ok=True)
    retried = session_service.evaluate_session(db, s.id, answer.id)
    assert retried.id == failed.id
    assert retried.status == models.STATUS_SUCCEEDED
    assert retried.error is None
    assert retried.clarity == 8
    assert db.query(models.Judgement).count() == 1


def test_pending_judgement_is_returned_without_calling_llm(db, user, llm_reply):
    s = _session(db, user)
    answer = session_service.submit_answer(db, s.id, "answer")
    db.add(models.Judgement(session_id=s.id, answer_id=answer.id, status=models.STATUS_PENDING))
    db.commit()

    judgement = session_service.evaluate_session(db, s.id, answer.id)
    assert judgement.status == models.STATUS_PENDING
    assert llm_reply.state["prompts"] == []


def test_concurrent_insert_loses_to_first_writer(db, user, llm_reply, monkeypatch):
    s = _session(db, user)
    answer = session_service.submit_answer(db, s.id, "answer")

    # another request inserts between our lookup and our insert
    real_lookup = session_service.crud.get_judgement_for_answer
    calls = {"n": 0}

    def _racy_lookup(session, answer_id):
        calls["n"] += 1
        if calls["n"] == 1:
            session.add(models.Judgement(
                session_id=s.id, answer_id=answer_id, status=models.STATUS_SUCCEEDED, clarity=5,
            ))
            session.commit()
            return None
        return real_lookup(session, answer_id)

    monkeypatch.setattr(session_service.crud, "get_judgement_for_answer", _racy_lookup)
    judgement = session_service.evaluate_session(db, s.id, answer.id)

    assert judgement.clarity == 5
    assert db.query(models.Judgement).count() == 1
    assert llm_reply.state["prompts"] == []


def test_summary_for_unknown_session(db):
    with pytest.raises(NotFoundError, match="Session not found"):
        session_service.get_session_summary(db, 12345)


def test_summary_with_no_answers(db, user):
    s = _session(db, user)
    summary = session_service.get_session_summary(db, s.id)
    assert summary["session"]["id"] == s.id
    assert summary["attempts"] == []
    assert summary["voice_metrics"] is None


def test_summary_two_answers_only_second_evaluated(db, user, llm_reply):
    s = _session(db, user)
    first = session_service.submit_answer(db, s.id, "first take")
    second = session_service.submit_answer(db, s.id, "second take")
    session_service.evaluate_session(db, s.id, second.id)

    attempts = session_service.get_session_summary(db, s.id)["attempts"]
    assert [a["answer"]["id"] for a in attempts] == [second.id, first.id]
    assert attempts[0]["evaluation"] is not None
    assert attempts[0]["evaluation"]["answer_id"] == second.id
    assert attempts[1]["evaluation"] is None


def test_summary_falls_back_to_legacy_judgement_for_single_answer(db, user):
    s = _session(db, user)
    session_service.submit_answer(db, s.id, "only take")
    legacy = models.Judgement(session_id=s.id, answer_id=None, status=models.STATUS_SUCCEEDED, clarity=6)
    db.add(legacy)
    db.commit()

    attempts = session_service.get_session_summary(db, s.id)["attempts"]
    assert attempts[0]["evaluation"]["id"] == legacy.id

    # with a second take the legacy record is no longer attributable
    session_service.submit_answer(db, s.id, "another take")
    attempts = session_service.get_session_summary(db, s.id)["attempts"]
    assert all(a["evaluation"] is None for a in attempts)


def test_summary_includes_latest_voice_metrics(db, user):
    s = _session(db, user, input_type="voice")
    session_service.submit_answer(db, s.id, "a", voice_metrics={"wpm": 100, "filler_words": 5, "long_pauses": 2})
    session_service.submit_answer(db, s.id, "b", voice_metrics={"wpm": 140, "filler_words": 1, "long_pauses": 0})
    summary = session_service.get_session_summary(db, s.id)
    assert summary["voice_metrics"]["wpm"] == 140


def test_session_is_hidden_from_other_users(db, user):
    s = _session(db, user)
    with pytest.raises(NotFoundError):
        session_service.get_session(db, s.id, user_id=user.id + 1)


def test_get_session_evaluation(db, user, llm_reply):
    s = _session(db, user)
    with pytest.raises(NotFoundError, match="Evaluation not found"):
        session_service.get_session_evaluation(db, s.id)
    session_service.submit_answer(db, s.id, "answer")
    judgement = session_service.evaluate_session(db, s.id)
    assert session_service.get_session_evaluation(db, s.id).id == judgement.id


def test_non_string_feedback_is_stored_as_default(db, user, llm_reply):
    llm_reply({**GOOD_EVALUATION, "feedback": {"summary": "ok"}, "deliveryFeedback": ["too fast"]})
    s = _session(db, user)
    answer = session_service.submit_answer(db, s.id, "answer")

    judgement = session_service.evaluate_session(db, s.id, answer.id)
    assert judgement.status == models.STATUS_SUCCEEDED
    assert judgement.feedback == DEFAULT_FEEDBACK
    assert judgement.delivery_feedback == DEFAULT_DELIVERY_FEEDBACK
    assert judgement.clarity == 8


def test_crash_during_evaluation_leaves_retryable_failed_row(db, user, llm_reply, monkeypatch):
    s = _session(db, user)
    answer = session_service.submit_answer(db, s.id, "answer")

    real_evaluate = session_service.llm_engine.evaluate_answer
    calls = {"n": 0}

    def _flaky(*args, **kwargs):
        calls["n"] += 1
        if calls["n"] == 1:
            raise RuntimeError("worker died")
        return real_evaluate(*args, **kwargs)

    monkeypatch.setattr(session_service.llm_engine, "evaluate_answer", _flaky)

    failed = session_service.evaluate_session(db, s.id, answer.id)
    assert failed.status == models.STATUS_FAILED
    assert failed.error == "worker died"

    retried = session_service.evaluate_session(db, s.id, answer.id)
    assert retried.id == failed.id
    assert retried.status == models.STATUS_SUCCEEDED
    assert db.query(models.Judgement).count() == 1


def test_crash_while_saving_result_marks_row_failed(db, user, llm_reply, monkeypatch):
    s = _session(db, user)
    answer = session_service.submit_answer(db, s.id, "answer")

    real_save = session_service.crud.save
    calls = {"n": 0}

    def _flaky_save(session, obj):
        calls["n"] += 1
        if calls["n"] == 1:
            raise RuntimeError("disk full")
        return real_save(session, obj)

    monkeypatch.setattr(session_service.crud, "save", _flaky_save)

    failed = session_service.evaluate_session(db, s.id, answer.id)
    assert failed.status == models.STATUS_FAILED
    assert failed.error == "disk full"
    assert failed.missing_concepts == ["Evaluation failed"]

    monkeypatch.setattr(session_service.crud, "save", real_save)
    retried = session_service.evaluate_session(db, s.id, answer.id)
    assert retried.id == failed.id
    assert retried.status == models.STATUS_SUCCEEDED


def test_empty_voice_metrics_are_not_stored(db, user):
    s = _session(db, user, input_type="voice")
    session_service.submit_answer(db, s.id, "a", voice_metrics={"wpm": 140, "filler_words": 1, "long_pauses": 0})
    session_service.submit_answer(db, s.id, "b", voice_metrics={"wpm": None, "filler_words": None, "long_pauses": None})
    session_service.submit_answer(db, s.id, "c", voice_metrics={})

    assert db.query(models.VoiceMetrics).count() == 1
    assert session_service.get_session_summary(db, s.id)["voice_metrics"]["wpm"] == 140
