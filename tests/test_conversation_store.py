from datetime import timedelta


def _turn(store, message, created_at, session_id="s1", feedback=None):
    turn = store.append(
        session_id=session_id,
        user_message=message,
        bot_response="reply",
        matched_kb_id=None,
        confidence_score=0.8,
        created_at=created_at,
    )
    if feedback is not None:
        store.update_feedback(turn.id, feedback)
    return turn


def test_append_assigns_id_and_leaves_feedback_empty(conversation_store, base_time):
    turn = _turn(conversation_store, "hello", base_time)

    stored = conversation_store.get(turn.id)
    assert stored.user_message == "hello"
    assert stored.feedback is None


def test_feedback_is_overwritten_by_later_updates(conversation_store, base_time):
    turn = _turn(conversation_store, "hello", base_time)

    assert conversation_store.update_feedback(turn.id, "helpful") is True
    assert conversation_store.update_feedback(turn.id, "unhelpful") is True
    assert conversation_store.get(turn.id).feedback == "unhelpful"


def test_feedback_for_unknown_id_changes_nothing(conversation_store, base_time):
    _turn(conversation_store, "hello", base_time)

    assert conversation_store.update_feedback(12345, "helpful") is False
    assert [turn.feedback for turn in conversation_store.query()] == [None]


def test_query_filters_by_inclusive_range_and_session(conversation_store, base_time):
    _turn(conversation_store, "before", base_time - timedelta(days=1))
    _turn(conversation_store, "start", base_time)
    _turn(conversation_store, "end", base_time + timedelta(hours=1), session_id="s2")
    _turn(conversation_store, "after", base_time + timedelta(days=1))

    in_range = conversation_store.query(start=base_time, end=base_time + timedelta(hours=1))
    assert [turn.user_message for turn in in_range] == ["start", "end"]

    other_session = conversation_store.query(session_id="s2")
    assert [turn.user_message for turn in other_session] == ["end"]
