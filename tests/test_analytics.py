from datetime import timedelta

from tyrebot.database.core.analytics import AnalyticsAggregator


def _turn(store, message, created_at, feedback=None):
    turn = store.append(
        session_id="s1",
        user_message=message,
        bot_response="reply",
        matched_kb_id=None,
        confidence_score=0.8,
        created_at=created_at,
    )
    if feedback is not None:
        store.update_feedback(turn.id, feedback)
    return turn


def test_summary_counts_feedback_and_ignores_unlabelled_turns(analytics, conversation_store, base_time):
    for index, feedback in enumerate(["helpful", "helpful", "unhelpful", None]):
        _turn(conversation_store, f"question {index}", base_time + timedelta(minutes=index), feedback)

    summary = analytics.summarize(base_time - timedelta(days=1), base_time + timedelta(days=1))

    assert summary["totalConversations"] == 4
    assert summary["feedbackStats"] == [
        {"feedback": "helpful", "count": 2},
        {"feedback": "unhelpful", "count": 1},
    ]


def test_top_questions_are_ordered_by_frequency(analytics, conversation_store, base_time):
    for message, times in [("warranty?", 3), ("price?", 1), ("dealer?", 2)]:
        for _ in range(times):
            _turn(conversation_store, message, base_time)

    summary = analytics.summarize(base_time, base_time)

    assert summary["topQuestions"] == [
        {"userMessage": "warranty?", "count": 3},
        {"userMessage": "dealer?", "count": 2},
        {"userMessage": "price?", "count": 1},
    ]


def test_top_questions_are_limited(database, conversation_store, base_time):
    for index in range(4):
        _turn(conversation_store, f"question {index}", base_time)

    summary = AnalyticsAggregator(database, top_questions_limit=2).summarize(base_time, base_time)

    assert len(summary["topQuestions"]) == 2


def test_bounds_are_inclusive(analytics, conversation_store, base_time):
    end = base_time + timedelta(hours=2)
    _turn(conversation_store, "at start", base_time)
    _turn(conversation_store, "at end", end)
    _turn(conversation_store, "just after", end + timedelta(seconds=1))

    assert analytics.summarize(base_time, end)["totalConversations"] == 2


def test_missing_bounds_cover_everything_until_now(analytics, conversation_store, base_time):
    _turn(conversation_store, "old", base_time - timedelta(days=3650))
    _turn(conversation_store, "recent", base_time)

    assert analytics.summarize()["totalConversations"] == 2


def test_naive_bounds_are_read_as_utc(analytics, conversation_store, base_time):
    _turn(conversation_store, "hello", base_time)

    naive = base_time.replace(tzinfo=None)
    assert analytics.summarize(naive, naive)["totalConversations"] == 1


def test_empty_log_gives_empty_summary(analytics):
    assert analytics.summarize() == {"totalConversations": 0, "feedbackStats": [], "topQuestions": []}
