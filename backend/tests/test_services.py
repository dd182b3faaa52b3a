import pytest
from conftest import UnavailableStore, ids, make_answer, make_question

from qaforum.db.repositories.question_repo_memory import InMemoryRecordStore
from qaforum.errors import NotFound, PermissionDenied, ValidationFailed
from qaforum.listing.drafts import DraftCache
from qaforum.services.answer_service import AnswerService, display_order
from qaforum.services.notification_service import NotificationService
from qaforum.services.question_service import QuestionService, normalize_tags


@pytest.fixture
def questions(memory_store, drafts):
    return QuestionService(memory_store, drafts)


@pytest.fixture
def notifications(memory_store):
    return NotificationService(memory_store)


@pytest.fixture
def answers(memory_store, notifications):
    return AnswerService(memory_store, notifications)


def test_normalize_tags():
    assert normalize_tags([" Python ", "Machine Learning", "python", "", "  "]) == ("python", "machine-learning")


def test_ask_question_persists_and_mirrors_draft(questions, memory_store, drafts):
    q = questions.ask_question(author_id="alice", title=" Title ", content="<p>x</p>", tags=["Flask"])
    assert memory_store.get_question(q.id) == q
    assert drafts.get(q.id) == q
    assert q.title == "Title"
    assert q.tags == ("flask",)


def test_ask_question_requires_title_and_content(questions):
    with pytest.raises(ValidationFailed):
        questions.ask_question(author_id="alice", title="  ", content="x")
    with pytest.raises(ValidationFailed):
        questions.ask_question(author_id="alice", title="t", content="")


def test_ask_question_falls_back_to_draft_when_store_is_down():
    drafts = DraftCache()
    service = QuestionService(UnavailableStore(), drafts)
    q = service.ask_question(author_id="alice", title="Offline", content="body")
    assert q.id.startswith("draft-")
    assert ids(drafts.snapshot()) == [q.id]
    assert service.get_question(q.id) == q


def test_edit_question_updates_store_and_draft(questions, memory_store, drafts):
    q = questions.ask_question(author_id="alice", title="Before", content="body", tags=["a"])
    edited = questions.edit_question(q.id, user_id="alice", title="After", tags=["b c"])
    assert edited.title == "After"
    assert edited.tags == ("b-c",)
    assert memory_store.get_question(q.id).title == "After"
    assert drafts.get(q.id).title == "After"
    assert questions.edit_question(q.id, user_id="alice") == edited


def test_only_author_can_change_a_question(questions):
    q = questions.ask_question(author_id="alice", title="Mine", content="body")
    with pytest.raises(PermissionDenied):
        questions.edit_question(q.id, user_id="bob", title="Theirs")
    with pytest.raises(PermissionDenied):
        questions.delete_question(q.id, user_id="bob")


def test_delete_question_removes_everywhere(questions, memory_store, drafts):
    q = questions.ask_question(author_id="alice", title="Gone", content="body")
    assert questions.delete_question(q.id, user_id="alice") is True
    assert memory_store.get_question(q.id) is None
    assert q.id not in drafts
    with pytest.raises(NotFound):
        questions.get_question(q.id)


def test_my_questions_merges_store_and_drafts(memory_store, drafts):
    memory_store.create_question(make_question("p1", hours_ago=3))
    memory_store.create_question(make_question("p2", hours_ago=1, author_id="bob"))
    drafts.add(make_question("d1", hours_ago=2))
    service = QuestionService(memory_store, drafts)
    assert ids(service.my_questions("alice")) == ["d1", "p1"]


def test_display_order_puts_accepted_first():
    ordered = display_order(
        [
            make_answer("old", "q", hours_ago=5, vote_score=1),
            make_answer("top", "q", hours_ago=1, vote_score=4),
            make_answer("accepted", "q", hours_ago=0, is_accepted=True),
            make_answer("older", "q", hours_ago=9, vote_score=1),
        ]
    )
    assert [a.id for a in ordered] == ["accepted", "top", "older", "old"]


def test_submit_answer_counts_and_notifies(memory_store, answers, notifications):
    memory_store.create_question(make_question("q1", author_id="alice", title="Loops"))
    answer = answers.submit_answer("q1", author_id="bob", content=" use a for loop ")
    assert answer.content == "use a for loop"
    assert memory_store.get_question("q1").answer_count == 1

    feed, unread = notifications.feed("alice")
    assert unread == 1
    assert feed[0].type == "answer"
    assert feed[0].link == "/question/q1"
    assert '"Loops"' in feed[0].message


def test_answering_own_question_sends_no_notification(memory_store, answers, notifications):
    memory_store.create_question(make_question("q1", author_id="alice"))
    answers.submit_answer("q1", author_id="alice", content="self answer")
    assert notifications.feed("alice") == ([], 0)


def test_submit_answer_errors(memory_store, answers):
    with pytest.raises(NotFound):
        answers.submit_answer("missing", author_id="bob", content="x")
    memory_store.create_question(make_question("q1"))
    with pytest.raises(ValidationFailed):
        answers.submit_answer("q1", author_id="bob", content="   ")


def test_accept_moves_acceptance_and_notifies(memory_store, answers, notifications):
    memory_store.create_question(make_question("q1", author_id="alice"))
    memory_store.create_answer(make_answer("a1", "q1", author_id="bob", is_accepted=True))
    memory_store.create_answer(make_answer("a2", "q1", author_id="carol"))

    accepted = answers.accept("a2", user_id="alice")
    assert accepted.is_accepted
    assert [a.id for a in answers.list_answers("q1") if a.is_accepted] == ["a2"]
    assert notifications.feed("carol")[0][0].type == "accepted"

    with pytest.raises(PermissionDenied):
        answers.accept("a1", user_id="bob")

    assert answers.unaccept("a2", user_id="alice").is_accepted is False


def test_vote_delegates_to_store(memory_store, answers):
    memory_store.create_question(make_question("q1"))
    memory_store.create_answer(make_answer("a1", "q1"))
    assert answers.vote("a1", user_id="u1", vote_type="up") == 1
    assert answers.vote("a1", user_id="u2", vote_type="down") == 0


def test_notification_feed_and_read_marks(notifications):
    n1 = notifications.notify("alice", type="answer", message="one", link="/question/1")
    notifications.notify("alice", type="accepted", message="two", link="/question/2")
    assert notifications.feed("alice")[1] == 2

    assert notifications.mark_read(n1.id) is True
    assert notifications.feed("alice")[1] == 1
    assert notifications.mark_all_read("alice") == 1
    assert notifications.feed("alice")[1] == 0

    with pytest.raises(NotFound):
        notifications.mark_read("missing")
    with pytest.raises(ValidationFailed):
        notifications.notify("alice", type="mention", message="x", link="/")
