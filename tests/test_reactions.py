import threading

import pytest

from app.core.errors import ConflictError, NotFoundError
from app.modules.posts.reactions.models.reaction import Reaction
from app.modules.posts.reactions.schemas.reaction import ReactionAction, ReactionState, TargetType
from app.modules.posts.reactions.services.reaction import (
    ReactionLedger, StaleReactionError, StoreOp, next_state
)

API = "/api/v1"

LIKE = ReactionAction.LIKE
DISLIKE = ReactionAction.DISLIKE


@pytest.mark.parametrize("current, action, expected", [
    (ReactionState.NONE, LIKE, (ReactionState.LIKED, StoreOp.INSERT)),
    (ReactionState.NONE, DISLIKE, (ReactionState.DISLIKED, StoreOp.INSERT)),
    (ReactionState.LIKED, LIKE, (ReactionState.NONE, StoreOp.DELETE)),
    (ReactionState.LIKED, DISLIKE, (ReactionState.DISLIKED, StoreOp.UPDATE)),
    (ReactionState.DISLIKED, LIKE, (ReactionState.LIKED, StoreOp.UPDATE)),
    (ReactionState.DISLIKED, DISLIKE, (ReactionState.NONE, StoreOp.DELETE)),
])
def test_next_state(current, action, expected):
    assert next_state(current, action) == expected


def test_like_dislike_sequence(db, make_user, make_post):
    user = make_user()
    post = make_post(user)
    ledger = ReactionLedger(db)

    result = ledger.toggle(user.id, TargetType.POST, post.id, LIKE)
    assert (result.like_count, result.dislike_count, result.user_reaction) == (1, 0, ReactionState.LIKED)

    result = ledger.toggle(user.id, TargetType.POST, post.id, DISLIKE)
    assert (result.like_count, result.dislike_count, result.user_reaction) == (0, 1, ReactionState.DISLIKED)

    result = ledger.toggle(user.id, TargetType.POST, post.id, DISLIKE)
    assert (result.like_count, result.dislike_count, result.user_reaction) == (0, 0, ReactionState.NONE)


@pytest.mark.parametrize("action", [LIKE, DISLIKE])
def test_same_action_twice_restores_state(db, make_user, make_post, action):
    user = make_user()
    post = make_post(user)
    ledger = ReactionLedger(db)

    ledger.toggle(user.id, TargetType.POST, post.id, action)
    ledger.toggle(user.id, TargetType.POST, post.id, action)

    assert db.query(Reaction).count() == 0
    assert ledger.user_reaction(user.id, TargetType.POST, post.id) is ReactionState.NONE


def test_switching_keeps_a_single_row(db, make_user, make_post):
    user = make_user()
    post = make_post(user)
    ledger = ReactionLedger(db)

    for action in (LIKE, DISLIKE, LIKE, DISLIKE):
        ledger.toggle(user.id, TargetType.POST, post.id, action)

    rows = db.query(Reaction).all()
    assert len(rows) == 1
    assert rows[0].value == "dislike"


def test_counts_per_target(db, make_user, make_post, make_comment):
    alice, bob, carol = make_user(), make_user(), make_user()
    post = make_post(alice)
    comment = make_comment(post, alice)
    ledger = ReactionLedger(db)

    ledger.toggle(alice.id, TargetType.POST, post.id, LIKE)
    ledger.toggle(bob.id, TargetType.POST, post.id, LIKE)
    ledger.toggle(carol.id, TargetType.POST, post.id, DISLIKE)
    ledger.toggle(bob.id, TargetType.COMMENT, comment.id, DISLIKE)

    post_counts = ledger.counts(TargetType.POST, post.id)
    comment_counts = ledger.counts(TargetType.COMMENT, comment.id)
    assert (post_counts.like_count, post_counts.dislike_count) == (2, 1)
    assert (comment_counts.like_count, comment_counts.dislike_count) == (0, 1)
    assert ledger.user_reaction(carol.id, TargetType.POST, post.id) is ReactionState.DISLIKED
    assert ledger.user_reaction(None, TargetType.POST, post.id) is ReactionState.NONE


def test_toggle_on_missing_target(db, make_user):
    user = make_user()
    with pytest.raises(NotFoundError):
        ReactionLedger(db).toggle(user.id, TargetType.COMMENT, "missing", LIKE)
    assert db.query(Reaction).count() == 0


def test_stale_write_is_retried_once(db, make_user, make_post, monkeypatch):
    user = make_user()
    post = make_post(user)
    ledger = ReactionLedger(db)
    real_apply = ReactionLedger._apply
    calls = []

    def flaky_apply(self, *args):
        calls.append(args)
        if len(calls) == 1:
            raise StaleReactionError("changed underneath")
        return real_apply(self, *args)

    monkeypatch.setattr(ReactionLedger, "_apply", flaky_apply)

    result = ledger.toggle(user.id, TargetType.POST, post.id, LIKE)

    assert len(calls) == 2
    assert result.like_count == 1


def test_repeated_stale_write_is_a_conflict(db, make_user, make_post, monkeypatch):
    user = make_user()
    post = make_post(user)

    def always_stale(self, *args):
        raise StaleReactionError("changed underneath")

    monkeypatch.setattr(ReactionLedger, "_apply", always_stale)

    with pytest.raises(ConflictError):
        ReactionLedger(db).toggle(user.id, TargetType.POST, post.id, LIKE)


def test_concurrent_likes_from_different_users(session_factory, make_user, make_post):
    users = [make_user() for _ in range(5)]
    user_ids = [user.id for user in users]
    post_id = make_post(users[0]).id
    barrier = threading.Barrier(len(user_ids))
    errors = []

    def like(user_id):
        session = session_factory()
        try:
            barrier.wait()
            ReactionLedger(session).toggle(user_id, TargetType.POST, post_id, LIKE)
        except Exception as e:  # surfaced by the assertion below
            errors.append(e)
        finally:
            session.close()

    threads = [threading.Thread(target=like, args=(user_id,)) for user_id in user_ids]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    session = session_factory()
    try:
        assert ReactionLedger(session).counts(TargetType.POST, post_id).like_count == len(user_ids)
    finally:
        session.close()


def test_reaction_api_requires_session(client, db, make_user, make_post):
    post = make_post(make_user())
    response = client.post(f"{API}/posts/{post.id}/reactions", json={"action": "like"})
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}


def test_reaction_api_toggles_and_reports_camel_case(login, client, db, make_user, make_post):
    post = make_post(make_user())
    alice = login("alice")

    response = alice.post(f"{API}/posts/{post.id}/reactions", json={"action": "like"})
    assert response.status_code == 200
    assert response.json() == {"likeCount": 1, "dislikeCount": 0, "userReaction": "liked"}

    response = alice.post(f"{API}/posts/{post.id}/reactions", json={"action": "like"})
    assert response.json() == {"likeCount": 0, "dislikeCount": 0, "userReaction": "none"}

    alice.post(f"{API}/posts/{post.id}/reactions", json={"action": "dislike"})
    response = client.get(f"{API}/posts/{post.id}/reactions")
    assert response.json() == {"likeCount": 0, "dislikeCount": 1, "userReaction": None}


def test_reaction_api_on_comment(login, make_user, make_post, make_comment):
    author = make_user()
    comment = make_comment(make_post(author), author)
    alice = login("alice")

    response = alice.post(f"{API}/comments/{comment.id}/reactions", json={"action": "dislike"})
    assert response.status_code == 200
    assert response.json()["dislikeCount"] == 1

    response = alice.get(f"{API}/comments/{comment.id}/reactions")
    assert response.json()["userReaction"] == "disliked"


def test_reaction_api_errors(login):
    alice = login("alice")

    response = alice.post(f"{API}/posts/missing/reactions", json={"action": "like"})
    assert response.status_code == 404
    assert response.json() == {"error": "Post not found"}

    response = alice.post(f"{API}/comments/missing/reactions", json={"action": "love"})
    assert response.status_code == 400
    assert "error" in response.json()


def test_concurrent_double_click_keeps_one_row(session_factory, make_user, make_post):
    user_id = make_user().id
    post_id = make_post(make_user()).id

    for _ in range(10):
        barrier = threading.Barrier(2)
        errors = []

        def click():
            session = session_factory()
            try:
                barrier.wait()
                ReactionLedger(session).toggle(user_id, TargetType.POST, post_id, LIKE)
            except Exception as e:  # surfaced by the assertion below
                errors.append(e)
            finally:
                session.close()

        threads = [threading.Thread(target=click) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        session = session_factory()
        try:
            assert session.query(Reaction).filter(Reaction.user_id == user_id).count() <= 1
        finally:
            session.close()


def test_target_is_checked_inside_the_write_transaction(db, make_user, make_post, monkeypatch):
    user = make_user()
    post = make_post(user)
    rows_seen = []

    def target_vanished(self, target_type, target_id):
        rows_seen.append(self.db.query(Reaction).count())
        raise NotFoundError("Post not found")

    monkeypatch.setattr(ReactionLedger, "ensure_target_exists", target_vanished)

    with pytest.raises(NotFoundError):
        ReactionLedger(db).toggle(user.id, TargetType.POST, post.id, LIKE)

    # the pending insert was visible to the check and then rolled back
    assert rows_seen == [1]
    assert db.query(Reaction).count() == 0
