import pytest

from app.core.errors import AuthorizationError, NotFoundError, ValidationError
from app.modules.posts.comments.models.comment import Comment
from app.modules.posts.comments.schemas.comment import CommentCreate
from app.modules.posts.comments.services.comment import (
    CommentThreadAssembler, count_comments_for_posts, count_thread, create_comment, delete_comment
)
from app.modules.posts.reactions.models.reaction import Reaction
from app.modules.posts.reactions.schemas.reaction import ReactionAction, TargetType
from app.modules.posts.reactions.services.reaction import ReactionLedger

API = "/api/v1"


@pytest.fixture
def thread(db, make_user, make_post, make_comment):
    """Post P with top-level A and B, and replies R1, R2 under A"""
    alice, bob = make_user("alice"), make_user("bob")
    post = make_post(alice)
    a = make_comment(post, alice, minutes=1, content="A")
    b = make_comment(post, bob, minutes=2, content="B")
    r1 = make_comment(post, bob, parent=a, minutes=3, content="R1")
    r2 = make_comment(post, alice, parent=a, minutes=4, content="R2")
    return {"post": post, "alice": alice, "bob": bob, "a": a, "b": b, "r1": r1, "r2": r2}


def test_thread_shape(db, thread):
    result = CommentThreadAssembler(db).get_thread(thread["post"].id)

    assert [comment.content for comment in result] == ["A", "B"]
    assert [reply.content for reply in result[0].replies] == ["R1", "R2"]
    assert result[1].replies == []
    assert result[0].username == "alice"
    assert result[0].replies[0].username == "bob"
    assert count_thread(result) == 4


def test_thread_is_stable_across_reads(db, thread):
    assembler = CommentThreadAssembler(db)
    first = assembler.get_thread(thread["post"].id)
    second = assembler.get_thread(thread["post"].id)
    assert [c.model_dump() for c in first] == [c.model_dump() for c in second]


def test_thread_ties_break_on_id(db, make_user, make_post, make_comment):
    user = make_user()
    post = make_post(user)
    comments = [make_comment(post, user, minutes=1, content=str(i)) for i in range(4)]

    result = CommentThreadAssembler(db).get_thread(post.id)

    assert [c.id for c in result] == sorted(c.id for c in comments)


def test_thread_for_post_without_comments(db, make_user, make_post):
    post = make_post(make_user())
    assert CommentThreadAssembler(db).get_thread(post.id) == []


def test_thread_for_missing_post(db):
    with pytest.raises(NotFoundError):
        CommentThreadAssembler(db).get_thread("missing")


def test_reply_to_reply_rows_are_not_shown(db, thread, make_comment):
    make_comment(thread["post"], thread["alice"], parent=thread["r1"], minutes=5, content="deep")

    result = CommentThreadAssembler(db).get_thread(thread["post"].id)

    assert count_thread(result) == 4
    assert "deep" not in [reply.content for comment in result for reply in comment.replies]
    assert count_comments_for_posts(db, [thread["post"].id]) == {thread["post"].id: 4}


def test_thread_carries_reaction_counts(db, thread):
    ReactionLedger(db).toggle(thread["bob"].id, TargetType.COMMENT, thread["r2"].id, ReactionAction.LIKE)

    result = CommentThreadAssembler(db).get_thread(thread["post"].id)

    assert result[0].replies[1].like_count == 1
    assert result[0].like_count == 0


def test_create_reply(db, thread):
    reply = create_comment(
        db, thread["post"].id, CommentCreate(content="R3", parent_id=thread["b"].id), thread["alice"].id
    )
    assert reply.parent_id == thread["b"].id


def test_create_reply_to_reply_is_rejected(db, thread):
    with pytest.raises(ValidationError):
        create_comment(
            db, thread["post"].id, CommentCreate(content="deep", parent_id=thread["r1"].id), thread["alice"].id
        )


def test_create_reply_to_comment_on_other_post(db, thread, make_post):
    other = make_post(thread["alice"], minutes=10)
    with pytest.raises(NotFoundError):
        create_comment(db, other.id, CommentCreate(content="x", parent_id=thread["a"].id), thread["alice"].id)


def test_delete_by_non_author(db, thread):
    with pytest.raises(AuthorizationError):
        delete_comment(db, thread["a"], thread["bob"].id)
    assert db.query(Comment).count() == 4


def test_delete_removes_replies_and_their_reactions(db, thread):
    ledger = ReactionLedger(db)
    ledger.toggle(thread["bob"].id, TargetType.COMMENT, thread["a"].id, ReactionAction.LIKE)
    ledger.toggle(thread["bob"].id, TargetType.COMMENT, thread["r1"].id, ReactionAction.LIKE)
    ledger.toggle(thread["alice"].id, TargetType.COMMENT, thread["b"].id, ReactionAction.LIKE)

    delete_comment(db, thread["a"], thread["alice"].id)

    assert [c.content for c in db.query(Comment).all()] == ["B"]
    assert [r.target_id for r in db.query(Reaction).all()] == [thread["b"].id]


def test_comment_api_flow(login, client):
    alice = login("alice")
    bob = login("bob")
    post_id = alice.post(f"{API}/posts", json={"title": "Hello", "content": "World"}).json()["id"]

    response = bob.post(f"{API}/posts/{post_id}/comments", json={"content": "first!"})
    assert response.status_code == 201
    top_id = response.json()["id"]

    response = alice.post(f"{API}/posts/{post_id}/comments", json={"content": "thanks", "parent_id": top_id})
    assert response.status_code == 201
    reply_id = response.json()["id"]

    response = bob.post(f"{API}/posts/{post_id}/comments", json={"content": "deeper", "parent_id": reply_id})
    assert response.status_code == 400
    assert response.json() == {"error": "Replies to replies are not supported"}

    response = client.get(f"{API}/posts/{post_id}/comments")
    assert response.status_code == 200
    body = response.json()
    assert [c["content"] for c in body] == ["first!"]
    assert [r["content"] for r in body[0]["replies"]] == ["thanks"]

    response = alice.put(f"{API}/posts/{post_id}/comments/{top_id}", json={"content": "edited"})
    assert response.status_code == 403

    response = bob.put(f"{API}/posts/{post_id}/comments/{top_id}", json={"content": "edited"})
    assert response.status_code == 200
    assert response.json()["content"] == "edited"

    response = bob.delete(f"{API}/posts/{post_id}/comments/{top_id}")
    assert response.status_code == 204
    assert client.get(f"{API}/posts/{post_id}/comments").json() == []


def test_comment_api_validation(login):
    alice = login("alice")
    post_id = alice.post(f"{API}/posts", json={"title": "Hello", "content": "World"}).json()["id"]

    response = alice.post(f"{API}/posts/{post_id}/comments", json={"content": "   "})
    assert response.status_code == 400
    assert "error" in response.json()

    response = alice.post(f"{API}/posts/{post_id}/comments", json={"content": "x" * 2001})
    assert response.status_code == 400

    response = alice.post(f"{API}/posts/missing/comments", json={"content": "hi"})
    assert response.status_code == 404
