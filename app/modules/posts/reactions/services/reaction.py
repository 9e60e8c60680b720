"""
Like/dislike ledger for posts and comments.

Each (user, target) pair holds at most one reaction row. Clicking an action
moves the pair through a three-state machine:

    current    like          dislike
    none       liked   (+)   disliked (+)
    liked      none    (-)   disliked (~)
    disliked   liked   (~)   none     (-)

(+) insert, (~) update value, (-) delete. The store op is applied as a
compare-and-set against the value that was read, inside one transaction, so
two racing toggles either serialize or the loser is retried once.
"""
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple
import uuid
import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import ConflictError, InternalError, NotFoundError
from app.core.security import utcnow
from app.modules.posts.comments.models.comment import Comment
from app.modules.posts.models.post import Post
from app.modules.posts.reactions.models.reaction import Reaction
from app.modules.posts.reactions.schemas.reaction import (
    ReactionAction, ReactionCounts, ReactionResult, ReactionState, TargetType
)

logger = logging.getLogger("app")

class StoreOp(str, Enum):
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"

_TRANSITIONS = {
    (ReactionState.NONE, ReactionAction.LIKE): (ReactionState.LIKED, StoreOp.INSERT),
    (ReactionState.NONE, ReactionAction.DISLIKE): (ReactionState.DISLIKED, StoreOp.INSERT),
    (ReactionState.LIKED, ReactionAction.LIKE): (ReactionState.NONE, StoreOp.DELETE),
    (ReactionState.LIKED, ReactionAction.DISLIKE): (ReactionState.DISLIKED, StoreOp.UPDATE),
    (ReactionState.DISLIKED, ReactionAction.LIKE): (ReactionState.LIKED, StoreOp.UPDATE),
    (ReactionState.DISLIKED, ReactionAction.DISLIKE): (ReactionState.NONE, StoreOp.DELETE),
}

_STATE_BY_VALUE = {
    "like": ReactionState.LIKED,
    "dislike": ReactionState.DISLIKED,
}

_VALUE_BY_STATE = {state: value for value, state in _STATE_BY_VALUE.items()}

def next_state(current: ReactionState, action: ReactionAction) -> Tuple[ReactionState, StoreOp]:
    """Pure transition function: (state, clicked action) -> (new state, store op)"""
    return _TRANSITIONS[(ReactionState(current), ReactionAction(action))]

class StaleReactionError(Exception):
    """The row changed between read and write"""

class ReactionLedger:
    MAX_ATTEMPTS = 2

    def __init__(self, db: Session):
        self.db = db

    def toggle(self, user_id: str, target_type: TargetType, target_id: str, action: ReactionAction) -> ReactionResult:
        """Apply ``action`` for ``user_id`` on the target and return fresh counts"""
        target_type = TargetType(target_type)
        action = ReactionAction(action)

        for attempt in range(1, self.MAX_ATTEMPTS + 1):
            try:
                new_state = self._apply(user_id, target_type, target_id, action)
                counts = self.counts(target_type, target_id)
                self.db.commit()
            except (StaleReactionError, IntegrityError, OperationalError) as e:
                self.db.rollback()
                if attempt < self.MAX_ATTEMPTS:
                    logger.warning(f"Reaction toggle on {target_type.value} {target_id} contended, retrying: {type(e).__name__}")
                    continue
                logger.error(f"Reaction toggle on {target_type.value} {target_id} failed after retry: {e}")
                if isinstance(e, OperationalError):
                    raise InternalError("Failed to update reaction")
                raise ConflictError("Reaction was modified concurrently")
            except NotFoundError:
                self.db.rollback()
                raise
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"Reaction toggle on {target_type.value} {target_id} failed: {e}")
                raise InternalError("Failed to update reaction")

            logger.info(f"User {user_id} {action.value} on {target_type.value} {target_id} -> {new_state.value}")
            return ReactionResult(
                like_count=counts.like_count,
                dislike_count=counts.dislike_count,
                user_reaction=new_state,
            )

    def _apply(self, user_id: str, target_type: TargetType, target_id: str, action: ReactionAction) -> ReactionState:
        row = (
            self.db.query(Reaction.id, Reaction.value)
            .filter(
                Reaction.user_id == user_id,
                Reaction.target_type == target_type.value,
                Reaction.target_id == target_id,
            )
            .with_for_update()
            .first()
        )
        current = _STATE_BY_VALUE[row.value] if row else ReactionState.NONE
        new_state, op = next_state(current, action)

        if op is StoreOp.INSERT:
            # unique (user, target) constraint rejects a concurrent insert
            self.db.add(Reaction(
                id=str(uuid.uuid4()),
                user_id=user_id,
                target_type=target_type.value,
                target_id=target_id,
                value=_VALUE_BY_STATE[new_state],
            ))
            self.db.flush()
        else:
            matched = self.db.query(Reaction).filter(Reaction.id == row.id, Reaction.value == row.value)
            if op is StoreOp.UPDATE:
                affected = matched.update(
                    {Reaction.value: _VALUE_BY_STATE[new_state], Reaction.updated_at: utcnow()},
                    synchronize_session=False,
                )
            else:
                affected = matched.delete(synchronize_session=False)
            if affected != 1:
                raise StaleReactionError(f"reaction {row.id} changed during {op.value}")

        # checked after the write: this transaction now holds the write lock,
        # so a concurrent delete of the target either committed already or waits
        self.ensure_target_exists(target_type, target_id)
        return new_state

    def ensure_target_exists(self, target_type: TargetType, target_id: str) -> None:
        model = Post if target_type is TargetType.POST else Comment
        if not self.db.query(model.id).filter(model.id == target_id).first():
            raise NotFoundError(f"{target_type.value.capitalize()} not found")

    def counts(self, target_type: TargetType, target_id: str) -> ReactionCounts:
        return self.counts_for_many(target_type, [target_id]).get(target_id, ReactionCounts())

    def counts_for_many(self, target_type: TargetType, target_ids: Iterable[str]) -> Dict[str, ReactionCounts]:
        """Counts keyed by target id; targets without reactions are omitted"""
        target_ids = list(target_ids)
        if not target_ids:
            return {}

        rows = (
            self.db.query(Reaction.target_id, Reaction.value, func.count(Reaction.id))
            .filter(Reaction.target_type == TargetType(target_type).value, Reaction.target_id.in_(target_ids))
            .group_by(Reaction.target_id, Reaction.value)
            .all()
        )
        result: Dict[str, ReactionCounts] = {}
        for target_id, value, count in rows:
            counts = result.setdefault(target_id, ReactionCounts())
            if value == "like":
                counts.like_count = count
            elif value == "dislike":
                counts.dislike_count = count
        return result

    def user_reaction(self, user_id: Optional[str], target_type: TargetType, target_id: str) -> ReactionState:
        return self.user_reactions_for_many(user_id, target_type, [target_id]).get(target_id, ReactionState.NONE)

    def user_reactions_for_many(
        self, user_id: Optional[str], target_type: TargetType, target_ids: Iterable[str]
    ) -> Dict[str, ReactionState]:
        target_ids = list(target_ids)
        if not user_id or not target_ids:
            return {}

        rows = (
            self.db.query(Reaction.target_id, Reaction.value)
            .filter(
                Reaction.user_id == user_id,
                Reaction.target_type == TargetType(target_type).value,
                Reaction.target_id.in_(target_ids),
            )
            .all()
        )
        return {target_id: _STATE_BY_VALUE[value] for target_id, value in rows}

    def delete_for_targets(self, target_type: TargetType, target_ids: List[str]) -> int:
        """Remove every reaction on the given targets. Does not commit."""
        if not target_ids:
            return 0
        return (
            self.db.query(Reaction)
            .filter(Reaction.target_type == TargetType(target_type).value, Reaction.target_id.in_(target_ids))
            .delete(synchronize_session=False)
        )
