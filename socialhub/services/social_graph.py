"""Social Graph Store — the like counter and follow edges that trigger notifications.

Invariants:
    - like_post increments the counter atomically in SQL (no read-modify-write)
    - follow inserts one edge; callers check is_following first, and a duplicate
      that races past the check still ends as AlreadyFollowingError
    - unfollow returns False when there was no edge to remove
"""

import logging

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from socialhub.core.domain_types import PostId, UserId
from socialhub.core.errors import AlreadyFollowingError, PersistenceError
from socialhub.models.follow import Follow
from socialhub.models.post import Post

logger = logging.getLogger(__name__)


class SocialGraphStore:
    """Persists like/follow actions for the delivery router."""

    def __init__(self, db: AsyncSession):
        self._db = db

    async def _commit(self, operation: str) -> None:
        try:
            await self._db.commit()
        except SQLAlchemyError as e:
            await self._db.rollback()
            logger.error(f"Persistence failure during {operation}: {e}")
            raise PersistenceError("Store unavailable", operation)

    async def get_post(self, post_id: PostId) -> Post | None:
        return await self._db.get(Post, post_id)

    async def like_post(self, post_id: PostId) -> None:
        await self._db.execute(
            update(Post)
            .where(Post.id == post_id)
            .values(likes=Post.likes + 1)
            .execution_options(synchronize_session=False),
        )
        await self._commit("like")
        post = await self._db.get(Post, post_id)
        if post is not None:
            await self._db.refresh(post, ["likes"])

    async def is_following(self, follower_id: UserId, following_id: UserId) -> bool:
        return await self._edge_exists(follower_id, following_id)

    async def _edge_exists(self, follower_id: UserId, following_id: UserId) -> bool:
        result = await self._db.execute(
            select(Follow.id).where(
                Follow.follower_id == follower_id,
                Follow.following_id == following_id,
            ),
        )
        return result.first() is not None

    async def follow(self, follower_id: UserId, following_id: UserId) -> Follow:
        """Insert the edge. A duplicate that slipped past is_following raises
        AlreadyFollowingError once the unique constraint rejects it."""
        edge = Follow(follower_id=follower_id, following_id=following_id)
        self._db.add(edge)
        try:
            await self._db.commit()
        except IntegrityError as e:
            await self._db.rollback()
            if await self._edge_exists(follower_id, following_id):
                logger.info(
                    f"Follow {follower_id} -> {following_id} already exists",
                    extra={"user_id": follower_id},
                )
                raise AlreadyFollowingError()
            logger.error(f"Persistence failure during follow: {e}")
            raise PersistenceError("Store unavailable", "follow")
        except SQLAlchemyError as e:
            await self._db.rollback()
            logger.error(f"Persistence failure during follow: {e}")
            raise PersistenceError("Store unavailable", "follow")
        return edge

    async def unfollow(self, follower_id: UserId, following_id: UserId) -> bool:
        result = await self._db.execute(
            delete(Follow).where(
                Follow.follower_id == follower_id,
                Follow.following_id == following_id,
            ),
        )
        await self._commit("unfollow")
        return bool(result.rowcount)
