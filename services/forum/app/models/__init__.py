from app.models.board import (
    Board,
    BoardDescriptionSection,
    BoardDescriptionSectionCategory,
    BoardRestriction,
    Category,
    UserMutedBoard,
    UserPinnedBoard,
)
from app.models.comment import Comment
from app.models.post import Post
from app.models.role import BoardUserRole, RealmUserRole, Role
from app.models.social import Friend
from app.models.thread import SecretIdentity, Thread, UserThreadIdentity
from app.models.user import User
from app.models.visit import DismissNotificationsRequest, UserThreadLastVisit

__all__ = [
    "User",
    "Friend",
    "Board",
    "Category",
    "BoardDescriptionSection",
    "BoardDescriptionSectionCategory",
    "BoardRestriction",
    "UserMutedBoard",
    "UserPinnedBoard",
    "Role",
    "BoardUserRole",
    "RealmUserRole",
    "Thread",
    "SecretIdentity",
    "UserThreadIdentity",
    "Post",
    "Comment",
    "UserThreadLastVisit",
    "DismissNotificationsRequest",
]
