"""Доменные исключения LoveConnect. main.py превращает их в JSON-ответы."""
from typing import Iterable, Optional

from starlette import status


class LoveConnectError(Exception):
    """Base class; status_code is the HTTP status the API answers with."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class SelfLikeError(LoveConnectError):
    """Пользователь пытается лайкнуть самого себя."""

    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__("You cannot like yourself")


class UnknownUserError(LoveConnectError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, user_ids: Iterable[int]):
        self.user_ids = sorted(set(user_ids))
        ids = ", ".join(str(uid) for uid in self.user_ids)
        super().__init__(f"User not found: {ids}")


class DuplicateLikeError(LoveConnectError):
    """
    Ребро liker -> liked уже существует. Не фатально: вызывающий код может
    считать это успешным no-op.
    """

    status_code = status.HTTP_409_CONFLICT

    def __init__(
        self,
        liker_id: int,
        liked_id: int,
        like_id: Optional[int] = None,
        matched: bool = False,
        match_id: Optional[int] = None,
    ):
        self.liker_id = liker_id
        self.liked_id = liked_id
        self.like_id = like_id
        self.matched = matched
        self.match_id = match_id
        super().__init__(f"User {liker_id} already liked user {liked_id}")


class PersistenceError(LoveConnectError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "Database operation failed"):
        super().__init__(message)


class EmailTakenError(LoveConnectError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, email: str):
        self.email = email
        super().__init__("User already exists")


class MatchNotFoundError(LoveConnectError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, match_id: int):
        self.match_id = match_id
        super().__init__(f"Match {match_id} not found")


class NotMatchParticipantError(LoveConnectError):
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, match_id: int, user_id: int):
        self.match_id = match_id
        self.user_id = user_id
        super().__init__("You are not a participant of this match")


class InactiveMatchError(LoveConnectError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, match_id: int):
        self.match_id = match_id
        super().__init__(f"Match {match_id} is not active")


class GiftNotFoundError(LoveConnectError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, gift_id: int):
        self.gift_id = gift_id
        super().__init__(f"Gift {gift_id} not found")


class SelfGiftError(LoveConnectError):

    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__("You cannot send a gift to yourself")


class NotificationNotFoundError(LoveConnectError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, notification_id: int):
        self.notification_id = notification_id
        super().__init__("Notification not found")
