from .user import Base, User, UserRole
from .book import Book, BookCondition, BookGenre
from .trade import Trade, TradeStatus
from .message import Message
from .report import Report, ReportReason, ReportStatus
from .session import Session

__all__ = [
    "Base",
    "User",
    "UserRole",
    "Book",
    "BookCondition",
    "BookGenre",
    "Trade",
    "TradeStatus",
    "Message",
    "Report",
    "ReportReason",
    "ReportStatus",
    "Session",
]
