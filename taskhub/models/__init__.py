"""
models/__init__.py
------------------
Re-export all models so create_tables.py (and Alembic, if added) can import
Base and discover all tables via a single import:

    from taskhub.models import Base
"""

from taskhub.db.base import Base
from taskhub.models.company import Company, CompanyPlan
from taskhub.models.user import User, UserRole
from taskhub.models.business_process import BusinessProcess
from taskhub.models.task import (
    HistoryAction,
    HistoryEntry,
    Task,
    TaskStatus,
    TaskType,
    task_assignees,
    task_observers,
)
from taskhub.models.comment import Comment
from taskhub.models.checklist import ChecklistItem
from taskhub.models.notification import Notification, NotificationType
from taskhub.models.feedback import Feedback, FeedbackType
from taskhub.models.telegram_group import TelegramChatBinding

__all__ = [
    "Base",
    "Company",
    "CompanyPlan",
    "User",
    "UserRole",
    "BusinessProcess",
    "Task",
    "TaskStatus",
    "TaskType",
    "HistoryAction",
    "HistoryEntry",
    "task_assignees",
    "task_observers",
    "Comment",
    "ChecklistItem",
    "Notification",
    "NotificationType",
    "Feedback",
    "FeedbackType",
    "TelegramChatBinding",
]
