from healthspeak.db.base import Base

# Import all models here
from healthspeak.models.history import HistoryRecord

__all__ = ["Base", "HistoryRecord"]
