from src.database.base_class import Base

from .global_ban import GlobalBan
from .log_channel import LogChannel
from .modlog_entry import ModlogAction, ModlogEntry
from .rater_assignment import RaterAssignment
from .server import Server, ServerClass

__all__ = [
    "Base",
    "GlobalBan",
    "LogChannel",
    "ModlogAction",
    "ModlogEntry",
    "RaterAssignment",
    "Server",
    "ServerClass",
]
