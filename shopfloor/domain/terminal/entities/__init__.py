from .session import PendingInspection, SessionUser, TerminalSession

__all__ = ["PendingInspection", "SessionUser", "TerminalSession"]
