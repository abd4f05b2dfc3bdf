from .email import EmailNotifier

__all__ = ["EmailNotifier"]
