from .notifier_port import NotificationTemplate, NotifierPort

__all__ = ["NotificationTemplate", "NotifierPort"]
