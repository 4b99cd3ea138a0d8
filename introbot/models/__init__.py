from .profile import ProfileRecord

__all__ = [
    "ProfileRecord",
]
