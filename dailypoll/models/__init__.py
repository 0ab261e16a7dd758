from .user import User  # noqa: F401
from .profile import UserProfile  # noqa: F401
from .authorized_identity import AuthorizedIdentity  # noqa: F401
from .token_blocklist import TokenBlocklist  # noqa: F401
from .poll import Poll  # noqa: F401
from .option import PollOption  # noqa: F401
from .vote import Vote  # noqa: F401
from .audit_log import AuditLog  # noqa: F401

# Import ALL models so SQLAlchemy registers them

__all__ = [
    "User",
    "UserProfile",
    "AuthorizedIdentity",
    "TokenBlocklist",
    "Poll",
    "PollOption",
    "Vote",
    "AuditLog",
]
