"""Session/identity layer"""

from .identity import SessionManager
from .principal import Principal, ROLE_CAPABILITIES

__all__ = ["SessionManager", "Principal", "ROLE_CAPABILITIES"]
