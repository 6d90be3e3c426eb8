"""Administrative directory and ledger audit"""

from .audit_view import DirectoryAuditView

__all__ = ["DirectoryAuditView"]
