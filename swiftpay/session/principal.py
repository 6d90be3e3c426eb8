"""Authenticated principal and role capabilities"""

from pydantic import BaseModel, Field
from typing import Dict, FrozenSet
from swiftpay.constants import Role, Capability
from swiftpay.utils.errors import AuthorizationError

_SHARED = frozenset({
    Capability.FUND_WALLET,
    Capability.BUY_UTILITIES,
    Capability.VIEW_HISTORY,
    Capability.MANAGE_PROFILE,
})

ROLE_CAPABILITIES: Dict[Role, FrozenSet[Capability]] = {
    Role.CLIENT: _SHARED | {Capability.SEND_MONEY, Capability.SHOP_MARKETPLACE},
    Role.VENDOR: _SHARED | {Capability.MANAGE_CATALOG},
    Role.ADMIN: _SHARED | {Capability.ADMINISTER},
}


class Principal(BaseModel):
    """Identity handed to the ledger components by the session layer"""

    id: str = Field(..., description="Account ID")
    role: Role = Field(..., description="Account role")

    class Config:
        frozen = True

    @property
    def capabilities(self) -> FrozenSet[Capability]:
        return ROLE_CAPABILITIES[self.role]

    def can(self, capability: Capability) -> bool:
        return capability in self.capabilities

    def require(self, capability: Capability) -> "Principal":
        """
        Raises:
            AuthorizationError: If the role does not grant ``capability``
        """
        if not self.can(capability):
            raise AuthorizationError(f"{self.role.value} accounts cannot {capability.value.replace('_', ' ')}")
        return self
