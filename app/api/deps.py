"""
StockEasy - API Dependencies
Resolucao do principal por requisicao e controle de papeis.
"""
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.ext.asyncio import AsyncSession

from app.core import settings
from app.core.authorization import Principal
from app.core.errors import Forbidden
from app.database import get_db
from app.services import PrincipalResolver, TokenPrincipalResolver

security = HTTPBearer(auto_error=False)

limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)


async def get_principal_resolver(db: AsyncSession = Depends(get_db)) -> PrincipalResolver:
    return TokenPrincipalResolver(db)


async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    resolver: PrincipalResolver = Depends(get_principal_resolver)
) -> Principal:
    """Dependency para obter o principal autenticado"""
    token = credentials.credentials if credentials else None
    return await resolver.resolve(token)


def require_roles(*roles):
    """Restringe a rota aos papeis informados"""
    allowed = {role.value if hasattr(role, "value") else role for role in roles}

    async def checker(principal: Principal = Depends(get_current_principal)) -> Principal:
        if principal.role not in allowed:
            raise Forbidden("Permissão insuficiente")
        return principal

    return checker
