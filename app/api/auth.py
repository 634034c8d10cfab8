"""
StockEasy - Auth API
Cadastro, login e perfil do usuario autenticado
"""
from fastapi import APIRouter, Depends, Request, Response
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from app.core import settings, verify_access_token
from app.core.authorization import Principal
from app.core.errors import Unauthenticated
from app.database import get_db
from app.schemas import ChangePasswordRequest, LoginRequest, SignupRequest, TokenResponse, UserResponse
from app.services import IdentityService, TokenPrincipalResolver, UserStore, issue_token
from .deps import get_current_principal, limiter, security

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/signup", response_model=TokenResponse, status_code=201)
async def signup(request: SignupRequest, db: AsyncSession = Depends(get_db)):
    """Cria empresa + primeiro usuario, ou entra em empresa existente"""
    user = await IdentityService(db).signup(
        email=request.email,
        password=request.password,
        name=request.name,
        company=request.company.model_dump() if request.company else None,
        company_id=request.company_id,
        role=request.role,
    )
    await db.commit()
    return TokenResponse(access_token=issue_token(user), user=user.to_dict())


@router.post("/login", response_model=TokenResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(request: Request, payload: LoginRequest, db: AsyncSession = Depends(get_db)):
    """Login por e-mail e senha"""
    user = await IdentityService(db).login(payload.email, payload.password)
    await db.commit()
    return TokenResponse(access_token=issue_token(user), user=user.to_dict())


@router.get("/me", response_model=UserResponse)
async def get_me(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Retorna o perfil do usuario atual"""
    user = await UserStore(db).get(principal, principal.principal_id)
    return user.to_dict()


@router.post("/sync-user", response_model=UserResponse)
async def sync_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db)
):
    """Busca ou cria o perfil do token apresentado"""
    claims = verify_access_token(credentials.credentials) if credentials else None
    if not claims or not claims.get("sub"):
        raise Unauthenticated("Token inválido ou expirado")

    user = await TokenPrincipalResolver(db).sync_user(claims)
    await db.commit()
    return user.to_dict()


@router.put("/password", status_code=204)
async def change_password(
    request: ChangePasswordRequest,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Troca a senha do usuario atual"""
    await IdentityService(db).change_password(principal, request.current_password, request.new_password)
    await db.commit()
    return Response(status_code=204)
