"""
StockEasy - Identity Service
Resolucao do principal e sincronizacao do perfil de usuario.

O token de acesso carrega o identificador externo do usuario (`sub`).
O perfil (tabela users) e localizado por esse identificador; quando ainda
nao existe e criado uma unica vez, no mesmo ponto, a partir das claims.
"""
import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core import (
    create_access_token,
    generate_auth_subject,
    get_password_hash,
    settings,
    verify_access_token,
    verify_password,
)
from app.core.authorization import Principal
from app.core.errors import ConflictError, Forbidden, Unauthenticated, ValidationError
from app.models import User, UserRole
from app.services.accounts import CompanyService, UserStore, check_role_company

logger = logging.getLogger(__name__)


def principal_for(user: User) -> Principal:
    return Principal(
        principal_id=user.id,
        role=user.role,
        company_id=user.company_id,
        email=user.email,
        name=user.name,
    )


def issue_token(user: User) -> str:
    """Token de acesso com as claims usadas pela sincronizacao de perfil"""
    claims = {"sub": user.auth_subject, "email": user.email, "name": user.name, "role": user.role}
    if user.company_id is not None:
        claims["company_id"] = user.company_id
    return create_access_token(claims)


class PrincipalResolver:
    """Interface: credencial -> Principal, ou Unauthenticated"""

    async def resolve(self, credential: Optional[str]) -> Principal:
        raise NotImplementedError


class TokenPrincipalResolver(PrincipalResolver):
    """Resolve tokens JWT contra a tabela de usuarios"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.users = UserStore(db)
        self.companies = CompanyService(db)

    async def resolve(self, credential: Optional[str]) -> Principal:
        if not credential:
            raise Unauthenticated("Token de acesso não informado")

        claims = verify_access_token(credential)
        if not claims or not claims.get("sub"):
            logger.warning("Token invalido ou expirado")
            raise Unauthenticated("Token inválido ou expirado")

        user = await self.sync_user(claims)

        if not user.is_active:
            raise Unauthenticated("Usuário inativo")
        if user.company_id is not None:
            await self.companies.get_active(user.company_id)

        return principal_for(user)

    async def sync_user(self, claims: dict) -> User:
        """
        Busca o perfil pelo `sub`; se nao existir, cria a partir das claims.
        Idempotente: chamadas repetidas retornam o mesmo perfil.
        """
        subject = claims["sub"]
        user = await self.users.get_by_subject(subject)
        if user is not None:
            return user

        email = (claims.get("email") or "").lower()
        if not email:
            raise Unauthenticated("Perfil de usuário não encontrado")

        if email in [e.lower() for e in settings.MASTER_EMAILS]:
            role, company_id = UserRole.MASTER.value, None
        elif claims.get("company_id") is not None:
            company_id = claims["company_id"]
            role = claims.get("role") or UserRole.OPERADOR.value
            if role == UserRole.MASTER.value:
                raise Unauthenticated("Claim de papel inválida")
            company = await self.companies.get_active(company_id)
            await self.companies.ensure_seat(company)
        else:
            logger.warning(f"Token sem perfil nem empresa: {email}")
            raise Unauthenticated("Perfil de usuário não encontrado")

        if await self.users.get_by_email(email):
            # E-mail ja vinculado a outra identidade
            raise Unauthenticated("Perfil de usuário não encontrado")

        user = User(
            auth_subject=subject,
            email=email,
            name=claims.get("name") or email.split("@")[0],
            role=role,
            company_id=company_id,
        )
        self.db.add(user)
        try:
            await self.db.flush()
        except IntegrityError:
            # Outra requisicao criou o mesmo perfil em paralelo
            await self.db.rollback()
            user = await self.users.get_by_subject(subject)
            if user is None:
                raise
            return user

        logger.info(f"Perfil sincronizado: {email} ({role}, empresa {company_id})")
        return await self.users.reload(user.id)


class IdentityService:
    """Cadastro e login"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.users = UserStore(db)
        self.companies = CompanyService(db)

    async def signup(self, email: str, password: str, name: Optional[str] = None,
                     company: Optional[dict] = None, company_id: Optional[int] = None,
                     role: Optional[str] = None) -> User:
        """
        Cria a empresa e seu primeiro usuario (admin) na mesma transacao,
        ou adiciona um usuario a uma empresa existente.
        """
        email = email.lower()
        if await self.users.get_by_email(email):
            raise ConflictError("Este e-mail já está cadastrado")

        if company is not None:
            created = await self.companies.create(company)
            company_id = created.id
            role = UserRole.ADMIN.value
        else:
            target = await self.companies.get_active(company_id)
            await self.companies.ensure_seat(target)
            role = role or UserRole.OPERADOR.value

        role = role.value if isinstance(role, UserRole) else role
        check_role_company(role, company_id)
        if role == UserRole.MASTER.value:
            raise Forbidden("Cadastro público não pode criar usuário MASTER")

        user = User(
            auth_subject=generate_auth_subject(),
            email=email,
            name=name or email.split("@")[0],
            hashed_password=get_password_hash(password),
            role=role,
            company_id=company_id,
        )
        self.db.add(user)
        await self.db.flush()
        logger.info(f"Novo cadastro: {email} (empresa {company_id}, papel {role})")
        return await self.users.reload(user.id)

    async def login(self, email: str, password: str) -> User:
        user = await self.users.get_by_email(email)
        if not user or not verify_password(password, user.hashed_password):
            logger.warning(f"Login recusado: {email}")
            raise Unauthenticated("E-mail ou senha inválidos")
        if not user.is_active:
            raise Forbidden("Usuário desativado")
        if user.company_id is not None:
            await self.companies.get_active(user.company_id)

        await self.users.touch_login(user)
        return user

    async def change_password(self, principal: Principal, current_password: str, new_password: str):
        user = await self.users.get(principal, principal.principal_id)
        if not verify_password(current_password, user.hashed_password):
            raise ValidationError("Senha atual incorreta")
        user.hashed_password = get_password_hash(new_password)
        await self.db.flush()
