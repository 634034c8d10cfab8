"""
StockEasy - Accounts Service
Empresas (diretorio de tenants) e perfis de usuario.

Invariante de papel/empresa, validada em toda gravacao de usuario:
    role == MASTER  <=>  company_id is None
"""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.core import generate_auth_subject, get_password_hash, settings
from app.core.authorization import Principal
from app.core.errors import ConflictError, Forbidden, NotFound, ValidationError
from app.models import Company, User, UserRole
from app.services.store import ScopedStore, clean_values

logger = logging.getLogger(__name__)

MANAGER_ROLES = (UserRole.MASTER.value, UserRole.ADMIN.value)
NOT_NULL_FIELDS = ("name", "email", "plan", "is_active")


def check_role_company(role: str, company_id: Optional[int]):
    """Valida a invariante MASTER <=> sem empresa"""
    if role == UserRole.MASTER.value and company_id is not None:
        raise ValidationError("Usuário MASTER não pode pertencer a uma empresa")
    if role != UserRole.MASTER.value and company_id is None:
        raise ValidationError("Usuário deve pertencer a uma empresa")


class CompanyService:
    """Diretorio de empresas. Empresas nunca sao removidas, apenas desativadas"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list(self, include_inactive: bool = True) -> list:
        query = select(Company)
        if not include_inactive:
            query = query.where(Company.is_active.is_(True))
        result = await self.db.execute(query.order_by(Company.name))
        return list(result.scalars().all())

    async def users_count(self) -> dict:
        result = await self.db.execute(
            select(User.company_id, func.count(User.id))
            .where(User.company_id.isnot(None))
            .group_by(User.company_id)
        )
        return {row[0]: row[1] for row in result.all()}

    async def get(self, company_id: int) -> Company:
        company = await self.db.get(Company, company_id)
        if company is None:
            raise NotFound("Empresa não encontrada")
        return company

    async def get_active(self, company_id: int) -> Company:
        company = await self.get(company_id)
        if not company.is_active:
            raise Forbidden("Empresa desativada")
        return company

    async def _check_unique_email(self, email: str, exclude_id: Optional[int] = None):
        query = select(Company.id).where(Company.email == email)
        if exclude_id is not None:
            query = query.where(Company.id != exclude_id)
        result = await self.db.execute(query)
        if result.scalar_one_or_none() is not None:
            raise ConflictError("E-mail de empresa já cadastrado")

    async def create(self, data: dict) -> Company:
        data = clean_values(data)
        await self._check_unique_email(data["email"])
        if data.get("max_users") is None:
            data["max_users"] = settings.DEFAULT_MAX_USERS

        company = Company(**data)
        self.db.add(company)
        await self.db.flush()
        logger.info(f"Empresa criada: {company.id} - {company.name}")
        return company

    async def update(self, company_id: int, patch: dict) -> Company:
        company = await self.get(company_id)
        data = clean_values(patch)
        nulls = [field for field in NOT_NULL_FIELDS if field in data and data[field] is None]
        if nulls:
            raise ValidationError(f"Campos não podem ser nulos: {', '.join(nulls)}")
        if "email" in data and data["email"] != company.email:
            await self._check_unique_email(data["email"], exclude_id=company.id)

        for field, value in data.items():
            setattr(company, field, value)
        await self.db.flush()
        return company

    async def deactivate(self, company_id: int) -> Company:
        company = await self.get(company_id)
        company.is_active = False
        await self.db.flush()
        logger.info(f"Empresa desativada: {company.id} - {company.name}")
        return company

    async def ensure_seat(self, company: Company, exclude_user_id: Optional[int] = None):
        """Respeita o limite de usuarios do plano"""
        if not company.max_users:
            return
        query = select(func.count(User.id)).where(User.company_id == company.id)
        if exclude_user_id is not None:
            query = query.where(User.id != exclude_user_id)
        result = await self.db.execute(query)
        if (result.scalar() or 0) >= company.max_users:
            raise ConflictError(f"Limite de {company.max_users} usuários da empresa atingido")


class UserStore(ScopedStore):
    """Perfis de usuario, no mesmo escopo das demais entidades"""
    model = User
    label = "Usuário"
    required_fields = ("email", "name", "role")
    protected_fields = ("id", "created_at", "auth_subject", "hashed_password", "last_login_at")

    def order_by(self):
        return (User.name, User.id)

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email.lower()))
        return result.scalar_one_or_none()

    async def get_by_subject(self, subject: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.auth_subject == subject))
        return result.scalar_one_or_none()

    async def resolve_company(self, principal: Principal, data: dict) -> Optional[int]:
        if data.get("role") == UserRole.MASTER.value:
            if not principal.is_master:
                raise Forbidden("Apenas MASTER pode criar usuários MASTER")
            return None
        return await super().resolve_company(principal, data)

    async def create(self, principal: Principal, draft: dict):
        if principal.role not in MANAGER_ROLES:
            raise Forbidden("Apenas administradores podem criar usuários")
        data = dict(draft)
        password = data.pop("password", None)
        data = clean_values(data)
        data["email"] = data["email"].lower()
        self.check_required(data)

        company_id = await self.resolve_company(principal, data)
        check_role_company(data["role"], company_id)

        if await self.get_by_email(data["email"]):
            raise ConflictError("E-mail já cadastrado")
        if company_id is not None:
            await CompanyService(self.db).ensure_seat(await self.ensure_company(company_id))

        user = User(
            **{k: v for k, v in data.items() if k not in self.protected_fields},
            auth_subject=generate_auth_subject(),
            hashed_password=get_password_hash(password) if password else None,
        )
        user.company_id = company_id
        self.db.add(user)
        await self.db.flush()
        logger.info(f"Usuário {user.email} criado (empresa {company_id}, papel {user.role})")
        return await self.reload(user.id)

    async def update(self, principal: Principal, obj_id: int, patch: dict):
        data = clean_values(patch)
        user = await self.get(principal, obj_id)

        if principal.role not in MANAGER_ROLES and principal.principal_id != user.id:
            raise Forbidden("Apenas administradores podem alterar outros usuários")
        if principal.role not in MANAGER_ROLES and ("role" in data or "is_active" in data):
            raise Forbidden("Apenas administradores podem alterar papéis ou ativação")
        if data.get("role") == UserRole.MASTER.value and not principal.is_master:
            raise Forbidden("Apenas MASTER pode promover usuários a MASTER")

        role = data.get("role", user.role)
        company_id = data.get("company_id", user.company_id) if principal.is_master else user.company_id
        check_role_company(role, company_id)
        return await super().update(principal, obj_id, data)

    async def assign_company(self, principal: Principal, user_id: int, company_id: Optional[int], role: str) -> User:
        """Atribui empresa e papel a um usuario (apenas MASTER)"""
        if not principal.is_master:
            raise Forbidden("Apenas MASTER pode atribuir empresas")

        role = role.value if isinstance(role, UserRole) else role
        user = await self.get(principal, user_id)
        check_role_company(role, company_id)

        if company_id is not None:
            company = await CompanyService(self.db).get(company_id)
            if company_id != user.company_id:
                await CompanyService(self.db).ensure_seat(company, exclude_user_id=user.id)

        user.company_id = company_id
        user.role = role
        await self.db.flush()
        logger.info(f"Usuário {user.email} atribuído à empresa {company_id} como {role}")
        return await self.reload(user.id)

    async def touch_login(self, user: User):
        user.last_login_at = datetime.utcnow()
        await self.db.flush()

    async def delete(self, principal: Principal, obj_id: int) -> bool:
        """Usuarios com historico nao sao removidos: apenas desativados"""
        if principal.role not in MANAGER_ROLES:
            raise Forbidden("Apenas administradores podem remover usuários")
        if principal.principal_id == obj_id:
            raise ValidationError("Não é possível desativar o próprio usuário")
        user = await self.find(principal, obj_id)
        if user is None:
            return False
        user.is_active = False
        await self.db.flush()
        logger.info(f"Usuário {user.email} desativado por usuario {principal.principal_id}")
        return True
