"""
StockEasy - Users API
Usuarios da empresa do principal
"""
from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.authorization import Principal
from app.core.errors import NotFound
from app.database import get_db
from app.schemas import UserCreate, UserUpdate, UserResponse
from app.services import UserStore
from .deps import get_current_principal

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=List[UserResponse])
async def list_users(
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    return [user.to_dict() for user in await UserStore(db).list(principal)]


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    user = await UserStore(db).get(principal, user_id)
    return user.to_dict()


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    request: UserCreate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    user = await UserStore(db).create(principal, request.model_dump())
    await db.commit()
    return user.to_dict()


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    request: UserUpdate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    user = await UserStore(db).update(principal, user_id, request.model_dump(exclude_unset=True))
    await db.commit()
    return user.to_dict()


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    """Desativa o usuario"""
    if not await UserStore(db).delete(principal, user_id):
        raise NotFound("Usuário não encontrado")
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
