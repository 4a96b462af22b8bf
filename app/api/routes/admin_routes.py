"""
Admin Routes (admin token required on every route)

GET /admins - List admins, newest first
GET /admins/{admin_id} - Get one admin
POST /admins - Create admin
PUT /admins/{admin_id} - Update name and/or email
DELETE /admins/{admin_id} - Delete admin (and any student it owns)
"""

from fastapi import APIRouter, Depends
from typing import List

from app.core.auth import require_admin
from app.schemas.schemas import AdminCreate, AdminUpdate, MessageResponse, UserResponse
from app.services.admin_service import AdminService, get_admin_service

router = APIRouter(prefix="/admins", tags=["Admins"], dependencies=[Depends(require_admin)])


@router.get("", response_model=List[UserResponse])
def list_admins(service: AdminService = Depends(get_admin_service)):
    return service.list_admins()


@router.get("/{admin_id}", response_model=UserResponse)
def get_admin(admin_id: str, service: AdminService = Depends(get_admin_service)):
    return service.get_admin(admin_id)


@router.post("", response_model=UserResponse, status_code=201)
def create_admin(data: AdminCreate, service: AdminService = Depends(get_admin_service)):
    return service.create_admin(data)


@router.put("/{admin_id}", response_model=UserResponse)
def update_admin(admin_id: str, data: AdminUpdate, service: AdminService = Depends(get_admin_service)):
    return service.update_admin(admin_id, data)


@router.delete("/{admin_id}", response_model=MessageResponse)
def delete_admin(admin_id: str, service: AdminService = Depends(get_admin_service)):
    return service.delete_admin(admin_id)
