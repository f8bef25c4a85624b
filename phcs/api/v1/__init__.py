"""Versioned API router."""

from fastapi import APIRouter

from . import cases, health, imports

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(imports.router, tags=["import"])
router.include_router(cases.router, prefix="/cases", tags=["cases"])

__all__ = ["router"]
