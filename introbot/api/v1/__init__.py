# introbot/api/v1/__init__.py

from fastapi import APIRouter

from . import intros, interactions, setup

api_router = APIRouter()

# それぞれの router 側で prefix を持っている前提にする
api_router.include_router(intros.router)        # prefix="/intros"
api_router.include_router(interactions.router)  # prefix="/interactions"
api_router.include_router(setup.router)         # prefix="/setup"
