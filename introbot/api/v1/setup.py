# introbot/api/v1/setup.py

from fastapi import APIRouter, Depends

from ...api.deps import get_config_store, get_generator
from ...config import ConfigStore
from ...schemas.interaction import SetupOut, SetupUpdate
from ...services.generator import Generator, is_enabled

router = APIRouter(prefix="/setup", tags=["setup"])


def _setup_out(config: ConfigStore, generator: Generator) -> SetupOut:
    stored = config.load()
    return SetupOut(
        profile_channel_id=config.profile_channel_id(),
        intro_channel_id=config.intro_channel_id(),
        moderator_role_id=stored.moderator_role_id,
        setup_complete=config.is_setup_complete(),
        generator_enabled=is_enabled(generator),
    )


@router.get("", response_model=SetupOut)
def get_setup(
    config: ConfigStore = Depends(get_config_store),
    generator: Generator = Depends(get_generator),
):
    return _setup_out(config, generator)


@router.put("", response_model=SetupOut)
def update_setup(
    data: SetupUpdate,
    config: ConfigStore = Depends(get_config_store),
    generator: Generator = Depends(get_generator),
):
    """/setup-bot 相当: チャンネル ID などを保存（未指定の項目はそのまま）"""
    config.update(**data.model_dump())
    return _setup_out(config, generator)
