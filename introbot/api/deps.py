# introbot/api/deps.py

from collections.abc import Generator as GeneratorT

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from introbot.config import ConfigStore, get_settings
from introbot.db import SessionLocal
from introbot.services.channel import Channel
from introbot.services.confirmation import ConfirmationGate
from introbot.services.generator import Generator
from introbot.services.lifecycle import LifecycleOrchestrator
from introbot.services.publisher import ArtifactPublisher
from introbot.services.store import ProfileStore
from introbot.services.summary import ContentGenerator


def get_db_dep() -> GeneratorT[Session, None, None]:
    """
    FastAPI の Depends で使う DB セッション依存関数。
    エンドポイント側では `db: Session = Depends(get_db_dep)` で利用。
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# 起動時に main.py で app.state に載せたものを返すだけ
# テストでは app.dependency_overrides で差し替える

def get_generator(request: Request) -> Generator:
    return request.app.state.generator


def get_channel(request: Request) -> Channel:
    return request.app.state.channel


def get_config_store(request: Request) -> ConfigStore:
    return request.app.state.config_store


def get_confirmation_gate(request: Request) -> ConfirmationGate:
    return request.app.state.confirmation_gate


def get_orchestrator(
    db: Session = Depends(get_db_dep),
    generator: Generator = Depends(get_generator),
    channel: Channel = Depends(get_channel),
    config: ConfigStore = Depends(get_config_store),
    gate: ConfirmationGate = Depends(get_confirmation_gate),
) -> LifecycleOrchestrator:
    community = get_settings().community_name
    return LifecycleOrchestrator(
        store=ProfileStore(db),
        content=ContentGenerator(generator, community),
        publisher=ArtifactPublisher(channel, config, community),
        gate=gate,
    )
