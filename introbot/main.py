import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .config import ConfigStore, get_settings
from .db import Base, engine
from .api.v1 import api_router as api_v1_router
from .services.channel import DiscordChannel
from .services.confirmation import ConfirmationGate
from .services.generator import build_generator, is_enabled

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("introbot")

# モデルからテーブル作成（開発用）
Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # 終了時: Discord 用の HTTP クライアントを閉じる
    app.state.channel.close()
    logger.info("Discord channel client closed")


app = FastAPI(
    title="Intro Bot API",
    version="0.1.0",
    lifespan=lifespan,
)

# 外部サービスは起動時に一度だけ組み立てる
app.state.generator = build_generator(settings)
app.state.channel = DiscordChannel(settings.discord_token, settings.discord_api_base)
app.state.config_store = ConfigStore(settings.bot_config_path, settings)
app.state.confirmation_gate = ConfirmationGate(settings.confirmation_ttl_seconds)

app.include_router(api_v1_router, prefix="/api")


def log_startup_summary() -> None:
    config = app.state.config_store
    if config.is_setup_complete():
        logger.info("Bot configuration: complete")
        logger.info(f"Intro channel: {config.intro_channel_id()}")
        logger.info(f"Profile channel: {config.profile_channel_id()}")
    else:
        logger.warning("Bot configuration: incomplete (PUT /api/setup to configure)")
    logger.info(f"Gemini AI: {'enabled' if is_enabled(app.state.generator) else 'disabled'}")


log_startup_summary()


@app.get("/")
def read_root():
    return {"message": "Intro Bot API is running"}
