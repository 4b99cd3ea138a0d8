# introbot/api/v1/interactions.py

from fastapi import APIRouter, Depends

from ...api.deps import get_orchestrator
from ...errors import IntroError
from ...services.lifecycle import LifecycleOrchestrator
from ...schemas.interaction import ControlPress, InteractionReply
from .intros import to_http

router = APIRouter(prefix="/interactions", tags=["interactions"])


@router.post("/controls", response_model=InteractionReply)
def press_control(
    data: ControlPress,
    orchestrator: LifecycleOrchestrator = Depends(get_orchestrator),
):
    """
    投稿に付いたボタン（更新 / 削除）と、削除確認のボタン（確認 / キャンセル）。
    custom_id の中身で振り分ける。
    """
    try:
        return orchestrator.handle_control(data.user_id, data.custom_id)
    except IntroError as e:
        raise to_http(e) from e
