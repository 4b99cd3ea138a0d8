# introbot/api/v1/intros.py

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ...api.deps import get_db_dep, get_orchestrator
from ...errors import IntroError
from ...services.lifecycle import LifecycleOrchestrator
from ...services.store import ProfileStore
from ...schemas.profile import IntroReply, IntroSubmit, ProfileOut

router = APIRouter(prefix="/intros", tags=["intros"])


def to_http(e: IntroError) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=e.user_message)


# -----------------------------
# 自己紹介フォームの送信（新規 / 更新）
# -----------------------------
@router.post("", response_model=IntroReply)
def submit_intro(
    data: IntroSubmit,
    orchestrator: LifecycleOrchestrator = Depends(get_orchestrator),
):
    try:
        outcome = orchestrator.submit_intro(data.user_id, data.form)
    except IntroError as e:
        raise to_http(e) from e

    return IntroReply(
        content=outcome.message,
        profile=ProfileOut.model_validate(outcome.record),
        used_fallback=outcome.result.used_fallback,
    )


# -----------------------------
# 参照
# -----------------------------
@router.get("", response_model=list[ProfileOut])
def list_intros(
    db: Session = Depends(get_db_dep),
):
    return ProfileStore(db).list_all()


@router.get("/{user_id}", response_model=ProfileOut)
def get_intro(
    user_id: str,
    db: Session = Depends(get_db_dep),
):
    record = ProfileStore(db).get(user_id)
    if not record:
        raise HTTPException(status_code=404, detail="Profile not found")
    return record
