# introbot/errors.py
"""
エラー分類。

- IntroError 系: ユーザーに返す（status_code と技術的でない user_message を持つ）
- それ以外: 内部で吸収する（生成 AI の失敗、古い投稿の削除失敗など）
"""


class IntroError(Exception):
    status_code = 500
    user_message = "Something went wrong while processing your introduction. Please try again."

    def __init__(self, detail: str | None = None, *, user_message: str | None = None):
        super().__init__(detail or self.user_message)
        if user_message is not None:
            self.user_message = user_message


# (a) 設定エラー
class ChannelNotConfigured(IntroError):
    status_code = 503
    user_message = "Profile channel is not configured. Please ask an admin to run setup."


# (b) 外部サービスの一時的なエラー
class ChannelUnreachable(IntroError):
    status_code = 502
    user_message = "Could not find the profile channel. Please contact an admin."


class PublishFailed(IntroError):
    status_code = 502
    user_message = "Failed to post your profile. Please contact an admin."


# (c) 所有者チェック
class OwnershipError(IntroError):
    status_code = 403
    user_message = "You can only manage your own introduction."


# (d) レコード無し
class ProfileNotFound(IntroError):
    status_code = 404
    user_message = "Could not find your introduction."


# 投稿は済んだが保存に失敗した（自動ロールバックはしない）
class ProfileInconsistent(IntroError):
    status_code = 500
    user_message = (
        "Your profile was posted but could not be saved. "
        "Please contact an admin so it can be fixed."
    )


class InvalidControl(IntroError):
    status_code = 400
    user_message = "This button is not valid anymore."


# DB の読み込みに失敗した（何も変更していない）
class ProfileStoreUnavailable(IntroError):
    status_code = 503
    user_message = "Could not load your introduction right now. Please try again."


# -----------------------------
# 内部用（ユーザーには出さない）
# -----------------------------

class GeneratorUnavailable(Exception):
    """生成 AI の呼び出し失敗（通信エラー・未初期化など）"""


class GeneratorConfigError(Exception):
    """生成 AI クライアントを組み立てられなかった"""


class ChannelError(Exception):
    """チャンネル操作の失敗（削除失敗など、呼び出し側で非致命扱い）"""


class ArtifactNotFound(ChannelError):
    """投稿済みメッセージが見つからない"""
