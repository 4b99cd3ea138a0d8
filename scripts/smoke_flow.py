#!/usr/bin/env python3
"""
起動中のサーバーに対して 作成 → 更新 → 削除（キャンセル / 確認 / リプレイ）を流す。

    python scripts/smoke_flow.py [user_id]

PUT /api/setup でプロフィール用チャンネルが設定済みであること。
"""
import json
import sys
from urllib import request, error

BASE_URL = "http://127.0.0.1:8000"


def api(method, path, body=None):
    url = BASE_URL + path
    data = None
    headers = {}
    if body is not None:
        data = json.dumps(body).encode("utf-8")
        headers["Content-Type"] = "application/json"
    req = request.Request(url, data=data, headers=headers, method=method)
    try:
        # POST /api/intros は Gemini の応答を待つので長めに取る（サーバー側はタイムアウト無し）
        with request.urlopen(req, timeout=120) as resp:
            payload = resp.read().decode("utf-8")
            return resp.status, json.loads(payload) if payload else None
    except error.HTTPError as e:
        payload = e.read().decode("utf-8")
        try:
            return e.code, json.loads(payload)
        except Exception:
            return e.code, {"detail": payload}
    except Exception as e:
        return 0, {"detail": str(e)}


def must_ok(status, data, label):
    if status < 200 or status >= 300:
        raise RuntimeError(f"{label} failed: {status} {data}")
    return data


def submit(user_id, **form):
    status, data = api("POST", "/api/intros", {"user_id": user_id, "form": form})
    return must_ok(status, data, "submit intro")


def press(custom_id, user_id):
    return api(
        "POST",
        "/api/interactions/controls",
        {"custom_id": custom_id, "user_id": user_id},
    )


def control_id(action, user_id, token=None):
    payload = {"a": action, "u": user_id}
    if token:
        payload["t"] = token
    return json.dumps(payload, separators=(",", ":"))


def buttons(reply):
    return {b["label"]: b["custom_id"] for b in reply["components"]}


def section(title):
    print(f"\n=== {title} ===")


def main():
    user_id = sys.argv[1] if len(sys.argv) > 1 else "100000000000000001"

    section("setup")
    status, setup = api("GET", "/api/setup")
    setup = must_ok(status, setup, "setup")
    if not setup["profile_channel_id"]:
        raise RuntimeError("profile channel is not configured (PUT /api/setup)")
    print(f"generator enabled: {setup['generator_enabled']}")

    section("create")
    created = submit(user_id, name="Smoke Tester", role="QA", interests="bots")
    first_artifact = created["profile"]["artifact_id"]
    print(f"artifact {first_artifact} level={created['profile']['experience_level']}")

    section("update")
    status, form = press(control_id("update_intro", user_id), user_id)
    form = must_ok(status, form, "update button")["form"]
    form["details"] = "updated by smoke_flow"
    updated = submit(user_id, **form)
    assert updated["profile"]["artifact_id"] != first_artifact
    print("replace ok")

    section("ownership")
    status, _ = press(control_id("delete_intro", user_id), "someone-else")
    assert status == 403, status
    print("ownership ok")

    section("delete: cancel")
    status, prompt = press(control_id("delete_intro", user_id), user_id)
    prompt = must_ok(status, prompt, "delete button")
    status, data = press(buttons(prompt)["Cancel"], user_id)
    must_ok(status, data, "cancel")
    status, _ = api("GET", f"/api/intros/{user_id}")
    assert status == 200
    print("cancel ok")

    section("delete: confirm + replay")
    status, prompt = press(control_id("delete_intro", user_id), user_id)
    confirm = buttons(must_ok(status, prompt, "delete button"))["Yes, Delete"]
    status, data = press(confirm, user_id)
    must_ok(status, data, "confirm")
    status, data = press(confirm, user_id)
    assert status == 200 and data["status"] == "stale", (status, data)
    status, _ = api("GET", f"/api/intros/{user_id}")
    assert status == 404
    print("delete ok")

    print("\nALL OK")


if __name__ == "__main__":
    main()
