# backend/skillcheck/client.py
"""
Small typed client for the Skillcheck REST API.

Credentials are never stored on the shared ``requests.Session``: every
authenticated call takes an :class:`AuthContext` and sends its token on that
request only, so one client can serve several users at once.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from .errors import ApiError

DEFAULT_TIMEOUT = 30


@dataclass(frozen=True)
class AuthContext:
    token: str
    refresh_token: Optional[str] = None

    def headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


class SkillcheckClient:
    def __init__(self, base_url: str, http: Optional[requests.Session] = None, timeout: int = DEFAULT_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.http = http or requests.Session()
        self.timeout = timeout

    def _request(self, method: str, path: str, ctx: Optional[AuthContext] = None, json: Any = None) -> Dict[str, Any]:
        headers = ctx.headers() if ctx else {}
        resp = self.http.request(method, f"{self.base_url}{path}", headers=headers, json=json, timeout=self.timeout)
        try:
            body = resp.json()
        except ValueError:
            raise ApiError(f"Non-JSON response ({resp.status_code})", resp.status_code)
        if not body.get("success"):
            raise ApiError(body.get("error") or body.get("message") or "Request failed", resp.status_code)
        return body.get("data") or {}

    # -------- users --------
    def signup(self, email: str, password: str, name: Optional[str] = None, role: Optional[str] = None):
        payload = {"email": email, "password": password, "name": name, "role": role}
        return self._request("POST", "/api/users", json={k: v for k, v in payload.items() if v is not None})["user"]

    def login(self, email: str, password: str) -> AuthContext:
        data = self._request("POST", "/api/users/login", json={"email": email, "password": password})
        return AuthContext(token=data["token"], refresh_token=data.get("refresh_token"))

    def refresh(self, ctx: AuthContext) -> AuthContext:
        data = self._request("POST", "/api/users/token/refresh", json={"refresh_token": ctx.refresh_token})
        return AuthContext(token=data["token"], refresh_token=data.get("refresh_token"))

    def me(self, ctx: AuthContext):
        return self._request("GET", "/api/users/me", ctx)["user"]

    def overview(self, ctx: AuthContext):
        return self._request("GET", "/api/users/me/overview", ctx)["overview"]

    def activity(self, ctx: AuthContext):
        return self._request("GET", "/api/users/me/activity", ctx)["activity"]

    # -------- sessions --------
    def create_session(self, ctx: AuthContext, skill_name: str, mode: str, input_type: str, difficulty: str = "beginner"):
        payload = {"skill_name": skill_name, "mode": mode, "input_type": input_type, "difficulty": difficulty}
        return self._request("POST", "/api/sessions", ctx, json=payload)["session"]

    def submit_answer(self, ctx: AuthContext, session_id: int, raw_text: str, transcript: Optional[str] = None,
                      duration: Optional[float] = None, voice_metrics: Optional[Dict[str, Any]] = None):
        payload = {"raw_text": raw_text, "transcript": transcript, "duration": duration, "voice_metrics": voice_metrics}
        return self._request("POST", f"/api/sessions/{session_id}/answer", ctx, json=payload)["answer"]

    def evaluate(self, ctx: AuthContext, session_id: int, answer_id: Optional[int] = None):
        return self._request("POST", f"/api/sessions/{session_id}/evaluate", ctx, json={"answer_id": answer_id})["evaluation"]

    def summary(self, ctx: AuthContext, session_id: int):
        return self._request("GET", f"/api/sessions/{session_id}/summary", ctx)["summary"]

    # -------- skills --------
    def skills(self, ctx: AuthContext):
        return self._request("GET", "/api/skills", ctx)["skills"]
