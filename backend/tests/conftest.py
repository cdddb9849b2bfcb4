import json
import os
import types

import pytest

# Must be set before skillcheck.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("GEMINI_API_KEY", "test-key")
os.environ.setdefault("SECRET_KEY", "test-secret")

from fastapi.testclient import TestClient  # noqa: E402

from skillcheck import models  # noqa: E402
from skillcheck.database import SessionLocal, engine  # noqa: E402
from skillcheck.main import app as fastapi_app  # noqa: E402
from skillcheck.services import llm_service  # noqa: E402

from helpers import GOOD_EVALUATION, signup_and_login  # noqa: E402


@pytest.fixture(autouse=True)
def reset_db():
    models.Base.metadata.drop_all(bind=engine)
    models.Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture()
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client():
    return TestClient(fastapi_app)


@pytest.fixture()
def llm_reply(monkeypatch):
    """
    Make every LLM call answer with the given raw text (or fail when
    ``ok=False``). The returned setter exposes ``.state["prompts"]``.
    """
    state = {"raw": json.dumps(GOOD_EVALUATION), "ok": True, "error": None, "prompts": []}

    def _fake(prompt, model=None, timeout=None):
        state["prompts"].append(prompt)
        if not state["ok"]:
            return {"ok": False, "raw": "", "model": "gemini-test", "error": state["error"] or "boom"}
        return {"ok": True, "raw": state["raw"], "model": "gemini-test", "error": None}

    monkeypatch.setattr(llm_service, "generate_with_llm", _fake)

    def _set(raw=None, ok=True, error=None):
        if raw is not None:
            state["raw"] = raw if isinstance(raw, str) else json.dumps(raw)
        state["ok"] = ok
        state["error"] = error
        return state

    _set.state = state
    return _set


@pytest.fixture()
def stub_post(monkeypatch):
    """Replace requests.post inside the LLM transport with a canned response or exception."""
    calls = []

    def _install(response=None, exc=None):
        def _post(url, headers=None, json=None, timeout=0):
            calls.append(types.SimpleNamespace(url=url, headers=headers, json=json, timeout=timeout))
            if exc is not None:
                raise exc
            return response
        monkeypatch.setattr(llm_service.requests, "post", _post)
        return calls

    return _install


@pytest.fixture()
def auth_headers(client):
    headers, _ = signup_and_login(client)
    return headers


@pytest.fixture()
def user(db):
    from skillcheck.services import user_service
    return user_service.create_user(db, "grace@skillcheck.dev", "secret123", name="Grace")
