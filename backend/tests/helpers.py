import json

GOOD_EVALUATION = {
    "clarity": 8,
    "correctness": 7,
    "depth": 6,
    "delivery": 7.5,
    "missingConcepts": ["eviction policies"],
    "reaction": "impressed",
    "feedback": "Solid explanation.",
    "improvementSuggestions": ["Mention persistence options."],
    "deliveryFeedback": "Good pace.",
}


class Resp:
    """
    Minimal stand-in for requests.Response.
    json() returns the given payload; text mirrors it for error messages.
    """
    def __init__(self, status_code=200, json_payload=None, text=""):
        self.status_code = status_code
        self._json = json_payload if json_payload is not None else {}
        self.text = text or json.dumps(self._json)

    def json(self):
        return self._json


def gemini_payload(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def signup_and_login(client, email="ada@skillcheck.dev", password="secret123", name="Ada"):
    rv = client.post("/api/users", json={"email": email, "password": password, "name": name})
    assert rv.status_code == 200, rv.text
    rv = client.post("/api/users/login", json={"email": email, "password": password})
    assert rv.status_code == 200, rv.text
    data = rv.json()["data"]
    return {"Authorization": f"Bearer {data['token']}"}, data


def create_session(client, headers, skill_name="Redis", mode="explain", input_type="text", difficulty="beginner"):
    rv = client.post("/api/sessions", headers=headers, json={
        "skill_name": skill_name, "mode": mode, "input_type": input_type, "difficulty": difficulty,
    })
    assert rv.status_code == 200, rv.text
    return rv.json()["data"]["session"]


def submit_answer(client, headers, session_id, raw_text="Redis is an in-memory key-value store.", **extra):
    rv = client.post(f"/api/sessions/{session_id}/answer", headers=headers, json={"raw_text": raw_text, **extra})
    assert rv.status_code == 200, rv.text
    return rv.json()["data"]["answer"]
