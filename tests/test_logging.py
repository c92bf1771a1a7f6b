from app.shared.core.logging import pii_redactor


def test_redacts_top_level_fields():
    event = {"event": "login", "email": "admin@kco.dev", "password": "x", "user_id": "u1"}
    result = pii_redactor(None, "info", event)

    assert result["email"] == "[REDACTED]"
    assert result["password"] == "[REDACTED]"
    assert result["user_id"] == "u1"


def test_redacts_nested_metadata():
    event = {"event": "audit_event", "metadata": {"token": "abc", "idea_id": "i1"}}
    result = pii_redactor(None, "info", event)

    assert result["metadata"] == {"token": "[REDACTED]", "idea_id": "i1"}
