"""Tests for GET /v1/analytics."""

from httpx import AsyncClient

from support import create_agent


async def test_empty_dashboard(auth_client: AsyncClient) -> None:
    response = await auth_client.get("/v1/analytics")

    assert response.status_code == 200
    body = response.json()
    assert body["total_conversations"] == 0
    assert len(body["conversation_by_day"]) == 7
    assert [b["hour"] for b in body["response_time_by_hour_block"]] == [
        "12am", "4am", "8am", "12pm", "4pm", "8pm",
    ]
    assert body["recent_activity"] == []


async def test_dashboard_reflects_chat_turns(auth_client: AsyncClient, db_session, owner) -> None:
    agent = await create_agent(db_session, owner.id, name="Support Bot")
    await auth_client.post(f"/v1/agents/{agent.id}/chat", json={"message": "What are your hours?"})

    body = (await auth_client.get("/v1/analytics")).json()

    assert body["total_conversations"] == 1
    assert body["conversation_by_day"][-1]["conversations"] == 1
    activity = body["recent_activity"][0]
    assert activity["agent_name"] == "Support Bot"
    assert activity["title"] == "What are your hours?"
    assert activity["customer_preview"] == "What are your hours?"
    assert activity["status"] == "success"
    assert body["avg_response_time_seconds"] >= 0


async def test_requires_authentication(client: AsyncClient) -> None:
    response = await client.get("/v1/analytics")

    assert response.status_code == 401
