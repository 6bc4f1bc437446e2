"""
Live e2e tests against running services.

Requires the gateway on LIVE_E2E_API_URL (default http://localhost:8004) with
TWILIO_API_BASE_URL pointed at tools/mock_twilio_api.py, plus its PostgreSQL.
Set LIVE_E2E=1 to enable.
"""
import os
import time
import logging
from concurrent.futures import ThreadPoolExecutor

import httpx
import psycopg2
import pytest


LIVE_E2E = os.getenv("LIVE_E2E", "").lower() in {"1", "true", "yes"}

API_BASE_URL = os.getenv("LIVE_E2E_API_URL", "http://localhost:8004")
MOCK_TWILIO_URL = os.getenv("LIVE_E2E_MOCK_TWILIO_URL", "http://localhost:8080")

TENANT_ID = "live-e2e-tenant"
TENANT_PHONE = "+15550009999"
CALLER_PHONE = "+15551230000"

logger = logging.getLogger(__name__)


pytestmark = pytest.mark.skipif(
    not LIVE_E2E,
    reason="LIVE_E2E not enabled (set LIVE_E2E=1)",
)


def _ensure_reachable(url: str, name: str) -> None:
    try:
        logger.info("Checking reachability for %s at %s", name, url)
        httpx.get(url, timeout=3.0)
    except httpx.HTTPError:
        pytest.skip(f"{name} not reachable at {url}.")


def _get_db_conn():
    db_name = os.getenv("LIVE_E2E_DB_NAME", os.getenv("DB_NAME", "relay_gateway"))
    db_user = os.getenv("LIVE_E2E_DB_USER", os.getenv("DB_USER", "postgres"))
    db_password = os.getenv("LIVE_E2E_DB_PASSWORD", os.getenv("DB_PASSWORD", "postgres"))
    db_host = os.getenv("LIVE_E2E_DB_HOST", os.getenv("DB_HOST", "localhost"))
    db_port = int(os.getenv("LIVE_E2E_DB_PORT", os.getenv("DB_PORT", "5432")))

    try:
        return psycopg2.connect(
            dbname=db_name,
            user=db_user,
            password=db_password,
            host=db_host,
            port=db_port,
        )
    except psycopg2.OperationalError:
        pytest.skip("PostgreSQL not reachable. Ensure the gateway DB is up and its port is exposed.")


def _ensure_tenant() -> None:
    with _get_db_conn() as conn:
        with conn.cursor() as cur:
            cur.execute(
                """
                INSERT INTO relay_tenantcredentials
                    (tenant_id, account_sid, auth_token, phone_number, created_at, updated_at)
                VALUES (%s, %s, %s, %s, NOW(), NOW())
                ON CONFLICT (tenant_id) DO NOTHING
                """,
                (TENANT_ID, "ACliveE2E", "live-token", TENANT_PHONE),
            )


def _get_request_status(request_code: str):
    with _get_db_conn() as conn:
        with conn.cursor() as cur:
            cur.execute(
                "SELECT status, received_value FROM relay_inforequest WHERE request_code = %s",
                (request_code,),
            )
            return cur.fetchone()


def _wait_for_prompt(body: str, timeout_seconds: int = 20) -> bool:
    deadline = time.time() + timeout_seconds
    while time.time() < deadline:
        messages = httpx.get(f"{MOCK_TWILIO_URL}/_messages", timeout=3.0).json()["messages"]
        if any(m.get("to") == CALLER_PHONE and m.get("body") == body for m in messages):
            return True
        time.sleep(0.5)
    return False


def _format_response(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = response.text
    return (
        f"status={response.status_code} "
        f"headers={dict(response.headers)} "
        f"body={body}"
    )


def _post_agent_request(message: str, info_type: str) -> httpx.Response:
    payload = {
        "call": {"call_id": f"live_{int(time.time())}", "from_number": CALLER_PHONE},
        "name": "request_info",
        "args": {"message": message, "info_type": info_type},
    }
    return httpx.post(f"{API_BASE_URL}/webhooks/agent/{TENANT_ID}/", json=payload, timeout=60.0)


def _text_back(body: str) -> httpx.Response:
    return httpx.post(
        f"{API_BASE_URL}/webhooks/sms/",
        data={"From": CALLER_PHONE, "To": TENANT_PHONE, "Body": body, "MessageSid": "SMlive"},
        timeout=10.0,
    )


def test_live_round_trip_returns_reply():
    _ensure_reachable(f"{API_BASE_URL}/admin/", "Relay API")
    _ensure_reachable(f"{MOCK_TWILIO_URL}/_health", "Mock Twilio API")
    _ensure_tenant()
    httpx.post(f"{MOCK_TWILIO_URL}/_reset", timeout=3.0)

    prompt = "What email should we send the receipt to?"
    with ThreadPoolExecutor(max_workers=1) as executor:
        pending_response = executor.submit(_post_agent_request, prompt, "email")

        logger.info("Waiting for prompt SMS to reach mock carrier")
        assert _wait_for_prompt(prompt)

        reply = _text_back("Live.Caller@Example.com")
        assert reply.status_code == 200
        assert reply.headers["content-type"].startswith("text/xml")

        response = pending_response.result(timeout=60)

    logger.info("Received response %s", _format_response(response))
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["value"] == "live.caller@example.com"

    row = _get_request_status(data["request_id"])
    logger.info("Request %s row: %s", data["request_id"], row)
    assert row == ("completed", "live.caller@example.com")


def test_live_invalid_reply_gets_corrective_sms():
    _ensure_reachable(f"{API_BASE_URL}/admin/", "Relay API")
    _ensure_reachable(f"{MOCK_TWILIO_URL}/_health", "Mock Twilio API")
    _ensure_tenant()
    httpx.post(f"{MOCK_TWILIO_URL}/_reset", timeout=3.0)

    prompt = "Please text your account number."
    with ThreadPoolExecutor(max_workers=1) as executor:
        pending_response = executor.submit(_post_agent_request, prompt, "account_number")
        assert _wait_for_prompt(prompt)

        _text_back("123")
        messages = httpx.get(f"{MOCK_TWILIO_URL}/_messages", timeout=3.0).json()["messages"]
        assert any("at least 5 digits" in m.get("body", "") for m in messages)

        _text_back("12345-678")
        response = pending_response.result(timeout=60)

    logger.info("Received response %s", _format_response(response))
    assert response.status_code == 200
    assert response.json()["value"] == "12345678"
