"""Post-deploy smoke checks executed from the app container."""

from __future__ import annotations

import json
import os
import urllib.error
import urllib.request
from datetime import date, timedelta

BASE_URL = os.environ.get("SMOKE_BASE_URL", "http://localhost:8000")


def request(
    path: str,
    *,
    method: str = "GET",
    body: dict[str, str] | None = None,
    headers: dict[str, str] | None = None,
    expected: int = 200,
) -> bytes:
    payload = None
    req_headers = {"Accept": "application/json"}
    if headers:
        req_headers.update(headers)
    if body is not None:
        payload = json.dumps(body).encode("utf-8")
        req_headers["Content-Type"] = "application/json"

    request_obj = urllib.request.Request(
        f"{BASE_URL}{path}",
        data=payload,
        method=method,
        headers=req_headers,
    )
    try:
        with urllib.request.urlopen(request_obj, timeout=30) as response:
            content = response.read()
            status = response.getcode()
    except urllib.error.HTTPError as exc:  # pragma: no cover - runtime smoke script
        body_text = exc.read().decode("utf-8", errors="ignore")
        raise RuntimeError(f"{method} {path} -> {exc.code}: {body_text}") from exc

    if status != expected:
        raise RuntimeError(f"{method} {path} -> {status}, expected {expected}")
    return content


def main() -> None:
    for endpoint in ["/health", "/ready", "/docs", "/metrics"]:
        request(endpoint, expected=200)

    today = date.today()
    query = f"from={today.isoformat()}&to={(today + timedelta(days=7)).isoformat()}"
    payload = json.loads(request(f"/api/booking/slots?{query}").decode("utf-8"))
    starts = [slot["startAt"] for slot in payload["slots"]]
    if starts != sorted(starts) or len(set(starts)) != len(starts):
        raise RuntimeError("Slot listing is not sorted by unique start instants")

    admin_password = os.environ.get("SMOKE_ADMIN_PASSWORD")
    if admin_password:
        login_payload = json.loads(
            request(
                "/api/identity/auth/login",
                method="POST",
                body={"password": admin_password},
            ).decode("utf-8"),
        )
        request(
            "/api/scheduling/weekly-availability",
            headers={"Authorization": f"Bearer {login_payload['access_token']}"},
        )

    print(f"Smoke checks passed ({len(starts)} slots offered in the next 7 days).")


if __name__ == "__main__":
    main()
