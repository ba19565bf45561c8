#!/usr/bin/env python3
"""Smoke test against a running moodmeter-server.

Writes a mood, reads it back through every read path and checks the
public metrics export.

Usage:
    # Set environment variables:
    export TOKEN="<bearer token of a public test account>"
    export USERNAME="<username of that account>"
    export BASE_URL="http://localhost:8000"

    # Run:
    python scripts/test_e2e.py
"""

import asyncio
import os
import sys

import httpx

# Configuration from environment
TOKEN = os.environ.get("TOKEN", "")
USERNAME = os.environ.get("USERNAME", "smoke_test")
BASE_URL = os.environ.get("BASE_URL", "http://localhost:8000")
HEADERS = {"Authorization": f"Bearer {TOKEN}"}


async def check_health(client: httpx.AsyncClient) -> bool:
    """Health endpoint answers without credentials."""
    r = await client.get("/health")
    if r.status_code != 200 or r.json().get("status") != "ok":
        print(f"  FAIL: Health check returned {r.status_code}")
        return False
    print(f"  OK: Server up, version {r.json().get('version')}")
    return True


async def check_unauthorized(client: httpx.AsyncClient) -> bool:
    """Self-only endpoints reject requests without a token."""
    r = await client.get("/me")
    if r.status_code != 401:
        print(f"  FAIL: Expected 401, got {r.status_code}")
        return False
    print("  OK: Unauthenticated request rejected")
    return True


async def check_mood_roundtrip(client: httpx.AsyncClient) -> bool:
    """A written mood shows up in /mood, /mood/{user} and /history/all."""
    r = await client.put("/mood", json={"pleasantness": 0.42, "energy": -0.17}, headers=HEADERS)
    if r.status_code != 200:
        print(f"  FAIL: PUT /mood returned {r.status_code}: {r.text}")
        return False

    for path in ("/mood", f"/mood/{USERNAME}"):
        r = await client.get(path, headers=HEADERS)
        mood = r.json().get("mood", {})
        if r.status_code != 200 or mood.get("pleasantness") != 0.42:
            print(f"  FAIL: {path} returned {r.status_code}: {r.text}")
            return False
        print(f"  OK: {path} - {mood}")

    r = await client.get("/history/all", headers=HEADERS)
    if r.status_code != 200 or not r.json().get("entries"):
        print(f"  FAIL: /history/all returned {r.status_code}")
        return False
    print(f"  OK: /history/all - {len(r.json()['entries'])} entries")
    return True


async def check_metrics(client: httpx.AsyncClient) -> bool:
    """The metrics export lists the account."""
    r = await client.get("/metrics", params={"users": USERNAME})
    if r.status_code != 200 or f'user="{USERNAME}"' not in r.text:
        print(f"  FAIL: /metrics returned {r.status_code}")
        return False
    print("  OK: /metrics exports the account")
    return True


async def check_openapi(client: httpx.AsyncClient) -> bool:
    """OpenAPI schema is served."""
    r = await client.get("/schema/openapi.json")
    if r.status_code != 200:
        print(f"  FAIL: OpenAPI schema returned {r.status_code}")
        return False
    print(f"  OK: OpenAPI schema - {len(r.json().get('paths', {}))} paths documented")
    return True


async def main() -> int:
    """Run all smoke checks."""
    print("=" * 60)
    print("moodmeter-server - Smoke Test")
    print("=" * 60)
    print(f"Base URL: {BASE_URL}")
    print(f"User: {USERNAME}")
    print("=" * 60)

    if not TOKEN:
        print("TOKEN is not set")
        return 1

    checks = [
        ("Health Check", check_health),
        ("Authorization", check_unauthorized),
        ("Mood Round Trip", check_mood_roundtrip),
        ("Metrics", check_metrics),
        ("OpenAPI Schema", check_openapi),
    ]

    passed = 0
    failed = 0

    async with httpx.AsyncClient(base_url=BASE_URL) as client:
        for name, check in checks:
            print(f"\n[{name}]")
            try:
                if await check(client):
                    passed += 1
                else:
                    failed += 1
            except httpx.HTTPError as e:
                print(f"  ERROR: {e}")
                failed += 1

    print("\n" + "=" * 60)
    print(f"Results: {passed} passed, {failed} failed")
    print("=" * 60)

    return 0 if failed == 0 else 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
