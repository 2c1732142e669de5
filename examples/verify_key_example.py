#!/usr/bin/env python3
"""
NebulAuth Python SDK - Key Verification Example

This example shows how to verify a license key with replay protection, how
the auth headers differ per replay mode, and how to send a proof-of-possession
request.

Set NEBULAUTH_BEARER_TOKEN, NEBULAUTH_SIGNING_SECRET and NEBULAUTH_TEST_KEY
to run the network part against a real deployment.
"""

import json
import logging
import sys
import os

# Add src to path for development
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from nebulauth_sdk import (
    NebulAuthClient,
    ClientOptions,
    VerifyKeyInput,
    PopAuthOptions,
    ReplayProtectionMode,
    NebulAuthError,
    load_client_options_from_env,
)


def header_modes_example():
    """Show the auth headers produced for each replay protection mode"""
    print("=== Auth Headers per Replay Mode ===")

    body = json.dumps({"key": "DEMO-KEY"}, separators=(',', ':'))

    for mode in ReplayProtectionMode:
        options = ClientOptions(
            bearer_token="demo-token",
            signing_secret="demo-secret",
            replay_protection=mode
        )
        with NebulAuthClient(options) as client:
            url = client.endpoint_url("/keys/verify")
            headers = client.build_auth_headers("POST", url, body)

        print(f"\n{mode.value}:")
        for name in sorted(headers):
            print(f"   {name}: {headers[name][:24]}")


def pop_example():
    """Show a proof-of-possession override"""
    print("\n=== Proof-of-Possession ===")

    with NebulAuthClient(ClientOptions(replay_protection="none")) as client:
        headers = client.build_auth_headers(
            "POST",
            client.endpoint_url("/keys/verify"),
            "{}",
            PopAuthOptions(use_pop=True, access_token="session-access-token", pop_key="session-pop-key")
        )

    print(f"   Authorization: {headers['Authorization'][:20]}...")
    print(f"   Signed headers: {', '.join(sorted(h for h in headers if h != 'Authorization'))}")


def live_verify_example():
    """Verify a real key when credentials are configured"""
    print("\n=== Live Key Verification ===")

    test_key = os.environ.get("NEBULAUTH_TEST_KEY")
    if not test_key or not os.environ.get("NEBULAUTH_BEARER_TOKEN"):
        print("   Skipped: set NEBULAUTH_BEARER_TOKEN and NEBULAUTH_TEST_KEY")
        return

    try:
        with NebulAuthClient(load_client_options_from_env()) as client:
            response = client.verify_key(VerifyKeyInput(
                key=test_key,
                hwid=os.environ.get("NEBULAUTH_TEST_HWID")
            ))
    except NebulAuthError as e:
        print(f"   ✗ {e.error_code}: {e}")
        return

    marker = "✓" if response.ok else "✗"
    print(f"   {marker} HTTP {response.status_code}")
    print(f"   {json.dumps(response.data, indent=2)}")


def main():
    logging.basicConfig(level=logging.INFO)

    header_modes_example()
    pop_example()
    live_verify_example()


if __name__ == '__main__':
    main()
