#!/usr/bin/env python
"""
Script to show how the gateway signs a monitoring API request.

The provider answers a bad signature with a generic authentication error,
so this prints every intermediate value (canonical request, string to sign,
headers) for comparison with the provider's own signing tools. Optionally
sends the signed request and prints the answer.

Usage:
  python scripts/sign_request.py /metrics?namespace=SYS.ECS
  python scripts/sign_request.py /metrics --send
  python scripts/sign_request.py https://ces.example.com/V1.0/metrics --timestamp 20240101T000000Z
"""
import sys
import argparse
from datetime import datetime, timezone

import requests
from dotenv import load_dotenv

from ces_gateway.config import GatewayConfig
from ces_gateway.exceptions import SigningError
from ces_gateway.proxy.forwarder import HEADER_STAGE
from ces_gateway.signing import DATE_FORMAT, OutboundRequest, RequestSigner


def main():
    """Sign a request with the configured credential and print the details."""
    load_dotenv()

    parser = argparse.ArgumentParser(description='Show the signature of a monitoring API request')
    parser.add_argument('target', help='Absolute URL, or a path relative to CES_API_BASE')
    parser.add_argument('--method', default='GET', help='HTTP method (default: GET)')
    parser.add_argument('--timestamp', help=f'Fixed timestamp in {DATE_FORMAT} format (default: now)')
    parser.add_argument('--send', action='store_true', help='Send the signed request and print the answer')
    args = parser.parse_args()

    config = GatewayConfig.from_env()

    if args.target.startswith(('http://', 'https://')):
        url = args.target
    else:
        url = config.ces_api_base + '/' + args.target.lstrip('/')

    # One fixed instant so the printed details match the signed headers
    fixed = datetime.now(timezone.utc)
    if args.timestamp:
        try:
            fixed = datetime.strptime(args.timestamp, DATE_FORMAT).replace(tzinfo=timezone.utc)
        except ValueError:
            print(f"Error: timestamp must match {DATE_FORMAT}")
            sys.exit(1)

    signer = RequestSigner(config.credential, clock=lambda: fixed)

    try:
        request = OutboundRequest.from_url(args.method.upper(), url)
        request.headers[HEADER_STAGE] = config.ces_stage
        details = signer.describe(request)
        signed = signer.sign(request)
    except SigningError as e:
        print(f"Error: {e}")
        sys.exit(1)

    print("Canonical request:")
    print("-" * 80)
    print(details['canonical_request'])
    print("-" * 80)
    print()
    print("String to sign:")
    print("-" * 80)
    print(details['string_to_sign'])
    print("-" * 80)
    print()
    print(f"{signed.method} {signed.url}")
    for name, value in signed.header_items:
        print(f"{name}: {value}")

    if not args.send:
        return

    print()
    try:
        response = requests.request(signed.method, signed.url, headers=signed.headers,
                                    timeout=config.proxy_read_timeout)
    except requests.RequestException as e:
        print(f"Error sending request: {e}")
        sys.exit(1)

    print(f"Status: {response.status_code}")
    print(response.text)


if __name__ == "__main__":
    main()
