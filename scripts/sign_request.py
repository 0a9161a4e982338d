#!/usr/bin/env python3
"""Print a Hawk Authorization header or a bewit URL for a request."""

import argparse
import sys
from pathlib import Path
from urllib.parse import urlsplit

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from hawkauth.bewit import build_bewit
from hawkauth.client import build_authorization_header
from hawkauth.common.errors import HawkError
from hawkauth.common.logging import setup_logging
from hawkauth.common.settings import get_settings
from hawkauth.credentials import credentials_from_settings
from hawkauth.models import Credentials, SigningContext


def main(argv=None):
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Sign a request with Hawk")
    parser.add_argument("url", help="Absolute request URL")
    parser.add_argument("--id", "-i", required=True, help="Hawk credentials id")
    parser.add_argument(
        "--key", "-k",
        help="Shared secret (default: looked up in HAWK_CREDENTIALS)"
    )
    parser.add_argument(
        "--algorithm", "-a",
        default="sha256",
        help="Digest algorithm when --key is given (sha1 or sha256)"
    )
    parser.add_argument("--method", "-X", default="GET", help="HTTP method")
    parser.add_argument(
        "--payload-file", "-d",
        help="File whose bytes are the request payload"
    )
    parser.add_argument("--content-type", "-t", help="Request content type")
    parser.add_argument("--ext", help="Application-specific data")
    parser.add_argument(
        "--bewit",
        type=int,
        nargs="?",
        const=settings.bewit_ttl_seconds,
        metavar="TTL",
        help="Print a bewit URL valid for TTL seconds (default: HAWK_BEWIT_TTL_SECONDS) instead of a header"
    )

    args = parser.parse_args(argv)
    setup_logging(settings.log_level, json_logs=settings.log_json)

    try:
        if args.key:
            credentials = Credentials(id=args.id, key=args.key, algorithm=args.algorithm)
        else:
            credentials = credentials_from_settings(settings)(args.id)
    except HawkError as exc:
        print(f"Error [{exc.code}]: {exc}")
        sys.exit(1)

    if credentials is None:
        print(f"Error: No credentials for id {args.id!r}")
        sys.exit(1)

    url = urlsplit(args.url)
    if url.scheme not in ("http", "https") or not url.hostname:
        print(f"Error: Not an absolute http(s) URL: {args.url}")
        sys.exit(1)

    resource = url.path or "/"
    if url.query:
        resource = f"{resource}?{url.query}"

    payload = None
    if args.payload_file:
        payload = Path(args.payload_file).read_bytes()

    context = SigningContext(
        method=args.method,
        resource=resource,
        host=url.hostname,
        port=url.port or (443 if url.scheme == "https" else 80),
        content_type=args.content_type,
        payload=payload,
        ext=args.ext,
    )

    if args.bewit is not None:
        token = build_bewit(context, credentials, ttl_seconds=args.bewit)
        separator = "&" if url.query else "?"
        print(f"{args.url}{separator}bewit={token}")
        return

    print(f"Authorization: {build_authorization_header(context, credentials, nonce_bytes=settings.nonce_bytes)}")


if __name__ == "__main__":
    main()
