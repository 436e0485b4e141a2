#!/usr/bin/env python3
"""
One-time OAuth setup for scrivener.

The server never opens a browser on a host without a display, so on a new
machine run this first. It writes TOKEN_FILE; from then on the server loads
and refreshes the token by itself.

Usage:
    python -m auth              # browser flow (falls back to --manual without a display)
    python -m auth --manual     # print a URL, paste back the redirect or code
    python -m auth --status     # report what is on disk, change nothing

Prerequisites:
    A Desktop app OAuth client JSON from the GCP Console at CREDENTIALS_FILE
    (credentials.json beside this file, or SCRIVENER_CREDENTIALS_FILE).
"""

import argparse
import os
import sys

from adapters.credentials import OAuthCredentialProvider
from oauth_config import CREDENTIALS_FILE, SCOPES, TOKEN_FILE


def _has_display() -> bool:
    """A terminal on a machine that can show a browser."""
    if not sys.stdin.isatty():
        return False
    if sys.platform in ("darwin", "win32"):
        return True
    return bool(os.environ.get("DISPLAY") or os.environ.get("WAYLAND_DISPLAY"))


def _print_status() -> int:
    print(f"OAuth client:  {CREDENTIALS_FILE} ({'found' if CREDENTIALS_FILE.exists() else 'missing'})")
    print(f"Token:         {TOKEN_FILE} ({'found' if TOKEN_FILE.exists() else 'missing'})")
    print("Scopes:")
    for scope in SCOPES:
        print(f"  {scope}")
    return 0 if TOKEN_FILE.exists() else 1


def main() -> None:
    parser = argparse.ArgumentParser(description="Authorize scrivener against your Google account")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--manual",
        action="store_true",
        help="copy-paste flow for SSH sessions and containers",
    )
    mode.add_argument(
        "--status",
        action="store_true",
        help="show credential and token paths without authorizing",
    )
    args = parser.parse_args()

    if args.status:
        sys.exit(_print_status())

    manual = args.manual
    if not manual and not _has_display():
        print("No display detected, switching to manual mode.")
        manual = True

    provider = OAuthCredentialProvider(interactive=True)
    try:
        provider.load_or_authorize(manual=manual)
    except KeyboardInterrupt:
        print("\nAuthorization cancelled.")
        sys.exit(1)
    except Exception as e:
        print(f"\nAuthorization failed: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"\nAuthorized. Token saved to {TOKEN_FILE}.")


if __name__ == "__main__":
    main()
