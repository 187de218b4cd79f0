# src/pkg_broadcast/cli.py

from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Sequence

from .adapters.jwt.token_codec import JWTTokenCodec
from .config.env import settings_from_env
from .integrations.common.broadcaster_factory import create_broadcaster


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="pkg-broadcast",
        description="Issue and inspect Ably channel tokens",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    token = commands.add_parser(
        "token",
        help="Issue a signed channel token (key from ABLY_KEY).",
    )
    token.add_argument(
        "--channel",
        "-c",
        default="",
        help="Canonical channel name to grant, e.g. private:orders.42",
    )
    token.add_argument(
        "--client-id",
        help="Value for the x-ably-clientId claim.",
    )
    token.add_argument(
        "--capability",
        "-C",
        nargs="*",
        help="Operations granted on --channel (default: *).",
    )
    token.add_argument(
        "--previous",
        "-p",
        help="Previously issued token to renew.",
    )

    decode = commands.add_parser(
        "decode",
        help="Print the (unverified) header and claims of a token.",
    )
    decode.add_argument("token", help="Token to decode.")

    return parser.parse_args(args=argv)


def _run(args: argparse.Namespace) -> dict[str, Any]:
    codec = JWTTokenCodec()

    if args.command == "decode":
        decoded = codec.decode(args.token)
        return {"header": dict(decoded.header), "claims": dict(decoded.claims)}

    broadcaster = create_broadcaster(settings_from_env())
    signed = broadcaster.get_signed_token(
        args.channel,
        token=args.previous,
        client_id=args.client_id,
        capability=list(args.capability) if args.capability else ["*"],
    )
    return {"token": signed, "claims": dict(codec.decode(signed).claims)}


def main(argv: Sequence[str] | None = None) -> None:
    args = _parse_args(argv)

    try:
        summary = _run(args)
        json.dump({"ok": True, **summary}, sys.stdout, indent=2)
        sys.stdout.write("\n")
    except Exception as exc:  # noqa: BLE001
        json.dump({"ok": False, "error": str(exc)}, sys.stdout, indent=2)
        sys.stdout.write("\n")
        raise


if __name__ == "__main__":
    main()
