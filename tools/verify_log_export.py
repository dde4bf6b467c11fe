"""Verify an exported set of audit log records (for CI jobs and offline audits)."""

from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path
from typing import Any

from untamper.core.config import get_settings
from untamper.core.errors import UnTamperError
from untamper.core.logging import configure_logging
from untamper.modules.verification.credentials import CredentialCache
from untamper.modules.verification.service import VerificationService


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Verify hashes, signatures and chain links of exported audit logs.")
    parser.add_argument(
        "logs",
        type=Path,
        help="JSON file holding a list of log records, or an object with a 'logs' or 'data' list.",
    )
    parser.add_argument(
        "--public-key",
        type=Path,
        default=None,
        help="PEM public key file. Omit to fetch the key from the unTamper API.",
    )
    parser.add_argument(
        "--full-chain",
        action="store_true",
        help="Require the records to start at the chain's genesis record.",
    )
    return parser.parse_args(argv)


def _load_records(path: Path) -> list[dict[str, Any]]:
    payload = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(payload, dict):
        for key in ("logs", "data"):
            if isinstance(payload.get(key), list):
                payload = payload[key]
                break
    if not isinstance(payload, list):
        raise ValueError(f"{path} does not contain a list of log records")
    return payload


async def _main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    settings = get_settings()
    configure_logging(settings)

    try:
        if args.public_key is not None:
            service = VerificationService(
                CredentialCache.from_pem(args.public_key.read_text(encoding="utf-8")),
                settings=settings,
            )
        else:
            service = VerificationService.from_settings(settings)
    except (UnTamperError, OSError) as exc:
        print(json.dumps({"error": str(exc)}, indent=2))
        return 2

    try:
        records = _load_records(args.logs)
        if args.full_chain:
            result = await service.verify_full_chain(records)
        else:
            result = await service.verify_chain(records)
    except (UnTamperError, ValueError, OSError) as exc:
        print(json.dumps({"error": str(exc)}, indent=2))
        return 2
    finally:
        await service.close()

    print(json.dumps(result.to_dict(), indent=2))
    return 0 if result.valid else 1


if __name__ == "__main__":
    raise SystemExit(asyncio.run(_main()))
