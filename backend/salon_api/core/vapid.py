"""Generate VAPID keys for Web Push notifications."""

from __future__ import annotations

import argparse
import base64
from pathlib import Path

from cryptography.hazmat.primitives import serialization
from py_vapid import Vapid


def generate_vapid_keys() -> tuple[Vapid, str, str]:
    """New key pair as (vapid, private PEM, url-safe base64 public key)."""
    vapid = Vapid()
    vapid.generate_keys()

    private_key = vapid.private_pem().decode("utf-8").strip()

    # Browsers expect the uncompressed point, base64url without padding
    public_key_bytes = vapid.public_key.public_bytes(
        encoding=serialization.Encoding.X962,
        format=serialization.PublicFormat.UncompressedPoint,
    )
    public_key = base64.urlsafe_b64encode(public_key_bytes).decode("utf-8").rstrip("=")
    return vapid, private_key, public_key


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--out-dir", type=Path, help="Also save the keys as PEM files in this directory")
    parser.add_argument("--email", default="admin@cxrsystems.com", help="Contact address for VAPID claims")
    args = parser.parse_args(argv)

    vapid, private_key, public_key = generate_vapid_keys()

    print("=" * 70)
    print("VAPID KEYS GENERATED - Add to backend/.env")
    print("=" * 70)
    print(f"VAPID_PRIVATE_KEY={private_key}")
    print(f"VAPID_PUBLIC_KEY={public_key}")
    print(f"VAPID_CLAIMS_EMAIL=mailto:{args.email}")
    print("=" * 70)

    if args.out_dir:
        args.out_dir.mkdir(parents=True, exist_ok=True)
        vapid.save_key(str(args.out_dir / "vapid_private.pem"))
        vapid.save_public_key(str(args.out_dir / "vapid_public.pem"))
        print(f"\nKeys also saved to {args.out_dir}")


if __name__ == "__main__":
    main()
