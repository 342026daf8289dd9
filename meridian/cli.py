#!/usr/bin/env python3
"""
Meridian Command Line Interface

Out-of-band operator utilities for the compliance control plane.

Usage:
    meridian keygen [--output <file>]
    meridian encrypt --key <file> --recipient <b64 public key> --input <file> [--output <file>]
    meridian decrypt --key <file> --input <payload file> [--output <file>]
    meridian hash --file <file>
    meridian split --threshold T --shares N (--hex <secret> | --file <file>)
    meridian combine --threshold T <share> <share> ...
    meridian apply --input <scenario file>
    meridian demo
"""

import argparse
import json
import sys
from pathlib import Path

from . import config
from .errors import InvalidConfiguration, MeridianError
from .logging_config import configure_logging


def load_json(path: str) -> dict:
    """Load JSON from file."""
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def save_json(data: dict, path: str):
    """Save JSON to file."""
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2)


def _load_channel(path: str):
    from .channel import ConfidentialChannel
    from .util import b64d

    key_data = load_json(path)
    return ConfidentialChannel(b64d(key_data["secret_key"]))


def cmd_keygen(args):
    """Generate a Curve25519 key pair."""
    from .channel import generate_key_pair

    key_pair = generate_key_pair().to_dict()
    if args.output:
        save_json(key_pair, args.output)
        print(f"Key pair saved to: {args.output}")
        print(f"Public key: {key_pair['public_key']}", file=sys.stderr)
    else:
        print(json.dumps(key_pair, indent=2))
    return 0


def cmd_encrypt(args):
    """Encrypt a file for a recipient and print its anchor hash."""
    from .util import b64d

    channel = _load_channel(args.key)
    payload = channel.encrypt(Path(args.input).read_bytes(), b64d(args.recipient))
    data = payload.to_dict()
    data["content_hash"] = payload.content_hash().hex()

    if args.output:
        save_json(data, args.output)
        print(f"Encrypted payload saved to: {args.output}")
    else:
        print(json.dumps(data, indent=2))
    print(f"content_hash: {data['content_hash']}", file=sys.stderr)
    return 0


def cmd_decrypt(args):
    """Decrypt a payload file."""
    from .channel import EncryptedPayload

    channel = _load_channel(args.key)
    plaintext = channel.decrypt(EncryptedPayload.from_dict(load_json(args.input)))
    if args.output:
        Path(args.output).write_bytes(plaintext)
        print(f"Plaintext saved to: {args.output}")
    else:
        sys.stdout.write(plaintext.decode("utf-8", "replace"))
    return 0


def cmd_hash(args):
    """SHA-256 of a file, for anchoring as a KYC hash."""
    from .channel import sha256

    print(f"sha256: {sha256(Path(args.file).read_bytes()).hex()}")
    return 0


def cmd_split(args):
    """Split a secret into custodian shares."""
    from .threshold import ShamirSecretSharing

    if args.hex:
        try:
            secret = bytes.fromhex(args.hex)
        except ValueError:
            raise InvalidConfiguration(f"Secret is not hex: {args.hex!r}")
    else:
        secret = Path(args.file).read_bytes()

    shares = ShamirSecretSharing(args.threshold, args.shares).split(secret)
    for share in shares:
        print(share.encode())
    print(f"\n{args.threshold}-of-{args.shares} shares issued", file=sys.stderr)
    return 0


def cmd_combine(args):
    """Reconstruct a secret from shares."""
    from .threshold import ShamirSecretSharing, ShamirShare

    shares = [ShamirShare.decode(s) for s in args.share]
    total = max(args.threshold, max(s.index for s in shares))
    secret = ShamirSecretSharing(args.threshold, total).reconstruct(shares)
    print(secret.hex())
    return 0


def cmd_apply(args):
    """Apply a JSON scenario of operator requests to a fresh control plane."""
    from .control import ControlPlane
    from .models import (
        BlacklistRequest,
        BurnRequest,
        CollateralRequest,
        InitializeRequest,
        InitializeVaultRequest,
        MintRequest,
        RegisterIssuerRequest,
        WhitelistRequest,
        parse_request,
    )

    scenario = load_json(args.input)
    if not isinstance(scenario, dict) or "initialize" not in scenario:
        raise InvalidConfiguration("Scenario must be an object with an 'initialize' request")

    init = parse_request(InitializeRequest, scenario["initialize"]).to_kwargs()
    authority = init["authority"]
    plane = ControlPlane(**init)

    if scenario.get("vault") is not None:
        vault = parse_request(InitializeVaultRequest, scenario["vault"])
        plane.issuance.initialize_vault(authority, **vault.to_kwargs())
    for item in scenario.get("collateral", []):
        plane.issuance.deposit_collateral(authority, **parse_request(CollateralRequest, item).to_kwargs())
    for item in scenario.get("issuers", []):
        plane.issuance.register_issuer(authority, **parse_request(RegisterIssuerRequest, item).to_kwargs())
    for item in scenario.get("whitelist", []):
        plane.registry.add_to_whitelist(authority, **parse_request(WhitelistRequest, item).to_kwargs())
    for item in scenario.get("blacklist", []):
        plane.registry.add_to_blacklist(authority, **parse_request(BlacklistRequest, item).to_kwargs())

    holders = []
    for item in scenario.get("mints", []):
        request = parse_request(MintRequest, item)
        plane.mint(**request.to_kwargs())
        holders.append(request.recipient)
    for item in scenario.get("burns", []):
        request = parse_request(BurnRequest, item)
        plane.burn(**request.to_kwargs())
        holders.append(request.holder)

    summary = {
        "mint": init["mint"],
        "preset": plane.issuance.config.preset.value,
        "total_supply": plane.issuance.total_supply,
        "balances": {holder: plane.ledger.balance_of(holder) for holder in holders},
    }
    if scenario.get("vault") is not None:
        summary["total_collateral"] = plane.issuance.vault.total_collateral
    print(json.dumps(summary, indent=2))
    return 0


def cmd_demo(args):
    """Run a demonstration of the control plane."""
    from .channel import ConfidentialChannel
    from .control import ControlPlane
    from .gate import TransferDeniedError
    from .threshold import ShamirSecretSharing
    from .util import now_epoch

    print("=" * 60)
    print("Meridian Control Plane Demonstration")
    print("=" * 60)

    authority, issuer, treasury = "authority", "trust-bank", "treasury"
    alice, bob = "alice", "bob"

    plane = ControlPlane(authority, "demo-mint", preset="sss-2", treasury=treasury)
    plane.issuance.initialize_vault(authority, "fiat")
    plane.issuance.deposit_collateral(authority, 1_000_000_000)
    plane.issuance.register_issuer(authority, issuer, "trust-bank", daily_mint_limit=500_000_000)

    officer = ConfidentialChannel()
    customer = ConfidentialChannel()
    evidence = customer.encrypt_string('{"name": "Alice", "doc": "passport"}', officer.public_key)
    kyc_hash = evidence.content_hash()

    expiry = now_epoch() + 365 * 86400
    for wallet in (alice, bob):
        plane.registry.add_to_whitelist(authority, wallet, "standard", "singapore", kyc_hash, 100_000_000, expiry)

    print(f"\nKYC evidence anchored: {kyc_hash.hex()[:32]}...")
    print(f"Officer reads: {officer.decrypt_string(evidence)}")

    supply = plane.mint(issuer, alice, 200_000_000)
    print(f"\nMinted 200,000,000 to {alice}; supply={supply:,}")

    print("\n" + "-" * 60)
    print("Scenario 1: transfers against a 100,000,000 daily limit")
    print("-" * 60)
    plane.transfer(alice, bob, 50_000_000)
    print(f"Transfer 50,000,000: OK (volume={plane.registry.get_whitelist_entry(alice).daily_volume:,})")
    try:
        plane.transfer(alice, bob, 60_000_000)
    except TransferDeniedError as e:
        print(f"Transfer 60,000,000: DENIED {e.decision.reason.value}")

    print("\n" + "-" * 60)
    print("Scenario 2: 2-of-3 secret sharing of [42]")
    print("-" * 60)
    scheme = ShamirSecretSharing(2, 3)
    shares = scheme.split(bytes([42]))
    for pair in ((0, 1), (0, 2), (1, 2)):
        subset = [shares[i] for i in pair]
        print(f"Shares {[s.index for s in subset]} -> {list(scheme.reconstruct(subset))}")

    print("\n" + "-" * 60)
    print("Scenario 3: seizure from a frozen account")
    print("-" * 60)
    plane.issuance.freeze_account(authority, bob)
    seized = plane.seize(authority, bob, treasury, 0, "court order")
    print(f"Seized {seized:,} from {bob} into {treasury}")

    print("\n" + "-" * 60)
    print("Scenario 4: emergency pause by 2-of-3 custodians")
    print("-" * 60)
    custodian_shares = plane.enroll_emergency_pause()
    plane.emergency_pause(custodian_shares[1:])
    print(f"Issuance paused: {plane.issuance.is_paused}")

    print("\n" + "=" * 60)
    print("Demonstration complete.")
    print("=" * 60)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="meridian",
        description="Meridian compliance control plane utilities",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  meridian demo                                   Run demonstration
  meridian keygen -o officer.json
  meridian encrypt -k customer.json -r <officer public key> -i kyc.json -o kyc.enc.json
  meridian decrypt -k officer.json -i kyc.enc.json
  meridian split -t 2 -n 3 --hex 2a
  meridian combine -t 2 1-5b 3-c1
  meridian apply -i scenario.json
        """
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    keygen_parser = subparsers.add_parser("keygen", help="Generate a key pair")
    keygen_parser.add_argument("-o", "--output", help="Output file for the key pair")

    encrypt_parser = subparsers.add_parser("encrypt", help="Encrypt a file for a recipient")
    encrypt_parser.add_argument("-k", "--key", required=True, help="Sender key pair JSON file")
    encrypt_parser.add_argument("-r", "--recipient", required=True, help="Recipient public key (base64)")
    encrypt_parser.add_argument("-i", "--input", required=True, help="Plaintext file")
    encrypt_parser.add_argument("-o", "--output", help="Output file for the payload")

    decrypt_parser = subparsers.add_parser("decrypt", help="Decrypt a payload")
    decrypt_parser.add_argument("-k", "--key", required=True, help="Recipient key pair JSON file")
    decrypt_parser.add_argument("-i", "--input", required=True, help="Payload JSON file")
    decrypt_parser.add_argument("-o", "--output", help="Output file for the plaintext")

    hash_parser = subparsers.add_parser("hash", help="SHA-256 of a file")
    hash_parser.add_argument("-f", "--file", required=True, help="File to hash")

    split_parser = subparsers.add_parser("split", help="Split a secret into shares")
    split_parser.add_argument("-t", "--threshold", type=int, required=True, help="Shares required")
    split_parser.add_argument("-n", "--shares", type=int, required=True, help="Shares issued")
    source = split_parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--hex", help="Secret as hex")
    source.add_argument("-f", "--file", help="File holding the secret")

    combine_parser = subparsers.add_parser("combine", help="Reconstruct a secret from shares")
    combine_parser.add_argument("-t", "--threshold", type=int, required=True, help="Shares required")
    combine_parser.add_argument("share", nargs="+", help="Shares as <index>-<hex>")

    apply_parser = subparsers.add_parser("apply", help="Apply a JSON scenario of requests")
    apply_parser.add_argument("-i", "--input", required=True, help="Scenario JSON file")

    subparsers.add_parser("demo", help="Run demonstration")

    return parser


COMMANDS = {
    "keygen": cmd_keygen,
    "encrypt": cmd_encrypt,
    "decrypt": cmd_decrypt,
    "hash": cmd_hash,
    "split": cmd_split,
    "combine": cmd_combine,
    "apply": cmd_apply,
    "demo": cmd_demo,
}


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    level = "DEBUG" if args.verbose or config.is_debug() else config.LOG_LEVEL
    configure_logging(level=level, json_format=config.LOG_JSON)

    handler = COMMANDS.get(args.command)
    if handler is None:
        parser.print_help()
        return 2

    try:
        return handler(args)
    except MeridianError as e:
        print(json.dumps(e.to_dict(), indent=2, default=str), file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
