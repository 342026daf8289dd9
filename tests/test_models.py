"""
Boundary request model tests.
"""

import unittest

from pydantic import ValidationError

import meridian
from meridian.errors import InvalidConfiguration
from meridian.issuance import CollateralType, IssuerType, StablecoinPreset
from meridian.models import (
    BlacklistRequest,
    BurnRequest,
    CollateralRequest,
    InitializeRequest,
    InitializeVaultRequest,
    MintRequest,
    RegisterIssuerRequest,
    SeizeRequest,
    WhitelistRequest,
    parse_request,
)
from meridian.registry import ComplianceRegistry, Jurisdiction, KycLevel

WALLET = "So11111111111111111111111111111111111111112"
MINT = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
SYSTEM = "11111111111111111111111111111111"
NOW = 1_700_006_400


class TestWhitelistRequest(unittest.TestCase):

    def _request(self, **overrides):
        data = {
            "wallet": WALLET,
            "kyc_level": "Enhanced",
            "jurisdiction": "Hong Kong",
            "kyc_hash": "ab" * 32,
            "daily_limit": 100_000_000,
            "expiry_timestamp": NOW + 86400,
        }
        data.update(overrides)
        return WhitelistRequest(**data)

    def test_maps_enums(self):
        request = self._request()
        self.assertEqual(request.kyc_level, KycLevel.ENHANCED)
        self.assertEqual(request.jurisdiction, Jurisdiction.HONG_KONG)

    def test_feeds_registry(self):
        registry = ComplianceRegistry(SYSTEM, MINT, time_provider=lambda: NOW)
        entry = registry.add_to_whitelist(SYSTEM, **self._request().to_kwargs())
        self.assertEqual(entry.kyc_hash, bytes([0xAB]) * 32)
        self.assertEqual(entry.daily_limit, 100_000_000)

    def test_rejects_bad_input(self):
        bad = [
            {"wallet": "not-a-key"},
            {"wallet": "0OIl" * 10},
            {"kyc_level": "platinum"},
            {"jurisdiction": "atlantis"},
            {"kyc_hash": "ab"},
            {"kyc_hash": ""},
            {"daily_limit": -1},
        ]
        for overrides in bad:
            with self.subTest(**{k: str(v) for k, v in overrides.items()}):
                with self.assertRaises(ValidationError):
                    self._request(**overrides)


class TestIssuanceRequests(unittest.TestCase):

    def test_initialize_defaults(self):
        request = InitializeRequest(authority=SYSTEM, mint=MINT)
        kwargs = request.to_kwargs()
        self.assertEqual(kwargs["preset"], StablecoinPreset.SSS_1)
        self.assertEqual(kwargs["decimals"], 2)
        self.assertIsNone(kwargs["treasury"])

    def test_initialize_preset_spelling(self):
        self.assertEqual(InitializeRequest(authority=SYSTEM, mint=MINT, preset="SSS2").preset, StablecoinPreset.SSS_2)
        with self.assertRaises(ValidationError):
            InitializeRequest(authority=SYSTEM, mint=MINT, decimals=256)

    def test_register_issuer(self):
        request = RegisterIssuerRequest(authority=WALLET, issuer_type="API partner", daily_mint_limit=10)
        self.assertEqual(request.issuer_type, IssuerType.API_PARTNER)

    def test_mint_reference_zero_filled(self):
        kwargs = MintRequest(issuer=SYSTEM, recipient=WALLET, amount=5).to_kwargs()
        self.assertEqual(kwargs["reference"], bytes(32))
        with self.assertRaises(ValidationError):
            MintRequest(issuer=SYSTEM, recipient=WALLET, amount=5, reference="abcd")
        with self.assertRaises(ValidationError):
            MintRequest(issuer=SYSTEM, recipient=WALLET, amount=-5)

    def test_burn_redemption_info(self):
        kwargs = BurnRequest(issuer=SYSTEM, holder=WALLET, amount=1, redemption_info="0x" + "11" * 64).to_kwargs()
        self.assertEqual(kwargs["redemption_info"], bytes([0x11]) * 64)
        with self.assertRaises(ValidationError):
            BurnRequest(issuer=SYSTEM, holder=WALLET, amount=1, redemption_info="11" * 32)

    def test_collateral_proof(self):
        kwargs = CollateralRequest(amount=10).to_kwargs()
        self.assertEqual(kwargs["proof_hash"], bytes(32))

    def test_seize_reason_length(self):
        self.assertEqual(SeizeRequest(authority=SYSTEM, source=WALLET, treasury=MINT).amount, 0)
        with self.assertRaises(ValidationError):
            SeizeRequest(authority=SYSTEM, source=WALLET, treasury=MINT, reason="x" * 33)

    def test_collateral_type_from_vault_request(self):
        self.assertEqual(InitializeVaultRequest(collateral_type="government bond").collateral_type,
                         CollateralType.GOVERNMENT_BOND)


class TestParseRequest(unittest.TestCase):

    def test_valid_data_returns_model(self):
        request = parse_request(BlacklistRequest, {"wallet": WALLET, "reason": "sanctions"})
        self.assertEqual(request.to_kwargs(), {"wallet": WALLET, "reason": "sanctions"})

    def test_failures_become_invalid_configuration(self):
        with self.assertRaises(InvalidConfiguration) as ctx:
            parse_request(MintRequest, {"issuer": SYSTEM, "recipient": "bad", "amount": -1})
        details = ctx.exception.details
        self.assertEqual(details["request"], "MintRequest")
        self.assertEqual(len(details["errors"]), 2)
        self.assertTrue(details["errors"][0].startswith("recipient: "))

    def test_non_object_input(self):
        with self.assertRaises(InvalidConfiguration):
            parse_request(CollateralRequest, ["not", "an", "object"])

    def test_exported_from_package(self):
        self.assertIs(meridian.parse_request, parse_request)
        self.assertIs(meridian.MintRequest, MintRequest)


if __name__ == "__main__":
    unittest.main()
