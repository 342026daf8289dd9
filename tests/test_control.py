"""
Control plane test suite.

Exercises the operations that span components: committed transfers,
threshold-approved pause and large-value mint approval, and construction
from settings.
"""

import json
import os
import tempfile
import unittest

from meridian.control import ControlPlane
from meridian.errors import AlreadyPaused, CollateralInsufficient, ErrorCode, Paused, Unauthorized
from meridian.gate import TransferDeniedError
from meridian.issuance import Role
from meridian.registry import Jurisdiction

NOW = 1_700_006_400 + 3600
AUTHORITY = "authority"
ISSUER = "trust-bank"
TREASURY = "treasury"
KYC_HASH = b"\x22" * 32


class FakeClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


class ControlTestCase(unittest.TestCase):

    large_mint_threshold = 0

    def setUp(self):
        self.clock = FakeClock(NOW)
        self.plane = ControlPlane(
            AUTHORITY, "mint", preset="sss-2", treasury=TREASURY,
            time_provider=self.clock, large_mint_threshold=self.large_mint_threshold,
        )
        self.plane.issuance.initialize_vault(AUTHORITY, "fiat")
        self.plane.issuance.deposit_collateral(AUTHORITY, 1_000_000_000)
        self.plane.issuance.register_issuer(AUTHORITY, ISSUER, "trust-bank")
        for wallet in ("alice", "bob"):
            self.plane.registry.add_to_whitelist(
                AUTHORITY, wallet, "standard", "singapore", KYC_HASH, 100_000_000, NOW + 86400
            )


class TestTransfers(ControlTestCase):

    def test_transfer_uses_plane_clock(self):
        self.plane.mint(ISSUER, "alice", 200_000_000)
        decision = self.plane.transfer("alice", "bob", 50_000_000)
        self.assertTrue(decision.passed())
        self.assertEqual(decision.evaluated_at, NOW)
        self.assertEqual(self.plane.ledger.balance_of("bob"), 50_000_000)

        with self.assertRaises(TransferDeniedError):
            self.plane.transfer("alice", "bob", 60_000_000)

        self.clock.now = NOW + 86400
        self.assertTrue(self.plane.check_transfer_eligible("alice", 60_000_000).eligible)

    def test_pause_does_not_block_transfers(self):
        self.plane.mint(ISSUER, "alice", 10)
        self.plane.issuance.pause(AUTHORITY)
        self.plane.transfer("alice", "bob", 10)
        self.assertEqual(self.plane.ledger.balance_of("bob"), 10)

    def test_frozen_account_cannot_move_funds_before_seizure(self):
        self.plane.mint(ISSUER, "alice", 100)
        self.plane.issuance.freeze_account(AUTHORITY, "alice")

        with self.assertRaises(TransferDeniedError) as ctx:
            self.plane.transfer("alice", "bob", 100)
        self.assertEqual(ctx.exception.code, ErrorCode.ACCOUNT_FROZEN)
        self.assertEqual(self.plane.ledger.balance_of("alice"), 100)
        self.assertEqual(self.plane.ledger.balance_of("bob"), 0)
        self.assertEqual(self.plane.registry.get_whitelist_entry("alice").daily_volume, 0)

        self.assertEqual(self.plane.seize(AUTHORITY, "alice", TREASURY, 0, "court order"), 100)
        self.assertEqual(self.plane.ledger.balance_of(TREASURY), 100)

    def test_thawed_account_transfers_again(self):
        self.plane.mint(ISSUER, "alice", 100)
        self.plane.issuance.freeze_account(AUTHORITY, "bob")
        with self.assertRaises(TransferDeniedError) as ctx:
            self.plane.transfer("alice", "bob", 10)
        self.assertEqual(ctx.exception.decision.wallet, "bob")

        self.plane.issuance.thaw_account(AUTHORITY, "bob")
        self.plane.transfer("alice", "bob", 10)
        self.assertEqual(self.plane.ledger.balance_of("bob"), 10)

    def test_planes_do_not_share_state(self):
        other = ControlPlane(AUTHORITY, "mint", time_provider=self.clock)
        self.assertFalse(other.check_transfer_eligible("alice", 1).eligible)
        self.assertIsNot(other.ledger, self.plane.ledger)


class TestEmergencyPause(ControlTestCase):

    def test_two_custodians_pause_issuance(self):
        shares = self.plane.enroll_emergency_pause()
        self.plane.emergency_pause([shares[2], shares[0]])
        self.assertTrue(self.plane.issuance.is_paused)
        with self.assertRaises(Paused):
            self.plane.mint(ISSUER, "alice", 1)

    def test_one_custodian_cannot_pause(self):
        shares = self.plane.enroll_emergency_pause()
        with self.assertRaises(Unauthorized):
            self.plane.emergency_pause(shares[:1])
        self.assertFalse(self.plane.issuance.is_paused)

    def test_repeat_pause_reports_already_paused(self):
        shares = self.plane.enroll_emergency_pause()
        self.plane.emergency_pause(shares[:2])
        with self.assertRaises(AlreadyPaused):
            self.plane.emergency_pause(shares[1:])

    def test_not_enrolled(self):
        with self.assertRaises(Unauthorized):
            self.plane.emergency_pause([])

    def test_pauser_can_resume(self):
        shares = self.plane.enroll_emergency_pause()
        self.plane.emergency_pause(shares[:2])
        self.plane.issuance.update_roles(AUTHORITY, {Role.PAUSER: "ops"})
        self.plane.issuance.unpause("ops")
        self.assertFalse(self.plane.issuance.is_paused)


class TestLargeMint(ControlTestCase):

    large_mint_threshold = 100_000_000

    def test_ordinary_mint_below_threshold(self):
        self.assertEqual(self.plane.mint(ISSUER, "alice", 99_999_999), 99_999_999)

    def test_large_mint_needs_approval(self):
        with self.assertRaises(Unauthorized):
            self.plane.mint(ISSUER, "alice", 100_000_000)
        self.assertEqual(self.plane.issuance.total_supply, 0)

    def test_approval_is_single_use(self):
        shares = self.plane.enroll_large_mint()
        supply = self.plane.approve_large_mint(ISSUER, "alice", 300_000_000, None, shares[:2])
        self.assertEqual(supply, 300_000_000)
        with self.assertRaises(Unauthorized):
            self.plane.approve_large_mint(ISSUER, "alice", 300_000_000, None, shares[:2])

    def test_failed_mint_keeps_approval(self):
        shares = self.plane.enroll_large_mint()
        with self.assertRaises(CollateralInsufficient):
            self.plane.approve_large_mint(ISSUER, "alice", 2_000_000_000, None, shares[:2])
        self.plane.approve_large_mint(ISSUER, "alice", 500_000_000, None, shares[1:])
        self.assertEqual(self.plane.issuance.total_supply, 500_000_000)


class TestFromConfig(unittest.TestCase):

    def test_policy_file_restricts_jurisdictions(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "policy.json")
            with open(path, "w", encoding="utf-8") as f:
                json.dump({"restricted_jurisdictions": ["USA"], "screen_at_enrollment": False}, f)

            plane = ControlPlane.from_config(
                AUTHORITY, "mint", policy_path=path, time_provider=FakeClock(NOW), large_mint_threshold=5
            )

        self.assertEqual(plane.large_mint_threshold, 5)
        plane.registry.add_to_whitelist(AUTHORITY, "us-wallet", "basic", "usa", KYC_HASH, 0, NOW + 10)
        decision = plane.check_transfer_eligible("us-wallet", 1)
        self.assertEqual(decision.reason.value, "JURISDICTION_NOT_ALLOWED")
        self.assertFalse(plane.registry.policy.allows(Jurisdiction.USA))


if __name__ == "__main__":
    unittest.main()
