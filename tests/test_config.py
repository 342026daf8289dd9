"""
Configuration and logging tests.
"""

import io
import json
import logging
import os
import tempfile
import unittest
from unittest import mock

from meridian import config
from meridian.errors import InvalidConfiguration
from meridian.logging_config import (
    AuditLogger,
    StructuredFormatter,
    configure_logging,
    get_operation_id,
    set_operation_id,
)
from meridian.registry import Jurisdiction


class TestPolicyLoading(unittest.TestCase):

    def setUp(self):
        config.invalidate_config_cache()
        self.tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp.name, "policy.json")

    def tearDown(self):
        config.invalidate_config_cache()
        self.tmp.cleanup()

    def _write(self, data):
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f)

    def test_missing_file_is_empty_policy(self):
        self.assertEqual(config.load_policy(os.path.join(self.tmp.name, "absent.json")), {})
        policy = config.jurisdiction_policy(os.path.join(self.tmp.name, "absent.json"))
        self.assertEqual(policy.restricted, frozenset())
        self.assertFalse(policy.screen_at_enrollment)

    def test_file_overrides_environment(self):
        self._write({"restricted_jurisdictions": ["usa", "HK"], "screen_at_enrollment": True})
        with mock.patch.object(config, "RESTRICTED_JURISDICTIONS", "japan"):
            policy = config.jurisdiction_policy(self.path)
        self.assertEqual(policy.restricted, frozenset({Jurisdiction.USA, Jurisdiction.HONG_KONG}))
        self.assertTrue(policy.screen_at_enrollment)

    def test_environment_used_without_file_key(self):
        self._write({"screen_at_enrollment": False})
        with mock.patch.object(config, "RESTRICTED_JURISDICTIONS", "usa, eu"):
            policy = config.jurisdiction_policy(self.path)
        self.assertEqual(policy.restricted, frozenset({Jurisdiction.USA, Jurisdiction.EU}))

    def test_unknown_jurisdiction_in_policy(self):
        self._write({"restricted_jurisdictions": ["atlantis"]})
        with self.assertRaises(InvalidConfiguration):
            config.jurisdiction_policy(self.path)

    def test_cache_until_invalidated(self):
        self._write({"restricted_jurisdictions": ["usa"]})
        first = config.load_policy(self.path)
        self._write({"restricted_jurisdictions": []})
        self.assertEqual(config.load_policy(self.path), first)
        config.invalidate_config_cache()
        self.assertEqual(config.load_policy(self.path), {"restricted_jurisdictions": []})

    def test_control_plane_options(self):
        with mock.patch.object(config, "LARGE_MINT_THRESHOLD", 7), \
                mock.patch.object(config, "DEDUPLICATE_REFERENCES", True):
            options = config.control_plane_options(os.path.join(self.tmp.name, "absent.json"))
        self.assertEqual(options["large_mint_threshold"], 7)
        self.assertTrue(options["deduplicate_references"])
        self.assertIn("jurisdiction_policy", options)


class ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


class TestStructuredLogging(unittest.TestCase):

    def setUp(self):
        self.handler = ListHandler()
        self.logger = logging.getLogger("meridian.audit.test")
        self.logger.addHandler(self.handler)
        self.logger.setLevel(logging.DEBUG)

    def tearDown(self):
        self.logger.removeHandler(self.handler)
        set_operation_id("")

    def test_audit_event_carries_operation_id(self):
        op = set_operation_id()
        self.assertEqual(get_operation_id(), op)
        AuditLogger("meridian.audit.test").pause_changed(True, "ops", threshold_approved=True)

        record = self.handler.records[-1]
        line = json.loads(StructuredFormatter().format(record))
        self.assertEqual(line["operation_id"], op)
        self.assertEqual(line["event_type"], "ISSUANCE_PAUSED")
        self.assertTrue(line["threshold_approved"])

    def test_configure_logging_scopes_to_package(self):
        stream = io.StringIO()
        package_logger = configure_logging(level="info", stream=stream)
        self.addCleanup(lambda: [package_logger.removeHandler(h) for h in package_logger.handlers[:]])
        root_handlers = list(logging.getLogger().handlers)

        configure_logging(level="INFO", stream=stream)
        self.assertEqual(len(package_logger.handlers), 1)
        self.assertEqual(logging.getLogger().handlers, root_handlers)

        logging.getLogger("meridian.registry").info("whitelist loaded")
        line = json.loads(stream.getvalue().strip().splitlines()[-1])
        self.assertEqual(line["logger"], "meridian.registry")
        self.assertEqual(line["message"], "whitelist loaded")

    def test_plain_records_format_as_json(self):
        record = logging.LogRecord("meridian", logging.INFO, __file__, 1, "hello %s", ("world",), None)
        line = json.loads(StructuredFormatter().format(record))
        self.assertEqual(line["message"], "hello world")
        self.assertEqual(line["level"], "INFO")


if __name__ == "__main__":
    unittest.main()
