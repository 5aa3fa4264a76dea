import os
from unittest import TestCase
from unittest.mock import patch

from config.settings import RELAY_NETWORKS, load_settings


class LoadSettingsTest(TestCase):
    def test_local_defaults(self):
        with patch.dict(os.environ, {'RELAY_CHAIN_TYPE': 'local'}):
            settings = load_settings()
        local = RELAY_NETWORKS['local']
        self.assertEqual(settings.relay_ws, local.relay_ws)
        self.assertEqual(settings.para_ws, local.para_ws)
        self.assertEqual(settings.xcm_fee, local.xcm_fee)
        self.assertEqual(settings.xcm_weight, local.xcm_weight)

    def test_network_selects_fee_constants(self):
        with patch.dict(os.environ, {'RELAY_CHAIN_TYPE': 'Kusama'}):
            settings = load_settings()
        self.assertEqual(settings.relay_chain_type, 'kusama')
        self.assertEqual(settings.xcm_fee, 10_000_000_000)
        self.assertEqual(settings.xcm_weight, 3_000_000_000)

    def test_environment_overrides(self):
        env = {
            'RELAY_CHAIN_TYPE': 'polkadot',
            'PARA_WS': 'ws://10.0.0.2:9948',
            'XCM_FEE': '123',
            'SS58_FORMAT': '172',
            'BLOCK_WAIT_TIMEOUT': '30',
            'LOG_LEVEL': 'debug',
        }
        with patch.dict(os.environ, env):
            settings = load_settings()
        self.assertEqual(settings.para_ws, 'ws://10.0.0.2:9948')
        self.assertEqual(settings.relay_ws, RELAY_NETWORKS['polkadot'].relay_ws)
        self.assertEqual(settings.xcm_fee, 123)
        self.assertEqual(settings.ss58_format, 172)
        self.assertEqual(settings.block_wait_timeout, 30.0)
        self.assertEqual(settings.log_level, 'DEBUG')

    def test_unknown_relay_chain_type(self):
        with patch.dict(os.environ, {'RELAY_CHAIN_TYPE': 'rococo'}):
            with self.assertRaises(ValueError):
                load_settings()

    def test_with_endpoints(self):
        with patch.dict(os.environ, {'RELAY_CHAIN_TYPE': 'local'}):
            settings = load_settings()
        updated = settings.with_endpoints(para_ws='ws://para:1')
        self.assertEqual(updated.para_ws, 'ws://para:1')
        self.assertEqual(updated.relay_ws, settings.relay_ws)
        self.assertEqual(settings.with_endpoints(), settings)
