import json
import os
import tempfile
import unittest
from unittest import TestCase, mock

from solders.keypair import Keypair

from squads_multisig.config import (
    LOCAL_TEST_PROGRAM,
    SQUADS_V4_PROGRAM,
    lamports_to_sol,
    load_keypair,
    mask_api_key,
    resolve_cluster,
    sol_to_lamports,
)
from squads_multisig.errors import ConfigError

CLEAN_ENV = {"SOLANA_CLUSTER": "", "SOLANA_RPC_URL": "", "HELIUS_API_KEY": ""}


class TestResolveCluster(TestCase):
    @mock.patch.dict(os.environ, CLEAN_ENV)
    def test_default_is_devnet(self):
        config = resolve_cluster()

        self.assertEqual(config.cluster, "devnet")
        self.assertEqual(str(config.program_id), SQUADS_V4_PROGRAM)
        self.assertEqual(config.endpoint, "https://api.devnet.solana.com")

    @mock.patch.dict(os.environ, {**CLEAN_ENV, "SOLANA_CLUSTER": "localhost"})
    def test_localhost(self):
        config = resolve_cluster()

        self.assertEqual(str(config.program_id), LOCAL_TEST_PROGRAM)
        self.assertEqual(config.endpoint, "http://127.0.0.1:8899")

    @mock.patch.dict(os.environ, {**CLEAN_ENV, "SOLANA_CLUSTER": "mainnet-beta"})
    def test_mainnet(self):
        config = resolve_cluster()

        self.assertEqual(str(config.program_id), SQUADS_V4_PROGRAM)
        self.assertEqual(config.endpoint, "https://api.mainnet-beta.solana.com")

    @mock.patch.dict(os.environ, {**CLEAN_ENV, "SOLANA_CLUSTER": "mainnet-beta", "HELIUS_API_KEY": "secret"})
    def test_helius(self):
        config = resolve_cluster()

        self.assertEqual(config.endpoint, "https://mainnet.helius-rpc.com/?api-key=secret")
        self.assertEqual(mask_api_key(config.endpoint), "https://mainnet.helius-rpc.com/?api-key=***")

    @mock.patch.dict(os.environ, {**CLEAN_ENV, "SOLANA_RPC_URL": "http://my-node:8899"})
    def test_rpc_url_override(self):
        self.assertEqual(resolve_cluster().endpoint, "http://my-node:8899")
        self.assertEqual(resolve_cluster(rpc="http://other:8899").endpoint, "http://other:8899")

    @mock.patch.dict(os.environ, {**CLEAN_ENV, "SOLANA_CLUSTER": "moonnet"})
    def test_unknown_cluster(self):
        with self.assertRaises(ConfigError):
            resolve_cluster()


class TestLoadKeypair(TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.tmpdir.cleanup()

    def _write(self, content) -> str:
        path = os.path.join(self.tmpdir.name, "id.json")
        with open(path, "w") as f:
            f.write(content)
        return path

    def test_load_keypair(self):
        keypair = Keypair()
        path = self._write(json.dumps(list(bytes(keypair))))

        self.assertEqual(load_keypair(path).pubkey(), keypair.pubkey())

    def test_wrong_length(self):
        path = self._write(json.dumps([1, 2, 3]))
        with self.assertRaises(ConfigError):
            load_keypair(path)

    def test_not_json(self):
        path = self._write("not json")
        with self.assertRaises(ConfigError):
            load_keypair(path)

    def test_missing_file(self):
        with self.assertRaises(ConfigError):
            load_keypair(os.path.join(self.tmpdir.name, "missing.json"))


class TestAmounts(TestCase):
    def test_sol_to_lamports(self):
        self.assertEqual(sol_to_lamports(0.1), 100_000_000)
        self.assertEqual(sol_to_lamports(1.5), 1_500_000_000)
        self.assertEqual(lamports_to_sol(250_000_000), 0.25)


if __name__ == "__main__":
    unittest.main()
