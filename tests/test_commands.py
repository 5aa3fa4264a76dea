import io
import json
import os
from unittest import TestCase
from unittest.mock import MagicMock, patch

from blockchain.accounts import decode_account, derive_sub_account, sovereign_relay_of
from blockchain.storage import current_era_key, staking_ledger_key
from helper.commands import COMMANDS, load_command_class
from helper.commands.base import CommandError
from helper.commands.runtime_upgrade import blake2_256
from helper.main import build_parser, main
from tests.fakes import FakeChainClient, make_settings

FIXTURES = os.path.join(os.path.dirname(__file__), 'fixtures')


def run_command(name, argv=(), client_factory=FakeChainClient, settings=None, **client_setup):
    """Run a command against fake chains; return (stdout text, clients)."""
    FakeChainClient.reset()
    stdout = io.StringIO()
    args = build_parser().parse_args([name, *argv])
    command = load_command_class(name)(settings or make_settings(), stdout=stdout, client_factory=client_factory)
    command.handle(**vars(args))
    return stdout.getvalue(), FakeChainClient.instances


def prepared_client(storage=None, constants=None, chain='Heiko'):
    class PreparedClient(FakeChainClient):
        def __init__(self, url, ss58_format=42):
            super().__init__(url, ss58_format)
            self.storage.update(storage or {})
            self.constants.update(constants or {})
            self.chain = chain
    return PreparedClient


class OfflineCommandsTest(TestCase):
    def test_sovereign(self):
        out, _ = run_command('sovereign', ['2085'])
        self.assertEqual(out.strip(), '5Ec4AhNtg8ug9xAezbpQom1Pz4PtM7q9bF12AC4T6Zp1PoCB')

    def test_sovereign_sibling(self):
        out, _ = run_command('sovereign', ['2085', '--sibling'])
        self.assertEqual(out.strip(), '5Eg2fnshks6aHYtoYbmVvQMDEY5C4XtFeteTR9awyHqaFUvV')

    def test_derivative(self):
        out, _ = run_command('derivative', ['5DAAnrj7VHTznn2AWBemMuyBwZWs6FNFjdyVXUeYum3PTXFy', '0'])
        self.assertEqual(out.strip(), '5GLt71tL21RLp3Q5MDcJ2Aubx92HXZmRgxvwubJoRjAda46S')

    def test_derivative_big_endian(self):
        out, _ = run_command('derivative', ['5DAAnrj7VHTznn2AWBemMuyBwZWs6FNFjdyVXUeYum3PTXFy', '1',
                                            '--byte-order', 'big'])
        self.assertEqual(out.strip(), '5DvjGV1yQHL3aoar9M1PBf62GxgAnLcVqDvwgnU59iFGMw5T')

    def test_xcm_units_per_second(self):
        out, _ = run_command('xcm-units-per-second', ['6', '0.5'])
        self.assertEqual(out.strip(), '66666666')

    def test_every_command_registered(self):
        for name in COMMANDS:
            self.assertTrue(load_command_class(name).help, name)


class HrmpCommandsTest(TestCase):
    def test_open_proposes_send_as_sovereign(self):
        client = prepared_client(storage={('Configuration', 'ActiveConfig'): {
            'hrmp_channel_max_capacity': 1000,
            'hrmp_channel_max_message_size': 102400,
        }})
        out, (relay, para) = run_command('hrmp-open', ['2085', '2000', '--dry-run'], client_factory=client)

        init = relay.encoded[0]
        self.assertEqual(init.name, 'Hrmp.hrmp_init_open_channel')
        self.assertEqual(init.params, {
            'recipient': 2000, 'proposed_max_capacity': 1000, 'proposed_max_message_size': 102400,
        })
        proposal = para.encoded[0]
        self.assertEqual(proposal.name, 'GeneralCouncil.propose')
        self.assertEqual(proposal.params['threshold'], 2)
        send = proposal.unwrap()
        self.assertEqual(send.name, 'OrmlXcm.send_as_sovereign')
        transact = send.params['message']['V2'][2]['Transact']
        self.assertEqual(transact['call']['encoded'], '0x' + b'Hrmp.hrmp_init_open_channel'.hex())
        self.assertIn('hex-encoded call: 0x', out)
        self.assertEqual(para.submitted, [])

    def test_open_without_host_configuration(self):
        with self.assertRaises(CommandError):
            run_command('hrmp-open', ['2085', '2000'])

    def test_accept_submits_sudo_send(self):
        out, (relay, para) = run_command('hrmp-accept', ['2000', '2085'])
        self.assertEqual(relay.encoded[0].params, {'sender': 2000})
        call, signer = para.submitted[0]
        self.assertEqual(call.name, 'Sudo.sudo')
        self.assertEqual(call.unwrap().name, 'PolkadotXcm.send')
        deposit = call.unwrap().params['message']['V2'][4]['DepositAsset']
        beneficiary = deposit['beneficiary']['interior']['X1']['AccountId32']['id']
        self.assertEqual(beneficiary, '0x' + decode_account(sovereign_relay_of(2085)).hex())
        self.assertEqual(signer, '5DAAnrj7VHTznn2AWBemMuyBwZWs6FNFjdyVXUeYum3PTXFy')
        self.assertIn('included in block 0xb10c', out)


class ProofCommandsTest(TestCase):
    def test_set_staking_ledger(self):
        ledger = {'stash': 'x', 'total': 10, 'active': 10, 'unlocking': [], 'claimed_rewards': []}
        client = prepared_client(
            storage={
                ('ParachainInfo', 'ParachainId'): 2085,
                ('LiquidStaking', 'ValidationData'): {'relay_parent_number': 99},
                ('Staking', 'Ledger'): ledger,
            },
            constants={('LiquidStaking', 'DerivativeIndex'): 0},
        )
        _, (para, relay) = run_command('set-staking-ledger', client_factory=client)

        call, _ = para.submitted[0]
        self.assertEqual(call.name, 'LiquidStaking.set_staking_ledger')
        self.assertEqual(call.params, {'derivative_index': 0, 'staking_ledger': ledger, 'proof': ['0x01', '0x02']})

    def test_set_staking_ledger_controller_key(self):
        controller = derive_sub_account(sovereign_relay_of(2085), 0)
        client = prepared_client(
            storage={
                ('ParachainInfo', 'ParachainId'): 2085,
                ('LiquidStaking', 'ValidationData'): {'relay_parent_number': 99},
                ('Staking', 'Ledger'): {'total': 1},
            },
            constants={('LiquidStaking', 'DerivativeIndex'): 0},
        )
        with patch.object(client, 'read_proof', autospec=True,
                          return_value={'at': '0x', 'proof': []}) as read_proof:
            run_command('set-staking-ledger', client_factory=client)
        _, keys, block_hash = read_proof.call_args[0]
        self.assertEqual(keys, [staking_ledger_key(controller)])
        self.assertEqual(block_hash, '0xrelay99')

    def test_set_staking_ledger_without_validation_data(self):
        client = prepared_client(
            storage={('ParachainInfo', 'ParachainId'): 2085},
            constants={('LiquidStaking', 'DerivativeIndex'): 0},
        )
        with self.assertRaises(CommandError):
            run_command('set-staking-ledger', client_factory=client)

    def test_set_current_era(self):
        client = prepared_client(storage={
            ('LiquidStaking', 'ValidationData'): {'relay_parent_number': 7},
            ('Staking', 'CurrentEra'): 42,
        })
        with patch.object(client, 'read_proof', autospec=True,
                          return_value={'at': '0x', 'proof': ['0xp']}) as read_proof:
            _, (para, _relay) = run_command('set-current-era', client_factory=client)
        self.assertEqual(read_proof.call_args[0][1], [current_era_key()])
        call, _ = para.submitted[0]
        self.assertEqual(call.params, {'era': 42, 'proof': ['0xp']})

    def test_storage_proof_prints_key_and_proof(self):
        client = prepared_client(storage={('ParachainSystem', 'ValidationData'): {'relay_parent_number': 5}})
        out, _ = run_command('storage-proof', ['--block-at', '0xabc'], client_factory=client)
        self.assertIn(staking_ledger_key('CmNv7yFV13CMM6r9dJYgdi4UTJK7tzFEF17gmK9c3mTc2PG'), out)
        self.assertIn('"relay_parent_number": 5', out)
        self.assertIn('0xrelay5', out)


class GovernanceCommandsTest(TestCase):
    def test_add_market(self):
        _, (para,) = run_command('add-market', [os.path.join(FIXTURES, 'markets.csv'), '--dry-run'])
        proposal = para.encoded[0]
        self.assertEqual(proposal.name, 'GeneralCouncil.propose')
        batch = proposal.unwrap()
        self.assertEqual(batch.name, 'Utility.batch_all')
        self.assertEqual([c.params['asset_id'] for c in batch.params['calls']], [100, 102])

    def test_market_reward(self):
        _, (para,) = run_command('market-reward', [os.path.join(FIXTURES, 'market_rewards.csv')])
        call, _ = para.submitted[0]
        first = call.unwrap().params['calls'][0]
        self.assertEqual(first.name, 'Loans.update_market_reward_speed')
        self.assertEqual(first.params['supply_reward_per_block'], 50000000000)
        self.assertEqual(first.params['borrow_reward_per_block'], 100000000000)

    def test_farming_reward_heiko(self):
        client = prepared_client(storage={('Farming', 'Pools'): {'period_finish': 5}})
        _, (para,) = run_command('farming-reward', [os.path.join(FIXTURES, 'farming_rewards.csv')],
                                 client_factory=client)
        call, _ = para.submitted[0]
        dispatch = call.unwrap().params['calls'][0]
        self.assertEqual(dispatch.params['payer'], {'Id': 'hJFHzsKENPsaqPJT2k6D4VYUKz2eFxxW7AVfG9zvL3Q1R7sFp'})
        self.assertEqual(dispatch.params['reward_asset'], 0)
        self.assertEqual(dispatch.params['amount'], 1500 * 10 ** 12)

    def test_farming_reward_running_period_gets_zero(self):
        client = prepared_client(storage={('Farming', 'Pools'): {'period_finish': 1000}}, chain='Parallel')
        _, (para,) = run_command('farming-reward', [os.path.join(FIXTURES, 'farming_rewards.csv')],
                                 client_factory=client)
        call, _ = para.submitted[0]
        dispatch = call.unwrap().params['calls'][0]
        self.assertEqual(dispatch.params['amount'], 0)
        self.assertEqual(dispatch.params['reward_asset'], 1)
        self.assertEqual(dispatch.params['payer'], {'Id': 'p8B3QXweBQKzu8DhkggwJqFkUVQ53kB1RejtFQ8q3JMSFqqMd'})

    def test_ump_transact(self):
        client = prepared_client(storage={('ParachainInfo', 'ParachainId'): 2085})
        _, (para,) = run_command('ump-transact', ['--dry-run'], client_factory=client)
        send = para.encoded[0].unwrap()
        transact = send.params['message']['V2'][2]['Transact']
        self.assertEqual(transact['origin_type'], 'SovereignAccount')
        self.assertEqual(transact['call']['encoded'], '0x0001081234')


class RuntimeUpgradeTest(TestCase):
    @patch('helper.commands.runtime_upgrade.requests.get')
    def test_proposes_external_majority(self, mock_get):
        code = b'\x00asm runtime'
        mock_get.return_value = MagicMock(content=code)
        _, (para,) = run_command('runtime-upgrade', ['--blake256-hash', blake2_256(code), '--dry-run'])

        url = mock_get.call_args[0][0]
        self.assertEqual(
            url,
            'https://github.com/parallel-finance/parallel/releases/download/v1.8.5/heiko_runtime.compact.compressed.wasm',
        )
        authorize, batch = para.encoded
        self.assertEqual(authorize.params, {'code_hash': blake2_256(code)})
        note, propose = batch.params['calls']
        self.assertEqual(note.name, 'Preimage.note_preimage')
        encoded = '0x' + b'ParachainSystem.authorize_upgrade'.hex()
        self.assertEqual(note.params['bytes'], encoded)
        external = propose.unwrap()
        self.assertEqual(external.name, 'Democracy.external_propose_majority')
        self.assertEqual(external.params['proposal'], {'Legacy': {'hash': blake2_256(bytes.fromhex(encoded[2:]))}})

    @patch('helper.commands.runtime_upgrade.requests.get')
    def test_hash_mismatch(self, mock_get):
        mock_get.return_value = MagicMock(content=b'other code')
        with self.assertRaises(CommandError):
            run_command('runtime-upgrade', ['--blake256-hash', '0x00'])


class MainTest(TestCase):
    def setUp(self):
        env = patch.dict(os.environ, {'RELAY_CHAIN_TYPE': 'local', 'LOG_FILE': ''})
        env.start()
        self.addCleanup(env.stop)

    @patch('sys.stdout', new_callable=io.StringIO)
    def test_success_exit_code(self, stdout):
        self.assertEqual(main(['sovereign', '2085']), 0)
        self.assertIn('5Ec4AhNtg8ug9xAezbpQom1Pz4PtM7q9bF12AC4T6Zp1PoCB', stdout.getvalue())

    def test_validation_error_exit_code(self):
        self.assertEqual(main(['derivative', 'not-an-address', '0']), 1)

    def test_config_error_exit_code(self):
        self.assertEqual(main(['add-market', '/nonexistent.csv']), 1)

    def test_unknown_relay_chain_type(self):
        with patch.dict(os.environ, {'RELAY_CHAIN_TYPE': 'westend'}):
            self.assertEqual(main(['sovereign', '2085']), 1)

    def test_unknown_command(self):
        with self.assertRaises(SystemExit):
            with patch('sys.stderr', new_callable=io.StringIO):
                main(['best-validators'])


ALICE = '5GrwvaEF5zXb26Fz9rcQpDWS57CtERHpNehXCPcNoHGKutQY'
BOB = '5FHneW46xGXgs5mUiveU4sbTyGBzmstUspZC92UhjJM694ty'
CHARLIE = '5FLSigC9HGRKVhB9FiEo4Y3koPsNmBmLJbpXg2mp1hXcS59Y'
DAVE = '5DAAnrj7VHTznn2AWBemMuyBwZWs6FNFjdyVXUeYum3PTXFy'
EVE = '5HHMY7e8UAqR5ZaHGaQnRW5EDR8dP7QpAyjeBu6V7vdXxxbf'


def identity(name):
    return {'judgements': [], 'deposit': 0, 'info': {'display': {'Raw': name}}}


class BestValidatorsTest(TestCase):
    def relay_client(self):
        class RelayClient(FakeChainClient):
            def __init__(self, url, ss58_format=42):
                super().__init__(url, ss58_format)
                self.storage.update({
                    ('Staking', 'ActiveEra'): {'index': 10, 'start': 0},
                    ('Staking', 'MinCommission'): 0,
                })
                self.maps[('Staking', 'Validators', ())] = [
                    (ALICE, {'commission': 0, 'blocked': False}),
                    (BOB, {'commission': 0, 'blocked': False}),
                    (CHARLIE, {'commission': 50000000, 'blocked': False}),
                    (DAVE, {'commission': 0, 'blocked': True}),
                    (EVE, {'commission': 0, 'blocked': False}),
                ]
                self.maps[('Staking', 'ErasStakers', (10,))] = [
                    (ALICE, {'total': 5 * 10 ** 12, 'own': 0, 'others': []}),
                    (BOB, {'total': 9 * 10 ** 12, 'own': 0, 'others': []}),
                    (CHARLIE, {'total': 9 * 10 ** 12, 'own': 0, 'others': []}),
                    (DAVE, {'total': 9 * 10 ** 12, 'own': 0, 'others': []}),
                ]
                self.keyed_storage.update({
                    ('Staking', 'ErasRewardPoints', (9,)): {'total': 60, 'individual': [(ALICE, 40), (BOB, 20)]},
                    ('Staking', 'ErasRewardPoints', (10,)): {'total': 20, 'individual': [(ALICE, 10), (BOB, 10)]},
                    ('Identity', 'IdentityOf', (ALICE,)): identity('alice'),
                    ('Identity', 'SuperOf', (BOB,)): (EVE, {'Raw': 'node-1'}),
                    ('Identity', 'IdentityOf', (EVE,)): (identity('eve'), None),
                    ('Identity', 'IdentityOf', (CHARLIE,)): identity('charlie'),
                    ('Identity', 'IdentityOf', (DAVE,)): identity('dave'),
                })
        return RelayClient

    def test_filters_and_ranks_by_points(self):
        out, _ = run_command('best-validators', ['--eras', '2'], client_factory=self.relay_client())
        self.assertEqual(json.loads(out), [
            {'stashId': ALICE, 'name': 'alice', 'stakes': 5},
            {'stashId': BOB, 'name': 'eve/node-1', 'stakes': 9},
        ])

    def test_stake_breaks_point_ties(self):
        out, _ = run_command('best-validators', ['--eras', '1'], client_factory=self.relay_client())
        self.assertEqual([v['stashId'] for v in json.loads(out)], [BOB, ALICE])

    def test_limit(self):
        out, _ = run_command('best-validators', ['--eras', '2', '--limit', '1'], client_factory=self.relay_client())
        self.assertEqual([v['name'] for v in json.loads(out)], ['alice'])

    def test_without_active_era(self):
        with self.assertRaises(CommandError):
            run_command('best-validators')
