import subprocess
from unittest import TestCase
from unittest.mock import MagicMock

from launch.genesis import GenesisExport, GenesisExportError, GenesisExporter


def completed(stdout='', returncode=0, stderr=''):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


class GenesisExporterTest(TestCase):
    def test_exports_state_and_wasm(self):
        runner = MagicMock(side_effect=[completed('0xstate\n'), completed('0xwasm\n')])
        export = GenesisExporter(runner=runner).export('parallelfinance/polkadot-collator:v0.9.16', 'shell')

        self.assertEqual(export, GenesisExport(state='0xstate', wasm='0xwasm'))
        first_cmd = runner.call_args_list[0][0][0]
        self.assertEqual(first_cmd, [
            'docker', 'run', '--rm', 'parallelfinance/polkadot-collator:v0.9.16',
            'export-genesis-state', '--chain', 'shell',
        ])
        self.assertEqual(runner.call_args_list[1][0][0][4], 'export-genesis-wasm')

    def test_cached_per_image_and_chain(self):
        runner = MagicMock(side_effect=[completed('0xa'), completed('0xb'), completed('0xc'), completed('0xd')])
        exporter = GenesisExporter(runner=runner)
        first = exporter.export('image', 'shell')
        self.assertIs(exporter.export('image', 'shell'), first)
        self.assertEqual(runner.call_count, 2)
        exporter.export('image', 'other')
        self.assertEqual(runner.call_count, 4)

    def test_non_zero_exit_is_fatal(self):
        runner = MagicMock(return_value=completed(returncode=125, stderr='Unable to find image'))
        with self.assertRaises(GenesisExportError) as ctx:
            GenesisExporter(runner=runner).export('missing', 'shell')
        self.assertIn('Unable to find image', str(ctx.exception))

    def test_empty_output_is_fatal(self):
        runner = MagicMock(return_value=completed(stdout='  \n'))
        with self.assertRaises(GenesisExportError):
            GenesisExporter(runner=runner).export('image', 'shell')

    def test_docker_not_installed(self):
        runner = MagicMock(side_effect=FileNotFoundError('docker'))
        with self.assertRaises(GenesisExportError):
            GenesisExporter(runner=runner).export('image', 'shell')
