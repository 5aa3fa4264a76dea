from helper.commands.base import BaseCommand
from launch.orchestrator import Launcher
from launch.schema import load_network_config


class Command(BaseCommand):
    help = 'Run chain initialization: relay-chain registration and crowdloans, then the parachain genesis batch.'

    def handle(self, *args, **options):
        config = load_network_config(options['network'])
        launcher = Launcher(
            self.settings,
            config,
            client_factory=self.client_factory,
            dry_run=options['dry_run'],
            emit=self.write,
        )
        launcher.run()
