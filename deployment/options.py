import click

from deployment.constants import ARTIFACTS_DIR, FORK_TOP_UP_ENVVAR
from deployment.types import ChainIdParam, ChecksumAddress

params_file_option = click.option(
    "--params-file",
    "-f",
    help="Sponsorship parameters YAML file.",
    type=click.Path(exists=True, dir_okay=False),
    required=True,
)

top_up_option = click.option(
    "--top-up/--no-top-up",
    help=(
        "Generate missing stake tokens for the deployer (local fork only). "
        f"Defaults to the {FORK_TOP_UP_ENVVAR} environment variable."
    ),
    default=None,
)

target_option = click.option(
    "--target",
    "-t",
    "targets",
    help="Only sponsor series for this target (repeatable).",
    multiple=True,
)

autosign_option = click.option(
    "--autosign",
    help="Sign transactions without asking for confirmation.",
    is_flag=True,
    default=False,
)

registry_option = click.option(
    "--registry",
    "-r",
    help="Adapter registry JSON file.",
    type=click.Path(dir_okay=False),
    default=str(ARTIFACTS_DIR / "adapters.json"),
    show_default=True,
)

chain_id_option = click.option(
    "--chain-id",
    "-c",
    help="Chain id or name.",
    type=ChainIdParam(),
    required=True,
)

adapter_address_option = click.option(
    "--address",
    "-a",
    help="Address of the deployed adapter.",
    type=ChecksumAddress(),
    required=True,
)
