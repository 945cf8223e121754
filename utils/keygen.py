"""
Generate the RS256 key pair the API signs access tokens with.

    task-tracker-keygen --private keys/private.pem --public keys/public.pem
"""
from __future__ import annotations

import logging
import os

import click

from utils.security import SigningKeys

logger = logging.getLogger(__name__)


def write_key_pair(private_path: str, public_path: str, key_size: int = 2048, overwrite: bool = False) -> SigningKeys:
    for path in (private_path, public_path):
        if os.path.exists(path) and not overwrite:
            raise FileExistsError(f"{path} already exists (use --force to replace it)")

    keys = SigningKeys.generate(key_size=key_size)
    for path, data, mode in ((private_path, keys.private_pem, 0o600), (public_path, keys.public_pem, 0o644)):
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(path, "wb") as fh:
            fh.write(data)
        os.chmod(path, mode)
    logger.info("wrote key pair to %s and %s", private_path, public_path)
    return keys


@click.command()
@click.option("--private", "private_path", envvar="JWT_PRIVATE_KEY_PATH", default="keys/private.pem", show_default=True)
@click.option("--public", "public_path", envvar="JWT_PUBLIC_KEY_PATH", default="keys/public.pem", show_default=True)
@click.option("--bits", "key_size", type=click.IntRange(min=2048), default=2048, show_default=True)
@click.option("--force", is_flag=True, help="Overwrite existing files.")
def main(private_path: str, public_path: str, key_size: int, force: bool):
    """Generate the RS256 key pair the API signs access tokens with."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    try:
        write_key_pair(private_path, public_path, key_size=key_size, overwrite=force)
    except FileExistsError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"wrote {private_path} and {public_path}")


if __name__ == "__main__":
    main()
