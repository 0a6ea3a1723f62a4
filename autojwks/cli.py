"""Command line interface for rotating and inspecting signing keys."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError

from autojwks.config import load_config
from autojwks.contracts import RotationRequest
from autojwks.errors import ExportError, RotationError
from autojwks.handler import run_rotation
from autojwks.persistence import InMemoryRotationRepository, get_repository
from autojwks.providers import get_providers
from autojwks.stages import public_key_to_jwk

app = typer.Typer(help="CLI for rotating JWKS signing keys")

history_app = typer.Typer(
    help=(
        "Commands for inspecting past rotations. History is kept in memory for "
        "the current process unless AUTOJWKS_DATABASE_URL or database_url is set, "
        "e.g. sqlite://rotations.db."
    )
)

app.add_typer(history_app, name="history")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v")) -> None:
    """autojwks CLI entry point."""
    if verbose:
        logging.basicConfig(level=logging.INFO)


@app.command("rotate")
def rotate(
    key_alias: str = typer.Option(..., help="Alias recorded on the new key"),
    can_sign_role_arn: str = typer.Option(..., help="Principal granted signing"),
    key_management_role_arn: str = typer.Option(..., help="Key administrator"),
    bucket: str = typer.Option(..., help="Container holding jwks.json"),
    distribution_id: str = typer.Option(..., help="Edge cache distribution id"),
    provider: Optional[str] = typer.Option(None, help="aws or inmemory"),
) -> None:
    """
    Create a new signing key and publish it to the key set.

    Runs provision, export, publish and invalidate in order. Grant and
    invalidation failures are printed as warnings; any other failure exits
    with code 1 and leaves the remaining stages unrun.

    Example:
        autojwks rotate --key-alias tokens --can-sign-role-arn arn:aws:iam::1:role/signer \\
            --key-management-role-arn arn:aws:iam::1:role/admin \\
            --bucket public-keys --distribution-id E123
    """
    try:
        request = RotationRequest(
            key_alias=key_alias,
            can_sign_role_arn=can_sign_role_arn,
            key_management_role_arn=key_management_role_arn,
            public_keys_bucket_name=bucket,
            cloudfront_distribution_id=distribution_id,
        )
    except ValidationError as exc:
        typer.secho(f"Invalid rotation request: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    config = load_config()
    providers = get_providers(provider, config=config)
    try:
        result = asyncio.run(run_rotation(request, providers=providers, config=config))
    except RotationError as exc:
        typer.secho(f"Rotation failed at {exc.stage}: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    typer.echo(f"Rotation {result.rotation_id}: published {result.key.key_id}")
    typer.echo(f"Backup: {result.backup_name}")
    typer.echo(f"Keys: {result.key_count_before} -> {result.key_count_after}")
    for warning in result.warnings:
        typer.secho(f"Warning ({warning.stage}): {warning.message}", fg=typer.colors.YELLOW)


@app.command("jwk")
def jwk(public_key_file: Path, kid: Optional[str] = None) -> None:
    """Print the JWK for a DER or PEM encoded EC P-256 public key file."""
    if not public_key_file.exists():
        typer.secho("Specified path does not exist", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    try:
        entry = public_key_to_jwk(public_key_file.read_bytes(), kid=kid or public_key_file.stem)
    except ExportError as exc:
        typer.secho(str(exc), fg=typer.colors.RED)
        raise typer.Exit(code=1)
    typer.echo(json.dumps(entry.to_dict(), indent=2))


@history_app.command("list")
def history_list() -> None:
    """List recorded rotations with their status and published kid."""
    repo = get_repository()
    rotations = asyncio.run(repo.list_rotations())
    if not rotations:
        typer.echo("No rotations found")
        if isinstance(repo, InMemoryRotationRepository):
            typer.echo(
                "History is not persisted between runs; "
                "set AUTOJWKS_DATABASE_URL=sqlite://rotations.db to keep it."
            )
        return
    for rotation in rotations:
        typer.echo(f"{rotation.rotation_id}\t{rotation.status}\t{rotation.kid or '-'}")


@history_app.command("show")
def history_show(rotation_id: str) -> None:
    """Show one rotation and the outcome of each of its stages."""
    repo = get_repository()
    rotation = asyncio.run(repo.get_rotation(rotation_id))
    if rotation is None:
        typer.echo("Rotation not found")
        raise typer.Exit(code=1)
    typer.echo(f"Rotation {rotation.rotation_id}: {rotation.status}")
    if rotation.kid:
        typer.echo(f"Key: {rotation.kid}")
    if rotation.backup_name:
        typer.echo(f"Backup: {rotation.backup_name}")
    for step in rotation.steps:
        typer.echo(
            f"- {step.step_name}: {step.status}"
            + (
                f" ({step.started_at} -> {step.completed_at})"
                if step.started_at or step.completed_at
                else ""
            )
        )
    for warning in rotation.warnings:
        typer.echo(f"! {warning.get('stage')}: {warning.get('message')}")


if __name__ == "__main__":
    app()
