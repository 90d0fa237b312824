"""Entry point when the package is executed as a module."""

import asyncio
import sys
import uuid
from collections.abc import Callable
from pathlib import Path

import click

from .platform.clients.runs import RunRequest, RunState, RunStreamClient
from .platform.observability import configure_logging, correlation_id_ctx, metrics
from .platform.settings import Settings


class ProgressPrinter:
    """Prints progress events not printed yet for each published snapshot."""

    def __init__(self) -> None:
        self._printed = 0

    def __call__(self, state: RunState) -> None:
        for event in state.progress[self._printed :]:
            prefix = f"[{event.elapsed / 1000:.1f}s] " if event.elapsed is not None else ""
            click.echo(f"{prefix}{event.message}", err=True)
        self._printed = len(state.progress)


def _parse_inputs(values: tuple[str, ...]) -> dict[str, str]:
    inputs = {}
    for value in values:
        key, sep, val = value.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got {value!r}", param_hint="--input")
        inputs[key] = val
    return inputs


async def _execute(
    settings: Settings,
    build_request: Callable[[RunStreamClient], RunRequest],
) -> RunState:
    correlation_id_ctx.set(str(uuid.uuid4()))
    service = settings.run_service
    async with RunStreamClient(
        service.base_url,
        config=service.client_config(),
        auth=service.auth_config(),
    ) as client:
        return await client.run(build_request(client), on_state=ProgressPrinter())


def _write_metrics(path: Path) -> None:
    body, _ = metrics()
    path.write_bytes(body)


def _report(state: RunState) -> None:
    if state.result is not None and state.result.output:
        click.echo(state.result.output)
    if not state.succeeded:
        click.echo(f"Run {state.phase.value}: {state.error or 'no terminal event'}", err=True)
        sys.exit(1)


@click.group()
@click.option(
    "--metrics-file",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    default=None,
    help="Write run metrics in Prometheus text format to this file on exit.",
)
@click.pass_context
def main(ctx, metrics_file):
    settings = Settings()
    configure_logging(settings.logging.level, json_output=settings.logging.json_output)
    ctx.obj = settings
    if metrics_file is not None:
        ctx.call_on_close(lambda: _write_metrics(metrics_file))


@main.command()
@click.argument("skill_id")
@click.option("--input", "-i", "inputs", multiple=True, help="Skill input as KEY=VALUE.")
@click.option("--instructions", default=None, help="Extra instructions for the run.")
@click.pass_obj
def skill(settings, skill_id, inputs, instructions):
    """Run a skill and stream its progress."""
    parsed = _parse_inputs(inputs)
    _report(
        asyncio.run(
            _execute(settings, lambda client: client.skill_request(skill_id, parsed, instructions))
        )
    )


@main.command()
@click.argument("message")
@click.pass_obj
def chat(settings, message):
    """Send a freeform chat message and stream the run."""
    _report(asyncio.run(_execute(settings, lambda client: client.chat_request(message))))


if __name__ == "__main__":
    sys.exit(main())
