# src/forge_k8s/cli/main.py
"""
This module is the main entry point for the forge-k8s CLI.

Node coordinates are given once on the top-level command, e.g.
`forge-k8s --sts aptos-node-0-validator --port-forward health`.
"""

import logging
import time
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table
from typing_extensions import Annotated

from ..core.config import config
from ..node.discovery import discover_nodes, get_stateful_set_replicas
from .utils import NodeOptions, build_node, run_or_exit

# --- Setup Logger ---
logging.basicConfig(
    level=config.LOG_LEVEL.upper(),
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


app = typer.Typer(
    name="forge-k8s",
    help="Control blockchain nodes running in Kubernetes from forge tests.",
    add_completion=False,
)


def version_callback(value: bool):
    if value:
        from .. import __version__

        typer.echo(f"forge-k8s version: {__version__}")
        raise typer.Exit()


@app.command()
def version():
    """
    Show the version of forge-k8s.
    """
    from .. import __version__

    typer.echo(f"forge-k8s version: {__version__}")


@app.callback()
def main(
    ctx: typer.Context,
    sts: Annotated[Optional[str], typer.Option("--sts", help="Stateful set running the node.")] = None,
    service: Annotated[
        Optional[str], typer.Option("--service", help="REST API service name (defaults to --sts).")
    ] = None,
    namespace: Annotated[
        Optional[str], typer.Option("--namespace", "-n", help="Namespace (defaults to FORGE_NAMESPACE).")
    ] = None,
    name: Annotated[Optional[str], typer.Option("--name", help="Label used in logs.")] = None,
    port: Annotated[Optional[int], typer.Option("--port", help="REST API port (local when forwarding).")] = None,
    peer_id: Annotated[Optional[str], typer.Option("--peer-id", help="Hex peer id (random if omitted).")] = None,
    haproxy: Annotated[bool, typer.Option("--haproxy/--no-haproxy", help="HAProxy fronts the node.")] = False,
    port_forward: Annotated[
        bool, typer.Option("--port-forward/--no-port-forward", help="Reach the node through kubectl port-forward.")
    ] = False,
    version: Annotated[
        Optional[bool],
        typer.Option("--version", callback=version_callback, is_eager=True, help="Show the version and exit."),
    ] = None,
):
    """
    forge-k8s CLI main entry point.
    """
    ctx.obj = NodeOptions(
        namespace=namespace or config.FORGE_NAMESPACE,
        sts=sts,
        service=service,
        name=name,
        port=port,
        peer_id=peer_id,
        haproxy=haproxy,
        port_forward=port_forward,
    )


@app.command()
def endpoints(ctx: typer.Context):
    """
    Print the REST and inspection endpoints of the node.
    """
    node = build_node(ctx.obj)
    typer.echo(f"rest_api_endpoint: {node.rest_api_endpoint()}")
    typer.echo(f"inspection_service_endpoint: {node.inspection_service_endpoint()}")


@app.command()
def start(ctx: typer.Context):
    """
    Scale the node up and wait until it is healthy.
    """
    node = build_node(ctx.obj)
    if ctx.obj.port_forward:
        run_or_exit(node.spawn_port_forward)
    run_or_exit(node.start)
    typer.secho(f"Node {node.name} is healthy.", fg=typer.colors.GREEN)


@app.command()
def stop(ctx: typer.Context):
    """
    Scale the node down to zero replicas.
    """
    node = build_node(ctx.obj)
    run_or_exit(node.stop)
    typer.echo(f"Node {node.name} stopped.")


@app.command("clear-storage")
def clear_storage(
    ctx: typer.Context,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Do not ask for confirmation.")] = False,
):
    """
    Delete the node's persistent volume claim. The node must be stopped.
    """
    node = build_node(ctx.obj)
    pvc = node.descriptor.pvc_name
    if not yes:
        typer.confirm(f"Delete PVC {pvc}?", abort=True)
    run_or_exit(node.clear_storage)
    typer.echo(f"Deleted PVC {pvc}.")


@app.command()
def health(ctx: typer.Context):
    """
    Probe the node's REST API once.
    """
    node = build_node(ctx.obj)
    if ctx.obj.port_forward:
        run_or_exit(node.spawn_port_forward)
    run_or_exit(node.health_check)
    typer.secho(f"Node {node.name} is healthy.", fg=typer.colors.GREEN)


@app.command("port-forward")
def port_forward(ctx: typer.Context):
    """
    Forward the node's REST API to a local port until interrupted.
    """
    ctx.obj.port_forward = True
    node = build_node(ctx.obj)
    forward = run_or_exit(node.spawn_port_forward)
    typer.echo(f"Forwarding {node.rest_api_endpoint()} (Ctrl-C to stop)")
    try:
        while forward.alive:
            time.sleep(1)
    except KeyboardInterrupt:
        pass
    finally:
        forward.close()


@app.command("expose-metric")
def expose_metric(ctx: typer.Context):
    """
    Forward the node's metrics port and print the local port.
    """
    node = build_node(ctx.obj)
    port = run_or_exit(node.expose_metric)
    typer.echo(port)


@app.command()
def counter(
    ctx: typer.Context,
    counter_name: Annotated[str, typer.Argument(help="Counter to read.")],
    metrics_port: Annotated[
        Optional[int], typer.Option("--metrics-port", help="Local metrics port (forwarded if omitted).")
    ] = None,
):
    """
    Read a single counter from the node's /counters endpoint.
    """
    node = build_node(ctx.obj)
    if metrics_port is None:
        metrics_port = run_or_exit(node.expose_metric)
    value = run_or_exit(node.counter, counter_name, metrics_port)
    typer.echo(value)


@app.command()
def status(ctx: typer.Context):
    """
    Show whether the node's stateful set is scaled up or down.
    """
    node = build_node(ctx.obj)
    replicas = run_or_exit(get_stateful_set_replicas, node.stateful_set_name, node.namespace)
    state = "running" if replicas else "stopped"
    typer.echo(f"{node.stateful_set_name}: {replicas} replica(s), {state}")


@app.command()
def discover(ctx: typer.Context):
    """
    List the validators and full nodes of the namespace.
    """
    opts = ctx.obj
    nodes = run_or_exit(discover_nodes, opts.namespace, "", opts.port_forward, opts.haproxy)

    console = Console()
    if not nodes:
        console.print(f"No nodes found in namespace {opts.namespace}.", style="yellow")
        return

    table = Table(title=f"Nodes in {opts.namespace}", header_style="bold magenta")
    table.add_column("Index", justify="right")
    table.add_column("Stateful Set", style="cyan")
    table.add_column("Role")
    table.add_column("Service", style="cyan")
    table.add_column("REST API", style="green")
    for node in nodes:
        role = "validator" if node.is_validator else "fullnode"
        table.add_row(str(node.index), node.stateful_set_name, role, node.service_name, node.rest_api_endpoint())
    console.print(table)


if __name__ == "__main__":
    app()
