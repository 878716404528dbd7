#!/usr/bin/env python3
"""Script to simulate a conversation with a demo tenant's agent."""

import argparse
import asyncio
import json
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from broker_agent.core.exceptions import AgentError
from broker_agent.core.logging import configure_logging
from broker_agent.models import TurnResult
from broker_agent.services.agent.session import AgentSession
from broker_agent.storage.memory import InMemoryTenantStore

DEMO_SCENARIOS = {
    "investor": (
        "Hola, soy inversor. Busco oportunidades de compra en Puerto Madero o Recoleta. "
        "Presupuesto hasta 900k USD. ¿Qué tenés?"
    ),
    "student": (
        "Hola! Busco alquiler de un monoambiente cerca de Palermo o Belgrano. "
        "Algo económico para estudiante."
    ),
    "family": (
        "Estamos buscando una casa familiar con mínimo 3 habitaciones y jardín. "
        "Zona norte o barrios tranquilos."
    ),
    "difficult": (
        "Nadie me contesta. Necesito ver una propiedad YA MISMO o cambio de inmobiliaria."
    ),
}


def print_turn(result: TurnResult, show_log: bool) -> None:
    """Print a turn result."""
    print(f"\nAgent: {result.text}")

    for prop in result.properties or []:
        print(
            f"  #{prop.id} {prop.title} | {prop.location} | "
            f"{prop.currency} {prop.price:,.0f} | {prop.bedrooms} bd | {prop.operation.value}"
        )

    if result.scheduling_link:
        print(f"  Scheduling link sent: {result.scheduling_link}")

    if show_log:
        for entry in result.log:
            payload = json.dumps(entry.payload, ensure_ascii=False, default=str)
            print(f"  [{entry.kind.value}] {entry.label} {payload}")


async def run(tenant_id: str, messages: list[str], show_log: bool) -> int:
    """Run a simulated conversation."""
    store = InMemoryTenantStore()
    await store.seed_demo_tenants()

    tenant = await store.get_tenant(tenant_id)
    if tenant is None:
        ids = ", ".join(t.id for t in await store.list_tenants())
        print(f"Unknown tenant: {tenant_id} (available: {ids})")
        return 1

    session = AgentSession(tenant)
    try:
        started = await session.start()
    except AgentError as e:
        print(f"Error: {e.message}")
        return 1

    for message in started.display:
        print(f"[{message.sender.value}] {message.text}")
    print(f"System ready. Agent {tenant.agent.name} is active.")

    interactive = not messages
    while True:
        if interactive:
            try:
                text = input("\nYou: ").strip()
            except EOFError:
                break
            if not text or text.lower() in {"exit", "quit"}:
                break
        else:
            if not messages:
                break
            text = messages.pop(0)
            print(f"\nYou: {text}")

        try:
            result = await session.send_message(text)
        except AgentError as e:
            print(f"\nError: {e.message}")
            if show_log:
                for entry in e.log:
                    print(f"  [{entry.kind.value}] {entry.label} {entry.payload}")
            continue

        print_turn(result, show_log)

    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Simulate a chat with a demo agent")
    parser.add_argument("--tenant", default="t_01", help="Demo tenant id")
    parser.add_argument(
        "--scenario",
        choices=sorted(DEMO_SCENARIOS),
        help="Send a canned demo message instead of chatting interactively",
    )
    parser.add_argument("--message", action="append", default=[], help="Message to send (repeatable)")
    parser.add_argument("--debug", action="store_true", help="Print the decision log of each turn")

    args = parser.parse_args()

    configure_logging("DEBUG" if args.debug else "WARNING", log_format="text")

    messages = list(args.message)
    if args.scenario:
        messages.insert(0, DEMO_SCENARIOS[args.scenario])

    sys.exit(asyncio.run(run(args.tenant, messages, args.debug)))


if __name__ == "__main__":
    main()
