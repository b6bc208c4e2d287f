from __future__ import annotations

import argparse
from typing import List, Optional, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from guildsim.application.dtos import GuildSummaryView
from guildsim.application.services.simulation_service import GuildSimulation
from guildsim.bootstrap import create_simulation
from guildsim.domain.models.adventurer import AdventurerStatus
from guildsim.domain.models.legacy import TransitionReason

_CONSOLE = Console()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run a guild simulation and print a report")
    parser.add_argument("--days", type=int, default=30, help="Days to simulate per generation")
    parser.add_argument("--generations", type=int, default=1, help="Generations to play through")
    parser.add_argument("--seed", type=int, default=None, help="World seed (defaults to GUILD_SEED)")
    parser.add_argument(
        "--reason",
        choices=[reason.value for reason in TransitionReason],
        default=TransitionReason.TIME_PASSED.value,
        help="Why each generation hands over to the next",
    )
    parser.add_argument("--quiet", action="store_true", help="Only print the final report")
    return parser


def _autoplay_day(simulation: GuildSimulation) -> List[str]:
    """Hire when there is room, send idle adventurers out, retire whoever is eligible."""

    messages: List[str] = []
    state = simulation.state

    if not state.recruits:
        messages.extend(simulation.refresh_recruits().messages)
    for recruit in sorted(state.recruits, key=lambda row: row.cost):
        if simulation.registry.is_full() or state.gold < recruit.cost + 200:
            break
        messages.extend(simulation.hire(recruit.id).messages)

    for adventurer in list(state.adventurers):
        if adventurer.retirement_eligible and adventurer.status == AdventurerStatus.AVAILABLE:
            messages.extend(simulation.retire(adventurer.id, throw_party=state.gold > 2000).messages)

    for quest in simulation.quests.available_quests():
        squad = simulation.quests.recommended_adventurers(quest)[:3]
        if squad:
            messages.extend(simulation.start_quest(quest.id, [row.id for row in squad]).messages)

    messages.extend(simulation.tick_day().messages)
    return messages


def render_summary(summary: GuildSummaryView, console: Console = _CONSOLE) -> None:
    header = (
        f"Generation {summary.generation} | Day {summary.day} | Gold {summary.gold} | "
        f"Reputation {summary.reputation} | Morale {summary.morale}"
    )
    console.print(Panel.fit(header, title="Guild Ledger", border_style="cyan"))

    roster = Table(title="Roster")
    for column in ("Name", "Class", "Rank", "Level", "Status", "Quests", "Years", "Eligible"):
        roster.add_column(column)
    for row in summary.adventurers:
        roster.add_row(
            row.name,
            row.class_name,
            row.rank,
            str(row.level),
            row.status,
            str(row.quests_completed),
            str(row.years_in_guild),
            "yes" if row.retirement_eligible else "",
        )
    console.print(roster)

    if summary.active_quests:
        quests = Table(title="Active Quests")
        for column in ("Quest", "Party", "Synergy", "Days Left"):
            quests.add_column(column)
        for row in summary.active_quests:
            quests.add_row(row.name, ", ".join(row.adventurer_names), f"{row.synergy:.2f}", f"{row.days_remaining:.1f}")
        console.print(quests)

    if summary.retired:
        retired = Table(title="Retired Members")
        for column in ("Name", "Role", "Reason"):
            retired.add_column(column)
        for row in summary.retired:
            retired.add_row(row.name, row.role or "-", row.reason)
        console.print(retired)

    multipliers = ", ".join(f"{key} x{value:.2f}" for key, value in summary.multipliers.items())
    bonuses = ", ".join(summary.legacy_bonuses) or "none"
    console.print(f"[bold]Legacy multipliers:[/bold] {multipliers}")
    console.print(f"[bold]Legacy bonuses:[/bold] {bonuses} | chronicles: {summary.chronicle_count}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    simulation = create_simulation(seed=args.seed)

    for generation in range(max(1, args.generations)):
        for _ in range(max(0, args.days)):
            for message in _autoplay_day(simulation):
                if not args.quiet:
                    _CONSOLE.print(message)
        if generation < args.generations - 1:
            render_summary(simulation.summary())
            result = simulation.advance_generation(args.reason)
            _CONSOLE.print(Panel("\n".join(result.messages), title="A New Generation", border_style="magenta"))

    render_summary(simulation.summary())
    return 0
