"""ABOUTME: CLI entry point for tierdex commands.
ABOUTME: Provides rank, families, raid and effectiveness commands via Typer."""

import json
from enum import StrEnum
from pathlib import Path

import pydantic
import typer
from rich.console import Console
from rich.table import Table

from tierdex.battle import PerformanceMetricsEngine
from tierdex.config import RankingConfig, load_ranking_config
from tierdex.errors import EmptyPopulationError, InsufficientDataError, ValidationError
from tierdex.evolution import EvolutionFamilyBuilder, all_families, evolution_chain
from tierdex.logs import init_default_logging
from tierdex.ranking import RankingAggregator, RankingResult, tier_statistics
from tierdex.repository import EntityRepository
from tierdex.settings import settings
from tierdex.utils.type_chart import TypeChartScale, TypeEffectivenessResolver

app = typer.Typer(
    name="tierdex",
    help="Battle calculation and tier ranking for Pokemon datasets.",
    no_args_is_help=True,
)

console = Console()


class ViewOption(StrEnum):
    """Ranking views selectable from the command line."""

    OVERALL = "overall"
    TYPE = "type"
    COUNTERS = "counters"
    PVP = "pvp"


def _load_config(config_path: Path | None) -> RankingConfig:
    """Load an explicit config file, the project default if present, or built-in defaults."""
    path = config_path or settings.ranking_config_path
    if config_path is None and not path.exists():
        return RankingConfig()
    try:
        return load_ranking_config(path)
    except (FileNotFoundError, pydantic.ValidationError) as e:
        console.print(f"[red]Error loading config:[/] {e}")
        raise typer.Exit(1) from None


def _load_dataset(dataset: Path, config: RankingConfig) -> EntityRepository:
    try:
        repo = EntityRepository.from_json_file(dataset, config)
    except (FileNotFoundError, ValidationError) as e:
        console.print(f"[red]Error loading dataset:[/] {e}")
        raise typer.Exit(1) from None
    if repo.rejected:
        console.print(f"[yellow]{len(repo.rejected)} records rejected[/]")
    return repo


def _load_league_scores(path: Path | None) -> dict[str, dict[str, float | None]]:
    if path is None:
        console.print("[red]Error:[/] --league-scores is required for the pvp view")
        raise typer.Exit(1)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[red]Error reading league scores:[/] {e}")
        raise typer.Exit(1) from None
    if not isinstance(raw, dict):
        console.print("[red]Error:[/] league scores must be a JSON object keyed by species id")
        raise typer.Exit(1)
    return raw


def _print_ranking(result: RankingResult, top: int) -> None:
    """Render a ranking view as a rich table followed by its tier summary."""
    title = result.view.value if result.key is None else f"{result.view.value}: {result.key}"
    table = Table(title=f"Ranking ({title})")
    table.add_column("Rank", justify="right")
    table.add_column("Name")
    table.add_column("Types")
    table.add_column("Tier")
    table.add_column("Score", justify="right")
    table.add_column("Pct", justify="right")
    table.add_column("Moveset")

    entries = result.entries[:top] if top > 0 else result.entries
    for entry in entries:
        moveset = entry.best_moveset
        moves = f"{moveset.fast_move} / {moveset.charged_move}" if moveset else "-"
        name = f"{entry.name} *" if entry.estimated else entry.name
        table.add_row(
            str(entry.rank),
            name,
            "/".join(entry.types),
            entry.tier,
            f"{entry.score:.2f}",
            str(entry.percentile),
            moves,
        )
    console.print(table)

    stats = tier_statistics(result)
    summary = ", ".join(f"{label}: {count}" for label, count in stats["tiers"].items())
    console.print(f"[green]{stats['total']} ranked[/] ({summary}), mean score {stats['average_score']:.2f}")
    for skip in result.skipped:
        console.print(f"[yellow]Skipped {skip.species_id or '?'}:[/] {skip.reason}")


@app.command()
def rank(
    dataset: Path = typer.Argument(..., help="JSON file with 'pokemon' and 'moves' collections"),
    view: ViewOption = typer.Option(ViewOption.OVERALL, "--view", help="Ranking view"),
    type_name: str | None = typer.Option(None, "--type", "-t", help="Attack type (type) or defend type (counters)"),
    league_scores: Path | None = typer.Option(None, "--league-scores", help="JSON league scores for the pvp view"),
    top: int = typer.Option(25, "--top", "-n", help="Number of entries to show (0 for all)"),
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Ranking config YAML file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Rank a dataset and print the result with tiers."""
    init_default_logging(settings.logging_config_path, verbose)
    config = _load_config(config_path)
    repo = _load_dataset(dataset, config)
    aggregator = RankingAggregator(repo.moves, config)

    if view in (ViewOption.TYPE, ViewOption.COUNTERS) and not type_name:
        console.print(f"[red]Error:[/] --type is required for the {view.value} view")
        raise typer.Exit(1)

    try:
        if view is ViewOption.TYPE:
            result = aggregator.rank_by_type(repo.entities, type_name)
        elif view is ViewOption.COUNTERS:
            result = aggregator.rank_counters(repo.entities, type_name)
        elif view is ViewOption.PVP:
            result = aggregator.rank_pvp(repo.entities, _load_league_scores(league_scores))
        else:
            result = aggregator.rank_overall(repo.entities)
    except (EmptyPopulationError, ValidationError) as e:
        console.print(f"[red]Error:[/] {e}")
        raise typer.Exit(1) from None

    _print_ranking(result, top)


@app.command()
def families(
    dataset: Path = typer.Argument(..., help="JSON file with 'pokemon' and 'moves' collections"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """List evolution families in dex order."""
    init_default_logging(settings.logging_config_path, verbose)
    repo = _load_dataset(dataset, RankingConfig())
    infos = EvolutionFamilyBuilder().build(repo.entities)

    table = Table(title="Evolution families")
    table.add_column("Dex", justify="right")
    table.add_column("Family")
    table.add_column("Chain")
    table.add_column("Members", justify="right")
    for family in all_families(infos):
        chain = evolution_chain(family.members[0], infos)
        table.add_row(
            str(family.lowest_dex_number),
            family.family_id,
            " > ".join(chain) if chain else "-",
            str(len(family.members)),
        )
    console.print(table)


@app.command()
def raid(
    dataset: Path = typer.Argument(..., help="JSON file with 'pokemon' and 'moves' collections"),
    species_id: str = typer.Argument(..., help="Species id to analyse"),
    family: bool = typer.Option(False, "--family", "-f", help="Analyse every member of the species' family"),
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Ranking config YAML file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Show raid performance against every single-type target."""
    init_default_logging(settings.logging_config_path, verbose)
    config = _load_config(config_path)
    repo = _load_dataset(dataset, config)
    entity = repo.get(species_id)
    if entity is None:
        console.print(f"[red]Error:[/] unknown species '{species_id}'")
        raise typer.Exit(1)

    engine = PerformanceMetricsEngine(config)
    if family:
        info = EvolutionFamilyBuilder().build(repo.entities)[entity.species_id]
        analyses = list(engine.family_raid_analysis(info.family, repo.entities, repo.moves).values())
    else:
        try:
            analyses = [engine.raid_analysis(entity, *repo.moves_for(entity))]
        except InsufficientDataError as e:
            console.print(f"[red]Error:[/] {e}")
            raise typer.Exit(1) from None

    table = Table(title="Raid analysis")
    table.add_column("Species")
    table.add_column("Avg DPS", justify="right")
    table.add_column("Avg eDPS", justify="right")
    table.add_column("Best vs")
    table.add_column("Best DPS", justify="right")
    for analysis in analyses:
        name = f"{analysis.species_id} *" if analysis.estimated else analysis.species_id
        table.add_row(
            name,
            f"{analysis.average_dps:.2f}",
            f"{analysis.average_edps:.2f}",
            analysis.best_type,
            f"{analysis.by_type[analysis.best_type].dps:.2f}",
        )
    console.print(table)
    console.print(f"[green]{len(analyses)} analysed[/]")


@app.command()
def effectiveness(
    attack_type: str = typer.Argument(..., help="Attacking type"),
    defender_types: list[str] = typer.Argument(..., help="One or two defending types"),
    scale: TypeChartScale = typer.Option(TypeChartScale.MAINLINE, "--scale", "-s", help="Type chart scale"),
) -> None:
    """Show the multiplier of an attack type against a defender."""
    resolver = TypeEffectivenessResolver(scale)
    try:
        multiplier = resolver.effectiveness(attack_type, defender_types)
    except ValidationError as e:
        console.print(f"[red]Error:[/] {e}")
        raise typer.Exit(1) from None
    console.print(f"{attack_type} -> {'/'.join(defender_types)}: [bold]{multiplier:g}x[/]")


if __name__ == "__main__":
    app()
