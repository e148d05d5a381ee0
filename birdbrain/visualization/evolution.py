"""
Plots and text reports for evolution runs.

Everything here reads ``GenerationStats`` records (or plain dicts with
the same keys), so a run's ``stats_history`` can be plotted while it is
still going or after it has been dumped to JSON.
"""
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

try:
    import matplotlib
    matplotlib.use('Agg')
    import matplotlib.pyplot as plt
    HAS_MATPLOTLIB = True
except ImportError:
    HAS_MATPLOTLIB = False

import numpy as np

from ..evolution import Agent, GenerationStats

StatsLike = Union[GenerationStats, Dict[str, Any]]

_FIELDS = (
    'generation', 'best_fitness', 'avg_fitness', 'min_fitness', 'fitness_std',
    'num_elite', 'num_offspring', 'num_fresh', 'num_mutated_nodes',
)


def _columns(stats_history: Sequence[StatsLike]) -> Dict[str, np.ndarray]:
    """Turn a stats history into one numpy column per field."""
    rows = [asdict(s) if is_dataclass(s) else dict(s) for s in stats_history]
    columns = {name: np.array([row.get(name, 0) for row in rows], dtype=float) for name in _FIELDS}
    if rows and not any('generation' in row for row in rows):
        columns['generation'] = np.arange(len(rows), dtype=float)
    return columns


def _save_or_close(fig, save_path: Optional[str]) -> Optional[str]:
    fig.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight')
    plt.close(fig)
    return save_path or None


def plot_fitness_over_generations(
    stats_history: Sequence[StatsLike],
    save_path: Optional[str] = None,
    show_range: bool = True,
    figsize: Tuple[int, int] = (12, 6),
) -> Optional[str]:
    """
    Plot best and mean fitness per generation.

    The mean is drawn with a one-standard-deviation band; with
    ``show_range`` the min-to-best envelope is shaded as well.

    Returns:
        ``save_path`` when given, otherwise None. None as well for an
        empty history.
    """
    if not HAS_MATPLOTLIB:
        raise ImportError("matplotlib required for plotting")
    if not stats_history:
        return None

    cols = _columns(stats_history)
    gens = cols['generation']

    fig, ax = plt.subplots(figsize=figsize)
    if show_range:
        ax.fill_between(gens, cols['min_fitness'], cols['best_fitness'],
                        color='lightgray', alpha=0.5, label='min to best')
    ax.fill_between(gens, cols['avg_fitness'] - cols['fitness_std'],
                    cols['avg_fitness'] + cols['fitness_std'],
                    color='tab:blue', alpha=0.2, label='mean ± std')
    ax.plot(gens, cols['avg_fitness'], color='tab:blue', linewidth=1.5, label='mean')
    ax.plot(gens, cols['best_fitness'], color='tab:green', linewidth=2, label='best')

    ax.set_xlabel('Generation')
    ax.set_ylabel('Fitness (seconds flown forward)')
    ax.set_title('Flock fitness by generation')
    ax.legend(loc='upper left')
    ax.grid(True, alpha=0.3)

    return _save_or_close(fig, save_path)


def plot_breeding_split(
    stats_history: Sequence[StatsLike],
    save_path: Optional[str] = None,
    figsize: Tuple[int, int] = (10, 6),
) -> Optional[str]:
    """
    Stacked bars of elite, offspring and fresh counts per generation,
    with the number of mutated nodes on a second axis.
    """
    if not HAS_MATPLOTLIB:
        raise ImportError("matplotlib required for plotting")
    if not stats_history:
        return None

    cols = _columns(stats_history)
    gens = cols['generation']

    fig, ax = plt.subplots(figsize=figsize)
    bottom = np.zeros_like(gens)
    for key, colour in (('num_elite', 'tab:orange'),
                        ('num_offspring', 'tab:purple'),
                        ('num_fresh', 'tab:gray')):
        ax.bar(gens, cols[key], bottom=bottom, color=colour, label=key[4:])
        bottom = bottom + cols[key]
    ax.set_xlabel('Generation')
    ax.set_ylabel('Agents bred')
    ax.legend(loc='upper left')

    mutations = ax.twinx()
    mutations.plot(gens, cols['num_mutated_nodes'], color='black', marker='.', linewidth=1)
    mutations.set_ylabel('Mutated nodes')

    ax.set_title('Next-generation makeup')
    return _save_or_close(fig, save_path)


def generate_evolution_report(
    stats_history: Sequence[StatsLike],
    output_dir: str,
    experiment_name: str = 'evolution',
) -> Dict[str, str]:
    """
    Write every evolution plot for a run into ``output_dir``.

    Returns:
        Plot name mapped to the written file. Empty for an empty history.
    """
    if not stats_history:
        return {}

    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)

    plots = {
        'fitness': (plot_fitness_over_generations, out / f'{experiment_name}_fitness.png'),
        'breeding': (plot_breeding_split, out / f'{experiment_name}_breeding.png'),
    }
    return {name: plot(stats_history, save_path=str(path)) for name, (plot, path) in plots.items()}


def format_evolution_summary(
    stats_history: Sequence[StatsLike],
    best_agent: Optional[Agent] = None,
) -> str:
    """Plain-text report of a run, suitable for printing at the end of the CLI."""
    rule = "=" * 50
    lines: List[str] = [rule, "EVOLUTION SUMMARY", rule, f"Total generations: {len(stats_history)}"]

    if stats_history:
        cols = _columns(stats_history)
        best = cols['best_fitness']
        lines += [
            "",
            f"Best fitness: {best[0]:.3f} -> {best[-1]:.3f} (peak {best.max():.3f})",
            f"Final mean fitness: {cols['avg_fitness'][-1]:.3f} +/- {cols['fitness_std'][-1]:.3f}",
            f"Nodes mutated over the run: {int(cols['num_mutated_nodes'].sum())}",
            "",
            "Last breeding split:",
            f"  Elite: {int(cols['num_elite'][-1])}",
            f"  Offspring: {int(cols['num_offspring'][-1])}",
            f"  Fresh: {int(cols['num_fresh'][-1])}",
        ]

    if best_agent is not None:
        lines += [
            "",
            "Best agent:",
            f"  ID: {best_agent.id}",
            f"  Fitness: {best_agent.fitness:.3f}",
            f"  Generation: {best_agent.generation} ({best_agent.origin})",
            f"  Shape: {list(best_agent.network.shape)}",
        ]

    lines += ["", rule]
    return "\n".join(lines)
