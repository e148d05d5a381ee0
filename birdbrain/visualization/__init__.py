"""
Visualization and monitoring for evolution runs.

Provides plotting and reporting utilities for:
- Fitness progression and breeding makeup across generations
- Network weight distributions and summaries

All visualizations use matplotlib for static plots that can
be saved to files for reports.

Example usage:
    from birdbrain.visualization import (
        plot_fitness_over_generations,
        plot_weight_distributions,
    )

    plot_fitness_over_generations(pop.stats_history, save_path='evolution.png')
    plot_weight_distributions(pop.best_ever.network, save_path='weights.png')
"""
from .network import (
    plot_weight_distributions,
    get_network_stats,
    format_network_summary,
)
from .evolution import (
    plot_fitness_over_generations,
    plot_breeding_split,
    generate_evolution_report,
    format_evolution_summary,
)

__all__ = [
    # Network
    'plot_weight_distributions',
    'get_network_stats',
    'format_network_summary',

    # Evolution
    'plot_fitness_over_generations',
    'plot_breeding_split',
    'generate_evolution_report',
    'format_evolution_summary',
]
