"""
Command line entry point for evolving flappy birds.

Usage:
    birdbrain [--generations 20] [--population 100] [--shape 5,10,2] [--seed 1]

Runs the headless flappy world for a number of generations and prints
an evolution summary, optionally saving a fitness plot.
"""
import argparse
import logging
import sys
from typing import List, Optional

from .exceptions import BirdbrainError
from .networks import parse_shape

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='birdbrain',
        description='Evolve feedforward networks that play a flappy-bird game',
    )
    parser.add_argument(
        '--generations',
        type=int,
        default=20,
        help='Number of generations to run (default: 20)',
    )
    parser.add_argument(
        '--population',
        type=int,
        default=100,
        help='Number of birds per generation (default: 100)',
    )
    parser.add_argument(
        '--shape',
        type=str,
        default='5,10,2',
        help='Comma separated layer sizes (default: 5,10,2)',
    )
    parser.add_argument(
        '--seed',
        type=int,
        default=None,
        help='Random seed for reproducible runs',
    )
    parser.add_argument(
        '--elite-fraction',
        type=float,
        default=0.05,
        help='Fraction of the population kept as elite (default: 0.05)',
    )
    parser.add_argument(
        '--offspring-fraction',
        type=float,
        default=0.45,
        help='Fraction of the population bred from the elite (default: 0.45)',
    )
    parser.add_argument(
        '--partner',
        type=str,
        default='best',
        choices=['best', 'random'],
        help='Crossover partner strategy (default: best)',
    )
    parser.add_argument(
        '--max-ticks',
        type=int,
        default=3600,
        help='Tick cap per generation, 0 for unlimited (default: 3600)',
    )
    parser.add_argument(
        '--plot',
        type=str,
        default=None,
        metavar='PATH',
        help='Save a fitness plot to PATH',
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Log every generation at debug level',
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    from .evolution import EvolutionConfig, Population
    from .simulation import FlappyWorld, WorldConfig
    from .visualization import format_evolution_summary, plot_fitness_over_generations

    try:
        config = EvolutionConfig(
            population_size=args.population,
            shape=parse_shape(args.shape),
            elite_fraction=args.elite_fraction,
            offspring_fraction=args.offspring_fraction,
            partner_strategy=args.partner,
            max_generations=args.generations,
            seed=args.seed,
        )
        # Offset keeps the world's draws independent of the population's
        world_seed = None if args.seed is None else args.seed + 1
        world_config = WorldConfig(max_ticks=args.max_ticks, seed=world_seed)

        population = Population(config)
        population.initialize_random()
        world = FlappyWorld(population, world_config)
    except (BirdbrainError, ValueError) as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    def on_generation(generation, stats):
        logger.debug(
            f"Generation {generation} done: best={stats.best_fitness:.3f} "
            f"avg={stats.avg_fitness:.3f}"
        )

    logger.info(
        f"Evolving {config.population_size} birds with shape {list(config.shape)} "
        f"for {args.generations} generations"
    )
    world.run(args.generations, progress_callback=on_generation)

    print(format_evolution_summary(population.stats_history, population.best_ever))

    if args.plot and population.stats_history:
        path = plot_fitness_over_generations(population.stats_history, save_path=args.plot)
        logger.info(f"Saved fitness plot to {path}")

    return 0


if __name__ == '__main__':
    sys.exit(main())
