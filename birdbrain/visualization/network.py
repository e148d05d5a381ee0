"""
Network visualization utilities.

Generate visualizations of network internals:
- Weight and bias distribution histograms
- Network statistics and text summaries
"""
from typing import Any, Dict, Optional, Tuple

try:
    import matplotlib
    matplotlib.use('Agg')
    import matplotlib.pyplot as plt
    HAS_MATPLOTLIB = True
except ImportError:
    HAS_MATPLOTLIB = False

from ..networks import Network


def plot_weight_distributions(
    network: Network,
    save_path: Optional[str] = None,
    bins: int = 30,
    figsize: Tuple[int, int] = (12, 4),
) -> Optional[str]:
    """
    Plot a histogram of outgoing weights for every non-output layer.

    Args:
        network: Network to inspect.
        save_path: Path to save figure.
        bins: Histogram bin count.
        figsize: Figure size.

    Returns:
        Path to saved figure if save_path provided.
    """
    if not HAS_MATPLOTLIB:
        raise ImportError("matplotlib required for visualization")

    layers = [layer for layer in network.layers if layer.fan_out > 0]

    fig, axes = plt.subplots(1, len(layers), figsize=figsize, squeeze=False)

    for i, (ax, layer) in enumerate(zip(axes[0], layers)):
        values = layer.weights.flatten().numpy()
        ax.hist(values, bins=bins, color='steelblue', edgecolor='black', alpha=0.8)
        ax.set_title(f'Layer {i} ({layer.size}x{layer.fan_out})')
        ax.set_xlabel('Weight')
        ax.set_ylabel('Count')

    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight')
        plt.close(fig)
        return save_path

    plt.close(fig)
    return None


def get_network_stats(network: Network) -> Dict[str, Any]:
    """
    Compute statistics about a network.

    Args:
        network: Network to inspect.

    Returns:
        Dictionary of network statistics.
    """
    layer_stats = []

    for i, layer in enumerate(network.layers):
        entry = {
            'index': i,
            'nodes': layer.size,
            'fan_out': layer.fan_out,
            'bias_mean': layer.biases.mean().item(),
            'bias_min': layer.biases.min().item(),
            'bias_max': layer.biases.max().item(),
        }
        if layer.fan_out > 0:
            entry.update({
                'weight_mean': layer.weights.mean().item(),
                'weight_std': layer.weights.std(unbiased=False).item(),
                'weight_min': layer.weights.min().item(),
                'weight_max': layer.weights.max().item(),
            })
        layer_stats.append(entry)

    return {
        'shape': list(network.shape),
        'num_layers': len(network.layers),
        'total_parameters': network.num_parameters,
        'num_edges': sum(layer.weights.numel() for layer in network.layers),
        'layers': layer_stats,
    }


def format_network_summary(network: Network) -> str:
    """
    Generate a text summary of the network.

    Args:
        network: Network to summarize.

    Returns:
        Formatted text summary.
    """
    stats = get_network_stats(network)

    lines = [
        "=" * 50,
        "NETWORK SUMMARY",
        "=" * 50,
        "",
        f"Shape: {stats['shape']}",
        f"Total parameters: {stats['total_parameters']:,}",
        f"Edges: {stats['num_edges']:,}",
        "",
        "Layers:",
    ]

    for entry in stats['layers']:
        lines.append(f"  {entry['index']}: {entry['nodes']} nodes -> {entry['fan_out']}")
        lines.append(f"    bias mean={entry['bias_mean']:.4f}")
        if 'weight_mean' in entry:
            lines.append(
                f"    weight mean={entry['weight_mean']:.4f}, std={entry['weight_std']:.4f}"
            )

    lines.append("")
    lines.append("=" * 50)

    return "\n".join(lines)
