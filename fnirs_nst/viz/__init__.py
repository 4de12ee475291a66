from .plots import plot_pairs_separately

__all__ = ['plot_pairs_separately']
