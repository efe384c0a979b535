from .random import get_prng, make_seed, set_random_seed

__all__ = ['get_prng', 'make_seed', 'set_random_seed']
