"""Core numerical primitives for simplenn."""

from . import activations, backprop, gradients, network, types

__all__ = ["activations", "backprop", "gradients", "network", "types"]
