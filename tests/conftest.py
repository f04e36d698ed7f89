"""Shared fixtures for the tncore test suite."""

import pytest
import torch

from tncore import Tensor


# ------------------------------------------------------------------ #
# Random generator fixtures                                            #
# ------------------------------------------------------------------ #

@pytest.fixture
def rng():
    return torch.Generator().manual_seed(42)


def random_tensor(dim, generator, names=None):
    """Tensor with standard normal real and imaginary parts."""
    n = 1
    for d in dim:
        n *= d
    values = torch.randn(n, dtype=torch.float64, generator=generator) \
        + 1j * torch.randn(n, dtype=torch.float64, generator=generator)
    return Tensor.from_values(values, dim, names)


@pytest.fixture
def make_tensor(rng):
    """Factory for random complex tensors: ``make_tensor(dim, names=None)``."""
    def make(dim, names=None):
        return random_tensor(dim, rng, names)
    return make


# ------------------------------------------------------------------ #
# Tensor fixtures                                                      #
# ------------------------------------------------------------------ #

@pytest.fixture
def matrix_2x3():
    """(2, 3) tensor with column-major data [1, ..., 6]."""
    return Tensor.from_values([1, 2, 3, 4, 5, 6], (2, 3))


@pytest.fixture
def grid_3x3():
    """(3, 3) tensor with entries t[i, j] = 3*j + i."""
    return Tensor.from_values(list(range(9)), (3, 3))
