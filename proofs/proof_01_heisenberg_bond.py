#!/usr/bin/env python3
"""
Proof 01: Two-site Heisenberg bond operator
===========================================

Builds the bond term of the spin-1/2 Heisenberg chain from local spin
operators using only tensor-core operations.

Physics:
    h = S^x ⊗ S^x + S^y ⊗ S^y + S^z ⊗ S^z
    
    The singlet (|01> - |10>)/sqrt(2) has energy -3/4,
    the triplet states have energy +1/4.

Test:
    - Assemble h with kronecker_product and scalar_multiply_add
    - Check hermiticity with conjugate_transpose
    - Apply h to singlet and triplet states with multiply

Criterion: eigenvalues -3/4 and +1/4 to machine precision
"""

import math

from tncore import Tensor, conjugate_transpose, kronecker_product, multiply


def spin_half_operators() -> tuple:
    """Return (S^x, S^y, S^z) as (2, 2) tensors."""
    sx = Tensor.from_torch([[0, 0.5], [0.5, 0]])
    sy = Tensor.from_torch([[0, -0.5j], [0.5j, 0]])
    sz = Tensor.from_torch([[0.5, 0], [0, -0.5]])
    return sx, sy, sz


def heisenberg_bond() -> Tensor:
    """Two-site Heisenberg interaction as a (4, 4) tensor."""
    h = Tensor.allocate((4, 4))
    for op in spin_half_operators():
        h.scalar_multiply_add(1.0, kronecker_product(op, op))
    return h


def test_hermitian():
    """Bond operator equals its conjugate transpose and is traceless."""
    h = heisenberg_bond()
    hc = conjugate_transpose((1, 0), h)
    
    print(f"trace(h) = {h.trace():.3f}")
    
    assert hc.allclose(h), "Bond operator is not Hermitian"
    assert abs(h.trace()) < 1e-14, "Bond operator is not traceless"
    
    print(f"✓ h is Hermitian and traceless")
    
    return True


def test_singlet_triplet():
    """Singlet and triplet energies."""
    h = heisenberg_bond()
    
    singlet = Tensor.from_values([0, 1, -1, 0], (4,))
    singlet.scale(1 / math.sqrt(2))
    triplet = Tensor.from_values([1, 0, 0, 0], (4,))
    
    for name, state, energy in [("singlet", singlet, -0.75), ("triplet", triplet, 0.25)]:
        result = multiply(h, state, 1)
        expected = state.copy()
        expected.scale(energy)
        
        print(f"  {name}: <h> = {multiply(state, result, 1)[()].real:.6f} (exact {energy})")
        
        assert result.allclose(expected, atol=1e-14), f"{name} is not an eigenstate"
    
    print(f"✓ Singlet and triplet eigenvalues reproduced")
    
    return True


if __name__ == "__main__":
    print("=" * 60)
    print("Proof 01: Two-site Heisenberg bond operator")
    print("=" * 60)
    print()
    
    success1 = test_hermitian()
    success2 = test_singlet_triplet()
    
    print()
    print("=" * 60)
    print("PROOF PASSED" if (success1 and success2) else "PROOF FAILED")
    print("=" * 60)
