"""
Dense linear-algebra kernels over complex double precision.

The routines follow BLAS calling conventions: matrices are column-major and
stored in flat 1-D buffers, and all counts must fit a 32-bit signed integer.
A column-major (m, n) matrix occupies the same memory as a row-major (n, m)
matrix, so each routine is evaluated by torch on the transposed row-major view.
"""

from typing import Optional

import torch
from torch import Tensor

from tncore.config import CoreConfig, DEFAULT_CONFIG


def check_kernel_int(*counts: int, config: Optional[CoreConfig] = None) -> None:
    """
    Verify that every count can be passed to a kernel.
    
    Raises:
        ValueError: If a count is negative or exceeds the kernel integer range
    """
    limit = (config or DEFAULT_CONFIG).kernel_int_max
    for count in counts:
        if count < 0 or count > limit:
            raise ValueError(
                f"Count {count} is outside the kernel integer range [0, {limit}]"
            )


def _check_length(name: str, buffer: Tensor, required: int) -> None:
    if buffer.dim() != 1 or buffer.numel() < required:
        raise ValueError(
            f"Buffer '{name}' must be 1-D with at least {required} elements, "
            f"got shape {tuple(buffer.shape)}"
        )


def zaxpy(n: int, alpha: complex, x: Tensor, y: Tensor,
          config: Optional[CoreConfig] = None) -> None:
    """y <- alpha*x + y over the first ``n`` elements."""
    check_kernel_int(n, config=config)
    _check_length("x", x, n)
    _check_length("y", y, n)
    y[:n].add_(x[:n], alpha=alpha)


def zdscal(n: int, alpha: float, x: Tensor, config: Optional[CoreConfig] = None) -> None:
    """x <- alpha*x over the first ``n`` elements, with real ``alpha``."""
    check_kernel_int(n, config=config)
    _check_length("x", x, n)
    x[:n].mul_(float(alpha))


def zdotu(n: int, x: Tensor, y: Tensor, config: Optional[CoreConfig] = None) -> complex:
    """
    Unconjugated dot product sum_i x_i * y_i.
    
    Note that torch.dot does not conjugate either operand (unlike torch.vdot).
    """
    check_kernel_int(n, config=config)
    _check_length("x", x, n)
    _check_length("y", y, n)
    return complex(torch.dot(x[:n], y[:n]).item())


def zgemv(
    trans: str,
    m: int,
    n: int,
    alpha: complex,
    a: Tensor,
    x: Tensor,
    beta: complex,
    y: Tensor,
    config: Optional[CoreConfig] = None,
) -> None:
    """
    Matrix-vector product with the column-major (m, n) matrix A stored in ``a``.
    
    Args:
        trans: 'N' for y <- alpha*A*x + beta*y, 'T' for y <- alpha*A^T*x + beta*y
        m: Number of rows of A
        n: Number of columns of A
        alpha: Scalar factor of the product
        a: Buffer holding A
        x: Input vector (length n for 'N', m for 'T')
        beta: Scalar factor of y; if zero, y need not be initialized
        y: Output vector (length m for 'N', n for 'T')
    """
    check_kernel_int(m, n, config=config)
    _check_length("a", a, m * n)
    # row-major (n, m) view of A, i.e. A^T
    a_t = a[:m * n].view(n, m)
    if trans == "N":
        _check_length("x", x, n)
        _check_length("y", y, m)
        y[:m].addmv_(a_t.t(), x[:n], beta=beta, alpha=alpha)
    elif trans == "T":
        _check_length("x", x, m)
        _check_length("y", y, n)
        y[:n].addmv_(a_t, x[:m], beta=beta, alpha=alpha)
    else:
        raise ValueError(f"trans must be 'N' or 'T', got {trans!r}")


def zgemm(
    m: int,
    n: int,
    k: int,
    alpha: complex,
    a: Tensor,
    b: Tensor,
    beta: complex,
    c: Tensor,
    config: Optional[CoreConfig] = None,
) -> None:
    """
    Matrix-matrix product C <- alpha*A*B + beta*C, no transposition.
    
    A is (m, k), B is (k, n) and C is (m, n), all column-major.
    """
    check_kernel_int(m, n, k, config=config)
    _check_length("a", a, m * k)
    _check_length("b", b, k * n)
    _check_length("c", c, m * n)
    # C^T = B^T A^T in row-major views
    c[:m * n].view(n, m).addmm_(
        b[:k * n].view(n, k), a[:m * k].view(k, m), beta=beta, alpha=alpha
    )


def zgeru(m: int, n: int, alpha: complex, x: Tensor, y: Tensor, a: Tensor,
          config: Optional[CoreConfig] = None) -> None:
    """Rank-1 update A <- alpha*x*y^T + A of the column-major (m, n) matrix A."""
    check_kernel_int(m, n, config=config)
    _check_length("x", x, m)
    _check_length("y", y, n)
    _check_length("a", a, m * n)
    a[:m * n].view(n, m).addr_(y[:n], x[:m], alpha=alpha)
