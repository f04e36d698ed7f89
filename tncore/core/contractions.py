"""
Index-algebra operations on dense tensors.

Generalized transpose, sub-tensor extraction, contraction of trailing with
leading axes and the Kronecker product. Every operation returns a freshly
allocated result, so results never alias their inputs. Results are allocated
with the configuration of the (first) input unless ``config`` is given.
"""

import logging
import numbers
from typing import List, Optional, Sequence, Tuple

import torch

from tncore.config import CoreConfig
from tncore.core.indexing import index_to_offset, iter_indices, num_elements
from tncore.core.kernels import check_kernel_int, zdotu, zgemm, zgemv, zgeru
from tncore.core.tensor import Tensor, _validate_dim

logger = logging.getLogger(__name__)


def _as_index(value, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise TypeError(f"{what} must be an integer, got {value!r}")
    return int(value)


def _validate_perm(perm: Sequence[int], rank: int) -> Tuple[int, ...]:
    perm = tuple(_as_index(p, "Permutation entry") for p in perm)
    if len(perm) != rank:
        raise ValueError(f"Permutation {perm} has length {len(perm)}, tensor has rank {rank}")
    if sorted(perm) != list(range(rank)):
        raise ValueError(f"Invalid permutation {perm} of {rank} axes")
    return perm


def transpose(perm: Sequence[int], t: Tensor, config: Optional[CoreConfig] = None) -> Tensor:
    """
    Generalized transpose: axis k of ``t`` becomes axis perm[k] of the result.

    Args:
        perm: Permutation of (0, ..., rank-1)
        t: Input tensor
        config: Core configuration of the result (default: that of ``t``)

    Returns:
        Tensor r with r.dim[perm[k]] = t.dim[k] and r[perm . i] = t[i]

    Example:
        >>> t = Tensor.from_values([1, 2, 3, 4, 5, 6], (2, 3))
        >>> r = transpose((1, 0), t)
        >>> r.dim
        (3, 2)
    """
    data = t._require_data()
    rank = t.rank
    perm = _validate_perm(perm, rank)

    rdim = [0] * rank
    rnames = [""] * rank
    for k in range(rank):
        rdim[perm[k]] = t.dim[k]
        rnames[perm[k]] = t.names[k]
    r = Tensor.allocate(rdim, rnames, config=config or t.config)

    if rank == 0 or perm == tuple(range(rank)):
        r.data.copy_(data)
        return r

    # stride in 'r' corresponding to the leading axis of 't'
    stride = num_elements(rdim[:perm[0]])
    n = t.dim[0]

    # offsets in 'r' of all positions (0, i_1, ..., i_{rank-1}) of 't'
    index_r = [0] * rank
    base = []
    for index_t in iter_indices(t.dim[1:]):
        for k in range(1, rank):
            index_r[perm[k]] = index_t[k - 1]
        base.append(index_to_offset(rdim, index_r))

    # strided copies along the leading axis, all at once
    dest = torch.tensor(base, dtype=torch.int64).unsqueeze(1) + stride * torch.arange(n)
    r.data.index_copy_(0, dest.reshape(-1), data)
    return r


def conjugate_transpose(
    perm: Sequence[int], t: Tensor, config: Optional[CoreConfig] = None
) -> Tensor:
    """Generalized transpose followed by complex conjugation: r[perm . i] = conj(t[i])."""
    r = transpose(perm, t, config)
    r.conjugate()
    return r


def sub_tensor(
    t: Tensor,
    sdim: Sequence[int],
    idx: Sequence[Sequence[int]],
    config: Optional[CoreConfig] = None,
) -> Tensor:
    """
    Assemble a sub-tensor by selecting entries along each axis.

    Index lists need not be sorted or unique; repeated entries give repeated
    reads of the source.

    Args:
        t: Input tensor
        sdim: Dimensions of the sub-tensor, one per axis of ``t``
        idx: idx[k] lists sdim[k] indices into axis k of ``t``
        config: Core configuration of the result (default: that of ``t``)

    Returns:
        Tensor s with s[j_0, ..., j_{n-1}] = t[idx[0][j_0], ..., idx[n-1][j_{n-1}]]
    """
    data = t._require_data()
    rank = t.rank
    sdim = _validate_dim(sdim)
    if len(sdim) != rank:
        raise ValueError(f"Sub-tensor dimensions {sdim} do not match rank {rank}")
    if len(idx) != rank:
        raise ValueError(f"Expected {rank} index lists, got {len(idx)}")
    idx = [[_as_index(i, f"Index for axis {k}") for i in ix] for k, ix in enumerate(idx)]
    for k in range(rank):
        if len(idx[k]) != sdim[k]:
            raise ValueError(
                f"Index list for axis {k} has length {len(idx[k])}, expected {sdim[k]}"
            )
        for i in idx[k]:
            if not 0 <= i < t.dim[k]:
                raise ValueError(f"Index {i} out of range for axis {k} with extent {t.dim[k]}")

    s = Tensor.allocate(sdim, t.names, config=config or t.config)
    if rank == 0:
        s.data.copy_(data)
        return s

    # offsets in 't' of the selected positions (0, idx[1][j_1], ...)
    index_t = [0] * rank
    base = []
    for index_s in iter_indices(sdim[1:]):
        for k in range(1, rank):
            index_t[k] = idx[k][index_s[k - 1]]
        base.append(index_to_offset(t.dim, index_t))

    # gather along the leading axis, all at once
    src = torch.tensor(base, dtype=torch.int64).unsqueeze(1) + torch.tensor(idx[0], dtype=torch.int64)
    s.data.copy_(data.index_select(0, src.reshape(-1)))
    return s


def multiply(
    s: Tensor, t: Tensor, ndim_mult: int, config: Optional[CoreConfig] = None
) -> Tensor:
    """
    Contract the last ``ndim_mult`` axes of ``s`` with the first ``ndim_mult`` axes of ``t``.

    Viewing ``s`` as a column-major (LDS, K) matrix and ``t`` as (K, TDT), the
    result is the matrix product with dimensions s.dim[:-m] + t.dim[m:].
    The contraction is bilinear: no operand is conjugated.

    Args:
        s: Left tensor of rank p
        t: Right tensor of rank q
        ndim_mult: Number m >= 1 of contracted axes
        config: Core configuration for the result and the kernel range
            (default: that of ``s``)

    Returns:
        Tensor of rank p + q - 2m

    Example:
        >>> a = Tensor.from_values([1, 3, 2, 4], (2, 2))
        >>> b = Tensor.from_values([5, 7, 6, 8], (2, 2))
        >>> multiply(a, b, 1)[0, 1]
        (22+0j)
    """
    sdata = s._require_data()
    tdata = t._require_data()
    config = config or s.config
    m = ndim_mult
    if m < 1:
        raise ValueError(f"Number of contracted axes must be at least 1, got {m}")
    if s.rank < m or t.rank < m:
        raise ValueError(
            f"Cannot contract {m} axes of tensors with ranks {s.rank} and {t.rank}"
        )
    p = s.rank
    for i in range(m):
        if s.dim[p - m + i] != t.dim[i]:
            raise ValueError(
                f"Dimension mismatch at contraction {i}: "
                f"s has dim {s.dim[p - m + i]} at axis {p - m + i}, "
                f"t has dim {t.dim[i]} at axis {i}"
            )

    # leading dimension of 's' and trailing dimension of 't' as matrices
    lds = num_elements(s.dim[:p - m])
    ldt = num_elements(t.dim[:m])
    tdt = num_elements(t.dim[m:])
    check_kernel_int(lds, ldt, tdt, s.num_elements, t.num_elements, lds * tdt, config=config)

    r = Tensor.allocate(s.dim[:p - m] + t.dim[m:], s.names[:p - m] + t.names[m:], config=config)

    if lds == 1:
        if tdt == 1:
            logger.debug("multiply: inner product of length %d", ldt)
            r.data[0] = zdotu(ldt, sdata, tdata, config=config)
        else:
            # vector 's' from the left: (t^T s)^T
            logger.debug("multiply: vector-matrix product (%d x %d)", ldt, tdt)
            zgemv("T", ldt, tdt, 1, tdata, sdata, 0, r.data, config=config)
    else:
        if tdt == 1:
            logger.debug("multiply: matrix-vector product (%d x %d)", lds, ldt)
            zgemv("N", lds, ldt, 1, sdata, tdata, 0, r.data, config=config)
        else:
            logger.debug("multiply: matrix-matrix product (%d x %d x %d)", lds, ldt, tdt)
            zgemm(lds, tdt, ldt, 1, sdata, tdata, 0, r.data, config=config)

    return r


contract = multiply


def kronecker_product(s: Tensor, t: Tensor, config: Optional[CoreConfig] = None) -> Tensor:
    """
    Kronecker product of two tensors of equal rank.

    Within each axis the index of ``s`` varies fastest:
    r[i_0 + s.dim[0]*j_0, ...] = s[i_0, ...] * t[j_0, ...].

    Args:
        s: First tensor
        t: Second tensor, same rank as ``s``
        config: Core configuration of the result (default: that of ``s``)

    Returns:
        Tensor with dimensions s.dim[k] * t.dim[k]
    """
    sdata = s._require_data()
    tdata = t._require_data()
    config = config or s.config
    if s.rank != t.rank:
        raise ValueError(f"Tensors must have the same rank, got {s.rank} and {t.rank}")
    n = s.rank

    # outer product u[i, j] = s[i] * t[j] as rank-2n tensor; u starts at zero
    u = Tensor.allocate(s.dim + t.dim, config=config)
    zgeru(s.num_elements, t.num_elements, 1, sdata, tdata, u.data, config=config)

    # interleave axes of 's' and 't'
    perm: List[int] = [2 * k for k in range(n)] + [2 * k + 1 for k in range(n)]
    r = transpose(perm, u, config)
    u.delete()

    r.reshape([s.dim[k] * t.dim[k] for k in range(n)])
    return r
