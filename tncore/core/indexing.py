"""
Multi-index arithmetic for column-major storage.

Axis 0 varies fastest: the offset of (i_0, ..., i_{n-1}) is
sum_k i_k * prod_{j<k} d_j.
"""

from typing import Iterator, List, Sequence


def num_elements(dim: Sequence[int]) -> int:
    """Number of elements of a tensor with dimensions ``dim`` (1 for rank 0)."""
    n = 1
    for d in dim:
        n *= d
    return n


def index_to_offset(dim: Sequence[int], index: Sequence[int]) -> int:
    """
    Convert a multi-index to the flat column-major offset.
    
    Args:
        dim: Dimensions (d_0, ..., d_{n-1})
        index: Multi-index of the same length
        
    Returns:
        sum_k index[k] * prod_{j<k} dim[j]
    """
    offset = 0
    dimfac = 1
    for d, i in zip(dim, index):
        offset += dimfac * i
        dimfac *= d
    return offset


def next_index(dim: Sequence[int], index: List[int]) -> None:
    """
    Advance ``index`` in place to its lexicographic successor.
    
    Axis 0 is incremented first; on overflow past ``dim[k]`` the entry resets
    to zero and the carry moves to axis k+1. After prod(dim) steps starting
    from zero the index wraps back to zero. No-op for an empty ``dim``.
    """
    for k, d in enumerate(dim):
        index[k] += 1
        if index[k] < d:
            return
        index[k] = 0


def iter_indices(dim: Sequence[int]) -> Iterator[List[int]]:
    """Yield all multi-indices of ``dim`` in column-major order (copies)."""
    index = [0] * len(dim)
    for _ in range(num_elements(dim)):
        yield list(index)
        next_index(dim, index)
