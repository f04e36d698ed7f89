"""
Aligned buffer allocation.

Tensor buffers are 1-D torch tensors whose first element sits on a byte
boundary suitable for vectorized loads. The buffer is over-allocated by the
alignment and sliced at the first aligned byte.
"""

import logging
from typing import Optional

import torch
from torch import Tensor

from tncore.config import CoreConfig, DEFAULT_CONFIG

logger = logging.getLogger(__name__)

# element type of every tensor buffer
DTYPE = torch.complex128


def _alignment(alignment: Optional[int], config: Optional[CoreConfig]) -> int:
    if alignment is None:
        alignment = (config or DEFAULT_CONFIG).alignment
    elif alignment < 1 or alignment & (alignment - 1):
        raise ValueError(f"alignment must be a power of two, got {alignment}")
    return alignment


def is_aligned(buffer: Tensor, alignment: Optional[int] = None,
               config: Optional[CoreConfig] = None) -> bool:
    """Check whether the first element of ``buffer`` lies on the alignment boundary."""
    return buffer.data_ptr() % _alignment(alignment, config) == 0


def allocate(
    nbytes: int,
    alignment: Optional[int] = None,
    config: Optional[CoreConfig] = None,
) -> Tensor:
    """
    Allocate an uninitialized, aligned byte buffer.
    
    Args:
        nbytes: Number of bytes
        alignment: Byte boundary (defaults to the configured alignment)
        config: Core configuration
        
    Returns:
        1-D ``uint8`` tensor of length ``nbytes``; for ``nbytes == 0`` the
        result is empty and must not be dereferenced
    """
    if nbytes < 0:
        raise ValueError(f"Cannot allocate a negative number of bytes: {nbytes}")
    alignment = _alignment(alignment, config)

    raw = torch.empty(nbytes + alignment, dtype=torch.uint8)
    offset = -raw.data_ptr() % alignment
    buffer = raw[offset:offset + nbytes]

    if nbytes > 0 and not is_aligned(buffer, alignment):
        raise RuntimeError(f"Failed to align buffer of {nbytes} bytes to {alignment} bytes")

    logger.debug("allocated %d bytes (alignment %d, offset %d)", nbytes, alignment, offset)
    return buffer


def zeroed_allocate(
    count: int,
    dtype: torch.dtype = DTYPE,
    config: Optional[CoreConfig] = None,
) -> Tensor:
    """
    Allocate an aligned, zero-initialized 1-D buffer of ``count`` elements.
    
    Args:
        count: Number of elements
        dtype: Element type
        config: Core configuration
        
    Returns:
        Contiguous 1-D tensor of zeros
    """
    if count < 0:
        raise ValueError(f"Cannot allocate a negative number of elements: {count}")
    element_size = torch.empty((), dtype=dtype).element_size()
    # alignment is a multiple of the element size, so the reinterpretation is exact
    buffer = allocate(count * element_size, config=config).view(dtype)
    return buffer.zero_()


def free(buffer: Optional[Tensor]) -> None:
    """
    Release the storage backing ``buffer``.
    
    Any other view of the same storage becomes invalid; tensors never share
    buffers, so only the owner may call this. ``None`` is accepted and ignored.
    """
    if buffer is None:
        return
    buffer.untyped_storage().resize_(0)
