"""
Dense tensor with column-major complex storage.

A tensor of rank n and dimensions (d_0, ..., d_{n-1}) owns a contiguous,
aligned buffer of prod(d_k) complex double elements, with axis 0 varying
fastest. A rank-0 tensor holds a single scalar.
"""

from __future__ import annotations
from typing import Optional, Sequence, Tuple, Union
import numbers

import torch

from tncore.config import DEFAULT_CONFIG, MIN_ALIGNMENT, CoreConfig
from tncore.core import alloc
from tncore.core.indexing import index_to_offset, num_elements
from tncore.core.kernels import zaxpy, zdscal


def _validate_dim(dim: Sequence[int]) -> Tuple[int, ...]:
    """Return ``dim`` as a tuple after checking that all extents are positive integers."""
    dim = tuple(dim)
    for k, d in enumerate(dim):
        if isinstance(d, bool) or not isinstance(d, numbers.Integral):
            raise TypeError(f"Extent of axis {k} must be an integer, got {d!r}")
        if d < 1:
            raise ValueError(f"Extents must be strictly positive, got {d} for axis {k}")
    return tuple(int(d) for d in dim)


def _validate_names(names: Optional[Sequence[str]], rank: int) -> Tuple[str, ...]:
    if names is None:
        return ("",) * rank
    names = tuple(names)
    if len(names) != rank:
        raise ValueError(f"Expected {rank} axis names, got {len(names)}")
    for name in names:
        if not isinstance(name, str):
            raise TypeError(f"Axis names must be strings, got {name!r}")
    return names


class Tensor:
    """
    Dense complex tensor in column-major storage.

    The offset of the multi-index (i_0, ..., i_{n-1}) in ``data`` is
    sum_k i_k * s_k with s_0 = 1 and s_k = s_{k-1} * d_{k-1}.

    A tensor exclusively owns its buffer. Ownership can be transferred with
    :meth:`move_from`, which leaves the source empty; an empty tensor can only
    be deleted or used as a move destination.

    Attributes:
        rank: Number of axes
        dim: Tuple of extents
        names: Tuple of axis labels (informational only)
        data: Flat 1-D complex128 buffer, or None for an empty tensor
        config: Core configuration inherited by results derived from this tensor

    Example:
        >>> t = Tensor.from_values([1, 2, 3, 4, 5, 6], (2, 3))
        >>> t[1, 0]
        (2+0j)
        >>> t[0, 1]
        (3+0j)
    """

    def __init__(
        self,
        dim: Sequence[int],
        data: torch.Tensor,
        names: Optional[Sequence[str]] = None,
        config: Optional[CoreConfig] = None,
    ):
        """
        Wrap an existing buffer; use :meth:`allocate` for a new tensor.

        Args:
            dim: Extents of the axes (empty for a scalar)
            data: Contiguous 1-D complex128 buffer with prod(dim) elements
            names: Optional axis labels
            config: Core configuration used for buffers derived from this tensor
        """
        dim = _validate_dim(dim)
        if not isinstance(data, torch.Tensor):
            raise TypeError(f"data must be a torch.Tensor, got {type(data).__name__}")
        if data.dtype != alloc.DTYPE:
            raise TypeError(f"data must have dtype {alloc.DTYPE}, got {data.dtype}")
        if data.dim() != 1 or not data.is_contiguous():
            raise ValueError("data must be a contiguous 1-D buffer")
        if data.numel() > 0 and not alloc.is_aligned(data, MIN_ALIGNMENT):
            raise ValueError(f"data must be aligned to {MIN_ALIGNMENT} bytes")
        if data.numel() != num_elements(dim):
            raise ValueError(
                f"Buffer holds {data.numel()} elements, dimensions {dim} require {num_elements(dim)}"
            )
        self._dim = dim
        self._data: Optional[torch.Tensor] = data
        self._names = _validate_names(names, len(dim))
        self._config = config or DEFAULT_CONFIG

    @classmethod
    def allocate(
        cls,
        dim: Sequence[int],
        names: Optional[Sequence[str]] = None,
        config: Optional[CoreConfig] = None,
    ) -> Tensor:
        """
        Allocate a zero-initialized tensor.

        Args:
            dim: Extents of the axes; empty for a rank-0 tensor holding one element
            names: Optional axis labels
            config: Core configuration (alignment, kernel range)

        Returns:
            New tensor filled with zeros
        """
        dim = _validate_dim(dim)
        return cls(dim, alloc.zeroed_allocate(num_elements(dim), config=config), names, config)

    @classmethod
    def from_values(
        cls,
        values,
        dim: Sequence[int],
        names: Optional[Sequence[str]] = None,
        config: Optional[CoreConfig] = None,
    ) -> Tensor:
        """
        Create a tensor from flat values given in column-major order.

        Args:
            values: Sequence or 1-D array of prod(dim) numbers
            dim: Extents of the axes
            names: Optional axis labels
            config: Core configuration (alignment, kernel range)
        """
        t = cls.allocate(dim, names, config)
        flat = torch.as_tensor(values, dtype=alloc.DTYPE).reshape(-1)
        if flat.numel() != t.num_elements:
            raise ValueError(
                f"Got {flat.numel()} values for dimensions {t.dim} ({t.num_elements} elements)"
            )
        t._data.copy_(flat)
        return t

    @classmethod
    def from_torch(
        cls,
        array,
        names: Optional[Sequence[str]] = None,
        config: Optional[CoreConfig] = None,
    ) -> Tensor:
        """
        Create a tensor from an n-d array indexed as ``array[i_0, ..., i_{n-1}]``.

        The values are copied into column-major order.
        """
        array = torch.as_tensor(array, dtype=alloc.DTYPE)
        t = cls.allocate(tuple(array.shape), names, config)
        if array.dim() == 0:
            t._data.copy_(array.reshape(1))
        else:
            # row-major flattening of the reversed axes is column-major order
            t._data.copy_(array.permute(*reversed(range(array.dim()))).reshape(-1))
        return t

    @classmethod
    def empty(cls) -> Tensor:
        """Tensor without a buffer, to be used as the destination of :meth:`move_from`."""
        t = cls.__new__(cls)
        t._dim, t._names, t._data = (), (), None
        t._config = DEFAULT_CONFIG
        return t

    # ------------------------------------------------------------------ #
    # Properties
    # ------------------------------------------------------------------ #

    @property
    def rank(self) -> int:
        return len(self._dim)

    @property
    def dim(self) -> Tuple[int, ...]:
        return self._dim

    @property
    def names(self) -> Tuple[str, ...]:
        return self._names

    @property
    def data(self) -> Optional[torch.Tensor]:
        return self._data

    @property
    def config(self) -> CoreConfig:
        return self._config

    @property
    def num_elements(self) -> int:
        return num_elements(self._dim)

    @property
    def is_empty(self) -> bool:
        """True after the buffer was moved out or deleted."""
        return self._data is None

    def _require_data(self) -> torch.Tensor:
        if self._data is None:
            raise ValueError("Tensor is empty (its data was moved out or deleted)")
        return self._data

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    def copy(self) -> Tensor:
        """Deep copy with an independently owned buffer."""
        data = self._require_data()
        r = Tensor.allocate(self._dim, self._names, config=self._config)
        r._data.copy_(data)
        return r

    def move_from(self, src: Tensor) -> None:
        """
        Take over rank, dimensions, names, buffer and configuration of ``src``
        without copying.

        Any buffer previously owned by this tensor is released. Afterwards
        ``src`` is empty (rank 0, no buffer) and safe to delete.
        """
        if src is self:
            raise ValueError("Cannot move a tensor into itself")
        if self._data is not None:
            alloc.free(self._data)
        self._dim, self._names, self._data = src._dim, src._names, src._data
        self._config = src._config
        src._dim, src._names, src._data = (), (), None

    def delete(self) -> None:
        """Release the buffer; deleting an empty tensor does nothing."""
        if self._data is not None:
            alloc.free(self._data)
        self._dim, self._names, self._data = (), (), None

    def rename(self, names: Sequence[str]) -> None:
        """Set the axis labels."""
        self._names = _validate_names(names, self.rank)

    # ------------------------------------------------------------------ #
    # In-place operations
    # ------------------------------------------------------------------ #

    def reshape(self, dim: Sequence[int]) -> None:
        """
        Reinterpret the buffer with new dimensions of equal element count.

        The data is not permuted; axis names are reset.
        """
        self._require_data()
        dim = _validate_dim(dim)
        if num_elements(dim) != self.num_elements:
            raise ValueError(
                f"Cannot reshape {self._dim} ({self.num_elements} elements) "
                f"to {dim} ({num_elements(dim)} elements)"
            )
        self._dim = dim
        self._names = ("",) * len(dim)

    def conjugate(self) -> None:
        """Pointwise complex conjugation."""
        self._require_data().conj_physical_()

    def scale(self, alpha: float) -> None:
        """Multiply all entries by the real number ``alpha``."""
        if not isinstance(alpha, numbers.Real):
            raise TypeError(f"Scaling factor must be real, got {alpha!r}")
        zdscal(self.num_elements, alpha, self._require_data(), config=self._config)

    def scalar_multiply_add(self, alpha: complex, s: Tensor) -> None:
        """
        In-place update self <- alpha*s + self.

        Args:
            alpha: Complex scalar
            s: Tensor with the same rank and dimensions as ``self``
        """
        if s is self:
            raise ValueError("Source and destination of scalar_multiply_add must differ")
        if s.rank != self.rank or s.dim != self.dim:
            raise ValueError(f"Dimension mismatch: {s.dim} vs {self.dim}")
        zaxpy(
            self.num_elements, complex(alpha), s._require_data(), self._require_data(),
            config=self._config,
        )

    def _diagonal_stride(self) -> Tuple[int, int]:
        """Common extent n and the stride 1 + n + ... + n^(rank-1) of the diagonal."""
        if self.rank < 1:
            raise ValueError("Tensor must have rank >= 1")
        n = self._dim[0]
        stride = 1
        dp = 1
        for k in range(1, self.rank):
            if self._dim[k] != n:
                raise ValueError(f"All dimensions must agree, got {self._dim}")
            dp *= n
            stride += dp
        return n, stride

    def set_identity(self) -> None:
        """
        Overwrite with the generalized Kronecker delta.

        All dimensions must agree; entries (j, j, ..., j) are set to one and
        all others to zero.
        """
        data = self._require_data()
        n, stride = self._diagonal_stride()
        data.zero_()
        data[0:(n - 1) * stride + 1:stride] = 1

    def trace(self) -> complex:
        """Sum of the entries (j, j, ..., j); all dimensions must agree."""
        data = self._require_data()
        n, stride = self._diagonal_stride()
        return complex(data[0:(n - 1) * stride + 1:stride].sum().item())

    # ------------------------------------------------------------------ #
    # Element access and conversion
    # ------------------------------------------------------------------ #

    def _offset(self, index) -> int:
        if not isinstance(index, tuple):
            index = (index,)
        if len(index) != self.rank:
            raise IndexError(f"Expected {self.rank} indices, got {len(index)}")
        for k, (i, d) in enumerate(zip(index, self._dim)):
            if not 0 <= i < d:
                raise IndexError(f"Index {i} out of range for axis {k} with extent {d}")
        return index_to_offset(self._dim, index)

    def __getitem__(self, index) -> complex:
        data = self._require_data()
        return complex(data[self._offset(index)].item())

    def __setitem__(self, index, value: Union[complex, float]) -> None:
        data = self._require_data()
        data[self._offset(index)] = complex(value)

    def to_torch(self) -> torch.Tensor:
        """
        View of the buffer as an n-d torch tensor indexed ``[i_0, ..., i_{n-1}]``.

        The view shares memory with this tensor.
        """
        data = self._require_data()
        if self.rank == 0:
            return data.view(())
        return data.view(*reversed(self._dim)).permute(*reversed(range(self.rank)))

    def allclose(self, other: Tensor, rtol: float = 1e-05, atol: float = 1e-08) -> bool:
        """Same dimensions and element-wise equal within tolerance."""
        if self.dim != other.dim:
            return False
        return torch.allclose(self._require_data(), other._require_data(), rtol=rtol, atol=atol)

    def __repr__(self) -> str:
        if self.is_empty:
            return "Tensor(empty)"
        if any(self._names):
            return f"Tensor(rank={self.rank}, dim={self._dim}, names={self._names})"
        return f"Tensor(rank={self.rank}, dim={self._dim})"


def identity(n: int, rank: int = 2, config: Optional[CoreConfig] = None) -> Tensor:
    """
    Generalized identity (Kronecker delta) tensor with ``rank`` axes of extent ``n``.

    Example:
        >>> identity(3, 4).trace()
        (3+0j)
    """
    if rank < 1:
        raise ValueError(f"Identity tensor requires rank >= 1, got {rank}")
    t = Tensor.allocate((n,) * rank, config=config)
    t.set_identity()
    return t


def trace(t: Tensor) -> complex:
    """Generalized trace sum_j t[j, j, ..., j]."""
    return t.trace()
