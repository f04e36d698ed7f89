"""
Configuration for the tensor core.

Settings are immutable; functions that depend on them accept an optional
``config`` argument and fall back to ``DEFAULT_CONFIG``.
"""

from dataclasses import dataclass

# smallest boundary accepted for tensor buffers
MIN_ALIGNMENT = 32


@dataclass(frozen=True)
class CoreConfig:
    """
    Configuration of the allocator and the kernel boundary.

    Attributes:
        alignment:      Byte boundary of every tensor buffer (power of two, >= 32).
        kernel_int_max: Largest count accepted by the dense kernels
                        (32-bit signed integer range by default).
    """

    alignment: int = 64
    kernel_int_max: int = 2**31 - 1

    def __post_init__(self):
        if self.alignment < MIN_ALIGNMENT or self.alignment & (self.alignment - 1):
            raise ValueError(
                f"alignment must be a power of two >= {MIN_ALIGNMENT}, got {self.alignment}"
            )
        if self.kernel_int_max < 1:
            raise ValueError(f"kernel_int_max must be positive, got {self.kernel_int_max}")


DEFAULT_CONFIG = CoreConfig()
