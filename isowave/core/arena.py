"""Arena allocator and ArrayRef handles for spectra and band storage.

A decomposition produces many arrays of different sizes (one per band and
level). The Arena keeps them in one pre-allocated buffer with a bump
pointer; components only store ``ArrayRef`` handles (offset, shape, dtype)
and the data is viewed in place through ``Arena.view``.

Key Features:
- Zero-copy views: ``view`` wraps the arena buffer without copying
- Aligned allocation: respects dtype alignment (complex128 included)
- Generation counter: detects stale ArrayRefs after ``reset``

Example:
    >>> arena = Arena(size_bytes=1 << 20)
    >>> ref = arena.copy_array(np.fft.fftn(np.ones((8, 8))))
    >>> spectrum = arena.view(ref)
    >>> spectrum.dtype
    dtype('complex128')
    >>> arena.reset()
    >>> # arena.view(ref)  # Would raise ValueError: stale ref
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np


@dataclass(frozen=True)
class ArrayRef:
    """Lightweight handle pointing to a C-contiguous array in an Arena.

    Attributes:
        offset: Byte offset into arena buffer
        shape: Array extents, one per axis
        dtype: NumPy data type
        generation: Arena generation counter (for staleness detection)
    """

    offset: int
    shape: tuple[int, ...]
    dtype: np.dtype[Any]
    generation: int

    def __post_init__(self) -> None:
        if self.offset < 0:
            raise ValueError(f"offset must be non-negative, got {self.offset}")
        if any(extent < 0 for extent in self.shape):
            raise ValueError(f"shape extents must be non-negative, got {self.shape}")
        if self.generation < 0:
            raise ValueError(f"generation must be non-negative, got {self.generation}")

    @property
    def ndim(self) -> int:
        """Number of axes."""
        return len(self.shape)

    @property
    def size(self) -> int:
        """Total number of elements."""
        return int(np.prod(self.shape, dtype=np.int64))

    @property
    def nbytes(self) -> int:
        """Total number of bytes."""
        return self.size * self.dtype.itemsize

    @property
    def strides(self) -> tuple[int, ...]:
        """C-contiguous byte strides."""
        strides = []
        stride = self.dtype.itemsize
        for extent in reversed(self.shape):
            strides.append(stride)
            stride *= extent
        return tuple(reversed(strides))


class Arena:
    """Contiguous memory allocator with bump allocation strategy.

    Attributes:
        size: Total arena size in bytes
        offset: Current allocation offset (bump pointer)
        generation: Incremented on reset() to invalidate old ArrayRefs

    Example:
        >>> arena = Arena(size_bytes=1 << 20)
        >>> band = arena.alloc((32, 32), np.complex128)
        >>> mask = arena.alloc((32, 32), np.float64)
        >>> arena.offset
        24576
    """

    def __init__(self, size_bytes: int):
        """Create arena with specified size.

        Args:
            size_bytes: Total size in bytes; a full pyramid of complex128
                bands needs roughly ``(K + 1) * 16 * prod(shape)`` bytes
        """
        if size_bytes <= 0:
            raise ValueError(f"size_bytes must be positive, got {size_bytes}")

        self._buffer = bytearray(size_bytes)
        self._size = size_bytes
        self._offset = 0
        self._generation = 0

    @property
    def size(self) -> int:
        """Total arena size in bytes."""
        return self._size

    @property
    def offset(self) -> int:
        """Current allocation offset (bytes used)."""
        return self._offset

    @property
    def generation(self) -> int:
        """Current generation counter."""
        return self._generation

    @property
    def available(self) -> int:
        """Remaining bytes available for allocation."""
        return self._size - self._offset

    def reset(self) -> None:
        """Reset arena for reuse. Invalidates all existing ArrayRefs."""
        self._offset = 0
        self._generation += 1

    def alloc(
        self,
        shape: tuple[int, ...],
        dtype: np.dtype[Any] | type | str,
    ) -> ArrayRef:
        """Allocate an uninitialised array in the arena.

        Args:
            shape: Array extents
            dtype: NumPy data type

        Returns:
            ArrayRef handle to the allocated array

        Raises:
            ValueError: If allocation would exceed arena size
        """
        dt = np.dtype(dtype)
        shape = tuple(int(extent) for extent in shape)
        nbytes = int(np.prod(shape, dtype=np.int64)) * dt.itemsize

        alignment = dt.alignment
        aligned_offset = (self._offset + alignment - 1) // alignment * alignment

        end_offset = aligned_offset + nbytes
        if end_offset > self._size:
            raise ValueError(
                f"Arena out of memory: need {nbytes} bytes at offset {aligned_offset}, "
                f"but arena size is {self._size} (available: {self.available})"
            )

        ref = ArrayRef(
            offset=aligned_offset,
            shape=shape,
            dtype=dt,
            generation=self._generation,
        )
        self._offset = end_offset
        return ref

    def zeros(
        self,
        shape: tuple[int, ...],
        dtype: np.dtype[Any] | type | str = np.complex128,
    ) -> ArrayRef:
        """Allocate a zero-filled array (used as accumulation buffer)."""
        ref = self.alloc(shape, dtype)
        self.view(ref)[...] = 0
        return ref

    def view(self, ref: ArrayRef) -> np.ndarray:
        """Get a NumPy array view of an ArrayRef.

        Raises:
            ValueError: If ArrayRef is stale or points outside the buffer
        """
        if ref.generation != self._generation:
            raise ValueError(
                f"Stale ArrayRef: arena was reset (current generation {self._generation}, "
                f"ref is from generation {ref.generation})"
            )

        end_offset = ref.offset + ref.nbytes
        if end_offset > self._size:
            raise ValueError(
                f"ArrayRef out of bounds: offset={ref.offset}, nbytes={ref.nbytes}, "
                f"arena size={self._size}"
            )

        return np.ndarray(
            shape=ref.shape,
            dtype=ref.dtype,
            buffer=self._buffer,
            offset=ref.offset,
            strides=ref.strides,
        )

    def copy_array(
        self,
        arr: np.ndarray,
        dtype: np.dtype[Any] | type | str | None = None,
    ) -> ArrayRef:
        """Allocate an array and copy data into it, optionally casting.

        Args:
            arr: Array to copy
            dtype: Target dtype (defaults to ``arr.dtype``)

        Returns:
            ArrayRef pointing to the copied data
        """
        arr = np.asarray(arr)
        ref = self.alloc(arr.shape, arr.dtype if dtype is None else dtype)
        self.view(ref)[...] = arr
        return ref

    def __repr__(self) -> str:
        return (
            f"Arena(size={self._size}, offset={self._offset}, "
            f"generation={self._generation}, available={self.available})"
        )
