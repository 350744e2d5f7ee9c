"""Tests for Arena allocator and ArrayRef."""

import numpy as np
import pytest

from isowave.core.arena import Arena, ArrayRef


class TestArrayRef:
    """Tests for ArrayRef dataclass."""

    def test_creation(self) -> None:
        """Test ArrayRef creation with valid parameters."""
        ref = ArrayRef(offset=0, shape=(8, 8), dtype=np.dtype(np.complex128), generation=0)
        assert ref.offset == 0
        assert ref.shape == (8, 8)
        assert ref.dtype == np.complex128
        assert ref.generation == 0

    def test_negative_offset(self) -> None:
        """Test that negative offset raises ValueError."""
        with pytest.raises(ValueError, match="offset must be non-negative"):
            ArrayRef(offset=-1, shape=(4,), dtype=np.dtype(np.float64), generation=0)

    def test_negative_extent(self) -> None:
        """Test that a negative extent raises ValueError."""
        with pytest.raises(ValueError, match="shape extents must be non-negative"):
            ArrayRef(offset=0, shape=(4, -1), dtype=np.dtype(np.float64), generation=0)

    def test_negative_generation(self) -> None:
        """Test that negative generation raises ValueError."""
        with pytest.raises(ValueError, match="generation must be non-negative"):
            ArrayRef(offset=0, shape=(4,), dtype=np.dtype(np.float64), generation=-1)

    def test_properties(self) -> None:
        """Test ArrayRef computed properties."""
        ref = ArrayRef(offset=0, shape=(2, 3, 4), dtype=np.dtype(np.complex128), generation=0)
        assert ref.ndim == 3
        assert ref.size == 24
        assert ref.nbytes == 24 * 16
        assert ref.strides == (192, 64, 16)


class TestArena:
    """Tests for Arena allocator."""

    def test_invalid_size(self) -> None:
        """Test that a non-positive size raises ValueError."""
        with pytest.raises(ValueError, match="size_bytes must be positive"):
            Arena(size_bytes=0)

    def test_alloc_advances_offset(self) -> None:
        """Test bump allocation of bands and masks."""
        arena = Arena(size_bytes=1 << 20)
        arena.alloc((32, 32), np.complex128)
        arena.alloc((32, 32), np.float64)
        assert arena.offset == 32 * 32 * 16 + 32 * 32 * 8
        assert arena.available == arena.size - arena.offset

    def test_alignment(self) -> None:
        """Test that allocations respect dtype alignment."""
        arena = Arena(size_bytes=1 << 16)
        arena.alloc((3,), np.uint8)
        ref = arena.alloc((4,), np.complex128)
        assert ref.offset % np.dtype(np.complex128).alignment == 0

    def test_out_of_memory(self) -> None:
        """Test allocation beyond capacity."""
        arena = Arena(size_bytes=1024)
        with pytest.raises(ValueError, match="Arena out of memory"):
            arena.alloc((16, 16), np.complex128)

    def test_copy_array_and_view(self) -> None:
        """Test copying a spectrum in and viewing it without copying."""
        arena = Arena(size_bytes=1 << 20)
        spectrum = np.fft.fftn(np.random.rand(8, 6))
        ref = arena.copy_array(spectrum)

        view = arena.view(ref)
        np.testing.assert_array_equal(view, spectrum)
        assert view.dtype == np.complex128

        view[0, 0] = 42.0
        assert arena.view(ref)[0, 0] == 42.0

    def test_copy_array_cast(self) -> None:
        """Test casting while copying."""
        arena = Arena(size_bytes=1 << 16)
        ref = arena.copy_array(np.arange(6, dtype=np.int32).reshape(2, 3), dtype=np.complex128)
        assert ref.dtype == np.complex128
        np.testing.assert_array_equal(arena.view(ref).real, np.arange(6).reshape(2, 3))

    def test_zeros(self) -> None:
        """Test zero-filled allocation after dirty reuse."""
        arena = Arena(size_bytes=1 << 16)
        arena.copy_array(np.ones((8, 8), dtype=np.complex128))
        arena.reset()
        ref = arena.zeros((8, 8))
        assert np.all(arena.view(ref) == 0)

    def test_stale_ref(self) -> None:
        """Test that reset invalidates existing refs."""
        arena = Arena(size_bytes=1 << 16)
        ref = arena.copy_array(np.ones(4))
        arena.reset()
        assert arena.generation == 1
        assert arena.offset == 0
        with pytest.raises(ValueError, match="Stale ArrayRef"):
            arena.view(ref)

    def test_out_of_bounds_ref(self) -> None:
        """Test that a ref pointing past the buffer is rejected."""
        arena = Arena(size_bytes=64)
        ref = ArrayRef(offset=32, shape=(8,), dtype=np.dtype(np.float64), generation=0)
        with pytest.raises(ValueError, match="out of bounds"):
            arena.view(ref)
