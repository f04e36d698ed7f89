"""Tests for the Tensor value type and its in-place operations."""

import pytest
import torch

from tncore import DEFAULT_CONFIG, CoreConfig, Tensor, identity, trace
from tncore.core import alloc


class TestAllocation:
    def test_zero_filled(self):
        t = Tensor.allocate((2, 3, 4))
        assert t.rank == 3
        assert t.dim == (2, 3, 4)
        assert t.num_elements == 24
        assert t.data.shape == (24,)
        assert torch.all(t.data == 0)

    def test_aligned(self):
        t = Tensor.allocate((5, 3))
        assert alloc.is_aligned(t.data, 32)

    def test_rank_zero(self):
        t = Tensor.allocate(())
        assert t.rank == 0
        assert t.dim == ()
        assert t.num_elements == 1
        assert t.data.shape == (1,)
        assert t[()] == 0

    @pytest.mark.parametrize("dim", [(0,), (2, 0), (3, -1)])
    def test_nonpositive_extent_raises(self, dim):
        with pytest.raises(ValueError, match="strictly positive"):
            Tensor.allocate(dim)

    def test_non_integer_extent_raises(self):
        with pytest.raises(TypeError):
            Tensor.allocate((2.5,))

    def test_names(self):
        t = Tensor.allocate((2, 3), names=("left", "right"))
        assert t.names == ("left", "right")
        assert Tensor.allocate((2, 3)).names == ("", "")

    def test_wrong_number_of_names(self):
        with pytest.raises(ValueError, match="names"):
            Tensor.allocate((2, 3), names=("a",))

    def test_wrap_wrong_size(self):
        with pytest.raises(ValueError, match="require"):
            Tensor((2, 2), alloc.zeroed_allocate(3))

    def test_wrap_wrong_dtype(self):
        with pytest.raises(TypeError, match="dtype"):
            Tensor((2,), torch.zeros(2, dtype=torch.float64))


class TestConversion:
    def test_from_values_column_major(self, matrix_2x3):
        assert matrix_2x3[0, 0] == 1
        assert matrix_2x3[1, 0] == 2
        assert matrix_2x3[0, 1] == 3
        assert matrix_2x3[1, 2] == 6

    def test_from_values_wrong_count(self):
        with pytest.raises(ValueError):
            Tensor.from_values([1, 2, 3], (2, 2))

    def test_from_torch_roundtrip(self, rng):
        array = torch.randn(2, 3, 4, dtype=torch.complex128, generator=rng)
        t = Tensor.from_torch(array)
        assert t.dim == (2, 3, 4)
        assert t[1, 2, 3] == pytest.approx(complex(array[1, 2, 3].item()))
        assert torch.equal(t.to_torch(), array)

    def test_to_torch_shares_memory(self, matrix_2x3):
        view = matrix_2x3.to_torch()
        view[1, 2] = 10
        assert matrix_2x3[1, 2] == 10

    def test_scalar_conversion(self):
        t = Tensor.from_torch(torch.tensor(2 + 3j))
        assert t.rank == 0
        assert t[()] == 2 + 3j
        assert t.to_torch().dim() == 0

    def test_setitem_and_bounds(self):
        t = Tensor.allocate((2, 2))
        t[1, 0] = 1j
        assert t.data[1] == 1j
        with pytest.raises(IndexError):
            t[2, 0]
        with pytest.raises(IndexError):
            t[0]

    def test_repr(self):
        assert repr(Tensor.allocate((2, 3))) == "Tensor(rank=2, dim=(2, 3))"
        assert "names" in repr(Tensor.allocate((2,), names=("a",)))
        assert repr(Tensor.empty()) == "Tensor(empty)"


class TestLifecycle:
    def test_copy_is_deep(self, make_tensor):
        t = make_tensor((2, 3), names=("a", "b"))
        r = t.copy()
        assert r.rank == t.rank and r.dim == t.dim and r.names == t.names
        assert torch.equal(r.data, t.data)
        assert r.data.data_ptr() != t.data.data_ptr()
        before = t.data.clone()
        r.scale(2.0)
        assert torch.equal(t.data, before)

    def test_copy_rank_zero(self):
        t = Tensor.from_values([3 - 1j], ())
        r = t.copy()
        assert r.rank == 0 and r[()] == 3 - 1j

    def test_move(self, make_tensor):
        src = make_tensor((2, 3))
        data = src.data
        dst = Tensor.empty()
        dst.move_from(src)
        assert dst.dim == (2, 3)
        assert dst.data is data
        assert src.rank == 0
        assert src.data is None
        assert src.is_empty

    def test_move_releases_destination(self, make_tensor):
        dst = make_tensor((4,))
        old = dst.data
        dst.move_from(make_tensor((2,)))
        assert dst.dim == (2,)
        assert old.untyped_storage().nbytes() == 0

    def test_move_into_itself_raises(self, make_tensor):
        t = make_tensor((2,))
        with pytest.raises(ValueError):
            t.move_from(t)

    def test_delete_moved_from_is_safe(self, make_tensor):
        src = make_tensor((2, 2))
        dst = Tensor.empty()
        dst.move_from(src)
        src.delete()
        assert dst[0, 0] == dst.data[0].item()

    def test_delete_twice(self, make_tensor):
        t = make_tensor((3,))
        t.delete()
        t.delete()
        assert t.is_empty

    def test_empty_tensor_use_raises(self):
        t = Tensor.empty()
        with pytest.raises(ValueError, match="empty"):
            t.copy()
        with pytest.raises(ValueError, match="empty"):
            t.conjugate()


class TestElementwise:
    def test_conjugate(self):
        t = Tensor.from_values([1 + 2j, -3j, 4], (3,))
        t.conjugate()
        assert torch.equal(t.data, torch.tensor([1 - 2j, 3j, 4], dtype=torch.complex128))

    def test_scale(self):
        t = Tensor.from_values([1 + 1j, 2], (2,))
        t.scale(-2.0)
        assert torch.equal(t.data, torch.tensor([-2 - 2j, -4], dtype=torch.complex128))

    def test_scale_rank_zero(self):
        t = Tensor.from_values([1 + 1j], ())
        t.scale(3)
        assert t[()] == 3 + 3j

    def test_scale_complex_raises(self):
        with pytest.raises(TypeError):
            Tensor.allocate((2,)).scale(1j)

    def test_scale_roundtrip(self, make_tensor):
        t = make_tensor((3, 4))
        original = t.data.clone()
        t.scale(3.7)
        t.scale(1 / 3.7)
        torch.testing.assert_close(t.data, original)

    def test_axpy(self):
        s = Tensor.from_values([1, 2j], (2,))
        t = Tensor.from_values([1, 1], (2,))
        t.scalar_multiply_add(2 - 1j, s)
        assert t[0] == 3 - 1j
        assert t[1] == 1 + 2 + 4j

    def test_axpy_alpha_zero(self, make_tensor):
        s = make_tensor((2, 3))
        t = make_tensor((2, 3))
        before = t.data.clone()
        t.scalar_multiply_add(0, s)
        assert torch.equal(t.data, before)

    def test_axpy_alpha_one(self, make_tensor):
        s = make_tensor((2, 3))
        t = make_tensor((2, 3))
        expected = s.data + t.data
        t.scalar_multiply_add(1, s)
        torch.testing.assert_close(t.data, expected)

    def test_axpy_shape_mismatch(self, make_tensor):
        with pytest.raises(ValueError, match="mismatch"):
            make_tensor((2, 3)).scalar_multiply_add(1, make_tensor((3, 2)))
        with pytest.raises(ValueError, match="mismatch"):
            make_tensor((6,)).scalar_multiply_add(1, make_tensor((2, 3)))

    def test_axpy_aliasing_raises(self, make_tensor):
        t = make_tensor((2,))
        with pytest.raises(ValueError):
            t.scalar_multiply_add(1, t)


class TestStructural:
    def test_reshape_keeps_buffer(self, make_tensor):
        t = make_tensor((2, 3, 4), names=("a", "b", "c"))
        data = t.data
        before = data.clone()
        t.reshape((6, 4))
        assert t.dim == (6, 4)
        assert t.names == ("", "")
        assert t.data is data
        assert torch.equal(t.data, before)

    def test_reshape_to_scalar(self):
        t = Tensor.from_values([5], (1, 1))
        t.reshape(())
        assert t.rank == 0 and t[()] == 5

    def test_reshape_count_mismatch(self, make_tensor):
        with pytest.raises(ValueError, match="reshape"):
            make_tensor((2, 3)).reshape((4, 2))

    def test_identity_rank4(self):
        t = identity(3, 4)
        assert t.dim == (3, 3, 3, 3)
        nonzero = [tuple(i) for i in torch.nonzero(t.to_torch().real).tolist()]
        assert nonzero == [(0, 0, 0, 0), (1, 1, 1, 1), (2, 2, 2, 2)]
        assert t.trace() == 3

    def test_identity_matrix(self):
        assert torch.equal(identity(4).to_torch(), torch.eye(4, dtype=torch.complex128))

    def test_set_identity_overwrites(self, make_tensor):
        t = make_tensor((2, 2, 2))
        t.set_identity()
        assert t.data.sum() == 2
        assert t[1, 1, 1] == 1

    def test_identity_rank_one(self):
        assert torch.equal(identity(3, 1).data, torch.ones(3, dtype=torch.complex128))

    def test_identity_unequal_dims_raises(self):
        with pytest.raises(ValueError, match="agree"):
            Tensor.allocate((2, 3)).set_identity()

    def test_identity_rank_zero_raises(self):
        with pytest.raises(ValueError, match="rank"):
            Tensor.allocate(()).set_identity()
        with pytest.raises(ValueError):
            identity(2, 0)

    def test_trace(self, grid_3x3):
        assert trace(grid_3x3) == 0 + 4 + 8

    def test_trace_rank3(self, make_tensor):
        t = make_tensor((2, 2, 2))
        assert t.trace() == pytest.approx(t[0, 0, 0] + t[1, 1, 1])

    def test_trace_unequal_dims_raises(self):
        with pytest.raises(ValueError):
            trace(Tensor.allocate((2, 3)))


class TestConfig:
    def test_default_config(self, make_tensor):
        assert make_tensor((2, 3)).config is DEFAULT_CONFIG
        assert Tensor.empty().config is DEFAULT_CONFIG

    def test_allocate_keeps_config(self):
        config = CoreConfig(alignment=4096)
        t = Tensor.allocate((3, 5), config=config)
        assert t.config is config
        assert alloc.is_aligned(t.data, 4096)

    def test_copy_keeps_alignment(self):
        config = CoreConfig(alignment=4096)
        t = Tensor.from_values(range(6), (2, 3), config=config)
        r = t.copy()
        assert r.config is config
        assert alloc.is_aligned(r.data, 4096)

    def test_from_torch_config(self):
        config = CoreConfig(alignment=4096)
        t = Tensor.from_torch(torch.ones(2, 2), config=config)
        assert alloc.is_aligned(t.data, 4096)

    def test_move_carries_config(self):
        config = CoreConfig(alignment=4096)
        src = Tensor.allocate((4,), config=config)
        dst = Tensor.empty()
        dst.move_from(src)
        assert dst.config is config
        assert alloc.is_aligned(dst.copy().data, 4096)

    def test_identity_config(self):
        t = identity(3, config=CoreConfig(alignment=4096))
        assert alloc.is_aligned(t.data, 4096)
        assert alloc.is_aligned(t.copy().data, 4096)

    def test_scale_kernel_range(self):
        config = CoreConfig(kernel_int_max=4)
        Tensor.from_values([1, 2, 3, 4], (4,), config=config).scale(2.0)
        t = Tensor.from_values([1, 2, 3, 4, 5], (5,), config=config)
        with pytest.raises(ValueError, match="kernel integer range"):
            t.scale(2.0)

    def test_axpy_kernel_range(self):
        config = CoreConfig(kernel_int_max=4)
        small = Tensor.allocate((2, 2), config=config)
        small.scalar_multiply_add(1j, Tensor.from_values([1, 2, 3, 4], (2, 2)))
        assert small[1, 1] == 4j
        t = Tensor.allocate((5,), config=config)
        with pytest.raises(ValueError, match="kernel integer range"):
            t.scalar_multiply_add(1, Tensor.allocate((5,)))
