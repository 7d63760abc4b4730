"""Tests for tree aggregation and the local backend."""

import operator

import jax.numpy as jnp
import numpy as np
import pytest

from jaxglm import LocalBackend, make_example, tree_aggregate
from jaxglm.distributed import DistributedDataset, PartialSums, add_partials


class TestTreeAggregate:
    @pytest.mark.parametrize("num_partials", [1, 2, 3, 7, 16, 100])
    @pytest.mark.parametrize("depth", [1, 2, 3, 5])
    def test_integer_sum_exact(self, num_partials, depth):
        """With exact arithmetic every depth gives the same total."""
        partials = list(range(num_partials))
        total = tree_aggregate(partials, operator.add, 0, depth)
        assert total == sum(partials)

    def test_schedule_combines_every_partial_once(self):
        """Concatenation shows each partial appears exactly once at any depth."""
        partials = [[i] for i in range(37)]
        for depth in (1, 2, 3, 4):
            combined = tree_aggregate(partials, operator.add, [], depth)
            assert sorted(combined) == list(range(37))

    def test_empty_returns_zero(self):
        """No partials yields the zero value."""
        assert tree_aggregate([], operator.add, 0, 2) == 0

    def test_empty_without_zero(self):
        """No partials and no zero is an error."""
        with pytest.raises(ValueError):
            tree_aggregate([], operator.add, None, 2)

    @pytest.mark.parametrize("depth", [0, -1])
    def test_invalid_depth(self, depth):
        """Depth must be at least 1."""
        with pytest.raises(ValueError):
            tree_aggregate([1, 2], operator.add, 0, depth)

    def test_float_sums_agree_across_depths(self):
        """Float results differ between depths only by rounding."""
        partials = [jnp.asarray(0.1 * i + 1e-3) for i in range(64)]
        depth1 = tree_aggregate(partials, operator.add, jnp.asarray(0.0), 1)
        depth4 = tree_aggregate(partials, operator.add, jnp.asarray(0.0), 4)
        assert jnp.isclose(depth1, depth4, rtol=64 * jnp.finfo(jnp.float64).eps)


class TestPartialSums:
    def test_add_skips_unused_fields(self):
        """Fields left as None stay None through the combine."""
        a = PartialSums(count=jnp.asarray(2), value=jnp.asarray(1.5))
        b = PartialSums(count=jnp.asarray(3), value=jnp.asarray(2.0))
        total = add_partials(a, b)

        assert int(total.count) == 5
        assert float(total.value) == 3.5
        assert total.gradient is None
        assert total.hessian_vector is None

    def test_add_vectors(self):
        """Gradient fields add element-wise."""
        a = PartialSums(count=jnp.asarray(1), gradient=jnp.array([1.0, 2.0]))
        b = PartialSums(count=jnp.asarray(1), gradient=jnp.array([0.5, -2.0]))
        assert jnp.allclose(add_partials(a, b).gradient, jnp.array([1.5, 0.0]))


class TestLocalBackend:
    def test_round_robin_partition(self):
        """Example i lands in partition i % P."""
        backend = LocalBackend()
        parts = backend.partition(list(range(10)), 3)
        assert parts == [[0, 3, 6, 9], [1, 4, 7], [2, 5, 8]]

    def test_more_partitions_than_examples(self):
        """Extra partitions are empty, not an error."""
        parts = LocalBackend().partition([1, 2], 4)
        assert parts == [[1], [2], [], []]

    def test_invalid_partition_count(self):
        """Partition count must be positive."""
        with pytest.raises(ValueError):
            LocalBackend().partition([1], 0)

    def test_threaded_map_keeps_order(self):
        """A thread pool still returns results in partition order."""
        backend = LocalBackend(max_workers=4)
        results = backend.map_partitions(lambda i, p: (i, p * 2), list(range(20)))
        assert results == [(i, i * 2) for i in range(20)]

    def test_broadcast_copies(self):
        """Broadcast values do not alias the caller's buffer."""
        source = np.array([1.0, 2.0])
        shared = LocalBackend().broadcast(source)
        source[0] = 50.0
        assert float(shared[0]) == 1.0
        assert shared.dtype == jnp.float64

    def test_invalid_workers(self):
        """max_workers must be positive when given."""
        with pytest.raises(ValueError):
            LocalBackend(max_workers=0)


class TestDistributedDataset:
    def test_parallelize(self):
        """Examples are split into stacked partition blocks."""
        examples = [make_example(1.0, [float(i), 0.0]) for i in range(9)]
        dataset = DistributedDataset.parallelize(examples, 2, num_partitions=4)

        assert len(dataset) == 9
        assert dataset.num_partitions == 4
        assert dataset.partition_sizes == (3, 2, 2, 2)
        assert dataset.partitions[0].features.shape == (3, 2)

    def test_repartition_keeps_examples(self):
        """Repartitioning changes the layout, not the data."""
        examples = [make_example(1.0, [float(i)]) for i in range(5)]
        dataset = DistributedDataset.parallelize(examples, 1, num_partitions=2)
        again = dataset.repartition(5)

        assert again.num_partitions == 5
        assert all(a is b for a, b in zip(again.examples, dataset.examples))
        assert again.backend is dataset.backend
