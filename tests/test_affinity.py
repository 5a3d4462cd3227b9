"""End-to-end tests for affinity_propagation and cluster."""

from unittest.mock import patch

import numpy as np
import pytest
from sklearn.cluster import AffinityPropagation

from apengine import AffinityPropagationConfig, ConfigurationError, affinity_propagation, cluster
from apengine.clustering.solver import SolverOutcome
from apengine.metrics import labels_from_clusters, partition_agreement


def _assert_valid_partition(result, n_items):
    labels = labels_from_clusters(result.clusters, n_items)
    np.testing.assert_array_equal(labels, result.labels)
    assert sorted(set(result.labels.tolist())) == list(range(result.n_clusters))
    assert result.n_clusters <= n_items


# ---------------------------------------------------------------------------
# Clustering behaviour
# ---------------------------------------------------------------------------

class TestClustering:

    def test_two_separated_groups(self, two_groups):
        result = affinity_propagation(two_groups, metric="euclidean")
        assert result.clusters == ((0, 1, 2), (3, 4, 5))
        assert result.converged is True
        assert result.degenerate is False
        assert result.preference == pytest.approx(-91.5)
        assert result.exemplars[0] in (0, 1, 2)
        assert result.exemplars[1] in (3, 4, 5)

    def test_two_groups_regardless_of_item_order(self, two_groups):
        order = np.array([3, 0, 4, 1, 5, 2])
        result = affinity_propagation(two_groups[order], metric="euclidean")
        assert sorted(result.as_lists()) == [[0, 2, 4], [1, 3, 5]]

    def test_agrees_with_scikit_learn(self, two_groups):
        ours = affinity_propagation(two_groups)
        reference = AffinityPropagation(random_state=0).fit(two_groups)
        scores = partition_agreement(ours.labels, reference.labels_)
        assert scores["ARI"] == pytest.approx(1.0)

    def test_identical_vectors_collapse_to_one_cluster(self):
        vectors = [[1.0, 1.0]] * 5
        result = affinity_propagation(vectors, metric="cosine")
        assert result.clusters == ((0, 1, 2, 3, 4),)
        assert result.degenerate is True

    def test_low_preference_collapses_precomputed(self, flat_similarity):
        result = affinity_propagation(flat_similarity, metric="precomputed", preference=-100.0)
        assert result.n_clusters == 1
        assert result.clusters == ((0, 1, 2),)

    def test_high_preference_splits_precomputed(self, flat_similarity):
        result = affinity_propagation(flat_similarity, metric="precomputed", preference=10.0)
        assert result.n_clusters == 3
        assert result.clusters == ((0,), (1,), (2,))
        np.testing.assert_array_equal(result.exemplars, [0, 1, 2])

    def test_precomputed_input_is_not_mutated(self, flat_similarity):
        before = flat_similarity.copy()
        affinity_propagation(flat_similarity, metric="precomputed", preference=10.0)
        np.testing.assert_array_equal(flat_similarity, before)

    def test_partition_covers_every_item(self, random_vectors):
        result = affinity_propagation(random_vectors)
        _assert_valid_partition(result, len(random_vectors))

    def test_deterministic(self, random_vectors):
        first = affinity_propagation(random_vectors, damping=0.7)
        second = affinity_propagation(random_vectors, damping=0.7)
        assert first.clusters == second.clusters
        assert first.n_iter == second.n_iter
        np.testing.assert_array_equal(first.exemplars, second.exemplars)

    def test_budget_below_window_still_returns_clustering(self, two_groups):
        result = affinity_propagation(two_groups, max_iterations=3, convergence_window=15)
        assert result.converged is False
        assert result.n_iter == 3
        _assert_valid_partition(result, len(two_groups))

    def test_cluster_accepts_config(self, two_groups):
        config = AffinityPropagationConfig(metric="euclidean", damping=0.6)
        result = cluster(two_groups, config)
        assert result.clusters == ((0, 1, 2), (3, 4, 5))

    def test_exemplar_vectors(self, two_groups):
        result = affinity_propagation(two_groups)
        vectors = result.exemplar_vectors(two_groups)
        assert vectors.shape == (2, 2)


# ---------------------------------------------------------------------------
# Edge cases
# ---------------------------------------------------------------------------

class TestEdgeCases:

    def test_empty_input_returns_no_clusters(self):
        result = affinity_propagation([])
        assert result.clusters == ()
        assert result.n_clusters == 0
        assert result.labels.size == 0

    def test_empty_array_input(self):
        result = affinity_propagation(np.empty((0, 3)), metric="cosine")
        assert result.clusters == ()

    def test_zero_length_vectors_are_not_dropped(self):
        result = affinity_propagation([[], [], []])
        assert result.clusters == ((0, 1, 2),)
        assert result.degenerate is True

    def test_empty_non_square_precomputed_rejected(self):
        with pytest.raises(ConfigurationError, match="square"):
            affinity_propagation(np.zeros((3, 0)), metric="precomputed")

    def test_single_item(self):
        result = affinity_propagation([[0.3, 0.7]])
        assert result.clusters == ((0,),)
        assert result.n_iter == 0
        assert result.converged is True

    def test_single_item_precomputed(self):
        result = affinity_propagation([[1.0]], metric="precomputed")
        assert result.as_lists() == [[0]]

    def test_forced_empty_exemplar_set_uses_fallback(self, two_groups):
        outcome = SolverOutcome(exemplars=np.array([], dtype=int), n_iter=7, converged=True)
        with patch("apengine.clustering.affinity.run_message_passing", return_value=outcome):
            result = affinity_propagation(two_groups)
        assert result.clusters == ((0, 1, 2, 3, 4, 5),)
        assert result.degenerate is True
        assert result.n_iter == 7
        with pytest.raises(AttributeError):
            result.exemplar_vectors(two_groups)


# ---------------------------------------------------------------------------
# Configuration errors
# ---------------------------------------------------------------------------

class TestConfigurationErrors:

    @pytest.mark.parametrize("damping", [0.49, 1.0])
    def test_invalid_damping_rejected_before_computation(self, two_groups, damping):
        with patch("apengine.clustering.affinity.build_similarity_matrix") as build:
            with pytest.raises(ConfigurationError):
                affinity_propagation(two_groups, damping=damping)
        build.assert_not_called()

    def test_mismatched_dimensions(self):
        with pytest.raises(ConfigurationError, match="same dimension"):
            affinity_propagation([[1.0, 2.0], [1.0, 2.0, 3.0]])

    def test_non_square_precomputed(self):
        with pytest.raises(ConfigurationError, match="square"):
            affinity_propagation(np.zeros((2, 3)), metric="precomputed")

    def test_unknown_metric(self, two_groups):
        with pytest.raises(ConfigurationError, match="metric"):
            affinity_propagation(two_groups, metric="manhattan")

    def test_is_value_error(self, two_groups):
        with pytest.raises(ValueError):
            affinity_propagation(two_groups, convergence_window=0)

    def test_fractional_budget_rejected_before_iterating(self):
        with patch("apengine.clustering.affinity.run_message_passing") as solver:
            with pytest.raises(ConfigurationError, match="max_iterations"):
                affinity_propagation([[0.0], [1.0], [5.0]], max_iterations=2.5)
        solver.assert_not_called()
