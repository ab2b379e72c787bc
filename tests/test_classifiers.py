"""
Tests for base classifiers and the ClassifierRegistry.

Tests cover:
- Family tags and scaling requirements
- Default config values and overrides
- Training on column subsets
- Degenerate resamples
- Registry lookup, aliases and errors
"""
import numpy as np
import pytest

from heteroforest.classifiers import DiscriminantClassifier, DistanceClassifier, TreeClassifier
from heteroforest.exceptions import UnsupportedOptionError
from heteroforest.registry import ClassifierRegistry
from heteroforest.specs import Family


@pytest.fixture
def separable():
    """Two classes separated along column 1; column 0 is noise."""
    np.random.seed(42)
    n = 40
    y = np.array(["lo"] * (n // 2) + ["hi"] * (n // 2), dtype=object)
    X = np.column_stack([
        np.random.randn(n),
        np.where(y == "hi", 5.0, -5.0) + np.random.randn(n) * 0.3,
        np.random.randn(n),
    ])
    return X, y


# =============================================================================
# PROPERTIES
# =============================================================================

class TestClassifierProperties:
    """Family tags, scaling flags and defaults."""

    @pytest.mark.parametrize("cls,family,scaled", [
        (TreeClassifier, Family.TREE, False),
        (DiscriminantClassifier, Family.DISCRIMINANT, False),
        (DistanceClassifier, Family.DISTANCE, True),
    ])
    def test_family_and_scaling(self, cls, family, scaled):
        """Each classifier reports its family and scaling need."""
        model = cls()
        assert model.family is family
        assert model.requires_scaling is scaled
        assert model.is_fitted is False

    def test_default_config(self):
        """Defaults match the ensemble's learners."""
        assert TreeClassifier().config["criterion"] == "gini"
        assert DiscriminantClassifier().config["solver"] == "lsqr"
        assert DistanceClassifier().config == {"n_neighbors": 5, "metric": "euclidean"}

    def test_config_override(self):
        """Config should be overridable in constructor."""
        model = DistanceClassifier(config={"n_neighbors": 3})
        assert model.config["n_neighbors"] == 3
        assert model.config["metric"] == "euclidean"

    def test_repr(self):
        """repr shows family and fit state."""
        assert "family=tree" in repr(TreeClassifier())


# =============================================================================
# TRAINING / PREDICTION
# =============================================================================

class TestClassifierTraining:
    """Training on column subsets and prediction."""

    def test_predict_before_fit(self):
        """Predicting with an unfitted classifier raises RuntimeError."""
        with pytest.raises(RuntimeError, match="not fitted"):
            TreeClassifier().predict(np.zeros((2, 3)))

    @pytest.mark.parametrize("cls", [TreeClassifier, DiscriminantClassifier, DistanceClassifier])
    def test_learns_informative_column(self, cls, separable):
        """Trained on the informative column, each family separates the classes."""
        X, y = separable
        model = cls(config={"n_neighbors": 3} if cls is DistanceClassifier else None)
        model.fit(X, y, columns=[1], random_state=0)

        predictions = model.predict(X)
        assert predictions.dtype == object
        assert np.mean(predictions == y) > 0.95
        assert set(model.classes.tolist()) == {"lo", "hi"}

    @pytest.mark.parametrize("cls", [TreeClassifier, DiscriminantClassifier, DistanceClassifier])
    @pytest.mark.parametrize("lo,hi", [(2, 1), (False, True), (np.int64(7), np.int64(3))])
    def test_non_string_labels(self, cls, separable, lo, hi):
        """Integer and boolean labels in an object array come back unchanged."""
        X, names = separable
        y = np.array([hi if n == "hi" else lo for n in names], dtype=object)
        model = cls(config={"n_neighbors": 3} if cls is DistanceClassifier else None)
        model.fit(X, y, columns=[1], random_state=0)

        predictions = model.predict(X)
        assert predictions.dtype == object
        assert set(predictions.tolist()) <= {lo, hi}
        assert np.mean(predictions == y) > 0.95
        assert sorted(model.classes.tolist()) == sorted([lo, hi])

    def test_predict_takes_full_matrix(self, separable):
        """predict() receives all predictors and selects its own columns."""
        X, y = separable
        model = DiscriminantClassifier().fit(X, y, columns=[1, 2])
        np.testing.assert_array_equal(model.columns, [1, 2])
        with pytest.raises(ValueError, match="trained on 3"):
            model.predict(X[:, :2])

    def test_empty_prediction_batch(self, separable):
        """Zero rows in, zero labels out."""
        X, y = separable
        model = TreeClassifier().fit(X, y, random_state=0)
        assert len(model.predict(np.empty((0, 3)))) == 0

    def test_fit_validates_shapes(self):
        """Row counts of X and y must agree."""
        with pytest.raises(ValueError, match="rows"):
            TreeClassifier().fit(np.zeros((3, 2)), np.array(["a", "b"], dtype=object))

    def test_tree_max_features_capped(self, separable):
        """max_features larger than the column subset is capped."""
        X, y = separable
        model = TreeClassifier(config={"max_features": 10}).fit(X, y, columns=[0, 1], random_state=0)
        assert model.depth is not None

    def test_tree_reproducible_with_seed(self, separable):
        """Same seed, same tree."""
        X, y = separable
        a = TreeClassifier(config={"max_features": 1}).fit(X, y, random_state=3).predict(X)
        b = TreeClassifier(config={"max_features": 1}).fit(X, y, random_state=3).predict(X)
        np.testing.assert_array_equal(a, b)

    def test_discriminant_single_class_is_constant(self):
        """A single-class resample yields a constant predictor."""
        X = np.random.RandomState(0).randn(10, 2)
        y = np.array(["only"] * 10, dtype=object)
        model = DiscriminantClassifier().fit(X, y)

        assert model.is_constant
        np.testing.assert_array_equal(model.predict(X[:3]), ["only"] * 3)

    def test_distance_too_many_neighbors(self):
        """k larger than the sample size is rejected."""
        X = np.zeros((4, 2))
        y = np.array(["a", "b", "a", "b"], dtype=object)
        with pytest.raises(ValueError, match="n_neighbors"):
            DistanceClassifier(config={"n_neighbors": 5}).fit(X, y)


# =============================================================================
# REGISTRY
# =============================================================================

class TestClassifierRegistry:
    """Tests for ClassifierRegistry."""

    def test_all_families_registered(self):
        """All three families are available."""
        assert ClassifierRegistry.list_all() == ["discriminant", "distance", "tree"]

    @pytest.mark.parametrize("name,cls", [
        ("tree", TreeClassifier),
        ("decision_tree", TreeClassifier),
        ("lda", DiscriminantClassifier),
        ("knn", DistanceClassifier),
        (Family.DISTANCE, DistanceClassifier),
        ("TREE", TreeClassifier),
    ])
    def test_lookup(self, name, cls):
        """Names, aliases and Family tags resolve."""
        assert ClassifierRegistry.get(name) is cls
        assert ClassifierRegistry.is_registered(name)

    def test_create_with_config(self):
        """create() passes the config through."""
        model = ClassifierRegistry.create("knn", config={"n_neighbors": 7})
        assert isinstance(model, DistanceClassifier)
        assert model.config["n_neighbors"] == 7

    def test_unknown_family(self):
        """Unknown names raise UnsupportedOptionError."""
        with pytest.raises(UnsupportedOptionError, match="Unknown classifier family"):
            ClassifierRegistry.get("svm")

    def test_metadata_for_alias(self):
        """Aliases resolve to the canonical metadata entry."""
        meta = ClassifierRegistry.get_metadata("lda")
        assert meta["name"] == "discriminant"
        assert "lda" in meta["aliases"]

    def test_duplicate_registration(self):
        """Registering a taken name fails."""
        with pytest.raises(ValueError, match="already registered"):
            ClassifierRegistry.register("tree")(TreeClassifier)

    def test_non_classifier_rejected(self):
        """Only BaseClassifier subclasses can register."""
        with pytest.raises(TypeError, match="BaseClassifier"):
            ClassifierRegistry.register("not_a_model")(dict)
