"""Tests for the feature catalog."""

from pathlib import Path

import pytest

from featurelevels._catalog import (
    CatalogError,
    Dependency,
    Feature,
    FeatureCatalog,
    load_catalog,
    version_key,
)


@pytest.fixture
def catalog() -> FeatureCatalog:
    return FeatureCatalog(
        features=[
            Feature(name="http", version="4.4.5", repository="repo-a"),
            Feature(name="http", version="4.4.10", repository="repo-b"),
            Feature(name="http", version="4.4.6", repository="repo-c"),
            Feature(name="jdbc", version="1.0.0", repository="repo-d"),
        ],
    )


class TestVersionKey:
    def test_numeric_components(self) -> None:
        assert version_key("1.10") > version_key("1.2")

    def test_textual_before_numeric(self) -> None:
        assert version_key("1.0.alpha") < version_key("1.0.0")


class TestFeatureCatalogLookup:
    def test_exact_version(self, catalog: FeatureCatalog) -> None:
        features = catalog.get_features("http", "4.4.6")
        assert [f.repository for f in features] == ["repo-c"]

    def test_any_version_returns_all(self, catalog: FeatureCatalog) -> None:
        assert len(catalog.get_features("http", "0.0.0")) == 3
        assert len(catalog.get_features("http", None)) == 3

    def test_get_feature_picks_highest_version(self, catalog: FeatureCatalog) -> None:
        feature = catalog.get_feature("http", None)
        assert feature is not None
        assert feature.version == "4.4.10"

    def test_unknown_feature(self, catalog: FeatureCatalog) -> None:
        assert catalog.get_features("nope", None) == []
        assert catalog.get_feature("nope", "1.0.0") is None

    def test_unknown_version(self, catalog: FeatureCatalog) -> None:
        assert catalog.get_feature("jdbc", "2.0.0") is None


class TestLoadCatalog:
    def test_loads_features(self, tmp_path: Path) -> None:
        path = tmp_path / "features.toml"
        path.write_text(
            """
[[feature]]
name = "root"
version = "1.0.0"
repository = "mvn:org.example/root/1.0.0/xml/features"
dependencies = [{ name = "a", version = "1.0.0" }, { name = "b" }]

[[feature]]
name = "a"
version = "1.0.0"
repository = "mvn:org.example/root/1.0.0/xml/features"
""",
        )

        catalog = load_catalog(path)

        assert [f.name for f in catalog.features] == ["root", "a"]
        root = catalog.features[0]
        assert root.dependencies == (Dependency(name="a", version="1.0.0"), Dependency(name="b", version="0.0.0"))
        assert catalog.features[1].dependencies == ()

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "features.toml"
        path.write_text("")
        assert load_catalog(path).features == []

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(CatalogError, match="not found"):
            load_catalog(tmp_path / "missing.toml")

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "features.toml"
        path.write_text("[[feature]\nname = ")
        with pytest.raises(CatalogError, match="Invalid TOML"):
            load_catalog(path)

    def test_schema_violation(self, tmp_path: Path) -> None:
        path = tmp_path / "features.toml"
        path.write_text('[[feature]]\nversion = "1.0.0"\n')
        with pytest.raises(CatalogError, match="Invalid feature catalog"):
            load_catalog(path)

    def test_example_catalog_loads(self) -> None:
        path = Path(__file__).parent.parent / "examples" / "features.toml"
        catalog = load_catalog(path)
        assert catalog.get_feature("shop-app", None) is not None
