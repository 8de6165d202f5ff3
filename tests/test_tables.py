"""Tests for the versioned data tables"""

import shutil

import pytest
import yaml

from lp_variants.core.config import DEFAULT_TABLES_DIR
from lp_variants.core.tables import (
    CLASSIFICATION_FILE,
    SCORING_FILE,
    load_tables,
    load_yaml,
)
from lp_variants.models.errors import ApplicationError, ErrorCode


class TestPackagedTables:
    def test_every_file_declares_a_version(self):
        for path in DEFAULT_TABLES_DIR.glob("*.yaml"):
            data = load_yaml(path)
            assert data.get("version"), f"{path.name} has no version"

    def test_tables_load_and_cache(self):
        first = load_tables()
        second = load_tables(DEFAULT_TABLES_DIR)

        assert first is second
        assert first.scoring.fallback_score == 30

    def test_scoring_weights(self, tables):
        weights = tables.scoring.weights

        assert weights.business_alignment == 0.30
        assert weights.industry_fit == 0.25
        assert weights.design_quality == 0.25
        assert weights.content_quality == 0.20

    def test_all_focuses_have_copy(self, tables):
        assert set(tables.focus.focuses) == {"modern-clean", "conversion-optimized", "content-rich"}


class TestInvalidTables:
    @pytest.fixture
    def tables_copy(self, tmp_path):
        target = tmp_path / "tables"
        shutil.copytree(DEFAULT_TABLES_DIR, target)
        return target

    def test_missing_file(self, tables_copy):
        (tables_copy / SCORING_FILE).unlink()

        with pytest.raises(ApplicationError) as exc_info:
            load_tables(tables_copy)

        assert exc_info.value.code == ErrorCode.TABLES_INVALID

    def test_missing_version(self, tables_copy):
        path = tables_copy / CLASSIFICATION_FILE
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        del data["version"]
        path.write_text(yaml.safe_dump(data, allow_unicode=True), encoding="utf-8")

        with pytest.raises(ApplicationError) as exc_info:
            load_tables(tables_copy)

        assert "classification.yaml" in exc_info.value.message

    def test_weights_must_sum_to_one(self, tables_copy):
        path = tables_copy / SCORING_FILE
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        data["weights"]["content_quality"] = 0.5
        path.write_text(yaml.safe_dump(data), encoding="utf-8")

        with pytest.raises(ApplicationError):
            load_tables(tables_copy)
