import pytest

from ragadmin.records import (
    FAQ,
    Dataset,
    FAQCategory,
    FAQManualMedia,
    ManualMaterial,
    RagFile,
)


def test_dataset_round_trip():
    original = Dataset(id=7, corp_id=42, name="kb", collection_name="coll_a", is_default=True)
    assert Dataset.from_row(original.to_row()) == original


def test_faq_round_trip():
    original = FAQ(id=3, dataset_id=9, question="q", answer="a", embedding_id="emb-1", enabled=True)
    restored = FAQ.from_row(original.to_row())
    assert restored == original


def test_from_row_ignores_unknown_columns():
    record = FAQCategory.from_row({"id": 5, "name": "billing", "bogus": "x"})
    assert record.id == 5
    assert record.name == "billing"


def test_from_row_coerces_integer_booleans():
    faq = FAQ.from_row({"enabled": 1, "has_manual_media": 0})
    assert faq.enabled is True
    assert faq.has_manual_media is False


def test_columns_match_row_keys():
    assert tuple(Dataset().to_row()) == Dataset.columns()
    assert tuple(FAQ().to_row()) == FAQ.columns()
    assert tuple(FAQCategory().to_row()) == FAQCategory.columns()
    assert tuple(RagFile().to_row()) == RagFile.columns()
    assert tuple(FAQManualMedia().to_row()) == FAQManualMedia.columns()
    assert tuple(ManualMaterial().to_row()) == ManualMaterial.columns()


def test_dataset_has_embedding_provider_column():
    assert "embedding_model_provider" in Dataset.columns()


def test_file_table_name():
    assert RagFile.from_row({"id": 1}).table == "rag_files"


def test_tables_are_distinct():
    tables = {
        Dataset().table,
        FAQ().table,
        FAQCategory().table,
        RagFile().table,
        FAQManualMedia().table,
        ManualMaterial().table,
    }
    assert len(tables) == 6


@pytest.mark.parametrize(
    "columns",
    [
        pytest.param(lambda: Dataset.columns(), id="dataset"),
        pytest.param(lambda: FAQ.columns(), id="faq"),
        pytest.param(lambda: FAQCategory.columns(), id="faq_category"),
        pytest.param(lambda: RagFile.columns(), id="file"),
        pytest.param(lambda: FAQManualMedia.columns(), id="manual_media"),
        pytest.param(lambda: ManualMaterial.columns(), id="manual_material"),
    ],
)
def test_every_record_has_id_column(columns):
    assert Dataset.columns()[0] == "id"
    assert columns()[0] == "id"