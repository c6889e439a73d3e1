import sqlite3

import pytest

from ragadmin.database import Database, NotFoundError, Page
from ragadmin.records import FAQ, Dataset


@pytest.fixture
def db():
    database = Database()
    yield database
    database.close()


def test_insert_assigns_id_and_round_trips(db):
    dataset = Dataset(corp_id=7, name="kb", is_public=True, description="faq base")
    db.insert(dataset)
    assert dataset.id > 0
    assert db.first(Dataset, {"id": dataset.id}) == dataset


def test_bool_columns_come_back_as_bool(db):
    faq = db.insert(FAQ(question="q", enabled=True))
    got = db.first(FAQ, {"id": faq.id})
    assert got.enabled is True
    assert got.has_manual_media is False


def test_first_raises_not_found(db):
    with pytest.raises(NotFoundError):
        db.first(Dataset, {"id": 1})


def test_update_and_delete_report_rows(db):
    db.insert(Dataset(corp_id=1, name="a"))
    db.insert(Dataset(corp_id=1, name="b"))
    db.insert(Dataset(corp_id=2, name="c"))
    assert db.update(Dataset, {"corp_id": 1}, {"description": "x"}) == 2
    assert [d.description for d in db.select(Dataset, {"corp_id": 1})] == ["x", "x"]
    assert db.delete(Dataset, {"corp_id": 1}) == 2
    assert [d.name for d in db.select(Dataset)] == ["c"]


def test_unknown_columns_are_rejected(db):
    with pytest.raises(ValueError):
        db.select(Dataset, {"nope": 1})
    with pytest.raises(ValueError):
        db.update(Dataset, None, {"nope": 1})


def test_raw_conditions(db):
    db.insert(Dataset(name="abc"))
    db.insert(Dataset(name="xyz"))
    found = db.select(Dataset, raw=[('"name" LIKE ?', ("%b%",))])
    assert [d.name for d in found] == ["abc"]


def test_transaction_rolls_back_on_error(db):
    with pytest.raises(RuntimeError):
        with db.transaction():
            db.insert(Dataset(name="a"))
            raise RuntimeError("boom")
    assert db.count(Dataset) == 0


def test_transaction_commits(db):
    with db.transaction():
        db.insert(Dataset(name="a"))
        db.insert(Dataset(name="b"))
    assert [d.name for d in db.select(Dataset)] == ["a", "b"]


def test_nested_transaction_rolls_back_inner_only(db):
    with db.transaction():
        db.insert(Dataset(name="outer"))
        with pytest.raises(KeyError):
            with db.transaction():
                db.insert(Dataset(name="inner"))
                raise KeyError("inner")
    assert [d.name for d in db.select(Dataset)] == ["outer"]


def test_insert_many_assigns_ids(db):
    records = db.insert_many([FAQ(question="a"), FAQ(question="b")])
    assert len({r.id for r in records}) == 2
    assert [f.question for f in db.select(FAQ)] == ["a", "b"]


def test_paginate_splits_results(db):
    for i in range(5):
        db.insert(Dataset(name=f"d{i}", created_at=i))
    page = db.paginate(Dataset, order_by=[("created_at", True)], page=2, page_size=2)
    assert isinstance(page, Page)
    assert page.total == 5
    assert [d.created_at for d in page.items] == [2, 1]
    assert page.pages == 3


def test_paginate_rejects_bad_page(db):
    with pytest.raises(ValueError):
        db.paginate(Dataset, page=0)


def test_data_persists_in_file(tmp_path):
    path = tmp_path / "store.db"
    first = Database(path)
    dataset = first.insert(Dataset(corp_id=3, name="kept"))
    first.close()
    second = Database(path)
    try:
        assert second.first(Dataset, {"id": dataset.id}) == dataset
    finally:
        second.close()


def test_closed_database_refuses_queries():
    database = Database()
    database.close()
    with pytest.raises(sqlite3.ProgrammingError):
        database.count(Dataset)