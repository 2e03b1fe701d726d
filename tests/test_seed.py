"""
Tests for the migration + seed script
"""
import pytest

from carebot.store.database import Database
from carebot.store.repository import CustomerRepository
from carebot.store.seed import main


def _customer_names(path):
    with Database(path) as database:
        return [c.name for c in CustomerRepository(database).list_customers()]


def _ids(path):
    with Database(path) as database:
        return {c.id for c in CustomerRepository(database).list_customers()}


def test_seed_creates_demo_customers(tmp_path):
    path = tmp_path / "seed.db"

    main(["--db", str(path)])

    assert _customer_names(path) == ["John Doe", "Jane Smith"]


def test_second_run_without_reset_exits_cleanly(tmp_path, caplog):
    path = tmp_path / "seed.db"
    main(["--db", str(path)])

    with pytest.raises(SystemExit) as exc_info:
        main(["--db", str(path)])

    assert exc_info.value.code == 1
    assert "--reset" in caplog.text
    assert _customer_names(path) == ["John Doe", "Jane Smith"]


def test_reset_recreates_demo_customers(tmp_path):
    path = tmp_path / "seed.db"
    main(["--db", str(path)])
    first_ids = _ids(path)

    main(["--db", str(path), "--reset"])

    assert _customer_names(path) == ["John Doe", "Jane Smith"]
    assert _ids(path).isdisjoint(first_ids)


def test_reset_drops_other_rows(tmp_path):
    path = tmp_path / "seed.db"
    with Database(path) as database:
        CustomerRepository(database).create_customer("Walk In", "0611111111")

    with Database(path) as database:
        database.reset()
        assert CustomerRepository(database).list_customers() == []

