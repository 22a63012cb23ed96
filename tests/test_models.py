"""Tests for the schema emitted by create_all() per dialect."""

from sqlalchemy import create_mock_engine

from bossofclean.models import Base


def emitted_ddl(url):
    statements = []

    def executor(sql, *multiparams, **params):
        statements.append(str(sql.compile(dialect=engine.dialect)))

    engine = create_mock_engine(url, executor)
    Base.metadata.create_all(engine, checkfirst=False)
    return "\n".join(statements)


class TestBookingOverlapConstraint:
    def test_postgres_schema_has_exclusion_constraint(self):
        ddl = emitted_ddl("postgresql+psycopg2://")
        assert "CREATE EXTENSION IF NOT EXISTS btree_gist" in ddl
        assert "ADD CONSTRAINT bookings_no_overlap_per_cleaner" in ddl
        assert "WHERE (status = 'confirmed')" in ddl
        assert ddl.index("CREATE TABLE bookings") < ddl.index("bookings_no_overlap_per_cleaner")

    def test_sqlite_schema_skips_it(self):
        ddl = emitted_ddl("sqlite://")
        assert "CREATE TABLE bookings" in ddl
        assert "bookings_no_overlap_per_cleaner" not in ddl
        assert "btree_gist" not in ddl
