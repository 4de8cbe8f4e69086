"""
Unit tests for the dashboard database driver.
The connection pool is patched so no PostgreSQL server is needed.
"""
import json
from unittest.mock import patch

import psycopg2.errors
import pytest

from ces_gateway.database import DashboardDB
from ces_gateway.exceptions import DashboardConflict
from ces_gateway.models import Dashboard


@pytest.fixture
def pool_cls():
    with patch('ces_gateway.database.driver.ThreadedConnectionPool') as pool_cls:
        yield pool_cls


@pytest.fixture
def cursor(pool_cls):
    """Cursor handed out by every pooled connection."""
    connection = pool_cls.return_value.getconn.return_value
    return connection.cursor.return_value


@pytest.fixture
def db(pool_cls):
    return DashboardDB(db_password='secret')


def connection_of(pool_cls):
    return pool_cls.return_value.getconn.return_value


class TestConnectionPool:

    def test_component_arguments(self, pool_cls):
        DashboardDB(db_host='db', db_name='dash', db_user='gw', db_password='pw', db_port=6432)

        pool_cls.assert_called_once_with(
            2, 10, host='db', port=6432, database='dash', user='gw', password='pw'
        )

    def test_dsn(self, pool_cls):
        DashboardDB(dsn='postgres://gw:pw@db/dash', min_conn=1, max_conn=4)

        pool_cls.assert_called_once_with(1, 4, dsn='postgres://gw:pw@db/dash')

    def test_connection_returned_to_pool(self, db, pool_cls, cursor):
        cursor.fetchall.return_value = []

        db.load_dashboards('user-1')

        pool_cls.return_value.putconn.assert_called_once_with(connection_of(pool_cls))
        cursor.close.assert_called_once()

    def test_close(self, db, pool_cls):
        pool_cls.return_value.closed = False

        db.close()

        pool_cls.return_value.closeall.assert_called_once()


class TestReads:

    def test_load_dashboards(self, db, cursor):
        cursor.fetchall.return_value = [
            {'id': 1, 'user_id': 'user-1', 'name': 'cpu', 'graphs': [{'metric': 'cpu_util'}]},
            {'id': 2, 'user_id': 'user-1', 'name': 'disk', 'graphs': None},
        ]

        dashboards = db.load_dashboards('user-1')

        assert [d.name for d in dashboards] == ['cpu', 'disk']
        assert dashboards[0].graphs == [{'metric': 'cpu_util'}]
        assert dashboards[0].user_id == 'user-1'
        sql, params = cursor.execute.call_args[0]
        assert 'WHERE user_id = %s' in sql
        assert params == ('user-1',)

    def test_load_dashboard_scoped_to_user(self, db, cursor):
        cursor.fetchone.return_value = {'id': 5, 'user_id': 'user-1', 'name': 'cpu', 'graphs': {}}

        dashboard = db.load_dashboard('user-1', 5)

        assert dashboard.id == 5
        sql, params = cursor.execute.call_args[0]
        assert 'user_id = %s' in sql
        assert params == (5, 'user-1')

    def test_load_dashboard_missing(self, db, cursor):
        cursor.fetchone.return_value = None

        assert db.load_dashboard('user-1', 5) is None

    def test_reads_do_not_commit(self, db, pool_cls, cursor):
        cursor.fetchall.return_value = []

        db.load_dashboards('user-1')

        connection_of(pool_cls).commit.assert_not_called()


class TestWrites:

    def test_create_dashboard(self, db, pool_cls, cursor):
        cursor.fetchone.return_value = (42,)
        dashboard = Dashboard(name='cpu', graphs=[{'metric': 'cpu_util'}])

        dashboard_id = db.create_dashboard('user-1', dashboard)

        assert dashboard_id == 42
        assert dashboard.id == 42
        assert dashboard.user_id == 'user-1'
        sql, params = cursor.execute.call_args[0]
        assert 'INSERT INTO dashboard' in sql
        assert params[0:2] == ('user-1', 'cpu')
        assert json.loads(params[2]) == [{'metric': 'cpu_util'}]
        connection_of(pool_cls).commit.assert_called_once()

    def test_create_duplicate_name(self, db, pool_cls, cursor):
        cursor.execute.side_effect = psycopg2.errors.UniqueViolation()
        dashboard = Dashboard(name='cpu')

        with pytest.raises(DashboardConflict):
            db.create_dashboard('user-1', dashboard)

        assert dashboard.id is None
        connection_of(pool_cls).rollback.assert_called_once()
        connection_of(pool_cls).commit.assert_not_called()

    @pytest.mark.parametrize('rowcount,expected', [(1, True), (0, False)])
    def test_update_dashboard(self, db, cursor, rowcount, expected):
        cursor.rowcount = rowcount

        updated = db.update_dashboard('user-1', Dashboard(id=3, name='renamed', graphs={'x': 1}))

        assert updated is expected
        sql, params = cursor.execute.call_args[0]
        assert params[0] == 'renamed'
        assert json.loads(params[1]) == {'x': 1}
        assert params[2:] == (3, 'user-1')

    def test_update_duplicate_name(self, db, cursor):
        cursor.execute.side_effect = psycopg2.errors.UniqueViolation()

        with pytest.raises(DashboardConflict):
            db.update_dashboard('user-1', Dashboard(id=3, name='taken'))

    @pytest.mark.parametrize('rowcount,expected', [(1, True), (0, False)])
    def test_delete_dashboard(self, db, cursor, rowcount, expected):
        cursor.rowcount = rowcount

        assert db.delete_dashboard('user-1', 9) is expected
        assert cursor.execute.call_args[0][1] == (9, 'user-1')

    def test_other_errors_propagate(self, db, pool_cls, cursor):
        cursor.execute.side_effect = psycopg2.OperationalError('server closed the connection')

        with pytest.raises(psycopg2.OperationalError):
            db.delete_dashboard('user-1', 9)

        connection_of(pool_cls).rollback.assert_called_once()


class TestMigrate:

    def test_applies_schema(self, db, pool_cls, cursor):
        db.migrate()

        sql = cursor.execute.call_args[0][0]
        assert 'CREATE TABLE IF NOT EXISTS dashboard' in sql
        assert 'UNIQUE' in sql
        connection_of(pool_cls).commit.assert_called_once()
