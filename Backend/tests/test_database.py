import os
import tempfile
import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.exc import OperationalError

from employee_server.main import app
from employee_server.database import get_db, init_db, check_connection

from db_helpers import make_test_engine, make_sessionmaker, override_get_db


def unreachable_engine():
    # sqlite cannot open a file inside a directory that does not exist
    missing = os.path.join(tempfile.gettempdir(), "no-such-dir-employee-server", "db.sqlite")
    return create_engine(f"sqlite:///{missing}")


class InitDbTests(unittest.TestCase):
    def setUp(self):
        self.engine = make_test_engine(create_tables=False)

    def tearDown(self):
        self.engine.dispose()

    def columns(self):
        return {c["name"]: c for c in inspect(self.engine).get_columns("employees")}

    def test_creates_employees_table(self):
        init_db(bind=self.engine)

        cols = self.columns()
        self.assertEqual(set(cols), {
            "id", "name", "role", "gender", "dob", "location", "email", "phone",
            "join_date", "experience", "skills", "achievement", "profile_image",
        })
        self.assertTrue(cols["profile_image"]["nullable"])
        self.assertFalse(cols["name"]["nullable"])
        self.assertEqual(inspect(self.engine).get_pk_constraint("employees")["constrained_columns"], ["id"])

    def test_does_not_create_users(self):
        init_db(bind=self.engine)
        self.assertFalse(inspect(self.engine).has_table("users"))

    def test_adds_missing_profile_image_column(self):
        with self.engine.begin() as conn:
            conn.execute(text(
                "CREATE TABLE employees (id VARCHAR(7) PRIMARY KEY, name VARCHAR(50) NOT NULL)"
            ))
            conn.execute(text("INSERT INTO employees (id, name) VALUES ('ABC1234', 'Jane')"))

        init_db(bind=self.engine)

        self.assertIn("profile_image", self.columns())
        with self.engine.connect() as conn:
            row = conn.execute(text("SELECT name, profile_image FROM employees")).one()
        self.assertEqual(tuple(row), ("Jane", None))

    def test_is_idempotent(self):
        init_db(bind=self.engine)
        init_db(bind=self.engine)
        self.assertIn("profile_image", self.columns())

    def test_database_error_is_fatal(self):
        with self.assertLogs("employee_server.database", level="ERROR"):
            with self.assertRaises(SystemExit) as ctx:
                init_db(bind=unreachable_engine())
        self.assertEqual(ctx.exception.code, 1)


class CheckConnectionTests(unittest.TestCase):

    def test_reachable_database(self):
        engine = make_test_engine(create_tables=False)
        try:
            check_connection(bind=engine)
        finally:
            engine.dispose()

    def test_unreachable_database_is_fatal(self):
        with self.assertLogs("employee_server.database", level="ERROR") as logs:
            with self.assertRaises(SystemExit):
                check_connection(bind=unreachable_engine())
        self.assertIn("Database connection error", logs.output[0])


class StartupTests(unittest.TestCase):

    @patch("employee_server.main.init_db")
    @patch("employee_server.main.check_connection")
    def test_startup_checks_connection_then_bootstraps(self, mock_check, mock_init):
        calls = []
        mock_check.side_effect = lambda: calls.append("check_connection")
        mock_init.side_effect = lambda: calls.append("init_db")

        with TestClient(app):
            self.assertEqual(calls, ["check_connection", "init_db"])

        mock_check.assert_called_once_with()
        mock_init.assert_called_once_with()


class HealthCheckTests(unittest.TestCase):
    def setUp(self):
        self.engine = make_test_engine()
        app.dependency_overrides[get_db] = override_get_db(make_sessionmaker(self.engine))
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.pop(get_db, None)
        self.engine.dispose()

    def test_health_ok(self):
        resp = self.client.get("/api/health")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"status": "Database connection OK"})

    @patch("employee_server.main.ping")
    def test_health_failed(self, mock_ping):
        mock_ping.side_effect = OperationalError("SELECT 1", {}, Exception("connection refused"))
        resp = self.client.get("/api/health")
        self.assertEqual(resp.status_code, 500)
        body = resp.json()
        self.assertEqual(body["error"], "Database connection failed")
        self.assertIn("connection refused", body["details"])


if __name__ == "__main__":
    unittest.main()
