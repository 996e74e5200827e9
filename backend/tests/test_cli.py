# Overview: Pytest coverage for the bootstrap and user maintenance CLI commands.

"""
CLI tests.

seed-demo must be safe to run repeatedly; user commands report failures
with a FAIL line instead of a traceback.
"""

import pytest

from mall.models import Inventory, Product, Promotion, Role, Store, StoreStaff, User


@pytest.fixture
def runner(app, db_session):
    return app.test_cli_runner()


class TestSystemCommands:

    def test_init_roles(self, runner, db_session):
        result = runner.invoke(args=["system", "init-roles"])
        assert result.exit_code == 0
        assert "PASS Roles: ADMIN, TENANT, CUSTOMER, STAFF" in result.output
        assert db_session.query(Role).count() == 4

    def test_seed_demo_is_idempotent(self, runner, db_session):
        for _ in range(2):
            result = runner.invoke(args=["system", "seed-demo"])
            assert result.exit_code == 0, result.output
            assert "PASS Seed complete." in result.output

        stores = db_session.query(Store).filter_by(slug="jubi").all()
        assert len(stores) == 1
        assert stores[0].status == "ACTIVE"

        links = db_session.query(StoreStaff).filter_by(store_id=stores[0].id).all()
        assert [link.role for link in links] == ["SALES"]

        promos = db_session.query(Promotion).filter_by(store_id=stores[0].id).all()
        assert [p.status for p in promos] == ["ACTIVE"]

        assert db_session.query(User).count() == 4
        assert db_session.query(Product).count() == 1
        assert db_session.query(Inventory).one().stock_qty == 5

    def test_seeded_users_can_log_in(self, runner, client):
        runner.invoke(args=["system", "seed-demo"])
        resp = client.post("/api/auth/login", json={"email": "admin@mall.com", "password": "123456"})
        assert resp.status_code == 200
        assert "ADMIN" in resp.get_json()["user"]["roles"]


class TestUserCommands:

    def test_create_user(self, runner, db_session, setup_roles):
        result = runner.invoke(args=[
            "users", "create",
            "--name", "Jane", "--email", "jane@mall.test", "--password", "secret123", "--role", "TENANT",
        ])
        assert result.exit_code == 0
        assert "PASS Created user" in result.output
        assert db_session.query(User).filter_by(email="jane@mall.test").one().role_codes == ["TENANT"]

    def test_create_duplicate_user(self, runner, customer):
        result = runner.invoke(args=[
            "users", "create",
            "--name", "Again", "--email", customer.email, "--password", "secret123", "--role", "CUSTOMER",
        ])
        assert "FAIL Email already exists" in result.output

    def test_grant_role(self, runner, db_session, customer):
        result = runner.invoke(args=["users", "grant-role", customer.email, "STAFF"])
        assert result.exit_code == 0
        db_session.refresh(customer)
        assert "STAFF" in customer.role_codes

    def test_grant_role_unknown_email(self, runner, db_session, setup_roles):
        result = runner.invoke(args=["users", "grant-role", "nobody@mall.test", "ADMIN"])
        assert result.exit_code == 0
        assert "FAIL User not found: nobody@mall.test" in result.output
        assert db_session.query(User).count() == 0
