import unittest
from decimal import Decimal

from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from inventory_api.core.constants import Role
from inventory_api.core.security import create_access_token, hash_password
from inventory_api.database.base import Base
from inventory_api.database.engine import build_engine
from inventory_api.database.session import get_db
from inventory_api.models import Product, User, import_all_models


def make_engine(url="sqlite:///:memory:"):
    import_all_models()
    engine = build_engine(url)
    Base.metadata.create_all(bind=engine)
    return engine


def make_session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


class DatabaseTestCase(unittest.TestCase):
    database_url = "sqlite:///:memory:"

    def setUp(self):
        self.engine = make_engine(self.database_url)
        self.Session = make_session_factory(self.engine)

    def tearDown(self):
        self.engine.dispose()

    def add_user(self, username="staff", email="staff@stockroom.io", role=Role.STAFF, password="secret123"):
        db = self.Session()
        try:
            user = User(
                username=username,
                email=email,
                password_hash=hash_password(password, rounds=1000),
                role=role,
            )
            db.add(user)
            db.commit()
            db.refresh(user)
            return user
        finally:
            db.close()

    def add_product(self, **values):
        values.setdefault("name", "Laptop")
        values.setdefault("price", Decimal("900.00"))
        values.setdefault("stock", 12)
        db = self.Session()
        try:
            product = Product(**values)
            db.add(product)
            db.commit()
            db.refresh(product)
            return product
        finally:
            db.close()

    def stock_of(self, product_id):
        db = self.Session()
        try:
            return db.get(Product, product_id).stock
        finally:
            db.close()


class ApiTestCase(DatabaseTestCase):
    def setUp(self):
        super().setUp()
        from inventory_api.main import app

        def _get_test_db():
            db = self.Session()
            try:
                yield db
            finally:
                db.close()

        self.app = app
        app.dependency_overrides[get_db] = _get_test_db
        self.client = TestClient(app)

        self.staff = self.add_user()
        self.owner = self.add_user(username="owner", email="owner@stockroom.io", role=Role.OWNER)

    def tearDown(self):
        self.app.dependency_overrides.clear()
        super().tearDown()

    @staticmethod
    def headers_for(user):
        token = create_access_token(user.id, user.username, user.role)
        return {"Authorization": f"Bearer {token}"}

    @property
    def staff_headers(self):
        return self.headers_for(self.staff)

    @property
    def owner_headers(self):
        return self.headers_for(self.owner)
