"""
Service-layer operations for administrator accounts and the product catalogue.

All public methods are wrapped with `@transactional`.
"""

import logging

from sqlalchemy.orm import Session

from tyrebot.crypt.encrypt_decrypt import EncryptionDec
from tyrebot.database.config.connection_engine import Database
from tyrebot.database.daos.admin_user_dao import AdminUserDao
from tyrebot.database.daos.product_dao import ProductDao
from tyrebot.database.entities.admin_user import AdminUser
from tyrebot.database.entities.products import Product
from tyrebot.database.helpers.transactionManagement import transactional

logger = logging.getLogger(__name__)


class AdminStore:
    """
    Administrator authentication and catalogue management.

    Parameters
    ----------
    database : Database
        Owner of the engine and session factory.
    """

    def __init__(self, database: Database):
        self.database = database
        self.admin_dao = AdminUserDao()
        self.product_dao = ProductDao()
        self.enc = EncryptionDec()

    @transactional
    def create_admin(
        self,
        username: str,
        password: str,
        full_name: str | None = None,
        role: str = "admin",
        session: Session = None,
    ) -> dict:
        """
        Create an administrator account.

        Raises
        ------
        ValueError
            If the password does not satisfy the complexity policy.
        """
        if not self.enc.is_valid_password(password):
            raise ValueError(
                "Password is invalid. Must contain at least 1 lowercase, 1 uppercase, 1 digit, and 1 special character."
            )
        admin = AdminUser(
            username=username,
            password_hash=self.enc.hash_password(password),
            full_name=full_name,
            role=role,
        )
        self.admin_dao.createAdmin(session, admin)
        return self._profile(admin)

    @transactional
    def authenticate(self, username: str, password: str, session: Session = None) -> dict | None:
        """
        Check credentials of an active administrator.

        Returns
        -------
        dict | None
            The admin profile on success (and ``last_login`` is stamped), otherwise None.
        """
        admin = self.admin_dao.fetchActiveAdmin(session, username)
        if admin is None or not self.enc.check_passwords(password, admin.password_hash):
            logger.info("Rejected admin login for %r", username)
            return None
        self.admin_dao.updateLastLogin(session, admin)
        return self._profile(admin)

    @staticmethod
    def _profile(admin: AdminUser) -> dict:
        return {
            "id": admin.id,
            "username": admin.username,
            "fullName": admin.full_name,
            "role": admin.role,
        }

    @transactional
    def list_products(self, session: Session = None) -> list[Product]:
        return self.product_dao.fetchActiveProducts(session)

    @transactional
    def add_product(self, details: dict, session: Session = None) -> Product:
        return self.product_dao.createProduct(session, Product(**details))
