"""ORM models and persistence guards."""

from qrwallet.db import guards  # noqa: F401  registers the immutability listeners
