"""
Local key-value settings and the SMS sender allow-list built from them.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gestor_financeiro.config import settings
from gestor_financeiro.exceptions import StoreError
from gestor_financeiro.models.app_setting import AppSetting
from gestor_financeiro.text import digits_only

logger = logging.getLogger(__name__)

SMS_SENDER_NUMBER_KEY = "sms_sender_number"


class SettingsStore(ABC):
    """Read/write port to local key-value storage."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def set(self, key: str, value: Optional[str]) -> None:
        """Store ``value``; a blank or None value removes the key."""
        pass


class DatabaseSettingsStore(SettingsStore):
    """Settings kept in the ``configuracoes`` table."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, key: str) -> Optional[str]:
        try:
            row = self.db.query(AppSetting).filter(AppSetting.key == key).first()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to read setting {key}: {e}")
            raise StoreError(f"Failed to read setting {key}") from e
        return row.value if row else None

    def set(self, key: str, value: Optional[str]) -> None:
        row = self.db.query(AppSetting).filter(AppSetting.key == key).first()
        if value is None or not value.strip():
            if row:
                self.db.delete(row)
        elif row:
            row.value = value.strip()
        else:
            self.db.add(AppSetting(key=key, value=value.strip()))

        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError(f"Failed to save setting {key}") from e


def get_sender_number(store: SettingsStore) -> Optional[str]:
    """Persisted sender number, falling back to the configured seed value."""
    value = store.get(SMS_SENDER_NUMBER_KEY)
    if value is None:
        value = settings.sms_sender_number
    return value if value and value.strip() else None


def set_sender_number(store: SettingsStore, number: Optional[str]) -> None:
    store.set(SMS_SENDER_NUMBER_KEY, number)
    logger.info(f"SMS sender number set to {number!r}")


class SmsFilterConfig:
    """
    Sender allow-list handed to the SMS pipeline at construction time.

    With no number configured every sender is accepted; otherwise both sides
    are reduced to digits and must match exactly.
    """

    def __init__(self, sender_number: Optional[str] = None):
        self.sender_number = sender_number if sender_number and sender_number.strip() else None

    @classmethod
    def from_store(cls, store: SettingsStore) -> "SmsFilterConfig":
        return cls(get_sender_number(store))

    @property
    def is_configured(self) -> bool:
        return self.sender_number is not None

    def accepts(self, sender: Optional[str]) -> bool:
        if not self.is_configured:
            return True
        return digits_only(sender or "") == digits_only(self.sender_number)
