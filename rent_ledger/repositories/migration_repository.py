from datetime import datetime
from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from rent_ledger.models.user_migration import UserMigration, MigrationStatus


class MigrationRepository:
    """Repository for per-user migration state"""

    def __init__(self, db: Session):
        self.db = db

    def get_state(self, user_id: int, migration_key: str) -> Optional[UserMigration]:
        return (
            self.db.query(UserMigration)
            .filter(
                UserMigration.user_id == user_id,
                UserMigration.migration_key == migration_key,
            )
            .first()
        )

    def upsert_state(
        self,
        user_id: int,
        migration_key: str,
        status: MigrationStatus,
        started_at: Optional[datetime] = None,
        completed_at: Optional[datetime] = None,
        last_error: Optional[str] = None,
    ) -> UserMigration:
        """
        Create or update the state row for (user_id, migration_key).

        Timestamps are only overwritten when provided; last_error is always
        replaced so a successful run clears a previous message.
        """
        state = self.get_state(user_id, migration_key)
        if state is None:
            state = UserMigration(user_id=user_id, migration_key=migration_key)
            self.db.add(state)
            try:
                self.db.flush()
            except IntegrityError:
                # Another request created the row first
                self.db.rollback()
                state = self.get_state(user_id, migration_key)
                if state is None:
                    raise

        state.status = status
        if started_at is not None:
            state.started_at = started_at
        if completed_at is not None:
            state.completed_at = completed_at
        state.last_error = last_error

        self.db.commit()
        self.db.refresh(state)
        return state

    def delete_state(self, state: UserMigration) -> None:
        self.db.delete(state)
        self.db.commit()
