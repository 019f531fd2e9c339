from sqlalchemy import text
from sqlalchemy.orm import Session


class BaseRepository:
    def __init__(self, db: Session):
        self.db = db

    def apply_statement_timeout(self, timeout_ms: int) -> None:
        """Limit every statement in the current transaction to timeout_ms."""
        # set_config(..., true) is SET LOCAL: scoped to the open transaction
        self.db.execute(
            text("SELECT set_config('statement_timeout', :timeout, true)"),
            {"timeout": str(int(timeout_ms))}
        )
