"""
Module: claims_kernel.models.reference
Responsibility: ORM persistence for the reference dictionary -- injury
    criteria factors (type ``InjuryPercent``) and named system parameters
    (type ``SystemParameter``).
Architecture position: Kernel > Models.  May import from db/base.py only.
"""

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from claims_kernel.db.base import Base
from claims_kernel.domain.records import RecordTable


class DictionaryEntryModel(Base):
    """One key/value row of the reference dictionary.

    Values are kept as strings as entered by administrators; parsing is the
    reader's job.
    """

    __tablename__ = RecordTable.DICTIONARY.value

    __table_args__ = (
        Index("idx_dictionary_type_key", "type", "key"),
    )

    type: Mapped[str] = mapped_column(String(50), nullable=False)
    key: Mapped[str] = mapped_column(String(200), nullable=False)
    value: Mapped[str | None] = mapped_column(String(200), nullable=True)
