from __future__ import annotations

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Table,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


# Recipients are not restricted to the giver's exchange so that edits made
# outside the bot can point anywhere; the validator reports those.
participant_assignments = Table(
    "participant_assignments",
    Base.metadata,
    Column("giver_id", Integer, ForeignKey("participants.id", ondelete="CASCADE"), primary_key=True),
    Column("recipient_id", Integer, ForeignKey("participants.id", ondelete="CASCADE"), primary_key=True),
)


class Exchange(Base):
    __tablename__ = "exchanges"

    id = Column(Integer, primary_key=True)
    telegram_id = Column(BigInteger, unique=True, nullable=False, index=True)
    title = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    participants = relationship(
        "Participant",
        back_populates="exchange",
        cascade="all, delete-orphan",
        order_by="Participant.id",
    )
    groups = relationship("GiftGroup", back_populates="exchange", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<Exchange(id={self.id}, telegram_id={self.telegram_id}, title={self.title})>"


class GiftGroup(Base):
    __tablename__ = "gift_groups"

    id = Column(Integer, primary_key=True)
    exchange_id = Column(Integer, ForeignKey("exchanges.id", ondelete="CASCADE"), nullable=False)
    name = Column(String, nullable=False)
    color = Column(String, nullable=True)

    exchange = relationship("Exchange", back_populates="groups")

    __table_args__ = (
        UniqueConstraint("exchange_id", "name", name="uq_gift_groups_exchange_name"),
    )


class Participant(Base):
    __tablename__ = "participants"

    id = Column(Integer, primary_key=True)
    exchange_id = Column(Integer, ForeignKey("exchanges.id", ondelete="CASCADE"), nullable=False)
    telegram_id = Column(BigInteger, nullable=True)
    display_name = Column(String, nullable=False)
    group_id = Column(Integer, ForeignKey("gift_groups.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    exchange = relationship("Exchange", back_populates="participants")
    group = relationship("GiftGroup")

    __table_args__ = (
        UniqueConstraint("exchange_id", "telegram_id", name="uq_participants_exchange_telegram"),
    )

    def __repr__(self) -> str:
        return (
            "<Participant(id={0}, exchange_id={1}, name={2}, group_id={3})>"
        ).format(self.id, self.exchange_id, self.display_name, self.group_id)
