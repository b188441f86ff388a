from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.config.table_names import TableNames
from src.models.base import Base, TimeStamp


class Dinner(Base, TimeStamp):
    __tablename__ = TableNames.DINNERS.value

    title: Mapped[str] = mapped_column(String(50), nullable=False)
    event_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    description: Mapped[str] = mapped_column(String(256), nullable=False)
    host_id: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    contact_phone: Mapped[str] = mapped_column(String(20), nullable=False)
    address: Mapped[str] = mapped_column(String(50), nullable=False)
    country: Mapped[str] = mapped_column(String(30), nullable=True)
    latitude: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    longitude: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    rsvps: Mapped[list["RSVP"]] = relationship(
        "RSVP",
        back_populates="dinner",
        lazy="selectin",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Dinner {self.title} on {self.event_date}>"


class RSVP(Base, TimeStamp):
    __tablename__ = TableNames.RSVPS.value

    dinner_id: Mapped[int] = mapped_column(
        ForeignKey(f"{TableNames.DINNERS.value}.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    attendee_name: Mapped[str] = mapped_column(String(30), nullable=False)

    dinner: Mapped["Dinner"] = relationship("Dinner", back_populates="rsvps")

    def __repr__(self) -> str:
        return f"<RSVP {self.attendee_name} for dinner {self.dinner_id}>"
