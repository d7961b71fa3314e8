from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Float
from studio.db.base import Base

class Venue(Base):
    __tablename__ = "venues"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(160))
    address: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    # coordenadas em graus decimais; sem elas o geofence é ignorado
    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    @property
    def has_location(self) -> bool:
        return self.latitude is not None and self.longitude is not None
