# models/user.py
from sqlalchemy import Column, Integer, DateTime, Boolean, String, Text
from sqlalchemy.sql import func

from .base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=True)
    age = Column(Integer, nullable=False, index=True)
    country = Column(String(8), nullable=False, index=True)
    bio = Column(Text, nullable=True)

    verified = Column(Boolean, default=False, nullable=False)
    premium = Column(Boolean, default=False, nullable=False)
    distance = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    def __repr__(self):
        return f"<User id={self.id} name={self.name}>"
