from sqlalchemy import JSON, Boolean, Column, Integer, String, Text

from .base import Base


class Prompt(Base):
    __tablename__ = "prompts"

    id = Column(Integer, primary_key=True)
    key = Column(String(255), nullable=False, unique=True, index=True)
    content = Column(Text, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)


class Journey(Base):
    __tablename__ = "journeys"

    id = Column(Integer, primary_key=True)
    key = Column(String(255), nullable=False, unique=True, index=True)
    title = Column(String(255), nullable=False)
    short_description = Column(Text, nullable=True)
    theme = Column(String(100), nullable=True)
    meta = Column(JSON, nullable=False, default=dict)
    order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String, primary_key=True)  # the user id
    preferred_name = Column(String(255), nullable=True)
