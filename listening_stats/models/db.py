"""SQLAlchemy database models for the event log and projection snapshots"""
from sqlalchemy import Column, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import declarative_base

Base = declarative_base()

class StreamMessage(Base):
    """
    One appended event. Rows are only ever inserted, never updated or deleted.
    Position is the 1-based version of the event inside its stream.
    """
    __tablename__ = 'streams'
    __table_args__ = (UniqueConstraint('stream', 'position', name='uq_streams_stream_position'),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    stream = Column(String, nullable=False, index=True)
    position = Column(Integer, nullable=False)
    data = Column(Text, nullable=False)

class Snapshot(Base):
    """
    Latest persisted state of a named projection together with the
    stream version it reflects. Overwritten on every flush.
    """
    __tablename__ = 'snapshots'

    name = Column(String, primary_key=True)
    version = Column(Integer, nullable=False, default=0)
    data = Column(Text, nullable=False)
