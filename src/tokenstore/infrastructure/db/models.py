from typing import Any

from sqlalchemy import Column, DateTime, Index, Integer, String
from sqlalchemy.orm import declarative_base

Base: Any = declarative_base()


class TokenModel(Base):
    __tablename__ = "tokens"
    id = Column(Integer, primary_key=True)
    uid = Column(String, nullable=False)
    hashed_token = Column(String, nullable=False)
    ttl = Column(DateTime, nullable=False)
    origin_url = Column(String, nullable=True)


# Ensured one at a time on first use, including on files created without them
UID_INDEX = Index("uix_tokens_uid", TokenModel.uid, unique=True)
TTL_INDEX = Index("idx_tokens_ttl", TokenModel.ttl)

REQUIRED_INDEXES = (UID_INDEX, TTL_INDEX)
