from pgvector.sqlalchemy import Vector
from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import relationship

from vault.db.postgres.base import Base


class Item(Base):
    __tablename__ = "items"

    id = Column(BigInteger, primary_key=True, autoincrement=True)
    user_id = Column(Text, nullable=False, index=True)
    type = Column(Text, nullable=False, default="prompt")
    title = Column(Text)
    raw_content = Column(Text)
    url = Column(Text)
    category = Column(ARRAY(Text))
    summary = Column(Text)
    summary_tip = Column(Text)
    image_url = Column(Text)
    # No fixed dimension: whichever model produced the vector decides.
    embedding = Column(Vector())
    embedding_dim = Column(Integer)
    created_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    assets = relationship(
        "PromptAsset",
        back_populates="item",
        order_by="PromptAsset.id",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class PromptAsset(Base):
    __tablename__ = "prompt_assets"

    id = Column(BigInteger, primary_key=True, autoincrement=True)
    item_id = Column(
        BigInteger, ForeignKey("items.id", ondelete="CASCADE"), nullable=False
    )
    image_url = Column(Text)
    storage_path = Column(Text)

    item = relationship("Item", back_populates="assets")
