"""Shop settings model (single row)."""
from sqlalchemy import Column, Integer, String, Boolean, Numeric, DateTime
from sqlalchemy.sql import func
from pos_app.database import Base


class Setting(Base):
    """GST and receipt settings consumed by the till when totalling a bill."""

    __tablename__ = 'settings'

    id = Column(Integer, primary_key=True, autoincrement=True)
    gst_number = Column(String(100), nullable=True, default='')
    gst_rate = Column(Numeric(5, 2), nullable=False, default=18, server_default='18')
    enable_gst = Column(Boolean, nullable=False, default=False, server_default='0')
    paper_size = Column(String(10), nullable=False, default='58mm', server_default='58mm')
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    def to_dict(self):
        return {
            'id': self.id,
            'gst_number': self.gst_number,
            'gst_rate': self.gst_rate,
            'enable_gst': self.enable_gst,
            'paper_size': self.paper_size,
            'updated_at': self.updated_at,
        }

    def __repr__(self):
        return f"<Setting(gst_rate={self.gst_rate}, enable_gst={self.enable_gst})>"
