from sqlalchemy import Column, String, Integer, Boolean, Index, text
from models.base import Base, BRONZE_SCHEMA, SurrogateKey


class LoadJob(Base):
    """
    One bronze loader job: a destination table and the CSV file it is
    reloaded from.
    
    Design:
    - Exactly one row per destination table (unique table_name)
    - Jobs run in ascending load_order, ties broken by table_name
    - Re-seeding overwrites file_path, is_enabled and load_order in place
    """
    __tablename__ = "load_jobs"
    
    id = Column(SurrogateKey, primary_key=True, autoincrement=True)
    table_name = Column(String(200), nullable=False)  # schema-qualified, e.g. bronze.crm_customer_info
    file_path = Column(String(1024), nullable=False)
    is_enabled = Column(Boolean, nullable=False, default=True, server_default=text("true"))
    load_order = Column(Integer, nullable=False, default=100, server_default=text("100"))
    
    __table_args__ = (
        Index("ux_load_jobs_table_name", "table_name", unique=True),
        Index("idx_load_jobs_order", "load_order"),
        {"schema": BRONZE_SCHEMA},
    )
    
    def __repr__(self) -> str:
        return f"<LoadJob {self.table_name} order={self.load_order} enabled={self.is_enabled}>"
