from sqlalchemy import Column, String
from models.base import Base, CONFIG_SCHEMA

# Keys the job registry resolves source base paths from
BASE_PATH_CRM_KEY = "base_path_crm"
BASE_PATH_ERP_KEY = "base_path_erp"


class ConfigEntry(Base):
    """
    Key-value store for environment-specific settings.
    
    Holds the CRM/ERP source directories (without trailing slash) that the
    job registry joins against when it builds file paths.
    """
    __tablename__ = "etl_config"
    __table_args__ = {"schema": CONFIG_SCHEMA}
    
    config_key = Column(String(100), primary_key=True)
    config_value = Column(String(200), nullable=False)
