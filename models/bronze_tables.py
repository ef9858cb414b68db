"""
Raw bronze destination tables.

No keys, no constraints: ingestion may carry duplicates and bad values,
cleansing belongs to the silver layer. Column order must match the
header order of the corresponding source CSV.
"""

from sqlalchemy import Table, Column, Integer, String, Date, DateTime
from models.base import Base, BRONZE_SCHEMA

# CRM
crm_customer_info = Table(
    "crm_customer_info", Base.metadata,
    Column("customer_id", Integer),
    Column("customer_key", String(50)),
    Column("customer_first_name", String(50)),
    Column("customer_last_name", String(50)),
    Column("customer_material_status", String(50)),
    Column("customer_gender", String(50)),
    Column("customer_create_date", Date),
    schema=BRONZE_SCHEMA,
)

crm_product_info = Table(
    "crm_product_info", Base.metadata,
    Column("product_id", Integer),
    Column("product_key", String(50)),
    Column("product_nm", String(50)),
    Column("product_cost", Integer),
    Column("product_line", String(50)),
    Column("product_start_date", DateTime),
    Column("product_end_date", DateTime),
    schema=BRONZE_SCHEMA,
)

crm_sales_details = Table(
    "crm_sales_details", Base.metadata,
    Column("sales_order_number", String(50)),
    Column("sales_product_key", String(50)),
    Column("sales_customer_id", Integer),
    Column("sales_order_date", DateTime),
    Column("sales_shipping_date", Date),
    Column("sales_due_date", Date),
    Column("sales_sales", Integer),
    Column("sales_quantity", Integer),
    Column("sales_price", Integer),
    schema=BRONZE_SCHEMA,
)

# ERP
erp_customer_profiles = Table(
    "erp_customer_profiles", Base.metadata,
    Column("cid", String(50)),
    Column("date_of_birth", Date),
    Column("gender", String(50)),
    schema=BRONZE_SCHEMA,
)

erp_location_hierarchy = Table(
    "erp_location_hierarchy", Base.metadata,
    Column("cid", String(50)),
    Column("country", String(50)),
    schema=BRONZE_SCHEMA,
)

erp_product_categories = Table(
    "erp_product_categories", Base.metadata,
    Column("id", String(50)),
    Column("category", String(50)),
    Column("subcategory", String(50)),
    Column("maintenance", String(50)),
    schema=BRONZE_SCHEMA,
)

BRONZE_TABLES = (
    crm_customer_info,
    crm_product_info,
    crm_sales_details,
    erp_customer_profiles,
    erp_location_hierarchy,
    erp_product_categories,
)
