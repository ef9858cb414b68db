"""
Integration tests for truncate and CSV bulk load
"""

import pytest
from datetime import date, datetime
from sqlalchemy import select, func
from core.exceptions import BulkLoadError, TruncateError
from ingestion.loaders.table_loader import TableLoader
from models.bronze_tables import crm_customer_info, crm_product_info, erp_location_hierarchy


async def _count(engine, table):
    async with engine.connect() as conn:
        return (await conn.execute(select(func.count()).select_from(table))).scalar_one()


class TestTableLoader:
    """Test TableLoader against SQLite"""
    
    @pytest.mark.asyncio
    async def test_copy_returns_data_row_count(self, test_engine, tmp_path, write_csv, location_rows):
        path = write_csv(tmp_path / "location_hierarchy.csv", ["cid", "country"], location_rows)
        
        rows = await TableLoader(test_engine).copy_csv("bronze.erp_location_hierarchy", str(path))
        
        assert rows == 3
        assert await _count(test_engine, erp_location_hierarchy) == 3
    
    @pytest.mark.asyncio
    async def test_copy_maps_columns_by_position(self, test_engine, tmp_path, write_csv):
        # Header names differ from the table; order is what counts
        path = write_csv(tmp_path / "loc.csv", ["CID", "CNTRY"], [["AW1", "France"]])
        
        await TableLoader(test_engine).copy_csv("bronze.erp_location_hierarchy", str(path))
        
        async with test_engine.connect() as conn:
            row = (await conn.execute(select(erp_location_hierarchy))).one()
        assert row.cid == "AW1"
        assert row.country == "France"
    
    @pytest.mark.asyncio
    async def test_copy_coerces_types_and_nulls(self, test_engine, tmp_path, write_csv):
        path = write_csv(
            tmp_path / "customer_info.csv",
            ["cst_id", "cst_key", "first", "last", "marital", "gender", "created"],
            [
                ["11000", "AW00011000", "Jon", "Yang", "M", "M", "2025-10-06"],
                ["11001", "AW00011001", "Eugene, Jr", "Huang", "", "", ""],
            ]
        )
        
        rows = await TableLoader(test_engine).copy_csv("bronze.crm_customer_info", str(path))
        
        assert rows == 2
        async with test_engine.connect() as conn:
            result = (await conn.execute(
                select(crm_customer_info).order_by(crm_customer_info.c.customer_id)
            )).all()
        assert result[0].customer_id == 11000
        assert result[0].customer_create_date == date(2025, 10, 6)
        assert result[1].customer_first_name == "Eugene, Jr"
        assert result[1].customer_gender is None
        assert result[1].customer_create_date is None
    
    @pytest.mark.asyncio
    async def test_copy_parses_timestamps(self, test_engine, tmp_path, write_csv):
        path = write_csv(
            tmp_path / "product_info.csv",
            ["id", "key", "nm", "cost", "line", "start", "end"],
            [["210", "CO-RF-FR-R92B-58", "HL Road Frame", "", "R", "2003-07-01", "2007-12-28 00:00:00"]]
        )
        
        await TableLoader(test_engine).copy_csv("bronze.crm_product_info", str(path))
        
        async with test_engine.connect() as conn:
            row = (await conn.execute(select(crm_product_info))).one()
        assert row.product_cost is None
        assert row.product_start_date == datetime(2003, 7, 1)
        assert row.product_end_date == datetime(2007, 12, 28)
    
    @pytest.mark.asyncio
    async def test_copy_header_only_file(self, test_engine, tmp_path, write_csv):
        path = write_csv(tmp_path / "empty.csv", ["cid", "country"], [])
        
        assert await TableLoader(test_engine).copy_csv("bronze.erp_location_hierarchy", str(path)) == 0
    
    @pytest.mark.asyncio
    async def test_copy_in_chunks(self, test_engine, tmp_path, write_csv):
        rows = [[f"AW{i:08d}", "Canada"] for i in range(25)]
        path = write_csv(tmp_path / "loc.csv", ["cid", "country"], rows)
        
        loaded = await TableLoader(test_engine, chunk_size=10).copy_csv("bronze.erp_location_hierarchy", str(path))
        
        assert loaded == 25
        assert await _count(test_engine, erp_location_hierarchy) == 25
    
    @pytest.mark.asyncio
    async def test_copy_missing_file(self, test_engine, tmp_path):
        with pytest.raises(BulkLoadError) as exc_info:
            await TableLoader(test_engine).copy_csv("bronze.erp_location_hierarchy", str(tmp_path / "nope.csv"))
        
        assert "nope.csv" in exc_info.value.message
    
    @pytest.mark.asyncio
    async def test_copy_empty_path(self, test_engine):
        with pytest.raises(BulkLoadError):
            await TableLoader(test_engine).copy_csv("bronze.erp_location_hierarchy", "")
    
    @pytest.mark.asyncio
    async def test_copy_column_count_mismatch(self, test_engine, tmp_path, write_csv):
        path = write_csv(tmp_path / "loc.csv", ["cid", "country", "region"], [["AW1", "France", "EU"]])
        
        with pytest.raises(BulkLoadError) as exc_info:
            await TableLoader(test_engine).copy_csv("bronze.erp_location_hierarchy", str(path))
        
        assert "Column count mismatch" in exc_info.value.message
    
    @pytest.mark.asyncio
    async def test_copy_type_mismatch_loads_nothing(self, test_engine, tmp_path, write_csv):
        path = write_csv(
            tmp_path / "customer_info.csv",
            ["cst_id", "cst_key", "first", "last", "marital", "gender", "created"],
            [
                ["11000", "AW00011000", "Jon", "Yang", "M", "M", "2025-10-06"],
                ["not-a-number", "AW00011001", "Eugene", "Huang", "S", "M", "2025-10-06"],
            ]
        )
        
        with pytest.raises(BulkLoadError) as exc_info:
            await TableLoader(test_engine).copy_csv("bronze.crm_customer_info", str(path))
        
        assert exc_info.value.context["column_name"] == "customer_id"
        assert exc_info.value.context["line_number"] == 3
        assert await _count(test_engine, crm_customer_info) == 0
    
    @pytest.mark.asyncio
    async def test_copy_missing_table(self, test_engine, tmp_path, write_csv, location_rows):
        path = write_csv(tmp_path / "loc.csv", ["cid", "country"], location_rows)
        
        with pytest.raises(BulkLoadError):
            await TableLoader(test_engine).copy_csv("bronze.erp_missing", str(path))
    
    @pytest.mark.asyncio
    async def test_truncate_removes_rows(self, test_engine, tmp_path, write_csv, location_rows):
        loader = TableLoader(test_engine)
        path = write_csv(tmp_path / "loc.csv", ["cid", "country"], location_rows)
        await loader.copy_csv("bronze.erp_location_hierarchy", str(path))
        
        await loader.truncate("bronze.erp_location_hierarchy")
        
        assert await _count(test_engine, erp_location_hierarchy) == 0
    
    @pytest.mark.asyncio
    async def test_truncate_missing_table(self, test_engine):
        with pytest.raises(TruncateError) as exc_info:
            await TableLoader(test_engine).truncate("bronze.erp_missing")
        
        assert "does not exist" in exc_info.value.message
    
    @pytest.mark.asyncio
    async def test_truncate_rejects_invalid_identifier(self, test_engine):
        with pytest.raises(TruncateError):
            await TableLoader(test_engine).truncate("bronze.erp_location_hierarchy; DELETE FROM bronze.load_log")
    
    @pytest.mark.asyncio
    async def test_copy_rejects_rows_longer_than_header(self, test_engine, tmp_path):
        path = tmp_path / "loc.csv"
        path.write_text("cid,country\nAW1,France,EU\nAW2,Spain,EU\n")
        
        with pytest.raises(BulkLoadError) as exc_info:
            await TableLoader(test_engine).copy_csv("bronze.erp_location_hierarchy", str(path))
        
        assert "line 2 has 3 field(s), header has 2" in exc_info.value.message
        assert await _count(test_engine, erp_location_hierarchy) == 0
    
    @pytest.mark.asyncio
    async def test_copy_rejects_rows_shorter_than_header(self, test_engine, tmp_path):
        path = tmp_path / "loc.csv"
        path.write_text("cid,country\nAW1,France\nAW2\n")
        
        with pytest.raises(BulkLoadError) as exc_info:
            await TableLoader(test_engine).copy_csv("bronze.erp_location_hierarchy", str(path))
        
        assert "line 3 has 1 field(s), header has 2" in exc_info.value.message
        assert await _count(test_engine, erp_location_hierarchy) == 0
    
    @pytest.mark.asyncio
    async def test_copy_keeps_trailing_empty_field(self, test_engine, tmp_path):
        # A present-but-empty last field is NULL, not a short row
        path = tmp_path / "loc.csv"
        path.write_text("cid,country\nAW1,\nAW2,Spain\n")
        
        rows = await TableLoader(test_engine).copy_csv("bronze.erp_location_hierarchy", str(path))
        
        assert rows == 2
        async with test_engine.connect() as conn:
            result = (await conn.execute(
                select(erp_location_hierarchy).order_by(erp_location_hierarchy.c.cid)
            )).all()
        assert [tuple(r) for r in result] == [("AW1", None), ("AW2", "Spain")]
