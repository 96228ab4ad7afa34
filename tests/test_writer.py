"""Tests for rendering a standards document into a workbook."""

import copy
import io
import json
import os
import shutil
import sys
import tempfile
import unittest

from openpyxl import load_workbook

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from standards_workbook.errors import SchemaError
from standards_workbook.writer import (
    BLANK_RECORD,
    TABLE_SENTINEL,
    collect_headers,
    json_to_excel,
    render_workbook,
    to_workbook,
    validate_document,
)
from tests.create_sample_document import sample_document


def _rows(ws):
    return [list(r) for r in ws.iter_rows(values_only=True)]


class TestCollectHeaders(unittest.TestCase):
    def test_first_seen_order_deduplicated(self):
        records = [{"a": 1, "b": 2}, {"b": 3, "c": 4}]
        self.assertEqual(collect_headers(records), ["a", "b", "c"])

    def test_empty(self):
        self.assertEqual(collect_headers([]), [])


class TestValidateDocument(unittest.TestCase):
    def test_sample_is_valid(self):
        validate_document(sample_document())

    def test_missing_key(self):
        for key in ("constants", "formulas", "tables"):
            doc = sample_document()
            del doc[key]
            with self.assertRaises(SchemaError, msg=key):
                validate_document(doc)

    def test_unexpected_key(self):
        doc = sample_document()
        doc["extra"] = []
        with self.assertRaises(SchemaError):
            validate_document(doc)

    def test_constants_not_list(self):
        doc = sample_document()
        doc["constants"] = {"a": 1}
        with self.assertRaises(SchemaError):
            validate_document(doc)

    def test_record_not_object(self):
        doc = sample_document()
        doc["formulas"].append("oops")
        with self.assertRaises(SchemaError):
            validate_document(doc)

    def test_table_without_name(self):
        doc = sample_document()
        del doc["tables"][0]["name"]
        with self.assertRaises(SchemaError):
            validate_document(doc)

    def test_table_without_table_field(self):
        doc = sample_document()
        del doc["tables"][1]["table"]
        with self.assertRaises(SchemaError):
            validate_document(doc)

    def test_duplicate_table_names(self):
        doc = sample_document()
        doc["tables"].append(copy.deepcopy(doc["tables"][0]))
        with self.assertRaises(SchemaError):
            validate_document(doc)

    def test_table_named_like_flat_sheet(self):
        doc = sample_document()
        doc["tables"][0]["name"] = "constants"
        with self.assertRaises(SchemaError):
            validate_document(doc)

    def test_sentinel_field_rejected(self):
        doc = sample_document()
        doc["tables"][0][TABLE_SENTINEL] = "x"
        with self.assertRaises(SchemaError):
            validate_document(doc)

    def test_empty_scalar_field_name_rejected(self):
        doc = sample_document()
        doc["tables"][0][""] = "x"
        with self.assertRaises(SchemaError):
            validate_document(doc)

    def test_empty_record_field_name_rejected(self):
        for where in ("constants", "table"):
            doc = sample_document()
            records = doc["constants"] if where == "constants" else doc["tables"][0]["table"]
            records[0][""] = 1
            with self.assertRaises(SchemaError, msg=where):
                validate_document(doc)

    def test_records_without_fields_rejected(self):
        doc = sample_document()
        doc["tables"][0]["table"] = [{}, {}]
        with self.assertRaises(SchemaError):
            validate_document(doc)

    def test_invalid_title_is_schema_error(self):
        doc = sample_document()
        doc["tables"][0]["name"] = "bad/name?"
        with self.assertRaises(SchemaError):
            render_workbook(doc)


class TestRenderWorkbook(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.wb = load_workbook(io.BytesIO(to_workbook(sample_document())))

    @classmethod
    def tearDownClass(cls):
        cls.wb.close()

    def test_sheet_order(self):
        self.assertEqual(
            self.wb.sheetnames,
            ["constants", "formulas", "surface_thermal_transmittance",
             "regional_fuel_use"],
        )

    def test_constants_sheet(self):
        rows = _rows(self.wb["constants"])
        self.assertEqual(rows[0], ["name", "value", "units", "notes"])
        self.assertEqual(rows[1], ["occupancy_density", 0.05, "people/m2", None])
        self.assertEqual(rows[2], ["hot_water_temp", 60, None, "supply"])

    def test_header_cells_bold(self):
        ws = self.wb["constants"]
        for col in "ABCD":
            self.assertTrue(ws[f"{col}1"].font.bold)
        self.assertFalse(ws["A2"].font.bold)

    def test_table_sheet_layout(self):
        ws = self.wb["surface_thermal_transmittance"]
        rows = _rows(ws)
        self.assertEqual(rows[0][:2], ["name", "surface_thermal_transmittance"])
        self.assertEqual(rows[1][:2], ["data_type", "table"])
        self.assertEqual(rows[2][:2], ["refs", '["NECB2011_S_3.2.2.2"]'])
        self.assertTrue(all(v is None for v in rows[3]))
        self.assertEqual(rows[4][0], TABLE_SENTINEL)
        self.assertEqual(rows[5], ["boundary_condition", "hdd", "value", "surface"])
        self.assertEqual(rows[6], ["Outdoors", "<3000", 0.315, None])
        self.assertEqual(rows[7], ["Ground", "<3000", 0.568, "Wall"])
        self.assertTrue(ws["A1"].font.bold)
        self.assertFalse(ws["B1"].font.bold)
        self.assertTrue(ws["A6"].font.bold)

    def test_nested_values_written_as_json(self):
        rows = _rows(self.wb["regional_fuel_use"])
        self.assertEqual(rows[4][0], "state_province_regions")
        self.assertEqual(json.loads(rows[5][0]), ["AB", "BC"])


class TestBlankRecords(unittest.TestCase):
    def test_blank_records_keep_their_rows(self):
        doc = {
            "constants": [],
            "formulas": [],
            "tables": [{"name": "t", "table": [{"a": 1, "b": 2}, {}, {"a": None}]}],
        }
        wb = load_workbook(io.BytesIO(to_workbook(doc)))
        try:
            rows = _rows(wb["t"])
        finally:
            wb.close()
        self.assertEqual(rows[-2:], [[BLANK_RECORD, None], [BLANK_RECORD, None]])


class TestJsonToExcel(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def test_sorted_scalar_fields_and_table_order(self):
        json_path = os.path.join(self.tmpdir, "necb.json")
        with open(json_path, "w", encoding="utf-8") as f:
            json.dump(sample_document(), f)
        xlsx = json_to_excel(json_path, os.path.join(self.tmpdir, "out", "standards.xlsx"))

        wb = load_workbook(xlsx)
        try:
            self.assertEqual(wb.sheetnames[2:], [
                "surface_thermal_transmittance", "regional_fuel_use"])
            keys = [r[0] for r in _rows(wb["surface_thermal_transmittance"])[:3]]
            self.assertEqual(keys, ["data_type", "name", "refs"])
            header = _rows(wb["surface_thermal_transmittance"])[5]
            self.assertEqual(header, ["boundary_condition", "hdd", "value", "surface"])
        finally:
            wb.close()

    def test_schema_error_propagates(self):
        json_path = os.path.join(self.tmpdir, "bad.json")
        with open(json_path, "w", encoding="utf-8") as f:
            json.dump({"constants": []}, f)
        out = os.path.join(self.tmpdir, "bad.xlsx")
        with self.assertRaises(SchemaError):
            json_to_excel(json_path, out)
        self.assertFalse(os.path.exists(out))


if __name__ == "__main__":
    unittest.main()
