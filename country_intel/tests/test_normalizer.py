from __future__ import annotations

import copy
import unittest

import pydantic

from country_intel.models import CountryRecord
from country_intel.services import derivations
from country_intel.services.normalizer import normalize, normalize_many
from country_intel.tests.utils import FRANCE, GERMANY


class NormalizeTests(unittest.TestCase):
    def test_projects_v31_payload_without_changing_values(self) -> None:
        record = normalize(FRANCE)

        self.assertEqual(record.name.common, FRANCE["name"]["common"])
        self.assertEqual(record.name.official, FRANCE["name"]["official"])
        self.assertEqual(record.name.native["fra"].official, "République française")
        self.assertEqual(record.codes.cca2, "FR")
        self.assertEqual(record.codes.cca3, "FRA")
        self.assertEqual(record.codes.ccn3, "250")
        self.assertEqual(record.codes.cioc, "FRA")
        self.assertEqual(record.region, "Europe")
        self.assertEqual(record.subregion, "Western Europe")
        self.assertEqual(record.capital, ["Paris"])
        self.assertEqual(record.population, FRANCE["population"])
        self.assertEqual(record.area, FRANCE["area"])
        self.assertEqual(record.borders, FRANCE["borders"])
        self.assertEqual(record.languages, {"fra": "French"})
        self.assertEqual(record.currencies["EUR"].name, "Euro")
        self.assertEqual(record.currencies["EUR"].symbol, "€")
        self.assertEqual(record.flag, FRANCE["flag"])
        self.assertEqual(record.flags.png, FRANCE["flags"]["png"])
        self.assertEqual(record.flags.svg, FRANCE["flags"]["svg"])
        self.assertEqual(record.idd.root, "+3")
        self.assertEqual(record.idd.suffixes, ["3"])
        self.assertEqual(record.latlng, [46.0, 2.0])
        self.assertFalse(record.landlocked)
        self.assertEqual(record.timezones, ["UTC+01:00"])

    def test_missing_population_and_area_stay_absent(self) -> None:
        raw = copy.deepcopy(GERMANY)
        del raw["population"]
        del raw["area"]

        record = normalize(raw)

        self.assertIsNone(record.population)
        self.assertIsNone(record.area)

    def test_zero_population_is_kept(self) -> None:
        raw = copy.deepcopy(GERMANY)
        raw["population"] = 0
        self.assertEqual(normalize(raw).population, 0)

    def test_wrongly_typed_fields_are_dropped(self) -> None:
        record = normalize({
            "name": {"common": 42},
            "population": "many",
            "area": True,
            "borders": "ESP",
            "languages": ["not", "objects"],
            "latlng": ["north", 2],
        })

        self.assertIsNone(record.name.common)
        self.assertIsNone(record.population)
        self.assertIsNone(record.area)
        self.assertEqual(record.borders, ["ESP"])
        self.assertEqual(record.languages, {})
        self.assertEqual(record.latlng, [2.0])

    def test_non_finite_numbers_are_dropped(self) -> None:
        for bad in (float("nan"), float("inf"), float("-inf")):
            with self.subTest(value=bad):
                raw = copy.deepcopy(FRANCE)
                raw["area"] = bad
                raw["population"] = bad
                raw["latlng"] = [bad, 2.0]

                record = normalize(raw)

                self.assertIsNone(record.area)
                self.assertIsNone(record.population)
                self.assertEqual(record.latlng, [2.0])
                self.assertIsNone(derivations.population_density(record))

    def test_non_object_payload_yields_empty_record(self) -> None:
        for payload in (None, "France", 7, []):
            with self.subTest(payload=payload):
                record = normalize(payload)
                self.assertEqual(record, CountryRecord())
                self.assertIsNone(record.population)
                self.assertEqual(record.borders, [])

    def test_legacy_v2_layout(self) -> None:
        record = normalize({
            "name": "Portugal",
            "alpha2Code": "PT",
            "alpha3Code": "PRT",
            "numericCode": "620",
            "capital": "Lisbon",
            "languages": [{"iso639_1": "pt", "iso639_2": "por", "name": "Portuguese"}],
            "currencies": [{"code": "EUR", "name": "Euro", "symbol": "€"}],
            "flags": ["https://flagcdn.com/pt.svg", "https://flagcdn.com/w320/pt.png"],
        })

        self.assertEqual(record.name.common, "Portugal")
        self.assertIsNone(record.name.official)
        self.assertEqual(record.codes.cca2, "PT")
        self.assertEqual(record.codes.cca3, "PRT")
        self.assertEqual(record.codes.ccn3, "620")
        self.assertEqual(record.capital, ["Lisbon"])
        self.assertEqual(record.languages, {"por": "Portuguese"})
        self.assertEqual(record.currencies["EUR"].symbol, "€")
        self.assertEqual(record.flags.svg, "https://flagcdn.com/pt.svg")
        self.assertEqual(record.flags.png, "https://flagcdn.com/w320/pt.png")

    def test_keys_match_case_insensitively(self) -> None:
        record = normalize({"CCA3": "FRA", "Region": "Europe"})
        self.assertEqual(record.codes.cca3, "FRA")
        self.assertEqual(record.region, "Europe")

    def test_record_is_immutable(self) -> None:
        record = normalize(FRANCE)
        with self.assertRaises(pydantic.ValidationError):
            record.population = 1


class NormalizeManyTests(unittest.TestCase):
    def test_single_object_is_wrapped(self) -> None:
        records = normalize_many(FRANCE)
        self.assertEqual(len(records), 1)
        self.assertEqual(records[0].codes.cca3, "FRA")

    def test_array_keeps_upstream_order(self) -> None:
        records = normalize_many([GERMANY, FRANCE])
        self.assertEqual([r.codes.cca3 for r in records], ["DEU", "FRA"])

    def test_non_object_elements_are_skipped(self) -> None:
        records = normalize_many([FRANCE, None, "x", GERMANY])
        self.assertEqual([r.codes.cca3 for r in records], ["FRA", "DEU"])

    def test_unexpected_payload_yields_nothing(self) -> None:
        self.assertEqual(normalize_many(None), [])
        self.assertEqual(normalize_many("error"), [])
        self.assertEqual(normalize_many([]), [])


if __name__ == "__main__":
    unittest.main()
