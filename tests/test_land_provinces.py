import unittest

from apps.api.app.land_funnel.provinces import (
    ITALIAN_PROVINCES,
    PROVINCE_LOOKUP,
    ProvinceInfo,
    ProvinceLookup,
)


class ProvinceLookupTests(unittest.TestCase):
    def test_exact_name_and_code(self):
        self.assertEqual(PROVINCE_LOOKUP.resolve("Torino"), ProvinceInfo("TO", "Torino", "Piemonte"))
        self.assertEqual(PROVINCE_LOOKUP.resolve("to").code, "TO")
        self.assertEqual(PROVINCE_LOOKUP.resolve("  cuneo ").region, "Piemonte")

    def test_accent_free_spelling(self):
        info = PROVINCE_LOOKUP.resolve("Forli-Cesena")
        self.assertEqual(info.code, "FC")
        self.assertEqual(info.name, "Forlì-Cesena")

    def test_curated_aliases(self):
        self.assertEqual(PROVINCE_LOOKUP.resolve("Bolzano/Bozen").code, "BZ")
        self.assertEqual(PROVINCE_LOOKUP.resolve("Reggio di Calabria").code, "RC")
        self.assertEqual(PROVINCE_LOOKUP.resolve("Pesaro Urbino").region, "Marche")
        self.assertEqual(PROVINCE_LOOKUP.resolve("Valle d'Aosta").code, "AO")

    def test_unknown_two_letter_value_is_kept_as_code(self):
        self.assertEqual(PROVINCE_LOOKUP.resolve("zz"), ProvinceInfo("ZZ", "", ""))

    def test_unknown_long_value_keeps_first_two_letters(self):
        self.assertEqual(PROVINCE_LOOKUP.resolve("Atlantide"), ProvinceInfo("AT", "", ""))
        self.assertEqual(PROVINCE_LOOKUP.resolve(""), ProvinceInfo("", "", ""))

    def test_first_occurrence_wins_on_duplicate_names(self):
        lookup = ProvinceLookup(
            (ProvinceInfo("AA", "Doppia", "Uno"), ProvinceInfo("BB", "Doppia", "Due")),
            {},
        )
        self.assertEqual(lookup.resolve("Doppia").code, "AA")
        self.assertEqual(lookup.resolve("BB").region, "Due")

    def test_every_province_has_a_region(self):
        self.assertEqual(len({p.code for p in ITALIAN_PROVINCES}), len(ITALIAN_PROVINCES))
        self.assertTrue(all(p.region for p in ITALIAN_PROVINCES))


if __name__ == "__main__":
    unittest.main()
