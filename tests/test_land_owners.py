import unittest

from apps.api.app.land_funnel.keys import parcel_from_row
from apps.api.app.land_funnel.owners import (
    OwnerResolver,
    bounded_join,
    is_company_cf,
    parse_quota,
)
from apps.api.app.land_funnel.records import (
    InputParcelRow,
    NormalizedOwnerRow,
    RawOwnerRow,
    RawOwnerTable,
    ResultsBundle,
    parse_raw_owner_rows,
)
from apps.api.app.utils.names import clean_owner_name


def _parcel(parcel_id="P1", comune="Chieri", particella="34"):
    return parcel_from_row(
        InputParcelRow(
            parcel_id=parcel_id,
            provincia="TO",
            comune=comune,
            foglio="12",
            particella=particella,
            area="1",
            sezione="",
            cp="10023",
        )
    )


def _raw(cf, parcel_id="P1", nome="", cognome="", denominazione="", municipality=None, cp="", full_name=""):
    return RawOwnerRow(
        parcel_id=parcel_id,
        cf=cf,
        denominazione=denominazione,
        nome=nome,
        cognome=cognome,
        full_name=full_name,
        cp=cp,
        municipality=municipality,
    )


def _norm(cf, name, quota, parcel_id="P1"):
    return NormalizedOwnerRow(parcel_id=parcel_id, owner_name=name, owner_cf=cf, quota=quota)


def _bundle(raw, normalized=(), emails=None, has_municipality=False):
    return ResultsBundle(
        raw_owners=RawOwnerTable(rows=tuple(raw), has_municipality=has_municipality),
        normalized_owners=tuple(normalized),
        company_emails=emails or {},
    )


class QuotaAndNameTests(unittest.TestCase):
    def test_parse_quota(self):
        self.assertEqual(parse_quota("1/2"), 0.5)
        self.assertEqual(parse_quota("50,5"), 50.5)
        self.assertEqual(parse_quota("12.25"), 12.25)
        self.assertEqual(parse_quota("3"), 3.0)
        self.assertEqual(parse_quota(""), 0.0)
        self.assertEqual(parse_quota(None), 0.0)
        self.assertEqual(parse_quota("abc"), 0.0)
        self.assertEqual(parse_quota("1/0"), 0.0)
        self.assertEqual(parse_quota("x/2"), 0.0)

    def test_clean_owner_name(self):
        self.assertEqual(clean_owner_name("Mario Rossi nato a Torino il 01/01/1980"), "Mario Rossi")
        self.assertEqual(clean_owner_name("Acme Srl; DI GESTIONE"), "Acme Srl")
        self.assertEqual(clean_owner_name("Bianchi  Anna nata a Roma"), "Bianchi Anna")
        self.assertEqual(clean_owner_name("Verdi Luca nato/a a Asti"), "Verdi Luca")
        self.assertEqual(clean_owner_name("Unknown 1234"), "")
        self.assertEqual(clean_owner_name("Timeout-Pending"), "")
        self.assertEqual(clean_owner_name("Donato Neri"), "Donato Neri")
        self.assertEqual(clean_owner_name(None), "")
        self.assertEqual(clean_owner_name(42), "")

    def test_company_fiscal_code(self):
        self.assertTrue(is_company_cf("01234567890"))
        self.assertFalse(is_company_cf("RSSMRA80A01H501U"))
        self.assertFalse(is_company_cf(""))

    def test_bounded_join(self):
        entries = ["a" * 100, "b" * 100, "c" * 100]
        joined = bounded_join(entries, 250)
        self.assertEqual(joined, "a" * 100 + ", " + "b" * 100 + ", ...")
        single = bounded_join(["z" * 300], 250)
        self.assertEqual(len(single), 250)
        self.assertTrue(single.endswith("..."))


class CandidateFilterTests(unittest.TestCase):
    def test_raw_parsing_ignores_owner_type_column(self):
        table = parse_raw_owner_rows(
            [
                {
                    "Parcel_ID": "P1",
                    "cf_owner": "01234567890",
                    "denominazione_owner": "Agri Srl",
                    "nome": "",
                    "cognome": "",
                    "Tipo_Proprietario": "Persona Fisica",
                }
            ]
        )
        self.assertEqual(table.rows, (_raw("01234567890", denominazione="Agri Srl"),))
        self.assertTrue(is_company_cf(table.rows[0].cf))

    def test_company_owner_takes_priority(self):
        resolver = OwnerResolver(
            _bundle([_raw("12345", denominazione="Acme Srl"), _raw("RSSMRA80A01H501U", nome="Mario", cognome="Rossi")])
        )
        candidates = resolver.candidates_for(_parcel())
        self.assertEqual([row.cf for row in candidates], ["12345"])

    def test_geographic_filter_keeps_matching_municipality(self):
        raw = [
            _raw("AAA", nome="Anna", cognome="Neri", municipality="Pino Torinese"),
            _raw("BBB", nome="Luca", cognome="Bo", municipality="CHIERI (TO)"),
        ]
        resolver = OwnerResolver(_bundle(raw, has_municipality=True))
        self.assertEqual([row.cf for row in resolver.candidates_for(_parcel())], ["BBB"])

    def test_geographic_filter_falls_back_for_unambiguous_key(self):
        raw = [_raw("AAA", nome="Anna", cognome="Neri", municipality="Asti")]
        resolver = OwnerResolver(_bundle(raw, has_municipality=True))
        self.assertEqual([row.cf for row in resolver.candidates_for(_parcel())], ["AAA"])

    def test_geographic_filter_never_falls_back_for_ambiguous_key(self):
        raw = [_raw("AAA", nome="Anna", cognome="Neri", municipality="Asti")]
        resolver = OwnerResolver(_bundle(raw, has_municipality=True), ambiguous_keys={"P1"})
        self.assertEqual(resolver.candidates_for(_parcel()), [])
        resolved = resolver.resolve(_parcel())
        self.assertEqual(resolved.owner_count, 0)
        self.assertEqual(resolved.main_owner_last_name, "")

    def test_filter_ignored_without_municipality_column(self):
        raw = [_raw("AAA", nome="Anna", cognome="Neri")]
        resolver = OwnerResolver(_bundle(raw), ambiguous_keys={"P1"})
        self.assertEqual(len(resolver.candidates_for(_parcel())), 1)


class ResolveTests(unittest.TestCase):
    def test_highest_quota_is_main_owner(self):
        raw = [
            _raw("AAAAAA00A00A000A", nome="Anna", cognome="Neri"),
            _raw("BBBBBB00B00B000B", nome="Luca", cognome="Bianchi"),
        ]
        normalized = [
            _norm("AAAAAA00A00A000A", "NERI ANNA", "1/4"),
            _norm("BBBBBB00B00B000B", "BIANCHI LUCA", "3/4"),
        ]
        resolved = OwnerResolver(_bundle(raw, normalized)).resolve(_parcel())
        self.assertEqual(resolved.fiscal_code, "BBBBBB00B00B000B")
        self.assertEqual(resolved.main_owner_name, "Luca")
        self.assertEqual(resolved.main_owner_last_name, "Bianchi")
        self.assertEqual(resolved.owner_count, 2)
        self.assertEqual(
            resolved.all_owners,
            "NERI ANNA [AAAAAA00A00A000A, 1/4], BIANCHI LUCA [BBBBBB00B00B000B, 3/4]",
        )

    def test_quota_tie_keeps_first(self):
        raw = [_raw("AAA", nome="Anna", cognome="Neri"), _raw("BBB", nome="Luca", cognome="Bo")]
        normalized = [_norm("AAA", "NERI ANNA", "1/2"), _norm("BBB", "BO LUCA", "0,5")]
        resolved = OwnerResolver(_bundle(raw, normalized)).resolve(_parcel())
        self.assertEqual(resolved.fiscal_code, "AAA")

    def test_normalized_rows_outside_surviving_codes_are_ignored(self):
        raw = [_raw("01234567890", denominazione="Agri Srl"), _raw("RSSMRA80A01H501U", nome="Mario", cognome="Rossi")]
        normalized = [_norm("RSSMRA80A01H501U", "ROSSI MARIO", "1/1"), _norm("01234567890", "AGRI SRL", "1/2")]
        resolved = OwnerResolver(_bundle(raw, normalized)).resolve(_parcel())
        self.assertEqual(resolved.fiscal_code, "01234567890")
        self.assertEqual(resolved.owner_count, 1)
        self.assertEqual(resolved.all_owners, "AGRI SRL [01234567890, 1/2]")

    def test_company_name_goes_to_last_name_only(self):
        raw = [_raw("01234567890", denominazione="Agri Srl nata a Roma")]
        normalized = [_norm("01234567890", "AGRI SRL; IN LIQUIDAZIONE", "1/1")]
        resolved = OwnerResolver(
            _bundle(raw, normalized, emails={"01234567890": "agri@pec.it"})
        ).resolve(_parcel())
        self.assertEqual(resolved.main_owner_name, "")
        self.assertEqual(resolved.main_owner_last_name, "AGRI SRL")
        self.assertEqual(resolved.email, "agri@pec.it")

    def test_raw_fallback_without_normalized_rows(self):
        raw = [_raw("RSSMRA80A01H501U", nome="Mario", cognome="Rossi nato a Torino", cp="10020")]
        resolved = OwnerResolver(_bundle(raw)).resolve(_parcel())
        self.assertEqual(resolved.main_owner_name, "Mario")
        self.assertEqual(resolved.main_owner_last_name, "Rossi")
        self.assertEqual(resolved.cp, "10020")
        self.assertEqual(resolved.owner_count, 1)
        self.assertEqual(resolved.all_owners, "Mario Rossi [RSSMRA80A01H501U]")
        self.assertEqual(resolved.email, "")

    def test_raw_fallback_uses_denomination_then_combined_name(self):
        by_denomination = OwnerResolver(_bundle([_raw("XYZ", denominazione="Cascina Bella")])).resolve(_parcel())
        self.assertEqual((by_denomination.main_owner_name, by_denomination.main_owner_last_name), ("", "Cascina Bella"))
        by_full_name = OwnerResolver(_bundle([_raw("XYZ", full_name="ROSSI MARIO")])).resolve(_parcel())
        self.assertEqual((by_full_name.main_owner_name, by_full_name.main_owner_last_name), ("", "ROSSI MARIO"))

    def test_first_name_only_raw_match_uses_normalized_name(self):
        raw = [_raw("AAA", nome="Mario", cognome="")]
        normalized = [_norm("AAA", "ROSSI MARIO", "1/1")]
        resolved = OwnerResolver(_bundle(raw, normalized)).resolve(_parcel())
        self.assertEqual(resolved.main_owner_name, "")
        self.assertEqual(resolved.main_owner_last_name, "ROSSI MARIO")

    def test_first_name_only_raw_fallback_keeps_a_last_name(self):
        resolved = OwnerResolver(_bundle([_raw("AAA", nome="Mario")])).resolve(_parcel())
        self.assertEqual((resolved.main_owner_name, resolved.main_owner_last_name), ("", "Mario"))

    def test_parcel_postal_code_kept_when_candidates_have_none(self):
        resolved = OwnerResolver(_bundle([_raw("XYZ", denominazione="Cascina Bella")])).resolve(_parcel())
        self.assertEqual(resolved.cp, "10023")

    def test_duplicate_owner_entries_count_once(self):
        raw = [_raw("AAA", nome="Anna", cognome="Neri")]
        normalized = [_norm("AAA", "NERI ANNA", "1/1"), _norm("AAA", "NERI ANNA", "1/1")]
        resolved = OwnerResolver(_bundle(raw, normalized)).resolve(_parcel())
        self.assertEqual(resolved.owner_count, 1)

    def test_parcel_without_candidates(self):
        resolved = OwnerResolver(_bundle([_raw("AAA", parcel_id="OTHER", nome="Anna")])).resolve(_parcel())
        self.assertEqual(resolved.owner_count, 0)
        self.assertEqual(resolved.all_owners, "")
        self.assertEqual(resolved.fiscal_code, "")

    def test_aggregate_string_is_bounded(self):
        raw = []
        normalized = []
        for i in range(20):
            cf = f"CF{i:014d}"
            raw.append(_raw(cf, nome=f"Nome{i}", cognome=f"Cognome{i}"))
            normalized.append(_norm(cf, f"COGNOME{i} NOME{i}", "1/20"))
        resolved = OwnerResolver(_bundle(raw, normalized)).resolve(_parcel())
        self.assertEqual(resolved.owner_count, 20)
        self.assertLessEqual(len(resolved.all_owners), 255)
        self.assertTrue(resolved.all_owners.endswith(", ..."))


if __name__ == "__main__":
    unittest.main()
