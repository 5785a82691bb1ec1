from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Tuple

from apps.api.app.utils.names import collapse_spaces, strip_accents


@dataclass(frozen=True)
class ProvinceInfo:
    code: str
    name: str
    region: str


ITALIAN_PROVINCES: Tuple[ProvinceInfo, ...] = (
    # Piemonte
    ProvinceInfo("AL", "Alessandria", "Piemonte"),
    ProvinceInfo("AT", "Asti", "Piemonte"),
    ProvinceInfo("BI", "Biella", "Piemonte"),
    ProvinceInfo("CN", "Cuneo", "Piemonte"),
    ProvinceInfo("NO", "Novara", "Piemonte"),
    ProvinceInfo("TO", "Torino", "Piemonte"),
    ProvinceInfo("VB", "Verbano-Cusio-Ossola", "Piemonte"),
    ProvinceInfo("VC", "Vercelli", "Piemonte"),
    # Valle d'Aosta
    ProvinceInfo("AO", "Aosta", "Valle d'Aosta"),
    # Lombardia
    ProvinceInfo("BG", "Bergamo", "Lombardia"),
    ProvinceInfo("BS", "Brescia", "Lombardia"),
    ProvinceInfo("CO", "Como", "Lombardia"),
    ProvinceInfo("CR", "Cremona", "Lombardia"),
    ProvinceInfo("LC", "Lecco", "Lombardia"),
    ProvinceInfo("LO", "Lodi", "Lombardia"),
    ProvinceInfo("MN", "Mantova", "Lombardia"),
    ProvinceInfo("MI", "Milano", "Lombardia"),
    ProvinceInfo("MB", "Monza e della Brianza", "Lombardia"),
    ProvinceInfo("PV", "Pavia", "Lombardia"),
    ProvinceInfo("SO", "Sondrio", "Lombardia"),
    ProvinceInfo("VA", "Varese", "Lombardia"),
    # Trentino-Alto Adige
    ProvinceInfo("BZ", "Bolzano", "Trentino-Alto Adige"),
    ProvinceInfo("TN", "Trento", "Trentino-Alto Adige"),
    # Veneto
    ProvinceInfo("BL", "Belluno", "Veneto"),
    ProvinceInfo("PD", "Padova", "Veneto"),
    ProvinceInfo("RO", "Rovigo", "Veneto"),
    ProvinceInfo("TV", "Treviso", "Veneto"),
    ProvinceInfo("VE", "Venezia", "Veneto"),
    ProvinceInfo("VR", "Verona", "Veneto"),
    ProvinceInfo("VI", "Vicenza", "Veneto"),
    # Friuli-Venezia Giulia
    ProvinceInfo("GO", "Gorizia", "Friuli-Venezia Giulia"),
    ProvinceInfo("PN", "Pordenone", "Friuli-Venezia Giulia"),
    ProvinceInfo("TS", "Trieste", "Friuli-Venezia Giulia"),
    ProvinceInfo("UD", "Udine", "Friuli-Venezia Giulia"),
    # Liguria
    ProvinceInfo("GE", "Genova", "Liguria"),
    ProvinceInfo("IM", "Imperia", "Liguria"),
    ProvinceInfo("SP", "La Spezia", "Liguria"),
    ProvinceInfo("SV", "Savona", "Liguria"),
    # Emilia-Romagna
    ProvinceInfo("BO", "Bologna", "Emilia-Romagna"),
    ProvinceInfo("FE", "Ferrara", "Emilia-Romagna"),
    ProvinceInfo("FC", "Forlì-Cesena", "Emilia-Romagna"),
    ProvinceInfo("MO", "Modena", "Emilia-Romagna"),
    ProvinceInfo("PR", "Parma", "Emilia-Romagna"),
    ProvinceInfo("PC", "Piacenza", "Emilia-Romagna"),
    ProvinceInfo("RA", "Ravenna", "Emilia-Romagna"),
    ProvinceInfo("RE", "Reggio Emilia", "Emilia-Romagna"),
    ProvinceInfo("RN", "Rimini", "Emilia-Romagna"),
    # Toscana
    ProvinceInfo("AR", "Arezzo", "Toscana"),
    ProvinceInfo("FI", "Firenze", "Toscana"),
    ProvinceInfo("GR", "Grosseto", "Toscana"),
    ProvinceInfo("LI", "Livorno", "Toscana"),
    ProvinceInfo("LU", "Lucca", "Toscana"),
    ProvinceInfo("MS", "Massa-Carrara", "Toscana"),
    ProvinceInfo("PI", "Pisa", "Toscana"),
    ProvinceInfo("PT", "Pistoia", "Toscana"),
    ProvinceInfo("PO", "Prato", "Toscana"),
    ProvinceInfo("SI", "Siena", "Toscana"),
    # Umbria
    ProvinceInfo("PG", "Perugia", "Umbria"),
    ProvinceInfo("TR", "Terni", "Umbria"),
    # Marche
    ProvinceInfo("AN", "Ancona", "Marche"),
    ProvinceInfo("AP", "Ascoli Piceno", "Marche"),
    ProvinceInfo("FM", "Fermo", "Marche"),
    ProvinceInfo("MC", "Macerata", "Marche"),
    ProvinceInfo("PU", "Pesaro e Urbino", "Marche"),
    # Lazio
    ProvinceInfo("FR", "Frosinone", "Lazio"),
    ProvinceInfo("LT", "Latina", "Lazio"),
    ProvinceInfo("RI", "Rieti", "Lazio"),
    ProvinceInfo("RM", "Roma", "Lazio"),
    ProvinceInfo("VT", "Viterbo", "Lazio"),
    # Abruzzo
    ProvinceInfo("CH", "Chieti", "Abruzzo"),
    ProvinceInfo("AQ", "L'Aquila", "Abruzzo"),
    ProvinceInfo("PE", "Pescara", "Abruzzo"),
    ProvinceInfo("TE", "Teramo", "Abruzzo"),
    # Molise
    ProvinceInfo("CB", "Campobasso", "Molise"),
    ProvinceInfo("IS", "Isernia", "Molise"),
    # Campania
    ProvinceInfo("AV", "Avellino", "Campania"),
    ProvinceInfo("BN", "Benevento", "Campania"),
    ProvinceInfo("CE", "Caserta", "Campania"),
    ProvinceInfo("NA", "Napoli", "Campania"),
    ProvinceInfo("SA", "Salerno", "Campania"),
    # Puglia
    ProvinceInfo("BA", "Bari", "Puglia"),
    ProvinceInfo("BT", "Barletta-Andria-Trani", "Puglia"),
    ProvinceInfo("BR", "Brindisi", "Puglia"),
    ProvinceInfo("FG", "Foggia", "Puglia"),
    ProvinceInfo("LE", "Lecce", "Puglia"),
    ProvinceInfo("TA", "Taranto", "Puglia"),
    # Basilicata
    ProvinceInfo("MT", "Matera", "Basilicata"),
    ProvinceInfo("PZ", "Potenza", "Basilicata"),
    # Calabria
    ProvinceInfo("CZ", "Catanzaro", "Calabria"),
    ProvinceInfo("CS", "Cosenza", "Calabria"),
    ProvinceInfo("KR", "Crotone", "Calabria"),
    ProvinceInfo("RC", "Reggio Calabria", "Calabria"),
    ProvinceInfo("VV", "Vibo Valentia", "Calabria"),
    # Sicilia
    ProvinceInfo("AG", "Agrigento", "Sicilia"),
    ProvinceInfo("CL", "Caltanissetta", "Sicilia"),
    ProvinceInfo("CT", "Catania", "Sicilia"),
    ProvinceInfo("EN", "Enna", "Sicilia"),
    ProvinceInfo("ME", "Messina", "Sicilia"),
    ProvinceInfo("PA", "Palermo", "Sicilia"),
    ProvinceInfo("RG", "Ragusa", "Sicilia"),
    ProvinceInfo("SR", "Siracusa", "Sicilia"),
    ProvinceInfo("TP", "Trapani", "Sicilia"),
    # Sardegna
    ProvinceInfo("CA", "Cagliari", "Sardegna"),
    ProvinceInfo("NU", "Nuoro", "Sardegna"),
    ProvinceInfo("OR", "Oristano", "Sardegna"),
    ProvinceInfo("SS", "Sassari", "Sardegna"),
    ProvinceInfo("SU", "Sud Sardegna", "Sardegna"),
)

# Spellings seen in cadastral exports that differ from the canonical name.
# Keys are accent-free uppercase.
PROVINCE_ALIASES: Dict[str, str] = {
    "BOLZANO/BOZEN": "BZ",
    "BOZEN": "BZ",
    "ALTO ADIGE": "BZ",
    "SUDTIROL": "BZ",
    "FORLI CESENA": "FC",
    "FORLI'-CESENA": "FC",
    "FORLI' CESENA": "FC",
    "FORLI": "FC",
    "REGGIO NELL'EMILIA": "RE",
    "REGGIO NELL EMILIA": "RE",
    "REGGIO DI CALABRIA": "RC",
    "PESARO-URBINO": "PU",
    "PESARO URBINO": "PU",
    "PESARO": "PU",
    "MASSA CARRARA": "MS",
    "MASSA": "MS",
    "MONZA BRIANZA": "MB",
    "MONZA": "MB",
    "VALLE D'AOSTA": "AO",
    "VALLE D AOSTA": "AO",
    "AOSTE": "AO",
    "BARLETTA ANDRIA TRANI": "BT",
    "BARLETTA": "BT",
    "SPEZIA": "SP",
    "AQUILA": "AQ",
    "L AQUILA": "AQ",
    "VERBANIA": "VB",
    "VERBANO CUSIO OSSOLA": "VB",
    "CARBONIA-IGLESIAS": "SU",
    "MEDIO CAMPIDANO": "SU",
    "OLBIA-TEMPIO": "SS",
    "OGLIASTRA": "NU",
}


def _key(value: str) -> str:
    return collapse_spaces(value).upper()


class ProvinceLookup:
    """Immutable province index: exact name/code, accent-free name, curated aliases."""

    def __init__(self, provinces: Iterable[ProvinceInfo], aliases: Mapping[str, str]):
        by_exact: Dict[str, ProvinceInfo] = {}
        by_plain: Dict[str, ProvinceInfo] = {}
        for info in provinces:
            by_exact.setdefault(info.code.upper(), info)
            by_exact.setdefault(_key(info.name), info)
            by_plain.setdefault(_key(strip_accents(info.name)), info)
        by_code = {info.code.upper(): info for info in provinces}
        by_alias: Dict[str, ProvinceInfo] = {}
        for alias, code in aliases.items():
            info = by_code.get(code.upper())
            if info is not None:
                by_alias.setdefault(_key(strip_accents(alias)), info)

        self._by_exact = MappingProxyType(by_exact)
        self._by_plain = MappingProxyType(by_plain)
        self._by_alias = MappingProxyType(by_alias)

    def resolve(self, raw: object) -> ProvinceInfo:
        """Return the canonical province for ``raw``.

        Unknown values fall back to an unverified two-letter code with blank
        name and region: the value itself when it is two characters long,
        its first two characters otherwise.
        """
        text = _key(str(raw or ""))
        found = self._by_exact.get(text)
        if found is None:
            plain = _key(strip_accents(text))
            found = self._by_plain.get(plain) or self._by_alias.get(plain)
        if found is not None:
            return found
        if len(text) == 2:
            return ProvinceInfo(text, "", "")
        return ProvinceInfo(text[:2], "", "")


PROVINCE_LOOKUP = ProvinceLookup(ITALIAN_PROVINCES, PROVINCE_ALIASES)
