import sys
from pathlib import Path

import pytest


PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


SAMPLE_SIE = """#FLAGGA 0
#PROGRAM "Testbok" 2.1
#FORMAT PC8
#GEN 20240115
#SIETYP 4
#FNAMN "Exempel AB"
#ORGNR 556677-8899
#VALUTA SEK
#RAR 0 20240101 20241231
#RAR -1 20230101 20231231
#KPTYP BAS2014
#KONTO 1930 "Företagskonto"
#KONTO 3010 "Försäljning"
#KONTO 5010 "Lokalhyra"
#SRU 1930 7281
#KTYP 1930 T
#DIM 1 "Kostnadsställe"
#OBJEKT 1 "100" "Huvudkontor"
#IB 0 1930 100000
#UB 0 1930 150000
#RES 0 3010 -500000
#RES 0 5010 400000
#IB -1 1930 80000
#UB -1 1930 100000
#RES -1 3010 -400000
#VER A 1 20240105 "Hyra januari"
{
#TRANS 5010 {} 10000
#TRANS 1930 {} -10000
}
#VER A 2 20240220 "Försäljning" 20240221
{
#TRANS 1930 {1 "100"} 25000 20240222 "Kundbetalning"
#TRANS 3010 {} -25000
}
"""


@pytest.fixture
def sample_sie_text() -> str:
    return SAMPLE_SIE
