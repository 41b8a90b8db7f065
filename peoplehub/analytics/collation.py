# peoplehub/analytics/collation.py
#
# Hebrew-aware sort key for names and labels.
#   - final letters (ך ם ן ף ץ) sort with their base forms
#   - niqqud and other combining marks are ignored
#   - latin text is case-folded

import unicodedata

_FINAL_FORMS = str.maketrans("ךםןףץ", "כמנפצ")


def hebrew_sort_key(value) -> tuple[str, str]:
    text = "" if value is None else str(value)
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    # Raw text breaks ties so the order is total
    return stripped.translate(_FINAL_FORMS).casefold().strip(), text
