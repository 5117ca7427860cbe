import re
from unidecode import unidecode


def normalize_text(text: str) -> str:
    """Lowercase and strip diacritics, e.g. 'Đà Lạt' -> 'da lat'"""
    if not text:
        return ""
    # unidecode misses lowercase đ in some versions
    return unidecode(text.lower().replace("đ", "d"))


def slugify(text: str) -> str:
    """URL-friendly identifier: 'My Topic' -> 'my-topic'"""
    text = normalize_text(text).strip()
    text = re.sub(r"[^a-z0-9\s-]", "", text)
    text = re.sub(r"[\s-]+", "-", text)
    return text.strip("-")
