# songpig/services/text.py


def normalize_text(text: str) -> str:
    """単語ごとに先頭だけ大文字にする（"my SONG" → "My Song"）"""
    if not text:
        return ""
    return " ".join(word[:1].upper() + word[1:].lower() for word in text.split(" "))


def format_room_name(name: str, artist_name: str) -> str:
    """部屋名の末尾に " - アーティスト名" を付ける（すでに付いていればそのまま）"""
    normalized = normalize_text(name)
    suffix = f" - {artist_name}" if artist_name else ""
    if normalized and suffix and not normalized.lower().endswith(suffix.lower()):
        return f"{normalized}{suffix}"
    return normalized or name
