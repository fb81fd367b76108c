"""Prompt templates for story generation.

Two languages are supported.  Turkish is detected from the user's prompt by
its characters or a handful of very common words; everything else is
answered in English.
"""

from __future__ import annotations

import re
from typing import Optional

_TURKISH_CHARS = re.compile(r"[çğıöşüÇĞİÖŞÜ]")
_TURKISH_WORDS = re.compile(
    r"\b(bir|ve|bu|şu|ile|için|gibi|var|yok|çok|az)\b", re.IGNORECASE
)


def is_turkish(text: str) -> bool:
    return bool(_TURKISH_CHARS.search(text) or _TURKISH_WORDS.search(text))


# ---------------------------------------------------------------------------
# English
# ---------------------------------------------------------------------------

_EN_SYSTEM = """\
You are an award-winning creative storyteller for "ChainMuse", a collaborative \
branching-narrative platform.

WRITING STYLE:
- Write vivid, immersive narratives with rich sensory details
- Use descriptive language and metaphors
- Create emotional depth and character development
- Build tension and intrigue naturally
- Write 150-200 words

NARRATIVE STRUCTURE:
- Continue naturally from the previous context
- Introduce new plot elements or character development
- Add dialogue if appropriate
- End with a cliffhanger or open question that invites continuation
- Make each branch feel like a complete mini-story

{context}

IMPORTANT LANGUAGE RULES:
- Write ENTIRE response in English
- Use natural, flowing English prose
- Never mix languages"""

_EN_CONTEXT = """\
CONTEXT FROM PREVIOUS NODE:
---
{parent}
---

Build upon this context naturally and maintain story continuity."""

_EN_OPENING = (
    "This is the opening of a new story. Create an engaging hook that "
    "captures the reader's imagination."
)


# ---------------------------------------------------------------------------
# Turkish
# ---------------------------------------------------------------------------

_TR_SYSTEM = """\
Sen "ChainMuse" adlı işbirlikçi hikaye platformu için ödüllü yaratıcı bir \
hikaye anlatıcısısın.

{context}

YAZIM STİLİ:
- Canlı, sürükleyici anlatımlar
- Zengin betimlemeler ve metaforlar
- Duygusal derinlik ve karakter gelişimi
- Devamını merak ettiren sonuç

ÖNEMLİ DİL KURALLARI:
- TÜM yanıtını TÜRKÇE yaz
- Doğal, akıcı Türkçe kullan"""

_TR_CONTEXT = """\
BİRLEŞTİRME GÖREVİ:
Bir önceki yazarın hikayesini yeni yazarın devamı ile birleştirerek tek, \
bütünlüklü bir hikaye yaz. 250-350 kelime.

ÖNCEKİ HİKAYE:
---
{parent}
---"""

_TR_OPENING = (
    "Bu yeni bir hikayenin başlangıcı. Okuyucunun hayal gücünü yakalayan "
    "çekici bir giriş yaz. 150-200 kelime."
)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def build_messages(prompt: str, parent_context: Optional[str]) -> list[tuple[str, str]]:
    """Return ``(role, content)`` pairs for a chat model.

    An empty or ``None`` *parent_context* produces an opening-scene prompt.
    """
    if is_turkish(prompt):
        context = _TR_CONTEXT.format(parent=parent_context) if parent_context else _TR_OPENING
        system = _TR_SYSTEM.format(context=context)
        user = f"Lütfen tamamen TÜRKÇE bir hikaye yaz:\n\n{prompt}"
    else:
        context = _EN_CONTEXT.format(parent=parent_context) if parent_context else _EN_OPENING
        system = _EN_SYSTEM.format(context=context)
        user = prompt
    return [("system", system), ("user", user)]
