"""
Text cleaning for textmap.

A cleaning pipeline is an ordered list of steps. A transform step is a
plain function from string to string; a drop step (see regex_drop) removes
the whole document when it matches. Steps are values supplied by the
caller, never code evaluated at runtime.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Document:
    """A document: its position in the input, raw text and cleaned text."""
    index: int
    original: str
    cleaned: str


@dataclass(frozen=True)
class DropStep:
    """Drop documents whose current text matches pattern (re.search)."""
    pattern: re.Pattern

    def matches(self, text: str) -> bool:
        return self.pattern.search(text) is not None


Step = Union[Callable[[str], str], DropStep]


PUNCTUATION_RE = re.compile(r"[.,/#!$%^&*;:{}=\-_~()?]")

FRENCH_STOPWORDS = frozenset([
    "au", "aux", "avec", "ce", "ces", "dans", "de", "des", "du", "elle", "en", "et", "eux",
    "il", "je", "la", "le", "leur", "lui", "ma", "mais", "me", "meme", "mes", "moi", "mon",
    "ne", "nos", "notre", "nous", "on", "ou", "par", "pas", "pour", "qu", "que", "qui", "sa",
    "se", "ses", "son", "sur", "ta", "te", "tes", "toi", "ton", "tu", "un", "une", "vos", "votre",
    "vous", "c", "d", "j", "l", "à", "m", "n", "s", "t", "y", "été", "étée", "étées", "étés",
    "étant", "suis", "es", "est", "sommes", "êtes", "sont", "serai", "seras", "sera", "serons",
    "serez", "seront", "serais", "serait", "serions", "seriez", "seraient", "étais", "était",
    "étions", "étiez", "étaient", "fus", "fut", "fûmes", "fûtes", "furent", "sois", "soit",
    "soyons", "soyez", "soient", "fusse", "fusses", "fût", "fussions", "fussiez", "fussent",
    "ayant", "eu", "eue", "eues", "eus", "ai", "as", "avons", "avez", "ont", "aurai", "auras",
    "aura", "aurons", "aurez", "auront", "aurais", "aurait", "aurions", "auriez", "auraient",
    "avais", "avait", "avions", "aviez", "avaient", "eut", "eûmes", "eûtes", "eurent", "aie",
    "aies", "ait", "ayons", "ayez", "aient", "eusse", "eusses", "eût", "eussions", "eussiez", "eussent",
])


def lowercase(text: str) -> str:
    return text.lower()


def strip_punctuation(text: str) -> str:
    return PUNCTUATION_RE.sub("", text)


def remove_french_stopwords(text: str) -> str:
    """Drop French stop words (case-insensitive) and re-join with single spaces."""
    return " ".join(word for word in text.split() if word.lower() not in FRENCH_STOPWORDS)


def regex_drop(pattern: str) -> DropStep:
    """
    Build a step that drops any document matching pattern.

    Args:
        pattern: Regular expression; compiled immediately so a bad pattern
            fails when the pipeline is built

    Returns:
        DropStep
    """
    return DropStep(re.compile(pattern))


BUILTIN_STEPS = {
    'lowercase': lowercase,
    'punctuation': strip_punctuation,
    'french_stopwords': remove_french_stopwords,
}


def build_pipeline(names: Iterable[str]) -> List[Step]:
    """
    Resolve built-in step names into a pipeline.

    Args:
        names: Names from BUILTIN_STEPS, in application order

    Returns:
        List of steps
    """
    steps = []
    for name in names:
        if name not in BUILTIN_STEPS:
            raise KeyError(f"Unknown cleaning step '{name}'; known: {sorted(BUILTIN_STEPS)}")
        steps.append(BUILTIN_STEPS[name])
    return steps


def clean_text(text: str, steps: Sequence[Step]) -> Optional[str]:
    """
    Run one text through the pipeline.

    Args:
        text: Raw text
        steps: Pipeline steps

    Returns:
        Cleaned text, or None if a drop step matched
    """
    current = text
    for step in steps:
        if isinstance(step, DropStep):
            if step.matches(current):
                return None
            continue

        current = step(current)
        if not isinstance(current, str):
            raise TypeError(
                f"Cleaning step {getattr(step, '__name__', step)!r} returned "
                f"{type(current).__name__}, expected str"
            )
    return current


def clean_documents(texts: Iterable[Optional[str]], steps: Sequence[Step]) -> List[Document]:
    """
    Clean raw texts into Documents, dropping those a drop step matches.

    Surviving documents keep their position in texts as their index.

    Args:
        texts: Raw texts (None is treated as an empty string)
        steps: Pipeline steps

    Returns:
        List of Documents
    """
    documents = []
    n_dropped = 0

    for idx, text in enumerate(texts):
        original = "" if text is None else str(text)
        cleaned = clean_text(original, steps)

        if cleaned is None:
            n_dropped += 1
            continue

        documents.append(Document(idx, original, cleaned))

    if n_dropped:
        logger.info(f"Cleaning dropped {n_dropped} documents, kept {len(documents)}")

    return documents
