"""Resume text extraction and rule-based skill matching."""

import io
import logging
import re
import zipfile
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Protocol

import fitz
from docx import Document
from docx.opc.exceptions import PackageNotFoundError

logger = logging.getLogger("roleready.resume_parser")

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
DOC_MIME = "application/msword"

WORD_MIME_TYPES = (DOCX_MIME, DOC_MIME)

EXTENSION_MIME_TYPES = {
    ".pdf": PDF_MIME,
    ".docx": DOCX_MIME,
    ".doc": DOC_MIME,
}

# Variations up to this length only match as whole words ("go", "sql").
SHORT_VARIATION_LENGTH = 3

# Checked one by one when a resume matches nothing, to tell a parsing
# problem apart from a catalog problem.
PROBE_SKILLS = [
    "HTML",
    "CSS",
    "JavaScript",
    "React",
    "MongoDB",
    "SQL",
    "Node.js",
    "Express",
]


class UnsupportedFileTypeError(ValueError):
    """Raised for uploads that are neither PDF nor Word documents."""


class EmptyResumeError(ValueError):
    """Raised when a resume yields no text at all."""


class UnreadableResumeError(ValueError):
    """Raised when a Word upload is not a readable DOCX package."""


class UploadedFile(Protocol):
    """Minimal interface for an uploaded file (matches Streamlit's UploadedFile)."""

    name: str

    def read(self) -> bytes: ...


@dataclass(frozen=True)
class SkillMatch:
    """A catalog skill as seen by the matcher."""

    id: str
    name: str
    normalized_name: str
    domain: str | None = None


@dataclass
class ParseResult:
    raw_text: str
    normalized_text: str
    matched_skills: list[SkillMatch] = field(default_factory=list)
    text_length: int = 0


# ---------------------------------------------------------------------------
# Text extraction
# ---------------------------------------------------------------------------


def extract_text_from_pdf(data: bytes) -> str:
    """Extract text from every page of a PDF as a single whitespace-collapsed line."""
    pages = []
    with fitz.open(stream=data, filetype="pdf") as doc:
        for page in doc:
            pages.append(page.get_text())
    text = re.sub(r"\s+", " ", "\n".join(pages)).strip()
    logger.info("PDF extracted: %d characters", len(text))
    return text


def extract_text_from_docx(data: bytes) -> str:
    """Extract paragraph text from a DOCX file, then the text of its tables.

    Resume templates often lay out skills and contact details in tables,
    which ``doc.paragraphs`` does not include.
    """
    try:
        doc = Document(io.BytesIO(data))
    except (zipfile.BadZipFile, PackageNotFoundError, KeyError) as e:
        raise UnreadableResumeError(f"Could not read Word document: {e}") from e
    lines = [p.text for p in doc.paragraphs]
    for table in doc.tables:
        for row in table.rows:
            for cell in row.cells:
                lines.extend(p.text for p in cell.paragraphs)
    text = "\n".join(lines)
    logger.info("DOCX extracted: %d characters", len(text))
    return text


def extract_text_from_resume(data: bytes, mime_type: str) -> str:
    """Extract plain text from resume bytes based on the MIME type.

    Raises:
        UnsupportedFileTypeError: If the MIME type is not PDF or Word.
        UnreadableResumeError: If a Word upload is not a DOCX package.
        RuntimeError: PyMuPDF errors for corrupt PDFs are propagated.
    """
    if mime_type == PDF_MIME:
        return extract_text_from_pdf(data)
    if mime_type in WORD_MIME_TYPES:
        return extract_text_from_docx(data)
    raise UnsupportedFileTypeError(f"Unsupported file type: {mime_type}")


def guess_mime_type(filename: str) -> str | None:
    return EXTENSION_MIME_TYPES.get(Path(filename.lower()).suffix)


def extract_resume_text(uploaded_file: UploadedFile) -> str:
    """Extract plain text from an uploaded PDF or DOCX file."""
    mime_type = guess_mime_type(uploaded_file.name)
    if mime_type is None:
        raise UnsupportedFileTypeError(f"Unsupported file type: {uploaded_file.name}")
    return extract_text_from_resume(uploaded_file.read(), mime_type)


# ---------------------------------------------------------------------------
# Normalisation and skill variations
# ---------------------------------------------------------------------------


def normalize_text(text: str | None) -> str:
    """Normalise text for skill matching.

    Lowercases, folds ``.js`` suffixes into the word (React.js -> reactjs),
    replaces everything except letters, digits, whitespace, ``+`` and ``#``
    with spaces, and collapses whitespace.
    """
    if not text:
        return ""
    text = text.lower()
    text = re.sub(r"\.js\b", "js", text)
    text = re.sub(r"[^a-z0-9\s+#]", " ", text)
    return re.sub(r"\s+", " ", text).strip()


def generate_skill_variations(skill_name: str) -> list[str]:
    """Return the alias strings a skill may appear as in normalised text.

    Examples:
        React.js     -> ["reactjs", "react"]
        React Native -> ["react native", "reactnative"]
    """
    normalized = normalize_text(skill_name)
    variations = [normalized]

    lowered = skill_name.lower()
    if ".js" in lowered:
        variations.append(re.sub(r"[^a-z0-9]", "", lowered.replace(".js", "js")))
        variations.append(re.sub(r"[^a-z0-9]", "", lowered.replace(".js", "")))

    no_spaces = re.sub(r"\s+", "", normalized)
    if no_spaces != normalized:
        variations.append(no_spaces)

    return list(dict.fromkeys(variations))


@lru_cache(maxsize=2048)
def _whole_word_pattern(variation: str) -> re.Pattern:
    # Alphanumeric lookarounds instead of \b so "c++" and "c#" can match
    # when followed by a space.
    return re.compile(rf"(?<![a-z0-9]){re.escape(variation)}(?![a-z0-9])")


# ---------------------------------------------------------------------------
# Matching
# ---------------------------------------------------------------------------


def is_skill_in_text(normalized_text: str, skill: SkillMatch) -> bool:
    """Check whether any variation of the skill occurs in normalised text.

    Single-character variations are ignored. Variations of up to three
    characters must appear as whole words; longer ones may also appear
    inside a compound word.
    """
    for variation in generate_skill_variations(skill.name):
        if len(variation) < 2:
            continue
        if _whole_word_pattern(variation).search(normalized_text):
            return True
        if len(variation) > SHORT_VARIATION_LENGTH and variation in normalized_text:
            return True
    return False


def match_skills_in_text(
    normalized_text: str, skills: list[SkillMatch]
) -> list[SkillMatch]:
    """Return the catalog skills found in the text, in catalog order."""
    logger.info(
        "Matching %d skills against %d characters of text",
        len(skills),
        len(normalized_text),
    )

    matched: list[SkillMatch] = []
    matched_names: set[str] = set()
    for skill in skills:
        if skill.name in matched_names:
            continue
        if is_skill_in_text(normalized_text, skill):
            logger.debug(
                "Matched %s (variations: %s)",
                skill.name,
                ", ".join(generate_skill_variations(skill.name)),
            )
            matched.append(skill)
            matched_names.add(skill.name)

    logger.info("Total matches: %d", len(matched))
    if not matched:
        _log_probe_diagnostics(normalized_text, skills)
    return matched


def _log_probe_diagnostics(normalized_text: str, skills: list[SkillMatch]) -> None:
    by_name = {s.name.lower(): s for s in skills}
    logger.debug("No matches, text preview: %s", normalized_text[:1000])
    for probe in PROBE_SKILLS:
        skill = by_name.get(probe.lower())
        if skill is None:
            logger.debug("Probe skill %r is not in the catalog", probe)
            continue
        variations = generate_skill_variations(skill.name)
        found = any(v in normalized_text for v in variations)
        logger.debug(
            "Probe %r: variations=%s substring_found=%s", skill.name, variations, found
        )


def parse_resume_file(
    file_path: str | Path, mime_type: str, available_skills: list[SkillMatch]
) -> ParseResult:
    """Extract, normalise and match a stored resume file.

    Args:
        file_path: Path of the uploaded resume on disk.
        mime_type: MIME type recorded at upload time.
        available_skills: Catalog skills to match against.

    Returns:
        ParseResult with the raw and normalised text and the matched skills.

    Raises:
        FileNotFoundError: If the file does not exist.
        UnsupportedFileTypeError: If the MIME type is not supported.
        EmptyResumeError: If no text could be extracted.
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"Resume file not found: {file_path}")

    logger.info("Extracting text from: %s", file_path.name)
    raw_text = extract_text_from_resume(file_path.read_bytes(), mime_type)
    if not raw_text.strip():
        raise EmptyResumeError("Could not extract text from resume")

    normalized_text = normalize_text(raw_text)
    logger.info(
        "Extracted %d chars, normalized to %d chars",
        len(raw_text),
        len(normalized_text),
    )

    matched = match_skills_in_text(normalized_text, available_skills)
    logger.info(
        "Found %d skill matches out of %d skills", len(matched), len(available_skills)
    )
    return ParseResult(
        raw_text=raw_text,
        normalized_text=normalized_text,
        matched_skills=matched,
        text_length=len(raw_text),
    )
