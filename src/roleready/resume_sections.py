"""Structured resume section extraction using Google Gemini."""

import json
import logging

from google import genai
from google.genai import types

from roleready.suggestions import EducationEntry, ExperienceEntry, ExtractedData

logger = logging.getLogger("roleready.resume_sections")

GEMINI_MODEL = "gemini-2.5-flash"

SECTIONS_SCHEMA = {
    "type": "object",
    "properties": {
        "experience": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "company": {"type": "string"},
                    "title": {"type": "string"},
                    "duration": {"type": "string"},
                },
                "required": ["company", "title"],
            },
        },
        "education": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "institution": {"type": "string"},
                    "degree": {"type": "string"},
                    "year": {"type": "string"},
                },
                "required": ["institution"],
            },
        },
        "summary": {"type": "string"},
    },
    "required": ["experience", "education", "summary"],
}

REQUIRED_FIELDS = {"experience", "education", "summary"}

EXTRACTION_PROMPT = """\
You are reading a candidate's resume. Extract its sections as structured \
data without inventing anything that is not in the text.

Instructions:
1. List every work experience entry, newest first, with company, job title \
and duration exactly as written (e.g. "Jan 2021 - Present").
2. List every education entry with institution, degree and year.
3. Write a one or two sentence summary of the candidate's profile.
4. Leave a list empty if the resume has no such section.

Resume:
"""


def extract_resume_sections(raw_text: str, client: genai.Client) -> dict:
    """Extract experience, education and a summary from raw resume text.

    Args:
        raw_text: Text extracted from the resume.
        client: Initialised Gemini client.

    Returns:
        Parsed dict matching SECTIONS_SCHEMA.

    Raises:
        ValueError: If Gemini returns invalid JSON or the result is missing
            required fields.
        Exception: Any API/network error from the Gemini client is propagated.
    """
    config = types.GenerateContentConfig(
        response_mime_type="application/json",
        response_schema=SECTIONS_SCHEMA,
    )

    # Concatenation, not str.format(): resumes may contain curly braces.
    response = client.models.generate_content(
        model=GEMINI_MODEL,
        contents=EXTRACTION_PROMPT + raw_text,
        config=config,
    )

    try:
        sections = json.loads(response.text)
    except (json.JSONDecodeError, TypeError) as e:
        raise ValueError(f"Gemini returned invalid JSON: {e}") from e

    if not isinstance(sections, dict):
        raise ValueError(f"Gemini returned {type(sections).__name__}, expected a JSON object")

    missing = REQUIRED_FIELDS - sections.keys()
    if missing:
        raise ValueError(f"Sections missing required fields: {missing}")

    logger.info(
        "Extracted %d experience and %d education entries",
        len(sections["experience"]),
        len(sections["education"]),
    )
    return sections


def apply_sections(data: ExtractedData, sections: dict) -> ExtractedData:
    """Copy extracted sections onto a resume's extracted data in place."""
    data.experience = [
        ExperienceEntry(
            company=e.get("company"), title=e.get("title"), duration=e.get("duration")
        )
        for e in sections.get("experience", [])
    ]
    data.education = [
        EducationEntry(
            institution=e.get("institution"), degree=e.get("degree"), year=e.get("year")
        )
        for e in sections.get("education", [])
    ]
    data.summary = sections.get("summary") or None
    return data
